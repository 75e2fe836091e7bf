from fastapi import APIRouter, Depends

from app.api.middleware.database import setup_connection
from app.api.routes.auth import verify_token
from app.api.middleware.misc import *
from app.api.routes.routines.tables import WEEKDAYS
from app.api.routes.routines.volume import decode_day_muscles

router = APIRouter()

@router.get("/all")
async def routines_all(credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        routine_rows = await conn.fetch(
            """
            select r.id, r.name, r.description, r.level, r.goal, r.created_at, (r.creator_id = $1) as is_owner
            from routines r
            where r.creator_id = $1
            or r.id in (
                select routine_id
                from shared_routines
                where recipient_id = $1
                and state = 'aceptada'
            )
            order by r.created_at desc
            """, credentials["user_id"]
        )
        if len(routine_rows) == 0:
            return {
                "routines": []
            }

        day_rows = await conn.fetch(
            """
            select d.routine_id, d.day_name, min(d.order_index) order_index
            from routine_days d
            inner join assigned_exercises ae
            on ae.day_id = d.id
            where d.routine_id = any($1::uuid[])
            group by d.routine_id, d.day_name
            order by d.routine_id, order_index
            """, [row["id"] for row in routine_rows]
        )

        routines = {}
        for row in routine_rows:
            routines[row["id"]] = {
                "id": str(row["id"]),
                "name": row["name"],
                "description": row["description"],
                "level": row["level"],
                "goal": row["goal"],
                "created_at": datetime_to_timestamp_ms(row["created_at"]),
                "is_owner": row["is_owner"],
                "days": []
            }

        for day_row in day_rows:
            routines[day_row["routine_id"]]["days"].append(day_row["day_name"])
        for routine in routines.values():
            routine["days"] = canonical_day_order(routine["days"])

        return {
            "routines": list(routines.values())
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

@router.get("/{routine_id}/full")
async def routines_full(routine_id: str, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        await check_routine_access(conn, routine_id, credentials["user_id"])

        rows = await conn.fetch(
            """
            select d.id day_id, d.day_name, d.muscles, e.id exercise_id, e.name exercise_name,
                e.muscle, e.description, e.type, e.difficulty
            from routine_days d
            left join assigned_exercises ae
            on ae.day_id = d.id
            left join exercises e
            on e.id = ae.exercise_id
            where d.routine_id = $1
            order by d.order_index, ae.order_index
            """, routine_id
        )

        return {
            "days": group_routine_days(rows)
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

def canonical_day_order(day_names):
    return sorted(day_names, key=lambda day: WEEKDAYS.index(day) if day in WEEKDAYS else len(WEEKDAYS))

def group_routine_days(rows):
    days = {}
    for row in rows:
        if row["day_name"] not in days:
            days[row["day_name"]] = {
                "day_name": row["day_name"],
                "muscles": decode_day_muscles(row["muscles"]),
                "exercises": []
            }
        if row["exercise_id"] is None: continue
        days[row["day_name"]]["exercises"].append({
            "id": str(row["exercise_id"]),
            "name": row["exercise_name"],
            "muscle": row["muscle"],
            "description": row["description"],
            "type": row["type"],
            "difficulty": row["difficulty"],
        })
    return list(days.values())

@router.get("/{routine_id}/day/{day_name}")
async def routines_day(routine_id: str, day_name: str, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        await check_routine_access(conn, routine_id, credentials["user_id"])

        return await fetch_day_exercises(conn, routine_id, day_name.strip().lower())

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

async def fetch_day_exercises(conn, routine_id, day_name):
    rows = await conn.fetch(
        """
        select d.muscles, ae.id assigned_id, e.id exercise_id, e.name, e.muscle, e.type, e.sub_part,
            e.image, e.video, ae.rest_seconds, e.calories_per_set, s.repetitions, s.approx_seconds
        from routine_days d
        left join assigned_exercises ae
        on ae.day_id = d.id
        left join exercises e
        on e.id = ae.exercise_id
        left join assigned_sets s
        on s.assigned_exercise_id = ae.id
        where d.routine_id = $1
        and d.day_name = $2
        order by ae.order_index, s.order_index
        """, routine_id, day_name
    )

    if len(rows) == 0:
        return {
            "muscles": [],
            "exercises": []
        }

    exercises = {}
    for row in rows:
        if row["assigned_id"] is None: continue
        if row["assigned_id"] not in exercises:
            exercises[row["assigned_id"]] = {
                "id": str(row["exercise_id"]),
                "name": row["name"],
                "muscle": row["muscle"],
                "type": row["type"],
                "sub_part": row["sub_part"],
                "image": row["image"],
                "video": row["video"],
                "rest_seconds": row["rest_seconds"],
                "calories": row["calories_per_set"],
                "series": []
            }
        if row["repetitions"] is None: continue
        exercises[row["assigned_id"]]["series"].append({
            "repetitions": row["repetitions"],
            "approx_seconds": row["approx_seconds"],
        })

    return {
        "muscles": decode_day_muscles(rows[0]["muscles"]),
        "exercises": list(exercises.values())
    }

async def check_routine_access(conn, routine_id, user_id):
    allowed = await conn.fetchval(
        """
        select exists (
            select 1
            from routines r
            where r.id = $1
            and (
                r.creator_id = $2
                or exists (
                    select 1
                    from shared_routines sr
                    where sr.routine_id = r.id
                    and sr.recipient_id = $2
                    and sr.state = 'aceptada'
                )
            )
        )
        """, routine_id, user_id
    )
    if not allowed:
        raise SafeError("routine not found")
