from fastapi import APIRouter, Depends
from pydantic import BaseModel
from datetime import date

from app.api.routes.auth import verify_token
from app.api.middleware.database import setup_connection
from app.api.middleware.misc import *

router = APIRouter()

class ExerciseComplete(BaseModel):
    exercise_id: str
    date: date

@router.post("/exercise/complete")
async def stats_exercise_complete(req: ExerciseComplete, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        completed_id = await conn.fetchval(
            """
            insert into completed_exercises
            (user_id, exercise_id, completed_on)
            values
            ($1, $2, $3)
            on conflict (user_id, exercise_id, completed_on) do nothing
            returning id
            """, credentials["user_id"], req.exercise_id, req.date
        )
        if completed_id is None:
            raise SafeError("exercise already completed on this date")

        return {
            "status": "completed",
            "id": str(completed_id)
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

@router.get("/exercise/completed")
async def stats_exercise_completed(exercise_id: str, date: date, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        completed = await conn.fetchval(
            """
            select exists (
                select 1
                from completed_exercises
                where user_id = $1
                and exercise_id = $2
                and completed_on = $3
            )
            """, credentials["user_id"], exercise_id, date
        )

        return {
            "completed": completed
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

@router.get("/day/completed")
async def stats_day_completed(routine_id: str, day: str, date: date, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        return {
            "completed": await day_completed(conn, credentials["user_id"], routine_id, day, date)
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

async def day_completed(conn, user_id, routine_id, day_name, on_date):
    exercise_ids = await conn.fetch(
        """
        select distinct ae.exercise_id
        from assigned_exercises ae
        inner join routine_days d
        on ae.day_id = d.id
        where d.routine_id = $1
        and d.day_name = $2
        """, routine_id, day_name.strip().lower()
    )
    if not exercise_ids:
        return False

    done = await conn.fetchval(
        """
        select count(distinct exercise_id)
        from completed_exercises
        where user_id = $1
        and completed_on = $2
        and exercise_id = any($3::uuid[])
        """, user_id, on_date, [row["exercise_id"] for row in exercise_ids]
    )
    return done == len(exercise_ids)

class RoutineComplete(BaseModel):
    date: date

@router.post("/routine/complete")
async def stats_routine_complete(req: RoutineComplete, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        completed_id = await conn.fetchval(
            """
            insert into completed_routines
            (user_id, completed_on)
            values
            ($1, $2)
            on conflict (user_id, completed_on) do nothing
            returning id
            """, credentials["user_id"], req.date
        )
        if completed_id is None:
            raise SafeError("routine already completed on this date")

        return {
            "status": "completed"
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

@router.get("/routine/completed")
async def stats_routine_completed(date: date, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        completed = await conn.fetchval(
            """
            select exists (
                select 1
                from completed_routines
                where user_id = $1
                and completed_on = $2
            )
            """, credentials["user_id"], date
        )

        return {
            "completed": completed
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()
