from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from typing import List, Optional
import traceback

from app.api.middleware.database import setup_connection
from app.api.routes.auth import verify_token
from app.api.middleware.misc import *
from app.api.routes.routines.tables import WEEKDAYS
from app.api.routes.routines.volume import order_training_days, encode_day_muscles

router = APIRouter()

class CustomExercise(BaseModel):
    exercise_id: str
    day: str
    sets: int = Field(ge=1, le=20)
    reps: int = Field(ge=1, le=100)
    set_seconds: int = Field(ge=0, le=3600)
    rest_seconds: int = Field(ge=0, le=3600)

class CustomRoutine(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    level: level_literal
    goal: str = Field(min_length=1)
    exercises: List[CustomExercise] = Field(min_length=1)

@router.post("/custom")
async def routines_custom(req: CustomRoutine, credentials: dict = Depends(verify_token)):
    conn = tx = None
    try:
        user_id = credentials["user_id"]

        days = order_training_days([exercise.day for exercise in req.exercises])
        if len(days) != len({exercise.day.strip().lower() for exercise in req.exercises}):
            raise SafeError(f"days must be one of {', '.join(WEEKDAYS)}")

        conn = await setup_connection()
        tx = conn.transaction()
        await tx.start()

        routine_id = await conn.fetchval(
            """
            insert into routines
            (creator_id, name, description, level, goal)
            values
            ($1, $2, $3, $4, $5)
            returning id
            """, user_id, req.name, req.description, req.level, req.goal
        )

        day_ids = {}
        for i, day in enumerate(days):
            muscles = await fetch_day_muscles(conn, [e.exercise_id for e in req.exercises if e.day.strip().lower() == day])
            day_ids[day] = await conn.fetchval(
                """
                insert into routine_days
                (routine_id, day_name, muscles, order_index)
                values
                ($1, $2, $3, $4)
                returning id
                """, routine_id, day, encode_day_muscles(muscles), i
            )

        order_indexes = {day: 0 for day in days}
        for exercise in req.exercises:
            day = exercise.day.strip().lower()
            await save_custom_exercise(conn, day_ids[day], order_indexes[day], exercise)
            order_indexes[day] += 1

        await conn.execute(
            """
            update users
            set routine_id = $1
            where id = $2
            """, routine_id, user_id
        )

        await tx.commit()

        return {
            "routine_id": str(routine_id)
        }

    except SafeError as e:
        if tx: await tx.rollback()
        raise e
    except Exception as e:
        print(str(e))
        if tx: await tx.rollback()
        traceback.print_exc()
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

async def fetch_day_muscles(conn, exercise_ids):
    rows = await conn.fetch(
        """
        select distinct muscle
        from exercises
        where id = any($1::uuid[])
        order by muscle
        """, exercise_ids
    )
    return [row["muscle"] for row in rows]

async def save_custom_exercise(conn, day_id, order_index, exercise: CustomExercise):
    assigned_id = await conn.fetchval(
        """
        insert into assigned_exercises
        (day_id, order_index, exercise_id, rest_seconds)
        values
        ($1, $2, $3, $4)
        returning id
        """, day_id, order_index, exercise.exercise_id, exercise.rest_seconds
    )

    for i in range(exercise.sets):
        await conn.execute(
            """
            insert into assigned_sets
            (assigned_exercise_id, order_index, repetitions, approx_seconds)
            values
            ($1, $2, $3, $4)
            """, assigned_id, i, exercise.reps, exercise.set_seconds
        )

@router.delete("/{routine_id}")
async def routines_delete(routine_id: str, credentials: dict = Depends(verify_token)):
    conn = tx = None
    try:
        user_id = credentials["user_id"]

        conn = await setup_connection()
        tx = conn.transaction()
        await tx.start()

        creator_id = await conn.fetchval(
            """
            select creator_id
            from routines
            where id = $1
            """, routine_id
        )
        if creator_id is None:
            raise SafeError("routine not found")

        if str(creator_id) == user_id:
            await delete_routine(conn, routine_id)
            status = "deleted"
        else:
            await detach_shared_routine(conn, routine_id, user_id)
            status = "detached"

        await tx.commit()

        return {
            "status": status
        }

    except SafeError as e:
        if tx: await tx.rollback()
        raise e
    except Exception as e:
        print(str(e))
        if tx: await tx.rollback()
        traceback.print_exc()
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

async def delete_routine(conn, routine_id):
    await conn.execute(
        """
        delete
        from assigned_sets
        where assigned_exercise_id in (
            select ae.id
            from assigned_exercises ae
            inner join routine_days d
            on d.id = ae.day_id
            where d.routine_id = $1
        )
        """, routine_id
    )

    await conn.execute(
        """
        delete
        from assigned_exercises
        where day_id in (
            select id
            from routine_days
            where routine_id = $1
        )
        """, routine_id
    )

    await conn.execute(
        """
        delete
        from routine_days
        where routine_id = $1
        """, routine_id
    )

    await conn.execute(
        """
        delete
        from shared_routines
        where routine_id = $1
        """, routine_id
    )

    await conn.execute(
        """
        update users
        set routine_id = null
        where routine_id = $1
        """, routine_id
    )

    await conn.execute(
        """
        delete
        from routines
        where id = $1
        """, routine_id
    )

async def detach_shared_routine(conn, routine_id, user_id):
    share_id = await conn.fetchval(
        """
        delete
        from shared_routines
        where routine_id = $1
        and recipient_id = $2
        returning id
        """, routine_id, user_id
    )
    if share_id is None:
        raise SafeError("routine not found")

    await conn.execute(
        """
        update users
        set routine_id = null
        where id = $1
        and routine_id = $2
        """, user_id, routine_id
    )

class ReplaceExercise(BaseModel):
    current_exercise_id: str
    new_exercise_id: str

@router.put("/{routine_id}/exercises/replace")
async def routines_replace_exercise(routine_id: str, req: ReplaceExercise, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        is_owner = await conn.fetchval(
            """
            select exists (
                select 1
                from routines
                where id = $1
                and creator_id = $2
            )
            """, routine_id, credentials["user_id"]
        )
        if not is_owner:
            raise SafeError("routine not found")

        replaced = await conn.fetch(
            """
            update assigned_exercises ae
            set exercise_id = $1
            from routine_days d
            where ae.day_id = d.id
            and d.routine_id = $2
            and ae.exercise_id = $3
            returning ae.id
            """, req.new_exercise_id, routine_id, req.current_exercise_id
        )
        if len(replaced) == 0:
            raise SafeError("exercise is not assigned in this routine")

        return {
            "replaced": len(replaced)
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()
