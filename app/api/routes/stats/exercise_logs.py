from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date
import traceback

from app.api.routes.auth import verify_token
from app.api.middleware.database import setup_connection
from app.api.middleware.misc import *

router = APIRouter()

# logged sets live in three tables
# exercise_stats: one row per (user, exercise)
# stat_dates: one row per logged date of a stat
# stat_sets: the sets of that date, replaced on every save

class LoggedSet(BaseModel):
    set_number: int = Field(ge=1)
    weight: float = Field(ge=0)
    repetitions: int = Field(ge=0)

class ExerciseSave(BaseModel):
    exercise_id: str
    date: date
    sets: List[LoggedSet] = Field(min_length=1)

@router.post("/exercise/save")
async def stats_exercise_save(req: ExerciseSave, credentials: dict = Depends(verify_token)):
    conn = tx = None
    try:
        conn = await setup_connection()
        tx = conn.transaction()
        await tx.start()

        stat_id = await conn.fetchval(
            """
            insert into exercise_stats
            (user_id, exercise_id)
            values
            ($1, $2)
            on conflict (user_id, exercise_id)
            do update
            set exercise_id = excluded.exercise_id
            returning id
            """, credentials["user_id"], req.exercise_id
        )

        date_id = await conn.fetchval(
            """
            insert into stat_dates
            (stat_id, logged_on)
            values
            ($1, $2)
            on conflict (stat_id, logged_on)
            do update
            set logged_on = excluded.logged_on
            returning id
            """, stat_id, req.date
        )

        await conn.execute(
            """
            delete
            from stat_sets
            where date_id = $1
            """, date_id
        )

        for logged_set in req.sets:
            await conn.execute(
                """
                insert into stat_sets
                (date_id, set_number, weight, repetitions)
                values
                ($1, $2, $3, $4)
                """, date_id, logged_set.set_number, logged_set.weight, logged_set.repetitions
            )

        await tx.commit()

        return {
            "status": "saved"
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

@router.get("/exercise/exists")
async def stats_exercise_exists(exercise_id: str, date: date, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        exists = await conn.fetchval(
            """
            select exists (
                select 1
                from stat_dates d
                inner join exercise_stats s
                on d.stat_id = s.id
                where s.user_id = $1
                and s.exercise_id = $2
                and d.logged_on = $3
            )
            """, credentials["user_id"], exercise_id, date
        )

        return {
            "exists": exists
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

@router.get("/exercise/sets")
async def stats_exercise_sets(exercise_id: str, date: Optional[date] = None, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        if date is None:
            date = await conn.fetchval(
                """
                select max(d.logged_on)
                from stat_dates d
                inner join exercise_stats s
                on d.stat_id = s.id
                where s.user_id = $1
                and s.exercise_id = $2
                """, credentials["user_id"], exercise_id
            )
            if date is None:
                return {
                    "date": None,
                    "sets": []
                }

        rows = await conn.fetch(
            """
            select ss.set_number, ss.weight, ss.repetitions
            from stat_sets ss
            inner join stat_dates d
            on ss.date_id = d.id
            inner join exercise_stats s
            on d.stat_id = s.id
            where s.user_id = $1
            and s.exercise_id = $2
            and d.logged_on = $3
            order by ss.set_number
            """, credentials["user_id"], exercise_id, date
        )

        return {
            "date": date_to_str(date),
            "sets": [shape_set(row) for row in rows]
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

@router.get("/exercise/history")
async def stats_exercise_history(exercise_id: str, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        rows = await conn.fetch(
            """
            select d.logged_on, ss.set_number, ss.weight, ss.repetitions
            from stat_sets ss
            inner join stat_dates d
            on ss.date_id = d.id
            inner join exercise_stats s
            on d.stat_id = s.id
            where s.user_id = $1
            and s.exercise_id = $2
            order by d.logged_on desc, ss.set_number
            """, credentials["user_id"], exercise_id
        )

        return {
            "history": group_sets_by_date(rows)
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

def shape_set(row) -> dict:
    return {
        "set_number": row["set_number"],
        "weight": row["weight"],
        "repetitions": row["repetitions"],
    }

def group_sets_by_date(rows) -> dict:
    history = {}
    for row in rows:
        history.setdefault(date_to_str(row["logged_on"]), []).append(shape_set(row))
    return history
