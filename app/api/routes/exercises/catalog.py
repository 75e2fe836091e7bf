from fastapi import APIRouter, Depends
from typing import Optional

from app.api.routes.auth import verify_token
from app.api.middleware.database import setup_connection
from app.api.middleware.misc import *

router = APIRouter()

@router.get("/list/filtered")
async def exercises_list_filtered(
    sub_part: str,
    type: Optional[str] = None,
    difficulty: Optional[level_literal] = None,
    credentials: dict = Depends(verify_token)
):
    conn = None
    try:
        conn = await setup_connection()

        rows = await conn.fetch(
            """
            select id, name, description, muscle, type, sub_part,
                image, video, difficulty, calories_per_set
            from exercises
            where sub_part = $1
            and ($2::text is null or type = $2)
            and ($3::text is null or difficulty = $3)
            order by name
            """, sub_part, type, difficulty
        )

        return {
            "exercises": [shape_exercise(row) for row in rows]
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

def shape_exercise(row) -> dict:
    return {
        "id": str(row["id"]),
        "name": row["name"],
        "description": row["description"],
        "muscle": row["muscle"],
        "type": row["type"],
        "sub_part": row["sub_part"],
        "image": row["image"],
        "video": row["video"],
        "difficulty": row["difficulty"],
        "calories_per_set": row["calories_per_set"],
    }

@router.get("/{exercise_id}/materials")
async def exercises_materials(exercise_id: str, credentials: dict = Depends(verify_token)):
    return {
        "materials": await fetch_exercise_details(
            """
            select id, name
            from exercise_materials
            where exercise_id = $1
            order by name
            """, exercise_id, "name"
        )
    }

@router.get("/{exercise_id}/instructions")
async def exercises_instructions(exercise_id: str, credentials: dict = Depends(verify_token)):
    return {
        "instructions": await fetch_exercise_details(
            """
            select id, description
            from exercise_instructions
            where exercise_id = $1
            order by step
            """, exercise_id, "description"
        )
    }

async def fetch_exercise_details(query, exercise_id, column):
    conn = None
    try:
        conn = await setup_connection()

        exists = await conn.fetchval(
            """
            select exists (
                select 1
                from exercises
                where id = $1
            )
            """, exercise_id
        )
        if not exists:
            raise SafeError("exercise not found")

        rows = await conn.fetch(query, exercise_id)

        return [
            {
                "id": str(row["id"]),
                column: row[column],
            }
            for row in rows
        ]

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()
