from fastapi import APIRouter, Depends
import json

from app.api.routes.auth import verify_token
from app.api.middleware.database import setup_connection
from app.api.middleware.misc import *

router = APIRouter()

@router.get("/data/get")
async def users_data(credentials: dict = Depends(verify_token)):
    return {
        "user_data": await fetch_user_data(credentials["user_id"])
    }

async def fetch_user_data(user_id: str) -> dict | None:
    conn = None
    try:
        conn = await setup_connection()

        row = await conn.fetchrow(
            """
            select *
            from users
            where id = $1
            """, user_id
        )

        if row is None: raise SafeError("user data not found")

        return shape_user_data(row)

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

def shape_user_data(row) -> dict:
    return {
        "user_id": str(row["id"]),
        "email": row["email"],
        "phone": row["phone"],
        "username": row["username"],
        "first_name": row["first_name"],
        "last_name": row["last_name"],
        "gender": row["gender"],
        "age": row["age"],
        "weight": row["weight"],
        "weight_unit": row["weight_unit"],
        "target_weight": row["target_weight"],
        "height": row["height"],
        "height_unit": row["height_unit"],
        "goal": row["goal"],
        "place": row["place"],
        "activity": row["activity"],
        "focus": row["focus"],
        "days": json.loads(row["days"]) if row["days"] else [],
        "restrictions": json.loads(row["restrictions"]) if row["restrictions"] else [],
        "training_hours": row["training_hours"],
        "level": row["level"],
        "experience": row["experience"],
        "routine_id": str(row["routine_id"]) if row["routine_id"] else None,
        "profile_image_url": row["profile_image_url"],
        "email_confirmed": row["email_confirmed"],
    }
