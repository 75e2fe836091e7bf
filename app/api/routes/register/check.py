from fastapi import APIRouter
from pydantic import BaseModel
from typing import Optional

from app.api.middleware.database import setup_connection
from app.api.middleware.misc import *

router = APIRouter()

class Check(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None

@router.post("/check")
async def register_check(req: Check):
    conn = None
    try:
        conn = await setup_connection()

        taken = {}
        for col, value in [("email", req.email), ("phone", req.phone)]:
            if value is None: continue
            taken[col] = await value_taken(conn, col, value)

        return {
            "taken": taken
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

async def value_taken(conn, col, value):
    return await conn.fetchval(
        f"""
        select exists (
            select 1
            from users
            where lower({col}) = lower($1)
        )
        """, value.strip()
    )
