from fastapi import APIRouter
from pydantic import BaseModel
import bcrypt

from app.api.middleware.database import setup_connection
from app.api.middleware.auth_token import generate_auth_token
from app.api.routes.users.get_data import shape_user_data
from app.api.middleware.misc import *

router = APIRouter()

class Login(BaseModel):
    email: str = email_field
    password: str

@router.post("/login")
async def login(req: Login):
    conn = None
    try:
        conn = await setup_connection()

        row = await conn.fetchrow(
            """
            select *
            from users
            where lower(email) = lower($1)
            """, req.email.strip()
        )

        auth_token = None
        user_data = None
        if row is None:
            status = "none"
        elif bcrypt.checkpw(req.password.encode('utf-8'), row["password"].encode('utf-8')):
            status = "good"
            auth_token = generate_auth_token(row["email"], row["id"])
            user_data = shape_user_data(row)
        else:
            status = "incorrect-password"

        return {
            "status": status,
            "auth_token": auth_token,
            "user_data": user_data
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()
