from fastapi import APIRouter
from pydantic import BaseModel, Field, field_validator
from typing import Annotated, List, Optional
import re
import json
import secrets
import bcrypt
import traceback

from app.api.middleware.database import setup_connection
from app.api.middleware.misc import *
from app.api.routes.register.check import value_taken

router = APIRouter()

class Register(BaseModel):
    email: str = email_field
    password: str = password_field
    phone: str = phone_field
    username: str = Field(min_length=1, max_length=20)
    first_name: str = name_field
    last_name: str = name_field
    gender: gender_literal
    age: Annotated[int, Field(ge=10, le=120)]
    weight: float = weight_field
    weight_unit: weight_unit_literal = "kg"
    target_weight: Optional[float] = None
    height: float = height_field
    height_unit: height_unit_literal = "cm"
    goal: str
    place: place_literal
    activity: Optional[str] = None
    focus: str = "todo"
    days: List[str] = []
    restrictions: List[str] = []
    training_hours: Optional[str] = None
    level: level_literal = "principiante"

    @field_validator('password')
    def password_complexity(cls, v):
        if not re.search(r'[A-Z]', v):
            raise ValueError('Password must contain at least one uppercase letter.')
        if not re.search(r'[0-9]', v):
            raise ValueError('Password must contain at least one number.')
        return v

@router.post("/new")
async def register(req: Register):
    conn = tx = None
    try:
        conn = await setup_connection()
        tx = conn.transaction()
        await tx.start()

        error_result = {
            "status": "error",
            "fields": []
        }

        for col in ["email", "phone"]:
            if await value_taken(conn, col, getattr(req, col)):
                error_result["fields"].append(col)

        if error_result["fields"] != []:
            await tx.rollback()
            tx = None
            return error_result

        hashed_pwd = bcrypt.hashpw(req.password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')
        confirmation_token = secrets.token_urlsafe(32)

        user_id = await conn.fetchval(
            """
            insert into users
            (email, password, phone, username, first_name, last_name, gender, age,
            weight, weight_unit, target_weight, height, height_unit, goal, place,
            activity, focus, days, restrictions, training_hours, level,
            experience, email_confirmed, confirmation_token)
            values
            ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15,
            $16, $17, $18, $19, $20, $21, 0, false, $22)
            returning id
            """,
            req.email.strip().lower(),
            hashed_pwd,
            req.phone.strip(),
            req.username,
            req.first_name,
            req.last_name,
            req.gender,
            req.age,
            req.weight,
            req.weight_unit,
            req.target_weight,
            req.height,
            req.height_unit,
            req.goal,
            req.place,
            req.activity,
            req.focus,
            json.dumps(req.days, ensure_ascii=False),
            json.dumps(req.restrictions, ensure_ascii=False),
            req.training_hours,
            req.level,
            confirmation_token,
        )

        for key, unit in [("weight", req.weight_unit), ("height", req.height_unit)]:
            data_map = measurement_tables_map[key]
            await conn.execute(
                f"""
                insert into {data_map["table"]}
                (user_id, {data_map["column"]}, {data_map["unit_column"]}, recorded_on)
                values
                ($1, $2, $3, $4)
                """, user_id, getattr(req, key), unit, today_utc()
            )

        await tx.commit()

        print(f"registered user {user_id}")

        return {
            "status": "success",
            "user_id": str(user_id)
        }

    except SafeError as e:
        if tx: await tx.rollback()
        raise e
    except Exception as e:
        print(str(e))
        traceback.print_exc()
        if tx: await tx.rollback()
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

@router.get("/confirm")
async def register_confirm(token: str):
    conn = None
    try:
        conn = await setup_connection()

        user_id = await conn.fetchval(
            """
            update users
            set
                email_confirmed = true,
                confirmation_token = null
            where confirmation_token = $1
            returning id
            """, token
        )
        if user_id is None:
            raise SafeError("invalid confirmation token")

        return {
            "status": "confirmed"
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()
