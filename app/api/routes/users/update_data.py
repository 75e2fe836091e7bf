from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from typing import Annotated, List, Optional
import json
import bcrypt

from app.api.routes.auth import verify_token
from app.api.middleware.database import setup_connection
from app.api.middleware.misc import *

router = APIRouter()

class Update(BaseModel):
    goal: Optional[str] = None
    place: Optional[place_literal] = None
    activity: Optional[str] = None
    gender: Optional[gender_literal] = None
    age: Optional[Annotated[int, Field(ge=10, le=120)]] = None
    focus: Optional[str] = None
    weight_unit: Optional[weight_unit_literal] = None
    height_unit: Optional[height_unit_literal] = None
    training_hours: Optional[str] = None
    days: Optional[List[str]] = None
    restrictions: Optional[List[str]] = None
    level: Optional[level_literal] = None

@router.post("/data/update")
async def users_data_update(req: Update, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        for key, value in req.model_dump().items():
            if value is None: continue
            if key in ["days", "restrictions"]:
                value = json.dumps(value, ensure_ascii=False)
            await conn.execute(
                f"""
                update users
                set {user_profile_columns[key]} = $1
                where id = $2
                """, value, credentials["user_id"]
            )

        return {
            "status": "good"
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

class PasswordUpdate(BaseModel):
    current_password: str
    new_password: str = password_field

@router.post("/password/update")
async def users_password_update(req: PasswordUpdate, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        stored = await conn.fetchval(
            """
            select password
            from users
            where id = $1
            """, credentials["user_id"]
        )
        if stored is None:
            raise SafeError("user not found")

        if not bcrypt.checkpw(req.current_password.encode('utf-8'), stored.encode('utf-8')):
            return {
                "status": "incorrect-password"
            }

        hashed_pwd = bcrypt.hashpw(req.new_password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')
        await conn.execute(
            """
            update users
            set password = $1
            where id = $2
            """, hashed_pwd, credentials["user_id"]
        )

        return {
            "status": "updated"
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

class ExperienceUpdate(BaseModel):
    experience: int = Field(ge=0)

@router.post("/experience/update")
async def users_experience_update(req: ExperienceUpdate, credentials: dict = Depends(verify_token)):
    return {
        "status": await update_user_column(credentials["user_id"], "experience", req.experience)
    }

class ProfileImage(BaseModel):
    image_url: str = Field(min_length=1)

@router.put("/profile-image")
async def users_profile_image(req: ProfileImage, credentials: dict = Depends(verify_token)):
    return {
        "status": await update_user_column(credentials["user_id"], "profile_image_url", req.image_url)
    }

class ActiveRoutine(BaseModel):
    routine_id: str

@router.put("/routine/active")
async def users_routine_active(req: ActiveRoutine, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        visible = await conn.fetchval(
            """
            select exists (
                select 1
                from routines r
                where r.id = $1
                and (
                    r.creator_id = $2
                    or r.id in (
                        select routine_id
                        from shared_routines
                        where recipient_id = $2
                        and state = 'aceptada'
                    )
                )
            )
            """, req.routine_id, credentials["user_id"]
        )
        if not visible:
            raise SafeError("routine not found")

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

    return {
        "status": await update_user_column(credentials["user_id"], "routine_id", req.routine_id)
    }

async def update_user_column(user_id, column, value):
    conn = None
    try:
        conn = await setup_connection()

        updated = await conn.fetchval(
            f"""
            update users
            set {column} = $1
            where id = $2
            returning id
            """, value, user_id
        )
        if updated is None:
            raise SafeError("user not found")

        return "updated"

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()
