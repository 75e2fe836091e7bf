from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from typing import List
import traceback

from app.api.middleware.database import setup_connection
from app.api.routes.auth import verify_token
from app.api.middleware.misc import *
from app.api.routes.social.notifications import create_notification
from app.api.routes.users.friends import are_friends

router = APIRouter()

class ShareRoutines(BaseModel):
    target_id: str
    routine_ids: List[str] = Field(min_length=1)

@router.post("/share")
async def routines_share(req: ShareRoutines, credentials: dict = Depends(verify_token)):
    conn = tx = None
    try:
        user_id = credentials["user_id"]
        if req.target_id == user_id:
            raise SafeError("cannot share a routine with yourself")

        conn = await setup_connection()

        if not await are_friends(conn, user_id, req.target_id):
            raise SafeError("routines can only be shared with friends")

        tx = conn.transaction()
        await tx.start()

        shared = []
        for routine_id in req.routine_ids:
            routine_name = await conn.fetchval(
                """
                select name
                from routines
                where id = $1
                and creator_id = $2
                """, routine_id, user_id
            )
            if routine_name is None:
                raise SafeError("routine not found")

            existing_id = await conn.fetchval(
                """
                select id
                from shared_routines
                where routine_id = $1
                and recipient_id = $2
                and state in ('pendiente', 'aceptada')
                """, routine_id, req.target_id
            )
            if existing_id is not None:
                shared.append(str(existing_id))
                continue

            share_id = await conn.fetchval(
                """
                insert into shared_routines
                (routine_id, owner_id, recipient_id, state)
                values
                ($1, $2, $3, 'pendiente')
                returning id
                """, routine_id, user_id, req.target_id
            )

            await create_notification(
                conn,
                req.target_id,
                "rutina_compartida",
                f"shared the routine '{routine_name}' with you",
                actor_id=user_id,
                share_id=share_id
            )
            shared.append(str(share_id))

        await tx.commit()

        return {
            "share_ids": shared
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

@router.get("/shared/received")
async def routines_shared_received(credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        rows = await conn.fetch(
            """
            select sr.id, sr.routine_id, sr.state, sr.created_at, r.name, r.description, r.level, r.goal,
                sr.owner_id, u.username owner_username
            from shared_routines sr
            inner join routines r
            on r.id = sr.routine_id
            inner join users u
            on u.id = sr.owner_id
            where sr.recipient_id = $1
            order by sr.created_at desc
            """, credentials["user_id"]
        )

        return {
            "shared": [
                {
                    "id": str(row["id"]),
                    "routine_id": str(row["routine_id"]),
                    "state": row["state"],
                    "created_at": datetime_to_timestamp_ms(row["created_at"]),
                    "name": row["name"],
                    "description": row["description"],
                    "level": row["level"],
                    "goal": row["goal"],
                    "owner_id": str(row["owner_id"]),
                    "owner_username": row["owner_username"],
                }
                for row in rows
            ]
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

class ShareRespond(BaseModel):
    share_id: str
    state: share_state_literal

@router.post("/shared/respond")
async def routines_shared_respond(req: ShareRespond, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        share_id = await conn.fetchval(
            """
            update shared_routines
            set state = $1
            where id = $2
            and recipient_id = $3
            and state = 'pendiente'
            returning id
            """, req.state, req.share_id, credentials["user_id"]
        )
        if share_id is None:
            raise SafeError("shared routine not found")

        return {
            "status": req.state
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()
