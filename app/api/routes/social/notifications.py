from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.api.middleware.database import setup_connection
from app.api.routes.auth import verify_token
from app.api.middleware.misc import *

router = APIRouter()

#? notifications are rows only, delivery to devices happens elsewhere
async def create_notification(conn, user_id, kind: notification_kind_literal, message, actor_id=None, post_id=None, share_id=None):
    return await conn.fetchval(
        """
        insert into notifications
        (user_id, kind, message, actor_id, post_id, share_id)
        values
        ($1, $2, $3, $4, $5, $6)
        returning id
        """, user_id, kind, message, actor_id, post_id, share_id
    )

@router.get("/notifications")
async def social_notifications(credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        rows = await conn.fetch(
            """
            select n.id, n.kind, n.message, n.is_read, n.created_at, n.actor_id, u.username actor_username,
                n.post_id, n.share_id, sr.state share_state, sr.routine_id
            from notifications n
            left join users u
            on u.id = n.actor_id
            left join shared_routines sr
            on sr.id = n.share_id
            where n.user_id = $1
            order by n.created_at desc
            """, credentials["user_id"]
        )

        return {
            "notifications": [shape_notification(row) for row in rows]
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

def shape_notification(row):
    share_state = row["share_state"]
    if row["kind"] == "rutina_compartida" and share_state in ["aceptada", "rechazada"]:
        share_state = "procesada"

    return {
        "id": str(row["id"]),
        "kind": row["kind"],
        "message": row["message"],
        "is_read": row["is_read"],
        "created_at": datetime_to_timestamp_ms(row["created_at"]),
        "actor_id": str(row["actor_id"]) if row["actor_id"] else None,
        "actor_username": row["actor_username"],
        "post_id": str(row["post_id"]) if row["post_id"] else None,
        "share_id": str(row["share_id"]) if row["share_id"] else None,
        "routine_id": str(row["routine_id"]) if row["routine_id"] else None,
        "share_state": share_state,
    }

class NotificationRead(BaseModel):
    notification_id: str

@router.post("/notifications/read")
async def social_notifications_read(req: NotificationRead, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        await conn.execute(
            """
            update notifications
            set is_read = true
            where id = $1
            and user_id = $2
            """, req.notification_id, credentials["user_id"]
        )

        return {
            "status": "read"
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

@router.get("/notifications/unread")
async def social_notifications_unread(credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        total = await conn.fetchval(
            """
            select count(*)
            from notifications
            where user_id = $1
            and is_read = false
            """, credentials["user_id"]
        )

        return {
            "total": total
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()
