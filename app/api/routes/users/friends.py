from fastapi import APIRouter, Depends
from pydantic import BaseModel
from datetime import datetime, timezone
import traceback

from app.api.routes.auth import verify_token
from app.api.middleware.database import setup_connection
from app.api.middleware.misc import *
from app.api.routes.social.notifications import create_notification

router = APIRouter()

# friend workflow
# search for a username, send a request
# the target accepts or rejects it from their received list
# an accepted request creates the friendship, either side can remove it later
# a request sent back to someone who already asked becomes a friendship

@router.get("/search")
async def users_search(query: str, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        rows = await conn.fetch(
            """
            select u.id, u.username, u.first_name, u.last_name, u.profile_image_url
            from users u
            where u.id != $1
            and (
                u.username ilike $2 || '%'
                or u.first_name ilike $2 || '%'
                or u.last_name ilike $2 || '%'
            )
            order by u.username
            limit 50
            """,
            credentials["user_id"],
            query.strip()
        )

        matches = []
        for row in rows:
            matches.append({
                "id": str(row["id"]),
                "username": row["username"],
                "first_name": row["first_name"],
                "last_name": row["last_name"],
                "profile_image_url": row["profile_image_url"],
                "relation": await fetch_relation(conn, credentials["user_id"], row["id"]),
            })

        return {
            "matches": matches
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

async def fetch_relation(conn, user_id, other_id):
    if await are_friends(conn, user_id, other_id):
        return "friend"

    if await pending_request_exists(conn, user_id, other_id):
        return "requested"
    if await pending_request_exists(conn, other_id, user_id):
        return "inbound"
    return "none"

async def are_friends(conn, user1_id, user2_id):
    return await conn.fetchval(
        """
        select exists (
            select 1
            from friends
            where (user1_id = $1 and user2_id = $2)
            or (user1_id = $2 and user2_id = $1)
        )
        """, user1_id, user2_id
    )

async def pending_request_exists(conn, requestor_id, target_id):
    return await conn.fetchval(
        """
        select exists (
            select 1
            from friend_requests
            where requestor_id = $1
            and target_id = $2
            and state = 'pendiente'
        )
        """, requestor_id, target_id
    )

class RequestSend(BaseModel):
    target_id: str

@router.post("/request/send")
async def users_request_send(req: RequestSend, credentials: dict = Depends(verify_token)):
    conn = tx = None
    try:
        user_id = credentials["user_id"]
        if req.target_id == user_id:
            raise SafeError("cannot send a friend request to yourself")

        conn = await setup_connection()
        tx = conn.transaction()
        await tx.start()

        if await are_friends(conn, user_id, req.target_id):
            await tx.commit()
            return {
                "status": "existing"
            }

        inbound_id = await conn.fetchval(
            """
            select id
            from friend_requests
            where requestor_id = $1
            and target_id = $2
            and state = 'pendiente'
            """, req.target_id, user_id
        )
        if inbound_id is not None:
            await accept_request(conn, inbound_id, req.target_id, user_id)
            await tx.commit()
            return {
                "status": "accepted"
            }

        request_id = await conn.fetchval(
            """
            insert into friend_requests
            (requestor_id, target_id, state, last_updated)
            values
            ($1, $2, 'pendiente', $3)
            on conflict (requestor_id, target_id)
            do update
            set state = 'pendiente',
                last_updated = $3
            returning id
            """,
            user_id,
            req.target_id,
            datetime.now(tz=timezone.utc).replace(tzinfo=None),
        )

        await create_notification(conn, req.target_id, "solicitud_amistad", "sent you a friend request", actor_id=user_id)

        await tx.commit()

        return {
            "status": "requested",
            "request_id": str(request_id)
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

@router.get("/request/received")
async def users_request_received(credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        rows = await conn.fetch(
            """
            select fr.id, fr.requestor_id, u.username, u.profile_image_url, fr.last_updated
            from friend_requests fr
            inner join users u
            on fr.requestor_id = u.id
            where fr.target_id = $1
            and fr.state = 'pendiente'
            order by fr.last_updated desc
            """, credentials["user_id"]
        )

        return {
            "requests": [
                {
                    "id": str(row["id"]),
                    "requestor_id": str(row["requestor_id"]),
                    "username": row["username"],
                    "profile_image_url": row["profile_image_url"],
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

class RequestRespond(BaseModel):
    request_id: str
    state: request_state_literal

@router.post("/request/respond")
async def users_request_respond(req: RequestRespond, credentials: dict = Depends(verify_token)):
    conn = tx = None
    try:
        user_id = credentials["user_id"]

        conn = await setup_connection()
        tx = conn.transaction()
        await tx.start()

        requestor_id = await conn.fetchval(
            """
            select requestor_id
            from friend_requests
            where id = $1
            and target_id = $2
            and state = 'pendiente'
            """, req.request_id, user_id
        )
        if requestor_id is None:
            raise SafeError("friend request not found")

        if req.state == "aceptada":
            await accept_request(conn, req.request_id, requestor_id, user_id)
        else:
            await conn.execute(
                """
                update friend_requests
                set
                    state = 'rechazada',
                    last_updated = $1
                where id = $2
                """,
                datetime.now(tz=timezone.utc).replace(tzinfo=None),
                req.request_id,
            )

        await tx.commit()

        return {
            "status": req.state
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

async def accept_request(conn, request_id, requestor_id, target_id):
    await conn.execute(
        """
        update friend_requests
        set
            state = 'aceptada',
            last_updated = $1
        where id = $2
        """,
        datetime.now(tz=timezone.utc).replace(tzinfo=None),
        request_id,
    )

    await conn.execute(
        """
        insert into friends
        (user1_id, user2_id)
        values
        ($1, $2)
        on conflict do nothing
        """, requestor_id, target_id
    )

    await create_notification(conn, requestor_id, "amistad_aceptada", "accepted your friend request", actor_id=target_id)

@router.get("/friends/all")
async def users_friends_all(credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        rows = await conn.fetch(
            """
            select f.user1_id user_id, u.username, u.profile_image_url
            from friends f
            inner join users u
            on u.id = f.user1_id
            where f.user2_id = $1
            union
            select f.user2_id user_id, u.username, u.profile_image_url
            from friends f
            inner join users u
            on u.id = f.user2_id
            where f.user1_id = $1
            order by username
            """, credentials["user_id"]
        )

        return {
            "friends": [
                {
                    "user_id": str(row["user_id"]),
                    "username": row["username"],
                    "profile_image_url": row["profile_image_url"],
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

class FriendRemove(BaseModel):
    friend_id: str

@router.post("/friends/remove")
async def users_friends_remove(req: FriendRemove, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        await conn.execute(
            """
            delete
            from friends
            where (user1_id = $1 and user2_id = $2)
            or (user1_id = $2 and user2_id = $1)
            """, credentials["user_id"], req.friend_id
        )

        return {
            "status": "removed"
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()
