from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, model_validator
from typing import Optional
import traceback

from app.api.middleware.database import setup_connection
from app.api.routes.auth import verify_token
from app.api.middleware.misc import *
from app.api.routes.social.notifications import create_notification

router = APIRouter()

class PostCreate(BaseModel):
    content: Optional[str] = Field(default=None, max_length=2000)
    image_url: Optional[str] = None
    video_url: Optional[str] = None

    @model_validator(mode="after")
    def not_empty(self):
        if not (self.content or "").strip() and not self.image_url and not self.video_url:
            raise ValueError("a post needs content, an image or a video")
        return self

@router.post("/posts")
async def social_posts_create(req: PostCreate, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        post_id = await conn.fetchval(
            """
            insert into posts
            (user_id, content, image_url, video_url)
            values
            ($1, $2, $3, $4)
            returning id
            """, credentials["user_id"], req.content, req.image_url, req.video_url
        )

        return {
            "post_id": str(post_id)
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

@router.get("/posts")
async def social_posts_feed(credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        rows = await conn.fetch(
            """
            select p.id, p.user_id, u.username, u.profile_image_url, p.content, p.image_url, p.video_url, p.created_at,
                (select count(*) from post_likes pl where pl.post_id = p.id) num_likes,
                (select count(*) from post_comments pc where pc.post_id = p.id) num_comments,
                exists (
                    select 1
                    from post_likes pl
                    where pl.post_id = p.id
                    and pl.user_id = $1
                ) liked
            from posts p
            inner join users u
            on u.id = p.user_id
            where p.user_id = $1
            or p.user_id in (
                select user2_id from friends where user1_id = $1
                union
                select user1_id from friends where user2_id = $1
            )
            order by p.created_at desc
            limit 100
            """, credentials["user_id"]
        )

        posts = []
        for row in rows:
            posts.append({
                "id": str(row["id"]),
                "user_id": str(row["user_id"]),
                "username": row["username"],
                "profile_image_url": row["profile_image_url"],
                "content": row["content"],
                "image_url": row["image_url"],
                "video_url": row["video_url"],
                "created_at": datetime_to_timestamp_ms(row["created_at"]),
                "num_likes": row["num_likes"],
                "num_comments": row["num_comments"],
                "liked": row["liked"],
            })

        return {
            "posts": posts
        }

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

class PostLike(BaseModel):
    post_id: str

@router.post("/posts/like")
async def social_posts_like(req: PostLike, credentials: dict = Depends(verify_token)):
    conn = tx = None
    try:
        user_id = credentials["user_id"]

        conn = await setup_connection()
        tx = conn.transaction()
        await tx.start()

        author_id = await fetch_post_author(conn, req.post_id)

        removed = await conn.fetchval(
            """
            delete
            from post_likes
            where post_id = $1
            and user_id = $2
            returning post_id
            """, req.post_id, user_id
        )

        if removed is None:
            await conn.execute(
                """
                insert into post_likes
                (post_id, user_id)
                values
                ($1, $2)
                """, req.post_id, user_id
            )
            if str(author_id) != user_id:
                await create_notification(conn, author_id, "like", "liked your post", actor_id=user_id, post_id=req.post_id)

        await tx.commit()

        return {
            "liked": removed is None
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

class PostComment(BaseModel):
    post_id: str
    content: str = Field(min_length=1, max_length=1000)

@router.post("/posts/comment")
async def social_posts_comment(req: PostComment, credentials: dict = Depends(verify_token)):
    conn = tx = None
    try:
        user_id = credentials["user_id"]
        if not req.content.strip():
            raise SafeError("comment is empty")

        conn = await setup_connection()
        tx = conn.transaction()
        await tx.start()

        author_id = await fetch_post_author(conn, req.post_id)

        comment_id = await conn.fetchval(
            """
            insert into post_comments
            (post_id, user_id, content)
            values
            ($1, $2, $3)
            returning id
            """, req.post_id, user_id, req.content.strip()
        )

        if str(author_id) != user_id:
            await create_notification(conn, author_id, "comentario", "commented on your post", actor_id=user_id, post_id=req.post_id)

        await tx.commit()

        return {
            "comment_id": str(comment_id)
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

@router.get("/posts/{post_id}/comments")
async def social_posts_comments(post_id: str, credentials: dict = Depends(verify_token)):
    conn = None
    try:
        conn = await setup_connection()

        rows = await conn.fetch(
            """
            select c.id, c.user_id, u.username, u.profile_image_url, c.content, c.created_at
            from post_comments c
            inner join users u
            on u.id = c.user_id
            where c.post_id = $1
            order by c.created_at
            """, post_id
        )

        return {
            "comments": [
                {
                    "id": str(row["id"]),
                    "user_id": str(row["user_id"]),
                    "username": row["username"],
                    "profile_image_url": row["profile_image_url"],
                    "content": row["content"],
                    "created_at": datetime_to_timestamp_ms(row["created_at"]),
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

@router.delete("/posts/{post_id}")
async def social_posts_delete(post_id: str, credentials: dict = Depends(verify_token)):
    conn = tx = None
    try:
        conn = await setup_connection()
        tx = conn.transaction()
        await tx.start()

        author_id = await fetch_post_author(conn, post_id)
        if str(author_id) != credentials["user_id"]:
            raise SafeError("post not found")

        for table in ["post_likes", "post_comments", "notifications"]:
            await conn.execute(
                f"""
                delete
                from {table}
                where post_id = $1
                """, post_id
            )

        await conn.execute(
            """
            delete
            from posts
            where id = $1
            """, post_id
        )

        await tx.commit()

        return {
            "status": "deleted"
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

async def fetch_post_author(conn, post_id):
    author_id = await conn.fetchval(
        """
        select user_id
        from posts
        where id = $1
        """, post_id
    )
    if author_id is None:
        raise SafeError("post not found")
    return author_id
