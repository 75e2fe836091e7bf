from fastapi import APIRouter

from app.api.routes.social import notifications
from app.api.routes.social import posts

router = APIRouter(prefix="/social")

router.include_router(notifications.router)
router.include_router(posts.router)
