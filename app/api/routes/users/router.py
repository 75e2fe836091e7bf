from fastapi import APIRouter

from app.api.routes.users import get_data
from app.api.routes.users import update_data
from app.api.routes.users import measurements
from app.api.routes.users import friends

router = APIRouter(prefix="/users")

router.include_router(get_data.router)
router.include_router(update_data.router)
router.include_router(measurements.router)
router.include_router(friends.router)
