from fastapi import APIRouter

from app.api.routes.stats import exercise_logs
from app.api.routes.stats import completion

router = APIRouter(prefix="/stats")

router.include_router(exercise_logs.router)
router.include_router(completion.router)
