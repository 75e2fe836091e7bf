from fastapi import APIRouter

from app.api.routes.exercises import catalog

router = APIRouter(prefix="/exercises")

router.include_router(catalog.router)
