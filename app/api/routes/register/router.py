from fastapi import APIRouter

from app.api.routes.register import check
from app.api.routes.register import login
from app.api.routes.register import register

router = APIRouter(prefix="/register")

router.include_router(check.router)
router.include_router(login.router)
router.include_router(register.router)
