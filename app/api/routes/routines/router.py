from fastapi import APIRouter

from app.api.routes.routines import generate
from app.api.routes.routines import manage
from app.api.routes.routines import read
from app.api.routes.routines import share

router = APIRouter(prefix="/routines")

router.include_router(generate.router)
router.include_router(share.router)
router.include_router(read.router)
router.include_router(manage.router)
