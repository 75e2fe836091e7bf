from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, Field
from typing import List, Optional
import json

from app.api.middleware.database import setup_connection
from app.api.routes.auth import verify_token
from app.api.middleware.misc import *
from app.api.routes.routines.tables import RoutineConfigError, NO_FOCUS, volume_policy, max_exercises_per_day
from app.api.routes.routines.volume import plan_volume, order_training_days
from app.api.routes.routines.assembler import build_routine

router = APIRouter()

class GenerateRoutine(BaseModel):
    user_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("usuarioId", "usuario_id"))
    routine_name: str = Field(min_length=1, max_length=255, validation_alias="nombreRutina")
    time_available: str = Field(validation_alias="tiempoDisponible")
    focus: Optional[str] = Field(default=NO_FOCUS, validation_alias="enfoqueUsuario")
    training_days: List[str] = Field(min_length=1, validation_alias="diasEntrenamiento")
    goal: str = Field(validation_alias="objetivo")
    level: str = Field(validation_alias="nivel")
    restrictions: List[str] = Field(default=[], validation_alias="restricciones")
    place: str = Field(validation_alias="lugarEntrenamiento")

@router.post("/generate")
async def routines_generate(req: GenerateRoutine, credentials: dict = Depends(verify_token)):
    print(f"Routine generation requested: {json.dumps(req.model_dump(), ensure_ascii=False)}")

    user_id = credentials["user_id"]
    if req.user_id is not None and str(req.user_id) != user_id:
        return failure(400, "cannot generate a routine for another user")

    training_days = order_training_days(req.training_days)
    print(f"Ordered training days: {training_days}")
    if len(training_days) == 0:
        return failure(400, "invalid training days")

    try:
        allocation = plan_volume(req.time_available, req.focus, len(training_days), req.goal)
        # invalid goal or level fails with a 400 before any connection is opened
        volume_policy(req.goal, req.level)
        max_exercises_per_day(req.level)
    except RoutineConfigError as e:
        return failure(400, str(e))

    conn = None
    try:
        conn = await setup_connection()

        result = await build_routine(
            conn,
            user_id,
            req.routine_name,
            allocation,
            training_days,
            req.goal,
            req.level,
            req.restrictions,
            req.time_available,
            req.place,
        )

    finally:
        if conn: await conn.close()

    if not result["success"]:
        return failure(500, result["message"])

    print(f"Routine generated: {result['rutinaId']}")
    return JSONResponse(
        status_code=201,
        content={
            "success": True,
            "message": "routine generated",
            "rutinaId": result["rutinaId"],
        }
    )

def failure(status_code, message):
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
        }
    )
