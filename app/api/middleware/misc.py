from datetime import date, datetime, timezone
from typing import Literal
from pydantic import Field

def datetime_to_timestamp_ms(dt):
    return int(dt.timestamp() * 1000)

def today_utc() -> date:
    return datetime.now(tz=timezone.utc).date()

def date_to_str(value) -> str:
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()

email_field = Field(pattern=r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
password_field = Field(min_length=8, max_length=36)
name_field = Field(min_length=0, max_length=255)
phone_field = Field(min_length=6, max_length=20)
height_field = Field(gt=0, le=500)
weight_field = Field(gt=0, le=700)

gender_literal = Literal["hombre", "mujer", "otro"]
weight_unit_literal = Literal["kg", "lb"]
height_unit_literal = Literal["cm", "ft"]
place_literal = Literal["gimnasio", "casa", "aire libre"]
level_literal = Literal["principiante", "intermedio", "avanzado"]

request_state_literal = Literal["aceptada", "rechazada"]
share_state_literal = Literal["aceptada", "rechazada"]
notification_kind_literal = Literal[
    "solicitud_amistad",
    "amistad_aceptada",
    "rutina_compartida",
    "like",
    "comentario",
]

user_profile_columns = {
    "goal": "goal",
    "place": "place",
    "activity": "activity",
    "gender": "gender",
    "age": "age",
    "focus": "focus",
    "weight_unit": "weight_unit",
    "height_unit": "height_unit",
    "training_hours": "training_hours",
    "days": "days",
    "restrictions": "restrictions",
    "level": "level",
}

measurement_tables_map = {
    "weight": {
        "table": "user_weights",
        "column": "weight",
        "unit_column": "unit",
        "user_column": "weight",
        "user_unit_column": "weight_unit",
    },
    "height": {
        "table": "user_heights",
        "column": "height",
        "unit_column": "unit",
        "user_column": "height",
        "user_unit_column": "height_unit",
    },
}

class SafeError(Exception):
    """Error with a message safe to show to the client."""
    pass
