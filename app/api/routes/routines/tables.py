"""Fixed lookup tables used to generate routines.

Every table is read-only; a missing key is a configuration error, never a
silent default (rest times are the one exception, see ``rest_seconds``).
"""
from types import MappingProxyType

from app.api.middleware.misc import SafeError

class RoutineConfigError(SafeError):
    """A generation input has no entry in the lookup tables."""
    pass

WEEKDAYS = ("lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo")

NO_FOCUS = "todo"

TOTAL_EXERCISES_BY_TIME = MappingProxyType({
    "30 minutos": 4,
    "1 hora": 6,
    "2 horas": 8,
    "3 horas": 10,
})

TIME_BUDGET_SECONDS = MappingProxyType({
    "30 minutos": 1800,
    "1 hora": 3600,
    "2 horas": 7200,
    "3 horas": 10800,
})

MUSCLE_SUB_PARTS = MappingProxyType({
    "pierna": ("cuadriceps", "femoral", "gemelos"),
    "gluteo": ("gluteo mayor", "gluteo medio", "gluteo menor"),
    "pecho": ("pecho superior", "pecho medio", "pecho inferior"),
    "espalda": ("espalda alta", "espalda media", "espalda baja"),
    "hombro": ("hombro anterior", "hombro lateral", "hombro posterior"),
    "triceps": ("cabeza larga triceps", "cabeza lateral triceps", "cabeza medial triceps"),
    "biceps": ("cabeza larga biceps", "cabeza corta biceps"),
    "core": ("recto abdominal", "oblicuos", "transverso"),
})

# "fullbody" and "cardio" have no sub-part list, so plans that schedule them
# are rejected by the planner.
MUSCLE_GROUPS_BY_GOAL = MappingProxyType({
    "subir peso": MappingProxyType({
        1: (("pecho", "espalda", "pierna"),),
        2: (("pecho", "espalda"), ("pierna", "gluteo")),
        3: (("pecho", "triceps"), ("espalda", "biceps"), ("pierna", "gluteo")),
        4: (("pecho", "triceps"), ("espalda", "biceps"), ("pierna",), ("hombro",)),
        5: (("pecho", "triceps"), ("espalda", "biceps"), ("pierna", "gluteo"), ("hombro",), ("core",)),
        6: (("pecho", "triceps"), ("espalda", "biceps"), ("pierna", "gluteo"), ("hombro",), ("core",), ("pierna",)),
        7: (("pecho",), ("espalda",), ("pierna",), ("gluteo",), ("triceps",), ("biceps",), ("hombro",)),
    }),
    "bajar peso": MappingProxyType({
        1: (("pecho", "espalda", "pierna"),),
        2: (("pierna", "core"), ("pecho", "espalda")),
        3: (("pierna", "gluteo", "core"), ("espalda", "biceps"), ("pecho", "triceps")),
        4: (("pierna", "gluteo"), ("espalda", "core"), ("pecho", "triceps"), ("fullbody",)),
        5: (("pierna",), ("espalda",), ("pecho",), ("core",), ("cardio",)),
        6: (("pierna", "gluteo"), ("espalda",), ("pecho",), ("core",), ("fullbody",), ("cardio",)),
        7: (("fullbody",), ("fullbody",), ("pierna",), ("espalda",), ("pecho",), ("core",), ("cardio",)),
    }),
    "definir": MappingProxyType({
        1: (("pecho", "espalda", "pierna"),),
        2: (("fullbody",), ("fullbody",)),
        3: (("fullbody",), ("fullbody",), ("fullbody",)),
        4: (("pierna",), ("pecho", "triceps"), ("espalda", "biceps"), ("core",)),
        5: (("pierna",), ("pecho",), ("espalda",), ("hombro",), ("core",)),
        6: (("pierna",), ("pecho",), ("espalda",), ("hombro",), ("core",), ("fullbody",)),
        7: (("fullbody",), ("pierna",), ("pecho",), ("espalda",), ("hombro",), ("core",), ("fullbody",)),
    }),
    "mantener peso": MappingProxyType({
        1: (("pecho", "espalda", "pierna"),),
        2: (("pecho", "espalda"), ("pierna", "gluteo")),
        3: (("pecho", "espalda"), ("pierna", "gluteo"), ("core", "hombro")),
        4: (("pecho",), ("espalda",), ("pierna",), ("core",)),
        5: (("pecho",), ("espalda",), ("pierna",), ("hombro",), ("core",)),
        6: (("pecho",), ("espalda",), ("pierna",), ("hombro",), ("core",), ("fullbody",)),
        7: (("pecho",), ("espalda",), ("pierna",), ("gluteo",), ("triceps",), ("biceps",), ("core",)),
    }),
    "mejorar resistencia": MappingProxyType({
        1: (("pecho", "espalda", "pierna"),),
        2: (("fullbody",), ("fullbody",)),
        3: (("fullbody",), ("fullbody",), ("fullbody",)),
        4: (("fullbody",), ("fullbody",), ("fullbody",), ("core",)),
        5: (("fullbody",), ("fullbody",), ("fullbody",), ("core",), ("cardio",)),
        6: (("fullbody",), ("fullbody",), ("fullbody",), ("fullbody",), ("core",), ("cardio",)),
        7: (("fullbody",), ("fullbody",), ("fullbody",), ("fullbody",), ("core",), ("cardio",), ("cardio",)),
    }),
})

VOLUME_BY_GOAL_AND_LEVEL = MappingProxyType({
    "subir peso": MappingProxyType({
        "principiante": {"series": 3, "repetitions": 8},
        "intermedio": {"series": 4, "repetitions": 10},
        "avanzado": {"series": 4, "repetitions": 12},
    }),
    "bajar peso": MappingProxyType({
        "principiante": {"series": 3, "repetitions": 12},
        "intermedio": {"series": 4, "repetitions": 12},
        "avanzado": {"series": 4, "repetitions": 15},
    }),
    "definir": MappingProxyType({
        "principiante": {"series": 3, "repetitions": 12},
        "intermedio": {"series": 3, "repetitions": 15},
        "avanzado": {"series": 4, "repetitions": 15},
    }),
    "mantener peso": MappingProxyType({
        "principiante": {"series": 3, "repetitions": 10},
        "intermedio": {"series": 3, "repetitions": 12},
        "avanzado": {"series": 4, "repetitions": 12},
    }),
    "mejorar resistencia": MappingProxyType({
        "principiante": {"series": 2, "repetitions": 15},
        "intermedio": {"series": 3, "repetitions": 15},
        "avanzado": {"series": 4, "repetitions": 15},
    }),
})

MAX_EXERCISES_BY_LEVEL = MappingProxyType({
    "principiante": 4,
    "intermedio": 6,
    "avanzado": 8,
})

# None means every difficulty is accepted.
DIFFICULTIES_BY_LEVEL = MappingProxyType({
    "principiante": ("principiante",),
    "intermedio": ("principiante", "intermedio"),
    "avanzado": None,
})

REST_SECONDS_BY_MUSCLE = MappingProxyType({
    "pierna": 120,
    "pecho": 90,
    "espalda": 90,
    "gluteo": 120,
    "biceps": 60,
    "triceps": 60,
    "hombro": 60,
    "core": 30,
})
DEFAULT_REST_SECONDS = 60

SET_DURATION_SECONDS = 30
SECONDS_PER_REPETITION = 5

def total_exercises(time_available: str) -> int:
    if time_available not in TOTAL_EXERCISES_BY_TIME:
        raise RoutineConfigError(f"No configuration for training time '{time_available}'")
    return TOTAL_EXERCISES_BY_TIME[time_available]

def time_budget_seconds(time_available: str) -> int:
    if time_available not in TIME_BUDGET_SECONDS:
        raise RoutineConfigError(f"No configuration for training time '{time_available}'")
    return TIME_BUDGET_SECONDS[time_available]

def muscle_groups(goal: str, day_count: int) -> tuple:
    if goal not in MUSCLE_GROUPS_BY_GOAL:
        raise RoutineConfigError(f"No configuration for goal '{goal}'")
    if day_count not in MUSCLE_GROUPS_BY_GOAL[goal]:
        raise RoutineConfigError(f"No configuration for {day_count} training days")
    return MUSCLE_GROUPS_BY_GOAL[goal][day_count]

def sub_parts(muscle: str) -> tuple:
    if muscle not in MUSCLE_SUB_PARTS:
        raise RoutineConfigError(f"No configuration for muscle '{muscle}'")
    return MUSCLE_SUB_PARTS[muscle]

def volume_policy(goal: str, level: str) -> dict:
    if goal not in VOLUME_BY_GOAL_AND_LEVEL:
        raise RoutineConfigError(f"No volume configuration for goal '{goal}'")
    if level not in VOLUME_BY_GOAL_AND_LEVEL[goal]:
        raise RoutineConfigError(f"No volume configuration for level '{level}'")
    return dict(VOLUME_BY_GOAL_AND_LEVEL[goal][level])

def max_exercises_per_day(level: str) -> int:
    if level not in MAX_EXERCISES_BY_LEVEL:
        raise RoutineConfigError(f"No exercise cap for level '{level}'")
    return MAX_EXERCISES_BY_LEVEL[level]

def difficulty_filter(level: str) -> list | None:
    if level not in DIFFICULTIES_BY_LEVEL:
        raise RoutineConfigError(f"No difficulty filter for level '{level}'")
    difficulties = DIFFICULTIES_BY_LEVEL[level]
    return None if difficulties is None else list(difficulties)

def rest_seconds(muscle: str) -> int:
    return REST_SECONDS_BY_MUSCLE.get(muscle, DEFAULT_REST_SECONDS)
