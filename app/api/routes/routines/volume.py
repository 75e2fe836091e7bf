import json

from app.api.routes.routines.tables import *

def plan_volume(time_available: str, focus: str | None, day_count: int, goal: str) -> list[dict]:
    """Split the exercise total of every training day across muscle sub-parts.

    Returns one ``{muscle: {sub_part: count}}`` map per day. Units are handed
    out one at a time, round-robin over the (muscle, sub_part) pairs, so every
    day sums to the total for ``time_available``. The focus muscle, when it is
    scheduled for a day, is visited first on that day.
    """
    total = total_exercises(time_available)
    groupings = muscle_groups(goal, day_count)

    allocation = []
    for day_muscles in groupings:
        ordered = focus_first(day_muscles, focus)
        pairs = [(muscle, part) for muscle in ordered for part in sub_parts(muscle)]

        day = {}
        for muscle, part in pairs:
            day.setdefault(muscle, {})[part] = 0

        remaining = total
        while remaining > 0:
            for muscle, part in pairs:
                if remaining == 0: break
                day[muscle][part] += 1
                remaining -= 1

        allocation.append(day)

    return allocation

def focus_first(day_muscles, focus) -> list:
    muscles = list(day_muscles)
    if not focus or focus == NO_FOCUS or focus not in muscles:
        return muscles
    return [focus] + [muscle for muscle in muscles if muscle != focus]

def order_training_days(days) -> list:
    requested = {day.strip().lower() for day in days}
    return [day for day in WEEKDAYS if day in requested]

def encode_day_muscles(muscles) -> str:
    return json.dumps(list(muscles), ensure_ascii=False)

def decode_day_muscles(value) -> list:
    if value is None:
        return []
    return json.loads(value)
