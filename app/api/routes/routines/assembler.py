import random
import traceback

from app.api.routes.routines.tables import *
from app.api.routes.routines.volume import encode_day_muscles

async def fetch_candidate_exercises(conn, muscle, sub_part, difficulties, place, restrictions):
    return await conn.fetch(
        """
        select e.id
        from exercises e
        where e.muscle = $1
        and e.sub_part = $2
        and ($3::text[] is null or e.difficulty = any($3::text[]))
        and e.place = $4
        and not exists (
            select 1
            from unnest($5::text[]) r
            where strpos(coalesce(e.restrictions, ''), r) > 0
        )
        limit 600
        """, muscle, sub_part, difficulties, place, list(restrictions)
    )

async def build_routine(
    conn,
    creator_id,
    routine_name,
    allocation,
    training_days,
    goal,
    level,
    restrictions,
    time_available,
    place,
    find_exercises=fetch_candidate_exercises,
    rng=random,
):
    """Persist a generated routine for ``creator_id`` in a single transaction.

    ``allocation`` is the output of ``plan_volume`` and ``training_days`` the
    matching weekday names in canonical order. Returns
    ``{"success": True, "rutinaId": id}`` or ``{"success": False, "message": msg}``;
    on failure nothing written by this call survives.
    """
    tx = None
    try:
        policy = volume_policy(goal, level)
        day_cap = max_exercises_per_day(level)
        budget = time_budget_seconds(time_available)
        difficulties = difficulty_filter(level)
        if len(allocation) < len(training_days):
            raise RoutineConfigError(
                f"Allocation covers {len(allocation)} days but {len(training_days)} were requested"
            )

        tx = conn.transaction()
        await tx.start()

        routine_id = await conn.fetchval(
            """
            insert into routines
            (creator_id, name, goal, level)
            values
            ($1, $2, $3, $4)
            returning id
            """, creator_id, routine_name, goal, level
        )

        for i, (day_name, day_allocation) in enumerate(zip(training_days, allocation)):
            day_id = await conn.fetchval(
                """
                insert into routine_days
                (routine_id, day_name, muscles, order_index)
                values
                ($1, $2, $3, $4)
                returning id
                """, routine_id, day_name, encode_day_muscles(day_allocation.keys()), i
            )

            await fill_day(
                conn,
                day_id,
                day_allocation,
                policy,
                day_cap,
                budget,
                difficulties,
                place,
                restrictions,
                find_exercises,
                rng,
            )

        await conn.execute(
            """
            update users
            set routine_id = $1
            where id = $2
            """, routine_id, creator_id
        )

        await tx.commit()
        return {
            "success": True,
            "rutinaId": str(routine_id)
        }

    except Exception as e:
        if tx: await tx.rollback()
        print(f"Error building routine: {e}")
        if not isinstance(e, RoutineConfigError):
            traceback.print_exc()
        return {
            "success": False,
            "message": str(e)
        }

async def fill_day(
    conn,
    day_id,
    day_allocation,
    policy,
    day_cap,
    budget,
    difficulties,
    place,
    restrictions,
    find_exercises,
    rng,
):
    """Greedily assign catalog exercises to one day.

    Every pass visits each (muscle, sub_part) pair in allocation order and
    assigns at most one exercise per pair. A pass stops assigning once the
    day holds ``day_cap`` exercises or the time estimate reaches ``budget``.
    A productive pass decrements some pair by one, so the number of passes
    never exceeds the largest quota; a pass with no assignment ends the day.
    Returns ``(num_assigned, estimated_seconds)``.
    """
    series = policy["series"]
    repetitions = policy["repetitions"]

    remaining = {
        (muscle, part): quantity
        for muscle, parts in day_allocation.items()
        for part, quantity in parts.items()
    }
    max_passes = max(remaining.values(), default=0)

    assigned = 0
    elapsed = 0

    def can_assign(pair):
        return remaining[pair] > 0 and assigned < day_cap and elapsed < budget

    for _ in range(max_passes):
        progress = False

        for pair in remaining:
            if not can_assign(pair): continue
            muscle, part = pair

            candidates = await find_exercises(conn, muscle, part, difficulties, place, restrictions)
            if len(candidates) == 0: continue

            exercise_id = rng.choice(candidates)["id"]
            rest = rest_seconds(muscle)
            await save_assignment(conn, day_id, assigned, exercise_id, rest, series, repetitions)

            assigned += 1
            elapsed += series * repetitions * SECONDS_PER_REPETITION + series * rest
            remaining[pair] -= 1
            progress = True

        if not progress: break
        if assigned >= day_cap or elapsed >= budget: break

    return assigned, elapsed

async def save_assignment(conn, day_id, order_index, exercise_id, rest, series, repetitions):
    assigned_id = await conn.fetchval(
        """
        insert into assigned_exercises
        (day_id, order_index, exercise_id, rest_seconds)
        values
        ($1, $2, $3, $4)
        returning id
        """, day_id, order_index, exercise_id, rest
    )

    for i in range(series):
        await conn.execute(
            """
            insert into assigned_sets
            (assigned_exercise_id, order_index, repetitions, approx_seconds)
            values
            ($1, $2, $3, $4)
            """, assigned_id, i, repetitions, SET_DURATION_SECONDS
        )

    return assigned_id
