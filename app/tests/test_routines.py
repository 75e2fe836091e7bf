import pytest
import uuid
from datetime import datetime

from .conftest import FakeConnection, TEST_USER
from ..api.routes.routines import manage, read, share
from ..api.routes.routines.read import group_routine_days, fetch_day_exercises, canonical_day_order

def day_row(day_name, muscles, exercise_id=None, name=None):
    return {
        "day_id": uuid.uuid4(),
        "day_name": day_name,
        "muscles": muscles,
        "exercise_id": exercise_id,
        "exercise_name": name,
        "muscle": "pecho" if exercise_id else None,
        "description": None,
        "type": "fuerza" if exercise_id else None,
        "difficulty": "principiante" if exercise_id else None,
    }

def test_group_routine_days_keeps_order_and_empty_days():
    bench = uuid.uuid4()
    fly = uuid.uuid4()
    rows = [
        day_row("lunes", '["pecho", "triceps"]', bench, "press banca"),
        day_row("lunes", '["pecho", "triceps"]', fly, "aperturas"),
        day_row("miércoles", '["espalda"]'),
    ]

    days = group_routine_days(rows)

    assert [day["day_name"] for day in days] == ["lunes", "miércoles"]
    assert days[0]["muscles"] == ["pecho", "triceps"]
    assert [e["id"] for e in days[0]["exercises"]] == [str(bench), str(fly)]
    assert days[1]["exercises"] == []

@pytest.mark.asyncio
async def test_fetch_day_exercises_groups_series():
    assigned = uuid.uuid4()
    exercise = uuid.uuid4()
    base = {
        "muscles": '["pierna"]',
        "assigned_id": assigned,
        "exercise_id": exercise,
        "name": "sentadilla",
        "muscle": "pierna",
        "type": "fuerza",
        "sub_part": "cuadriceps",
        "image": None,
        "video": None,
        "rest_seconds": 120,
        "calories_per_set": 8.5,
        "approx_seconds": 30,
    }
    rows = [dict(base, repetitions=12), dict(base, repetitions=10)]
    conn = FakeConnection(handlers=[("from routine_days d", rows)])

    day = await fetch_day_exercises(conn, "r1", "lunes")

    assert day["muscles"] == ["pierna"]
    assert len(day["exercises"]) == 1
    assert day["exercises"][0]["id"] == str(exercise)
    assert day["exercises"][0]["rest_seconds"] == 120
    assert [s["repetitions"] for s in day["exercises"][0]["series"]] == [12, 10]

@pytest.mark.asyncio
async def test_fetch_day_exercises_unknown_day():
    day = await fetch_day_exercises(FakeConnection(), "r1", "domingo")
    assert day == {"muscles": [], "exercises": []}

def test_routine_day_requires_access(client, use_connection):
    use_connection(FakeConnection(handlers=[("sr.recipient_id = $2", False)]), read)

    response = client.get("/routines/abc/day/lunes")

    assert response.status_code == 400
    assert response.json() == {"message": "routine not found"}

def test_custom_routine(client, use_connection):
    muscles = {"a": "pecho", "b": "triceps", "c": "pierna"}
    conn = use_connection(
        FakeConnection(handlers=[
            ("select distinct muscle", lambda ids: [{"muscle": m} for m in sorted({muscles[i] for i in ids})]),
        ]),
        manage,
    )

    response = client.post("/routines/custom", json={
        "name": "Mi rutina",
        "level": "intermedio",
        "goal": "subir peso",
        "exercises": [
            {"exercise_id": "c", "day": "Jueves", "sets": 2, "reps": 10, "set_seconds": 40, "rest_seconds": 90},
            {"exercise_id": "a", "day": "lunes", "sets": 3, "reps": 8, "set_seconds": 30, "rest_seconds": 60},
            {"exercise_id": "b", "day": "lunes", "sets": 4, "reps": 12, "set_seconds": 30, "rest_seconds": 60},
        ]
    })

    assert response.status_code == 200
    assert response.json()["routine_id"] == conn.rows("routines")[0]["id"]

    days = conn.rows("routine_days")
    assert [(row["args"][1], row["args"][2], row["args"][3]) for row in days] == [
        ("lunes", '["pecho", "triceps"]', 0),
        ("jueves", '["pierna"]', 1),
    ]
    assigned = conn.rows("assigned_exercises")
    assert [(row["args"][1], row["args"][2]) for row in assigned] == [(0, "c"), (0, "a"), (1, "b")]
    assert len(conn.rows("assigned_sets")) == 2 + 3 + 4
    assert conn.rows("users")[0]["args"][1] == TEST_USER["user_id"]

def test_custom_routine_invalid_day(client, use_connection):
    conn = use_connection(FakeConnection(), manage)

    response = client.post("/routines/custom", json={
        "name": "Mi rutina",
        "level": "intermedio",
        "goal": "subir peso",
        "exercises": [
            {"exercise_id": "a", "day": "funday", "sets": 3, "reps": 8, "set_seconds": 30, "rest_seconds": 60},
        ]
    })

    assert response.status_code == 400
    assert conn.tables == {}

def test_delete_own_routine_cascades(client, use_connection):
    conn = use_connection(FakeConnection(handlers=[("select creator_id", TEST_USER["user_id"])]), manage)

    response = client.delete("/routines/r1")

    assert response.status_code == 200
    assert response.json() == {"status": "deleted"}
    assert "routines" in conn.tables
    assert "assigned_exercises" in conn.tables
    assert "shared_routines" in conn.tables

def test_delete_shared_routine_detaches(client, use_connection):
    conn = use_connection(FakeConnection(handlers=[("select creator_id", "someone-else")]), manage)

    response = client.delete("/routines/r1")

    assert response.status_code == 200
    assert response.json() == {"status": "detached"}
    assert "routines" not in conn.tables
    assert "shared_routines" in conn.tables

def test_share_requires_friendship(client, use_connection):
    conn = use_connection(FakeConnection(handlers=[("from friends", False)]), share)

    response = client.post("/routines/share", json={"target_id": "friend", "routine_ids": ["r1"]})

    assert response.status_code == 400
    assert conn.tables == {}

def test_share_notifies_recipient(client, use_connection):
    conn = use_connection(
        FakeConnection(handlers=[("from friends", True), ("select name", "Pierna")]),
        share,
    )

    response = client.post("/routines/share", json={"target_id": "friend", "routine_ids": ["r1"]})

    assert response.status_code == 200
    share_row = conn.rows("shared_routines")[0]
    assert share_row["args"] == ("r1", TEST_USER["user_id"], "friend")
    assert response.json() == {"share_ids": [share_row["id"]]}

    notification = conn.rows("notifications")[0]
    assert notification["args"][0] == "friend"
    assert notification["args"][1] == "rutina_compartida"
    assert notification["args"][5] == share_row["id"]

def test_all_routines_list_days_in_weekday_order(client, use_connection):
    routine_id = uuid.uuid4()
    routine = {
        "id": routine_id,
        "name": "Fuerza",
        "description": None,
        "level": "intermedio",
        "goal": "subir peso",
        "created_at": datetime(2024, 3, 2),
        "is_owner": True,
    }
    days = [
        {"routine_id": routine_id, "day_name": "viernes"},
        {"routine_id": routine_id, "day_name": "lunes"},
        {"routine_id": routine_id, "day_name": "miércoles"},
    ]
    conn = use_connection(
        FakeConnection(handlers=[("from routines r", [routine]), ("from routine_days d", days)]),
        read,
    )

    response = client.get("/routines/all")

    assert response.status_code == 200
    assert response.json()["routines"][0]["days"] == ["lunes", "miércoles", "viernes"]
    day_query = [query for query, _ in conn.queries if "from routine_days d" in query][0]
    assert "order by d.routine_id, order_index" in day_query

def test_canonical_day_order():
    assert canonical_day_order(["domingo", "lunes", "sábado"]) == ["lunes", "sábado", "domingo"]
    assert canonical_day_order([]) == []

def test_share_skips_routines_already_shared(client, use_connection):
    conn = use_connection(
        FakeConnection(handlers=[("from friends", True), ("select name", "Pierna"), ("from shared_routines", "share-0")]),
        share,
    )

    response = client.post("/routines/share", json={"target_id": "friend", "routine_ids": ["r1"]})

    assert response.status_code == 200
    assert response.json() == {"share_ids": ["share-0"]}
    assert conn.rows("shared_routines") == []
    assert conn.rows("notifications") == []
