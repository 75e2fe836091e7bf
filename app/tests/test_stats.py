import pytest
from datetime import date

from .conftest import FakeConnection, TEST_USER
from ..api.routes.stats import exercise_logs, completion
from ..api.routes.stats.exercise_logs import group_sets_by_date
from ..api.routes.stats.completion import day_completed

USER_ID = TEST_USER["user_id"]

def test_group_sets_by_date():
    rows = [
        {"logged_on": date(2024, 3, 2), "set_number": 1, "weight": 60.0, "repetitions": 10},
        {"logged_on": date(2024, 3, 2), "set_number": 2, "weight": 62.5, "repetitions": 8},
        {"logged_on": date(2024, 2, 27), "set_number": 1, "weight": 55.0, "repetitions": 12},
    ]

    history = group_sets_by_date(rows)

    assert list(history.keys()) == ["2024-03-02", "2024-02-27"]
    assert [s["weight"] for s in history["2024-03-02"]] == [60.0, 62.5]
    assert history["2024-02-27"] == [{"set_number": 1, "weight": 55.0, "repetitions": 12}]

def test_save_replaces_sets_of_the_date(client, use_connection):
    conn = use_connection(FakeConnection(), exercise_logs)

    response = client.post("/stats/exercise/save", json={
        "exercise_id": "ex-1",
        "date": "2024-03-02",
        "sets": [
            {"set_number": 1, "weight": 60, "repetitions": 10},
            {"set_number": 2, "weight": 62.5, "repetitions": 8},
        ]
    })

    assert response.json() == {"status": "saved"}
    assert conn.commits == 1
    stat_id = conn.rows("exercise_stats")[0]["id"]
    date_row = conn.rows("stat_dates")[0]
    assert date_row["args"] == (stat_id, date(2024, 3, 2))
    assert conn.rows("stat_sets")[0]["args"] == (date_row["id"],)
    assert [row["args"][1:] for row in conn.rows("stat_sets")[1:]] == [(1, 60.0, 10), (2, 62.5, 8)]

def test_save_needs_sets(client):
    response = client.post("/stats/exercise/save", json={"exercise_id": "ex-1", "date": "2024-03-02", "sets": []})
    assert response.status_code == 422

def test_sets_without_history(client, use_connection):
    use_connection(FakeConnection(handlers=[("max(d.logged_on)", None)]), exercise_logs)

    response = client.get("/stats/exercise/sets", params={"exercise_id": "ex-1"})

    assert response.json() == {"date": None, "sets": []}

def test_sets_default_to_latest_date(client, use_connection):
    conn = use_connection(
        FakeConnection(handlers=[
            ("max(d.logged_on)", date(2024, 3, 2)),
            ("from stat_sets ss", [{"set_number": 1, "weight": 60.0, "repetitions": 10}]),
        ]),
        exercise_logs,
    )

    response = client.get("/stats/exercise/sets", params={"exercise_id": "ex-1"})

    assert response.json() == {"date": "2024-03-02", "sets": [{"set_number": 1, "weight": 60.0, "repetitions": 10}]}
    assert conn.queries[-1][1] == (USER_ID, "ex-1", date(2024, 3, 2))

def test_complete_exercise_twice(client, use_connection):
    use_connection(FakeConnection(handlers=[("into completed_exercises", None)]), completion)

    response = client.post("/stats/exercise/complete", json={"exercise_id": "ex-1", "date": "2024-03-02"})

    assert response.status_code == 400
    assert response.json() == {"message": "exercise already completed on this date"}

def test_complete_exercise(client, use_connection):
    conn = use_connection(FakeConnection(), completion)

    response = client.post("/stats/exercise/complete", json={"exercise_id": "ex-1", "date": "2024-03-02"})

    assert response.json()["status"] == "completed"
    assert conn.rows("completed_exercises")[0]["args"] == (USER_ID, "ex-1", date(2024, 3, 2))

@pytest.mark.asyncio
async def test_day_completed_counts_only_the_user():
    seen = {}

    def count(user_id, on_date, exercise_ids):
        seen["args"] = (user_id, on_date, exercise_ids)
        return 2

    conn = FakeConnection(handlers=[
        ("from assigned_exercises ae", [{"exercise_id": "a"}, {"exercise_id": "b"}]),
        ("count(distinct exercise_id)", count),
    ])

    assert await day_completed(conn, USER_ID, "r1", " Lunes ", date(2024, 3, 4)) is True
    assert seen["args"] == (USER_ID, date(2024, 3, 4), ["a", "b"])
    assert conn.queries[0][1] == ("r1", "lunes")

@pytest.mark.asyncio
async def test_day_completed_partial_and_empty():
    partial = FakeConnection(handlers=[
        ("from assigned_exercises ae", [{"exercise_id": "a"}, {"exercise_id": "b"}]),
        ("count(distinct exercise_id)", 1),
    ])
    assert await day_completed(partial, USER_ID, "r1", "lunes", date(2024, 3, 4)) is False

    empty = FakeConnection()
    assert await day_completed(empty, USER_ID, "r1", "lunes", date(2024, 3, 4)) is False

def test_routine_completed(client, use_connection):
    use_connection(FakeConnection(handlers=[("from completed_routines", True)]), completion)

    response = client.get("/stats/routine/completed", params={"date": "2024-03-04"})

    assert response.json() == {"completed": True}
