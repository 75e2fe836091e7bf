from .conftest import FakeConnection, TEST_USER, catalog_exercise
from ..api.routes.routines import generate as generate_route
from ..api.routes.routines.tables import MUSCLE_SUB_PARTS

def request_body(**overrides):
    body = {
        "usuarioId": TEST_USER["user_id"],
        "nombreRutina": "Fuerza",
        "tiempoDisponible": "1 hora",
        "enfoqueUsuario": "todo",
        "diasEntrenamiento": ["Viernes", "lunes"],
        "objetivo": "subir peso",
        "nivel": "intermedio",
        "restricciones": [],
        "lugarEntrenamiento": "gimnasio",
    }
    body.update(overrides)
    return body

def gym_catalog():
    return [
        catalog_exercise(muscle, part)
        for muscle, parts in MUSCLE_SUB_PARTS.items()
        for part in parts
    ]

def test_generate_success(client, use_connection):
    conn = use_connection(FakeConnection(catalog=gym_catalog()), generate_route)

    response = client.post("/routines/generate", json=request_body())

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["rutinaId"] == conn.rows("routines")[0]["id"]
    assert [row["args"][1] for row in conn.rows("routine_days")] == ["lunes", "viernes"]
    assert len(conn.rows("assigned_exercises")) > 0
    assert conn.closed

def test_generate_accepts_snake_case_user_id(client, use_connection):
    use_connection(FakeConnection(catalog=gym_catalog()), generate_route)

    body = request_body()
    body["usuario_id"] = body.pop("usuarioId")
    response = client.post("/routines/generate", json=body)

    assert response.status_code == 201

def test_generate_without_user_id_uses_token(client, use_connection):
    conn = use_connection(FakeConnection(catalog=gym_catalog()), generate_route)

    body = request_body()
    del body["usuarioId"]
    del body["enfoqueUsuario"]
    del body["restricciones"]
    response = client.post("/routines/generate", json=body)

    assert response.status_code == 201
    assert conn.rows("routines")[0]["args"][0] == TEST_USER["user_id"]

def test_generate_invalid_days(client, use_connection):
    conn = use_connection(FakeConnection(catalog=gym_catalog()), generate_route)

    response = client.post("/routines/generate", json=request_body(diasEntrenamiento=["feriado", "weekend"]))

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "invalid training days"}
    assert conn.queries == []

def test_generate_missing_days(client):
    response = client.post("/routines/generate", json=request_body(diasEntrenamiento=[]))
    assert response.status_code == 422

def test_generate_configuration_error(client, use_connection):
    conn = use_connection(FakeConnection(catalog=gym_catalog()), generate_route)

    response = client.post("/routines/generate", json=request_body(objetivo="definir"))

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert "fullbody" in response.json()["message"]
    assert conn.tables == {}

def test_generate_unknown_level(client, use_connection):
    use_connection(FakeConnection(catalog=gym_catalog()), generate_route)

    response = client.post("/routines/generate", json=request_body(nivel="experto"))

    assert response.status_code == 400
    assert "experto" in response.json()["message"]

def test_generate_for_another_user(client, use_connection):
    use_connection(FakeConnection(catalog=gym_catalog()), generate_route)

    response = client.post("/routines/generate", json=request_body(usuarioId="someone-else"))

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "cannot generate a routine for another user"}

def test_generate_persistence_failure(client, use_connection):
    conn = use_connection(
        FakeConnection(catalog=gym_catalog(), fail_on=("insert into assigned_sets", 5)),
        generate_route,
    )

    response = client.post("/routines/generate", json=request_body())

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert conn.tables == {}
    assert conn.closed

def test_generate_requires_token():
    from fastapi.testclient import TestClient
    from ..main import app

    response = TestClient(app).post("/routines/generate", json=request_body())
    assert response.status_code in (401, 403)
