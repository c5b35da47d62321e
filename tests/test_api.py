"""
Tests de la API HTTP: despacho por versión, health y documentación agrupada.
"""

import pytest
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from fastapi.testclient import TestClient

from api.main import create_app
from api.versioning import resolve_path, versioned_patterns
from versioning_core.openapi_groups import find_shadowed_paths


@pytest.fixture
def client():
    """Cliente contra la app con los endpoints demo."""
    return TestClient(create_app())


@pytest.fixture
def empty_client():
    """Cliente contra una app sin rutas de negocio."""
    return TestClient(create_app(routers=[]))


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/api/v1/person", "answer from person_v1.get_all"),
        ("/api/v1/person/1", "answer from person_v1.get_by_id(1)"),
        ("/api/v2/person", "answer from person_v2.get_all"),
        ("/api/v2/person/1", "answer from person_v2.get_by_id(HARDCODED 1)"),
        ("/api/v2/person/7", "answer from person_v2.get_by_id(7)"),
        ("/api/v3/person/1", "answer from person_v3.get_by_id(1)"),
        ("/api/v4/person/9", "answer from person_v3.get_by_id(9)"),
        ("/api/latest/person", "answer from person_v3.get_all"),
        ("/api/v1/session", "answer from session_v1.get_all"),
        ("/api/v3/session/5", "answer from session_v1.get_by_id(5)"),
        ("/api/latest/session/5", "answer from session_v1.get_by_id(5)"),
    ],
)
def test_request_is_served_by_newest_compatible_version(client, path, expected):
    response = client.get(path)

    assert response.status_code == 200
    assert response.text == expected


def test_unknown_resource_is_404(client):
    assert client.get("/api/v1/unknown").status_code == 404


def test_health_reports_placeholder_build(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["version"] == "0.0.0-placeholder"
    assert body["build_time"] is None


def test_full_schema_lists_every_registered_route(client):
    schema = client.get("/v3/api-docs").json()

    assert "/api/v1/person" in schema["paths"]
    assert "/api/v3/person/{id}" in schema["paths"]
    assert "/health" not in schema["paths"]
    assert schema["info"]["version"] == "0.0.0-placeholder"
    assert "Buildtime (UTC): n/a" in schema["info"]["description"]


def test_swagger_config_lists_groups(client):
    config = client.get("/v3/api-docs/swagger-config").json()

    assert config["configUrl"] == "/v3/api-docs/swagger-config"
    assert [url["name"] for url in config["urls"]] == ["api-v1", "api-v2", "api-v3", "api-latest"]
    assert config["urls"][1]["url"] == "/v3/api-docs/api-v2"


def test_group_v1_only_documents_v1(client):
    paths = client.get("/v3/api-docs/api-v1").json()["paths"]

    assert set(paths) == {
        "/api/v1/person",
        "/api/v1/person/{id}",
        "/api/v1/session",
        "/api/v1/session/{id}",
    }


def test_group_v2_overrides_older_versions(client):
    paths = client.get("/v3/api-docs/api-v2").json()["paths"]

    assert set(paths) == {
        "/api/v2/person",
        "/api/v2/person/1",
        "/api/v2/person/{id}",
        "/api/v2/session",
        "/api/v2/session/{id}",
    }
    assert paths["/api/v2/person/{id}"]["get"]["summary"] == "Obtener persona (v2)"


def test_group_latest_uses_newest_handlers(client):
    paths = client.get("/v3/api-docs/api-latest").json()["paths"]

    assert paths["/api/latest/person"]["get"]["summary"] == "Listar personas (v3)"
    assert paths["/api/latest/session"]["get"]["summary"] == "Listar sesiones"
    assert all(path.startswith("/api/latest/") for path in paths)


def test_operations_carry_headers_and_session_security(client):
    paths = client.get("/v3/api-docs/api-v1").json()["paths"]

    session_op = paths["/api/v1/session/{id}"]["get"]
    refs = [param.get("$ref") for param in session_op["parameters"]]
    assert refs[:2] == [
        "#/components/parameters/header-x-application-id",
        "#/components/parameters/header-x-user-id",
    ]
    assert session_op["security"] == [{"access-token": []}]
    assert "security" not in paths["/api/v1/person"]["get"]


def test_unknown_group_is_404(client):
    assert client.get("/v3/api-docs/api-v9").status_code == 404


def test_swagger_ui_page(client):
    response = client.get("/swagger-ui.html", params={"group": "api-v2"})

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "/v3/api-docs/api-v2" in response.text
    # Layout con la barra superior: sin él Swagger UI ignora `urls` y no hay selector
    assert '"layout": "StandaloneLayout"' in response.text
    for name in ("api-v1", "api-v2", "api-v3", "api-latest"):
        assert f"/v3/api-docs/{name}" in response.text


def test_app_without_routes_exposes_valid_empty_schema(empty_client):
    response = empty_client.get("/v3/api-docs")

    assert response.status_code == 200
    schema = response.json()
    assert schema["openapi"].startswith("3.")
    assert schema["paths"] == {}

    config = empty_client.get("/v3/api-docs/swagger-config").json()
    assert config["urls"] == [{"url": "/v3/api-docs", "name": "default"}]
    assert empty_client.get("/swagger-ui.html").status_code == 200


def test_routes_are_discovered_from_included_routers(client):
    docs = client.app.state.openapi_docs

    assert [group.name for group in docs.groups] == ["api-v1", "api-v2", "api-v3", "api-latest"]
    assert "/api/v1/person" in docs.versioned_patterns("GET")
    assert "/api/v1/session/{id}" in docs.versioned_patterns("GET")


def test_version_older_than_every_route_is_404(client):
    assert client.get("/api/v0/person").status_code == 404
    assert client.get("/api/v0/person/1").status_code == 404


@pytest.fixture
def thing_client():
    """App donde v1 tiene GET y POST, y v2 solo redefine GET."""
    v1 = APIRouter(prefix="/api/v1/thing", default_response_class=PlainTextResponse)
    v2 = APIRouter(prefix="/api/v2/thing", default_response_class=PlainTextResponse)

    @v1.get("")
    async def get_thing_v1():
        return "thing_v1.get"

    @v1.post("")
    async def create_thing_v1():
        return "thing_v1.create"

    @v2.get("")
    async def get_thing_v2():
        return "thing_v2.get"

    return TestClient(create_app(routers=[v1, v2]))


def test_dispatch_picks_newest_version_per_method(thing_client):
    assert thing_client.get("/api/v2/thing").text == "thing_v2.get"
    assert thing_client.post("/api/v2/thing").text == "thing_v1.create"
    assert thing_client.post("/api/latest/thing").text == "thing_v1.create"
    assert thing_client.get("/api/v1/thing").text == "thing_v1.get"


def test_versioned_patterns_filter_by_method():
    paths = {
        "/api/v1/thing": {"get": {}, "post": {}},
        "/api/v2/thing": {"get": {}},
        "/health": {"get": {}},
    }

    assert versioned_patterns(paths, "POST") == ["/api/v1/thing"]
    assert versioned_patterns(paths, "HEAD") == ["/api/v1/thing", "/api/v2/thing"]
    assert versioned_patterns(paths) == ["/api/v1/thing", "/api/v2/thing"]
    assert resolve_path("/api/v2/thing", versioned_patterns(paths, "POST")) == "/api/v1/thing"


def test_generic_route_declared_before_specific_one_fails_at_startup():
    router = APIRouter(prefix="/api/v1/item", default_response_class=PlainTextResponse)

    @router.get("/{id}")
    async def get_item(id: int):
        return f"item {id}"

    @router.get("/1")
    async def get_first_item():
        return "first item"

    with pytest.raises(RuntimeError, match="/api/v1/item/1"):
        create_app(routers=[router])


def test_demo_routes_have_no_unreachable_handlers(client):
    assert find_shadowed_paths(client.app.state.openapi_docs.raw_schema()["paths"]) == []
