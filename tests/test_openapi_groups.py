"""
Tests de la lógica de grupos OpenAPI (sin levantar la app).
"""

from datetime import datetime, timezone

from versioning_core.build_info import BuildInfo
from versioning_core.openapi_groups import (
    DocGroup,
    apply_customizations,
    customize_operations,
    discover_groups,
    filter_paths_for_group,
    find_shadowed_paths,
)


def _item(label):
    return {"get": {"summary": label}}


def test_discover_groups_adds_latest_per_scope():
    groups = discover_groups([
        "/api/v1/person",
        "/api/v3/person/{id}",
        "/api/v1/session",
        "/health",
        "/v3/api-docs",
    ])

    assert [group.name for group in groups] == ["api-v1", "api-v3", "api-latest"]
    assert groups[0].paths_to_match == "/api/**"


def test_discover_groups_without_routes_is_empty():
    assert discover_groups([]) == []
    assert discover_groups(["/", "/health"]) == []


def test_filter_paths_rewrites_and_newer_versions_win():
    paths = {
        "/api/v1/person": _item("person v1"),
        "/api/v2/person": _item("person v2"),
        "/api/v3/person": _item("person v3"),
        "/api/v1/session": _item("session v1"),
        "/health": _item("health"),
    }

    v2 = filter_paths_for_group(paths, DocGroup("api", "v2"))
    assert v2 == {
        "/api/v2/person": _item("person v2"),
        "/api/v2/session": _item("session v1"),
    }

    latest = filter_paths_for_group(paths, DocGroup("api", "latest"))
    assert latest["/api/latest/person"] == _item("person v3")
    assert latest["/api/latest/session"] == _item("session v1")
    assert len(latest) == 2


def test_customize_operations_adds_headers_and_session_security():
    paths = {
        "/api/v1/session/{id}": {"get": {"parameters": [{"name": "id", "in": "path"}]}},
        "/api/v1/person": {"get": {}},
    }

    customize_operations(paths)

    session_op = paths["/api/v1/session/{id}"]["get"]
    assert [p.get("$ref") for p in session_op["parameters"][:2]] == [
        "#/components/parameters/header-x-application-id",
        "#/components/parameters/header-x-user-id",
    ]
    assert session_op["parameters"][2]["name"] == "id"
    assert session_op["security"] == [{"access-token": []}]

    person_op = paths["/api/v1/person"]["get"]
    assert len(person_op["parameters"]) == 2
    assert "security" not in person_op


def test_apply_customizations_uses_build_info_and_keeps_input_untouched():
    info = BuildInfo(
        group="g", artifact="a", name="a", version="2.1.0",
        time=datetime(2024, 5, 1, 10, 11, 12, 123000, tzinfo=timezone.utc),
    )
    raw = {"openapi": "3.1.0", "info": {"title": "x", "version": "y"}, "paths": {}}

    schema = apply_customizations(raw, info, "<p>Demo</p>")

    assert schema["info"]["version"] == "2.1.0"
    assert schema["info"]["description"] == (
        "<p>Demo</p><hr/><p>Buildtime (UTC): 2024-05-01T10:11:12.123Z<p/><hr/>"
    )
    assert schema["externalDocs"]["description"] == "GitHub repository"
    assert set(schema["components"]["parameters"]) == {"header-x-application-id", "header-x-user-id"}
    assert schema["components"]["securitySchemes"]["access-token"]["scheme"] == "bearer"
    assert schema["paths"] == {}
    assert raw["info"] == {"title": "x", "version": "y"}


def test_generic_route_declared_first_shadows_specific_one():
    paths = {
        "/api/v2/person/{id}": _item("generic"),
        "/api/v2/person/1": _item("hardcoded"),
    }

    assert find_shadowed_paths(paths) == [("/api/v2/person/{id}", "/api/v2/person/1")]


def test_specific_route_declared_first_is_reachable():
    paths = {
        "/api/v2/person/1": _item("hardcoded"),
        "/api/v2/person/{id}": _item("generic"),
        # distinta versión o distinto método: no compiten
        "/api/v3/person/{id}": _item("v3"),
        "/api/v3/person/2": {"post": {"summary": "create"}},
    }

    assert find_shadowed_paths(paths) == []
