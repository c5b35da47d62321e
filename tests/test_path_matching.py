"""
Tests del matcher de paths versionados.

Verifica que:
1) Un patrón versionado atiende versiones iguales o posteriores, nunca anteriores
2) `latest` cae siempre en el patrón más nuevo
3) El orden de preferencia es: misma versión, versión descendente, especificidad
"""

import pytest

from versioning_core.path_matching import (
    LATEST_VERSION,
    AntPathMatcher,
    VersionedPathMatcher,
    api_version,
    replace_version,
)


@pytest.fixture
def matcher():
    return VersionedPathMatcher()


def test_api_version_parsing():
    assert api_version("/api/v1/person") == 1
    assert api_version("/api/v12/person/{id}") == 12
    assert api_version("/api/latest/person") == LATEST_VERSION
    assert api_version("/health") is None
    assert api_version("/api/v123/person") is None


def test_replace_version():
    assert replace_version("/api/v3/session/7", "v1") == "/api/v1/session/7"
    assert replace_version("/api/latest/person", "v3") == "/api/v3/person"
    assert replace_version("/health", "v1") == "/health"


def test_ant_matching_basics():
    ant = AntPathMatcher()
    assert ant.match("/api/v1/person/{id}", "/api/v1/person/42")
    assert not ant.match("/api/v1/person/{id}", "/api/v1/person/42/extra")
    assert ant.match("/api/*/person", "/api/v1/person")
    assert ant.match("/api/**", "/api/v1/person/42")
    assert ant.match("/api/**", "/api")
    assert ant.match("/files/?.txt", "/files/a.txt")
    assert not ant.match("/files/?.txt", "/files/ab.txt")


def test_versioned_pattern_serves_same_or_later_versions(matcher):
    assert matcher.match("/api/v1/session", "/api/v1/session")
    assert matcher.match("/api/v1/session", "/api/v3/session")
    assert matcher.match("/api/v1/session/{id}", "/api/v2/session/7")
    assert not matcher.match("/api/v2/person", "/api/v1/person")


def test_latest_matches_every_numeric_version(matcher):
    assert matcher.match("/api/v1/person", "/api/latest/person")
    assert matcher.match("/api/v3/person/{id}", "/api/latest/person/5")
    assert not matcher.match("/api/latest/person", "/api/v3/person")


def test_non_versioned_paths_use_plain_matching(matcher):
    assert matcher.match("/health", "/health")
    assert not matcher.match("/api/v1/person", "/health")
    assert not matcher.match("/health", "/api/v1/health")


def test_pattern_order_prefers_same_version_then_newer_then_specific(matcher):
    patterns = [
        "/api/v1/hotels/*",
        "/api/v3/hotels/{hotel}",
        "/api/v2/hotels/*",
        "/api/v1/hotels/new",
        "/api/v3/hotels/new",
        "/api/v2/hotels/{hotel}",
        "/api/v1/hotels/{hotel}",
        "/api/v3/hotels/*",
        "/api/v2/hotels/new",
    ]

    assert matcher.sort_patterns(patterns, "/api/v2/hotels/2") == [
        "/api/v2/hotels/new",
        "/api/v2/hotels/{hotel}",
        "/api/v2/hotels/*",
        "/api/v3/hotels/new",
        "/api/v3/hotels/{hotel}",
        "/api/v3/hotels/*",
        "/api/v1/hotels/new",
        "/api/v1/hotels/{hotel}",
        "/api/v1/hotels/*",
    ]


def test_best_match_falls_back_to_previous_version(matcher):
    patterns = ["/api/v1/person/{id}", "/api/v2/person/1", "/api/v2/person/{id}", "/api/v3/person/{id}"]

    assert matcher.best_match(patterns, "/api/v2/person/1") == "/api/v2/person/1"
    assert matcher.best_match(patterns, "/api/v2/person/7") == "/api/v2/person/{id}"
    assert matcher.best_match(patterns, "/api/v1/person/1") == "/api/v1/person/{id}"
    assert matcher.best_match(patterns, "/api/v9/person/1") == "/api/v3/person/{id}"
    assert matcher.best_match(patterns, "/api/latest/person/3") == "/api/v3/person/{id}"
    assert matcher.best_match(patterns, "/api/v1/session") is None


def test_versions_older_than_every_pattern_have_no_match(matcher):
    patterns = ["/api/v1/person", "/api/v1/person/{id}", "/api/v3/person/{id}"]

    assert matcher.best_match(patterns, "/api/v0/person/1") is None
    assert matcher.best_match(patterns, "/api/v0/person") is None
