"""
Middleware ASGI que resuelve la versión de cada request.

Para un request a `/api/<version>/...` busca, entre los paths versionados
registrados en la app (y que aceptan el método del request), el patrón
preferido según `VersionedPathMatcher` y reescribe el segmento de versión
del path a la versión de ese patrón. Después el router de Starlette despacha
normalmente:

    /api/v3/session/7    -> /api/v1/session/7
    /api/latest/person   -> /api/v3/person
    /api/v2/person/1     -> /api/v2/person/1 (handler hardcodeado de v2)

Los paths registrados salen del schema OpenAPI de la app
(`app.state.openapi_docs`), así no depende de cómo guarde FastAPI los
routers incluidos. Si ningún patrón matchea, el request pasa sin cambios
(y termina en 404).
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from starlette.types import ASGIApp, Receive, Scope, Send

from versioning_core.path_matching import (
    VERSIONED_PATH_REGEX,
    VersionedPathMatcher,
    api_version,
    replace_version,
)

logger = logging.getLogger(__name__)


def _schema_method(method: str) -> str:
    # HEAD lo atiende el handler GET
    method = method.lower()
    return "get" if method == "head" else method


def versioned_patterns(paths: Dict[str, Any], method: Optional[str] = None) -> List[str]:
    """
    Patrones (`/api/v1/person/{id}`) versionados de un dict `paths` de OpenAPI.

    Con `method`, solo los que tienen una operación para ese método.
    """
    wanted = _schema_method(method) if method else None
    return [
        path for path, path_item in paths.items()
        if api_version(path) is not None and (wanted is None or wanted in path_item)
    ]


def resolve_path(
    path: str,
    patterns: Iterable[str],
    matcher: Optional[VersionedPathMatcher] = None,
) -> str:
    """
    Devuelve el path que el router debe despachar para `path`.

    Si `path` no es versionado o no hay patrón que lo atienda, lo devuelve igual.
    """
    if api_version(path) is None:
        return path

    matcher = matcher or VersionedPathMatcher()
    best = matcher.best_match(patterns, path)
    if best is None:
        return path

    version_segment = VERSIONED_PATH_REGEX.fullmatch(best).group("version")
    return replace_version(path, version_segment)


class VersionedRoutingMiddleware:
    """Reescribe la versión del path antes del ruteo (ver docstring del módulo)."""

    def __init__(self, app: ASGIApp, matcher: Optional[VersionedPathMatcher] = None) -> None:
        self.app = app
        self.matcher = matcher or VersionedPathMatcher()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or "app" not in scope:
            await self.app(scope, receive, send)
            return

        docs = getattr(scope["app"].state, "openapi_docs", None)
        path = scope["path"]
        if docs is None or api_version(path) is None:
            await self.app(scope, receive, send)
            return

        resolved = resolve_path(path, docs.versioned_patterns(scope.get("method")), self.matcher)
        if resolved != path:
            logger.debug(f"{scope.get('method')} {path} -> {resolved}")
            scope = dict(scope)
            scope["path"] = resolved
            scope["raw_path"] = resolved.encode("utf-8")

        await self.app(scope, receive, send)
