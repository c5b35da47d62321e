"""
Documentación OpenAPI agrupada por versión.

Endpoints:
- GET /v3/api-docs: schema completo (todas las rutas registradas)
- GET /v3/api-docs/swagger-config: grupos disponibles para Swagger UI
- GET /v3/api-docs/{group}: schema de un grupo (`api-v1`, ..., `api-latest`)
- GET /swagger-ui.html: UI navegable (query `?group=` para elegir grupo)

Los grupos se descubren una sola vez al crear la app (`OpenApiDocs.register_groups`).
Los schemas se generan recién en el primer request y quedan cacheados.
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.openapi.utils import get_openapi
from versioning_core.build_info import BuildInfo
from versioning_core.openapi_groups import (
    API_TITLE,
    DocGroup,
    apply_customizations,
    discover_groups,
    find_shadowed_paths,
    group_schema,
)

from .models.responses import SwaggerConfigResponse, SwaggerUrl
from .versioning import versioned_patterns

logger = logging.getLogger(__name__)

API_DOCS_PATH = "/v3/api-docs"
SWAGGER_UI_PATH = "/swagger-ui.html"
DESCRIPTION_RESOURCE = Path("openapi") / "description.html"

router = APIRouter(include_in_schema=False)


def load_description(resources_dir: Path) -> str:
    """Lee `openapi/description.html`; si no existe, descripción vacía."""
    path = Path(resources_dir) / DESCRIPTION_RESOURCE
    if not path.exists():
        logger.warning(f"No existe {path}, la documentación no tendrá descripción")
        return ""
    return path.read_text(encoding="utf-8").strip()


class OpenApiDocs:
    """
    Snapshot cacheado del schema OpenAPI de una app y de sus grupos.

    Las rutas se descubren a partir del schema que genera FastAPI (que sabe
    recorrer los routers incluidos), no inspeccionando `app.routes`. Ese
    mismo schema alimenta los grupos y el despacho por versión.

    No tiene más estado que ese cache: si se registran rutas nuevas después
    de generar el schema, hay que llamar `register_groups()` otra vez.
    """

    def __init__(self, app: FastAPI, build_info: BuildInfo, description_html: str = ""):
        self.app = app
        self.build_info = build_info
        self.description_html = description_html
        self._groups: Dict[str, DocGroup] = {}
        self._raw_schema: Optional[Dict[str, Any]] = None
        self._schema: Optional[Dict[str, Any]] = None
        self._group_schemas: Dict[str, Dict[str, Any]] = {}
        self._patterns_by_method: Dict[Optional[str], List[str]] = {}

    def raw_schema(self) -> Dict[str, Any]:
        """Schema tal como lo genera FastAPI, sin personalizar."""
        if self._raw_schema is None:
            raw = get_openapi(
                title=API_TITLE,
                version=self.build_info.version,
                routes=self.app.routes,
            )
            raw.setdefault("paths", {})
            self._raw_schema = raw
        return self._raw_schema

    def register_groups(self) -> List[DocGroup]:
        """
        Descubre los grupos a partir de las rutas registradas.

        Raises
        ------
        RuntimeError
            Si dentro de una versión una ruta genérica se declaró antes que
            una más específica que ella cubre (la específica sería inalcanzable).
        """
        started = time.monotonic()
        self.invalidate()
        paths = self.raw_schema()["paths"]

        shadowed = find_shadowed_paths(paths)
        if shadowed:
            detail = ", ".join(f"'{later}' (tapada por '{earlier}')" for earlier, later in shadowed)
            logger.error(f"[OpenAPI] Rutas inalcanzables: {detail}")
            raise RuntimeError(f"Rutas declaradas después de una más genérica: {detail}")

        groups = discover_groups(paths)
        self._groups = {group.name: group for group in groups}
        for group in groups:
            logger.debug(f"[OpenAPI] Registrando grupo '{group.name}' ({group.paths_to_match})")
        logger.debug(f"[OpenAPI] Grupos registrados en {(time.monotonic() - started) * 1000:.0f} ms")
        return groups

    @property
    def groups(self) -> List[DocGroup]:
        return list(self._groups.values())

    def invalidate(self) -> None:
        self._raw_schema = None
        self._schema = None
        self._group_schemas.clear()
        self._patterns_by_method.clear()

    def versioned_patterns(self, method: Optional[str] = None) -> List[str]:
        """Patrones versionados registrados que aceptan `method` (cacheado)."""
        if method not in self._patterns_by_method:
            self._patterns_by_method[method] = versioned_patterns(self.raw_schema()["paths"], method)
        return self._patterns_by_method[method]

    def schema(self) -> Dict[str, Any]:
        if self._schema is None:
            self._schema = apply_customizations(
                self.raw_schema(), self.build_info, self.description_html
            )
        return self._schema

    def group_schema(self, name: str) -> Dict[str, Any]:
        """
        Raises
        ------
        KeyError
            Si el grupo no existe.
        """
        group = self._groups[name]
        if name not in self._group_schemas:
            self._group_schemas[name] = group_schema(self.schema(), group)
        return self._group_schemas[name]

    def swagger_urls(self) -> List[SwaggerUrl]:
        if not self._groups:
            return [SwaggerUrl(url=API_DOCS_PATH, name="default")]
        return [
            SwaggerUrl(url=f"{API_DOCS_PATH}/{name}", name=name)
            for name in self._groups
        ]


def install_docs(app: FastAPI, build_info: BuildInfo, description_html: str = "") -> OpenApiDocs:
    """Registra los grupos y deja el exposer en `app.state.openapi_docs`."""
    docs = OpenApiDocs(app, build_info, description_html)
    app.state.openapi_docs = docs
    app.include_router(router)
    docs.register_groups()
    return docs


def _docs(request: Request) -> OpenApiDocs:
    return request.app.state.openapi_docs


@router.get(API_DOCS_PATH)
async def api_docs(request: Request):
    """Schema completo."""
    return _docs(request).schema()


@router.get(f"{API_DOCS_PATH}/swagger-config", response_model=SwaggerConfigResponse, response_model_by_alias=True)
async def swagger_config(request: Request):
    """Grupos disponibles, en el formato que espera Swagger UI."""
    return SwaggerConfigResponse(
        config_url=f"{API_DOCS_PATH}/swagger-config",
        urls=_docs(request).swagger_urls(),
    )


@router.get(API_DOCS_PATH + "/{group}")
async def api_docs_group(group: str, request: Request):
    """Schema de un grupo."""
    try:
        return _docs(request).group_schema(group)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Grupo OpenAPI '{group}' no encontrado")


@router.get(SWAGGER_UI_PATH)
async def swagger_ui(request: Request, group: Optional[str] = None):
    """UI de Swagger apuntando al grupo pedido (o al primero)."""
    urls = _docs(request).swagger_urls()
    selected = next((u for u in urls if u.name == group), urls[0])
    return get_swagger_ui_html(
        openapi_url=selected.url,
        title=f"{API_TITLE} - {selected.name}",
        swagger_ui_parameters={
            # StandaloneLayout muestra la barra superior con el selector de grupos
            "layout": "StandaloneLayout",
            "urls": [u.model_dump() for u in urls],
            "urls.primaryName": selected.name,
        },
    )
