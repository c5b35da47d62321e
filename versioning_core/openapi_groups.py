from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass
from itertools import groupby
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .build_info import BuildInfo
from .path_matching import LATEST, AntPathMatcher, parse_version

"""
versioning_core.openapi_groups
==============================

Lógica (sin FastAPI) para partir el schema OpenAPI en grupos por versión
y aplicarle las personalizaciones comunes.

Grupos
------
De los paths registrados se toma el primer segmento (scope, ej. "api") y el
segundo (versión, ej. "v2"). Por cada scope se registra un grupo por versión
encontrada más un grupo `latest`:

    api-v1, api-v2, api-v3, api-latest

El grupo `api-v2` documenta la API tal como la ve un cliente de v2: incluye
los paths de v1 y v2, reescritos a `/api/v2/...`; si un recurso existe en
ambas versiones, gana la más nueva. `api-latest` incluye todas las versiones.

Personalizaciones
-----------------
- `info` con título, versión de build y descripción (+ hora de build).
- Parámetros de header `X-Application-Id` y `X-User-Id` en TODAS las
  operaciones (como `$ref` a components).
- Requisito de seguridad `access-token` en las operaciones de `session`.
"""

logger = logging.getLogger(__name__)

API_TITLE = "Demo API versioning application with Swagger"
REPOSITORY_URL = "https://github.com/mcdimus/demo-spring-api-versioning-and-swagger"

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

_GROUPED_PATH = re.compile(r"/(?P<scope>[^/]+)/(?P<version>v\d{1,2})(?:/.*)?")
SECURED_RESOURCE_REGEX = re.compile(r"/api/v\d{1,2}/session(?:/.*)?")

HEADER_PARAMETER_REFS = (
    "#/components/parameters/header-x-application-id",
    "#/components/parameters/header-x-user-id",
)

COMPONENT_PARAMETERS = {
    "header-x-application-id": {
        "name": "X-Application-Id",
        "in": "header",
        "required": True,
        "schema": {"type": "string", "default": "swagger-ui"},
    },
    "header-x-user-id": {
        "name": "X-User-Id",
        "in": "header",
        "required": True,
        "schema": {"type": "string", "default": "swagger-ui"},
    },
}

SECURITY_SCHEMES = {
    "access-token": {
        "type": "http",
        "scheme": "bearer",
        "in": "header",
        "name": "Authorization",
    },
}


@dataclass(frozen=True)
class DocGroup:
    """Grupo de documentación `<scope>-<version>`."""

    scope: str
    version: str

    @property
    def name(self) -> str:
        return f"{self.scope}-{self.version}"

    @property
    def paths_to_match(self) -> str:
        return f"/{self.scope}/**"

    @property
    def max_version(self) -> int:
        return parse_version(self.version)


def _version_sort_key(version: str) -> int:
    return parse_version(version)


def discover_groups(paths: Iterable[str]) -> List[DocGroup]:
    """
    Arma los grupos a partir de los paths registrados.

    Los paths sin forma `/<scope>/v<N>/...` (ej. `/health`, `/docs`) no
    generan grupos.
    """
    versions_per_scope: Dict[str, set] = {}
    for path in paths:
        match = _GROUPED_PATH.fullmatch(path)
        if not match:
            continue
        versions_per_scope.setdefault(match.group("scope"), set()).add(match.group("version"))

    groups = []
    for scope in sorted(versions_per_scope):
        versions = versions_per_scope[scope] | {LATEST}
        for version in sorted(versions, key=_version_sort_key):
            groups.append(DocGroup(scope=scope, version=version))
    return groups


def _path_version(path: str) -> Optional[int]:
    match = _GROUPED_PATH.fullmatch(path)
    return parse_version(match.group("version")) if match else None


def filter_paths_for_group(paths: Dict[str, Any], group: DocGroup) -> Dict[str, Any]:
    """
    Devuelve los `paths` de OpenAPI tal como los ve un cliente del grupo.

    Se recorren las versiones en orden ascendente; cada path se reescribe de
    `/v<k>/` a `/<version del grupo>/`, así las versiones nuevas pisan a las
    viejas cuando reescriben al mismo path.
    """
    matcher = AntPathMatcher()
    versioned = []
    for path, item in paths.items():
        if not matcher.match(group.paths_to_match, path):
            continue
        version = _path_version(path)
        if version is not None:
            versioned.append((version, path, item))
    versioned.sort(key=lambda entry: entry[0])

    new_paths: Dict[str, Any] = {}
    for version, entries in groupby(versioned, key=lambda entry: entry[0]):
        if group.version != LATEST and version > group.max_version:
            continue
        for _, path, item in entries:
            new_paths[path.replace(f"/v{version}/", f"/{group.version}/")] = item
    return new_paths


def customize_operations(paths: Dict[str, Any]) -> Dict[str, Any]:
    """
    Agrega los headers comunes a cada operación y seguridad a las de `session`.

    Modifica y devuelve el mismo dict.
    """
    for path, path_item in paths.items():
        secured = SECURED_RESOURCE_REGEX.fullmatch(path) is not None
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if operation is None:
                continue
            header_refs = [{"$ref": ref} for ref in HEADER_PARAMETER_REFS]
            operation["parameters"] = header_refs + list(operation.get("parameters") or [])
            if secured:
                operation.setdefault("security", []).append({"access-token": []})
    return paths


def build_info_section(build_info: BuildInfo, description_html: str) -> Dict[str, Any]:
    """Bloque `info` del schema."""
    return {
        "title": API_TITLE,
        "version": build_info.version,
        "description": (
            description_html
            + f"<hr/><p>Buildtime (UTC): {build_info.time_str()}<p/><hr/>"
        ),
    }


def apply_customizations(
    schema: Dict[str, Any],
    build_info: BuildInfo,
    description_html: str,
) -> Dict[str, Any]:
    """
    Aplica info, externalDocs, components y personalización de operaciones.

    No modifica `schema`: trabaja sobre una copia profunda.
    """
    schema = copy.deepcopy(schema)
    schema["info"] = build_info_section(build_info, description_html)
    schema["externalDocs"] = {"description": "GitHub repository", "url": REPOSITORY_URL}

    components = schema.setdefault("components", {})
    components.setdefault("parameters", {}).update(copy.deepcopy(COMPONENT_PARAMETERS))
    components.setdefault("securitySchemes", {}).update(copy.deepcopy(SECURITY_SCHEMES))

    schema["paths"] = customize_operations(schema.get("paths") or {})
    return schema


def group_schema(schema: Dict[str, Any], group: DocGroup) -> Dict[str, Any]:
    """Copia del schema (ya personalizado) restringida a un grupo."""
    grouped = copy.deepcopy(schema)
    grouped["paths"] = filter_paths_for_group(grouped.get("paths") or {}, group)
    logger.debug(f"Grupo '{group.name}': {len(grouped['paths'])} paths")
    return grouped


def _operation_methods(path_item: Dict[str, Any]) -> set:
    return {method for method in HTTP_METHODS if method in path_item}


def find_shadowed_paths(paths: Dict[str, Any]) -> List[Tuple[str, str]]:
    """
    Pares `(anterior, inalcanzable)` dentro de una misma versión.

    El router despacha en orden de registro: si un patrón genérico
    (`/api/v2/person/{id}`) se registró antes que uno más específico que él
    cubre (`/api/v2/person/1`) para el mismo método, el específico nunca se
    atiende. `paths` tiene que venir en orden de registro.
    """
    matcher = AntPathMatcher()
    entries = list(paths.items())
    shadowed = []
    for index, (earlier, earlier_item) in enumerate(entries):
        for later, later_item in entries[index + 1:]:
            if _path_version(earlier) != _path_version(later):
                continue
            if not _operation_methods(earlier_item) & _operation_methods(later_item):
                continue
            if matcher.match(earlier, later) and not matcher.match(later, earlier):
                shadowed.append((earlier, later))
    return shadowed
