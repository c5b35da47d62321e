# versioning_core/config.py
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

from dotenv import load_dotenv

"""
versioning_core.config
======================

Gestión centralizada de configuración de la aplicación.

Este módulo define:
- La estructura de configuración (`Settings`)
- El mecanismo para cargar variables desde entorno (.env)
- Un acceso único y cacheado a la configuración (`get_settings`)

Convenciones
------------
- Las variables de entorno se cargan desde un archivo `.env` si existe.
- Los defaults están pensados para desarrollo local.
- `resources_dir` apunta por defecto a `build/resources` si ahí hay un
  build-info generado (salida de `versioning-api build`); si no, a los
  recursos empaquetados (con el build-info "placeholder").
"""

# Cargar variables de entorno desde .env (si existe)
load_dotenv()

# Recursos que viajan dentro del paquete (descripción OpenAPI, build-info dummy)
PACKAGE_RESOURCES_DIR = Path(__file__).parent / "resources"

# Salida por defecto de `versioning-api build` (relativa al directorio de trabajo)
BUILD_RESOURCES_DIR = Path("build") / "resources"

DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://localhost:3001")


@dataclass
class Settings:
    """
    Contenedor tipado de configuración global de la aplicación.

    Attributes
    ----------
    environment:
        Nombre del ambiente (local, staging, production). Solo se loguea.
    host / port:
        Dirección donde escucha el servidor HTTP.
    log_level:
        Nivel de logging (DEBUG, INFO, ...).
    resources_dir:
        Directorio con `openapi/description.html` y
        `META-INF/build-info.properties`.
    cors_origins:
        Orígenes permitidos por CORS.
    project_group / project_name / project_version:
        Valores que el paso `build-info` escribe en el registro de build.
    """

    environment: str = "local"
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    resources_dir: Path = PACKAGE_RESOURCES_DIR
    cors_origins: tuple = DEFAULT_CORS_ORIGINS

    # Metadata del proyecto (build-info)
    project_group: str = "eu.maksimov.demo"
    project_name: str = "versioning-api"
    project_version: str = "1.0-SNAPSHOT"


def resolve_resources_dir() -> Path:
    """
    Directorio de recursos a usar cuando no se pasa uno explícito.

    Orden: `RESOURCES_DIR` si está definida; si no, `build/resources` cuando
    ya contiene un build-info generado; si no, los recursos empaquetados.
    Se evalúa en cada llamada (no está cacheado).
    """
    env_dir = os.getenv("RESOURCES_DIR")
    if env_dir:
        return Path(env_dir)
    if (BUILD_RESOURCES_DIR / "META-INF" / "build-info.properties").exists():
        return BUILD_RESOURCES_DIR
    return PACKAGE_RESOURCES_DIR


def _split_origins(raw: str) -> tuple:
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


@lru_cache
def get_settings() -> Settings:
    """
    Devuelve una instancia única y cacheada de `Settings`.

    Variables de entorno utilizadas
    -------------------------------
    - ENVIRONMENT (default: "local")
    - HOST (default: "0.0.0.0"), PORT (default: 8000)
    - LOG_LEVEL (default: "INFO")
    - RESOURCES_DIR (default: `build/resources` si ya se buildeó, si no los
      recursos empaquetados)
    - CORS_ORIGINS (separados por coma)
    - PROJECT_GROUP, PROJECT_NAME, PROJECT_VERSION

    Notas
    -----
    En tests conviene llamar `get_settings.cache_clear()` después de
    modificar el entorno con `monkeypatch.setenv`.
    """
    return Settings(
        environment=os.getenv("ENVIRONMENT", "local"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        resources_dir=resolve_resources_dir(),
        cors_origins=_split_origins(
            os.getenv("CORS_ORIGINS", ",".join(DEFAULT_CORS_ORIGINS))
        ),
        project_group=os.getenv("PROJECT_GROUP", "eu.maksimov.demo"),
        project_name=os.getenv("PROJECT_NAME", "versioning-api"),
        project_version=os.getenv("PROJECT_VERSION", "1.0-SNAPSHOT"),
    )
