"""
API HTTP principal de la demo de versionado.

Esta aplicación FastAPI registra los endpoints versionados, el middleware que
resuelve la versión de cada request y la documentación OpenAPI agrupada.

Uso:
    uvicorn api.main:app --reload --port 8000
    versioning-api serve
"""

import logging
from typing import Iterable, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from versioning_core.build_info import read_build_info
from versioning_core.config import get_settings

from .docs import install_docs, load_description
from .models.responses import HealthResponse
from .routes import person, session
from .versioning import VersionedRoutingMiddleware

settings = get_settings()

# Configurar logging según ambiente
log_level = getattr(logging, settings.log_level, logging.INFO)
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

SERVICE_NAME = "versioning-api"

DEFAULT_ROUTERS = [*person.routers, session.router]


def create_app(routers: Optional[Iterable[APIRouter]] = None) -> FastAPI:
    """
    Construye la app.

    Args:
        routers: Routers a registrar. None registra los endpoints demo
            (person v1/v2/v3 y session v1); una lista vacía deja la app sin
            rutas de negocio (la documentación sigue siendo válida).
    """
    logger.info(f"🚀 Iniciando API en ambiente: {settings.environment}")

    build_info = read_build_info(settings.resources_dir)
    logger.info(f"📦 Build: version={build_info.version}, time={build_info.time_str()}")

    app = FastAPI(
        title=SERVICE_NAME,
        version=build_info.version,
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
    )
    app.state.build_info = build_info

    logger.info(f"🌐 CORS origins configurados: {list(settings.cors_origins)}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(VersionedRoutingMiddleware)

    # Registrar rutas
    for router in DEFAULT_ROUTERS if routers is None else routers:
        app.include_router(router)

    @app.get("/", include_in_schema=False)
    async def root():
        """Health check endpoint."""
        return {"status": "ok", "service": SERVICE_NAME}

    @app.get("/health", response_model=HealthResponse, include_in_schema=False)
    async def health(request: Request):
        """Health check con metadata de build."""
        info = request.app.state.build_info
        return HealthResponse(
            status="ok",
            service=SERVICE_NAME,
            version=info.version,
            build_time=None if info.is_placeholder else info.time_str(),
        )

    # Los grupos se calculan con las rutas ya registradas
    install_docs(app, build_info, load_description(settings.resources_dir))
    return app


app = create_app()
