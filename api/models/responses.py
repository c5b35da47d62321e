"""
Modelos de response para la API.

Solo cubren los endpoints propios del servicio (health y configuración de
Swagger); los endpoints demo devuelven texto plano.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Estado del servicio junto con la metadata de build."""

    status: str = Field(..., description="Estado: ok")
    service: str = Field(..., description="Nombre del servicio")
    version: str = Field(..., description="Versión del build")
    build_time: Optional[str] = Field(
        default=None,
        description="Hora de build en UTC (None si es el placeholder)",
    )


class SwaggerUrl(BaseModel):
    """Un grupo de documentación tal como lo consume Swagger UI."""

    url: str
    name: str


class SwaggerConfigResponse(BaseModel):
    """Lista de grupos disponibles para el selector de Swagger UI."""

    config_url: str = Field(..., alias="configUrl")
    urls: List[SwaggerUrl] = Field(default_factory=list)

    model_config = {"populate_by_name": True}
