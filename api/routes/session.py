"""
Endpoints demo del recurso `session` (solo v1).

Al existir únicamente en v1, cualquier versión posterior (`/api/v3/session`,
`/api/latest/session`) la atiende este router. La documentación marca sus
operaciones con el esquema de seguridad `access-token`.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(prefix="/api/v1/session", tags=["session"], default_response_class=PlainTextResponse)


@router.get("", summary="Listar sesiones")
async def get_all() -> str:
    return "answer from session_v1.get_all"


@router.get("/{id}", summary="Obtener sesión")
async def get_by_id(id: str) -> str:
    return f"answer from session_v1.get_by_id({id})"
