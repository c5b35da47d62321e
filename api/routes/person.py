"""
Endpoints demo del recurso `person` en tres versiones.

- v1: listado y detalle.
- v2: igual que v1, más un detalle "hardcodeado" para el id 1.
- v3: listado y detalle.

Un cliente que pide `/api/v2/person/7` cae en el detalle de v2; uno que pide
`/api/latest/person` cae en v3 (ver `api.versioning`).
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router_v1 = APIRouter(prefix="/api/v1/person", tags=["person"], default_response_class=PlainTextResponse)
router_v2 = APIRouter(prefix="/api/v2/person", tags=["person"], default_response_class=PlainTextResponse)
router_v3 = APIRouter(prefix="/api/v3/person", tags=["person"], default_response_class=PlainTextResponse)

routers = [router_v1, router_v2, router_v3]


@router_v1.get("", summary="Listar personas (v1)")
async def get_all_v1() -> str:
    return "answer from person_v1.get_all"


@router_v1.get("/{id}", summary="Obtener persona (v1)")
async def get_by_id_v1(id: str) -> str:
    return f"answer from person_v1.get_by_id({id})"


@router_v2.get("", summary="Listar personas (v2)")
async def get_all_v2() -> str:
    return "answer from person_v2.get_all"


# Declarado antes que /{id}: a igual versión gana el path más específico
@router_v2.get("/1", summary="Obtener la persona 1 (v2)")
async def get_first_v2() -> str:
    return "answer from person_v2.get_by_id(HARDCODED 1)"


@router_v2.get("/{id}", summary="Obtener persona (v2)")
async def get_by_id_v2(id: str) -> str:
    return f"answer from person_v2.get_by_id({id})"


@router_v3.get("", summary="Listar personas (v3)")
async def get_all_v3() -> str:
    return "answer from person_v3.get_all"


@router_v3.get("/{id}", summary="Obtener persona (v3)")
async def get_by_id_v3(id: str) -> str:
    return f"answer from person_v3.get_by_id({id})"
