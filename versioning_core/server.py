"""
versioning_core.server
======================

Arranque del servidor HTTP (uvicorn) para `api.main:app`.

El socket se bindea ANTES de crear el servidor: si el puerto ya está en uso
el proceso termina de inmediato con status 1 y un mensaje claro. No hay
reintentos.
"""

from __future__ import annotations

import logging
import socket
import sys
from typing import Optional

import uvicorn

from .config import get_settings

logger = logging.getLogger(__name__)

APP_IMPORT_PATH = "api.main:app"


def bind_socket(host: str, port: int) -> socket.socket:
    """
    Crea y bindea el socket de escucha.

    Raises
    ------
    OSError
        Si el puerto ya está en uso o la dirección no es válida.
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    # Permite re-bindear un puerto que quedó en TIME_WAIT tras un reinicio.
    # Un listener activo en el mismo puerto sigue dando EADDRINUSE.
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


def serve(host: Optional[str] = None, port: Optional[int] = None, app: str = APP_IMPORT_PATH) -> None:
    """
    Levanta el servidor y bloquea hasta recibir una señal de apagado.

    Si no puede bindear el puerto, loguea el error y hace `sys.exit(1)`.
    """
    settings = get_settings()
    host = host or settings.host
    port = port if port is not None else settings.port

    try:
        sock = bind_socket(host, port)
    except OSError as e:
        logger.error(f"No se pudo escuchar en {host}:{port}: {e}")
        sys.exit(1)

    logger.info(f"🚀 Iniciando API en http://{host}:{port}")
    logger.info(f"📖 Documentación disponible en http://{host}:{port}/swagger-ui.html")

    config = uvicorn.Config(app, log_level=settings.log_level.lower())
    server = uvicorn.Server(config)
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()
