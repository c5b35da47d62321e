#!/usr/bin/env python3
"""
Script helper para ejecutar la API FastAPI.
Ejecuta desde la raíz del proyecto para asegurar que Python encuentre el módulo 'api'.

Equivale a `versioning-api serve`: si el puerto está ocupado termina con status 1.
"""

import logging
import sys
from pathlib import Path

# Asegurar que el directorio raíz esté en el PYTHONPATH
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

if __name__ == "__main__":
    from versioning_core.config import get_settings
    from versioning_core.server import serve

    logging.basicConfig(
        level=getattr(logging, get_settings().log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    serve()
