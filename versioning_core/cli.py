"""
versioning_core.cli
===================

Punto de entrada de línea de comandos (`versioning-api`).

Subcomandos
-----------
- `serve`: levanta la API (uvicorn) y bloquea.
- `build`: copia recursos y genera `META-INF/build-info.properties`
  (en ese orden, ver `versioning_core.build`).
- `info`: muestra el build-info que leería la app al arrancar.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .build import BuildContext, run_build
from .build_info import read_build_info
from .config import get_settings, resolve_resources_dir
from .server import serve


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="versioning-api",
        description="API demo con versionado por URL y documentación OpenAPI agrupada",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Levantar el servidor HTTP")
    serve_parser.add_argument("--host", default=settings.host)
    serve_parser.add_argument("--port", type=int, default=settings.port)

    build_parser_ = subparsers.add_parser("build", help="Generar recursos y build-info")
    build_parser_.add_argument(
        "--output", type=Path, default=Path("build"),
        help="Directorio de salida (default: ./build)",
    )
    build_parser_.add_argument("--group", default=settings.project_group)
    build_parser_.add_argument("--name", default=settings.project_name)
    build_parser_.add_argument("--version", default=settings.project_version)

    info_parser = subparsers.add_parser("info", help="Mostrar el build-info actual")
    info_parser.add_argument(
        "--resources", type=Path, default=None,
        help="Directorio de recursos a leer (default: RESOURCES_DIR, ./build/resources o el placeholder)",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(get_settings().log_level)

    if args.command == "serve":
        serve(host=args.host, port=args.port)
        return 0

    if args.command == "build":
        ctx = BuildContext(
            output_dir=args.output,
            group=args.group,
            name=args.name,
            version=args.version,
        )
        info = run_build(ctx)
        print(f"✅ Build info generado en: {ctx.resources_dir.resolve()}")
        print(f"   version={info.version} time={info.time_str()}")
        if ctx.resources_dir.resolve() != resolve_resources_dir().resolve():
            print(f"   Tip: exportá RESOURCES_DIR={ctx.resources_dir} antes de `serve`.")
        return 0

    info = read_build_info(args.resources or resolve_resources_dir())
    for key, value in info.to_properties().items():
        print(f"{key}={value}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
