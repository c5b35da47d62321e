from __future__ import annotations

import logging
import shutil
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .build_info import BuildInfo, read_build_info, write_build_info
from .config import PACKAGE_RESOURCES_DIR, get_settings

"""
versioning_core.build
=====================

Empaquetado mínimo: dos pasos de build con un orden explícito.

Pasos
-----
1) `process-resources`: copia el árbol de recursos del paquete al directorio
   de salida (`<output>/resources`). Ese árbol incluye el build-info
   placeholder.
2) `build-info`: escribe el registro real (versión + hora UTC) en
   `<output>/resources/META-INF/build-info.properties`.

Orden
-----
`build-info` declara `must_run_after=("process-resources",)`. El runner
ordena los pasos según esas declaraciones y NO según el orden en que se
listan; si `process-resources` corriera después, el placeholder copiado
pisaría el registro real y la app mostraría datos viejos sin fallar.

Uso:
    versioning-api build --output build
"""

logger = logging.getLogger(__name__)

PROCESS_RESOURCES = "process-resources"
BUILD_INFO = "build-info"


class BuildError(RuntimeError):
    """Error en la definición u ordenamiento de los pasos de build."""


@dataclass
class BuildContext:
    """Parámetros compartidos por todos los pasos de un build."""

    output_dir: Path
    source_resources_dir: Path = PACKAGE_RESOURCES_DIR
    group: str = "eu.maksimov.demo"
    name: str = "versioning-api"
    version: str = "1.0-SNAPSHOT"
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(timezone.utc))

    @property
    def resources_dir(self) -> Path:
        return self.output_dir / "resources"


@dataclass
class BuildStep:
    """
    Un paso de build.

    `must_run_after` solo restringe el orden relativo: no agrega pasos al
    build. Todos los nombres referenciados tienen que estar en el build.
    """

    name: str
    action: Callable[[BuildContext], None]
    must_run_after: Sequence[str] = field(default_factory=tuple)


def process_resources(ctx: BuildContext) -> None:
    """Copia los recursos (placeholder incluido) al directorio de salida."""
    ctx.resources_dir.mkdir(parents=True, exist_ok=True)
    shutil.copytree(ctx.source_resources_dir, ctx.resources_dir, dirs_exist_ok=True)
    logger.debug(f"Recursos copiados de {ctx.source_resources_dir} a {ctx.resources_dir}")


def generate_build_info(ctx: BuildContext) -> None:
    """Escribe el registro de build real."""
    info = BuildInfo(
        group=ctx.group,
        artifact=ctx.name,
        name=ctx.name,
        version=ctx.version,
        time=ctx.clock(),
    )
    write_build_info(ctx.resources_dir, info)


def default_steps() -> List[BuildStep]:
    # build-info se lista primero a propósito: el orden lo define must_run_after
    return [
        BuildStep(BUILD_INFO, generate_build_info, must_run_after=(PROCESS_RESOURCES,)),
        BuildStep(PROCESS_RESOURCES, process_resources),
    ]


def order_steps(steps: Sequence[BuildStep]) -> List[BuildStep]:
    """
    Ordena los pasos respetando `must_run_after`.

    Entre pasos sin restricción mutua se conserva el orden declarado.

    Raises
    ------
    BuildError
        Si hay nombres duplicados, referencias a pasos inexistentes o ciclos.
    """
    by_name: Dict[str, BuildStep] = {}
    for step in steps:
        if step.name in by_name:
            raise BuildError(f"Paso de build duplicado: '{step.name}'")
        by_name[step.name] = step

    for step in steps:
        for dependency in step.must_run_after:
            if dependency not in by_name:
                raise BuildError(
                    f"El paso '{step.name}' debe correr después de '{dependency}', que no existe"
                )

    ordered: List[BuildStep] = []
    done = set()
    pending = list(steps)
    while pending:
        ready = next(
            (step for step in pending if all(dep in done for dep in step.must_run_after)),
            None,
        )
        if ready is None:
            names = ", ".join(step.name for step in pending)
            raise BuildError(f"Ciclo en el orden de los pasos de build: {names}")
        ordered.append(ready)
        done.add(ready.name)
        pending.remove(ready)

    return ordered


def run_build(
    ctx: Optional[BuildContext] = None,
    steps: Optional[Sequence[BuildStep]] = None,
) -> BuildInfo:
    """
    Ejecuta el build completo y devuelve el registro que quedó en disco.

    Si `ctx` es None se arma desde `get_settings()` con salida en `./build`.
    """
    if ctx is None:
        settings = get_settings()
        ctx = BuildContext(
            output_dir=Path("build"),
            group=settings.project_group,
            name=settings.project_name,
            version=settings.project_version,
        )
    if steps is None:
        steps = default_steps()

    started = time.monotonic()
    for step in order_steps(steps):
        logger.info(f"> {step.name}")
        step.action(ctx)
    logger.info(f"Build terminado en {(time.monotonic() - started) * 1000:.0f} ms")

    return read_build_info(ctx.resources_dir)
