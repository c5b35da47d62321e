from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from .config import PACKAGE_RESOURCES_DIR

"""
versioning_core.build_info
==========================

Registro de metadata de build: grupo, artefacto, nombre, versión y hora de build.

El registro se escribe UNA vez durante el empaquetado (`versioning_core.build`)
y se lee UNA vez al arrancar el proceso (para /health y para la descripción
de OpenAPI). No muta después de creado.

Formato
-------
Texto estilo Java properties, con prefijo `build.`:

    build.artifact=versioning-api
    build.group=eu.maksimov.demo
    build.name=versioning-api
    build.time=2024-05-01T10\\:11\\:12.123Z
    build.version=1.0-SNAPSHOT

Los `:` y `=` dentro de los valores se escapan con `\\`, igual que lo hace
`java.util.Properties.store`, para que el archivo sea intercambiable.

Placeholder
-----------
Dentro de `resources/META-INF/` viaja un registro "dummy" sin `build.time`.
Sirve para correr desde el checkout sin haber buildeado. El paso `build-info`
debe ejecutarse DESPUÉS de copiar los recursos; si no, el placeholder pisaría
al registro real (ver `versioning_core.build`).
"""

logger = logging.getLogger(__name__)

BUILD_INFO_RELATIVE_PATH = Path("META-INF") / "build-info.properties"
PROPERTY_PREFIX = "build."

_ESCAPED_CHAR = re.compile(r"\\(.)")


@dataclass(frozen=True)
class BuildInfo:
    """Metadata inmutable de un build."""

    group: str
    artifact: str
    name: str
    version: str
    time: Optional[datetime] = None

    @property
    def is_placeholder(self) -> bool:
        """Un registro sin hora de build es el dummy empaquetado."""
        return self.time is None

    def time_str(self) -> str:
        if self.time is None:
            return "n/a"
        return _format_instant(self.time)

    def to_properties(self) -> Dict[str, str]:
        props = {
            "artifact": self.artifact,
            "group": self.group,
            "name": self.name,
            "version": self.version,
        }
        if self.time is not None:
            props["time"] = _format_instant(self.time)
        return {f"{PROPERTY_PREFIX}{key}": value for key, value in sorted(props.items())}

    @classmethod
    def from_properties(cls, props: Dict[str, str]) -> "BuildInfo":
        def get(key: str) -> str:
            return props.get(f"{PROPERTY_PREFIX}{key}", "")

        raw_time = get("time")
        time = None
        if raw_time:
            try:
                time = _parse_instant(raw_time)
            except ValueError as e:
                raise ValueError(f"Valor inválido para {PROPERTY_PREFIX}time: {raw_time!r}") from e

        return cls(
            group=get("group"),
            artifact=get("artifact"),
            name=get("name"),
            version=get("version"),
            time=time,
        )


def _format_instant(value: datetime) -> str:
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_instant(raw: str) -> datetime:
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    return datetime.fromisoformat(raw).astimezone(timezone.utc)


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace(":", "\\:").replace("=", "\\=")


def format_properties(props: Dict[str, str]) -> str:
    """Serializa un dict a texto properties (una entrada por línea)."""
    lines = []
    for key, value in props.items():
        lines.append(f"{key}={_escape(value)}")
    return "\n".join(lines) + "\n"


def parse_properties(text: str) -> Dict[str, str]:
    """
    Parsea texto properties a un dict.

    Ignora líneas vacías y comentarios (`#` o `!`). Cada entrada debe tener
    la forma `clave=valor`.

    Raises
    ------
    ValueError
        Si una línea no tiene separador `=`.
    """
    props: Dict[str, str] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped[0] in "#!":
            continue
        if "=" not in stripped:
            raise ValueError(f"Línea {lineno} inválida en build-info: {line!r}")
        key, value = stripped.split("=", 1)
        props[key.strip()] = _ESCAPED_CHAR.sub(r"\1", value.strip())
    return props


def write_build_info(resources_dir: Path, info: BuildInfo) -> Path:
    """
    Escribe el registro en `<resources_dir>/META-INF/build-info.properties`.

    Sobrescribe cualquier registro previo (incluido el placeholder).

    Returns
    -------
    Path
        Ruta del archivo escrito.
    """
    path = Path(resources_dir) / BUILD_INFO_RELATIVE_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_properties(info.to_properties()), encoding="utf-8")
    logger.info(f"Build info escrito en {path} (version={info.version}, time={info.time_str()})")
    return path


def read_build_info(resources_dir: Optional[Path] = None) -> BuildInfo:
    """
    Lee el registro de build desde `resources_dir`.

    Si el archivo no existe se cae al placeholder empaquetado, para que la
    app arranque aunque nunca se haya corrido el build.
    """
    base = Path(resources_dir) if resources_dir is not None else PACKAGE_RESOURCES_DIR
    path = base / BUILD_INFO_RELATIVE_PATH
    if not path.exists():
        logger.warning(f"No existe {path}, usando build-info empaquetado")
        path = PACKAGE_RESOURCES_DIR / BUILD_INFO_RELATIVE_PATH

    info = BuildInfo.from_properties(parse_properties(path.read_text(encoding="utf-8")))
    if info.is_placeholder:
        logger.warning("Build info es el placeholder: corré `versioning-api build` para generarlo")
    return info
