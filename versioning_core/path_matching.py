from __future__ import annotations

import re
import sys
from functools import cmp_to_key, lru_cache
from typing import Callable, Iterable, List, Optional, Pattern

"""
versioning_core.path_matching
=============================

Matching de paths estilo Ant (`{var}`, `*`, `?`, `**`) con soporte de
versionado por URL.

Regla de versionado
-------------------
Un path versionado tiene la forma `/api/<version>/...` donde `<version>` es
`v1`..`v99` o `latest`. Un patrón versionado matchea un path versionado si:

- la versión del path es >= la versión del patrón, y
- el patrón, con su versión reemplazada por `*`, matchea el path.

Así `/api/v3/session/7` lo atiende `/api/v1/session/{id}` si no hay una v2
ni una v3 de ese recurso, y `/api/latest/...` (versión "infinita") lo atiende
siempre la versión más nueva.

Orden de preferencia
--------------------
`VersionedPathMatcher.pattern_comparator(path)` ordena primero los patrones
de la misma versión que el path, luego por versión descendente y, a igual
versión, por especificidad Ant (exacto, menos comodines, más largo).
"""

VERSIONED_PATH_REGEX = re.compile(r"/api/(?P<version>v\d{1,2}|latest)/.*")

LATEST = "latest"
LATEST_VERSION = sys.maxsize

_ANT_TOKEN = re.compile(r"/\*\*|\*\*|\*|\?|\{[^/{}]+\}")
_URI_VAR = re.compile(r"\{[^/{}]+\}")


def parse_version(segment: str) -> int:
    """`v2` -> 2, `latest` -> LATEST_VERSION."""
    if segment == LATEST:
        return LATEST_VERSION
    return int(segment[1:])


def api_version(path: str) -> Optional[int]:
    """Versión de un path versionado, o None si el path no es versionado."""
    match = VERSIONED_PATH_REGEX.fullmatch(path)
    if not match:
        return None
    return parse_version(match.group("version"))


def replace_version(path: str, version_segment: str) -> str:
    """Reemplaza el segmento de versión de un path versionado."""
    match = VERSIONED_PATH_REGEX.fullmatch(path)
    if not match:
        return path
    start, end = match.span("version")
    return path[:start] + version_segment + path[end:]


@lru_cache(maxsize=512)
def _compile(pattern: str) -> Pattern:
    regex = []
    position = 0
    for token in _ANT_TOKEN.finditer(pattern):
        regex.append(re.escape(pattern[position:token.start()]))
        text = token.group()
        if text == "/**":
            regex.append("(?:/.*)?")
        elif text == "**":
            regex.append(".*")
        elif text == "*":
            regex.append("[^/]*")
        elif text == "?":
            regex.append("[^/]")
        else:
            # {name} o {name:regex}
            _, _, custom = text[1:-1].partition(":")
            regex.append(f"(?:{custom})" if custom else "[^/]+")
        position = token.end()
    regex.append(re.escape(pattern[position:]))
    return re.compile("".join(regex))


class _PatternInfo:
    """Contadores de especificidad de un patrón (igual que el comparador Ant)."""

    def __init__(self, pattern: Optional[str]):
        self.pattern = pattern
        self.uri_vars = 0
        self.single_wildcards = 0
        self.double_wildcards = 0
        self.length = 0
        if pattern is None:
            return

        self.uri_vars = len(_URI_VAR.findall(pattern))
        self.double_wildcards = pattern.count("**")
        self.single_wildcards = pattern.count("*") - 2 * self.double_wildcards
        self.length = len(_URI_VAR.sub("#", pattern))

    @property
    def is_least_specific(self) -> bool:
        return self.pattern is None or self.pattern == "/**"

    @property
    def is_prefix_pattern(self) -> bool:
        return self.pattern is not None and self.pattern.endswith("/**")

    @property
    def total_count(self) -> int:
        return self.uri_vars + self.single_wildcards + 2 * self.double_wildcards


class AntPathMatcher:
    """Matcher de patrones Ant sobre paths separados por `/`."""

    def match(self, pattern: str, path: str) -> bool:
        return _compile(pattern).fullmatch(path) is not None

    def pattern_comparator(self, path: str) -> Callable[[str, str], int]:
        """
        Comparador "más específico primero" para patrones que matchean `path`.

        Prioriza: el patrón idéntico al path, luego el que tiene menos
        variables/comodines, luego el más largo.
        """

        def compare(pattern1: Optional[str], pattern2: Optional[str]) -> int:
            info1 = _PatternInfo(pattern1)
            info2 = _PatternInfo(pattern2)

            if info1.is_least_specific and info2.is_least_specific:
                return 0
            if info1.is_least_specific:
                return 1
            if info2.is_least_specific:
                return -1

            pattern1_equals_path = pattern1 == path
            pattern2_equals_path = pattern2 == path
            if pattern1_equals_path and pattern2_equals_path:
                return 0
            if pattern1_equals_path:
                return -1
            if pattern2_equals_path:
                return 1

            if info1.is_prefix_pattern and info2.double_wildcards == 0:
                return 1
            if info2.is_prefix_pattern and info1.double_wildcards == 0:
                return -1

            if info1.total_count != info2.total_count:
                return info1.total_count - info2.total_count
            if info1.length != info2.length:
                return info2.length - info1.length
            if info1.single_wildcards != info2.single_wildcards:
                return info1.single_wildcards - info2.single_wildcards
            return info1.uri_vars - info2.uri_vars

        return compare

    def sort_patterns(self, patterns: Iterable[str], path: str) -> List[str]:
        return sorted(patterns, key=cmp_to_key(self.pattern_comparator(path)))

    def best_match(self, patterns: Iterable[str], path: str) -> Optional[str]:
        """El patrón preferido entre los que matchean `path`, o None."""
        candidates = [pattern for pattern in patterns if self.match(pattern, path)]
        if not candidates:
            return None
        return self.sort_patterns(candidates, path)[0]


class VersionedPathMatcher(AntPathMatcher):
    """
    `AntPathMatcher` que entiende `/api/<version>/...`.

    Para paths o patrones no versionados se comporta igual que la clase base.
    """

    def match(self, pattern: str, path: str) -> bool:
        if path is None:
            return False

        pattern_match = VERSIONED_PATH_REGEX.match(pattern)
        path_match = VERSIONED_PATH_REGEX.match(path)
        if not pattern_match or not path_match:
            return super().match(pattern, path)

        pattern_version = parse_version(pattern_match.group("version"))
        path_version = parse_version(path_match.group("version"))
        return path_version >= pattern_version and super().match(
            _wildcard_version(pattern_match), path
        )

    def pattern_comparator(self, path: str) -> Callable[[str, str], int]:
        specificity = super().pattern_comparator(path)
        path_version = api_version(path)

        def compare(pattern1: Optional[str], pattern2: Optional[str]) -> int:
            if pattern1 is None or pattern2 is None:
                return specificity(pattern1, pattern2)

            version1 = api_version(pattern1)
            version2 = api_version(pattern2)
            if path_version is not None and version1 is not None and version2 is not None:
                pattern1_equals_path = version1 == path_version
                pattern2_equals_path = version2 == path_version
                if pattern1_equals_path and not pattern2_equals_path:
                    return -1
                if pattern2_equals_path and not pattern1_equals_path:
                    return 1
                if version1 != version2:
                    return -1 if version1 > version2 else 1

            return specificity(pattern1, pattern2)

        return compare


def _wildcard_version(match: re.Match) -> str:
    start, end = match.span("version")
    text = match.string
    return text[:start] + "*" + text[end:]
