"""Mapping between bracket-annotated route patterns and flat dollar-annotated route files.

Next.js describes routes with folders (``app/blog/[slug]/page.tsx``); TanStack Start
describes them with file names (``routes/blog/$slug.tsx``). Everything here is pure
string manipulation: no filesystem access and no exceptions for malformed input, so
a single odd route never aborts a migration.
"""

from __future__ import annotations

import posixpath
import re
from typing import List, Tuple

CATCH_ALL_TOKEN = "$"
DEFAULT_ROUTE_MARKER = "routes"

_ROUTE_FILE_SUFFIX = re.compile(r"\.(?:tsx|ts|jsx|js)$")


def parse_segments(pattern: str) -> List[str]:
    """Split a route pattern into its non-empty segments."""
    return [segment for segment in pattern.replace("\\", "/").split("/") if segment]


def _catch_all_name(segment: str) -> str | None:
    # Optional catch-alls (``[[...x]]``) collapse onto the same splat route.
    if segment.startswith("[[...") and segment.endswith("]]") and len(segment) > 7:
        return segment[5:-2]
    if segment.startswith("[...") and segment.endswith("]") and len(segment) > 5:
        return segment[4:-1]
    return None


def _dynamic_name(segment: str) -> str | None:
    if segment.startswith("[") and segment.endswith("]") and len(segment) > 2:
        inner = segment[1:-1]
        if "[" in inner or "]" in inner:
            return None
        return inner
    return None


def map_segment(segment: str) -> str:
    """Translate one segment: ``[...x]`` becomes ``$``, ``[x]`` becomes ``$x``."""
    if _catch_all_name(segment) is not None:
        return CATCH_ALL_TOKEN
    name = _dynamic_name(segment)
    if name is not None:
        return f"${name}"
    return segment


def extract_params(pattern: str) -> Tuple[Tuple[str, ...], bool]:
    """Return the parameter names (left to right) and whether a catch-all is present."""
    params: List[str] = []
    is_catch_all = False
    for segment in parse_segments(pattern):
        catch_all = _catch_all_name(segment)
        if catch_all is not None:
            is_catch_all = True
            params.append(catch_all)
            continue
        name = _dynamic_name(segment)
        if name is not None:
            params.append(name)
    return tuple(params), is_catch_all


def pattern_to_route_id(pattern: str) -> str:
    """Return the identifier TanStack Router registers for ``pattern``."""
    segments = [map_segment(segment) for segment in parse_segments(pattern)]
    if not segments:
        return "/"
    return "/" + "/".join(segments)


def pattern_to_target_path(
    pattern: str, routes_dir: str, extension: str = ".tsx"
) -> str:
    """Return the flat route file path for ``pattern`` under ``routes_dir``."""
    root = routes_dir.replace("\\", "/").rstrip("/")
    segments = [map_segment(segment) for segment in parse_segments(pattern)]
    if not segments:
        return posixpath.join(root, f"index{extension}")
    stem = segments.pop()
    return posixpath.join(root, *segments, f"{stem}{extension}")


def normalize_route_id(identifier: str) -> str:
    """Normalise a route identifier; applying it twice changes nothing."""
    value = identifier.replace("\\", "/").strip().rstrip("/")
    while value == "index" or value.endswith("/index"):
        value = value[: -len("index")].rstrip("/")
    if not value.startswith("/"):
        value = "/" + value
    return value


def route_id_from_file(path: str, marker: str = DEFAULT_ROUTE_MARKER) -> str:
    """Recover a route identifier from a file already placed under the routes directory.

    Paths without a ``/<marker>/`` component map to ``/``.
    """
    normalised = path.replace("\\", "/")
    needle = f"/{marker.strip('/')}/"
    index = normalised.find(needle)
    if index != -1:
        remainder = normalised[index + len(needle) :]
    elif normalised.startswith(needle[1:]):
        remainder = normalised[len(needle) - 1 :]
    else:
        return "/"
    remainder = _ROUTE_FILE_SUFFIX.sub("", remainder)
    return normalize_route_id(remainder)


__all__ = [
    "CATCH_ALL_TOKEN",
    "DEFAULT_ROUTE_MARKER",
    "extract_params",
    "map_segment",
    "normalize_route_id",
    "parse_segments",
    "pattern_to_route_id",
    "pattern_to_target_path",
    "route_id_from_file",
]
