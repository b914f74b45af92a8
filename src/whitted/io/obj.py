"""Wavefront OBJ mesh loading.

Only geometry is read: ``v`` records give vertex positions and ``f`` records
give faces. Face entries may use the ``i``, ``i/t``, ``i//n`` or ``i/t/n``
forms; only the position index is kept. Indices are 1-based, and negative
indices count back from the most recent vertex. Faces with more than three
vertices are split into a triangle fan. All other records are ignored.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt

logger = logging.getLogger(__name__)


class ObjParseError(ValueError):
    """Raised when an OBJ file contains a malformed record."""


def _face_index(token: str, vertex_count: int, lineno: int) -> int:
    raw = token.split("/", 1)[0]
    try:
        index = int(raw)
    except ValueError:
        raise ObjParseError(f"line {lineno}: invalid face index {token!r}") from None
    if index < 0:
        index += vertex_count
    else:
        index -= 1
    if not 0 <= index < vertex_count:
        raise ObjParseError(f"line {lineno}: face index {token!r} out of range")
    return index


def parse_obj(text: str) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.int64]]:
    """Parse OBJ text into vertex and triangle arrays.

    Args:
        text: Contents of an OBJ file.

    Returns:
        Tuple of (vertices, triangles): float64 positions of shape (V, 3) and
        zero-based int64 vertex indices of shape (T, 3).

    Raises:
        ObjParseError: On a malformed vertex or face record.
    """
    vertices: list[list[float]] = []
    triangles: list[list[int]] = []
    skipped: set[str] = set()

    for lineno, line in enumerate(text.splitlines(), start=1):
        tokens = line.split("#", 1)[0].split()
        if not tokens:
            continue
        keyword, args = tokens[0], tokens[1:]

        if keyword == "v":
            if len(args) < 3:
                raise ObjParseError(f"line {lineno}: vertex needs 3 coordinates")
            try:
                vertices.append([float(a) for a in args[:3]])
            except ValueError:
                raise ObjParseError(f"line {lineno}: invalid vertex {line.strip()!r}") from None
        elif keyword == "f":
            if len(args) < 3:
                raise ObjParseError(f"line {lineno}: face needs at least 3 vertices")
            face = [_face_index(a, len(vertices), lineno) for a in args]
            for k in range(1, len(face) - 1):
                triangles.append([face[0], face[k], face[k + 1]])
        else:
            skipped.add(keyword)

    if skipped:
        logger.debug("Ignored OBJ records: %s", ", ".join(sorted(skipped)))

    return (
        np.array(vertices, dtype=np.float64).reshape(-1, 3),
        np.array(triangles, dtype=np.int64).reshape(-1, 3),
    )


def load_obj(path: str | Path) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.int64]]:
    """Read an OBJ file from disk. See ``parse_obj``."""
    return parse_obj(Path(path).read_text())
