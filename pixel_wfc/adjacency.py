"""Adjacency computation: which tile may sit next to which, per direction."""

from __future__ import annotations

import logging
import time
from enum import IntEnum

import numpy as np

from pixel_wfc.tiles import TileSet, as_image

logger = logging.getLogger(__name__)


class Direction(IntEnum):
    """The four cardinal neighbours, in propagation order.

    Values are chosen so that ``d ^ 1`` is the opposite direction.
    """

    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3

    @property
    def offset(self) -> tuple[int, int]:
        """(row, col) step towards the neighbour."""
        return _OFFSETS[self]

    @property
    def opposite(self) -> Direction:
        return Direction(self ^ 1)


_OFFSETS = {
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
}

# Index permutation mapping every direction onto its opposite
_OPPOSITE = np.array([int(d.opposite) for d in Direction])


def _shift_slices(d: int, n: int) -> tuple[slice, slice]:
    """Slices of the fixed and the shifted array that cover the same cells.

    For an array of length *n* and another copy moved by *d*, the
    first slice indexes the fixed array and the second the moved one.
    """
    return slice(max(0, d), n + min(0, d)), slice(max(0, -d), n - max(0, d))


def tiles_overlap(a: np.ndarray, b: np.ndarray, offset: tuple[int, int]) -> bool:
    """True if tile *b* placed at *offset* from tile *a* agrees on the overlap.

    Cells covered by only one of the two tiles impose no constraint.
    """
    n = a.shape[0]
    ra, rb = _shift_slices(offset[0], n)
    ca, cb = _shift_slices(offset[1], n)
    return bool(np.array_equal(a[ra, ca], b[rb, cb]))


def _overlap_adjacency(tiles: np.ndarray) -> np.ndarray:
    t, n = tiles.shape[:2]
    adjacency = np.zeros((t, len(Direction), t), dtype=bool)
    for d in Direction:
        ra, rb = _shift_slices(d.offset[0], n)
        ca, cb = _shift_slices(d.offset[1], n)
        fixed = tiles[:, ra, ca].reshape(t, 1, -1)
        moved = tiles[:, rb, cb].reshape(1, t, -1)
        adjacency[:, d, :] = np.all(fixed == moved, axis=2)
    return adjacency


def _observed_adjacency(tile_set: TileSet, image: np.ndarray) -> np.ndarray:
    """Neighbour pairs seen in *image* and its rotations (single-pixel tiles)."""
    lookup = {c.tobytes(): i for i, c in enumerate(tile_set.first_pixels)}
    h, w = image.shape[:2]
    grid = np.array(
        [[lookup[image[r, c].tobytes()] for c in range(w)] for r in range(h)],
        dtype=np.intp,
    )

    t = len(tile_set)
    adjacency = np.zeros((t, len(Direction), t), dtype=bool)
    for _ in range(4):
        rows, cols = grid.shape
        for d in Direction:
            dr, dc = d.offset
            r_dst, r_src = _shift_slices(dr, rows)
            c_dst, c_src = _shift_slices(dc, cols)
            src = grid[r_src, c_src].ravel()
            dst = grid[r_dst, c_dst].ravel()
            adjacency[src, d, dst] = True
        grid = np.rot90(grid, k=-1)

    # j right of i  <=>  i left of j
    return adjacency | np.transpose(adjacency[:, _OPPOSITE, :], (2, 1, 0))


def compute_adjacency(tile_set: TileSet, image: object | None = None) -> np.ndarray:
    """Build the adjacency table for *tile_set*.

    ``adjacency[i, d, j]`` is True when tile ``j`` may be placed one step
    in direction ``d`` from tile ``i``.  Tiles larger than one pixel are
    compared on their overlap.  Single-pixel tiles never overlap, so for
    them the neighbour pairs observed in *image* are used instead.

    Returns:
        (T, 4, T) bool array.
    """
    t0 = time.perf_counter()
    if tile_set.tile_size == 1 and image is not None:
        adjacency = _observed_adjacency(tile_set, as_image(image))
    else:
        adjacency = _overlap_adjacency(tile_set.tiles)
    logger.info(
        "Adjacency table ready: %d tiles, %d compatible pairs  (%.2f s)",
        len(tile_set), int(adjacency.sum()), time.perf_counter() - t0,
    )
    return adjacency
