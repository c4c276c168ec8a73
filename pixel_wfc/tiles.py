"""Tile extraction: sliding-window patches, rotations and frequency weights."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from pixel_wfc.config import MAX_TILES

logger = logging.getLogger(__name__)


class TooManyTilesError(ValueError):
    """The input yields more unique tiles than a domain can represent."""

    def __init__(self, count: int, limit: int) -> None:
        self.count = count
        self.limit = limit
        super().__init__(
            f"Too many unique patterns: {count} extracted, max {limit}. "
            "Use a smaller tile size or a simpler input."
        )


@dataclass(frozen=True, eq=False)
class TileSet:
    """Unique tiles in index order together with their weights.

    Attributes:
        tiles:   (T, S, S, 3) uint8 - tile ``i`` is ``tiles[i]``.
        weights: (T,) float64 - occurrence count of each tile.
    """

    tiles: np.ndarray
    weights: np.ndarray

    def __len__(self) -> int:
        return len(self.tiles)

    @property
    def tile_size(self) -> int:
        return int(self.tiles.shape[1])

    @property
    def first_pixels(self) -> np.ndarray:
        """(T, 3) uint8 - the top-left colour of every tile."""
        return self.tiles[:, 0, 0, :]

    def index_of(self, tile: np.ndarray) -> int:
        """Index of *tile* in the set, or -1 if it is not a member."""
        matches = np.all(self.tiles == np.asarray(tile, dtype=np.uint8), axis=(1, 2, 3))
        hits = np.flatnonzero(matches)
        return int(hits[0]) if len(hits) else -1


def as_image(image: object) -> np.ndarray:
    """Coerce an array-like of colours into an (H, W, 3) uint8 array.

    Nested lists of ``(r, g, b)`` triples are accepted; an alpha
    channel, if present, is dropped.
    """
    arr = np.asarray(image, dtype=np.uint8)
    if arr.ndim != 3 or arr.shape[2] < 3:
        msg = f"Expected an (H, W, 3) colour image, got shape {arr.shape}"
        raise ValueError(msg)
    return np.ascontiguousarray(arr[:, :, :3])


def rotate_tile(tile: np.ndarray) -> np.ndarray:
    """Rotate a square tile by 90 degrees clockwise: (r, c) -> (c, size-1-r)."""
    return np.ascontiguousarray(np.rot90(tile, k=-1, axes=(0, 1)))


def extract_tiles(
    image: object,
    tile_size: int,
    max_tiles: int = MAX_TILES,
) -> TileSet:
    """Cut every ``tile_size`` window out of *image* and count its rotations.

    Each window contributes one count to each of its four orientations,
    so a tile that is symmetric under rotation accumulates several
    counts from the same window.

    Args:
        image:     (H, W, 3) colour image (anything :func:`as_image` accepts).
        tile_size: Side of the square window.
        max_tiles: Largest permitted number of unique tiles.

    Returns:
        The deduplicated :class:`TileSet`, ordered by first appearance.

    Raises:
        TooManyTilesError: more than *max_tiles* unique tiles were found.
        ValueError: *tile_size* is not positive or exceeds the image.
    """
    img = as_image(image)
    h, w = img.shape[:2]
    if tile_size < 1:
        msg = f"tile_size must be positive, got {tile_size}"
        raise ValueError(msg)
    if tile_size > h or tile_size > w:
        msg = f"tile_size {tile_size} does not fit a {w}x{h} image"
        raise ValueError(msg)

    # Insertion order keeps tile indices stable for a given input
    counts: dict[bytes, int] = {}
    tiles: dict[bytes, np.ndarray] = {}

    for r in range(h - tile_size + 1):
        for c in range(w - tile_size + 1):
            tile = img[r:r + tile_size, c:c + tile_size]
            for _ in range(4):
                key = tile.tobytes()
                if key not in counts:
                    counts[key] = 0
                    tiles[key] = tile.copy()
                counts[key] += 1
                tile = rotate_tile(tile)

    if len(tiles) > max_tiles:
        raise TooManyTilesError(len(tiles), max_tiles)

    logger.info(
        "Extracted %d unique tiles (tile_size=%d) from %dx%d input",
        len(tiles), tile_size, w, h,
    )
    return TileSet(
        tiles=np.stack(list(tiles.values())),
        weights=np.array(list(counts.values()), dtype=np.float64),
    )
