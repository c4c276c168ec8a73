"""Wave Function Collapse generation engine.

The engine owns the output grid: one boolean domain vector per cell
(which tiles are still possible there) and a cached entropy (how many
are).  It is advanced by an external caller, one decision per
:meth:`WfcEngine.step`:

1. pick an undetermined cell of minimum entropy (ties broken at random),
2. collapse it to a single tile drawn in proportion to tile weights,
3. propagate the new constraint to neighbouring cells until nothing
   changes, or until a neighbour runs out of options,
4. on such a contradiction, hand over to :class:`ContradictionRecovery`.

Contradictions are never reported to the caller; generation can only
take longer.
"""

from __future__ import annotations

import logging

import numpy as np

from pixel_wfc.adjacency import Direction, compute_adjacency
from pixel_wfc.config import MAX_TILES, WfcConfig
from pixel_wfc.recovery import ContradictionRecovery
from pixel_wfc.tiles import TileSet, as_image, extract_tiles

logger = logging.getLogger(__name__)

# Shown for a cell with no remaining options
CONTRADICTION_COLOR = (255, 0, 255)

_STEPS = [(d, *d.offset) for d in Direction]


class WfcEngine:
    """Stateful generator for a square grid of ``output_size`` cells.

    Args:
        image:       (H, W, 3) example image.
        output_size: Side of the square output grid.
        tile_size:   Side of the tiles cut from *image*.
        seed:        Seed or ``numpy.random.Generator`` (None = non-deterministic).
        max_tiles:   Largest permitted number of unique tiles.
        recovery:    Contradiction recovery state (defaults are used if None).

    Raises:
        TooManyTilesError: *image* yields more than *max_tiles* tiles.
        ValueError: invalid sizes or image shape.
    """

    def __init__(
        self,
        image: object,
        output_size: int,
        tile_size: int,
        *,
        seed: int | np.random.Generator | None = None,
        max_tiles: int = MAX_TILES,
        recovery: ContradictionRecovery | None = None,
    ) -> None:
        if output_size < 1:
            msg = f"output_size must be positive, got {output_size}"
            raise ValueError(msg)

        img = as_image(image)
        self.output_size = output_size
        self.tile_set: TileSet = extract_tiles(img, tile_size, max_tiles)
        self.adjacency: np.ndarray = compute_adjacency(self.tile_set, img)
        self.adjacency.flags.writeable = False
        self.recovery = recovery if recovery is not None else ContradictionRecovery()

        self._rng = np.random.default_rng(seed)
        self._num_tiles = len(self.tile_set)
        self._domains = np.ones((output_size, output_size, self._num_tiles), dtype=bool)
        self._entropy = np.full((output_size, output_size), self._num_tiles, dtype=np.intp)
        self._frontier: list[tuple[int, int]] = []

        self.steps = 0
        self.contradictions = 0
        self.full_resets = 0

    @classmethod
    def from_config(cls, image: object, config: WfcConfig) -> WfcEngine:
        """Build an engine from a :class:`WfcConfig`."""
        return cls(
            image,
            config.output_size,
            config.tile_size,
            seed=config.seed,
            max_tiles=config.max_tiles,
            recovery=ContradictionRecovery(
                initial_radius=config.reset_radius,
                radius_growth=config.reset_radius_growth,
                max_attempts=config.max_reset_attempts,
            ),
        )

    def __repr__(self) -> str:
        return (
            f"WfcEngine(output_size={self.output_size}, tiles={self._num_tiles}, "
            f"collapsed={self.get_collapsed_count()})"
        )

    # -- read-only state ------------------------------------------------

    @property
    def domains(self) -> np.ndarray:
        """(N, N, T) bool - read-only view of every cell's domain."""
        view = self._domains.view()
        view.flags.writeable = False
        return view

    @property
    def entropy(self) -> np.ndarray:
        """(N, N) int - read-only view of the cached entropies."""
        view = self._entropy.view()
        view.flags.writeable = False
        return view

    @property
    def is_done(self) -> bool:
        return not bool(np.any(self._entropy > 1))

    # -- driving interface ----------------------------------------------

    def step(self) -> bool:
        """Collapse one cell and propagate.

        Returns:
            False once every cell is collapsed, True otherwise (also
            when a contradiction was just repaired).
        """
        pos = self._find_lowest_entropy()
        if pos is None:
            return False

        row, col = pos
        chosen = self.observe(self._domains[row, col])
        self._domains[row, col] = False
        self._domains[row, col, chosen] = True
        self._entropy[row, col] = 1
        self._frontier.append(pos)
        self.steps += 1

        if not self._propagate():
            self.handle_contradiction(row, col)
        return True

    def reset(self) -> None:
        """Return to the fully undetermined grid; tiles and adjacency are kept."""
        self._clear_grid()
        self.recovery.reset()
        self.steps = 0
        self.contradictions = 0
        self.full_resets = 0

    def get_collapsed_count(self) -> int:
        return int(np.count_nonzero(self._entropy == 1))

    def get_image_data(self) -> bytes:
        """Row-major RGBA buffer of ``output_size ** 2 * 4`` bytes."""
        n = self.output_size
        rgba = np.empty((n, n, 4), dtype=np.uint8)
        rgba[:, :, :3] = self.render()
        rgba[:, :, 3] = 255
        return rgba.tobytes()

    def render(self) -> np.ndarray:
        """(N, N, 3) uint8 - mean first-pixel colour of each cell's options.

        The mean is unweighted and floored per channel.  A cell without
        options shows :data:`CONTRADICTION_COLOR`.
        """
        n = self.output_size
        flat = self._domains.reshape(-1, self._num_tiles)
        counts = flat.sum(axis=1)
        sums = flat.astype(np.int64) @ self.tile_set.first_pixels.astype(np.int64)

        colors = np.empty((n * n, 3), dtype=np.uint8)
        alive = counts > 0
        colors[alive] = sums[alive] // counts[alive, np.newaxis]
        colors[~alive] = CONTRADICTION_COLOR
        return colors.reshape(n, n, 3)

    # -- algorithm ------------------------------------------------------

    def observe(self, domain: np.ndarray) -> int:
        """Draw a tile index from *domain* in proportion to tile weights.

        An empty domain yields 0; propagation should never produce one.
        """
        options = np.flatnonzero(domain)
        if len(options) == 0:
            return 0

        cumulative = np.cumsum(self.tile_set.weights[options])
        r = self._rng.random() * cumulative[-1]
        # first option whose running total reaches r
        i = int(np.searchsorted(cumulative, r, side="left"))
        return int(options[min(i, len(options) - 1)])

    def handle_contradiction(self, row: int, col: int) -> None:
        """Wipe the neighbourhood of (row, col), or the whole grid."""
        self.contradictions += 1
        if self.recovery.escalate(self.output_size):
            logger.info(
                "Contradiction at (%d, %d): reset radius %d exceeds grid, full reset",
                row, col, self.recovery.reset_radius,
            )
            self.full_resets += 1
            self._clear_grid()
            self.recovery.reset()
            return

        rows, cols = self.recovery.region(row, col, self.output_size)
        self._domains[rows, cols] = True
        self._entropy[rows, cols] = self._num_tiles
        self._frontier.clear()
        logger.debug(
            "Contradiction at (%d, %d): local reset radius=%d attempts=%d",
            row, col, self.recovery.reset_radius, self.recovery.attempt_count,
        )

    def _clear_grid(self) -> None:
        self._domains.fill(True)
        self._entropy.fill(self._num_tiles)
        self._frontier.clear()

    def _find_lowest_entropy(self) -> tuple[int, int] | None:
        undetermined = self._entropy > 1
        if not undetermined.any():
            return None
        lowest = self._entropy[undetermined].min()
        candidates = np.flatnonzero(self._entropy == lowest)
        idx = int(candidates[self._rng.integers(len(candidates))])
        return divmod(idx, self.output_size)

    def _propagate(self) -> bool:
        """Drain the frontier.  False if some neighbour ran out of options.

        Collapsed neighbours are not re-checked.  An emptied domain is
        never written back, so the grid keeps its last valid state.
        """
        n = self.output_size
        while self._frontier:
            r, c = self._frontier.pop()
            current = self._domains[r, c]

            for d, dr, dc in _STEPS:
                nr, nc = r + dr, c + dc
                if not (0 <= nr < n and 0 <= nc < n):
                    continue
                if self._entropy[nr, nc] <= 1:
                    continue

                allowed = self.adjacency[current, d, :].any(axis=0)
                neighbour = self._domains[nr, nc]
                updated = neighbour & allowed
                remaining = int(np.count_nonzero(updated))
                if remaining == 0:
                    return False
                if remaining != self._entropy[nr, nc]:
                    self._domains[nr, nc] = updated
                    self._entropy[nr, nc] = remaining
                    self._frontier.append((nr, nc))
        return True
