"""Contradiction recovery: adaptive local resets instead of backtracking.

No history of earlier decisions is kept.  When propagation empties a
cell's domain, a square around the offending cell is wiped back to
"anything goes" and the next ``step()`` rebuilds it.  Every
``max_attempts`` failures the square grows; once it is larger than the
grid the whole grid is reset.

Pending propagation work is discarded on every reset, including work
outside the wiped square.  Consistency is re-established progressively
by later collapse/propagate cycles, not immediately.
"""

from __future__ import annotations


class ContradictionRecovery:
    """Escalation counters for the local reset heuristic.

    Attributes:
        reset_radius:  Side of the square wiped on the next local reset.
        attempt_count: Contradictions since the radius last grew.
    """

    def __init__(
        self,
        initial_radius: int = 8,
        radius_growth: int = 4,
        max_attempts: int = 8,
    ) -> None:
        if initial_radius < 1 or radius_growth < 0 or max_attempts < 0:
            msg = (
                "Invalid recovery parameters: "
                f"radius={initial_radius} growth={radius_growth} attempts={max_attempts}"
            )
            raise ValueError(msg)
        self.initial_radius = initial_radius
        self.radius_growth = radius_growth
        self.max_attempts = max_attempts
        self.reset_radius = initial_radius
        self.attempt_count = 0

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(reset_radius={self.reset_radius}, "
            f"attempt_count={self.attempt_count})"
        )

    def escalate(self, grid_size: int) -> bool:
        """Record one contradiction.

        Returns:
            True if the reset square now exceeds *grid_size* and a full
            reset is required.
        """
        self.attempt_count += 1
        if self.attempt_count > self.max_attempts:
            self.attempt_count = 0
            self.reset_radius += self.radius_growth
        return self.reset_radius > grid_size

    def reset(self) -> None:
        self.reset_radius = self.initial_radius
        self.attempt_count = 0

    def region(self, row: int, col: int, grid_size: int) -> tuple[slice, slice]:
        """Row and column slices of the reset square centred on (row, col)."""
        half = self.reset_radius // 2
        rows = slice(max(0, row - half), min(grid_size, row + half))
        cols = slice(max(0, col - half), min(grid_size, col + half))
        return rows, cols
