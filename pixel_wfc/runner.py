"""Drive an engine to completion in frame-sized batches of steps."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from pixel_wfc.engine import WfcEngine

logger = logging.getLogger(__name__)


def progress(engine: WfcEngine) -> float:
    """Fraction of collapsed cells, in [0, 1]."""
    return engine.get_collapsed_count() / engine.output_size ** 2


def run_engine(
    engine: WfcEngine,
    steps_per_frame: int = 50,
    max_steps: int | None = None,
    on_frame: Callable[[WfcEngine], None] | None = None,
) -> int:
    """Call ``engine.step()`` until the grid is done or *max_steps* is hit.

    Args:
        engine:          The engine to advance.
        steps_per_frame: Steps between two ``on_frame`` callbacks.
        max_steps:       Upper bound on productive steps (None = unbounded).
        on_frame:        Called with the engine after every batch.

    Returns:
        Number of ``step()`` calls that did work.
    """
    if steps_per_frame < 1:
        msg = f"steps_per_frame must be positive, got {steps_per_frame}"
        raise ValueError(msg)

    taken = 0
    done = False
    t0 = time.perf_counter()

    while not done and (max_steps is None or taken < max_steps):
        batch = steps_per_frame
        if max_steps is not None:
            batch = min(batch, max_steps - taken)
        for _ in range(batch):
            if not engine.step():
                done = True
                break
            taken += 1
        if on_frame is not None:
            on_frame(engine)

    logger.info(
        "%s after %s steps  collapsed=%.1f%%  contradictions=%d  full resets=%d  (%.1f s)",
        "Done" if done else "Stopped", f"{taken:,}", progress(engine) * 100,
        engine.contradictions, engine.full_resets, time.perf_counter() - t0,
    )
    return taken
