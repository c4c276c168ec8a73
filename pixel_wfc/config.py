"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

# Width of the domain representation; tile sets larger than this are rejected.
MAX_TILES = 128


@dataclass(frozen=True)
class WfcConfig:
    """All tuneable parameters for a generation run.

    Attributes:
        output_size:          Side length of the square output grid (in cells).
        tile_size:            Side length of the tiles cut from the input.
        max_tiles:            Upper bound on unique tiles (domain width).
        seed:                 Random seed (None = non-deterministic).
        steps_per_frame:      ``step()`` calls between two frames / progress updates.
        max_steps:            Hard cap on ``step()`` calls (None = until done).
        reset_radius:         Initial side of the local reset square.
        reset_radius_growth:  Growth of the reset square after repeated failures.
        max_reset_attempts:   Contradictions tolerated before the square grows.
        pixel_upscale:        Each output cell becomes n x n in saved images.
        gif_frames:           Maximum number of frames kept for the animation.
        output_format:        Image format for saved files.
        save_animation:       Persist a GIF of the collapse.
        save_comparison:      Persist an "Input | Output" panel.
        output_dir:           Folder for results.
        SUPPORTED_EXTENSIONS: Image suffixes accepted as CLI input.
    """

    # Generation
    output_size: int = 128
    tile_size: int = 2
    max_tiles: int = MAX_TILES
    seed: int | None = None

    # Driving loop
    steps_per_frame: int = 50
    max_steps: int | None = None

    # Contradiction recovery
    reset_radius: int = 8
    reset_radius_growth: int = 4
    max_reset_attempts: int = 8

    # Output
    pixel_upscale: int = 4
    gif_frames: int = 60
    output_format: str = "png"
    save_animation: bool = False
    save_comparison: bool = False

    # Paths
    output_dir: Path = field(default_factory=lambda: Path("output"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".png", ".bmp", ".gif", ".tiff", ".tif", ".webp"}
    )
