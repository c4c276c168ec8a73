"""
Pixel WFC
=========

Grow a large grid of colours that locally resembles a small example
image, using the Wave Function Collapse algorithm:

- **Tiles** are cut from the example, together with their rotations
- **Adjacency** between tiles is derived from how they overlap
- **WfcEngine** collapses the output one cell per ``step()`` and
  repairs contradictions with adaptive local resets
"""

__version__ = "1.0.0"

from pixel_wfc.adjacency import Direction, compute_adjacency, tiles_overlap
from pixel_wfc.config import MAX_TILES, WfcConfig
from pixel_wfc.engine import WfcEngine
from pixel_wfc.image_io import (
    image_data_to_array,
    load_image,
    make_comparison_grid,
    save_animation,
    save_upscaled,
)
from pixel_wfc.patterns import decode_pattern, default_pattern, encode_pattern
from pixel_wfc.recovery import ContradictionRecovery
from pixel_wfc.runner import run_engine
from pixel_wfc.tiles import TileSet, TooManyTilesError, extract_tiles, rotate_tile

__all__ = [
    "MAX_TILES",
    "ContradictionRecovery",
    "Direction",
    "TileSet",
    "TooManyTilesError",
    "WfcConfig",
    "WfcEngine",
    "compute_adjacency",
    "decode_pattern",
    "default_pattern",
    "encode_pattern",
    "extract_tiles",
    "image_data_to_array",
    "load_image",
    "make_comparison_grid",
    "rotate_tile",
    "run_engine",
    "save_animation",
    "save_upscaled",
    "tiles_overlap",
]
