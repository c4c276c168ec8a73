#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

Generate from the built-in pattern:

    python main.py generate

Or use the full CLI:

    python -m pixel_wfc.cli generate --help
    python -m pixel_wfc.cli generate my_pattern.png --size 64 --gif
"""

from pixel_wfc.cli import app

if __name__ == "__main__":
    app()
