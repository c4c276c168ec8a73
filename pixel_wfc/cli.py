"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import NoReturn

import numpy as np
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn

from pixel_wfc.config import WfcConfig
from pixel_wfc.engine import WfcEngine
from pixel_wfc.image_io import (
    load_image,
    make_comparison_grid,
    save_animation,
    save_upscaled,
)
from pixel_wfc.patterns import decode_pattern, default_pattern, encode_pattern
from pixel_wfc.runner import run_engine

app = typer.Typer(
    name="pixel-wfc",
    help="Grow large images that locally resemble a small example (Wave Function Collapse).",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()

# Larger inputs are shrunk before tile extraction
MAX_INPUT_SIDE = 64


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _fail(message: str) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(1)


def _sample_frames(frames: list[np.ndarray], limit: int) -> list[np.ndarray]:
    if limit <= 0 or len(frames) <= limit:
        return frames
    keep = np.linspace(0, len(frames) - 1, limit).round().astype(int)
    return [frames[i] for i in keep]


def _check_image(image: Path) -> None:
    if not image.exists():
        _fail(f"Input image not found: {image}")
    if image.suffix.lower() not in _DEFAULTS.SUPPORTED_EXTENSIONS:
        supported = ", ".join(sorted(_DEFAULTS.SUPPORTED_EXTENSIONS))
        _fail(f"Unsupported image type {image.suffix or image.name!r} (use {supported})")


def _resolve_input(image: Path | None, pattern: str | None) -> tuple[np.ndarray, str]:
    if image is not None and pattern is not None:
        _fail("Pass either an IMAGE or --pattern, not both")
    if image is not None:
        _check_image(image)
        return load_image(image, MAX_INPUT_SIDE), image.name
    if pattern is not None:
        try:
            return decode_pattern(pattern), "pattern code"
        except ValueError as exc:
            _fail(str(exc))
    return default_pattern(), "default pattern"


# Defaults come from WfcConfig - single source of truth
_DEFAULTS = WfcConfig()


# -- generate command --------------------------------------------------

@app.command()
def generate(
    image: Path | None = typer.Argument(None, help="Example image (small, few colours)"),
    pattern: str | None = typer.Option(
        None, "--pattern", "-p", help="Share code of an example pattern",
    ),
    output: Path = typer.Option(
        _DEFAULTS.output_dir / f"wfc.{_DEFAULTS.output_format}", "--output", "-o",
        help="Where to write the generated image",
    ),
    output_size: int = typer.Option(
        _DEFAULTS.output_size, "--size", "-n", help="Side of the output grid (cells)",
    ),
    tile_size: int = typer.Option(
        _DEFAULTS.tile_size, "--tile-size", "-t", help="Side of the extracted tiles",
    ),
    seed: int | None = typer.Option(
        _DEFAULTS.seed, "--seed", "-s", help="Random seed (None = random)",
    ),
    steps_per_frame: int = typer.Option(
        _DEFAULTS.steps_per_frame, "--steps-per-frame", help="Steps between progress updates",
    ),
    max_steps: int | None = typer.Option(
        _DEFAULTS.max_steps, "--max-steps", help="Stop after this many steps",
    ),
    upscale: int = typer.Option(
        _DEFAULTS.pixel_upscale, "--upscale", "-u", help="Pixel upscale factor",
    ),
    gif: bool = typer.Option(
        _DEFAULTS.save_animation, "--gif/--no-gif", help="Save a GIF of the collapse",
    ),
    comparison: bool = typer.Option(
        _DEFAULTS.save_comparison, "--comparison/--no-comparison",
        help="Save an Input | Output panel",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Generate an image from IMAGE, a --pattern code, or the default pattern."""
    _setup_logging(verbose)
    logger = logging.getLogger("pixel_wfc")

    cfg = WfcConfig(
        output_size=output_size,
        tile_size=tile_size,
        seed=seed,
        steps_per_frame=steps_per_frame,
        max_steps=max_steps,
        pixel_upscale=upscale,
        save_animation=gif,
        save_comparison=comparison,
        output_dir=output.parent,
    )

    example, source = _resolve_input(image, pattern)
    h, w = example.shape[:2]

    try:
        engine = WfcEngine.from_config(example, cfg)
    except ValueError as exc:
        _fail(str(exc))

    console.print(Panel.fit(
        f"[bold]PIXEL WFC[/bold]\n"
        f"Input: {source} ({w}x{h})  |  Tile size: {cfg.tile_size}\n"
        f"Tiles: {len(engine.tile_set)}  |  Output: {cfg.output_size}x{cfg.output_size}\n"
        f"Seed: {cfg.seed}",
        border_style="cyan",
    ))

    cfg.output_dir.mkdir(parents=True, exist_ok=True)
    frames: list[np.ndarray] = []
    total = cfg.output_size ** 2
    t0 = time.perf_counter()

    with Progress(
        TextColumn("[cyan]Collapsing"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as bar:
        task = bar.add_task("collapse", total=total)

        def _on_frame(eng: WfcEngine) -> None:
            bar.update(task, completed=eng.get_collapsed_count())
            if cfg.save_animation:
                frames.append(eng.render())

        steps = run_engine(
            engine,
            steps_per_frame=cfg.steps_per_frame,
            max_steps=cfg.max_steps,
            on_frame=_on_frame,
        )

    result = engine.render()
    save_upscaled(result, output, cfg.pixel_upscale)

    if cfg.save_animation and frames:
        gif_path = output.with_suffix(".gif")
        kept = _sample_frames(frames, cfg.gif_frames)
        save_animation(kept, gif_path, cfg.pixel_upscale)
        logger.info("Animation saved: %s (%d frames)", gif_path, len(kept))

    if cfg.save_comparison:
        comp_path = output.with_name(f"{output.stem}_comparison{output.suffix}")
        make_comparison_grid(example, result, comp_path, cfg.pixel_upscale)
        logger.info("Comparison saved: %s", comp_path)

    collapsed = engine.get_collapsed_count()
    console.print(
        f"  [green]✓[/green] {output}  "
        f"[dim]{collapsed}/{total} cells  steps={steps}  "
        f"contradictions={engine.contradictions}  time={time.perf_counter() - t0:.1f}s[/dim]"
    )


# -- share code commands -----------------------------------------------

@app.command()
def encode(
    image: Path = typer.Argument(..., help="Small square example image"),
) -> None:
    """Print the share code of IMAGE."""
    _check_image(image)
    pixels = load_image(image)
    if pixels.shape[0] != pixels.shape[1]:
        _fail(f"Share codes need a square image, got {pixels.shape[1]}x{pixels.shape[0]}")
    console.print(encode_pattern(pixels), soft_wrap=True, highlight=False)


@app.command()
def decode(
    code: str = typer.Argument(..., help="Share code"),
    output: Path = typer.Argument(..., help="Where to write the pattern image"),
    upscale: int = typer.Option(1, "--upscale", "-u", help="Pixel upscale factor"),
) -> None:
    """Write the pattern behind CODE to OUTPUT."""
    try:
        pixels = decode_pattern(code)
    except ValueError as exc:
        _fail(str(exc))
    output.parent.mkdir(parents=True, exist_ok=True)
    save_upscaled(pixels, output, upscale)
    console.print(f"[green]✓[/green] Saved to {output}")


if __name__ == "__main__":
    app()
