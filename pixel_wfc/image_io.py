"""Image loading, saving, animation and comparison-panel generation."""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont


def compute_target_size(
    original_width: int,
    original_height: int,
    max_side: int,
) -> tuple[int, int]:
    """Compute downscaled (w, h) preserving aspect ratio.

    The longest side becomes *max_side*; the other is scaled
    proportionally (rounded to the nearest integer, minimum 1).
    """
    if original_width >= original_height:
        w = max_side
        h = max(1, round(original_height * max_side / original_width))
    else:
        h = max_side
        w = max(1, round(original_width * max_side / original_height))
    return w, h


def load_image(path: str | Path, max_side: int | None = None) -> np.ndarray:
    """Load an example image as RGB.

    Images whose longest side exceeds *max_side* are shrunk with
    nearest-neighbour sampling so that no new colours appear.

    Returns:
        (H, W, 3) uint8 array.
    """
    img = Image.open(path).convert("RGB")
    if max_side is not None and max(img.width, img.height) > max_side:
        w, h = compute_target_size(img.width, img.height, max_side)
        img = img.resize((w, h), Image.NEAREST)
    return np.array(img, dtype=np.uint8)


def image_data_to_array(data: bytes, size: int) -> np.ndarray:
    """Turn an RGBA buffer from ``get_image_data`` into (size, size, 3) uint8."""
    rgba = np.frombuffer(data, dtype=np.uint8)
    if rgba.size != size * size * 4:
        msg = f"Buffer holds {rgba.size} bytes, expected {size * size * 4}"
        raise ValueError(msg)
    return rgba.reshape(size, size, 4)[:, :, :3].copy()


def _upscale(array: np.ndarray, pixel_upscale: int) -> Image.Image:
    img = Image.fromarray(array.astype(np.uint8))
    h, w = array.shape[:2]
    return img.resize((w * pixel_upscale, h * pixel_upscale), Image.NEAREST)


def save_upscaled(
    array: np.ndarray,
    path: str | Path,
    pixel_upscale: int = 4,
) -> None:
    """Save a small array as a nearest-neighbour-upscaled image."""
    _upscale(array, pixel_upscale).save(path)


def save_animation(
    frames: list[np.ndarray],
    path: str | Path,
    pixel_upscale: int = 4,
    duration: int = 120,
) -> None:
    """Save (H, W, 3) frames as a looping GIF."""
    if not frames:
        msg = "No frames to save"
        raise ValueError(msg)
    images = [_upscale(f, pixel_upscale) for f in frames]
    images[0].save(
        Path(path),
        save_all=True,
        append_images=images[1:],
        duration=duration,
        loop=0,
    )


def make_comparison_grid(
    pattern: np.ndarray,
    output: np.ndarray,
    output_path: str | Path,
    pixel_upscale: int = 4,
) -> None:
    """Create a 2-panel comparison: Input | Output.

    The input pattern is scaled to the output panel's height so both
    panels line up.
    """
    oh, ow = output.shape[:2]
    panel_h = oh * pixel_upscale
    label_height = 36

    ph, pw = pattern.shape[:2]
    input_w = max(1, round(pw * panel_h / ph))
    input_img = Image.fromarray(pattern).resize((input_w, panel_h), Image.NEAREST)
    output_img = _upscale(output, pixel_upscale)

    panels = [input_img, output_img]
    labels = [f"Input {pw}x{ph}", f"Output {ow}x{oh}"]

    gap = 8
    total_w = sum(p.width for p in panels) + (len(panels) - 1) * gap
    total_h = panel_h + label_height

    canvas = Image.new("RGB", (total_w, total_h), (30, 30, 30))
    draw = ImageDraw.Draw(canvas)

    try:
        font = ImageFont.truetype(
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", 18,
        )
    except OSError:
        font = ImageFont.load_default()

    x = 0
    for panel, label in zip(panels, labels, strict=False):
        canvas.paste(panel, (x, label_height))

        bbox = draw.textbbox((0, 0), label, font=font)
        text_w = bbox[2] - bbox[0]
        tx = x + (panel.width - text_w) // 2
        draw.text((tx, 6), label, fill=(220, 220, 220), font=font)
        x += panel.width + gap

    canvas.save(output_path)
