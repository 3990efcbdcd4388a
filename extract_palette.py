#!/usr/bin/env python3
"""
Extract a small weighted color palette from a photograph.

Pipeline: sample -> k-means (LAB) -> merge -> rank candidates -> select ->
normalize weights. Two modes: "natural" reports the dominant colors as they
are, "artwork" suppresses background/gray tones and favors an accent family.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
from loguru import logger
from PIL import Image

from kmeans_lab import kmeans_lab
from merge import merge_close_clusters
from modes import ModeConfig, PaletteMode, get_mode_config
from sampler import build_samples
from selection import Candidate, build_candidates, select_palette


# =============================================================================
# Constants
# =============================================================================

WORKING_WIDTH = 180  # images are downsized to this width before sampling

# Image size limits (security: prevent decompression bombs)
MAX_IMAGE_PIXELS = 50_000_000
MAX_IMAGE_DIMENSION = 10_000


class DecodeError(ValueError):
    """Pixel input is empty, malformed, or inconsistent with its dimensions."""


@dataclass(frozen=True)
class PaletteColor:
    rgb: tuple[int, int, int]
    hex: str
    weight: float

    def to_dict(self) -> dict:
        return {'rgb': list(self.rgb), 'hex': self.hex, 'weight': self.weight}


# =============================================================================
# Pipeline
# =============================================================================

def _as_pixel_array(pixels, width: int, height: int) -> np.ndarray:
    """Validate an RGBA buffer and return it as a flat uint8 array."""
    if isinstance(pixels, np.ndarray):
        if pixels.dtype != np.uint8:
            raise DecodeError(f"Expected uint8 pixels, got {pixels.dtype}")
        data = pixels.ravel()
    else:
        try:
            data = np.frombuffer(memoryview(pixels), dtype=np.uint8)
        except TypeError as e:
            raise DecodeError(f"Unsupported pixel buffer: {e}") from e

    if data.size == 0:
        raise DecodeError("Pixel buffer is empty")
    if data.size % 4 != 0:
        raise DecodeError(f"Pixel buffer length {data.size} is not a multiple of 4")
    if width <= 0 or height <= 0:
        raise DecodeError(f"Invalid dimensions {width}x{height}")
    if data.size != width * height * 4:
        raise DecodeError(
            f"Pixel buffer holds {data.size // 4} pixels, expected {width}x{height}"
        )
    return data


def normalize_weights(selected: list[Candidate]) -> list[PaletteColor]:
    """Weights are shares of the selected colors only, so they sum to 1."""
    total = sum(c.count for c in selected) or 1
    return [PaletteColor(rgb=c.rgb, hex=c.hex, weight=c.count / total) for c in selected]


def extract_palette(pixels, width: int, height: int, color_count: int = 5,
                    mode: PaletteMode = "natural",
                    config: Optional[ModeConfig] = None,
                    seed: Optional[int] = None,
                    rng: Optional[np.random.Generator] = None) -> list[PaletteColor]:
    """
    Extract an ordered, weighted palette from a decoded RGBA buffer.

    Args:
        pixels: Row-major RGBA bytes (bytes-like or uint8 array)
        width, height: Image dimensions in pixels
        color_count: Maximum palette size (>= 1)
        mode: "natural" or "artwork"
        config: Override for the mode preset
        seed: Seed for the clustering random source
        rng: Random source; takes precedence over seed

    Returns:
        Up to color_count PaletteColor entries, first is the primary color.
        Empty when no pixel survives filtering.

    Raises:
        DecodeError: If the pixel buffer is empty or malformed
        ValueError: If color_count < 1 or mode is unknown
    """
    if color_count < 1:
        raise ValueError(f"color_count must be >= 1, got {color_count}")
    if config is None:
        config = get_mode_config(mode)

    data = _as_pixel_array(pixels, width, height)
    if rng is None:
        rng = np.random.default_rng(seed)

    samples = build_samples(data, config)
    if len(samples) == 0:
        logger.debug("No usable pixels; returning empty palette")
        return []

    clusters = kmeans_lab(samples, color_count, iterations=config.iterations, rng=rng)
    merged = merge_close_clusters(clusters, config.merge_threshold)
    candidates = build_candidates(merged)
    if not candidates:
        return []

    selected = select_palette(candidates, color_count, config)
    palette = normalize_weights(selected)

    logger.debug(f"Palette ({config.name}): {[p.hex for p in palette]}")
    return palette


# =============================================================================
# Image I/O
# =============================================================================

def load_image_rgba(image_path: str, width: Optional[int] = WORKING_WIDTH) -> tuple[bytes, int, int]:
    """
    Open an image, convert to RGBA and downsize to a working width.

    Images narrower than `width` are left as is; pass None to keep the
    original size.

    Returns:
        (rgba_bytes, width, height)

    Raises:
        FileNotFoundError: If image file doesn't exist
        DecodeError: If file is not a readable image
        ValueError: If the image exceeds size limits
    """
    try:
        opened = Image.open(image_path)
    except FileNotFoundError:
        raise FileNotFoundError(f"Image not found: {image_path}")
    except Exception as e:
        raise DecodeError(f"Could not open image: {e}") from e

    with opened as img:
        w, h = img.size
        if w > MAX_IMAGE_DIMENSION or h > MAX_IMAGE_DIMENSION:
            raise ValueError(
                f"Image dimensions {w}x{h} exceed maximum "
                f"{MAX_IMAGE_DIMENSION}x{MAX_IMAGE_DIMENSION}"
            )
        if w * h > MAX_IMAGE_PIXELS:
            raise ValueError(f"Image has {w * h:,} pixels, exceeding maximum {MAX_IMAGE_PIXELS:,}")

        try:
            rgba = img.convert('RGBA')
        except OSError as e:
            raise DecodeError(f"Could not decode image: {e}") from e

        if width is not None and w > width:
            new_h = max(1, round(h * width / w))
            rgba = rgba.resize((width, new_h), Image.LANCZOS)

    return rgba.tobytes(), rgba.width, rgba.height


def extract_palette_from_path(image_path: str, color_count: int = 5,
                              mode: PaletteMode = "natural",
                              width: Optional[int] = WORKING_WIDTH,
                              seed: Optional[int] = None) -> list[PaletteColor]:
    pixels, w, h = load_image_rgba(image_path, width=width)
    return extract_palette(pixels, w, h, color_count=color_count, mode=mode, seed=seed)


def render_swatches(palette: list[PaletteColor], output_path: str) -> None:
    """
    Save a swatch strip: one block per color with its hex and weight.
    """
    from PIL import ImageDraw

    swatch_size = 80
    padding = 10
    text_height = 30
    cols = max(len(palette), 1)

    img_width = cols * (swatch_size + padding) + padding
    img_height = swatch_size + text_height + 2 * padding

    img = Image.new('RGB', (img_width, img_height), (240, 240, 240))
    draw = ImageDraw.Draw(img)

    for i, color in enumerate(palette):
        x = padding + i * (swatch_size + padding)
        y = padding

        draw.rectangle([x, y, x + swatch_size, y + swatch_size], fill=color.rgb)

        for line, text in enumerate([color.hex, f"{color.weight * 100:.1f}%"]):
            bbox = draw.textbbox((0, 0), text)
            text_width = bbox[2] - bbox[0]
            text_x = x + (swatch_size - text_width) // 2
            draw.text((text_x, y + swatch_size + 3 + line * 13), text, fill=(0, 0, 0))

    img.save(output_path)


# =============================================================================
# CLI
# =============================================================================

def build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        description='Extract a weighted color palette from a photo.'
    )
    parser.add_argument('--input', '-i', required=True, help='Path to the image file')
    parser.add_argument('--colors', '-n', type=int, default=5, help='Palette size (default 5)')
    parser.add_argument('--mode', '-m', choices=['natural', 'artwork'], default='natural',
                        help='Selection policy (default natural)')
    parser.add_argument('--seed', type=int, default=None, help='Seed for clustering')
    parser.add_argument('--width', type=int, default=WORKING_WIDTH,
                        help=f'Working width in pixels (default {WORKING_WIDTH}, 0 keeps full size)')
    parser.add_argument('--output', '-o', default=None, help='Write a swatch PNG to this path')
    parser.add_argument('--json', action='store_true', help='Print the palette as JSON')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log pipeline stages to stderr')
    return parser


def main(argv=None) -> int:
    import json
    import sys

    args = build_parser().parse_args(argv)

    logger.remove()
    if args.verbose:
        logger.add(sys.stderr, level="DEBUG")

    try:
        palette = extract_palette_from_path(
            args.input,
            color_count=args.colors,
            mode=args.mode,
            width=args.width or None,
            seed=args.seed,
        )
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error extracting palette: {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps([p.to_dict() for p in palette], indent=2))
    elif not palette:
        print("No extractable colors")
    else:
        for p in palette:
            print(f"  {p.hex}  rgb{p.rgb}  {p.weight * 100:5.1f}%")

    if args.output:
        try:
            render_swatches(palette, args.output)
            print(f"\nWrote: {args.output}", file=sys.stderr if args.json else sys.stdout)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1

    return 0


if __name__ == '__main__':
    raise SystemExit(main())
