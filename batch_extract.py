#!/usr/bin/env python3
"""Batch extract palettes from a directory of images."""

import argparse
import json
import sys
import time
from pathlib import Path

from loguru import logger

from extract_palette import WORKING_WIDTH, extract_palette_from_path, render_swatches


def find_images(directory: Path) -> list[Path]:
    """Find all image files in directory."""
    extensions = {'.jpg', '.jpeg', '.png', '.webp'}
    images = set()
    for ext in extensions:
        images.update(directory.glob(f'*{ext}'))
        images.update(directory.glob(f'*{ext.upper()}'))
    return sorted(images)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Batch extract color palettes and write swatches + JSON.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Directory containing images'
    )
    parser.add_argument(
        '--output', '-o',
        required=True,
        help='Directory for swatch PNG and JSON output'
    )
    parser.add_argument('--colors', '-n', type=int, default=5, help='Palette size (default 5)')
    parser.add_argument('--mode', '-m', choices=['natural', 'artwork'], default='natural')
    parser.add_argument('--seed', type=int, default=None)
    parser.add_argument(
        '--no-downscale',
        action='store_true',
        help=f'Process at full resolution instead of downscaling to {WORKING_WIDTH}px'
    )
    parser.add_argument('--verbose', '-v', action='store_true')

    args = parser.parse_args(argv)

    logger.remove()
    if args.verbose:
        logger.add(sys.stderr, level="DEBUG")

    input_dir = Path(args.input)
    output_dir = Path(args.output)

    if not input_dir.is_dir():
        print(f"Error: Input directory not found: {input_dir}", file=sys.stderr)
        return 2

    output_dir.mkdir(parents=True, exist_ok=True)

    images = find_images(input_dir)
    if not images:
        print(f"No images found in {input_dir}", file=sys.stderr)
        return 2

    total = len(images)
    succeeded = 0
    failed = []
    width = None if args.no_downscale else WORKING_WIDTH

    batch_start = time.perf_counter()

    for i, image_path in enumerate(images, 1):
        try:
            img_start = time.perf_counter()
            palette = extract_palette_from_path(
                str(image_path), color_count=args.colors, mode=args.mode,
                width=width, seed=args.seed,
            )
            img_elapsed = time.perf_counter() - img_start

            render_swatches(palette, str(output_dir / f"{image_path.stem}-palette.png"))
            json_file = output_dir / f"{image_path.stem}-palette.json"
            json_file.write_text(json.dumps({
                'image': image_path.name,
                'mode': args.mode,
                'palette': [p.to_dict() for p in palette],
            }, indent=2))

            hexes = ' '.join(p.hex for p in palette) or '(empty)'
            print(f"[{i}/{total}] {image_path.name} → {hexes} ({img_elapsed:.2f}s)")
            succeeded += 1

        except Exception as e:
            error_msg = f"{type(e).__name__}: {e}"
            print(f"[{i}/{total}] {image_path.name} → ERROR: {error_msg}", file=sys.stderr)
            failed.append((image_path.name, error_msg))

    batch_elapsed = time.perf_counter() - batch_start

    print()
    print(f"Completed: {succeeded}/{total} succeeded in {batch_elapsed:.2f}s")
    if succeeded > 0:
        print(f"Average: {batch_elapsed / succeeded:.2f}s per image")
    if failed:
        print(f"Failed ({len(failed)}):")
        for name, error in failed:
            print(f"  - {name}: {error}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
