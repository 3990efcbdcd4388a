"""
Pixel sampling: turn an RGBA buffer into filtered RGB/LAB samples.
"""

from dataclasses import dataclass

import numpy as np
from loguru import logger

from color_math import rgb_to_lab
from modes import ModeConfig


@dataclass(frozen=True)
class Samples:
    """Pixels that survived filtering, row i of `rgb` matches row i of `lab`."""
    rgb: np.ndarray  # (N, 3) uint8
    lab: np.ndarray  # (N, 3) float64

    def __len__(self) -> int:
        return len(self.rgb)


def build_samples(rgba: np.ndarray, config: ModeConfig) -> Samples:
    """
    Walk an RGBA buffer at the mode's stride and keep usable pixels.

    Args:
        rgba: Flat uint8 buffer (4 bytes per pixel) or array of shape (..., 4)
        config: Mode preset supplying stride and filter cutoffs

    Returns:
        Samples, possibly empty.
    """
    pixels = np.asarray(rgba, dtype=np.uint8).reshape(-1, 4)[::config.stride]

    rgb = pixels[:, :3]
    alpha = pixels[:, 3]
    channels = rgb.astype(np.int32)

    brightness = channels.sum(axis=1) / 3
    spread = channels.max(axis=1) - channels.min(axis=1)

    keep = alpha >= config.alpha_min
    keep &= brightness >= config.brightness_min
    keep &= brightness <= config.brightness_max

    if config.background_brightness is not None:
        background = (brightness > config.background_brightness) & (spread < config.background_spread)
        keep &= ~background

    if config.gray_spread is not None:
        keep &= spread >= config.gray_spread

    kept = np.ascontiguousarray(rgb[keep])
    logger.debug(
        f"Sampling ({config.name}): {len(kept)}/{len(pixels)} strided pixels kept"
    )

    if len(kept) == 0:
        return Samples(rgb=kept.reshape(0, 3), lab=np.empty((0, 3), dtype=np.float64))

    return Samples(rgb=kept, lab=rgb_to_lab(kept))
