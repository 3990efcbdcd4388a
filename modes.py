"""
Tuning presets for the two palette modes.

natural: report the true dominant-color distribution.
artwork: denser sampling, background/gray suppression, lighter merging,
         and accent-family selection.
"""

from dataclasses import dataclass
from typing import Literal, Optional

PaletteMode = Literal["natural", "artwork"]


@dataclass(frozen=True)
class ModeConfig:
    """All numeric knobs of the pipeline for one mode."""
    name: PaletteMode

    # Sampling
    stride: int  # sample every Nth pixel
    alpha_min: int = 220
    brightness_min: float = 5
    brightness_max: float = 252
    background_brightness: Optional[float] = None  # bright + flat -> background
    background_spread: Optional[float] = None
    gray_spread: Optional[float] = None  # max-min channel spread below this is gray noise

    # Clustering
    iterations: int = 12
    merge_threshold: float = 18.0  # LAB units, Euclidean

    # Accent family (artwork selection)
    accent_sat_min: float = 0.22
    accent_min_share: float = 0.003
    hue_bucket_size: float = 20.0
    accent_pair_min_dist: float = 10.0

    # Diversity fill (artwork selection)
    diversity_min_dist: float = 12.0
    diversity_min_weight: float = 0.005


NATURAL = ModeConfig(
    name="natural",
    stride=6,
    brightness_min=5,
    brightness_max=252,
    merge_threshold=18.0,
)

ARTWORK = ModeConfig(
    name="artwork",
    stride=4,
    brightness_min=10,
    brightness_max=248,
    background_brightness=160,
    background_spread=20,
    gray_spread=6,
    merge_threshold=12.0,
)

PRESETS = {
    "natural": NATURAL,
    "artwork": ARTWORK,
}


def get_mode_config(mode: str) -> ModeConfig:
    """Look up the preset for a mode name."""
    try:
        return PRESETS[mode]
    except KeyError:
        raise ValueError(
            f"Unknown palette mode {mode!r}; expected one of {sorted(PRESETS)}"
        ) from None
