"""
Candidate ranking and the two palette selection strategies.
"""

import math
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from color_math import clamp, lab_distance, rgb_to_hex, rgb_to_hsv, rgb_to_lab_tuple, round_half_up
from kmeans_lab import Cluster
from modes import ModeConfig


@dataclass(frozen=True)
class Candidate:
    rgb: tuple[int, int, int]
    lab: tuple[float, float, float]
    count: int
    hex: str
    hue: float  # 0..360
    sat: float  # 0..1


def build_candidates(clusters: list[Cluster]) -> list[Candidate]:
    """
    Turn merged clusters into candidates sorted by count, largest first.

    LAB is recomputed from the rounded RGB so it matches the displayed color.
    """
    candidates = []
    for cluster in clusters:
        if cluster.count <= 0:
            continue
        rgb = tuple(int(clamp(round_half_up(c), 0, 255)) for c in cluster.center_rgb)
        h, s, _ = rgb_to_hsv(rgb)
        candidates.append(Candidate(
            rgb=rgb,
            lab=rgb_to_lab_tuple(rgb),
            count=cluster.count,
            hex=rgb_to_hex(*rgb),
            hue=h,
            sat=s,
        ))

    # stable: equal counts keep cluster order
    candidates.sort(key=lambda c: -c.count)
    return candidates


# =============================================================================
# Helpers
# =============================================================================

def _distance(a: Candidate, b: Candidate) -> float:
    return lab_distance(a.lab, b.lab)


def is_already_selected(selected: list[Candidate], candidate: Candidate) -> bool:
    return any(s.hex == candidate.hex for s in selected)


def pick_first_not_in(selected: list[Candidate], options: list[Candidate]) -> Optional[Candidate]:
    for c in options:
        if not is_already_selected(selected, c):
            return c
    return None


def pick_first_with_min_distance(selected: list[Candidate], options: list[Candidate],
                                 min_dist: float) -> Optional[Candidate]:
    for c in options:
        if is_already_selected(selected, c):
            continue
        if all(_distance(s, c) >= min_dist for s in selected):
            return c
    return None


def hue_bucket(hue: float, bucket_size: float) -> float:
    """Lower edge of the hue bucket, e.g. 0..19 -> 0, 20..39 -> 20, 360 -> 0."""
    bucket = math.floor(hue / bucket_size) * bucket_size
    return 0 if bucket == 360 else bucket


# =============================================================================
# Strategies
# =============================================================================

def select_natural_palette(candidates: list[Candidate], color_count: int) -> list[Candidate]:
    """The first color_count candidates, most prevalent first."""
    return list(candidates[:color_count])


def fill_with_diversity(candidates: list[Candidate], selected: list[Candidate],
                        color_count: int, config: ModeConfig) -> list[Candidate]:
    """
    Top up `selected` with candidates that are far enough from every pick.

    Candidates under the minimum weight share are skipped in the spaced pass.
    If slots are still open afterwards, a second pass takes any unselected
    candidate in order, ignoring distance.
    """
    selected = list(selected)
    total = sum(c.count for c in candidates) or 1

    eligible = [c for c in candidates if c.count / total >= config.diversity_min_weight]

    for c in eligible:
        if len(selected) >= color_count:
            break
        if is_already_selected(selected, c):
            continue
        if any(_distance(s, c) < config.diversity_min_dist for s in selected):
            continue
        selected.append(c)

    if len(selected) < color_count:
        for c in candidates:
            if len(selected) >= color_count:
                break
            if is_already_selected(selected, c):
                continue
            selected.append(c)

    return selected[:color_count]


def find_accent_family(candidates: list[Candidate], config: ModeConfig) -> list[Candidate]:
    """
    Members of the highest-scoring hue bucket among saturated, visible
    candidates, sorted by count. Empty if nothing qualifies.

    A bucket scores sum(sat * count) over its members; on a tie the bucket
    seen first wins.
    """
    total = sum(c.count for c in candidates) or 1
    min_count = math.floor(total * config.accent_min_share)

    buckets: dict[float, dict] = {}
    for c in candidates:
        if c.sat < config.accent_sat_min or c.count < min_count:
            continue
        entry = buckets.setdefault(hue_bucket(c.hue, config.hue_bucket_size), {'score': 0.0, 'members': []})
        entry['score'] += c.sat * c.count
        entry['members'].append(c)

    if not buckets:
        return []

    best_bucket = None
    best_score = -1.0
    for bucket, info in buckets.items():
        if info['score'] > best_score:
            best_score = info['score']
            best_bucket = bucket

    logger.debug(f"Accent family: hue bucket {best_bucket} (score {best_score:.2f}) of {len(buckets)}")
    return sorted(buckets[best_bucket]['members'], key=lambda c: -c.count)


def select_artwork_palette(candidates: list[Candidate], color_count: int,
                           config: ModeConfig) -> list[Candidate]:
    """
    Base color, then a light/dark pair from the accent family, then diverse fill.

    The most prevalent candidate is always first.
    """
    if not candidates:
        return []

    selected = [candidates[0]]

    accent = find_accent_family(candidates, config)
    if accent:
        first = pick_first_not_in(selected, accent)
        if first is not None:
            selected.append(first)

        second = pick_first_with_min_distance(selected, accent, config.accent_pair_min_dist)
        if second is not None:
            selected.append(second)

    return fill_with_diversity(candidates, selected, color_count, config)


def select_palette(candidates: list[Candidate], color_count: int,
                   config: ModeConfig) -> list[Candidate]:
    if config.name == "artwork":
        return select_artwork_palette(candidates, color_count, config)
    return select_natural_palette(candidates, color_count)
