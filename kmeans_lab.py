"""
K-means over LAB samples.

Centroids are seeded from randomly chosen samples (with replacement), run for
a fixed iteration budget, and never reseeded when they go empty. RGB centers
are averaged from member pixels directly rather than converted back from LAB.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
from loguru import logger
from scipy.spatial.distance import cdist

from sampler import Samples

MAX_ITERATIONS = 12


@dataclass
class Cluster:
    center_lab: np.ndarray  # (3,) float64
    center_rgb: np.ndarray  # (3,) float64
    count: int


def assign_labels(lab: np.ndarray, centers: np.ndarray) -> np.ndarray:
    """Index of the nearest center per sample; ties go to the lowest index."""
    distances = cdist(lab, centers, metric='sqeuclidean')
    return np.argmin(distances, axis=1)


def kmeans_lab(samples: Samples, k: int, iterations: int = MAX_ITERATIONS,
               rng: Optional[np.random.Generator] = None) -> list[Cluster]:
    """
    Cluster samples into at most k groups in LAB space.

    Args:
        samples: Filtered samples from build_samples()
        k: Number of centroids to seed
        iterations: Upper bound on assign/update rounds
        rng: Random source for seeding; a fresh unseeded one if omitted

    Returns:
        Clusters with count > 0, in centroid-index order. Empty if there are
        no samples.
    """
    if len(samples) == 0 or k < 1:
        return []

    if rng is None:
        rng = np.random.default_rng()

    lab = samples.lab
    seeds = rng.integers(0, len(samples), size=k)
    centers = lab[seeds].copy()

    labels = None
    for iteration in range(iterations):
        new_labels = assign_labels(lab, centers)
        if labels is not None and np.array_equal(new_labels, labels):
            logger.debug(f"k-means converged after {iteration} iterations")
            break
        labels = new_labels

        counts = np.bincount(labels, minlength=k)
        sums = np.zeros((k, 3), dtype=np.float64)
        np.add.at(sums, labels, lab)

        occupied = counts > 0
        centers[occupied] = sums[occupied] / counts[occupied, None]

    if labels is None:
        labels = np.zeros(len(samples), dtype=np.intp)

    counts = np.bincount(labels, minlength=k)
    rgb_sums = np.zeros((k, 3), dtype=np.float64)
    np.add.at(rgb_sums, labels, samples.rgb.astype(np.float64))

    clusters = []
    for c in range(k):
        if counts[c] == 0:
            continue
        clusters.append(Cluster(
            center_lab=centers[c].copy(),
            center_rgb=rgb_sums[c] / counts[c],
            count=int(counts[c]),
        ))

    logger.debug(f"k-means: {len(clusters)}/{k} non-empty clusters from {len(samples)} samples")
    return clusters
