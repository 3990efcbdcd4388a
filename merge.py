"""
Collapse clusters whose centers are perceptually close.
"""

from loguru import logger

from color_math import lab_distance
from kmeans_lab import Cluster


def merge_close_clusters(clusters: list[Cluster], threshold: float) -> list[Cluster]:
    """
    Greedy single pass merge by LAB distance.

    Each cluster is folded into the first already-accepted cluster whose
    center is closer than `threshold` (Euclidean), otherwise it starts a new
    group. Not iterated to a fixpoint, so accepted groups can drift within
    threshold of one another after absorbing members.

    Args:
        clusters: Output of kmeans_lab(); not modified
        threshold: Merge distance in LAB units

    Returns:
        New list of clusters with count-weighted centers.
    """
    result: list[Cluster] = []

    for cluster in clusters:
        merged = False

        for group in result:
            dist = lab_distance(cluster.center_lab, group.center_lab)
            if dist < threshold:
                total = group.count + cluster.count
                group.center_lab = (group.center_lab * group.count + cluster.center_lab * cluster.count) / total
                group.center_rgb = (group.center_rgb * group.count + cluster.center_rgb * cluster.count) / total
                group.count = total
                merged = True
                break

        if not merged:
            result.append(Cluster(
                center_lab=cluster.center_lab.copy(),
                center_rgb=cluster.center_rgb.copy(),
                count=cluster.count,
            ))

    logger.debug(f"Merge (threshold {threshold}): {len(clusters)} -> {len(result)} clusters")
    return result
