"""Plain k-means over RGB pixel vectors.

Initial centroids are drawn at random from the input, so two calls on the same
pixels may settle on different partitions. Pass ``random_state`` (an int or a
``numpy.random.RandomState``) to make a run reproducible.
"""

import logging
from typing import List

import numpy as np
from sklearn.metrics.pairwise import euclidean_distances
from sklearn.utils import check_random_state

from styllo.core.models import PixelCluster

logger = logging.getLogger(__name__)


def kmeans(pixels: np.ndarray, k: int = 3, max_iter: int = 20, random_state=None) -> List[PixelCluster]:
    """
    Partition ``pixels`` ((N, 3) uint8) into ``k`` clusters.

    With fewer than ``k`` pixels every pixel becomes its own cluster. Otherwise
    the returned list always holds ``k`` clusters; a cluster may be empty if it
    lost all its members, in which case it keeps its previous centroid.
    """
    if k <= 0:
        raise ValueError(f"k must be positive, got {k}")

    pixels = np.asarray(pixels, dtype=np.uint8).reshape(-1, 3)
    n = len(pixels)

    if n < k:
        return [PixelCluster(centroid=p.astype(np.float64), pixels=p[None, :].copy()) for p in pixels]

    rng = check_random_state(random_state)
    seeds = rng.choice(n, size=k, replace=False)
    centroids = pixels[seeds].astype(np.float64)
    points = pixels.astype(np.float64)
    assignments = np.zeros(n, dtype=np.intp)

    n_iter = 0
    for n_iter in range(1, max_iter + 1):
        # argmin keeps the first centroid on ties
        nearest = np.argmin(euclidean_distances(points, centroids), axis=1)
        changed = bool(np.any(nearest != assignments))
        assignments = nearest

        if not changed:
            break

        for j in range(k):
            members = points[assignments == j]
            if len(members) > 0:
                centroids[j] = members.mean(axis=0)

    logger.debug(f"k-means finished: n={n}, k={k}, passes={n_iter}")

    return [
        PixelCluster(centroid=centroids[j].copy(), pixels=pixels[assignments == j])
        for j in range(k)
    ]
