import logging
from typing import Optional

import numpy as np

from styllo.core.models import DominantColorResult
from styllo.skin_detector.kmeans import kmeans
from styllo.utils.colors import rgb_to_lab

logger = logging.getLogger(__name__)


def find_dominant_skin_color(pixels: np.ndarray, k: int = 3, max_iter: int = 20,
                             random_state=None) -> Optional[DominantColorResult]:
    """
    Pick the representative skin color from sampled pixels.

    Clusters are ordered by LAB lightness and the middle one is returned, so
    neither the shadow cluster nor the highlight cluster is chosen. Returns
    None when there are no pixels to cluster.
    """
    if pixels is None or len(pixels) == 0:
        return None

    clusters = kmeans(pixels, k=k, max_iter=max_iter, random_state=random_state)

    candidates = [
        DominantColorResult(cluster=c, lab=rgb_to_lab(*c.centroid[:3]))
        for c in clusters
        if c.size > 0
    ]
    if not candidates:
        return None

    candidates.sort(key=lambda result: result.lab.L)
    dominant = candidates[len(candidates) // 2]

    logger.debug(
        f"Dominant cluster {dominant.rgb} (L={dominant.lab.L:.1f}) "
        f"chosen from {len(candidates)} clusters"
    )
    return dominant
