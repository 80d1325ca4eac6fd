"""
Confidence score in [0, 1] built from three signals:

1. cluster tightness: low pixel variance around the centroid
2. face coverage: a larger face region is more reliable
3. sample size: more valid skin pixels are more reliable
"""

import math
from typing import Optional

import numpy as np

from styllo.config import Config
from styllo.core.models import PixelCluster


def cluster_variance(cluster: PixelCluster) -> float:
    """Mean squared Euclidean distance of the members from the centroid"""
    if cluster.size == 0:
        return math.inf
    diffs = cluster.pixels[:, :3].astype(np.float64) - np.asarray(cluster.centroid[:3], dtype=np.float64)
    return float(np.mean(np.sum(diffs ** 2, axis=1)))


def calculate_confidence(cluster: PixelCluster, face_coverage: float, total_pixels: int,
                         config: Optional[Config] = None) -> float:
    config = config or Config()

    variance_score = max(0.0, 1.0 - cluster_variance(cluster) / config.VARIANCE_NORMALIZER)
    coverage_score = min(1.0, face_coverage / config.TYPICAL_FACE_COVERAGE)
    sample_score = min(1.0, total_pixels / config.TARGET_SAMPLE_SIZE)

    confidence = (variance_score * config.VARIANCE_WEIGHT
                  + coverage_score * config.COVERAGE_WEIGHT
                  + sample_score * config.SAMPLE_WEIGHT)

    confidence = min(1.0, max(0.0, confidence))
    return math.floor(confidence * 100 + 0.5) / 100
