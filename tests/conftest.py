from typing import List, Optional

import numpy as np
import pytest

from styllo.config import Config
from styllo.core.models import FaceBox, FaceGeometry, FaceLandmarks


class FakeFaceDetector:
    """Returns a fixed geometry and records every canvas it was given"""

    def __init__(self, geometry: Optional[FaceGeometry]):
        self.geometry = geometry
        self.calls: List[np.ndarray] = []

    def detect(self, image):
        self.calls.append(image)
        return self.geometry

    def detect_live(self, image):
        return self.detect(image)


def solid_canvas(rgb, width=100, height=100):
    canvas = np.empty((height, width, 3), dtype=np.uint8)
    canvas[:, :] = rgb
    return canvas


def noisy_canvas(rgb, width=200, height=200, spread=6, seed=7):
    rng = np.random.RandomState(seed)
    noise = rng.randint(-spread, spread + 1, size=(height, width, 3))
    return np.clip(np.asarray(rgb) + noise, 0, 255).astype(np.uint8)


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def pale_canvas():
    return solid_canvas((253, 219, 172))


@pytest.fixture
def full_canvas_face():
    return FaceGeometry(box=FaceBox(0, 0, 100, 100), score=0.97)


@pytest.fixture
def cheek_landmarks():
    return FaceLandmarks(
        left_cheek=[(70, 100), (75, 112)],
        right_cheek=[(130, 100), (125, 112)],
        nose_bridge=[(100, 88), (100, 98)],
        jaw_outline=[(45, 80), (60, 150), (100, 165), (140, 150), (155, 80)],
    )
