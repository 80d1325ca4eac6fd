"""Data types shared across the skin tone pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Dict, Any

import numpy as np


class SkinTone(str, Enum):
    """Canonical skin tone categories produced by the photo and live pipelines"""
    FAIR = "Fair"
    MEDIUM = "Medium"
    OLIVE = "Olive"
    DEEP = "Deep"


class Undertone(str, Enum):
    COOL = "Cool"
    WARM = "Warm"
    NEUTRAL = "Neutral"


# The style form offers two extra labels; they fold into the nearest canonical tone.
FORM_TONE_ALIASES = {
    "light": SkinTone.FAIR,
    "dark": SkinTone.DEEP,
}


def normalize_tone_label(label: str) -> SkinTone:
    """Map a tone label from any surface (photo, live capture, style form) to a SkinTone"""
    key = label.strip().lower()
    for tone in SkinTone:
        if tone.value.lower() == key:
            return tone
    if key in FORM_TONE_ALIASES:
        return FORM_TONE_ALIASES[key]
    raise ValueError(f"Unknown skin tone label: {label!r}")


@dataclass(frozen=True)
class LabColor:
    """CIE LAB color (D65)"""
    L: float
    a: float
    b: float

    def as_dict(self) -> Dict[str, float]:
        return {"L": self.L, "a": self.a, "b": self.b}


@dataclass(frozen=True)
class FaceBox:
    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return max(0.0, self.width) * max(0.0, self.height)


def _as_points(points) -> np.ndarray:
    arr = np.asarray(points, dtype=np.float64)
    if arr.size == 0:
        return np.empty((0, 2), dtype=np.float64)
    return arr.reshape(-1, 2)


@dataclass(frozen=True, eq=False)
class FaceLandmarks:
    """Landmark point sets in pixel coordinates, each an (M, 2) array of (x, y)"""
    left_cheek: np.ndarray
    right_cheek: np.ndarray
    nose_bridge: np.ndarray
    jaw_outline: np.ndarray = field(default_factory=lambda: np.empty((0, 2)))

    def __post_init__(self):
        for name in ("left_cheek", "right_cheek", "nose_bridge", "jaw_outline"):
            object.__setattr__(self, name, _as_points(getattr(self, name)))

    def sample_points(self) -> np.ndarray:
        """Points used for skin sampling: both cheeks then the nose bridge"""
        return np.concatenate([self.left_cheek, self.right_cheek, self.nose_bridge])


@dataclass(frozen=True)
class FaceGeometry:
    """Face detector output: bounding box, detection score and optional landmarks"""
    box: FaceBox
    score: float = 1.0
    landmarks: Optional[FaceLandmarks] = None


@dataclass
class PixelCluster:
    """A k-means cluster: float centroid and its (M, 3) uint8 member pixels"""
    centroid: np.ndarray
    pixels: np.ndarray

    @property
    def size(self) -> int:
        return int(len(self.pixels))


@dataclass
class DominantColorResult:
    cluster: PixelCluster
    lab: LabColor

    @property
    def rgb(self) -> Tuple[int, int, int]:
        r, g, b = (int(np.clip(np.floor(c + 0.5), 0, 255)) for c in self.cluster.centroid[:3])
        return (r, g, b)


@dataclass
class DetectionResult:
    """Outcome of one successful skin tone detection"""
    tone: SkinTone
    confidence: float
    lab: LabColor
    rgb: Tuple[int, int, int]
    pixel_count: int
    undertone: Optional[Undertone] = None
    face_detected: bool = True
    face_score: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skinTone": self.tone.value,
            "undertone": self.undertone.value if self.undertone is not None else None,
            "confidence": self.confidence,
            "lab": self.lab.as_dict(),
            "rgb": list(self.rgb),
            "faceDetected": self.face_detected,
            "faceScore": self.face_score,
            "pixelCount": self.pixel_count,
        }
