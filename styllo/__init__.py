"""Skin tone detection and color classification for Styllo."""

from styllo.config import Config
from styllo.core.models import DetectionResult, FaceGeometry, LabColor, SkinTone, Undertone
from styllo.skin_detector.skin_tone_detector import SkinToneDetector
from styllo.utils.exceptions import (
    ColorAnalysisFailed,
    DetectionError,
    ImageLoadFailed,
    InsufficientPixels,
    NoFaceDetected,
)

__version__ = "0.1.0"
