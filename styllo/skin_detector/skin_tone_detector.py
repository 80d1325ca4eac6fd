import logging
import time
from typing import Optional

import numpy as np

from styllo.config import Config
from styllo.core.models import DetectionResult, FaceGeometry
from styllo.face_detection.face_detector import FaceDetector
from styllo.processing.image_processor import ImageProcessor, ImageSource
from styllo.skin_detector.classifier import classify_skin_tone, get_undertone
from styllo.skin_detector.confidence import calculate_confidence
from styllo.skin_detector.dominant_color import find_dominant_skin_color
from styllo.skin_detector.sampling import SkinPixelSampler
from styllo.utils.exceptions import (
    ColorAnalysisFailed,
    DetectionError,
    InsufficientPixels,
    NoFaceDetected,
)


class SkinToneDetector:
    """
    Runs one skin tone detection end to end:
    load image -> detect face -> sample pixels -> cluster -> classify -> score.

    Any stage failure stops the run with one DetectionError subclass. Nothing is
    retried here and no state is kept between calls.
    """

    def __init__(self, config: Config, face_detector: FaceDetector,
                 image_processor: Optional[ImageProcessor] = None,
                 sampler: Optional[SkinPixelSampler] = None,
                 random_state=None):
        self.config = config
        self.face_detector = face_detector
        self.image_processor = image_processor or ImageProcessor(config)
        self.sampler = sampler or SkinPixelSampler(config)
        self.random_state = random_state if random_state is not None else config.RANDOM_SEED
        self.logger = logging.getLogger(__name__)

        self.logger.info("SkinToneDetector initialized")

    def analyze(self, source: ImageSource, detailed: bool = False) -> DetectionResult:
        """Analyze an uploaded photo (path, encoded bytes or RGB array)"""
        started = time.time()
        try:
            canvas = self.image_processor.load_image(source)
            result = self._run(canvas, detailed)
        except DetectionError as e:
            self.logger.warning(f"Detection failed [{e.code}]: {e}")
            raise

        self.logger.info(
            f"Detected {result.tone.value} (confidence {result.confidence:.2f}, "
            f"{result.pixel_count} pixels) in {time.time() - started:.2f}s"
        )
        return result

    def analyze_frame(self, canvas: np.ndarray, detailed: bool = False) -> DetectionResult:
        """Analyze an already decoded RGB canvas, such as a captured camera frame"""
        try:
            return self._run(self.image_processor.to_rgb_canvas(canvas), detailed)
        except DetectionError as e:
            self.logger.warning(f"Frame detection failed [{e.code}]: {e}")
            raise

    def _run(self, canvas: np.ndarray, detailed: bool) -> DetectionResult:
        face = self.face_detector.detect(canvas)
        if face is None:
            raise NoFaceDetected()

        pixels = self.sampler.sample(canvas, face)
        if len(pixels) < self.config.MIN_SKIN_PIXELS:
            raise InsufficientPixels(len(pixels), self.config.MIN_SKIN_PIXELS)

        dominant = find_dominant_skin_color(
            pixels,
            k=self.config.KMEANS_CLUSTERS,
            max_iter=self.config.KMEANS_MAX_ITER,
            random_state=self.random_state
        )
        if dominant is None:
            raise ColorAnalysisFailed()

        tone = classify_skin_tone(dominant.lab)
        undertone = get_undertone(dominant.lab) if detailed else None

        coverage = self.image_processor.face_coverage(face.box, canvas.shape)
        confidence = calculate_confidence(dominant.cluster, coverage, len(pixels), self.config)

        return DetectionResult(
            tone=tone,
            undertone=undertone,
            confidence=confidence,
            lab=dominant.lab,
            rgb=dominant.rgb,
            pixel_count=int(len(pixels)),
            face_score=self._face_score(face),
        )

    @staticmethod
    def _face_score(face: FaceGeometry) -> Optional[float]:
        return float(face.score) if face.score is not None else None
