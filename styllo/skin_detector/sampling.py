"""Skin pixel sampling from a canvas given face geometry."""

import logging
from typing import List, Optional

import numpy as np

from styllo.config import Config
from styllo.core.models import FaceBox, FaceGeometry, FaceLandmarks
from styllo.processing.image_processor import ImageProcessor


def round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


class SkinPixelSampler:
    """Collects candidate skin pixels around landmarks or inside a face box band"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.logger = logging.getLogger(__name__)

    def filter_brightness(self, pixels: np.ndarray) -> np.ndarray:
        """Keep pixels whose mean channel value lies strictly inside the brightness bounds"""
        if len(pixels) == 0:
            return np.empty((0, 3), dtype=np.uint8)
        brightness = pixels[:, :3].astype(np.float64).mean(axis=1)
        mask = (brightness > self.config.BRIGHTNESS_MIN) & (brightness < self.config.BRIGHTNESS_MAX)
        return pixels[mask, :3].astype(np.uint8)

    def sample_radius(self, canvas_width: int) -> int:
        return max(self.config.SAMPLE_RADIUS_MIN,
                   round_half_up(canvas_width * self.config.SAMPLE_RADIUS_RATIO))

    def from_landmarks(self, canvas: np.ndarray, landmarks: FaceLandmarks) -> np.ndarray:
        """Sample square windows around the cheek and nose bridge landmarks"""
        h, w = canvas.shape[:2]
        radius = self.sample_radius(w)
        chunks: List[np.ndarray] = []
        skipped = 0

        for px, py in landmarks.sample_points():
            cx, cy = round_half_up(px), round_half_up(py)

            # Window of side 2 * radius anchored at the clipped top-left corner
            x0 = max(0, cx - radius)
            y0 = max(0, cy - radius)
            win_w = min(radius * 2, w - x0)
            win_h = min(radius * 2, h - y0)

            if win_w <= 0 or win_h <= 0:
                skipped += 1
                continue

            region = ImageProcessor.read_region(canvas, x0, y0, win_w, win_h)
            chunks.append(self.filter_brightness(region))

        if skipped:
            self.logger.debug(f"Skipped {skipped} landmark windows outside the canvas")

        if not chunks:
            return np.empty((0, 3), dtype=np.uint8)
        pixels = np.concatenate(chunks)
        self.logger.debug(f"Landmark sampling: radius={radius}, pixels={len(pixels)}")
        return pixels

    def from_bounding_box(self, canvas: np.ndarray, box: FaceBox) -> np.ndarray:
        """Sample the cheek band of the face box, used when landmarks are unavailable"""
        h, w = canvas.shape[:2]

        x = max(0, round_half_up(box.x))
        y = max(0, round_half_up(box.y + box.height * self.config.BBOX_BAND_TOP))
        band_w = min(round_half_up(box.width), w - x)
        band_h = min(round_half_up(box.height * self.config.BBOX_BAND_HEIGHT), h - y)

        if band_w <= 0 or band_h <= 0:
            self.logger.debug("Face box band lies outside the canvas")
            return np.empty((0, 3), dtype=np.uint8)

        pixels = self.filter_brightness(ImageProcessor.read_region(canvas, x, y, band_w, band_h))
        self.logger.debug(f"Bounding box sampling: region=({x}, {y}, {band_w}, {band_h}), pixels={len(pixels)}")
        return pixels

    def sample(self, canvas: np.ndarray, face: FaceGeometry) -> np.ndarray:
        """Landmark sampling when landmarks are present, otherwise the box band"""
        if face.landmarks is not None and len(face.landmarks.sample_points()) > 0:
            return self.from_landmarks(canvas, face.landmarks)
        return self.from_bounding_box(canvas, face.box)
