import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from styllo.config import Config
from styllo.core.models import FaceBox
from styllo.utils.exceptions import ImageLoadFailed

ImageSource = Union[str, Path, bytes, bytearray, np.ndarray]


class ImageProcessor:
    """Image decoding and raster access for the detection pipeline"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.logger = logging.getLogger(__name__)

    def load_image(self, source: ImageSource) -> np.ndarray:
        """
        Decode an image into an (H, W, 3) uint8 RGB canvas.

        Accepts a file path, encoded image bytes or an already decoded array.
        Arrays are assumed to be RGB (or RGBA / greyscale); files and bytes are
        decoded with OpenCV and converted from BGR.
        """
        if isinstance(source, np.ndarray):
            return self.to_rgb_canvas(source)

        if isinstance(source, (bytes, bytearray)):
            buffer = np.frombuffer(bytes(source), dtype=np.uint8)
            label = f"<{len(source)} bytes>"
        else:
            path = Path(source)
            label = str(path)
            try:
                buffer = np.fromfile(str(path), dtype=np.uint8)
            except OSError as e:
                self.logger.warning(f"Cannot read image file {label}: {e}")
                raise ImageLoadFailed(f"Cannot read image file {label}") from e

        decoded = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED) if buffer.size else None
        if decoded is None or decoded.size == 0:
            self.logger.warning(f"Failed to decode image {label}")
            raise ImageLoadFailed(f"Failed to decode image {label}")

        if decoded.ndim == 2:
            rgb = cv2.cvtColor(decoded, cv2.COLOR_GRAY2RGB)
        elif decoded.shape[2] == 4:
            rgb = cv2.cvtColor(decoded, cv2.COLOR_BGRA2RGB)
        else:
            rgb = cv2.cvtColor(decoded, cv2.COLOR_BGR2RGB)

        self.logger.debug(f"Loaded image {label} with shape {rgb.shape}")
        return self.to_rgb_canvas(rgb)

    def to_rgb_canvas(self, image: np.ndarray) -> np.ndarray:
        """Normalise an RGB, RGBA or greyscale array to contiguous (H, W, 3) uint8"""
        if image is None or not isinstance(image, np.ndarray) or image.size == 0:
            raise ImageLoadFailed("Empty image")
        if image.ndim == 2:
            image = np.repeat(image[:, :, None], 3, axis=2)
        if image.ndim != 3 or image.shape[2] < 3:
            raise ImageLoadFailed(f"Unsupported image shape {image.shape}")
        if image.dtype != np.uint8:
            image = np.clip(image, 0, 255).astype(np.uint8)
        return np.ascontiguousarray(image[:, :, :3])

    def frame_to_canvas(self, frame_bgr: np.ndarray) -> np.ndarray:
        """Convert an OpenCV BGR camera frame to an RGB canvas"""
        return cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)

    @staticmethod
    def read_region(canvas: np.ndarray, x: int, y: int, width: int, height: int) -> np.ndarray:
        """
        Return the RGB pixels of a rectangle as an (N, 3) array in row-major order.

        The rectangle is clipped to the canvas; a rectangle with no area left
        after clipping yields an empty array.
        """
        h, w = canvas.shape[:2]
        x1, y1 = max(0, int(x)), max(0, int(y))
        x2, y2 = min(w, int(x) + int(width)), min(h, int(y) + int(height))
        if x1 >= x2 or y1 >= y2:
            return np.empty((0, 3), dtype=np.uint8)
        return canvas[y1:y2, x1:x2, :3].reshape(-1, 3)

    @staticmethod
    def face_coverage(box: FaceBox, canvas_shape: Tuple[int, ...]) -> float:
        """Fraction of the canvas area covered by the face box"""
        h, w = canvas_shape[:2]
        if h <= 0 or w <= 0:
            return 0.0
        return box.area / float(w * h)
