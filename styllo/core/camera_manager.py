import logging
import time
from typing import Any, Dict, Optional, Tuple

import cv2
import numpy as np

from styllo.config import Config
from styllo.utils.exceptions import CameraError


class CameraManager:
    """Camera frame source for live capture"""

    def __init__(self, config: Config):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.cap = None
        self.frame_skip_count = 0

    def initialize(self) -> bool:
        """Open the configured camera, retrying other indices before giving up"""
        for attempt in range(self.config.MAX_RETRIES):
            self.logger.info(f"Attempting to initialize camera (attempt {attempt + 1})")

            camera_indices = [self.config.CAM_INDEX, 0, 1, 2] if self.config.CAM_INDEX != 0 else [0, 1, 2]

            for cam_idx in camera_indices:
                try:
                    self.cap = cv2.VideoCapture(cam_idx)

                    if self.cap.isOpened():
                        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.FRAME_WIDTH)
                        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.FRAME_HEIGHT)
                        self.cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)  # Reduce buffer for lower latency

                        # Test camera by reading a frame
                        ret, frame = self.cap.read()
                        if ret and frame is not None:
                            self.logger.info(f"Camera initialized successfully on index {cam_idx}")
                            return True

                    self.cap.release()
                    self.cap = None

                except cv2.error as e:
                    self.logger.warning(f"Failed to initialize camera {cam_idx}: {e}")
                    if self.cap:
                        self.cap.release()
                        self.cap = None

            time.sleep(1)  # Wait before retry

        raise CameraError("Failed to initialize camera after all attempts")

    def read_frame(self) -> Tuple[bool, Optional[np.ndarray]]:
        """Read a mirrored BGR frame"""
        if not self.cap or not self.cap.isOpened():
            return False, None

        ret, frame = self.cap.read()

        if not ret or frame is None:
            self.frame_skip_count += 1
            if self.frame_skip_count > self.config.FRAME_SKIP_THRESHOLD:
                raise CameraError("Too many consecutive frame read failures")
            return False, None

        self.frame_skip_count = 0

        # Mirror like a selfie preview
        return True, cv2.flip(frame, 1)

    def release(self):
        if self.cap:
            self.cap.release()
            self.cap = None
            self.logger.info("Camera released")

    def get_frame_info(self) -> Dict[str, Any]:
        if not self.cap or not self.cap.isOpened():
            return {}

        return {
            'width': int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            'height': int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            'fps': self.cap.get(cv2.CAP_PROP_FPS),
        }
