import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from styllo.config import Config
from styllo.core.models import DetectionResult, FaceGeometry
from styllo.utils.colors import rgb_to_bgr, rgb_to_hex


class UIManager:
    """Draws the live capture overlay on BGR frames"""

    def __init__(self, config: Config):
        self.config = config
        self.logger = logging.getLogger(__name__)

        self.font = cv2.FONT_HERSHEY_SIMPLEX
        self.font_scale = 0.6
        self.thickness = 1
        self.line_height = 25

        # BGR
        self.text_color = (255, 255, 255)
        self.background_color = (0, 0, 0)
        self.face_color = (247, 85, 168)
        self.warning_color = (0, 255, 255)

    def draw_text_with_background(self, frame: np.ndarray, text: str, position: Tuple[int, int],
                                  font_scale: float = None, color: Tuple[int, int, int] = None) -> np.ndarray:
        if frame is None or not text:
            return frame

        font_scale = font_scale or self.font_scale
        color = color or self.text_color

        (text_width, text_height), baseline = cv2.getTextSize(text, self.font, font_scale, self.thickness)
        x, y = position

        h, w = frame.shape[:2]
        if x < 0 or y < 0 or x >= w or y >= h:
            return frame

        padding = 2
        cv2.rectangle(frame,
                      (x - padding, y - text_height - padding),
                      (x + text_width + padding, y + baseline + padding),
                      self.background_color, -1)
        cv2.putText(frame, text, (x, y), self.font, font_scale, color, self.thickness)
        return frame

    def draw_face_overlay(self, frame: np.ndarray, face: Optional[FaceGeometry]) -> np.ndarray:
        """Outline the detected face and mark the cheek sampling points"""
        if frame is None or face is None:
            return frame

        box = face.box
        top_left = (int(box.x), int(box.y))
        bottom_right = (int(box.x + box.width), int(box.y + box.height))
        cv2.rectangle(frame, top_left, bottom_right, self.face_color, 2)

        if face.landmarks is not None:
            for px, py in np.concatenate([face.landmarks.left_cheek, face.landmarks.right_cheek]):
                cv2.circle(frame, (int(px), int(py)), 3, self.face_color, -1)

        return frame

    def draw_status(self, frame: np.ndarray, face_detected: bool, message: Optional[str] = None) -> np.ndarray:
        status = "Face detected - press 'c' to capture" if face_detected else "Looking for a face..."
        color = self.text_color if face_detected else self.warning_color
        frame = self.draw_text_with_background(frame, status, (20, 30), 0.7, color)
        if message:
            frame = self.draw_text_with_background(frame, message, (20, 30 + self.line_height), 0.6,
                                                   self.warning_color)
        return frame

    def draw_result(self, frame: np.ndarray, result: DetectionResult, size: int = 50) -> np.ndarray:
        """Draw the detected skin color swatch and tone in the top right corner"""
        if frame is None or result is None:
            return frame

        h, w = frame.shape[:2]
        x, y = w - size - 20, 20
        if x < 0 or y + size >= h:
            return frame

        cv2.rectangle(frame, (x, y), (x + size, y + size), rgb_to_bgr(result.rgb), -1)
        cv2.rectangle(frame, (x, y), (x + size, y + size), (255, 255, 255), 2)

        label = f"{result.tone.value} {rgb_to_hex(result.rgb)} ({result.confidence:.0%})"
        (text_width, _), _ = cv2.getTextSize(label, self.font, self.font_scale, self.thickness)
        return self.draw_text_with_background(frame, label, (max(0, w - text_width - 20), y + size + 20))
