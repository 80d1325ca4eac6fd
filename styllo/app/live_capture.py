import logging
import time
from typing import Optional

import cv2

from styllo.config import Config
from styllo.core.camera_manager import CameraManager
from styllo.core.models import DetectionResult, FaceGeometry
from styllo.core.ui_manager import UIManager
from styllo.face_detection.face_detector import MediaPipeFaceDetector
from styllo.processing.image_processor import ImageProcessor
from styllo.skin_detector.skin_tone_detector import SkinToneDetector
from styllo.utils.exceptions import CameraError, DetectionError


# ------------------------- Live Capture Application -------------------------
class LiveCaptureApp:
    """Camera preview with face tracking; captures a frame on demand and analyzes it"""

    WINDOW_NAME = "Styllo Live Capture"

    def __init__(self, config: Config, face_detector: Optional[MediaPipeFaceDetector] = None,
                 camera_manager: Optional[CameraManager] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)

        self.face_detector = face_detector or MediaPipeFaceDetector(config)
        self.camera_manager = camera_manager or CameraManager(config)
        self.image_processor = ImageProcessor(config)
        self.skin_detector = SkinToneDetector(config, self.face_detector, self.image_processor)
        self.ui_manager = UIManager(config)

        self.running = False
        self.frame_count = 0
        self.last_face: Optional[FaceGeometry] = None
        self.last_detection_time = 0.0
        self.last_result: Optional[DetectionResult] = None
        self.message: Optional[str] = None

    def update_preview(self, frame) -> Optional[FaceGeometry]:
        """Run the lightweight detector at most once per detection interval"""
        now = time.time()
        if (now - self.last_detection_time) * 1000 < self.config.LIVE_DETECTION_INTERVAL_MS:
            return self.last_face

        self.last_detection_time = now
        self.last_face = self.face_detector.detect_live(self.image_processor.frame_to_canvas(frame))
        return self.last_face

    def capture(self, frame) -> Optional[DetectionResult]:
        """Analyze the given frame if a face is currently visible"""
        if self.last_face is None:
            self.message = "No face in view"
            return None

        try:
            result = self.skin_detector.analyze_frame(
                self.image_processor.frame_to_canvas(frame), detailed=True
            )
        except DetectionError as e:
            self.message = e.user_message
            return None

        self.last_result = result
        self.message = None
        self.logger.info(f"Captured: {result.to_dict()}")
        return result

    def handle_key(self, key: int, frame) -> bool:
        """Return False when the loop should stop"""
        if key == -1:
            return True
        key &= 0xFF
        if key in (ord('q'), 27):
            return False
        if key == ord('c'):
            self.capture(frame)
        elif key == ord('r'):
            self.last_result = None
            self.message = None
        return True

    def run(self) -> bool:
        try:
            self.face_detector.handle.ensure_ready()
            self.camera_manager.initialize()

            self.running = True
            self.logger.info("Live capture started")

            while self.running:
                ret, frame = self.camera_manager.read_frame()
                if not ret or frame is None:
                    continue

                self.frame_count += 1
                raw = frame.copy()

                face = self.update_preview(frame)
                display = self.ui_manager.draw_face_overlay(frame, face)
                display = self.ui_manager.draw_status(display, face is not None, self.message)
                if self.last_result is not None:
                    display = self.ui_manager.draw_result(display, self.last_result)

                cv2.imshow(self.WINDOW_NAME, display)
                if not self.handle_key(cv2.waitKey(1), raw):
                    break

        except KeyboardInterrupt:
            self.logger.info("Keyboard interrupt received")
        except CameraError as e:
            if self.running:
                self.logger.error(f"Camera error: {e}")
            else:
                self.logger.critical(f"Camera unavailable: {e}")
            return False
        finally:
            self.cleanup()

        return True

    def cleanup(self):
        self.running = False
        self.camera_manager.release()
        self.face_detector.close()
        cv2.destroyAllWindows()
        self.logger.info(f"Live capture stopped after {self.frame_count} frames")
