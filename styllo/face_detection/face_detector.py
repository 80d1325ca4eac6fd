import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import numpy as np

from styllo.config import Config
from styllo.core.models import FaceBox, FaceGeometry, FaceLandmarks
from styllo.face_detection.model_handle import ModelHandle


class FaceDetector(Protocol):
    """Anything that finds a single face in an RGB canvas"""

    def detect(self, image: np.ndarray) -> Optional[FaceGeometry]:
        ...


# Face Mesh landmark indices used for skin sampling
LEFT_CHEEK_LANDMARKS = [116, 117, 118, 50, 205, 187, 123]
RIGHT_CHEEK_LANDMARKS = [345, 346, 347, 280, 425, 411, 352]
NOSE_BRIDGE_LANDMARKS = [168, 6, 197, 195, 5]
# Face oval, clockwise from the forehead centre
JAW_OUTLINE_LANDMARKS = [
    10, 338, 297, 332, 284, 251, 389, 356, 454, 323, 361, 288,
    397, 365, 379, 378, 400, 377, 152, 148, 176, 149, 150, 136,
    172, 58, 132, 93, 234, 127, 162, 21, 54, 103, 67, 109,
]

# Cheek landmarks may sit slightly outside the detector box
LANDMARK_BOX_PADDING = 0.15


def landmarks_inside_box(landmarks: FaceLandmarks, box: FaceBox, padding: float = LANDMARK_BOX_PADDING) -> bool:
    """True when every sampling landmark falls inside the box grown by ``padding`` on each side"""
    points = landmarks.sample_points()
    if len(points) == 0:
        return False
    pad_x, pad_y = box.width * padding, box.height * padding
    xs, ys = points[:, 0], points[:, 1]
    return bool(np.all((xs >= box.x - pad_x) & (xs <= box.x + box.width + pad_x)
                       & (ys >= box.y - pad_y) & (ys <= box.y + box.height + pad_y)))


@dataclass
class MediaPipeModels:
    face_detection: Any
    face_mesh: Any
    live_detection: Any

    def close(self):
        for model in (self.face_detection, self.face_mesh, self.live_detection):
            if model is not None:
                model.close()


def load_mediapipe_models(config: Config) -> MediaPipeModels:
    """Create the MediaPipe Face Detection and Face Mesh solutions"""
    import mediapipe as mp

    face_detection = mp.solutions.face_detection.FaceDetection(
        model_selection=1,
        min_detection_confidence=config.FACE_MIN_DETECTION_CONFIDENCE
    )
    live_detection = mp.solutions.face_detection.FaceDetection(
        model_selection=0,
        min_detection_confidence=config.LIVE_MIN_DETECTION_CONFIDENCE
    )
    face_mesh = None
    if config.USE_LANDMARKS:
        face_mesh = mp.solutions.face_mesh.FaceMesh(
            static_image_mode=True,
            max_num_faces=1,
            refine_landmarks=False,
            min_detection_confidence=config.FACE_MIN_DETECTION_CONFIDENCE
        )
    return MediaPipeModels(face_detection=face_detection, face_mesh=face_mesh,
                           live_detection=live_detection)


class MediaPipeFaceDetector:
    """Face detection backed by MediaPipe, returning box, score and cheek/nose landmarks"""

    def __init__(self, config: Optional[Config] = None, handle: Optional[ModelHandle] = None):
        self.config = config or Config()
        self.logger = logging.getLogger(__name__)
        self.handle = handle or ModelHandle(lambda: load_mediapipe_models(self.config),
                                            name="MediaPipe face models")

    def detect(self, image: np.ndarray) -> Optional[FaceGeometry]:
        """Detect the most confident face in an RGB canvas, with landmarks when available"""
        models = self.handle.ensure_ready()
        return self._attach_landmarks(models, self._detect_box(models.face_detection, image), image)

    def detect_live(self, image: np.ndarray) -> Optional[FaceGeometry]:
        """Detection for preview frames, using the lower live score threshold"""
        models = self.handle.ensure_ready()
        return self._attach_landmarks(models, self._detect_box(models.live_detection, image), image)

    def _attach_landmarks(self, models: MediaPipeModels, geometry: Optional[FaceGeometry],
                          image: np.ndarray) -> Optional[FaceGeometry]:
        if geometry is None or models.face_mesh is None:
            return geometry

        h, w = image.shape[:2]
        landmarks = self._detect_landmarks(models.face_mesh, image, w, h)
        if landmarks is None:
            self.logger.debug("Face mesh found no landmarks, using box only")
            return geometry

        # Face Mesh runs separately from Face Detection and may pick another face
        if not landmarks_inside_box(landmarks, geometry.box):
            self.logger.debug("Face mesh landmarks lie outside the detected face box, using box only")
            return geometry

        return FaceGeometry(box=geometry.box, score=geometry.score, landmarks=landmarks)

    def _detect_box(self, detector, image: np.ndarray) -> Optional[FaceGeometry]:
        h, w = image.shape[:2]
        results = detector.process(image)
        detections = getattr(results, 'detections', None)
        if not detections:
            return None

        best = max(detections, key=lambda d: d.score[0] if d.score else 0.0)
        bbox = best.location_data.relative_bounding_box
        box = FaceBox(x=bbox.xmin * w, y=bbox.ymin * h, width=bbox.width * w, height=bbox.height * h)
        score = float(best.score[0]) if best.score else 0.0
        return FaceGeometry(box=box, score=score)

    def _detect_landmarks(self, face_mesh, image: np.ndarray, w: int, h: int) -> Optional[FaceLandmarks]:
        results = face_mesh.process(image)
        faces = getattr(results, 'multi_face_landmarks', None)
        if not faces:
            return None

        landmark = faces[0].landmark

        def points(indices):
            return [(landmark[i].x * w, landmark[i].y * h) for i in indices if i < len(landmark)]

        return FaceLandmarks(
            left_cheek=points(LEFT_CHEEK_LANDMARKS),
            right_cheek=points(RIGHT_CHEEK_LANDMARKS),
            nose_bridge=points(NOSE_BRIDGE_LANDMARKS),
            jaw_outline=points(JAW_OUTLINE_LANDMARKS),
        )

    def close(self):
        if self.handle.is_ready:
            self.handle.ensure_ready().close()
            self.handle.reset()
