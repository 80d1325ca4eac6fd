import threading
import time
from concurrent.futures import TimeoutError as FutureTimeoutError
from types import SimpleNamespace

import numpy as np
import pytest

from styllo.face_detection.face_detector import (
    LEFT_CHEEK_LANDMARKS,
    NOSE_BRIDGE_LANDMARKS,
    JAW_OUTLINE_LANDMARKS,
    MediaPipeFaceDetector,
    MediaPipeModels,
    landmarks_inside_box,
)
from styllo.config import Config
from styllo.core.models import FaceBox, FaceGeometry, FaceLandmarks, SkinTone
from styllo.skin_detector.skin_tone_detector import SkinToneDetector
from styllo.face_detection.model_handle import ModelHandle, ModelState
from styllo.utils.exceptions import FaceModelError


# ------------------------- ModelHandle -------------------------
def test_loads_once_for_concurrent_callers():
    calls = []

    def loader():
        calls.append(threading.get_ident())
        time.sleep(0.05)
        return object()

    handle = ModelHandle(loader)
    results = []
    threads = [threading.Thread(target=lambda: results.append(handle.ensure_ready())) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(calls) == 1
    assert len(results) == 8
    assert all(r is results[0] for r in results)
    assert handle.state is ModelState.READY


def test_starts_uninitialized_and_is_idempotent():
    model = object()
    handle = ModelHandle(lambda: model)
    assert handle.state is ModelState.UNINITIALIZED
    assert handle.ensure_ready() is model
    assert handle.ensure_ready() is model
    assert handle.is_ready


def test_failed_load_is_remembered_until_reset():
    attempts = []

    def loader():
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("weights missing")
        return "model"

    handle = ModelHandle(loader)
    with pytest.raises(FaceModelError):
        handle.ensure_ready()
    assert handle.state is ModelState.FAILED

    with pytest.raises(FaceModelError):
        handle.ensure_ready()
    assert len(attempts) == 1

    handle.reset()
    assert handle.ensure_ready() == "model"
    assert handle.state is ModelState.READY


def test_wait_timeout_leaves_load_running():
    started = threading.Event()
    release = threading.Event()

    def loader():
        started.set()
        release.wait(5)
        return "model"

    handle = ModelHandle(loader)
    owner = threading.Thread(target=handle.ensure_ready)
    owner.start()
    assert started.wait(5)

    with pytest.raises(FutureTimeoutError):
        handle.ensure_ready(timeout=0.01)
    assert handle.state is ModelState.LOADING

    release.set()
    owner.join(5)
    assert handle.ensure_ready(timeout=5) == "model"
    assert handle.state is ModelState.READY


# ------------------------- MediaPipeFaceDetector -------------------------
class FakeSolution:
    def __init__(self, result):
        self.result = result
        self.closed = False

    def process(self, image):
        return self.result

    def close(self):
        self.closed = True


def detection(score, xmin, ymin, width, height):
    box = SimpleNamespace(xmin=xmin, ymin=ymin, width=width, height=height)
    return SimpleNamespace(score=[score], location_data=SimpleNamespace(relative_bounding_box=box))


def mesh_x(i, left=0.3):
    return left + (i % 20) / 20.0 * 0.4


def mesh_y(i):
    return 0.25 + (i // 20) / 25.0 * 0.5


def mesh_result(count=468, left=0.3):
    """A 468 point mesh spread over a 0.4 x 0.5 area starting at (left, 0.25)"""
    landmarks = [SimpleNamespace(x=mesh_x(i, left), y=mesh_y(i)) for i in range(count)]
    return SimpleNamespace(multi_face_landmarks=[SimpleNamespace(landmark=landmarks)])


def make_detector(detections, mesh=None, live=None):
    models = MediaPipeModels(
        face_detection=FakeSolution(SimpleNamespace(detections=detections)),
        face_mesh=FakeSolution(mesh) if mesh is not None else None,
        live_detection=FakeSolution(SimpleNamespace(detections=live)),
    )
    return MediaPipeFaceDetector(handle=ModelHandle(lambda: models)), models


def test_box_is_scaled_to_pixels_and_best_face_wins():
    detector, _ = make_detector([detection(0.6, 0.0, 0.0, 0.1, 0.1), detection(0.9, 0.25, 0.2, 0.5, 0.6)])
    face = detector.detect(np.zeros((100, 200, 3), dtype=np.uint8))

    assert face.score == pytest.approx(0.9)
    assert (face.box.x, face.box.y, face.box.width, face.box.height) == pytest.approx((50, 20, 100, 60))
    assert face.landmarks is None


def test_landmarks_come_from_face_mesh():
    detector, _ = make_detector([detection(0.9, 0.25, 0.2, 0.5, 0.6)], mesh=mesh_result())
    face = detector.detect(np.zeros((100, 200, 3), dtype=np.uint8))

    assert face.landmarks.left_cheek.shape == (len(LEFT_CHEEK_LANDMARKS), 2)
    assert face.landmarks.nose_bridge.shape == (len(NOSE_BRIDGE_LANDMARKS), 2)
    assert face.landmarks.jaw_outline.shape == (len(JAW_OUTLINE_LANDMARKS), 2)
    idx = LEFT_CHEEK_LANDMARKS[0]
    assert tuple(face.landmarks.left_cheek[0]) == pytest.approx((mesh_x(idx) * 200, mesh_y(idx) * 100))


def test_missing_mesh_falls_back_to_box():
    detector, _ = make_detector([detection(0.9, 0.25, 0.2, 0.5, 0.6)],
                                mesh=SimpleNamespace(multi_face_landmarks=None))
    face = detector.detect(np.zeros((100, 200, 3), dtype=np.uint8))
    assert face is not None
    assert face.landmarks is None


def test_no_detections_returns_none():
    detector, _ = make_detector(None)
    assert detector.detect(np.zeros((10, 10, 3), dtype=np.uint8)) is None


def test_live_detection_uses_light_model():
    detector, _ = make_detector([], live=[detection(0.5, 0.1, 0.1, 0.2, 0.2)])
    face = detector.detect_live(np.zeros((100, 100, 3), dtype=np.uint8))
    assert face.box.width == pytest.approx(20)


def test_close_releases_models():
    detector, models = make_detector([], mesh=mesh_result())
    detector.detect(np.zeros((10, 10, 3), dtype=np.uint8))
    detector.close()

    assert models.face_detection.closed and models.face_mesh.closed and models.live_detection.closed
    assert detector.handle.state is ModelState.UNINITIALIZED


def test_live_detection_includes_landmarks():
    detector, _ = make_detector([], mesh=mesh_result(), live=[detection(0.5, 0.25, 0.2, 0.5, 0.6)])
    face = detector.detect_live(np.zeros((100, 200, 3), dtype=np.uint8))

    assert face.landmarks is not None
    assert face.landmarks.left_cheek.shape == (len(LEFT_CHEEK_LANDMARKS), 2)


def test_landmarks_inside_box_allows_padding():
    box = FaceBox(100, 100, 100, 100)
    near_edge = FaceLandmarks(left_cheek=[(90, 150)], right_cheek=[(210, 150)], nose_bridge=[(150, 195)])
    far_away = FaceLandmarks(left_cheek=[(90, 150)], right_cheek=[(260, 150)], nose_bridge=[])

    assert landmarks_inside_box(near_edge, box)
    assert not landmarks_inside_box(far_away, box)
    assert not landmarks_inside_box(FaceLandmarks(left_cheek=[], right_cheek=[], nose_bridge=[]), box)


def two_face_canvas():
    """Pale face on the left half, dark face on the right half"""
    canvas = np.empty((200, 400, 3), dtype=np.uint8)
    canvas[:, :200] = (253, 219, 172)
    canvas[:, 200:] = (70, 45, 30)
    return canvas


def test_mesh_on_another_face_is_not_attached():
    # the box covers the left face, the mesh locked onto the right one
    detector, _ = make_detector([detection(0.9, 0.05, 0.1, 0.4, 0.8)], mesh=mesh_result(left=0.55))
    canvas = two_face_canvas()

    face = detector.detect(canvas)
    assert face.box.x == pytest.approx(20)
    assert face.landmarks is None

    result = SkinToneDetector(Config(), detector, random_state=0).analyze(canvas)
    assert result.tone is SkinTone.FAIR


def test_mesh_on_the_detected_face_is_used():
    detector, _ = make_detector([detection(0.9, 0.05, 0.1, 0.4, 0.8)], mesh=mesh_result(left=0.1))
    canvas = two_face_canvas()

    face = detector.detect(canvas)
    assert isinstance(face, FaceGeometry)
    assert face.landmarks is not None

    result = SkinToneDetector(Config(), detector, random_state=0).analyze(canvas)
    assert result.tone is SkinTone.FAIR
