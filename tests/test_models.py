import numpy as np
import pytest

from styllo.core.models import (
    DetectionResult,
    DominantColorResult,
    FaceBox,
    FaceLandmarks,
    LabColor,
    PixelCluster,
    SkinTone,
    normalize_tone_label,
)


@pytest.mark.parametrize("label,expected", [
    ("Fair", SkinTone.FAIR),
    ("olive", SkinTone.OLIVE),
    (" Medium ", SkinTone.MEDIUM),
    ("DEEP", SkinTone.DEEP),
    ("Light", SkinTone.FAIR),
    ("Dark", SkinTone.DEEP),
])
def test_tone_labels_from_every_surface(label, expected):
    assert normalize_tone_label(label) is expected


def test_unknown_tone_label():
    with pytest.raises(ValueError):
        normalize_tone_label("Porcelain")


def test_dominant_rgb_rounds_centroid():
    cluster = PixelCluster(centroid=np.array([10.5, 20.49, 254.9]), pixels=np.zeros((1, 3), dtype=np.uint8))
    result = DominantColorResult(cluster=cluster, lab=LabColor(50, 0, 0))
    assert result.rgb == (11, 20, 255)


def test_landmarks_accept_point_lists():
    landmarks = FaceLandmarks(left_cheek=[(1, 2)], right_cheek=[(3, 4), (5, 6)], nose_bridge=[])
    assert landmarks.sample_points().shape == (3, 2)
    assert landmarks.jaw_outline.shape == (0, 2)


def test_face_box_area():
    assert FaceBox(0, 0, 10, 5).area == 50
    assert FaceBox(0, 0, -1, 5).area == 0


def test_detection_result_payload():
    result = DetectionResult(tone=SkinTone.OLIVE, confidence=0.82, lab=LabColor(48.0, 9.0, 22.0),
                             rgb=(150, 115, 80), pixel_count=1234, face_score=0.9)
    assert result.to_dict() == {
        "skinTone": "Olive",
        "undertone": None,
        "confidence": 0.82,
        "lab": {"L": 48.0, "a": 9.0, "b": 22.0},
        "rgb": [150, 115, 80],
        "faceDetected": True,
        "faceScore": 0.9,
        "pixelCount": 1234,
    }
