import os
import json
import logging
from dataclasses import dataclass, asdict
from typing import Optional


# ------------------------- Configuration -------------------------
@dataclass
class Config:
    """Configuration for the skin tone engine and live capture"""
    # Directory settings
    LOGS_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"
    CONFIG_FILE: str = "styllo_config.json"

    # Video settings
    CAM_INDEX: int = 0
    FRAME_WIDTH: int = 1280
    FRAME_HEIGHT: int = 720
    MAX_RETRIES: int = 3
    FRAME_SKIP_THRESHOLD: int = 5
    LIVE_DETECTION_INTERVAL_MS: int = 120

    # Skin pixel sampling
    BRIGHTNESS_MIN: int = 30
    BRIGHTNESS_MAX: int = 230
    SAMPLE_RADIUS_MIN: int = 8
    SAMPLE_RADIUS_RATIO: float = 0.02
    BBOX_BAND_TOP: float = 0.3
    BBOX_BAND_HEIGHT: float = 0.45

    # Clustering
    KMEANS_CLUSTERS: int = 3
    KMEANS_MAX_ITER: int = 20
    RANDOM_SEED: Optional[int] = None

    # Pipeline
    MIN_SKIN_PIXELS: int = 50

    # Confidence calibration
    VARIANCE_NORMALIZER: float = 5000.0
    TYPICAL_FACE_COVERAGE: float = 0.2
    TARGET_SAMPLE_SIZE: int = 500
    VARIANCE_WEIGHT: float = 0.5
    COVERAGE_WEIGHT: float = 0.3
    SAMPLE_WEIGHT: float = 0.2

    # Face detection
    FACE_MIN_DETECTION_CONFIDENCE: float = 0.5
    LIVE_MIN_DETECTION_CONFIDENCE: float = 0.45
    USE_LANDMARKS: bool = True

    def validate(self) -> bool:
        """Validate configuration values"""
        try:
            assert 0 <= self.BRIGHTNESS_MIN < self.BRIGHTNESS_MAX <= 255, \
                "BRIGHTNESS_MIN/BRIGHTNESS_MAX must satisfy 0 <= min < max <= 255"
            assert self.SAMPLE_RADIUS_MIN > 0, "SAMPLE_RADIUS_MIN must be positive"
            assert 0.0 < self.SAMPLE_RADIUS_RATIO <= 0.5, "SAMPLE_RADIUS_RATIO must be in (0, 0.5]"
            assert 0.0 <= self.BBOX_BAND_TOP < 1.0, "BBOX_BAND_TOP must be in [0, 1)"
            assert 0.0 < self.BBOX_BAND_HEIGHT <= 1.0, "BBOX_BAND_HEIGHT must be in (0, 1]"
            assert self.KMEANS_CLUSTERS > 0, "KMEANS_CLUSTERS must be positive"
            assert self.KMEANS_MAX_ITER > 0, "KMEANS_MAX_ITER must be positive"
            assert self.MIN_SKIN_PIXELS >= 0, "MIN_SKIN_PIXELS must not be negative"
            assert self.VARIANCE_NORMALIZER > 0, "VARIANCE_NORMALIZER must be positive"
            assert self.TYPICAL_FACE_COVERAGE > 0, "TYPICAL_FACE_COVERAGE must be positive"
            assert self.TARGET_SAMPLE_SIZE > 0, "TARGET_SAMPLE_SIZE must be positive"
            weights = (self.VARIANCE_WEIGHT, self.COVERAGE_WEIGHT, self.SAMPLE_WEIGHT)
            assert all(w >= 0 for w in weights), "confidence weights must not be negative"
            assert abs(sum(weights) - 1.0) < 1e-6, "confidence weights must sum to 1.0"
            assert 0.0 <= self.FACE_MIN_DETECTION_CONFIDENCE <= 1.0, \
                "FACE_MIN_DETECTION_CONFIDENCE must be between 0.0 and 1.0"
            assert 0.0 <= self.LIVE_MIN_DETECTION_CONFIDENCE <= 1.0, \
                "LIVE_MIN_DETECTION_CONFIDENCE must be between 0.0 and 1.0"
            assert 480 <= self.FRAME_WIDTH <= 3840, "FRAME_WIDTH must be between 480 and 3840"
            assert 320 <= self.FRAME_HEIGHT <= 2160, "FRAME_HEIGHT must be between 320 and 2160"
            return True
        except AssertionError as e:
            logging.error(f"Configuration validation failed: {e}")
            return False

    def save(self, filepath: str) -> bool:
        """Save configuration to file"""
        try:
            with open(filepath, 'w') as f:
                json.dump(asdict(self), f, indent=2)
            return True
        except OSError as e:
            logging.error(f"Failed to save configuration: {e}")
            return False

    @classmethod
    def load(cls, filepath: str) -> 'Config':
        """Load configuration from file, falling back to defaults"""
        try:
            if os.path.exists(filepath):
                with open(filepath, 'r') as f:
                    data = json.load(f)
                config = cls(**data)
                if config.validate():
                    return config
                else:
                    logging.warning("Invalid configuration, using defaults")
        except (OSError, ValueError, TypeError) as e:
            logging.error(f"Failed to load configuration: {e}")

        return cls()  # Return default configuration
