class StylloError(Exception):
    """Base exception for Styllo"""
    pass


class DetectionError(StylloError):
    """A single skin tone detection attempt failed; the caller may retry with other input"""
    code = "DETECTION_FAILED"
    user_message = "Color analysis failed. Please try a well-lit photo."

    def __init__(self, message: str = None):
        super().__init__(message or self.user_message)


class ImageLoadFailed(DetectionError):
    """The input image could not be decoded"""
    code = "IMAGE_LOAD_FAILED"
    user_message = "Failed to load the image. Please try a different file."


class NoFaceDetected(DetectionError):
    """Face detection found no face"""
    code = "NO_FACE_DETECTED"
    user_message = "No face detected. Please use a clear, well-lit photo of your face."


class InsufficientPixels(DetectionError):
    """Too few usable skin pixels were sampled"""
    code = "INSUFFICIENT_PIXELS"
    user_message = "Could not analyze enough skin area. Try a closer photo with better lighting."

    def __init__(self, pixel_count: int, minimum: int):
        self.pixel_count = pixel_count
        self.minimum = minimum
        super().__init__(f"Only {pixel_count} skin pixels sampled, need at least {minimum}")


class ColorAnalysisFailed(DetectionError):
    """Clustering produced no usable dominant color"""
    code = "COLOR_ANALYSIS_FAILED"
    user_message = "Color analysis failed. Please try a well-lit photo."


class CameraError(StylloError):
    """Camera related errors"""
    pass


class FaceModelError(StylloError):
    """Face detection model could not be loaded"""
    pass

