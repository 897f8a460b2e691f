"""Engine management module."""

from .capability import ImageSource, OcrBackend, OcrEngine, resolve_backend
from .inference import RecognitionError, filter_lines, recognize_image
from .manager import EngineManager
from .provisioner import ModelDownloadError, fetch_model

__all__ = [
    "EngineManager",
    "ImageSource",
    "OcrBackend",
    "OcrEngine",
    "resolve_backend",
    "RecognitionError",
    "filter_lines",
    "recognize_image",
    "ModelDownloadError",
    "fetch_model",
]
