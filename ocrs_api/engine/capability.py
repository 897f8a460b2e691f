"""
OCR engine boundary for OCRS API Server.

The detection, line grouping and recognition work is done by an external
backend. This module describes what the server needs from it and resolves
the configured backend at startup.
"""

import importlib
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence, Tuple, runtime_checkable

logger = logging.getLogger(__name__)

RGB_CHANNELS = 3


@dataclass(frozen=True)
class ImageSource:
    """
    Read-only view of an RGB pixel buffer handed to the engine.

    Pixels are stored row by row, three bytes per pixel.
    """

    data: bytes
    width: int
    height: int

    @classmethod
    def from_bytes(cls, data: bytes, dimensions: Tuple[int, int]) -> "ImageSource":
        """
        Wrap a raw RGB buffer.

        Args:
            data: Packed RGB pixel data.
            dimensions: (width, height) of the image.

        Raises:
            ValueError: If the buffer size does not match the dimensions.
        """
        width, height = dimensions
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

        expected = width * height * RGB_CHANNELS
        if len(data) != expected:
            raise ValueError(
                f"Pixel buffer has {len(data)} bytes, expected {expected} for {width}x{height} RGB"
            )
        return cls(data=bytes(data), width=width, height=height)

    @property
    def channels(self) -> int:
        return RGB_CHANNELS


@runtime_checkable
class OcrEngine(Protocol):
    """Inference operations used by the recognition endpoint."""

    def prepare_input(self, source: ImageSource) -> Any:
        ...

    def detect_words(self, ocr_input: Any) -> Sequence[Any]:
        ...

    def find_text_lines(self, ocr_input: Any, words: Sequence[Any]) -> Sequence[Sequence[Any]]:
        ...

    def recognize_text(self, ocr_input: Any, lines: Sequence[Sequence[Any]]) -> Sequence[Optional[Any]]:
        ...


@runtime_checkable
class OcrBackend(Protocol):
    """Loads model artifacts and builds an engine from them."""

    def load_model(self, data: bytes) -> Any:
        ...

    def create_engine(self, detection_model: Any, recognition_model: Any) -> OcrEngine:
        ...


def resolve_backend(path: str) -> OcrBackend:
    """
    Import the backend named by ``path``.

    Args:
        path: Import path in the form ``"package.module:attribute"``. When the
            attribute is a class it is instantiated without arguments.

    Returns:
        The backend instance.

    Raises:
        ImportError: If the module or attribute cannot be found.
        TypeError: If the object does not provide the backend operations.
    """
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise ImportError(f"Invalid engine backend path '{path}', expected 'module:attribute'")

    module = importlib.import_module(module_name)
    try:
        backend = getattr(module, attribute)
    except AttributeError as e:
        raise ImportError(f"Module '{module_name}' has no attribute '{attribute}'") from e

    if isinstance(backend, type):
        backend = backend()

    if not isinstance(backend, OcrBackend):
        raise TypeError(f"Engine backend '{path}' does not provide load_model/create_engine")

    logger.info(f"Resolved engine backend: {path}")
    return backend
