"""
Recognition pipeline for OCRS API Server.

Drives the engine through input preparation, word detection, line grouping
and text recognition. Each stage that can fail is mapped to a fixed
client-facing message; the underlying error is only logged.
"""

import logging
from contextlib import nullcontext
from typing import Any, Callable, ContextManager, List, Optional, Sequence

from ..processors.image import ImageDecodeError, decode_image
from .capability import ImageSource, OcrEngine

logger = logging.getLogger(__name__)


class RecognitionError(Exception):
    """A pipeline failure with the status and message returned to the client."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _run_stage(message: str, func: Callable[..., Any], *args: Any) -> Any:
    try:
        return func(*args)
    except Exception as e:
        logger.error(f"{message}: {e}")
        raise RecognitionError(500, message) from e


def filter_lines(line_texts: Sequence[Optional[Any]], min_length: int = 2) -> List[str]:
    """
    Keep recognized lines in engine order, dropping empty and short ones.

    Args:
        line_texts: Per-line recognition results; None where nothing was read.
        min_length: Shortest text (in characters) that is kept.
    """
    lines = []
    for line in line_texts:
        if line is None:
            continue
        text = str(line)
        if len(text) >= min_length:
            lines.append(text)
    return lines


def recognize_image(
    engine: OcrEngine,
    image_bytes: bytes,
    min_line_length: int = 2,
    guard: Optional[ContextManager] = None,
) -> List[str]:
    """
    Recognize the text lines in an encoded image.

    Args:
        engine: Initialized OCR engine.
        image_bytes: Uploaded file contents.
        min_line_length: Shortest line kept in the result.
        guard: Context manager held around the engine calls.

    Returns:
        Recognized lines in the order produced by the engine.

    Raises:
        RecognitionError: On the first failing stage.
    """
    try:
        image = decode_image(image_bytes)
    except ImageDecodeError as e:
        logger.error(f"Invalid image format: {e}")
        raise RecognitionError(400, "Invalid image format") from e

    image_source = _run_stage(
        "Failed to process image", ImageSource.from_bytes, image.tobytes(), image.size
    )

    with guard if guard is not None else nullcontext():
        ocr_input = _run_stage("Failed to prepare OCR input", engine.prepare_input, image_source)
        word_rects = _run_stage("Failed to detect words", engine.detect_words, ocr_input)
        line_rects = engine.find_text_lines(ocr_input, word_rects)
        line_texts = _run_stage("Failed to recognize text", engine.recognize_text, ocr_input, line_rects)

    return filter_lines(line_texts, min_line_length)
