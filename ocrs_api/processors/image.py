"""
Image decoding for OCRS API Server.
"""

import io
import logging

from PIL import Image

logger = logging.getLogger(__name__)


class ImageDecodeError(ValueError):
    """Raised when uploaded bytes are not a decodable image."""


def decode_image(data: bytes) -> Image.Image:
    """
    Decode image bytes into an RGB image.

    Args:
        data: Encoded image (PNG, JPEG, ...).

    Returns:
        Fully loaded PIL Image in RGB mode.

    Raises:
        ImageDecodeError: If the format is unknown or the data is corrupt.
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except Exception as e:
        raise ImageDecodeError(str(e)) from e

    if image.mode != "RGB":
        image = image.convert("RGB")
    return image

