"""Processors module for image decoding."""

from .image import ImageDecodeError, decode_image

__all__ = [
    "ImageDecodeError",
    "decode_image",
]
