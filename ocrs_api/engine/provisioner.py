"""
Model provisioning for OCRS API Server.

Models are downloaded on every start; nothing is cached on disk.
"""

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class ModelDownloadError(RuntimeError):
    """Raised when a model artifact cannot be fetched."""


def fetch_model(
    url: str,
    timeout: Optional[float] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> bytes:
    """
    Download a model artifact.

    Args:
        url: Location of the model file.
        timeout: Request timeout in seconds. None waits indefinitely.
        transport: Optional httpx transport (used by tests).

    Returns:
        The complete response body.

    Raises:
        ModelDownloadError: On a transport failure or a non-2xx response.
    """
    logger.info(f"Downloading model from {url}")

    try:
        with httpx.Client(timeout=timeout, follow_redirects=True, transport=transport) as client:
            response = client.get(url)
    except httpx.HTTPError as e:
        raise ModelDownloadError(f"Failed to download model from {url}: {e}") from e

    if not response.is_success:
        raise ModelDownloadError(
            f"Failed to download model from {url} (HTTP {response.status_code})"
        )

    logger.info(f"Downloaded {len(response.content)} bytes from {url}")
    return response.content
