"""
Multipart upload parsing for OCRS API Server.

The request body is streamed through Starlette's multipart parser with a
byte ceiling applied while parsing, so oversized uploads are rejected
before the route body runs.
"""

import logging
from dataclasses import dataclass
from typing import AsyncGenerator, AsyncIterator

from fastapi import Request
from starlette.datastructures import FormData, Headers, UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser

logger = logging.getLogger(__name__)

FILE_FIELD = "file"


class MultipartError(Exception):
    """Malformed or unacceptable multipart upload."""


class MultipartLimitError(MultipartError):
    """The request body or one of its parts exceeded its size limit."""


@dataclass
class UploadForm:
    """Parsed recognition request: a single uploaded file."""

    file: UploadFile


class _LimitExceeded(MultiPartException):
    """Raised while parsing so Starlette closes the files it already spooled."""


class LimitedMultiPartParser(MultiPartParser):
    """Multipart parser that rejects any part larger than ``part_limit`` as its data arrives."""

    def __init__(self, headers: Headers, stream: AsyncGenerator[bytes, None], part_limit: int):
        super().__init__(headers, stream)
        self.part_limit = part_limit
        self._part_size = 0

    def on_part_begin(self) -> None:
        super().on_part_begin()
        self._part_size = 0

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        self._part_size += end - start
        if self._part_size > self.part_limit:
            raise _LimitExceeded(f"Multipart field exceeds the limit of {self.part_limit} bytes")
        super().on_part_data(data, start, end)


async def _limited_stream(request: Request, limit: int) -> AsyncGenerator[bytes, None]:
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise _LimitExceeded(
                f"Total size of multipart payload exceeds the limit of {limit} bytes"
            )
        yield chunk


async def parse_upload_form(request: Request, total_limit: int, field_limit: int) -> UploadForm:
    """
    Parse a multipart request carrying a ``file`` field.

    Args:
        request: Incoming request.
        total_limit: Maximum body size in bytes.
        field_limit: Maximum size in bytes of any single part.

    Raises:
        MultipartError: If the body is not valid multipart, exceeds a limit
            or has no ``file`` upload.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.split(";")[0].strip().lower() != "multipart/form-data":
        raise MultipartError("Unsupported content type: expected multipart/form-data")

    content_length = request.headers.get("content-length")
    if content_length is not None and content_length.isdigit() and int(content_length) > total_limit:
        raise MultipartLimitError(
            f"Total size of multipart payload exceeds the limit of {total_limit} bytes"
        )

    parser = LimitedMultiPartParser(
        request.headers,
        _limited_stream(request, total_limit),
        part_limit=field_limit,
    )
    try:
        form = await parser.parse()
    except _LimitExceeded as e:
        raise MultipartLimitError(e.message) from e
    except MultiPartException as e:
        raise MultipartError(e.message) from e

    try:
        return _extract_upload(form)
    except MultipartError:
        await form.close()
        raise


def _extract_upload(form: FormData) -> UploadForm:
    upload = form.get(FILE_FIELD)
    if upload is None:
        raise MultipartError(f"Field `{FILE_FIELD}` is missing")
    if not isinstance(upload, UploadFile):
        raise MultipartError(f"Field `{FILE_FIELD}` is not a file upload")
    logger.debug(f"Parsed upload {upload.filename!r} ({upload.size} bytes)")
    return UploadForm(file=upload)


async def upload_form(request: Request) -> AsyncIterator[UploadForm]:
    """FastAPI dependency yielding the parsed upload and closing it afterwards."""
    settings = request.app.state.settings
    form = await parse_upload_form(
        request,
        total_limit=settings.upload_total_limit,
        field_limit=settings.upload_field_limit,
    )
    try:
        yield form
    finally:
        await form.file.close()
