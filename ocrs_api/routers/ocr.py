"""
OCR routes for OCRS API Server.

Provides the image text recognition endpoint.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from ..engine.inference import RecognitionError, recognize_image
from ..engine.manager import EngineManager
from ..forms import UploadForm, upload_form
from ..schemas.response import ApiResponse, error_response, ok_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["OCR"])


def get_engine_manager(request: Request) -> EngineManager:
    """Shared engine manager created at startup."""
    return request.app.state.engine_manager


@router.post(
    "/recognize",
    response_model=ApiResponse[List[str]],
    summary="Recognize Text",
    description="""
Recognize the text lines in an uploaded image.

Send the image as the `file` field of a `multipart/form-data` request.
The response `data` lists the recognized lines in reading order.
    """,
    responses={
        400: {"model": ApiResponse[None], "description": "Invalid upload or image"},
        500: {"model": ApiResponse[None], "description": "Recognition failed"},
    },
)
async def recognize(
    form: UploadForm = Depends(upload_form),
    manager: EngineManager = Depends(get_engine_manager),
) -> JSONResponse:
    """
    Recognize text in a single image.
    """
    try:
        image_bytes = await form.file.read()
    except OSError as e:
        logger.error(f"Failed to read uploaded image: {e}")
        return error_response(400, "Failed to read uploaded image")

    try:
        lines = await run_in_threadpool(
            recognize_image,
            manager.get_engine(),
            image_bytes,
            manager.settings.min_line_length,
            manager.inference_guard(),
        )
    except RecognitionError as e:
        return error_response(e.status_code, e.message)

    logger.info(f"Successfully recognized text; found {len(lines)} lines")
    return ok_response(lines)
