"""
Engine Manager for OCRS API Server.

Runs the startup sequence (download, load, engine construction) once and
shares the resulting engine with every request handler.
"""

import threading
import logging
from contextlib import nullcontext
from typing import Any, ContextManager, Optional

import httpx

from ..config import Settings, get_settings
from .capability import OcrBackend, OcrEngine, resolve_backend
from .provisioner import fetch_model

logger = logging.getLogger(__name__)


class EngineManager:
    """
    Owner of the process-wide OCR engine.

    The engine is built once by initialize() and is read-only afterwards.

    Usage:
        manager = EngineManager(settings)
        manager.initialize()
        engine = manager.get_engine()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        backend: Optional[OcrBackend] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._settings = settings or get_settings()
        self._backend = backend
        self._transport = transport
        self._lock = threading.Lock()
        self._inference_lock = threading.Lock() if self._settings.serialize_inference else None
        self._engine: Optional[OcrEngine] = None

    @property
    def settings(self) -> Settings:
        return self._settings

    def is_initialized(self) -> bool:
        """Check if the engine has been initialized."""
        return self._engine is not None

    def initialize(self) -> None:
        """
        Download both models, load them and build the engine.

        Every step runs sequentially; the first failure is logged and raised
        so that startup aborts.
        """
        with self._lock:
            if self._engine is not None:
                logger.warning("Engine already initialized. Skipping re-initialization.")
                return

            settings = self._settings
            backend = self._backend or resolve_backend(settings.engine_backend)

            detection_bytes = self._download(settings.detection_model_url)
            recognition_bytes = self._download(settings.recognition_model_url)

            detection_model = self._load_model(backend, detection_bytes, "detection")
            recognition_model = self._load_model(backend, recognition_bytes, "recognition")

            try:
                engine = backend.create_engine(detection_model, recognition_model)
            except Exception as e:
                logger.error(f"Failed to initialize OCR engine: {e}")
                raise

            self._backend = backend
            self._engine = engine
            logger.info("Engine initialization complete.")

    def _download(self, url: str) -> bytes:
        return fetch_model(
            url,
            timeout=self._settings.model_download_timeout,
            transport=self._transport,
        )

    def _load_model(self, backend: OcrBackend, data: bytes, kind: str) -> Any:
        try:
            model = backend.load_model(data)
        except Exception as e:
            logger.error(f"Failed to load {kind} model: {e}")
            raise
        logger.info(f"Loaded {kind} model.")
        return model

    def get_engine(self) -> OcrEngine:
        """
        Get the engine instance.

        Raises:
            RuntimeError: If engine is not initialized.
        """
        if self._engine is None:
            raise RuntimeError("Engine not initialized. Call initialize() first.")
        return self._engine

    def inference_guard(self) -> ContextManager:
        """Context manager held around inference calls."""
        if self._inference_lock is None:
            return nullcontext()
        return self._inference_lock

    def shutdown(self) -> None:
        """Release the engine."""
        with self._lock:
            if self._engine is not None:
                logger.info("Shutting down engine...")
                self._engine = None
                logger.info("Engine shutdown complete.")
