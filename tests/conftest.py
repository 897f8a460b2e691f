"""Shared fixtures: a deterministic OCR backend and model downloads served in-process."""

import io
from typing import List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from ocrs_api.config import Settings
from ocrs_api.engine.manager import EngineManager
from ocrs_api.main import create_app

DETECTION_URL = "https://models.test/text-detection.rten"
RECOGNITION_URL = "https://models.test/text-recognition.rten"

DEFAULT_LINES = ["Hello world", None, "x", "Second line", ""]


class FakeEngine:
    """Records calls and returns canned results; ``fail_stage`` makes one stage raise."""

    def __init__(self, detection_model, recognition_model, lines=None, fail_stage: Optional[str] = None):
        self.detection_model = detection_model
        self.recognition_model = recognition_model
        self.lines = list(DEFAULT_LINES if lines is None else lines)
        self.fail_stage = fail_stage
        self.calls: List[str] = []

    def _enter(self, stage: str):
        self.calls.append(stage)
        if stage == self.fail_stage:
            raise RuntimeError(f"internal {stage} failure")

    def prepare_input(self, source):
        self._enter("prepare_input")
        return {"width": source.width, "height": source.height}

    def detect_words(self, ocr_input):
        self._enter("detect_words")
        return [(0, 0, ocr_input["width"], ocr_input["height"])]

    def find_text_lines(self, ocr_input, words):
        self._enter("find_text_lines")
        return [list(words)]

    def recognize_text(self, ocr_input, lines):
        self._enter("recognize_text")
        return list(self.lines)


class FakeBackend:
    def __init__(self, lines=None, fail_stage: Optional[str] = None, fail_load: bool = False):
        self.lines = lines
        self.fail_stage = fail_stage
        self.fail_load = fail_load
        self.loaded: List[bytes] = []
        self.engine: Optional[FakeEngine] = None

    def load_model(self, data: bytes):
        if self.fail_load:
            raise ValueError("not a model file")
        self.loaded.append(data)
        return ("model", data)

    def create_engine(self, detection_model, recognition_model):
        self.engine = FakeEngine(detection_model, recognition_model, self.lines, self.fail_stage)
        return self.engine


def model_transport(statuses=None, requested=None) -> httpx.MockTransport:
    """Serve both model URLs; ``statuses`` overrides the status code per URL."""
    statuses = statuses or {}

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if requested is not None:
            requested.append(url)
        status = statuses.get(url, 200)
        return httpx.Response(status, content=f"weights:{url.rsplit('/', 1)[-1]}".encode())

    return httpx.MockTransport(handler)


def make_settings(**overrides) -> Settings:
    values = {
        "detection_model_url": DETECTION_URL,
        "recognition_model_url": RECOGNITION_URL,
    }
    values.update(overrides)
    return Settings(**values)


def make_app(settings: Optional[Settings] = None, backend: Optional[FakeBackend] = None, transport=None):
    settings = settings or make_settings()
    manager = EngineManager(
        settings,
        backend=backend or FakeBackend(),
        transport=transport or model_transport(),
    )
    return create_app(settings, engine_manager=manager)


def png_bytes(size=(32, 16), mode="RGB") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, "white").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def client(backend):
    with TestClient(make_app(backend=backend)) as test_client:
        yield test_client


@pytest.fixture
def image_file():
    return {"file": ("sample.png", png_bytes(), "image/png")}
