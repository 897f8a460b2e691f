"""Size ceilings on the multipart body and the file field."""

import os
from tempfile import SpooledTemporaryFile

import pytest
from fastapi.testclient import TestClient
from starlette import formparsers

from conftest import FakeBackend, make_app, make_settings, png_bytes

BOUNDARY = "ocrs-test-boundary"


def multipart_body(filename: str, payload: bytes) -> bytes:
    return (
        f"--{BOUNDARY}\r\n"
        f'Content-Disposition: form-data; name="file"; filename="{filename}"\r\n'
        "Content-Type: application/octet-stream\r\n\r\n"
    ).encode() + payload + f"\r\n--{BOUNDARY}--\r\n".encode()


def test_default_limits_are_15_mib():
    settings = make_settings()

    assert settings.upload_total_limit == 15 * 1024 * 1024
    assert settings.upload_field_limit == 15 * 1024 * 1024


def test_oversized_body_is_rejected_before_inference():
    backend = FakeBackend()
    settings = make_settings(upload_total_limit=1024)
    with TestClient(make_app(settings=settings, backend=backend)) as client:
        files = {"file": ("big.bin", os.urandom(4096), "application/octet-stream")}
        response = client.post("/v1/recognize", files=files)

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == 400
    assert "exceeds the limit of 1024 bytes" in body["message"]
    assert body["data"] is None
    assert backend.engine.calls == []


def test_oversized_file_field_is_rejected():
    backend = FakeBackend()
    settings = make_settings(upload_field_limit=16)
    with TestClient(make_app(settings=settings, backend=backend)) as client:
        response = client.post("/v1/recognize", files={"file": ("a.png", png_bytes((64, 64)), "image/png")})

    assert response.status_code == 400
    assert response.json()["message"] == "Multipart field exceeds the limit of 16 bytes"
    assert backend.engine.calls == []


def test_streamed_body_without_length_is_limited():
    backend = FakeBackend()
    settings = make_settings(upload_total_limit=1024)
    body = multipart_body("big.bin", b"\0" * 8192)
    with TestClient(make_app(settings=settings, backend=backend)) as client:
        response = client.post(
            "/v1/recognize",
            content=iter([body[:4096], body[4096:]]),
            headers={"content-type": f"multipart/form-data; boundary={BOUNDARY}"},
        )

    assert response.status_code == 400
    assert "exceeds the limit of 1024 bytes" in response.json()["message"]
    assert backend.engine.calls == []


def test_upload_within_limits_is_accepted():
    settings = make_settings(upload_total_limit=64 * 1024, upload_field_limit=64 * 1024)
    with TestClient(make_app(settings=settings)) as client:
        response = client.post("/v1/recognize", files={"file": ("a.png", png_bytes(), "image/png")})

    assert response.status_code == 200


def test_oversized_part_is_rejected_while_streaming():
    backend = FakeBackend()
    settings = make_settings(upload_field_limit=1024)
    body = multipart_body("big.bin", b"\0" * 8192)
    with TestClient(make_app(settings=settings, backend=backend)) as client:
        response = client.post(
            "/v1/recognize",
            content=iter([body[i:i + 512] for i in range(0, len(body), 512)]),
            headers={"content-type": f"multipart/form-data; boundary={BOUNDARY}"},
        )

    assert response.status_code == 400
    assert response.json()["message"] == "Multipart field exceeds the limit of 1024 bytes"
    assert backend.engine.calls == []


@pytest.mark.parametrize(
    "overrides",
    [{"upload_field_limit": 1024}, {"upload_total_limit": 1024}],
)
def test_spooled_files_are_closed_when_a_limit_trips(monkeypatch, overrides):
    created = []

    class RecordingSpooledFile(SpooledTemporaryFile):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            created.append(self)

    monkeypatch.setattr(formparsers, "SpooledTemporaryFile", RecordingSpooledFile)

    settings = make_settings(**overrides)
    body = multipart_body("big.bin", b"\0" * 8192)
    with TestClient(make_app(settings=settings)) as client:
        response = client.post(
            "/v1/recognize",
            content=iter([body[i:i + 512] for i in range(0, len(body), 512)]),
            headers={"content-type": f"multipart/form-data; boundary={BOUNDARY}"},
        )

    assert response.status_code == 400
    assert created
    assert all(spooled.closed for spooled in created)
