import logging
import logging.handlers
import os
from pathlib import Path

from fastapi import FastAPI
from fastapi.testclient import TestClient

import main
from core.config import settings
from core.logger import LOGGER_NAME
from main import app


client = TestClient(app)


def test_health_check() -> None:
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": "0.1.0"}


def test_unknown_route_uses_error_envelope() -> None:
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_openapi_schema_available() -> None:
    response = client.get("/openapi.json")
    assert response.status_code == 200
    payload = response.json()
    assert payload["info"]["title"] == "Canvas IDE API"
    assert "/api/projects/{project_id}/canvas" in payload["paths"]


class _RecordingLogger:
    def __init__(self) -> None:
        self.records = []

    def info(self, msg, *args) -> None:
        self.records.append(msg % args)


def test_request_log_records_requests_that_raise(monkeypatch) -> None:
    recorder = _RecordingLogger()
    monkeypatch.setattr(main, "logger", recorder)

    failing_app = FastAPI()
    failing_app.add_middleware(main._RequestLogMiddleware)

    @failing_app.get("/boom")
    def boom():
        raise RuntimeError("boom")

    response = TestClient(failing_app, raise_server_exceptions=False).get("/boom")

    assert response.status_code == 500
    assert len(recorder.records) == 1
    assert recorder.records[0].startswith("GET /boom |")
    assert "status=500" in recorder.records[0]


def test_request_log_records_status(monkeypatch) -> None:
    recorder = _RecordingLogger()
    monkeypatch.setattr(main, "logger", recorder)

    client.get("/api/health")

    assert any(record.startswith("GET /api/health |") and "status=200" in record for record in recorder.records)


def test_log_file_follows_log_dir() -> None:
    file_handlers = [
        handler
        for handler in logging.getLogger(LOGGER_NAME).handlers
        if isinstance(handler, logging.handlers.RotatingFileHandler)
    ]

    assert file_handlers
    assert Path(file_handlers[0].baseFilename).parent == Path(os.path.abspath(settings.log_dir))
