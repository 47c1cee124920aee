# tests/conftest.py
from __future__ import annotations

import json
from typing import Any

import pytest
from fastapi.testclient import TestClient

from docqa.core.state import DocumentLibrary, get_library
from docqa.services.knowledge.transport import TransportResponse

SAMPLE_TEXT = (
    "This is extracted text from the PDF document. "
    "The document contains information about various topics including: "
    "Technical specifications and requirements, business processes and workflows. "
    "The document also discusses advanced concepts in machine learning, artificial intelligence, "
    "and data processing methodologies that are crucial for modern business operations."
)


def make_response(status_code: int = 200, body: Any = None, status_text: str = "OK") -> TransportResponse:
    content = body if isinstance(body, bytes) else json.dumps(body if body is not None else {}).encode()
    return TransportResponse(status_code=status_code, status_text=status_text, content=content)


class SpyTransport:
    """Records every POST and replays a canned response."""

    def __init__(self, response: TransportResponse | None = None):
        self.response = response or make_response(200, {"choices": [{"message": {"content": "stub answer"}}]})
        self.calls: list[dict[str, Any]] = []

    async def post(self, url, headers, body):
        self.calls.append({"url": url, "headers": headers, "body": body})
        return self.response


@pytest.fixture
def spy_transport() -> SpyTransport:
    return SpyTransport()


@pytest.fixture
def library() -> DocumentLibrary:
    return DocumentLibrary()


@pytest.fixture
def client(library, spy_transport):
    from main import app
    from docqa.api.endpoints.query import get_transport

    app.dependency_overrides[get_library] = lambda: library
    app.dependency_overrides[get_transport] = lambda: spy_transport
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
