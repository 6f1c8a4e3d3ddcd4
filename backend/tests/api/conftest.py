"""
Fixtures for API tests.

Every test gets its own TestClient (and cookie jar); the service container
is reset between tests by the root conftest.
"""

import pytest
from fastapi.testclient import TestClient

from api import app
from api.dependencies import get_ocr_backend
from modules.ocr.backends import build_result
from modules.ocr.models import OCRResult

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeOCRBackend:
    """Available OCR backend returning canned text."""

    def __init__(self, text: str = "Hello from the picture", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[tuple[int, bool]] = []

    @property
    def available(self) -> bool:
        return True

    async def extract(self, image: bytes, use_filtering: bool = False) -> OCRResult:
        self.calls.append((len(image), use_filtering))
        if self.error is not None:
            raise self.error
        return build_result(self.text, use_filtering)


@pytest.fixture
def client():
    """Create a test client with a fresh cookie jar."""
    return TestClient(app)


@pytest.fixture
def fake_ocr():
    """Replace the configured OCR backend with a fake one."""
    backend = FakeOCRBackend()
    app.dependency_overrides[get_ocr_backend] = lambda: backend
    yield backend
    app.dependency_overrides.pop(get_ocr_backend, None)


def upload(client: TestClient, headers: dict | None = None, **form):
    """POST a PNG to the extraction endpoint."""
    return client.post(
        "/api/extract-text",
        files={"file": ("shot.png", PNG_BYTES, "image/png")},
        data={key: str(value).lower() for key, value in form.items()},
        headers=headers or {},
    )


def register_premium(
    client: TestClient,
    username: str = "alice",
    email: str = "alice@example.com",
    password: str = "secret1",
) -> dict:
    """Pay first, then register; returns the registration response body."""
    paid = client.post("/api/payment/paypal", json={"email": email, "amount": "10.00"})
    assert paid.status_code == 200
    registered = client.post(
        "/api/register",
        json={"username": username, "email": email, "password": password},
    )
    assert registered.status_code == 200
    return registered.json()
