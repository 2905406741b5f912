# =============================================================================
# Pytest Configuration and Fixtures
# =============================================================================
# Shared fixtures for the mailcourier test suite.
# =============================================================================

import pytest
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from mailcourier.core import Address, Credentials, Message
from mailcourier.mime import MessageBuilder
from mailcourier.smtp import TransferRequest, TransferResult


class FakeTransport:
    """Records requests instead of talking to a server."""

    def __init__(self, result: TransferResult | None = None) -> None:
        self.result = result or TransferResult(250, "220 smtp.example.com ESMTP", "2.0.0 OK queued")
        self.requests: list[TransferRequest] = []
        self.payloads: list[bytes] = []

    async def perform(self, request: TransferRequest) -> TransferResult:
        self.requests.append(request)
        chunks = []
        while True:
            chunk = request.source.next(10)
            if chunk is None:
                break
            chunks.append(chunk)
        self.payloads.append(b"".join(chunks))
        return self.result


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_credentials():
    """Credentials for a STARTTLS-less plain SMTP server."""
    return Credentials(
        url="smtp://smtp.example.com",
        username="judy@example.com",
        password="secret",
    )


@pytest.fixture
def sample_message(sample_credentials):
    """A valid message with one recipient and a text body."""
    message = Message(credentials=sample_credentials)
    message.from_ = Address("Judith Smith", "judy@example.com")
    message.to.append(Address("", "rocky@example.org"))
    message.subject = "hello"
    message.text = "Hello, World!"
    return message


@pytest.fixture
def fixed_builder():
    """A builder with a frozen clock and identifier."""
    return MessageBuilder(
        clock=lambda: datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc),
        id_factory=lambda: "0f8fad5b-d9cb-469f-a165-70867728950e",
    )


@pytest.fixture
def fake_transport():
    """A transport that accepts everything with 250."""
    return FakeTransport()


@pytest.fixture
def make_transport():
    """Build a FakeTransport answering with the given result."""
    def factory(code: int, header: str = "", body: str = "") -> FakeTransport:
        return FakeTransport(TransferResult(code, header, body))
    return factory
