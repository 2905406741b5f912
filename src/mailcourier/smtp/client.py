# =============================================================================
# SMTP Transport
# =============================================================================
# Hands a rendered message to the SMTP server.
#
# Key responsibilities:
#   - Connection with implicit TLS (smtps://) or STARTTLS (upgrade flag)
#   - Authentication, envelope (MAIL FROM / RCPT TO) and DATA
#   - Pulling the message body from a BodySource in chunks
#   - Turning every outcome into a TransferResult (code, header, body)
#
# The SMTP conversation itself is done by aiosmtplib. Server rejections
# keep the server's reply code; failures below the SMTP layer (refused
# connection, timeout, TLS) are reported with code 0.
# =============================================================================

import logging
import ssl
from dataclasses import dataclass, field

import aiosmtplib

from mailcourier.mime.source import BodySource

logger = logging.getLogger(__name__)

# Bytes requested from the body source per read
UPLOAD_CHUNK_SIZE = 64 * 1024


@dataclass
class TransferRequest:
    """
    Everything the transport needs for one delivery.

    Attributes:
        hostname: SMTP server host.
        port: SMTP server port.
        username: Login name. No AUTH is attempted when empty.
        password: Login secret.
        implicit_tls: Open the connection with TLS (smtps).
        start_tls: Require a STARTTLS upgrade after connecting.
        sender: Envelope sender address.
        recipients: Envelope recipient addresses.
        source: Body to upload.
        connect_timeout: Seconds allowed per network operation.
        verbose: Log the server transcript at INFO instead of DEBUG.
    """
    hostname: str
    port: int
    sender: str
    recipients: list[str]
    source: BodySource
    username: str = ""
    password: str = field(default="", repr=False)
    implicit_tls: bool = False
    start_tls: bool = False
    connect_timeout: float = 15
    verbose: bool = False


@dataclass
class TransferResult:
    """
    Outcome of a delivery attempt.

    Attributes:
        code: Final SMTP reply code, or 0 if no reply was obtained.
        header: Server replies received before the message body, one per line.
        body: Text of the final reply, or the connection error.
    """
    code: int
    header: str = ""
    body: str = ""

    @property
    def ok(self) -> bool:
        """True for 2xx replies."""
        return 200 <= self.code < 300

    def as_tuple(self) -> tuple[int, str, str]:
        return self.code, self.header, self.body


class SMTPTransport:
    """
    Delivers messages with aiosmtplib, one connection per delivery.

    Usage:
        >>> transport = SMTPTransport()
        >>> result = await transport.perform(request)
        >>> result.ok
        True

    Attributes:
        tls_context: SSL context for TLS connections. None uses aiosmtplib's
                     default, which verifies server certificates.
    """

    def __init__(self, tls_context: ssl.SSLContext | None = None) -> None:
        self.tls_context = tls_context

    async def perform(self, request: TransferRequest) -> TransferResult:
        """
        Run one SMTP session for the request.

        Never raises for SMTP or network failures; those are reported in
        the returned TransferResult.
        """
        level = logging.INFO if request.verbose else logging.DEBUG
        transcript: list[str] = []

        def record(response: aiosmtplib.SMTPResponse) -> None:
            line = f"{response.code} {response.message}"
            transcript.append(line)
            logger.log(level, f"< {line}")

        logger.info(
            f"Connecting to SMTP {request.hostname}:{request.port} "
            f"(tls={request.implicit_tls}, starttls={request.start_tls})"
        )

        client = aiosmtplib.SMTP(
            hostname=request.hostname,
            port=request.port,
            use_tls=request.implicit_tls,
            start_tls=request.start_tls,
            timeout=request.connect_timeout,
            tls_context=self.tls_context,
        )

        try:
            record(await client.connect())

            if request.username:
                logger.log(level, f"Authenticating as {request.username}")
                record(await client.login(request.username, request.password))

            record(await client.mail(request.sender))
            for recipient in request.recipients:
                record(await client.rcpt(recipient))

            payload = self._read_body(request.source)
            logger.log(level, f"> DATA ({len(payload)} bytes)")
            response = await client.data(payload)
            logger.log(level, f"< {response.code} {response.message}")

            logger.info(f"Message accepted by {request.hostname}: {response.code}")
            return TransferResult(
                code=response.code,
                header="\n".join(transcript),
                body=response.message,
            )

        except aiosmtplib.SMTPResponseException as e:
            logger.error(f"SMTP server rejected message: {e.code} {e.message}")
            return TransferResult(code=e.code, header="\n".join(transcript), body=e.message)
        except aiosmtplib.SMTPException as e:
            logger.error(
                f"SMTP session with {request.hostname}:{request.port} failed: {e}"
            )
            return TransferResult(code=0, header="\n".join(transcript), body=str(e))
        except Exception as e:
            # e.g. UnicodeEncodeError for a non-ASCII envelope address
            logger.error(
                f"Unexpected error during SMTP session with "
                f"{request.hostname}:{request.port}: {e!r}"
            )
            return TransferResult(code=0, header="\n".join(transcript), body=str(e))
        finally:
            await self._disconnect(client)

    @staticmethod
    def _read_body(source: BodySource) -> bytes:
        """Pull the whole body out of the source, chunk by chunk."""
        source.reset()
        chunks = []
        while True:
            chunk = source.next(UPLOAD_CHUNK_SIZE)
            if chunk is None:
                break
            chunks.append(chunk)
        return b"".join(chunks)

    @staticmethod
    async def _disconnect(client: aiosmtplib.SMTP) -> None:
        if client.is_connected:
            try:
                await client.quit()
            except Exception as e:
                logger.warning(f"Error during SMTP disconnect: {e}")
                client.close()
