# =============================================================================
# MIME Message Builder
# =============================================================================
# Renders a Message into the exact bytes handed to the SMTP server.
#
# Layout without attachments:
#
#   Date / To / From / Cc / Message-ID / Subject / MIME-Version
#   Content-type: multipart/alternative; boundary="<b>"
#     --<b>  text/plain part   (if text is set)
#     --<b>  text/html part    (if html is set)
#   --<b>--
#
# With attachments the top level becomes multipart/mixed and the text/html
# parts move into a nested multipart/alternative using boundary "<b>-alt".
#
# Bcc recipients are never rendered: they only take part in the envelope.
# Attachments are base64-encoded and wrapped at 78 characters per line
# (RFC 822 line-length limit) with CRLF terminators.
# =============================================================================

import base64
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from email.header import Header
from email.utils import format_datetime
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Callable

from mailcourier.core.address import format_addresses
from mailcourier.errors import InvalidBufferError
from mailcourier.mime.types import file_suffix, resolve_mime_type

if TYPE_CHECKING:
    from mailcourier.core.message import Message

logger = logging.getLogger(__name__)

# Characters of base64 text per line in attachment parts
BASE64_LINE_LENGTH = 78

CRLF = "\r\n"


@dataclass
class RenderedMessage:
    """
    A message ready to hand over to a transport.

    Attributes:
        payload: Complete MIME text, UTF-8 encoded.
        sender: Envelope sender (MAIL FROM).
        recipients: Envelope recipients (RCPT TO): to, then cc, then bcc.
        message_id: Value of the Message-ID header, angle brackets included.
    """
    payload: bytes
    sender: str
    recipients: list[str] = field(default_factory=list)
    message_id: str = ""


def wrap_base64(data: bytes, width: int = BASE64_LINE_LENGTH) -> str:
    """
    Base64-encode data and split it into CRLF-terminated lines.

    Every line holds exactly `width` characters except possibly the last.
    Empty input gives an empty string.
    """
    encoded = base64.b64encode(data).decode("ascii")
    return "".join(
        encoded[i:i + width] + CRLF for i in range(0, len(encoded), width)
    )


def encode_subject(subject: str) -> str:
    """Return the subject as-is when ASCII, else as an RFC 2047 encoded-word."""
    if subject.isascii():
        return subject
    return Header(subject, "utf-8").encode(linesep=CRLF)


def _default_clock() -> datetime:
    return datetime.now().astimezone()


def _default_id() -> str:
    return str(uuid.uuid4())


class MessageBuilder:
    """
    Turns a Message into a RenderedMessage.

    The clock and the identifier source can be replaced, which makes the
    output fully deterministic:

        >>> builder = MessageBuilder(
        ...     clock=lambda: datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
        ...     id_factory=lambda: "fixed-id",
        ... )
        >>> rendered = builder.build(message)

    Attributes:
        clock: Returns the timezone-aware time for the Date header.
        id_factory: Returns a unique token for the Message-ID header.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.clock = clock or _default_clock
        self.id_factory = id_factory or _default_id

    def build(self, message: "Message") -> RenderedMessage:
        """
        Validate and render a message.

        Raises:
            ValidationError: If the message is not fit to send.
            InvalidBufferError: If an attachment can't be read and the
                message uses strict_attachments.
        """
        message.validate()

        boundary = message.boundary
        message_id = self._message_id(message)

        headers = [f"Date: {format_datetime(self.clock())}"]
        if message.to:
            headers.append(f"To: {format_addresses(message.to)}")
        headers.append(f"From: {message.from_}")
        if message.cc:
            headers.append(f"Cc: {format_addresses(message.cc)}")
        headers.append(f"Message-ID: {message_id}")
        headers.append(f"Subject: {encode_subject(message.subject)}")
        headers.append("MIME-Version: 1.0")

        attachments = [
            part for part in (
                self._attachment_part(message, path) for path in message.attachments
            ) if part
        ]

        if attachments:
            alt_boundary = f"{boundary}-alt"
            headers.append(f'Content-type: multipart/mixed; boundary="{boundary}"')
            body = (
                f"--{boundary}{CRLF}"
                f'Content-type: multipart/alternative; boundary="{alt_boundary}"{CRLF}{CRLF}'
                + self._body_parts(message, alt_boundary)
                + f"--{alt_boundary}--{CRLF}{CRLF}"
                + CRLF.join(attachments)
                + f"--{boundary}--{CRLF}"
            )
        else:
            headers.append(f'Content-type: multipart/alternative; boundary="{boundary}"')
            body = self._body_parts(message, boundary) + f"--{boundary}--{CRLF}"

        text = CRLF.join(headers) + CRLF + CRLF + body
        payload = text.encode("utf-8")

        level = logging.INFO if message.debug else logging.DEBUG
        logger.log(
            level,
            f"Rendered {message_id}: {len(payload)} bytes, "
            f"{len(attachments)} attachment(s)",
        )

        return RenderedMessage(
            payload=payload,
            sender=message.from_.address,
            recipients=message.envelope_recipients(),
            message_id=message_id,
        )

    def _message_id(self, message: "Message") -> str:
        """Unique per build, tied to the sender's domain."""
        return f"<{self.id_factory()}.mailcourier{message.from_.domain_suffix}>"

    @staticmethod
    def _body_parts(message: "Message", boundary: str) -> str:
        parts = ""
        if message.text:
            parts += (
                f"--{boundary}{CRLF}"
                f"Content-Type: text/plain; charset=UTF-8; format=flowed{CRLF}{CRLF}"
                f"{message.text}{CRLF}{CRLF}"
            )
        if message.html:
            parts += (
                f"--{boundary}{CRLF}"
                f"Content-Type: text/html; charset=UTF-8{CRLF}{CRLF}"
                f"{message.html}{CRLF}{CRLF}"
            )
        return parts

    @staticmethod
    def _attachment_part(message: "Message", path: str) -> str:
        """
        Render one attachment, or "" if it has to be skipped.

        Unreadable files are skipped with a warning, unless the message is
        in strict mode where they raise InvalidBufferError.
        """
        filename = PurePath(path).name
        if not filename:
            if message.strict_attachments:
                raise InvalidBufferError(f"Attachment path has no file name: {path!r}")
            logger.warning(f"Skipping attachment with no file name: {path!r}")
            return ""

        try:
            data = Path(path).read_bytes()
        except OSError as e:
            if message.strict_attachments:
                raise InvalidBufferError(f"Cannot read attachment {path}: {e}") from e
            logger.warning(f"Skipping unreadable attachment {path}: {e}")
            return ""

        encoded = wrap_base64(data)
        level = logging.INFO if message.debug else logging.DEBUG
        logger.log(
            level,
            f"Attached {filename} ({resolve_mime_type(file_suffix(path))}): "
            f"{len(data)} -> {len(encoded)} bytes",
        )

        return (
            f"--{message.boundary}{CRLF}"
            f'Content-Type: text/plain; name="{filename}"{CRLF}'
            f"Content-Transfer-Encoding: base64{CRLF}"
            f'Content-Disposition: attachment; filename="{filename}"{CRLF}{CRLF}'
            f"{encoded}{CRLF}"
        )
