# =============================================================================
# Message Model
# =============================================================================
# An outgoing email: who it goes to, what it says, what it carries.
#
# A Message starts out with only its credentials set. Callers fill in the
# remaining fields one by one and then send it. Every send renders the
# message afresh from the current field values, so a Message can be edited
# and sent again.
#
# Validation is strict and happens before anything touches the network:
#   - at least one of to / cc / bcc
#   - a From address
#   - a subject
#   - a text or HTML body
#   - an smtp:// or smtps:// server URL
# =============================================================================

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from mailcourier.core.address import Address
from mailcourier.core.credentials import Credentials
from mailcourier.errors import (
    InvalidContentError,
    InvalidRecipientError,
    InvalidSenderError,
    InvalidSubjectError,
)
from mailcourier.mime.builder import MessageBuilder, RenderedMessage
from mailcourier.smtp import sender

if TYPE_CHECKING:
    import asyncio

    from mailcourier.smtp.client import SMTPTransport, TransferResult

# Separator between MIME parts. It never changes between sends.
DEFAULT_BOUNDARY = "mailcourier-boundary"


@dataclass
class Message:
    """
    An email being composed for sending.

    Attributes:
        credentials: Server URL and login to send through.
        to: Primary recipients.
        cc: Carbon-copy recipients.
        bcc: Blind carbon-copy recipients. Delivered to, never shown.
        from_: The sender.
        subject: Subject line.
        text: Plain text body.
        html: HTML body. Also available as `content`.
        attachments: Paths of files to attach, in order.
        boundary: MIME boundary token.
        connect_timeout: Seconds allowed for connecting to the server.
        debug: Log the SMTP exchange and build details at INFO level.
        strict_attachments: Raise instead of skipping unreadable attachments.
    """
    credentials: Credentials
    to: list[Address] = field(default_factory=list)
    cc: list[Address] = field(default_factory=list)
    bcc: list[Address] = field(default_factory=list)
    from_: Address = field(default_factory=Address)
    subject: str = ""
    text: str = ""
    html: str = ""
    attachments: list[str] = field(default_factory=list)
    boundary: str = DEFAULT_BOUNDARY
    connect_timeout: float = 15
    debug: bool = False
    strict_attachments: bool = False

    @property
    def content(self) -> str:
        """Alias for the HTML body."""
        return self.html

    @content.setter
    def content(self, value: str) -> None:
        self.html = value

    def validate(self) -> None:
        """
        Check that the message can be sent.

        Raises:
            InvalidRecipientError: No To, Cc or Bcc recipient, or one with a
                line break.
            InvalidSenderError: Empty From address, or a line break in it.
            InvalidSubjectError: Empty or multi-line subject.
            InvalidContentError: Neither text nor HTML body.
            InvalidProtocolError: Server URL is not smtp:// or smtps://.
        """
        if not (self.to or self.cc or self.bcc):
            raise InvalidRecipientError("No recipients specified")
        if any(r.has_line_break for r in self.to + self.cc + self.bcc):
            raise InvalidRecipientError("Recipient contains a line break")
        if not self.from_.address:
            raise InvalidSenderError("No sender address specified")
        if self.from_.has_line_break:
            raise InvalidSenderError("Sender contains a line break")
        if not self.subject:
            raise InvalidSubjectError("Subject must not be empty")
        if "\r" in self.subject or "\n" in self.subject:
            raise InvalidSubjectError("Subject contains a line break")
        if not (self.text or self.html):
            raise InvalidContentError("Message needs a text or HTML body")
        self.credentials.check_protocol()

    def envelope_recipients(self) -> list[str]:
        """Addresses for RCPT TO: to, then cc, then bcc."""
        return [r.address for r in self.to + self.cc + self.bcc]

    def render(self, builder: MessageBuilder | None = None) -> RenderedMessage:
        """Validate and render the message without sending it."""
        return (builder or MessageBuilder()).build(self)

    # -------------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------------

    async def deliver(
        self,
        transport: "SMTPTransport | None" = None,
        builder: MessageBuilder | None = None,
    ) -> "TransferResult":
        """Send and return the server's result without judging it."""
        return await sender.deliver(self, transport=transport, builder=builder)

    async def send(
        self,
        transport: "SMTPTransport | None" = None,
        builder: MessageBuilder | None = None,
    ) -> "TransferResult":
        """Send, raising DeliveryError unless the server accepts the message."""
        return await sender.send(self, transport=transport, builder=builder)

    def send_in_background(
        self,
        completion: Callable[[int, str, str], None] | None = None,
        transport: "SMTPTransport | None" = None,
        builder: MessageBuilder | None = None,
    ) -> "asyncio.Task[TransferResult]":
        """Schedule a send on the running loop; see sender.send_in_background."""
        return sender.send_in_background(
            self, completion, transport=transport, builder=builder
        )

    def send_sync(
        self,
        transport: "SMTPTransport | None" = None,
        builder: MessageBuilder | None = None,
    ) -> "TransferResult":
        """Blocking send for code that has no event loop."""
        return sender.send_sync(self, transport=transport, builder=builder)

    def __repr__(self) -> str:
        return (
            f"Message(from_={str(self.from_)!r}, subject={self.subject!r}, "
            f"to={len(self.to)}, cc={len(self.cc)}, bcc={len(self.bcc)}, "
            f"attachments={len(self.attachments)})"
        )
