# =============================================================================
# mailcourier: Compose MIME email and send it over SMTP
# =============================================================================
#
# Build a Message, fill in recipients, subject, bodies and attachments, and
# send it through any smtp:// or smtps:// server:
#
#   >>> from mailcourier import Address, Credentials, Message
#   >>> msg = Message(Credentials("smtps://smtp.example.com", "me@example.com", "secret"))
#   >>> msg.from_ = Address("Me", "me@example.com")
#   >>> msg.to.append(Address("", "you@example.com"))
#   >>> msg.subject = "hello"
#   >>> msg.text = "Hello, World!"
#   >>> await msg.send()
#
# =============================================================================

__version__ = "0.1.0"
__app_name__ = "mailcourier"

from mailcourier.core import Address, Credentials, Message
from mailcourier.errors import (
    CredentialsError,
    DeliveryError,
    InvalidBufferError,
    InvalidContentError,
    InvalidProtocolError,
    InvalidRecipientError,
    InvalidSenderError,
    InvalidSubjectError,
    SMTPError,
    ValidationError,
)
from mailcourier.smtp import SMTPTransport, TransferResult

__all__ = [
    "Address",
    "Credentials",
    "Message",
    "SMTPTransport",
    "TransferResult",
    "SMTPError",
    "ValidationError",
    "InvalidRecipientError",
    "InvalidSenderError",
    "InvalidSubjectError",
    "InvalidContentError",
    "InvalidProtocolError",
    "InvalidBufferError",
    "CredentialsError",
    "DeliveryError",
    "__version__",
]
