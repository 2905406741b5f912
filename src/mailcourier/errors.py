# =============================================================================
# Exceptions
# =============================================================================
# Every error raised by mailcourier derives from SMTPError.
#
#   - ValidationError subclasses are raised before any network activity.
#   - DeliveryError is raised only after a completed round trip with the
#     server, and carries the server's status code and reply text.
# =============================================================================


class SMTPError(Exception):
    """Base exception for mailcourier operations."""
    pass


class ValidationError(SMTPError):
    """Raised when a message cannot be sent as composed."""
    pass


class InvalidRecipientError(ValidationError):
    """Raised when To, Cc and Bcc are all empty."""
    pass


class InvalidSenderError(ValidationError):
    """Raised when the From address is empty."""
    pass


class InvalidSubjectError(ValidationError):
    """Raised when the subject is empty."""
    pass


class InvalidContentError(ValidationError):
    """Raised when both the text and HTML bodies are empty."""
    pass


class InvalidProtocolError(ValidationError):
    """Raised when the server URL scheme is neither smtp nor smtps."""
    pass


class InvalidBufferError(ValidationError):
    """Raised when a strict-mode attachment cannot be read or encoded."""
    pass


class CredentialsError(SMTPError):
    """Raised when login credentials cannot be resolved."""
    pass


class DeliveryError(SMTPError):
    """
    Raised when the server rejects a message.

    Attributes:
        code: SMTP reply code (0 when the connection itself failed).
        body: Reply text from the server, or the connection error text.
    """

    def __init__(self, code: int, body: str) -> None:
        super().__init__(f"Delivery failed with status {code}: {body}")
        self.code = code
        self.body = body
