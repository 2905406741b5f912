# =============================================================================
# SMTP Module
# =============================================================================
# Handles sending emails via SMTP (Simple Mail Transfer Protocol).
#
# Features:
#   - Connection with SSL/STARTTLS
#   - Awaitable, background (completion handler) and blocking sends
#   - Server replies mapped to (code, header, body) results
# =============================================================================

from mailcourier.smtp.client import SMTPTransport, TransferRequest, TransferResult
from mailcourier.smtp.sender import (
    deliver,
    send,
    send_in_background,
    send_sync,
)

__all__ = [
    "SMTPTransport",
    "TransferRequest",
    "TransferResult",
    "deliver",
    "send",
    "send_in_background",
    "send_sync",
]
