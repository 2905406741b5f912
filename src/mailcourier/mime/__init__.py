# =============================================================================
# MIME Module
# =============================================================================
# Turns messages into bytes:
#   - MessageBuilder: renders headers, bodies and base64 attachments
#   - BodySource: hands the rendered bytes out chunk by chunk
#   - resolve_mime_type: extension -> MIME type lookup
# =============================================================================

from mailcourier.mime.builder import (
    BASE64_LINE_LENGTH,
    MessageBuilder,
    RenderedMessage,
    wrap_base64,
)
from mailcourier.mime.source import BodySource
from mailcourier.mime.types import resolve_mime_type

__all__ = [
    "BASE64_LINE_LENGTH",
    "MessageBuilder",
    "RenderedMessage",
    "BodySource",
    "wrap_base64",
    "resolve_mime_type",
]
