# =============================================================================
# MIME Type Lookup
# =============================================================================
# Maps file extensions to MIME types for attachment logging.
#
# Only the interpreter's built-in table is consulted. System files such as
# /etc/mime.types are ignored so the result does not depend on the host.
# =============================================================================

import mimetypes
from pathlib import PurePath

DEFAULT_MIME_TYPE = "application/octet-stream"

_TABLE = mimetypes.MimeTypes(filenames=())


def file_suffix(path: str) -> str:
    """Extension of a path without the leading dot, e.g. "png"."""
    return PurePath(path).suffix.lstrip(".")


def resolve_mime_type(extension: str) -> str:
    """
    Look up the MIME type for an extension.

    Args:
        extension: Extension with or without the leading dot ("png", ".png").

    Returns:
        The MIME type, or application/octet-stream when unknown.
    """
    ext = extension if extension.startswith(".") else f".{extension}"
    mime_type, _ = _TABLE.guess_type(f"attachment{ext.lower()}", strict=False)
    return mime_type or DEFAULT_MIME_TYPE
