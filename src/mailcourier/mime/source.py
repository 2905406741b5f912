# =============================================================================
# Body Source
# =============================================================================
# A pull-based reader over a rendered message.
#
# The transport asks for the body piece by piece instead of receiving it all
# at once. Each in-flight send owns exactly one BodySource; the cursor is the
# only mutable state involved in sending.
# =============================================================================


class BodySource:
    """
    Hands out a byte payload in chunks.

    Usage:
        >>> source = BodySource(b"hello")
        >>> source.next(3)
        b'hel'
        >>> source.next(3)
        b'lo'
        >>> source.next(3) is None
        True
    """

    def __init__(self, payload: bytes) -> None:
        self._payload = payload
        self._offset = 0

    @property
    def content_length(self) -> int:
        """Total size of the payload in bytes."""
        return len(self._payload)

    @property
    def remaining(self) -> int:
        return len(self._payload) - self._offset

    def next(self, max_bytes: int) -> bytes | None:
        """
        Return up to max_bytes of unread payload.

        Returns:
            The next chunk, or None once the payload is exhausted.

        Raises:
            ValueError: If max_bytes is not positive.
        """
        if max_bytes <= 0:
            raise ValueError(f"max_bytes must be positive, got {max_bytes}")
        if self._offset >= len(self._payload):
            return None
        end = min(self._offset + max_bytes, len(self._payload))
        chunk = self._payload[self._offset:end]
        self._offset = end
        return chunk

    def reset(self) -> None:
        """Rewind to the start of the payload."""
        self._offset = 0

    def __repr__(self) -> str:
        return f"BodySource(length={self.content_length}, offset={self._offset})"
