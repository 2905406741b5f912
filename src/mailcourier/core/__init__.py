# =============================================================================
# mailcourier Core Module
# =============================================================================
# The models a caller works with:
#   - Address: a display name and mailbox
#   - Credentials: server URL and login
#   - Message: an outgoing email, which also knows how to send itself
# =============================================================================

from mailcourier.core.address import Address, format_addresses
from mailcourier.core.credentials import Credentials
from mailcourier.core.message import DEFAULT_BOUNDARY, Message

__all__ = [
    "Address",
    "Credentials",
    "Message",
    "DEFAULT_BOUNDARY",
    "format_addresses",
]
