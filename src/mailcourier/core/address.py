# =============================================================================
# Address Model
# =============================================================================
# A mailbox with an optional display name, as it appears in To/From/Cc.
#
#   Address("", "a@b.com")      ->  a@b.com
#   Address("A B", "a@b.com")   ->  "A B" <a@b.com>
# =============================================================================

from dataclasses import dataclass


@dataclass
class Address:
    """
    An email participant.

    Attributes:
        name: Full name shown by mail clients. May be empty.
        address: Mailbox address, e.g. nickname@some.where.
    """
    name: str = ""
    address: str = ""

    @property
    def domain_suffix(self) -> str:
        """
        The part of the address from "@" onward.

        Returns the whole address when there is no "@".
        """
        at = self.address.find("@")
        if at < 0:
            return self.address
        return self.address[at:]

    def __str__(self) -> str:
        """Header form of this address."""
        if not self.name:
            return self.address
        quoted = self.name.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{quoted}" <{self.address}>'

    @property
    def has_line_break(self) -> bool:
        """True if either field contains CR or LF."""
        return any(c in value for c in "\r\n" for value in (self.name, self.address))


def format_addresses(addresses: list[Address]) -> str:
    """Join addresses for a header value, in list order."""
    return ", ".join(str(addr) for addr in addresses)
