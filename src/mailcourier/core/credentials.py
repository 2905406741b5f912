# =============================================================================
# Credentials Model
# =============================================================================
# Login details for an SMTP server.
#
# The URL scheme decides how the connection is secured:
#   - smtps://host   TLS from the first byte (implicit TLS, port 465)
#   - smtp://host    plaintext (port 25), unless requires_tls_upgrade is
#                    set, in which case STARTTLS is mandatory
#
# Secrets can be pulled from the system keyring instead of being hard-coded.
# =============================================================================

from dataclasses import dataclass, field
from urllib.parse import urlsplit

import keyring

from mailcourier.errors import CredentialsError, InvalidProtocolError

# Schemes understood by the transport and their default ports
DEFAULT_PORTS = {
    "smtp": 25,
    "smtps": 465,
}


@dataclass(frozen=True)
class Credentials:
    """
    Immutable SMTP login information.

    Attributes:
        url: Server URL, e.g. smtp://smtp.example.com or smtps://host:465.
        username: Login name, usually the mailbox address.
        password: Login secret. Hidden from repr().
        requires_tls_upgrade: Force STARTTLS on a plain smtp:// URL.
    """
    url: str = ""
    username: str = ""
    password: str = field(default="", repr=False)
    requires_tls_upgrade: bool = False

    @property
    def scheme(self) -> str:
        """Lowercased URL scheme ("" if the URL has none)."""
        return urlsplit(self.url).scheme.lower()

    @property
    def hostname(self) -> str:
        return urlsplit(self.url).hostname or ""

    @property
    def port(self) -> int:
        """Explicit URL port, or the default port for the scheme."""
        explicit = urlsplit(self.url).port
        if explicit:
            return explicit
        return DEFAULT_PORTS.get(self.scheme, DEFAULT_PORTS["smtp"])

    @property
    def implicit_tls(self) -> bool:
        """True for smtps:// URLs."""
        return self.scheme == "smtps"

    @property
    def use_tls(self) -> bool:
        """Whether the session must be encrypted, either way."""
        return self.implicit_tls or self.requires_tls_upgrade

    def check_protocol(self) -> None:
        """
        Make sure the URL names a supported protocol.

        Raises:
            InvalidProtocolError: If the scheme is not smtp or smtps, or the
                URL has no host or a malformed port.
        """
        if self.scheme not in DEFAULT_PORTS:
            raise InvalidProtocolError(
                f"Unsupported protocol in {self.url!r}, expected smtp:// or smtps://"
            )
        if not self.hostname:
            raise InvalidProtocolError(f"No server host in {self.url!r}")
        try:
            self.port
        except ValueError as e:
            raise InvalidProtocolError(f"Invalid port in {self.url!r}: {e}") from e

    @classmethod
    def from_keyring(
        cls,
        url: str,
        username: str,
        service: str,
        *,
        requires_tls_upgrade: bool = False,
    ) -> "Credentials":
        """
        Build credentials with the secret stored in the system keyring.

        The secret can be stored with:
            keyring set <service> <username>

        Raises:
            CredentialsError: If no secret is stored for the username.
        """
        password = keyring.get_password(service, username)
        if not password:
            raise CredentialsError(
                f"No password found in keyring for {username}. "
                f"Set it with: keyring set {service} {username}"
            )
        return cls(
            url=url,
            username=username,
            password=password,
            requires_tls_upgrade=requires_tls_upgrade,
        )
