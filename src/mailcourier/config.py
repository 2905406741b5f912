# =============================================================================
# Configuration Management
# =============================================================================
# Loads and saves named sending profiles.
#
# XDG Base Directory Compliance (https://specifications.freedesktop.org/basedir-spec/):
#   - Config:  $XDG_CONFIG_HOME/mailcourier/  (default: ~/.config/mailcourier/)
#
# Files:
#   - config.toml: sending profiles (server URL, login name, sender)
#
# IMPORTANT: Passwords are NOT stored in the config file. They live in the
# system keyring under the service "mailcourier:<profile name>":
#
#   keyring set mailcourier:work me@example.com
# =============================================================================

import os
import tomllib  # Built into Python 3.11+
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w  # For writing TOML (tomllib is read-only)

from mailcourier.core import Address, Credentials, Message

# Application identifier used in XDG paths and keyring service names
APP_NAME = "mailcourier"


def get_xdg_config_home() -> Path:
    """
    Returns the XDG config directory for mailcourier.

    Respects $XDG_CONFIG_HOME if set, otherwise uses ~/.config/mailcourier/
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / APP_NAME


# =============================================================================
# Configuration Data Structures
# =============================================================================

@dataclass
class Profile:
    """
    A named way of sending mail.

    Attributes:
        name: Unique profile identifier, also part of the keyring service.
        url: SMTP server URL (smtp://host or smtps://host[:port]).
        username: Login name for the server.
        from_name: Display name used in the From header.
        from_address: Sender mailbox.
        requires_tls_upgrade: Force STARTTLS on smtp:// URLs.
        connect_timeout: Seconds allowed for connecting.
        debug: Log SMTP exchanges at INFO level.
    """
    name: str
    url: str = ""
    username: str = ""
    from_name: str = ""
    from_address: str = ""
    requires_tls_upgrade: bool = False
    connect_timeout: float = 15
    debug: bool = False

    def __post_init__(self) -> None:
        """Default the sender to the login name."""
        if not self.from_address:
            self.from_address = self.username

    @property
    def keyring_service(self) -> str:
        """
        Service name for the profile's password in the keyring.

            keyring get mailcourier:work me@example.com
        """
        return f"{APP_NAME}:{self.name}"

    def credentials(self) -> Credentials:
        """
        Credentials for this profile, password taken from the keyring.

        Raises:
            CredentialsError: If no password is stored for the profile.
        """
        return Credentials.from_keyring(
            self.url,
            self.username,
            self.keyring_service,
            requires_tls_upgrade=self.requires_tls_upgrade,
        )

    def new_message(self) -> Message:
        """A blank message that will be sent through this profile."""
        return Message(
            credentials=self.credentials(),
            from_=Address(self.from_name, self.from_address),
            connect_timeout=self.connect_timeout,
            debug=self.debug,
        )


@dataclass
class Config:
    """
    Main configuration container.

    Attributes:
        default_profile: Name of the profile used when none is requested.
        profiles: Configured sending profiles, keyed by name.

    Usage:
        >>> config = Config.load()
        >>> message = config.profile().new_message()
    """
    default_profile: str = ""
    profiles: dict[str, Profile] = field(default_factory=dict)

    @staticmethod
    def config_file_path() -> Path:
        """Returns the path to the main config file."""
        return get_xdg_config_home() / "config.toml"

    def profile(self, name: str | None = None) -> Profile:
        """
        Look up a profile, falling back to the default one.

        Raises:
            ConfigError: If the profile does not exist.
        """
        key = name or self.default_profile
        if key not in self.profiles:
            raise ConfigError(f"Unknown profile: {key!r}")
        return self.profiles[key]

    # -------------------------------------------------------------------------
    # Loading and Saving
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """
        Load configuration from a TOML file.

        Args:
            path: File to read. Defaults to config_file_path().

        Returns:
            Loaded Config, or defaults if the file doesn't exist.

        Raises:
            ConfigError: If the file exists but is invalid.
        """
        config_path = path or cls.config_file_path()

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file: {e}") from e

        return cls._from_dict(data)

    def save(self, path: Path | None = None) -> None:
        """
        Save configuration to a TOML file.

        Creates the parent directory if it doesn't exist.
        """
        config_path = path or self.config_file_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "wb") as f:
            tomli_w.dump(self._to_dict(), f)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create a Config from parsed TOML."""
        config = cls()

        general = data.get("general", {})
        config.default_profile = general.get("default_profile", "")

        # Each key under [profiles] is a profile name
        for name, prof in data.get("profiles", {}).items():
            if not isinstance(prof, dict):
                raise ConfigError(f"Profile {name!r} must be a table")
            config.profiles[name] = Profile(
                name=name,
                url=prof.get("url", ""),
                username=prof.get("username", ""),
                from_name=prof.get("from_name", ""),
                from_address=prof.get("from_address", ""),
                requires_tls_upgrade=prof.get("requires_tls_upgrade", False),
                connect_timeout=prof.get("connect_timeout", 15),
                debug=prof.get("debug", False),
            )

        return config

    def _to_dict(self) -> dict[str, Any]:
        """Convert Config to a dictionary for TOML serialization."""
        data: dict[str, Any] = {
            "general": {"default_profile": self.default_profile},
            "profiles": {},
        }
        for name, prof in self.profiles.items():
            data["profiles"][name] = {
                "url": prof.url,
                "username": prof.username,
                "from_name": prof.from_name,
                "from_address": prof.from_address,
                "requires_tls_upgrade": prof.requires_tls_upgrade,
                "connect_timeout": prof.connect_timeout,
                "debug": prof.debug,
            }
        return data


# =============================================================================
# Exceptions
# =============================================================================

class ConfigError(Exception):
    """Raised when there's an error loading or parsing configuration."""
    pass
