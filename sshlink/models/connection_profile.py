from dataclasses import dataclass

from sshlink.services.errors import InvalidField


TEXT_FIELDS = ("server_address", "username", "password", "location", "expiry_date")


def check_ascii_field(name: str, value: str) -> None:
    """Raise InvalidField unless value is a non-empty string of code points < 128."""
    if not isinstance(value, str) or not value:
        raise InvalidField(f"{name} must be a non-empty string", field=name)
    for ch in value:
        if ord(ch) >= 128:
            raise InvalidField(f"{name} contains non-ASCII character {ch!r}", field=name)


@dataclass(frozen=True)
class ConnectionProfile:
    """Everything the client needs to import one SSH account.

    Built per request from the account and configuration data and thrown
    away once the link is encoded.
    """

    server_address: str
    port: int
    username: str
    password: str
    location: str
    expiry_date: str

    def __post_init__(self):
        for name in TEXT_FIELDS:
            check_ascii_field(name, getattr(self, name))
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not 0 <= self.port <= 0xFFFF:
            raise InvalidField(f"port must be an integer in 0..65535, got {self.port!r}", field="port")

    @property
    def title(self) -> str:
        return f"SpeedPing({self.username}) {self.location} {self.expiry_date}"


__all__ = ["ConnectionProfile", "check_ascii_field", "TEXT_FIELDS"]
