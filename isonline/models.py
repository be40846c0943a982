"""
Data types shared by the resolver, the prober and the reachability checker.
"""
from __future__ import annotations
import dataclasses
import ipaddress
from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from .errors import ConfigurationError

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class AddressFamily(Enum):
    """Which IP version(s) of a host's addresses are eligible for probing."""
    BOTH = "both"
    V4 = "v4"
    V6 = "v6"

    @classmethod
    def parse(cls, value: str) -> "AddressFamily":
        """Parses 'both', 'v4'/'ipv4'/'4' or 'v6'/'ipv6'/'6', case-insensitively."""
        s = str(value).strip().lower()
        aliases = {
            'both': cls.BOTH, 'any': cls.BOTH,
            'v4': cls.V4, 'ipv4': cls.V4, '4': cls.V4,
            'v6': cls.V6, 'ipv6': cls.V6, '6': cls.V6,
        }
        if s not in aliases:
            raise ConfigurationError(f"Unknown address family '{value}'. Use both, v4 or v6.")
        return aliases[s]

    def accepts(self, address: IPAddress) -> bool:
        if self is AddressFamily.V4:
            return address.version == 4
        if self is AddressFamily.V6:
            return address.version == 6
        return True


class CheckStrategy(Enum):
    """How per-address results are combined into one verdict per host."""
    ANY = "any"
    ALL = "all"

    @classmethod
    def parse(cls, value: str) -> "CheckStrategy":
        s = str(value).strip().lower()
        for member in cls:
            if member.value == s:
                return member
        raise ConfigurationError(f"Unknown check strategy '{value}'. Use any or all.")


class ProbeOutcome(Enum):
    """Result of a single TCP connection attempt."""
    OPEN = "Open"
    CLOSED = "Closed"
    ERROR = "Error"


@dataclass(frozen=True)
class Host:
    """
    A name and the addresses it resolved to. The name is the target as given:
    a host name, an FQDN or an IP literal.
    """
    name: str
    addresses: Tuple[IPAddress, ...]

    def __post_init__(self):
        addresses = tuple(self.addresses)
        if not addresses:
            raise ValueError(f"Host '{self.name}' needs at least one address.")
        object.__setattr__(self, 'addresses', addresses)

    def __str__(self) -> str:
        return self.name

    def filter_addresses(self, family: AddressFamily) -> Tuple[IPAddress, ...]:
        """Returns the addresses eligible under the given family filter, in order."""
        return tuple(a for a in self.addresses if family.accepts(a))


@dataclass(frozen=True)
class CheckConfig:
    """Settings of a TCP port check. The timeout is in seconds."""
    port: int = 22
    family: AddressFamily = AddressFamily.BOTH
    timeout: float = 1.0
    strategy: CheckStrategy = CheckStrategy.ANY

    def __post_init__(self):
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not 0 <= self.port <= 65535:
            raise ConfigurationError(f"Invalid port {self.port!r}. Use a number between 0 and 65535.")
        if not self.timeout or self.timeout <= 0:
            raise ConfigurationError(f"Invalid timeout {self.timeout!r}. It must be greater than zero.")

    def replace(self, **changes) -> "CheckConfig":
        """Returns a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)
