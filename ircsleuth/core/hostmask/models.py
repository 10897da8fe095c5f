"""
Domain models for IRC sender identities.

A sender is identified by its ``nick!ident@host`` mask. Each component is a
small immutable value so the correlation engine can keep per-component
frontier sets and dedupe them with plain set semantics.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv6Address
from typing import Optional, Union

from .addresses import classify_host

IPAddress = Union[IPv4Address, IPv6Address]


class HostMaskError(ValueError):
    """Raised when a string cannot be split into nick, ident and host."""


class MissingIdent(HostMaskError):
    def __init__(self) -> None:
        super().__init__("missing '!' symbol; cannot find ident")


class MissingHost(HostMaskError):
    def __init__(self) -> None:
        super().__init__("missing '@' symbol; cannot find host")


@dataclass(frozen=True, order=True)
class Nick:
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class Ident:
    """identd-reported user name, ``~``-prefixed when unauthenticated."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Host:
    """
    Hostname as seen on IRC, plus any IP address found inside it.

    Equality and hashing use only ``raw``. The parsed address and the subnet
    flag are hints for building search patterns, not part of the identity.
    """

    raw: str
    address: Optional[IPAddress] = field(default=None, compare=False)
    subnet: bool = field(default=False, compare=False)

    @classmethod
    def from_text(cls, raw: str, *, subnet: bool = False) -> "Host":
        return cls(raw, classify_host(raw), subnet)

    def with_subnet(self, subnet: bool) -> "Host":
        if subnet == self.subnet:
            return self
        return dataclasses.replace(self, subnet=subnet)

    def __lt__(self, other: "Host") -> bool:
        if not isinstance(other, Host):
            return NotImplemented
        return self.raw < other.raw

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True)
class HostMask:
    nick: Nick
    ident: Ident
    host: Host
    subnet: bool = False

    def with_subnet(self, subnet: bool) -> "HostMask":
        """Return a copy whose queries generalise IPv4 hosts to their /24."""
        if subnet == self.subnet and self.host.subnet == subnet:
            return self
        return dataclasses.replace(self, subnet=subnet, host=self.host.with_subnet(subnet))

    def __str__(self) -> str:
        return f"{self.nick}!{self.ident}@{self.host}"


@dataclass(frozen=True, slots=True)
class SenderRow:
    """One undecoded row of the store's ``sender`` table."""

    id: int
    sender: str
    realname: Optional[str] = None


@dataclass(frozen=True)
class Sender:
    id: int
    mask: HostMask
    realname: Optional[str] = None

    @classmethod
    def from_row(cls, row: SenderRow) -> "Sender":
        from .parsing import parse_hostmask

        # Loosely typed SQLite columns can hold NULL or numbers.
        if not isinstance(row.sender, str):
            raise TypeError(f"sender is not text: {row.sender!r}")
        return cls(id=int(row.id), mask=parse_hostmask(row.sender), realname=row.realname)

    def with_subnet(self, subnet: bool) -> "Sender":
        mask = self.mask.with_subnet(subnet)
        if mask is self.mask:
            return self
        return dataclasses.replace(self, mask=mask)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nick": str(self.mask.nick),
            "ident": str(self.mask.ident),
            "host": str(self.mask.host),
            "address": str(self.mask.host.address) if self.mask.host.address else None,
            "realname": self.realname,
        }
