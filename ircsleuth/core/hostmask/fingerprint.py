"""
Search patterns ("fingerprints") for mask components.

Patterns use SQL LIKE syntax: ``%`` matches any run of characters and ``_``
matches exactly one. Each component widens differently:

- nick   → ``nick%``         tolerates suffixes such as ``nick_`` or ``nick|away``
- ident  → ``%ident%``       tolerates ``~`` and other decoration
- host   → ``%host``         anchors the domain, tolerates a changing leaf
- IPv4   → ``%66_205_192_51%``  matches dotted and dashed spellings
- IPv4 with subnet → ``%66_205_192%``  matches the whole /24
"""

from __future__ import annotations

from dataclasses import dataclass
from ipaddress import IPv4Address
from typing import Union

from .models import Host, HostMask, Ident, Nick

# LIKE wildcard for a single character; stands in for the ``.`` or ``-``
# between octets.
OCTET_JOINER = "_"


@dataclass(frozen=True)
class NickTerm:
    nick: Nick


@dataclass(frozen=True)
class IdentTerm:
    ident: Ident


@dataclass(frozen=True)
class HostTerm:
    host: Host


QueryTerm = Union[NickTerm, IdentTerm, HostTerm]


def nick_pattern(nick: Nick) -> str:
    return f"{nick.value}%"


def ident_pattern(ident: Ident) -> str:
    return f"%{ident.value}%"


def host_pattern(host: Host) -> str:
    match host.address:
        case IPv4Address():
            octets = host.address.packed[: 3 if host.subnet else 4]
            return "%" + OCTET_JOINER.join(str(octet) for octet in octets) + "%"
        case _:
            # TODO: mask IPv6 hosts down to their /64 once we know how the
            # common cloaks spell them; until then they match on the raw text.
            return f"%{host.raw}"


def fingerprint(term: QueryTerm) -> str:
    match term:
        case NickTerm(nick=nick):
            return nick_pattern(nick)
        case IdentTerm(ident=ident):
            return ident_pattern(ident)
        case HostTerm(host=host):
            return host_pattern(host)
    raise TypeError(f"not a query term: {term!r}")


def mask_fingerprints(mask: HostMask) -> dict[str, str]:
    """Patterns for all three components of a mask, keyed by component name."""
    return {
        "nick": nick_pattern(mask.nick),
        "ident": ident_pattern(mask.ident),
        "host": host_pattern(mask.host),
    }
