"""
IRC mask parsing and fingerprinting.

This module handles:
- Splitting ``nick!ident@host`` masks into components
- Finding IPv4/IPv6 addresses embedded in hostnames
- Deriving LIKE patterns used to look up related senders
"""

from __future__ import annotations

from .addresses import classify_host, find_ipv4, find_ipv6
from .fingerprint import (
    HostTerm,
    IdentTerm,
    NickTerm,
    QueryTerm,
    fingerprint,
    host_pattern,
    ident_pattern,
    mask_fingerprints,
    nick_pattern,
)
from .models import (
    Host,
    HostMask,
    HostMaskError,
    Ident,
    MissingHost,
    MissingIdent,
    Nick,
    Sender,
    SenderRow,
)
from .parsing import parse_hostmask

__all__ = [
    "Host",
    "HostMask",
    "HostMaskError",
    "HostTerm",
    "Ident",
    "IdentTerm",
    "MissingHost",
    "MissingIdent",
    "Nick",
    "NickTerm",
    "QueryTerm",
    "Sender",
    "SenderRow",
    "classify_host",
    "find_ipv4",
    "find_ipv6",
    "fingerprint",
    "host_pattern",
    "ident_pattern",
    "mask_fingerprints",
    "nick_pattern",
    "parse_hostmask",
]
