"""
Detection of IP addresses embedded in IRC hostnames.

ISPs and cloaks embed the client address in many shapes:

    66.205.192.51
    188.147.100.240.nat.umts.dynamic.t-mobile.pl
    static-ip-87-248-67-133.promax.media.pl
    c-69-138-250-10.hsd1.md.comcast.net
    2001:db8::1

The scanners below walk the hostname left to right and return the first
address found. Octet and separator choices are tried in a fixed order
(longest octet first, separator taken before skipped) so the result does not
depend on any regex engine's matching rules.
"""

from __future__ import annotations

from ipaddress import IPv4Address, IPv6Address
from typing import Iterator, Optional, Union

IPV4_SEPARATORS = ".-"
_DIGITS = "0123456789"
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_IPV6_CHARS = _HEX_DIGITS | {":", "."}


def _is_word(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _at_word_boundary(text: str, pos: int) -> bool:
    left = pos > 0 and _is_word(text[pos - 1])
    right = pos < len(text) and _is_word(text[pos])
    return left != right


def _octet_ends(text: str, pos: int) -> Iterator[int]:
    """Yield end positions of decimal octets (0-255) starting at ``pos``, longest first."""
    for length in (3, 2, 1):
        digits = text[pos : pos + length]
        if len(digits) != length or any(ch not in _DIGITS for ch in digits):
            continue
        if length > 1 and digits[0] == "0":
            continue
        if int(digits) > 255:
            continue
        yield pos + length


def _match_octet_run(text: str, pos: int, remaining: int) -> Optional[int]:
    """
    Match ``remaining`` octet groups starting at ``pos``.

    Every group is an octet, an optional ``.`` or ``-`` and then a word
    boundary. Returns the end of the run (including any trailing separator)
    or None.
    """
    for end in _octet_ends(text, pos):
        stops = []
        if end < len(text) and text[end] in IPV4_SEPARATORS:
            stops.append(end + 1)
        stops.append(end)
        for stop in stops:
            if not _at_word_boundary(text, stop):
                continue
            if remaining == 1:
                return stop
            found = _match_octet_run(text, stop, remaining - 1)
            if found is not None:
                return found
    return None


def find_ipv4(text: str) -> Optional[IPv4Address]:
    """
    Return the leftmost dotted or dashed IPv4 address in ``text``.

    A run of four octets is accepted wherever it starts, so a numeric prefix
    such as a provider id can shift the match. The leftmost run always wins.
    """
    for start, ch in enumerate(text):
        if ch not in _DIGITS:
            continue
        end = _match_octet_run(text, start, 4)
        if end is None:
            continue
        run = text[start:end]
        if run[-1] in IPV4_SEPARATORS:
            run = run[:-1]
        try:
            return IPv4Address(run.replace("-", "."))
        except ValueError:
            return None
    return None


def _zone_end(text: str, pos: int) -> Optional[int]:
    if pos >= len(text) or text[pos] != "%":
        return None
    end = pos + 1
    while end < len(text) and text[end].isascii() and text[end].isalnum():
        end += 1
    return end if end > pos + 1 else None


def _longest_ipv6_at(text: str, start: int, end: int) -> Optional[IPv6Address]:
    zone_end = _zone_end(text, end)
    if zone_end is not None:
        try:
            return IPv6Address(text[start:zone_end])
        except ValueError:
            pass
    for stop in range(end, start, -1):
        chunk = text[start:stop]
        if chunk.count(":") < 2:
            break
        try:
            return IPv6Address(chunk)
        except ValueError:
            continue
    return None


def find_ipv6(text: str) -> Optional[IPv6Address]:
    """
    Return the leftmost IPv6 literal in ``text``.

    Handles the full, ``::``-compressed, IPv4-suffixed and ``%zone`` forms.
    At each start position the longest literal that parses is taken.
    """
    for start, ch in enumerate(text):
        if ch not in _IPV6_CHARS or ch == ".":
            continue
        end = start
        while end < len(text) and text[end] in _IPV6_CHARS:
            end += 1
        address = _longest_ipv6_at(text, start, end)
        if address is not None:
            return address
    return None


def classify_host(raw: str) -> Optional[Union[IPv4Address, IPv6Address]]:
    """Find an IPv4 address in a hostname, falling back to IPv6. Never raises."""
    address = find_ipv4(raw)
    if address is not None:
        return address
    return find_ipv6(raw)
