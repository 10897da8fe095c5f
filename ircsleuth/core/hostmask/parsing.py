from __future__ import annotations

from .models import Host, HostMask, Ident, MissingHost, MissingIdent, Nick


def parse_hostmask(text: str) -> HostMask:
    """
    Split a ``nick!ident@host`` mask into its components.

    The nick ends at the first ``!``; the ident runs up to the first ``@``
    after that. Everything past the ``@`` is the host, so a host may itself
    contain ``!`` or ``@``.

    Examples:
        "Disconsented!~quassel@irc.disconsented.com"
        → Nick("Disconsented"), Ident("~quassel"), Host("irc.disconsented.com")

    Raises:
        MissingIdent: no ``!`` in the text (checked first)
        MissingHost: no ``@`` after the ``!``
    """
    bang = text.find("!")
    if bang < 0:
        raise MissingIdent()
    at = text.find("@", bang + 1)
    if at < 0:
        raise MissingHost()
    return HostMask(
        nick=Nick(text[:bang]),
        ident=Ident(text[bang + 1 : at]),
        host=Host.from_text(text[at + 1 :]),
    )
