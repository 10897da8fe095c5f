from __future__ import annotations

from ..core.hostmask import HostMask, mask_fingerprints


def describe(mask: HostMask) -> list[str]:
    host = mask.host
    if host.address is None:
        address = "none"
    else:
        address = f"IPv{host.address.version} {host.address}"
    patterns = mask_fingerprints(mask)
    return [
        f"Nick:    {mask.nick}",
        f"Ident:   {mask.ident}",
        f"Host:    {host}",
        f"Address: {address}",
        f"Subnet:  {'on' if mask.subnet else 'off'}",
        "",
        f"nick pattern:  {patterns['nick']}",
        f"ident pattern: {patterns['ident']}",
        f"host pattern:  {patterns['host']}",
    ]


def run(mask: HostMask) -> None:
    for line in describe(mask):
        print(line)
