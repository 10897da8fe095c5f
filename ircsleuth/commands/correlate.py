from __future__ import annotations

import asyncio
from typing import Optional

from rich.console import Console

from ..app import IrcSleuthApp
from ..core.correlation import CorrelationOptions, CorrelationResult
from ..core.hostmask import HostMask
from ..report import render_json, render_table


def run(
    app: IrcSleuthApp,
    mask: HostMask,
    options: CorrelationOptions,
    *,
    json_output: bool = False,
    console: Optional[Console] = None,
) -> CorrelationResult:
    result = asyncio.run(app.correlate(mask, options))
    if json_output:
        print(render_json(result))
    else:
        render_table(result, console)
    return result
