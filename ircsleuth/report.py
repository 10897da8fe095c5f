from __future__ import annotations

import json
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .core.correlation import CorrelationResult


def build_table(result: CorrelationResult) -> Table:
    title = f"{len(result.senders)} query results"
    if not result.exhausted:
        title += " (depth limit reached)"
    table = Table(title=title, header_style="bold", style="blue", row_styles=["", "dim"])
    table.add_column("Nick")
    table.add_column("Ident")
    table.add_column("Host")
    table.add_column("Real name", style="dim")
    for sender in result.senders.sorted_by_host():
        table.add_row(
            Text(str(sender.mask.nick)),
            Text(str(sender.mask.ident)),
            Text(str(sender.mask.host)),
            Text(sender.realname or ""),
        )
    return table


def render_table(result: CorrelationResult, console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print(build_table(result))


def render_json(result: CorrelationResult) -> str:
    payload = {
        "iterations": result.iterations,
        "exhausted": result.exhausted,
        "senders": [sender.to_dict() for sender in result.senders.sorted_by_host()],
    }
    return json.dumps(payload, indent=2, sort_keys=True)
