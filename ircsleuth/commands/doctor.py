from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..app import IrcSleuthApp
from ..config import Settings
from ..store import StoreError


@dataclass(slots=True)
class DoctorReport:
    ok: bool = True
    checks: list[str] = field(default_factory=list)

    def add(self, label: str, status: str, detail: Optional[str] = None) -> None:
        if status == "ERROR":
            self.ok = False
        self.checks.append(f"{label}: {status} ({detail})" if detail else f"{label}: {status}")


def _store_label(settings: Settings) -> str:
    store = settings.store
    if store.backend == "sqlite":
        return f"sqlite {store.sqlite_path}"
    return f"postgres (pool of {store.pool_size})"


def run(settings: Settings, *, config_path: Optional[Path] = None) -> DoctorReport:
    report = DoctorReport()
    report.add("Config", "OK", str(config_path) if config_path else "built-in defaults")

    correlation = settings.correlation
    report.add(
        "Correlation",
        "OK",
        f"depth={correlation.depth}, max_concurrent_queries={correlation.max_concurrent_queries}",
    )
    report.add("Subnet generalization", "ENABLED" if correlation.subnet else "DISABLED")
    report.add("Ident following", "ENABLED" if correlation.follow_idents else "DISABLED")

    app = IrcSleuthApp(settings)
    try:
        count = asyncio.run(app.count_senders())
    except StoreError as exc:
        report.add("Store", "ERROR", str(exc))
    except Exception as exc:
        report.add("Store", "ERROR", f"{_store_label(settings)}: {exc}")
    else:
        report.add("Store", "OK", f"{_store_label(settings)}, {count} senders")
    return report
