from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .config import Settings
from .core.correlation import CorrelationEngine, CorrelationOptions, CorrelationResult
from .core.hostmask import HostMask
from .store import open_store

logger = logging.getLogger(__name__)


@dataclass
class IrcSleuthApp:
    settings: Settings

    def correlation_options(
        self,
        *,
        depth: Optional[int] = None,
        subnet: Optional[bool] = None,
        follow_idents: Optional[bool] = None,
    ) -> CorrelationOptions:
        """Configured options, with any explicitly passed values taking precedence."""
        defaults = self.settings.correlation
        return CorrelationOptions(
            depth=defaults.depth if depth is None else depth,
            subnet=defaults.subnet if subnet is None else subnet,
            follow_idents=defaults.follow_idents if follow_idents is None else follow_idents,
            max_concurrent_queries=defaults.max_concurrent_queries,
        )

    async def correlate(self, mask: HostMask, options: CorrelationOptions) -> CorrelationResult:
        async with open_store(self.settings.store) as store:
            logger.info("using %s store", self.settings.store.backend)
            engine = CorrelationEngine(store, options)
            return await engine.run(mask)

    async def count_senders(self) -> int:
        async with open_store(self.settings.store) as store:
            return await store.count()
