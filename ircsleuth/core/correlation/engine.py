"""
Breadth-first correlation of IRC identities.

Starting from one mask, every iteration looks up the not-yet-queried nicks,
idents and hosts, records the senders that come back, and feeds the
components of the newly seen senders into the next iteration. A run stops when
no new query terms remain or when the depth bound is reached.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

from ..hostmask.fingerprint import HostTerm, IdentTerm, NickTerm, QueryTerm, fingerprint
from ..hostmask.models import Host, HostMask, Ident, Nick, Sender, SenderRow
from .visited import ResultSet, VisitedSet

logger = logging.getLogger(__name__)


class SenderStore(Protocol):
    """Lookup of historical senders by LIKE pattern."""

    async def search(self, pattern: str) -> Sequence[SenderRow]:
        """Return every sender row whose mask matches ``pattern``."""
        ...


@dataclass(frozen=True)
class CorrelationOptions:
    depth: int = 3
    subnet: bool = False
    follow_idents: bool = False
    max_concurrent_queries: int = 8

    def __post_init__(self) -> None:
        if self.depth < 1:
            raise ValueError(f"depth must be at least 1, got {self.depth}")
        if self.max_concurrent_queries < 1:
            raise ValueError(
                f"max_concurrent_queries must be at least 1, got {self.max_concurrent_queries}"
            )


@dataclass
class Frontier:
    nicks: set[Nick] = field(default_factory=set)
    idents: set[Ident] = field(default_factory=set)
    hosts: set[Host] = field(default_factory=set)

    @classmethod
    def seed(cls, mask: HostMask, *, follow_idents: bool) -> "Frontier":
        frontier = cls(nicks={mask.nick}, hosts={mask.host})
        if follow_idents:
            frontier.idents.add(mask.ident)
        return frontier

    def add(self, sender: Sender, *, follow_idents: bool) -> None:
        self.nicks.add(sender.mask.nick)
        self.hosts.add(sender.mask.host)
        if follow_idents:
            self.idents.add(sender.mask.ident)

    def is_empty(self) -> bool:
        return not (self.nicks or self.idents or self.hosts)

    def terms(self) -> list[QueryTerm]:
        terms: list[QueryTerm] = [NickTerm(nick) for nick in self.nicks]
        terms.extend(IdentTerm(ident) for ident in self.idents)
        terms.extend(HostTerm(host) for host in self.hosts)
        return terms


@dataclass(frozen=True)
class CorrelationResult:
    senders: ResultSet
    iterations: int
    exhausted: bool
    """True when the run stopped because no new query terms were left."""


def _term_kind(term: QueryTerm) -> str:
    match term:
        case NickTerm():
            return "nick"
        case IdentTerm():
            return "ident"
        case HostTerm():
            return "host"
    raise TypeError(f"not a query term: {term!r}")


class CorrelationEngine:
    def __init__(self, store: SenderStore, options: Optional[CorrelationOptions] = None) -> None:
        self.store = store
        self.options = options or CorrelationOptions()

    async def run(self, mask: HostMask) -> CorrelationResult:
        options = self.options
        mask = mask.with_subnet(options.subnet)
        logger.info("parsed %s (subnet=%s, follow_idents=%s)", mask, options.subnet, options.follow_idents)

        visited = VisitedSet()
        frontier = Frontier.seed(mask, follow_idents=options.follow_idents)
        issued: set[str] = set()
        semaphore = asyncio.Semaphore(options.max_concurrent_queries)
        iterations = 0
        exhausted = False

        while iterations < options.depth:
            queries = self._plan(frontier, issued)
            if not queries:
                logger.info("no new query terms found; ending")
                exhausted = True
                break
            logger.debug(
                "starting iteration %d; %d nicks, %d idents, %d hosts",
                iterations,
                len(frontier.nicks),
                len(frontier.idents),
                len(frontier.hosts),
            )
            found = await asyncio.gather(
                *(self._search(term, pattern, visited, semaphore) for term, pattern in queries)
            )
            iterations += 1

            frontier = Frontier()
            for new_senders in found:
                for sender in new_senders:
                    frontier.add(sender, follow_idents=options.follow_idents)
            logger.debug("there are %d total senders", len(visited))
        else:
            exhausted = not self._plan(frontier, set(issued))
            if not exhausted:
                logger.info("depth %d reached; stopping with unexplored terms", options.depth)

        logger.info("done; %d senders after %d iterations", len(visited), iterations)
        return CorrelationResult(senders=visited.freeze(), iterations=iterations, exhausted=exhausted)

    @staticmethod
    def _plan(frontier: Frontier, issued: set[str]) -> list[tuple[QueryTerm, str]]:
        """Pair each frontier term with its pattern, skipping patterns already issued."""
        queries: list[tuple[QueryTerm, str]] = []
        for term in frontier.terms():
            pattern = fingerprint(term)
            if pattern in issued:
                continue
            issued.add(pattern)
            queries.append((term, pattern))
        return queries

    async def _search(
        self,
        term: QueryTerm,
        pattern: str,
        visited: VisitedSet,
        semaphore: asyncio.Semaphore,
    ) -> list[Sender]:
        """Run one lookup and return the senders it discovered for the first time."""
        kind = _term_kind(term)
        logger.info("query %s: %s", kind, pattern)
        try:
            async with semaphore:
                rows = await self.store.search(pattern)
        except Exception as exc:
            logger.warning("query for %s %r failed: %s", kind, pattern, exc)
            return []

        discovered: list[Sender] = []
        for row in rows:
            try:
                sender = Sender.from_row(row).with_subnet(self.options.subnet)
            except (TypeError, ValueError) as exc:
                logger.debug("dropping sender row %r: %s", row, exc)
                continue
            if visited.add(sender):
                discovered.append(sender)
        logger.debug("found %d new senders for %s %r", len(discovered), kind, pattern)
        return discovered
