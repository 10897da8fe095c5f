from __future__ import annotations

from threading import Lock
from typing import Iterable, Iterator

from ..hostmask.models import Sender


class VisitedSet:
    """
    Accumulator of every sender discovered during one correlation run.

    Membership is full ``Sender`` equality (id, mask and realname), so the
    same mask stored under two ids counts as two discoveries.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._senders: set[Sender] = set()

    def add(self, sender: Sender) -> bool:
        """Insert ``sender`` if absent. Returns True only for the first insert."""
        with self._lock:
            if sender in self._senders:
                return False
            self._senders.add(sender)
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._senders)

    def __contains__(self, sender: object) -> bool:
        with self._lock:
            return sender in self._senders

    def freeze(self) -> "ResultSet":
        with self._lock:
            return ResultSet(self._senders)


class ResultSet:
    """Read-only, unordered view over the senders a run discovered."""

    __slots__ = ("_senders",)

    def __init__(self, senders: Iterable[Sender] = ()) -> None:
        self._senders = frozenset(senders)

    def __iter__(self) -> Iterator[Sender]:
        return iter(self._senders)

    def __len__(self) -> int:
        return len(self._senders)

    def __contains__(self, sender: object) -> bool:
        return sender in self._senders

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ResultSet):
            return self._senders == other._senders
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._senders)

    def __repr__(self) -> str:
        return f"ResultSet({len(self._senders)} senders)"

    def sorted_by_host(self) -> list[Sender]:
        return sorted(
            self._senders,
            key=lambda s: (s.mask.host.raw, s.mask.nick.value, s.mask.ident.value, s.id),
        )
