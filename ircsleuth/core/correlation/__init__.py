"""
Fixpoint expansion of a seed mask into the set of linked identities.

The engine is pure apart from the ``SenderStore`` it is given, so it runs the
same against PostgreSQL, SQLite or an in-memory fake.
"""

from __future__ import annotations

from .engine import (
    CorrelationEngine,
    CorrelationOptions,
    CorrelationResult,
    Frontier,
    SenderStore,
)
from .visited import ResultSet, VisitedSet

__all__ = [
    "CorrelationEngine",
    "CorrelationOptions",
    "CorrelationResult",
    "Frontier",
    "ResultSet",
    "SenderStore",
    "VisitedSet",
]
