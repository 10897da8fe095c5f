"""
Core domain layer for ircsleuth.

Mask parsing, address detection and fingerprinting are pure functions.
The correlation engine only touches I/O through the ``SenderStore`` protocol,
so everything here is testable with an in-memory store.
"""

from __future__ import annotations

__all__ = []
