# Thread-safe append-only collector of diagnostics shared between unit-level runs.

from __future__ import annotations

import threading
from typing import Iterable

from gclint.findings.models import Diagnostic


class DiagnosticSink:
    """
    Append-only diagnostic buffer.

    Several units may be analysed concurrently and each pushes its finished
    diagnostic batch here; there is no ordering guarantee across units.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: list[Diagnostic] = []

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        batch = list(diagnostics)
        with self._lock:
            self._items.extend(batch)

    def snapshot(self) -> list[Diagnostic]:
        """Copy of everything collected so far, in append order."""
        with self._lock:
            return list(self._items)

    def drain(self) -> list[Diagnostic]:
        """Return everything collected so far and clear the buffer."""
        with self._lock:
            items, self._items = self._items, []
        return items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
