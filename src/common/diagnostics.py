"""Thread-safe collection of per-project diagnostics.

Workers append while the project walk runs; the caller reads the collected
messages once the walk has finished.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class Severity(Enum):
    """Severity of a diagnostic, ordered from most to least severe."""

    ERROR = "ERROR"
    WARN = "WARN"

    @property
    def log_level(self) -> int:
        return {
            Severity.ERROR: logging.ERROR,
            Severity.WARN: logging.WARNING,
        }[self]


@dataclass(frozen=True)
class Diagnostic:
    """A single recorded problem."""

    severity: Severity
    message: str
    project: Optional[str] = None
    detail: Optional[str] = None

    def __str__(self) -> str:
        text = f"{self.severity.value}: {self.message}"
        if self.detail:
            text += f" ({self.detail})"
        return text


class DiagnosticCollector:
    """Append-only diagnostics list guarded by a lock."""

    def __init__(self) -> None:
        self._items: List[Diagnostic] = []
        self._lock = threading.Lock()

    def add(
        self,
        severity: Severity,
        message: str,
        project: Optional[str] = None,
        error: Optional[BaseException] = None,
    ) -> Diagnostic:
        diag = Diagnostic(
            severity=severity,
            message=message,
            project=project,
            detail=str(error) if error is not None else None,
        )
        with self._lock:
            self._items.append(diag)
        return diag

    def error(self, message: str, project: Optional[str] = None,
              error: Optional[BaseException] = None) -> Diagnostic:
        return self.add(Severity.ERROR, message, project, error)

    def warn(self, message: str, project: Optional[str] = None,
             error: Optional[BaseException] = None) -> Diagnostic:
        return self.add(Severity.WARN, message, project, error)

    def snapshot(self) -> List[Diagnostic]:
        """Return the diagnostics in a deterministic order.

        Workers finish in any order, so entries are sorted by project and
        message rather than returned in arrival order.
        """
        with self._lock:
            items = list(self._items)
        return sorted(items, key=lambda d: (d.project or "", d.message, d.detail or ""))

    def log_all(self, logger: logging.Logger) -> None:
        """Emit every collected diagnostic through ``logger`` at its severity."""
        for diag in self.snapshot():
            logger.log(diag.severity.log_level, "%s", diag.message if not diag.detail
                       else f"{diag.message} ({diag.detail})")

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
