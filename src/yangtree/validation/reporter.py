# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Collection and ordering of diagnostics across pipeline stages.

Every stage writes into a :class:`DiagnosticCollector` instead of raising.
:func:`guard` is the last line of defence: an unexpected exception inside a
stage is logged and converted into an error diagnostic so that nothing
escapes to the caller of the public entry points.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from yangtree.model.diagnostics import Diagnostic, DiagnosticCategory, Severity

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class DiagnosticCollector:
    """Accumulates diagnostics for a single file."""

    def __init__(self) -> None:
        self._diagnostics: list[Diagnostic] = []

    def __len__(self) -> int:
        return len(self._diagnostics)

    def add(
        self,
        severity: Severity,
        category: DiagnosticCategory,
        message: str,
        line: int = 0,
        column: int | None = None,
    ) -> Diagnostic:
        """Record a diagnostic and return it. Negative lines are clamped to 0."""
        diagnostic = Diagnostic(
            line=max(line, 0),
            column=column,
            severity=severity,
            category=category,
            message=message,
        )
        self._diagnostics.append(diagnostic)
        return diagnostic

    def error(self, category: DiagnosticCategory, message: str, line: int = 0, column: int | None = None) -> Diagnostic:
        return self.add(Severity.ERROR, category, message, line, column)

    def warning(
        self, category: DiagnosticCategory, message: str, line: int = 0, column: int | None = None
    ) -> Diagnostic:
        return self.add(Severity.WARNING, category, message, line, column)

    def info(self, category: DiagnosticCategory, message: str, line: int = 0, column: int | None = None) -> Diagnostic:
        return self.add(Severity.INFO, category, message, line, column)

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        self._diagnostics.extend(diagnostics)

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self._diagnostics)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        """Diagnostics in insertion (stage) order."""
        return list(self._diagnostics)

    def report(self) -> list[Diagnostic]:
        """Diagnostics in line order. See :func:`report`."""
        return report(self._diagnostics)


def report(diagnostics: Iterable[Diagnostic]) -> list[Diagnostic]:
    """Order diagnostics by line, then column.

    File-level diagnostics (line 0) come first. The sort is stable, so
    diagnostics on the same position keep the order in which the stages
    reported them.
    """
    return sorted(diagnostics, key=lambda d: (d.line, d.column or 0))


def count_errors(diagnostics: Iterable[Diagnostic]) -> int:
    """Return the number of error-severity diagnostics."""
    return sum(1 for d in diagnostics if d.is_error)


@dataclass
class GuardState:
    """Tells the caller of :func:`guard` whether the guarded block failed."""

    failed: bool = False


@contextmanager
def guard(collector: DiagnosticCollector, stage: str) -> Iterator[GuardState]:
    """Convert any exception raised inside the block into an error diagnostic.

    Usage::

        with guard(collector, "normalization") as state:
            tree = normalize(raw)
        if state.failed:
            ...
    """
    state = GuardState()
    try:
        yield state
    except Exception as exc:
        logger.exception("Unexpected failure during %s", stage)
        state.failed = True
        collector.error(
            DiagnosticCategory.STRUCTURAL_ERROR,
            f"Internal error during {stage}: {exc}",
        )
