# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Diagnostics reported by every stage of the parsing pipeline."""

from __future__ import annotations

from enum import Enum

from pydantic import Field as _Field

from yangtree.model.base import YangModel

# ###############
# Public Interface
# ###############


class Severity(str, Enum):
    """How far a diagnostic undermines trust in the result.

    ``ERROR`` means the result cannot be trusted structurally, ``WARNING`` a
    recoverable semantic issue and ``INFO`` a stylistic note.
    """

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class DiagnosticCategory(str, Enum):
    """The stage-level taxonomy of problems."""

    LEX_ERROR = "LexError"
    STRUCTURAL_ERROR = "StructuralError"
    SEMANTIC_WARNING = "SemanticWarning"
    DEPENDENCY_ERROR = "DependencyError"
    FATAL_RESOURCE_ERROR = "FatalResourceError"


class Diagnostic(YangModel):
    """A single problem found in one file.

    Attributes:
        line: 1-based line number, or 0 for file-level diagnostics.
        column: 1-based column number when known.
        severity: See :class:`Severity`.
        category: See :class:`DiagnosticCategory`.
        message: Human-readable description.
    """

    line: int = _Field(default=0, ge=0)
    column: int | None = None
    severity: Severity
    category: DiagnosticCategory
    message: str

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR
