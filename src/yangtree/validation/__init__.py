# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Diagnostic collection and cross-file dependency checks."""

from yangtree.validation.dependencies import DependencyAnalysis, build_dependency_graph
from yangtree.validation.reporter import DiagnosticCollector, count_errors, guard, report

__all__ = [
    "DependencyAnalysis",
    "DiagnosticCollector",
    "build_dependency_graph",
    "count_errors",
    "guard",
    "report",
]
