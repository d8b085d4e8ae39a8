# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Result model for yangtree (schema nodes, module summaries, diagnostics)."""

from yangtree.model.diagnostics import Diagnostic, DiagnosticCategory, Severity
from yangtree.model.entities import (
    BatchResult,
    BatchSummary,
    DependencyEdge,
    DependencyGraph,
    GraphNode,
    ImportRef,
    IncludeRef,
    Metadata,
    ModuleInfo,
    Node,
    NodeProperties,
    ParseResult,
    Revision,
    YangSource,
)

__all__ = [
    # Diagnostics
    "Severity",
    "DiagnosticCategory",
    "Diagnostic",
    # Schema tree
    "NodeProperties",
    "Node",
    # Module summaries
    "Revision",
    "ImportRef",
    "IncludeRef",
    "ModuleInfo",
    "Metadata",
    "ParseResult",
    # Batches
    "YangSource",
    "GraphNode",
    "DependencyEdge",
    "DependencyGraph",
    "BatchSummary",
    "BatchResult",
]
