# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Conversion of raw statement trees into the public :class:`Node` model.

Both parsers produce :class:`RawNode` trees. The normalizer turns them into
:class:`Node` objects and applies the YANG defaults for ``config`` and
``mandatory`` on data-definition nodes.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from yangtree.compiler.raw import RawNode
from yangtree.model.diagnostics import Diagnostic, DiagnosticCategory
from yangtree.model.entities import CONFIG_NODE_TYPES, MANDATORY_NODE_TYPES, Node, NodeProperties
from yangtree.validation.reporter import DiagnosticCollector

# ###############
# Public Interface
# ###############


@dataclass
class NormalizedTree:
    """The normalized root node and the diagnostics raised while building it."""

    tree: Node
    diagnostics: list[Diagnostic] = field(default_factory=list)


def normalize(raw: RawNode) -> NormalizedTree:
    """Convert a raw module/submodule tree into a :class:`Node` tree.

    ``config`` inherits from the parent and defaults to true at the top of the
    data tree; inside rpc, action and notification statements, and inside
    groupings and augments, it is left unset because the enclosing data tree
    is not known. ``mandatory`` defaults to false on leaf, choice, anydata and
    anyxml. Children keep source order, and duplicate siblings are kept.
    """
    diagnostics = DiagnosticCollector()
    tree = _Normalizer(diagnostics).convert(raw, _Context(config=True, in_operation=False))
    return NormalizedTree(tree=tree, diagnostics=diagnostics.diagnostics)


# ################
# Implementation
# ################

# The effective config of nodes below these depends on where they are used.
_DETACHED_TYPES = frozenset({"grouping", "augment"})
_OPERATION_TYPES = frozenset({"rpc", "action", "notification"})
_SELF_NAMED_TYPES = frozenset({"input", "output"})


@dataclass(frozen=True)
class _Context:
    config: bool | None
    in_operation: bool


def _node_name(raw: RawNode) -> str:
    if raw.argument is not None:
        return raw.argument
    if raw.keyword in _SELF_NAMED_TYPES:
        return raw.keyword
    return ""


def _node_properties(raw: RawNode) -> NodeProperties:
    values = {
        key: [item for item in value if item is not None] if isinstance(value, list) else value
        for key, value in raw.properties.items()
    }
    return NodeProperties(**values)


class _Normalizer:
    def __init__(self, diagnostics: DiagnosticCollector) -> None:
        self._diagnostics = diagnostics

    def convert(self, raw: RawNode, context: _Context) -> Node:
        name = _node_name(raw)
        config = self._resolve_config(raw, name, context)
        mandatory = self._resolve_mandatory(raw, name)

        child_context = context
        if raw.keyword in _OPERATION_TYPES:
            child_context = _Context(config=None, in_operation=True)
        elif raw.keyword in _DETACHED_TYPES:
            child_context = _Context(config=None, in_operation=context.in_operation)
        elif raw.keyword in CONFIG_NODE_TYPES and config is not None:
            child_context = _Context(config=config, in_operation=context.in_operation)

        children = [self.convert(child, child_context) for child in raw.children]
        self._flag_duplicates(raw, name, children)
        return Node(
            type=raw.keyword,
            name=name,
            description=raw.description,
            mandatory=mandatory,
            config=config,
            properties=_node_properties(raw),
            source_line=raw.line,
            children=children,
            header=[self.convert(h, _Context(config=None, in_operation=False)) for h in raw.header],
        )

    def _resolve_config(self, raw: RawNode, name: str, context: _Context) -> bool | None:
        if raw.config is not None:
            if raw.keyword not in CONFIG_NODE_TYPES:
                self._diagnostics.warning(
                    DiagnosticCategory.SEMANTIC_WARNING,
                    f"'config' has no meaning on {raw.keyword} '{name}'; ignored",
                    raw.line,
                )
                return None
            if context.in_operation:
                self._diagnostics.warning(
                    DiagnosticCategory.SEMANTIC_WARNING,
                    f"'config' is ignored inside rpc, action and notification ({raw.keyword} '{name}')",
                    raw.line,
                )
                return None
            if raw.config and context.config is False:
                self._diagnostics.warning(
                    DiagnosticCategory.SEMANTIC_WARNING,
                    f"{raw.keyword} '{name}' sets 'config true' under a 'config false' parent; treated as false",
                    raw.line,
                )
                return False
            return raw.config
        if raw.keyword in CONFIG_NODE_TYPES and not context.in_operation:
            return context.config
        return None

    def _resolve_mandatory(self, raw: RawNode, name: str) -> bool | None:
        if raw.keyword not in MANDATORY_NODE_TYPES:
            if raw.mandatory is not None:
                self._diagnostics.warning(
                    DiagnosticCategory.SEMANTIC_WARNING,
                    f"'mandatory' has no meaning on {raw.keyword} '{name}'; ignored",
                    raw.line,
                )
            return None
        return bool(raw.mandatory)

    def _flag_duplicates(self, raw: RawNode, name: str, children: list[Node]) -> None:
        seen: set[tuple[str, str]] = set()
        for child in children:
            if not child.name:
                continue
            key = (child.type, child.name)
            if key in seen:
                self._diagnostics.warning(
                    DiagnosticCategory.SEMANTIC_WARNING,
                    f"Duplicate {child.type} '{child.name}' in {raw.keyword} '{name}'",
                    child.source_line,
                )
            seen.add(key)
