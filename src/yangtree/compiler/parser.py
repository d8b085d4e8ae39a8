# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Primary structural parser for YANG modules.

Rebuilds the statement tree from the depth-annotated token stream. Each
keyword maps to a :class:`StatementKind`, and each kind to one handler;
keywords outside the table become generic child nodes.
"""

from __future__ import annotations

import enum
from collections.abc import Callable

from yangtree.compiler.raw import RawNode, RawParse
from yangtree.model.diagnostics import DiagnosticCategory
from yangtree.parser.lexer import Token, TokenStream, tokenize
from yangtree.validation.reporter import DiagnosticCollector
from yangtree.workspace.config import DEFAULT_CONFIG, ParserConfig

# ###############
# Public Interface
# ###############


class StatementKind(enum.Enum):
    """How the primary parser treats a keyword."""

    ROOT = "root"
    SCHEMA_NODE = "schema-node"
    HEADER = "header"
    DOCUMENTATION = "documentation"
    FLAG = "flag"
    TYPE = "type"
    TYPE_RESTRICTION = "type-restriction"
    PROPERTY = "property"
    GENERIC = "generic"


KEYWORD_KINDS: dict[str, StatementKind] = {
    "module": StatementKind.ROOT,
    "submodule": StatementKind.ROOT,
    "container": StatementKind.SCHEMA_NODE,
    "list": StatementKind.SCHEMA_NODE,
    "leaf": StatementKind.SCHEMA_NODE,
    "leaf-list": StatementKind.SCHEMA_NODE,
    "choice": StatementKind.SCHEMA_NODE,
    "case": StatementKind.SCHEMA_NODE,
    "grouping": StatementKind.SCHEMA_NODE,
    "typedef": StatementKind.SCHEMA_NODE,
    "uses": StatementKind.SCHEMA_NODE,
    "augment": StatementKind.SCHEMA_NODE,
    "rpc": StatementKind.SCHEMA_NODE,
    "action": StatementKind.SCHEMA_NODE,
    "notification": StatementKind.SCHEMA_NODE,
    "input": StatementKind.SCHEMA_NODE,
    "output": StatementKind.SCHEMA_NODE,
    "anydata": StatementKind.SCHEMA_NODE,
    "anyxml": StatementKind.SCHEMA_NODE,
    "namespace": StatementKind.HEADER,
    "prefix": StatementKind.HEADER,
    "yang-version": StatementKind.HEADER,
    "belongs-to": StatementKind.HEADER,
    "import": StatementKind.HEADER,
    "include": StatementKind.HEADER,
    "revision": StatementKind.HEADER,
    "organization": StatementKind.HEADER,
    "contact": StatementKind.HEADER,
    "description": StatementKind.DOCUMENTATION,
    "reference": StatementKind.DOCUMENTATION,
    "mandatory": StatementKind.FLAG,
    "config": StatementKind.FLAG,
    "type": StatementKind.TYPE,
    "range": StatementKind.TYPE_RESTRICTION,
    "length": StatementKind.TYPE_RESTRICTION,
    "pattern": StatementKind.TYPE_RESTRICTION,
    "path": StatementKind.TYPE_RESTRICTION,
    "base": StatementKind.TYPE_RESTRICTION,
    "enum": StatementKind.TYPE_RESTRICTION,
    "default": StatementKind.PROPERTY,
    "units": StatementKind.PROPERTY,
    "status": StatementKind.PROPERTY,
    "key": StatementKind.PROPERTY,
    "when": StatementKind.PROPERTY,
    "must": StatementKind.PROPERTY,
    "if-feature": StatementKind.PROPERTY,
    "revision-date": StatementKind.PROPERTY,
}


def statement_kind(keyword: str, config: ParserConfig = DEFAULT_CONFIG) -> StatementKind:
    """Return the kind of *keyword*, or GENERIC when it is not supported."""
    if keyword not in config.supported_keywords:
        return StatementKind.GENERIC
    return KEYWORD_KINDS.get(keyword, StatementKind.GENERIC)


def parse_statements(stream: TokenStream, filename: str, config: ParserConfig = DEFAULT_CONFIG) -> RawParse:
    """Build the raw statement tree from a token stream.

    Never raises. When no module/submodule root can be established the result
    has ``root_established=False`` and carries a structural error; deciding
    whether to run the fallback parser is up to the caller.
    """
    return _Parser(stream, filename, config).parse()


def parse(source: str, filename: str = "temp.yang", config: ParserConfig = DEFAULT_CONFIG) -> RawParse:
    """Tokenize and parse YANG source text with the primary parser."""
    return parse_statements(tokenize(source, config), filename, config)


# ################
# Implementation
# ################

_ROOT_KEYWORDS = frozenset({"module", "submodule"})
_TYPED_KEYWORDS = frozenset({"leaf", "leaf-list", "typedef"})
_UNNAMED_KEYWORDS = frozenset({"input", "output"})
_LIST_PROPERTIES = {"must": "must", "if-feature": "if_features"}
_SCALAR_PROPERTIES = {
    "default": "default",
    "units": "units",
    "status": "status",
    "key": "key",
    "when": "when",
    "revision-date": "revision_date",
    "range": "range",
    "length": "length",
    "pattern": "pattern",
    "path": "path",
    "base": "base",
}

_Handler = Callable[["_Parser", Token, RawNode], None]


class _Parser:
    """Depth-driven parser over a token stream."""

    def __init__(self, stream: TokenStream, filename: str, config: ParserConfig) -> None:
        self._stream = stream
        self._tokens = stream.tokens
        self._filename = filename
        self._config = config
        self._pos = 0
        self._diagnostics = DiagnosticCollector()
        self._diagnostics.extend(stream.diagnostics)

    def parse(self) -> RawParse:
        """Parse every top-level statement and decide whether a root exists."""
        roots: list[RawNode] = []
        root_index: int | None = None
        while self._pos < len(self._tokens):
            index = self._pos
            tok = self._advance()
            if tok.depth != 0:
                self._orphan(tok)
                continue
            if tok.keyword not in _ROOT_KEYWORDS:
                self._diagnostics.warning(
                    DiagnosticCategory.STRUCTURAL_ERROR,
                    f"Unexpected top-level statement '{tok.keyword}' ignored",
                    tok.line,
                    tok.column,
                )
                self._skip_block(tok)
                continue
            root = self._parse_root(tok)
            if roots:
                self._diagnostics.warning(
                    DiagnosticCategory.STRUCTURAL_ERROR,
                    f"Additional top-level {tok.keyword} '{root.argument}' in one file; only the first forms the tree",
                    tok.line,
                    tok.column,
                )
            else:
                root_index = index
            roots.append(root)

        established = root_index is not None and root_index not in self._stream.unclosed
        if not roots:
            self._diagnostics.error(
                DiagnosticCategory.STRUCTURAL_ERROR,
                "No module or submodule declaration found",
            )
        elif not established and not self._stream.fatal:
            first = self._tokens[root_index]
            self._diagnostics.error(
                DiagnosticCategory.STRUCTURAL_ERROR,
                f"The block of {first.keyword} '{first.argument}' is never closed; no usable root",
                first.line,
                first.column,
            )
        return RawParse(
            filename=self._filename,
            roots=roots,
            diagnostics=self._diagnostics.diagnostics,
            root_established=established,
            fatal=self._stream.fatal,
            parser="primary",
        )

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        self._pos += 1
        return tok

    def _skip_block(self, tok: Token) -> None:
        """Skip every remaining token nested inside *tok*'s block."""
        while self._pos < len(self._tokens) and self._tokens[self._pos].depth > tok.depth:
            self._pos += 1

    def _orphan(self, tok: Token) -> None:
        self._diagnostics.warning(
            DiagnosticCategory.STRUCTURAL_ERROR,
            f"Statement '{tok.keyword}' is not inside a usable block; ignored",
            tok.line,
            tok.column,
        )
        self._skip_block(tok)

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _parse_root(self, tok: Token) -> RawNode:
        root = RawNode(tok.keyword, tok.argument, tok.line)
        if tok.argument is None:
            self._diagnostics.warning(
                DiagnosticCategory.SEMANTIC_WARNING, f"'{tok.keyword}' statement has no name", tok.line, tok.column
            )
        if not tok.has_block:
            self._diagnostics.warning(
                DiagnosticCategory.SEMANTIC_WARNING, f"{tok.keyword} '{tok.argument}' has no body", tok.line, tok.column
            )
        self._parse_block(tok, root)
        return root

    def _parse_block(self, owner: Token, node: RawNode) -> None:
        """Dispatch every direct substatement of *owner* into *node*."""
        if not owner.has_block:
            return
        while self._pos < len(self._tokens) and self._tokens[self._pos].depth > owner.depth:
            tok = self._advance()
            if tok.depth != owner.depth + 1:
                self._orphan(tok)
                continue
            handler = _HANDLERS[statement_kind(tok.keyword, self._config)]
            handler(self, tok, node)
            # Handlers that ignore substatements leave them for us to drop.
            self._skip_block(tok)

    # ------------------------------------------------------------------
    # Handlers, one per StatementKind
    # ------------------------------------------------------------------

    def _handle_root(self, tok: Token, node: RawNode) -> None:
        self._diagnostics.warning(
            DiagnosticCategory.STRUCTURAL_ERROR,
            f"'{tok.keyword}' is only allowed at the top level",
            tok.line,
            tok.column,
        )
        self._handle_generic(tok, node)

    def _handle_schema_node(self, tok: Token, node: RawNode) -> None:
        child = RawNode(tok.keyword, tok.argument, tok.line)
        if tok.argument is None and tok.keyword not in _UNNAMED_KEYWORDS:
            self._diagnostics.warning(
                DiagnosticCategory.SEMANTIC_WARNING, f"'{tok.keyword}' statement has no name", tok.line, tok.column
            )
        self._parse_block(tok, child)
        if tok.keyword in _TYPED_KEYWORDS and "type" not in child.properties:
            self._diagnostics.warning(
                DiagnosticCategory.SEMANTIC_WARNING,
                f"{tok.keyword} '{tok.argument}' has no 'type' substatement",
                tok.line,
                tok.column,
            )
        node.children.append(child)

    def _handle_header(self, tok: Token, node: RawNode) -> None:
        if tok.keyword == "prefix" and node.keyword in ("import", "belongs-to"):
            node.properties["prefix"] = tok.argument
            return
        if node.keyword not in _ROOT_KEYWORDS:
            self._diagnostics.warning(
                DiagnosticCategory.SEMANTIC_WARNING,
                f"'{tok.keyword}' is only allowed in a module header",
                tok.line,
                tok.column,
            )
            self._handle_generic(tok, node)
            return
        header = RawNode(tok.keyword, tok.argument, tok.line)
        if tok.argument is None:
            self._diagnostics.warning(
                DiagnosticCategory.SEMANTIC_WARNING, f"'{tok.keyword}' statement has no argument", tok.line, tok.column
            )
        self._parse_block(tok, header)
        node.header.append(header)

    def _handle_documentation(self, tok: Token, node: RawNode) -> None:
        if tok.keyword == "reference":
            node.properties["reference"] = tok.argument
            return
        if node.description is not None:
            self._diagnostics.warning(
                DiagnosticCategory.SEMANTIC_WARNING,
                f"Duplicate 'description' in {node.keyword} '{node.argument}'",
                tok.line,
                tok.column,
            )
        node.description = tok.argument

    def _handle_flag(self, tok: Token, node: RawNode) -> None:
        if tok.argument not in ("true", "false"):
            self._diagnostics.warning(
                DiagnosticCategory.SEMANTIC_WARNING,
                f"'{tok.keyword}' must be 'true' or 'false', got {tok.argument!r}",
                tok.line,
                tok.column,
            )
            return
        setattr(node, tok.keyword, tok.argument == "true")

    def _handle_type(self, tok: Token, node: RawNode) -> None:
        if "type" in node.properties:
            self._diagnostics.warning(
                DiagnosticCategory.SEMANTIC_WARNING,
                f"Duplicate 'type' in {node.keyword} '{node.argument}'",
                tok.line,
                tok.column,
            )
        node.properties["type"] = tok.argument
        if not tok.has_block:
            return
        # Restrictions of the type are folded into the owning node.
        while self._pos < len(self._tokens) and self._tokens[self._pos].depth > tok.depth:
            sub = self._advance()
            if sub.depth == tok.depth + 1 and statement_kind(sub.keyword, self._config) is StatementKind.TYPE_RESTRICTION:
                self._handle_type_restriction(sub, node)
            self._skip_block(sub)

    def _handle_type_restriction(self, tok: Token, node: RawNode) -> None:
        if tok.keyword == "enum":
            node.properties.setdefault("enums", []).append(tok.argument)
            return
        key = _SCALAR_PROPERTIES[tok.keyword]
        # Several patterns may restrict one type; the first is kept.
        if key == "pattern" and "pattern" in node.properties:
            return
        node.properties[key] = tok.argument

    def _handle_property(self, tok: Token, node: RawNode) -> None:
        if tok.keyword in _LIST_PROPERTIES:
            node.properties.setdefault(_LIST_PROPERTIES[tok.keyword], []).append(tok.argument)
            return
        node.properties[_SCALAR_PROPERTIES[tok.keyword]] = tok.argument

    def _handle_generic(self, tok: Token, node: RawNode) -> None:
        child = RawNode(tok.keyword, tok.argument, tok.line)
        self._parse_block(tok, child)
        node.children.append(child)


_HANDLERS: dict[StatementKind, _Handler] = {
    StatementKind.ROOT: _Parser._handle_root,
    StatementKind.SCHEMA_NODE: _Parser._handle_schema_node,
    StatementKind.HEADER: _Parser._handle_header,
    StatementKind.DOCUMENTATION: _Parser._handle_documentation,
    StatementKind.FLAG: _Parser._handle_flag,
    StatementKind.TYPE: _Parser._handle_type,
    StatementKind.TYPE_RESTRICTION: _Parser._handle_type_restriction,
    StatementKind.PROPERTY: _Parser._handle_property,
    StatementKind.GENERIC: _Parser._handle_generic,
}
