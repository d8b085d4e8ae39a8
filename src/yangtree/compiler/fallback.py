# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Line-oriented recovery parser.

Used when the primary parser cannot establish a module root. Each line is
split into statements at the `;`, `{` and `}` outside quoted strings, every
statement is matched against a small set of patterns, and a stack of open
blocks follows the braces. A statement never spans lines. Header statements
(namespace, prefix, import, ...) are attached to the module regardless of
depth, so they survive even when the nesting around them is broken.

The work done is bounded by the number and length of the lines and the
function never raises for any input.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator

from yangtree.compiler.raw import RawNode, RawParse
from yangtree.model.diagnostics import DiagnosticCategory
from yangtree.validation.reporter import DiagnosticCollector
from yangtree.workspace.config import DEFAULT_CONFIG

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

UNKNOWN_TYPE = "unknown"


def parse_fallback(
    content: str | bytes, filename: str = "temp.yang", max_depth: int = DEFAULT_CONFIG.max_depth
) -> RawParse:
    """Recover a statement tree from text the primary parser could not handle.

    Args:
        content: The module text. Bytes are decoded as UTF-8 with
            replacement characters.
        filename: The file identifier reported in the result.
        max_depth: Maximum number of nested blocks tracked on the stack.

    Returns:
        A :class:`RawParse` with ``parser="fallback"``. ``root_established`` is
        True when at least one module or submodule statement was recovered.
    """
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    return _LineParser(content, filename, max_depth).parse()


# ################
# Implementation
# ################

_STATEMENT_RE = re.compile(
    r"(?P<keyword>[A-Za-z_][A-Za-z0-9_.\-]*(?::[A-Za-z_][A-Za-z0-9_.\-]*)?)"
    r"(?:\s+(?P<argument>\"(?:[^\"\\]|\\.)*\"?|'[^']*'?|[^\s;{}\"']+))?"
)
_SEGMENT_RE = re.compile(r"\"(?:[^\"\\]|\\.)*\"?|'[^']*'?|//|/\*|[^\"'/]+|/")
_PIECE_RE = re.compile(r"\"(?:[^\"\\]|\\.)*\"?|'[^']*'?|[;{}]|[^\"';{}]+")

_ROOT_KEYWORDS = frozenset({"module", "submodule"})
_HEADER_KEYWORDS = frozenset(
    {"namespace", "yang-version", "organization", "contact", "import", "include", "revision", "belongs-to"}
)
_SCHEMA_KEYWORDS = frozenset(
    {
        "container",
        "list",
        "leaf",
        "leaf-list",
        "choice",
        "case",
        "grouping",
        "typedef",
        "uses",
        "augment",
        "rpc",
        "action",
        "notification",
        "input",
        "output",
        "anydata",
        "anyxml",
    }
)
_TYPED_KEYWORDS = frozenset({"leaf", "leaf-list"})


def _unquote(argument: str | None) -> str | None:
    if argument is None or argument[:1] not in ("'", '"'):
        return argument
    quote = argument[0]
    inner = argument[1:]
    if inner.endswith(quote):
        inner = inner[:-1]
    return inner


def _strip_comments(line: str, in_comment: bool) -> tuple[str, bool]:
    """Remove comments from one line, honouring quotes.

    Returns the remaining code and whether a block comment is still open at
    the end of the line.
    """
    kept: list[str] = []
    pos = 0
    while pos < len(line):
        if in_comment:
            end = line.find("*/", pos)
            if end == -1:
                return "".join(kept).strip(), True
            pos = end + 2
            in_comment = False
            kept.append(" ")
            continue
        match = _SEGMENT_RE.match(line, pos)
        segment = match.group()
        if segment == "//":
            break
        if segment == "/*":
            in_comment = True
        else:
            kept.append(segment)
        pos = match.end()
    return "".join(kept).strip(), in_comment


def _split_statements(code: str) -> Iterator[tuple[str, str]]:
    """Split one comment-free line into ``(statement, terminator)`` pairs.

    The terminator is ``;``, ``{``, ``}`` or ``""`` for text that runs to the
    end of the line. Delimiters inside quoted strings do not split.
    """
    text: list[str] = []
    for match in _PIECE_RE.finditer(code):
        piece = match.group()
        if piece in (";", "{", "}"):
            yield "".join(text).strip(), piece
            text = []
        else:
            text.append(piece)
    rest = "".join(text).strip()
    if rest:
        yield rest, ""


class _LineParser:
    """State of one fallback run."""

    def __init__(self, content: str, filename: str, max_depth: int) -> None:
        self._lines = content.split("\n")
        self._filename = filename
        self._max_depth = max_depth
        self._diagnostics = DiagnosticCollector()
        self._roots: list[RawNode] = []
        # Open blocks as (node, depth inside the block).
        self._stack: list[tuple[RawNode, int]] = []

    def parse(self) -> RawParse:
        depth = 0
        balance = 0
        in_comment = False
        # A statement ending a line may still get its '{' on the next one.
        dangling: RawNode | None = None
        for line_no, text in enumerate(self._lines, start=1):
            code, in_comment = _strip_comments(text, in_comment)
            for statement, terminator in _split_statements(code):
                owner = None if statement else dangling
                dangling = None
                if statement:
                    match = _STATEMENT_RE.match(statement)
                    if match:
                        owner = self._statement(
                            match.group("keyword"), _unquote(match.group("argument")), line_no, depth
                        )
                if terminator == "{":
                    if owner is not None:
                        self._push(owner, depth + 1)
                    depth += 1
                    balance += 1
                elif terminator == "}":
                    balance -= 1
                    depth = max(depth - 1, 0)
                    self._pop_closed(depth)
                elif not terminator:
                    dangling = owner

        self._fill_unknown_types()
        if balance != 0:
            self._diagnostics.error(
                DiagnosticCategory.STRUCTURAL_ERROR,
                f"Unmatched braces detected. Depth: {balance}",
                len(self._lines),
            )
        if not self._roots:
            self._diagnostics.error(DiagnosticCategory.STRUCTURAL_ERROR, "No module or submodule declaration found")
        logger.debug("Fallback parser recovered %d root(s) from %s", len(self._roots), self._filename)
        return RawParse(
            filename=self._filename,
            roots=self._roots,
            diagnostics=self._diagnostics.diagnostics,
            root_established=bool(self._roots),
            fatal=False,
            parser="fallback",
        )

    def _pop_closed(self, depth: int) -> None:
        while len(self._stack) > 1 and self._stack[-1][1] > depth:
            self._stack.pop()

    def _push(self, node: RawNode, depth: int) -> None:
        # Deeper blocks attach their statements to the deepest kept block.
        if len(self._stack) < self._max_depth:
            self._stack.append((node, depth))

    def _top(self) -> RawNode | None:
        return self._stack[-1][0] if self._stack else None

    def _statement(self, keyword: str, argument: str | None, line: int, depth: int) -> RawNode | None:
        """Record one statement and return the node that a following block belongs to."""
        if keyword in _ROOT_KEYWORDS:
            root = RawNode(keyword, argument, line)
            self._roots.append(root)
            self._stack = [(root, depth + 1)]
            return None
        top = self._top()
        if top is None:
            return None
        root = self._stack[0][0]

        if keyword in _HEADER_KEYWORDS:
            header = RawNode(keyword, argument, line)
            root.header.append(header)
            return header
        if keyword in _SCHEMA_KEYWORDS:
            child = RawNode(keyword, argument, line)
            top.children.append(child)
            return child
        if keyword == "prefix":
            if top.keyword in ("import", "belongs-to"):
                top.properties["prefix"] = argument
            else:
                root.header.append(RawNode(keyword, argument, line))
        elif keyword == "revision-date":
            if top.keyword in ("import", "include"):
                top.properties["revision_date"] = argument
        elif keyword == "type":
            top.properties.setdefault("type", argument)
        elif keyword == "description" and argument is not None and top.description is None:
            top.description = argument
        return None

    def _fill_unknown_types(self) -> None:
        pending = list(self._roots)
        while pending:
            node = pending.pop()
            if node.keyword in _TYPED_KEYWORDS and not node.properties.get("type"):
                node.properties["type"] = UNKNOWN_TYPE
            pending.extend(node.children)
