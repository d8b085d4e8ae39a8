# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Statement tokenizer for YANG module text.

Converts raw module text into a flat, ordered stream of statements. Each
statement carries its nesting depth, so the tree shape can be rebuilt by the
parser without re-reading braces.

The tokenizer never raises. Malformed text is reported as diagnostics and
tokenization recovers; only the resource limits of :class:`ParserConfig`
stop it early.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from yangtree.model.diagnostics import Diagnostic, DiagnosticCategory
from yangtree.validation.reporter import DiagnosticCollector
from yangtree.workspace.config import DEFAULT_CONFIG, ParserConfig

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class Token:
    """A single YANG statement.

    Attributes:
        keyword: The statement keyword, possibly prefixed (``ex:ext``).
        argument: The decoded argument, or None when the statement has none.
        has_block: True if the statement opens a ``{ }`` block.
        line: 1-based line number of the keyword.
        column: 1-based column number of the keyword.
        depth: Number of enclosing blocks (0 for top-level statements).
    """

    keyword: str
    argument: str | None
    has_block: bool
    line: int
    column: int
    depth: int


@dataclass
class TokenStream:
    """The result of tokenizing one file.

    Attributes:
        tokens: Statements in source order.
        diagnostics: Problems found while tokenizing.
        fatal: True if a resource limit stopped tokenization early.
        unclosed: Indices into *tokens* of blocks that were never closed and
            had to be closed implicitly at end of input.
    """

    tokens: list[Token] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    fatal: bool = False
    unclosed: frozenset[int] = frozenset()


def tokenize(source: str, config: ParserConfig = DEFAULT_CONFIG) -> TokenStream:
    """Tokenize YANG source text into a statement stream.

    Args:
        source: The full text of one module.
        config: Resource limits to enforce.

    Returns:
        A :class:`TokenStream`. Tokenizing the same input twice yields equal
        streams.
    """
    return _Lexer(source, config).tokenize()


# ################
# Implementation
# ################

# An unquoted string ends at whitespace, quotes, ';', braces, or a comment start.
_UNQUOTED_RE = re.compile(r"(?:[^\s;{}\"'/]|/(?![/*]))+")
_WHITESPACE_RE = re.compile(r"[ \t\r\n]+")
_KEYWORD_RE = re.compile(r"(?:[A-Za-z_][A-Za-z0-9_.\-]*:)?[A-Za-z_][A-Za-z0-9_.\-]*", re.ASCII)
_ESCAPE_RE = re.compile(r"\\([nt\"\\])")
_ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}


class _ResourceLimitExceeded(Exception):
    """Stops the scanner once a fatal diagnostic has been recorded."""


def _shorten(text: str, limit: int = 40) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


class _Lexer:
    """Internal scanner state machine."""

    def __init__(self, source: str, config: ParserConfig) -> None:
        self._source = source
        self._config = config
        self._pos = 0
        self._line = 1
        self._column = 1
        self._tokens: list[Token] = []
        self._open_blocks: list[int] = []
        self._unclosed: set[int] = set()
        self._diagnostics = DiagnosticCollector()

    def tokenize(self) -> TokenStream:
        """Run the scanner over the whole input."""
        fatal = False
        try:
            while True:
                self._skip_whitespace_and_comments()
                if self._at_end():
                    break
                ch = self._current()
                if ch == "}":
                    self._close_block()
                elif ch == ";":
                    self._diagnostics.info(
                        DiagnosticCategory.LEX_ERROR, "Empty statement ';' ignored", self._line, self._column
                    )
                    self._advance()
                elif ch == "{":
                    line, col = self._line, self._column
                    self._diagnostics.error(DiagnosticCategory.LEX_ERROR, "Block without a statement keyword", line, col)
                    self._advance()
                    self._open_block(-1, line, col)
                else:
                    self._scan_statement()
            self._close_remaining_blocks()
        except _ResourceLimitExceeded:
            fatal = True
        return TokenStream(
            tokens=self._tokens,
            diagnostics=self._diagnostics.diagnostics,
            fatal=fatal,
            unclosed=frozenset(self._unclosed),
        )

    # ------------------------------------------------------------------
    # Low-level character access helpers
    # ------------------------------------------------------------------

    def _at_end(self) -> bool:
        return self._pos >= len(self._source)

    def _current(self) -> str:
        """Return the character at the current position, or '' at end of input."""
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _peek(self) -> str:
        """Return the character one position ahead, or '' at end of input."""
        if self._pos + 1 < len(self._source):
            return self._source[self._pos + 1]
        return ""

    def _advance(self) -> str:
        """Consume the current character, update position tracking, and return it."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return ch

    def _advance_to(self, end: int) -> str:
        """Consume everything up to (excluding) *end* and return it."""
        chunk = self._source[self._pos : end]
        newlines = chunk.count("\n")
        if newlines:
            self._line += newlines
            self._column = len(chunk) - chunk.rfind("\n")
        else:
            self._column += len(chunk)
        self._pos = end
        return chunk

    # ------------------------------------------------------------------
    # Whitespace and comment skipping
    # ------------------------------------------------------------------

    def _skip_whitespace_and_comments(self) -> None:
        """Skip all whitespace and comment runs at the current position."""
        while not self._at_end():
            ch = self._current()
            if ch in " \t\r\n":
                match = _WHITESPACE_RE.match(self._source, self._pos)
                self._advance_to(match.end())
            elif ch == "/" and self._peek() == "/":
                self._skip_line_comment()
            elif ch == "/" and self._peek() == "*":
                self._skip_block_comment()
            else:
                break

    def _skip_line_comment(self) -> None:
        """Consume from '//' through end-of-line (exclusive of the newline itself)."""
        end = self._source.find("\n", self._pos)
        self._advance_to(len(self._source) if end == -1 else end)

    def _skip_block_comment(self) -> None:
        """Consume from '/*' through the matching '*/'."""
        line, col = self._line, self._column
        end = self._source.find("*/", self._pos + 2)
        if end == -1:
            self._diagnostics.warning(DiagnosticCategory.LEX_ERROR, "Unterminated block comment", line, col)
            self._advance_to(len(self._source))
        else:
            self._advance_to(end + 2)

    # ------------------------------------------------------------------
    # Statements and blocks
    # ------------------------------------------------------------------

    def _scan_statement(self) -> None:
        """Scan ``keyword [argument] (';' | '{')``."""
        line, col = self._line, self._column

        if self._current() in "\"'":
            self._scan_quoted()
            self._diagnostics.error(
                DiagnosticCategory.LEX_ERROR, "Expected a statement keyword, found a quoted string", line, col
            )
            keyword = None
        else:
            keyword = self._scan_unquoted()
            if not _KEYWORD_RE.fullmatch(keyword):
                self._diagnostics.error(
                    DiagnosticCategory.LEX_ERROR, f"Illegal keyword {_shorten(keyword)!r}", line, col
                )

        self._skip_whitespace_and_comments()
        argument: str | None = None
        if not self._at_end() and self._current() not in ";{}":
            argument = self._scan_argument()
            self._skip_whitespace_and_comments()

        ch = self._current()
        if ch == ";":
            self._advance()
            has_block = False
        elif ch == "{":
            self._advance()
            has_block = True
        else:
            self._diagnostics.error(
                DiagnosticCategory.LEX_ERROR,
                f"Syntax error: missing ';' or '{{' after {_shorten(keyword or 'statement')!r}",
                line,
                col,
            )
            has_block = False

        if keyword is not None:
            self._emit(keyword, argument, has_block, line, col)
        elif has_block:
            # Keep braces balanced for a block whose keyword was unusable.
            self._open_block(-1, line, col)

    def _emit(self, keyword: str, argument: str | None, has_block: bool, line: int, col: int) -> None:
        """Append a token, enforcing the statement limit."""
        if len(self._tokens) >= self._config.max_statements:
            self._diagnostics.error(
                DiagnosticCategory.FATAL_RESOURCE_ERROR,
                f"Statement limit of {self._config.max_statements} exceeded; tokenization stopped",
                line,
                col,
            )
            raise _ResourceLimitExceeded()
        self._tokens.append(Token(keyword, argument, has_block, line, col, len(self._open_blocks)))
        if has_block:
            self._open_block(len(self._tokens) - 1, line, col)

    def _open_block(self, token_index: int, line: int, col: int) -> None:
        """Push a block (-1 for one without a token), enforcing the depth limit."""
        if len(self._open_blocks) + 1 > self._config.max_depth:
            self._diagnostics.error(
                DiagnosticCategory.FATAL_RESOURCE_ERROR,
                f"Nesting depth limit of {self._config.max_depth} exceeded; tokenization stopped",
                line,
                col,
            )
            raise _ResourceLimitExceeded()
        self._open_blocks.append(token_index)

    def _close_block(self) -> None:
        """Consume a '}' and close the innermost open block."""
        line, col = self._line, self._column
        self._advance()
        if self._open_blocks:
            self._open_blocks.pop()
        else:
            self._diagnostics.error(
                DiagnosticCategory.STRUCTURAL_ERROR, "Unbalanced braces: unexpected '}' ignored", line, col
            )

    def _close_remaining_blocks(self) -> None:
        """Implicitly close blocks left open at end of input."""
        if not self._open_blocks:
            return
        count = len(self._open_blocks)
        innermost = next((i for i in reversed(self._open_blocks) if i >= 0), None)
        where = ""
        if innermost is not None:
            tok = self._tokens[innermost]
            where = f"; '{tok.keyword}' opened on line {tok.line} is never closed"
        self._diagnostics.error(
            DiagnosticCategory.STRUCTURAL_ERROR,
            f"Unbalanced braces: {count} block(s) not closed at end of input (depth {count}){where}",
            self._line,
        )
        self._unclosed.update(i for i in self._open_blocks if i >= 0)
        self._open_blocks.clear()

    # ------------------------------------------------------------------
    # Arguments
    # ------------------------------------------------------------------

    def _scan_unquoted(self) -> str:
        match = _UNQUOTED_RE.match(self._source, self._pos)
        if match is None:
            # A character that cannot start any token; consume it so we progress.
            return self._advance()
        return self._advance_to(match.end())

    def _scan_argument(self) -> str:
        """Scan an unquoted argument or quoted strings joined with '+'."""
        if self._current() not in "\"'":
            return self._scan_unquoted()
        parts = [self._scan_quoted()]
        while True:
            self._skip_whitespace_and_comments()
            if self._current() != "+":
                break
            plus_line, plus_col = self._line, self._column
            self._advance()
            self._skip_whitespace_and_comments()
            if self._current() not in ("'", '"') or self._at_end():
                self._diagnostics.error(
                    DiagnosticCategory.LEX_ERROR, "Expected a quoted string after '+'", plus_line, plus_col
                )
                break
            parts.append(self._scan_quoted())
        return "".join(parts)

    def _scan_quoted(self) -> str:
        """Scan a single- or double-quoted string and return its decoded value."""
        quote = self._current()
        line, col = self._line, self._column
        start = self._pos + 1
        end = self._find_closing_quote(quote, start)
        if end == -1:
            self._diagnostics.warning(
                DiagnosticCategory.LEX_ERROR,
                "Unterminated quoted string; the rest of the line is used as the argument",
                line,
                col,
            )
            eol = self._source.find("\n", self._pos)
            if eol == -1:
                eol = len(self._source)
            self._advance_to(eol)
            return self._source[start:eol].rstrip("\r")
        raw = self._source[start:end]
        self._advance_to(end + 1)
        if quote == "'":
            return raw
        return _decode_double_quoted(raw, col)

    def _find_closing_quote(self, quote: str, start: int) -> int:
        if quote == "'":
            return self._source.find("'", start)
        pos = start
        while True:
            end = self._source.find('"', pos)
            if end == -1:
                return -1
            backslashes = 0
            while end - backslashes - 1 >= start and self._source[end - backslashes - 1] == "\\":
                backslashes += 1
            if backslashes % 2 == 0:
                return end
            pos = end + 1


def _decode_double_quoted(raw: str, quote_column: int) -> str:
    """Apply the double-quoted string rules of RFC 7950, section 6.1.3.

    Trailing whitespace before a line break is removed, continuation lines lose
    leading whitespace up to the column just after the opening quote, and the
    escapes ``\\n``, ``\\t``, ``\\"`` and ``\\\\`` are replaced.
    """
    if "\n" in raw:
        lines = raw.split("\n")
        trimmed = [lines[0].rstrip(" \t\r")]
        for index, text in enumerate(lines[1:], start=1):
            stripped = text.lstrip(" \t")
            indent = len(text) - len(stripped)
            text = text[min(indent, quote_column) :]
            if index < len(lines) - 1:
                text = text.rstrip(" \t\r")
            trimmed.append(text)
        raw = "\n".join(trimmed)
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(1)], raw)
