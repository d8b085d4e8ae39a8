# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the YANG statement tokenizer."""

import pytest

from yangtree.model.diagnostics import DiagnosticCategory, Severity
from yangtree.parser.lexer import Token, TokenStream, tokenize
from yangtree.workspace.config import ParserConfig

# ###############
# Test Helpers
# ###############


def _keywords(source: str) -> list[str]:
    """Return the keyword of every token."""
    return [tok.keyword for tok in tokenize(source).tokens]


def _arguments(source: str) -> list[str | None]:
    """Return the argument of every token."""
    return [tok.argument for tok in tokenize(source).tokens]


def _messages(stream: TokenStream, severity: Severity | None = None) -> list[str]:
    return [d.message for d in stream.diagnostics if severity is None or d.severity == severity]


# ###############
# Basic Statements
# ###############


class TestBasicStatements:
    def test_empty_input_produces_no_tokens(self) -> None:
        stream = tokenize("")
        assert stream.tokens == []
        assert stream.diagnostics == []
        assert not stream.fatal

    def test_whitespace_only_produces_no_tokens(self) -> None:
        assert tokenize("  \t\r\n  ").tokens == []

    def test_simple_statement(self) -> None:
        assert tokenize("leaf x;").tokens == [Token("leaf", "x", False, 1, 1, 0)]

    def test_statement_without_argument(self) -> None:
        tok = tokenize("input { }").tokens[0]
        assert tok.keyword == "input"
        assert tok.argument is None
        assert tok.has_block

    def test_prefixed_extension_keyword(self) -> None:
        assert _keywords("ex:annotation foo;") == ["ex:annotation"]

    def test_nesting_depth(self) -> None:
        tokens = tokenize("module m { container c { leaf x; } leaf y; }").tokens
        assert [(t.keyword, t.depth) for t in tokens] == [
            ("module", 0),
            ("container", 1),
            ("leaf", 2),
            ("leaf", 1),
        ]

    def test_line_and_column_tracking(self) -> None:
        tokens = tokenize("module m {\n  leaf x;\n}").tokens
        assert (tokens[1].line, tokens[1].column) == (2, 3)

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("path /a/b;", "/a/b"),
            ("namespace urn:ietf:params:xml:ns:yang:x;", "urn:ietf:params:xml:ns:yang:x"),
            ("range 1..10;", "1..10"),
        ],
    )
    def test_unquoted_arguments(self, source: str, expected: str) -> None:
        assert _arguments(source) == [expected]

    def test_tokenizing_twice_gives_equal_streams(self) -> None:
        source = 'module m { namespace "urn:m"; leaf x { type string; } /* c */ }'
        assert tokenize(source) == tokenize(source)


# ###############
# Quoted Strings
# ###############


class TestQuotedStrings:
    def test_double_quoted_escapes(self) -> None:
        assert _arguments(r'description "a\nb\t\"c\"\\";') == ['a\nb\t"c"\\']

    def test_single_quoted_string_is_literal(self) -> None:
        assert _arguments(r"description 'a\nb';") == ["a\\nb"]

    def test_concatenation(self) -> None:
        assert _arguments("pattern \"ab\" + 'cd'\n   + \"ef\";") == ["abcdef"]

    def test_multiline_double_quoted_string_is_trimmed(self) -> None:
        # The opening quote is in column 13, so 13 characters of indentation are removed.
        source = 'description "first   \n' + " " * 13 + 'second";'
        assert _arguments(source) == ["first\nsecond"]

    def test_comment_markers_inside_quotes_are_kept(self) -> None:
        assert _arguments('namespace "http://example.com/*x*/";') == ["http://example.com/*x*/"]

    def test_unterminated_quote_uses_rest_of_line(self) -> None:
        stream = tokenize('description "abc')
        assert stream.tokens[0].argument == "abc"
        warnings = [d for d in stream.diagnostics if d.severity == Severity.WARNING]
        assert warnings[0].category == DiagnosticCategory.LEX_ERROR
        assert "Unterminated quoted string" in warnings[0].message

    def test_plus_without_string_is_an_error(self) -> None:
        stream = tokenize('pattern "a" + ;')
        assert any("Expected a quoted string after '+'" in m for m in _messages(stream, Severity.ERROR))


# ###############
# Comments
# ###############


class TestComments:
    def test_line_and_block_comments_are_skipped(self) -> None:
        assert _arguments("// header\nleaf /* inline */ x; /* tail */") == ["x"]

    def test_multiline_block_comment(self) -> None:
        tokens = tokenize("/* a\n b\n */ leaf x;").tokens
        assert tokens[0].line == 3

    def test_unterminated_block_comment_is_a_warning(self) -> None:
        stream = tokenize("leaf x; /* never closed")
        assert _keywords("leaf x; /* never closed") == ["leaf"]
        assert _messages(stream, Severity.WARNING) == ["Unterminated block comment"]


# ###############
# Recovery
# ###############


class TestRecovery:
    def test_missing_semicolon_is_a_syntax_error(self) -> None:
        stream = tokenize('namespace "urn:x"\nprefix x;')
        assert [t.keyword for t in stream.tokens] == ["namespace", "prefix"]
        errors = [d for d in stream.diagnostics if d.severity == Severity.ERROR]
        assert len(errors) == 1
        assert errors[0].category == DiagnosticCategory.LEX_ERROR
        assert "missing ';'" in errors[0].message
        assert errors[0].line == 1

    def test_stray_closing_brace_is_ignored(self) -> None:
        stream = tokenize("leaf x; }")
        assert _keywords("leaf x; }") == ["leaf"]
        assert stream.diagnostics[0].category == DiagnosticCategory.STRUCTURAL_ERROR
        assert "unexpected '}'" in stream.diagnostics[0].message

    def test_unclosed_blocks_are_reported(self) -> None:
        stream = tokenize("module m { container c {")
        errors = _messages(stream, Severity.ERROR)
        assert len(errors) == 1
        assert "Unbalanced braces" in errors[0]
        assert "depth 2" in errors[0]
        assert stream.unclosed == frozenset({0, 1})

    def test_closed_blocks_are_not_marked_unclosed(self) -> None:
        stream = tokenize("module m { container c { }")
        assert stream.unclosed == frozenset({0})

    def test_illegal_keyword_is_kept_with_an_error(self) -> None:
        stream = tokenize("\x01\x02 x;")
        assert len(stream.tokens) == 1
        assert stream.diagnostics[0].category == DiagnosticCategory.LEX_ERROR
        assert "Illegal keyword" in stream.diagnostics[0].message

    def test_quoted_keyword_is_dropped(self) -> None:
        stream = tokenize('"leaf" x;')
        assert stream.tokens == []
        assert "Expected a statement keyword" in stream.diagnostics[0].message

    def test_empty_statement_is_an_info(self) -> None:
        stream = tokenize("leaf x;;")
        assert _messages(stream, Severity.INFO) == ["Empty statement ';' ignored"]

    def test_block_without_keyword_keeps_braces_balanced(self) -> None:
        stream = tokenize("module m { { leaf x; } leaf y; }")
        assert [(t.keyword, t.depth) for t in stream.tokens] == [("module", 0), ("leaf", 2), ("leaf", 1)]
        assert "Block without a statement keyword" in _messages(stream, Severity.ERROR)


# ###############
# Resource Limits
# ###############


class TestResourceLimits:
    def test_depth_limit_is_fatal(self) -> None:
        stream = tokenize("a { b { c { } } }", ParserConfig(max_depth=2))
        assert stream.fatal
        assert stream.diagnostics[-1].category == DiagnosticCategory.FATAL_RESOURCE_ERROR
        assert "Nesting depth limit of 2" in stream.diagnostics[-1].message

    def test_statement_limit_is_fatal(self) -> None:
        stream = tokenize("a; b; c;", ParserConfig(max_statements=2))
        assert stream.fatal
        assert len(stream.tokens) == 2
        assert stream.diagnostics[-1].category == DiagnosticCategory.FATAL_RESOURCE_ERROR

    def test_input_within_limits_is_not_fatal(self) -> None:
        assert not tokenize("a { b { c; } }", ParserConfig(max_depth=2, max_statements=3)).fatal
