# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the single-file and batch parse pipeline."""

from __future__ import annotations

import re
from pathlib import Path

import pytest

from yangtree.compiler import build
from yangtree.compiler.build import FALLBACK_NOTE, parse_multiple, parse_single
from yangtree.model.diagnostics import DiagnosticCategory, Severity
from yangtree.model.entities import DependencyEdge, ParseResult, YangSource
from yangtree.workspace.config import ParserConfig

# ###############
# Test data directory
# ###############

DATA_DIR = Path(__file__).parent.parent / "data"

# ###############
# Helpers
# ###############


def _module(name: str, body: str = "") -> str:
    return f'module {name} {{\n  namespace "urn:{name}";\n  prefix {name};\n{body}}}\n'


def _error_messages(result: ParseResult) -> list[str]:
    return [d.message for d in result.diagnostics if d.severity == Severity.ERROR]


def _sources(directory: Path) -> list[YangSource]:
    return [YangSource(name=p.name, content=p.read_text(encoding="utf-8")) for p in sorted(directory.glob("*.yang"))]


# ###############
# Single File
# ###############


class TestParseSingle:
    def test_valid_module(self) -> None:
        result = parse_single('module m { namespace "urn:m"; prefix "m"; leaf x { type string; } }')
        assert result.valid
        assert result.filename == "temp.yang"
        assert result.parser_used == "primary"
        assert result.tree is not None
        assert (result.tree.type, result.tree.name) == ("module", "m")
        assert len(result.tree.children) == 1
        leaf = result.tree.children[0]
        assert (leaf.type, leaf.name, leaf.properties.type) == ("leaf", "x", "string")
        assert [m.name for m in result.modules] == ["m"]
        assert result.metadata.namespace == "urn:m"

    def test_missing_closing_braces_recovers_with_fallback(self) -> None:
        result = parse_single("module m { container c {")
        assert not result.valid
        assert result.parser_used == "fallback"
        assert result.tree is not None
        assert result.tree.name == "m"
        assert any(re.search(r"brace|depth", m, re.IGNORECASE) for m in _error_messages(result))
        assert any(d.message == FALLBACK_NOTE and d.severity == Severity.INFO for d in result.diagnostics)

    def test_fallback_keeps_header_written_on_the_module_line(self) -> None:
        result = parse_single('module m { namespace "urn:m"; prefix m; container c {')
        assert result.parser_used == "fallback"
        assert result.metadata.namespace == "urn:m"
        assert result.metadata.prefix == "m"
        assert not any("missing the required" in d.message for d in result.diagnostics)

    def test_missing_semicolon_is_a_syntax_error(self) -> None:
        result = parse_single('module m {\n  namespace "urn:m"\n  prefix m;\n}\n')
        assert not result.valid
        assert result.parser_used == "primary"
        assert any(re.search(r"semicolon|syntax", m, re.IGNORECASE) for m in _error_messages(result))

    def test_missing_namespace_is_reported(self) -> None:
        result = parse_single("module m {\n  prefix m;\n}\n")
        assert result.valid
        warnings = [d.message for d in result.diagnostics if d.severity == Severity.WARNING]
        assert any(re.search(r"namespace|required", m, re.IGNORECASE) for m in warnings)

    def test_duplicate_namespace_last_wins(self) -> None:
        result = parse_single('module m { namespace "urn:a"; namespace "urn:b"; prefix m; }')
        assert result.metadata.namespace == "urn:b"
        assert any(d.severity == Severity.WARNING for d in result.diagnostics)

    @pytest.mark.parametrize("content", ["", "   \n", "container c { leaf x; }", "// module m {"])
    def test_input_without_module_is_invalid(self, content: str) -> None:
        result = parse_single(content)
        assert not result.valid
        assert result.tree is None
        assert result.metadata.module is None
        assert "No module or submodule declaration found" in _error_messages(result)

    def test_fallback_without_module_keeps_primary_result(self) -> None:
        result = parse_single("container c {")
        assert result.parser_used == "primary"

    def test_resource_limit_does_not_fall_back(self) -> None:
        result = parse_single(_module("m", "  leaf a { type string; }\n"), config=ParserConfig(max_statements=3))
        assert not result.valid
        assert result.parser_used == "primary"
        assert result.tree is not None
        assert any(d.category == DiagnosticCategory.FATAL_RESOURCE_ERROR for d in result.diagnostics)

    def test_force_fallback(self) -> None:
        result = parse_single(_module("m", "  leaf a { type string; }\n"), "m.yang", force_fallback=True)
        assert result.parser_used == "fallback"
        assert result.valid
        assert result.metadata.namespace == "urn:m"
        assert result.tree is not None
        assert result.tree.children[0].properties.type == "string"

    def test_bytes_input(self) -> None:
        result = parse_single(_module("m").encode("utf-8"), "m.yang")
        assert result.valid
        assert result.metadata.filename == "m.yang"

    def test_diagnostics_are_ordered_by_line(self) -> None:
        result = parse_single('module m {\n  leaf a;\n  leaf b;\n  namespace "x"\n}\n')
        lines = [d.line for d in result.diagnostics]
        assert lines == sorted(lines)

    def test_same_input_gives_equal_results(self) -> None:
        content = (DATA_DIR / "valid" / "example-interfaces.yang").read_text(encoding="utf-8")
        assert parse_single(content) == parse_single(content)

    def test_children_follow_source_order(self) -> None:
        content = (DATA_DIR / "valid" / "example-interfaces.yang").read_text(encoding="utf-8")
        result = parse_single(content)
        assert result.tree is not None
        assert [c.name for c in result.tree.children] == ["interfaces", "reset"]
        interface = result.tree.children[0].children[0]
        assert [c.name for c in interface.children] == ["name", "enabled", "load"]

    def test_unexpected_exception_becomes_a_diagnostic(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def _boom(*_args: object) -> None:
            raise RuntimeError("boom")

        monkeypatch.setattr(build, "normalize", _boom)
        result = parse_single(_module("m"), "m.yang")
        assert not result.valid
        assert result.filename == "m.yang"
        assert _error_messages(result) == ["Internal error during parsing m.yang: boom"]


# ###############
# Batches
# ###############


class TestParseMultiple:
    def test_import_creates_dependency_and_edge(self) -> None:
        files = [
            {"name": "a.yang", "content": _module("a", "  import b { prefix b; }\n")},
            {"name": "b.yang", "content": _module("b")},
        ]
        batch = parse_multiple(files)
        assert batch.dependencies["a.yang"] == ["b"]
        assert batch.dependencies["b.yang"] == []
        assert DependencyEdge(source="a.yang", target="b", type="import") in batch.graph.edges
        assert batch.summary.total_modules == 2
        assert batch.summary.valid_modules == 2
        assert batch.summary.total_errors == 0

    def test_mutual_import_is_a_cycle(self) -> None:
        batch = parse_multiple(_sources(DATA_DIR / "cyclic"))
        assert [f.filename for f in batch.files] == ["alpha.yang", "beta.yang"]
        for result in batch.files:
            assert not result.valid
            cycle_errors = [d for d in result.diagnostics if d.message.startswith("Circular import")]
            assert cycle_errors[0].category == DiagnosticCategory.DEPENDENCY_ERROR
        assert batch.summary.total_errors == 2
        assert batch.summary.valid_modules == 0
        assert all(edge.in_cycle for edge in batch.graph.edges)

    def test_valid_directory(self) -> None:
        batch = parse_multiple(_sources(DATA_DIR / "valid"))
        assert batch.summary.total_modules == 3
        assert batch.summary.total_errors == 0
        assert batch.dependencies["example-interfaces.yang"] == ["example-types", "example-interfaces-state"]
        assert not any(edge.unresolved for edge in batch.graph.edges)

    def test_unresolved_import_is_not_an_error(self) -> None:
        batch = parse_multiple([YangSource(name="a.yang", content=_module("a", "  import missing { prefix x; }\n"))])
        assert batch.files[0].valid
        assert batch.graph.edges[0].unresolved
        assert [(n.id, n.kind) for n in batch.graph.nodes] == [("a.yang", "file"), ("missing", "module")]

    def test_results_keep_input_order_with_workers(self) -> None:
        files = [YangSource(name=f"m{i}.yang", content=_module(f"m{i}")) for i in range(20)]
        batch = parse_multiple(files, config=ParserConfig(workers=4))
        assert [f.filename for f in batch.files] == [f"m{i}.yang" for i in range(20)]
        assert batch.summary.valid_modules == 20

    def test_sequential_and_parallel_results_match(self) -> None:
        sources = _sources(DATA_DIR / "valid") + _sources(DATA_DIR / "cyclic")
        assert parse_multiple(sources, config=ParserConfig(workers=1)) == parse_multiple(
            sources, config=ParserConfig(workers=3)
        )

    def test_invalid_entries_fail_individually(self) -> None:
        batch = parse_multiple([{"name": "x.yang"}, 42, {"name": "ok.yang", "content": _module("ok")}])  # type: ignore[list-item]
        assert [f.filename for f in batch.files] == ["x.yang", "<file 1>", "ok.yang"]
        assert [f.valid for f in batch.files] == [False, False, True]
        assert _error_messages(batch.files[0])[0].startswith("Invalid batch entry")
        assert batch.summary.total_errors == 2

    def test_two_modules_in_one_file_are_not_a_cycle(self) -> None:
        content = _module("a", "  import b { prefix b; }\n") + _module("b")
        batch = parse_multiple([YangSource(name="ab.yang", content=content)])
        result = batch.files[0]
        assert [m.name for m in result.modules] == ["a", "b"]
        assert not any(d.message.startswith("Circular import") for d in result.diagnostics)
        assert result.valid
        assert batch.summary.total_errors == 0

    def test_resource_limit_affects_only_its_own_file(self) -> None:
        deep = _module("deep", "  container c {\n" * 10 + "  }\n" * 10)
        files = [
            YangSource(name="ok.yang", content=_module("ok", "  leaf x { type string; }\n")),
            YangSource(name="deep.yang", content=deep),
            YangSource(name="also-ok.yang", content=_module("also-ok")),
        ]
        batch = parse_multiple(files, config=ParserConfig(max_depth=4, workers=3))
        ok, deep_result, also_ok = batch.files
        assert ok.valid
        assert also_ok.valid
        assert ok.diagnostics == []
        assert not deep_result.valid
        assert deep_result.parser_used == "primary"
        fatal = [d for d in deep_result.diagnostics if d.category == DiagnosticCategory.FATAL_RESOURCE_ERROR]
        assert len(fatal) == 1
        assert batch.summary.valid_modules == 2
        assert batch.summary.total_errors == len(deep_result.errors)

    def test_empty_batch(self) -> None:
        batch = parse_multiple([])
        assert batch.files == []
        assert batch.summary.total_modules == 0
        assert batch.graph.nodes == []
