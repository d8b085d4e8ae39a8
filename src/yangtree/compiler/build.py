# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parse pipeline for single files and batches.

A single file goes through these stages:

1. The tokenizer and the primary parser build a raw statement tree.
2. If the primary parser could not establish a module root (and no resource
   limit was hit), the line-based fallback parser runs over the same text.
   Its result replaces the primary one only when it recovers a module.
3. The raw tree is normalized into :class:`~yangtree.model.entities.Node`
   objects and the header is summarized into metadata.

A batch parses every file (concurrently when configured) and then resolves
imports and includes across the whole batch. Neither entry point raises: any
unexpected failure inside a stage becomes an error diagnostic.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import pydantic

from yangtree.compiler.fallback import parse_fallback
from yangtree.compiler.metadata import empty_metadata, extract_metadata
from yangtree.compiler.normalizer import normalize
from yangtree.compiler.parser import parse_statements
from yangtree.compiler.raw import RawParse, needs_fallback
from yangtree.model.diagnostics import Diagnostic, DiagnosticCategory, Severity
from yangtree.model.entities import (
    BatchResult,
    BatchSummary,
    DependencyGraph,
    Metadata,
    ModuleInfo,
    Node,
    ParseResult,
    YangSource,
)
from yangtree.parser.lexer import tokenize
from yangtree.validation.dependencies import DependencyAnalysis, build_dependency_graph
from yangtree.validation.reporter import DiagnosticCollector, count_errors, guard, report
from yangtree.workspace.config import DEFAULT_CONFIG, ParserConfig

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

DEFAULT_FILENAME = "temp.yang"

FALLBACK_NOTE = "Recovered with the line-based fallback parser; nested content may be incomplete"


def parse_single(
    content: str | bytes,
    filename: str = DEFAULT_FILENAME,
    *,
    config: ParserConfig | None = None,
    force_fallback: bool = False,
) -> ParseResult:
    """Parse one YANG file.

    Args:
        content: The module text. Bytes are decoded as UTF-8 with
            replacement characters.
        filename: Identifier stored in the result and its metadata.
        config: Parser settings; defaults to :data:`DEFAULT_CONFIG`.
        force_fallback: Skip the primary parser and use the fallback parser.

    Returns:
        A :class:`ParseResult`. ``valid`` is False whenever an error-severity
        diagnostic was produced.
    """
    config = config or DEFAULT_CONFIG
    collector = DiagnosticCollector()
    with guard(collector, f"parsing {filename}"):
        return _parse(content, filename, config, force_fallback)
    return ParseResult(
        filename=filename,
        valid=False,
        diagnostics=collector.report(),
        metadata=empty_metadata(filename),
    )


def parse_multiple(
    files: Sequence[Mapping[str, Any] | YangSource],
    *,
    config: ParserConfig | None = None,
) -> BatchResult:
    """Parse a batch of files and resolve the dependencies between them.

    Args:
        files: ``{"name": ..., "content": ...}`` mappings or
            :class:`YangSource` objects. A malformed entry yields a failed
            result for that entry only.
        config: Parser settings; ``workers`` controls parallel parsing.

    Returns:
        A :class:`BatchResult` with one :class:`ParseResult` per input in
        input order, the dependency map and graph, and summary counts.
    """
    config = config or DEFAULT_CONFIG
    results = _parse_all([_coerce_source(entry, index) for index, entry in enumerate(files)], config)
    analysis = _analyze(results)

    merged: list[ParseResult] = []
    for result, extra in zip(results, analysis.diagnostics):
        if extra:
            diagnostics = report([*result.diagnostics, *extra])
            result = result.model_copy(update={"diagnostics": diagnostics, "valid": count_errors(diagnostics) == 0})
        merged.append(result)

    summary = BatchSummary(
        total_modules=len(merged),
        valid_modules=sum(1 for r in merged if r.valid),
        total_errors=sum(count_errors(r.diagnostics) for r in merged),
    )
    logger.debug(
        "Parsed %d file(s): %d valid, %d error(s)", summary.total_modules, summary.valid_modules, summary.total_errors
    )
    return BatchResult(
        files=merged,
        dependencies=analysis.dependencies,
        graph=analysis.graph,
        summary=summary,
    )


# ################
# Implementation
# ################


class _InvalidSource:
    """A batch entry that could not be read as a YANG source."""

    def __init__(self, name: str, problem: str) -> None:
        self.name = name
        self.problem = problem


def _decode(content: str | bytes) -> str:
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return content


def _parse(content: str | bytes, filename: str, config: ParserConfig, force_fallback: bool) -> ParseResult:
    text = _decode(content)
    if force_fallback:
        logger.debug("Fallback parser requested for %s", filename)
        raw = parse_fallback(text, filename, config.max_depth)
    else:
        raw = parse_statements(tokenize(text, config), filename, config)
        if needs_fallback(raw):
            raw = _recover(raw, text, filename, config)
    return _finish(raw)


def _recover(primary: RawParse, text: str, filename: str, config: ParserConfig) -> RawParse:
    """Run the fallback parser and decide which of the two results to keep."""
    recovered = parse_fallback(text, filename, config.max_depth)
    if not recovered.root_established:
        logger.debug("Fallback parser found no module in %s; keeping the primary result", filename)
        return primary

    logger.warning("No usable module root in %s; using the fallback parser", filename)
    carried = [d for d in primary.diagnostics if d.category is DiagnosticCategory.LEX_ERROR]
    if not any(d.is_error for d in recovered.diagnostics):
        # The file is still broken even if the line-based view looks balanced.
        carried.extend(d for d in primary.diagnostics if d.is_error and d not in carried)
    note = Diagnostic(severity=Severity.INFO, category=DiagnosticCategory.STRUCTURAL_ERROR, message=FALLBACK_NOTE)
    recovered.diagnostics = [*carried, *recovered.diagnostics, note]
    return recovered


def _finish(raw: RawParse) -> ParseResult:
    """Normalize the raw roots and extract their metadata."""
    collector = DiagnosticCollector()
    collector.extend(raw.diagnostics)
    trees: list[Node] = []
    modules: list[ModuleInfo] = []
    metadata: Metadata | None = None
    for root in raw.roots:
        normalized = normalize(root)
        collector.extend(normalized.diagnostics)
        extracted = extract_metadata(normalized.tree, raw.filename)
        collector.extend(extracted.diagnostics)
        trees.append(normalized.tree)
        modules.append(extracted.module)
        if metadata is None:
            metadata = extracted.metadata

    return ParseResult(
        filename=raw.filename,
        valid=not collector.has_errors,
        tree=trees[0] if trees else None,
        modules=modules,
        diagnostics=collector.report(),
        metadata=metadata or empty_metadata(raw.filename),
        parser_used=raw.parser,
    )


def _coerce_source(entry: Mapping[str, Any] | YangSource, index: int) -> YangSource | _InvalidSource:
    if isinstance(entry, YangSource):
        return entry
    fallback_name = f"<file {index}>"
    if not isinstance(entry, Mapping):
        return _InvalidSource(fallback_name, f"expected a mapping with 'name' and 'content', got {type(entry).__name__}")
    name = entry.get("name")
    try:
        return YangSource.model_validate(entry)
    except pydantic.ValidationError as exc:
        label = name if isinstance(name, str) and name else fallback_name
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        return _InvalidSource(label, f"invalid field(s): {fields}")


def _parse_source(source: YangSource | _InvalidSource, config: ParserConfig) -> ParseResult:
    if isinstance(source, _InvalidSource):
        collector = DiagnosticCollector()
        collector.error(DiagnosticCategory.STRUCTURAL_ERROR, f"Invalid batch entry: {source.problem}")
        return ParseResult(
            filename=source.name,
            valid=False,
            diagnostics=collector.report(),
            metadata=empty_metadata(source.name),
        )
    return parse_single(source.content, source.name, config=config)


def _parse_all(sources: list[YangSource | _InvalidSource], config: ParserConfig) -> list[ParseResult]:
    if config.workers == 1 or len(sources) <= 1:
        return [_parse_source(source, config) for source in sources]
    with ThreadPoolExecutor(max_workers=min(config.workers, len(sources))) as pool:
        return list(pool.map(lambda source: _parse_source(source, config), sources))


def _analyze(results: list[ParseResult]) -> DependencyAnalysis:
    collector = DiagnosticCollector()
    with guard(collector, "dependency analysis"):
        return build_dependency_graph([(r.filename, r) for r in results])
    # The failure is reported on every file since none of them was checked.
    return DependencyAnalysis(
        graph=DependencyGraph(),
        dependencies={r.filename: [] for r in results},
        diagnostics=[collector.diagnostics for _ in results],
    )
