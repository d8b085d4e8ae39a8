# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Import/include resolution and cycle detection across a batch of files.

Runs after every file of a batch has been parsed. Unresolved references are
not errors: the graph simply marks the edge as ``unresolved``. Problems that
make a reference unusable (ambiguous module names, a wrong include target,
circular imports) are reported as ``DependencyError`` diagnostics on the
files involved, and the full graph is returned regardless.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

from yangtree.model.diagnostics import Diagnostic, DiagnosticCategory
from yangtree.model.entities import DependencyEdge, DependencyGraph, GraphNode, ModuleInfo, ParseResult
from yangtree.validation.reporter import DiagnosticCollector

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


@dataclass
class DependencyAnalysis:
    """The outcome of :func:`build_dependency_graph`.

    Attributes:
        graph: File and module vertices with one edge per import/include.
        dependencies: Filename to the names of the modules it imports,
            followed by the submodules it includes.
        diagnostics: New diagnostics per input file, aligned with the input
            sequence.
        cycles: Every circular import found between modules, as filenames
            with the first one repeated at the end. A file that declares more
            than one module is written as ``file (module)``.
    """

    graph: DependencyGraph
    dependencies: dict[str, list[str]] = field(default_factory=dict)
    diagnostics: list[list[Diagnostic]] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)


def build_dependency_graph(results: Sequence[tuple[str, ParseResult]]) -> DependencyAnalysis:
    """Resolve the imports and includes of a batch of parsed files.

    Args:
        results: ``(filename, ParseResult)`` pairs in batch order.

    Returns:
        A :class:`DependencyAnalysis`. When two files declare the same module
        name, both get an error and references resolve to the first of them.
    """
    return _Resolver(results).run()


# ################
# Implementation
# ################


@dataclass(frozen=True)
class _Declaration:
    index: int
    module: ModuleInfo


class _Resolver:
    def __init__(self, results: Sequence[tuple[str, ParseResult]]) -> None:
        self._results = results
        self._collectors = [DiagnosticCollector() for _ in results]
        self._declared: dict[str, _Declaration] = {}
        self._nodes: list[GraphNode] = []
        self._node_ids: set[str] = set()
        self._edges: list[DependencyEdge] = []
        self._dependencies: dict[str, list[str]] = {}
        # Import graph between module declarations, keyed by (file index, module name).
        self._vertices: dict[tuple[int, str], int] = {}
        self._imports: dict[int, list[int]] = {}
        self._import_edges: dict[tuple[int, int], list[DependencyEdge]] = {}
        self._import_lines: dict[tuple[int, int], int] = {}

    def run(self) -> DependencyAnalysis:
        self._add_file_nodes()
        self._index_modules()
        for index, (_, result) in enumerate(self._results):
            for module in result.modules:
                self._vertex(index, module.name)
        for index, (filename, result) in enumerate(self._results):
            for module in result.modules:
                self._resolve_imports(index, filename, module)
                self._resolve_includes(index, filename, module)
                self._check_belongs_to(index, module)
        cycles = self._report_cycles()
        logger.debug(
            "Resolved %d edge(s) across %d file(s); %d cycle(s)", len(self._edges), len(self._results), len(cycles)
        )
        return DependencyAnalysis(
            graph=DependencyGraph(nodes=self._nodes, edges=self._edges),
            dependencies=self._dependencies,
            diagnostics=[c.diagnostics for c in self._collectors],
            cycles=cycles,
        )

    def _vertex(self, index: int, module_name: str) -> int:
        key = (index, module_name)
        if key not in self._vertices:
            self._vertices[key] = len(self._vertices)
            self._imports[self._vertices[key]] = []
        return self._vertices[key]

    def _label(self, vertex_key: tuple[int, str]) -> str:
        index, module_name = vertex_key
        filename, result = self._results[index]
        return filename if len(result.modules) == 1 else f"{filename} ({module_name})"

    def _add_node(self, node_id: str, kind: Literal["file", "module"]) -> None:
        if node_id not in self._node_ids:
            self._node_ids.add(node_id)
            self._nodes.append(GraphNode(id=node_id, label=node_id, kind=kind))

    def _add_file_nodes(self) -> None:
        for index, (filename, _) in enumerate(self._results):
            if filename in self._node_ids:
                self._collectors[index].warning(
                    DiagnosticCategory.DEPENDENCY_ERROR,
                    f"File name '{filename}' appears more than once in the batch",
                )
            self._add_node(filename, "file")
            self._dependencies.setdefault(filename, [])

    def _index_modules(self) -> None:
        declarations: dict[str, list[_Declaration]] = {}
        for index, (_, result) in enumerate(self._results):
            for module in result.modules:
                if module.name:
                    declarations.setdefault(module.name, []).append(_Declaration(index, module))
        for name, found in declarations.items():
            self._declared[name] = found[0]
            files = list(dict.fromkeys(self._results[d.index][0] for d in found))
            if len(found) < 2:
                continue
            for declaration in found:
                self._collectors[declaration.index].error(
                    DiagnosticCategory.DEPENDENCY_ERROR,
                    f"Module name '{name}' is declared more than once in the batch ({', '.join(files)}); "
                    f"references resolve to {files[0]}",
                    declaration.module.source_line,
                )

    def _add_edge(
        self, filename: str, target: str, edge_type: Literal["import", "include"], resolved: bool
    ) -> DependencyEdge:
        self._add_node(target, "module")
        edge = DependencyEdge(source=filename, target=target, type=edge_type, unresolved=not resolved)
        self._edges.append(edge)
        names = self._dependencies[filename]
        if target not in names:
            names.append(target)
        return edge

    def _resolve_imports(self, index: int, filename: str, module: ModuleInfo) -> None:
        for ref in module.imports:
            target = self._declared.get(ref.module)
            edge = self._add_edge(filename, ref.module, "import", target is not None)
            if target is None:
                continue
            if target.module.kind == "submodule":
                self._collectors[index].error(
                    DiagnosticCategory.DEPENDENCY_ERROR,
                    f"import '{ref.module}' refers to a submodule; only modules can be imported",
                    ref.source_line,
                )
                continue
            pair = (self._vertex(index, module.name), self._vertex(target.index, target.module.name))
            if pair not in self._import_edges:
                self._imports[pair[0]].append(pair[1])
                self._import_lines[pair] = ref.source_line
            self._import_edges.setdefault(pair, []).append(edge)

    def _resolve_includes(self, index: int, filename: str, module: ModuleInfo) -> None:
        owner = module.name if module.kind == "module" else module.belongs_to
        for ref in module.includes:
            target = self._declared.get(ref.submodule)
            self._add_edge(filename, ref.submodule, "include", target is not None)
            if target is None:
                continue
            included = target.module
            if included.kind != "submodule":
                self._collectors[index].error(
                    DiagnosticCategory.DEPENDENCY_ERROR,
                    f"include '{ref.submodule}' refers to a module; only submodules can be included",
                    ref.source_line,
                )
            elif included.belongs_to != owner:
                self._collectors[index].error(
                    DiagnosticCategory.DEPENDENCY_ERROR,
                    f"submodule '{ref.submodule}' belongs to '{included.belongs_to}', not to '{owner}'",
                    ref.source_line,
                )

    def _check_belongs_to(self, index: int, module: ModuleInfo) -> None:
        if module.kind != "submodule" or module.belongs_to is None:
            return
        if module.belongs_to not in self._declared:
            self._collectors[index].warning(
                DiagnosticCategory.DEPENDENCY_ERROR,
                f"Module '{module.belongs_to}' that submodule '{module.name}' belongs to is not part of the batch",
                module.source_line,
            )

    def _report_cycles(self) -> list[list[str]]:
        cycles: list[list[str]] = []
        keys = list(self._vertices)
        for cycle in _find_cycles(self._imports):
            names = [self._label(keys[v]) for v in cycle]
            message = f"Circular import: {' -> '.join(names)}"
            for source, target in zip(cycle, cycle[1:]):
                self._collectors[keys[source][0]].error(
                    DiagnosticCategory.DEPENDENCY_ERROR, message, self._import_lines[(source, target)]
                )
                for edge in self._import_edges[(source, target)]:
                    edge.in_cycle = True
            cycles.append(names)
        return cycles


def _canonical(cycle: list[int]) -> tuple[int, ...]:
    """Rotate a cycle so that it starts at its smallest member."""
    start = cycle.index(min(cycle))
    return tuple(cycle[start:] + cycle[:start])


def _find_cycles(graph: dict[int, list[int]]) -> list[list[int]]:
    """Find the cycles of a directed graph using DFS.

    Uses a three-colour marking scheme (white/grey/black) to distinguish
    unvisited, in-progress, and fully-explored nodes. Every back edge closes
    one cycle; cycles that are rotations of each other are reported once.
    The search is iterative so long import chains cannot exhaust the stack.

    Args:
        graph: Adjacency list mapping each node to its direct neighbours.

    Returns:
        Cycles as node lists with the start node repeated at the end
        (e.g. ``[0, 1, 0]``), in discovery order.
    """
    white, grey, black = 0, 1, 2
    color: dict[int, int] = {}
    seen: set[tuple[int, ...]] = set()
    cycles: list[list[int]] = []

    for start in graph:
        if color.get(start, white) != white:
            continue
        color[start] = grey
        path = [start]
        pending = [iter(graph.get(start, []))]
        while pending:
            neighbor = next(pending[-1], None)
            if neighbor is None:
                color[path.pop()] = black
                pending.pop()
                continue
            state = color.get(neighbor, white)
            if state == grey:
                cycle = path[path.index(neighbor) :]
                key = _canonical(cycle)
                if key not in seen:
                    seen.add(key)
                    cycles.append(cycle + [neighbor])
            elif state == white:
                color[neighbor] = grey
                path.append(neighbor)
                pending.append(iter(graph.get(neighbor, [])))
    return cycles
