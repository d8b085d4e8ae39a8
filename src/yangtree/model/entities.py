# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Schema tree, module summaries, and parse results."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Literal

from pydantic import Field as _Field

from yangtree.model.base import YangModel
from yangtree.model.diagnostics import Diagnostic

# ###############
# Public Interface
# ###############

ParserName = Literal["primary", "fallback"]

# Node types on which `config` carries meaning.
CONFIG_NODE_TYPES: frozenset[str] = frozenset(
    {"container", "list", "leaf", "leaf-list", "choice", "anydata", "anyxml"}
)

# Node types on which `mandatory` carries meaning.
MANDATORY_NODE_TYPES: frozenset[str] = frozenset({"leaf", "choice", "anydata", "anyxml"})

DATA_NODE_TYPES: frozenset[str] = CONFIG_NODE_TYPES | MANDATORY_NODE_TYPES


class NodeProperties(YangModel):
    """The properties bag of a schema node. Every entry is optional."""

    type: str | None = None
    default: str | None = None
    units: str | None = None
    status: str | None = None
    range: str | None = None
    length: str | None = None
    pattern: str | None = None
    key: str | None = None
    path: str | None = None
    base: str | None = None
    enums: list[str] = _Field(default_factory=list)
    when: str | None = None
    must: list[str] = _Field(default_factory=list)
    reference: str | None = None
    if_features: list[str] = _Field(default_factory=list)
    prefix: str | None = None
    revision_date: str | None = None


class Node(YangModel):
    """A generic schema node tagged by its YANG keyword.

    Children keep source order. Root nodes (module/submodule) additionally
    keep their header statements (namespace, prefix, import, revision, ...)
    in ``header`` so that the schema ``children`` stay free of them.
    """

    type: str = _Field(min_length=1)
    name: str = ""
    description: str | None = None
    mandatory: bool | None = None
    config: bool | None = None
    properties: NodeProperties = _Field(default_factory=NodeProperties)
    source_line: int = 0
    children: list[Node] = _Field(default_factory=list)
    header: list[Node] = _Field(default_factory=list)

    def iter_nodes(self) -> Iterator[Node]:
        """Yield this node and every descendant in document order."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()


class Revision(YangModel):
    """A ``revision`` statement."""

    date: str
    description: str | None = None


class ImportRef(YangModel):
    """An ``import`` statement: the imported module and its local prefix."""

    module: str
    prefix: str | None = None
    revision_date: str | None = None
    source_line: int = 0


class IncludeRef(YangModel):
    """An ``include`` statement naming a submodule."""

    submodule: str
    revision_date: str | None = None
    source_line: int = 0


class ModuleInfo(YangModel):
    """Summary of one top-level module or submodule."""

    kind: Literal["module", "submodule"]
    name: str
    namespace: str | None = None
    prefix: str | None = None
    belongs_to: str | None = None
    revisions: list[Revision] = _Field(default_factory=list)
    imports: list[ImportRef] = _Field(default_factory=list)
    includes: list[IncludeRef] = _Field(default_factory=list)
    source_line: int = 0


class Metadata(YangModel):
    """File-level summary of the first module declared in a file."""

    filename: str
    module: str | None = None
    namespace: str | None = None
    prefix: str | None = None
    belongs_to: str | None = None
    yang_version: str | None = None
    organization: str | None = None
    contact: str | None = None
    imports: list[ImportRef] = _Field(default_factory=list)
    includes: list[IncludeRef] = _Field(default_factory=list)
    revisions: list[Revision] = _Field(default_factory=list)


class ParseResult(YangModel):
    """Everything known about one parsed file."""

    filename: str
    valid: bool
    tree: Node | None = None
    modules: list[ModuleInfo] = _Field(default_factory=list)
    diagnostics: list[Diagnostic] = _Field(default_factory=list)
    metadata: Metadata
    parser_used: ParserName = "primary"

    @property
    def errors(self) -> list[Diagnostic]:
        """Return only the error-severity diagnostics."""
        return [d for d in self.diagnostics if d.is_error]


class YangSource(YangModel):
    """One input file of a batch request."""

    name: str
    content: str


class GraphNode(YangModel):
    """A vertex of the dependency graph: a submitted file or a module name."""

    id: str
    label: str
    kind: Literal["file", "module"] = "file"


class DependencyEdge(YangModel):
    """A directed import/include relation from a file to a module name."""

    source: str
    target: str
    type: Literal["import", "include"]
    unresolved: bool = False
    in_cycle: bool = False


class DependencyGraph(YangModel):
    """Nodes and edges of a batch's dependency graph."""

    nodes: list[GraphNode] = _Field(default_factory=list)
    edges: list[DependencyEdge] = _Field(default_factory=list)


class BatchSummary(YangModel):
    """At-a-glance counts for a batch request."""

    total_modules: int = 0
    valid_modules: int = 0
    total_errors: int = 0


class BatchResult(YangModel):
    """The result of parsing a batch of files together."""

    files: list[ParseResult] = _Field(default_factory=list)
    dependencies: dict[str, list[str]] = _Field(default_factory=dict)
    graph: DependencyGraph = _Field(default_factory=DependencyGraph)
    summary: BatchSummary = _Field(default_factory=BatchSummary)


# Resolve forward references in self-referential models.
Node.model_rebuild()
