# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Extraction of module header information from a normalized tree."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from yangtree.model.diagnostics import Diagnostic, DiagnosticCategory
from yangtree.model.entities import ImportRef, IncludeRef, Metadata, ModuleInfo, Node, Revision
from yangtree.validation.reporter import DiagnosticCollector

# ###############
# Public Interface
# ###############


@dataclass
class MetadataResult:
    """File metadata, the root's module summary, and extraction diagnostics."""

    metadata: Metadata
    module: ModuleInfo
    diagnostics: list[Diagnostic] = field(default_factory=list)


def extract_metadata(root: Node, filename: str) -> MetadataResult:
    """Summarize the header statements of a module or submodule.

    The header is read in one pass. For statements that may appear only once
    (namespace, prefix, yang-version, organization, contact, belongs-to) a
    repeated declaration raises a warning and the last value wins.

    Args:
        root: A normalized ``module`` or ``submodule`` node.
        filename: The file identifier stored in the metadata.

    Returns:
        The extracted :class:`MetadataResult`. Revisions are ordered newest
        first.
    """
    diagnostics = DiagnosticCollector()
    singles: dict[str, Node] = {}
    imports: list[ImportRef] = []
    includes: list[IncludeRef] = []
    revisions: list[Revision] = []

    for statement in root.header:
        keyword = statement.type
        if keyword in _SINGLE_STATEMENTS:
            if keyword in singles:
                diagnostics.warning(
                    DiagnosticCategory.SEMANTIC_WARNING,
                    f"Duplicate '{keyword}' statement in {root.type} '{root.name}'; the last value is used",
                    statement.source_line,
                )
            singles[keyword] = statement
        elif keyword == "import":
            ref = _import_ref(statement, diagnostics)
            if ref is not None:
                imports.append(ref)
        elif keyword == "include":
            if not statement.name:
                diagnostics.warning(
                    DiagnosticCategory.SEMANTIC_WARNING, "'include' without a submodule name", statement.source_line
                )
                continue
            includes.append(
                IncludeRef(
                    submodule=statement.name,
                    revision_date=statement.properties.revision_date,
                    source_line=statement.source_line,
                )
            )
        elif keyword == "revision":
            if not _REVISION_DATE_RE.fullmatch(statement.name):
                diagnostics.info(
                    DiagnosticCategory.SEMANTIC_WARNING,
                    f"Revision date '{statement.name}' is not in YYYY-MM-DD format",
                    statement.source_line,
                )
            revisions.append(Revision(date=statement.name, description=statement.description))

    _check_required(root, singles, diagnostics)

    namespace = _value(singles, "namespace")
    prefix = _value(singles, "prefix")
    belongs_to = _value(singles, "belongs-to")
    if root.type == "submodule":
        if namespace is not None:
            diagnostics.warning(
                DiagnosticCategory.SEMANTIC_WARNING,
                f"submodule '{root.name}' declares a namespace; submodules use their module's namespace",
                singles["namespace"].source_line,
            )
            namespace = None
        if "belongs-to" in singles:
            prefix = singles["belongs-to"].properties.prefix
    elif belongs_to is not None:
        diagnostics.warning(
            DiagnosticCategory.SEMANTIC_WARNING,
            f"module '{root.name}' declares 'belongs-to'; ignored",
            singles["belongs-to"].source_line,
        )
        belongs_to = None

    # Stable on equal dates; the source order of duplicates is kept.
    revisions.sort(key=lambda r: r.date, reverse=True)

    module = ModuleInfo(
        kind=root.type,
        name=root.name,
        namespace=namespace,
        prefix=prefix,
        belongs_to=belongs_to,
        revisions=revisions,
        imports=imports,
        includes=includes,
        source_line=root.source_line,
    )
    metadata = Metadata(
        filename=filename,
        module=root.name,
        namespace=namespace,
        prefix=prefix,
        belongs_to=belongs_to,
        yang_version=_value(singles, "yang-version"),
        organization=_value(singles, "organization"),
        contact=_value(singles, "contact"),
        imports=list(imports),
        includes=list(includes),
        revisions=list(revisions),
    )
    return MetadataResult(metadata=metadata, module=module, diagnostics=diagnostics.diagnostics)


def empty_metadata(filename: str) -> Metadata:
    """Metadata for a file in which no module could be recovered."""
    return Metadata(filename=filename)


# ################
# Implementation
# ################

_SINGLE_STATEMENTS = frozenset({"namespace", "prefix", "yang-version", "organization", "contact", "belongs-to"})
_REVISION_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def _value(singles: dict[str, Node], keyword: str) -> str | None:
    statement = singles.get(keyword)
    if statement is None:
        return None
    return statement.name


def _import_ref(statement: Node, diagnostics: DiagnosticCollector) -> ImportRef | None:
    if not statement.name:
        diagnostics.warning(
            DiagnosticCategory.SEMANTIC_WARNING, "'import' without a module name", statement.source_line
        )
        return None
    if statement.properties.prefix is None:
        diagnostics.warning(
            DiagnosticCategory.SEMANTIC_WARNING,
            f"import '{statement.name}' is missing the required 'prefix' statement",
            statement.source_line,
        )
    return ImportRef(
        module=statement.name,
        prefix=statement.properties.prefix,
        revision_date=statement.properties.revision_date,
        source_line=statement.source_line,
    )


def _check_required(root: Node, singles: dict[str, Node], diagnostics: DiagnosticCollector) -> None:
    required = ("namespace", "prefix") if root.type == "module" else ("belongs-to",)
    for keyword in required:
        if keyword not in singles:
            diagnostics.warning(
                DiagnosticCategory.SEMANTIC_WARNING,
                f"{root.type} '{root.name}' is missing the required '{keyword}' statement",
                root.source_line,
            )
