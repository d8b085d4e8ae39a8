# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the metadata extractor."""

from yangtree.compiler.metadata import MetadataResult, extract_metadata
from yangtree.compiler.normalizer import normalize
from yangtree.compiler.parser import parse
from yangtree.model.diagnostics import Severity

# ###############
# Test Helpers
# ###############


def _extract(source: str, filename: str = "test.yang") -> MetadataResult:
    raw = parse(source)
    return extract_metadata(normalize(raw.roots[0]).tree, filename)


def _messages(result: MetadataResult, severity: Severity) -> list[str]:
    return [d.message for d in result.diagnostics if d.severity == severity]


FULL_MODULE = """\
module full {
  yang-version 1.1;
  namespace "urn:full";
  prefix f;
  import ietf-inet-types { prefix inet; revision-date 2013-07-15; }
  import other { prefix o; }
  include full-sub;
  organization "ACME";
  contact "ops@acme.example";
  revision 2020-01-01 { description "old"; }
  revision 2022-06-30 { description "new"; }
}
"""


# ###############
# Extraction
# ###############


class TestExtraction:
    def test_full_header(self) -> None:
        result = _extract(FULL_MODULE, "full.yang")
        meta = result.metadata
        assert meta.filename == "full.yang"
        assert meta.module == "full"
        assert meta.namespace == "urn:full"
        assert meta.prefix == "f"
        assert meta.yang_version == "1.1"
        assert meta.organization == "ACME"
        assert meta.contact == "ops@acme.example"
        assert [(i.module, i.prefix, i.revision_date) for i in meta.imports] == [
            ("ietf-inet-types", "inet", "2013-07-15"),
            ("other", "o", None),
        ]
        assert meta.imports[0].source_line == 5
        assert [i.submodule for i in meta.includes] == ["full-sub"]
        assert result.diagnostics == []

    def test_revisions_are_newest_first(self) -> None:
        revisions = _extract(FULL_MODULE).metadata.revisions
        assert [(r.date, r.description) for r in revisions] == [("2022-06-30", "new"), ("2020-01-01", "old")]

    def test_module_info(self) -> None:
        module = _extract(FULL_MODULE).module
        assert module.kind == "module"
        assert module.name == "full"
        assert module.belongs_to is None
        assert module.source_line == 1
        assert [i.module for i in module.imports] == ["ietf-inet-types", "other"]

    def test_submodule_takes_prefix_from_belongs_to(self) -> None:
        result = _extract("submodule s { belongs-to m { prefix mm; } }")
        assert result.module.kind == "submodule"
        assert result.module.belongs_to == "m"
        assert result.metadata.prefix == "mm"
        assert result.metadata.namespace is None
        assert result.diagnostics == []


# ###############
# Diagnostics
# ###############


class TestDiagnostics:
    def test_duplicate_namespace_last_wins(self) -> None:
        result = _extract('module m { namespace "urn:first"; namespace "urn:second"; prefix m; }')
        assert result.metadata.namespace == "urn:second"
        assert any("Duplicate 'namespace'" in m for m in _messages(result, Severity.WARNING))

    def test_missing_namespace_and_prefix(self) -> None:
        result = _extract("module m { }")
        warnings = _messages(result, Severity.WARNING)
        assert any("missing the required 'namespace'" in m for m in warnings)
        assert any("missing the required 'prefix'" in m for m in warnings)

    def test_submodule_without_belongs_to(self) -> None:
        result = _extract("submodule s { }")
        assert any("missing the required 'belongs-to'" in m for m in _messages(result, Severity.WARNING))

    def test_submodule_namespace_is_ignored(self) -> None:
        result = _extract('submodule s { belongs-to m { prefix m; } namespace "urn:s"; }')
        assert result.metadata.namespace is None
        assert any("declares a namespace" in m for m in _messages(result, Severity.WARNING))

    def test_import_without_prefix(self) -> None:
        result = _extract('module m { namespace "urn:m"; prefix m; import t; }')
        assert result.metadata.imports[0].prefix is None
        assert any("import 't' is missing the required 'prefix'" in m for m in _messages(result, Severity.WARNING))

    def test_malformed_revision_date_is_an_info(self) -> None:
        result = _extract('module m { namespace "urn:m"; prefix m; revision 2020-1-1; }')
        assert result.metadata.revisions[0].date == "2020-1-1"
        assert _messages(result, Severity.INFO) == ["Revision date '2020-1-1' is not in YYYY-MM-DD format"]
        assert _messages(result, Severity.WARNING) == []
