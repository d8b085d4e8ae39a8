# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parse pipeline for YANG files: parsing, recovery, normalization, and metadata."""

from yangtree.compiler.build import parse_multiple, parse_single
from yangtree.compiler.export import to_dict, to_json, write_json
from yangtree.compiler.fallback import parse_fallback
from yangtree.compiler.metadata import MetadataResult, extract_metadata
from yangtree.compiler.normalizer import NormalizedTree, normalize
from yangtree.compiler.parser import StatementKind, parse_statements
from yangtree.compiler.raw import RawNode, RawParse, needs_fallback

__all__ = [
    "parse_single",
    "parse_multiple",
    "parse_statements",
    "StatementKind",
    "parse_fallback",
    "needs_fallback",
    "RawNode",
    "RawParse",
    "normalize",
    "NormalizedTree",
    "extract_metadata",
    "MetadataResult",
    "to_dict",
    "to_json",
    "write_json",
]
