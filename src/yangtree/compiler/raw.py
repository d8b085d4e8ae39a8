# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Intermediate statement tree shared by the primary and fallback parsers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from yangtree.model.diagnostics import Diagnostic
from yangtree.model.entities import ParserName

# ###############
# Public Interface
# ###############


@dataclass
class RawNode:
    """A parsed statement before normalization.

    ``properties`` uses the attribute names of
    :class:`~yangtree.model.entities.NodeProperties`. ``mandatory`` and
    ``config`` hold what the source said, without defaults or inheritance.
    """

    keyword: str
    argument: str | None
    line: int
    description: str | None = None
    mandatory: bool | None = None
    config: bool | None = None
    properties: dict[str, Any] = field(default_factory=dict)
    children: list[RawNode] = field(default_factory=list)
    header: list[RawNode] = field(default_factory=list)

    def header_statements(self, keyword: str) -> list[RawNode]:
        return [h for h in self.header if h.keyword == keyword]


@dataclass
class RawParse:
    """What a parser produced for one file.

    Attributes:
        filename: The file identifier the caller supplied.
        roots: Top-level module/submodule statements in source order.
        diagnostics: Diagnostics of the tokenizer and the parser.
        root_established: True if a root statement was found and is usable.
        fatal: True if a resource limit aborted processing of the file.
        parser: Which parser produced this result.
    """

    filename: str
    roots: list[RawNode] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    root_established: bool = False
    fatal: bool = False
    parser: ParserName = "primary"


def needs_fallback(raw: RawParse) -> bool:
    """Decide whether the fallback parser should run after the primary parser.

    The fallback runs when no usable root was established, unless a resource
    limit aborted the file.
    """
    return not raw.root_established and not raw.fatal
