# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""JSON export of parse results.

The result structure is written as-is using the camelCase field names of the
result model (``sourceLine``, ``parserUsed``, ...). No envelope or version
field is added, and there is no reader: consumers load the JSON directly.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from yangtree.model.entities import BatchResult, ParseResult

# ###############
# Public Interface
# ###############


def to_dict(result: ParseResult | BatchResult) -> dict[str, Any]:
    """Return the JSON-compatible, camelCase form of a result."""
    return result.model_dump(mode="json", by_alias=True)


def to_json(result: ParseResult | BatchResult, indent: int | None = None) -> str:
    """Serialize a result to JSON; compact unless *indent* is given."""
    if indent is None:
        return json.dumps(to_dict(result), separators=(",", ":"))
    return json.dumps(to_dict(result), indent=indent)


def write_json(result: ParseResult | BatchResult, path: Path) -> None:
    """Write a result as JSON to *path*, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_json(result), encoding="utf-8")
