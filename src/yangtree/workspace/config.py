# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parser configuration and its YAML loader."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

import yaml

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = ".yangtree.yaml"

DEFAULT_KEYWORDS: frozenset[str] = frozenset(
    {
        # Roots and header
        "module",
        "submodule",
        "namespace",
        "prefix",
        "yang-version",
        "belongs-to",
        "import",
        "include",
        "revision",
        "revision-date",
        "organization",
        "contact",
        # Schema nodes
        "container",
        "list",
        "leaf",
        "leaf-list",
        "choice",
        "case",
        "grouping",
        "typedef",
        "uses",
        "augment",
        "rpc",
        "action",
        "notification",
        "input",
        "output",
        "anydata",
        "anyxml",
        # Node properties
        "type",
        "default",
        "units",
        "description",
        "reference",
        "mandatory",
        "config",
        "status",
        "key",
        "must",
        "when",
        "if-feature",
        # Type restrictions
        "range",
        "length",
        "pattern",
        "path",
        "base",
        "enum",
    }
)


class ConfigError(Exception):
    """Raised when a configuration file is invalid or cannot be loaded."""


@dataclass(frozen=True)
class ParserConfig:
    """Immutable settings passed into every parse call.

    Attributes:
        max_depth: Maximum block nesting depth before tokenization is aborted.
        max_statements: Maximum number of statements per file.
        workers: Number of threads used to parse the files of a batch.
        supported_keywords: Keywords handled by the primary parser; any other
            keyword becomes a generic node.
    """

    max_depth: int = 64
    max_statements: int = 100_000
    workers: int = 4
    supported_keywords: frozenset[str] = field(default=DEFAULT_KEYWORDS)


DEFAULT_CONFIG = ParserConfig()


def load_parser_config(path: Path) -> ParserConfig:
    """Load a parser configuration file.

    Args:
        path: Path to a `.yangtree.yaml` file.

    Returns:
        A ParserConfig with every key not present in the file left at its default.

    Raises:
        ConfigError: If the file cannot be read or the configuration is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read config file: {exc}") from exc

    return _parse_parser_config(text, source_label=str(path))


# ################
# Implementation
# ################


def _parse_parser_config(text: str, source_label: str = "<string>") -> ParserConfig:
    """Parse config YAML text into a ParserConfig.

    An empty document yields the defaults.

    Raises:
        ConfigError: If the YAML is invalid or a field has the wrong type.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if data is None:
        return DEFAULT_CONFIG
    if not isinstance(data, dict):
        raise ConfigError(f"{source_label}: config must be a YAML mapping")

    unknown = sorted(set(data) - {"max-depth", "max-statements", "workers", "keywords"})
    if unknown:
        raise ConfigError(f"{source_label}: unknown field(s): {', '.join(unknown)}")

    config = DEFAULT_CONFIG
    if "max-depth" in data:
        config = replace(config, max_depth=_require_positive_int(data, "max-depth", source_label))
    if "max-statements" in data:
        config = replace(config, max_statements=_require_positive_int(data, "max-statements", source_label))
    if "workers" in data:
        config = replace(config, workers=_require_positive_int(data, "workers", source_label))
    if "keywords" in data:
        config = replace(config, supported_keywords=_parse_keywords(data["keywords"], source_label))
    return config


def _require_positive_int(mapping: dict[str, object], key: str, source_label: str) -> int:
    """Extract a positive integer field, raising ConfigError otherwise."""
    value = mapping[key]
    # bool is a subclass of int
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ConfigError(f"{source_label}: '{key}' must be a positive integer")
    return value


def _parse_keywords(raw: object, source_label: str) -> frozenset[str]:
    """Parse the 'keywords' list, which may only name built-in keywords."""
    if not isinstance(raw, list) or not all(isinstance(k, str) for k in raw):
        raise ConfigError(f"{source_label}: 'keywords' must be a list of strings")
    unsupported = sorted(set(raw) - DEFAULT_KEYWORDS)
    if unsupported:
        raise ConfigError(f"{source_label}: unsupported keyword(s): {', '.join(unsupported)}")
    # The root keywords cannot be disabled.
    return frozenset(raw) | {"module", "submodule"}
