# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parser configuration (limits, worker count, supported keywords)."""

from yangtree.workspace.config import (
    CONFIG_FILE_NAME,
    DEFAULT_CONFIG,
    DEFAULT_KEYWORDS,
    ConfigError,
    ParserConfig,
    load_parser_config,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_CONFIG",
    "DEFAULT_KEYWORDS",
    "ConfigError",
    "ParserConfig",
    "load_parser_config",
]
