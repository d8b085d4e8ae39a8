# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Statement tokenizer for YANG files."""

from yangtree.parser.lexer import Token, TokenStream, tokenize

__all__ = [
    "Token",
    "TokenStream",
    "tokenize",
]
