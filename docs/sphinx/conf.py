# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sphinx configuration for the yangtree documentation."""

project = "yangtree"
author = "YangTree Contributors"
release = "0.1.0"

extensions: list[str] = ["sphinx.ext.autodoc", "sphinx.ext.napoleon"]

html_theme = "alabaster"
