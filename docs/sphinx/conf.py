# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sphinx configuration for the ffigen documentation."""

project = "ffigen"
author = "ffigen Contributors"
release = "0.1.0"

# Docstrings follow the Google style.
extensions: list[str] = ["sphinx.ext.autodoc", "sphinx.ext.napoleon"]
autodoc_member_order = "bysource"
napoleon_google_docstring = True
napoleon_numpy_docstring = False

html_theme = "alabaster"
