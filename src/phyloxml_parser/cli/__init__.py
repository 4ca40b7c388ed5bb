"""Command-line interface module for phyloxml-parser.

This module provides the ``phyloxml`` tool for batch parsing and validation
of phyloXML files.
"""

from .main import main

__all__ = ["main"]
