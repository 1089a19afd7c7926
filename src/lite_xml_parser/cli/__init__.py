"""Command-line interface module for Lite XML Parser.

This module provides the ``lite-xml`` tool for parsing batches of files and
dumping document trees.
"""

from .main import main

__all__ = ["main"]
