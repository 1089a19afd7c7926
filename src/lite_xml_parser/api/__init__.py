"""Public API for lite XML parsing.

Level 1: ``parse`` and ``parse_file``
Level 2: ``XMLParser`` configured with a ``ParserConfig``
"""

from .parser import XMLParser, parse, parse_file

__all__ = [
    "XMLParser",
    "parse",
    "parse_file",
]
