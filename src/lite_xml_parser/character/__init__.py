"""Character classification for lite XML parsing.

Key Components:
    is_name_char: ASCII name-character test used to delimit names
    is_whitespace: Whitespace test used between tokens
"""

from .classifier import NAME_CHARS, WHITESPACE, is_name_char, is_whitespace

__all__ = [
    "NAME_CHARS",
    "WHITESPACE",
    "is_name_char",
    "is_whitespace",
]
