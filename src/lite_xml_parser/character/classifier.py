"""Character classes used to delimit XML names.

Only an ASCII identifier set is accepted for tag, attribute and close-tag
names: letters, digits and ``: . _ -``.
"""

import string

NAME_CHARS: frozenset = frozenset(string.ascii_letters + string.digits + ":._-")

# Skipped by the IGNORE_SPACES state
WHITESPACE: frozenset = frozenset("\n\r\t ")


def is_name_char(char: str) -> bool:
    """Check whether ``char`` may appear in a tag or attribute name."""
    return char in NAME_CHARS


def is_whitespace(char: str) -> bool:
    """Check whether ``char`` is skippable whitespace between tokens."""
    return char in WHITESPACE
