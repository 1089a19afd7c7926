"""Entity reference decoding.

Supports the five predefined XML entities and numeric character references
(``&#65;`` and ``&#x41;``). Entity redefinition through a DTD is not
supported.
"""

import string
from types import MappingProxyType
from typing import Mapping, Optional

from lite_xml_parser.shared.errors import UndefinedEntity

PREDEFINED_ENTITIES: Mapping[str, str] = MappingProxyType({
    "lt": "<",
    "gt": ">",
    "amp": "&",
    "quot": '"',
    "apos": "'",
})

MAX_CODE_POINT = 0x10FFFF

# UTF-16 surrogate halves are not characters and cannot be encoded
SURROGATES = range(0xD800, 0xE000)


def decode_numeric_reference(body: str) -> Optional[str]:
    """Decode the body of a numeric character reference.

    Args:
        body: Reference text between ``&`` and ``;``, starting with ``#``

    Returns:
        The referenced character, or None if the number is malformed, outside
        the Unicode range or a surrogate code point
    """
    digits = body[1:]
    allowed = string.digits
    base = 10
    if digits.startswith("x"):
        digits = digits[1:]
        allowed = string.hexdigits
        base = 16
    # int() would otherwise accept signs, underscores and non-ASCII digits
    if not digits or any(char not in allowed for char in digits):
        return None
    code_point = int(digits, base)
    if code_point > MAX_CODE_POINT or code_point in SURROGATES:
        return None
    return chr(code_point)


def resolve_entity(body: str) -> Optional[str]:
    """Resolve an entity body to its replacement text, or None if unknown."""
    if body.startswith("#"):
        return decode_numeric_reference(body)
    return PREDEFINED_ENTITIES.get(body)


def decode_entity(
    body: str,
    strict: bool = False,
    *,
    source: str = "",
    position: int = 0
) -> str:
    """Decode an entity reference body under the strict/lenient policy.

    Args:
        body: Reference text between ``&`` and ``;``
        strict: Raise on unknown references instead of keeping them
        source: Document text, used for the error context
        position: Offset of the terminating ``;``, used for the error context

    Returns:
        Replacement text; in lenient mode an unknown reference is returned
        literally as ``&body;``

    Raises:
        UndefinedEntity: Unknown reference in strict mode
    """
    replacement = resolve_entity(body)
    if replacement is not None:
        return replacement
    if strict:
        raise UndefinedEntity(body, source, position)
    return f"&{body};"
