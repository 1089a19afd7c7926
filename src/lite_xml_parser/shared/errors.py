"""Exception types for lite XML parsing.

Every syntax failure raised by the state machine is an ``XMLSyntaxError``
subclass whose message is built by ``format_error`` so that diagnostics look
the same regardless of where parsing stopped.
"""

from typing import List, Optional

# Number of characters of source shown before the failure point
CONTEXT_LENGTH = 20


def format_error(message: str, text: str, position: int) -> str:
    """Format a diagnostic with the offset and the text leading up to it.

    Args:
        message: Human readable description of the failure
        text: Full document being parsed
        position: Character offset where parsing stopped

    Returns:
        ``"<message>\\n[<position>] ...<context>"``
    """
    return f"{message}\n[{position}] ...{error_context(text, position)}"


def error_context(text: str, position: int) -> str:
    """Return up to ``CONTEXT_LENGTH`` characters ending at ``position``."""
    return text[max(0, position - CONTEXT_LENGTH):position]


class LiteXMLError(Exception):
    """Base exception for all lite XML parser errors."""


class XMLSyntaxError(LiteXMLError):
    """Fatal syntax error raised while parsing a document.

    Attributes:
        message: Description without position information
        position: Character offset of the failure
        context: Source text immediately preceding ``position``
    """

    def __init__(self, message: str, text: str, position: int) -> None:
        self.message = message
        self.position = position
        self.context = error_context(text, position)
        super().__init__(format_error(message, text, position))


class ExpectedNodeName(XMLSyntaxError):
    """Empty tag name, stray close tag or unknown ``<!...>`` construct."""


class ExpectedAttributeName(XMLSyntaxError):
    """Attribute name is empty."""

    def __init__(self, text: str, position: int) -> None:
        super().__init__("Expected attribute name", text, position)


class DuplicateAttribute(XMLSyntaxError):
    """Attribute appears twice on the same element."""

    def __init__(self, name: str, text: str, position: int) -> None:
        self.name = name
        super().__init__(f"Duplicate attribute [{name}]", text, position)


class ExpectedEquals(XMLSyntaxError):
    """Attribute name not followed by ``=``."""

    def __init__(self, text: str, position: int) -> None:
        super().__init__("Expected '='", text, position)


class ExpectedQuote(XMLSyntaxError):
    """Attribute value does not start with a quote."""

    def __init__(self, text: str, position: int) -> None:
        super().__init__('Expected "', text, position)


class ExpectedTagEnd(XMLSyntaxError):
    """Missing ``>`` after ``/`` or after a close tag name."""

    def __init__(self, text: str, position: int) -> None:
        super().__init__("Expected '>'", text, position)


class InvalidUnescapedChar(XMLSyntaxError):
    """Raw ``<`` or ``>`` inside an attribute value (strict mode)."""

    def __init__(self, char: str, text: str, position: int) -> None:
        self.char = char
        super().__init__(
            f"Invalid unescaped '{char}' in attribute value", text, position
        )


class MismatchedCloseTag(XMLSyntaxError):
    """Close tag does not match the element it closes."""

    def __init__(self, expected_name: str, text: str, position: int) -> None:
        self.expected_name = expected_name
        super().__init__(f"Expected '</{expected_name}>'", text, position)


class UndefinedEntity(XMLSyntaxError):
    """Unknown named entity (strict mode)."""

    def __init__(self, name: str, text: str, position: int) -> None:
        self.name = name
        super().__init__(f"Undefined entity: {name}", text, position)


class InvalidEntityChar(XMLSyntaxError):
    """Non-name character inside an entity reference (strict mode)."""

    def __init__(self, char: str, text: str, position: int) -> None:
        self.char = char
        super().__init__(f"Invalid character in entity: {char}", text, position)


class UnexpectedEndOfInput(XMLSyntaxError):
    """Input ended in a state that needs more characters."""

    def __init__(self, text: str, position: int) -> None:
        super().__init__("Unexpected end", text, position)


class NestingDepthExceeded(XMLSyntaxError):
    """Element nesting went deeper than the configured limit."""

    def __init__(self, max_depth: int, text: str, position: int) -> None:
        self.max_depth = max_depth
        super().__init__(
            f"Maximum nesting depth of {max_depth} exceeded", text, position
        )


class ConfigError(LiteXMLError):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []
