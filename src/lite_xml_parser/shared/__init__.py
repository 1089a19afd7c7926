"""Shared utilities for lite XML parsing.

This module provides the error hierarchy, configuration objects and logging
helpers used across the character, tokenization, tree and API layers.
"""

from .config import ParserConfig
from .errors import (
    ConfigError,
    ConfigValidationError,
    DuplicateAttribute,
    ExpectedAttributeName,
    ExpectedEquals,
    ExpectedNodeName,
    ExpectedQuote,
    ExpectedTagEnd,
    InvalidEntityChar,
    InvalidUnescapedChar,
    LiteXMLError,
    MismatchedCloseTag,
    NestingDepthExceeded,
    UndefinedEntity,
    UnexpectedEndOfInput,
    XMLSyntaxError,
    format_error,
)
from .logging import CorrelationLogger, configure_logging, get_logger

__all__ = [
    "ParserConfig",
    "ConfigError",
    "ConfigValidationError",
    "DuplicateAttribute",
    "ExpectedAttributeName",
    "ExpectedEquals",
    "ExpectedNodeName",
    "ExpectedQuote",
    "ExpectedTagEnd",
    "InvalidEntityChar",
    "InvalidUnescapedChar",
    "LiteXMLError",
    "MismatchedCloseTag",
    "NestingDepthExceeded",
    "UndefinedEntity",
    "UnexpectedEndOfInput",
    "XMLSyntaxError",
    "format_error",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
]
