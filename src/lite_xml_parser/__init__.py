"""Lite XML Parser.

A small, single-pass, non-validating XML parser that turns an in-memory text
document into a tree of typed nodes, for tools that need XML ingestion
without a full DOM/SAX stack.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_file()
- Level 2: Configured parser - XMLParser class with ParserConfig
"""

__version__ = "0.1.0"
__author__ = "Lite XML Parser Team"

from .api import XMLParser, parse, parse_file
from .shared.config import ParserConfig
from .shared.errors import (
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
)
from .tree import (
    CDataSection,
    Comment,
    Document,
    DocType,
    Element,
    Node,
    NodeType,
    ProcessingInstruction,
    Text,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "parse_file",

    # Level 2: Configured parser
    "XMLParser",
    "ParserConfig",

    # Tree
    "CDataSection",
    "Comment",
    "Document",
    "DocType",
    "Element",
    "Node",
    "NodeType",
    "ProcessingInstruction",
    "Text",

    # Errors
    "LiteXMLError",
    "XMLSyntaxError",
    "DuplicateAttribute",
    "ExpectedAttributeName",
    "ExpectedEquals",
    "ExpectedNodeName",
    "ExpectedQuote",
    "ExpectedTagEnd",
    "InvalidEntityChar",
    "InvalidUnescapedChar",
    "MismatchedCloseTag",
    "NestingDepthExceeded",
    "UndefinedEntity",
    "UnexpectedEndOfInput",
]
