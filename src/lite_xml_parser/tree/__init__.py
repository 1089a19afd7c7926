"""Document tree for lite XML parsing.

Key Components:
    Document: Ordered top-level node sequence returned by the parser
    Element: Element with ordered attributes and optional children
    Text, CDataSection, Comment, DocType, ProcessingInstruction: Leaf nodes
    NodeType: Tag identifying each node kind
"""

from .nodes import (
    CDataSection,
    CharacterData,
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
    "CDataSection",
    "CharacterData",
    "Comment",
    "Document",
    "DocType",
    "Element",
    "Node",
    "NodeType",
    "ProcessingInstruction",
    "Text",
]
