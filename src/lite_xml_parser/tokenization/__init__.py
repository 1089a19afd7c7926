"""Scanning layer for lite XML parsing.

This module contains the character-level state machine that turns document
text into a node tree, and the entity decoder it uses for text and attribute
values.

Key Components:
    XMLStateMachine: Single-pass parser driven by an explicit frame stack
    ParserState: States of the scanning automaton
    parse_document: Convenience wrapper creating a machine per call
    decode_entity: Entity reference decoding with strict/lenient policy
"""

from .entities import (
    PREDEFINED_ENTITIES,
    decode_entity,
    decode_numeric_reference,
    resolve_entity,
)
from .state_machine import ParseFrame, ParserState, XMLStateMachine, parse_document

__all__ = [
    "PREDEFINED_ENTITIES",
    "decode_entity",
    "decode_numeric_reference",
    "resolve_entity",
    "ParseFrame",
    "ParserState",
    "XMLStateMachine",
    "parse_document",
]
