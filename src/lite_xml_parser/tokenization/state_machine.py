"""Single-pass XML state machine.

The machine scans the input one character at a time and builds the document
tree as it goes. Element nesting is tracked with an explicit stack of
``ParseFrame`` objects instead of native recursion, so very deep documents
are limited by heap memory (or by ``max_depth``) rather than by the
interpreter's recursion limit.

Handlers return ``True`` to consume the current character and ``False`` to
hand the same character to the next state.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, List, Optional

from lite_xml_parser.character import is_name_char, is_whitespace
from lite_xml_parser.shared.errors import (
    DuplicateAttribute,
    ExpectedAttributeName,
    ExpectedEquals,
    ExpectedNodeName,
    ExpectedQuote,
    ExpectedTagEnd,
    InvalidEntityChar,
    InvalidUnescapedChar,
    MismatchedCloseTag,
    NestingDepthExceeded,
    UnexpectedEndOfInput,
    XMLSyntaxError,
)
from lite_xml_parser.tree import (
    CDataSection,
    Comment,
    Document,
    DocType,
    Element,
    Node,
    ProcessingInstruction,
    Text,
)

from .entities import decode_entity

MS_PER_SECOND = 1000

logger = logging.getLogger(__name__)


class ParserState(Enum):
    """States of the XML scanning automaton."""

    IGNORE_SPACES = auto()  # Skip whitespace, then switch to next_state
    BEGIN = auto()          # Start of a content run
    BEGIN_NODE = auto()     # Just after '<'
    TAG_NAME = auto()       # Reading an element name
    BODY = auto()           # Inside a start tag, between attributes
    ATTRIB_NAME = auto()    # Reading an attribute name
    EQUALS = auto()         # Expecting '='
    ATTVAL_BEGIN = auto()   # Expecting an opening quote
    ATTRIB_VAL = auto()     # Inside a quoted attribute value
    CHILDREN = auto()       # Element content is being parsed by a nested frame
    CLOSE = auto()          # Reading a close tag name
    WAIT_END = auto()       # Expecting '>' after '/'
    WAIT_END_RET = auto()   # Expecting '>' that ends the current frame
    PCDATA = auto()         # Character data
    HEADER = auto()         # Processing instruction
    COMMENT = auto()        # Comment
    DOCTYPE = auto()        # DOCTYPE declaration
    CDATA = auto()          # CDATA section
    ESCAPE = auto()         # Entity reference


@dataclass
class ParseFrame:
    """Scan state for one run of sibling content.

    The base frame collects top-level nodes (``parent`` is None) or the
    content of the element passed to ``parse_node``. Every element with a body
    gets its own frame, which is discarded once its close tag is consumed.
    """

    parent: Optional[Element]
    start: int = 0
    state: ParserState = ParserState.BEGIN
    next_state: ParserState = ParserState.BEGIN
    escape_next: ParserState = ParserState.BEGIN
    buffer: List[str] = field(default_factory=list)
    element: Optional[Element] = None
    attribute_name: Optional[str] = None
    quote: Optional[str] = None
    brackets: int = 0
    child_count: int = 0


class XMLStateMachine:
    """Character-level XML parser for a single in-memory document.

    A machine instance holds the state of one parse and is not meant to be
    shared between threads; create one per document.

    Examples:
        >>> document = XMLStateMachine('<a x="1">hi</a>').parse_document()
        >>> document.root.name, document.root.text
        ('a', 'hi')
    """

    def __init__(
        self,
        text: str,
        strict: bool = False,
        max_depth: Optional[int] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the state machine.

        Args:
            text: Complete document text
            strict: Reject undefined entities, invalid entity characters and
                raw '<' or '>' in attribute values
            max_depth: Maximum element nesting depth, None for no limit
            correlation_id: Optional correlation ID for log records
        """
        self.text = text
        self.strict = strict
        self.max_depth = max_depth
        self.correlation_id = correlation_id

        self.document = Document()
        self.frames: List[ParseFrame] = []
        self.position = 0
        self.node_count = 0

        self._handlers: Dict[ParserState, Callable[[ParseFrame, str], bool]] = {
            ParserState.IGNORE_SPACES: self._ignore_spaces,
            ParserState.BEGIN: self._begin,
            ParserState.BEGIN_NODE: self._begin_node,
            ParserState.TAG_NAME: self._tag_name,
            ParserState.BODY: self._body,
            ParserState.ATTRIB_NAME: self._attrib_name,
            ParserState.EQUALS: self._equals,
            ParserState.ATTVAL_BEGIN: self._attval_begin,
            ParserState.ATTRIB_VAL: self._attrib_val,
            ParserState.CHILDREN: self._children,
            ParserState.CLOSE: self._close,
            ParserState.WAIT_END: self._wait_end,
            ParserState.WAIT_END_RET: self._wait_end_ret,
            ParserState.PCDATA: self._pcdata,
            ParserState.HEADER: self._header,
            ParserState.COMMENT: self._comment,
            ParserState.DOCTYPE: self._doctype,
            ParserState.CDATA: self._cdata,
            ParserState.ESCAPE: self._escape,
        }

    def parse_document(self) -> Document:
        """Parse the whole text into a document.

        Returns:
            Document holding every top-level node

        Raises:
            XMLSyntaxError: On any malformed construct
        """
        start_time = time.time()
        logger.debug(
            "Starting parse",
            extra={
                "component": "state_machine",
                "correlation_id": self.correlation_id,
                "char_count": len(self.text),
                "strict": self.strict,
            }
        )

        try:
            self.parse_node(0, None)
        except XMLSyntaxError as e:
            logger.debug(
                "Parse failed",
                extra={
                    "component": "state_machine",
                    "correlation_id": self.correlation_id,
                    "error": e.message,
                    "position": e.position,
                }
            )
            raise

        logger.debug(
            "Parse completed",
            extra={
                "component": "state_machine",
                "correlation_id": self.correlation_id,
                "node_count": self.node_count,
                "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
            }
        )
        return self.document

    def parse_node(self, start: int = 0, parent: Optional[Element] = None) -> int:
        """Parse one run of sibling content into ``parent``.

        Args:
            start: Offset to start scanning at
            parent: Element receiving the content, or None to append to the
                document's top level

        Returns:
            Offset just past ``parent``'s close tag, or the end of input when
            the run is not closed by a tag
        """
        text = self.text
        length = len(text)
        handlers = self._handlers

        self.position = start
        self.frames = [ParseFrame(parent=parent, start=start)]

        while self.position < length:
            frame = self.frames[-1]
            advance = handlers[frame.state](frame, text[self.position])
            if not self.frames:
                return self.position + 1
            if advance:
                self.position += 1

        self._finish()
        return self.position

    def _add_child(self, frame: ParseFrame, node: Node) -> None:
        if frame.parent is None:
            self.document.children.append(node)
        else:
            frame.parent.append(node)
        frame.child_count += 1
        self.node_count += 1

    def _flush_text(self, frame: ParseFrame) -> None:
        """Emit buffered character data as a Text node."""
        frame.buffer.append(self.text[frame.start:self.position])
        self._add_child(frame, Text("".join(frame.buffer)))
        frame.buffer = []

    def _skip_spaces_then(self, frame: ParseFrame, state: ParserState) -> None:
        frame.state = ParserState.IGNORE_SPACES
        frame.next_state = state

    def _ignore_spaces(self, frame: ParseFrame, char: str) -> bool:
        if is_whitespace(char):
            return True
        frame.state = frame.next_state
        frame.start = self.position
        return False

    def _begin(self, frame: ParseFrame, char: str) -> bool:
        if char == "<":
            self._skip_spaces_then(frame, ParserState.BEGIN_NODE)
            return True
        frame.start = self.position
        frame.state = ParserState.PCDATA
        return False

    def _pcdata(self, frame: ParseFrame, char: str) -> bool:
        if char == "<":
            self._flush_text(frame)
            self._skip_spaces_then(frame, ParserState.BEGIN_NODE)
        elif char == "&":
            frame.buffer.append(self.text[frame.start:self.position])
            frame.state = ParserState.ESCAPE
            frame.escape_next = ParserState.PCDATA
            frame.start = self.position + 1
        return True

    def _cdata(self, frame: ParseFrame, char: str) -> bool:
        if char == "]" and self.text.startswith("]]>", self.position):
            self._add_child(frame, CDataSection(self.text[frame.start:self.position]))
            self.position += 2
            frame.state = ParserState.BEGIN
        return True

    def _begin_node(self, frame: ParseFrame, char: str) -> bool:
        text = self.text
        if char == "!":
            following = text[self.position + 1:self.position + 2]
            if following == "[":
                self.position += 2
                if not text.startswith("CDATA[", self.position):
                    raise ExpectedNodeName("Expected <![CDATA[", text, self.position)
                self.position += 5
                frame.state = ParserState.CDATA
            elif following.upper() == "D":
                keyword = text[self.position + 2:self.position + 8]
                if keyword.upper() != "OCTYPE":
                    raise ExpectedNodeName("Expected <!DOCTYPE", text, self.position)
                self.position += 8
                frame.state = ParserState.DOCTYPE
                frame.brackets = 0
            elif text.startswith("--", self.position + 1):
                self.position += 2
                frame.state = ParserState.COMMENT
            else:
                raise ExpectedNodeName("Expected <!--", text, self.position)
            frame.start = self.position + 1
            return True

        if char == "?":
            frame.state = ParserState.HEADER
            frame.start = self.position
            return True

        if char == "/":
            if frame.parent is None:
                raise ExpectedNodeName("Expected node name", text, self.position)
            self._skip_spaces_then(frame, ParserState.CLOSE)
            return True

        frame.state = ParserState.TAG_NAME
        frame.start = self.position
        return False

    def _tag_name(self, frame: ParseFrame, char: str) -> bool:
        if is_name_char(char):
            return True
        if self.position == frame.start:
            raise ExpectedNodeName("Expected node name", self.text, self.position)
        # Frames below the top are the open ancestors of the new element
        if self.max_depth is not None and len(self.frames) > self.max_depth:
            raise NestingDepthExceeded(self.max_depth, self.text, self.position)

        element = Element(self.text[frame.start:self.position])
        self._add_child(frame, element)
        frame.element = element
        self._skip_spaces_then(frame, ParserState.BODY)
        return False

    def _body(self, frame: ParseFrame, char: str) -> bool:
        if char == "/":
            frame.state = ParserState.WAIT_END
            return True
        if char == ">":
            frame.state = ParserState.CHILDREN
            return True
        frame.state = ParserState.ATTRIB_NAME
        frame.start = self.position
        return False

    def _attrib_name(self, frame: ParseFrame, char: str) -> bool:
        if is_name_char(char):
            return True
        if self.position == frame.start:
            raise ExpectedAttributeName(self.text, self.position)
        name = self.text[frame.start:self.position]
        if name in frame.element.attributes:
            raise DuplicateAttribute(name, self.text, self.position)
        frame.attribute_name = name
        self._skip_spaces_then(frame, ParserState.EQUALS)
        return False

    def _equals(self, frame: ParseFrame, char: str) -> bool:
        if char != "=":
            raise ExpectedEquals(self.text, self.position)
        self._skip_spaces_then(frame, ParserState.ATTVAL_BEGIN)
        return True

    def _attval_begin(self, frame: ParseFrame, char: str) -> bool:
        if char not in "\"'":
            raise ExpectedQuote(self.text, self.position)
        frame.buffer = []
        frame.quote = char
        frame.start = self.position + 1
        frame.state = ParserState.ATTRIB_VAL
        return True

    def _attrib_val(self, frame: ParseFrame, char: str) -> bool:
        if char == "&":
            frame.buffer.append(self.text[frame.start:self.position])
            frame.state = ParserState.ESCAPE
            frame.escape_next = ParserState.ATTRIB_VAL
            frame.start = self.position + 1
        elif char in "<>":
            # Tolerated in lenient mode, as HTML does
            if self.strict:
                raise InvalidUnescapedChar(char, self.text, self.position)
        elif char == frame.quote:
            frame.buffer.append(self.text[frame.start:self.position])
            frame.element.attributes[frame.attribute_name] = "".join(frame.buffer)
            frame.buffer = []
            self._skip_spaces_then(frame, ParserState.BODY)
        return True

    def _children(self, frame: ParseFrame, char: str) -> bool:
        self.frames.append(ParseFrame(parent=frame.element, start=self.position))
        return False

    def _close(self, frame: ParseFrame, char: str) -> bool:
        if is_name_char(char):
            return True
        if self.position == frame.start:
            raise ExpectedNodeName("Expected node name", self.text, self.position)
        if self.text[frame.start:self.position] != frame.parent.name:
            raise MismatchedCloseTag(frame.parent.name, self.text, self.position)
        self._skip_spaces_then(frame, ParserState.WAIT_END_RET)
        return False

    def _wait_end(self, frame: ParseFrame, char: str) -> bool:
        if char != ">":
            raise ExpectedTagEnd(self.text, self.position)
        frame.state = ParserState.BEGIN
        return True

    def _wait_end_ret(self, frame: ParseFrame, char: str) -> bool:
        if char != ">":
            raise ExpectedTagEnd(self.text, self.position)
        if frame.child_count == 0:
            frame.parent.append(Text(""))
            self.node_count += 1
        self.frames.pop()
        if self.frames:
            outer = self.frames[-1]
            outer.start = self.position
            outer.state = ParserState.BEGIN
        return True

    def _comment(self, frame: ParseFrame, char: str) -> bool:
        if char == "-" and self.text.startswith("-->", self.position):
            self._add_child(frame, Comment(self.text[frame.start:self.position]))
            self.position += 2
            frame.state = ParserState.BEGIN
        return True

    def _doctype(self, frame: ParseFrame, char: str) -> bool:
        if char == "[":
            frame.brackets += 1
        elif char == "]":
            frame.brackets -= 1
        elif char == ">" and frame.brackets == 0:
            self._add_child(frame, DocType(self.text[frame.start:self.position]))
            frame.state = ParserState.BEGIN
        return True

    def _header(self, frame: ParseFrame, char: str) -> bool:
        if char == "?" and self.text.startswith(">", self.position + 1):
            data = self.text[frame.start + 1:self.position]
            self._add_child(frame, ProcessingInstruction(data))
            self.position += 1
            frame.state = ParserState.BEGIN
        return True

    def _escape(self, frame: ParseFrame, char: str) -> bool:
        if char == ";":
            body = self.text[frame.start:self.position]
            frame.buffer.append(
                decode_entity(body, self.strict, source=self.text, position=self.position)
            )
            frame.start = self.position + 1
            frame.state = frame.escape_next
            return True

        if is_name_char(char) or char == "#":
            return True

        if self.strict:
            raise InvalidEntityChar(char, self.text, self.position)
        # Keep what was read literally and rescan this character
        frame.buffer.append("&" + self.text[frame.start:self.position])
        frame.start = self.position
        frame.state = frame.escape_next
        return False

    def _finish(self) -> None:
        """Apply the end-of-input rules, innermost open frame first."""
        if len(self.frames) > 1:
            logger.debug(
                "Input ended inside open elements",
                extra={
                    "component": "state_machine",
                    "correlation_id": self.correlation_id,
                    "open_elements": [frame.parent.name for frame in self.frames[1:]],
                }
            )
        innermost = self.frames[-1]
        while self.frames:
            frame = self.frames[-1]
            if frame.state is ParserState.CHILDREN and frame is not innermost:
                # The nested run ended together with the input
                frame.state = ParserState.BEGIN
            self._finish_frame(frame)
            self.frames.pop()

    def _finish_frame(self, frame: ParseFrame) -> None:
        if frame.state is ParserState.BEGIN:
            frame.start = self.position
            frame.state = ParserState.PCDATA

        if frame.state is ParserState.PCDATA:
            if self.position != frame.start or frame.child_count == 0:
                self._flush_text(frame)
            return

        if (
            not self.strict
            and frame.state is ParserState.ESCAPE
            and frame.escape_next is ParserState.PCDATA
        ):
            frame.buffer.append("&")
            self._flush_text(frame)
            return

        raise UnexpectedEndOfInput(self.text, self.position)


def parse_document(
    text: str,
    strict: bool = False,
    max_depth: Optional[int] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse ``text`` into a document with a fresh state machine.

    Args:
        text: Complete document text
        strict: Enable strict entity and attribute value checks
        max_depth: Maximum element nesting depth, None for no limit
        correlation_id: Optional correlation ID for log records

    Returns:
        Parsed document

    Raises:
        XMLSyntaxError: On any malformed construct
    """
    machine = XMLStateMachine(
        text, strict=strict, max_depth=max_depth, correlation_id=correlation_id
    )
    return machine.parse_document()
