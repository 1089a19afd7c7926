"""Document tree node types.

A parsed document is an ordered list of nodes. ``Node`` is a closed union of
six dataclasses, each tagged with a ``NodeType``; consumers dispatch on the
class (or on ``node_type``) and should handle every member of the union.

Elements own their children outright; there are no parent back-references,
so a subtree can be handed to another tool without dragging the rest of the
document with it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple, Union


class NodeType(Enum):
    """Node kinds, valued with the type names used in dictionary dumps."""

    ELEMENT = "Element"
    TEXT = "PCData"
    CDATA = "CData"
    COMMENT = "Comment"
    DOCTYPE = "DocType"
    PROCESSING_INSTRUCTION = "ProcessingInstruction"


@dataclass
class CharacterData:
    """Leaf node holding a run of text."""

    node_type: ClassVar[NodeType]

    data: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to dictionary representation."""
        return {"type": self.node_type.value, "data": self.data}


@dataclass
class Text(CharacterData):
    """Parsed character data with entities already decoded."""

    node_type: ClassVar[NodeType] = NodeType.TEXT


@dataclass
class CDataSection(CharacterData):
    """Raw text from a ``<![CDATA[...]]>`` section."""

    node_type: ClassVar[NodeType] = NodeType.CDATA


@dataclass
class Comment(CharacterData):
    """Raw text between ``<!--`` and ``-->``."""

    node_type: ClassVar[NodeType] = NodeType.COMMENT


@dataclass
class DocType(CharacterData):
    """Raw text of a DOCTYPE declaration, internal subset included."""

    node_type: ClassVar[NodeType] = NodeType.DOCTYPE


@dataclass
class ProcessingInstruction(CharacterData):
    """Raw text between ``<?`` and ``?>``, target name included."""

    node_type: ClassVar[NodeType] = NodeType.PROCESSING_INSTRUCTION


@dataclass
class Element:
    """XML element with ordered attributes and optional children.

    ``children`` is ``None`` for a self-closing element (``<a/>``). An element
    closed by an explicit close tag always has a list, which holds a single
    empty ``Text`` when the body was empty (``<a></a>``).
    """

    node_type: ClassVar[NodeType] = NodeType.ELEMENT

    name: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: Optional[List["Node"]] = None

    @property
    def is_self_closing(self) -> bool:
        """Check if the element was written as ``<name/>``."""
        return self.children is None

    @property
    def text(self) -> str:
        """Concatenated text of direct ``Text`` and ``CDataSection`` children."""
        if not self.children:
            return ""
        return "".join(
            child.data for child in self.children
            if isinstance(child, (Text, CDataSection))
        )

    def append(self, child: "Node") -> None:
        """Append a child node, creating the children list on first use."""
        if self.children is None:
            self.children = []
        self.children.append(child)

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get attribute value with optional default."""
        return self.attributes.get(name, default)

    def has_attribute(self, name: str) -> bool:
        """Check if element has specific attribute."""
        return name in self.attributes

    def iter_elements(self) -> Iterator["Element"]:
        """Yield this element and every descendant element in document order."""
        stack = [self]
        while stack:
            element = stack.pop()
            yield element
            if element.children:
                stack.extend(
                    child for child in reversed(element.children)
                    if isinstance(child, Element)
                )

    def find(self, name: str) -> Optional["Element"]:
        """Find first descendant element with matching name."""
        return next(self._descendants(name), None)

    def find_all(self, name: str) -> List["Element"]:
        """Find all descendant elements with matching name."""
        return list(self._descendants(name))

    def _descendants(self, name: str) -> Iterator["Element"]:
        elements = self.iter_elements()
        next(elements)
        return (element for element in elements if element.name == name)

    def _shallow_dict(self) -> Dict[str, Any]:
        return {
            "type": self.node_type.value,
            "name": self.name,
            "attributes": dict(self.attributes),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert element and its subtree to dictionary representation."""
        return _tree_to_dict(self)


Node = Union[Element, Text, CDataSection, Comment, DocType, ProcessingInstruction]


@dataclass
class Document:
    """Ordered sequence of top-level nodes.

    No single root element is enforced: several top-level elements, stray
    text and comments may all appear side by side.
    """

    children: List[Node] = field(default_factory=list)

    @property
    def root(self) -> Optional[Element]:
        """First top-level element, if any."""
        for child in self.children:
            if isinstance(child, Element):
                return child
        return None

    @property
    def element_count(self) -> int:
        """Total number of elements in the document."""
        return sum(1 for _ in self.iter_elements())

    @property
    def node_count(self) -> int:
        """Total number of nodes of every kind in the document."""
        count = len(self.children)
        for element in self.iter_elements():
            if element.children:
                count += len(element.children)
        return count

    @property
    def max_depth(self) -> int:
        """Deepest element nesting level (top-level elements are level 1)."""
        deepest = 0
        stack: List[Tuple[Node, int]] = [(child, 1) for child in self.children]
        while stack:
            node, depth = stack.pop()
            if not isinstance(node, Element):
                continue
            deepest = max(deepest, depth)
            if node.children:
                stack.extend((child, depth + 1) for child in node.children)
        return deepest

    def iter_elements(self) -> Iterator[Element]:
        """Iterate over all elements in document order."""
        for child in self.children:
            if isinstance(child, Element):
                yield from child.iter_elements()

    def find(self, name: str) -> Optional[Element]:
        """Find first element anywhere in the document with matching name."""
        return next(
            (element for element in self.iter_elements() if element.name == name),
            None,
        )

    def find_all(self, name: str) -> List[Element]:
        """Find all elements in the document with matching name."""
        return [element for element in self.iter_elements() if element.name == name]

    def to_dict(self) -> Dict[str, Any]:
        """Convert document to dictionary representation."""
        return {"children": [_tree_to_dict(child) for child in self.children]}


def _tree_to_dict(node: Node) -> Dict[str, Any]:
    """Dump a subtree without recursing once per nesting level."""
    if not isinstance(node, Element):
        return node.to_dict()

    result = node._shallow_dict()
    stack = [(node, result)]
    while stack:
        element, output = stack.pop()
        if element.children is None:
            continue
        output_children = output["children"] = []
        for child in element.children:
            if isinstance(child, Element):
                child_output = child._shallow_dict()
                stack.append((child, child_output))
            else:
                child_output = child.to_dict()
            output_children.append(child_output)
    return result
