"""Tests for the XML scanning state machine."""

import pytest

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
    UndefinedEntity,
    UnexpectedEndOfInput,
    XMLSyntaxError,
)
from lite_xml_parser.tokenization import (
    ParseFrame,
    ParserState,
    XMLStateMachine,
    parse_document,
)
from lite_xml_parser.tree import (
    CDataSection,
    Comment,
    DocType,
    Element,
    ProcessingInstruction,
    Text,
)


def only_element(text, **kwargs):
    """Parse text and return its single top-level element."""
    document = parse_document(text, **kwargs)
    assert len(document.children) == 1
    element = document.children[0]
    assert isinstance(element, Element)
    return element


class TestParserState:
    """Test the state enumeration."""

    def test_state_count(self):
        """The automaton has one state per scanning situation."""
        assert len(ParserState) == 19

    def test_initial_frame_state(self):
        """A new frame starts scanning in BEGIN with an empty buffer."""
        frame = ParseFrame(parent=None)
        assert frame.state is ParserState.BEGIN
        assert frame.buffer == []
        assert frame.child_count == 0


class TestElements:
    """Test element, attribute and child parsing."""

    def test_element_with_attribute_and_text(self):
        """Test a well-formed element with one attribute and text."""
        element = only_element('<tag attr="v">body</tag>')
        assert element.name == "tag"
        assert element.attributes == {"attr": "v"}
        assert element.children == [Text("body")]

    def test_entity_decoded_body(self):
        """Children reproduce the body once entities are decoded."""
        element = only_element("<tag>a &lt; b &amp;&amp; c &gt; d</tag>")
        assert element.children == [Text("a < b && c > d")]

    def test_empty_element_gets_empty_text(self):
        """An explicitly closed empty element holds one empty text node."""
        element = only_element("<r></r>")
        assert element.name == "r"
        assert element.children == [Text("")]

    def test_self_closing_element_has_no_children(self):
        """A self-closing element has no children collection at all."""
        element = only_element("<r/>")
        assert element.name == "r"
        assert element.children is None
        assert element.is_self_closing

    def test_nested_elements(self):
        """Test nesting and sibling order."""
        root = only_element("<a><b>1</b><c/><b>2</b></a>")
        assert [child.name for child in root.children] == ["b", "c", "b"]
        assert root.children[0].children == [Text("1")]
        assert root.children[1].children is None
        assert root.children[2].children == [Text("2")]

    def test_whitespace_text_is_preserved(self):
        """Whitespace between tags is kept as text nodes."""
        root = only_element("<a> <b/>\n</a>")
        assert root.children[0] == Text(" ")
        assert root.children[1].name == "b"
        assert root.children[2] == Text("\n")

    def test_attribute_order_and_quotes(self):
        """Attributes keep source order and accept both quote styles."""
        element = only_element("<a z='1' y=\"2\" x='say \"hi\"'/>")
        assert list(element.attributes) == ["z", "y", "x"]
        assert element.attributes["x"] == 'say "hi"'

    def test_whitespace_inside_tags(self):
        """Whitespace is skipped around names, '=' and values."""
        element = only_element('<  a  x = "1"  ></a >')
        assert element.name == "a"
        assert element.attributes == {"x": "1"}

    def test_whitespace_after_close_slash(self):
        """Whitespace between '</' and the close tag name is tolerated."""
        element = only_element("<a>x</ a>")
        assert element.children == [Text("x")]

    def test_entities_in_attribute_values(self):
        """Attribute values are entity-decoded."""
        element = only_element('<a href="?x=1&amp;y=&#50;" q="&quot;"/>')
        assert element.attributes == {"href": "?x=1&y=2", "q": '"'}

    def test_name_characters(self):
        """Names may contain ':', '.', '_' and '-'."""
        element = only_element('<ns:my-tag_1.x xml:lang="en"/>')
        assert element.name == "ns:my-tag_1.x"
        assert element.attributes == {"xml:lang": "en"}

    def test_multiple_top_level_nodes(self):
        """No single root element is enforced."""
        document = parse_document("hi<a/><b/>there")
        assert document.children[0] == Text("hi")
        assert [c.name for c in document.children[1:3]] == ["a", "b"]
        assert document.children[3] == Text("there")


class TestCharacterData:
    """Test text, CDATA, comments, DOCTYPE and processing instructions."""

    def test_top_level_text_with_entity(self):
        """Top-level text becomes a single decoded text node."""
        document = parse_document("text &amp; more")
        assert document.children == [Text("text & more")]

    @pytest.mark.parametrize("reference", ["&#65;", "&#x41;"])
    def test_numeric_references(self, reference):
        """Decimal and hexadecimal references decode to the same character."""
        assert parse_document(reference).children == [Text("A")]

    def test_all_predefined_entities(self):
        """The five predefined entities are decoded."""
        document = parse_document("&lt;&gt;&amp;&quot;&apos;")
        assert document.children == [Text("<>&\"'")]

    def test_comment(self):
        """Comment data is kept verbatim."""
        assert parse_document("<!-- note -->").children == [Comment(" note ")]

    def test_empty_comment(self):
        """Test an empty comment."""
        assert parse_document("<!---->").children == [Comment("")]

    def test_cdata(self):
        """CDATA content is neither decoded nor interpreted."""
        document = parse_document("<![CDATA[<raw>&amp;]]>")
        assert document.children == [CDataSection("<raw>&amp;")]

    def test_cdata_inside_element(self):
        """Test CDATA as element content."""
        element = only_element("<a><![CDATA[x<y]]></a>")
        assert element.children == [CDataSection("x<y")]
        assert element.text == "x<y"

    def test_doctype(self):
        """DOCTYPE data starts after the keyword and separating space."""
        document = parse_document("<!DOCTYPE html><html/>")
        assert document.children[0] == DocType("html")
        assert document.children[1].name == "html"

    def test_doctype_keyword_is_case_insensitive(self):
        """Test a lowercase doctype keyword."""
        assert parse_document("<!doctype html>").children == [DocType("html")]

    def test_doctype_internal_subset(self):
        """'>' inside brackets does not end the DOCTYPE."""
        document = parse_document('<!DOCTYPE r [<!ENTITY x "y">]><r/>')
        assert document.children[0] == DocType('r [<!ENTITY x "y">]')
        assert document.children[1].name == "r"

    def test_processing_instruction(self):
        """Processing instruction data includes the target name."""
        document = parse_document('<?xml version="1.0"?><a/>')
        assert document.children[0] == ProcessingInstruction('xml version="1.0"')
        assert document.children[1].name == "a"

    def test_leaf_content_is_not_reparsed(self):
        """Markup inside comments and CDATA stays as plain text."""
        document = parse_document("<!--<b>x</b>--><![CDATA[<c/>]]>")
        assert document.children == [Comment("<b>x</b>"), CDataSection("<c/>")]
        assert document.element_count == 0


class TestEndOfInput:
    """Test end-of-input handling."""

    def test_empty_document(self):
        """An empty input yields a single empty text node."""
        assert parse_document("").children == [Text("")]

    def test_no_trailing_text_after_element(self):
        """No empty text node follows a closed top-level element."""
        assert len(parse_document("<a/>").children) == 1

    def test_unclosed_element_with_text(self):
        """Content running to the end of input closes the open elements."""
        element = only_element("<a>text")
        assert element.children == [Text("text")]

    def test_unclosed_nested_elements(self):
        """Test several open elements at end of input."""
        root = only_element("<a><b>x")
        assert root.children[0].name == "b"
        assert root.children[0].children == [Text("x")]

    def test_input_ends_after_start_tag(self):
        """Input ending right after '>' needs more characters."""
        with pytest.raises(UnexpectedEndOfInput):
            parse_document("<a>")

    @pytest.mark.parametrize("text", [
        "<a",
        "<a x",
        '<a x="1',
        "<a/",
        "<!-- open",
        "<![CDATA[open",
        "<!DOCTYPE r [",
        "<?pi",
        "<a></a",
    ])
    def test_truncated_constructs(self, text):
        """Test input ending inside markup."""
        with pytest.raises(UnexpectedEndOfInput) as exc_info:
            parse_document(text)
        assert exc_info.value.position == len(text)

    def test_truncated_entity_lenient(self):
        """A partial entity at the end is kept literally in lenient mode."""
        assert parse_document("x &amp").children == [Text("x &amp")]

    def test_truncated_entity_strict(self):
        """A partial entity at the end fails in strict mode."""
        with pytest.raises(UnexpectedEndOfInput):
            parse_document("x &amp", strict=True)

    def test_truncated_entity_in_attribute(self):
        """A partial entity in an attribute value always fails."""
        with pytest.raises(UnexpectedEndOfInput):
            parse_document('<a x="&amp')


class TestSyntaxErrors:
    """Test fatal syntax errors."""

    @pytest.mark.parametrize("strict", [False, True])
    def test_duplicate_attribute(self, strict):
        """Duplicate attributes fail in both modes."""
        with pytest.raises(DuplicateAttribute) as exc_info:
            parse_document('<r a="1" a="2"/>', strict=strict)
        assert exc_info.value.name == "a"

    @pytest.mark.parametrize("strict", [False, True])
    def test_duplicate_attribute_with_empty_value(self, strict):
        """An empty first value still counts as a definition."""
        with pytest.raises(DuplicateAttribute):
            parse_document('<r a="" a="2"/>', strict=strict)

    @pytest.mark.parametrize("strict", [False, True])
    def test_mismatched_close_tag(self, strict):
        """Mismatched close tags fail in both modes."""
        with pytest.raises(MismatchedCloseTag) as exc_info:
            parse_document("<a></b>", strict=strict)
        assert exc_info.value.expected_name == "a"

    def test_mismatched_close_tag_message(self):
        """Test the formatted message and position of an error."""
        with pytest.raises(MismatchedCloseTag) as exc_info:
            parse_document("<a></b>")
        error = exc_info.value
        assert error.position == 6
        assert error.context == "<a></b"
        assert str(error) == "Expected '</a>'\n[6] ...<a></b"

    def test_stray_close_tag_at_top_level(self):
        """A close tag with nothing open is rejected."""
        with pytest.raises(ExpectedNodeName):
            parse_document("</a>")

    @pytest.mark.parametrize("text", ["<>", "< >", "<a></>", "<a></ >"])
    def test_empty_names(self, text):
        """Test empty tag and close-tag names."""
        with pytest.raises(ExpectedNodeName) as exc_info:
            parse_document(text)
        assert exc_info.value.message == "Expected node name"

    @pytest.mark.parametrize("text,message", [
        ("<![CDAT[x]]>", "Expected <![CDATA["),
        ("<![cdata[x]]>", "Expected <![CDATA["),
        ("<!DOCTYP html>", "Expected <!DOCTYPE"),
        ("<!-x-->", "Expected <!--"),
        ("<!ELEMENT x>", "Expected <!--"),
    ])
    def test_unknown_bang_constructs(self, text, message):
        """Test malformed '<!' constructs."""
        with pytest.raises(ExpectedNodeName) as exc_info:
            parse_document(text)
        assert exc_info.value.message == message

    def test_expected_attribute_name(self):
        """Test an attribute without a name."""
        with pytest.raises(ExpectedAttributeName):
            parse_document('<a ="1"/>')

    def test_expected_equals(self):
        """Test an attribute name followed by something other than '='."""
        with pytest.raises(ExpectedEquals):
            parse_document('<a x "1"/>')

    def test_expected_quote(self):
        """Test an unquoted attribute value."""
        with pytest.raises(ExpectedQuote):
            parse_document("<a x=1/>")

    @pytest.mark.parametrize("text", ["<a/ >", "<a></a x>"])
    def test_expected_tag_end(self, text):
        """Test a missing '>' after '/' or a close tag name."""
        with pytest.raises(ExpectedTagEnd):
            parse_document(text)

    def test_errors_share_base_class(self):
        """Every syntax failure is an XMLSyntaxError."""
        with pytest.raises(XMLSyntaxError):
            parse_document("<a></b>")


class TestStrictLenientDivergence:
    """Test the exact points where strict and lenient modes differ."""

    def test_unknown_entity_lenient(self):
        """Unknown entities are kept literally in lenient mode."""
        element = only_element("<a>&nbsp;x</a>")
        assert element.children == [Text("&nbsp;x")]

    def test_unknown_entity_strict(self):
        """Unknown entities fail in strict mode."""
        with pytest.raises(UndefinedEntity) as exc_info:
            parse_document("<a>&nbsp;x</a>", strict=True)
        assert exc_info.value.name == "nbsp"
        assert exc_info.value.message == "Undefined entity: nbsp"

    def test_unknown_entity_in_attribute_lenient(self):
        """Test an unknown entity inside an attribute value."""
        element = only_element('<a x="&copy;"/>')
        assert element.attributes["x"] == "&copy;"

    def test_malformed_numeric_reference(self):
        """A malformed numeric reference is treated like an unknown entity."""
        assert parse_document("&#xZZ;").children == [Text("&#xZZ;")]
        with pytest.raises(UndefinedEntity):
            parse_document("&#xZZ;", strict=True)

    def test_surrogate_reference_lenient(self):
        """A surrogate code point is kept as literal reference text."""
        element = only_element("<a>&#xD800;</a>")
        assert element.children == [Text("&#xD800;")]

    def test_surrogate_reference_strict(self):
        """A surrogate code point is an undefined entity in strict mode."""
        with pytest.raises(UndefinedEntity) as exc_info:
            parse_document("<a>&#xD800;</a>", strict=True)
        assert exc_info.value.name == "#xD800"

    def test_invalid_entity_char_lenient(self):
        """A bare '&' is kept as text and the next character rescanned."""
        element = only_element("<a>fish & chips</a>")
        assert element.children == [Text("fish & chips")]

    def test_invalid_entity_char_before_tag_lenient(self):
        """The rescanned character can end the text run."""
        element = only_element("<a>x &amp<b/></a>")
        assert element.children[0] == Text("x &amp")
        assert element.children[1].name == "b"

    def test_invalid_entity_char_in_attribute_lenient(self):
        """Test a bare '&' inside an attribute value."""
        element = only_element('<a x="R&D dept"/>')
        assert element.attributes["x"] == "R&D dept"

    def test_invalid_entity_char_strict(self):
        """A non-name character in an entity fails in strict mode."""
        with pytest.raises(InvalidEntityChar) as exc_info:
            parse_document("<a>fish & chips</a>", strict=True)
        assert exc_info.value.char == " "

    @pytest.mark.parametrize("char", ["<", ">"])
    def test_unescaped_markup_in_attribute_lenient(self, char):
        """Raw '<' and '>' are accepted in attribute values in lenient mode."""
        element = only_element(f'<a x="1 {char} 2"/>')
        assert element.attributes["x"] == f"1 {char} 2"

    @pytest.mark.parametrize("char", ["<", ">"])
    def test_unescaped_markup_in_attribute_strict(self, char):
        """Raw '<' and '>' fail in attribute values in strict mode."""
        with pytest.raises(InvalidUnescapedChar) as exc_info:
            parse_document(f'<a x="1 {char} 2"/>', strict=True)
        assert exc_info.value.char == char

    def test_well_formed_input_is_mode_independent(self):
        """Both modes produce the same tree for well-formed input."""
        text = '<?xml version="1.0"?><r a="&lt;"><!--c--><x>&#65;</x><y/></r>'
        assert parse_document(text) == parse_document(text, strict=True)


class TestNesting:
    """Test deep nesting and the nesting limit."""

    def test_deep_nesting_does_not_recurse(self):
        """Nesting depth is not bounded by the interpreter stack."""
        depth = 5000
        text = "<a>" * depth + "x" + "</a>" * depth
        document = parse_document(text)
        assert document.max_depth == depth
        innermost = list(document.iter_elements())[-1]
        assert innermost.children == [Text("x")]

    def test_depth_within_limit(self):
        """Test a document exactly at the nesting limit."""
        document = parse_document("<a><b><c/></b></a>", max_depth=3)
        assert document.max_depth == 3

    def test_depth_limit_exceeded(self):
        """Test a document one level past the nesting limit."""
        with pytest.raises(NestingDepthExceeded) as exc_info:
            parse_document("<a><b><c/></b></a>", max_depth=2)
        assert exc_info.value.max_depth == 2

    def test_depth_limit_counts_open_elements_only(self):
        """Closed siblings do not count toward the depth."""
        text = "<r>" + "<a><b/></a>" * 10 + "</r>"
        document = parse_document(text, max_depth=3)
        assert document.element_count == 21


class TestParseNode:
    """Test parsing element content from an offset."""

    def test_returns_offset_after_close_tag(self):
        """parse_node stops right after the parent's close tag."""
        text = "<a>hi<b/></a>tail"
        machine = XMLStateMachine(text)
        parent = Element("a")
        end = machine.parse_node(3, parent)
        assert text[end:] == "tail"
        assert parent.children[0] == Text("hi")
        assert parent.children[1].name == "b"
        assert machine.document.children == []

    def test_returns_end_of_input_for_unclosed_run(self):
        """Without a close tag the whole input is consumed."""
        machine = XMLStateMachine("<a/>text")
        end = machine.parse_node(0, None)
        assert end == len("<a/>text")
        assert machine.document.children[1] == Text("text")

    def test_node_count(self):
        """Every emitted node is counted."""
        machine = XMLStateMachine("<a>x<b/></a>")
        machine.parse_document()
        assert machine.node_count == 3
