"""Public parsing API with progressive disclosure.

Level 1 is the pair of module functions ``parse`` and ``parse_file``; level 2
is ``XMLParser``, which carries a ``ParserConfig`` and a correlation ID
across many calls. Syntax errors are never swallowed here: they propagate to
the caller, and no partial tree is returned.
"""

import time
from pathlib import Path
from typing import Optional, Union

from lite_xml_parser.shared import ParserConfig, XMLSyntaxError, get_logger
from lite_xml_parser.tokenization import XMLStateMachine
from lite_xml_parser.tree import Document

PathType = Union[str, Path]

# Constants for API operations
PREVIEW_LENGTH = 100  # Max length for content preview in logs
MS_PER_SECOND = 1000  # Milliseconds per second conversion


def parse(
    text: str,
    strict: Optional[bool] = None,
    *,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse XML text into a document.

    Args:
        text: Complete document text, already decoded
        strict: Enable strict checks; overrides ``config.strict`` when given
        config: Parser configuration, defaults to ``ParserConfig()``
        correlation_id: Optional correlation ID for request tracking

    Returns:
        Document holding every top-level node

    Raises:
        XMLSyntaxError: On any malformed construct

    Examples:
        >>> document = parse('<root><item id="1">value</item></root>')
        >>> document.root.name
        'root'
        >>> document.find('item').get_attribute('id')
        '1'
    """
    return XMLParser(config, correlation_id).parse(text, strict)


def parse_file(
    file_path: PathType,
    strict: Optional[bool] = None,
    *,
    encoding: str = "utf-8",
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Read a file and parse its content.

    Args:
        file_path: Path to the XML file
        strict: Enable strict checks; overrides ``config.strict`` when given
        encoding: Text encoding of the file
        config: Parser configuration, defaults to ``ParserConfig()``
        correlation_id: Optional correlation ID for request tracking

    Returns:
        Parsed document

    Raises:
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not valid in ``encoding``
        XMLSyntaxError: On any malformed construct
    """
    return XMLParser(config, correlation_id).parse_file(file_path, strict, encoding=encoding)


class XMLParser:
    """Configured parser for repeated use.

    The parser object itself holds no per-document state, so one instance
    may be shared between threads.

    Examples:
        >>> parser = XMLParser(ParserConfig.strict_mode())
        >>> parser.parse('<a>&amp;</a>').root.text
        '&'
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the parser.

        Args:
            config: Parser configuration, defaults to ``ParserConfig()``
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "xml_parser")

    def parse(self, text: str, strict: Optional[bool] = None) -> Document:
        """Parse XML text into a document.

        Args:
            text: Complete document text
            strict: Overrides ``config.strict`` when given

        Returns:
            Parsed document

        Raises:
            TypeError: If ``text`` is not a string
            XMLSyntaxError: On any malformed construct
        """
        if not isinstance(text, str):
            raise TypeError(
                f"XML input must be str, not {type(text).__name__}; "
                "decode bytes before parsing"
            )
        if strict is None:
            strict = self.config.strict

        start_time = time.time()
        self.logger.debug(
            "Starting string parse operation",
            extra={
                "content_length": len(text),
                "strict": strict,
                "preview": (
                    text[:PREVIEW_LENGTH] + "..."
                    if len(text) > PREVIEW_LENGTH else text
                ),
            }
        )

        machine = XMLStateMachine(
            text,
            strict=strict,
            max_depth=self.config.max_depth,
            correlation_id=self.correlation_id,
        )
        try:
            document = machine.parse_document()
        except XMLSyntaxError as e:
            self.logger.info(
                "Document rejected",
                extra={
                    "error": e.message,
                    "position": e.position,
                    "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
                }
            )
            raise

        self.logger.debug(
            "String parse operation completed",
            extra={
                "node_count": machine.node_count,
                "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
            }
        )
        return document

    def parse_file(
        self,
        file_path: PathType,
        strict: Optional[bool] = None,
        encoding: str = "utf-8"
    ) -> Document:
        """Read a file and parse its content.

        Args:
            file_path: Path to the XML file
            strict: Overrides ``config.strict`` when given
            encoding: Text encoding of the file

        Returns:
            Parsed document
        """
        path = Path(file_path)
        self.logger.debug(
            "Reading file",
            extra={"file_path": str(path), "encoding": encoding}
        )
        text = path.read_text(encoding=encoding)
        return self.parse(text, strict)
