"""Main CLI entry point for the lite-xml command-line tool.

Parses XML files in bulk and reports which ones parsed, or dumps the node
tree of a single document as JSON.
"""

import argparse
import csv
import io
import json
import sys
import time
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from lite_xml_parser import __version__
from lite_xml_parser.api import XMLParser
from lite_xml_parser.shared import (
    ConfigValidationError,
    ParserConfig,
    XMLSyntaxError,
    configure_logging,
    get_logger,
)
from lite_xml_parser.tools import PerformanceProfiler

XML_SUFFIXES = {".xml", ".svg", ".html", ".xhtml"}
OUTPUT_FORMATS = ["json", "csv", "text"]
MAX_ERRORS_SHOWN = 3
MS_PER_SECOND = 1000


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self):
        self.parser_config = ParserConfig()
        self.output_format = "json"
        self.recursive = False

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a JSON file.

        Recognised keys are ``strict``, ``max_depth``, ``output_format`` and
        ``recursive``. A missing file leaves the defaults in place.
        """
        config = cls()
        if not config_path.exists():
            return config

        try:
            with config_path.open(encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigValidationError(f"Could not load config file: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Config file must contain a JSON object")

        config.parser_config = ParserConfig.from_dict(data)
        config.output_format = data.get("output_format", config.output_format)
        if config.output_format not in OUTPUT_FORMATS:
            raise ConfigValidationError(
                f"output_format must be one of {OUTPUT_FORMATS}",
                field_name="output_format",
            )
        config.recursive = bool(data.get("recursive", config.recursive))
        return config


class XMLProcessor:
    """Core processing logic for CLI operations."""

    def __init__(self, config: CLIConfig, profile: bool = False):
        self.config = config
        self.parser = XMLParser(config.parser_config)
        self.profiler = PerformanceProfiler(config.parser_config) if profile else None
        self.logger = get_logger(__name__, None, "cli_processor")

    def process_single_file(self, file_path: Path) -> Dict[str, Any]:
        """Parse a single file and summarise the outcome."""
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self.logger.error(
                "Could not read file",
                extra={"file": str(file_path), "error": str(e)}
            )
            return {"file": str(file_path), "success": False, "error": str(e)}

        if self.profiler is not None:
            session = self.profiler.profile_parse(text, str(file_path))
            result = {"file": str(file_path), **session.to_dict()}
            result["processing_time_ms"] = result.pop("duration_ms")
            del result["session_id"]
            return result

        start_time = time.time()
        try:
            document = self.parser.parse(text)
        except XMLSyntaxError as e:
            return {
                "file": str(file_path),
                "success": False,
                "error": str(e),
                "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
            }

        return {
            "file": str(file_path),
            "success": True,
            "node_count": document.node_count,
            "element_count": document.element_count,
            "max_depth": document.max_depth,
            "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
        }

    def find_xml_files(self, path: Path, recursive: bool = False) -> Iterator[Path]:
        """Find XML-like files in path."""
        if path.is_file():
            yield path
        elif path.is_dir():
            candidates = path.rglob("*") if recursive else path.glob("*")
            for candidate in sorted(candidates):
                if candidate.is_file() and candidate.suffix.lower() in XML_SUFFIXES:
                    yield candidate
        else:
            self.logger.warning("Path not found", extra={"path": str(path)})

    def batch_process(self, paths: List[Path], recursive: bool = False) -> List[Dict[str, Any]]:
        """Process every file found under ``paths`` in order."""
        results = []
        for path in paths:
            if not path.exists():
                results.append({"file": str(path), "success": False, "error": "File not found"})
                continue
            for file_path in self.find_xml_files(path, recursive):
                results.append(self.process_single_file(file_path))
        return results


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="lite-xml",
        description="Lightweight non-validating XML parser"
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Parse command
    parse_parser = subparsers.add_parser("parse", help="Parse XML files and report results")
    parse_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="XML files or directories to parse"
    )
    parse_parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject undefined entities and unescaped '<' or '>' in attributes"
    )
    parse_parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Recursively process directories"
    )
    parse_parser.add_argument(
        "--format", "-f",
        choices=OUTPUT_FORMATS,
        help="Output format (default: json)"
    )
    parse_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    parse_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path"
    )
    parse_parser.add_argument(
        "--max-depth",
        type=int,
        help="Maximum element nesting depth"
    )
    parse_parser.add_argument(
        "--profile",
        action="store_true",
        help="Record memory usage for each file"
    )

    # Dump command
    dump_parser = subparsers.add_parser("dump", help="Print the node tree of a file as JSON")
    dump_parser.add_argument("path", type=Path, help="XML file to dump")
    dump_parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject undefined entities and unescaped '<' or '>' in attributes"
    )
    dump_parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (default: 2)"
    )

    return parser


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format processing results for output."""
    if format_type == "csv":
        if not results:
            return ""
        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerow(["file", "success", "nodes", "elements", "time_ms", "error"])
        for result in results:
            error = result.get("error") or ""
            writer.writerow([
                result["file"],
                result["success"],
                result.get("node_count", 0),
                result.get("element_count", 0),
                f"{result.get('processing_time_ms', 0):.1f}",
                error.splitlines()[0] if error else "",
            ])
        return output.getvalue().rstrip("\n")

    if format_type == "text":
        if not results:
            return "No results to display."
        successful = sum(1 for r in results if r.get("success", False))
        lines = [f"Processed {len(results)} files, {successful} successful", "-" * 60]
        for result in results:
            if result.get("success", False):
                lines.append(f"✓ {result['file']}")
                lines.append(
                    f"   Nodes: {result.get('node_count', 0)}, "
                    f"Elements: {result.get('element_count', 0)}, "
                    f"Time: {result.get('processing_time_ms', 0):.1f}ms"
                )
            else:
                lines.append(f"✗ {result['file']}")
                for error_line in result.get("error", "").splitlines()[:MAX_ERRORS_SHOWN]:
                    lines.append(f"   {error_line}")
        return "\n".join(lines)

    return json.dumps(results, indent=2)


def _load_config(args: argparse.Namespace) -> CLIConfig:
    config = CLIConfig.from_file(args.config) if args.config else CLIConfig()

    overrides: Dict[str, Any] = {}
    if args.strict:
        overrides["strict"] = True
    if args.max_depth is not None:
        overrides["max_depth"] = args.max_depth
    if overrides:
        config.parser_config = config.parser_config.override(**overrides)
    if args.format:
        config.output_format = args.format
    if args.recursive:
        config.recursive = True
    return config


def cmd_parse(args: argparse.Namespace) -> int:
    """Handle parse command."""
    try:
        config = _load_config(args)
    except ConfigValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    if not (args.verbose or args.quiet):
        configure_logging(config.parser_config.logging_level)

    processor = XMLProcessor(config, profile=args.profile)
    results = processor.batch_process(args.paths, config.recursive)
    formatted_output = format_results(results, config.output_format)

    if args.output:
        try:
            args.output.write_text(formatted_output, encoding="utf-8")
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
        print(f"Results written to {args.output}", file=sys.stderr)
    else:
        print(formatted_output)

    if not results:
        return 1
    successful = sum(1 for r in results if r.get("success", False))
    return 0 if successful == len(results) else 1


def cmd_dump(args: argparse.Namespace) -> int:
    """Handle dump command."""
    parser = XMLParser(ParserConfig(strict=args.strict))
    try:
        document = parser.parse_file(args.path)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Could not read {args.path}: {e}", file=sys.stderr)
        return 1
    except XMLSyntaxError as e:
        print(f"[{args.path}] {e}", file=sys.stderr)
        return 1

    print(json.dumps(document.to_dict(), indent=args.indent, ensure_ascii=False))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.verbose:
        configure_logging("DEBUG")
    elif args.quiet:
        configure_logging("ERROR")

    try:
        if args.command == "parse":
            return cmd_parse(args)
        if args.command == "dump":
            return cmd_dump(args)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
