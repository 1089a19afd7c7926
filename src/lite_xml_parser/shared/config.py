"""Configuration objects for lite XML parsing.

``ParserConfig`` is an immutable dataclass: it can be shared between threads
and reused across parse calls, and every change produces a new instance.
"""

import json
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, List, Optional

from .errors import ConfigValidationError

VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Depth bound used by the untrusted input preset
UNTRUSTED_MAX_DEPTH = 512


@dataclass(frozen=True)
class ParserConfig:
    """Configuration controlling a parse call.

    Attributes:
        strict: Reject undefined entities, invalid entity characters and raw
            ``<``/``>`` inside attribute values
        max_depth: Maximum element nesting depth, ``None`` for no limit
        logging_level: Level used when the command-line tool sets up logging
        name: Optional preset name
        description: Optional human readable description
    """

    strict: bool = False
    max_depth: Optional[int] = None
    logging_level: str = "WARNING"

    # Metadata
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the parser configuration."""
        if not isinstance(self.strict, bool):
            raise ConfigValidationError("strict must be a boolean", field_name="strict")
        if self.max_depth is not None and (
            isinstance(self.max_depth, bool)
            or not isinstance(self.max_depth, int)
            or self.max_depth <= 0
        ):
            raise ConfigValidationError(
                "max_depth must be a positive integer or None",
                field_name="max_depth",
                suggestions=["Use None to disable the nesting limit"],
            )
        if self.logging_level not in VALID_LOGGING_LEVELS:
            raise ConfigValidationError(
                f"logging_level must be one of {VALID_LOGGING_LEVELS}",
                field_name="logging_level",
            )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Example:
            >>> ParserConfig().override(strict=True).strict
            True
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration fields: {', '.join(unknown)}",
                suggestions=sorted(known),
            )
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    def validate_compatibility(self, other: "ParserConfig") -> List[str]:
        """List behavioural differences between two configurations."""
        warnings = []
        if self.strict != other.strict:
            warnings.append("Strict mode differs - entity and attribute checks diverge")
        if self.max_depth != other.max_depth:
            warnings.append(
                f"Nesting limits differ: {self.max_depth} vs {other.max_depth}"
            )
        return warnings

    # Preset factory methods
    @classmethod
    def strict_mode(cls) -> "ParserConfig":
        """Create a preset that rejects sloppy entities and attribute values."""
        return cls(
            strict=True,
            name="strict",
            description="Reject undefined entities and unescaped markup in attributes",
        )

    @classmethod
    def lenient(cls) -> "ParserConfig":
        """Create a preset that tolerates HTML-style entities and attributes."""
        return cls(
            strict=False,
            name="lenient",
            description="Keep unknown entities literally and allow raw '<' and '>' in attributes",
        )

    @classmethod
    def untrusted_input(cls) -> "ParserConfig":
        """Create a strict preset with a bounded nesting depth."""
        return cls(
            strict=True,
            max_depth=UNTRUSTED_MAX_DEPTH,
            name="untrusted_input",
            description="Strict parsing with a nesting limit for untrusted documents",
        )
