"""Configuration classes for phyloXML parsing.

The configuration only influences the tokenizer layer (how text values are
presented to the tree builder) and the API layer (chunking, metrics). The
tree construction state machine has no tunable behavior.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

UNICODE_FORMS = ("NFC", "NFD", "NFKC", "NFKD")
LOGGING_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_SECTIONS = ("text", "tokenizer", "streaming")


@dataclass
class TextConfig:
    """Configuration for character data presented to the text router."""

    trim: bool = True
    normalize_whitespace: bool = False
    unicode_normalization: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate text configuration."""
        if (
            self.unicode_normalization is not None
            and self.unicode_normalization not in UNICODE_FORMS
        ):
            raise ValueError(
                f"unicode_normalization must be one of {list(UNICODE_FORMS)} or None"
            )


@dataclass
class TokenizerConfig:
    """Configuration passed through to the lxml parser."""

    resolve_entities: bool = False
    no_network: bool = True
    huge_tree: bool = False


@dataclass
class StreamingConfig:
    """Configuration for incremental parsing."""

    chunk_size: int = 65536
    progress_interval: int = 1

    def __post_init__(self) -> None:
        """Validate streaming configuration."""
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if self.progress_interval <= 0:
            raise ValueError("progress_interval must be > 0")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserConfig:
    """Complete configuration for a phyloXML parse.

    Immutable, so one instance can be shared by concurrent parses of
    independent documents.
    """

    text: TextConfig = field(default_factory=TextConfig)
    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    streaming: StreamingConfig = field(default_factory=StreamingConfig)

    correlation_id: Optional[str] = None
    logging_level: str = "INFO"
    collect_metrics: bool = True

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        try:
            self.text.__post_init__()
            self.streaming.__post_init__()
            if self.logging_level not in LOGGING_LEVELS:
                raise ValueError(f"logging_level must be one of {list(LOGGING_LEVELS)}")
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Field overrides; nested fields use ``section__field``

        Returns:
            New ParserConfig instance with overrides applied

        Example:
            >>> config = ParserConfig()
            >>> new_config = config.override(
            ...     text__trim=False,
            ...     streaming__chunk_size=4096
            ... )
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                section, field_name = key.split("__", 1)
                if section not in _SECTIONS:
                    raise ConfigValidationError(
                        f"Unknown configuration section '{section}'",
                        field_name=key,
                        suggestions=[f"Use one of {list(_SECTIONS)}"],
                    )
                nested_overrides.setdefault(section, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = {}
        try:
            for section, overrides in nested_overrides.items():
                new_fields[section] = replace(getattr(self, section), **overrides)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e
        new_fields.update(top_level)

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            if isinstance(obj, (list, tuple)):
                return [_dataclass_to_dict(item) for item in obj]
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so typos in configuration files surface.
        """
        section_types = {
            "text": TextConfig,
            "tokenizer": TokenizerConfig,
            "streaming": StreamingConfig,
        }
        field_values: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in cls.__dataclass_fields__:
                raise ConfigValidationError(
                    f"Unknown configuration field '{key}'", field_name=key
                )
            if key in section_types:
                try:
                    field_values[key] = section_types[key](**value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            else:
                field_values[key] = value
        return cls(**field_values)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def default(cls) -> "ParserConfig":
        """Trim text values, no further text processing."""
        return cls(name="default")

    @classmethod
    def normalized(cls) -> "ParserConfig":
        """Trim, collapse whitespace runs and apply NFC normalization."""
        return cls(
            text=TextConfig(
                trim=True,
                normalize_whitespace=True,
                unicode_normalization="NFC",
            ),
            name="normalized",
            description="Text values trimmed, whitespace collapsed, NFC normalized",
        )

    @classmethod
    def raw(cls) -> "ParserConfig":
        """Deliver text values exactly as the document holds them."""
        return cls(
            text=TextConfig(trim=False, normalize_whitespace=False),
            name="raw",
            description="Text values delivered verbatim",
        )

    @classmethod
    def preset(cls, name: str) -> "ParserConfig":
        """Look up a preset by name."""
        presets = {
            "default": cls.default,
            "normalized": cls.normalized,
            "raw": cls.raw,
        }
        if name not in presets:
            raise ConfigValidationError(
                f"Unknown preset '{name}'",
                suggestions=[f"Use one of {sorted(presets)}"],
            )
        return presets[name]()
