#!/usr/bin/env python3
"""
config.py
---------
Tunable settings for scanning and review.

Defaults reproduce the stock behaviour; a YAML file can override any
subset of them:

    context_size: 80
    min_partial_length: 4
    stop_words: [the, of, and]
    default_accept: [full, metadata]

Usage:
    from namesweep.core.config import RenameConfig

    config = RenameConfig.from_yaml(Path("namesweep.yaml"))
    result = scan_for_references(..., config=config)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional

# --- Third-party imports ---
import yaml

# --- Local imports ---
from namesweep.core.exceptions import ConfigError


STOP_WORDS: FrozenSet[str] = frozenset({
    "the", "a", "an", "of", "in", "on", "at", "to", "for", "and", "or",
    "but", "is", "was", "are", "were", "be", "been", "by", "with", "from",
    "as", "its", "that", "this", "it", "no", "not",
})

MATCH_TYPES = ("full", "partial", "metadata", "id_slug")


@dataclass(frozen=True)
class RenameConfig:
    """
    Settings shared by the scanner and the review layer.

    Attributes:
        context_size: Characters of context captured either side of a match
        min_partial_length: Shortest partial-name slug worth searching for
        stop_words: Words never searched for on their own
        default_accept: Match types accepted when no decision is given
    """

    context_size: int = 60
    min_partial_length: int = 3
    stop_words: FrozenSet[str] = STOP_WORDS
    default_accept: FrozenSet[str] = field(
        default_factory=lambda: frozenset({"full", "metadata"})
    )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "RenameConfig":
        """
        Build a config from a mapping of overrides.

        Raises:
            ConfigError: On unknown keys or values of the wrong type
        """
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"Config must be a mapping, got {type(data).__name__}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {unknown}")

        values: Dict[str, Any] = {}
        for key in ("context_size", "min_partial_length"):
            if key in data:
                value = data[key]
                if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                    raise ConfigError(f"{key} must be a non-negative integer")
                values[key] = value

        if "stop_words" in data:
            words = data["stop_words"]
            if not isinstance(words, list) or not all(isinstance(w, str) for w in words):
                raise ConfigError("stop_words must be a list of strings")
            values["stop_words"] = frozenset(w.lower() for w in words)

        if "default_accept" in data:
            types = data["default_accept"]
            if not isinstance(types, list) or any(t not in MATCH_TYPES for t in types):
                raise ConfigError(
                    f"default_accept must be a list drawn from {list(MATCH_TYPES)}"
                )
            values["default_accept"] = frozenset(types)

        return cls(**values)

    @classmethod
    def from_yaml(cls, path: Path) -> "RenameConfig":
        """
        Load overrides from a YAML file.

        Raises:
            ConfigError: If the file cannot be read or parsed
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        return cls.from_dict(data)


DEFAULT_CONFIG = RenameConfig()
