#!/usr/bin/env python3
"""
snapshot.py
-----------
Load a corpus directory into typed records, and write results out.

Corpus layout:
    corpus/
    ├── entities.yaml         # list of entities (required)
    ├── relationships.yaml    # list of relationship edges (optional)
    ├── events.yaml           # list of narrative events (optional)
    └── chronicles/
        └── <id>.yaml         # one chronicle per file

Reading uses PyYAML ``safe_load``; writing entities back goes through
the round-trip writer in store.py so hand-edited files keep their
formatting. Scan results and patch sets are dumped as plain YAML.

Usage:
    from namesweep.rename.snapshot import load_corpus

    corpus = load_corpus(Path("world/"))
    entity = corpus.entity("npc-7")
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, TypeVar

# --- Third-party imports ---
import yaml

# --- Local imports ---
from namesweep.core.exceptions import SnapshotError
from namesweep.core.paths import (
    CHRONICLES_DIR,
    ENTITIES_FILE,
    EVENTS_FILE,
    RELATIONSHIPS_FILE,
)
from namesweep.rename.models import Chronicle, Entity, NarrativeEvent, Relationship
from namesweep.rename.store import write_record_list

R = TypeVar("R")


@dataclass
class CorpusSnapshot:
    """
    In-memory view of a corpus directory.

    Attributes:
        root: The corpus directory
        entities: All entities, file order
        chronicles: All chronicles, sorted by file name
        relationships: Relationship edges
        events: Narrative events
    """

    root: Path
    entities: List[Entity] = field(default_factory=list)
    chronicles: List[Chronicle] = field(default_factory=list)
    relationships: List[Relationship] = field(default_factory=list)
    events: List[NarrativeEvent] = field(default_factory=list)

    @property
    def chronicles_dir(self) -> Path:
        return self.root / CHRONICLES_DIR

    @property
    def entities_path(self) -> Path:
        return self.root / ENTITIES_FILE

    @property
    def events_path(self) -> Path:
        return self.root / EVENTS_FILE

    def entity(self, entity_id: str) -> Optional[Entity]:
        for entity in self.entities:
            if entity.id == entity_id:
                return entity
        return None


def _read_yaml(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise SnapshotError(f"Cannot read {path}: {e}") from e


def _read_list(path: Path, parse: Callable[[Any], R], required: bool = False) -> List[R]:
    """Parse a YAML list file; a missing optional file is an empty list."""
    if not path.exists():
        if required:
            raise SnapshotError(f"Missing required corpus file: {path}")
        return []

    data = _read_yaml(path)
    if data is None:
        return []
    if not isinstance(data, list):
        raise SnapshotError(f"{path} must contain a list, got {type(data).__name__}")
    return [parse(item) for item in data]


def _read_chronicles(directory: Path) -> List[Chronicle]:
    if not directory.is_dir():
        return []

    chronicles: List[Chronicle] = []
    for path in sorted(directory.glob("*.yaml")):
        data = _read_yaml(path)
        if not data:
            continue
        chronicle = Chronicle.from_dict(data)
        if chronicle.id != path.stem:
            raise SnapshotError(
                f"Chronicle id '{chronicle.id}' does not match file name {path.name}"
            )
        chronicles.append(chronicle)
    return chronicles


def load_corpus(path: Path) -> CorpusSnapshot:
    """
    Load a corpus directory.

    Args:
        path: Corpus directory

    Returns:
        CorpusSnapshot with every record parsed

    Raises:
        SnapshotError: If the directory or entities.yaml is missing, a
            file is not valid YAML, or a record is malformed
    """
    root = Path(path)
    if not root.is_dir():
        raise SnapshotError(f"Corpus directory not found: {root}")

    entities = _read_list(root / ENTITIES_FILE, Entity.from_dict, required=True)
    ids = [e.id for e in entities]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise SnapshotError(f"Duplicate entity ids in {ENTITIES_FILE}: {duplicates}")

    return CorpusSnapshot(
        root=root,
        entities=entities,
        chronicles=_read_chronicles(root / CHRONICLES_DIR),
        relationships=_read_list(root / RELATIONSHIPS_FILE, Relationship.from_dict),
        events=_read_list(root / EVENTS_FILE, NarrativeEvent.from_dict),
    )


def save_entities(path: Path, entities: Sequence[Entity]) -> None:
    """Write entities back to ``<path>/entities.yaml``, keeping its formatting."""
    write_record_list(Path(path) / ENTITIES_FILE, entities)


def write_yaml(path: Path, data: Any) -> None:
    """Dump plain data (scan results, patch sets) as YAML."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True, width=100)
