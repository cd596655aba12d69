#!/usr/bin/env python3
"""
store.py
--------
YAML-file record stores behind the patch executors' get/put boundary.

Two layouts are supported:

    YamlRecordStore  one record per file, ``<directory>/<id>.yaml``
                     (chronicles)
    EventListStore   every record in one list file (events.yaml)

Writes are format-preserving. ``put`` loads the existing document with a
ruamel.yaml round-trip parser and merges the record's values into it:
unchanged scalars are left as they were (quoting, block style and
comments included), changed strings keep their scalar style, and keys
the model does not know about are never dropped. Only the values that
actually changed are rewritten.

Usage:
    from namesweep.rename.store import YamlRecordStore

    store = YamlRecordStore(corpus / "chronicles", Chronicle)
    count = await apply_chronicle_patches(patches, store.get, store.put)

Dependencies:
    - ruamel.yaml for format-preserving YAML round-trip
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from pathlib import Path
from typing import Any, Generic, List, Mapping, Optional, Sequence, Type, TypeVar

# --- Third-party imports ---
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.error import YAMLError
from ruamel.yaml.scalarstring import ScalarString

# --- Local imports ---
from namesweep.core.exceptions import PatchApplyError
from namesweep.rename.models import NarrativeEvent

R = TypeVar("R")


def round_trip_yaml() -> YAML:
    """ruamel.yaml instance configured for round-trip editing."""
    ryaml = YAML()
    ryaml.preserve_quotes = True
    ryaml.width = 4096
    return ryaml


# ==================== Merge ====================

def _is_empty(value: Any) -> bool:
    return value in ("", [], {})


def merge_value(old: Any, new: Any) -> Any:
    """
    Merge ``new`` into the round-trip node ``old``.

    Returns:
        The node to store in place of ``old``
    """
    if isinstance(old, CommentedMap) and isinstance(new, Mapping):
        merge_mapping(old, new)
        return old
    if isinstance(old, CommentedSeq) and isinstance(new, list) and len(old) == len(new):
        for i, item in enumerate(new):
            old[i] = merge_value(old[i], item)
        return old
    if old == new:
        return old
    if (
        isinstance(new, str)
        and old is not None
        and not isinstance(old, (str, bool))
        and str(old) == new
    ):
        # models read ids and numbers back as strings; keep the unquoted scalar
        return old
    if isinstance(old, ScalarString) and isinstance(new, str):
        # keep literal/folded/quoted style
        return type(old)(new)
    return new


def merge_mapping(target: CommentedMap, data: Mapping[str, Any]) -> None:
    """
    Merge ``data`` into ``target`` in place.

    Keys absent from ``data`` are kept. Empty values are not added for
    keys the document never had.
    """
    for key, value in data.items():
        if key in target:
            target[key] = merge_value(target[key], value)
        elif not _is_empty(value):
            target[key] = value


# ==================== Stores ====================

class YamlRecordStore(Generic[R]):
    """
    One YAML file per record.

    Attributes:
        directory: Directory holding ``<id>.yaml`` files
        model: Record class with ``from_dict``/``to_dict``
    """

    def __init__(self, directory: Path, model: Type[R]) -> None:
        self.directory = Path(directory)
        self.model = model
        self._yaml = round_trip_yaml()

    def path_for(self, record_id: str) -> Path:
        return self.directory / f"{record_id}.yaml"

    def _load(self, path: Path) -> Any:
        try:
            with open(path, encoding="utf-8") as f:
                return self._yaml.load(f)
        except (OSError, YAMLError) as e:
            raise PatchApplyError(f"Cannot read {path}: {e}") from e

    def _save(self, path: Path, data: Any) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                self._yaml.dump(data, f)
        except (OSError, YAMLError) as e:
            raise PatchApplyError(f"Cannot write {path}: {e}") from e

    async def get(self, record_id: str) -> Optional[R]:
        """Load a record, or None if it has no file."""
        path = self.path_for(record_id)
        if not path.exists():
            return None
        data = self._load(path)
        if not data:
            return None
        return self.model.from_dict(data)  # type: ignore[attr-defined]

    async def put(self, record: R) -> None:
        """
        Write a record, merging into its existing file if there is one.

        Raises:
            PatchApplyError: If the file cannot be read or written
        """
        data = record.to_dict()  # type: ignore[attr-defined]
        path = self.path_for(data["id"])

        document = self._load(path) if path.exists() else None
        if isinstance(document, CommentedMap):
            merge_mapping(document, data)
        else:
            document = data
        self._save(path, document)


class EventListStore:
    """
    Narrative events kept as a single YAML list.

    ``get`` and ``put`` read the file on every call so that a sequence of
    puts composes without a cache.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._yaml = round_trip_yaml()

    def _load(self) -> CommentedSeq:
        if not self.path.exists():
            return CommentedSeq()
        try:
            with open(self.path, encoding="utf-8") as f:
                data = self._yaml.load(f)
        except (OSError, YAMLError) as e:
            raise PatchApplyError(f"Cannot read {self.path}: {e}") from e
        if data is None:
            return CommentedSeq()
        if not isinstance(data, list):
            raise PatchApplyError(f"{self.path} must contain a list of events")
        return data

    def _save(self, data: Any) -> None:
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                self._yaml.dump(data, f)
        except (OSError, YAMLError) as e:
            raise PatchApplyError(f"Cannot write {self.path}: {e}") from e

    async def get(self, event_id: str) -> Optional[NarrativeEvent]:
        for item in self._load():
            if isinstance(item, Mapping) and str(item.get("id")) == event_id:
                return NarrativeEvent.from_dict(item)
        return None

    async def put(self, event: NarrativeEvent) -> None:
        """
        Replace the event with the same id, or append it.

        Raises:
            PatchApplyError: If the file cannot be read or written
        """
        items = self._load()
        data = event.to_dict()
        for i, item in enumerate(items):
            if isinstance(item, Mapping) and str(item.get("id")) == event.id:
                items[i] = merge_value(item, data)
                break
        else:
            items.append(data)
        self._save(items)


def write_record_list(path: Path, records: Sequence[Any]) -> None:
    """
    Write a list of records to one YAML file, merging by id.

    Records already in the file keep their formatting. When the file
    holds exactly the same ids in the same order it is merged in place
    (comments between items survive); otherwise the list is rebuilt from
    ``records`` with existing items merged by id.

    Raises:
        PatchApplyError: If the file cannot be read or written
    """
    ryaml = round_trip_yaml()
    existing: Any = None
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                existing = ryaml.load(f)
        except (OSError, YAMLError) as e:
            raise PatchApplyError(f"Cannot read {path}: {e}") from e

    new_items = [record.to_dict() for record in records]
    old_items = existing if isinstance(existing, CommentedSeq) else CommentedSeq()
    old_ids = [str(item.get("id")) if isinstance(item, Mapping) else None for item in old_items]

    if old_ids == [item["id"] for item in new_items]:
        document = old_items
        for i, data in enumerate(new_items):
            document[i] = merge_value(document[i], data)
    else:
        by_id = {oid: item for oid, item in zip(old_ids, old_items) if oid is not None}
        output: List[Any] = [
            merge_value(by_id[data["id"]], data) if data["id"] in by_id else data
            for data in new_items
        ]
        document = CommentedSeq(output)

    try:
        with open(path, "w", encoding="utf-8") as f:
            ryaml.dump(document, f)
    except (OSError, YAMLError) as e:
        raise PatchApplyError(f"Cannot write {path}: {e}") from e
