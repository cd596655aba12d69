#!/usr/bin/env python3
"""
patches.py
----------
Turn a reviewed scan into typed, per-record rename patches.

A patch holds two kinds of change for one record:

- text splices: ``field -> [FieldReplacement]``, each replacing
  ``original_length`` characters at ``position`` of that field;
- structured updates: a tagged union with one variant per denormalized
  name field (role, lens, directive, event subject, participant,
  related entity).

Patches are plain data. Nothing here touches a record; see apply.py.

Decision rules:
    - no decision, or reject: no change
    - accept: the new name
    - edit: the decision's edit text (the new name if none was given)
    - id_slug matches never produce changes
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Tuple, Union

# --- Local imports ---
from namesweep.core.exceptions import RenameError
from namesweep.rename.models import (
    Decision,
    DecisionAction,
    Match,
    MatchType,
    RenameScanResult,
    SourceType,
)


# ==================== Text splices ====================

@dataclass(frozen=True)
class FieldReplacement:
    """Replace ``original_length`` chars at ``position`` with ``replacement``."""

    position: int
    original_length: int
    replacement: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position,
            "originalLength": self.original_length,
            "replacement": self.replacement,
        }


# ==================== Structured updates ====================

@dataclass(frozen=True)
class RoleNameUpdate:
    """Set ``roleAssignments[index].entityName``."""

    index: int
    entity_name: str
    kind = "role_name"


@dataclass(frozen=True)
class LensNameUpdate:
    """Set ``lens.entityName``."""

    entity_name: str
    kind = "lens_name"


@dataclass(frozen=True)
class DirectiveNameUpdate:
    """Set ``directives[index].entityName``."""

    index: int
    entity_name: str
    kind = "directive_name"


@dataclass(frozen=True)
class EventSubjectNameUpdate:
    """Set ``subject.name``."""

    name: str
    kind = "subject_name"


@dataclass(frozen=True)
class EventParticipantNameUpdate:
    """Set ``participantEffects[participant_index].entity.name``."""

    participant_index: int
    name: str
    kind = "participant_name"


@dataclass(frozen=True)
class EventRelatedEntityNameUpdate:
    """Set ``participantEffects[p].effects[e].relatedEntity.name``."""

    participant_index: int
    effect_index: int
    name: str
    kind = "related_entity_name"


ChronicleUpdate = Union[RoleNameUpdate, LensNameUpdate, DirectiveNameUpdate]
EventUpdate = Union[
    EventSubjectNameUpdate, EventParticipantNameUpdate, EventRelatedEntityNameUpdate
]
StructuredUpdate = Union[ChronicleUpdate, EventUpdate]


def update_to_dict(update: StructuredUpdate) -> Dict[str, Any]:
    """Serialize a structured update with its ``kind`` tag."""
    out: Dict[str, Any] = {"kind": update.kind}
    for key, value in vars(update).items():
        parts = key.split("_")
        out[parts[0] + "".join(p.title() for p in parts[1:])] = value
    return out


_ROLE_FIELD = re.compile(r"^roleAssignments\[(\d+)\]\.entityName$")
_DIRECTIVE_FIELD = re.compile(r"^directives\[(\d+)\]\.entityName$")
_PARTICIPANT_FIELD = re.compile(r"^participantEffects\[(\d+)\]\.entity\.name$")
_RELATED_FIELD = re.compile(
    r"^participantEffects\[(\d+)\]\.effects\[(\d+)\]\.relatedEntity\.name$"
)


def structured_update_for(match: Match, value: str) -> StructuredUpdate:
    """
    Map a metadata match's field to its structured update variant.

    Raises:
        RenameError: If the field is not a known denormalized name field
            for the match's record kind
    """
    path = match.field
    if match.source_type is SourceType.CHRONICLE:
        if path == "lens.entityName":
            return LensNameUpdate(value)
        m = _ROLE_FIELD.match(path)
        if m:
            return RoleNameUpdate(int(m.group(1)), value)
        m = _DIRECTIVE_FIELD.match(path)
        if m:
            return DirectiveNameUpdate(int(m.group(1)), value)
    elif match.source_type is SourceType.EVENT:
        if path == "subject.name":
            return EventSubjectNameUpdate(value)
        m = _PARTICIPANT_FIELD.match(path)
        if m:
            return EventParticipantNameUpdate(int(m.group(1)), value)
        m = _RELATED_FIELD.match(path)
        if m:
            return EventRelatedEntityNameUpdate(int(m.group(1)), int(m.group(2)), value)

    raise RenameError(
        f"Unrecognized metadata field '{path}' on {match.source_type.value} {match.source_id}"
    )


# ==================== Patches ====================

Replacements = Dict[str, Tuple[FieldReplacement, ...]]


def _replacements_to_dict(replacements: Replacements) -> Dict[str, List[Dict[str, Any]]]:
    return {f: [r.to_dict() for r in reps] for f, reps in replacements.items()}


@dataclass(frozen=True)
class EntityPatch:
    """Text splices for one entity."""

    entity_id: str
    replacements: Replacements = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entityId": self.entity_id,
            "replacements": _replacements_to_dict(self.replacements),
        }


@dataclass(frozen=True)
class ChroniclePatch:
    """Structured updates and text splices for one chronicle."""

    chronicle_id: str
    replacements: Replacements = field(default_factory=dict)
    updates: Tuple[ChronicleUpdate, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chronicleId": self.chronicle_id,
            "replacements": _replacements_to_dict(self.replacements),
            "updates": [update_to_dict(u) for u in self.updates],
        }


@dataclass(frozen=True)
class EventPatch:
    """Structured updates and text splices for one narrative event."""

    event_id: str
    replacements: Replacements = field(default_factory=dict)
    updates: Tuple[EventUpdate, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "eventId": self.event_id,
            "replacements": _replacements_to_dict(self.replacements),
            "updates": [update_to_dict(u) for u in self.updates],
        }


@dataclass(frozen=True)
class RenamePatches:
    """Every patch produced for one rename."""

    entity_patches: Tuple[EntityPatch, ...] = ()
    chronicle_patches: Tuple[ChroniclePatch, ...] = ()
    event_patches: Tuple[EventPatch, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.entity_patches or self.chronicle_patches or self.event_patches)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entityPatches": [p.to_dict() for p in self.entity_patches],
            "chroniclePatches": [p.to_dict() for p in self.chronicle_patches],
            "eventPatches": [p.to_dict() for p in self.event_patches],
        }


# ==================== Builder ====================

def replacement_text(decision: Decision, new_name: str) -> str:
    """Text a non-reject decision writes."""
    if decision.action is DecisionAction.EDIT and decision.edit_text is not None:
        return decision.edit_text
    return new_name


def build_rename_patches(
    scan_result: RenameScanResult,
    new_name: str,
    decisions: Iterable[Decision],
) -> RenamePatches:
    """
    Build per-record patches from a scan result and reviewer decisions.

    Args:
        scan_result: Result of scan_for_references
        new_name: The entity's new name
        decisions: One decision per match id; later duplicates win and
            missing ids count as reject

    Returns:
        RenamePatches with one patch per affected record, in the order
        records first appear among the accepted matches

    Raises:
        RenameError: If a metadata match names an unknown field
    """
    decision_map = {d.match_id: d for d in decisions}

    # (source_type, source_id) -> field -> splices; dicts keep first-seen order
    text: Dict[Tuple[SourceType, str], Dict[str, List[FieldReplacement]]] = {}
    structured: Dict[Tuple[SourceType, str], List[StructuredUpdate]] = {}
    order: Dict[Tuple[SourceType, str], None] = {}

    for match in scan_result.matches:
        decision = decision_map.get(match.id)
        if decision is None or decision.action is DecisionAction.REJECT:
            continue
        if match.match_type is MatchType.ID_SLUG:
            continue

        value = replacement_text(decision, new_name)
        record_key = (match.source_type, match.source_id)
        order.setdefault(record_key, None)

        if match.match_type is MatchType.METADATA:
            structured.setdefault(record_key, []).append(
                structured_update_for(match, value)
            )
        else:
            text.setdefault(record_key, {}).setdefault(match.field, []).append(
                FieldReplacement(match.position, len(match.matched_text), value)
            )

    entity_patches: List[EntityPatch] = []
    chronicle_patches: List[ChroniclePatch] = []
    event_patches: List[EventPatch] = []

    for record_key in order:
        source_type, source_id = record_key
        replacements = {
            f: tuple(reps) for f, reps in text.get(record_key, {}).items()
        }
        updates = tuple(structured.get(record_key, ()))

        if source_type is SourceType.ENTITY:
            entity_patches.append(EntityPatch(source_id, replacements))
        elif source_type is SourceType.CHRONICLE:
            chronicle_patches.append(
                ChroniclePatch(source_id, replacements, updates)  # type: ignore[arg-type]
            )
        else:
            event_patches.append(
                EventPatch(source_id, replacements, updates)  # type: ignore[arg-type]
            )

    return RenamePatches(
        entity_patches=tuple(entity_patches),
        chronicle_patches=tuple(chronicle_patches),
        event_patches=tuple(event_patches),
    )
