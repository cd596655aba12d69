#!/usr/bin/env python3
"""
models.py
---------
Typed records for the rename engine.

Input records (entities, chronicles, relationship edges, narrative
events) are frozen dataclasses built from the camelCase dictionaries of
the corpus files with ``from_dict`` and written back with ``to_dict``.
Keys a model does not know about are kept in ``extra`` so a
load/save round trip never drops data.

Records are immutable: patch executors derive updated copies with
``dataclasses.replace`` and leave the originals untouched.

Output records (Match, Decision, RenameScanResult) are plain data and
serialize the same way.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

# --- Local imports ---
from namesweep.core.exceptions import DecisionError, SnapshotError


# ==================== Enumerations ====================

class SourceType(str, Enum):
    """Kind of record a match was found in."""

    ENTITY = "entity"
    CHRONICLE = "chronicle"
    EVENT = "event"


class MatchType(str, Enum):
    """
    How a match was found.

    FULL and PARTIAL come from text search, METADATA from a denormalized
    name field matched by entity id, ID_SLUG from a structural link
    (relationship edge or cast membership) and is informational only.
    """

    FULL = "full"
    PARTIAL = "partial"
    METADATA = "metadata"
    ID_SLUG = "id_slug"


class DecisionAction(str, Enum):
    """Reviewer verdict on a single match."""

    ACCEPT = "accept"
    REJECT = "reject"
    EDIT = "edit"


# ==================== Helpers ====================

def _require(data: Mapping[str, Any], key: str, what: str) -> Any:
    """Fetch a required key or raise SnapshotError naming the record kind."""
    if not isinstance(data, Mapping):
        raise SnapshotError(f"{what} record must be a mapping, got {type(data).__name__}")
    if data.get(key) is None:
        raise SnapshotError(f"{what} record missing '{key}': {dict(data)}")
    return data[key]


def _optional_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    return None if value is None else str(value)


def _extra(data: Mapping[str, Any], known: Tuple[str, ...]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k not in known}


def _prune(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop None values so optional fields stay absent on write."""
    return {k: v for k, v in data.items() if v is not None}


# ==================== Entities ====================

@dataclass(frozen=True)
class DescriptionVersion:
    """
    A superseded entity description.

    Attributes:
        description: The old description text
        replaced_at: When it was replaced (ms since epoch), if known
        source: What replaced it, if known
    """

    description: str
    replaced_at: Optional[int] = None
    source: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "DescriptionVersion":
        if isinstance(data, str):
            return cls(description=data)
        return cls(
            description=str(_require(data, "description", "Description history")),
            replaced_at=data.get("replacedAt"),
            source=_optional_str(data, "source"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _prune({
            "description": self.description,
            "replacedAt": self.replaced_at,
            "source": self.source,
        })


_ENTITY_KEYS = (
    "id", "name", "kind", "subtype", "summary", "description", "hint",
    "descriptionHistory", "slugAliases",
)


@dataclass(frozen=True)
class Entity:
    """
    A named world entity.

    Attributes:
        id: Stable entity id
        name: Display name
        kind: Entity kind (npc, faction, location, ...)
        subtype: Optional kind refinement
        summary: Short free-text summary
        description: Long free-text description
        hint: Narrative hint text
        description_history: Superseded descriptions, oldest first
        slug_aliases: Extra slugs that resolve to this entity
        extra: Unmodelled keys, preserved verbatim
    """

    id: str
    name: str
    kind: str = ""
    subtype: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    hint: Optional[str] = None
    description_history: Tuple[DescriptionVersion, ...] = ()
    slug_aliases: Tuple[str, ...] = ()
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Entity":
        return cls(
            id=str(_require(data, "id", "Entity")),
            name=str(_require(data, "name", "Entity")),
            kind=str(data.get("kind") or ""),
            subtype=_optional_str(data, "subtype"),
            summary=_optional_str(data, "summary"),
            description=_optional_str(data, "description"),
            hint=_optional_str(data, "hint"),
            description_history=tuple(
                DescriptionVersion.from_dict(v) for v in data.get("descriptionHistory") or ()
            ),
            slug_aliases=tuple(str(a) for a in data.get("slugAliases") or ()),
            extra=_extra(data, _ENTITY_KEYS),
        )

    def to_dict(self) -> Dict[str, Any]:
        out = _prune({
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "subtype": self.subtype,
            "summary": self.summary,
            "description": self.description,
            "hint": self.hint,
        })
        if self.description_history:
            out["descriptionHistory"] = [v.to_dict() for v in self.description_history]
        if self.slug_aliases:
            out["slugAliases"] = list(self.slug_aliases)
        out.update(self.extra)
        return out


# ==================== Chronicles ====================

@dataclass(frozen=True)
class RoleAssignment:
    """Cast role held by an entity, with its denormalized name."""

    entity_id: str
    entity_name: str
    role: str = ""
    entity_kind: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RoleAssignment":
        return cls(
            entity_id=str(_require(data, "entityId", "Role assignment")),
            entity_name=str(data.get("entityName") or ""),
            role=str(data.get("role") or ""),
            entity_kind=_optional_str(data, "entityKind"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _prune({
            "entityId": self.entity_id,
            "entityName": self.entity_name,
            "role": self.role,
            "entityKind": self.entity_kind,
        })


@dataclass(frozen=True)
class Lens:
    """The entity a chronicle is told through."""

    entity_id: str
    entity_name: str
    entity_kind: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Lens":
        return cls(
            entity_id=str(_require(data, "entityId", "Lens")),
            entity_name=str(data.get("entityName") or ""),
            entity_kind=_optional_str(data, "entityKind"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _prune({
            "entityId": self.entity_id,
            "entityName": self.entity_name,
            "entityKind": self.entity_kind,
        })


@dataclass(frozen=True)
class EntityDirective:
    """A generation directive about one entity."""

    entity_id: str
    entity_name: str
    directive: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EntityDirective":
        return cls(
            entity_id=str(_require(data, "entityId", "Directive")),
            entity_name=str(data.get("entityName") or ""),
            directive=str(data.get("directive") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entityId": self.entity_id,
            "entityName": self.entity_name,
            "directive": self.directive,
        }


@dataclass(frozen=True)
class HistoryVersion:
    """A stored earlier version of a chronicle's content."""

    version_id: str
    content: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HistoryVersion":
        return cls(
            version_id=str(_require(data, "versionId", "History version")),
            content=str(data.get("content") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"versionId": self.version_id, "content": self.content}


_CHRONICLE_KEYS = (
    "id", "title", "selectedEntityIds", "roleAssignments", "lens", "directives",
    "assembledContent", "finalContent", "summary", "history", "updatedAt",
)


@dataclass(frozen=True)
class Chronicle:
    """
    A composite narrative document with a cast.

    Attributes:
        id: Chronicle id
        title: Display title
        selected_entity_ids: Cast membership set
        role_assignments: Cast roles with denormalized entity names
        lens: Optional point-of-view entity
        directives: Per-entity generation directives
        assembled_content: Assembled draft text
        final_content: Final published text
        summary: Short summary text
        history: Earlier content versions
        updated_at: Last write time (ms since epoch)
        extra: Unmodelled keys, preserved verbatim
    """

    id: str
    title: str
    selected_entity_ids: Tuple[str, ...] = ()
    role_assignments: Tuple[RoleAssignment, ...] = ()
    lens: Optional[Lens] = None
    directives: Tuple[EntityDirective, ...] = ()
    assembled_content: Optional[str] = None
    final_content: Optional[str] = None
    summary: Optional[str] = None
    history: Tuple[HistoryVersion, ...] = ()
    updated_at: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Chronicle":
        lens = data.get("lens")
        return cls(
            id=str(_require(data, "id", "Chronicle")),
            title=str(data.get("title") or ""),
            selected_entity_ids=tuple(str(i) for i in data.get("selectedEntityIds") or ()),
            role_assignments=tuple(
                RoleAssignment.from_dict(r) for r in data.get("roleAssignments") or ()
            ),
            lens=Lens.from_dict(lens) if lens else None,
            directives=tuple(
                EntityDirective.from_dict(d) for d in data.get("directives") or ()
            ),
            assembled_content=_optional_str(data, "assembledContent"),
            final_content=_optional_str(data, "finalContent"),
            summary=_optional_str(data, "summary"),
            history=tuple(HistoryVersion.from_dict(h) for h in data.get("history") or ()),
            updated_at=data.get("updatedAt"),
            extra=_extra(data, _CHRONICLE_KEYS),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "selectedEntityIds": list(self.selected_entity_ids),
            "roleAssignments": [r.to_dict() for r in self.role_assignments],
        }
        if self.lens is not None:
            out["lens"] = self.lens.to_dict()
        if self.directives:
            out["directives"] = [d.to_dict() for d in self.directives]
        out.update(_prune({
            "assembledContent": self.assembled_content,
            "finalContent": self.final_content,
            "summary": self.summary,
        }))
        if self.history:
            out["history"] = [h.to_dict() for h in self.history]
        if self.updated_at is not None:
            out["updatedAt"] = self.updated_at
        out.update(self.extra)
        return out


# ==================== Relationships ====================

@dataclass(frozen=True)
class Relationship:
    """A directed relationship edge between two entities."""

    kind: str
    src: str
    dst: str
    status: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Relationship":
        return cls(
            kind=str(_require(data, "kind", "Relationship")),
            src=str(_require(data, "src", "Relationship")),
            dst=str(_require(data, "dst", "Relationship")),
            status=_optional_str(data, "status"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _prune({
            "kind": self.kind,
            "src": self.src,
            "dst": self.dst,
            "status": self.status,
        })

    def touches(self, entity_id: str) -> bool:
        return self.src == entity_id or self.dst == entity_id

    def other(self, entity_id: str) -> str:
        """The endpoint that is not ``entity_id``."""
        return self.dst if self.src == entity_id else self.src


# ==================== Narrative events ====================

@dataclass(frozen=True)
class EntityRef:
    """An entity id with a denormalized name."""

    id: str
    name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EntityRef":
        return cls(
            id=str(_require(data, "id", "Entity reference")),
            name=str(data.get("name") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class Effect:
    """One effect of an event on a participant."""

    description: str = ""
    related_entity: Optional[EntityRef] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Effect":
        related = data.get("relatedEntity")
        return cls(
            description=str(data.get("description") or ""),
            related_entity=EntityRef.from_dict(related) if related else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"description": self.description}
        if self.related_entity is not None:
            out["relatedEntity"] = self.related_entity.to_dict()
        return out


@dataclass(frozen=True)
class ParticipantEffect:
    """Effects an event had on one participant."""

    entity: EntityRef
    effects: Tuple[Effect, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ParticipantEffect":
        return cls(
            entity=EntityRef.from_dict(_require(data, "entity", "Participant effect")),
            effects=tuple(Effect.from_dict(e) for e in data.get("effects") or ()),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entity": self.entity.to_dict(),
            "effects": [e.to_dict() for e in self.effects],
        }


_EVENT_KEYS = ("id", "subject", "action", "description", "participantEffects")


@dataclass(frozen=True)
class NarrativeEvent:
    """
    A simulation history event.

    Attributes:
        id: Event id
        subject: The entity the event is about
        action: Short action text
        description: Free-text description
        participant_effects: Per-participant effects
        extra: Unmodelled keys, preserved verbatim
    """

    id: str
    subject: EntityRef
    action: str = ""
    description: str = ""
    participant_effects: Tuple[ParticipantEffect, ...] = ()
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NarrativeEvent":
        return cls(
            id=str(_require(data, "id", "Event")),
            subject=EntityRef.from_dict(_require(data, "subject", "Event")),
            action=str(data.get("action") or ""),
            description=str(data.get("description") or ""),
            participant_effects=tuple(
                ParticipantEffect.from_dict(p) for p in data.get("participantEffects") or ()
            ),
            extra=_extra(data, _EVENT_KEYS),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "subject": self.subject.to_dict(),
            "action": self.action,
            "description": self.description,
            "participantEffects": [p.to_dict() for p in self.participant_effects],
        }
        out.update(self.extra)
        return out

    def involves(self, entity_id: str) -> bool:
        """True if the entity is the subject or a participant."""
        if self.subject.id == entity_id:
            return True
        return any(p.entity.id == entity_id for p in self.participant_effects)


# ==================== Scan output ====================

@dataclass(frozen=True)
class Match:
    """
    A single reference found by a scan.

    Attributes:
        id: Match id, unique within one scan
        source_type: Kind of record the match is in
        source_id: Id of that record
        source_name: Display name of that record
        field: Location of the match within the record
        match_type: How the match was found
        matched_text: Exact raw text of the span
        position: Raw offset of the span within the field (0 for
            metadata and id_slug matches)
        context_before: Display context preceding the span
        context_after: Display context following the span
        partial_fragment: The partial slug that matched, for partials
    """

    id: str
    source_type: SourceType
    source_id: str
    source_name: str
    field: str
    match_type: MatchType
    matched_text: str
    position: int = 0
    context_before: str = ""
    context_after: str = ""
    partial_fragment: Optional[str] = None

    @property
    def end(self) -> int:
        return self.position + len(self.matched_text)

    @property
    def is_text(self) -> bool:
        return self.match_type in (MatchType.FULL, MatchType.PARTIAL)

    def to_dict(self) -> Dict[str, Any]:
        return _prune({
            "id": self.id,
            "sourceType": self.source_type.value,
            "sourceId": self.source_id,
            "sourceName": self.source_name,
            "field": self.field,
            "matchType": self.match_type.value,
            "matchedText": self.matched_text,
            "position": self.position,
            "contextBefore": self.context_before,
            "contextAfter": self.context_after,
            "partialFragment": self.partial_fragment,
        })

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Match":
        try:
            source_type = SourceType(_require(data, "sourceType", "Match"))
            match_type = MatchType(_require(data, "matchType", "Match"))
            position = int(data.get("position") or 0)
        except ValueError as e:
            raise SnapshotError(f"Invalid match {data.get('id')!r}: {e}") from None
        return cls(
            id=str(_require(data, "id", "Match")),
            source_type=source_type,
            source_id=str(_require(data, "sourceId", "Match")),
            source_name=str(data.get("sourceName") or ""),
            field=str(_require(data, "field", "Match")),
            match_type=match_type,
            matched_text=str(data.get("matchedText") or ""),
            position=position,
            context_before=str(data.get("contextBefore") or ""),
            context_after=str(data.get("contextAfter") or ""),
            partial_fragment=_optional_str(data, "partialFragment"),
        )


@dataclass(frozen=True)
class Decision:
    """
    Reviewer verdict on one match.

    Attributes:
        match_id: Id of the match decided on
        action: accept, reject or edit
        edit_text: Replacement text for edit decisions
    """

    match_id: str
    action: DecisionAction
    edit_text: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Decision":
        """
        Raises:
            DecisionError: On missing match id or unknown action
        """
        if not isinstance(data, Mapping) or not data.get("matchId"):
            raise DecisionError(f"Decision missing 'matchId': {data}")
        try:
            action = DecisionAction(str(data.get("action", "")).lower())
        except ValueError:
            raise DecisionError(f"Unknown decision action: {data.get('action')!r}") from None
        edit_text = data.get("editText")
        if edit_text is not None and not isinstance(edit_text, str):
            raise DecisionError(f"editText must be a string for match {data['matchId']}")
        return cls(match_id=str(data["matchId"]), action=action, edit_text=edit_text)

    def to_dict(self) -> Dict[str, Any]:
        return _prune({
            "matchId": self.match_id,
            "action": self.action.value,
            "editText": self.edit_text,
        })


@dataclass(frozen=True)
class RenameScanResult:
    """All matches for one rename, in scan order."""

    entity_id: str
    old_name: str
    matches: Tuple[Match, ...] = ()

    def by_id(self) -> Dict[str, Match]:
        return {m.id: m for m in self.matches}

    def of_type(self, match_type: MatchType) -> List[Match]:
        return [m for m in self.matches if m.match_type == match_type]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entityId": self.entity_id,
            "oldName": self.old_name,
            "matches": [m.to_dict() for m in self.matches],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RenameScanResult":
        return cls(
            entity_id=str(_require(data, "entityId", "Scan result")),
            old_name=str(_require(data, "oldName", "Scan result")),
            matches=tuple(Match.from_dict(m) for m in data.get("matches") or ()),
        )
