#!/usr/bin/env python3
"""
scope.py
--------
Corpus tiering for reference scans.

How aggressively a record is searched depends on how close it sits to
the renamed entity. Closeness comes from hard links only, never from
text:

    SELF               the entity's own record          full + partial
    RELATED            one relationship hop away        full + partial
    CAST               chronicles with the entity cast  full + partial + metadata
    GENERAL            everything else                  full only (+ chronicle metadata)
    EVENT_PARTICIPANT  events the entity takes part in  full + partial + metadata
    EVENT_OTHER        all other events                 full only

Partial names ("Widow" for "Frost Widow") are only searched where the
record is already known to be about the entity; in the general sweep a
bare "widow" is far more likely to be an unrelated word.

Entity tiers are disjoint (SELF, RELATED, GENERAL) as are chronicle
tiers (CAST, GENERAL) and event tiers. Scopes come out in scan order:
closest tier first.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Union

# --- Local imports ---
from namesweep.rename.models import Chronicle, Entity, NarrativeEvent, Relationship


class Tier(str, Enum):
    """Scanning tier of a record."""

    SELF = "self"
    RELATED = "related"
    CAST = "cast"
    GENERAL = "general"
    EVENT_PARTICIPANT = "event_participant"
    EVENT_OTHER = "event_other"

    @property
    def allows_partials(self) -> bool:
        return self in _PARTIAL_TIERS

    @property
    def checks_event_metadata(self) -> bool:
        return self is Tier.EVENT_PARTICIPANT


_PARTIAL_TIERS = frozenset({Tier.SELF, Tier.RELATED, Tier.CAST, Tier.EVENT_PARTICIPANT})


@dataclass(frozen=True)
class ScanScope:
    """A record paired with the tier it is scanned under."""

    tier: Tier
    record: Union[Entity, Chronicle, NarrativeEvent]

    @property
    def allow_partials(self) -> bool:
        return self.tier.allows_partials


class ScopeSelector:
    """
    Partition a corpus snapshot into scanning tiers for one entity.

    Attributes:
        entity_id: Id of the entity being renamed
        related_entity_ids: Ids one relationship hop away, first-seen order
        cast_chronicle_ids: Ids of chronicles casting the entity
        participant_event_ids: Ids of events involving the entity
    """

    def __init__(
        self,
        entity_id: str,
        entities: Sequence[Entity],
        chronicles: Sequence[Chronicle],
        relationships: Optional[Sequence[Relationship]] = None,
        events: Optional[Sequence[NarrativeEvent]] = None,
    ) -> None:
        self.entity_id = entity_id
        self.entities = list(entities)
        self.chronicles = list(chronicles)
        self.relationships = list(relationships or ())
        self.events = list(events or ())
        self.entity_by_id: Dict[str, Entity] = {e.id: e for e in self.entities}

        # dicts keep first-seen order
        related: Dict[str, None] = {}
        for rel in self.touching_relationships():
            other = rel.other(entity_id)
            if other != entity_id:
                related.setdefault(other, None)
        self.related_entity_ids: List[str] = list(related)

        self.cast_chronicle_ids = {
            c.id for c in self.chronicles if entity_id in c.selected_entity_ids
        }
        self.participant_event_ids = {
            e.id for e in self.events if e.involves(entity_id)
        }

    # ---- Structural links ----

    def touching_relationships(self) -> List[Relationship]:
        """Relationship edges with the entity at either end."""
        return [r for r in self.relationships if r.touches(self.entity_id)]

    def cast_chronicles(self) -> List[Chronicle]:
        """Chronicles whose cast includes the entity, in corpus order."""
        return [c for c in self.chronicles if c.id in self.cast_chronicle_ids]

    def display_name(self, entity_id: str) -> str:
        """Entity name for display, falling back to the id."""
        entity = self.entity_by_id.get(entity_id)
        return entity.name if entity and entity.name else entity_id

    # ---- Tiered scopes ----

    def entity_scopes(self) -> List[ScanScope]:
        """SELF, then RELATED in first-seen order, then GENERAL in corpus order."""
        scopes: List[ScanScope] = []

        target = self.entity_by_id.get(self.entity_id)
        if target is not None:
            scopes.append(ScanScope(Tier.SELF, target))

        for rel_id in self.related_entity_ids:
            related = self.entity_by_id.get(rel_id)
            if related is not None:
                scopes.append(ScanScope(Tier.RELATED, related))

        close_ids = {self.entity_id, *self.related_entity_ids}
        scopes.extend(
            ScanScope(Tier.GENERAL, e) for e in self.entities if e.id not in close_ids
        )
        return scopes

    def chronicle_scopes(self) -> List[ScanScope]:
        """CAST chronicles first, then GENERAL, each in corpus order."""
        cast = [ScanScope(Tier.CAST, c) for c in self.cast_chronicles()]
        general = [
            ScanScope(Tier.GENERAL, c)
            for c in self.chronicles
            if c.id not in self.cast_chronicle_ids
        ]
        return cast + general

    def event_scopes(self) -> List[ScanScope]:
        """Events in corpus order, tiered by participation."""
        return [
            ScanScope(
                Tier.EVENT_PARTICIPANT if e.id in self.participant_event_ids else Tier.EVENT_OTHER,
                e,
            )
            for e in self.events
        ]

    def tier_counts(self) -> Dict[str, int]:
        """Number of records per tier, for logging."""
        counts: Dict[str, int] = {}
        scopes: Iterable[ScanScope] = (
            self.entity_scopes() + self.chronicle_scopes() + self.event_scopes()
        )
        for scope in scopes:
            counts[scope.tier.value] = counts.get(scope.tier.value, 0) + 1
        return counts
