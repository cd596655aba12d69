#!/usr/bin/env python3
"""
scanner.py
----------
Reference scanner: find every mention of an entity's name in a corpus.

The scan is pure. It reads an in-memory snapshot, performs no I/O and
produces the same matches, ids included, every time it is run over the
same snapshot with a fresh id allocator.

Scan order:
    1. SELF      entity's own text fields                full + partial
    2. RELATED   entities one relationship hop away      full + partial
    3. CAST      chronicles casting the entity           metadata, full + partial
    4. GENERAL   remaining entities, then chronicles     (metadata), full only
    5. EVENTS    participant events                      metadata, full + partial
                 other events                            full only
    6. ID_SLUG   relationship edges and cast memberships (informational)

Within each field the full name is searched first and every hit is
claimed in the overlap tracker; partial slugs follow longest first and
are dropped wherever they overlap something already claimed.

Usage:
    from namesweep.rename.scanner import scan_for_references

    result = scan_for_references(
        "npc-7", "Frost Widow", entities, chronicles, relationships, events
    )
    for match in result.matches:
        print(match.field, match.match_type.value, match.matched_text)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import List, Optional, Sequence

# --- Local imports ---
from namesweep.core.config import DEFAULT_CONFIG, RenameConfig
from namesweep.core.logging_manager import NamesweepLogger, safe_logger
from namesweep.rename.models import (
    Chronicle,
    Entity,
    Match,
    MatchType,
    NarrativeEvent,
    Relationship,
    RenameScanResult,
    SourceType,
)
from namesweep.rename.occurrences import extract_context, find_all_occurrences
from namesweep.rename.overlap import OverlapTracker
from namesweep.rename.scope import ScanScope, ScopeSelector
from namesweep.utils.name_matching import generate_partials
from namesweep.utils.slugify import normalize_for_match, normalize_slug

EVENT_NAME_LIMIT = 60
SNIPPET_LIMIT = 40


class MatchIdAllocator:
    """
    Caller-owned source of match ids ("rm-1", "rm-2", ...).

    Ids are unique per allocator. Concurrent scans must use separate
    allocators, or share one deliberately to get ids unique across them.
    """

    def __init__(self, prefix: str = "rm") -> None:
        self.prefix = prefix
        self._issued = 0

    def __call__(self) -> str:
        self._issued += 1
        return f"{self.prefix}-{self._issued}"

    @property
    def issued(self) -> int:
        return self._issued


def _truncate(text: str, limit: int) -> str:
    return text[: limit - 3] + "..." if len(text) > limit else text


def _snippet(text: str) -> str:
    return text[:SNIPPET_LIMIT] + ("..." if len(text) > SNIPPET_LIMIT else "")


class ReferenceScanner:
    """
    One scan over one snapshot for one entity.

    Attributes:
        entity_id: Entity being renamed
        old_name: Its current name
        full_slug: Matching slug of the full name
        partial_slugs: Partial-name slugs, longest first
        matches: Matches collected so far, in scan order
    """

    def __init__(
        self,
        entity_id: str,
        old_name: str,
        allocator: Optional[MatchIdAllocator] = None,
        config: Optional[RenameConfig] = None,
    ) -> None:
        self.entity_id = entity_id
        self.old_name = old_name
        self.config = config or DEFAULT_CONFIG
        self.next_id = allocator or MatchIdAllocator()
        self.full_slug = normalize_slug(old_name)
        self.partial_slugs = generate_partials(
            old_name,
            min_length=self.config.min_partial_length,
            stop_words=self.config.stop_words,
        )
        self.tracker = OverlapTracker()
        self.matches: List[Match] = []

    # ---- Text search ----

    def scan_text_field(
        self,
        source_type: SourceType,
        source_id: str,
        source_name: str,
        field: str,
        text: Optional[str],
        allow_partials: bool,
    ) -> None:
        """
        Search one free-text field and record non-overlapping matches.

        Absent or empty text yields nothing.
        """
        if not text:
            return

        norm = normalize_for_match(text)
        key = (source_type, source_id, field)

        slugs = [(self.full_slug, MatchType.FULL)]
        if allow_partials:
            slugs.extend((slug, MatchType.PARTIAL) for slug in self.partial_slugs)

        for slug, match_type in slugs:
            for span in find_all_occurrences(slug, norm.normalized, norm.index_map, text):
                if not self.tracker.claim(key, span.start, span.end):
                    continue
                before, after = extract_context(
                    text, span.start, span.end, self.config.context_size
                )
                self.matches.append(Match(
                    id=self.next_id(),
                    source_type=source_type,
                    source_id=source_id,
                    source_name=source_name,
                    field=field,
                    match_type=match_type,
                    matched_text=span.matched_text,
                    position=span.start,
                    context_before=before,
                    context_after=after,
                    partial_fragment=slug if match_type is MatchType.PARTIAL else None,
                ))

    def add_structural_match(
        self,
        source_type: SourceType,
        source_id: str,
        source_name: str,
        field: str,
        match_type: MatchType,
        matched_text: str,
        context_before: str,
        context_after: str,
    ) -> None:
        """Record a metadata or id_slug match (position 0, no overlap check)."""
        self.matches.append(Match(
            id=self.next_id(),
            source_type=source_type,
            source_id=source_id,
            source_name=source_name,
            field=field,
            match_type=match_type,
            matched_text=matched_text,
            position=0,
            context_before=context_before,
            context_after=context_after,
        ))

    # ---- Record scanners ----

    def scan_entity(self, scope: ScanScope) -> None:
        entity: Entity = scope.record  # type: ignore[assignment]
        partials = scope.allow_partials

        for field, text in (
            ("summary", entity.summary),
            ("description", entity.description),
            ("hint", entity.hint),
        ):
            self.scan_text_field(
                SourceType.ENTITY, entity.id, entity.name, field, text, partials
            )
        for i, version in enumerate(entity.description_history):
            self.scan_text_field(
                SourceType.ENTITY, entity.id, entity.name,
                f"descriptionHistory[{i}]", version.description, partials,
            )

    def scan_chronicle_metadata(self, chronicle: Chronicle) -> None:
        """Denormalized entity names, matched by id in every tier."""
        cid, title = chronicle.id, chronicle.title

        for i, ra in enumerate(chronicle.role_assignments):
            if ra.entity_id == self.entity_id:
                self.add_structural_match(
                    SourceType.CHRONICLE, cid, title,
                    f"roleAssignments[{i}].entityName", MatchType.METADATA,
                    ra.entity_name, f"Role: {ra.role}", f"({ra.entity_kind or ''})",
                )

        lens = chronicle.lens
        if lens is not None and lens.entity_id == self.entity_id:
            self.add_structural_match(
                SourceType.CHRONICLE, cid, title,
                "lens.entityName", MatchType.METADATA,
                lens.entity_name, "Lens:", f"({lens.entity_kind or ''})",
            )

        for i, directive in enumerate(chronicle.directives):
            if directive.entity_id == self.entity_id:
                self.add_structural_match(
                    SourceType.CHRONICLE, cid, title,
                    f"directives[{i}].entityName", MatchType.METADATA,
                    directive.entity_name, "Directive:", _snippet(directive.directive),
                )

    def scan_chronicle(self, scope: ScanScope) -> None:
        chronicle: Chronicle = scope.record  # type: ignore[assignment]
        cid, title = chronicle.id, chronicle.title
        partials = scope.allow_partials

        self.scan_chronicle_metadata(chronicle)

        for field, text in (
            ("assembledContent", chronicle.assembled_content),
            ("finalContent", chronicle.final_content),
            ("summary", chronicle.summary),
        ):
            self.scan_text_field(SourceType.CHRONICLE, cid, title, field, text, partials)
        for version in chronicle.history:
            self.scan_text_field(
                SourceType.CHRONICLE, cid, title,
                f"history.{version.version_id}", version.content, partials,
            )

    def scan_event(self, scope: ScanScope) -> None:
        event: NarrativeEvent = scope.record  # type: ignore[assignment]
        eid = event.id
        name = _truncate(event.description, EVENT_NAME_LIMIT)
        partials = scope.allow_partials

        if scope.tier.checks_event_metadata:
            if event.subject.id == self.entity_id:
                self.add_structural_match(
                    SourceType.EVENT, eid, name, "subject.name", MatchType.METADATA,
                    event.subject.name, "Subject:", "",
                )
            for pi, pe in enumerate(event.participant_effects):
                if pe.entity.id == self.entity_id:
                    self.add_structural_match(
                        SourceType.EVENT, eid, name,
                        f"participantEffects[{pi}].entity.name", MatchType.METADATA,
                        pe.entity.name, "Participant:", "",
                    )
                for ei, effect in enumerate(pe.effects):
                    related = effect.related_entity
                    if related is not None and related.id == self.entity_id:
                        self.add_structural_match(
                            SourceType.EVENT, eid, name,
                            f"participantEffects[{pi}].effects[{ei}].relatedEntity.name",
                            MatchType.METADATA,
                            related.name, "Related entity:", effect.description[:SNIPPET_LIMIT],
                        )

        self.scan_text_field(SourceType.EVENT, eid, name, "description", event.description, partials)
        self.scan_text_field(SourceType.EVENT, eid, name, "action", event.action, partials)

        # Effect descriptions only matter for events the entity takes part in
        if scope.tier.checks_event_metadata:
            for pi, pe in enumerate(event.participant_effects):
                for ei, effect in enumerate(pe.effects):
                    self.scan_text_field(
                        SourceType.EVENT, eid, name,
                        f"participantEffects[{pi}].effects[{ei}].description",
                        effect.description, partials,
                    )

    def add_id_references(self, selector: ScopeSelector) -> None:
        """Informational id_slug matches for every hard link to the entity."""
        for rel in selector.touching_relationships():
            other_id = rel.other(self.entity_id)
            other_name = selector.display_name(other_id)
            direction = "outgoing" if rel.src == self.entity_id else "incoming"
            historical = " (historical)" if rel.status == "historical" else ""
            self.add_structural_match(
                SourceType.ENTITY, other_id, other_name,
                f"relationship.{rel.kind}", MatchType.ID_SLUG,
                self.entity_id, f"{direction} {rel.kind}:", f"→ {other_name}{historical}",
            )

        for chronicle in selector.cast_chronicles():
            self.add_structural_match(
                SourceType.CHRONICLE, chronicle.id, chronicle.title,
                "selectedEntityIds", MatchType.ID_SLUG,
                self.entity_id, "Cast member:",
                f"({len(chronicle.selected_entity_ids)} entities in chronicle)",
            )

    # ---- Orchestration ----

    def run(self, selector: ScopeSelector) -> RenameScanResult:
        """Scan every tier of ``selector`` in order and return the result."""
        for scope in selector.entity_scopes():
            self.scan_entity(scope)
        for scope in selector.chronicle_scopes():
            self.scan_chronicle(scope)
        for scope in selector.event_scopes():
            self.scan_event(scope)
        self.add_id_references(selector)

        return RenameScanResult(
            entity_id=self.entity_id,
            old_name=self.old_name,
            matches=tuple(self.matches),
        )


def scan_for_references(
    entity_id: str,
    old_name: str,
    entities: Sequence[Entity],
    chronicles: Sequence[Chronicle],
    relationships: Optional[Sequence[Relationship]] = None,
    events: Optional[Sequence[NarrativeEvent]] = None,
    *,
    allocator: Optional[MatchIdAllocator] = None,
    config: Optional[RenameConfig] = None,
    logger: Optional[NamesweepLogger] = None,
) -> RenameScanResult:
    """
    Scan a corpus snapshot for references to ``old_name``.

    Args:
        entity_id: Id of the entity being renamed
        old_name: Its current name
        entities: Entity snapshot
        chronicles: Chronicle snapshot
        relationships: Relationship edges (optional)
        events: Narrative events (optional)
        allocator: Match id source; a fresh one is used when omitted
        config: Scan settings (context size, stop words, ...)
        logger: Optional logger for scan statistics

    Returns:
        RenameScanResult with matches in scan order
    """
    log = safe_logger(logger)
    selector = ScopeSelector(entity_id, entities, chronicles, relationships, events)
    scanner = ReferenceScanner(entity_id, old_name, allocator=allocator, config=config)

    log.log_debug("Scan scopes", {
        "entity_id": entity_id,
        "full_slug": scanner.full_slug,
        "partials": len(scanner.partial_slugs),
        "tiers": selector.tier_counts(),
    })

    result = scanner.run(selector)

    counts = {t.value: len(result.of_type(t)) for t in MatchType}
    log.log_operation("scan_for_references", {
        "entity_id": entity_id,
        "old_name": old_name,
        "matches": len(result.matches),
        **counts,
    })
    return result
