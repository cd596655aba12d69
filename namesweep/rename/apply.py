#!/usr/bin/env python3
"""
apply.py
--------
Patch executors: turn RenamePatches into updated records.

Entities and events held in memory are patched purely: the functions
return new lists and leave their inputs alone. Chronicles (and events
kept in a store) are patched through an injected persistence boundary:

    get(record_id) -> Awaitable[record or None]
    put(record)    -> Awaitable[None], raising on failure

The store loop is sequential. A record that is missing, or whose read,
patch or write raises, is logged and skipped; the loop carries on and
the caller compares the returned success count against the number of
patches.

Records are frozen dataclasses, so every change goes through
``dataclasses.replace``. Structured updates are dispatched on their
variant; an unknown variant is a TypeError. Indices that no longer exist
in a record and absent optional targets (a chronicle with no lens) are
ignored.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import re
import time
from dataclasses import replace
from typing import (
    Awaitable,
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
)

# --- Local imports ---
from namesweep.core.logging_manager import NamesweepLogger, safe_logger
from namesweep.rename.models import Chronicle, Entity, NarrativeEvent
from namesweep.rename.patches import (
    ChroniclePatch,
    ChronicleUpdate,
    DirectiveNameUpdate,
    EntityPatch,
    EventParticipantNameUpdate,
    EventPatch,
    EventRelatedEntityNameUpdate,
    EventSubjectNameUpdate,
    EventUpdate,
    FieldReplacement,
    LensNameUpdate,
    RoleNameUpdate,
)

T = TypeVar("T")

Getter = Callable[[str], Awaitable[Optional[T]]]
Putter = Callable[[T], Awaitable[None]]

_HISTORY_INDEX = re.compile(r"^descriptionHistory\[(\d+)\]$")
_EFFECT_DESCRIPTION = re.compile(
    r"^participantEffects\[(\d+)\]\.effects\[(\d+)\]\.description$"
)


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


# ==================== Text splicing ====================

def apply_replacements(text: str, replacements: Iterable[FieldReplacement]) -> str:
    """
    Splice replacements into ``text``.

    Replacements are applied from the highest position down, so earlier
    offsets stay valid and the result does not depend on input order.

    Examples:
        >>> reps = [FieldReplacement(0, 5, "Ice"), FieldReplacement(10, 5, "Ice")]
        >>> apply_replacements("Frost and Frost", reps)
        'Ice and Ice'
    """
    result = text
    for rep in sorted(replacements, key=lambda r: r.position, reverse=True):
        result = (
            result[: rep.position]
            + rep.replacement
            + result[rep.position + rep.original_length:]
        )
    return result


def _splice(text: Optional[str], replacements: Sequence[FieldReplacement]) -> Optional[str]:
    return apply_replacements(text, replacements) if text else text


def _replace_at(items: Tuple[T, ...], index: int, fn: Callable[[T], T]) -> Tuple[T, ...]:
    """Copy of ``items`` with ``items[index]`` passed through ``fn``."""
    if not 0 <= index < len(items):
        return items
    return items[:index] + (fn(items[index]),) + items[index + 1:]


# ==================== Entities ====================

def _patch_entity_field(
    entity: Entity, field: str, replacements: Sequence[FieldReplacement]
) -> Entity:
    if field == "summary":
        return replace(entity, summary=_splice(entity.summary, replacements))
    if field == "description":
        return replace(entity, description=_splice(entity.description, replacements))
    if field == "hint":
        return replace(entity, hint=_splice(entity.hint, replacements))

    m = _HISTORY_INDEX.match(field)
    if m:
        history = _replace_at(
            entity.description_history,
            int(m.group(1)),
            lambda v: replace(v, description=apply_replacements(v.description, replacements)),
        )
        return replace(entity, description_history=history)
    return entity


def apply_entity_patches(
    entities: Sequence[Entity],
    patches: Sequence[EntityPatch],
    target_entity_id: str,
    new_name: str,
) -> List[Entity]:
    """
    Apply entity patches and rename the target entity.

    The target always gets ``new_name`` and keeps its id as a slug alias
    (added once), whether or not any patch touches it.

    Args:
        entities: Current entities
        patches: Entity patches from build_rename_patches
        target_entity_id: Id of the renamed entity
        new_name: Its new name

    Returns:
        New list in the same order. Entities with nothing to change are
        the very same objects as in ``entities``.
    """
    by_id: Dict[str, EntityPatch] = {p.entity_id: p for p in patches}
    updated: List[Entity] = []

    for entity in entities:
        result = entity

        if entity.id == target_entity_id:
            aliases = entity.slug_aliases
            if target_entity_id not in aliases:
                aliases = aliases + (target_entity_id,)
            result = replace(result, name=new_name, slug_aliases=aliases)

        patch = by_id.get(entity.id)
        if patch is not None:
            for field, replacements in patch.replacements.items():
                result = _patch_entity_field(result, field, replacements)

        updated.append(result)

    return updated


# ==================== Chronicles ====================

def apply_chronicle_update(chronicle: Chronicle, update: ChronicleUpdate) -> Chronicle:
    """
    Apply one structured update to a chronicle.

    Raises:
        TypeError: If ``update`` is not a chronicle update variant
    """
    if isinstance(update, RoleNameUpdate):
        roles = _replace_at(
            chronicle.role_assignments,
            update.index,
            lambda ra: replace(ra, entity_name=update.entity_name),
        )
        return replace(chronicle, role_assignments=roles)
    elif isinstance(update, LensNameUpdate):
        if chronicle.lens is None:
            return chronicle
        return replace(chronicle, lens=replace(chronicle.lens, entity_name=update.entity_name))
    elif isinstance(update, DirectiveNameUpdate):
        directives = _replace_at(
            chronicle.directives,
            update.index,
            lambda d: replace(d, entity_name=update.entity_name),
        )
        return replace(chronicle, directives=directives)
    else:
        raise TypeError(f"Unsupported chronicle update: {type(update).__name__}")


def _patch_chronicle_field(
    chronicle: Chronicle, field: str, replacements: Sequence[FieldReplacement]
) -> Chronicle:
    if field == "assembledContent":
        return replace(
            chronicle, assembled_content=_splice(chronicle.assembled_content, replacements)
        )
    if field == "finalContent":
        return replace(chronicle, final_content=_splice(chronicle.final_content, replacements))
    if field == "summary":
        return replace(chronicle, summary=_splice(chronicle.summary, replacements))

    if field.startswith("history."):
        version_id = field[len("history."):]
        history = tuple(
            replace(v, content=apply_replacements(v.content, replacements))
            if v.version_id == version_id
            else v
            for v in chronicle.history
        )
        return replace(chronicle, history=history)
    return chronicle


def patch_chronicle(chronicle: Chronicle, patch: ChroniclePatch, updated_at: int) -> Chronicle:
    """Structured updates first, then text splices, then the timestamp."""
    result = chronicle
    for update in patch.updates:
        result = apply_chronicle_update(result, update)
    for field, replacements in patch.replacements.items():
        result = _patch_chronicle_field(result, field, replacements)
    return replace(result, updated_at=updated_at)


async def apply_chronicle_patches(
    patches: Sequence[ChroniclePatch],
    get: Getter[Chronicle],
    put: Putter[Chronicle],
    *,
    logger: Optional[NamesweepLogger] = None,
    clock: Optional[Callable[[], int]] = None,
) -> int:
    """
    Read, patch and write back each chronicle in turn.

    Args:
        patches: Chronicle patches from build_rename_patches
        get: Loads a chronicle by id, or returns None if it does not exist
        put: Persists a chronicle, raising on failure
        logger: Optional logger for skips and failures
        clock: Millisecond timestamp source for ``updated_at``

    Returns:
        Number of chronicles written successfully
    """
    log = safe_logger(logger)
    stamp = clock or now_ms
    success = 0

    for patch in patches:
        try:
            chronicle = await get(patch.chronicle_id)
            if chronicle is None:
                log.log_warning("Chronicle not found, skipping", {
                    "chronicle_id": patch.chronicle_id,
                })
                continue
            await put(patch_chronicle(chronicle, patch, stamp()))
            success += 1
            log.log_debug("Chronicle patched", {
                "chronicle_id": patch.chronicle_id,
                "updates": len(patch.updates),
                "fields": list(patch.replacements),
            })
        except Exception as e:
            log.log_error(e, {
                "operation": "apply_chronicle_patches",
                "chronicle_id": patch.chronicle_id,
            })

    log.log_operation("apply_chronicle_patches", {
        "planned": len(patches),
        "updated": success,
    })
    return success


# ==================== Events ====================

def apply_event_update(event: NarrativeEvent, update: EventUpdate) -> NarrativeEvent:
    """
    Apply one structured update to an event.

    Raises:
        TypeError: If ``update`` is not an event update variant
    """
    if isinstance(update, EventSubjectNameUpdate):
        return replace(event, subject=replace(event.subject, name=update.name))
    elif isinstance(update, EventParticipantNameUpdate):
        participants = _replace_at(
            event.participant_effects,
            update.participant_index,
            lambda pe: replace(pe, entity=replace(pe.entity, name=update.name)),
        )
        return replace(event, participant_effects=participants)
    elif isinstance(update, EventRelatedEntityNameUpdate):
        def rename_related(effect):
            if effect.related_entity is None:
                return effect
            return replace(
                effect, related_entity=replace(effect.related_entity, name=update.name)
            )

        participants = _replace_at(
            event.participant_effects,
            update.participant_index,
            lambda pe: replace(
                pe, effects=_replace_at(pe.effects, update.effect_index, rename_related)
            ),
        )
        return replace(event, participant_effects=participants)
    else:
        raise TypeError(f"Unsupported event update: {type(update).__name__}")


def _patch_event_field(
    event: NarrativeEvent, field: str, replacements: Sequence[FieldReplacement]
) -> NarrativeEvent:
    if field == "description":
        return replace(event, description=_splice(event.description, replacements))
    if field == "action":
        return replace(event, action=_splice(event.action, replacements))

    m = _EFFECT_DESCRIPTION.match(field)
    if m:
        participants = _replace_at(
            event.participant_effects,
            int(m.group(1)),
            lambda pe: replace(pe, effects=_replace_at(
                pe.effects,
                int(m.group(2)),
                lambda ef: replace(ef, description=_splice(ef.description, replacements)),
            )),
        )
        return replace(event, participant_effects=participants)
    return event


def patch_event(event: NarrativeEvent, patch: EventPatch) -> NarrativeEvent:
    """Structured updates first, then text splices."""
    result = event
    for update in patch.updates:
        result = apply_event_update(result, update)
    for field, replacements in patch.replacements.items():
        result = _patch_event_field(result, field, replacements)
    return result


def apply_event_patches(
    events: Sequence[NarrativeEvent],
    patches: Sequence[EventPatch],
) -> List[NarrativeEvent]:
    """
    Apply event patches to an in-memory event list.

    Returns:
        New list in the same order; unpatched events are returned as is
    """
    by_id: Dict[str, EventPatch] = {p.event_id: p for p in patches}
    return [
        patch_event(event, by_id[event.id]) if event.id in by_id else event
        for event in events
    ]


async def apply_event_patches_to_store(
    patches: Sequence[EventPatch],
    get: Getter[NarrativeEvent],
    put: Putter[NarrativeEvent],
    *,
    logger: Optional[NamesweepLogger] = None,
) -> int:
    """
    Store-backed variant of apply_event_patches.

    Same failure policy as apply_chronicle_patches.

    Returns:
        Number of events written successfully
    """
    log = safe_logger(logger)
    success = 0

    for patch in patches:
        try:
            event = await get(patch.event_id)
            if event is None:
                log.log_warning("Event not found, skipping", {"event_id": patch.event_id})
                continue
            await put(patch_event(event, patch))
            success += 1
        except Exception as e:
            log.log_error(e, {
                "operation": "apply_event_patches_to_store",
                "event_id": patch.event_id,
            })

    log.log_operation("apply_event_patches_to_store", {
        "planned": len(patches),
        "updated": success,
    })
    return success
