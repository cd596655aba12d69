#!/usr/bin/env python3
"""
review.py
---------
Decision handling and human-readable reports for a rename scan.

A scan produces many candidate matches; a reviewer decides on each one.
This module supplies what a review needs around the pure engine:

    - default decisions (accept full and metadata matches, reject the rest)
    - bulk actions (accept all, reject all partials, set a type)
    - decision files (YAML) merged over the defaults
    - decision statistics
    - grouping of matches for display and a printable report

Usage:
    from namesweep.rename.review import ReviewReport, resolve_decisions

    decisions = resolve_decisions(result, load_decisions(path))
    report = ReviewReport(result, decisions, new_name="Ice Widow")
    print(report.summary())
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

# --- Third-party imports ---
import yaml

# --- Local imports ---
from namesweep.core.config import DEFAULT_CONFIG, RenameConfig
from namesweep.core.exceptions import DecisionError
from namesweep.rename.models import (
    Decision,
    DecisionAction,
    Match,
    MatchType,
    RenameScanResult,
    SourceType,
)
from namesweep.rename.occurrences import absorbed_suffix

Decisions = Dict[str, Decision]


# ==================== Defaults & bulk actions ====================

def accept_decision(match: Match, new_name: Optional[str] = None) -> Decision:
    """
    Accept ``match``, keeping punctuation its span absorbed.

    A text match such as "Frost Widow," covers the trailing comma, so a
    plain accept would drop it. Given the new name, such matches become
    edits that put the punctuation back after it.
    """
    suffix = absorbed_suffix(match.matched_text) if match.is_text else ""
    if new_name is not None and suffix:
        return Decision(match.id, DecisionAction.EDIT, new_name + suffix)
    return Decision(match.id, DecisionAction.ACCEPT)


def default_decisions(
    scan_result: RenameScanResult,
    config: Optional[RenameConfig] = None,
    new_name: Optional[str] = None,
) -> Decisions:
    """
    Starting decisions for a fresh review, keyed by match id in scan order.

    Match types listed in ``config.default_accept`` (full and metadata
    unless configured otherwise) are accepted; everything else, partial
    and id_slug matches included, starts rejected. With ``new_name``,
    accepted matches ending in absorbed punctuation become edits (see
    accept_decision).
    """
    config = config or DEFAULT_CONFIG
    return {
        m.id: accept_decision(m, new_name)
        if m.match_type.value in config.default_accept
        else Decision(m.id, DecisionAction.REJECT)
        for m in scan_result.matches
    }


def accept_all(decisions: Decisions) -> Decisions:
    """Every decision set to accept; edit text is dropped."""
    return {mid: Decision(mid, DecisionAction.ACCEPT) for mid in decisions}


def set_action_for_type(
    decisions: Decisions,
    scan_result: RenameScanResult,
    match_type: MatchType,
    action: DecisionAction,
    new_name: Optional[str] = None,
) -> Decisions:
    """
    Set ``action`` on every decided match of ``match_type``.

    Accepting with ``new_name`` goes through accept_decision.
    """
    result = dict(decisions)
    for match in scan_result.matches:
        if match.match_type is not match_type or match.id not in result:
            continue
        if action is DecisionAction.ACCEPT:
            result[match.id] = accept_decision(match, new_name)
        else:
            result[match.id] = Decision(match.id, action, result[match.id].edit_text)
    return result


def reject_partials(decisions: Decisions, scan_result: RenameScanResult) -> Decisions:
    return set_action_for_type(decisions, scan_result, MatchType.PARTIAL, DecisionAction.REJECT)


def accept_partials(
    decisions: Decisions,
    scan_result: RenameScanResult,
    new_name: Optional[str] = None,
) -> Decisions:
    return set_action_for_type(
        decisions, scan_result, MatchType.PARTIAL, DecisionAction.ACCEPT, new_name
    )


# ==================== Decision files ====================

def parse_decisions(data: Any) -> List[Decision]:
    """
    Parse decisions from loaded YAML.

    Accepts either a list of decision mappings or a mapping with a
    ``decisions`` list:

        decisions:
          - {matchId: rm-3, action: accept}
          - {matchId: rm-7, action: edit, editText: "the Ice Widow's"}

    Raises:
        DecisionError: On any malformed entry
    """
    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("decisions")
    if not isinstance(data, list):
        raise DecisionError("Decisions must be a list or a mapping with a 'decisions' list")
    return [Decision.from_dict(item) for item in data]


def load_decisions(path: Path) -> List[Decision]:
    """
    Load decisions from a YAML file.

    Raises:
        DecisionError: If the file cannot be read or is malformed
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise DecisionError(f"Cannot read decisions file {path}: {e}") from e
    return parse_decisions(data)


def apply_overrides(decisions: Decisions, overrides: Iterable[Decision]) -> Decisions:
    """
    Lay explicit decisions over existing ones.

    Raises:
        DecisionError: If an override names a match id that has no
            decision (a stale decisions file)
    """
    result = dict(decisions)
    for decision in overrides:
        if decision.match_id not in result:
            raise DecisionError(f"Unknown match id in decisions: {decision.match_id}")
        result[decision.match_id] = decision
    return result


def resolve_decisions(
    scan_result: RenameScanResult,
    overrides: Iterable[Decision] = (),
    config: Optional[RenameConfig] = None,
    new_name: Optional[str] = None,
) -> Decisions:
    """Default decisions with explicit ones laid over them."""
    return apply_overrides(default_decisions(scan_result, config, new_name), overrides)


# ==================== Statistics ====================

@dataclass
class DecisionStats:
    """
    Tally of decisions for one review.

    Attributes:
        accepts: Matches to replace with the new name
        rejects: Matches left as they are
        edits: Matches replaced with custom text
        total: Matches in the scan
    """

    accepts: int = 0
    rejects: int = 0
    edits: int = 0
    total: int = 0

    @classmethod
    def from_decisions(cls, decisions: Decisions, total: int) -> "DecisionStats":
        stats = cls(total=total)
        for decision in decisions.values():
            if decision.action is DecisionAction.ACCEPT:
                stats.accepts += 1
            elif decision.action is DecisionAction.REJECT:
                stats.rejects += 1
            else:
                stats.edits += 1
        return stats

    @property
    def changes(self) -> int:
        return self.accepts + self.edits

    def summary(self) -> str:
        return (
            f"{self.accepts} accept, {self.rejects} reject, "
            f"{self.edits} edit / {self.total} total"
        )


# ==================== Grouping ====================

@dataclass
class MatchGroup:
    """A labelled run of matches shown together."""

    label: str
    matches: List[Match] = field(default_factory=list)


def _distinct_sources(matches: List[Match]) -> int:
    return len({m.source_id for m in matches})


def group_matches(scan_result: RenameScanResult) -> List[MatchGroup]:
    """
    Split matches into display groups, dropping empty ones.

    Groups: the entity itself, other entities, chronicle metadata,
    chronicle text, events, and id references (informational).
    """
    entity_id = scan_result.entity_id
    own: List[Match] = []
    others: List[Match] = []
    chronicle_meta: List[Match] = []
    chronicle_text: List[Match] = []
    events: List[Match] = []
    id_refs: List[Match] = []

    for m in scan_result.matches:
        if m.match_type is MatchType.ID_SLUG:
            id_refs.append(m)
        elif m.source_type is SourceType.ENTITY:
            (own if m.source_id == entity_id else others).append(m)
        elif m.source_type is SourceType.CHRONICLE:
            (chronicle_meta if m.match_type is MatchType.METADATA else chronicle_text).append(m)
        else:
            events.append(m)

    groups = [
        MatchGroup("This Entity", own),
        MatchGroup(f"Other Entities ({_distinct_sources(others)})", others),
        MatchGroup(f"Chronicle Metadata ({_distinct_sources(chronicle_meta)})", chronicle_meta),
        MatchGroup(f"Chronicle Text ({_distinct_sources(chronicle_text)})", chronicle_text),
        MatchGroup(f"Events ({_distinct_sources(events)})", events),
        MatchGroup(
            f"ID References ({len(id_refs)} - relationships, chronicle cast)", id_refs
        ),
    ]
    return [g for g in groups if g.matches]


# ==================== Report ====================

_ACTION_ICONS = {
    DecisionAction.ACCEPT: "✓",
    DecisionAction.REJECT: "✗",
    DecisionAction.EDIT: "✎",
}


@dataclass
class ReviewReport:
    """
    Printable view of a scan and its decisions.

    Attributes:
        scan_result: The scan being reviewed
        decisions: Decision per match id
        new_name: Target name, if known (scan-only reports omit it)
        show_context: Include the text around each match
    """

    scan_result: RenameScanResult
    decisions: Decisions = field(default_factory=dict)
    new_name: Optional[str] = None
    show_context: bool = False

    @property
    def stats(self) -> DecisionStats:
        return DecisionStats.from_decisions(self.decisions, len(self.scan_result.matches))

    def _format_match(self, match: Match) -> List[str]:
        decision = self.decisions.get(match.id)
        if match.match_type is MatchType.ID_SLUG:
            icon = "·"
        elif decision is None:
            icon = "?"
        else:
            icon = _ACTION_ICONS[decision.action]

        line = (
            f"  {icon} {match.id} [{match.match_type.value}] "
            f"{match.source_name} — {match.field}: \"{match.matched_text}\""
        )
        if decision is not None and decision.action is DecisionAction.EDIT:
            line += f" → \"{decision.edit_text or self.new_name or ''}\""
        lines = [line]

        if self.show_context:
            if match.is_text:
                lines.append(
                    f"      {match.context_before}[{match.matched_text}]{match.context_after}"
                )
            else:
                lines.append(f"      {match.context_before} {match.context_after}".rstrip())
        return lines

    def summary(self) -> str:
        """
        Generate human-readable summary of the review.

        Returns:
            Formatted string with matches grouped by where they were found
        """
        old_name = self.scan_result.old_name
        if self.new_name is None:
            header = f'References to "{old_name}" ({self.scan_result.entity_id})'
        else:
            header = f'Renaming {self.scan_result.entity_id}: "{old_name}" → "{self.new_name}"'
        lines = [header, ""]

        groups = group_matches(self.scan_result)
        for group in groups:
            lines.append(f"{group.label}:")
            for match in group.matches:
                lines.extend(self._format_match(match))
            lines.append("")

        if not groups:
            lines.append("No references found.")
        else:
            lines.append(f"Decisions: {self.stats.summary()}")

        return "\n".join(lines)
