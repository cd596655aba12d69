"""
Rename engine: reference scanning, patch building and patch application.

Modules:
    - models: typed input records, matches, decisions
    - scope / overlap / occurrences: the pieces the scanner is built from
    - scanner: scan_for_references
    - patches: build_rename_patches and the patch types
    - apply: pure and store-backed patch executors
    - review: default decisions, bulk actions, reports
    - snapshot / store: YAML corpus loading and format-preserving writes
"""
from .apply import (
    apply_chronicle_patches,
    apply_entity_patches,
    apply_event_patches,
    apply_event_patches_to_store,
    apply_replacements,
)
from .models import Decision, DecisionAction, Match, MatchType, RenameScanResult, SourceType
from .patches import RenamePatches, build_rename_patches
from .scanner import MatchIdAllocator, scan_for_references

__all__ = [
    "apply_chronicle_patches",
    "apply_entity_patches",
    "apply_event_patches",
    "apply_event_patches_to_store",
    "apply_replacements",
    "Decision",
    "DecisionAction",
    "Match",
    "MatchType",
    "RenameScanResult",
    "SourceType",
    "RenamePatches",
    "build_rename_patches",
    "MatchIdAllocator",
    "scan_for_references",
]
