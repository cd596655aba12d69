"""
namesweep
=========

Reference scanning and rename patching for world-building corpora.

Given an entity and its current name, namesweep finds every textual
reference to that name across entity records, chronicles and event
records, scopes partial-name matching by how close each record sits to
the entity (relationship edges, chronicle cast membership), and turns
reviewed matches into typed, position-exact patches.

Main Components:
    - rename: scanning, patch building and patch application
    - utils: text normalization and partial-name generation
    - core: logging, exceptions, configuration, paths
    - cli: the ``namesweep`` command line

Example Usage:
    >>> from namesweep.rename import scan_for_references, build_rename_patches
    >>> result = scan_for_references("npc-1", "Frost Widow", entities, chronicles)
    >>> patches = build_rename_patches(result, "Frost Queen", decisions)
"""

__version__ = "1.0.0"
