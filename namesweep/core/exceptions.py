#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the namesweep project.

This module defines a hierarchy of exceptions used throughout the project
to handle specific error conditions in different subsystems.

Exception Hierarchy:
    Exception (built-in)
    ├── RenameError - Invalid rename request (identical names, unknown entity)
    ├── SnapshotError - Corpus snapshot loading/serialization failures
    ├── DecisionError - Malformed or unknown match decisions
    ├── PatchApplyError - Record store read/write failures
    └── ConfigError - Invalid configuration files or values

Note that scanning itself never raises: absent optional fields simply
produce no matches. These exceptions belong to the layers around the scan.

Usage:
    from namesweep.core.exceptions import SnapshotError, RenameError

    try:
        corpus = load_corpus(corpus_dir)
    except SnapshotError as e:
        logger.log_error(e, {"corpus": str(corpus_dir)})
"""


class RenameError(Exception):
    """
    Exception for invalid rename requests.

    Raised before any scanning or patching happens when the request
    itself cannot be honoured:
    - Old name and new name are identical
    - The entity id is not present in the corpus
    - The new name is empty

    Examples:
        >>> raise RenameError("Old name and new name are identical")
        >>> raise RenameError("Entity not found in corpus: 'npc-42'")
    """

    pass


class SnapshotError(Exception):
    """
    Exception for corpus snapshot loading failures.

    Raised when reading a corpus directory into the typed model fails:
    - Missing entities.yaml
    - YAML syntax errors
    - Records missing required fields (id, name, ...)
    - Top-level structure is not a list

    Examples:
        >>> raise SnapshotError("Corpus has no entities.yaml: /data/world")
        >>> raise SnapshotError("Entity record missing 'id': {'name': 'X'}")
    """

    pass


class DecisionError(Exception):
    """
    Exception for malformed match decisions.

    Raised when a decision file or mapping cannot be turned into
    Decision objects:
    - Unknown action (anything but accept/reject/edit)
    - Missing match id
    - Edit decision whose edit text is not a string

    Examples:
        >>> raise DecisionError("Unknown decision action: 'maybe'")
    """

    pass


class PatchApplyError(Exception):
    """
    Exception for record store failures during patch application.

    Raised by record stores when a read or write cannot complete.
    The async patch executors catch it per record, log it, and move on
    to the next record, so callers only see it when using a store
    directly.

    Examples:
        >>> raise PatchApplyError("Cannot write chronicle file: permission denied")
    """

    pass


class ConfigError(Exception):
    """
    Exception for invalid configuration.

    Raised when a configuration file cannot be read or holds unknown
    keys or values of the wrong type.

    Examples:
        >>> raise ConfigError("Unknown config key: 'contxt_size'")
        >>> raise ConfigError("context_size must be a non-negative integer")
    """

    pass
