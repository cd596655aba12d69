#!/usr/bin/env python3
"""
paths.py
-------------------
Path constants for the namesweep project.

The project structure:
    ROOT/
    ├── namesweep/     # Package code
    └── logs/          # Application logs (created on demand)

The log directory can be moved with the NAMESWEEP_LOG_DIR environment
variable, which the CLI uses as the default for --log-dir.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
from pathlib import Path


def _get_project_root() -> Path:
    """
    Determine project root directory.

    Assumes this file is at ROOT/namesweep/core/paths.py and navigates up
    the directory tree to find ROOT.

    Returns:
        Path object for project root
    """
    # paths.py -> core/ -> namesweep/ -> ROOT/
    return Path(__file__).resolve().parent.parent.parent


# ----- Project directory -----
ROOT: Path = _get_project_root()
PACKAGE_DIR = ROOT / "namesweep"

# ---- Logs ----
LOG_DIR = Path(os.environ.get("NAMESWEEP_LOG_DIR", ROOT / "logs"))

# ---- Corpus layout ----
ENTITIES_FILE = "entities.yaml"
RELATIONSHIPS_FILE = "relationships.yaml"
EVENTS_FILE = "events.yaml"
CHRONICLES_DIR = "chronicles"
