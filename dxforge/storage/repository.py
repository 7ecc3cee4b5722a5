"""Creation of the on-disk forge repository layout."""

from __future__ import annotations

import json
import os
import uuid
from pathlib import Path

from dxforge.storage.db import Database

FORGE_DIR = Path(".dx") / "forge"

_SUBDIRECTORIES = ("objects", "refs", "logs", "context")


def init_repository(path: str | os.PathLike[str]) -> Path:
    """Create the forge directory, database and config under ``path``.

    Returns the forge directory.
    """
    forge_path = Path(path) / FORGE_DIR
    forge_path.mkdir(parents=True, exist_ok=True)
    for name in _SUBDIRECTORIES:
        (forge_path / name).mkdir(parents=True, exist_ok=True)

    with Database(forge_path) as db:
        db.initialize()

    config = {
        "version": "0.1.0",
        "actor_id": str(uuid.uuid4()),
        "repo_id": str(uuid.uuid4()),
        "git_interop": True,
        "real_time_sync": False,
    }
    (forge_path / "config.json").write_text(json.dumps(config, indent=2), encoding="utf-8")
    return forge_path


def sync_with_git(path: str | os.PathLike[str]) -> bool:
    """Initialise a forge repository next to a git checkout if none exists.

    Returns True when a repository was created, False when one was present.
    """
    root = Path(path)
    if (root / ".dx").exists():
        print("✓ Forge repository already exists.")
        return False

    print("🔄 Initializing Forge repository...")
    init_repository(root)
    print("✓ Forge repository initialized successfully.")
    print("💡 You can now use Forge for operation-level version control.")
    return True