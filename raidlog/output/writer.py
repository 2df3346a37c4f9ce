"""
JSON directory writer for encounter results.

Each encounter is written to its own directory:

    <root>/
        index.json
        001-ragnaros-kill/
            encounter.json
            actors.json
            tables/damage.json
            tables/healing.json
            ...

Files are staged in a hidden temporary directory under the root and renamed
into place once the whole encounter is written, so a failed encounter never
leaves partial output behind.
"""

import json
import logging
import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, List

from ..errors import OutputError
from ..processing.pipeline import EncounterResult

logger = logging.getLogger(__name__)

STAGING_PREFIX = ".staging-"


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "encounter"


def _dump(path: Path, data: Any):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=str)


class JsonDirectoryWriter:
    """
    Output consumer writing one directory per encounter.

    Example:
        with JsonDirectoryWriter("reports/") as writer:
            CombatLogPipeline(settings).run(source, writer)
    """

    def __init__(self, root, overwrite: bool = False):
        """
        Initialize the writer.

        Args:
            root: Output directory, created if missing
            overwrite: Replace existing encounter directories instead of failing
        """
        self.root = Path(root)
        self.overwrite = overwrite
        self.committed: List[Dict[str, Any]] = []

    def directory_name(self, result: EncounterResult) -> str:
        encounter = result.encounter
        return f"{len(self.committed) + 1:03d}-{slugify(encounter.boss_name)}-{encounter.outcome.value}"

    def write(self, result: EncounterResult) -> None:
        """
        Write one encounter atomically.

        Args:
            result: Encounter result to persist

        Raises:
            OutputError: If anything fails; the staged directory is removed first
        """
        key = result.encounter.key
        target = self.root / self.directory_name(result)
        staged = None
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            staged = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=self.root))

            data = result.to_dict()
            _dump(staged / "encounter.json", data["encounter"])
            _dump(staged / "actors.json", data["actors"])
            tables_dir = staged / "tables"
            tables_dir.mkdir()
            for name, table in data["tables"].items():
                _dump(tables_dir / f"{name}.json", table)

            if target.exists():
                if not self.overwrite:
                    raise FileExistsError(f"Output directory already exists: {target}")
                shutil.rmtree(target)
            os.rename(staged, target)
        except (OSError, TypeError, ValueError) as e:
            if staged is not None:
                shutil.rmtree(staged, ignore_errors=True)
            logger.error(f"Failed to write {result.encounter!r}: {e}")
            raise OutputError(f"Failed to write encounter {key}: {e}", encounter_key=key) from e

        self.committed.append({"directory": target.name, **result.encounter.to_dict()})
        logger.info(f"Wrote {result.encounter!r} to {target}")

    def close(self):
        """Write the index of committed encounters."""
        if not self.committed:
            return
        self.root.mkdir(parents=True, exist_ok=True)
        staged = self.root / f"{STAGING_PREFIX}index.json"
        try:
            _dump(staged, self.committed)
            os.replace(staged, self.root / "index.json")
        except OSError as e:
            if staged.exists():
                staged.unlink()
            raise OutputError(f"Failed to write index: {e}") from e

    def __enter__(self) -> "JsonDirectoryWriter":
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
