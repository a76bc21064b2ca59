# drama_api/repo.py
import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

COLLECTION_KEY = "dramas"

# --- Exceptions ---
class StorageUnavailable(Exception):
    """The data file could not be read, parsed or written."""
    pass

# --- JSON file repo ---
class JsonFileRepo:
    """
    Whole-document store: every load reads the full file and every replace
    rewrites it. Suitable for small catalogs only (thousands of records).
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> List[Dict[str, Any]]:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            raw = b""
        except OSError as e:
            logger.exception("Failed to read %s", self.path)
            raise StorageUnavailable(f"cannot read {self.path}: {e}") from e

        if not raw.strip():
            logger.info("No catalog at %s, initializing an empty one", self.path)
            self.replace([])
            return []

        try:
            doc = json.loads(raw.decode("utf-8"))
        except ValueError as e:
            logger.exception("Corrupt catalog file %s", self.path)
            raise StorageUnavailable(f"cannot parse {self.path}: {e}") from e
        if not isinstance(doc, dict) or not isinstance(doc.get(COLLECTION_KEY, []), list):
            raise StorageUnavailable(f"unexpected document layout in {self.path}")
        return doc.get(COLLECTION_KEY, [])

    def replace(self, dramas: List[Dict[str, Any]]) -> None:
        """
        Atomically overwrite the document: write a temp file in the same
        directory, fsync it, then rename it over the target. Readers see
        either the old document or the new one, never a partial write.
        """
        content = json.dumps({COLLECTION_KEY: dramas}, ensure_ascii=False, indent=2)
        temp_path = None
        try:
            temp_fd, temp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".tmp_", suffix=".json")
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            Path(temp_path).replace(self.path)
        except OSError as e:
            if temp_path:
                Path(temp_path).unlink(missing_ok=True)
            logger.exception("Failed to write %s", self.path)
            raise StorageUnavailable(f"cannot write {self.path}: {e}") from e
        logger.debug("Wrote %d dramas to %s", len(dramas), self.path)

# --- In-memory repo (simple, used for unit tests) ---
class InMemoryRepo:
    def __init__(self, dramas: List[Dict[str, Any]] = None):
        self._dramas = copy.deepcopy(dramas or [])
        self.writes = 0

    def load(self) -> List[Dict[str, Any]]:
        return copy.deepcopy(self._dramas)

    def replace(self, dramas: List[Dict[str, Any]]) -> None:
        self._dramas = copy.deepcopy(dramas)
        self.writes += 1
