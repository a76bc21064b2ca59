# drama_api/service.py
import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, List

from drama_api.factory import build_drama, merge_drama, sample_dramas
from drama_api.query import DramaQuery, run_query

logger = logging.getLogger(__name__)

# Exceptions
class NotFoundError(Exception):
    """Raised when no drama has the requested id."""
    pass

class DramaService:
    """
    Catalog operations over a repository exposing load() and replace()
    (JsonFileRepo or InMemoryRepo from drama_api.repo).

    Every call re-reads the whole catalog. Mutations hold a per-process lock
    across their read-modify-write cycle; separate processes sharing one data
    file can still lose updates (last writer wins).
    """

    def __init__(self, repo):
        self.repo = repo
        self._write_lock = threading.Lock()
        logger.debug("DramaService initialized with repo %s", type(repo).__name__)

    @contextmanager
    def _mutate(self):
        with self._write_lock:
            dramas = self.repo.load()
            yield dramas
            self.repo.replace(dramas)

    @staticmethod
    def _index_of(dramas: List[Dict[str, Any]], drama_id: str) -> int:
        for i, d in enumerate(dramas):
            if d.get("id") == drama_id:
                return i
        return -1

    # ---- Reads ----
    def list_dramas(self, q: DramaQuery = None) -> Dict[str, Any]:
        """Search, filter, sort and paginate the catalog."""
        q = q or DramaQuery()
        result = run_query(self.repo.load(), q)
        logger.debug("list_dramas %s -> total=%s", q, result["total"])
        return result

    def get_drama(self, drama_id: str) -> Dict[str, Any]:
        dramas = self.repo.load()
        idx = self._index_of(dramas, drama_id)
        if idx == -1:
            raise NotFoundError("drama not found")
        return dramas[idx]

    # ---- Mutations ----
    def create_drama(self, payload: Any) -> Dict[str, Any]:
        """Normalize the payload into a new record and prepend it."""
        with self._mutate() as dramas:
            item = build_drama(payload, taken_ids=(d.get("id") for d in dramas))
            dramas.insert(0, item)
        logger.info("Created drama id=%s title=%s", item["id"], item["title"])
        return item

    def update_drama(self, drama_id: str, payload: Any) -> Dict[str, Any]:
        with self._write_lock:
            dramas = self.repo.load()
            idx = self._index_of(dramas, drama_id)
            if idx == -1:
                logger.debug("update_drama: drama %s not found", drama_id)
                raise NotFoundError("drama not found")
            dramas[idx] = merge_drama(dramas[idx], payload)
            self.repo.replace(dramas)
        logger.info("Updated drama id=%s", drama_id)
        return dramas[idx]

    def delete_drama(self, drama_id: str) -> int:
        """Remove the drama if present; returns how many records were deleted (0 or 1)."""
        with self._write_lock:
            dramas = self.repo.load()
            kept = [d for d in dramas if d.get("id") != drama_id]
            deleted = len(dramas) - len(kept)
            if deleted:
                self.repo.replace(kept)
        logger.info("Deleted drama id=%s (deleted=%s)", drama_id, deleted)
        return deleted

    def seed_dramas(self, count: int) -> int:
        """Prepend `count` sample dramas, keeping them in their generated order."""
        with self._mutate() as dramas:
            samples = sample_dramas(count, taken_ids=(d.get("id") for d in dramas))
            dramas[0:0] = samples
        logger.info("Seeded %d sample dramas", len(samples))
        return len(samples)
