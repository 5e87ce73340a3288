"""
Scoreboard storage.

The store interface allows swapping the in-memory map for a bounded or
persistent implementation without touching normalization or dispatch.
"""
import threading
import logging
from typing import Any, Dict, List, Protocol

from app.utils.helpers import utc_now_iso
from .errors import SnapshotNotFoundError
from .models import ScoreboardProjection, ScoreboardSnapshot

logger = logging.getLogger("scoring.store")


class ScoreboardStore(Protocol):
    """
    Interface for latest-value scoreboard storage.

    Implementations:
    - InMemoryScoreboardStore: process-lifetime dict (current)
    """

    def upsert(
        self, match_id: str, projection: ScoreboardProjection, raw: Any
    ) -> ScoreboardSnapshot:
        """
        Replace the snapshot for a match wholesale.

        Args:
            match_id: The match identifier
            projection: Normalized projection to store
            raw: Original payload, retained for reference

        Returns:
            The stored snapshot, stamped with the current time
        """
        ...

    def get(self, match_id: str) -> ScoreboardSnapshot:
        """Get the latest snapshot, raising SnapshotNotFoundError if unknown."""
        ...


class InMemoryScoreboardStore:
    """
    Unbounded in-memory store: one snapshot per match ID ever seen.

    No eviction, no expiry, no persistence. Raw payloads are retained in
    full, so memory grows with payload size times distinct matches.
    """

    def __init__(self, clock=utc_now_iso):
        """
        Initialize the store.

        Args:
            clock: Callable returning the current time as an ISO string
        """
        self._snapshots: Dict[str, ScoreboardSnapshot] = {}
        self._lock = threading.RLock()
        self._clock = clock

    def upsert(
        self, match_id: str, projection: ScoreboardProjection, raw: Any
    ) -> ScoreboardSnapshot:
        now = self._clock()
        snapshot = ScoreboardSnapshot(
            match_id=match_id,
            projection=projection.stamped(now),
            raw=raw,
            last_update=now,
        )
        with self._lock:
            is_new = match_id not in self._snapshots
            self._snapshots[match_id] = snapshot

        if is_new:
            logger.info(f"STORE NEW: match {match_id}")
        else:
            logger.debug(f"STORE REPLACE: match {match_id}")
        return snapshot

    def get(self, match_id: str) -> ScoreboardSnapshot:
        with self._lock:
            snapshot = self._snapshots.get(match_id)
        if snapshot is None:
            raise SnapshotNotFoundError(match_id)
        return snapshot

    def match_ids(self) -> List[str]:
        """Match IDs in first-seen order."""
        with self._lock:
            return list(self._snapshots.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._snapshots)

    def get_stats(self) -> Dict[str, Any]:
        """Get store statistics."""
        with self._lock:
            return {"matches": len(self._snapshots)}
