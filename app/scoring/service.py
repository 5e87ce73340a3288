"""
Scoring service: the soft-fail boundary of the ingest pipeline.

normalize -> store.upsert -> dispatcher.publish, with every fault converted
to a structured response envelope. Nothing raised inside the pipeline
escapes to the caller and a failed ingest never touches the store.
"""
import json
import logging
from typing import Any, Dict

from app.realtime.dispatcher import BroadcastDispatcher
from app.utils.helpers import utc_now_iso
from .errors import MissingMatchIdError, ScoringError, SnapshotNotFoundError
from .mapper import normalize
from .store import ScoreboardStore

logger = logging.getLogger("scoring.service")

MISSING_MATCH_ID_ERROR = "Match ID not found in scoring data"
NOT_FOUND_ERROR = (
    "No scoring data found for this match ID. "
    "Make sure scoring data has been sent to /scoring/update first."
)


class ScoringService:
    """
    Orchestrates ingest, retrieval and mapping dry-runs.
    """

    def __init__(self, store: ScoreboardStore, dispatcher: BroadcastDispatcher):
        self._store = store
        self._dispatcher = dispatcher

    def ingest(self, raw: Any) -> Dict[str, Any]:
        """
        Normalize, store and broadcast one scoring payload.

        Returns:
            {success: True, matchId, updatedAt, scoreboardData} on success,
            {success: False, error} when the match ID is missing,
            {success: False, error, timestamp} for any other fault
        """
        try:
            normalized = normalize(raw)
        except MissingMatchIdError:
            logger.warning("Rejected scoring data without a match ID")
            return {"success": False, "error": MISSING_MATCH_ID_ERROR}
        except ScoringError as e:
            logger.warning(f"Rejected malformed scoring data: {e}")
            return {"success": False, "error": str(e), "timestamp": utc_now_iso()}
        except Exception as e:
            logger.error(f"Error processing score update: {e}", exc_info=True)
            return {"success": False, "error": str(e), "timestamp": utc_now_iso()}

        match_id = normalized.match_id
        snapshot = self._store.upsert(match_id, normalized.projection, raw)
        scoreboard_data = snapshot.projection.to_dict()

        try:
            self._dispatcher.publish(match_id, scoreboard_data)
        except Exception as e:
            # The store already reflects this update; only the fanout failed
            logger.error(f"Broadcast failed for match {match_id}: {e}", exc_info=True)
            return {"success": False, "error": str(e), "timestamp": utc_now_iso()}

        return {
            "success": True,
            "matchId": match_id,
            "updatedAt": snapshot.last_update,
            "scoreboardData": scoreboard_data,
        }

    def get_scoreboard(self, match_id: str) -> Dict[str, Any]:
        """
        Latest scoreboard data for a match.

        Returns:
            {success: True, data} or {success: False, error} if unknown
        """
        try:
            snapshot = self._store.get(match_id)
        except SnapshotNotFoundError:
            logger.debug(f"Scoreboard requested for unknown match {match_id}")
            return {"success": False, "error": NOT_FOUND_ERROR}

        return {"success": True, "data": snapshot.to_dict()}

    def test_mapping(self, raw: Any) -> Dict[str, Any]:
        """
        Dry-run the mapping without storing or broadcasting.

        Returns:
            Both mapped views plus the serialized sizes of raw vs simplified
        """
        try:
            normalized = normalize(raw)
        except ScoringError as e:
            return {"success": False, "error": str(e)}
        except Exception as e:
            logger.error(f"Error testing mapping: {e}", exc_info=True)
            return {"success": False, "error": str(e)}

        mapped_update = normalized.update.to_dict()
        mapped_update["timestamp"] = utc_now_iso()
        scoreboard_data = normalized.projection.to_dict()

        return {
            "success": True,
            "mappedScoreUpdate": mapped_update,
            "scoreboardData": scoreboard_data,
            "originalDataSize": len(json.dumps(raw, default=str)),
            "simplifiedDataSize": len(json.dumps(scoreboard_data, default=str)),
        }
