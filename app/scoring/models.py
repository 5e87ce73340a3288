"""
Data models for the scoring pipeline.

These dataclasses represent the canonical shape of a tennis match score,
independent of which scoring application produced the raw payload.
"""
from dataclasses import dataclass, field, replace
from typing import Optional, List, Dict, Any
from enum import Enum


class MatchStatus(Enum):
    """Lifecycle status of a match."""
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    SUSPENDED = "SUSPENDED"


UNKNOWN_PLAYER = "Unknown Player"


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class ServerInfo:
    """Who is serving and from which side of the court."""
    side_number: int = 1
    player_number: int = 1
    player_id: str = ""
    returning_side: str = "DEUCE"  # "DEUCE" or "AD"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sideNumber": self.side_number,
            "playerNumber": self.player_number,
            "playerId": self.player_id,
            "returningSide": self.returning_side,
        }


@dataclass(frozen=True)
class SetScore:
    """Games (and tiebreak points, if any) for one set."""
    set_number: int
    side1_score: int = 0
    side2_score: int = 0
    side1_tiebreak_score: Optional[int] = None
    side2_tiebreak_score: Optional[int] = None
    winning_side: Optional[int] = None
    is_completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response. Absent optionals are omitted."""
        return _drop_none({
            "setNumber": self.set_number,
            "side1Score": self.side1_score,
            "side2Score": self.side2_score,
            "side1TiebreakScore": self.side1_tiebreak_score,
            "side2TiebreakScore": self.side2_tiebreak_score,
            "winningSide": self.winning_side,
            "isCompleted": self.is_completed,
        })


@dataclass(frozen=True)
class CanonicalScoreUpdate:
    """
    Normalized score update for one match.

    Every field except match_id has a documented default, so even the
    sparsest payload yields a complete value.
    """
    match_id: str
    status: MatchStatus = MatchStatus.NOT_STARTED
    score_string_side1: str = "0-0"
    score_string_side2: str = "0-0"
    side1_point_score: str = "0"
    side2_point_score: str = "0"
    server: ServerInfo = field(default_factory=ServerInfo)
    sets: List[SetScore] = field(default_factory=list)
    winning_side: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "matchId": self.match_id,
            "matchStatus": self.status.value,
            "score": {
                "scoreStringSide1": self.score_string_side1,
                "scoreStringSide2": self.score_string_side2,
                "side1PointScore": self.side1_point_score,
                "side2PointScore": self.side2_point_score,
                "server": self.server.to_dict(),
                "sets": [s.to_dict() for s in self.sets],
            },
            "winningSide": self.winning_side,
        })


@dataclass(frozen=True)
class ScoreboardProjection:
    """
    Display-oriented view of a match score.

    This is what gets stored, broadcast and returned to scoreboard clients.
    last_update stays None until the store stamps it.
    """
    match_id: str
    status: MatchStatus
    side1_player: str
    side2_player: str
    side1_points: str
    side2_points: str
    sets: List[SetScore]
    serving_side: int
    serving_player: int
    format: Any = None
    court: Optional[str] = None
    start_time: Optional[str] = None
    last_update: Optional[str] = None

    def stamped(self, last_update: str) -> "ScoreboardProjection":
        """Copy of this projection carrying the given update time."""
        return replace(self, last_update=last_update)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response. Absent optionals are omitted."""
        return _drop_none({
            "matchId": self.match_id,
            "status": self.status.value,
            "side1Player": self.side1_player,
            "side2Player": self.side2_player,
            "side1Points": self.side1_points,
            "side2Points": self.side2_points,
            "sets": [s.to_dict() for s in self.sets],
            "servingSide": self.serving_side,
            "servingPlayer": self.serving_player,
            "format": self.format,
            "court": self.court,
            "startTime": self.start_time,
            "lastUpdate": self.last_update,
        })


@dataclass(frozen=True)
class NormalizedScore:
    """Both outputs of a single normalization pass."""
    update: CanonicalScoreUpdate
    projection: ScoreboardProjection

    @property
    def match_id(self) -> str:
        return self.update.match_id


@dataclass(frozen=True)
class ScoreboardSnapshot:
    """Latest accepted state for one match: projection, raw payload and time."""
    match_id: str
    projection: ScoreboardProjection
    raw: Any
    last_update: str

    def to_dict(self, include_raw: bool = True) -> Dict[str, Any]:
        """
        Retrieval view: projection fields plus lastUpdate and the raw payload.
        """
        data = self.projection.to_dict()
        data["lastUpdate"] = self.last_update
        if include_raw:
            data["rawData"] = self.raw
        return data
