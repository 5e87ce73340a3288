"""
Scoring module: normalization, storage and the ingest boundary.

Turns loosely-shaped scoring payloads into canonical scoreboard data and
keeps the latest snapshot per match.
"""
from .errors import (
    ScoringError,
    MissingMatchIdError,
    MalformedInputError,
    SnapshotNotFoundError,
)
from .models import (
    MatchStatus,
    ServerInfo,
    SetScore,
    CanonicalScoreUpdate,
    ScoreboardProjection,
    ScoreboardSnapshot,
    NormalizedScore,
)
from .mapper import normalize, map_match_status
from .store import ScoreboardStore, InMemoryScoreboardStore
from .service import ScoringService

__all__ = [
    # Errors
    "ScoringError",
    "MissingMatchIdError",
    "MalformedInputError",
    "SnapshotNotFoundError",
    # Models
    "MatchStatus",
    "ServerInfo",
    "SetScore",
    "CanonicalScoreUpdate",
    "ScoreboardProjection",
    "ScoreboardSnapshot",
    "NormalizedScore",
    # Mapping
    "normalize",
    "map_match_status",
    # Storage
    "ScoreboardStore",
    "InMemoryScoreboardStore",
    # Boundary
    "ScoringService",
]
