"""
Score mapper: raw scoring payload -> canonical update + scoreboard projection.

Field resolution follows declared precedence tables (first present, non-null
candidate wins). normalize() is pure: it never reads the clock and never
mutates its input, so identical payloads always map to identical values.
Both outputs are built from the same resolved values, so the typed update
and the display projection can never disagree.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError

from app.utils.helpers import first_present, non_empty_str, safe_str, safe_upper
from .errors import MalformedInputError, MissingMatchIdError
from .models import (
    CanonicalScoreUpdate,
    MatchStatus,
    NormalizedScore,
    ScoreboardProjection,
    ServerInfo,
    SetScore,
    UNKNOWN_PLAYER,
)
from .schema import RawMatchBody, RawServer, RawSet, RawSide

logger = logging.getLogger("scoring.mapper")


# =============================================================================
# PRECEDENCE TABLES
# =============================================================================

# Paths into the raw payload, tried in order
MATCH_ID_PATHS: Tuple[Tuple[str, ...], ...] = (
    ("data", "matchId"),
    ("matchId",),
    ("data", "_id"),
)

STATUS_ALIASES: Dict[str, MatchStatus] = {
    "IN_PROGRESS": MatchStatus.IN_PROGRESS,
    "LIVE_SCORE": MatchStatus.IN_PROGRESS,
    "COMPLETED": MatchStatus.COMPLETED,
    "FINISHED": MatchStatus.COMPLETED,
    "SUSPENDED": MatchStatus.SUSPENDED,
}

DEFAULT_SERVER = ServerInfo()

# Participant attribute names, tried in order
FIRST_NAME_FIELDS = ("first_name", "firstName")
LAST_NAME_FIELDS = ("last_name", "lastName")
DEFAULT_FIRST_NAME = "Unknown"
DEFAULT_LAST_NAME = "Player"

DEFAULT_SCORE_STRING = "0-0"
DEFAULT_POINT_SCORE = "0"


# =============================================================================
# FIELD RESOLUTION
# =============================================================================

def _lookup(raw: Mapping[str, Any], path: Sequence[str]) -> Any:
    """Walk a key path through nested mappings, None if any hop is missing."""
    node: Any = raw
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node


def resolve_match_id(raw: Any) -> Optional[str]:
    """
    Resolve the match ID from a raw payload.

    Returns:
        The first candidate from MATCH_ID_PATHS that is a non-empty value,
        or None when the payload carries no usable ID.
    """
    if not isinstance(raw, Mapping):
        return None
    for path in MATCH_ID_PATHS:
        match_id = non_empty_str(_lookup(raw, path))
        if match_id is not None:
            return match_id
    return None


def match_body(raw: Mapping[str, Any]) -> Mapping[str, Any]:
    """The mapping under ``data`` when present, otherwise the payload itself."""
    data = raw.get("data")
    if isinstance(data, Mapping):
        return data
    return raw


def map_match_status(status: Any) -> MatchStatus:
    """Case-insensitive, total mapping of a status string onto MatchStatus."""
    return STATUS_ALIASES.get(safe_upper(status), MatchStatus.NOT_STARTED)


def map_server(server: Optional[RawServer]) -> ServerInfo:
    """Map server info, falling back to DEFAULT_SERVER field by field."""
    if server is None:
        return DEFAULT_SERVER

    return ServerInfo(
        side_number=first_present(server.sideNumber, default=DEFAULT_SERVER.side_number),
        player_number=first_present(server.playerNumber, default=DEFAULT_SERVER.player_number),
        player_id=first_present(server.player, server.playerId, default=DEFAULT_SERVER.player_id),
        returning_side=first_present(server.returningSide, default=DEFAULT_SERVER.returning_side),
    )


def map_sets(sets: Optional[List[RawSet]]) -> List[SetScore]:
    """
    Map set entries in the order given.

    Sets are never re-sorted by setNumber; a missing setNumber takes the
    entry's 1-based position.
    """
    return [
        SetScore(
            set_number=first_present(s.setNumber, default=index),
            side1_score=first_present(s.side1Score, default=0),
            side2_score=first_present(s.side2Score, default=0),
            side1_tiebreak_score=s.side1TiebreakScore,
            side2_tiebreak_score=s.side2TiebreakScore,
            winning_side=s.winningSide,
            is_completed=first_present(s.isCompleted, default=False),
        )
        for index, s in enumerate(sets or [], start=1)
    ]


def player_display_name(side: Optional[RawSide]) -> str:
    """
    Display name for a side, from its first listed player.

    A side with no players yields UNKNOWN_PLAYER.
    """
    if side is None or not side.players:
        return UNKNOWN_PLAYER

    participant = side.players[0].participant
    if participant is None:
        return f"{DEFAULT_FIRST_NAME} {DEFAULT_LAST_NAME}"

    first_name = first_present(
        *(getattr(participant, name) for name in FIRST_NAME_FIELDS),
        default=DEFAULT_FIRST_NAME,
    )
    last_name = first_present(
        *(getattr(participant, name) for name in LAST_NAME_FIELDS),
        default=DEFAULT_LAST_NAME,
    )
    return f"{first_name} {last_name}"


def _side(sides: Optional[List[Optional[RawSide]]], index: int) -> Optional[RawSide]:
    if not sides or index >= len(sides):
        return None
    return sides[index]


def parse_match_body(raw: Mapping[str, Any]) -> RawMatchBody:
    """
    Validate the match body against the input schema.

    Raises:
        MalformedInputError: If score.sets is not a list of set entries
    """
    try:
        return RawMatchBody.model_validate(dict(match_body(raw)))
    except ValidationError as e:
        errors = e.errors()
        first = errors[0] if errors else {}
        ctx = first.get("ctx") or {}
        location = ctx.get("path") or ".".join(str(part) for part in first.get("loc", ()))
        message = ctx.get("reason") or first.get("msg", "invalid value")
        raise MalformedInputError(
            f"Malformed scoring data at '{location}': {message}"
        ) from e


# =============================================================================
# NORMALIZATION
# =============================================================================

def normalize(raw: Any) -> NormalizedScore:
    """
    Normalize a raw scoring payload in one pass.

    Args:
        raw: Decoded JSON payload from a scoring application

    Returns:
        NormalizedScore holding the canonical update and the projection

    Raises:
        MissingMatchIdError: If no match ID candidate resolves
        MalformedInputError: If score.sets is not a list of set entries
    """
    match_id = resolve_match_id(raw)
    if match_id is None:
        raise MissingMatchIdError()

    body = parse_match_body(raw)
    score = body.score
    status = map_match_status(body.matchStatus)
    server = map_server(score.server if score else None)
    sets = map_sets(score.sets if score else None)

    side1_points = safe_str(score.side1PointScore if score else None, DEFAULT_POINT_SCORE)
    side2_points = safe_str(score.side2PointScore if score else None, DEFAULT_POINT_SCORE)

    update = CanonicalScoreUpdate(
        match_id=match_id,
        status=status,
        score_string_side1=safe_str(score.scoreStringSide1 if score else None, DEFAULT_SCORE_STRING),
        score_string_side2=safe_str(score.scoreStringSide2 if score else None, DEFAULT_SCORE_STRING),
        side1_point_score=side1_points,
        side2_point_score=side2_points,
        server=server,
        sets=sets,
        winning_side=body.winningSide,
    )

    projection = ScoreboardProjection(
        match_id=match_id,
        status=status,
        side1_player=player_display_name(_side(body.sides, 0)),
        side2_player=player_display_name(_side(body.sides, 1)),
        side1_points=side1_points,
        side2_points=side2_points,
        sets=sets,
        serving_side=server.side_number,
        serving_player=server.player_number,
        format=body.matchFormat,
        court=body.courtId,
        start_time=body.startDate,
    )

    logger.debug(f"Normalized match {match_id}: status={status.value}, sets={len(sets)}")
    return NormalizedScore(update=update, projection=projection)
