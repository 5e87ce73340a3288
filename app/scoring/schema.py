"""
Pydantic input schema for raw scoring payloads.

Scoring applications differ in field names and nesting, so every field is
optional and unknown fields are ignored. A value that cannot be coerced to
its field's type is dropped to None and the mapper's default applies; a
non-mapping where an object is expected reads as an empty object.

The only shape faults reported are on the set list: ``score.sets`` must be
a list whose entries are not null.
"""
from typing import Any, ClassVar, FrozenSet, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_core import PydanticCustomError

SHAPE_FAULT = "shape_fault"


def _fault_detail(field_name: str, error: ValidationError) -> Tuple[str, str]:
    """Dotted path and reason of the first error under a field."""
    first = error.errors()[0]
    ctx = first.get("ctx") or {}
    if first["type"] == SHAPE_FAULT:
        inner, reason = ctx["path"], ctx["reason"]
    else:
        inner = ".".join(str(part) for part in first["loc"])
        reason = first["msg"]
    return ".".join(part for part in (field_name, inner) if part), reason


class RawModel(BaseModel):
    """Lenient base: ignore unknown fields, accept numbers where strings are expected."""
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    # Fields whose coercion failures are reported instead of dropped
    shape_fields: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def coerce_objects(cls, data: Any) -> Any:
        if data is None or isinstance(data, Mapping):
            return data
        return {}

    @field_validator("*", mode="wrap")
    @classmethod
    def drop_uncoercible(cls, value, handler, info):
        try:
            return handler(value)
        except ValidationError as e:
            nested_fault = any(err["type"] == SHAPE_FAULT for err in e.errors())
            if info.field_name not in cls.shape_fields and not nested_fault:
                return None
            path, reason = _fault_detail(info.field_name, e)
            raise PydanticCustomError(
                SHAPE_FAULT, "{path}: {reason}", {"path": path, "reason": reason}
            )


class RawParticipant(RawModel):
    first_name: Optional[str] = None
    firstName: Optional[str] = None
    last_name: Optional[str] = None
    lastName: Optional[str] = None


class RawPlayer(RawModel):
    participant: Optional[RawParticipant] = None


class RawSide(RawModel):
    players: Optional[List[RawPlayer]] = None


class RawServer(RawModel):
    sideNumber: Optional[int] = None
    playerNumber: Optional[int] = None
    player: Optional[str] = None
    playerId: Optional[str] = None
    returningSide: Optional[str] = None


class RawSet(RawModel):
    setNumber: Optional[int] = None
    side1Score: Optional[int] = None
    side2Score: Optional[int] = None
    side1TiebreakScore: Optional[int] = None
    side2TiebreakScore: Optional[int] = None
    winningSide: Optional[int] = None
    isCompleted: Optional[bool] = None


class RawScore(RawModel):
    shape_fields: ClassVar[FrozenSet[str]] = frozenset({"sets"})

    scoreStringSide1: Optional[str] = None
    scoreStringSide2: Optional[str] = None
    side1PointScore: Optional[str] = None
    side2PointScore: Optional[str] = None
    server: Optional[RawServer] = None
    sets: Optional[List[RawSet]] = None


class RawMatchBody(RawModel):
    """
    The match body: the mapping under ``data`` when present, otherwise the
    payload itself.
    """
    matchId: Optional[Any] = None
    match_doc_id: Optional[Any] = Field(None, alias="_id")
    # Status is mapped totally, so any value is accepted here
    matchStatus: Optional[Any] = None
    score: Optional[RawScore] = None
    sides: Optional[List[Optional[RawSide]]] = None
    winningSide: Optional[int] = None
    matchFormat: Optional[Any] = None
    courtId: Optional[str] = None
    startDate: Optional[str] = None
