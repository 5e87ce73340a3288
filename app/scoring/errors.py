"""
Scoring pipeline exceptions.

Raised inside the pipeline and converted to soft-fail envelopes by
ScoringService; none of them should reach the HTTP layer.
"""


class ScoringError(Exception):
    """Base class for scoring pipeline failures."""
    pass


class MissingMatchIdError(ScoringError):
    """Raised when no candidate field resolves to a non-empty match ID."""

    def __init__(self, message: str = "Match ID not found in scoring data"):
        super().__init__(message)


class MalformedInputError(ScoringError):
    """Raised when a payload field has a shape the input schema cannot coerce."""
    pass


class SnapshotNotFoundError(ScoringError):
    """Raised when no update has ever been accepted for a match ID."""

    def __init__(self, match_id: str):
        self.match_id = match_id
        super().__init__(f"No scoreboard snapshot for match {match_id}")
