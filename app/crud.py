"""
CRUD operations (Create, Read, Update, Delete)
In-memory court inventory, seeded with the venue's default courts
"""
import threading
import logging
from typing import Dict, List, Optional

from app.schemas import Court, CourtCreate, CourtUpdate
from app.utils.helpers import utc_now_iso

logger = logging.getLogger("crud")


class CourtNotFoundError(Exception):
    """Raised when a court ID does not exist."""

    def __init__(self, court_id: str):
        self.court_id = court_id
        super().__init__(f"Court with ID {court_id} not found")


DEFAULT_COURTS = [
    CourtCreate(name="Center Court", description="Main stadium court", surface_type="HARD", is_indoor=False),
    CourtCreate(name="Court 1", description="Practice court 1", surface_type="HARD", is_indoor=False),
    CourtCreate(name="Court 2", description="Practice court 2", surface_type="CLAY", is_indoor=True),
]


class CourtInventory:
    """
    Static court list. Deleting a court only marks it inactive.
    """

    def __init__(self, seed: Optional[List[CourtCreate]] = None):
        self._courts: Dict[str, Court] = {}
        self._lock = threading.Lock()
        for court in DEFAULT_COURTS if seed is None else seed:
            self.create(court)

    def get_courts(self) -> List[Court]:
        """
        Get all active courts
        """
        with self._lock:
            return [c for c in self._courts.values() if c.is_active]

    def get_court(self, court_id: str) -> Court:
        """
        Get a specific court by ID, active or not
        """
        with self._lock:
            court = self._courts.get(court_id)
        if court is None:
            raise CourtNotFoundError(court_id)
        return court

    def create(self, payload: CourtCreate) -> Court:
        now = utc_now_iso()
        with self._lock:
            court_id = str(len(self._courts) + 1)
            court = Court(
                id=court_id,
                name=payload.name,
                description=payload.description,
                surface_type=payload.surface_type,
                is_indoor=payload.is_indoor,
                is_active=True if payload.is_active is None else payload.is_active,
                created_at=now,
                updated_at=now,
            )
            self._courts[court_id] = court
        logger.info(f"Created court {court_id}: {court.name}")
        return court

    def update(self, court_id: str, payload: CourtUpdate) -> Court:
        """
        Apply the fields present in payload to a court
        """
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        with self._lock:
            court = self._courts.get(court_id)
            if court is None:
                raise CourtNotFoundError(court_id)
            updated = court.model_copy(update={**changes, "updated_at": utc_now_iso()})
            self._courts[court_id] = updated
        return updated

    def remove(self, court_id: str) -> None:
        """
        Soft delete: the court stays addressable by ID but leaves the list
        """
        self.update(court_id, CourtUpdate(is_active=False))
        logger.info(f"Deactivated court {court_id}")
