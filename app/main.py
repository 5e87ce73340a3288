"""
Tennis Scoreboard Relay - Main FastAPI Application
Receives scoring data from tennis scoring applications, keeps the latest
scoreboard per match in memory and pushes updates to WebSocket clients
"""
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from app.auth import require_api_key, warn_on_default_keys
from app.crud import CourtInventory, CourtNotFoundError
from app.realtime.dispatcher import BroadcastDispatcher
from app.realtime.gateway import RealtimeGateway
from app.realtime.registry import SubscriptionRegistry
from app.schemas import Court, CourtCreate, CourtUpdate
from app.scoring.service import ScoringService
from app.scoring.store import InMemoryScoreboardStore
from app.utils.helpers import utc_now_iso
from config.settings import settings

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger("main")

# Version tracking
APP_VERSION = "v1.0.0"
APP_NAME = "Tennis Scoreboard Relay"

router = APIRouter()


# =============================================================================
# SERVICE ENDPOINTS
# =============================================================================

@router.get("/health")
def health_check(request: Request):
    """Health check endpoint."""
    return {
        "status": "ok",
        "matches": len(request.app.state.store),
        "clients": len(request.app.state.registry.connected_clients()),
    }


@router.get("/version")
def version_info():
    """Version information endpoint."""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "full": f"{APP_NAME} {APP_VERSION}",
    }


@router.get("/stats")
def realtime_stats(request: Request):
    """Store, subscription and broadcast statistics."""
    state = request.app.state
    return {
        "store": state.store.get_stats(),
        "registry": state.registry.get_stats(),
        "dispatcher": state.dispatcher.get_stats(),
    }


# =============================================================================
# SCORING API
# =============================================================================
# Soft-fail contract: these routes always answer 200 with {success: ...}.
# Handlers are async so normalization, store writes and fanout run on the
# event loop alongside the WebSocket sessions.

@router.post("/scoring/update", dependencies=[Depends(require_api_key)])
async def scoring_update(request: Request) -> Dict[str, Any]:
    """
    Main integration endpoint for scoring applications.

    Accepts the full scoring JSON, maps it to scoreboard data, stores it
    and broadcasts it to connected WebSocket clients.
    """
    try:
        raw = await request.json()
    except ValueError as e:
        logger.warning(f"Scoring update with unreadable body: {e}")
        return {"success": False, "error": f"Invalid JSON body: {e}", "timestamp": utc_now_iso()}

    return request.app.state.scoring.ingest(raw)


@router.get("/scoring/scoreboard/{match_id}", dependencies=[Depends(require_api_key)])
async def scoring_scoreboard(match_id: str, request: Request) -> Dict[str, Any]:
    """Latest scoreboard data for a match, optimized for display."""
    return request.app.state.scoring.get_scoreboard(match_id)


@router.post("/scoring/test-mapping", dependencies=[Depends(require_api_key)])
async def scoring_test_mapping(request: Request) -> Dict[str, Any]:
    """
    Validate the mapping of a scoring payload without storing or
    broadcasting anything.
    """
    try:
        raw = await request.json()
    except ValueError as e:
        return {"success": False, "error": f"Invalid JSON body: {e}"}

    return request.app.state.scoring.test_mapping(raw)


# =============================================================================
# COURTS API
# =============================================================================

@router.get("/courts", response_model=List[Court], dependencies=[Depends(require_api_key)])
def list_courts(request: Request):
    """All active courts."""
    return request.app.state.courts.get_courts()


@router.get("/courts/{court_id}", response_model=Court, dependencies=[Depends(require_api_key)])
def get_court(court_id: str, request: Request):
    """Court by ID."""
    try:
        return request.app.state.courts.get_court(court_id)
    except CourtNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/courts", response_model=Court, status_code=201, dependencies=[Depends(require_api_key)])
def create_court(payload: CourtCreate, request: Request):
    return request.app.state.courts.create(payload)


@router.put("/courts/{court_id}", response_model=Court, dependencies=[Depends(require_api_key)])
def update_court(court_id: str, payload: CourtUpdate, request: Request):
    try:
        return request.app.state.courts.update(court_id, payload)
    except CourtNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/courts/{court_id}", status_code=204, dependencies=[Depends(require_api_key)])
def delete_court(court_id: str, request: Request):
    """Soft delete: the court is marked inactive."""
    try:
        request.app.state.courts.remove(court_id)
    except CourtNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)


# =============================================================================
# REAL-TIME CHANNEL
# =============================================================================

async def realtime_endpoint(websocket: WebSocket):
    """WebSocket session: join_match / leave_match / join_court, score_update pushes."""
    await websocket.app.state.gateway.serve(websocket)


# =============================================================================
# APPLICATION
# =============================================================================

def create_app() -> FastAPI:
    """
    Build the application with its own store, registry and dispatcher.

    These objects live on app.state for the lifetime of the process.
    """
    application = FastAPI(
        title=APP_NAME,
        description="Receives tennis scoring data and pushes simplified scoreboards in real time",
        version=APP_VERSION,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=settings.cors_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    store = InMemoryScoreboardStore()
    registry = SubscriptionRegistry()
    dispatcher = BroadcastDispatcher(registry)

    application.state.api_keys = settings.api_key_list
    application.state.store = store
    application.state.registry = registry
    application.state.dispatcher = dispatcher
    application.state.scoring = ScoringService(store, dispatcher)
    application.state.gateway = RealtimeGateway(
        registry, dispatcher, max_queue=settings.client_queue_size
    )
    application.state.courts = CourtInventory()

    application.include_router(router)
    application.add_api_websocket_route(settings.ws_path, realtime_endpoint)

    warn_on_default_keys()
    logger.info(f"{APP_NAME} {APP_VERSION} ready (WebSocket at {settings.ws_path})")
    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.port)
