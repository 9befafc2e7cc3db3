"""
HTTP surface over the parking store, the location provider and the
availability simulation.
"""

from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from .schemas import (
    AuthorizationRequest,
    CoordinatesModel,
    HealthResponse,
    LocationRequest,
    LocationResponse,
    NearbyResponse,
    ParkingListResponse,
    ParkingResponse,
    ReportRequest,
    ReportResponse,
    SimulationStatusResponse,
)
from ..core.config import VERSION, debug_enabled, get_report_unknown_policy
from ..core.errors import ReportValidationError
from ..core.heartbeat import Heartbeat, start_simulation
from ..core.location import AuthorizationStatus, LocationProvider
from ..core.reports import submit_report
from ..core.schema import Position, UserReport
from ..core.store import ParkingStore
from ..util.logging import logger

app = FastAPI(
    title="ParkPulse API",
    version=VERSION,
    description="Live parking availability simulation with distance ranking",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Process-wide state, created once at import
store = ParkingStore()
store.initialize()
location_provider = LocationProvider()
heartbeat = Heartbeat()


def get_store() -> ParkingStore:
    return store


def get_location_provider() -> LocationProvider:
    return location_provider


def get_heartbeat() -> Heartbeat:
    return heartbeat


@app.on_event("startup")
def start_background_simulation():
    if heartbeat.running:
        return
    try:
        start_simulation(store, heartbeat=heartbeat)
    except ValueError as e:
        logger.error(f"Availability simulation not started: {e}")


@app.on_event("shutdown")
def stop_background_simulation():
    heartbeat.stop()
    store.close()


def _resolve_position(lat: Optional[float], lon: Optional[float], provider: LocationProvider) -> Position:
    """Use explicit coordinates when given, else the provider's current position."""
    if lat is not None or lon is not None:
        if lat is None or lon is None:
            raise HTTPException(status_code=422, detail="lat and lon must be supplied together")
        try:
            return Position(lat, lon)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

    if not provider.is_authorized:
        raise HTTPException(status_code=403, detail="Location access not authorized")
    return provider.current_position()


def _location_response(provider: LocationProvider) -> LocationResponse:
    position = provider.current_position()
    return LocationResponse(
        latitude=position.latitude,
        longitude=position.longitude,
        authorized=provider.is_authorized,
        authorization_status=provider.authorization_status.value,
        force_default=provider.force_default,
    )


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint(store: ParkingStore = Depends(get_store), heartbeat: Heartbeat = Depends(get_heartbeat)):
    """Check system health."""
    return HealthResponse(
        status="healthy" if store.initialized and not store.closed else "unhealthy",
        version=VERSION,
        record_count=len(store),
        store_version=store.version,
        simulation=heartbeat.get_status()["status"],
    )


@app.get("/parking", response_model=ParkingListResponse)
def list_parking(store: ParkingStore = Depends(get_store)):
    """All parking locations in catalog order."""
    now = datetime.now()
    records = store.list_all()
    return ParkingListResponse(
        locations=[ParkingResponse.from_record(r, now=now) for r in records],
        count=len(records),
        version=store.version,
    )


# Define fixed /parking/* routes BEFORE /parking/{place_id} to avoid path parameter conflict
@app.get("/parking/nearby", response_model=NearbyResponse)
def nearby_parking(
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    limit: Optional[int] = Query(default=None, ge=1),
    store: ParkingStore = Depends(get_store),
    provider: LocationProvider = Depends(get_location_provider),
):
    """
    Parking locations ordered by distance.

    - **lat, lon**: origin (defaults to the location provider's position)
    - **limit**: maximum number of locations to return
    """
    origin = _resolve_position(lat, lon, provider)
    ranked = store.list_sorted_with_distance(origin)
    if limit is not None:
        ranked = ranked[:limit]

    now = datetime.now()
    return NearbyResponse(
        origin=CoordinatesModel(latitude=origin.latitude, longitude=origin.longitude),
        locations=[ParkingResponse.from_record(r, distance_m=d, now=now) for r, d in ranked],
        count=len(ranked),
        version=store.version,
    )


@app.get("/parking/nearest", response_model=ParkingResponse)
def nearest_parking(
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    store: ParkingStore = Depends(get_store),
    provider: LocationProvider = Depends(get_location_provider),
):
    """The single closest parking location."""
    origin = _resolve_position(lat, lon, provider)
    ranked = store.list_sorted_with_distance(origin)
    if not ranked:
        raise HTTPException(status_code=404, detail="No parking locations available")

    record, distance = ranked[0]
    return ParkingResponse.from_record(record, distance_m=distance)


@app.get("/parking/{place_id}", response_model=ParkingResponse)
def get_parking(place_id: str, store: ParkingStore = Depends(get_store)):
    record = store.get(place_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Parking location not found")
    return ParkingResponse.from_record(record)


@app.post("/parking/{place_id}/reports", response_model=ReportResponse)
def report_parking(place_id: str, request: ReportRequest, store: ParkingStore = Depends(get_store)):
    """Submit a crowdsourced availability report (explicit count or 'full')."""
    report = UserReport(
        place_id=place_id,
        available_spaces=request.available_spaces,
        is_full=request.is_full,
        note=request.note,
        user_id=request.user_id,
    )

    try:
        result = submit_report(store, report)
    except ReportValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if result.reason == "unknown place_id" and get_report_unknown_policy() == "strict":
        raise HTTPException(status_code=404, detail="Parking location not found")

    return ReportResponse(
        place_id=result.place_id,
        applied=result.applied,
        available_spaces=result.available_spaces,
        reason=result.reason,
        version=store.version,
    )


@app.get("/location", response_model=LocationResponse)
def get_location(provider: LocationProvider = Depends(get_location_provider)):
    return _location_response(provider)


@app.put("/location", response_model=LocationResponse)
def set_location(request: LocationRequest, provider: LocationProvider = Depends(get_location_provider)):
    """Override the current position (e.g. for testing a different neighbourhood)."""
    provider.set_custom_location(request.latitude, request.longitude)
    return _location_response(provider)


@app.delete("/location", response_model=LocationResponse)
def reset_location(provider: LocationProvider = Depends(get_location_provider)):
    provider.reset_to_default_location()
    return _location_response(provider)


@app.put("/location/authorization", response_model=LocationResponse)
def set_location_authorization(request: AuthorizationRequest, provider: LocationProvider = Depends(get_location_provider)):
    provider.set_authorization(AuthorizationStatus(request.status))
    return _location_response(provider)


@app.get("/simulation/status", response_model=SimulationStatusResponse)
def simulation_status(heartbeat: Heartbeat = Depends(get_heartbeat)):
    return SimulationStatusResponse(**heartbeat.get_status())
