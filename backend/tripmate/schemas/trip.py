from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Any, Optional


class TripCreate(BaseModel):
    # Extra keys are kept so the API can refuse a smuggled user id explicitly
    model_config = ConfigDict(extra="allow")

    source: Optional[str] = None
    destination: Optional[str] = None
    travel_date: Optional[str] = None
    travel_time: Optional[str] = None
    transport_mode: Optional[str] = None
    optimization_mode: Optional[str] = None
    route_data: Optional[Any] = None
    match_radius: Optional[Any] = None


class TripResponse(BaseModel):
    id: int
    user_id: str
    source: str
    destination: str
    source_lat: Optional[float] = None
    source_lon: Optional[float] = None
    destination_lat: Optional[float] = None
    destination_lon: Optional[float] = None
    travel_date: str
    travel_time: str
    transport_mode: str
    optimization_mode: str
    status: str
    route_data: Optional[Any] = None
    route_geometry: Optional[list[list[float]]] = None
    match_radius: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    match_count: int = 0

    class Config:
        from_attributes = True


class TripSummary(BaseModel):
    id: int
    user_id: str
    source: str
    destination: str
    travel_date: str
    travel_time: str
    transport_mode: str

    class Config:
        from_attributes = True


class TripMatchResponse(BaseModel):
    id: int
    trip_id: int
    matched_trip_id: int
    match_score: int
    reasons: list[str] = []
    status: str
    created_at: datetime
    matched_trip: Optional[TripSummary] = None

    class Config:
        from_attributes = True
