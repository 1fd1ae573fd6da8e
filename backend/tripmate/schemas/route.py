from pydantic import BaseModel, ConfigDict
from typing import Optional


class RouteRequest(BaseModel):
    boarding_points: list[str] = []
    destination: Optional[str] = None
    transport_mode: str = "car"
    optimization_mode: str = "fastest"


class RouteInstructionResponse(BaseModel):
    distance: float
    duration: float
    instruction: str
    name: str
    type: str


class RouteOptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    coordinates: list[list[float]]
    distance: float
    duration: float
    cost: float
    mode: str
    optimization_type: Optional[str] = None
    fuel_efficiency: Optional[float] = None
    traffic_factor: Optional[float] = None
    instructions: list[RouteInstructionResponse] = []


class RouteAlternativesResponse(BaseModel):
    routes: list[RouteOptionResponse]
