from sqlalchemy import Column, Integer, String, DateTime, Float, JSON, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from tripmate.database import Base
import enum


class TripStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Trip(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    source = Column(String(256), nullable=False)
    destination = Column(String(256), nullable=False)

    # Null when geocoding did not resolve the place name
    source_lat = Column(Float, nullable=True)
    source_lon = Column(Float, nullable=True)
    destination_lat = Column(Float, nullable=True)
    destination_lon = Column(Float, nullable=True)

    travel_date = Column(String(10), nullable=False)  # YYYY-MM-DD
    travel_time = Column(String(5), nullable=False)   # HH:MM

    transport_mode = Column(String(20), nullable=False)
    optimization_mode = Column(String(20), nullable=False)

    status = Column(String(20), nullable=False, default=TripStatus.ACTIVE.value, index=True)

    # Whatever the client sent along (e.g. the route it picked on the map)
    route_data = Column(JSON, nullable=True)
    # [[lat, lon], ...]
    route_geometry = Column(JSON, nullable=True)

    match_radius = Column(Integer, nullable=False, default=10)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User")

    def __repr__(self) -> str:
        return f"<Trip {self.id}: {self.source}->{self.destination} {self.travel_date} ({self.transport_mode})>"

    @property
    def source_coords(self) -> tuple[float, float] | None:
        if self.source_lat is None or self.source_lon is None:
            return None
        return (self.source_lat, self.source_lon)

    @property
    def destination_coords(self) -> tuple[float, float] | None:
        if self.destination_lat is None or self.destination_lon is None:
            return None
        return (self.destination_lat, self.destination_lon)
