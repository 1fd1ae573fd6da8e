from sqlalchemy import Column, Integer, String, DateTime, Float, Text, JSON, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from tripmate.database import Base


class EmergencyContact(Base):
    __tablename__ = "emergency_contacts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(128), nullable=False)
    phone = Column(String(32), nullable=False)
    email = Column(String(256), nullable=False)
    relationship = Column(String(64), nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class EmergencyAlert(Base):
    """An SOS alert. Recorded before any SMS goes out, so it survives delivery failures."""
    __tablename__ = "emergency_alerts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="SET NULL"), nullable=True)
    alert_type = Column(String(32), nullable=False, default="manual_sos")
    location_lat = Column(Float, nullable=True)
    location_lng = Column(Float, nullable=True)
    location_name = Column(String(256), nullable=True)
    message = Column(Text, nullable=False)
    # Contact ids the alert was addressed to
    sent_to = Column(JSON, default=list)
    created_at = Column(DateTime, server_default=func.now(), index=True)

    trip = relationship("Trip")
