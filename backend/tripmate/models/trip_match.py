"""
TripMatch - a directed compatibility edge between two trips.

Matches are always written in pairs (A->B and B->A) with the same score, so
each side can list its own matches with a simple ``trip_id`` filter.
"""

from enum import Enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from tripmate.database import Base


class MatchStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class TripMatch(Base):
    __tablename__ = "trip_matches"

    id = Column(Integer, primary_key=True, index=True)

    trip_id = Column(
        Integer,
        ForeignKey("trips.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    matched_trip_id = Column(
        Integer,
        ForeignKey("trips.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    match_score = Column(Integer, nullable=False)

    # Rendered reason tags, comma separated (e.g. "same_travel_date,same_transport_mode")
    match_reasons = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default=MatchStatus.PENDING.value)

    # Set explicitly so both halves of a pair share one timestamp
    created_at = Column(DateTime, nullable=False)

    trip = relationship("Trip", foreign_keys=[trip_id])
    matched_trip = relationship("Trip", foreign_keys=[matched_trip_id])

    def __repr__(self) -> str:
        return f"<TripMatch {self.id}: {self.trip_id}->{self.matched_trip_id} score={self.match_score}>"

    @property
    def reasons(self) -> list[str]:
        if not self.match_reasons:
            return []
        return self.match_reasons.split(",")
