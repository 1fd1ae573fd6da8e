from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Any, Optional


class EmergencyContactCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[Any] = None
    phone: Optional[Any] = None
    email: Optional[Any] = None
    relationship: Optional[str] = None


class EmergencyContactResponse(BaseModel):
    id: int
    user_id: str
    name: str
    phone: str
    email: str
    relationship: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CurrentLocation(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None
    name: Optional[str] = None


class EmergencyAlertCreate(BaseModel):
    trip_id: Optional[int] = None
    location_type: Optional[str] = None
    message: Optional[str] = None
    current_location: Optional[CurrentLocation] = None


class NotifiedContact(BaseModel):
    id: int
    name: str
    phone: str
    email: str
    sms_delivered: bool


class EmergencyAlertResult(BaseModel):
    success: bool
    alert_id: int
    contacts_notified: int
    sms_delivered: int
    sms_failed: int
    message: str
    contacts: list[NotifiedContact]


class EmergencyAlertResponse(BaseModel):
    id: int
    user_id: str
    trip_id: Optional[int] = None
    alert_type: str
    location_lat: Optional[float] = None
    location_lng: Optional[float] = None
    location_name: Optional[str] = None
    message: str
    sent_to: list[int] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
