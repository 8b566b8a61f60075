# app/schemas/event.py
from datetime import date, datetime
from typing import Optional, Literal

from pydantic import BaseModel, ConfigDict, Field

EventType = Literal["conference", "workshop", "networking", "award_ceremony", "other"]
EventStatus = Literal["active", "inactive", "cancelled", "completed"]
RegistrationStatus = Literal["registered", "cancelled", "attended", "no_show"]
PaymentStatus = Literal["pending", "paid", "refunded", "waived"]


class EventCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    event_date: date
    event_type: EventType = "other"
    capacity: int = Field(default=0, ge=0)
    status: EventStatus = "active"
    location: Optional[str] = None
    registration_fee: float = Field(default=0, ge=0)


class EventUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    event_date: Optional[date] = None
    event_type: Optional[EventType] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    status: Optional[EventStatus] = None
    location: Optional[str] = None
    registration_fee: Optional[float] = Field(default=None, ge=0)


class EventResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    event_date: date
    event_type: str
    capacity: int
    current_registrations: int
    status: str
    location: Optional[str] = None
    registration_fee: float
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RegistrationCreate(BaseModel):
    notes: Optional[str] = None


class RegistrationUpdate(BaseModel):
    registration_status: Optional[RegistrationStatus] = None
    payment_status: Optional[PaymentStatus] = None
    notes: Optional[str] = None


class RegistrationResponse(BaseModel):
    id: str
    event_id: str
    user_id: str
    registration_status: str
    payment_status: str
    registration_date: Optional[datetime] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class EventStats(BaseModel):
    total: int
    active: int
    upcoming: int
    total_registrations: int
    total_capacity: int
