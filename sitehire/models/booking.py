# sitehire/models/booking.py
from pydantic import BaseModel, Field, validator
from datetime import datetime, date as date_type, time as time_type
from typing import Optional
from enum import Enum
from uuid import UUID

from .service import ServiceSummary

class BookingStatus(str, Enum):
    WAITING_FOR_OFFERS = "waiting_for_offers"
    OFFER_ACCEPTED = "offer_accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

# Older rows were written with "pending" for the open state
LEGACY_OPEN_STATUS = "pending"

OPEN_STATUSES = frozenset({BookingStatus.WAITING_FOR_OFFERS.value, LEGACY_OPEN_STATUS})
TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED.value, BookingStatus.CANCELLED.value})

def normalize_status(status: str) -> str:
    """Map stored status spellings onto the canonical lifecycle states."""
    if status == LEGACY_OPEN_STATUS:
        return BookingStatus.WAITING_FOR_OFFERS.value
    return status

class BookingCreate(BaseModel):
    service_id: str
    location: str
    date: date_type
    time: time_type
    quantity: int = Field(1, ge=1)
    notes: Optional[str] = ""

class BookingOut(BaseModel):
    id: UUID
    customer_id: UUID
    service_id: UUID
    driver_id: Optional[UUID] = None
    location: str
    service_date: datetime
    quantity: int
    notes: Optional[str] = ""
    status: BookingStatus
    price: Optional[float] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @validator("status", pre=True)
    def canonical_status(cls, v):
        return normalize_status(v)

    class Config:
        json_encoders = {
            UUID: lambda v: str(v),
            datetime: lambda v: v.isoformat()
        }

class CustomerBookingOut(BookingOut):
    service: Optional[ServiceSummary] = None
    offers_count: int = 0
    best_offer: Optional[float] = None

class BookingCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)

class BookingRebook(BaseModel):
    date: date_type
    time: time_type
    location: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = None
