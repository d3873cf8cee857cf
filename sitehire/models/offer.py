# sitehire/models/offer.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional
from enum import Enum
from uuid import UUID

from .booking import BookingOut

class OfferStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"

class OfferCreate(BaseModel):
    offered_price: float = Field(..., gt=0)
    distance_km: float = Field(0, ge=0)

class DriverSummary(BaseModel):
    id: UUID
    name: str = "Unknown Driver"
    rating: float = 0
    total_reviews: int = 0

class OfferOut(BaseModel):
    id: UUID
    booking_id: UUID
    driver_id: UUID
    offered_price: float
    distance_km: float
    status: OfferStatus
    created_at: datetime
    driver: Optional[DriverSummary] = None

class OfferList(BaseModel):
    offers: List[OfferOut]
    best_offer: Optional[float] = None

class AcceptedOffer(BaseModel):
    offer: OfferOut
    booking: BookingOut
