# sitehire/models/service.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from enum import Enum
from uuid import UUID

class ServiceCategory(str, Enum):
    HEAVY_EQUIPMENT = "heavy_equipment"
    WATER_TANKS = "water_tanks"
    SAND_MATERIALS = "sand_materials"
    LABOR_HIRE = "labor_hire"

class PriceType(str, Enum):
    FIXED = "fixed"
    HOURLY = "hourly"
    PER_UNIT = "per_unit"

class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    category: ServiceCategory
    image_url: Optional[str] = None
    base_price: float = Field(..., ge=0)
    price_type: PriceType = PriceType.FIXED
    platform_fee: float = Field(0, ge=0)
    is_instant_booking: bool = False
    is_available_today: bool = False

class ServiceOut(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = ""
    category: ServiceCategory
    image_url: Optional[str] = None
    base_price: float
    price_type: PriceType
    platform_fee: float = 0
    is_instant_booking: bool = False
    is_available_today: bool = False
    is_active: bool
    created_at: datetime

class ServiceSummary(BaseModel):
    id: UUID
    name: str
    image_url: Optional[str] = None

class ServiceActiveUpdate(BaseModel):
    is_active: bool

class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None
    base_price: Optional[float] = Field(None, ge=0)
    price_type: Optional[PriceType] = None
    platform_fee: Optional[float] = Field(None, ge=0)
    is_instant_booking: Optional[bool] = None
    is_available_today: Optional[bool] = None
    is_active: Optional[bool] = None
