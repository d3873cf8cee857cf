# sitehire/routes/catalog.py
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from ..database import get_store
from ..errors import NotFoundError
from ..models.service import ServiceCategory, ServiceOut
from ..store import Store

catalog_router = APIRouter(prefix="/services", tags=["Services"])

@catalog_router.get("/", response_model=List[ServiceOut])
async def list_services(
    category: Optional[ServiceCategory] = None,
    search: Optional[str] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    instant_booking: Optional[bool] = None,
    available_today: Optional[bool] = None,
    limit: int = Query(12, ge=1, le=100),
    offset: int = Query(0, ge=0),
    store: Store = Depends(get_store)
):
    return await store.list_services(
        category=category.value if category else None,
        search=search,
        min_price=min_price,
        max_price=max_price,
        instant_booking=instant_booking,
        available_today=available_today,
        limit=limit,
        offset=offset
    )

@catalog_router.get("/{service_id}", response_model=ServiceOut)
async def get_service(service_id: str, store: Store = Depends(get_store)):
    service = await store.get_service(service_id)
    if not service:
        raise NotFoundError("Service", service_id)
    return service
