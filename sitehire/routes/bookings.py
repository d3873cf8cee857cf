# sitehire/routes/bookings.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional

from ..database import get_store
from ..models.booking import BookingCancel, BookingCreate, BookingOut, BookingRebook, CustomerBookingOut
from ..models.offer import AcceptedOffer, OfferCreate, OfferList, OfferOut
from ..errors import NotFoundError
from ..services import lifecycle
from ..store import Store
from ..utils.auth import get_current_user

bookings_router = APIRouter(prefix="/bookings", tags=["Bookings"])
offers_router = APIRouter(prefix="/offers", tags=["Offers"])

@bookings_router.post("/", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking: BookingCreate,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    if current_user["role"] != "customer":
        raise HTTPException(status_code=403, detail="Only customers can create bookings")

    return await lifecycle.create_booking(
        store,
        customer_id=current_user["id"],
        service_id=booking.service_id,
        location=booking.location,
        booking_date=booking.date,
        booking_time=booking.time,
        quantity=booking.quantity,
        notes=booking.notes
    )

@bookings_router.get("/", response_model=List[CustomerBookingOut])
async def get_my_bookings(
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    if current_user["role"] != "customer":
        raise HTTPException(status_code=403, detail="Only customers can access this endpoint")

    return await lifecycle.list_customer_bookings(store, current_user["id"])

@bookings_router.get("/open", response_model=List[BookingOut])
async def get_open_bookings(
    limit: int = Query(20, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    if current_user["role"] not in ("driver", "admin"):
        raise HTTPException(status_code=403, detail="Only drivers can browse open bookings")

    return await lifecycle.list_open_bookings(store, limit)

@bookings_router.get("/assigned", response_model=List[BookingOut])
async def get_assigned_bookings(
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    if current_user["role"] != "driver":
        raise HTTPException(status_code=403, detail="Only drivers can access this endpoint")

    return await lifecycle.list_driver_bookings(store, current_user["id"])

@bookings_router.get("/{booking_id}", response_model=BookingOut)
async def get_booking_by_id(
    booking_id: str,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    return await lifecycle.get_booking(store, booking_id, current_user)

@bookings_router.post("/{booking_id}/offers", response_model=OfferOut, status_code=status.HTTP_201_CREATED)
async def submit_offer(
    booking_id: str,
    offer: OfferCreate,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    if current_user["role"] != "driver":
        raise HTTPException(status_code=403, detail="Only drivers can make offers")

    return await lifecycle.submit_offer(
        store,
        booking_id,
        driver_id=current_user["id"],
        offered_price=offer.offered_price,
        distance_km=offer.distance_km
    )

@bookings_router.get("/{booking_id}/offers", response_model=OfferList)
async def get_booking_offers(
    booking_id: str,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    offers = await lifecycle.list_offers(store, booking_id, current_user)
    return {"offers": offers, "best_offer": lifecycle.best_offer(offers)}

@bookings_router.post("/{booking_id}/start", response_model=BookingOut)
async def start_booking(
    booking_id: str,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    if current_user["role"] not in ("driver", "admin"):
        raise HTTPException(status_code=403, detail="Only drivers can start bookings")

    return await lifecycle.advance_to_in_progress(store, booking_id, current_user)

@bookings_router.post("/{booking_id}/complete", response_model=BookingOut)
async def complete_booking(
    booking_id: str,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    if current_user["role"] not in ("driver", "admin"):
        raise HTTPException(status_code=403, detail="Only drivers can complete bookings")

    return await lifecycle.complete_booking(store, booking_id, current_user)

@bookings_router.post("/{booking_id}/cancel", response_model=BookingOut)
async def cancel_booking(
    booking_id: str,
    cancel_data: Optional[BookingCancel] = None,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    reason = cancel_data.reason if cancel_data else None
    return await lifecycle.cancel_booking(store, booking_id, current_user, reason)

@bookings_router.post("/{booking_id}/rebook", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
async def rebook(
    booking_id: str,
    rebook_data: BookingRebook,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    if current_user["role"] != "customer":
        raise HTTPException(status_code=403, detail="Only customers can rebook")

    return await lifecycle.rebook_booking(
        store,
        booking_id,
        current_user,
        booking_date=rebook_data.date,
        booking_time=rebook_data.time,
        location=rebook_data.location,
        quantity=rebook_data.quantity,
        notes=rebook_data.notes
    )

@offers_router.post("/{offer_id}/accept", response_model=AcceptedOffer)
async def accept_offer(
    offer_id: str,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    if current_user["role"] not in ("customer", "admin"):
        raise HTTPException(status_code=403, detail="Only customers can accept offers")

    offer = await store.get_offer(offer_id)
    if not offer:
        raise NotFoundError("Offer", offer_id)

    accepted, booking = await lifecycle.accept_offer(store, offer["booking_id"], offer_id, current_user)
    return {"offer": accepted, "booking": booking}
