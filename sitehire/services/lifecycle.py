# sitehire/services/lifecycle.py
"""Booking lifecycle and offer settlement.

    waiting_for_offers -> offer_accepted -> in_progress -> completed
    any non-terminal state -> cancelled

Every write goes through a conditional store update keyed on the state the
booking is expected to be in, so a transition that lost a race surfaces as
InvalidStateError instead of overwriting the winner.
"""
import logging
from datetime import date, datetime, time, timezone
from typing import Iterable, List, Optional

from ..config import settings
from ..errors import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from ..models.booking import BookingStatus, OPEN_STATUSES, TERMINAL_STATUSES, normalize_status
from ..models.offer import OfferStatus
from ..models.transaction import TransactionStatus
from ..store import Store

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = frozenset(OPEN_STATUSES | {
    BookingStatus.OFFER_ACCEPTED.value,
    BookingStatus.IN_PROGRESS.value,
})


def _is_admin(actor: Optional[dict]) -> bool:
    return bool(actor) and actor.get("role") == "admin"


def _canonical(statuses: Iterable[str]) -> set:
    return {normalize_status(s) for s in statuses}


def _parse_date(value, field: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(field, f"Invalid {field}, expected YYYY-MM-DD")


def _parse_time(value, field: str) -> time:
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(field, f"Invalid {field}, expected HH:MM")


async def _load_booking(store: Store, booking_id: str) -> dict:
    booking = await store.get_booking(booking_id)
    if not booking:
        raise NotFoundError("Booking", booking_id)
    return booking


async def create_booking(
    store: Store,
    customer_id: str,
    service_id: Optional[str],
    location: Optional[str],
    booking_date,
    booking_time,
    quantity: Optional[int] = 1,
    notes: Optional[str] = ""
) -> dict:
    """Open a new booking for offers"""
    required = (
        ("service_id", service_id),
        ("location", location),
        ("date", booking_date),
        ("time", booking_time),
    )
    for field, value in required:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(field)

    quantity = 1 if quantity is None else quantity
    if quantity < 1:
        raise ValidationError("quantity", "quantity must be at least 1")

    service_date = datetime.combine(
        _parse_date(booking_date, "date"), _parse_time(booking_time, "time")
    )
    if service_date.tzinfo is None:
        service_date = service_date.replace(tzinfo=timezone.utc)

    service = await store.get_service(service_id)
    if not service or not service.get("is_active", True):
        raise NotFoundError("Service", service_id)

    booking = await store.create_booking({
        "customer_id": str(customer_id),
        "service_id": str(service_id),
        "location": location.strip(),
        "service_date": service_date,
        "quantity": quantity,
        "notes": notes or "",
        "status": BookingStatus.WAITING_FOR_OFFERS.value,
    })
    logger.info(f"Booking {booking['id']} created by customer {customer_id}")
    return booking


async def rebook_booking(
    store: Store,
    booking_id: str,
    actor: dict,
    booking_date,
    booking_time,
    location: Optional[str] = None,
    quantity: Optional[int] = None,
    notes: Optional[str] = None
) -> dict:
    """Open a new booking for the same service as an earlier one.

    Location, quantity and notes carry over unless given.
    """
    previous = await _load_booking(store, booking_id)
    if str(actor["id"]) != previous["customer_id"]:
        raise ForbiddenError("Only the customer who made the booking can rebook it")

    booking = await create_booking(
        store,
        customer_id=previous["customer_id"],
        service_id=previous["service_id"],
        location=previous["location"] if location is None else location,
        booking_date=booking_date,
        booking_time=booking_time,
        quantity=previous["quantity"] if quantity is None else quantity,
        notes=previous["notes"] if notes is None else notes
    )
    logger.info(f"Booking {booking['id']} rebooked from {booking_id}")
    return booking


async def submit_offer(
    store: Store,
    booking_id: str,
    driver_id: str,
    offered_price: float,
    distance_km: float = 0
) -> dict:
    if offered_price is None or offered_price <= 0:
        raise ValidationError("offered_price", "offered_price must be a positive number")
    if distance_km is None or distance_km < 0:
        raise ValidationError("distance_km", "distance_km cannot be negative")

    booking = await _load_booking(store, booking_id)
    status = normalize_status(booking["status"])
    if booking["status"] not in OPEN_STATUSES:
        raise InvalidStateError("Booking", {BookingStatus.WAITING_FOR_OFFERS.value}, status)

    offer = await store.create_offer({
        "booking_id": booking["id"],
        "driver_id": str(driver_id),
        "offered_price": float(offered_price),
        "distance_km": float(distance_km),
    })
    logger.info(f"Driver {driver_id} offered {offered_price:.2f} on booking {booking['id']}")
    return offer


async def accept_offer(
    store: Store,
    booking_id: str,
    offer_id: str,
    actor: Optional[dict] = None
):
    """Accept one offer, decline its pending siblings and move the booking to offer_accepted.

    Returns (offer, booking) as stored after the write.
    """
    booking = await _load_booking(store, booking_id)
    offer = await store.get_offer(offer_id)
    if not offer:
        raise NotFoundError("Offer", offer_id)

    if actor and not _is_admin(actor) and str(actor["id"]) != booking["customer_id"]:
        raise ForbiddenError("Only the customer who made the booking can accept offers")

    if offer["booking_id"] != booking["id"]:
        raise InvalidStateError(
            "Offer", {booking["id"]}, offer["booking_id"],
            detail=f"Offer {offer_id} belongs to booking {offer['booking_id']}, not {booking['id']}"
        )
    if offer["status"] != OfferStatus.PENDING.value:
        raise InvalidStateError("Offer", {OfferStatus.PENDING.value}, offer["status"])
    if booking["status"] not in OPEN_STATUSES:
        raise InvalidStateError(
            "Booking", {BookingStatus.WAITING_FOR_OFFERS.value}, normalize_status(booking["status"])
        )

    settled = await store.settle_offer(booking["id"], offer["id"], OPEN_STATUSES)
    if settled is None:
        # Lost the race against another accept or a cancellation
        current = await _load_booking(store, booking_id)
        logger.info(f"Accept of offer {offer_id} lost on booking {booking_id} ({current['status']})")
        if current["status"] not in OPEN_STATUSES:
            raise InvalidStateError(
                "Booking", {BookingStatus.WAITING_FOR_OFFERS.value}, normalize_status(current["status"])
            )
        current_offer = await store.get_offer(offer_id)
        raise InvalidStateError(
            "Offer", {OfferStatus.PENDING.value},
            current_offer["status"] if current_offer else "missing"
        )

    accepted, booking = settled
    logger.info(f"Offer {accepted['id']} accepted on booking {booking['id']}")
    return accepted, booking


async def _assigned_booking(store: Store, booking_id: str, expected: str, actor: Optional[dict]) -> dict:
    """Load a booking its assigned driver (or an admin) is about to move on from `expected`"""
    booking = await _load_booking(store, booking_id)
    if actor and not _is_admin(actor) and str(actor["id"]) != booking.get("driver_id"):
        raise ForbiddenError("Only the assigned driver can update this booking")

    current = normalize_status(booking["status"])
    if current != expected:
        raise InvalidStateError("Booking", {expected}, current)
    return booking


async def _lost_transition(store: Store, booking_id: str, expected: str):
    latest = await _load_booking(store, booking_id)
    raise InvalidStateError("Booking", {expected}, normalize_status(latest["status"]))


async def _transition(
    store: Store,
    booking_id: str,
    expected: str,
    target: str,
    actor: Optional[dict]
) -> dict:
    booking = await _assigned_booking(store, booking_id, expected, actor)

    updated = await store.transition_booking(booking["id"], {expected}, target)
    if updated is None:
        await _lost_transition(store, booking_id, expected)

    logger.info(f"Booking {booking_id} moved {expected} -> {target}")
    return updated


async def advance_to_in_progress(store: Store, booking_id: str, actor: Optional[dict] = None) -> dict:
    return await _transition(
        store, booking_id,
        BookingStatus.OFFER_ACCEPTED.value, BookingStatus.IN_PROGRESS.value,
        actor
    )


def _payout(booking: dict, rate: float) -> dict:
    gross = round(float(booking["price"]), 2)
    fee = round(gross * rate, 2)
    return {
        "booking_id": booking["id"],
        "driver_id": booking["driver_id"],
        "customer_id": booking["customer_id"],
        "gross_amount": gross,
        "company_fee": fee,
        "driver_amount": round(gross - fee, 2),
        "status": TransactionStatus.PENDING.value,
    }


async def complete_booking(
    store: Store,
    booking_id: str,
    actor: Optional[dict] = None,
    commission_rate: Optional[float] = None
) -> dict:
    """Finish the job and record the pending payout for the driver.

    The status change and the payout are written together; if either fails
    the booking stays in_progress.
    """
    expected = BookingStatus.IN_PROGRESS.value
    booking = await _assigned_booking(store, booking_id, expected, actor)

    transaction = None
    if booking.get("price"):
        rate = settings.commission_rate if commission_rate is None else commission_rate
        transaction = _payout(booking, rate)

    result = await store.complete_booking(booking["id"], {expected}, transaction)
    if result is None:
        await _lost_transition(store, booking_id, expected)

    completed, recorded = result
    logger.info(f"Booking {booking_id} moved {expected} -> {completed['status']}")
    if recorded:
        logger.info(f"Transaction {recorded['id']} recorded for booking {booking_id}")
    return completed


async def cancel_booking(
    store: Store,
    booking_id: str,
    actor: Optional[dict] = None,
    reason: Optional[str] = None
) -> dict:
    """Cancel from any non-terminal state.

    An already accepted offer keeps its status; offers still pending are declined.
    """
    booking = await _load_booking(store, booking_id)
    if actor and not _is_admin(actor):
        parties = {booking["customer_id"], booking.get("driver_id")}
        if str(actor["id"]) not in parties:
            raise ForbiddenError("Not your booking")

    if booking["status"] in TERMINAL_STATUSES:
        raise InvalidStateError("Booking", _canonical(ACTIVE_STATUSES), booking["status"])

    updated = await store.transition_booking(
        booking["id"], ACTIVE_STATUSES, BookingStatus.CANCELLED.value,
        cancellation_reason=reason
    )
    if updated is None:
        latest = await _load_booking(store, booking_id)
        raise InvalidStateError("Booking", _canonical(ACTIVE_STATUSES), normalize_status(latest["status"]))

    declined = await store.decline_pending_offers(booking["id"])
    logger.info(
        f"Booking {booking_id} cancelled by {actor['id'] if actor else 'system'}, "
        f"{declined} pending offers declined"
    )
    return updated


def best_offer(offers: List[dict]) -> Optional[float]:
    """Lowest offered price; the first one wins a tie"""
    if not offers:
        return None
    return min(offers, key=lambda o: o["offered_price"])["offered_price"]


async def get_booking(store: Store, booking_id: str, actor: dict) -> dict:
    """A booking as seen by one of its parties, an admin, or a driver while it is open"""
    booking = await _load_booking(store, booking_id)
    if _is_admin(actor):
        return booking
    uid = str(actor["id"])
    if uid in (booking["customer_id"], booking.get("driver_id")):
        return booking
    if actor.get("role") == "driver" and booking["status"] in OPEN_STATUSES:
        return booking
    raise ForbiddenError("Not your booking")


async def list_offers(store: Store, booking_id: str, actor: Optional[dict] = None) -> List[dict]:
    """Offers on a booking, cheapest first, each with a driver summary.

    Drivers only see their own offers.
    """
    booking = await _load_booking(store, booking_id)
    offers = await store.list_offers([booking["id"]])

    if actor and not _is_admin(actor) and str(actor["id"]) != booking["customer_id"]:
        if actor.get("role") != "driver":
            raise ForbiddenError("Not your booking")
        offers = [o for o in offers if o["driver_id"] == str(actor["id"])]

    drivers = {u["id"]: u for u in await store.get_users({o["driver_id"] for o in offers})}
    for offer in offers:
        driver = drivers.get(offer["driver_id"])
        offer["driver"] = {
            "id": offer["driver_id"],
            "name": (driver or {}).get("full_name") or "Unknown Driver",
            "rating": float((driver or {}).get("rating") or 0),
            "total_reviews": (driver or {}).get("total_reviews") or 0,
        }
    return offers


async def list_customer_bookings(store: Store, customer_id: str) -> List[dict]:
    """Customer bookings, newest first, with service summary and offer stats"""
    bookings = await store.list_customer_bookings(customer_id)
    if not bookings:
        return []

    services = {
        s["id"]: s for s in await store.get_services({b["service_id"] for b in bookings})
    }
    offers_by_booking = {}
    for offer in await store.list_offers([b["id"] for b in bookings]):
        offers_by_booking.setdefault(offer["booking_id"], []).append(offer)

    results = []
    for booking in bookings:
        service = services.get(booking["service_id"])
        offers = offers_by_booking.get(booking["id"], [])
        results.append({
            **booking,
            "service": {
                "id": service["id"],
                "name": service["name"],
                "image_url": service.get("image_url"),
            } if service else None,
            "offers_count": len(offers),
            "best_offer": best_offer(offers),
        })
    return results


async def list_open_bookings(store: Store, limit: int = 20) -> List[dict]:
    return await store.list_bookings(OPEN_STATUSES, limit=limit)


async def list_driver_bookings(store: Store, driver_id: str) -> List[dict]:
    return await store.list_driver_bookings(driver_id)


async def list_all_bookings(store: Store, status: Optional[str] = None) -> List[dict]:
    """Admin dispatch view, optionally narrowed to one canonical status"""
    if status is None:
        return await store.list_bookings()
    if status == BookingStatus.WAITING_FOR_OFFERS.value:
        return await store.list_bookings(OPEN_STATUSES)
    return await store.list_bookings({status})
