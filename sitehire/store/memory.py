# sitehire/store/memory.py
import asyncio
import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from . import Store


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryStore(Store):
    """Dict-backed store for local runs and tests.

    Each method yields to the event loop once before touching state, like a
    network round trip would, and then reads and writes without awaiting, so
    the conditional writes are atomic with respect to other coroutines.
    """

    def __init__(self, feed=None):
        super().__init__(feed)
        self.users: Dict[str, dict] = {}
        self.services: Dict[str, dict] = {}
        self.bookings: Dict[str, dict] = {}
        self.offers: Dict[str, dict] = {}
        self.messages: Dict[str, dict] = {}
        self.transactions: Dict[str, dict] = {}

    async def _io(self):
        await asyncio.sleep(0)

    def _insert(self, table: str, data: Dict[str, Any], **defaults) -> dict:
        record = {"id": str(uuid.uuid4()), "created_at": _now(), **defaults, **data}
        record["id"] = str(record["id"])
        getattr(self, table)[record["id"]] = record
        self.feed.publish(table, "insert", record)
        return copy.deepcopy(record)

    def _update(self, table: str, record: dict, **changes) -> dict:
        record.update(changes)
        self.feed.publish(table, "update", record)
        return copy.deepcopy(record)

    # Users

    async def create_user(self, data):
        await self._io()
        return self._insert(
            "users", data,
            status="active", rating=0, total_reviews=0, avatar_url=None, phone=None,
        )

    async def get_user(self, user_id):
        await self._io()
        user = self.users.get(str(user_id))
        return copy.deepcopy(user) if user else None

    async def get_user_by_email(self, email):
        await self._io()
        for user in self.users.values():
            if user["email"].lower() == email.lower():
                return copy.deepcopy(user)
        return None

    async def get_users(self, user_ids):
        await self._io()
        wanted = {str(i) for i in user_ids}
        return [copy.deepcopy(u) for uid, u in self.users.items() if uid in wanted]

    async def update_user_status(self, user_id, status):
        await self._io()
        user = self.users.get(str(user_id))
        if not user:
            return None
        return self._update("users", user, status=status)

    async def list_users(self, role=None, status=None, search=None):
        await self._io()
        rows = list(self.users.values())
        if role:
            rows = [u for u in rows if u["role"] == role]
        if status:
            rows = [u for u in rows if u["status"] == status]
        if search:
            needle = search.lower()
            rows = [
                u for u in rows
                if needle in (u.get("full_name") or "").lower() or needle in u["email"].lower()
            ]
        rows.sort(key=lambda u: u["created_at"], reverse=True)
        return copy.deepcopy(rows)

    # Services

    async def create_service(self, data):
        await self._io()
        return self._insert(
            "services", data,
            description="", image_url=None, is_instant_booking=False,
            is_available_today=False, is_active=True, platform_fee=0.0,
        )

    async def get_service(self, service_id):
        await self._io()
        service = self.services.get(str(service_id))
        return copy.deepcopy(service) if service else None

    async def get_services(self, service_ids):
        await self._io()
        wanted = {str(i) for i in service_ids}
        return [copy.deepcopy(s) for sid, s in self.services.items() if sid in wanted]

    async def list_services(self, category=None, search=None, min_price=None, max_price=None,
                            instant_booking=None, available_today=None, limit=12, offset=0):
        await self._io()
        rows = [s for s in self.services.values() if s["is_active"]]
        if category:
            rows = [s for s in rows if s["category"] == category]
        if search:
            rows = [s for s in rows if search.lower() in s["name"].lower()]
        if min_price is not None:
            rows = [s for s in rows if s["base_price"] >= min_price]
        if max_price is not None:
            rows = [s for s in rows if s["base_price"] <= max_price]
        if instant_booking is not None:
            rows = [s for s in rows if s["is_instant_booking"] == instant_booking]
        if available_today is not None:
            rows = [s for s in rows if s["is_available_today"] == available_today]
        rows.sort(key=lambda s: s["created_at"], reverse=True)
        return copy.deepcopy(rows[offset:offset + limit])

    async def set_service_active(self, service_id, is_active):
        await self._io()
        service = self.services.get(str(service_id))
        if not service:
            return None
        return self._update("services", service, is_active=is_active)

    async def update_service(self, service_id, changes):
        await self._io()
        service = self.services.get(str(service_id))
        if not service:
            return None
        if not changes:
            return copy.deepcopy(service)
        return self._update("services", service, **changes)

    # Bookings

    async def create_booking(self, data):
        await self._io()
        return self._insert(
            "bookings", data,
            driver_id=None, price=None, cancellation_reason=None, updated_at=None,
        )

    async def get_booking(self, booking_id):
        await self._io()
        booking = self.bookings.get(str(booking_id))
        return copy.deepcopy(booking) if booking else None

    async def list_customer_bookings(self, customer_id):
        await self._io()
        rows = [b for b in self.bookings.values() if b["customer_id"] == str(customer_id)]
        rows.sort(key=lambda b: b["created_at"], reverse=True)
        return copy.deepcopy(rows)

    async def list_driver_bookings(self, driver_id):
        await self._io()
        rows = [b for b in self.bookings.values() if b["driver_id"] == str(driver_id)]
        rows.sort(key=lambda b: b["service_date"])
        return copy.deepcopy(rows)

    async def list_bookings(self, statuses=None, limit=None):
        await self._io()
        rows = list(self.bookings.values())
        if statuses:
            wanted = set(statuses)
            rows = [b for b in rows if b["status"] in wanted]
        rows.sort(key=lambda b: b["created_at"], reverse=True)
        if limit:
            rows = rows[:limit]
        return copy.deepcopy(rows)

    async def transition_booking(self, booking_id, expected, status, cancellation_reason=None):
        await self._io()
        booking = self.bookings.get(str(booking_id))
        if not booking or booking["status"] not in set(expected):
            return None
        changes = {"status": status, "updated_at": _now()}
        if cancellation_reason is not None:
            changes["cancellation_reason"] = cancellation_reason
        return self._update("bookings", booking, **changes)

    async def complete_booking(self, booking_id, expected, transaction=None):
        await self._io()
        booking = self.bookings.get(str(booking_id))
        if not booking or booking["status"] not in set(expected):
            return None
        # insert first: a failed insert leaves the booking untouched
        recorded = self._insert("transactions", transaction) if transaction is not None else None
        completed = self._update("bookings", booking, status="completed", updated_at=_now())
        return completed, recorded

    # Offers

    async def create_offer(self, data):
        await self._io()
        return self._insert("offers", data, status="pending")

    async def get_offer(self, offer_id):
        await self._io()
        offer = self.offers.get(str(offer_id))
        return copy.deepcopy(offer) if offer else None

    async def list_offers(self, booking_ids):
        await self._io()
        wanted = {str(i) for i in booking_ids}
        rows = [o for o in self.offers.values() if o["booking_id"] in wanted]
        rows.sort(key=lambda o: (o["offered_price"], o["created_at"]))
        return copy.deepcopy(rows)

    async def settle_offer(self, booking_id, offer_id, open_statuses) -> Optional[Tuple[dict, dict]]:
        await self._io()
        booking = self.bookings.get(str(booking_id))
        offer = self.offers.get(str(offer_id))
        if not booking or not offer:
            return None
        if booking["status"] not in set(open_statuses):
            return None
        if offer["booking_id"] != booking["id"] or offer["status"] != "pending":
            return None

        accepted = self._update("offers", offer, status="accepted")
        for sibling in self.offers.values():
            if sibling["booking_id"] == booking["id"] and sibling["status"] == "pending":
                self._update("offers", sibling, status="declined")
        settled = self._update(
            "bookings", booking,
            status="offer_accepted",
            driver_id=offer["driver_id"],
            price=offer["offered_price"],
            updated_at=_now(),
        )
        return accepted, settled

    async def decline_pending_offers(self, booking_id):
        await self._io()
        declined = 0
        for offer in self.offers.values():
            if offer["booking_id"] == str(booking_id) and offer["status"] == "pending":
                self._update("offers", offer, status="declined")
                declined += 1
        return declined

    # Messages

    async def create_message(self, data):
        await self._io()
        return self._insert("messages", data, is_read=False)

    async def list_user_messages(self, user_id):
        await self._io()
        uid = str(user_id)
        rows = [m for m in self.messages.values() if uid in (m["sender_id"], m["recipient_id"])]
        rows.sort(key=lambda m: m["created_at"], reverse=True)
        return copy.deepcopy(rows)

    async def list_conversation_messages(self, user_id, booking_id, since=None):
        await self._io()
        uid = str(user_id)
        rows = [
            m for m in self.messages.values()
            if m["booking_id"] == str(booking_id) and uid in (m["sender_id"], m["recipient_id"])
        ]
        if since is not None:
            rows = [m for m in rows if m["created_at"] > since]
        rows.sort(key=lambda m: m["created_at"])
        return copy.deepcopy(rows)

    async def mark_messages_read(self, recipient_id, sender_id, booking_id):
        await self._io()
        updated = 0
        for message in self.messages.values():
            if (message["recipient_id"] == str(recipient_id)
                    and message["sender_id"] == str(sender_id)
                    and message["booking_id"] == str(booking_id)
                    and not message["is_read"]):
                self._update("messages", message, is_read=True)
                updated += 1
        return updated

    async def count_unread(self, user_id):
        await self._io()
        return sum(
            1 for m in self.messages.values()
            if m["recipient_id"] == str(user_id) and not m["is_read"]
        )

    # Transactions

    async def create_transaction(self, data):
        await self._io()
        return self._insert("transactions", data)

    async def get_transaction(self, transaction_id):
        await self._io()
        transaction = self.transactions.get(str(transaction_id))
        return copy.deepcopy(transaction) if transaction else None

    async def list_transactions(self, driver_id=None):
        await self._io()
        rows = list(self.transactions.values())
        if driver_id:
            rows = [t for t in rows if t["driver_id"] == str(driver_id)]
        rows.sort(key=lambda t: t["created_at"], reverse=True)
        return copy.deepcopy(rows)

    async def transition_transaction(self, transaction_id, expected, status):
        await self._io()
        transaction = self.transactions.get(str(transaction_id))
        if not transaction or transaction["status"] not in set(expected):
            return None
        return self._update("transactions", transaction, status=status)
