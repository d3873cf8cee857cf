# sitehire/store/postgres.py
import logging
from functools import wraps
from uuid import UUID

import asyncpg

from . import Store
from .. import queries
from ..errors import StoreError

logger = logging.getLogger(__name__)


def _record(row) -> dict:
    """asyncpg Record -> dict with string ids"""
    if row is None:
        return None
    return {k: (str(v) if isinstance(v, UUID) else v) for k, v in dict(row).items()}


def _records(rows) -> list:
    return [_record(row) for row in rows]


def _is_uuid(value) -> bool:
    try:
        UUID(str(value))
    except ValueError:
        return False
    return True


def _uuids(values) -> list:
    return [str(v) for v in values if _is_uuid(v)]


def _store_call(func):
    """Run a store method on a pooled connection and hide driver errors behind StoreError."""
    @wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            async with self.pool.acquire() as conn:
                return await func(self, conn, *args, **kwargs)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            logger.error(f"{func.__name__} failed: {str(e)}")
            raise StoreError(f"{func.__name__} failed: {e}") from e
    return wrapper


def _keyed(missing=None):
    """Answer `missing` without a round trip when the leading id is not a UUID.

    Such a row cannot exist, and asyncpg would refuse to encode the argument.
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(self, key, *args, **kwargs):
            if not _is_uuid(key):
                return missing() if callable(missing) else missing
            return await func(self, key, *args, **kwargs)
        return wrapper
    return decorator


class PostgresStore(Store):

    def __init__(self, pool: asyncpg.Pool, feed=None):
        super().__init__(feed)
        self.pool = pool

    def _publish(self, table: str, operation: str, record: dict) -> dict:
        if record is not None:
            self.feed.publish(table, operation, record)
        return record

    # Users

    @_store_call
    async def create_user(self, conn, data):
        return self._publish("users", "insert", _record(await queries.create_user(conn, data)))

    @_keyed()
    @_store_call
    async def get_user(self, conn, user_id):
        return _record(await queries.get_user_by_id(conn, user_id))

    @_store_call
    async def get_user_by_email(self, conn, email):
        return _record(await queries.get_user_by_email(conn, email))

    @_store_call
    async def get_users(self, conn, user_ids):
        return _records(await queries.get_users_by_ids(conn, _uuids(user_ids)))

    @_keyed()
    @_store_call
    async def update_user_status(self, conn, user_id, status):
        return self._publish("users", "update", _record(await queries.update_user_status(conn, user_id, status)))

    @_store_call
    async def list_users(self, conn, role=None, status=None, search=None):
        return _records(await queries.search_users(conn, role, status, search))

    # Services

    @_store_call
    async def create_service(self, conn, data):
        return self._publish("services", "insert", _record(await queries.create_service(conn, data)))

    @_keyed()
    @_store_call
    async def get_service(self, conn, service_id):
        return _record(await queries.get_service_by_id(conn, service_id))

    @_store_call
    async def get_services(self, conn, service_ids):
        return _records(await queries.get_services_by_ids(conn, _uuids(service_ids)))

    @_store_call
    async def list_services(self, conn, **filters):
        return _records(await queries.search_services(conn, **filters))

    @_keyed()
    @_store_call
    async def set_service_active(self, conn, service_id, is_active):
        row = await queries.set_service_active(conn, service_id, is_active)
        return self._publish("services", "update", _record(row))

    @_keyed()
    @_store_call
    async def update_service(self, conn, service_id, changes):
        row = await queries.update_service(conn, service_id, changes)
        return self._publish("services", "update", _record(row))

    # Bookings

    @_store_call
    async def create_booking(self, conn, data):
        return self._publish("bookings", "insert", _record(await queries.create_booking(conn, data)))

    @_keyed()
    @_store_call
    async def get_booking(self, conn, booking_id):
        return _record(await queries.get_booking_by_id(conn, booking_id))

    @_keyed(list)
    @_store_call
    async def list_customer_bookings(self, conn, customer_id):
        return _records(await queries.get_customer_bookings(conn, customer_id))

    @_keyed(list)
    @_store_call
    async def list_driver_bookings(self, conn, driver_id):
        return _records(await queries.get_driver_bookings(conn, driver_id))

    @_store_call
    async def list_bookings(self, conn, statuses=None, limit=None):
        return _records(await queries.get_bookings_by_status(conn, statuses, limit))

    @_keyed()
    @_store_call
    async def transition_booking(self, conn, booking_id, expected, status, cancellation_reason=None):
        row = await queries.update_booking_status_if(conn, booking_id, expected, status, cancellation_reason)
        return self._publish("bookings", "update", _record(row))

    @_keyed()
    @_store_call
    async def complete_booking(self, conn, booking_id, expected, transaction=None):
        result = await queries.complete_booking(conn, booking_id, expected, transaction)
        if result is None:
            return None
        booking, recorded = _record(result[0]), _record(result[1])
        self._publish("bookings", "update", booking)
        self._publish("transactions", "insert", recorded)
        return booking, recorded

    # Offers

    @_store_call
    async def create_offer(self, conn, data):
        return self._publish("offers", "insert", _record(await queries.create_offer(conn, data)))

    @_keyed()
    @_store_call
    async def get_offer(self, conn, offer_id):
        return _record(await queries.get_offer_by_id(conn, offer_id))

    @_store_call
    async def list_offers(self, conn, booking_ids):
        return _records(await queries.get_booking_offers(conn, _uuids(booking_ids)))

    @_keyed()
    @_store_call
    async def settle_offer(self, conn, booking_id, offer_id, open_statuses):
        if not _is_uuid(offer_id):
            return None
        result = await queries.accept_offer(conn, booking_id, offer_id, open_statuses)
        if result is None:
            return None
        offer, booking = _record(result[0]), _record(result[1])
        self._publish("offers", "update", offer)
        self._publish("bookings", "update", booking)
        return offer, booking

    @_keyed(0)
    @_store_call
    async def decline_pending_offers(self, conn, booking_id):
        rows = _records(await queries.decline_pending_offers(conn, booking_id))
        for row in rows:
            self._publish("offers", "update", row)
        return len(rows)

    # Messages

    @_store_call
    async def create_message(self, conn, data):
        return self._publish("messages", "insert", _record(await queries.create_message(conn, data)))

    @_keyed(list)
    @_store_call
    async def list_user_messages(self, conn, user_id):
        return _records(await queries.get_user_messages(conn, user_id))

    @_keyed(list)
    @_store_call
    async def list_conversation_messages(self, conn, user_id, booking_id, since=None):
        if not _is_uuid(booking_id):
            return []
        return _records(await queries.get_conversation_messages(conn, user_id, booking_id, since))

    @_keyed(0)
    @_store_call
    async def mark_messages_read(self, conn, recipient_id, sender_id, booking_id):
        if not (_is_uuid(sender_id) and _is_uuid(booking_id)):
            return 0
        rows = _records(await queries.mark_messages_read(conn, recipient_id, sender_id, booking_id))
        for row in rows:
            self._publish("messages", "update", row)
        return len(rows)

    @_keyed(0)
    @_store_call
    async def count_unread(self, conn, user_id):
        return await queries.count_unread_messages(conn, user_id)

    # Transactions

    @_store_call
    async def create_transaction(self, conn, data):
        return self._publish("transactions", "insert", _record(await queries.create_transaction(conn, data)))

    @_keyed()
    @_store_call
    async def get_transaction(self, conn, transaction_id):
        return _record(await queries.get_transaction_by_id(conn, transaction_id))

    @_store_call
    async def list_transactions(self, conn, driver_id=None):
        if driver_id is not None and not _is_uuid(driver_id):
            return []
        return _records(await queries.get_transactions(conn, driver_id))

    @_keyed()
    @_store_call
    async def transition_transaction(self, conn, transaction_id, expected, status):
        row = await queries.update_transaction_status_if(conn, transaction_id, expected, status)
        return self._publish("transactions", "update", _record(row))
