# sitehire/store/__init__.py
"""Storage capability shared by the booking lifecycle and the chat aggregator.

Records travel as plain dicts with string ids. Every method is a suspension
point; the conditional writes (`transition_booking`, `settle_offer`,
`transition_transaction`) return None when the row has already left the
expected state, which is how callers detect a lost race.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..events import ChangeFeed, Subscription


class Store(ABC):

    def __init__(self, feed: Optional[ChangeFeed] = None):
        self.feed = feed or ChangeFeed()

    def subscribe(self, table: str, **filters) -> Subscription:
        """Stream of writes to `table` whose record matches `filters`."""
        return self.feed.subscribe(table, **filters)

    # Users
    @abstractmethod
    async def create_user(self, data: Dict[str, Any]) -> dict: ...

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[dict]: ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[dict]: ...

    @abstractmethod
    async def get_users(self, user_ids: Iterable[str]) -> List[dict]: ...

    @abstractmethod
    async def update_user_status(self, user_id: str, status: str) -> Optional[dict]: ...

    @abstractmethod
    async def list_users(self, role: Optional[str] = None, status: Optional[str] = None,
                         search: Optional[str] = None) -> List[dict]: ...

    # Services
    @abstractmethod
    async def create_service(self, data: Dict[str, Any]) -> dict: ...

    @abstractmethod
    async def get_service(self, service_id: str) -> Optional[dict]: ...

    @abstractmethod
    async def get_services(self, service_ids: Iterable[str]) -> List[dict]: ...

    @abstractmethod
    async def list_services(self, **filters) -> List[dict]: ...

    @abstractmethod
    async def set_service_active(self, service_id: str, is_active: bool) -> Optional[dict]: ...

    @abstractmethod
    async def update_service(self, service_id: str, changes: Dict[str, Any]) -> Optional[dict]: ...

    # Bookings
    @abstractmethod
    async def create_booking(self, data: Dict[str, Any]) -> dict: ...

    @abstractmethod
    async def get_booking(self, booking_id: str) -> Optional[dict]: ...

    @abstractmethod
    async def list_customer_bookings(self, customer_id: str) -> List[dict]: ...

    @abstractmethod
    async def list_driver_bookings(self, driver_id: str) -> List[dict]: ...

    @abstractmethod
    async def list_bookings(self, statuses: Optional[Iterable[str]] = None,
                            limit: Optional[int] = None) -> List[dict]: ...

    @abstractmethod
    async def transition_booking(self, booking_id: str, expected: Iterable[str], status: str,
                                 cancellation_reason: Optional[str] = None) -> Optional[dict]: ...

    @abstractmethod
    async def complete_booking(self, booking_id: str, expected: Iterable[str],
                               transaction: Optional[Dict[str, Any]] = None
                               ) -> Optional[Tuple[dict, Optional[dict]]]:
        """Move the booking to completed and insert its transaction in one write.

        Returns (booking, transaction), or None when the booking already left
        `expected`. Nothing is written when the insert fails.
        """

    # Offers
    @abstractmethod
    async def create_offer(self, data: Dict[str, Any]) -> dict: ...

    @abstractmethod
    async def get_offer(self, offer_id: str) -> Optional[dict]: ...

    @abstractmethod
    async def list_offers(self, booking_ids: Iterable[str]) -> List[dict]: ...

    @abstractmethod
    async def settle_offer(self, booking_id: str, offer_id: str,
                           open_statuses: Iterable[str]) -> Optional[Tuple[dict, dict]]: ...

    @abstractmethod
    async def decline_pending_offers(self, booking_id: str) -> int: ...

    # Messages
    @abstractmethod
    async def create_message(self, data: Dict[str, Any]) -> dict: ...

    @abstractmethod
    async def list_user_messages(self, user_id: str) -> List[dict]: ...

    @abstractmethod
    async def list_conversation_messages(self, user_id: str, booking_id: str,
                                         since: Optional[datetime] = None) -> List[dict]: ...

    @abstractmethod
    async def mark_messages_read(self, recipient_id: str, sender_id: str, booking_id: str) -> int: ...

    @abstractmethod
    async def count_unread(self, user_id: str) -> int: ...

    # Transactions
    @abstractmethod
    async def create_transaction(self, data: Dict[str, Any]) -> dict: ...

    @abstractmethod
    async def get_transaction(self, transaction_id: str) -> Optional[dict]: ...

    @abstractmethod
    async def list_transactions(self, driver_id: Optional[str] = None) -> List[dict]: ...

    @abstractmethod
    async def transition_transaction(self, transaction_id: str, expected: Iterable[str],
                                     status: str) -> Optional[dict]: ...


__all__ = ["Store"]
