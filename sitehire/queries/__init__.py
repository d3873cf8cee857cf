# sitehire/queries/__init__.py
from .user_queries import (
    create_user,
    get_user_by_id,
    get_user_by_email,
    get_users_by_ids,
    update_user_status,
    search_users
)
from .service_queries import (
    create_service,
    get_service_by_id,
    get_services_by_ids,
    search_services,
    set_service_active,
    update_service
)
from .booking_queries import (
    create_booking,
    get_booking_by_id,
    get_customer_bookings,
    get_driver_bookings,
    get_bookings_by_status,
    update_booking_status_if,
    complete_booking
)
from .offer_queries import (
    create_offer,
    get_offer_by_id,
    get_booking_offers,
    accept_offer,
    decline_pending_offers
)
from .message_queries import (
    create_message,
    get_user_messages,
    get_conversation_messages,
    mark_messages_read,
    count_unread_messages
)
from .transaction_queries import (
    create_transaction,
    get_transaction_by_id,
    get_transactions,
    update_transaction_status_if
)

__all__ = [
    # User queries
    'create_user',
    'get_user_by_id',
    'get_user_by_email',
    'get_users_by_ids',
    'update_user_status',
    'search_users',

    # Service queries
    'create_service',
    'get_service_by_id',
    'get_services_by_ids',
    'search_services',
    'set_service_active',
    'update_service',

    # Booking queries
    'create_booking',
    'get_booking_by_id',
    'get_customer_bookings',
    'get_driver_bookings',
    'get_bookings_by_status',
    'update_booking_status_if',
    'complete_booking',

    # Offer queries
    'create_offer',
    'get_offer_by_id',
    'get_booking_offers',
    'accept_offer',
    'decline_pending_offers',

    # Message queries
    'create_message',
    'get_user_messages',
    'get_conversation_messages',
    'mark_messages_read',
    'count_unread_messages',

    # Transaction queries
    'create_transaction',
    'get_transaction_by_id',
    'get_transactions',
    'update_transaction_status_if'
]
