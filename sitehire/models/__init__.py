# sitehire/models/__init__.py
from .auth import Token, TokenData, UserRole, UserStatus, CustomerCreate, DriverCreate, UserOut, UserStatusUpdate
from .service import ServiceCategory, PriceType, ServiceCreate, ServiceOut, ServiceSummary, ServiceActiveUpdate, ServiceUpdate
from .booking import (
    BookingStatus,
    BookingCreate,
    BookingOut,
    CustomerBookingOut,
    BookingCancel,
    BookingRebook,
    OPEN_STATUSES,
    TERMINAL_STATUSES,
    normalize_status
)
from .offer import OfferStatus, OfferCreate, OfferOut, OfferList, AcceptedOffer, DriverSummary
from .message import MessageCreate, MessageOut, MarkRead, OtherUser, ConversationOut
from .transaction import (
    TransactionStatus,
    TransactionOut,
    TransactionStatusUpdate,
    DriverEarnings,
    FinancialSummary
)
from .admin import DashboardStats

__all__ = [
    'Token', 'TokenData', 'UserRole', 'UserStatus', 'CustomerCreate', 'DriverCreate', 'UserOut', 'UserStatusUpdate',
    'ServiceCategory', 'PriceType', 'ServiceCreate', 'ServiceOut', 'ServiceSummary', 'ServiceActiveUpdate', 'ServiceUpdate',
    'BookingStatus', 'BookingCreate', 'BookingOut', 'CustomerBookingOut', 'BookingCancel', 'BookingRebook',
    'OPEN_STATUSES', 'TERMINAL_STATUSES', 'normalize_status',
    'OfferStatus', 'OfferCreate', 'OfferOut', 'OfferList', 'AcceptedOffer', 'DriverSummary',
    'MessageCreate', 'MessageOut', 'MarkRead', 'OtherUser', 'ConversationOut',
    'TransactionStatus', 'TransactionOut', 'TransactionStatusUpdate', 'DriverEarnings', 'FinancialSummary',
    'DashboardStats'
]
