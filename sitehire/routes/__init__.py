# sitehire/routes/__init__.py
from .auth import auth_router
from .catalog import catalog_router
from .bookings import bookings_router, offers_router
from .messages import messages_router
from .earnings import earnings_router
from .admin import admin_router

routers = [
    auth_router,
    catalog_router,
    bookings_router,
    offers_router,
    messages_router,
    earnings_router,
    admin_router
]

__all__ = ["routers"]
