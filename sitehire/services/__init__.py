# sitehire/services/__init__.py
from . import lifecycle, conversations, earnings, dashboard

__all__ = [
    "lifecycle",
    "conversations",
    "earnings",
    "dashboard"
]
