# sitehire/errors.py
from typing import Iterable, Optional


class MarketplaceError(Exception):
    """Base class for errors raised by the booking and messaging core."""
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"detail": self.detail}


class ValidationError(MarketplaceError):
    """Missing or malformed input. Carries the offending field name."""
    status_code = 400

    def __init__(self, field: str, detail: Optional[str] = None):
        super().__init__(detail or f"Missing required field: {field}")
        self.field = field

    def to_dict(self) -> dict:
        return {"detail": self.detail, "field": self.field}


class AuthError(MarketplaceError):
    status_code = 401

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(detail)


class ForbiddenError(MarketplaceError):
    status_code = 403


class NotFoundError(MarketplaceError):
    status_code = 404

    def __init__(self, entity: str, entity_id=None):
        detail = f"{entity} not found"
        if entity_id is not None:
            detail = f"{entity} {entity_id} not found"
        super().__init__(detail)
        self.entity = entity


class InvalidStateError(MarketplaceError):
    """The operation is not legal for the entity's current lifecycle state."""
    status_code = 409

    def __init__(self, entity: str, expected: Iterable[str], actual: str, detail: Optional[str] = None):
        self.expected = sorted(expected)
        self.actual = actual
        super().__init__(
            detail or f"{entity} status must be {' or '.join(self.expected)}, got {actual}"
        )

    def to_dict(self) -> dict:
        return {"detail": self.detail, "expected": self.expected, "actual": self.actual}


class StoreError(MarketplaceError):
    """Persistence failure. The detail stays server-side."""
    status_code = 500

    def to_dict(self) -> dict:
        return {"detail": "Internal server error"}
