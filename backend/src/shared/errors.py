"""
Business error hierarchy.

Every error raised by the services carries the HTTP status code it maps to,
so the API boundary can turn it into a response without inspecting types.
"""
from typing import Any, Dict, Optional


class RewardsError(Exception):
    """Base exception for all user-facing business errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message

    def to_body(self) -> Dict[str, Any]:
        body = {'error': self.message}
        if self.details:
            body['details'] = self.details
        return body


class Unauthorized(RewardsError):
    """Missing or invalid credential."""
    status_code = 401


class Forbidden(RewardsError):
    """Caller's role does not allow the operation."""
    status_code = 403


class NotFound(RewardsError):
    """Referenced user, task, submission or shop item does not exist."""
    status_code = 404

    def __init__(self, entity_type: str, entity_id: Optional[str] = None):
        details = {'entityType': entity_type}
        if entity_id:
            details['entityId'] = entity_id
        super().__init__(f"{entity_type} not found", details)
        self.entity_type = entity_type
        self.entity_id = entity_id


class Conflict(RewardsError):
    """Duplicate active submission or an illegal status transition."""
    status_code = 409


class InsufficientBalance(RewardsError):
    """Token balance does not cover the requested debit."""
    status_code = 400

    def __init__(self, balance: int, required: int):
        super().__init__('Insufficient tokens', {'balance': balance, 'required': required})
        self.balance = balance
        self.required = required


class ValidationError(RewardsError):
    """Missing or malformed request field."""
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, {'field': field} if field else None)
        self.field = field
