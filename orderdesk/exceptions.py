"""Custom exception hierarchy for OrderDesk.

This module defines a structured exception hierarchy for better error handling
and debugging throughout the application. The pricing calculator never raises
any of these; they belong to the form, presenter and service layers.
"""
from __future__ import annotations

from typing import Optional


class OrderDeskError(Exception):
    """Base exception for all OrderDesk errors."""

    pass


# Validation-related exceptions
class ValidationError(OrderDeskError):
    """Base exception for form validation errors.

    ``row`` is the zero-based index of the offending line item, when the
    problem belongs to a specific row.
    """

    def __init__(self, message: str, *, row: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.row = row


class OrderValidationError(ValidationError):
    """Raised when order form data validation fails."""

    pass


class ReceiptValidationError(ValidationError):
    """Raised when inventory receipt form data validation fails."""

    pass


class BomValidationError(ValidationError):
    """Raised when bill-of-materials form data validation fails."""

    pass


class ProductValidationError(ValidationError):
    """Raised when product form data validation fails."""

    pass


class InventoryValidationError(ValidationError):
    """Raised when a stock quantity adjustment is invalid."""

    pass


# Configuration exceptions
class ConfigurationError(OrderDeskError):
    """Base exception for configuration-related errors."""

    pass


class SettingsError(ConfigurationError):
    """Raised when settings operation fails."""

    pass


# Network/Service exceptions
class ServiceError(OrderDeskError):
    """Base exception for backend service errors."""

    pass


class ApiError(ServiceError):
    """Raised when the backend answers with an error response."""

    def __init__(self, message: str, *, status: Optional[int] = None, payload=None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload


class NetworkError(ServiceError):
    """Raised when the backend cannot be reached."""

    pass
