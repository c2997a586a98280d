"""
Domain errors shared by the repository, service and API layers.

Each error carries the HTTP status the API layer answers with, so route
handlers never translate them by hand.
"""

from typing import Optional


class MarketplaceError(Exception):
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(MarketplaceError):
    """Malformed input or a violated business rule."""

    status_code = 400


class InsufficientStockError(ValidationError):
    def __init__(self, product_id: int, title: str, available: int) -> None:
        super().__init__(
            f"Not enough quantity for product {title}. Available: {available}"
        )
        self.product_id = product_id
        self.available = available


class InvalidStatusTransitionError(ValidationError):
    def __init__(self, current: str, new: str) -> None:
        super().__init__(f"Cannot change order status from {current} to {new}")
        self.current = current
        self.new = new


class AuthenticationError(MarketplaceError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class PermissionDeniedError(MarketplaceError):
    status_code = 403

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class NotFoundError(MarketplaceError):
    status_code = 404

    def __init__(self, entity: str, entity_id: Optional[int] = None) -> None:
        if entity_id is None:
            super().__init__(f"{entity} not found")
        else:
            super().__init__(f"{entity} with ID {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class PaymentGatewayError(ValidationError):
    """The payment provider rejected or failed the request."""


class PaymentNotConfiguredError(MarketplaceError):
    status_code = 500

    def __init__(self) -> None:
        super().__init__("Payment service is not configured")
