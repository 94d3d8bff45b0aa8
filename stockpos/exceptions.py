"""Domain exceptions for the stockpos core.

Core operations raise these instead of formatting user-facing text; the HTTP
layer (see ``stockpos.main``) maps each one to a status code and response body.
"""


class StockPosError(Exception):
    """Base exception for all business-rule failures."""

    code = "error"

    def __init__(self, message="Operation failed", payload=None):
        super().__init__(message)
        self.message = message
        self.payload = payload or {}

    def to_dict(self):
        rv = dict(self.payload)
        rv["detail"] = self.message
        rv["error"] = self.code
        return rv


class PermissionDeniedError(StockPosError):
    """Actor lacks the rights for the requested transition."""

    code = "permission_denied"

    def __init__(self, message="Permission denied", payload=None):
        super().__init__(message, payload)


class InvalidStateError(StockPosError):
    """Transition is not valid from the entity's current state."""

    code = "invalid_state"


class NotFoundError(StockPosError):
    """Target entity or validation does not exist."""

    code = "not_found"

    def __init__(self, kind, entity_id):
        super().__init__(f"{kind} {entity_id} not found", {"kind": kind, "id": entity_id})
        self.kind = kind
        self.entity_id = entity_id


class InsufficientStockError(StockPosError):
    """A ledger movement would drive stock below zero."""

    code = "insufficient_stock"

    def __init__(self, product_id, requested, available):
        super().__init__(
            f"Insufficient stock for product {product_id}: requested {requested}, available {available}",
            {"product_id": product_id, "requested": requested, "available": available},
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class ConflictError(StockPosError):
    """The row changed underneath a conditional write."""

    code = "conflict"


class ValidationInputError(StockPosError):
    """Malformed input, e.g. negative price or empty name."""

    code = "invalid_input"

    def __init__(self, field, message):
        super().__init__(message, {"field": field})
        self.field = field
