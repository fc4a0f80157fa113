"""Marketplace error taxonomy.

Validation failures extend Protean's ``ValidationError`` so that they carry a
``messages`` dict keyed by the offending field, the same shape every other
domain validation error has. ``Forbidden`` and ``StockConflict`` cover
authorization and allocation failures and map to their own HTTP codes.
"""

from protean.exceptions import ObjectNotFoundError, ProteanExceptionWithMessage, ValidationError


class EmptyOrder(ValidationError):
    def __init__(self):
        super().__init__({"items": ["No items in order"]})


class ProductUnavailable(ValidationError):
    def __init__(self, product_name):
        self.product_name = product_name
        super().__init__({"items": [f"Product {product_name} is not available"]})


class MissingSeller(ValidationError):
    def __init__(self, product_name):
        self.product_name = product_name
        super().__init__({"items": [f"Product {product_name} has no seller assigned"]})


class InsufficientStock(ValidationError):
    """Raised when a requested quantity cannot be covered by the product's stock."""

    def __init__(self, product_name, size=None, available=0, requested=0):
        self.product_name = product_name
        self.size = size
        self.available = available
        self.requested = requested
        if size:
            message = f"Insufficient stock for {product_name} (Size: {size})"
        else:
            message = f"Insufficient stock for {product_name}"
        super().__init__({"stock": [message]})


class InvalidStatus(ValidationError):
    def __init__(self, status):
        self.status = status
        super().__init__({"status": [f"Invalid status '{status}'"]})


class NotFound(ObjectNotFoundError):
    def __init__(self, resource, identifier):
        self.resource = resource
        self.identifier = identifier
        super().__init__({"_entity": [f"{resource} with identifier '{identifier}' not found"]})


class Forbidden(ProteanExceptionWithMessage):
    def __init__(self, message="Not authorized"):
        super().__init__({"actor": [message]})


class StockConflict(ProteanExceptionWithMessage):
    """Contention a client may retry, such as a busy product or an order number clash."""

    def __init__(self, message):
        super().__init__({"order": [message]})


class OrderClosed(ValidationError):
    """The order is delivered or cancelled and accepts no further status changes."""

    def __init__(self, status):
        self.status = status
        super().__init__({"status": [f"Order is already {status} and cannot change status"]})
