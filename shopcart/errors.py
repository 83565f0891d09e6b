"""
Cart errors and the user-facing message keys they map to.

Every error raised inside a CartStore operation is one of these; none of them
leaves the store. `CartStore._report` turns them into a notifier message.
"""

# Message keys (looked up through shopcart.i18n)
MSG_ADD_FAILED = "add_failed"
MSG_OUT_OF_STOCK = "out_of_stock"
MSG_REMOVE_FAILED = "remove_failed"
MSG_UPDATE_FAILED = "update_failed"


class CartError(Exception):
    """Base class for cart operation failures."""


class ExternalServiceError(CartError):
    """Inventory service call failed (transport, HTTP status or bad payload)."""


class StockExceededError(CartError):
    """Requested quantity is above the available stock."""

    def __init__(self, product_id, requested: int, available: int):
        super().__init__(f"Requested {requested}, only {available} available for {product_id}")
        self.product_id = product_id
        self.requested = requested
        self.available = available


class InvalidTargetError(CartError):
    """Operation references a product that is not in the cart."""

    def __init__(self, product_id):
        super().__init__(f"Product {product_id} is not in the cart")
        self.product_id = product_id


class InvalidAmountError(CartError):
    """Quantity update with a non-positive amount. Ignored silently."""


class PersistenceError(CartError):
    """Writing the cart to the persistent store failed."""


class CorruptCartError(CartError):
    """Stored cart value could not be decoded."""
