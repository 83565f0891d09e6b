"""Cart store: session cart state validated against inventory and persisted on every change."""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, List, Optional

from shopcart.config import Settings, get_settings
from shopcart.errors import (
    MSG_ADD_FAILED,
    MSG_OUT_OF_STOCK,
    MSG_REMOVE_FAILED,
    MSG_UPDATE_FAILED,
    CartError,
    CorruptCartError,
    ExternalServiceError,
    InvalidAmountError,
    InvalidTargetError,
    PersistenceError,
    StockExceededError,
)
from shopcart.i18n import get_text
from shopcart.inventory import HttpInventoryService, InventoryService, ProductId, ProductInfo, StockInfo
from shopcart.logging import get_logger, sanitize_id_for_logging
from shopcart.money import to_float
from shopcart.notifier import LoggingNotifier, Notifier
from .models import Cart, LineItem
from .storage import PersistentStore, RedisStore

logger = get_logger(__name__)

CartListener = Callable[[Cart], None]


def _whole_amount(amount) -> Optional[int]:
    """Quantity as int; integral floats (2.0) are accepted, anything else is None."""
    if isinstance(amount, bool):
        return None
    if isinstance(amount, int):
        return amount
    if isinstance(amount, float) and amount.is_integer():
        return int(amount)
    return None


class CartStore:
    """
    Owns the session cart.

    Features:
    - Restores the cart from the persistent store on creation
    - Validates every quantity against a fresh stock lookup
    - Writes the store before swapping in-memory state, so a change is all or nothing
    - Serializes mutations per product id (one in-flight change per product)

    Operations never raise: failures become a notifier message and a False
    return value, and the cart stays as it was.
    """

    def __init__(
        self,
        inventory: InventoryService,
        store: PersistentStore,
        notifier: Optional[Notifier] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.inventory = inventory
        self.store = store
        self.notifier = notifier or LoggingNotifier()
        self.storage_key = self.settings.cart_storage_key
        self._locks: Dict[ProductId, asyncio.Lock] = {}
        self._lock_users: Dict[ProductId, int] = {}
        self._listeners: List[CartListener] = []
        self._cart = self._restore()

    @property
    def cart(self) -> Cart:
        """Current cart snapshot."""
        return self._cart

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Call `listener(cart)` after every committed change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def add_item(self, product_id: ProductId) -> bool:
        """Add one unit of a product, inserting it at quantity 1 if absent."""
        async with self._product_lock(product_id):
            try:
                await self._add(product_id)
            except CartError as e:
                self._report(e, MSG_ADD_FAILED, product_id)
                return False
        return True

    async def remove_item(self, product_id: ProductId) -> bool:
        """Remove a product's line item. Removing an absent product is reported."""
        async with self._product_lock(product_id):
            try:
                if self._cart.find(product_id) is None:
                    raise InvalidTargetError(product_id)
                self._commit(self._cart.without(product_id))
            except CartError as e:
                self._report(e, MSG_REMOVE_FAILED, product_id)
                return False
        logger.info(f"Removed product {sanitize_id_for_logging(product_id)} from cart")
        return True

    async def set_quantity(self, product_id: ProductId, amount: int) -> bool:
        """Set a product's quantity to exactly `amount`. Non-positive or non-integer amounts are ignored."""
        requested = amount
        amount = _whole_amount(requested)
        if amount is None or amount <= 0:
            self._report(InvalidAmountError(f"amount {requested!r}"), MSG_UPDATE_FAILED, product_id)
            return False

        async with self._product_lock(product_id):
            try:
                stock = await self._fetch_stock(product_id)
                if amount > stock.available_quantity:
                    raise StockExceededError(product_id, amount, stock.available_quantity)

                existing = self._cart.find(product_id)
                if existing is None:
                    raise InvalidTargetError(product_id)

                self._commit(self._cart.upsert(existing.with_quantity(amount, stock.available_quantity)))
            except CartError as e:
                self._report(e, MSG_UPDATE_FAILED, product_id)
                return False
        logger.info(f"Set product {sanitize_id_for_logging(product_id)} quantity to {amount}")
        return True

    def summary(self) -> dict:
        """Plain-dict view of the cart for rendering."""
        cart = self._cart
        if not cart.items:
            return {"is_empty": True, "total_items": 0, "items": [], "subtotal": 0}

        return {
            "is_empty": False,
            "total_items": cart.total_items,
            "items": [
                {
                    "product_id": item.id,
                    "name": item.name,
                    "image_url": item.image_url,
                    "quantity": item.quantity,
                    "unit_price": to_float(item.price),
                    "total": to_float(item.total_price),
                }
                for item in cart.items
            ],
            "subtotal": to_float(cart.subtotal),
        }

    async def _add(self, product_id: ProductId) -> None:
        existing = self._cart.find(product_id)
        stock = await self._fetch_stock(product_id)

        requested = (existing.quantity if existing else 0) + 1
        if requested > stock.available_quantity:
            raise StockExceededError(product_id, requested, stock.available_quantity)

        if existing:
            item = existing.with_quantity(requested, stock.available_quantity)
        else:
            product = await self._fetch_product(product_id)
            item = LineItem.from_product(product, stock.available_quantity, product_id=product_id)

        self._commit(self._cart.upsert(item))
        logger.info(f"Added product {sanitize_id_for_logging(product_id)} to cart (quantity {requested})")

    async def _fetch_stock(self, product_id: ProductId) -> StockInfo:
        try:
            return await self.inventory.stock(product_id)
        except CartError:
            raise
        except Exception as e:
            raise ExternalServiceError(f"Stock lookup failed: {e}") from e

    async def _fetch_product(self, product_id: ProductId) -> ProductInfo:
        try:
            return await self.inventory.product_info(product_id)
        except CartError:
            raise
        except Exception as e:
            raise ExternalServiceError(f"Product lookup failed: {e}") from e

    @asynccontextmanager
    async def _product_lock(self, product_id: ProductId) -> AsyncIterator[None]:
        """One in-flight mutation per product; the lock is dropped once nobody holds or awaits it."""
        lock = self._locks.setdefault(product_id, asyncio.Lock())
        self._lock_users[product_id] = self._lock_users.get(product_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[product_id] -= 1
            if not self._lock_users[product_id]:
                del self._lock_users[product_id]
                del self._locks[product_id]

    def _restore(self) -> Cart:
        try:
            raw = self.store.get(self.storage_key)
        except Exception as e:
            logger.error(f"Failed to read stored cart: {e}")
            return Cart()

        if not raw:
            return Cart()

        try:
            cart = Cart.from_json(raw)
        except CorruptCartError as e:
            logger.warning(f"Corrupted cart data under {self.storage_key!r}, starting empty: {e}")
            return Cart()

        logger.info(f"Restored cart with {len(cart)} items")
        return cart

    def _commit(self, cart: Cart) -> None:
        try:
            self.store.set(self.storage_key, cart.to_json())
        except Exception as e:
            raise PersistenceError(f"Failed to save cart: {e}") from e

        self._cart = cart
        for listener in list(self._listeners):
            try:
                listener(cart)
            except Exception:
                logger.exception("Cart listener failed")

    def _report(self, error: CartError, failure_key: str, product_id: ProductId) -> None:
        safe_id = sanitize_id_for_logging(product_id)
        if isinstance(error, InvalidAmountError):
            logger.debug(f"Ignoring quantity update for {safe_id}: {error}")
            return

        if isinstance(error, StockExceededError):
            key = MSG_OUT_OF_STOCK
            logger.warning(f"Out of stock for {safe_id}: {error}")
        elif isinstance(error, InvalidTargetError):
            key = failure_key
            logger.warning(f"Product {safe_id} not in cart")
        else:
            key = failure_key
            logger.error(f"Cart operation failed for {safe_id}: {error}")

        try:
            self.notifier.notify_error(get_text(key, self.settings.language))
        except Exception:
            logger.exception("Notifier failed")


def create_cart_store(
    settings: Optional[Settings] = None,
    notifier: Optional[Notifier] = None,
) -> CartStore:
    """CartStore wired to the inventory REST API and Upstash Redis."""
    settings = settings or get_settings()
    return CartStore(
        inventory=HttpInventoryService(settings),
        store=RedisStore.from_settings(settings),
        notifier=notifier,
        settings=settings,
    )
