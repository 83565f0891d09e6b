"""Cart package: models, storage, and store facade."""
from .models import Cart, LineItem
from .service import CartStore, create_cart_store
from .storage import MemoryStore, PersistentStore, RedisStore

__all__ = [
    "Cart",
    "LineItem",
    "CartStore",
    "create_cart_store",
    "MemoryStore",
    "PersistentStore",
    "RedisStore",
]
