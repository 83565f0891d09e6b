"""shopcart - client-side shopping cart state with stock checks and persistence."""
from shopcart.cart import Cart, CartStore, LineItem, MemoryStore, RedisStore, create_cart_store
from shopcart.inventory import HttpInventoryService, ProductInfo, StockInfo
from shopcart.notifier import CollectingNotifier, LoggingNotifier

__all__ = [
    "Cart",
    "CartStore",
    "LineItem",
    "MemoryStore",
    "RedisStore",
    "create_cart_store",
    "HttpInventoryService",
    "ProductInfo",
    "StockInfo",
    "CollectingNotifier",
    "LoggingNotifier",
]

__version__ = "0.1.0"
