"""Pytest configuration and fixtures"""
import os
import pytest
from unittest.mock import Mock, AsyncMock

# Set test environment variables
os.environ.setdefault("INVENTORY_API_URL", "http://inventory.test")
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "https://test.upstash.io")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "test_token")

from shopcart.config import Settings
from shopcart.errors import ExternalServiceError
from shopcart.inventory import ProductInfo, StockInfo
from shopcart.cart import CartStore, MemoryStore
from shopcart.notifier import CollectingNotifier


@pytest.fixture
def settings():
    """Settings isolated from the environment"""
    return Settings(
        inventory_api_url="http://inventory.test",
        inventory_retry_attempts=2,
        cart_storage_key="test:cart",
        language="en",
    )


@pytest.fixture
def sample_products():
    """Catalog as the inventory API returns it"""
    return {
        1: {"id": 1, "title": "Tênis de Caminhada Leve Confortável", "price": 179.9, "image": "https://img.test/1.jpg"},
        2: {"id": 2, "title": "Tênis VR Caminhada Confortável", "price": 139.9, "image": "https://img.test/2.jpg"},
        3: {"id": 3, "title": "Tênis Adidas Duramo Lite 2.0", "price": 219.9, "image": "https://img.test/3.jpg"},
    }


@pytest.fixture
def stock_levels():
    """Available quantity per product id (mutable per test)"""
    return {1: 3, 2: 5, 3: 1}


@pytest.fixture
def mock_inventory(stock_levels, sample_products):
    """Inventory service answering from stock_levels / sample_products"""
    inventory = Mock()

    def stock(product_id):
        if product_id not in stock_levels:
            raise ExternalServiceError("Inventory API error 404")
        return StockInfo(product_id=product_id, available_quantity=stock_levels[product_id])

    def product_info(product_id):
        if product_id not in sample_products:
            raise ExternalServiceError("Inventory API error 404")
        return ProductInfo.model_validate(sample_products[product_id])

    inventory.stock = AsyncMock(side_effect=stock)
    inventory.product_info = AsyncMock(side_effect=product_info)
    return inventory


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def cart_store(mock_inventory, memory_store, notifier, settings):
    """Empty cart store wired to in-memory collaborators"""
    return CartStore(
        inventory=mock_inventory,
        store=memory_store,
        notifier=notifier,
        settings=settings,
    )
