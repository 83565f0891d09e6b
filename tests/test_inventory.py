"""Tests for the inventory HTTP client"""
from decimal import Decimal

import httpx
import pytest

from shopcart.errors import ExternalServiceError
from shopcart.inventory import HttpInventoryService, ProductInfo, StockInfo


def make_service(settings, handler):
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url=settings.inventory_api_url,
    )
    return HttpInventoryService(settings, client=client)


class TestModels:
    """Payload parsing"""

    def test_stock_info_from_api_payload(self):
        stock = StockInfo.model_validate({"id": 1, "amount": 3})

        assert stock.product_id == 1
        assert stock.available_quantity == 3

    def test_stock_info_rejects_negative(self):
        with pytest.raises(ValueError):
            StockInfo.model_validate({"id": 1, "amount": -1})

    def test_product_info_from_api_payload(self):
        product = ProductInfo.model_validate(
            {"id": 1, "title": "Tênis", "price": 179.9, "image": "https://img.test/1.jpg"}
        )

        assert product.name == "Tênis"
        assert product.price == Decimal("179.9")
        assert product.image_url == "https://img.test/1.jpg"

    def test_product_info_accepts_string_price(self):
        product = ProductInfo.model_validate({"id": 1, "title": "Tênis", "price": "139.90"})

        assert product.price == Decimal("139.90")

    @pytest.mark.parametrize("price", ["garbage", None, "", True, "NaN", float("inf"), [1]])
    def test_product_info_rejects_bad_price(self, price):
        with pytest.raises(ValueError):
            ProductInfo.model_validate({"id": 1, "title": "Tênis", "price": price})


@pytest.mark.asyncio
async def test_stock_lookup(settings):
    """Test GET /stock/{id}"""
    requests = []

    def handler(request):
        requests.append(request.url.path)
        return httpx.Response(200, json={"id": 1, "amount": 3})

    async with make_service(settings, handler) as service:
        stock = await service.stock(1)

    assert requests == ["/stock/1"]
    assert stock.available_quantity == 3


@pytest.mark.asyncio
async def test_product_lookup(settings, sample_products):
    """Test GET /products/{id}"""
    def handler(request):
        assert request.url.path == "/products/2"
        return httpx.Response(200, json=sample_products[2])

    async with make_service(settings, handler) as service:
        product = await service.product_info(2)

    assert product.product_id == 2
    assert product.name == "Tênis VR Caminhada Confortável"


@pytest.mark.asyncio
async def test_http_error_status(settings):
    """Test 404 is not retried and becomes ExternalServiceError"""
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(404, json={})

    async with make_service(settings, handler) as service:
        with pytest.raises(ExternalServiceError):
            await service.stock(99)

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_transport_error_is_retried(settings):
    """Test a dropped connection is retried once"""
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ConnectError("connection refused")
        return httpx.Response(200, json={"id": 1, "amount": 2})

    async with make_service(settings, handler) as service:
        stock = await service.stock(1)

    assert len(calls) == 2
    assert stock.available_quantity == 2


@pytest.mark.asyncio
async def test_transport_error_exhausts_retries(settings):
    def handler(request):
        raise httpx.ConnectError("connection refused")

    async with make_service(settings, handler) as service:
        with pytest.raises(ExternalServiceError):
            await service.stock(1)


@pytest.mark.asyncio
async def test_invalid_json(settings):
    def handler(request):
        return httpx.Response(200, content=b"<html>oops</html>")

    async with make_service(settings, handler) as service:
        with pytest.raises(ExternalServiceError):
            await service.stock(1)


@pytest.mark.asyncio
async def test_unexpected_payload(settings):
    def handler(request):
        return httpx.Response(200, json={"id": 1})

    async with make_service(settings, handler) as service:
        with pytest.raises(ExternalServiceError):
            await service.stock(1)


@pytest.mark.asyncio
@pytest.mark.parametrize("price", ["garbage", None])
async def test_bad_product_price(settings, price):
    def handler(request):
        return httpx.Response(200, json={"id": 1, "title": "Tênis", "price": price, "image": "a.jpg"})

    async with make_service(settings, handler) as service:
        with pytest.raises(ExternalServiceError):
            await service.product_info(1)


@pytest.mark.asyncio
async def test_injected_client_is_not_closed(settings):
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"id": 1, "amount": 1})),
        base_url=settings.inventory_api_url,
    )

    async with HttpInventoryService(settings, client=client):
        pass

    assert client.is_closed is False
    await client.aclose()
