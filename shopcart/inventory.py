"""
Inventory Service - stock and product lookups for the cart.

The cart only reads from the inventory API:
- GET /stock/{id}     -> {"id": 1, "amount": 3}
- GET /products/{id}  -> {"id": 1, "title": "...", "price": 179.9, "image": "..."}

All failures (transport, HTTP status, unexpected payload) surface as
ExternalServiceError so the store has a single failure class to map.
"""
from decimal import Decimal
from typing import Optional, Protocol, Union

import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from shopcart.config import Settings, get_settings
from shopcart.errors import ExternalServiceError
from shopcart.logging import get_logger, sanitize_id_for_logging
from shopcart.money import parse_decimal

logger = get_logger(__name__)

ProductId = Union[int, str]


class StockInfo(BaseModel):
    """Stock snapshot for one product. Never cached."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    product_id: ProductId = Field(validation_alias=AliasChoices("product_id", "productId", "id"))
    available_quantity: int = Field(
        ge=0, validation_alias=AliasChoices("available_quantity", "availableQuantity", "amount")
    )


class ProductInfo(BaseModel):
    """Catalog entry used to build a new line item."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    product_id: ProductId = Field(validation_alias=AliasChoices("product_id", "productId", "id"))
    name: str = Field(validation_alias=AliasChoices("name", "title"))
    price: Decimal
    image_url: str = Field(default="", validation_alias=AliasChoices("image_url", "imageUrl", "image"))

    @field_validator("price", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        return parse_decimal(v)


class InventoryService(Protocol):
    """Read-only inventory lookups consumed by CartStore."""

    async def stock(self, product_id: ProductId) -> StockInfo: ...

    async def product_info(self, product_id: ProductId) -> ProductInfo: ...


class HttpInventoryService:
    """
    InventoryService backed by the inventory REST API.

    Transport errors are retried with exponential backoff; HTTP error statuses
    are not. Use as an async context manager or call `aclose()`.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.settings.inventory_api_url,
            timeout=self.settings.inventory_timeout,
        )

    async def __aenter__(self) -> "HttpInventoryService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def stock(self, product_id: ProductId) -> StockInfo:
        data = await self._get_json(f"/stock/{product_id}")
        return self._parse(StockInfo, data, product_id)

    async def product_info(self, product_id: ProductId) -> ProductInfo:
        data = await self._get_json(f"/products/{product_id}")
        return self._parse(ProductInfo, data, product_id)

    async def _get_json(self, path: str) -> dict:
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.settings.inventory_retry_attempts),
                wait=wait_exponential(multiplier=0.2, max=2),
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    response = await self._client.get(path)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Inventory API returned {e.response.status_code} for {path}")
            raise ExternalServiceError(f"Inventory API error {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Inventory API request failed for {path}: {e}")
            raise ExternalServiceError(f"Inventory API unavailable: {e}") from e
        except ValueError as e:
            # response.json() on a non-JSON body
            logger.error(f"Inventory API sent invalid JSON for {path}")
            raise ExternalServiceError("Inventory API sent invalid JSON") from e

    @staticmethod
    def _parse(model, data, product_id: ProductId):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error(
                f"Unexpected {model.__name__} payload for product {sanitize_id_for_logging(product_id)}: "
                f"{e.error_count()} errors"
            )
            raise ExternalServiceError(f"Invalid {model.__name__} payload") from e
