"""Cart models with Decimal-based pricing.

Both models are frozen: the UI only ever sees snapshots, and CartStore builds a
new Cart for every committed change.
"""
import json
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Iterator, List, Optional, Tuple

from shopcart.errors import CorruptCartError
from shopcart.inventory import ProductId, ProductInfo
from shopcart.money import multiply, parse_decimal, round_money, to_decimal, to_json_number


def _first(data: dict, *keys, default=None):
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass(frozen=True)
class LineItem:
    """Single product in the cart with the quantity to purchase."""
    id: ProductId
    name: str
    price: Decimal
    quantity: int
    image_url: str = ""
    available_quantity_at_fetch: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise TypeError("quantity must be an integer")
        if self.quantity < 1:
            raise ValueError(f"quantity must be >= 1, got {self.quantity}")
        object.__setattr__(self, "price", to_decimal(self.price))

    @classmethod
    def from_product(
        cls,
        product: ProductInfo,
        available_quantity: Optional[int] = None,
        product_id: Optional[ProductId] = None,
    ) -> "LineItem":
        """New line item at quantity 1, keyed by the id the caller asked for."""
        return cls(
            id=product.product_id if product_id is None else product_id,
            name=product.name,
            price=product.price,
            quantity=1,
            image_url=product.image_url,
            available_quantity_at_fetch=available_quantity,
        )

    def with_quantity(self, quantity: int, available_quantity: Optional[int] = None) -> "LineItem":
        if available_quantity is None:
            available_quantity = self.available_quantity_at_fetch
        return replace(self, quantity=quantity, available_quantity_at_fetch=available_quantity)

    @property
    def total_price(self) -> Decimal:
        """Total price for all units."""
        return multiply(self.price, self.quantity)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "price": to_json_number(self.price),
            "image_url": self.image_url,
            "quantity": self.quantity,
        }
        if self.available_quantity_at_fetch is not None:
            data["available_quantity_at_fetch"] = self.available_quantity_at_fetch
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        """Create from a stored record. Accepts the legacy browser field names."""
        available = _first(data, "available_quantity_at_fetch", "availableQuantityAtFetch")
        return cls(
            id=data["id"],
            name=_first(data, "name", "title", default=""),
            price=parse_decimal(data["price"]),
            quantity=_first(data, "quantity", "amount"),
            image_url=_first(data, "image_url", "imageUrl", "image", default="") or "",
            available_quantity_at_fetch=int(available) if available is not None else None,
        )


@dataclass(frozen=True)
class Cart:
    """Ordered line items, unique by product id."""
    items: Tuple[LineItem, ...] = field(default_factory=tuple)

    def __post_init__(self):
        items = tuple(self.items)
        ids = [item.id for item in items]
        if len(ids) != len(set(ids)):
            raise ValueError("cart contains duplicate product ids")
        object.__setattr__(self, "items", items)

    def __iter__(self) -> Iterator[LineItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def find(self, product_id: ProductId) -> Optional[LineItem]:
        return next((item for item in self.items if item.id == product_id), None)

    def upsert(self, item: LineItem) -> "Cart":
        """Replace the item with the same id in place, or append it."""
        if self.find(item.id) is None:
            return Cart(self.items + (item,))
        return Cart(tuple(item if existing.id == item.id else existing for existing in self.items))

    def without(self, product_id: ProductId) -> "Cart":
        return Cart(tuple(item for item in self.items if item.id != product_id))

    @property
    def total_items(self) -> int:
        """Total number of units in cart."""
        return sum(item.quantity for item in self.items)

    @property
    def subtotal(self) -> Decimal:
        return round_money(sum((item.total_price for item in self.items), Decimal("0")))

    def to_list(self) -> List[dict]:
        return [item.to_dict() for item in self.items]

    def to_json(self) -> str:
        """Serialize for the persistent store."""
        return json.dumps(self.to_list(), ensure_ascii=False)

    @classmethod
    def from_list(cls, records: list) -> "Cart":
        return cls(tuple(LineItem.from_dict(record) for record in records))

    @classmethod
    def from_json(cls, raw: str) -> "Cart":
        """Decode a stored cart. Any malformed record makes the whole value corrupt."""
        try:
            records = json.loads(raw)
            if not isinstance(records, list):
                raise TypeError(f"expected a list, got {type(records).__name__}")
            return cls.from_list(records)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError, RecursionError) as e:
            raise CorruptCartError(str(e)) from e
