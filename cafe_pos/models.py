"""Domain records for the café POS.

Every entity round-trips through a plain dict record so any ``Store``
implementation can persist it. Money is held in integer cents.
"""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Optional

from .errors import ValidationError


class UserRole(str, Enum):
    ADMIN = "admin"
    WORKER = "worker"


def _require_keys(record: dict, kind: str, *keys: str) -> None:
    missing = [k for k in keys if k not in record]
    if missing:
        raise ValidationError(f"malformed {kind} record, missing {', '.join(missing)}")


@dataclass
class User:
    id: str
    name: str
    role: UserRole
    access_code: str

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role.value,
            "access_code": self.access_code,
        }

    @classmethod
    def from_record(cls, record: dict) -> "User":
        _require_keys(record, "user", "id", "name", "role", "access_code")
        return cls(
            id=record["id"],
            name=record["name"],
            role=UserRole(record["role"]),
            access_code=record["access_code"],
        )


@dataclass
class Category:
    id: str
    name: str
    image_url: str = ""

    def to_record(self) -> dict:
        return {"id": self.id, "name": self.name, "image_url": self.image_url}

    @classmethod
    def from_record(cls, record: dict) -> "Category":
        _require_keys(record, "category", "id", "name")
        return cls(id=record["id"], name=record["name"], image_url=record.get("image_url", ""))


@dataclass
class Product:
    id: str
    name: str
    price_cents: int
    stock: int
    category_id: str
    description: str = ""
    image_url: str = ""

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price_cents": self.price_cents,
            "stock": self.stock,
            "category_id": self.category_id,
            "image_url": self.image_url,
        }

    @classmethod
    def from_record(cls, record: dict) -> "Product":
        _require_keys(record, "product", "id", "name", "price_cents", "stock", "category_id")
        return cls(
            id=record["id"],
            name=record["name"],
            description=record.get("description", ""),
            price_cents=record["price_cents"],
            stock=record["stock"],
            category_id=record["category_id"],
            image_url=record.get("image_url", ""),
        )


@dataclass
class Customer:
    id: str
    name: str
    phone: str
    loyalty_points: int = 0

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "loyalty_points": self.loyalty_points,
        }

    @classmethod
    def from_record(cls, record: dict) -> "Customer":
        _require_keys(record, "customer", "id", "name", "phone")
        return cls(
            id=record["id"],
            name=record["name"],
            phone=record["phone"],
            loyalty_points=record.get("loyalty_points", 0),
        )


@dataclass(frozen=True)
class CartItem:
    """A product snapshot plus a requested quantity.

    Name and price are frozen at the time the item entered the cart, so an
    order built from it keeps the price it was sold at.
    """

    product_id: str
    name: str
    price_cents: int
    quantity: int
    category_id: str = ""

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1) -> "CartItem":
        return cls(
            product_id=product.id,
            name=product.name,
            price_cents=product.price_cents,
            quantity=quantity,
            category_id=product.category_id,
        )

    @property
    def line_total_cents(self) -> int:
        return self.price_cents * self.quantity

    def with_quantity(self, quantity: int) -> "CartItem":
        return replace(self, quantity=quantity)

    def to_record(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "price_cents": self.price_cents,
            "quantity": self.quantity,
            "category_id": self.category_id,
        }

    @classmethod
    def from_record(cls, record: dict) -> "CartItem":
        _require_keys(record, "cart item", "product_id", "name", "price_cents", "quantity")
        return cls(
            product_id=record["product_id"],
            name=record["name"],
            price_cents=record["price_cents"],
            quantity=record["quantity"],
            category_id=record.get("category_id", ""),
        )


@dataclass(frozen=True)
class Order:
    """A completed sale. Orders are never updated or deleted."""

    id: str
    items: tuple[CartItem, ...]
    subtotal_cents: int
    points_redeemed: int
    final_amount_cents: int
    points_earned: int
    date: str
    served_by: str
    customer_id: Optional[str] = None

    @property
    def unit_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def points_delta(self) -> int:
        """Net change this order applies to its customer's balance."""
        return self.points_earned - self.points_redeemed

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "items": [item.to_record() for item in self.items],
            "subtotal_cents": self.subtotal_cents,
            "points_redeemed": self.points_redeemed,
            "final_amount_cents": self.final_amount_cents,
            "customer_id": self.customer_id,
            "points_earned": self.points_earned,
            "date": self.date,
            "served_by": self.served_by,
        }

    @classmethod
    def from_record(cls, record: dict) -> "Order":
        _require_keys(
            record,
            "order",
            "id",
            "items",
            "subtotal_cents",
            "points_redeemed",
            "final_amount_cents",
            "points_earned",
            "date",
            "served_by",
        )
        return cls(
            id=record["id"],
            items=tuple(CartItem.from_record(i) for i in record["items"]),
            subtotal_cents=record["subtotal_cents"],
            points_redeemed=record["points_redeemed"],
            final_amount_cents=record["final_amount_cents"],
            customer_id=record.get("customer_id"),
            points_earned=record["points_earned"],
            date=record["date"],
            served_by=record["served_by"],
        )


# Typed partial updates. ``None`` leaves the field unchanged.


@dataclass(frozen=True)
class ProductUpdate:
    name: Optional[str] = None
    description: Optional[str] = None
    price_cents: Optional[int] = None
    stock: Optional[int] = None
    category_id: Optional[str] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class CategoryUpdate:
    name: Optional[str] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class CustomerUpdate:
    name: Optional[str] = None
    phone: Optional[str] = None
    loyalty_points: Optional[int] = None


@dataclass(frozen=True)
class UserUpdate:
    name: Optional[str] = None
    role: Optional[UserRole] = None
    access_code: Optional[str] = None


def apply_update(entity: Any, update: Any) -> Any:
    """Return a copy of ``entity`` with every non-None field of ``update`` applied."""
    changes = {
        f.name: getattr(update, f.name)
        for f in fields(update)
        if getattr(update, f.name) is not None
    }
    return replace(entity, **changes)


@dataclass
class CheckoutQuote:
    """Totals shown before payment, with the redemption already clamped."""

    subtotal_cents: int
    points_redeemed: int
    discount_cents: int
    final_amount_cents: int
    points_to_earn: int
    max_redeemable: int = 0
    items: list[CartItem] = field(default_factory=list)
