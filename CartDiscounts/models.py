"""Data models for the discount calculator.

This module defines the core data structures used throughout the package,
including products, shopping cart items, customer and payment information,
the per-strategy discount configurations and the calculation result.
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from CartDiscounts.enums import BrandTier, CardType, CustomerTier, PaymentMethod, PriceBasis, StrategyType
from CartDiscounts.money import MoneyLike, to_money


@dataclass
class Product:
    """Represents a product in a shopping cart.

    Attributes:
        id: Unique identifier for the product
        brand: Brand name of the product
        brand_tier: Tier classification of the brand (e.g., PREMIUM, BUDGET)
        category: Product category (e.g., 'Shoes', 'T-shirts')
        base_price: Original list price before any discounts
        current_price: Live price, reduced by every discount applied so far
            in the running calculation. Defaults to ``base_price``.
    """
    id: str
    brand: str
    brand_tier: BrandTier
    category: str
    base_price: MoneyLike
    current_price: Optional[MoneyLike] = None  # After brand/category discount

    def __post_init__(self):
        self.base_price = to_money(self.base_price)
        if self.current_price is None:
            self.current_price = self.base_price
        else:
            self.current_price = to_money(self.current_price)


@dataclass
class CartItem:
    """Represents an item in the shopping cart.

    Attributes:
        product: The product being purchased
        quantity: Number of units of the product in the cart
        size: Size label picked by the customer (e.g., 'M', 'L')
    """
    product: Product
    quantity: int = 1
    size: Optional[str] = None

    def line_total(self, basis: PriceBasis = PriceBasis.CURRENT) -> Decimal:
        price = self.product.base_price if basis == PriceBasis.BASE else self.product.current_price
        return price * self.quantity

    def clone(self) -> "CartItem":
        """Return a copy whose product prices can be mutated freely."""
        return CartItem(product=copy.deepcopy(self.product), quantity=self.quantity, size=self.size)


@dataclass
class PaymentInfo:
    """Contains payment information for an order.

    Attributes:
        method: Payment method (e.g., CARD, UPI)
        bank_name: Name of the bank (if applicable)
        card_type: Type of card (CREDIT/DEBIT) if payment method is CARD
    """
    method: Union[PaymentMethod, str]  # CARD, UPI, etc
    bank_name: Optional[str] = None
    card_type: Optional[Union[CardType, str]] = None  # CREDIT, DEBIT


@dataclass
class CustomerProfile:
    """Stores customer information.

    Attributes:
        customer_tier: Customer's loyalty tier (PREMIUM, REGULAR, BUDGET)
        name: Customer's full name
        email: Customer's email address
        id: Unique customer identifier
    """
    customer_tier: Union[CustomerTier, str]
    name: str
    email: str
    id: str


@dataclass
class DiscountedPrice:
    """Represents the result of applying discounts to a cart.

    Attributes:
        original_price: Total price before any discounts
        final_price: Total price after applying all discounts, never negative
        applied_discounts: Discount display name -> amount, in application order
        message: Human-readable summary of the applied discounts
    """
    original_price: Decimal
    final_price: Decimal
    applied_discounts: Dict[str, Decimal] = field(default_factory=dict)
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_price": float(self.original_price),
            "final_price": float(self.final_price),
            "applied_discounts": {name: float(amount) for name, amount in self.applied_discounts.items()},
            "message": self.message,
        }


@dataclass
class StrategyConfig:
    """Descriptor consumed by the strategy factory.

    Attributes:
        type: One of brand, category, voucher, bank
        config: Mapping or config model matching ``type``
        validator: Optional replacement for the strategy's default validator
        on_discount_applied: Optional ``(amount, name)`` callback, used for auditing
    """
    type: Union[StrategyType, str]
    config: Union[Mapping[str, Any], BaseModel]
    validator: Optional[Any] = None
    on_discount_applied: Optional[Callable[[Decimal, str], Any]] = None


def _require_name(value: str, label: str) -> str:
    if not value.strip():
        raise ValueError(f"Invalid {label}")
    return value


def upper_label(value: Union[Enum, str]) -> str:
    """Upper-cased text of an enum member or plain string label."""
    if isinstance(value, Enum):
        return str(value.value).upper()
    return str(value).upper()


class DiscountConfig(BaseModel):
    """Fields shared by every discount configuration."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    discount_percentage: Decimal = Field(ge=0, le=100)
    minimum_cart_amount: Optional[Decimal] = Field(default=None, ge=0)


class RestrictedDiscountConfig(DiscountConfig):
    """Adds customer tier gating and an expiry date."""
    customer_tiers: Optional[List[str]] = None
    valid_until: Optional[datetime] = None

    @field_validator("customer_tiers", mode="before")
    @classmethod
    def normalize_customer_tiers(cls, v):
        if v is None:
            return v
        return [upper_label(tier) for tier in v]


class BrandDiscountConfig(RestrictedDiscountConfig):
    brand: str
    eligible_categories: Optional[List[str]] = None
    brand_tier: Optional[BrandTier] = BrandTier.PREMIUM  # None disables tier gating
    price_basis: PriceBasis = PriceBasis.CURRENT

    @field_validator("brand")
    @classmethod
    def validate_brand(cls, v: str) -> str:
        return _require_name(v, "brand name")


class CategoryDiscountConfig(RestrictedDiscountConfig):
    category: str
    eligible_brands: Optional[List[str]] = None
    excluded_brands: Optional[List[str]] = None
    price_basis: PriceBasis = PriceBasis.CURRENT

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        return _require_name(v, "category")


class VoucherDiscountConfig(RestrictedDiscountConfig):
    code: str
    max_discount_cap: Optional[Decimal] = Field(default=None, ge=0)
    excluded_brands: Optional[List[str]] = None
    excluded_categories: Optional[List[str]] = None

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        # codes are matched case-insensitively
        return _require_name(v, "voucher code").strip().upper()


class BankCardDiscountConfig(DiscountConfig):
    bank_name: str
    eligible_categories: Optional[List[str]] = None
    card_types: Optional[List[CardType]] = None

    @field_validator("bank_name")
    @classmethod
    def validate_bank_name(cls, v: str) -> str:
        return _require_name(v, "bank name")
