"""Default validators and eligibility filters for the discount strategies.

A validator decides whether a strategy's preconditions hold against the
current cart state. Any object exposing
``validate(items, customer, config, payment_info=None)`` can replace the
defaults below; the method may be a plain function or a coroutine, so a
validator is free to await a database or remote lookup.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional

from CartDiscounts.enums import PaymentMethod, PriceBasis
from CartDiscounts.models import (
    BankCardDiscountConfig,
    BrandDiscountConfig,
    CartItem,
    CategoryDiscountConfig,
    CustomerProfile,
    PaymentInfo,
    RestrictedDiscountConfig,
    VoucherDiscountConfig,
    upper_label,
)
from CartDiscounts.money import ZERO

logger = logging.getLogger(__name__)


def _matches(value: Optional[str], candidates: Iterable[str]) -> bool:
    if value is None:
        return False
    value = value.casefold()
    return any(value == candidate.casefold() for candidate in candidates)


def eligible_amount(items: Iterable[CartItem], basis: PriceBasis = PriceBasis.CURRENT) -> Decimal:
    """Sum of ``price * quantity`` over ``items``."""
    return sum((item.line_total(basis) for item in items), ZERO)


def brand_eligible_items(items: List[CartItem], config: BrandDiscountConfig) -> List[CartItem]:
    eligible = []
    for item in items:
        product = item.product
        if not _matches(product.brand, [config.brand]):
            continue
        if config.brand_tier is not None and product.brand_tier != config.brand_tier:
            continue
        if config.eligible_categories and not _matches(product.category, config.eligible_categories):
            continue
        eligible.append(item)
    return eligible


def category_eligible_items(items: List[CartItem], config: CategoryDiscountConfig) -> List[CartItem]:
    eligible = []
    for item in items:
        product = item.product
        if not _matches(product.category, [config.category]):
            continue
        if config.eligible_brands and not _matches(product.brand, config.eligible_brands):
            continue
        if config.excluded_brands and _matches(product.brand, config.excluded_brands):
            continue
        eligible.append(item)
    return eligible


def voucher_eligible_items(items: List[CartItem], config: VoucherDiscountConfig) -> List[CartItem]:
    return [
        item for item in items
        if not (config.excluded_brands and _matches(item.product.brand, config.excluded_brands))
        and not (config.excluded_categories and _matches(item.product.category, config.excluded_categories))
    ]


def bank_card_eligible_items(items: List[CartItem], config: BankCardDiscountConfig) -> List[CartItem]:
    if not config.eligible_categories:
        return list(items)
    return [item for item in items if _matches(item.product.category, config.eligible_categories)]


def meets_minimum(amount: Decimal, minimum: Optional[Decimal]) -> bool:
    return minimum is None or amount >= minimum


def customer_is_eligible(customer: CustomerProfile, config: RestrictedDiscountConfig) -> bool:
    """Check the customer tier allow-list and the validity window."""
    tier = getattr(customer, "customer_tier", None)
    if config.customer_tiers and tier and upper_label(tier) not in config.customer_tiers:
        return False
    if config.valid_until is not None:
        now = datetime.now(config.valid_until.tzinfo)
        if config.valid_until < now:
            return False
    return True


class DiscountValidator:
    """Base class for validators plugged into a discount strategy."""

    async def validate(self, items: List[CartItem], customer: CustomerProfile, config,
                       payment_info: Optional[PaymentInfo] = None) -> bool:
        raise NotImplementedError


class DefaultBrandValidator(DiscountValidator):

    async def validate(self, items: List[CartItem], customer: CustomerProfile, config: BrandDiscountConfig,
                       payment_info: Optional[PaymentInfo] = None) -> bool:
        if not customer_is_eligible(customer, config):
            logger.debug("Brand %s: customer %s not eligible", config.brand, customer.id)
            return False

        matching = brand_eligible_items(items, config)
        if not matching:
            logger.debug("Brand %s: no eligible items in cart", config.brand)
            return False

        total = eligible_amount(matching, config.price_basis)
        if not meets_minimum(total, config.minimum_cart_amount):
            logger.debug("Brand %s: total %s below minimum %s", config.brand, total, config.minimum_cart_amount)
            return False
        return True


class DefaultCategoryValidator(DiscountValidator):

    async def validate(self, items: List[CartItem], customer: CustomerProfile, config: CategoryDiscountConfig,
                       payment_info: Optional[PaymentInfo] = None) -> bool:
        if not customer_is_eligible(customer, config):
            logger.debug("Category %s: customer %s not eligible", config.category, customer.id)
            return False

        matching = category_eligible_items(items, config)
        if not matching:
            logger.debug("Category %s: no eligible items in cart", config.category)
            return False

        total = eligible_amount(matching, config.price_basis)
        if not meets_minimum(total, config.minimum_cart_amount):
            logger.debug("Category %s: total %s below minimum %s",
                         config.category, total, config.minimum_cart_amount)
            return False
        return True


class DefaultVoucherValidator(DiscountValidator):

    async def validate(self, items: List[CartItem], customer: CustomerProfile, config: VoucherDiscountConfig,
                       payment_info: Optional[PaymentInfo] = None) -> bool:
        if not items:
            return False
        if not customer_is_eligible(customer, config):
            logger.debug("Voucher %s: customer %s not eligible", config.code, customer.id)
            return False

        total = eligible_amount(voucher_eligible_items(items, config))
        if not meets_minimum(total, config.minimum_cart_amount):
            logger.debug("Voucher %s: total %s below minimum %s", config.code, total, config.minimum_cart_amount)
            return False
        return True


class DefaultBankCardValidator(DiscountValidator):

    async def validate(self, items: List[CartItem], customer: CustomerProfile, config: BankCardDiscountConfig,
                       payment_info: Optional[PaymentInfo] = None) -> bool:
        # don't apply discount if payment method is not card
        if not payment_info or upper_label(payment_info.method) != PaymentMethod.CARD.value:
            logger.debug("Bank %s: payment method is not a card", config.bank_name)
            return False
        if not _matches(payment_info.bank_name, [config.bank_name]):
            logger.debug("Bank %s: card issued by %s", config.bank_name, payment_info.bank_name)
            return False
        if config.card_types:
            card_type = payment_info.card_type
            if card_type is None or upper_label(card_type) not in {t.value for t in config.card_types}:
                logger.debug("Bank %s: card type %s not eligible", config.bank_name, card_type)
                return False

        eligible = bank_card_eligible_items(items, config)
        if config.eligible_categories and not eligible:
            logger.debug("Bank %s: no eligible categories found", config.bank_name)
            return False

        total = eligible_amount(eligible)
        if not meets_minimum(total, config.minimum_cart_amount):
            logger.debug("Bank %s: total %s below minimum %s", config.bank_name, total, config.minimum_cart_amount)
            return False
        return True
