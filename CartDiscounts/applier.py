"""Ordered application of discount strategies to a cart.

Strategies run one at a time in priority order. After each applied
discount the amount is spread across every line item in proportion to its
share of the cart, so the next strategy validates and computes against the
reduced prices.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal, localcontext
from typing import Any, Callable, Dict, Iterable, List, Optional

from CartDiscounts.models import CartItem, CustomerProfile, PaymentInfo
from CartDiscounts.money import ZERO
from CartDiscounts.settings import CalculatorSettings
from CartDiscounts.strategy import DiscountStrategy

logger = logging.getLogger(__name__)

AppliedCallback = Callable[[str, Decimal, List[CartItem]], Any]


def cart_total(cart_items: Iterable[CartItem]) -> Decimal:
    return sum((item.product.current_price * item.quantity for item in cart_items), ZERO)


@dataclass
class AppliedDiscounts:
    """Outcome of one pass of the applier.

    Attributes:
        final_price: Price left after every applied discount, never negative
        applied_discounts: Discount display name -> amount, in application order
        messages: One entry per applied discount
    """
    final_price: Decimal
    applied_discounts: Dict[str, Decimal] = field(default_factory=dict)
    messages: List[str] = field(default_factory=list)


class DiscountApplier:

    def __init__(self, strategies: Iterable[DiscountStrategy], settings: Optional[CalculatorSettings] = None):
        # sorted() is stable, so strategies sharing a priority keep registration order
        self._strategies: List[DiscountStrategy] = sorted(strategies, key=lambda s: s.get_priority())
        self._settings = settings or CalculatorSettings()

    @property
    def strategies(self) -> List[DiscountStrategy]:
        return list(self._strategies)

    async def apply_discounts(
            self,
            cart_items: List[CartItem],
            customer: CustomerProfile,
            payment_info: Optional[PaymentInfo] = None,
            on_discount_applied: Optional[AppliedCallback] = None) -> AppliedDiscounts:
        """Apply every strategy to ``cart_items``, mutating their current prices.

        Args:
            cart_items: Cart owned by this calculation; product prices are reduced in place
            customer: Customer profile used by tier-gated validators
            payment_info: Optional payment information, required by bank card strategies
            on_discount_applied: Optional ``(name, amount, cart_items)`` hook called after
                each non-capped discount

        Returns:
            AppliedDiscounts: final price, applied amounts and messages

        Note:
            A strategy whose name lookup, validation or calculation raises is
            logged and skipped. A discount that would take the price below
            zero is capped to the remaining balance and ends the pass.
        """
        with localcontext(self._settings.decimal_context()):
            return await self._apply(cart_items, customer, payment_info, on_discount_applied)

    async def _apply(
            self,
            cart_items: List[CartItem],
            customer: CustomerProfile,
            payment_info: Optional[PaymentInfo],
            on_discount_applied: Optional[AppliedCallback]) -> AppliedDiscounts:
        result = AppliedDiscounts(final_price=cart_total(cart_items))

        for strategy in self._strategies:
            name = type(strategy).__name__
            try:
                name = strategy.get_discount_name()
                current_total = cart_total(cart_items)
                logger.debug("Validating %s, current cart total: %s", name, current_total)

                if not await strategy.validate(cart_items, customer, payment_info):
                    logger.debug("Skipping %s: conditions not met", name)
                    continue
                discount = await strategy.calculate_discount(cart_items, customer, payment_info)
            except Exception:
                logger.warning("Failed to apply %s", name, exc_info=True)
                continue

            if discount <= 0:
                continue

            new_price = result.final_price - discount
            if new_price < 0:
                logger.debug("%s capped to the remaining balance %s", name, result.final_price)
                result.applied_discounts[name] = result.final_price
                result.messages.append(f"Applied {name} (capped)")
                result.final_price = ZERO
                break

            result.final_price = new_price
            result.applied_discounts[name] = discount
            result.messages.append(f"Applied {name}")
            logger.debug("Applied %s: %s, new final price %s", name, discount, new_price)

            self._redistribute(cart_items, discount, current_total)

            if on_discount_applied is not None:
                try:
                    on_discount_applied(name, discount, list(cart_items))
                except Exception:
                    logger.exception("on_discount_applied hook failed for %s", name)

        return result

    @staticmethod
    def _redistribute(cart_items: List[CartItem], discount: Decimal, total: Decimal) -> None:
        """Spread ``discount`` over the items in proportion to their line totals."""
        if total <= 0:
            return
        ratio = discount / total
        for item in cart_items:
            item_discount = item.product.current_price * item.quantity * ratio
            new_price = item.product.current_price - item_discount / item.quantity
            item.product.current_price = new_price if new_price > 0 else ZERO
