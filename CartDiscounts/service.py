"""Service layer for discount calculations.

This module contains the public entry point of the package. It validates the
caller's input, works on a private copy of the cart and delegates the ordered
application of discount strategies to the applier.
"""
import logging
from collections.abc import Sequence
from decimal import localcontext
from typing import Iterable, List, Optional

from CartDiscounts.applier import AppliedCallback, DiscountApplier, cart_total
from CartDiscounts.exceptions import InvalidInput
from CartDiscounts.factory import StrategyFactory
from CartDiscounts.models import CartItem, CustomerProfile, DiscountedPrice, PaymentInfo, StrategyConfig
from CartDiscounts.settings import CalculatorSettings
from CartDiscounts.strategy import DiscountStrategy, VoucherDiscountStrategy

logger = logging.getLogger(__name__)

NO_DISCOUNTS_MESSAGE = "No discounts applied"


class DiscountService:
    """Service for calculating discounted cart prices.

    Coordinates the registered discount strategies and makes sure they are
    applied in priority order: brand and category discounts first, then
    vouchers, then bank card offers.
    """

    def __init__(
            self,
            strategy_factory: Optional[StrategyFactory] = None,
            strategy_configs: Optional[Iterable[StrategyConfig]] = None,
            settings: Optional[CalculatorSettings] = None,
            on_discount_applied: Optional[AppliedCallback] = None):
        """Initialize the discount service.

        Args:
            strategy_factory: Registry holding the strategies to apply. A new,
                empty one is created when omitted.
            strategy_configs: Descriptors turned into strategies right away
            settings: Decimal precision and logging settings
            on_discount_applied: Optional ``(name, amount, cart_items)`` hook
                called after each applied discount

        Raises:
            InvalidDiscountConfiguration: If a descriptor holds an invalid config
            UnknownStrategyType: If a descriptor names an unknown strategy type
        """
        self.strategy_factory = strategy_factory if strategy_factory is not None else StrategyFactory()
        self.settings = settings or CalculatorSettings()
        self.on_discount_applied = on_discount_applied
        if strategy_configs:
            self.strategy_factory.create_strategies(strategy_configs)

    async def add_discount_strategy(self, discount_strategy: DiscountStrategy) -> None:
        """Register an externally constructed discount strategy.

        Args:
            discount_strategy: The discount strategy to add

        Raises:
            InvalidInput: If no strategy is given

        Note:
            Registration order only matters between strategies of the same
            priority; the applier sorts by priority before applying.
        """
        if discount_strategy is None:
            raise InvalidInput("Invalid discount strategy")
        self.strategy_factory.register(discount_strategy)

    @staticmethod
    def _validate_cart_items(cart_items: List[CartItem]) -> None:
        if (cart_items is None or isinstance(cart_items, (str, bytes))
                or not isinstance(cart_items, Sequence) or len(cart_items) == 0):
            raise InvalidInput("Invalid cart items")
        for cart_item in cart_items:
            if not isinstance(cart_item, CartItem):
                raise InvalidInput(f"Invalid cart item {cart_item!r}")
            if cart_item.quantity < 1:
                raise InvalidInput(
                    f"Invalid quantity {cart_item.quantity} for product {cart_item.product.id}"
                )

    async def calculate_cart_discounts(
            self,
            cart_items: List[CartItem],
            customer: CustomerProfile,
            payment_info: Optional[PaymentInfo] = None
    ) -> DiscountedPrice:
        """Calculate the final price after applying all applicable discounts.

        The discount application follows this order:
        1. Brand and category discounts
        2. Voucher codes
        3. Bank card offers

        Args:
            cart_items: List of items in the shopping cart
            customer: Customer profile for tier-based discounts
            payment_info: Optional payment information for bank card discounts

        Returns:
            DiscountedPrice: Object containing original price, final price and applied discounts

        Raises:
            InvalidInput: If the cart is missing or empty, or the customer is missing

        Note:
            The caller's cart is never modified; every item is cloned before
            the strategies run.
        """
        self._validate_cart_items(cart_items)
        if customer is None:
            raise InvalidInput("Invalid customer profile")

        # Create a deep copy to avoid modifying the caller's products
        working_cart = [cart_item.clone() for cart_item in cart_items]
        with localcontext(self.settings.decimal_context()):
            original_price = cart_total(working_cart)

        applier = DiscountApplier(self.strategy_factory.get_strategies(), settings=self.settings)
        outcome = await applier.apply_discounts(
            cart_items=working_cart,
            customer=customer,
            payment_info=payment_info,
            on_discount_applied=self.on_discount_applied,
        )

        if not outcome.applied_discounts:
            return DiscountedPrice(
                original_price=original_price,
                final_price=original_price,
                applied_discounts={},
                message=NO_DISCOUNTS_MESSAGE,
            )

        logger.info("Cart for customer %s: %s -> %s (%d discounts)",
                    customer.id, original_price, outcome.final_price, len(outcome.applied_discounts))
        return DiscountedPrice(
            original_price=original_price,
            final_price=outcome.final_price,
            applied_discounts=outcome.applied_discounts,
            message=", ".join(outcome.messages),
        )

    async def validate_discount_code(
            self,
            code: str,
            cart_items: List[CartItem],
            customer: CustomerProfile) -> bool:
        """Check whether a voucher code can be applied to the cart.

        The lookup is case-insensitive. Unknown or empty codes, and codes
        whose validation raises, are reported as invalid instead of raising.
        """
        if not isinstance(code, str) or not code.strip():
            return False

        code = code.strip().upper()
        voucher_strategy = next(
            (strategy for strategy in self.strategy_factory.get_strategies()
             if isinstance(strategy, VoucherDiscountStrategy) and strategy.config.code == code),
            None,
        )
        if voucher_strategy is None:
            logger.debug("No voucher registered for code %s", code)
            return False

        try:
            with localcontext(self.settings.decimal_context()):
                return await voucher_strategy.validate(cart_items or [], customer)
        except Exception:
            logger.warning("Validation of voucher %s failed", code, exc_info=True)
            return False
