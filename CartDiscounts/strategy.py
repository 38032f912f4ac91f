import inspect
import logging
from decimal import Decimal
from typing import Any, Callable, List, Mapping, Optional, Type, Union

from pydantic import ValidationError

from CartDiscounts.enums import PriceBasis, StrategyPriority, StrategyType
from CartDiscounts.exceptions import InvalidDiscountConfiguration
from CartDiscounts.models import (
    BankCardDiscountConfig,
    BrandDiscountConfig,
    CartItem,
    CategoryDiscountConfig,
    CustomerProfile,
    DiscountConfig,
    PaymentInfo,
    VoucherDiscountConfig,
)
from CartDiscounts.money import HUNDRED, ZERO, format_percentage
from CartDiscounts.validators import (
    DefaultBankCardValidator,
    DefaultBrandValidator,
    DefaultCategoryValidator,
    DefaultVoucherValidator,
    bank_card_eligible_items,
    brand_eligible_items,
    category_eligible_items,
    eligible_amount,
    voucher_eligible_items,
)

logger = logging.getLogger(__name__)

DiscountCallback = Callable[[Decimal, str], Any]


def parse_config(model: Type[DiscountConfig], config: Union[Mapping[str, Any], DiscountConfig]) -> DiscountConfig:
    """Validate ``config`` into ``model``, raising InvalidDiscountConfiguration on failure."""
    if isinstance(config, model):
        return config
    if isinstance(config, DiscountConfig):
        config = config.model_dump()
    try:
        return model.model_validate(config)
    except ValidationError as exc:
        raise InvalidDiscountConfiguration(f"Invalid {model.__name__}: {exc}") from exc


class DiscountStrategy:
    """One discount rule.

    Subclasses pick the config model, the default validator, the items the
    percentage is applied to and the display name. Instances hold no cart
    state and can be reused across calculations.
    """

    strategy_type: StrategyType
    priority: StrategyPriority
    kind: str
    config_model: Type[DiscountConfig] = DiscountConfig
    default_validator: Optional[Type] = None

    def __init__(
            self,
            config: Union[Mapping[str, Any], DiscountConfig],
            validator: Optional[Any] = None,
            on_discount_applied: Optional[DiscountCallback] = None):
        self.config = parse_config(self.config_model, config)
        self.validator = validator if validator is not None else self.default_validator()
        self.on_discount_applied = on_discount_applied
        self.name = self.get_discount_name()

    @property
    def subject(self) -> str:
        raise NotImplementedError

    @property
    def price_basis(self) -> PriceBasis:
        return getattr(self.config, "price_basis", PriceBasis.CURRENT)

    def eligible_items(self, items: List[CartItem]) -> List[CartItem]:
        raise NotImplementedError

    async def validate(
            self,
            items: List[CartItem],
            customer: CustomerProfile,
            payment_info: Optional[PaymentInfo] = None) -> bool:
        result = self.validator.validate(items, customer, self.config, payment_info)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)

    async def calculate_discount(
            self,
            items: List[CartItem],
            customer: CustomerProfile,
            payment_info: Optional[PaymentInfo] = None) -> Decimal:

        if not items or not await self.validate(items, customer, payment_info):
            logger.debug("%s not applicable", self.name)
            return ZERO

        total_amount = eligible_amount(self.eligible_items(items), self.price_basis)
        discount = self._cap(total_amount * self.config.discount_percentage / HUNDRED)
        logger.debug("%s: eligible amount %s, discount %s", self.name, total_amount, discount)

        if discount > 0:
            self._notify(discount)
        return discount

    def _cap(self, discount: Decimal) -> Decimal:
        return discount

    def _notify(self, discount: Decimal) -> None:
        if self.on_discount_applied is None:
            return
        try:
            self.on_discount_applied(discount, self.name)
        except Exception:
            logger.exception("on_discount_applied callback failed for %s", self.name)

    def get_discount_name(self) -> str:
        return f"{self.kind} Discount - {self.subject} ({format_percentage(self.config.discount_percentage)}%)"

    def get_priority(self) -> int:
        return int(self.priority)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class BrandDiscountStrategy(DiscountStrategy):
    strategy_type = StrategyType.BRAND
    priority = StrategyPriority.BRAND_AND_CATEGORY
    kind = "Brand"
    config_model = BrandDiscountConfig
    default_validator = DefaultBrandValidator

    @property
    def subject(self) -> str:
        return self.config.brand

    def eligible_items(self, items: List[CartItem]) -> List[CartItem]:
        return brand_eligible_items(items, self.config)


class CategoryDiscountStrategy(DiscountStrategy):
    strategy_type = StrategyType.CATEGORY
    priority = StrategyPriority.BRAND_AND_CATEGORY
    kind = "Category"
    config_model = CategoryDiscountConfig
    default_validator = DefaultCategoryValidator

    @property
    def subject(self) -> str:
        return self.config.category

    def eligible_items(self, items: List[CartItem]) -> List[CartItem]:
        return category_eligible_items(items, self.config)


class VoucherDiscountStrategy(DiscountStrategy):
    strategy_type = StrategyType.VOUCHER
    priority = StrategyPriority.VOUCHER
    kind = "Voucher"
    config_model = VoucherDiscountConfig
    default_validator = DefaultVoucherValidator

    @property
    def subject(self) -> str:
        return self.config.code

    def eligible_items(self, items: List[CartItem]) -> List[CartItem]:
        return voucher_eligible_items(items, self.config)

    def _cap(self, discount: Decimal) -> Decimal:
        cap = self.config.max_discount_cap
        if cap is not None and discount > cap:
            logger.debug("%s: discount %s capped at %s", self.name, discount, cap)
            return cap
        return discount


class BankCardDiscountStrategy(DiscountStrategy):
    strategy_type = StrategyType.BANK
    priority = StrategyPriority.BANK_CARD
    kind = "Bank Card"
    config_model = BankCardDiscountConfig
    default_validator = DefaultBankCardValidator

    @property
    def subject(self) -> str:
        return self.config.bank_name

    def eligible_items(self, items: List[CartItem]) -> List[CartItem]:
        return bank_card_eligible_items(items, self.config)
