"""Registry that builds discount strategies from configuration descriptors."""
import logging
from typing import Dict, Iterable, List, Type

from CartDiscounts.enums import StrategyType
from CartDiscounts.exceptions import UnknownStrategyType
from CartDiscounts.models import StrategyConfig
from CartDiscounts.strategy import (
    BankCardDiscountStrategy,
    BrandDiscountStrategy,
    CategoryDiscountStrategy,
    DiscountStrategy,
    VoucherDiscountStrategy,
)

logger = logging.getLogger(__name__)

STRATEGY_CLASSES: Dict[StrategyType, Type[DiscountStrategy]] = {
    strategy_class.strategy_type: strategy_class
    for strategy_class in (
        BrandDiscountStrategy,
        CategoryDiscountStrategy,
        VoucherDiscountStrategy,
        BankCardDiscountStrategy,
    )
}


class StrategyFactory:
    """Builds strategies and keeps the ones it built, keyed by display name.

    The registry is an ordinary object: create one per service (or per test)
    instead of sharing a process-wide instance. Registering a strategy whose
    display name is already present replaces the earlier one.
    """

    def __init__(self):
        self._strategies: Dict[str, DiscountStrategy] = {}

    def create_strategy(self, config: StrategyConfig) -> DiscountStrategy:
        try:
            strategy_type = config.type if isinstance(config.type, StrategyType) \
                else StrategyType(str(config.type).lower())
        except ValueError:
            raise UnknownStrategyType(f"Unknown strategy type: {config.type}") from None

        strategy_class = STRATEGY_CLASSES[strategy_type]
        strategy = strategy_class(
            config.config,
            validator=config.validator,
            on_discount_applied=config.on_discount_applied,
        )
        return self.register(strategy)

    def create_strategies(self, configs: Iterable[StrategyConfig]) -> List[DiscountStrategy]:
        return [self.create_strategy(config) for config in configs]

    def register(self, strategy: DiscountStrategy) -> DiscountStrategy:
        name = strategy.get_discount_name()
        if name in self._strategies:
            logger.warning("Replacing registered strategy %s", name)
        self._strategies[name] = strategy
        return strategy

    def get_strategies(self) -> List[DiscountStrategy]:
        return list(self._strategies.values())

    def clear_strategies(self) -> None:
        self._strategies.clear()

    def __len__(self) -> int:
        return len(self._strategies)
