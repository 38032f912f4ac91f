import asyncio
import logging
from decimal import Decimal

from CartDiscounts.enums import BrandTier, CardType, CustomerTier, PaymentMethod
from CartDiscounts.models import CartItem, CustomerProfile, PaymentInfo, Product, StrategyConfig
from CartDiscounts.service import DiscountService
from CartDiscounts.settings import CalculatorSettings

logger = logging.getLogger(__name__)


def audit(name: str, amount: Decimal, cart_items) -> None:
    logger.info("Applied %s: %s", name, amount)


class CheckoutFactory:
    """Wires a discount service with the demo promotions."""

    def __init__(self, settings: CalculatorSettings):
        self.settings = settings

    def setup(self) -> DiscountService:
        strategy_configs = [
            StrategyConfig(type="brand", config={"brand": "PUMA", "discount_percentage": 40}),
            StrategyConfig(type="category", config={"category": "T-shirts", "discount_percentage": 10}),
            StrategyConfig(type="voucher", config={
                "code": "SUPER69",
                "discount_percentage": 69,
                "minimum_cart_amount": 1000,
            }),
            StrategyConfig(type="bank", config={"bank_name": "ICICI", "discount_percentage": 10}),
        ]
        return DiscountService(
            strategy_configs=strategy_configs,
            settings=self.settings,
            on_discount_applied=audit,
        )


async def run_demo(discount_service: DiscountService) -> None:
    curr_cart_items = [
        CartItem(
            product=Product(id='1', brand='PUMA', brand_tier=BrandTier.PREMIUM,
                            category='T-shirts', base_price=Decimal(2000)),
            quantity=1,
            size='M',
        ),
        CartItem(
            product=Product(id='2', brand='NIKE', brand_tier=BrandTier.REGULAR,
                            category='T-shirts', base_price=Decimal(1000)),
            quantity=2,
            size='L',
        ),
    ]

    customer = CustomerProfile(
        customer_tier=CustomerTier.REGULAR,
        name="John Doe",
        email="john.doe@example.com",
        id="12345"
    )

    payment_info = PaymentInfo(
        method=PaymentMethod.CARD,
        bank_name="ICICI",
        card_type=CardType.CREDIT
    )

    discounted_price = await discount_service.calculate_cart_discounts(
        cart_items=curr_cart_items,
        customer=customer,
        payment_info=payment_info,
    )

    print(f"Original Price: {discounted_price.original_price}")
    print(f"Final Price: {discounted_price.final_price}")
    print(f"Applied Discounts: {discounted_price.applied_discounts}")
    print(discounted_price.message)

    is_valid = await discount_service.validate_discount_code(
        code="super69",
        cart_items=curr_cart_items,
        customer=customer,
    )
    print(f"Voucher SUPER69 valid: {is_valid}")


if __name__ == "__main__":
    settings = CalculatorSettings.load_from_env()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(run_demo(CheckoutFactory(settings).setup()))
