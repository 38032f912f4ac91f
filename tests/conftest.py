from decimal import Decimal

import pytest
import pytest_asyncio

from CartDiscounts.enums import BrandTier, CardType, CustomerTier, PaymentMethod
from CartDiscounts.factory import StrategyFactory
from CartDiscounts.models import CartItem, CustomerProfile, PaymentInfo, Product, StrategyConfig
from CartDiscounts.service import DiscountService


def make_item(id='1', brand='PUMA', brand_tier=BrandTier.PREMIUM, category='T-shirts',
              price=2000, quantity=1, size='M') -> CartItem:
    return CartItem(
        product=Product(id=id, brand=brand, brand_tier=brand_tier, category=category,
                        base_price=Decimal(price), current_price=Decimal(price)),
        quantity=quantity,
        size=size,
    )


@pytest.fixture
def cart_items():
    return [make_item()]


@pytest.fixture
def multi_items():
    return [
        make_item(),
        make_item(id='2', brand='NIKE', brand_tier=BrandTier.REGULAR, price=1000, quantity=2, size='L'),
    ]


@pytest.fixture
def customer():
    return CustomerProfile(customer_tier=CustomerTier.REGULAR, name='John Doe',
                           email='john.doe@example.com', id='12345')


@pytest.fixture
def payment_info():
    return PaymentInfo(method=PaymentMethod.CARD, bank_name='ICICI', card_type=CardType.CREDIT)


@pytest.fixture
def brand_config():
    return StrategyConfig(type='brand', config={'brand': 'PUMA', 'discount_percentage': Decimal(40)})


@pytest.fixture
def category_config():
    return StrategyConfig(type='category', config={'category': 'T-shirts', 'discount_percentage': Decimal(10)})


@pytest.fixture
def voucher_config():
    return StrategyConfig(type='voucher', config={
        'code': 'SUPER69',
        'discount_percentage': Decimal(69),
        'minimum_cart_amount': Decimal(1000),
    })


@pytest.fixture
def bank_config():
    return StrategyConfig(type='bank', config={'bank_name': 'ICICI', 'discount_percentage': Decimal(10)})


@pytest.fixture
def strategy_configs(brand_config, category_config, voucher_config, bank_config):
    return [brand_config, category_config, voucher_config, bank_config]


@pytest.fixture
def discount_service(strategy_configs):
    return DiscountService(strategy_factory=StrategyFactory(), strategy_configs=strategy_configs)


@pytest_asyncio.fixture
async def reversed_service(strategy_configs):
    """Service whose strategies were registered lowest priority first."""
    service = DiscountService()
    builder = StrategyFactory()
    for config in reversed(strategy_configs):
        await service.add_discount_strategy(builder.create_strategy(config))
    return service
