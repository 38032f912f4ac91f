import logging
from decimal import Decimal

import pytest

from CartDiscounts.applier import DiscountApplier, cart_total
from CartDiscounts.strategy import (
    BankCardDiscountStrategy,
    BrandDiscountStrategy,
    CategoryDiscountStrategy,
    VoucherDiscountStrategy,
)


class Exploding:
    async def validate(self, items, customer, config, payment_info=None):
        raise RuntimeError('lookup failed')


@pytest.fixture
def strategies():
    return [
        BankCardDiscountStrategy({'bank_name': 'ICICI', 'discount_percentage': 10}),
        VoucherDiscountStrategy({'code': 'SUPER69', 'discount_percentage': 69, 'minimum_cart_amount': 1000}),
        BrandDiscountStrategy({'brand': 'PUMA', 'discount_percentage': 40}),
        CategoryDiscountStrategy({'category': 'T-shirts', 'discount_percentage': 10}),
    ]


def test_strategies_sorted_by_priority(strategies):
    applier = DiscountApplier(strategies)

    assert [type(s) for s in applier.strategies] == [
        BrandDiscountStrategy,
        CategoryDiscountStrategy,
        VoucherDiscountStrategy,
        BankCardDiscountStrategy,
    ]


@pytest.mark.asyncio
async def test_prices_redistributed_after_each_step(strategies, multi_items, customer, payment_info):
    totals = []
    applier = DiscountApplier(strategies)

    outcome = await applier.apply_discounts(
        multi_items, customer, payment_info,
        on_discount_applied=lambda name, amount, items: totals.append(cart_total(items)),
    )

    assert totals == [Decimal(3200), Decimal(2880), Decimal('892.8'), Decimal('803.52')]
    assert cart_total(multi_items) == outcome.final_price
    # both lines were reduced in proportion to their share of the cart
    assert multi_items[0].product.current_price == Decimal('401.76')
    assert multi_items[1].product.current_price == Decimal('200.88')


@pytest.mark.asyncio
async def test_failing_strategy_is_skipped(strategies, cart_items, customer, payment_info, caplog):
    broken = BrandDiscountStrategy({'brand': 'PUMA', 'discount_percentage': 40}, validator=Exploding())
    applier = DiscountApplier([broken] + strategies[:2] + strategies[3:])

    with caplog.at_level(logging.WARNING, logger='CartDiscounts.applier'):
        outcome = await applier.apply_discounts(cart_items, customer, payment_info)

    # category 200 -> 1800, voucher 1242 -> 558, bank 55.8 -> 502.2
    assert broken.name not in outcome.applied_discounts
    assert outcome.final_price == Decimal('502.2')
    assert 'Failed to apply Brand Discount - PUMA (40%)' in caplog.text


class Unnamed(BrandDiscountStrategy):
    def get_discount_name(self):
        # the constructor caches a name; later lookups fail
        if hasattr(self, 'name'):
            raise RuntimeError('name lookup failed')
        return super().get_discount_name()


@pytest.mark.asyncio
async def test_failing_name_lookup_is_skipped(strategies, cart_items, customer, payment_info, caplog):
    unnamed = Unnamed({'brand': 'PUMA', 'discount_percentage': 40})
    applier = DiscountApplier([unnamed] + strategies[:2] + strategies[3:])

    with caplog.at_level(logging.WARNING, logger='CartDiscounts.applier'):
        outcome = await applier.apply_discounts(cart_items, customer, payment_info)

    assert list(outcome.applied_discounts) == [
        'Category Discount - T-shirts (10%)',
        'Voucher Discount - SUPER69 (69%)',
        'Bank Card Discount - ICICI (10%)',
    ]
    assert outcome.final_price == Decimal('502.2')
    assert 'Failed to apply Unnamed' in caplog.text


@pytest.mark.asyncio
async def test_zero_discount_is_not_recorded(cart_items, customer):
    applier = DiscountApplier([BrandDiscountStrategy({'brand': 'PUMA', 'discount_percentage': 0})])

    outcome = await applier.apply_discounts(cart_items, customer)

    assert outcome.applied_discounts == {}
    assert outcome.messages == []
    assert outcome.final_price == Decimal(2000)


@pytest.mark.asyncio
async def test_capping_stops_the_pipeline(cart_items, customer, payment_info):
    hook_calls = []
    applier = DiscountApplier([
        BrandDiscountStrategy({'brand': 'PUMA', 'discount_percentage': 50}),
        CategoryDiscountStrategy({'category': 'T-shirts', 'discount_percentage': 80, 'price_basis': 'base'}),
        VoucherDiscountStrategy({'code': 'SUPER69', 'discount_percentage': 69}),
        BankCardDiscountStrategy({'bank_name': 'ICICI', 'discount_percentage': 10}),
    ])

    outcome = await applier.apply_discounts(
        cart_items, customer, payment_info,
        on_discount_applied=lambda name, amount, items: hook_calls.append(name),
    )

    # brand leaves 1000; 80% of the 2000 list price would overshoot it
    assert outcome.final_price == Decimal(0)
    assert outcome.applied_discounts == {
        'Brand Discount - PUMA (50%)': Decimal(1000),
        'Category Discount - T-shirts (80%)': Decimal(1000),
    }
    assert outcome.messages[-1] == 'Applied Category Discount - T-shirts (80%) (capped)'
    assert hook_calls == ['Brand Discount - PUMA (50%)']

