from enum import Enum, IntEnum


class BrandTier(str, Enum):
    PREMIUM = "PREMIUM"
    REGULAR = "REGULAR"
    BUDGET = "BUDGET"


class CustomerTier(str, Enum):
    PREMIUM = "PREMIUM"
    REGULAR = "REGULAR"
    BUDGET = "BUDGET"


class CardType(str, Enum):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


class PaymentMethod(str, Enum):
    CARD = "CARD"
    UPI = "UPI"


class StrategyType(str, Enum):
    BRAND = "brand"
    CATEGORY = "category"
    VOUCHER = "voucher"
    BANK = "bank"


class PriceBasis(str, Enum):
    """Which price an eligible amount is computed from."""
    CURRENT = "current"  # live price, already reduced by earlier strategies
    BASE = "base"  # original list price


class StrategyPriority(IntEnum):
    # lower value is applied earlier
    BRAND_AND_CATEGORY = 1
    VOUCHER = 2
    BANK_CARD = 3
