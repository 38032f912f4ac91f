class ECommerceException(Exception):
    """Base exception class for all discount calculation related exceptions.

    This serves as the parent class for all custom exceptions in the package,
    allowing for catching all of them in a single except block.
    """
    pass


class InvalidInput(ECommerceException, ValueError):
    """Exception raised when the caller passes an unusable cart or customer.

    Raised by the service entry point when the cart is missing, is not a
    sequence, is empty, holds a line item with a quantity below one, or when
    the customer profile is missing.
    """
    pass


class InvalidDiscountConfiguration(ECommerceException, ValueError):
    """Exception raised when a discount strategy is built from a bad config.

    Typical causes are a percentage outside [0, 100], an empty brand,
    category, voucher code or bank name, or a negative minimum cart amount
    or discount cap. The strategy object is never created.
    """
    pass


class UnknownStrategyType(ECommerceException, ValueError):
    """Exception raised when the factory is asked for a strategy type it does not know."""
    pass
