from .cart import Cart
from .domain import CartLine, Product, PromoCode, User
from .errors import (
    AlreadyAppliedError,
    CartError,
    DiscountLimitError,
    OutOfRangeError,
    PremiumRequiredError,
)
from .logs import configure_defaults

configure_defaults()

__all__ = [
    "Cart",
    "CartLine",
    "Product",
    "PromoCode",
    "User",
    "CartError",
    "OutOfRangeError",
    "AlreadyAppliedError",
    "DiscountLimitError",
    "PremiumRequiredError",
]
