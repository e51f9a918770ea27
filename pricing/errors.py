from typing import Any


class CartError(Exception):
    """Базовая ошибка корзины. kind — тег для вызывающей стороны."""

    kind = "cart"


class OutOfRangeError(CartError, ValueError):
    kind = "out_of_range"

    def __init__(self, param: str, value: Any, message: str = ""):
        self.param = param
        self.value = value
        super().__init__(message or f"{param} is out of range: {value!r}")


class AlreadyAppliedError(CartError):
    kind = "state_conflict"


class DiscountLimitError(CartError, ValueError):
    kind = "validation"


class PremiumRequiredError(CartError, PermissionError):
    kind = "authorization"
