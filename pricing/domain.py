from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from .errors import OutOfRangeError
from .rules import is_int, is_percent


@dataclass(frozen=True)
class User:
    id: str = ""
    name: str = ""
    birth_date: Optional[date] = None
    premium: bool = False


@dataclass(frozen=True)
class Product:
    # одна и та же позиция каталога = один и тот же id
    id: str
    price: int = field(default=0, compare=False)  # копейки
    title: str = field(default="", compare=False)

    def __post_init__(self):
        if not is_int(self.price) or self.price < 0:
            raise OutOfRangeError("price", self.price)


@dataclass(frozen=True)
class PromoCode:
    discount_percent: int
    code: str
    valid_for: timedelta

    def __post_init__(self):
        if not is_percent(self.discount_percent):
            raise OutOfRangeError("discount_percent", self.discount_percent)


@dataclass(frozen=True)
class CartLine:
    product: Product
    amount: int
