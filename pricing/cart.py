from datetime import date
from typing import Dict, Optional, Tuple

import structlog

from .domain import CartLine, Product, PromoCode, User
from .errors import (
    AlreadyAppliedError,
    CartError,
    DiscountLimitError,
    OutOfRangeError,
    PremiumRequiredError,
)
from .rules import BIRTHDAY_BONUS, MAX_DISCOUNT, PREMIUM_PROMO_THRESHOLD, is_int, is_percent

logger = structlog.get_logger(__name__)


class Cart:
    """
    Корзина одного покупателя.
    Скидка и промокод задаются один раз; при любой ошибке состояние не меняется.
    Потокобезопасность не обеспечивается: доступ к корзине сериализует вызывающий.
    """

    def __init__(self, owner: User):
        self._owner = owner
        self._lines: Dict[str, CartLine] = {}
        self._discount: Optional[int] = None
        self._promo_code: Optional[PromoCode] = None

    @property
    def owner(self) -> User:
        return self._owner

    @property
    def products(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines.values())

    @property
    def discount(self) -> Optional[int]:
        return self._discount

    @property
    def promo_code(self) -> Optional[PromoCode]:
        return self._promo_code

    # ============ Мутации ============

    def add_product(self, product: Product, amount: int) -> None:
        if not is_int(amount) or amount < 1:
            raise self._rejected(OutOfRangeError("amount", amount))

        line = self._lines.get(product.id)
        if line is None:
            self._lines[product.id] = CartLine(product=product, amount=amount)
        else:
            # товар в строке остаётся исходным
            self._lines[product.id] = CartLine(
                product=line.product, amount=line.amount + amount
            )
        logger.debug("cart.product_added", product_id=product.id, amount=amount)

    def apply_discount(self, discount: int) -> None:
        if not is_percent(discount):
            raise self._rejected(OutOfRangeError("discount", discount))
        if self._discount is not None:
            raise self._rejected(AlreadyAppliedError("discount already applied"))
        if self._promo_code is not None:
            self._check_limit(discount + self._promo_code.discount_percent)

        self._discount = discount
        logger.debug("cart.discount_applied", discount=discount)

    def apply_promo(self, promo_code: PromoCode) -> None:
        if self._promo_code is not None:
            raise self._rejected(AlreadyAppliedError("promo code already applied"))
        if self._discount is not None:
            self._check_limit(self._discount + promo_code.discount_percent)
        if (
            promo_code.discount_percent >= PREMIUM_PROMO_THRESHOLD
            and not self._owner.premium
        ):
            raise self._rejected(
                PremiumRequiredError("promo code requires a premium account")
            )

        self._promo_code = promo_code
        logger.debug(
            "cart.promo_applied",
            code=promo_code.code,
            discount_percent=promo_code.discount_percent,
        )

    # ============ Запросы (чистые) ============

    def get_full_discount(self, purchased_at: date) -> int:
        """Суммарная скидка в процентах на момент покупки."""
        base = (self._discount or 0) + (
            self._promo_code.discount_percent if self._promo_code else 0
        )
        if self.is_birthday(purchased_at) and base + BIRTHDAY_BONUS <= MAX_DISCOUNT:
            return base + BIRTHDAY_BONUS
        return base

    def get_full_price(self, purchased_at: date) -> int:
        """Итоговая цена: скидка округляется вниз, т.е. в пользу магазина."""
        total = self.subtotal()
        return total - total * self.get_full_discount(purchased_at) // 100

    def subtotal(self) -> int:
        return sum(line.product.price * line.amount for line in self._lines.values())

    def is_birthday(self, purchased_at: date) -> bool:
        birth = self._owner.birth_date
        return (
            birth is not None
            and birth.day == purchased_at.day
            and birth.month == purchased_at.month
        )

    # ============ Вспомогательное ============

    def _check_limit(self, combined: int) -> None:
        if combined > MAX_DISCOUNT:
            raise self._rejected(
                DiscountLimitError("combined discount cannot exceed 100%")
            )

    def _rejected(self, error: CartError) -> CartError:
        logger.info("cart.rejected", kind=error.kind, reason=str(error))
        return error

    def __repr__(self) -> str:
        return (
            f"Cart(owner={self._owner.id!r}, lines={len(self._lines)}, "
            f"discount={self._discount}, promo={self._promo_code and self._promo_code.code})"
        )
