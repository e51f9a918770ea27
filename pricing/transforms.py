import json
from datetime import date, timedelta
from typing import Callable, Tuple

from .cart import Cart
from .domain import CartLine, Product, PromoCode, User
from .errors import CartError
from .ftypes import Either, Maybe


def load_seed(
    path: str,
) -> Tuple[Tuple[User, ...], Tuple[Product, ...], Tuple[PromoCode, ...]]:
    """Загружает seed.json и возвращает кортежи иммутабельных записей"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    def _to_user(u):
        birth = u.get("birth_date")
        return User(
            id=str(u.get("id", "")),
            name=str(u.get("name", "")),
            birth_date=date.fromisoformat(birth) if birth else None,
            premium=bool(u.get("premium", False)),
        )

    def _to_product(p):
        return Product(
            id=str(p["id"]), price=int(p.get("price", 0)), title=str(p.get("title", ""))
        )

    def _to_promo(p):
        return PromoCode(
            discount_percent=int(p["discount_percent"]),
            code=str(p["code"]),
            valid_for=timedelta(hours=float(p.get("valid_for_hours", 0))),
        )

    users = tuple(map(_to_user, data.get("users", [])))
    products = tuple(map(_to_product, data.get("products", [])))
    promo_codes = tuple(map(_to_promo, data.get("promo_codes", [])))
    return users, products, promo_codes


# ============ Безопасные операции (Maybe/Either) ============


def safe_line(cart: Cart, product_id: str) -> Maybe[CartLine]:
    """Строка корзины по id товара"""
    found = next((line for line in cart.products if line.product.id == product_id), None)
    return Maybe.of(found)


def _attempt(cart: Cart, action: Callable[[], None]) -> Either[dict, Cart]:
    try:
        action()
    except CartError as e:
        return Either.left({"error": str(e), "kind": e.kind})
    return Either.right(cart)


def try_add_product(cart: Cart, product: Product, amount: int) -> Either[dict, Cart]:
    return _attempt(cart, lambda: cart.add_product(product, amount))


def try_apply_discount(cart: Cart, discount: int) -> Either[dict, Cart]:
    return _attempt(cart, lambda: cart.apply_discount(discount))


def try_apply_promo(cart: Cart, promo_code: PromoCode) -> Either[dict, Cart]:
    return _attempt(cart, lambda: cart.apply_promo(promo_code))


# ============ Расчёт чека ============


def price_breakdown(cart: Cart, purchased_at: date) -> dict:
    """
    Разбивка цены на момент покупки:
    subtotal → discount_percent → discount_amount → total.
    total всегда совпадает с cart.get_full_price(purchased_at).
    """
    subtotal = cart.subtotal()
    percent = cart.get_full_discount(purchased_at)
    discount_amount = subtotal * percent // 100
    base = (cart.discount or 0) + (
        cart.promo_code.discount_percent if cart.promo_code else 0
    )

    return {
        "lines": tuple(
            (line.product.id, line.amount, line.product.price * line.amount)
            for line in cart.products
        ),
        "subtotal": subtotal,
        "discount_percent": percent,
        "discount_amount": discount_amount,
        "birthday_bonus": percent > base,
        "total": subtotal - discount_amount,
    }
