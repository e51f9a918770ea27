import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from datetime import date, datetime, timedelta

import pytest
from structlog.testing import capture_logs

from pricing.cart import Cart
from pricing.domain import Product, PromoCode, User
from pricing.errors import (
    AlreadyAppliedError,
    CartError,
    DiscountLimitError,
    OutOfRangeError,
    PremiumRequiredError,
)


def promo(percent: int, code: str = "TEST") -> PromoCode:
    return PromoCode(percent, code, timedelta(hours=10))


@pytest.fixture
def cart():
    return Cart(User())


@pytest.fixture
def premium_cart():
    return Cart(User(premium=True))


# ============ get_full_discount ============


@pytest.mark.parametrize(
    "discount, promo_discount, day, month, birth_day, birth_month, expected",
    [
        (None, None, 1, 1, 2, 2, 0),
        (None, None, 1, 1, 1, 1, 5),
        (10, None, 1, 1, 2, 2, 10),
        (None, 10, 1, 1, 2, 2, 10),
        (10, 10, 1, 1, 2, 2, 20),
        (10, 10, 1, 1, 1, 1, 25),
        (50, 44, 1, 1, 1, 1, 99),
        (50, 45, 1, 1, 1, 1, 95),
        (50, 46, 1, 1, 1, 1, 96),
    ],
)
def test_full_discount_by_discount_promo_and_birthday(
    discount, promo_discount, day, month, birth_day, birth_month, expected
):
    """Скидка + промокод + бонус ко дню рождения (если влезает под потолок)"""
    cart = Cart(User(birth_date=date(2000, birth_month, birth_day)))
    if discount is not None:
        cart.apply_discount(discount)
    if promo_discount is not None:
        cart.apply_promo(promo(promo_discount))

    assert cart.get_full_discount(datetime(2024, month, day)) == expected


def test_full_discount_without_birth_date_has_no_bonus(cart):
    assert cart.get_full_discount(date(2024, 1, 1)) == 0


def test_full_discount_ignores_year():
    cart = Cart(User(birth_date=date(1990, 2, 28)))
    assert cart.get_full_discount(date(2031, 2, 28)) == 5
    assert cart.get_full_discount(date(2031, 3, 28)) == 0


def test_queries_are_pure():
    """Повторные вызовы с любыми датами не меняют корзину"""
    cart = Cart(User(birth_date=date(2000, 5, 5)))
    cart.add_product(Product(id="p1", price=100), 2)
    cart.apply_discount(20)

    assert cart.get_full_discount(date(2024, 5, 5)) == 25
    assert cart.get_full_price(date(2024, 5, 5)) == 150
    assert cart.get_full_discount(date(2024, 6, 5)) == 20
    assert cart.get_full_discount(date(2024, 5, 5)) == 25
    assert cart.discount == 20
    assert cart.promo_code is None
    assert len(cart.products) == 1


# ============ get_full_price ============


def test_full_price_empty_cart_is_zero():
    now = datetime.now()
    cart = Cart(User(birth_date=now.date()))
    cart.apply_discount(10)
    cart.apply_promo(promo(10, "test"))

    assert cart.get_full_price(now) == 0


def test_full_price_several_products_without_discount(cart):
    cart.add_product(Product(id="a", price=5), 5)
    cart.add_product(Product(id="b", price=6), 6)

    assert cart.get_full_price(datetime.now()) == 61


def test_full_price_all_discounts_total_fifty_percent():
    now = datetime.now()
    cart = Cart(User(birth_date=now.date()))
    cart.add_product(Product(id="p", price=10), 10)
    cart.apply_discount(30)
    cart.apply_promo(promo(15, "test"))

    assert cart.get_full_price(now) == 50


@pytest.mark.parametrize(
    "discount, expected", [(1, 10), (9, 10), (10, 9), (11, 9), (99, 1)]
)
def test_full_price_discount_amount_is_floored(cart, discount, expected):
    cart.add_product(Product(id="p", price=10), 1)
    cart.apply_discount(discount)

    assert cart.get_full_price(datetime.now()) == expected


# ============ add_product ============


@pytest.mark.parametrize("amount", [0, -1, 1.5, True])
def test_add_product_invalid_amount_leaves_lines_unchanged(cart, amount):
    cart.add_product(Product(id="p", price=10), 2)
    before = cart.products

    with pytest.raises(OutOfRangeError, match="amount") as exc:
        cart.add_product(Product(id="p"), amount)

    assert exc.value.param == "amount"
    assert isinstance(exc.value, ValueError)
    assert cart.products == before
    assert cart.products[0].amount == 2
    assert cart.get_full_price(date(2024, 1, 1)) == 20


@pytest.mark.parametrize("amount", [1, 10])
def test_add_product_new_product(cart, amount):
    product = Product(id="p1")
    cart.add_product(product, amount)

    assert len(cart.products) == 1
    assert cart.products[0].product is product
    assert cart.products[0].amount == amount


def test_add_product_same_id_increases_amount_and_keeps_original(cart):
    product = Product(id="p1", price=10, title="old")
    same_product = Product(id="p1", price=99, title="new")
    cart.add_product(product, 10)
    cart.add_product(same_product, 10)

    assert len(cart.products) == 1
    assert cart.products[0].product is product
    assert cart.products[0].amount == 20


def test_add_product_preserves_insertion_order(cart):
    for pid in ("c", "a", "b"):
        cart.add_product(Product(id=pid), 1)
    cart.add_product(Product(id="a"), 3)

    assert [line.product.id for line in cart.products] == ["c", "a", "b"]
    assert [line.amount for line in cart.products] == [1, 4, 1]


def test_products_snapshot_is_immutable(cart):
    cart.add_product(Product(id="p1"), 1)
    with pytest.raises(Exception):
        cart.products[0].amount = 0


# ============ apply_discount ============


@pytest.mark.parametrize("discount", [0, -1, 100, 101, 9.5, 1.5, True])
def test_apply_discount_out_of_range(cart, discount):
    with pytest.raises(OutOfRangeError, match="discount"):
        cart.apply_discount(discount)
    assert cart.discount is None


def test_apply_discount_twice_is_state_conflict(cart):
    cart.apply_discount(1)
    with pytest.raises(AlreadyAppliedError, match="discount already applied"):
        cart.apply_discount(1)
    assert cart.discount == 1


@pytest.mark.parametrize("discount, promo_discount", [(1, None), (99, None), (50, 49)])
def test_apply_discount_valid(cart, discount, promo_discount):
    if promo_discount is not None:
        cart.apply_promo(promo(promo_discount))
    cart.apply_discount(discount)

    assert cart.discount == discount


@pytest.mark.parametrize("discount, promo_discount", [(60, 40), (60, 41)])
def test_apply_discount_over_limit(cart, discount, promo_discount):
    cart.apply_promo(promo(promo_discount))
    with pytest.raises(DiscountLimitError, match="combined discount cannot exceed 100%"):
        cart.apply_discount(discount)
    assert cart.discount is None


# ============ apply_promo ============


def test_apply_promo_twice_is_state_conflict(cart):
    code = promo(10)
    cart.apply_promo(code)
    with pytest.raises(AlreadyAppliedError, match="promo code already applied"):
        cart.apply_promo(promo(5, "OTHER"))
    assert cart.promo_code == code


@pytest.mark.parametrize("promo_discount, discount", [(1, None), (99, None), (50, 49)])
def test_apply_promo_valid(premium_cart, promo_discount, discount):
    code = promo(promo_discount)
    if discount is not None:
        premium_cart.apply_discount(discount)
    premium_cart.apply_promo(code)

    assert premium_cart.promo_code == code


@pytest.mark.parametrize("discount, promo_discount", [(60, 40), (60, 41)])
def test_apply_promo_over_limit(cart, discount, promo_discount):
    cart.apply_discount(discount)
    with pytest.raises(DiscountLimitError, match="combined discount cannot exceed 100%"):
        cart.apply_promo(promo(promo_discount))
    assert cart.promo_code is None


@pytest.mark.parametrize("percent", [50, 60, 99])
def test_apply_promo_premium_only_for_regular_user(cart, percent):
    with pytest.raises(PremiumRequiredError, match="premium account"):
        cart.apply_promo(promo(percent))
    assert cart.promo_code is None


def test_apply_promo_premium_check_with_discount_set(cart):
    cart.apply_discount(10)
    with pytest.raises(PremiumRequiredError):
        cart.apply_promo(promo(60))
    assert cart.promo_code is None


def test_apply_promo_below_premium_threshold_for_regular_user(cart):
    cart.apply_promo(promo(49))
    assert cart.promo_code.discount_percent == 49


@pytest.mark.parametrize("first_discount_then_promo", [True, False])
@pytest.mark.parametrize("discount, promo_discount", [(50, 49), (1, 98), (98, 1)])
def test_apply_both_in_any_order_within_cap(
    premium_cart, first_discount_then_promo, discount, promo_discount
):
    if first_discount_then_promo:
        premium_cart.apply_discount(discount)
        premium_cart.apply_promo(promo(promo_discount))
    else:
        premium_cart.apply_promo(promo(promo_discount))
        premium_cart.apply_discount(discount)

    assert premium_cart.discount + premium_cart.promo_code.discount_percent <= 99


def test_error_kinds_are_distinguishable():
    kinds = {
        OutOfRangeError("amount", 0).kind,
        AlreadyAppliedError().kind,
        DiscountLimitError().kind,
        PremiumRequiredError().kind,
    }
    assert kinds == {"out_of_range", "state_conflict", "validation", "authorization"}
    assert issubclass(PremiumRequiredError, CartError)


# ============ Логирование ============


def test_rejection_is_logged(cart):
    with capture_logs() as logs:
        with pytest.raises(OutOfRangeError):
            cart.apply_discount(100)

    assert logs[0]["event"] == "cart.rejected"
    assert logs[0]["kind"] == "out_of_range"


def test_mutation_is_logged(cart):
    with capture_logs() as logs:
        cart.add_product(Product(id="p1"), 2)

    assert logs[0]["event"] == "cart.product_added"
    assert logs[0]["product_id"] == "p1"
    assert logs[0]["log_level"] == "debug"
