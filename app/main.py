import sys
import os
from datetime import date

import streamlit as st

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from pricing.cart import Cart
from pricing.config import load_config
from pricing.rules import MAX_DISCOUNT, MIN_DISCOUNT
from pricing.logs import configure_logging
from pricing.service import CatalogService
from pricing.transforms import (
    load_seed,
    price_breakdown,
    try_add_product,
    try_apply_discount,
    try_apply_promo,
)


# ============ Кэширование данных ============
@st.cache_resource
def get_catalog() -> CatalogService:
    config = load_config()
    configure_logging(verbose=config.verbose, log_json=config.log_json)
    return CatalogService(*load_seed(config.seed_path))


def format_price(kopecks: int) -> str:
    """Форматирует цену из копеек в тенге"""
    return f"{kopecks / 100:.2f} ₸"


def show_result(result, success: str) -> None:
    if result.is_left:
        st.error(f"❌ {result.value['error']} ({result.value['kind']})")
    else:
        st.success(success)


# ============ Инициализация ============
st.set_page_config(page_title="Cart Pricing", page_icon="🛒", layout="wide")

catalog = get_catalog()

with st.sidebar:
    st.header("👤 Покупатель")
    user_id = st.selectbox(
        "Пользователь",
        [u.id for u in catalog.users],
        format_func=lambda uid: catalog.user(uid).map(lambda u: u.name).get_or_else(uid),
    )
    purchased_at = st.date_input("📅 Дата покупки", value=date.today())

    if st.button("🔄 Новая корзина"):
        st.session_state.pop("cart", None)

# корзина привязана к владельцу на всё время жизни
if "cart" not in st.session_state or st.session_state.cart.owner.id != user_id:
    created = catalog.new_cart(user_id)
    if created.is_left:
        st.error(f"❌ {created.value['error']}")
        st.stop()
    st.session_state.cart = created.value

cart: Cart = st.session_state.cart
owner = cart.owner

st.title("🛒 Расчёт корзины")
st.caption(
    f"{owner.name} · {'⭐ премиум' if owner.premium else 'обычный аккаунт'}"
    + (f" · 🎂 {owner.birth_date:%d.%m}" if owner.birth_date else "")
)

# ============ Каталог ============
st.subheader("🏪 Каталог")
for p in catalog.products:
    cols = st.columns([5, 2, 2, 2])
    with cols[0]:
        st.markdown(f"**{p.title}**")
    with cols[1]:
        st.write(format_price(p.price))
    with cols[2]:
        qty = st.number_input(
            "Кол-во", min_value=1, value=1, key=f"qty_{p.id}", label_visibility="collapsed"
        )
    with cols[3]:
        if st.button("➕ В корзину", key=f"add_{p.id}"):
            show_result(try_add_product(cart, p, int(qty)), f"✅ {p.title} × {qty}")

st.divider()

# ============ Скидки ============
col1, col2 = st.columns(2)
with col1:
    st.subheader("💸 Скидка")
    if cart.discount is not None:
        st.info(f"Применена скидка {cart.discount}%")
    discount = st.number_input("Скидка, %", min_value=0, max_value=100, value=MIN_DISCOUNT)
    if st.button("Применить скидку"):
        show_result(try_apply_discount(cart, int(discount)), f"✅ Скидка {discount}%")

with col2:
    st.subheader("🎟️ Промокод")
    if cart.promo_code is not None:
        st.info(f"Применён {cart.promo_code.code} (-{cart.promo_code.discount_percent}%)")
    code = st.text_input("Код")
    if st.button("Применить промокод"):
        found = catalog.promo(code)
        if found.is_none():
            st.error("❌ Промокод не найден")
        else:
            show_result(try_apply_promo(cart, found.value), f"✅ Промокод {found.value.code}")

st.caption(f"Общая скидка не больше {MAX_DISCOUNT}%")
st.divider()

# ============ Итог ============
st.subheader("🧾 Итог")
breakdown = price_breakdown(cart, purchased_at)

if not breakdown["lines"]:
    st.info("🛍️ Корзина пуста. Добавьте товары из каталога!")
else:
    for pid, amount, line_total in breakdown["lines"]:
        title = catalog.product(pid).map(lambda p: p.title).get_or_else(pid)
        st.write(f"**{title}** × {amount} = {format_price(line_total)}")

col1, col2, col3 = st.columns(3)
with col1:
    st.metric("Сумма", format_price(breakdown["subtotal"]))
with col2:
    st.metric(
        "Скидка",
        f"{breakdown['discount_percent']}%",
        "🎂 +бонус" if breakdown["birthday_bonus"] else None,
    )
with col3:
    st.metric("К оплате", format_price(breakdown["total"]))
