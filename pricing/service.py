from typing import Tuple

from .cart import Cart
from .domain import Product, PromoCode, User
from .ftypes import Either, Maybe


class CatalogService:
    """Фасад над данными, которые поставляют внешние системы (каталог, промо, профили)"""

    def __init__(
        self,
        users: Tuple[User, ...],
        products: Tuple[Product, ...],
        promo_codes: Tuple[PromoCode, ...],
    ):
        self.users = users
        self.products = products
        self.promo_codes = promo_codes

    def user(self, user_id: str) -> Maybe[User]:
        return Maybe.of(next((u for u in self.users if u.id == user_id), None))

    def product(self, product_id: str) -> Maybe[Product]:
        return Maybe.of(next((p for p in self.products if p.id == product_id), None))

    def promo(self, code: str) -> Maybe[PromoCode]:
        """Поиск промокода по строке: без учёта регистра и пробелов по краям"""
        wanted = (code or "").strip().lower()
        return Maybe.of(
            next((p for p in self.promo_codes if p.code.lower() == wanted), None)
        )

    def new_cart(self, user_id: str) -> Either[dict, Cart]:
        return self.user(user_id).map(Cart).to_either(
            {"error": f"User '{user_id}' not found", "kind": "not_found"}
        )
