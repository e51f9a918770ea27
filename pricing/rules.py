# === Правила скидок ===
MIN_DISCOUNT = 1
MAX_DISCOUNT = 99  # общий потолок: скидка + промокод (+ бонус ко дню рождения)
BIRTHDAY_BONUS = 5
PREMIUM_PROMO_THRESHOLD = 50  # промокоды от 50% только для премиум-аккаунтов


def is_int(value) -> bool:
    """Целое число, но не bool"""
    return isinstance(value, int) and not isinstance(value, bool)


def is_percent(value) -> bool:
    return is_int(value) and MIN_DISCOUNT <= value <= MAX_DISCOUNT
