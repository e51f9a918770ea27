from __future__ import annotations
from dataclasses import dataclass
from dotenv import find_dotenv, load_dotenv
import os


def _str_to_bool(v: str | None, default: bool = False) -> bool:
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass
class Config:
    env: str
    verbose: bool = False
    log_json: bool = False
    seed_path: str = "data/seed.json"

    @property
    def is_prod(self) -> bool:
        return self.env == "prod"


def load_config() -> Config:
    """
    Настройки из окружения (.env из текущей директории подхватывается через load_dotenv).
    - PRICING_ENV=prod → тихие логи по умолчанию
    - PRICING_ENV=test → подробные логи по умолчанию
    """
    load_dotenv(find_dotenv(usecwd=True))
    env = (os.getenv("PRICING_ENV") or "prod").strip().lower()
    if env not in {"prod", "test"}:
        raise RuntimeError(f"PRICING_ENV must be 'prod' or 'test', got {env!r}")

    return Config(
        env=env,
        verbose=_str_to_bool(os.getenv("PRICING_VERBOSE"), default=env == "test"),
        log_json=_str_to_bool(os.getenv("PRICING_LOG_JSON")),
        seed_path=os.getenv("PRICING_SEED_PATH") or "data/seed.json",
    )
