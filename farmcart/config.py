"""Runtime settings read from the environment (and an optional .env file)."""

import os
from dataclasses import dataclass
from functools import cache

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Storefront settings."""

    supabase_url: str
    supabase_key: str
    cart_table: str = "cart_items"
    products_table: str = "products"
    featured_limit: int = 6


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    try:
        return int(raw) if raw else default
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@cache
def get_settings() -> Settings:
    """Build settings once per process.

    SUPABASE_KEY wins over SUPABASE_ANON_KEY, which wins over
    SUPABASE_SERVICE_ROLE_KEY.
    """
    load_dotenv()
    key = (
        os.environ.get("SUPABASE_KEY")
        or os.environ.get("SUPABASE_ANON_KEY")
        or os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")
    )
    return Settings(
        supabase_url=os.environ.get("SUPABASE_URL", ""),
        supabase_key=key,
        cart_table=os.environ.get("FARMCART_CART_TABLE", "cart_items"),
        products_table=os.environ.get("FARMCART_PRODUCTS_TABLE", "products"),
        featured_limit=_int_env("FARMCART_FEATURED_LIMIT", 6),
    )
