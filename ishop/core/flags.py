"""
Central feature flags. One file controls every external dependency.

Set via environment variables (prefix FF_) or .env file.
When a flag is OFF, the system uses a local/mock fallback. Nothing crashes.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeatureFlags(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Object store / Realtime ──────────────────────────────────────
    use_redis: bool = Field(default=False, alias="FF_USE_REDIS")
    # ON  → Catalog, orders, requests and profiles live in Redis. Events go
    #       out over Redis pub/sub. Needs REDIS_URL.
    # OFF → In-process dict store. Events silently skipped.

    # ── Payments ─────────────────────────────────────────────────────
    use_razorpay: bool = Field(default=True, alias="FF_USE_RAZORPAY")
    # ON  → UPI/card checkout goes through Razorpay. Needs RAZORPAY_KEY_ID
    #       and RAZORPAY_KEY_SECRET.
    # OFF → Gateway reported unavailable. Checkout falls back to simulation.

    # ── AI ───────────────────────────────────────────────────────────
    enable_ai_concepts: bool = Field(default=True, alias="FF_ENABLE_AI_CONCEPTS")
    # Admin "auto-generate product" endpoint. Requires: GEMINI_API_KEY


@lru_cache
def get_flags() -> FeatureFlags:
    return FeatureFlags()
