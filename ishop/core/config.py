"""
Central configuration. All API keys and settings in one place.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Environment ---
    env: str = Field(default="development", alias="ENV")
    log_level: str = Field(default="info", alias="LOG_LEVEL")
    debug: bool = Field(default=False, alias="DEBUG")

    # --- Gemini ---
    gemini_api_key: str = Field(default="", alias="GEMINI_API_KEY")
    text_model: str = Field(default="gemini-2.5-flash", alias="TEXT_MODEL")
    primary_image_model: str = Field(
        default="gemini-3-pro-image-preview", alias="PRIMARY_IMAGE_MODEL"
    )
    secondary_image_model: str = Field(
        default="gemini-2.5-flash-image", alias="SECONDARY_IMAGE_MODEL"
    )
    # {seed} is replaced with the placeholder seed. grayscale+blur marks it as a fallback.
    placeholder_image_url: str = Field(
        default="https://picsum.photos/seed/{seed}/400/500?grayscale&blur=2",
        alias="PLACEHOLDER_IMAGE_URL",
    )

    # --- Object store ---
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    store_key_prefix: str = Field(default="galt_threads", alias="STORE_KEY_PREFIX")

    # --- Razorpay ---
    razorpay_key_id: str = Field(default="", alias="RAZORPAY_KEY_ID")
    razorpay_key_secret: str = Field(default="", alias="RAZORPAY_KEY_SECRET")
    razorpay_base_url: str = Field(
        default="https://api.razorpay.com/v1", alias="RAZORPAY_BASE_URL"
    )

    # --- Storefront ---
    store_name: str = Field(default="theIshop", alias="STORE_NAME")
    currency: str = Field(default="INR", alias="CURRENCY")
    default_stock: int = Field(default=50, alias="DEFAULT_STOCK")
    admin_passkey: str = Field(default="GALT", alias="ADMIN_PASSKEY")

    # --- Checkout timing (seconds) ---
    cod_settle_delay: float = Field(default=1.0, alias="COD_SETTLE_DELAY")
    payment_simulation_delay: float = Field(default=2.0, alias="PAYMENT_SIMULATION_DELAY")

    # --- API ---
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")


@lru_cache
def get_settings() -> Settings:
    return Settings()
