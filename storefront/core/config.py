# storefront/core/config.py
from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from storefront.schemas.checkout import PaymentMethod


def _default_payment_methods() -> list[PaymentMethod]:
    return [
        PaymentMethod(id="cash", name="Cash on Delivery", enabled=True),
        PaymentMethod(
            id="card",
            name="Debit / Credit Card",
            enabled=True,
            fee=0.025,
            minimum_fee=25,
        ),
        PaymentMethod(id="wallet", name="Wallet", enabled=True),
    ]


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Optional env vars (.env):
      - DATABASE_URL (catalog + orders database, defaults to local SQLite)
      - LOG_LEVEL
      - PLACEHOLDER_IMAGE_URL (image used for cart items without one)
      - CART_SESSION_LIMIT (in-memory carts kept before the least recently
        used one is dropped)
      - PAYMENT_METHODS (JSON list of payment method descriptors)
    """

    PROJECT_NAME: str = "Storefront Checkout API"
    API_V1_STR: str = "/api/v1"

    # Database
    DATABASE_URL: str = "sqlite:///./storefront.db"
    DATABASE_ECHO: bool = False

    LOG_LEVEL: str = "INFO"

    # Cart presentation defaults
    PLACEHOLDER_IMAGE_URL: str = "/placeholder-image.jpg"
    CURRENCY_LABEL: str = "Rs."

    # In-memory cart sessions
    CART_SESSION_LIMIT: int = Field(default=10_000, ge=1)

    # Payment gateway descriptors (fees are consumed, never executed here)
    PAYMENT_METHODS: list[PaymentMethod] = Field(default_factory=_default_payment_methods)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
