"""Configuration from environment variables."""

from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Two sides agree when their totals differ by less than this
    balance_tolerance: Decimal = Decimal("0.01")

    # Fuzzy matching (fixed thresholds, no adaptive tuning)
    fuzzy_amount_tolerance: Decimal = Decimal("0.01")  # ratio of the bank amount
    fuzzy_date_window_days: int = 5
    fuzzy_similarity_threshold: int = 60  # token_set_ratio score, 0-100

    class Config:
        env_prefix = "RECON_"
        case_sensitive = False


settings = Settings()
