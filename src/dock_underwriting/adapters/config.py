# src/dock_underwriting/adapters/config.py
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # Financing defaults (used when a payload omits them)
    DEFAULT_INTEREST_RATE: float = Field(default=0.07)
    DEFAULT_LTV: float = Field(default=0.75)
    DEFAULT_LOAN_TERM_YEARS: int = Field(default=30)

    # Investor thresholds
    TARGET_CAP_RATE: float = Field(default=0.06)
    TARGET_CASH_ON_CASH: float = Field(default=0.08)
    TARGET_DSCR: float = Field(default=1.25)
    MAX_BREAK_EVEN_OCCUPANCY: float = Field(default=0.85)

    # Market support targets (informational, unweighted)
    MIN_RENT_GROWTH: float = Field(default=0.02)
    MAX_MARKET_VACANCY: float = Field(default=0.08)

    # Operating expense assumptions
    CAPEX_BASE_RESERVE_PER_UNIT: float = Field(default=300.0)

    # -----------------------------
    # Max-price search
    # -----------------------------
    PRICE_SEARCH_STEP: float = Field(default=5_000.0)
    PRICE_SEARCH_FLOOR_PCT: float = Field(default=0.70)
    PRICE_SEARCH_CEILING_PCT: float = Field(default=1.30)
    PRICE_SEARCH_MIN_PRICE: float = Field(default=50_000.0)

    # -----------------------------
    # Stress-test boundary search
    # -----------------------------
    BISECTION_TOLERANCE: float = Field(default=0.0001)
    BISECTION_MAX_ITER: int = Field(default=64)

    model_config = SettingsConfigDict(
        env_prefix="DOCK_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "DEFAULT_INTEREST_RATE",
        "DEFAULT_LTV",
        "TARGET_CAP_RATE",
        "TARGET_CASH_ON_CASH",
        "MAX_BREAK_EVEN_OCCUPANCY",
        "MAX_MARKET_VACANCY",
        mode="before",
    )
    @classmethod
    def _rate_as_fraction(cls, v: Any) -> Any:
        # "7%", "7" and 0.07 all mean seven percent
        raw = v.strip().rstrip("%") if isinstance(v, str) else v
        try:
            rate = float(raw)
        except (TypeError, ValueError) as err:
            raise ValueError(f"rate must be numeric or percent-like, got {v!r}") from err
        if rate < 0:
            raise ValueError("rate must be non-negative")
        return rate / 100.0 if rate > 1.0 else rate

    @field_validator("TARGET_DSCR", mode="before")
    @classmethod
    def _dscr_at_least_one(cls, v: Any) -> Any:
        f = float(v)
        if f < 1.0:
            raise ValueError("TARGET_DSCR must be >= 1.0")
        return f

    @field_validator("PRICE_SEARCH_STEP", "BISECTION_TOLERANCE", mode="before")
    @classmethod
    def _strictly_positive(cls, v: Any) -> Any:
        f = float(v)
        if f <= 0:
            raise ValueError("search step / tolerance must be > 0")
        return f


config = AppConfig()
