# src/dock_underwriting/services/validation.py

from typing import Any, Sequence

from pydantic import ValidationError

from dock_underwriting.adapters.config import config
from dock_underwriting.domain.property import (
    FinancingTerms,
    MarketData,
    PropertyInputs,
    Thresholds,
)

# Fields expressed as fractions; "5", "5%" and 0.05 all mean five percent.
PERCENT_FIELDS = {
    "vacancy_rate",
    "management_fee_percent",
    "ltv",
    "interest_rate",
    "target_cap_rate",
    "target_cash_on_cash",
    "max_break_even_occupancy",
    "min_rent_growth",
    "max_market_vacancy",
    "rent_growth_yoy",
    "price_appreciation_yoy",
    "population_growth",
}

PROPERTY_NUMERIC_FIELDS = [
    "purchase_price",
    "asking_price",
    "monthly_rent_per_unit",
    "total_monthly_rent",
    "market_rent_per_unit",
    "vacancy_rate",
    "management_fee_percent",
    "repairs_per_unit_per_year",
    "annual_taxes",
    "annual_insurance",
    "other_annual_expenses",
    "closing_costs",
]
PROPERTY_INT_FIELDS = ["year_built", "unit_count", "square_feet"]

FINANCING_NUMERIC_FIELDS = ["loan_amount", "ltv", "interest_rate", "total_cash_required"]
THRESHOLD_NUMERIC_FIELDS = [
    "target_cap_rate",
    "target_cash_on_cash",
    "target_dscr",
    "max_break_even_occupancy",
    "min_rent_growth",
    "max_market_vacancy",
]

MARKET_NUMERIC_FIELDS = [
    "median_rent",
    "rent_growth_yoy",
    "price_appreciation_yoy",
    "vacancy_rate",
    "inventory_months",
    "population_growth",
]
MARKET_INT_FIELDS = ["days_on_market"]


def _to_num(val: Any, field_name: str) -> float:
    """
    Coerce values like:
      - 250000
      - "250,000"
      - "$250,000"
      - "6.5%"
      - 0.065
    into float. Percent fields are normalized to fractions.
    """
    if isinstance(val, bool):
        raise ValueError(f"Invalid type for {field_name}: bool")
    if isinstance(val, (int, float)):
        f = float(val)
    elif isinstance(val, str):
        s = val.strip().replace(",", "").replace("$", "")
        is_pct = s.endswith("%")
        if is_pct:
            s = s[:-1]
        try:
            f = float(s)
        except ValueError:
            raise ValueError(f"Invalid number for {field_name}: {val!r}")
        if is_pct and field_name in PERCENT_FIELDS:
            return f / 100.0
    else:
        raise ValueError(f"Invalid type for {field_name}: {type(val)}")

    # If someone passes 7 instead of 0.07, normalize.
    if field_name in PERCENT_FIELDS and f > 1.0:
        f /= 100.0
    return f


def _to_int(val: Any, field_name: str) -> int:
    try:
        return int(_to_num(val, field_name))
    except (TypeError, ValueError):
        raise ValueError(f"Invalid integer for {field_name}: {val!r}")


def _is_blank(val: Any) -> bool:
    return val is None or (isinstance(val, str) and not val.strip())


def _collect(raw: dict[str, Any], numeric: Sequence[str], ints: Sequence[str] = ()) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for name in numeric:
        if not _is_blank(raw.get(name)):
            cleaned[name] = _to_num(raw[name], name)
    for name in ints:
        if not _is_blank(raw.get(name)):
            cleaned[name] = _to_int(raw[name], name)
    return cleaned


def prepare_underwriting_inputs(
    raw: dict[str, Any],
) -> tuple[PropertyInputs, FinancingTerms, Thresholds]:
    """
    Turn a loosely-typed payload from the app into validated domain models.

    Responsibilities:
      - Require a price (purchase or asking) and a year built.
      - Normalize numeric strings, currency and percent fields.
      - Fill financing terms and investor targets from config when omitted.
      - Parse an optional nested market_data snapshot the same way.
      - Surface pydantic's structural rejections (negative prices, rates
        outside [0, 1], ...) as ValueError, so callers handle one error type.
    """
    if _is_blank(raw.get("purchase_price")) and _is_blank(raw.get("asking_price")):
        raise ValueError("Missing required field: purchase_price or asking_price")
    if _is_blank(raw.get("year_built")):
        raise ValueError("Missing required field: year_built")

    property_fields = _collect(raw, PROPERTY_NUMERIC_FIELDS, PROPERTY_INT_FIELDS)
    market_raw = raw.get("market_data")
    if market_raw is not None and not isinstance(market_raw, dict):
        raise ValueError(f"Invalid type for market_data: {type(market_raw)}")

    financing_fields: dict[str, Any] = {
        "ltv": config.DEFAULT_LTV,
        "interest_rate": config.DEFAULT_INTEREST_RATE,
        "loan_term_years": config.DEFAULT_LOAN_TERM_YEARS,
    }
    financing_fields.update(_collect(raw, FINANCING_NUMERIC_FIELDS, ["loan_term_years"]))
    io_raw = raw.get("is_interest_only")
    if isinstance(io_raw, str):
        financing_fields["is_interest_only"] = io_raw.strip().lower() in {"1", "true", "yes", "y"}
    elif io_raw is not None:
        financing_fields["is_interest_only"] = bool(io_raw)

    threshold_fields: dict[str, Any] = {
        "target_cap_rate": config.TARGET_CAP_RATE,
        "target_cash_on_cash": config.TARGET_CASH_ON_CASH,
        "target_dscr": config.TARGET_DSCR,
        "max_break_even_occupancy": config.MAX_BREAK_EVEN_OCCUPANCY,
        "min_rent_growth": config.MIN_RENT_GROWTH,
        "max_market_vacancy": config.MAX_MARKET_VACANCY,
    }
    threshold_fields.update(_collect(raw, THRESHOLD_NUMERIC_FIELDS))

    try:
        if market_raw is not None:
            property_fields["market_data"] = MarketData(
                **_collect(market_raw, MARKET_NUMERIC_FIELDS, MARKET_INT_FIELDS)
            )
        inputs = PropertyInputs(**property_fields)
        financing = FinancingTerms(**financing_fields)
        thresholds = Thresholds(**threshold_fields)
    except ValidationError as err:
        raise ValueError(f"Invalid underwriting inputs: {err}") from err

    return inputs, financing, thresholds
