from __future__ import annotations

from datetime import date
from typing import Optional

# (max age in years inclusive, multiplier); anything older falls through to 2.0
_CAPEX_AGE_BANDS = (
    (10, 0.75),
    (20, 1.0),
    (30, 1.25),
    (50, 1.5),
)
_CAPEX_OLDEST_MULTIPLIER = 2.0


def annuity_payment(rate_monthly: float, n_months: int, principal: float) -> float:
    r = rate_monthly
    if r == 0:
        return principal / n_months
    return principal * (r * (1 + r) ** n_months) / ((1 + r) ** n_months - 1)


def monthly_debt_service(
    principal: float,
    annual_rate: float,
    term_years: int,
    *,
    interest_only: bool = False,
) -> float:
    """
    Monthly P&I on a fixed-rate loan:
    M = P * [ r(1+r)^n / ((1+r)^n - 1) ],  r = annual_rate / 12, n = years * 12

    No loan (or no term) means no payment. Interest-only loans pay P * r.
    """
    if principal <= 0 or term_years <= 0:
        return 0.0
    r = annual_rate / 12.0
    if interest_only:
        return principal * r
    return annuity_payment(r, term_years * 12, principal)


def capex_age_multiplier(age_years: int) -> float:
    # Brand new or future-dated builds reserve like the newest band.
    for max_age, multiplier in _CAPEX_AGE_BANDS:
        if age_years <= max_age:
            return multiplier
    return _CAPEX_OLDEST_MULTIPLIER


def capex_reserve(
    unit_count: int,
    year_built: int,
    base_reserve_per_unit: float,
    as_of_year: Optional[int] = None,
) -> float:
    """Annual CapEx set-aside: base per-unit reserve scaled up for older buildings."""
    year = as_of_year if as_of_year is not None else date.today().year
    return base_reserve_per_unit * capex_age_multiplier(year - year_built) * unit_count
