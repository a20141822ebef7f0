# src/dock_underwriting/analysis/valuation.py
from __future__ import annotations

# Exit-cap scenarios never price off a cap rate tighter than this.
MIN_EXIT_CAP_RATE = 0.01


def estimate_value_income_approach(noi_annual: float, cap_rate: float) -> float:
    """
    Direct capitalization: value = NOI / cap rate.

    A non-positive cap rate or NOI has no meaningful capitalized value,
    so both come back as 0 rather than a negative or infinite price.
    """
    if cap_rate <= 0 or noi_annual <= 0:
        return 0.0
    return noi_annual / cap_rate


def exit_cap_scenario(
    noi_annual: float,
    going_in_cap_rate: float,
    shift: float,
) -> tuple[float, float]:
    """
    Re-price the deal at the going-in cap rate shifted by `shift`
    (e.g. +0.005 for +50 bps). Returns (exit_cap_rate, implied_value).
    """
    exit_cap = going_in_cap_rate + shift
    if shift < 0:
        exit_cap = max(exit_cap, MIN_EXIT_CAP_RATE)
    return exit_cap, estimate_value_income_approach(noi_annual, exit_cap)
