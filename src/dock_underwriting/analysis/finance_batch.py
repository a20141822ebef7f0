# src/dock_underwriting/analysis/finance_batch.py

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from dock_underwriting.adapters.config import config
from dock_underwriting.analysis.finance import compute_deal_economics
from dock_underwriting.analysis.pricing import price_search_bounds
from dock_underwriting.analysis.search import require_positive_step
from dock_underwriting.domain.property import FinancingTerms, PropertyInputs, Thresholds


def price_grid(anchor: float, step: Optional[float] = None) -> np.ndarray:
    """Grid points anchor + k * step inside the optimizer's search bounds."""
    step = require_positive_step(step if step is not None else config.PRICE_SEARCH_STEP)
    if anchor <= 0:
        return np.empty(0, dtype=float)
    floor, ceiling = price_search_bounds(anchor)
    k_lo = math.ceil((floor - anchor) / step - 1e-9)
    k_hi = math.floor((ceiling - anchor) / step + 1e-9)
    if k_lo > k_hi:
        return np.empty(0, dtype=float)
    return anchor + np.arange(k_lo, k_hi + 1, dtype=float) * step


def compute_price_sweep_df(
    inputs: PropertyInputs,
    financing: FinancingTerms,
    thresholds: Thresholds,
    prices: Optional[Sequence[float]] = None,
    *,
    as_of_year: Optional[int] = None,
) -> pd.DataFrame:
    """
    Vectorized deal economics across candidate purchase prices.

    Income and operating expenses do not depend on price, so they come from a
    single scalar run; only the loan (sized off LTV, as the optimizer does),
    debt service and the price-driven ratios are computed per row.

    Columns: price, loan_amount, noi, annual_debt_service, annual_cash_flow,
    monthly_cash_flow, cap_rate, cash_on_cash, dscr, has_debt, feasible.
    dscr is 0 on rows without debt; check has_debt before reading it.
    """
    if prices is None:
        anchor = inputs.asking_price if inputs.asking_price > 0 else inputs.purchase_price
        price = price_grid(anchor)
    else:
        price = np.asarray(prices, dtype=float)

    base = compute_deal_economics(inputs, financing, as_of_year=as_of_year)
    noi_annual = base.net_operating_income

    # --- Financing, vectorized ---
    loan_amount = price * financing.ltv
    r_monthly = financing.interest_rate / 12.0
    n_months = financing.loan_term_years * 12

    mortgage_monthly = np.zeros_like(price, dtype=float)
    mask_loan = (loan_amount > 0) & (n_months > 0)
    if mask_loan.any():
        la = loan_amount[mask_loan]
        if financing.is_interest_only:
            mortgage_monthly[mask_loan] = la * r_monthly
        elif r_monthly == 0:
            mortgage_monthly[mask_loan] = la / n_months
        else:
            # Standard mortgage payment formula, vectorized
            mortgage_monthly[mask_loan] = (
                la * r_monthly / (1.0 - (1.0 + r_monthly) ** (-n_months))
            )

    annual_debt_service = mortgage_monthly * 12.0
    annual_cash_flow = noi_annual - annual_debt_service

    # --- Ratios with zero guards ---
    cap_rate = np.zeros_like(price, dtype=float)
    mask_price = price > 0
    cap_rate[mask_price] = noi_annual / price[mask_price]

    total_cash_in = (price - loan_amount) + inputs.closing_costs
    cash_on_cash = np.zeros_like(price, dtype=float)
    mask_cash = total_cash_in > 0
    cash_on_cash[mask_cash] = annual_cash_flow[mask_cash] / total_cash_in[mask_cash]

    has_debt = annual_debt_service > 0
    dscr = np.zeros_like(price, dtype=float)
    dscr[has_debt] = noi_annual / annual_debt_service[has_debt]

    monthly_cash_flow = annual_cash_flow / 12.0
    feasible = (
        (cap_rate >= thresholds.target_cap_rate)
        & (cash_on_cash >= thresholds.target_cash_on_cash)
        & (~has_debt | (dscr >= thresholds.target_dscr))
        & (monthly_cash_flow > 0)
    )

    return pd.DataFrame({
        "price": price,
        "loan_amount": loan_amount,
        "noi": np.full_like(price, noi_annual, dtype=float),
        "annual_debt_service": annual_debt_service,
        "annual_cash_flow": annual_cash_flow,
        "monthly_cash_flow": monthly_cash_flow,
        "cap_rate": cap_rate,
        "cash_on_cash": cash_on_cash,
        "dscr": dscr,
        "has_debt": has_debt,
        "feasible": feasible,
    })
