from __future__ import annotations

from typing import Callable, Optional

from dock_underwriting.adapters.config import config
from dock_underwriting.analysis.finance import compute_deal_economics
from dock_underwriting.analysis.search import bisect_boundary
from dock_underwriting.analysis.valuation import exit_cap_scenario
from dock_underwriting.domain.property import FinancingTerms, PropertyInputs
from dock_underwriting.domain.underwriting import (
    DealEconomics,
    RiskBuffers,
    SensitivityAnalysis,
    SensitivityResult,
    StressTestResult,
)

RENT_SHOCK = 0.10
RATE_SHOCK = 0.01
EXIT_CAP_SHOCK = 0.005

# Worst case: rent -10%, vacancy +5pts (capped at 25%), repairs +10%
WORST_CASE_RENT_FACTOR = 0.90
WORST_CASE_VACANCY_BUMP = 0.05
WORST_CASE_VACANCY_CAP = 0.25
WORST_CASE_REPAIRS_FACTOR = 1.10

# Domains searched for the cash-flow-goes-negative boundary.
VACANCY_SEARCH_RANGE = (0.0, 1.0)
RATE_SEARCH_RANGE = (0.0, 0.5)


def break_even_occupancy(economics: DealEconomics) -> float:
    """
    Occupancy needed to cover fixed costs (taxes, insurance, debt service)
    once the variable management fee has taken its cut of each rent dollar.

    Zero rent, or a management fee that eats the whole rent dollar, can never
    break even and reports 100%. Capped at 100%.
    """
    gpr = economics.gross_potential_rent
    if gpr <= 0:
        return 1.0

    eb = economics.expense_breakdown
    fixed_costs = eb.taxes + eb.insurance + economics.annual_debt_service
    egi = economics.effective_gross_income
    variable_fraction = eb.management / egi if egi > 0 else 0.0

    denom = gpr * (1.0 - variable_fraction)
    if denom <= 0:
        return 1.0
    return min(fixed_costs / denom, 1.0)


def _with_rent_factor(inputs: PropertyInputs, factor: float) -> PropertyInputs:
    return inputs.model_copy(update={
        "monthly_rent_per_unit": inputs.monthly_rent_per_unit * factor,
        "total_monthly_rent": inputs.total_monthly_rent * factor,
    })


def _cash_flow_result(label: str, econ: DealEconomics, base: DealEconomics) -> SensitivityResult:
    return SensitivityResult(
        label=label,
        noi=econ.net_operating_income,
        cash_flow=econ.annual_cash_flow,
        cash_on_cash=econ.cash_on_cash_return,
        dscr=econ.dscr,
        delta_from_base=econ.annual_cash_flow - base.annual_cash_flow,
    )


def _valuation_result(label: str, shift: float, base: DealEconomics) -> SensitivityResult:
    # Exit cap moves value, not operations: cash metrics stay at base.
    _, implied_value = exit_cap_scenario(base.net_operating_income, base.in_place_cap_rate, shift)
    return SensitivityResult(
        label=label,
        noi=base.net_operating_income,
        cash_flow=base.annual_cash_flow,
        cash_on_cash=base.cash_on_cash_return,
        dscr=base.dscr,
        delta_from_base=0.0,
        implied_value=implied_value,
        value_delta=implied_value - base.purchase_price,
    )


def calculate_sensitivity(
    inputs: PropertyInputs,
    financing: FinancingTerms,
    base: Optional[DealEconomics] = None,
    *,
    as_of_year: Optional[int] = None,
) -> SensitivityAnalysis:
    """Six one-at-a-time shocks around the base case."""
    if base is None:
        base = compute_deal_economics(inputs, financing, as_of_year=as_of_year)

    def run(i: PropertyInputs, f: FinancingTerms) -> DealEconomics:
        return compute_deal_economics(i, f, as_of_year=as_of_year)

    rate_up = financing.model_copy(update={"interest_rate": financing.interest_rate + RATE_SHOCK})
    rate_down = financing.model_copy(
        update={"interest_rate": max(financing.interest_rate - RATE_SHOCK, 0.0)}
    )

    return SensitivityAnalysis(
        rent_up_10=_cash_flow_result(
            "Rent +10%", run(_with_rent_factor(inputs, 1 + RENT_SHOCK), financing), base
        ),
        rent_down_10=_cash_flow_result(
            "Rent -10%", run(_with_rent_factor(inputs, 1 - RENT_SHOCK), financing), base
        ),
        rate_up_1=_cash_flow_result("Rate +1%", run(inputs, rate_up), base),
        rate_down_1=_cash_flow_result("Rate -1%", run(inputs, rate_down), base),
        exit_cap_up_50bps=_valuation_result("Exit Cap +50bps", EXIT_CAP_SHOCK, base),
        exit_cap_down_50bps=_valuation_result("Exit Cap -50bps", -EXIT_CAP_SHOCK, base),
    )


def _cash_flow_boundary(fn: Callable[[float], float], search_range: tuple[float, float]) -> float:
    lo, hi = search_range
    return bisect_boundary(
        fn,
        lo,
        hi,
        tolerance=config.BISECTION_TOLERANCE,
        max_iter=config.BISECTION_MAX_ITER,
    )


def calculate_stress_test(
    inputs: PropertyInputs,
    financing: FinancingTerms,
    base: Optional[DealEconomics] = None,
    *,
    as_of_year: Optional[int] = None,
) -> StressTestResult:
    if base is None:
        base = compute_deal_economics(inputs, financing, as_of_year=as_of_year)

    worst = _with_rent_factor(inputs, WORST_CASE_RENT_FACTOR).model_copy(update={
        "vacancy_rate": min(inputs.vacancy_rate + WORST_CASE_VACANCY_BUMP, WORST_CASE_VACANCY_CAP),
        "repairs_per_unit_per_year": inputs.repairs_per_unit_per_year * WORST_CASE_REPAIRS_FACTOR,
    })
    worst_econ = compute_deal_economics(worst, financing, as_of_year=as_of_year)

    # Annual cash flow only falls as vacancy or rate rises, so each
    # break point is a monotone boundary search.
    def cash_flow_at_vacancy(v: float) -> float:
        trial = inputs.model_copy(update={"vacancy_rate": v})
        return compute_deal_economics(trial, financing, as_of_year=as_of_year).annual_cash_flow

    def cash_flow_at_rate(r: float) -> float:
        trial = financing.model_copy(update={"interest_rate": r})
        return compute_deal_economics(inputs, trial, as_of_year=as_of_year).annual_cash_flow

    max_vacancy = _cash_flow_boundary(cash_flow_at_vacancy, VACANCY_SEARCH_RANGE)
    max_rate = _cash_flow_boundary(cash_flow_at_rate, RATE_SEARCH_RANGE)

    cushion = base.annual_cash_flow / max(base.gross_potential_rent, 1.0)

    return StressTestResult(
        worst_case_cash_flow=worst_econ.annual_cash_flow,
        max_vacancy_before_negative=max_vacancy,
        max_rate_before_negative=max_rate,
        cushion_to_break_even=cushion,
    )


def calculate_risk_buffers(
    inputs: PropertyInputs,
    financing: FinancingTerms,
    base: Optional[DealEconomics] = None,
    *,
    as_of_year: Optional[int] = None,
) -> RiskBuffers:
    if base is None:
        base = compute_deal_economics(inputs, financing, as_of_year=as_of_year)

    return RiskBuffers(
        break_even_occupancy=break_even_occupancy(base),
        sensitivity_analysis=calculate_sensitivity(inputs, financing, base, as_of_year=as_of_year),
        stress_test_results=calculate_stress_test(inputs, financing, base, as_of_year=as_of_year),
    )
