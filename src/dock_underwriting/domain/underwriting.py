from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from dock_underwriting.domain.ratings import (
    InvestmentRecommendation,
    MetricCategory,
    MetricImportance,
    MetricScore,
    SignalStrength,
    TrendDirection,
)


@dataclass(frozen=True)
class ExpenseBreakdown:
    taxes: float
    insurance: float
    management: float
    repairs: float
    capex_reserve: float
    utilities: float
    other: float
    expense_ratio: float    # total / EGI, 0 when EGI <= 0

    @property
    def total(self) -> float:
        return (
            self.taxes
            + self.insurance
            + self.management
            + self.repairs
            + self.capex_reserve
            + self.utilities
            + self.other
        )


@dataclass(frozen=True)
class DealEconomics:
    # Income (annual)
    gross_potential_rent: float
    vacancy_loss: float
    effective_gross_income: float

    # Expenses
    expense_breakdown: ExpenseBreakdown
    total_operating_expenses: float
    net_operating_income: float

    # Financing
    purchase_price: float
    loan_amount: float
    total_cash_required: float
    monthly_debt_service: float
    annual_debt_service: float

    # Returns
    annual_cash_flow: float
    monthly_cash_flow: float
    in_place_cap_rate: float        # 0 when price <= 0
    stabilized_cap_rate: float      # at market rent, 0 when price <= 0
    cash_on_cash_return: float      # 0 when no cash invested
    dscr: Optional[float]           # None when there is no debt service

    # Price metrics
    price_per_unit: float
    price_per_square_foot: float

    @property
    def has_debt(self) -> bool:
        return self.annual_debt_service > 0

    @property
    def has_equity(self) -> bool:
        return self.total_cash_required > 0

    @property
    def has_price(self) -> bool:
        return self.purchase_price > 0


@dataclass(frozen=True)
class MarketIndicator:
    value: Optional[float]              # None when the market source had nothing
    display_value: str
    trend: TrendDirection
    signal: SignalStrength
    description: str

    @property
    def is_known(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class MarketSupport:
    rent_growth: MarketIndicator
    price_appreciation: MarketIndicator
    vacancy_trend: MarketIndicator
    days_on_market: MarketIndicator
    supply_trend: MarketIndicator
    demand_indicator: MarketIndicator

    def indicators(self) -> List[MarketIndicator]:
        return [
            self.rent_growth,
            self.price_appreciation,
            self.vacancy_trend,
            self.days_on_market,
            self.supply_trend,
            self.demand_indicator,
        ]

    @property
    def has_data(self) -> bool:
        return any(i.is_known for i in self.indicators())


@dataclass(frozen=True)
class SensitivityResult:
    label: str
    noi: float
    cash_flow: float
    cash_on_cash: float
    dscr: Optional[float]
    delta_from_base: float              # perturbed annual cash flow - base
    implied_value: Optional[float] = None   # exit-cap scenarios only
    value_delta: Optional[float] = None     # implied_value - purchase price


@dataclass(frozen=True)
class SensitivityAnalysis:
    rent_up_10: SensitivityResult
    rent_down_10: SensitivityResult
    rate_up_1: SensitivityResult
    rate_down_1: SensitivityResult
    exit_cap_up_50bps: SensitivityResult
    exit_cap_down_50bps: SensitivityResult

    def results(self) -> List[SensitivityResult]:
        return [
            self.rent_up_10,
            self.rent_down_10,
            self.rate_up_1,
            self.rate_down_1,
            self.exit_cap_up_50bps,
            self.exit_cap_down_50bps,
        ]


@dataclass(frozen=True)
class StressTestResult:
    worst_case_cash_flow: float
    max_vacancy_before_negative: float
    max_rate_before_negative: float
    cushion_to_break_even: float        # annual cash flow / GPR


@dataclass(frozen=True)
class RiskBuffers:
    break_even_occupancy: float
    sensitivity_analysis: SensitivityAnalysis
    stress_test_results: StressTestResult


@dataclass(frozen=True)
class ScoredMetric:
    name: str
    raw_value: float
    threshold: float
    display_threshold: str
    score: Optional[MetricScore]        # None when the ratio is undefined
    category: MetricCategory
    importance: MetricImportance

    @property
    def is_defined(self) -> bool:
        return self.score is not None


@dataclass(frozen=True)
class DealMetrics:
    deal_economics: DealEconomics
    market_support: MarketSupport
    risk_buffers: RiskBuffers
    scored_metrics: Tuple[ScoredMetric, ...]
    overall_score: float                # 0-100
    recommendation: InvestmentRecommendation
    flags: Tuple[Dict[str, Any], ...] = ()


@dataclass(frozen=True)
class PriceSearchResult:
    feasible: bool
    price: Optional[float] = None       # set when feasible
    reason: Optional[str] = None        # set when infeasible
    floor: float = 0.0
    ceiling: float = 0.0
    evaluations: int = 0

    @classmethod
    def found(cls, price: float, **kw: Any) -> "PriceSearchResult":
        return cls(feasible=True, price=price, **kw)

    @classmethod
    def infeasible(cls, reason: str, **kw: Any) -> "PriceSearchResult":
        return cls(feasible=False, reason=reason, **kw)
