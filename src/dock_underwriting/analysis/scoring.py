# src/dock_underwriting/analysis/scoring.py
from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from dock_underwriting.domain.property import Thresholds
from dock_underwriting.domain.ratings import (
    InvestmentRecommendation,
    MetricCategory,
    MetricImportance,
    MetricScore,
)
from dock_underwriting.domain.underwriting import (
    DealEconomics,
    MarketIndicator,
    MarketSupport,
    RiskBuffers,
    ScoredMetric,
)


# =====================================================================
# Tiering
# =====================================================================

# (exceeds, meets, borderline) multipliers on the target
_HIGHER_IS_BETTER_BANDS = (1.10, 1.00, 0.85)
_LOWER_IS_BETTER_BANDS = (0.90, 1.00, 1.15)

# Market metrics grade on wider bands than the deal ratios.
RENT_GROWTH_BANDS = (1.50, 1.00, 0.50)
MARKET_VACANCY_BANDS = (0.50, 1.00, 1.25)

# Worst-case cash flow within this much of zero is "borderline" rather than "fails".
WORST_CASE_BORDERLINE_FLOOR = -5_000.0


def score_metric(
    value: float,
    target: float,
    higher_is_better: bool = True,
    bands: Optional[Tuple[float, float, float]] = None,
) -> MetricScore:
    """
    Classify a metric against its target.

    higher_is_better:  exceeds >= 110%, meets >= 100%, borderline >= 85% of target
    lower_is_better:   exceeds <= 90%,  meets <= 100%, borderline <= 115% of target

    `bands` overrides the (exceeds, meets, borderline) multipliers.
    """
    if higher_is_better:
        exceeds, meets, borderline = bands or _HIGHER_IS_BETTER_BANDS
        if value >= target * exceeds:
            return MetricScore.EXCEEDS
        if value >= target * meets:
            return MetricScore.MEETS
        if value >= target * borderline:
            return MetricScore.BORDERLINE
        return MetricScore.FAILS

    exceeds, meets, borderline = bands or _LOWER_IS_BETTER_BANDS
    if value <= target * exceeds:
        return MetricScore.EXCEEDS
    if value <= target * meets:
        return MetricScore.MEETS
    if value <= target * borderline:
        return MetricScore.BORDERLINE
    return MetricScore.FAILS


def _score_positive(value: float, borderline_floor: Optional[float] = None) -> MetricScore:
    if value > 0:
        return MetricScore.MEETS
    if borderline_floor is not None and value > borderline_floor:
        return MetricScore.BORDERLINE
    return MetricScore.FAILS


def _fmt_pct(x: float) -> str:
    return f"{x * 100:.1f}%"


def _market_metric(
    name: str,
    indicator: Optional[MarketIndicator],
    threshold: float,
    display_threshold: str,
    *,
    higher_is_better: bool,
    bands: Tuple[float, float, float],
) -> ScoredMetric:
    known = indicator is not None and indicator.value is not None
    return ScoredMetric(
        name=name,
        raw_value=indicator.value if known else 0.0,
        threshold=threshold,
        display_threshold=display_threshold,
        score=score_metric(indicator.value, threshold, higher_is_better, bands) if known else None,
        category=MetricCategory.MARKET_SUPPORT,
        importance=MetricImportance.MEDIUM,
    )


def score_all_metrics(
    economics: DealEconomics,
    risk: RiskBuffers,
    thresholds: Thresholds,
    market: Optional[MarketSupport] = None,
) -> List[ScoredMetric]:
    """
    Score the four core deal-economics metrics plus informational
    market-support and risk-buffer metrics. Ratios the model could not
    define (no price, no equity, no debt) and market readings nobody
    supplied are reported with score=None.
    """
    metrics: List[ScoredMetric] = []

    # ---------------- Deal economics ----------------

    metrics.append(ScoredMetric(
        name="Cap Rate",
        raw_value=economics.in_place_cap_rate,
        threshold=thresholds.target_cap_rate,
        display_threshold=_fmt_pct(thresholds.target_cap_rate),
        score=score_metric(economics.in_place_cap_rate, thresholds.target_cap_rate)
        if economics.has_price else None,
        category=MetricCategory.DEAL_ECONOMICS,
        importance=MetricImportance.CRITICAL,
    ))

    metrics.append(ScoredMetric(
        name="Cash-on-Cash",
        raw_value=economics.cash_on_cash_return,
        threshold=thresholds.target_cash_on_cash,
        display_threshold=_fmt_pct(thresholds.target_cash_on_cash),
        score=score_metric(economics.cash_on_cash_return, thresholds.target_cash_on_cash)
        if economics.has_equity else None,
        category=MetricCategory.DEAL_ECONOMICS,
        importance=MetricImportance.CRITICAL,
    ))

    metrics.append(ScoredMetric(
        name="DSCR",
        raw_value=economics.dscr if economics.dscr is not None else 0.0,
        threshold=thresholds.target_dscr,
        display_threshold=f"{thresholds.target_dscr:.2f}x",
        score=score_metric(economics.dscr, thresholds.target_dscr)
        if economics.dscr is not None else None,
        category=MetricCategory.DEAL_ECONOMICS,
        importance=MetricImportance.CRITICAL,
    ))

    metrics.append(ScoredMetric(
        name="NOI",
        raw_value=economics.net_operating_income,
        threshold=0.0,
        display_threshold="> $0",
        score=_score_positive(economics.net_operating_income),
        category=MetricCategory.DEAL_ECONOMICS,
        importance=MetricImportance.HIGH,
    ))

    # ---------------- Market support ----------------

    rent_growth = market.rent_growth if market is not None else None
    metrics.append(_market_metric(
        "Rent Growth",
        rent_growth,
        thresholds.min_rent_growth,
        _fmt_pct(thresholds.min_rent_growth),
        higher_is_better=True,
        bands=RENT_GROWTH_BANDS,
    ))

    vacancy = market.vacancy_trend if market is not None else None
    metrics.append(_market_metric(
        "Vacancy",
        vacancy,
        thresholds.max_market_vacancy,
        "< " + _fmt_pct(thresholds.max_market_vacancy),
        higher_is_better=False,
        bands=MARKET_VACANCY_BANDS,
    ))

    # ---------------- Risk buffers ----------------

    metrics.append(ScoredMetric(
        name="Break-even Occupancy",
        raw_value=risk.break_even_occupancy,
        threshold=thresholds.max_break_even_occupancy,
        display_threshold="< " + _fmt_pct(thresholds.max_break_even_occupancy),
        score=score_metric(
            risk.break_even_occupancy,
            thresholds.max_break_even_occupancy,
            higher_is_better=False,
        ),
        category=MetricCategory.RISK_BUFFERS,
        importance=MetricImportance.HIGH,
    ))

    worst_case = risk.stress_test_results.worst_case_cash_flow
    metrics.append(ScoredMetric(
        name="Worst Case Cash Flow",
        raw_value=worst_case,
        threshold=0.0,
        display_threshold="> $0",
        score=_score_positive(worst_case, borderline_floor=WORST_CASE_BORDERLINE_FLOOR),
        category=MetricCategory.RISK_BUFFERS,
        importance=MetricImportance.HIGH,
    ))

    return metrics


# =====================================================================
# Overall score & recommendation
# =====================================================================

SCORE_POINTS: Dict[MetricScore, float] = {
    MetricScore.FAILS: 0.0,
    MetricScore.BORDERLINE: 33.0,
    MetricScore.MEETS: 66.0,
    MetricScore.EXCEEDS: 100.0,
}

# Equal weight across the four core metrics. Market-support and risk-buffer
# metrics are shown to the investor but do not move the score.
METRIC_WEIGHTS: Dict[str, float] = {
    "Cap Rate": 1.0,
    "Cash-on-Cash": 1.0,
    "DSCR": 1.0,
    "NOI": 1.0,
}

# Lower bound of each band, highest first.
RECOMMENDATION_BANDS = (
    (85.0, InvestmentRecommendation.STRONG_BUY),
    (65.0, InvestmentRecommendation.BUY),
    (50.0, InvestmentRecommendation.HOLD),
    (30.0, InvestmentRecommendation.CAUTION),
)


def calculate_overall_score(
    metrics: Sequence[ScoredMetric],
    weights: Mapping[str, float] = METRIC_WEIGHTS,
) -> float:
    """
    Weighted average of tier points over the defined, weighted metrics.

    Undefined metrics drop out of both numerator and denominator, so a
    cash-only purchase is judged on what it does have. Returns 0 when
    nothing is left to average.
    """
    total_weighted = 0.0
    total_weight = 0.0

    for metric in metrics:
        weight = weights.get(metric.name, 0.0)
        if weight <= 0 or metric.score is None:
            continue
        total_weighted += SCORE_POINTS[metric.score] * weight
        total_weight += weight

    if total_weight <= 0:
        return 0.0
    return max(0.0, min(100.0, total_weighted / total_weight))


def determine_recommendation(score: float) -> InvestmentRecommendation:
    for lower_bound, recommendation in RECOMMENDATION_BANDS:
        if score >= lower_bound:
            return recommendation
    return InvestmentRecommendation.PASS
