from __future__ import annotations

from typing import Any, Optional

from dock_underwriting.adapters.logging_utils import get_logger, log_context
from dock_underwriting.analysis.finance import compute_deal_economics
from dock_underwriting.analysis.market import calculate_market_support
from dock_underwriting.analysis.pricing import find_max_feasible_price
from dock_underwriting.analysis.risk import calculate_risk_buffers
from dock_underwriting.analysis.scoring import (
    calculate_overall_score,
    determine_recommendation,
    score_all_metrics,
)
from dock_underwriting.domain.property import FinancingTerms, PropertyInputs, Thresholds
from dock_underwriting.domain.underwriting import DealMetrics, PriceSearchResult
from dock_underwriting.services.guardrails import collect_guardrail_flags
from dock_underwriting.services.validation import prepare_underwriting_inputs

logger = get_logger(__name__)


def calculate_metrics(
    inputs: PropertyInputs,
    financing: FinancingTerms,
    thresholds: Optional[Thresholds] = None,
    *,
    as_of_year: Optional[int] = None,
) -> DealMetrics:
    """
    Main underwriting entrypoint: economics -> market support -> risk
    buffers -> scored metrics -> overall score -> recommendation, plus
    guardrail flags.

    Nothing is cached; every call recomputes from the inputs given.
    """
    thresholds = thresholds or Thresholds()

    economics = compute_deal_economics(inputs, financing, as_of_year=as_of_year)
    market = calculate_market_support(inputs.market_data)
    risk = calculate_risk_buffers(inputs, financing, economics, as_of_year=as_of_year)
    scored = tuple(score_all_metrics(economics, risk, thresholds, market))
    overall = calculate_overall_score(scored)
    recommendation = determine_recommendation(overall)
    flags = tuple(collect_guardrail_flags(inputs, economics, risk, thresholds))

    logger.info(
        "deal_metrics_computed",
        extra=log_context(
            purchase_price=economics.purchase_price,
            noi=economics.net_operating_income,
            annual_cash_flow=economics.annual_cash_flow,
            cap_rate=economics.in_place_cap_rate,
            dscr=economics.dscr,
            overall_score=overall,
            recommendation=recommendation.value,
            market_data=market.has_data,
        ),
    )

    return DealMetrics(
        deal_economics=economics,
        market_support=market,
        risk_buffers=risk,
        scored_metrics=scored,
        overall_score=overall,
        recommendation=recommendation,
        flags=flags,
    )


def underwrite_payload(raw_payload: dict[str, Any]) -> tuple[DealMetrics, PriceSearchResult]:
    """
    Convenience for the app layer: normalize a raw payload, underwrite it
    and search for the max price that still clears the investor's targets.
    """
    inputs, financing, thresholds = prepare_underwriting_inputs(raw_payload)
    metrics = calculate_metrics(inputs, financing, thresholds)
    max_price = find_max_feasible_price(inputs, financing, thresholds)
    return metrics, max_price
