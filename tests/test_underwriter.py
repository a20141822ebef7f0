import json
import logging

import pytest

from dock_underwriting.adapters.logging_utils import JsonLogFormatter, get_logger, log_context
from dock_underwriting.analysis.pricing import NO_FEASIBLE_PRICE
from dock_underwriting.domain.property import FinancingTerms, MarketData
from dock_underwriting.domain.ratings import (
    InvestmentRecommendation,
    MetricScore,
    SignalStrength,
    TrendDirection,
)
from dock_underwriting.services.underwriter import calculate_metrics, underwrite_payload


def test_losing_deal_is_a_pass(worked_inputs, worked_financing, default_thresholds):
    m = calculate_metrics(worked_inputs, worked_financing, default_thresholds)

    assert m.deal_economics.annual_cash_flow < 0
    assert m.overall_score == pytest.approx(16.5)
    assert m.recommendation == InvestmentRecommendation.PASS
    assert {f["code"] for f in m.flags} >= {"NEGATIVE_CASH_FLOW", "DSCR_BELOW_ONE"}
    assert len(m.scored_metrics) == 8
    assert isinstance(m.scored_metrics, tuple)
    assert isinstance(m.flags, tuple)


def test_strong_deal_is_a_strong_buy(fourplex_inputs, fourplex_financing, default_thresholds):
    m = calculate_metrics(fourplex_inputs, fourplex_financing, default_thresholds)

    assert m.overall_score == pytest.approx(91.5)
    assert m.recommendation == InvestmentRecommendation.STRONG_BUY
    assert m.flags == ()
    assert 0 < m.risk_buffers.break_even_occupancy < 0.5
    assert m.risk_buffers.stress_test_results.worst_case_cash_flow > 0


def test_market_data_is_reported_but_not_weighted(fourplex_inputs, fourplex_financing):
    with_market = fourplex_inputs.model_copy(update={
        "market_data": MarketData(rent_growth_yoy=0.045, vacancy_rate=0.05, days_on_market=21),
    })
    m = calculate_metrics(with_market, fourplex_financing)
    scored = {s.name: s for s in m.scored_metrics}

    assert m.market_support.has_data
    assert m.market_support.rent_growth.signal == SignalStrength.MODERATE
    assert m.market_support.price_appreciation.trend == TrendDirection.UNKNOWN
    assert scored["Rent Growth"].score == MetricScore.EXCEEDS
    assert scored["Vacancy"].score == MetricScore.MEETS
    assert m.overall_score == pytest.approx(91.5)


def test_no_market_data_leaves_market_metrics_unscored(fourplex_inputs, fourplex_financing):
    m = calculate_metrics(fourplex_inputs, fourplex_financing)
    scored = {s.name: s for s in m.scored_metrics}

    assert not m.market_support.has_data
    assert scored["Rent Growth"].score is None
    assert scored["Vacancy"].score is None


def test_thresholds_default_when_omitted(fourplex_inputs, fourplex_financing):
    assert calculate_metrics(fourplex_inputs, fourplex_financing).overall_score == pytest.approx(91.5)


def test_metrics_are_recomputed_each_call(worked_inputs):
    a = calculate_metrics(worked_inputs, FinancingTerms(ltv=0.75))
    b = calculate_metrics(worked_inputs, FinancingTerms(ltv=0.0))

    assert a.deal_economics.dscr is not None
    assert b.deal_economics.dscr is None
    assert b.overall_score != a.overall_score


def test_underwrite_payload_end_to_end():
    metrics, max_price = underwrite_payload({
        "purchase_price": "450,000",
        "asking_price": "450000",
        "year_built": 1985,
        "monthly_rent_per_unit": "2400",
        "vacancy_rate": "5%",
        "annual_taxes": 8_500,
        "annual_insurance": 2_400,
        "repairs_per_unit_per_year": 1_200,
        "ltv": "75%",
        "interest_rate": "7%",
    })

    assert metrics.recommendation == InvestmentRecommendation.PASS
    assert not max_price.feasible
    assert max_price.reason == NO_FEASIBLE_PRICE


def test_underwrite_payload_rejects_incomplete_payload():
    with pytest.raises(ValueError, match="Missing required field"):
        underwrite_payload({"year_built": 1990})


# ---------------- logging ----------------


def test_json_log_formatter_merges_context():
    record = logging.LogRecord(
        name="dock_underwriting.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="deal_metrics_computed",
        args=(),
        exc_info=None,
    )
    for key, value in log_context(noi=12_621.2000001, dscr=None, codes=["NO_DEBT"]).items():
        setattr(record, key, value)

    payload = json.loads(JsonLogFormatter().format(record))

    assert payload["message"] == "deal_metrics_computed"
    assert payload["level"] == "INFO"
    assert payload["noi"] == 12_621.2
    assert payload["dscr"] is None
    assert payload["codes"] == ["NO_DEBT"]


def test_get_logger_installs_one_handler():
    logger = get_logger("dock_underwriting.test_handlers")
    again = get_logger("dock_underwriting.test_handlers")

    assert logger is again
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, JsonLogFormatter)
