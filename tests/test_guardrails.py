from conftest import make_inputs

from dock_underwriting.analysis.finance import compute_deal_economics
from dock_underwriting.analysis.risk import calculate_risk_buffers
from dock_underwriting.domain.property import FinancingTerms, Thresholds
from dock_underwriting.services.guardrails import collect_guardrail_flags


def _codes(inputs, financing, thresholds=None):
    thresholds = thresholds or Thresholds()
    econ = compute_deal_economics(inputs, financing)
    risk = calculate_risk_buffers(inputs, financing, econ)
    return {f["code"] for f in collect_guardrail_flags(inputs, econ, risk, thresholds)}


def test_losing_deal_is_flagged(worked_inputs, worked_financing):
    codes = _codes(worked_inputs, worked_financing)
    assert {"NEGATIVE_CASH_FLOW", "DSCR_BELOW_ONE", "HIGH_BREAK_EVEN"} <= codes
    assert "NEGATIVE_NOI" not in codes


def test_strong_deal_is_clean(fourplex_inputs, fourplex_financing):
    assert _codes(fourplex_inputs, fourplex_financing) == set()


def test_cash_purchase_gets_info_flag(fourplex_inputs):
    assert _codes(fourplex_inputs, FinancingTerms(ltv=0.0)) == {"NO_DEBT"}


def test_missing_price_is_an_error():
    inputs = make_inputs(purchase_price=0.0, asking_price=0.0)
    econ = compute_deal_economics(inputs, FinancingTerms())
    risk = calculate_risk_buffers(inputs, FinancingTerms(), econ)
    flags = collect_guardrail_flags(inputs, econ, risk, Thresholds())

    missing = [f for f in flags if f["code"] == "PURCHASE_PRICE_MISSING"]
    assert missing and missing[0]["severity"] == "error"


def test_overpaying_is_flagged(fourplex_inputs, fourplex_financing):
    inputs = fourplex_inputs.model_copy(update={"purchase_price": 320_000.0})
    assert "PURCHASE_ABOVE_ASKING" in _codes(inputs, fourplex_financing)


def test_negative_noi_is_flagged():
    inputs = make_inputs(monthly_rent_per_unit=500.0)
    codes = _codes(inputs, FinancingTerms(ltv=0.75))
    assert "NEGATIVE_NOI" in codes
    assert "NEGATIVE_CASH_FLOW" in codes


def test_flags_carry_context(worked_inputs, worked_financing):
    econ = compute_deal_economics(worked_inputs, worked_financing)
    risk = calculate_risk_buffers(worked_inputs, worked_financing, econ)
    flags = collect_guardrail_flags(worked_inputs, econ, risk, Thresholds())

    by_code = {f["code"]: f for f in flags}
    assert by_code["DSCR_BELOW_ONE"]["context"]["dscr"] == econ.dscr
    assert by_code["HIGH_BREAK_EVEN"]["context"]["max_break_even_occupancy"] == 0.85
    assert all(f["message"] for f in flags)
