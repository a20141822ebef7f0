# tests/test_underwriting_scenarios.py

from hypothesis import given, strategies as st

from conftest import THIS_YEAR, make_inputs

from dock_underwriting.analysis.finance import compute_deal_economics
from dock_underwriting.analysis.scoring import score_metric
from dock_underwriting.domain.property import FinancingTerms


def _baseline_financing():
    return FinancingTerms(ltv=0.75, interest_rate=0.065, loan_term_years=30)


# Rent, unit count and expenses chosen so NOI stays positive.
deal_fields = st.fixed_dictionaries({
    "unit_count": st.integers(min_value=1, max_value=4),
    "monthly_rent_per_unit": st.floats(min_value=1_500.0, max_value=4_000.0),
    "vacancy_rate": st.floats(min_value=0.0, max_value=0.10),
    "management_fee_percent": st.floats(min_value=0.0, max_value=0.10),
    "repairs_per_unit_per_year": st.floats(min_value=0.0, max_value=1_000.0),
    "annual_taxes": st.floats(min_value=0.0, max_value=3_000.0),
    "annual_insurance": st.floats(min_value=0.0, max_value=2_000.0),
    "closing_costs": st.floats(min_value=0.0, max_value=10_000.0),
})


@given(fields=deal_fields, price=st.floats(min_value=50_000.0, max_value=900_000.0))
def test_income_statement_identities(fields, price):
    inputs = make_inputs(purchase_price=price, year_built=THIS_YEAR - 25, **fields)
    e = compute_deal_economics(inputs, _baseline_financing())

    assert e.effective_gross_income == e.gross_potential_rent - e.vacancy_loss
    assert e.net_operating_income == e.effective_gross_income - e.total_operating_expenses
    assert e.annual_cash_flow == e.net_operating_income - e.annual_debt_service


@given(
    fields=deal_fields,
    price=st.floats(min_value=100_000.0, max_value=600_000.0),
    delta=st.floats(min_value=1_000.0, max_value=150_000.0),
)
def test_higher_price_never_improves_returns(fields, price, delta):
    """
    Same property, same LTV: paying more cannot raise cap rate, cash-on-cash
    or DSCR.
    """
    financing = _baseline_financing()
    m1 = compute_deal_economics(
        make_inputs(purchase_price=price, year_built=THIS_YEAR - 25, **fields), financing
    )
    m2 = compute_deal_economics(
        make_inputs(purchase_price=price + delta, year_built=THIS_YEAR - 25, **fields), financing
    )

    assert m1.net_operating_income > 0
    assert m2.in_place_cap_rate <= m1.in_place_cap_rate
    assert m2.cash_on_cash_return <= m1.cash_on_cash_return + 1e-12
    assert m2.dscr <= m1.dscr


@given(
    rent=st.floats(min_value=500.0, max_value=4_000.0),
    delta=st.floats(min_value=50.0, max_value=500.0),
)
def test_higher_rent_improves_metrics(rent, delta):
    financing = _baseline_financing()

    m1 = compute_deal_economics(make_inputs(monthly_rent_per_unit=rent), financing)
    m2 = compute_deal_economics(make_inputs(monthly_rent_per_unit=rent + delta), financing)

    # With everything else fixed, more rent should not hurt DSCR, CoC, or cap rate
    assert m2.dscr >= m1.dscr
    assert m2.cash_on_cash_return >= m1.cash_on_cash_return
    assert m2.in_place_cap_rate >= m1.in_place_cap_rate


@given(
    target=st.floats(min_value=0.0, max_value=10.0),
    a=st.floats(min_value=-10.0, max_value=20.0),
    b=st.floats(min_value=-10.0, max_value=20.0),
)
def test_score_metric_is_monotone(target, a, b):
    lo, hi = sorted((a, b))
    assert score_metric(lo, target) <= score_metric(hi, target)
    # lower-is-better mirrors it
    assert score_metric(lo, target, higher_is_better=False) >= score_metric(
        hi, target, higher_is_better=False
    )
