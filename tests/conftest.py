# tests/conftest.py
from datetime import date

import pytest

from dock_underwriting.domain.property import FinancingTerms, PropertyInputs, Thresholds

THIS_YEAR = date.today().year


def make_inputs(**overrides) -> PropertyInputs:
    """A plain single-family rental; tests override what they care about."""
    fields = dict(
        purchase_price=450_000.0,
        asking_price=450_000.0,
        year_built=THIS_YEAR - 41,
        unit_count=1,
        monthly_rent_per_unit=2_400.0,
        vacancy_rate=0.05,
        management_fee_percent=0.08,
        repairs_per_unit_per_year=1_200.0,
        annual_taxes=8_500.0,
        annual_insurance=2_400.0,
        other_annual_expenses=0.0,
        closing_costs=0.0,
    )
    fields.update(overrides)
    return PropertyInputs(**fields)


@pytest.fixture
def worked_inputs() -> PropertyInputs:
    """
    450k single-family, 2,400/mo rent, ~41-year-old building.
    NOI ~12.6k against ~27k of debt service: a deal that does not pencil.
    """
    return make_inputs()


@pytest.fixture
def worked_financing() -> FinancingTerms:
    return FinancingTerms(ltv=0.75, interest_rate=0.07, loan_term_years=30)


@pytest.fixture
def fourplex_inputs() -> PropertyInputs:
    """
    300k fourplex at 1,500/unit, 15 years old. Clears every default target
    comfortably (cap ~17.8%, DSCR ~3x).
    """
    return make_inputs(
        purchase_price=300_000.0,
        asking_price=300_000.0,
        year_built=THIS_YEAR - 15,
        unit_count=4,
        monthly_rent_per_unit=1_500.0,
        repairs_per_unit_per_year=600.0,
        annual_taxes=4_000.0,
        annual_insurance=2_000.0,
        closing_costs=6_000.0,
    )


@pytest.fixture
def fourplex_financing() -> FinancingTerms:
    return FinancingTerms(ltv=0.75, interest_rate=0.07, loan_term_years=30)


@pytest.fixture
def default_thresholds() -> Thresholds:
    return Thresholds(target_cap_rate=0.06, target_cash_on_cash=0.08, target_dscr=1.25)
