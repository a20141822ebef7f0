from typing import Optional

from dock_underwriting.adapters.config import config
from dock_underwriting.domain.finance import capex_reserve, monthly_debt_service
from dock_underwriting.domain.property import FinancingTerms, PropertyInputs
from dock_underwriting.domain.underwriting import DealEconomics, ExpenseBreakdown


def _monthly_rent(inputs: PropertyInputs) -> float:
    """
    Determine total gross scheduled rent per month.
    - Single-unit deals may carry a caller-set total; honor it when present.
    - Otherwise rent per unit * unit count.
    """
    if inputs.unit_count == 1 and inputs.total_monthly_rent > 0:
        return inputs.total_monthly_rent
    return inputs.monthly_rent_per_unit * inputs.unit_count


def _market_rent_per_unit(inputs: PropertyInputs) -> Optional[float]:
    # An explicit per-unit market rent beats the submarket median.
    if inputs.market_rent_per_unit is not None:
        return inputs.market_rent_per_unit
    if inputs.market_data is not None:
        return inputs.market_data.median_rent
    return None


def calculate_expenses(
    inputs: PropertyInputs,
    effective_gross_income: float,
    *,
    as_of_year: Optional[int] = None,
) -> ExpenseBreakdown:
    """
    Operating expenses do NOT include debt service. Buckets:
    - Taxes and insurance (as supplied)
    - Management, as a share of EGI
    - Repairs, per unit per year
    - CapEx reserve, scaled by building age
    - Utilities (tenant-paid for residential, so 0)
    - Anything else the caller lumps into other_annual_expenses
    """
    taxes = inputs.annual_taxes
    insurance = inputs.annual_insurance
    management = effective_gross_income * inputs.management_fee_percent
    repairs = inputs.repairs_per_unit_per_year * inputs.unit_count
    capex = capex_reserve(
        unit_count=inputs.unit_count,
        year_built=inputs.year_built,
        base_reserve_per_unit=config.CAPEX_BASE_RESERVE_PER_UNIT,
        as_of_year=as_of_year,
    )
    utilities = 0.0
    other = inputs.other_annual_expenses

    total = taxes + insurance + management + repairs + capex + utilities + other
    expense_ratio = total / effective_gross_income if effective_gross_income > 0 else 0.0

    return ExpenseBreakdown(
        taxes=taxes,
        insurance=insurance,
        management=management,
        repairs=repairs,
        capex_reserve=capex,
        utilities=utilities,
        other=other,
        expense_ratio=expense_ratio,
    )


def compute_deal_economics(
    inputs: PropertyInputs,
    financing: FinancingTerms,
    *,
    as_of_year: Optional[int] = None,
) -> DealEconomics:
    """
    Core underwriting brain: single-period economics of one deal.

    Pure and total. Ratios that would divide by zero come back as 0
    (cap rate, cash-on-cash, expense ratio) or None (DSCR with no debt);
    DealEconomics.has_price / has_equity / has_debt tell callers which.
    """
    # --- income side ---
    monthly_rent = _monthly_rent(inputs)
    gross_potential_rent = monthly_rent * 12.0
    vacancy_loss = gross_potential_rent * inputs.vacancy_rate
    effective_gross_income = gross_potential_rent - vacancy_loss

    # --- operating expenses ---
    expenses = calculate_expenses(inputs, effective_gross_income, as_of_year=as_of_year)
    total_operating_expenses = expenses.total

    # --- NOI (Net Operating Income) ---
    # Income after vacancy + operating expenses, BEFORE debt.
    net_operating_income = effective_gross_income - total_operating_expenses

    # --- financing ---
    purchase_price = inputs.effective_purchase_price
    loan_amount = financing.resolved_loan_amount(purchase_price)

    monthly_ds = monthly_debt_service(
        principal=loan_amount,
        annual_rate=financing.interest_rate,
        term_years=financing.loan_term_years,
        interest_only=financing.is_interest_only,
    )
    annual_ds = monthly_ds * 12.0

    # --- cash flow after debt ---
    annual_cash_flow = net_operating_income - annual_ds
    monthly_cash_flow = annual_cash_flow / 12.0

    # --- cash on cash ---
    # Down payment + closing costs unless the caller pinned the cash-in figure.
    if financing.total_cash_required > 0:
        total_cash_required = financing.total_cash_required
    else:
        total_cash_required = (purchase_price - loan_amount) + inputs.closing_costs

    cash_on_cash = annual_cash_flow / total_cash_required if total_cash_required > 0 else 0.0

    # --- cap rates ---
    in_place_cap_rate = net_operating_income / purchase_price if purchase_price > 0 else 0.0

    # Stabilized: same opex, market rent instead of in-place rent.
    market_rent = _market_rent_per_unit(inputs)
    if market_rent is not None:
        stabilized_gpr = market_rent * 12.0 * inputs.unit_count
    else:
        stabilized_gpr = gross_potential_rent
    stabilized_noi = stabilized_gpr * (1 - inputs.vacancy_rate) - total_operating_expenses
    stabilized_cap_rate = stabilized_noi / purchase_price if purchase_price > 0 else 0.0

    # --- DSCR ---
    # No debt service means coverage is undefined, not infinite.
    dscr = net_operating_income / annual_ds if annual_ds > 0 else None

    price_per_unit = purchase_price / inputs.unit_count if inputs.unit_count > 0 else purchase_price
    price_per_square_foot = purchase_price / inputs.square_feet if inputs.square_feet > 0 else 0.0

    return DealEconomics(
        gross_potential_rent=gross_potential_rent,
        vacancy_loss=vacancy_loss,
        effective_gross_income=effective_gross_income,
        expense_breakdown=expenses,
        total_operating_expenses=total_operating_expenses,
        net_operating_income=net_operating_income,
        purchase_price=purchase_price,
        loan_amount=loan_amount,
        total_cash_required=total_cash_required,
        monthly_debt_service=monthly_ds,
        annual_debt_service=annual_ds,
        annual_cash_flow=annual_cash_flow,
        monthly_cash_flow=monthly_cash_flow,
        in_place_cap_rate=in_place_cap_rate,
        stabilized_cap_rate=stabilized_cap_rate,
        cash_on_cash_return=cash_on_cash,
        dscr=dscr,
        price_per_unit=price_per_unit,
        price_per_square_foot=price_per_square_foot,
    )
