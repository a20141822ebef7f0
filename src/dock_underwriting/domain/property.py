from pydantic import BaseModel, ConfigDict, Field, field_validator


class MarketData(BaseModel):
    """
    Submarket snapshot supplied by whatever market-data source the app uses.
    Every field is optional; a missing value reads as "unknown", never as 0.
    Growth and vacancy figures are decimals (0.03 == 3%).
    """
    model_config = ConfigDict(frozen=True)

    median_rent: float | None = Field(None, ge=0, description="Median monthly rent per unit")
    rent_growth_yoy: float | None = None
    price_appreciation_yoy: float | None = None
    vacancy_rate: float | None = Field(None, ge=0, le=1.0)
    days_on_market: int | None = Field(None, ge=0)
    inventory_months: float | None = Field(None, ge=0)
    population_growth: float | None = None


class PropertyInputs(BaseModel):
    """
    Everything the surrounding app knows about a property that matters for
    underwriting. Money is in dollars, rates are decimals (0.05 == 5%).
    """
    model_config = ConfigDict(frozen=True)

    purchase_price: float = Field(0.0, ge=0, description="Negotiated price; 0 means 'use asking'")
    asking_price: float = Field(0.0, ge=0)
    year_built: int = Field(..., description="Drives the CapEx reserve age multiplier")
    unit_count: int = Field(1, ge=0)
    square_feet: int = Field(0, ge=0)

    # Income
    monthly_rent_per_unit: float = Field(0.0, ge=0)
    total_monthly_rent: float = Field(0.0, ge=0, description="Caller-set total; honored for single-unit deals")
    market_rent_per_unit: float | None = Field(None, ge=0, description="Submarket rent for stabilized cap rate")

    # Expense assumptions
    vacancy_rate: float = 0.05
    management_fee_percent: float = 0.08
    repairs_per_unit_per_year: float = Field(0.0, ge=0)
    annual_taxes: float = Field(0.0, ge=0)
    annual_insurance: float = Field(0.0, ge=0)
    other_annual_expenses: float = Field(0.0, ge=0)
    closing_costs: float = Field(0.0, ge=0)

    market_data: MarketData | None = None

    @field_validator("vacancy_rate", "management_fee_percent")
    @classmethod
    def _fraction_range(cls, v: float) -> float:
        if not (0.0 <= v <= 1.0):
            raise ValueError("rate must be between 0 and 1")
        return v

    @property
    def effective_purchase_price(self) -> float:
        return self.purchase_price if self.purchase_price > 0 else self.asking_price


class FinancingTerms(BaseModel):
    model_config = ConfigDict(frozen=True)

    loan_amount: float = Field(0.0, ge=0, description="0 means derive from LTV")
    ltv: float = Field(0.75, description="0.75 means 75% loan-to-value")
    interest_rate: float = Field(0.07, ge=0, description="Annual, e.g. 0.07 for 7%")
    loan_term_years: int = Field(30, ge=0)
    is_interest_only: bool = False
    total_cash_required: float = Field(0.0, ge=0, description="Explicit cash-in; 0 means derive")

    @field_validator("ltv")
    @classmethod
    def _ltv_range(cls, v: float) -> float:
        if not (0.0 <= v <= 1.0):
            raise ValueError("ltv must be between 0 and 1")
        return v

    def resolved_loan_amount(self, purchase_price: float) -> float:
        if self.loan_amount > 0:
            return self.loan_amount
        return purchase_price * self.ltv


class Thresholds(BaseModel):
    model_config = ConfigDict(frozen=True)

    target_cap_rate: float = Field(0.06, ge=0)
    target_cash_on_cash: float = Field(0.08, ge=0)
    target_dscr: float = Field(1.25, ge=1.0, description="Coverage multiplier, at least 1.0x")
    max_break_even_occupancy: float = Field(0.85, gt=0, le=1.0)
    min_rent_growth: float = Field(0.02, description="Submarket YoY rent growth floor")
    max_market_vacancy: float = Field(0.08, ge=0, le=1.0)
