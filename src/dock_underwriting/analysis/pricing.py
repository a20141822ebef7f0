from __future__ import annotations

from typing import Callable, Literal, Optional

from dock_underwriting.adapters.config import config
from dock_underwriting.adapters.logging_utils import get_logger, log_context
from dock_underwriting.analysis.finance import compute_deal_economics
from dock_underwriting.analysis.search import (
    bisect_max_feasible,
    require_positive_step,
    scan_max_feasible,
)
from dock_underwriting.domain.property import FinancingTerms, PropertyInputs, Thresholds
from dock_underwriting.domain.underwriting import DealEconomics, PriceSearchResult

logger = get_logger(__name__)

SearchMethod = Literal["scan", "bisect"]

NO_FEASIBLE_PRICE = "no price in range meets all targets"
NO_ANCHOR_PRICE = "asking price is required to search a price range"

_SEARCHERS = {
    "scan": scan_max_feasible,
    "bisect": bisect_max_feasible,
}


def meets_all_targets(economics: DealEconomics, thresholds: Thresholds) -> bool:
    """
    The investor's buy box: every return target cleared and the property
    pays for itself each month. A deal with no debt has nothing to cover,
    so the DSCR target does not bind.
    """
    dscr_ok = economics.dscr is None or economics.dscr >= thresholds.target_dscr
    return (
        economics.in_place_cap_rate >= thresholds.target_cap_rate
        and economics.cash_on_cash_return >= thresholds.target_cash_on_cash
        and dscr_ok
        and economics.monthly_cash_flow > 0
    )


def economics_at_price(
    inputs: PropertyInputs,
    financing: FinancingTerms,
    price: float,
    *,
    as_of_year: Optional[int] = None,
) -> DealEconomics:
    """Re-run the model at `price`, re-sizing the loan off LTV."""
    at_price = inputs.model_copy(update={"purchase_price": price})
    terms = financing.model_copy(update={
        "loan_amount": price * financing.ltv,
        "total_cash_required": 0.0,
    })
    return compute_deal_economics(at_price, terms, as_of_year=as_of_year)


def feasibility_predicate(
    inputs: PropertyInputs,
    financing: FinancingTerms,
    thresholds: Thresholds,
    *,
    as_of_year: Optional[int] = None,
) -> Callable[[float], bool]:
    def is_feasible(price: float) -> bool:
        econ = economics_at_price(inputs, financing, price, as_of_year=as_of_year)
        return meets_all_targets(econ, thresholds)

    return is_feasible


def price_search_bounds(anchor: float) -> tuple[float, float]:
    floor = max(anchor * config.PRICE_SEARCH_FLOOR_PCT, config.PRICE_SEARCH_MIN_PRICE)
    ceiling = anchor * config.PRICE_SEARCH_CEILING_PCT
    return floor, ceiling


def find_max_feasible_price(
    inputs: PropertyInputs,
    financing: FinancingTerms,
    thresholds: Thresholds,
    *,
    method: SearchMethod = "scan",
    step: Optional[float] = None,
    as_of_year: Optional[int] = None,
) -> PriceSearchResult:
    """
    Highest price on the search grid at which the deal still clears every
    target in `thresholds`.

    The grid is anchored at the asking price (purchase price when no asking
    price is known) and steps by PRICE_SEARCH_STEP within
    [max(70% of anchor, $50k), 130% of anchor]. Every metric in the predicate
    only worsens as price rises, so the feasible prices form a prefix of the
    grid and the answer is its last point.
    """
    step = require_positive_step(step if step is not None else config.PRICE_SEARCH_STEP)
    anchor = inputs.asking_price if inputs.asking_price > 0 else inputs.purchase_price
    if anchor <= 0:
        return PriceSearchResult.infeasible(NO_ANCHOR_PRICE)

    floor, ceiling = price_search_bounds(anchor)

    search = _SEARCHERS[method]
    outcome = search(
        feasibility_predicate(inputs, financing, thresholds, as_of_year=as_of_year),
        anchor=anchor,
        floor=floor,
        ceiling=ceiling,
        step=step,
    )

    logger.info(
        "price_search_completed",
        extra=log_context(
            method=method,
            anchor=anchor,
            floor=floor,
            ceiling=ceiling,
            max_price=outcome.price,
            evaluations=outcome.evaluations,
        ),
    )

    bounds = dict(floor=floor, ceiling=ceiling, evaluations=outcome.evaluations)
    if outcome.price is None:
        return PriceSearchResult.infeasible(NO_FEASIBLE_PRICE, **bounds)
    return PriceSearchResult.found(outcome.price, **bounds)
