"""
Market support: how the submarket around a deal is behaving.

Turns a MarketData snapshot into six indicators, each with a trend arrow and
a signal strength. Nothing here fetches data; a missing snapshot or a missing
field yields an "unknown" indicator rather than a zero reading.
"""
from __future__ import annotations

from typing import Callable, Optional, Sequence, Tuple

from dock_underwriting.domain.property import MarketData
from dock_underwriting.domain.ratings import SignalStrength, TrendDirection
from dock_underwriting.domain.underwriting import MarketIndicator, MarketSupport

# Readings within +/- this band are "stable".
TREND_BAND = 0.02

# (bound, signal) pairs checked in order; the first bound the value clears wins.
RENT_GROWTH_SIGNALS = ((0.05, SignalStrength.STRONG), (0.02, SignalStrength.MODERATE))
PRICE_APPRECIATION_SIGNALS = ((0.05, SignalStrength.STRONG), (0.02, SignalStrength.MODERATE))
DEMAND_SIGNALS = (
    (0.02, SignalStrength.STRONG),
    (0.01, SignalStrength.MODERATE),
    (0.0, SignalStrength.NEUTRAL),
)
# Lower is better for these three.
VACANCY_SIGNALS = ((0.03, SignalStrength.STRONG), (0.06, SignalStrength.MODERATE))
DAYS_ON_MARKET_SIGNALS = ((14, SignalStrength.STRONG), (30, SignalStrength.MODERATE))
SUPPLY_SIGNALS = ((2.0, SignalStrength.STRONG), (4.0, SignalStrength.MODERATE))


def determine_trend(value: Optional[float], positive_is_good: bool = True) -> TrendDirection:
    if value is None:
        return TrendDirection.UNKNOWN
    if -TREND_BAND <= value <= TREND_BAND:
        return TrendDirection.STABLE
    rising = value > TREND_BAND
    return TrendDirection.UP if rising == positive_is_good else TrendDirection.DOWN


def signal_at_least(value: Optional[float], bands: Sequence[Tuple[float, SignalStrength]]) -> SignalStrength:
    """Higher-is-better signal; anything below every bound is weak."""
    if value is None:
        return SignalStrength.UNKNOWN
    for bound, signal in bands:
        if value >= bound:
            return signal
    return SignalStrength.WEAK


def signal_at_most(value: Optional[float], bands: Sequence[Tuple[float, SignalStrength]]) -> SignalStrength:
    """Lower-is-better signal; anything above every bound is weak."""
    if value is None:
        return SignalStrength.UNKNOWN
    for bound, signal in bands:
        if value <= bound:
            return signal
    return SignalStrength.WEAK


def _fmt_pct(x: float) -> str:
    return f"{x * 100:.1f}%"


def _indicator(
    value: Optional[float],
    fmt: Callable[[float], str],
    *,
    positive_is_good: bool,
    signal: SignalStrength,
    description: str,
) -> MarketIndicator:
    return MarketIndicator(
        value=value,
        display_value=fmt(value) if value is not None else "n/a",
        trend=determine_trend(value, positive_is_good),
        signal=signal,
        description=description,
    )


def calculate_market_support(market: Optional[MarketData]) -> MarketSupport:
    m = market or MarketData()
    dom = float(m.days_on_market) if m.days_on_market is not None else None

    return MarketSupport(
        rent_growth=_indicator(
            m.rent_growth_yoy,
            _fmt_pct,
            positive_is_good=True,
            signal=signal_at_least(m.rent_growth_yoy, RENT_GROWTH_SIGNALS),
            description="Year-over-year rent growth in submarket",
        ),
        price_appreciation=_indicator(
            m.price_appreciation_yoy,
            _fmt_pct,
            positive_is_good=True,
            signal=signal_at_least(m.price_appreciation_yoy, PRICE_APPRECIATION_SIGNALS),
            description="Year-over-year home price appreciation",
        ),
        vacancy_trend=_indicator(
            m.vacancy_rate,
            _fmt_pct,
            positive_is_good=False,
            signal=signal_at_most(m.vacancy_rate, VACANCY_SIGNALS),
            description="Current submarket vacancy rate",
        ),
        days_on_market=_indicator(
            dom,
            lambda d: f"{d:.0f} days",
            positive_is_good=False,
            signal=signal_at_most(dom, DAYS_ON_MARKET_SIGNALS),
            description="Average days on market",
        ),
        supply_trend=_indicator(
            m.inventory_months,
            lambda x: f"{x:.1f} mo",
            positive_is_good=False,
            signal=signal_at_most(m.inventory_months, SUPPLY_SIGNALS),
            description="Months of housing inventory",
        ),
        demand_indicator=_indicator(
            m.population_growth,
            _fmt_pct,
            positive_is_good=True,
            signal=signal_at_least(m.population_growth, DEMAND_SIGNALS),
            description="Population growth trend",
        ),
    )
