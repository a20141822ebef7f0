from __future__ import annotations

from enum import Enum
from functools import total_ordering


@total_ordering
class _OrderedEnum(Enum):
    """Enum whose members compare by declaration order (first is lowest)."""

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    def __lt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.rank < other.rank


class MetricScore(_OrderedEnum):
    FAILS = "fails"
    BORDERLINE = "borderline"
    MEETS = "meets"
    EXCEEDS = "exceeds"


class InvestmentRecommendation(_OrderedEnum):
    PASS = "pass"
    CAUTION = "caution"
    HOLD = "hold"
    BUY = "buy"
    STRONG_BUY = "strong_buy"

    @property
    def description(self) -> str:
        return _RECOMMENDATION_DESCRIPTIONS[self]


_RECOMMENDATION_DESCRIPTIONS = {
    InvestmentRecommendation.STRONG_BUY: "Excellent opportunity. All key metrics exceed targets.",
    InvestmentRecommendation.BUY: "Good investment. Metrics meet targets with acceptable risk profile.",
    InvestmentRecommendation.HOLD: "Borderline deal. Some metrics meet targets but others need attention.",
    InvestmentRecommendation.CAUTION: "Proceed carefully. Multiple metrics below target or significant risks present.",
    InvestmentRecommendation.PASS: "Not recommended. Key metrics fail to meet minimum thresholds.",
}


class MetricCategory(str, Enum):
    DEAL_ECONOMICS = "deal_economics"
    MARKET_SUPPORT = "market_support"
    RISK_BUFFERS = "risk_buffers"


class MetricImportance(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"
    UNKNOWN = "unknown"


class SignalStrength(str, Enum):
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"
    NEUTRAL = "neutral"
    UNKNOWN = "unknown"
