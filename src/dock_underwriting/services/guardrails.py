# src/dock_underwriting/services/guardrails.py
from __future__ import annotations

from typing import Any, Dict, List

from dock_underwriting.adapters.logging_utils import get_logger, log_context
from dock_underwriting.domain.property import PropertyInputs, Thresholds
from dock_underwriting.domain.underwriting import DealEconomics, RiskBuffers

logger = get_logger(__name__)


def _flag(code: str, severity: str, message: str, **context: Any) -> Dict[str, Any]:
    return {"code": code, "severity": severity, "message": message, "context": context}


def collect_guardrail_flags(
    inputs: PropertyInputs,
    economics: DealEconomics,
    risk: RiskBuffers,
    thresholds: Thresholds,
) -> List[Dict[str, Any]]:
    """
    Simple, high-leverage sanity checks on an underwritten deal.

    Each flag looks like:
        {
            "code": "DSCR_BELOW_ONE",
            "severity": "warning" | "error" | "info",
            "message": "...human readable...",
            "context": {...raw numbers...},
        }

    These do *not* block anything; they just point out sketchy deals so the
    presentation layer can highlight them.
    """
    flags: List[Dict[str, Any]] = []

    # ------------------------------------------------------------------
    # 1) Basic data sanity
    # ------------------------------------------------------------------
    if economics.purchase_price <= 0:
        flags.append(_flag(
            "PURCHASE_PRICE_MISSING",
            "error",
            "Neither a purchase price nor an asking price was supplied.",
            purchase_price=inputs.purchase_price,
            asking_price=inputs.asking_price,
        ))
    elif inputs.asking_price > 0 and inputs.purchase_price > inputs.asking_price:
        flags.append(_flag(
            "PURCHASE_ABOVE_ASKING",
            "warning",
            "Purchase price is above the asking price.",
            purchase_price=inputs.purchase_price,
            asking_price=inputs.asking_price,
        ))

    # ------------------------------------------------------------------
    # 2) Operations
    # ------------------------------------------------------------------
    if economics.net_operating_income <= 0:
        flags.append(_flag(
            "NEGATIVE_NOI",
            "error",
            "Operating expenses meet or exceed collected rent.",
            noi=economics.net_operating_income,
        ))

    # ------------------------------------------------------------------
    # 3) Debt coverage & cash flow
    # ------------------------------------------------------------------
    if not economics.has_debt:
        flags.append(_flag(
            "NO_DEBT",
            "info",
            "No debt service; DSCR is not applicable.",
            loan_amount=economics.loan_amount,
        ))
    elif economics.dscr is not None and economics.dscr < 1.0:
        flags.append(_flag(
            "DSCR_BELOW_ONE",
            "warning",
            "DSCR below 1.0: rent does not cover debt service.",
            dscr=economics.dscr,
        ))

    if economics.annual_cash_flow < 0:
        flags.append(_flag(
            "NEGATIVE_CASH_FLOW",
            "warning",
            "Property loses money after debt service.",
            annual_cash_flow=economics.annual_cash_flow,
        ))

    # ------------------------------------------------------------------
    # 4) Risk buffers
    # ------------------------------------------------------------------
    if risk.break_even_occupancy > thresholds.max_break_even_occupancy:
        flags.append(_flag(
            "HIGH_BREAK_EVEN",
            "warning",
            "Break-even occupancy is above the investor's maximum.",
            break_even_occupancy=risk.break_even_occupancy,
            max_break_even_occupancy=thresholds.max_break_even_occupancy,
        ))

    if flags:
        logger.info(
            "deal_guardrails_flags",
            extra=log_context(codes=[f["code"] for f in flags]),
        )

    return flags
