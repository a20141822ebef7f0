"""
Monotone search helpers shared by the stress test and the price optimizer.

Both searches assume the thing being searched is monotone: a scalar function
that only goes down as x goes up, or a feasibility predicate that holds on a
prefix of the grid and fails afterwards. Neither helper knows anything about
real estate.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Optional

# Slack for float grid arithmetic (prices are dollars, so this is far below a cent).
_GRID_EPS = 1e-6


def bisect_boundary(
    fn: Callable[[float], float],
    lo: float,
    hi: float,
    *,
    tolerance: float,
    max_iter: int,
) -> float:
    """
    Largest x in [lo, hi] with fn(x) >= 0, for fn non-increasing in x.

    Returns lo when fn is already negative at lo and hi when fn never goes
    negative on the interval. Otherwise bisects until the bracket is
    narrower than `tolerance` or `max_iter` halvings have been spent,
    and returns the non-negative side of the bracket.
    """
    if fn(lo) < 0:
        return lo
    if fn(hi) >= 0:
        return hi

    for _ in range(max_iter):
        if hi - lo <= tolerance:
            break
        mid = (lo + hi) / 2.0
        if fn(mid) >= 0:
            lo = mid
        else:
            hi = mid
    return lo


def require_positive_step(step: float) -> float:
    """Grid walks only terminate on a positive step."""
    if not step > 0:
        raise ValueError(f"step must be > 0, got {step!r}")
    return step


@dataclass(frozen=True)
class GridSearchOutcome:
    price: Optional[float]      # None when nothing on the grid is feasible
    evaluations: int


class _CountingPredicate:
    def __init__(self, predicate: Callable[[float], bool]):
        self._predicate = predicate
        self.calls = 0

    def __call__(self, x: float) -> bool:
        self.calls += 1
        return self._predicate(x)


def scan_max_feasible(
    is_feasible: Callable[[float], bool],
    *,
    anchor: float,
    floor: float,
    ceiling: float,
    step: float,
) -> GridSearchOutcome:
    """
    Two-phase linear scan on the grid anchor + k * step.

    1. Walk down from the anchor until a feasible point turns up; falling
       below `floor` means nothing is feasible.
    2. Walk back up from that point while the next step is still feasible
       and within `ceiling`; the last feasible point is the answer.
    """
    require_positive_step(step)
    pred = _CountingPredicate(is_feasible)

    found: Optional[float] = None
    k = 0
    while anchor - k * step >= floor - _GRID_EPS:
        candidate = anchor - k * step
        if pred(candidate):
            found = candidate
            break
        k += 1

    if found is None:
        return GridSearchOutcome(price=None, evaluations=pred.calls)

    best = found
    k = 1
    while found + k * step <= ceiling + _GRID_EPS:
        candidate = found + k * step
        if not pred(candidate):
            break
        best = candidate
        k += 1

    return GridSearchOutcome(price=best, evaluations=pred.calls)


def bisect_max_feasible(
    is_feasible: Callable[[float], bool],
    *,
    anchor: float,
    floor: float,
    ceiling: float,
    step: float,
) -> GridSearchOutcome:
    """
    Same contract and grid as scan_max_feasible, found by bisecting grid
    indices instead of walking them. Identical results whenever the
    feasible set is a prefix of the grid.
    """
    require_positive_step(step)
    pred = _CountingPredicate(is_feasible)

    # Grid indices relative to the anchor that land inside [floor, ceiling].
    k_lo = math.ceil((floor - anchor) / step - _GRID_EPS)
    k_hi = math.floor((ceiling - anchor) / step + _GRID_EPS)

    # The scan starts at the anchor; an anchor below the floor never gets a look.
    if k_lo > 0 or k_lo > k_hi:
        return GridSearchOutcome(price=None, evaluations=0)

    def at(k: int) -> float:
        return anchor + k * step

    if not pred(at(k_lo)):
        return GridSearchOutcome(price=None, evaluations=pred.calls)
    if pred(at(k_hi)):
        return GridSearchOutcome(price=at(k_hi), evaluations=pred.calls)

    # Invariant: k_lo feasible, k_hi infeasible.
    while k_hi - k_lo > 1:
        mid = (k_lo + k_hi) // 2
        if pred(at(mid)):
            k_lo = mid
        else:
            k_hi = mid

    return GridSearchOutcome(price=at(k_lo), evaluations=pred.calls)
