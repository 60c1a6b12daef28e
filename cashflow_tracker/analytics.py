"""Summary calculations over a listed sequence of cash flows.

All functions here are pure reductions: they do not depend on the order of
their input and never touch the database.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Dict, Iterable

from .models import CashFlow, CashFlowType


@dataclass(frozen=True)
class CashFlowSummary:
    total_in: int
    total_out: int
    balance: int
    count: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def summarize_cash_flows(cash_flows: Iterable[CashFlow]) -> CashFlowSummary:
    total_in = 0
    total_out = 0
    count = 0
    for cf in cash_flows:
        count += 1
        if cf.type == CashFlowType.CASH_IN.value:
            total_in += cf.amount
        elif cf.type == CashFlowType.CASH_OUT.value:
            total_out += cf.amount
    return CashFlowSummary(total_in=total_in, total_out=total_out, balance=total_in - total_out, count=count)


def totals_by_source(cash_flows: Iterable[CashFlow]) -> Dict[str, Dict[str, int]]:
    """Group in/out/net per source, largest absolute net first."""
    totals: Dict[str, Dict[str, int]] = defaultdict(lambda: {"in": 0, "out": 0, "net": 0})
    for cf in cash_flows:
        stats = totals[cf.source or "Other"]
        if cf.type == CashFlowType.CASH_IN.value:
            stats["in"] += cf.amount
        elif cf.type == CashFlowType.CASH_OUT.value:
            stats["out"] += cf.amount
        stats["net"] = stats["in"] - stats["out"]
    return dict(sorted(totals.items(), key=lambda kv: (-abs(kv[1]["net"]), kv[0])))
