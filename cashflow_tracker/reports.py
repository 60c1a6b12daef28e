"""Reporting utilities.

Formats cash flows and their summary into human-readable text, CSV and
JSON-serializable dicts.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Dict, IO, Iterable, List

from . import analytics as an
from .models import CashFlow

CSV_COLUMNS = ("id", "type", "source", "label", "amount", "description", "created_at")


def build_summary(cash_flows: Iterable[CashFlow]) -> Dict:
    cash_flows = list(cash_flows)
    totals = an.summarize_cash_flows(cash_flows)
    return {
        "totals": {
            "total_in": totals.total_in,
            "total_out": totals.total_out,
            "balance": totals.balance,
        },
        "by_source": an.totals_by_source(cash_flows),
        "count": totals.count,
    }


def format_text_report(summary: Dict) -> str:
    lines: List[str] = []
    t = summary["totals"]
    lines.append("=== Cash Flow Summary ===")
    lines.append(f"Cash in:  {t['total_in']:>12,}")
    lines.append(f"Cash out: {t['total_out']:>12,}")
    lines.append(f"Balance:  {t['balance']:>12,}")
    lines.append(f"Records:  {summary.get('count', 0):>12,}")
    lines.append("")

    lines.append("-- By Source --")
    for source, vals in summary["by_source"].items():
        lines.append(f"{source[:20]:20} In {vals['in']:>10,}  Out {vals['out']:>10,}  Net {vals['net']:>10,}")
    return "\n".join(lines)


def save_json(summary: Dict, path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2)


def _ensure_text_writer(target: str | Path | IO[str]):
    if hasattr(target, "write"):
        return target, None
    path = Path(target)
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = path.open("w", newline="", encoding="utf-8")
    return handle, handle


def export_cash_flows_csv(cash_flows: Iterable[CashFlow], path: str | Path | IO[str]) -> None:
    writer_target, to_close = _ensure_text_writer(path)
    try:
        writer = csv.writer(writer_target, lineterminator="\n")
        writer.writerow(CSV_COLUMNS)
        for cf in cash_flows:
            writer.writerow(
                [
                    cf.id,
                    cf.type,
                    cf.source,
                    cf.label,
                    cf.amount,
                    cf.description or "",
                    cf.created_at.isoformat() if cf.created_at else "",
                ]
            )
    finally:
        if to_close is not None:
            to_close.close()


def export_summary_json(summary: Dict, path: str | Path | IO[str]) -> None:
    if hasattr(path, "write"):
        json.dump(summary, path, indent=2)
        path.write("\n")
        return
    save_json(summary, path)
