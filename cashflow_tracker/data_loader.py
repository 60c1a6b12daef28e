"""Data loading helpers.

Reads cash flows from CSV into ``CashFlowDraft`` records with fields:
    type (CashFlowType), source (str), label (str), amount (int),
    description (str|None)

CSV columns are auto-detected case-insensitively among common variants.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import IO, Iterable, List, Optional

from .exceptions import ValidationError
from .models import CashFlowDraft, CashFlowType
from .service import build_draft

_TYPE_ALIASES = {
    "cash_in": CashFlowType.CASH_IN,
    "in": CashFlowType.CASH_IN,
    "income": CashFlowType.CASH_IN,
    "cash_out": CashFlowType.CASH_OUT,
    "out": CashFlowType.CASH_OUT,
    "expense": CashFlowType.CASH_OUT,
}

_TYPE_COLS = ("type", "direction", "kind")
_SOURCE_COLS = ("source", "category")
_LABEL_COLS = ("label", "title", "name")
_AMT_COLS = ("amount", "amt", "value")
_DESC_COLS = ("description", "details", "memo", "note")


def _find_column(row_keys: Iterable[str], candidates: Iterable[str]) -> Optional[str]:
    low = {k.strip().lower(): k for k in row_keys}
    for cand in candidates:
        if cand in low:
            return low[cand]
    return None


def _parse_type(value: str) -> str:
    key = value.strip().lower().replace("-", "_").replace(" ", "_")
    direction = _TYPE_ALIASES.get(key)
    # Unknown values fall through so build_draft reports them.
    return direction.value if direction else value


def load_csv_stream(stream: IO[str], label: str = "<stream>") -> List[CashFlowDraft]:
    reader = csv.DictReader(stream)
    fieldnames = reader.fieldnames or []
    type_col = _find_column(fieldnames, _TYPE_COLS)
    amt_col = _find_column(fieldnames, _AMT_COLS)
    source_col = _find_column(fieldnames, _SOURCE_COLS)
    label_col = _find_column(fieldnames, _LABEL_COLS)
    desc_col = _find_column(fieldnames, _DESC_COLS)

    if not type_col or not amt_col or not label_col:
        raise ValueError(f"{label}: Missing required columns. Need type, label and amount.")

    drafts: List[CashFlowDraft] = []
    # Line 1 is the header.
    for line_no, row in enumerate(reader, start=2):
        try:
            drafts.append(
                build_draft(
                    _parse_type(row.get(type_col) or ""),
                    row.get(source_col) if source_col else "",
                    row.get(label_col),
                    (row.get(amt_col) or "").replace(",", ""),
                    row.get(desc_col) if desc_col else None,
                )
            )
        except ValidationError as exc:
            raise ValueError(f"{label}, line {line_no}: {exc.message}") from exc
    return drafts


def load_csv_file(path: str | Path) -> List[CashFlowDraft]:
    p = Path(path)
    with p.open("r", encoding="utf-8-sig", newline="") as f:
        return load_csv_stream(f, label=p.name)


def load_csv_files(paths: Iterable[str | Path]) -> List[CashFlowDraft]:
    drafts: List[CashFlowDraft] = []
    for p in paths:
        drafts.extend(load_csv_file(p))
    return drafts
