"""Owner-scoped persistence for cash flows.

Every method takes the owner's user id as a required argument and filters
on it, so no query here can read or touch another user's rows.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import or_

from .models import CashFlow, CashFlowDraft, db


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _commit() -> None:
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


class CashFlowRepository:
    def _owned(self, owner_id: int):
        return db.select(CashFlow).where(CashFlow.user_id == owner_id)

    def list(self, owner_id: int, search: Optional[str] = None) -> List[CashFlow]:
        stmt = self._owned(owner_id)
        if search:
            pattern = _like_pattern(search)
            stmt = stmt.where(
                or_(
                    CashFlow.label.ilike(pattern, escape="\\"),
                    CashFlow.source.ilike(pattern, escape="\\"),
                    CashFlow.description.ilike(pattern, escape="\\"),
                )
            )
        stmt = stmt.order_by(CashFlow.created_at.desc(), CashFlow.id)
        return list(db.session.execute(stmt).scalars())

    def get(self, owner_id: int, cash_flow_id: str) -> Optional[CashFlow]:
        stmt = self._owned(owner_id).where(CashFlow.id == cash_flow_id)
        return db.session.execute(stmt).scalar_one_or_none()

    def add(self, owner_id: int, draft: CashFlowDraft) -> CashFlow:
        cash_flow = CashFlow(user_id=owner_id)
        _apply(cash_flow, draft)
        db.session.add(cash_flow)
        _commit()
        return cash_flow

    def update(self, owner_id: int, cash_flow_id: str, draft: CashFlowDraft) -> Optional[CashFlow]:
        cash_flow = self.get(owner_id, cash_flow_id)
        if cash_flow is None:
            return None
        _apply(cash_flow, draft)
        _commit()
        return cash_flow

    def delete(self, owner_id: int, cash_flow_id: str) -> bool:
        cash_flow = self.get(owner_id, cash_flow_id)
        if cash_flow is None:
            return False
        db.session.delete(cash_flow)
        _commit()
        return True


def _apply(cash_flow: CashFlow, draft: CashFlowDraft) -> None:
    cash_flow.type = draft.type.value
    cash_flow.source = draft.source
    cash_flow.label = draft.label
    cash_flow.amount = draft.amount
    cash_flow.description = draft.description
