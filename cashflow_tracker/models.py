"""SQLAlchemy models for the Cash Flow Tracker."""

from __future__ import annotations

import datetime as dt
import enum
import uuid
from dataclasses import dataclass
from typing import Optional

from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


def _new_id() -> str:
    return str(uuid.uuid4())


class CashFlowType(str, enum.Enum):
    CASH_IN = "CASH_IN"
    CASH_OUT = "CASH_OUT"


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=_utcnow, nullable=False)

    cash_flows = db.relationship("CashFlow", back_populates="user", cascade="all, delete-orphan")


class CashFlow(db.Model):
    __tablename__ = "cash_flows"
    __table_args__ = (db.CheckConstraint("amount > 0", name="ck_cash_flows_amount_positive"),)

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = db.Column(db.String(16), nullable=False)
    source = db.Column(db.String(120), nullable=False, default="")
    label = db.Column(db.String(120), nullable=False, default="")
    amount = db.Column(db.BigInteger, nullable=False)
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    user = db.relationship("User", back_populates="cash_flows")

    @property
    def direction(self) -> CashFlowType:
        return CashFlowType(self.type)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "source": self.source,
            "label": self.label,
            "amount": self.amount,
            "description": self.description,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass
class CashFlowDraft:
    """Validated field values for creating or replacing a cash flow."""

    type: CashFlowType
    source: str
    label: str
    amount: int
    description: Optional[str] = None
