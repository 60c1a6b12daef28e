"""Cash flow service: owner-scoped CRUD, listing and search.

Callers pass the authenticated user's id into every operation. Lookups that
miss, whether because the record does not exist or because another user owns
it, return ``None`` (or ``False`` for delete) so the two cases cannot be told
apart.
"""

from __future__ import annotations

import logging
import re
import uuid
from typing import List, Optional, Union

from .exceptions import ValidationError
from .models import CashFlow, CashFlowDraft, CashFlowType
from .repository import CashFlowRepository

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"^[+-]?\d+$")

# Amounts are stored in a signed 64-bit column.
MAX_AMOUNT = 2**63 - 1


def _parse_type(value: Union[CashFlowType, str, None], errors: List[str]) -> Optional[CashFlowType]:
    if isinstance(value, CashFlowType):
        return value
    if value is not None and not isinstance(value, str):
        errors.append("Type must be CASH_IN or CASH_OUT.")
        return None
    text = (value or "").strip().upper()
    if not text:
        errors.append("Type is required.")
        return None
    try:
        return CashFlowType(text)
    except ValueError:
        errors.append("Type must be CASH_IN or CASH_OUT.")
        return None


def _parse_amount(value: Union[int, str, None], errors: List[str]) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        errors.append("Amount is required.")
        return None
    if isinstance(value, bool):
        errors.append("Amount must be a whole number.")
        return None
    if isinstance(value, int):
        amount = value
    elif isinstance(value, str) and _INTEGER_RE.match(value.strip()):
        amount = int(value.strip())
    else:
        errors.append("Amount must be a whole number.")
        return None
    if amount <= 0:
        errors.append("Amount must be greater than zero.")
        return None
    if amount > MAX_AMOUNT:
        errors.append("Amount is too large.")
        return None
    return amount


def build_draft(
    type: Union[CashFlowType, str, None],
    source: Optional[str],
    label: Optional[str],
    amount: Union[int, str, None],
    description: Optional[str] = None,
) -> CashFlowDraft:
    """Normalize raw field values, raising ValidationError when unusable."""
    errors: List[str] = []
    parsed_type = _parse_type(type, errors)
    parsed_amount = _parse_amount(amount, errors)
    for name, value in (("Source", source), ("Label", label), ("Description", description)):
        if value is not None and not isinstance(value, str):
            errors.append(f"{name} must be text.")
    if errors:
        raise ValidationError(" ".join(errors), details={"errors": errors})
    note = (description or "").strip() or None
    return CashFlowDraft(
        type=parsed_type,
        source=(source or "").strip(),
        label=(label or "").strip(),
        amount=parsed_amount,
        description=note,
    )


def _normalize_id(cash_flow_id: Union[str, uuid.UUID, None]) -> Optional[str]:
    if cash_flow_id is None:
        return None
    try:
        return str(uuid.UUID(str(cash_flow_id)))
    except ValueError:
        return None


class CashFlowService:
    def __init__(self, repository: Optional[CashFlowRepository] = None):
        self.repository = repository or CashFlowRepository()

    def list(self, owner_id: int, search: Optional[str] = None) -> List[CashFlow]:
        term = (search or "").strip() or None
        return self.repository.list(owner_id, term)

    def get_by_id(self, owner_id: int, cash_flow_id) -> Optional[CashFlow]:
        key = _normalize_id(cash_flow_id)
        if key is None:
            return None
        return self.repository.get(owner_id, key)

    def create(self, owner_id: int, type, source, label, amount, description=None) -> CashFlow:
        try:
            draft = build_draft(type, source, label, amount, description)
        except ValidationError as exc:
            logger.warning("Rejected cash flow for user %s: %s", owner_id, exc.message)
            raise
        cash_flow = self.repository.add(owner_id, draft)
        logger.info("Created cash flow %s for user %s", cash_flow.id, owner_id)
        return cash_flow

    def update(self, owner_id: int, cash_flow_id, type, source, label, amount, description=None) -> Optional[CashFlow]:
        key = _normalize_id(cash_flow_id)
        try:
            draft = build_draft(type, source, label, amount, description)
        except ValidationError as exc:
            logger.warning("Rejected update of cash flow %s for user %s: %s", key, owner_id, exc.message)
            raise
        cash_flow = self.repository.update(owner_id, key, draft) if key else None
        if cash_flow is None:
            logger.debug("Cash flow %s not found for user %s (update)", key, owner_id)
            return None
        logger.info("Updated cash flow %s for user %s", cash_flow.id, owner_id)
        return cash_flow

    def delete(self, owner_id: int, cash_flow_id) -> bool:
        key = _normalize_id(cash_flow_id)
        deleted = self.repository.delete(owner_id, key) if key else False
        if deleted:
            logger.info("Deleted cash flow %s for user %s", key, owner_id)
        else:
            logger.debug("Cash flow %s not found for user %s (delete)", key, owner_id)
        return deleted
