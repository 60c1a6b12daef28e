"""Exception types raised by the cash flow service and its collaborators."""

from __future__ import annotations

from typing import Any, Dict, Optional


class CashFlowError(Exception):
    """Base exception for all cash flow tracker errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(CashFlowError):
    """Raised when a cash flow cannot be saved as submitted."""


class ConfigurationError(CashFlowError):
    """Raised when configuration is invalid."""
