"""
Response Models
Pydantic models for API responses and engine outcomes
"""

from typing import Optional
from pydantic import BaseModel, Field

from ..utils.helpers import get_current_timestamp
from .voucher import VoucherTotals


class Notification(BaseModel):
    """User-facing message raised by the engine (the UI shows it as a toast)"""
    level: str
    message: str
    code: Optional[str] = None
    timestamp: str = Field(default_factory=get_current_timestamp)


class SaveResult(BaseModel):
    status: str
    voucher_id: Optional[str] = None
    voucher_number: Optional[str] = None
    error_code: Optional[str] = None
    message: str = ""
    difference: Optional[float] = None
    totals: Optional[VoucherTotals] = None
