"""
Request Models
Pydantic models for API request bodies
"""

from typing import Any, Optional
from pydantic import BaseModel


class OpenDraftRequest(BaseModel):
    company_id: Optional[str] = None
    financial_year_id: Optional[str] = None
    voucher_type: str = "sales"


class VoucherTypeRequest(BaseModel):
    voucher_type: str


class ModeRequest(BaseModel):
    mode: str


class FieldUpdate(BaseModel):
    """Single field edit on the header, an entry or a stock entry"""
    field: str
    value: Any = None
