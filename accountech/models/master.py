"""
Master Data Models
Pydantic models for company context and directory lookups
"""

from typing import Optional
from pydantic import BaseModel


class Company(BaseModel):
    id: str
    name: str = ""
    state: str = ""
    gstin: str = ""
    currency: str = "INR"
    decimal_places: int = 2
    enable_inventory: bool = True
    enable_multi_godown: bool = False
    enable_batch_tracking: bool = False
    enable_serial_tracking: bool = False
    enable_audit_trail: bool = True
    auto_voucher_numbering: bool = True


class FinancialYear(BaseModel):
    id: str
    company_id: str
    year_start: str
    year_end: str
    is_active: bool = True


class CompanyContext(BaseModel):
    """Active company and financial year an entry session works against"""
    company: Company
    financial_year: Optional[FinancialYear] = None

    @property
    def company_id(self) -> str:
        return self.company.id

    @property
    def financial_year_id(self) -> Optional[str]:
        return self.financial_year.id if self.financial_year else None


class LedgerOption(BaseModel):
    id: str
    name: str = ""
    current_balance: float = 0.0
    group_name: str = ""
    group_type: str = ""


class StockItemOption(BaseModel):
    id: str
    name: str = ""
    rate: float = 0.0
    current_stock: float = 0.0
    hsn_code: str = ""
    unit_symbol: str = ""
    group_name: str = ""


class GodownOption(BaseModel):
    id: str
    name: str = ""
    address: str = ""
