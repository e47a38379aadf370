"""
Voucher Models
Pydantic models for voucher drafts, entries and derived totals
"""

from datetime import date
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field


class VoucherTypeDescriptor(BaseModel):
    code: str
    label: str
    has_party: bool
    has_stock: bool
    has_tax: bool
    entry_kind: str
    min_entries: int
    default_mode: str
    ledger_role: Optional[str] = None

    @property
    def mode_locked(self) -> bool:
        """Mode cannot be changed by the user when the type carries no stock"""
        return not self.has_stock


class JournalLine(BaseModel):
    kind: Literal["journal"] = "journal"
    ledger_id: str = ""
    debit_amount: float = 0.0
    credit_amount: float = 0.0
    narration: str = ""

    @property
    def debit(self) -> float:
        return self.debit_amount

    @property
    def credit(self) -> float:
        return self.credit_amount


class AmountLine(BaseModel):
    kind: Literal["amount"] = "amount"
    ledger_id: str = ""
    amount: float = 0.0
    narration: str = ""

    @property
    def debit(self) -> float:
        return self.amount

    @property
    def credit(self) -> float:
        return self.amount


AccountingEntry = Annotated[Union[JournalLine, AmountLine], Field(discriminator="kind")]


class StockEntry(BaseModel):
    stock_item_id: str = ""
    quantity: float = 0.0
    rate: float = 0.0
    amount: float = 0.0
    godown_id: Optional[str] = None
    batch_number: Optional[str] = None
    serial_number: Optional[str] = None


class VoucherDraft(BaseModel):
    voucher_type: str
    voucher_number: str = ""
    number_is_manual: bool = False
    date: str = Field(default_factory=lambda: date.today().isoformat())
    reference: str = ""
    narration: str = ""
    party_ledger_id: Optional[str] = None
    party_name: str = ""
    sales_ledger_id: Optional[str] = None
    cash_bank_ledger_id: Optional[str] = None
    place_of_supply: Optional[str] = None
    mode: str
    entries: List[AccountingEntry] = []
    stock_entries: List[StockEntry] = []


class TaxComponent(BaseModel):
    label: str
    rate: float
    amount: float


class TaxBreakdown(BaseModel):
    components: List[TaxComponent]
    total_tax: float
    grand_total: float


class VoucherTotals(BaseModel):
    total_debit: float = 0.0
    total_credit: float = 0.0
    difference: float = 0.0
    is_balanced: bool = True
    stock_total: float = 0.0
    tax: Optional[TaxBreakdown] = None
    total_amount: float = 0.0


class RecentVoucher(BaseModel):
    id: str
    voucher_number: str
    voucher_type: str
    date: str
    total_amount: float = 0.0


class NewVoucher(BaseModel):
    """Finalized draft handed to the voucher store"""
    company_id: str
    financial_year_id: Optional[str] = None
    voucher_type: str
    voucher_number: str
    date: str
    reference: str = ""
    narration: str = ""
    party_ledger_id: Optional[str] = None
    party_name: str = ""
    sales_ledger_id: Optional[str] = None
    cash_bank_ledger_id: Optional[str] = None
    place_of_supply: Optional[str] = None
    mode: str
    total_amount: float = 0.0
    entries: List[AccountingEntry] = []
    stock_entries: List[StockEntry] = []
