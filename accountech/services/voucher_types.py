"""
Voucher Type Policy
===================
Static descriptors for the eight voucher types and the rules derived
from them (optional sections, entry shape, default mode, minimum rows).

| code        | party | stock | tax | entries            |
|-------------|-------|-------|-----|--------------------|
| sales       | yes   | yes   | yes | single amount      |
| purchase    | yes   | yes   | yes | single amount      |
| receipt     | no    | no    | no  | single amount      |
| payment     | no    | no    | no  | single amount      |
| journal     | no    | no    | no  | debit/credit pair  |
| contra      | no    | no    | no  | single amount      |
| debit_note  | yes   | yes   | yes | single amount      |
| credit_note | yes   | yes   | yes | single amount      |
"""

from typing import Dict, List

from ..models.voucher import VoucherTypeDescriptor
from ..utils.constants import (
    CASH_BANK_TYPES,
    ITEM_INVOICE_TYPES,
    VOUCHER_TYPE_CODES,
    EntryKind,
    LedgerRole,
    VoucherMode,
)
from ..utils.exceptions import ConfigurationError


_LABELS = {
    "sales": "Sales Invoice",
    "purchase": "Purchase Bill",
    "receipt": "Receipt Voucher",
    "payment": "Payment Voucher",
    "journal": "Journal Entry",
    "contra": "Contra Entry",
    "debit_note": "Debit Note",
    "credit_note": "Credit Note",
}


def _build_descriptor(code: str) -> VoucherTypeDescriptor:
    trading = code in ITEM_INVOICE_TYPES
    journal = code == "journal"

    if code in CASH_BANK_TYPES:
        ledger_role = LedgerRole.CASH_BANK
    elif trading:
        ledger_role = LedgerRole.SALES_PURCHASE
    else:
        ledger_role = None

    return VoucherTypeDescriptor(
        code=code,
        label=_LABELS[code],
        has_party=trading,
        has_stock=trading,
        has_tax=trading,
        entry_kind=EntryKind.JOURNAL if journal else EntryKind.AMOUNT,
        min_entries=2 if journal else 1,
        default_mode=VoucherMode.ITEM_INVOICE if trading else VoucherMode.VOUCHER_MODE,
        ledger_role=ledger_role,
    )


VOUCHER_TYPES: Dict[str, VoucherTypeDescriptor] = {
    code: _build_descriptor(code) for code in VOUCHER_TYPE_CODES
}


def get_descriptor(code: str) -> VoucherTypeDescriptor:
    """Look up a voucher type; unknown codes are a configuration error"""
    try:
        return VOUCHER_TYPES[code]
    except KeyError:
        raise ConfigurationError(
            f"Unknown voucher type: {code!r}",
            details=f"Expected one of: {', '.join(VOUCHER_TYPE_CODES)}"
        ) from None


def default_mode(code: str) -> str:
    return get_descriptor(code).default_mode


def list_descriptors() -> List[VoucherTypeDescriptor]:
    return [VOUCHER_TYPES[code] for code in VOUCHER_TYPE_CODES]
