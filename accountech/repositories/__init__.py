# Repositories Package
# Data Access Layer

from .ledger_directory import LedgerDirectory
from .voucher_store import VoucherStore
from .company_repository import CompanyRepository

__all__ = [
    "LedgerDirectory",
    "VoucherStore",
    "CompanyRepository"
]
