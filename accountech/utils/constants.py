"""
Constants Module
Application-wide constants
"""

# Application Info
APP_NAME = "AccounTech Voucher Service"
APP_VERSION = "1.0.0"

# Voucher type codes, in display order
VOUCHER_TYPE_CODES = [
    "sales",
    "purchase",
    "receipt",
    "payment",
    "journal",
    "contra",
    "debit_note",
    "credit_note"
]

# Types that open in item-invoice mode
ITEM_INVOICE_TYPES = ["sales", "purchase", "debit_note", "credit_note"]

# Types whose counter ledger is a cash/bank account
CASH_BANK_TYPES = ["receipt", "payment"]

# Database Tables - Master
MASTER_TABLES = [
    "companies",
    "financial_years",
    "ledger_groups",
    "ledgers",
    "stock_groups",
    "units",
    "stock_items",
    "godowns"
]

# Database Tables - Transaction
TRANSACTION_TABLES = [
    "vouchers",
    "voucher_entries",
    "voucher_stock_entries",
    "audit_log"
]

# All Tables
ALL_TABLES = MASTER_TABLES + TRANSACTION_TABLES


class VoucherMode:
    ITEM_INVOICE = "item_invoice"
    VOUCHER_MODE = "voucher_mode"


class EntryKind:
    JOURNAL = "journal"
    AMOUNT = "amount"


class LedgerRole:
    CASH_BANK = "cash_bank"
    SALES_PURCHASE = "sales_purchase"


# Error Codes
class ErrorCode:
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    BALANCE_MISMATCH = "BALANCE_MISMATCH"
    MISSING_CONTEXT = "MISSING_CONTEXT"
    COLLABORATOR_ERROR = "COLLABORATOR_ERROR"
    DUPLICATE_VOUCHER_NUMBER = "DUPLICATE_VOUCHER_NUMBER"
    INVALID_EDIT = "INVALID_EDIT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# Draft lifecycle
class DraftState:
    EDITING = "editing"
    VALIDATING = "validating"
    SAVED = "saved"


# Outcome of a save attempt
class SaveStatus:
    SAVED = "saved"
    REJECTED = "rejected"
    FAILED = "failed"


# Persisted voucher status
class VoucherStatus:
    DRAFT = "draft"
    POSTED = "posted"
    CANCELLED = "cancelled"


class NotificationLevel:
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


# Health Status
class HealthStatus:
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
