"""
Voucher Engine
==============
Owns one voucher draft for an entry session: header, accounting entries
and optional stock entries, the balancing rules for each voucher type,
derived totals and tax estimate, numbering and the save workflow.

LIFECYCLE:
---------
editing -> validating -> saved    (draft reset to a fresh default)
                      -> rejected (draft untouched, back to editing)

Every mutating operation finishes with recompute(), which returns the
current VoucherTotals.

COLLABORATORS:
-------------
- LedgerDirectory: ledgers, stock items, godowns (reads)
- VoucherStore: last number, recent vouchers (reads), create (write)

Reads run as independent tasks and are cancelled when the voucher type
changes or the session closes. Saves are serialized by a lock and are
never cancelled.
"""

import asyncio
import math
from datetime import date
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from ..config import config
from ..models.master import CompanyContext, GodownOption, LedgerOption, StockItemOption
from ..models.response import Notification, SaveResult
from ..models.voucher import (
    AmountLine,
    JournalLine,
    NewVoucher,
    RecentVoucher,
    StockEntry,
    VoucherDraft,
    VoucherTotals,
    VoucherTypeDescriptor,
)
from ..repositories.ledger_directory import LedgerDirectory
from ..repositories.voucher_store import VoucherStore
from ..utils.constants import (
    DraftState,
    EntryKind,
    LedgerRole,
    NotificationLevel,
    SaveStatus,
    VoucherMode,
)
from ..utils.exceptions import (
    AccounTechError,
    BalanceError,
    CollaboratorError,
    DraftEditError,
    DuplicateVoucherNumberError,
    MissingContextError,
    ValidationError,
)
from ..utils.helpers import parse_amount, round_money
from ..utils.logger import logger
from .numbering_service import NumberingService
from .tax_policy import TaxPolicy
from .voucher_types import get_descriptor


JOURNAL_FIELDS = {"ledger_id", "debit_amount", "credit_amount", "narration"}
AMOUNT_FIELDS = {"ledger_id", "amount", "narration"}
STOCK_FIELDS = {"stock_item_id", "quantity", "rate", "godown_id", "batch_number", "serial_number"}
HEADER_FIELDS = {
    "voucher_number", "date", "reference", "narration", "party_ledger_id", "party_name",
    "sales_ledger_id", "cash_bank_ledger_id", "place_of_supply"
}
MAX_NOTIFICATIONS = 50


class VoucherEngine:
    """In-memory voucher draft with balancing, totals and save"""

    def __init__(
        self,
        context: Optional[CompanyContext],
        voucher_type: str = "sales",
        directory: Optional[LedgerDirectory] = None,
        store: Optional[VoucherStore] = None,
        numbering: Optional[NumberingService] = None,
        tax_policy: Optional[TaxPolicy] = None,
        balance_tolerance: Optional[float] = None,
        recent_limit: Optional[int] = None,
        max_number_retries: Optional[int] = None
    ):
        self.context = context
        self.directory = directory or LedgerDirectory()
        self.store = store or VoucherStore()
        self.numbering = numbering or NumberingService(self.store)
        self.tax_policy = tax_policy or TaxPolicy()
        self.balance_tolerance = balance_tolerance if balance_tolerance is not None else config.voucher.balance_tolerance
        self.recent_limit = recent_limit or config.voucher.recent_limit
        self.max_number_retries = max_number_retries if max_number_retries is not None else config.voucher.max_number_retries

        self.descriptor: VoucherTypeDescriptor = get_descriptor(voucher_type)
        self.draft: VoucherDraft = self._fresh_draft(self.descriptor)
        self.state = DraftState.EDITING
        self.totals = VoucherTotals()
        self.last_result: Optional[SaveResult] = None
        self.notifications: List[Notification] = []

        self.ledgers: List[LedgerOption] = []
        self.stock_items: List[StockItemOption] = []
        self.godowns: List[GodownOption] = []
        self.recent_vouchers: List[RecentVoucher] = []

        self._read_tasks: Set[asyncio.Task] = set()
        self._save_lock = asyncio.Lock()

        self.recompute()

    # ------------------------------------------------------------------
    # Context
    # ------------------------------------------------------------------

    @property
    def company_id(self) -> Optional[str]:
        return self.context.company_id if self.context else None

    # ------------------------------------------------------------------
    # Draft initialization
    # ------------------------------------------------------------------

    def _new_entry(self):
        if self.descriptor.entry_kind == EntryKind.JOURNAL:
            return JournalLine()
        return AmountLine()

    def _fresh_draft(self, descriptor: VoucherTypeDescriptor, mode: Optional[str] = None) -> VoucherDraft:
        entry_cls = JournalLine if descriptor.entry_kind == EntryKind.JOURNAL else AmountLine
        if descriptor.mode_locked or mode is None:
            mode = descriptor.default_mode
        return VoucherDraft(
            voucher_type=descriptor.code,
            mode=mode,
            entries=[entry_cls() for _ in range(descriptor.min_entries)],
            stock_entries=[]
        )

    def change_voucher_type(self, voucher_type: str) -> VoucherTotals:
        """Reseed the draft for another voucher type (number is regenerated separately)"""
        descriptor = get_descriptor(voucher_type)
        self.abandon_reads()
        self.descriptor = descriptor
        self.draft = self._fresh_draft(descriptor)
        self.state = DraftState.EDITING
        logger.debug(f"Draft switched to {voucher_type} ({len(self.draft.entries)} seeded entries)")
        return self.recompute()

    async def select_voucher_type(self, voucher_type: str) -> VoucherTotals:
        """Change voucher type and regenerate the voucher number"""
        totals = self.change_voucher_type(voucher_type)
        await self.refresh_number()
        return totals

    def reset(self) -> VoucherTotals:
        """Replace the draft with a fresh default for the same type and mode"""
        self.draft = self._fresh_draft(self.descriptor, mode=self.draft.mode)
        self.state = DraftState.EDITING
        return self.recompute()

    async def cancel(self) -> VoucherTotals:
        """Discard the current draft and start a new one"""
        totals = self.reset()
        await self.refresh_number()
        logger.info(f"Draft cancelled for {self.descriptor.code}")
        return totals

    # ------------------------------------------------------------------
    # Accounting entries
    # ------------------------------------------------------------------

    def add_entry(self) -> VoucherTotals:
        self.draft.entries.append(self._new_entry())
        return self.recompute()

    def remove_entry(self, index: int) -> VoucherTotals:
        self._check_index(index, len(self.draft.entries), "entry")
        if len(self.draft.entries) <= self.descriptor.min_entries:
            raise DraftEditError(
                f"A {self.descriptor.label} needs at least {self.descriptor.min_entries} "
                f"accounting {'entry' if self.descriptor.min_entries == 1 else 'entries'}"
            )
        del self.draft.entries[index]
        return self.recompute()

    def update_entry(self, index: int, field: str, value: Any) -> VoucherTotals:
        self._check_index(index, len(self.draft.entries), "entry")
        entry = self.draft.entries[index]

        allowed = JOURNAL_FIELDS if isinstance(entry, JournalLine) else AMOUNT_FIELDS
        if field not in allowed:
            raise DraftEditError(
                f"Field {field!r} cannot be set on a {self.descriptor.label} entry",
                details=f"Allowed fields: {', '.join(sorted(allowed))}"
            )

        if field in ("debit_amount", "credit_amount", "amount"):
            value = self._coerce_amount(field, value)
        else:
            value = self._coerce_text(field, value)

        update = {field: value}
        # A journal row is either a debit or a credit, never both
        if isinstance(entry, JournalLine) and value and field == "debit_amount":
            update["credit_amount"] = 0.0
        elif isinstance(entry, JournalLine) and value and field == "credit_amount":
            update["debit_amount"] = 0.0

        self.draft.entries[index] = entry.model_copy(update=update)
        return self.recompute()

    # ------------------------------------------------------------------
    # Stock entries
    # ------------------------------------------------------------------

    @property
    def stock_enabled(self) -> bool:
        return self.descriptor.has_stock and self.draft.mode == VoucherMode.ITEM_INVOICE

    def add_stock_entry(self) -> VoucherTotals:
        if not self.stock_enabled:
            raise DraftEditError(f"Stock items are not available for a {self.descriptor.label} in {self.draft.mode}")
        self.draft.stock_entries.append(StockEntry())
        return self.recompute()

    def remove_stock_entry(self, index: int) -> VoucherTotals:
        self._check_index(index, len(self.draft.stock_entries), "stock entry")
        del self.draft.stock_entries[index]
        return self.recompute()

    def update_stock_entry(self, index: int, field: str, value: Any) -> VoucherTotals:
        self._check_index(index, len(self.draft.stock_entries), "stock entry")
        entry = self.draft.stock_entries[index]

        if field == "amount":
            raise DraftEditError("Stock amount is calculated from quantity and rate")
        if field not in STOCK_FIELDS:
            raise DraftEditError(
                f"Unknown stock entry field: {field!r}",
                details=f"Allowed fields: {', '.join(sorted(STOCK_FIELDS))}"
            )

        company = self.context.company if self.context else None
        if field == "godown_id" and not (company and company.enable_multi_godown):
            raise DraftEditError("Godown selection requires multi-godown to be enabled for the company")
        if field == "batch_number" and not (company and company.enable_batch_tracking):
            raise DraftEditError("Batch numbers require batch tracking to be enabled for the company")
        if field == "serial_number" and not (company and company.enable_serial_tracking):
            raise DraftEditError("Serial numbers require serial tracking to be enabled for the company")

        if field in ("quantity", "rate"):
            value = self._coerce_amount(field, value)
            update = {field: value}
            quantity = value if field == "quantity" else entry.quantity
            rate = value if field == "rate" else entry.rate
            update["amount"] = quantity * rate
        elif field == "stock_item_id":
            update = {field: self._coerce_text(field, value)}
        else:
            update = {field: self._coerce_text(field, value) or None}

        self.draft.stock_entries[index] = entry.model_copy(update=update)
        return self.recompute()

    # ------------------------------------------------------------------
    # Header and mode
    # ------------------------------------------------------------------

    def update_header(self, field: str, value: Any) -> VoucherTotals:
        if field not in HEADER_FIELDS:
            raise DraftEditError(
                f"Unknown voucher field: {field!r}",
                details=f"Allowed fields: {', '.join(sorted(HEADER_FIELDS))}"
            )

        descriptor = self.descriptor
        if field in ("party_ledger_id", "party_name") and not descriptor.has_party:
            raise DraftEditError(f"A {descriptor.label} has no party details")
        if field == "sales_ledger_id" and descriptor.ledger_role != LedgerRole.SALES_PURCHASE:
            raise DraftEditError(f"A {descriptor.label} has no sales/purchase ledger")
        if field == "cash_bank_ledger_id" and descriptor.ledger_role != LedgerRole.CASH_BANK:
            raise DraftEditError(f"A {descriptor.label} has no cash/bank ledger")
        if field == "place_of_supply" and not descriptor.has_stock:
            raise DraftEditError(f"Place of supply does not apply to a {descriptor.label}")

        value = self._coerce_text(field, value).strip()

        if field == "date":
            try:
                value = date.fromisoformat(value).isoformat()
            except ValueError:
                raise DraftEditError(f"Invalid date: {value!r}", details="Expected YYYY-MM-DD") from None
            self.draft.date = value
        elif field == "voucher_number":
            self.draft.voucher_number = value
            self.draft.number_is_manual = bool(value)
        elif field in ("party_ledger_id", "sales_ledger_id", "cash_bank_ledger_id", "place_of_supply"):
            setattr(self.draft, field, value or None)
        else:
            setattr(self.draft, field, value)

        return self.recompute()

    def set_mode(self, mode: str) -> VoucherTotals:
        if mode not in (VoucherMode.ITEM_INVOICE, VoucherMode.VOUCHER_MODE):
            raise DraftEditError(f"Unknown entry mode: {mode!r}")
        if self.descriptor.mode_locked and mode != self.draft.mode:
            raise DraftEditError(f"Entry mode cannot be changed for a {self.descriptor.label}")

        self.draft.mode = mode
        if mode == VoucherMode.VOUCHER_MODE:
            self.draft.stock_entries = []
        return self.recompute()

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------

    def recompute(self) -> VoucherTotals:
        """Recalculate totals, balance status and the tax estimate"""
        entries = self.draft.entries

        if self.descriptor.entry_kind == EntryKind.JOURNAL:
            total_debit = sum(entry.debit for entry in entries)
            total_credit = sum(entry.credit for entry in entries)
            difference = abs(total_debit - total_credit)
            is_balanced = difference < self.balance_tolerance
            stock_total = 0.0
        else:
            # A single-amount entry counts on both sides
            total_debit = total_credit = sum(entry.amount for entry in entries)
            difference = 0.0
            is_balanced = True
            stock_total = sum(stock.amount for stock in self.draft.stock_entries)

        tax = self.tax_policy.estimate(stock_total) if self.descriptor.has_tax else None

        if tax:
            total_amount = tax.grand_total
        elif stock_total > 0:
            total_amount = stock_total
        else:
            total_amount = total_debit

        self.totals = VoucherTotals(
            total_debit=total_debit,
            total_credit=total_credit,
            difference=round_money(difference),
            is_balanced=is_balanced,
            stock_total=stock_total,
            tax=tax,
            total_amount=round_money(total_amount)
        )
        return self.totals

    # ------------------------------------------------------------------
    # Numbering
    # ------------------------------------------------------------------

    async def refresh_number(self) -> str:
        """
        Fill in the next voucher number. A failed lookup leaves the number
        blank for manual entry.
        """
        draft = self.draft
        voucher_type = draft.voucher_type

        if not self.context:
            self._notify(NotificationLevel.WARNING, MissingContextError().message, MissingContextError.code)
            draft.voucher_number = ""
            return ""
        if not self.context.company.auto_voucher_numbering:
            draft.voucher_number = ""
            return ""

        try:
            number = await self.numbering.generate(self.company_id, voucher_type)
        except CollaboratorError as e:
            logger.error(f"Error generating voucher number for {voucher_type}: {e.details or e.message}")
            self._notify(NotificationLevel.WARNING, "Could not generate voucher number, please enter it manually", e.code)
            number = ""

        # The draft may have been replaced while the lookup was pending
        if self.draft is draft and not draft.number_is_manual:
            draft.voucher_number = number
        return number

    # ------------------------------------------------------------------
    # Reference data reads
    # ------------------------------------------------------------------

    async def _guarded_read(self, label: str, read: Callable[[str], Awaitable[list]]) -> list:
        if not self.context:
            self._notify(NotificationLevel.WARNING, MissingContextError().message, MissingContextError.code)
            return []
        try:
            return await read(self.company_id)
        except CollaboratorError as e:
            logger.error(f"Error fetching {label}: {e.details or e.message}")
            self._notify(NotificationLevel.ERROR, f"Failed to fetch {label}", e.code)
            return []

    async def load_ledgers(self) -> List[LedgerOption]:
        self.ledgers = await self._guarded_read("ledgers", self.directory.list_ledgers)
        return self.ledgers

    async def load_stock_items(self) -> List[StockItemOption]:
        self.stock_items = await self._guarded_read("stock items", self.directory.list_stock_items)
        return self.stock_items

    async def load_godowns(self) -> List[GodownOption]:
        if self.context and self.context.company.enable_multi_godown:
            self.godowns = await self._guarded_read("godowns", self.directory.list_godowns)
        else:
            self.godowns = []
        return self.godowns

    async def load_recent_vouchers(self) -> List[RecentVoucher]:
        self.recent_vouchers = await self._guarded_read(
            "recent vouchers",
            lambda company_id: self.store.list_recent_vouchers(company_id, self.recent_limit)
        )
        return self.recent_vouchers

    def start_reference_reads(self) -> List[asyncio.Task]:
        """Launch the independent reads; they may complete in any order"""
        tasks = [
            asyncio.create_task(self.load_ledgers()),
            asyncio.create_task(self.load_stock_items()),
            asyncio.create_task(self.load_godowns()),
            asyncio.create_task(self.load_recent_vouchers()),
        ]
        for task in tasks:
            self._read_tasks.add(task)
            task.add_done_callback(self._read_tasks.discard)
        return tasks

    async def refresh_reference_data(self) -> Dict[str, list]:
        """Run all reads and wait for them; abandoned reads keep previous values"""
        tasks = self.start_reference_reads()
        await asyncio.gather(*tasks, return_exceptions=True)
        return self.reference_data()

    def abandon_reads(self) -> int:
        """Cancel reads still in flight, returning how many were cancelled"""
        pending = [task for task in self._read_tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            logger.debug(f"Abandoned {len(pending)} in-flight reads")
        return len(pending)

    def reference_data(self) -> Dict[str, list]:
        return {
            "ledgers": [ledger.model_dump() for ledger in self.ledgers],
            "stock_items": [item.model_dump() for item in self.stock_items],
            "godowns": [godown.model_dump() for godown in self.godowns],
            "recent_vouchers": [voucher.model_dump() for voucher in self.recent_vouchers],
        }

    def close(self) -> None:
        """Leave the entry view: pending reads are dropped, a running save is not"""
        self.abandon_reads()

    # ------------------------------------------------------------------
    # Validation & save
    # ------------------------------------------------------------------

    def validate(self, totals: Optional[VoucherTotals] = None) -> None:
        """Raise the first rule the draft breaks"""
        totals = totals or self.recompute()

        if self.descriptor.entry_kind == EntryKind.JOURNAL and not totals.is_balanced:
            raise BalanceError(totals.difference)
        if not self.context:
            raise MissingContextError()
        if not self.draft.voucher_number:
            raise ValidationError("Voucher number is required")

    async def save(self) -> SaveResult:
        """
        Validate and persist the draft. Validation and store failures are
        returned as a SaveResult and recorded as notifications; the draft
        is only reset after a successful write.
        """
        async with self._save_lock:
            totals = self.recompute()
            self.state = DraftState.VALIDATING

            try:
                self.validate(totals)
            except (BalanceError, MissingContextError, ValidationError) as e:
                return self._reject(e, totals)

            draft = self.draft
            descriptor = self.descriptor
            snapshot = draft.model_copy(deep=True)
            retries = 0

            while True:
                try:
                    voucher_id = await self.store.create_voucher(self._build_voucher(snapshot, totals, descriptor))
                    break
                except DuplicateVoucherNumberError as e:
                    if snapshot.number_is_manual or retries >= self.max_number_retries:
                        return self._fail(e, totals, snapshot.voucher_number)
                    retries += 1
                    try:
                        snapshot.voucher_number = await self.numbering.generate(self.company_id, snapshot.voucher_type)
                    except CollaboratorError as lookup_error:
                        return self._fail(lookup_error, totals, snapshot.voucher_number)
                    logger.info(f"Retrying save with voucher number {snapshot.voucher_number} (attempt {retries + 1})")
                    if self.draft is draft:
                        draft.voucher_number = snapshot.voucher_number
                except CollaboratorError as e:
                    return self._fail(e, totals, snapshot.voucher_number)

            self.state = DraftState.SAVED
            result = SaveResult(
                status=SaveStatus.SAVED,
                voucher_id=voucher_id,
                voucher_number=snapshot.voucher_number,
                message="Voucher saved successfully!",
                totals=totals
            )
            self.last_result = result
            self._notify(NotificationLevel.SUCCESS, result.message)
            logger.info(f"Voucher {snapshot.voucher_number} saved with id {voucher_id}")

            if self.draft is draft:
                self.reset()
            await self.refresh_number()
            await self.load_recent_vouchers()
            return result

    def _reject(self, error: AccounTechError, totals: VoucherTotals) -> SaveResult:
        self.state = DraftState.EDITING
        result = SaveResult(
            status=SaveStatus.REJECTED,
            voucher_number=self.draft.voucher_number,
            error_code=error.code,
            message=error.message,
            difference=getattr(error, "difference", None),
            totals=totals
        )
        self.last_result = result
        self._notify(NotificationLevel.ERROR, error.message, error.code)
        logger.warning(f"Save rejected for {self.descriptor.code} voucher: {error.message}")
        return result

    def _fail(self, error: CollaboratorError, totals: VoucherTotals, voucher_number: str) -> SaveResult:
        self.state = DraftState.EDITING
        message = error.message if isinstance(error, DuplicateVoucherNumberError) else "Failed to save voucher"
        result = SaveResult(
            status=SaveStatus.FAILED,
            voucher_number=voucher_number,
            error_code=error.code,
            message=message,
            totals=totals
        )
        self.last_result = result
        self._notify(NotificationLevel.ERROR, message, error.code)
        logger.error(f"Error saving voucher {voucher_number}: {error.details or error.message}")
        return result

    def _build_voucher(self, draft: VoucherDraft, totals: VoucherTotals, descriptor: VoucherTypeDescriptor) -> NewVoucher:
        """Finalized voucher: blank rows are dropped, inapplicable fields cleared"""
        entries = [
            entry for entry in draft.entries
            if entry.ledger_id and (entry.debit > 0 or entry.credit > 0)
        ]
        stock_entries = []
        if descriptor.has_stock and draft.mode == VoucherMode.ITEM_INVOICE:
            stock_entries = [stock for stock in draft.stock_entries if stock.stock_item_id]

        return NewVoucher(
            company_id=self.context.company_id,
            financial_year_id=self.context.financial_year_id,
            voucher_type=draft.voucher_type,
            voucher_number=draft.voucher_number,
            date=draft.date,
            reference=draft.reference,
            narration=draft.narration,
            party_ledger_id=draft.party_ledger_id if descriptor.has_party else None,
            party_name=draft.party_name if descriptor.has_party else "",
            sales_ledger_id=draft.sales_ledger_id if descriptor.ledger_role == LedgerRole.SALES_PURCHASE else None,
            cash_bank_ledger_id=draft.cash_bank_ledger_id if descriptor.ledger_role == LedgerRole.CASH_BANK else None,
            place_of_supply=draft.place_of_supply if descriptor.has_stock else None,
            mode=draft.mode,
            total_amount=totals.total_amount,
            entries=entries,
            stock_entries=stock_entries
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_index(self, index: int, length: int, label: str) -> None:
        if not 0 <= index < length:
            raise DraftEditError(f"No {label} at position {index}")

    def _coerce_text(self, field: str, value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, (str, int, float)):
            raise DraftEditError(f"{field} must be text, got {type(value).__name__}")
        return str(value)

    def _coerce_amount(self, field: str, value: Any) -> float:
        try:
            amount = parse_amount(value)
        except (TypeError, ValueError):
            raise DraftEditError(f"{field} must be a number, got {value!r}") from None
        if not math.isfinite(amount):
            raise DraftEditError(f"{field} must be a finite number")
        if amount < 0:
            raise DraftEditError(f"{field} cannot be negative")
        return amount

    def _notify(self, level: str, message: str, code: Optional[str] = None) -> None:
        self.notifications.append(Notification(level=level, message=message, code=code))
        del self.notifications[:-MAX_NOTIFICATIONS]

    def drain_notifications(self) -> List[Notification]:
        notifications, self.notifications = self.notifications, []
        return notifications

    def snapshot(self) -> Dict[str, Any]:
        """Serializable view of the session for the API"""
        return {
            "voucher_type": self.descriptor.model_dump(),
            "state": self.state,
            "draft": self.draft.model_dump(),
            "totals": self.totals.model_dump(),
            "stock_enabled": self.stock_enabled,
            "company_id": self.company_id,
            "last_result": self.last_result.model_dump() if self.last_result else None,
            "notifications": [n.model_dump() for n in self.notifications],
        }
