"""
Voucher Store
=============
Persistence for finalized vouchers plus the reads the entry screen needs.

OPERATIONS:
----------
create_voucher           - Insert header, accounting entries and stock entries atomically
get_last_voucher_number  - Highest number used for a (company, voucher type)
list_recent_vouchers     - Most recently created vouchers for the history panel
get_voucher / list_vouchers
post_voucher / cancel_voucher / delete_voucher

NUMBERING:
---------
(company_id, voucher_type, voucher_number) is unique. A conflicting insert
raises DuplicateVoucherNumberError so the caller can pick the next number
and retry instead of relying on a client-side snapshot.
"""

import sqlite3
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from .base import BaseRepository
from ..models.voucher import JournalLine, NewVoucher, RecentVoucher
from ..services.audit_service import AuditService
from ..services.database_service import DatabaseService
from ..utils.constants import VoucherStatus
from ..utils.exceptions import CollaboratorError, DuplicateVoucherNumberError, NotFoundError, ValidationError
from ..utils.logger import logger


class VoucherStore(BaseRepository):
    """Append-only voucher persistence"""

    name = "Voucher store"

    def __init__(self, database: Optional[DatabaseService] = None, audit: Optional[AuditService] = None):
        super().__init__(database)
        self.audit = audit or AuditService(self.database)

    async def get_last_voucher_number(self, company_id: str, voucher_type: str) -> Optional[str]:
        """Most recent number for the pair, ordered so "SA10000" sorts after "SA9999" """
        row = await self._read_one(
            """
            SELECT voucher_number FROM vouchers
            WHERE company_id = ? AND voucher_type = ?
            ORDER BY LENGTH(voucher_number) DESC, voucher_number DESC
            LIMIT 1
            """,
            (company_id, voucher_type)
        )
        return row["voucher_number"] if row else None

    async def list_recent_vouchers(self, company_id: str, limit: int = 10) -> List[RecentVoucher]:
        """Most recently created vouchers, newest first"""
        rows = await self._read(
            """
            SELECT id, voucher_number, voucher_type, date, total_amount
            FROM vouchers
            WHERE company_id = ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT ?
            """,
            (company_id, limit)
        )
        return [RecentVoucher(**row) for row in rows]

    async def create_voucher(self, voucher: NewVoucher) -> str:
        """Persist a finalized voucher and return its id"""
        voucher_id = uuid4().hex

        try:
            async with self.database.transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO vouchers
                    (id, company_id, financial_year_id, voucher_type, voucher_number, date,
                     reference, narration, party_ledger_id, party_name, sales_ledger_id,
                     cash_bank_ledger_id, place_of_supply, mode, total_amount, status)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        voucher_id, voucher.company_id, voucher.financial_year_id,
                        voucher.voucher_type, voucher.voucher_number, voucher.date,
                        voucher.reference, voucher.narration, voucher.party_ledger_id,
                        voucher.party_name, voucher.sales_ledger_id, voucher.cash_bank_ledger_id,
                        voucher.place_of_supply, voucher.mode, voucher.total_amount,
                        VoucherStatus.DRAFT
                    )
                )

                entry_rows = []
                for line_no, entry in enumerate(voucher.entries, start=1):
                    if isinstance(entry, JournalLine):
                        debit, credit, amount = entry.debit_amount, entry.credit_amount, 0.0
                    else:
                        debit, credit, amount = 0.0, 0.0, entry.amount
                    entry_rows.append(
                        (voucher_id, line_no, entry.kind, entry.ledger_id, debit, credit, amount, entry.narration)
                    )
                if entry_rows:
                    await conn.executemany(
                        """
                        INSERT INTO voucher_entries
                        (voucher_id, line_no, entry_kind, ledger_id, debit_amount, credit_amount, amount, narration)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        entry_rows
                    )

                stock_rows = [
                    (
                        voucher_id, line_no, stock.stock_item_id, stock.quantity, stock.rate,
                        stock.amount, stock.godown_id, stock.batch_number, stock.serial_number
                    )
                    for line_no, stock in enumerate(voucher.stock_entries, start=1)
                ]
                if stock_rows:
                    await conn.executemany(
                        """
                        INSERT INTO voucher_stock_entries
                        (voucher_id, line_no, stock_item_id, quantity, rate, amount,
                         godown_id, batch_number, serial_number)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        stock_rows
                    )
        except sqlite3.IntegrityError as e:
            if "UNIQUE" in str(e) and "vouchers" in str(e):
                logger.warning(
                    f"Voucher number {voucher.voucher_number} already used for "
                    f"{voucher.voucher_type} in company {voucher.company_id}"
                )
                raise DuplicateVoucherNumberError(voucher.voucher_number) from e
            raise CollaboratorError("Failed to save voucher", details=str(e)) from e
        except sqlite3.Error as e:
            logger.error(f"Failed to save voucher {voucher.voucher_number}: {e}")
            raise CollaboratorError("Failed to save voucher", details=str(e)) from e

        logger.info(
            f"Voucher {voucher.voucher_number} ({voucher.voucher_type}) saved for company "
            f"{voucher.company_id}: {len(voucher.entries)} entries, {len(voucher.stock_entries)} stock rows"
        )

        if await self._audit_enabled(voucher.company_id):
            await self.audit.log_insert(
                "vouchers", voucher_id, voucher.voucher_number,
                voucher.model_dump(mode="json"), voucher.company_id
            )

        return voucher_id

    async def get_voucher(self, voucher_id: str) -> Dict[str, Any]:
        """Voucher header with its accounting and stock entries"""
        header = await self._read_one("SELECT * FROM vouchers WHERE id = ?", (voucher_id,))
        if not header:
            raise NotFoundError(f"Voucher not found: {voucher_id}")

        header["entries"] = await self._read(
            """
            SELECT e.line_no, e.entry_kind, e.ledger_id, COALESCE(l.name, '') AS ledger_name,
                   e.debit_amount, e.credit_amount, e.amount, e.narration
            FROM voucher_entries e
            LEFT JOIN ledgers l ON l.id = e.ledger_id
            WHERE e.voucher_id = ?
            ORDER BY e.line_no
            """,
            (voucher_id,)
        )
        header["stock_entries"] = await self._read(
            """
            SELECT s.line_no, s.stock_item_id, COALESCE(i.name, '') AS stock_item_name,
                   s.quantity, s.rate, s.amount, s.godown_id, s.batch_number, s.serial_number
            FROM voucher_stock_entries s
            LEFT JOIN stock_items i ON i.id = s.stock_item_id
            WHERE s.voucher_id = ?
            ORDER BY s.line_no
            """,
            (voucher_id,)
        )
        return header

    async def list_vouchers(
        self,
        company_id: str,
        voucher_type: Optional[str] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Dict[str, Any]:
        """Vouchers with filters, latest date first"""
        conditions = ["company_id = ?"]
        params: List[Any] = [company_id]

        if voucher_type:
            conditions.append("voucher_type = ?")
            params.append(voucher_type)
        if from_date:
            conditions.append("date >= ?")
            params.append(from_date)
        if to_date:
            conditions.append("date <= ?")
            params.append(to_date)
        if status:
            conditions.append("status = ?")
            params.append(status)

        where = " AND ".join(conditions)
        total_row = await self._read_one(f"SELECT COUNT(*) AS total FROM vouchers WHERE {where}", tuple(params))
        data = await self._read(
            f"SELECT * FROM vouchers WHERE {where} ORDER BY date DESC, created_at DESC LIMIT ? OFFSET ?",
            tuple(params + [limit, offset])
        )
        return {"total": total_row["total"] if total_row else 0, "data": data}

    async def post_voucher(self, voucher_id: str) -> Dict[str, Any]:
        """Move a draft voucher to posted"""
        return await self._change_status(
            voucher_id, VoucherStatus.POSTED, allowed_from=(VoucherStatus.DRAFT,)
        )

    async def cancel_voucher(self, voucher_id: str) -> Dict[str, Any]:
        """Mark a draft or posted voucher as cancelled"""
        return await self._change_status(
            voucher_id, VoucherStatus.CANCELLED, allowed_from=(VoucherStatus.DRAFT, VoucherStatus.POSTED)
        )

    async def delete_voucher(self, voucher_id: str) -> None:
        """Delete a voucher and its entries"""
        old = await self._read_one("SELECT * FROM vouchers WHERE id = ?", (voucher_id,))
        if not old:
            raise NotFoundError(f"Voucher not found: {voucher_id}")

        try:
            await self.database.execute("DELETE FROM vouchers WHERE id = ?", (voucher_id,))
        except sqlite3.Error as e:
            raise CollaboratorError("Failed to delete voucher", details=str(e)) from e

        logger.info(f"Voucher {old['voucher_number']} deleted")
        if await self._audit_enabled(old["company_id"]):
            await self.audit.log_delete("vouchers", voucher_id, old["voucher_number"], old, old["company_id"])

    async def _change_status(self, voucher_id: str, status: str, allowed_from: tuple) -> Dict[str, Any]:
        old = await self._read_one("SELECT * FROM vouchers WHERE id = ?", (voucher_id,))
        if not old:
            raise NotFoundError(f"Voucher not found: {voucher_id}")
        if old["status"] not in allowed_from:
            raise ValidationError(f"Cannot change voucher status from {old['status']} to {status}")

        posted_at = datetime.now().isoformat() if status == VoucherStatus.POSTED else old["posted_at"]
        try:
            await self.database.execute(
                "UPDATE vouchers SET status = ?, posted_at = ? WHERE id = ?",
                (status, posted_at, voucher_id)
            )
        except sqlite3.Error as e:
            raise CollaboratorError(f"Failed to mark voucher {status}", details=str(e)) from e

        new = dict(old, status=status, posted_at=posted_at)
        logger.info(f"Voucher {old['voucher_number']}: {old['status']} -> {status}")
        if await self._audit_enabled(old["company_id"]):
            await self.audit.log_update("vouchers", voucher_id, old["voucher_number"], old, new, old["company_id"])
        return new

    async def _audit_enabled(self, company_id: str) -> bool:
        # The write has already happened; an unreadable flag only skips the audit row
        try:
            row = await self._read_one("SELECT enable_audit_trail FROM companies WHERE id = ?", (company_id,))
        except CollaboratorError as e:
            logger.error(f"Could not read audit setting for company {company_id}: {e.details}")
            return False
        return bool(row and row["enable_audit_trail"])


# Global instance
voucher_store = VoucherStore()
