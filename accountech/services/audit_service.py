"""
Audit Trail Service
====================
Records voucher writes for companies with the audit trail enabled.

FEATURES:
---------
1. Log INSERT, UPDATE, DELETE actions on vouchers
2. Store old/new record data as JSON
3. Failures are logged and never block the write being audited

USAGE:
------
audit = AuditService(database_service)

await audit.log_insert("vouchers", voucher_id, "SA0001", new_data, company_id)
await audit.log_update("vouchers", voucher_id, "SA0001", old_data, new_data, company_id)
await audit.log_delete("vouchers", voucher_id, "SA0001", old_data, company_id)
"""

import json
import sqlite3
from typing import Any, Dict, List, Optional

from .database_service import DatabaseService, database_service
from ..utils.logger import logger


class AuditService:
    """Service for audit trail logging"""

    def __init__(self, database: Optional[DatabaseService] = None):
        self.database = database or database_service

    async def log_insert(
        self,
        table_name: str,
        record_id: str,
        record_name: str,
        new_data: Dict[str, Any],
        company_id: str
    ) -> None:
        """Log an INSERT action"""
        await self._log_action("INSERT", table_name, record_id, record_name, None, new_data, company_id)

    async def log_update(
        self,
        table_name: str,
        record_id: str,
        record_name: str,
        old_data: Dict[str, Any],
        new_data: Dict[str, Any],
        company_id: str
    ) -> None:
        """Log an UPDATE action with old and new values"""
        changed_fields = [
            key for key, new_val in new_data.items()
            if old_data.get(key) != new_val
        ]
        await self._log_action(
            "UPDATE", table_name, record_id, record_name,
            old_data, new_data, company_id, changed_fields
        )

    async def log_delete(
        self,
        table_name: str,
        record_id: str,
        record_name: str,
        old_data: Dict[str, Any],
        company_id: str
    ) -> None:
        """Log a DELETE action keeping the full record"""
        await self._log_action("DELETE", table_name, record_id, record_name, old_data, None, company_id)

    async def _log_action(
        self,
        action: str,
        table_name: str,
        record_id: str,
        record_name: str,
        old_data: Optional[Dict],
        new_data: Optional[Dict],
        company_id: str,
        changed_fields: Optional[List[str]] = None
    ) -> None:
        """Internal method to log an action to audit_log table"""
        try:
            query = """
                INSERT INTO audit_log
                (company_id, table_name, record_id, record_name, action,
                 old_data, new_data, changed_fields)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """
            params = (
                company_id,
                table_name,
                record_id,
                record_name,
                action,
                json.dumps(old_data, default=str) if old_data else None,
                json.dumps(new_data, default=str) if new_data else None,
                json.dumps(changed_fields) if changed_fields else None
            )

            await self.database.execute(query, params)

        except sqlite3.Error as e:
            logger.error(f"Failed to log audit action: {e}")

    async def get_audit_history(
        self,
        company_id: Optional[str] = None,
        table_name: Optional[str] = None,
        record_id: Optional[str] = None,
        action: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Dict]:
        """Get audit history with filters, newest first"""
        query = "SELECT * FROM audit_log WHERE 1=1"
        params = []

        if company_id:
            query += " AND company_id = ?"
            params.append(company_id)

        if table_name:
            query += " AND table_name = ?"
            params.append(table_name)

        if record_id:
            query += " AND record_id = ?"
            params.append(record_id)

        if action:
            query += " AND action = ?"
            params.append(action.upper())

        query += " ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        records = await self.database.fetch_all(query, tuple(params))
        for record in records:
            for field in ("old_data", "new_data", "changed_fields"):
                if record.get(field):
                    record[field] = json.loads(record[field])
        return records


# Singleton instance
audit_service = AuditService()
