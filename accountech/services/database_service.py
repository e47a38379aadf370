"""
Database Service Module
Handles SQLite database operations
"""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

import aiosqlite

from ..config import config
from ..utils.logger import logger
from ..utils.decorators import timed
from ..utils.constants import ALL_TABLES


class DatabaseService:
    """Service for SQLite database operations"""

    def __init__(self, db_path: Optional[str] = None, timeout: Optional[float] = None):
        self.db_path = db_path or config.database.path
        self.timeout = timeout or config.database.timeout
        self._connection: Optional[aiosqlite.Connection] = None
        self._write_lock = asyncio.Lock()

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection"""
        if self._connection is None:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

            self._connection = await aiosqlite.connect(self.db_path, timeout=self.timeout)
            self._connection.row_factory = aiosqlite.Row

            await self._connection.execute("PRAGMA journal_mode=WAL")
            await self._connection.execute(f"PRAGMA busy_timeout={int(self.timeout * 1000)}")
            await self._connection.execute("PRAGMA synchronous=NORMAL")
            await self._connection.execute("PRAGMA foreign_keys=ON")

            logger.info(f"Connected to SQLite database: {self.db_path}")

        return self._connection

    async def connect(self) -> None:
        """Open database connection"""
        await self._get_connection()

    async def disconnect(self) -> None:
        """Close database connection"""
        if self._connection:
            await self._connection.close()
            self._connection = None
            logger.info("Database connection closed")

    async def execute(self, query: str, params: Tuple = ()) -> int:
        """Execute a query and return affected rows"""
        conn = await self._get_connection()

        async with self._write_lock:
            try:
                cursor = await conn.execute(query, params)
                await conn.commit()
                return cursor.rowcount
            except Exception as e:
                await conn.rollback()
                logger.error(f"Query execution failed: {e}\nQuery: {query[:200]}...")
                raise

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Run several writes atomically.

        Statements issued on the yielded connection are committed together
        when the block exits, or rolled back if it raises.
        """
        conn = await self._get_connection()

        async with self._write_lock:
            try:
                yield conn
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise

    async def fetch_all(self, query: str, params: Tuple = ()) -> List[Dict[str, Any]]:
        """Fetch all rows from query"""
        conn = await self._get_connection()

        try:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return [dict(row) for row in rows]
        except Exception as e:
            logger.error(f"Fetch failed: {e}")
            raise

    async def fetch_one(self, query: str, params: Tuple = ()) -> Optional[Dict[str, Any]]:
        """Fetch single row from query"""
        conn = await self._get_connection()

        try:
            cursor = await conn.execute(query, params)
            row = await cursor.fetchone()
            return dict(row) if row else None
        except Exception as e:
            logger.error(f"Fetch one failed: {e}")
            raise

    async def fetch_scalar(self, query: str, params: Tuple = ()) -> Any:
        """Fetch single value from query"""
        result = await self.fetch_one(query, params)
        if result:
            return list(result.values())[0]
        return None

    @timed
    async def create_tables(self) -> None:
        """Create all database tables"""
        conn = await self._get_connection()

        try:
            await conn.executescript(self._get_schema_sql())
            await conn.commit()
            logger.info("Database tables created successfully")
        except Exception as e:
            logger.error(f"Failed to create tables: {e}")
            raise

    async def get_table_count(self, table_name: str) -> int:
        """Get row count for a table"""
        if table_name not in ALL_TABLES:
            raise ValueError(f"Unknown table: {table_name}")

        exists = await self.table_exists(table_name)
        if not exists:
            return 0
        return await self.fetch_scalar(f"SELECT COUNT(*) FROM {table_name}") or 0

    async def table_exists(self, table_name: str) -> bool:
        """Check if table exists"""
        result = await self.fetch_scalar(
            "SELECT COUNT(*) FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,)
        )
        return bool(result)

    async def get_database_size(self) -> int:
        """Get database file size in bytes"""
        try:
            return Path(self.db_path).stat().st_size
        except OSError:
            return 0

    def _get_schema_sql(self) -> str:
        """Get database schema SQL"""
        return '''
-- Master Tables
CREATE TABLE IF NOT EXISTS companies (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL DEFAULT '',
    state TEXT NOT NULL DEFAULT '',
    gstin TEXT NOT NULL DEFAULT '',
    currency TEXT NOT NULL DEFAULT 'INR',
    decimal_places INTEGER NOT NULL DEFAULT 2,
    enable_inventory INTEGER NOT NULL DEFAULT 1,
    enable_multi_godown INTEGER NOT NULL DEFAULT 0,
    enable_batch_tracking INTEGER NOT NULL DEFAULT 0,
    enable_serial_tracking INTEGER NOT NULL DEFAULT 0,
    enable_audit_trail INTEGER NOT NULL DEFAULT 1,
    auto_voucher_numbering INTEGER NOT NULL DEFAULT 1,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS financial_years (
    id TEXT PRIMARY KEY,
    company_id TEXT NOT NULL REFERENCES companies(id),
    year_start TEXT NOT NULL,
    year_end TEXT NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS ledger_groups (
    id TEXT PRIMARY KEY,
    company_id TEXT NOT NULL REFERENCES companies(id),
    name TEXT NOT NULL DEFAULT '',
    group_type TEXT NOT NULL DEFAULT '',
    parent_group_id TEXT
);

CREATE TABLE IF NOT EXISTS ledgers (
    id TEXT PRIMARY KEY,
    company_id TEXT NOT NULL REFERENCES companies(id),
    name TEXT NOT NULL DEFAULT '',
    group_id TEXT REFERENCES ledger_groups(id),
    opening_balance REAL NOT NULL DEFAULT 0,
    current_balance REAL NOT NULL DEFAULT 0,
    is_active INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS stock_groups (
    id TEXT PRIMARY KEY,
    company_id TEXT NOT NULL REFERENCES companies(id),
    name TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS units (
    id TEXT PRIMARY KEY,
    company_id TEXT NOT NULL REFERENCES companies(id),
    name TEXT NOT NULL DEFAULT '',
    symbol TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS stock_items (
    id TEXT PRIMARY KEY,
    company_id TEXT NOT NULL REFERENCES companies(id),
    name TEXT NOT NULL DEFAULT '',
    group_id TEXT REFERENCES stock_groups(id),
    unit_id TEXT REFERENCES units(id),
    rate REAL NOT NULL DEFAULT 0,
    current_stock REAL NOT NULL DEFAULT 0,
    hsn_code TEXT NOT NULL DEFAULT '',
    is_active INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS godowns (
    id TEXT PRIMARY KEY,
    company_id TEXT NOT NULL REFERENCES companies(id),
    name TEXT NOT NULL DEFAULT '',
    address TEXT NOT NULL DEFAULT '',
    is_active INTEGER NOT NULL DEFAULT 1
);

-- Transaction Tables
CREATE TABLE IF NOT EXISTS vouchers (
    id TEXT PRIMARY KEY,
    company_id TEXT NOT NULL REFERENCES companies(id),
    financial_year_id TEXT,
    voucher_type TEXT NOT NULL,
    voucher_number TEXT NOT NULL,
    date TEXT NOT NULL,
    reference TEXT NOT NULL DEFAULT '',
    narration TEXT NOT NULL DEFAULT '',
    party_ledger_id TEXT,
    party_name TEXT NOT NULL DEFAULT '',
    sales_ledger_id TEXT,
    cash_bank_ledger_id TEXT,
    place_of_supply TEXT,
    mode TEXT NOT NULL DEFAULT 'voucher_mode',
    total_amount REAL NOT NULL DEFAULT 0,
    status TEXT NOT NULL DEFAULT 'draft',
    posted_at TEXT,
    created_at TEXT DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now')),
    UNIQUE (company_id, voucher_type, voucher_number)
);

CREATE TABLE IF NOT EXISTS voucher_entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    voucher_id TEXT NOT NULL REFERENCES vouchers(id) ON DELETE CASCADE,
    line_no INTEGER NOT NULL DEFAULT 0,
    entry_kind TEXT NOT NULL DEFAULT 'amount',
    ledger_id TEXT NOT NULL,
    debit_amount REAL NOT NULL DEFAULT 0,
    credit_amount REAL NOT NULL DEFAULT 0,
    amount REAL NOT NULL DEFAULT 0,
    narration TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS voucher_stock_entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    voucher_id TEXT NOT NULL REFERENCES vouchers(id) ON DELETE CASCADE,
    line_no INTEGER NOT NULL DEFAULT 0,
    stock_item_id TEXT NOT NULL,
    quantity REAL NOT NULL DEFAULT 0,
    rate REAL NOT NULL DEFAULT 0,
    amount REAL NOT NULL DEFAULT 0,
    godown_id TEXT,
    batch_number TEXT,
    serial_number TEXT
);

CREATE TABLE IF NOT EXISTS audit_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    company_id TEXT NOT NULL DEFAULT '',
    table_name TEXT NOT NULL,
    record_id TEXT NOT NULL,
    record_name TEXT NOT NULL DEFAULT '',
    action TEXT NOT NULL,
    old_data TEXT,
    new_data TEXT,
    changed_fields TEXT,
    created_at TEXT DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
);

-- Indexes for performance
CREATE INDEX IF NOT EXISTS idx_ledgers_company ON ledgers(company_id);
CREATE INDEX IF NOT EXISTS idx_stock_items_company ON stock_items(company_id);
CREATE INDEX IF NOT EXISTS idx_godowns_company ON godowns(company_id);
CREATE INDEX IF NOT EXISTS idx_vouchers_company_type ON vouchers(company_id, voucher_type);
CREATE INDEX IF NOT EXISTS idx_vouchers_created ON vouchers(company_id, created_at);
CREATE INDEX IF NOT EXISTS idx_voucher_entries_voucher ON voucher_entries(voucher_id);
CREATE INDEX IF NOT EXISTS idx_voucher_stock_entries_voucher ON voucher_stock_entries(voucher_id);
CREATE INDEX IF NOT EXISTS idx_audit_log_record ON audit_log(table_name, record_id);
'''


# Global service instance
database_service = DatabaseService()
