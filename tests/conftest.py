"""
Shared fixtures: a seeded temporary SQLite database, a per-test event loop,
and in-memory collaborators for driving the voucher engine through failures.
"""

import asyncio
import os
from typing import List, Optional

import pytest

os.environ.setdefault("ACCOUNTECH_LOGGING__FILE", "")
os.environ.setdefault("ACCOUNTECH_LOGGING__CONSOLE", "false")

from accountech.models.master import (  # noqa: E402
    Company,
    CompanyContext,
    FinancialYear,
    GodownOption,
    LedgerOption,
    StockItemOption,
)
from accountech.models.voucher import NewVoucher, RecentVoucher  # noqa: E402
from accountech.repositories.voucher_store import VoucherStore  # noqa: E402
from accountech.services.database_service import DatabaseService  # noqa: E402
from accountech.services.numbering_service import NumberingService  # noqa: E402
from accountech.services.voucher_engine import VoucherEngine  # noqa: E402
from accountech.utils.exceptions import CollaboratorError, DuplicateVoucherNumberError  # noqa: E402


SEED_SQL = """
INSERT INTO companies (id, name, state, gstin, enable_multi_godown, enable_batch_tracking,
                       enable_serial_tracking, enable_audit_trail, auto_voucher_numbering)
VALUES ('c1', 'Acme Traders', 'MH', '27AAAAA0000A1Z5', 1, 1, 0, 1, 1),
       ('c2', 'Plain Stores', 'KA', '', 0, 0, 0, 0, 0);

INSERT INTO financial_years (id, company_id, year_start, year_end, is_active)
VALUES ('fy-old', 'c1', '2024-04-01', '2025-03-31', 0),
       ('fy1', 'c1', '2025-04-01', '2026-03-31', 1);

INSERT INTO ledger_groups (id, company_id, name, group_type)
VALUES ('g-cash', 'c1', 'Cash-in-Hand', 'asset'),
       ('g-sales', 'c1', 'Sales Accounts', 'income'),
       ('g-debtors', 'c1', 'Sundry Debtors', 'asset');

INSERT INTO ledgers (id, company_id, name, group_id, current_balance, is_active)
VALUES ('l-cash', 'c1', 'Cash', 'g-cash', 5000, 1),
       ('l-sales', 'c1', 'Sales', 'g-sales', 0, 1),
       ('l-cust', 'c1', 'Blue Mart', 'g-debtors', 1200, 1),
       ('l-bank', 'c1', 'Bank', NULL, 25000, 1),
       ('l-old', 'c1', 'Archived Ledger', 'g-cash', 0, 0),
       ('l-c2', 'c2', 'Cash', NULL, 0, 1);

INSERT INTO units (id, company_id, name, symbol) VALUES ('u-nos', 'c1', 'Numbers', 'Nos');
INSERT INTO stock_groups (id, company_id, name) VALUES ('sg-goods', 'c1', 'Finished Goods');

INSERT INTO stock_items (id, company_id, name, group_id, unit_id, rate, current_stock, hsn_code, is_active)
VALUES ('i-widget', 'c1', 'Widget', 'sg-goods', 'u-nos', 100, 40, '8471', 1),
       ('i-gadget', 'c1', 'Gadget', 'sg-goods', 'u-nos', 250, 10, '8517', 1),
       ('i-retired', 'c1', 'Retired Item', NULL, NULL, 10, 0, '', 0);

INSERT INTO godowns (id, company_id, name, address, is_active)
VALUES ('gd-main', 'c1', 'Main Godown', 'Pune', 1),
       ('gd-annex', 'c1', 'Annex', 'Pune East', 1),
       ('gd-closed', 'c1', 'Closed Store', '', 0);
"""


async def seed_database(database: DatabaseService) -> None:
    conn = await database._get_connection()
    await conn.executescript(SEED_SQL)
    await conn.commit()


@pytest.fixture
def run():
    """Run a coroutine on this test's event loop"""
    loop = asyncio.new_event_loop()
    yield loop.run_until_complete
    loop.close()


@pytest.fixture
def database(run, tmp_path):
    db = DatabaseService(str(tmp_path / "accountech.db"))
    run(db.connect())
    run(db.create_tables())
    run(seed_database(db))
    yield db
    run(db.disconnect())


@pytest.fixture
def store(database):
    return VoucherStore(database)


# ============== In-memory collaborators ==============

class FakeDirectory:
    """LedgerDirectory stand-in; `fail` makes every read raise, `gate` holds reads open"""

    def __init__(self):
        self.ledgers = [
            LedgerOption(id="l-cash", name="Cash", group_name="Cash-in-Hand"),
            LedgerOption(id="l-sales", name="Sales", group_name="Sales Accounts"),
        ]
        self.stock_items = [StockItemOption(id="i-widget", name="Widget", rate=100)]
        self.godowns = [GodownOption(id="gd-main", name="Main Godown")]
        self.fail = False
        self.gate: Optional[asyncio.Event] = None
        self.calls: List[str] = []

    async def _read(self, name: str, rows: list) -> list:
        self.calls.append(name)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise CollaboratorError("Ledger directory lookup failed", details="connection reset")
        return list(rows)

    async def list_ledgers(self, company_id: str) -> List[LedgerOption]:
        return await self._read("ledgers", self.ledgers)

    async def list_stock_items(self, company_id: str) -> List[StockItemOption]:
        return await self._read("stock_items", self.stock_items)

    async def list_godowns(self, company_id: str) -> List[GodownOption]:
        return await self._read("godowns", self.godowns)


class FakeStore:
    """VoucherStore stand-in enforcing unique numbers per (company, type)"""

    def __init__(self):
        self.vouchers: List[NewVoucher] = []
        self.fail_reads = False
        self.fail_writes = False
        self.create_calls = 0

    def add_existing(self, company_id: str, voucher_type: str, voucher_number: str) -> None:
        self.vouchers.append(NewVoucher(
            company_id=company_id,
            voucher_type=voucher_type,
            voucher_number=voucher_number,
            date="2025-05-01",
            mode="voucher_mode"
        ))

    async def get_last_voucher_number(self, company_id: str, voucher_type: str) -> Optional[str]:
        if self.fail_reads:
            raise CollaboratorError("Voucher store lookup failed", details="disk I/O error")
        numbers = [
            v.voucher_number for v in self.vouchers
            if v.company_id == company_id and v.voucher_type == voucher_type
        ]
        return max(numbers, key=lambda n: (len(n), n)) if numbers else None

    async def list_recent_vouchers(self, company_id: str, limit: int = 10) -> List[RecentVoucher]:
        if self.fail_reads:
            raise CollaboratorError("Voucher store lookup failed", details="disk I/O error")
        recent = [
            RecentVoucher(
                id=f"v{index + 1}",
                voucher_number=v.voucher_number,
                voucher_type=v.voucher_type,
                date=v.date,
                total_amount=v.total_amount
            )
            for index, v in enumerate(self.vouchers) if v.company_id == company_id
        ]
        return list(reversed(recent))[:limit]

    async def create_voucher(self, voucher: NewVoucher) -> str:
        self.create_calls += 1
        if self.fail_writes:
            raise CollaboratorError("Failed to save voucher", details="database is locked")
        for existing in self.vouchers:
            if (existing.company_id, existing.voucher_type, existing.voucher_number) == \
                    (voucher.company_id, voucher.voucher_type, voucher.voucher_number):
                raise DuplicateVoucherNumberError(voucher.voucher_number)
        self.vouchers.append(voucher)
        return f"v{len(self.vouchers)}"


@pytest.fixture
def company():
    return Company(
        id="c1",
        name="Acme Traders",
        state="MH",
        enable_multi_godown=True,
        enable_batch_tracking=True
    )


@pytest.fixture
def context(company):
    return CompanyContext(
        company=company,
        financial_year=FinancialYear(id="fy1", company_id="c1", year_start="2025-04-01", year_end="2026-03-31")
    )


@pytest.fixture
def fake_directory():
    return FakeDirectory()


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def make_engine(context, fake_directory, fake_store):
    """Build a VoucherEngine over the in-memory collaborators"""
    def factory(voucher_type: str = "sales", **overrides) -> VoucherEngine:
        engine_context = overrides.pop("context", context)
        overrides.setdefault("directory", fake_directory)
        overrides.setdefault("store", fake_store)
        overrides.setdefault("numbering", NumberingService(overrides["store"], width=4, prefix_length=2))
        overrides.setdefault("balance_tolerance", 0.01)
        return VoucherEngine(engine_context, voucher_type, **overrides)
    return factory


# ============== HTTP ==============

@pytest.fixture
def client(tmp_path, monkeypatch):
    """TestClient over the app, with the shared database moved to a temporary file"""
    from fastapi.testclient import TestClient

    from accountech.main import app
    from accountech.services.database_service import database_service

    monkeypatch.setattr(database_service, "db_path", str(tmp_path / "api.db"))
    monkeypatch.setattr(database_service, "_write_lock", asyncio.Lock())

    with TestClient(app) as test_client:
        test_client.portal.call(seed_database, database_service)
        yield test_client
