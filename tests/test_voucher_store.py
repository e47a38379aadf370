"""
VoucherStore and LedgerDirectory against a seeded SQLite database
"""

import pytest

from accountech.models.voucher import AmountLine, JournalLine, NewVoucher, StockEntry
from accountech.repositories.company_repository import CompanyRepository
from accountech.repositories.ledger_directory import LedgerDirectory
from accountech.services.audit_service import AuditService
from accountech.utils.constants import VoucherStatus
from accountech.utils.exceptions import (
    DuplicateVoucherNumberError,
    MissingContextError,
    NotFoundError,
    ValidationError,
)


def _journal(number: str, company_id: str = "c1", amount: float = 250.0) -> NewVoucher:
    return NewVoucher(
        company_id=company_id,
        financial_year_id="fy1" if company_id == "c1" else None,
        voucher_type="journal",
        voucher_number=number,
        date="2025-07-01",
        narration="rent",
        mode="voucher_mode",
        total_amount=amount,
        entries=[
            JournalLine(ledger_id="l-cash", debit_amount=amount),
            JournalLine(ledger_id="l-bank", credit_amount=amount),
        ]
    )


def _sale(number: str) -> NewVoucher:
    return NewVoucher(
        company_id="c1",
        financial_year_id="fy1",
        voucher_type="sales",
        voucher_number=number,
        date="2025-07-02",
        party_ledger_id="l-cust",
        party_name="Blue Mart",
        sales_ledger_id="l-sales",
        place_of_supply="27",
        mode="item_invoice",
        total_amount=590.0,
        entries=[AmountLine(ledger_id="l-cust", amount=590.0)],
        stock_entries=[StockEntry(stock_item_id="i-widget", quantity=5, rate=100, amount=500, godown_id="gd-main")]
    )


# ============== Voucher store ==============

def test_create_and_read_back_voucher(run, store):
    voucher_id = run(store.create_voucher(_sale("SA0001")))

    voucher = run(store.get_voucher(voucher_id))
    assert voucher["voucher_number"] == "SA0001"
    assert voucher["status"] == VoucherStatus.DRAFT
    assert voucher["total_amount"] == 590.0
    assert voucher["entries"][0]["ledger_name"] == "Blue Mart"
    assert voucher["entries"][0]["entry_kind"] == "amount"
    assert voucher["stock_entries"][0]["stock_item_name"] == "Widget"
    assert voucher["stock_entries"][0]["godown_id"] == "gd-main"


def test_journal_lines_keep_debit_and_credit(run, store):
    voucher_id = run(store.create_voucher(_journal("JO0001")))

    entries = run(store.get_voucher(voucher_id))["entries"]
    assert [(e["debit_amount"], e["credit_amount"]) for e in entries] == [(250.0, 0.0), (0.0, 250.0)]


def test_duplicate_number_is_rejected_atomically(run, store, database):
    run(store.create_voucher(_journal("JO0001")))

    with pytest.raises(DuplicateVoucherNumberError):
        run(store.create_voucher(_journal("JO0001", amount=999)))

    assert run(database.get_table_count("vouchers")) == 1
    assert run(database.get_table_count("voucher_entries")) == 2


def test_same_number_allowed_for_other_company_or_type(run, store):
    run(store.create_voucher(_journal("JO0001")))
    run(store.create_voucher(_journal("JO0001", company_id="c2")))
    run(store.create_voucher(_sale("JO0001")))


def test_last_number_sorts_by_length_then_value(run, store):
    assert run(store.get_last_voucher_number("c1", "journal")) is None

    for number in ("JO9998", "JO9999", "JO10000"):
        run(store.create_voucher(_journal(number)))

    assert run(store.get_last_voucher_number("c1", "journal")) == "JO10000"
    assert run(store.get_last_voucher_number("c1", "sales")) is None


def test_recent_vouchers_newest_first(run, store):
    for number in ("JO0001", "JO0002", "JO0003"):
        run(store.create_voucher(_journal(number)))

    recent = run(store.list_recent_vouchers("c1", limit=2))
    assert [v.voucher_number for v in recent] == ["JO0003", "JO0002"]


def test_list_vouchers_with_filters(run, store):
    run(store.create_voucher(_journal("JO0001")))
    run(store.create_voucher(_sale("SA0001")))

    everything = run(store.list_vouchers("c1"))
    assert everything["total"] == 2

    sales = run(store.list_vouchers("c1", voucher_type="sales"))
    assert [v["voucher_number"] for v in sales["data"]] == ["SA0001"]

    july_first = run(store.list_vouchers("c1", from_date="2025-07-01", to_date="2025-07-01"))
    assert july_first["total"] == 1


def test_post_and_cancel_status_transitions(run, store):
    voucher_id = run(store.create_voucher(_journal("JO0001")))

    posted = run(store.post_voucher(voucher_id))
    assert posted["status"] == VoucherStatus.POSTED
    assert posted["posted_at"]

    with pytest.raises(ValidationError):
        run(store.post_voucher(voucher_id))

    cancelled = run(store.cancel_voucher(voucher_id))
    assert cancelled["status"] == VoucherStatus.CANCELLED

    with pytest.raises(ValidationError):
        run(store.cancel_voucher(voucher_id))


def test_delete_cascades_to_entries(run, store, database):
    voucher_id = run(store.create_voucher(_sale("SA0001")))
    run(store.delete_voucher(voucher_id))

    assert run(database.get_table_count("vouchers")) == 0
    assert run(database.get_table_count("voucher_entries")) == 0
    assert run(database.get_table_count("voucher_stock_entries")) == 0

    with pytest.raises(NotFoundError):
        run(store.get_voucher(voucher_id))
    with pytest.raises(NotFoundError):
        run(store.delete_voucher(voucher_id))


def test_audit_trail_follows_company_setting(run, store, database):
    voucher_id = run(store.create_voucher(_journal("JO0001")))
    run(store.post_voucher(voucher_id))
    run(store.create_voucher(_journal("JO0001", company_id="c2")))

    audit = AuditService(database)
    history = run(audit.get_audit_history(table_name="vouchers"))
    assert [(h["action"], h["company_id"]) for h in history] == [("UPDATE", "c1"), ("INSERT", "c1")]
    assert "status" in history[0]["changed_fields"]
    assert history[1]["new_data"]["voucher_number"] == "JO0001"


# ============== Ledger directory ==============

def test_ledgers_are_active_and_ordered_by_name(run, database):
    ledgers = run(LedgerDirectory(database).list_ledgers("c1"))

    assert [l.name for l in ledgers] == ["Bank", "Blue Mart", "Cash", "Sales"]
    cash = next(l for l in ledgers if l.id == "l-cash")
    assert cash.group_name == "Cash-in-Hand"
    assert cash.current_balance == 5000
    assert next(l for l in ledgers if l.id == "l-bank").group_name == ""


def test_stock_items_carry_unit_and_group(run, database):
    items = run(LedgerDirectory(database).list_stock_items("c1"))

    assert [i.id for i in items] == ["i-gadget", "i-widget"]
    assert items[1].unit_symbol == "Nos"
    assert items[1].group_name == "Finished Goods"
    assert items[1].hsn_code == "8471"


def test_godowns_exclude_inactive(run, database):
    godowns = run(LedgerDirectory(database).list_godowns("c1"))
    assert [g.id for g in godowns] == ["gd-annex", "gd-main"]


# ============== Company context ==============

def test_context_uses_active_financial_year(run, database):
    context = run(CompanyRepository(database).get_context("c1"))

    assert context.company.enable_multi_godown is True
    assert context.company.enable_serial_tracking is False
    assert context.financial_year_id == "fy1"


def test_context_errors(run, database):
    companies = CompanyRepository(database)
    with pytest.raises(MissingContextError):
        run(companies.get_context(None))
    with pytest.raises(NotFoundError):
        run(companies.get_context("nope"))
    with pytest.raises(NotFoundError):
        run(companies.get_context("c1", "fy-missing"))

    assert run(companies.get_context("c2")).financial_year is None
