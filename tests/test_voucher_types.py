import pytest

from accountech.services.voucher_types import default_mode, get_descriptor, list_descriptors
from accountech.utils.constants import VOUCHER_TYPE_CODES, EntryKind, LedgerRole, VoucherMode
from accountech.utils.exceptions import ConfigurationError


@pytest.mark.parametrize("code", ["sales", "purchase", "debit_note", "credit_note"])
def test_trading_types_carry_party_stock_and_tax(code):
    descriptor = get_descriptor(code)

    assert descriptor.has_party and descriptor.has_stock and descriptor.has_tax
    assert descriptor.entry_kind == EntryKind.AMOUNT
    assert descriptor.min_entries == 1
    assert descriptor.default_mode == VoucherMode.ITEM_INVOICE
    assert descriptor.ledger_role == LedgerRole.SALES_PURCHASE
    assert not descriptor.mode_locked


@pytest.mark.parametrize("code", ["receipt", "payment", "contra"])
def test_cash_types_are_single_amount_vouchers(code):
    descriptor = get_descriptor(code)

    assert not descriptor.has_party and not descriptor.has_stock and not descriptor.has_tax
    assert descriptor.entry_kind == EntryKind.AMOUNT
    assert descriptor.min_entries == 1
    assert descriptor.mode_locked


def test_only_receipt_and_payment_have_cash_bank_ledger():
    roles = {d.code: d.ledger_role for d in list_descriptors()}

    assert roles["receipt"] == roles["payment"] == LedgerRole.CASH_BANK
    assert roles["contra"] is None
    assert roles["journal"] is None


def test_journal_descriptor():
    journal = get_descriptor("journal")

    assert journal.entry_kind == EntryKind.JOURNAL
    assert journal.min_entries == 2
    assert default_mode("journal") == VoucherMode.VOUCHER_MODE


def test_descriptors_listed_in_display_order():
    assert [d.code for d in list_descriptors()] == VOUCHER_TYPE_CODES


def test_unknown_code():
    with pytest.raises(ConfigurationError) as exc_info:
        get_descriptor("stock_journal")
    assert "stock_journal" in exc_info.value.message
