"""
Voucher number generation
"""

import pytest

from accountech.services.numbering_service import NumberingService
from accountech.utils.exceptions import ConfigurationError
from accountech.utils.helpers import extract_number


@pytest.fixture
def numbering(fake_store):
    return NumberingService(fake_store, width=4, prefix_length=2)


def test_prefix_is_first_two_letters_upper_cased(numbering):
    assert numbering.prefix_for("sales") == "SA"
    assert numbering.prefix_for("debit_note") == "DE"
    assert numbering.prefix_for("credit_note") == "CR"
    assert numbering.prefix_for("contra") == "CO"


def test_prefix_rejects_unknown_type(numbering):
    with pytest.raises(ConfigurationError):
        numbering.prefix_for("bogus")


@pytest.mark.parametrize("voucher_type,last,expected", [
    ("sales", "SA0007", "SA0008"),
    ("payment", None, "PA0001"),
    ("journal", "JO9999", "JO10000"),
    ("receipt", "MANUAL", "RE0001"),
    ("purchase", "PB-2025-0042", "PU20250043"),
])
def test_next_number(numbering, voucher_type, last, expected):
    assert numbering.next_number(voucher_type, last) == expected


def test_generate_reads_last_number_from_store(run, numbering, fake_store):
    fake_store.add_existing("c1", "sales", "SA0009")
    fake_store.add_existing("c1", "sales", "SA0010")
    fake_store.add_existing("c2", "sales", "SA0500")

    assert run(numbering.generate("c1", "sales")) == "SA0011"
    assert run(numbering.generate("c1", "receipt")) == "RE0001"


def test_width_is_configurable(fake_store):
    numbering = NumberingService(fake_store, width=6, prefix_length=3)
    assert numbering.next_number("sales", "SAL000041") == "SAL000042"


def test_extract_number():
    assert extract_number("SA0007") == 7
    assert extract_number("") == 0
    assert extract_number(None) == 0
    assert extract_number("no digits") == 0
