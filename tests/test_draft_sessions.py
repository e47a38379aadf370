"""
Draft sessions over the real repositories
"""

import asyncio
import time

import pytest

from accountech.services.draft_session_service import DraftSessionService
from accountech.utils.constants import SaveStatus
from accountech.utils.exceptions import NotFoundError


@pytest.fixture
def sessions(database):
    return DraftSessionService(database)


def test_open_binds_context_and_loads_lookups(run, sessions):
    session_id = run(sessions.open("c1", "sales"))
    engine = sessions.get(session_id)

    assert engine.context.financial_year_id == "fy1"
    assert engine.draft.voucher_number == "SA0001"
    assert [l.id for l in engine.ledgers] == ["l-bank", "l-cust", "l-cash", "l-sales"]
    assert len(engine.godowns) == 2
    assert session_id in sessions.session_ids()


def test_saved_sales_invoice_is_persisted(run, sessions, store):
    engine = sessions.get(run(sessions.open("c1", "sales")))
    engine.update_header("party_ledger_id", "l-cust")
    engine.update_header("sales_ledger_id", "l-sales")
    engine.update_entry(0, "ledger_id", "l-cust")
    engine.update_entry(0, "amount", 590)
    engine.add_stock_entry()
    engine.update_stock_entry(0, "stock_item_id", "i-widget")
    engine.update_stock_entry(0, "quantity", 5)
    engine.update_stock_entry(0, "rate", 100)
    engine.update_stock_entry(0, "godown_id", "gd-main")

    result = run(engine.save())
    assert result.status == SaveStatus.SAVED

    voucher = run(store.get_voucher(result.voucher_id))
    assert voucher["financial_year_id"] == "fy1"
    assert voucher["total_amount"] == 590.0
    assert voucher["stock_entries"][0]["amount"] == 500.0
    assert engine.draft.voucher_number == "SA0002"
    assert engine.recent_vouchers[0].id == result.voucher_id


def test_two_sessions_racing_for_one_number(run, sessions, store):
    first = sessions.get(run(sessions.open("c1", "receipt", load_reference_data=False)))
    second = sessions.get(run(sessions.open("c1", "receipt", load_reference_data=False)))
    for engine in (first, second):
        engine.update_entry(0, "ledger_id", "l-cash")
        engine.update_entry(0, "amount", 100)

    assert run(first.save()).voucher_number == "RE0001"
    assert run(second.save()).voucher_number == "RE0002"
    assert run(store.list_vouchers("c1"))["total"] == 2


def test_close_unknown_session(sessions):
    with pytest.raises(NotFoundError):
        sessions.get("nope")
    with pytest.raises(NotFoundError):
        sessions.close("nope")


def test_idle_session_is_evicted_and_its_reads_cancelled(run, sessions, fake_directory):
    sessions.directory = fake_directory

    async def scenario():
        session_id = await sessions.open("c1", "sales", load_reference_data=False)
        engine = sessions.get(session_id)
        fake_directory.gate = asyncio.Event()
        tasks = engine.start_reference_reads()
        await asyncio.sleep(0)

        evicted = sessions.evict_idle(now=time.monotonic() + sessions.idle_timeout + 1)
        fake_directory.gate.set()
        await asyncio.gather(*tasks, return_exceptions=True)
        return session_id, evicted, tasks

    session_id, evicted, tasks = run(scenario())
    assert evicted == 1
    assert session_id not in sessions.session_ids()
    # ledgers, stock items and godowns were held open by the gate
    assert all(task.cancelled() for task in tasks[:3])
    with pytest.raises(NotFoundError):
        sessions.get(session_id)


def test_recently_used_session_survives_the_sweep(run, sessions):
    session_id = run(sessions.open("c1", "sales", load_reference_data=False))

    assert sessions.evict_idle() == 0
    assert sessions.session_ids() == [session_id]


def test_session_limit_drops_least_recently_used(run, database):
    sessions = DraftSessionService(database, max_sessions=2)
    first = run(sessions.open("c1", "payment", load_reference_data=False))
    second = run(sessions.open("c1", "receipt", load_reference_data=False))
    time.sleep(0.01)
    sessions.get(first)

    third = run(sessions.open("c1", "journal", load_reference_data=False))
    assert sorted(sessions.session_ids()) == sorted([first, third])
    assert second not in sessions.session_ids()
