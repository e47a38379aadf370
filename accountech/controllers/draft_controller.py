"""
Draft Controller
================
Voucher entry sessions. Each session wraps one VoucherEngine.

ENDPOINTS:
----------
POST   /api/drafts                              - Open a draft for a company
GET    /api/drafts/{id}                         - Current draft, totals and notifications
DELETE /api/drafts/{id}                         - Close the session
PUT    /api/drafts/{id}/type                    - Change voucher type
PUT    /api/drafts/{id}/mode                    - Item invoice / voucher mode
PATCH  /api/drafts/{id}/header                  - Edit a header field
POST   /api/drafts/{id}/entries                 - Add an accounting entry
PATCH  /api/drafts/{id}/entries/{index}         - Edit an accounting entry
DELETE /api/drafts/{id}/entries/{index}         - Remove an accounting entry
POST   /api/drafts/{id}/stock-entries           - Add a stock entry
PATCH  /api/drafts/{id}/stock-entries/{index}   - Edit a stock entry
DELETE /api/drafts/{id}/stock-entries/{index}   - Remove a stock entry
GET    /api/drafts/{id}/totals                  - Recomputed totals
GET    /api/drafts/{id}/reference-data          - Ledgers, stock items, godowns, recent vouchers
POST   /api/drafts/{id}/save                    - Validate and save
POST   /api/drafts/{id}/cancel                  - Discard and start over
"""

from fastapi import APIRouter

from ..models.request import FieldUpdate, ModeRequest, OpenDraftRequest, VoucherTypeRequest
from ..services.draft_session_service import draft_session_service
from ..utils.constants import SaveStatus
from ..views.json_view import JsonView

router = APIRouter()


@router.post("")
async def open_draft(request: OpenDraftRequest):
    """Open an entry session bound to a company"""
    session_id = await draft_session_service.open(
        request.company_id,
        request.voucher_type,
        financial_year_id=request.financial_year_id
    )
    engine = draft_session_service.get(session_id)
    return JsonView.success("Draft opened", {"session_id": session_id, **engine.snapshot()})


@router.get("/{session_id}")
async def get_draft(session_id: str):
    engine = draft_session_service.get(session_id)
    return JsonView.success(data=engine.snapshot())


@router.delete("/{session_id}")
async def close_draft(session_id: str):
    draft_session_service.close(session_id)
    return JsonView.success("Draft closed")


@router.put("/{session_id}/type")
async def change_voucher_type(session_id: str, request: VoucherTypeRequest):
    engine = draft_session_service.get(session_id)
    await engine.select_voucher_type(request.voucher_type)
    return JsonView.success(data=engine.snapshot())


@router.put("/{session_id}/mode")
async def change_mode(session_id: str, request: ModeRequest):
    engine = draft_session_service.get(session_id)
    engine.set_mode(request.mode)
    return JsonView.success(data=engine.snapshot())


@router.patch("/{session_id}/header")
async def update_header(session_id: str, update: FieldUpdate):
    engine = draft_session_service.get(session_id)
    engine.update_header(update.field, update.value)
    return JsonView.success(data=engine.snapshot())


# ============== Accounting entries ==============

@router.post("/{session_id}/entries")
async def add_entry(session_id: str):
    engine = draft_session_service.get(session_id)
    engine.add_entry()
    return JsonView.success(data=engine.snapshot())


@router.patch("/{session_id}/entries/{index}")
async def update_entry(session_id: str, index: int, update: FieldUpdate):
    engine = draft_session_service.get(session_id)
    engine.update_entry(index, update.field, update.value)
    return JsonView.success(data=engine.snapshot())


@router.delete("/{session_id}/entries/{index}")
async def remove_entry(session_id: str, index: int):
    engine = draft_session_service.get(session_id)
    engine.remove_entry(index)
    return JsonView.success(data=engine.snapshot())


# ============== Stock entries ==============

@router.post("/{session_id}/stock-entries")
async def add_stock_entry(session_id: str):
    engine = draft_session_service.get(session_id)
    engine.add_stock_entry()
    return JsonView.success(data=engine.snapshot())


@router.patch("/{session_id}/stock-entries/{index}")
async def update_stock_entry(session_id: str, index: int, update: FieldUpdate):
    engine = draft_session_service.get(session_id)
    engine.update_stock_entry(index, update.field, update.value)
    return JsonView.success(data=engine.snapshot())


@router.delete("/{session_id}/stock-entries/{index}")
async def remove_stock_entry(session_id: str, index: int):
    engine = draft_session_service.get(session_id)
    engine.remove_stock_entry(index)
    return JsonView.success(data=engine.snapshot())


# ============== Totals, reference data, save ==============

@router.get("/{session_id}/totals")
async def get_totals(session_id: str):
    engine = draft_session_service.get(session_id)
    return JsonView.success(data=engine.recompute().model_dump())


@router.get("/{session_id}/reference-data")
async def get_reference_data(session_id: str, refresh: bool = False):
    """Cached lookups; refresh=true fetches them again"""
    engine = draft_session_service.get(session_id)
    if refresh:
        await engine.refresh_reference_data()
    return JsonView.success(data=engine.reference_data())


@router.post("/{session_id}/save")
async def save_draft(session_id: str):
    """Save outcome is always returned in the body; rejected saves are not HTTP errors"""
    engine = draft_session_service.get(session_id)
    result = await engine.save()
    return JsonView.success(
        result.message,
        {"saved": result.status == SaveStatus.SAVED, "result": result.model_dump(), "session": engine.snapshot()}
    )


@router.post("/{session_id}/cancel")
async def cancel_draft(session_id: str):
    engine = draft_session_service.get(session_id)
    await engine.cancel()
    return JsonView.success("Draft cancelled", engine.snapshot())
