"""
Voucher Controller
Saved vouchers: listing, detail and status changes
"""

from typing import Optional

from fastapi import APIRouter, Query

from ..config import config
from ..repositories.voucher_store import voucher_store
from ..services.voucher_types import list_descriptors
from ..views.json_view import JsonView

router = APIRouter()


@router.get("")
async def list_vouchers(
    company_id: str,
    voucher_type: Optional[str] = None,
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0)
):
    """Vouchers for a company with optional filters"""
    result = await voucher_store.list_vouchers(
        company_id,
        voucher_type=voucher_type,
        from_date=from_date,
        to_date=to_date,
        status=status,
        limit=limit,
        offset=offset
    )
    return JsonView.paginated(result["data"], result["total"], limit, offset)


@router.get("/types")
async def list_voucher_types():
    """Voucher types with their entry rules"""
    return {"types": [descriptor.model_dump() for descriptor in list_descriptors()]}


@router.get("/recent")
async def recent_vouchers(company_id: str, limit: Optional[int] = Query(default=None, ge=1, le=100)):
    vouchers = await voucher_store.list_recent_vouchers(company_id, limit or config.voucher.recent_limit)
    return {"count": len(vouchers), "data": [voucher.model_dump() for voucher in vouchers]}


@router.get("/{voucher_id}")
async def get_voucher(voucher_id: str):
    return JsonView.success(data=await voucher_store.get_voucher(voucher_id))


@router.post("/{voucher_id}/post")
async def post_voucher(voucher_id: str):
    voucher = await voucher_store.post_voucher(voucher_id)
    return JsonView.success(f"Voucher {voucher['voucher_number']} posted", voucher)


@router.post("/{voucher_id}/cancel")
async def cancel_voucher(voucher_id: str):
    voucher = await voucher_store.cancel_voucher(voucher_id)
    return JsonView.success(f"Voucher {voucher['voucher_number']} cancelled", voucher)


@router.delete("/{voucher_id}")
async def delete_voucher(voucher_id: str):
    await voucher_store.delete_voucher(voucher_id)
    return JsonView.success("Voucher deleted")
