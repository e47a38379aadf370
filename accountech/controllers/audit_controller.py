"""
Audit Trail Controller
=======================
API endpoints for viewing audit trail data.

ENDPOINTS:
----------
GET  /api/audit/history                   - Audit history with filters
GET  /api/audit/record/{table}/{id}       - History of a specific record
"""

from typing import Optional

from fastapi import APIRouter, Query

from ..services.audit_service import audit_service

router = APIRouter()


@router.get("/history")
async def get_audit_history(
    company_id: Optional[str] = Query(None, description="Filter by company"),
    table_name: Optional[str] = Query(None, description="Filter by table name"),
    record_id: Optional[str] = Query(None, description="Filter by record id"),
    action: Optional[str] = Query(None, description="Filter by action (INSERT/UPDATE/DELETE)"),
    limit: int = Query(100, ge=1, le=1000, description="Max records to return"),
    offset: int = Query(0, ge=0, description="Offset for pagination")
):
    """
    Get audit history with optional filters.

    Examples:
    - /api/audit/history?action=DELETE - All deletes
    - /api/audit/history?table_name=vouchers&company_id=c1
    """
    records = await audit_service.get_audit_history(
        company_id=company_id,
        table_name=table_name,
        record_id=record_id,
        action=action,
        limit=limit,
        offset=offset
    )
    return {
        "count": len(records),
        "limit": limit,
        "offset": offset,
        "records": records
    }


@router.get("/record/{table_name}/{record_id}")
async def get_record_history(table_name: str, record_id: str):
    """Every INSERT, UPDATE and DELETE recorded for one record"""
    records = await audit_service.get_audit_history(table_name=table_name, record_id=record_id, limit=1000)
    return {
        "table_name": table_name,
        "record_id": record_id,
        "history_count": len(records),
        "history": records
    }
