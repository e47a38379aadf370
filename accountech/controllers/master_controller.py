"""
Master Controller
Directory lookups used by the entry screen dropdowns
"""

from fastapi import APIRouter

from ..repositories.ledger_directory import ledger_directory

router = APIRouter()


@router.get("/ledgers")
async def get_ledgers(company_id: str):
    """Active ledgers with group info"""
    ledgers = await ledger_directory.list_ledgers(company_id)
    return {"total": len(ledgers), "data": [ledger.model_dump() for ledger in ledgers]}


@router.get("/stock-items")
async def get_stock_items(company_id: str):
    """Active stock items with unit and group"""
    items = await ledger_directory.list_stock_items(company_id)
    return {"total": len(items), "data": [item.model_dump() for item in items]}


@router.get("/godowns")
async def get_godowns(company_id: str):
    godowns = await ledger_directory.list_godowns(company_id)
    return {"total": len(godowns), "data": [godown.model_dump() for godown in godowns]}
