"""
Ledger Directory
Read-only lookup of the ledgers, stock items and godowns a voucher can reference
"""

from typing import List

from .base import BaseRepository
from ..models.master import GodownOption, LedgerOption, StockItemOption
from ..utils.decorators import timed


class LedgerDirectory(BaseRepository):
    """Selectable masters for one company, active rows only"""

    name = "Ledger directory"

    @timed
    async def list_ledgers(self, company_id: str) -> List[LedgerOption]:
        """Active ledgers with their group, ordered by name"""
        rows = await self._read(
            """
            SELECT l.id, l.name, l.current_balance,
                   COALESCE(g.name, '') AS group_name,
                   COALESCE(g.group_type, '') AS group_type
            FROM ledgers l
            LEFT JOIN ledger_groups g ON g.id = l.group_id
            WHERE l.company_id = ? AND l.is_active = 1
            ORDER BY l.name
            """,
            (company_id,)
        )
        return [LedgerOption(**row) for row in rows]

    @timed
    async def list_stock_items(self, company_id: str) -> List[StockItemOption]:
        """Active stock items with unit symbol and group, ordered by name"""
        rows = await self._read(
            """
            SELECT s.id, s.name, s.rate, s.current_stock, s.hsn_code,
                   COALESCE(u.symbol, '') AS unit_symbol,
                   COALESCE(g.name, '') AS group_name
            FROM stock_items s
            LEFT JOIN units u ON u.id = s.unit_id
            LEFT JOIN stock_groups g ON g.id = s.group_id
            WHERE s.company_id = ? AND s.is_active = 1
            ORDER BY s.name
            """,
            (company_id,)
        )
        return [StockItemOption(**row) for row in rows]

    @timed
    async def list_godowns(self, company_id: str) -> List[GodownOption]:
        """Active godowns, ordered by name"""
        rows = await self._read(
            """
            SELECT id, name, address
            FROM godowns
            WHERE company_id = ? AND is_active = 1
            ORDER BY name
            """,
            (company_id,)
        )
        return [GodownOption(**row) for row in rows]


# Global instance
ledger_directory = LedgerDirectory()
