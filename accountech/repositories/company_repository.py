"""
Company Repository
Resolves the company and financial year an entry session is bound to
"""

from typing import Optional

from .base import BaseRepository
from ..models.master import Company, CompanyContext, FinancialYear
from ..utils.exceptions import MissingContextError, NotFoundError


class CompanyRepository(BaseRepository):
    """Read access to companies and financial years"""

    name = "Company lookup"

    async def get_company(self, company_id: str) -> Company:
        row = await self._read_one("SELECT * FROM companies WHERE id = ?", (company_id,))
        if not row:
            raise NotFoundError(f"Company not found: {company_id}")
        return Company(**row)

    async def get_financial_year(self, company_id: str, financial_year_id: Optional[str] = None) -> Optional[FinancialYear]:
        """The requested year, or the company's active year when none is given"""
        if financial_year_id:
            row = await self._read_one(
                "SELECT * FROM financial_years WHERE id = ? AND company_id = ?",
                (financial_year_id, company_id)
            )
            if not row:
                raise NotFoundError(f"Financial year not found: {financial_year_id}")
        else:
            row = await self._read_one(
                """
                SELECT * FROM financial_years
                WHERE company_id = ? AND is_active = 1
                ORDER BY year_start DESC LIMIT 1
                """,
                (company_id,)
            )
        return FinancialYear(**row) if row else None

    async def get_context(self, company_id: Optional[str], financial_year_id: Optional[str] = None) -> CompanyContext:
        """Build the explicit context handed to a voucher engine"""
        if not company_id:
            raise MissingContextError()
        company = await self.get_company(company_id)
        financial_year = await self.get_financial_year(company_id, financial_year_id)
        return CompanyContext(company=company, financial_year=financial_year)


# Global instance
company_repository = CompanyRepository()
