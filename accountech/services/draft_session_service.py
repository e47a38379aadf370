"""
Draft Session Service
Keeps one VoucherEngine per open entry screen, addressed by a session id.
Sessions left idle longer than sessions.idle_timeout are closed on the next
open, and the least recently used one is dropped once sessions.max_sessions
is reached.
"""

import time
from typing import Dict, List, Optional
from uuid import uuid4

from ..config import config
from ..repositories.company_repository import CompanyRepository
from ..repositories.ledger_directory import LedgerDirectory
from ..repositories.voucher_store import VoucherStore
from ..services.database_service import DatabaseService, database_service
from ..utils.exceptions import NotFoundError
from ..utils.logger import logger
from .numbering_service import NumberingService
from .tax_policy import TaxPolicy
from .voucher_engine import VoucherEngine


class DraftSessionService:
    """Registry of live voucher drafts"""

    def __init__(
        self,
        database: Optional[DatabaseService] = None,
        idle_timeout: Optional[int] = None,
        max_sessions: Optional[int] = None
    ):
        self.database = database or database_service
        self.companies = CompanyRepository(self.database)
        self.directory = LedgerDirectory(self.database)
        self.store = VoucherStore(self.database)
        self.idle_timeout = idle_timeout or config.sessions.idle_timeout
        self.max_sessions = max_sessions or config.sessions.max_sessions
        self._sessions: Dict[str, VoucherEngine] = {}
        self._last_access: Dict[str, float] = {}

    async def open(
        self,
        company_id: Optional[str],
        voucher_type: str = "sales",
        financial_year_id: Optional[str] = None,
        load_reference_data: bool = True
    ) -> str:
        """Start a draft for a company and return its session id"""
        context = await self.companies.get_context(company_id, financial_year_id)
        engine = VoucherEngine(
            context,
            voucher_type,
            directory=self.directory,
            store=self.store,
            numbering=NumberingService(self.store),
            tax_policy=TaxPolicy()
        )
        await engine.refresh_number()
        if load_reference_data:
            await engine.refresh_reference_data()

        self.evict_idle()
        while len(self._sessions) >= self.max_sessions:
            oldest = min(self._last_access, key=self._last_access.get)
            logger.warning(f"Draft session limit {self.max_sessions} reached, closing {oldest}")
            self.close(oldest)

        session_id = uuid4().hex
        self._sessions[session_id] = engine
        self._last_access[session_id] = time.monotonic()
        logger.info(f"Draft session {session_id} opened: {voucher_type} for company {company_id}")
        return session_id

    def get(self, session_id: str) -> VoucherEngine:
        try:
            engine = self._sessions[session_id]
        except KeyError:
            raise NotFoundError(f"Draft session not found: {session_id}") from None
        self._last_access[session_id] = time.monotonic()
        return engine

    def close(self, session_id: str) -> None:
        engine = self._sessions.pop(session_id, None)
        self._last_access.pop(session_id, None)
        if engine is None:
            raise NotFoundError(f"Draft session not found: {session_id}")
        engine.close()
        logger.info(f"Draft session {session_id} closed")

    def evict_idle(self, now: Optional[float] = None) -> int:
        """Close sessions not touched within the idle timeout, returning how many"""
        now = time.monotonic() if now is None else now
        expired = [
            session_id for session_id, last_access in self._last_access.items()
            if now - last_access > self.idle_timeout
        ]
        for session_id in expired:
            logger.info(f"Draft session {session_id} idle for over {self.idle_timeout}s")
            self.close(session_id)
        return len(expired)

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.close(session_id)

    def session_ids(self) -> List[str]:
        return list(self._sessions)


# Global instance
draft_session_service = DraftSessionService()
