"""
Repository Base
Shared read helpers for the data access layer
"""

import sqlite3
from typing import Any, Dict, List, Optional, Tuple

from ..config import config
from ..services.database_service import DatabaseService, database_service
from ..utils.decorators import retry
from ..utils.exceptions import CollaboratorError


class BaseRepository:
    """Wraps DatabaseService reads with retry and error translation"""

    name = "repository"

    def __init__(self, database: Optional[DatabaseService] = None):
        self.database = database or database_service

    @retry(
        max_attempts=config.retry.max_attempts,
        initial_delay=config.retry.initial_delay,
        backoff_multiplier=config.retry.backoff_multiplier,
        max_delay=config.retry.max_delay,
        exceptions=(sqlite3.OperationalError,)
    )
    async def _fetch_all_with_retry(self, query: str, params: Tuple) -> List[Dict[str, Any]]:
        return await self.database.fetch_all(query, params)

    async def _read(self, query: str, params: Tuple = ()) -> List[Dict[str, Any]]:
        """Run a read query, raising CollaboratorError on database failure"""
        try:
            return await self._fetch_all_with_retry(query, params)
        except sqlite3.Error as e:
            raise CollaboratorError(f"{self.name} lookup failed", details=str(e)) from e

    async def _read_one(self, query: str, params: Tuple = ()) -> Optional[Dict[str, Any]]:
        rows = await self._read(query, params)
        return rows[0] if rows else None
