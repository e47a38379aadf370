"""
Health Service Module
Handles health checks for system components
"""

import asyncio
import sqlite3
from typing import Any, Dict, Optional

from ..config import config
from ..models.health import DatabaseHealth, HealthCheckResponse
from ..utils.logger import logger
from ..utils.constants import HealthStatus
from ..utils.helpers import format_file_size, get_current_timestamp
from .database_service import DatabaseService, database_service


class HealthService:
    """Service for health monitoring"""

    def __init__(self, database: Optional[DatabaseService] = None):
        self.database = database or database_service

    async def check_all(self) -> Dict[str, Any]:
        """Check health of all components"""
        database_health = await self._database_health()

        return HealthCheckResponse(
            status=database_health.status,
            timestamp=get_current_timestamp(),
            components={'database': database_health}
        ).model_dump()

    async def check_database(self) -> Dict[str, Any]:
        """Check database health"""
        return (await self._database_health()).model_dump()

    async def _database_health(self) -> DatabaseHealth:
        try:
            voucher_count = await asyncio.wait_for(
                self.database.get_table_count("vouchers"),
                timeout=config.health.database_timeout
            )
        except (sqlite3.Error, asyncio.TimeoutError) as e:
            logger.warning(f"Database health check failed: {e!r}")
            return DatabaseHealth(
                status=HealthStatus.UNHEALTHY,
                path=self.database.db_path,
                message=str(e) or type(e).__name__
            )

        size = await self.database.get_database_size()
        return DatabaseHealth(
            status=HealthStatus.HEALTHY,
            path=self.database.db_path,
            size_bytes=size,
            size=format_file_size(size),
            voucher_count=voucher_count,
            message='Connected'
        )


# Global service instance
health_service = HealthService()
