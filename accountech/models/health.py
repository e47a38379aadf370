"""
Health Models
Pydantic models for health checks
"""

from typing import Dict
from pydantic import BaseModel


class ComponentHealth(BaseModel):
    status: str
    message: str = ""


class DatabaseHealth(ComponentHealth):
    path: str
    size_bytes: int = 0
    size: str = ""
    voucher_count: int = 0


class HealthCheckResponse(BaseModel):
    status: str
    timestamp: str
    components: Dict[str, DatabaseHealth]
