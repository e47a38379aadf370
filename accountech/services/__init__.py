# Services Package
# Business Logic Layer
#
# Only leaf services are exported here; the voucher engine and draft
# sessions depend on repositories and are imported from their modules.

from .database_service import DatabaseService
from .audit_service import AuditService
from .health_service import HealthService
from .numbering_service import NumberingService
from .tax_policy import TaxPolicy

__all__ = [
    "DatabaseService",
    "AuditService",
    "HealthService",
    "NumberingService",
    "TaxPolicy"
]
