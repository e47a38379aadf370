# Controllers Package
# MVC Controller Layer

from .draft_controller import router as draft_router
from .voucher_controller import router as voucher_router
from .master_controller import router as master_router
from .config_controller import router as config_router
from .health_controller import router as health_router
from .audit_controller import router as audit_router

__all__ = [
    "draft_router",
    "voucher_router",
    "master_router",
    "config_router",
    "health_router",
    "audit_router"
]
