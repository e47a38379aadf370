"""
JSON View
Formats responses as JSON
"""

from typing import Any, Dict, List, Optional

from fastapi.responses import JSONResponse

from ..utils.exceptions import AccounTechError
from ..utils.helpers import get_current_timestamp


class JsonView:
    """JSON response formatter"""

    @staticmethod
    def success(message: str = "", data: Any = None) -> Dict:
        """Format success response"""
        return {
            "status": "success",
            "message": message,
            "data": data,
            "timestamp": get_current_timestamp()
        }

    @staticmethod
    def error(code: str, message: str, details: Optional[str] = None) -> Dict:
        """Format error response"""
        return {
            "error": True,
            "code": code,
            "message": message,
            "details": details,
            "timestamp": get_current_timestamp()
        }

    @staticmethod
    def paginated(data: List, total: int, limit: int, offset: int) -> Dict:
        """Format paginated response"""
        return {
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(data),
            "data": data
        }

    @classmethod
    def exception(cls, error: AccounTechError) -> JSONResponse:
        """Error response with the status code carried by the exception"""
        body = cls.error(error.code, error.message, error.details)
        difference = getattr(error, "difference", None)
        if difference is not None:
            body["difference"] = difference
        return JSONResponse(status_code=error.status_code, content=body)
