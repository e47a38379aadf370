"""
Exceptions Module
Error taxonomy for the voucher engine and its collaborators
"""

from typing import Optional

from .constants import ErrorCode


class AccounTechError(Exception):
    """Base class for all application errors"""
    
    code = ErrorCode.UNKNOWN_ERROR
    status_code = 500
    
    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(AccounTechError):
    """
    Raised for an unknown voucher-type code or an invalid static setting.
    Should not occur with validated input.
    """
    
    code = ErrorCode.CONFIGURATION_ERROR
    status_code = 400


class BalanceError(AccounTechError):
    """Raised when a journal voucher's debit and credit totals differ"""
    
    code = ErrorCode.BALANCE_MISMATCH
    status_code = 422
    
    def __init__(self, difference: float, message: Optional[str] = None):
        super().__init__(
            message or f"Debit and Credit amounts must be equal (difference: {difference:.2f})"
        )
        self.difference = difference


class MissingContextError(AccounTechError):
    """Raised when no company is bound to the draft"""
    
    code = ErrorCode.MISSING_CONTEXT
    status_code = 422
    
    def __init__(self, message: str = "Please select a company"):
        super().__init__(message)


class ValidationError(AccounTechError):
    """Raised for save-blocking validation failures other than balance"""
    
    code = ErrorCode.VALIDATION_ERROR
    status_code = 422


class DraftEditError(AccounTechError):
    """
    Raised when an edit is not allowed: unknown field, index out of range,
    negative value, read-only field, or mode change on a non-stock type.
    """
    
    code = ErrorCode.INVALID_EDIT
    status_code = 422


class NotFoundError(AccounTechError):
    """Raised when a draft session or voucher does not exist"""
    
    code = ErrorCode.NOT_FOUND
    status_code = 404


class CollaboratorError(AccounTechError):
    """Raised when the ledger directory or voucher store fails"""
    
    code = ErrorCode.COLLABORATOR_ERROR
    status_code = 502


class DuplicateVoucherNumberError(CollaboratorError):
    """Raised when the store rejects a voucher number already in use"""
    
    code = ErrorCode.DUPLICATE_VOUCHER_NUMBER
    status_code = 409
    
    def __init__(self, voucher_number: str):
        super().__init__(f"Voucher number {voucher_number} is already in use")
        self.voucher_number = voucher_number
