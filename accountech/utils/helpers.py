"""
Helper Functions Module
Utility functions used across the application
"""

import re
from datetime import datetime
from typing import Any, Optional


def extract_number(voucher_number: Optional[str]) -> int:
    """Strip non-digit characters from a voucher number ("SA0007" -> 7)"""
    if not voucher_number:
        return 0
    digits = re.sub(r'\D', '', voucher_number)
    return int(digits) if digits else 0


def parse_amount(value: Any) -> float:
    """Coerce user input to a float amount; blanks count as zero"""
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        raise ValueError("Amount must be a number")
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    return float(value)


def round_money(value: float, places: int = 2) -> float:
    """Round a currency amount for display and persistence"""
    return round(value, places)


def get_current_timestamp() -> str:
    """Get current timestamp in ISO format"""
    return datetime.now().isoformat()


def format_file_size(size_bytes: int) -> str:
    """Format file size in human readable format"""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.2f} TB"
