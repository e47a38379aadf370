"""
Numbering Service Module
Generates sequential voucher numbers per company and voucher type
"""

from typing import Optional, Protocol

from ..config import config
from ..utils.helpers import extract_number
from ..utils.logger import logger
from .voucher_types import get_descriptor


class LastNumberSource(Protocol):
    async def get_last_voucher_number(self, company_id: str, voucher_type: str) -> Optional[str]:
        ...


class NumberingService:
    """
    Formats numbers as PREFIX + zero-padded sequence ("SA0001").

    The prefix is the first letters of the type code upper-cased. The
    sequence continues from the digits of the last stored number; the
    store's uniqueness constraint catches concurrent sessions that computed
    the same value.
    """

    def __init__(
        self,
        store: LastNumberSource,
        width: Optional[int] = None,
        prefix_length: Optional[int] = None
    ):
        self.store = store
        self.width = width or config.voucher.number_width
        self.prefix_length = prefix_length or config.voucher.prefix_length

    def prefix_for(self, voucher_type: str) -> str:
        get_descriptor(voucher_type)
        return voucher_type.upper()[:self.prefix_length]

    def format_number(self, voucher_type: str, sequence: int) -> str:
        return f"{self.prefix_for(voucher_type)}{sequence:0{self.width}d}"

    def next_number(self, voucher_type: str, last_number: Optional[str]) -> str:
        """Number following last_number; the first number when there is none"""
        sequence = extract_number(last_number) + 1 if last_number else 1
        return self.format_number(voucher_type, sequence)

    async def generate(self, company_id: str, voucher_type: str) -> str:
        """Read the last used number from the store and return the next one"""
        last_number = await self.store.get_last_voucher_number(company_id, voucher_type)
        number = self.next_number(voucher_type, last_number)
        logger.debug(f"Next {voucher_type} number for company {company_id}: {number} (last: {last_number})")
        return number
