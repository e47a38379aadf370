"""
Tax Policy Module
Flat-rate tax estimate for stock invoices
"""

from typing import List, Optional

from ..config import config
from ..models.voucher import TaxBreakdown, TaxComponent
from ..utils.exceptions import ConfigurationError
from ..utils.helpers import round_money


class TaxPolicy:
    """
    Illustrative flat-rate estimate, split evenly across the configured
    components (18% as CGST 9% + SGST 9% by default). Not a compliance
    engine: rates are not looked up per item or jurisdiction.
    """

    def __init__(self, rate: Optional[float] = None, components: Optional[List[str]] = None):
        self.rate = config.tax.rate if rate is None else rate
        self.components = list(components if components is not None else config.tax.components)

        if self.rate < 0:
            raise ConfigurationError(f"Tax rate cannot be negative: {self.rate}")
        if not self.components:
            raise ConfigurationError("At least one tax component label is required")

    def estimate(self, taxable_amount: float) -> Optional[TaxBreakdown]:
        """Return the breakdown for a positive taxable amount, else None"""
        if taxable_amount <= 0:
            return None

        component_rate = self.rate / len(self.components)
        components = [
            TaxComponent(
                label=label,
                rate=component_rate,
                amount=round_money(taxable_amount * component_rate / 100)
            )
            for label in self.components
        ]
        total_tax = round_money(taxable_amount * self.rate / 100)

        return TaxBreakdown(
            components=components,
            total_tax=total_tax,
            grand_total=round_money(taxable_amount + total_tax)
        )
