"""Economy service invoice model."""

from typing import Optional
from datetime import date
from pydantic import Field

from src.models.base import ServiceModel


class Invoice(ServiceModel):
    """An invoice as reported by the economy service."""
    invoice_id: str = Field(..., description="Invoice number")
    amount: float = Field(0.0, description="Invoiced amount")
    remaining_amount: Optional[float] = Field(None, description="Unpaid part, if reported")
    invoice_date: Optional[date] = None
    sent_to_debt_collection: Optional[date] = None

    @property
    def unpaid_amount(self) -> float:
        if self.remaining_amount is not None:
            return self.remaining_amount
        return self.amount
