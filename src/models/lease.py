"""Lease models."""

from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import Field

from src.models.base import ServiceModel


class LeaseStatus(str, Enum):
    CURRENT = "current"
    UPCOMING = "upcoming"
    ABOUT_TO_END = "about-to-end"
    ENDED = "ended"


class Lease(ServiceModel):
    """A tenant's lease on a rental object."""
    lease_id: str = Field(..., description="Lease ID")
    status: LeaseStatus = Field(..., description="Lease status")
    rental_object_code: Optional[str] = None
    lease_start_date: Optional[datetime] = None
    lease_end_date: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status in (LeaseStatus.CURRENT, LeaseStatus.UPCOMING)
