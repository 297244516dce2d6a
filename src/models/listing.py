"""Listing and rental object models."""

from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import Field

from src.models.base import ServiceModel


class ListingStatus(str, Enum):
    """Listing lifecycle states owned by the leasing store."""
    ACTIVE = "Active"
    EXPIRED = "Expired"
    CLOSED = "Closed"
    ASSIGNED = "Assigned"
    NO_APPLICANTS = "NoApplicants"


class RentalRule(str, Enum):
    """Allocation mode of a listing."""
    SCORED = "SCORED"
    NON_SCORED = "NON_SCORED"


class RentalObject(ServiceModel):
    """Snapshot of the vacant parking space behind a listing."""
    rental_object_code: str = Field(..., description="Rental object code, e.g. 705-808-00-0006")
    address: str = Field("", description="Street address")
    monthly_rent: float = Field(0.0, description="Monthly rent")
    vacant_from: Optional[datetime] = Field(None, description="Date the object becomes vacant")
    residential_area_code: Optional[str] = Field(None, description="Residential area code")
    residential_area_caption: Optional[str] = None
    object_type_caption: Optional[str] = Field(None, description="Human readable object type")


class Listing(ServiceModel):
    """An advertised vacant rental object accepting applications."""
    id: int = Field(..., description="Listing ID")
    rental_object_code: str = Field(..., description="Rental object code")
    status: ListingStatus = Field(..., description="Listing status")
    rental_rule: RentalRule = Field(..., description="SCORED or NON_SCORED")
    published_from: Optional[datetime] = None
    published_to: Optional[datetime] = None
    rental_object: Optional[RentalObject] = Field(None, description="Attached rental object snapshot")

    @property
    def is_scored(self) -> bool:
        return self.rental_rule == RentalRule.SCORED
