"""Applicant models."""

from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import Field

from src.models.base import ServiceModel
from src.models.lease import Lease, LeaseStatus


class ApplicantStatus(str, Enum):
    ACTIVE = "Active"
    OFFERED = "Offered"
    DISQUALIFIED = "Disqualified"
    WITHDRAWN_BY_USER = "WithdrawnByUser"
    WITHDRAWN_BY_MANAGER = "WithdrawnByManager"

    @property
    def is_withdrawn(self) -> bool:
        return self in (ApplicantStatus.WITHDRAWN_BY_USER, ApplicantStatus.WITHDRAWN_BY_MANAGER)


class ApplicationType(str, Enum):
    """Whether the tenant replaces an existing parking space or rents an additional one."""
    REPLACE = "Replace"
    ADDITIONAL = "Additional"


class Address(ServiceModel):
    street: str = ""
    number: Optional[str] = None
    postal_code: Optional[str] = None
    city: str = ""


class Applicant(ServiceModel):
    """A tenant's interest record for one listing."""
    id: Optional[int] = Field(None, description="Assigned by the leasing store")
    name: Optional[str] = Field(None, description="Format: 'lastname firstname'")
    contact_code: str = Field(..., description="Applicant contact code")
    national_registration_number: Optional[str] = None
    application_date: Optional[datetime] = None
    application_type: Optional[ApplicationType] = None
    status: ApplicantStatus = ApplicantStatus.ACTIVE
    listing_id: int = Field(..., description="Listing applied for")


class DetailedApplicant(Applicant):
    """Applicant enriched with queue position and contract history."""
    priority: Optional[int] = Field(None, description="Queue rank; None means not eligible for offers")
    queue_points: int = 0
    address: Optional[Address] = None
    current_housing_contract: Optional[Lease] = None
    upcoming_housing_contract: Optional[Lease] = None
    parking_space_contracts: list[Lease] = Field(default_factory=list)

    @property
    def has_parking_space(self) -> bool:
        return any(lease.is_active for lease in self.parking_space_contracts)

    @property
    def housing_lease_status(self) -> LeaseStatus:
        if self.upcoming_housing_contract:
            return self.upcoming_housing_contract.status
        if self.current_housing_contract:
            return self.current_housing_contract.status
        return LeaseStatus.ENDED

    @property
    def formatted_address(self) -> str:
        if not self.address:
            return ""
        return f"{self.address.street} {self.address.city}"


class RentalRuleCheck(ServiceModel):
    """Body of a passed rental rule validation."""
    reason: Optional[str] = None
    application_type: Optional[ApplicationType] = Field(None, description="Application types the tenant may use")
