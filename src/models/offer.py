"""Offer models."""

from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import Field

from src.models.base import ServiceModel
from src.models.applicant import ApplicantStatus, ApplicationType, DetailedApplicant
from src.models.lease import LeaseStatus


class OfferStatus(str, Enum):
    """Active -> Accepted | Denied | Expired, all terminal."""
    ACTIVE = "Active"
    ACCEPTED = "Accepted"
    DENIED = "Denied"
    EXPIRED = "Expired"


class OfferApplicant(ServiceModel):
    """Snapshot of one applicant at the time an offer was made."""
    listing_id: int
    applicant_id: int
    priority: Optional[int] = None
    status: ApplicantStatus
    address: str = ""
    application_type: ApplicationType = ApplicationType.ADDITIONAL
    queue_points: int = 0
    has_parking_space: bool = False
    housing_lease_status: LeaseStatus = LeaseStatus.ENDED

    @classmethod
    def from_detailed_applicant(cls, applicant: DetailedApplicant) -> "OfferApplicant":
        return cls(
            listing_id=applicant.listing_id,
            applicant_id=applicant.id,
            priority=applicant.priority,
            status=applicant.status,
            address=applicant.formatted_address,
            application_type=applicant.application_type or ApplicationType.ADDITIONAL,
            queue_points=applicant.queue_points,
            has_parking_space=applicant.has_parking_space,
            housing_lease_status=applicant.housing_lease_status,
        )


class CreateOfferParams(ServiceModel):
    """Request body for creating an offer."""
    applicant_id: int
    listing_id: int
    status: OfferStatus = OfferStatus.ACTIVE
    sent_at: datetime
    expires_at: datetime
    selected_applicants: list[OfferApplicant] = Field(default_factory=list)


class Offer(ServiceModel):
    """A time-boxed proposal of a listing to one selected applicant."""
    id: int
    listing_id: int
    rental_object_code: Optional[str] = None
    status: OfferStatus
    sent_at: Optional[datetime] = None
    expires_at: datetime
    offered_applicant: DetailedApplicant
    selected_applicants: list[OfferApplicant] = Field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.status == OfferStatus.ACTIVE
