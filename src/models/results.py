"""Result types shared by adapters and allocation processes.

Adapters report failures as ``AdapterResult`` values carrying an error tag.
Processes return either ``ProcessSuccess`` or ``ProcessFailure``; each
process stage has its own closed error-code enum.
"""

from enum import Enum
from typing import Any, Generic, Literal, Optional, TypeVar, Union
from pydantic import BaseModel, Field

T = TypeVar("T")


class AdapterResult(BaseModel, Generic[T]):
    """Tagged outcome of a call to an external service."""
    ok: bool
    data: Optional[T] = None
    err: Optional[str] = Field(None, description="Error tag, e.g. 'not-found', 'conflict', 'unknown'")
    status_code: Optional[int] = None

    @classmethod
    def success(cls, data: Any = None, status_code: Optional[int] = None) -> "AdapterResult":
        return cls(ok=True, data=data, status_code=status_code)

    @classmethod
    def failure(cls, err: str, status_code: Optional[int] = None, data: Any = None) -> "AdapterResult":
        return cls(ok=False, err=err, status_code=status_code, data=data)


class RentalRuleViolation(str, Enum):
    """Reasons a tenant may not rent a given parking space."""
    NO_HOUSING_CONTRACT_IN_THE_AREA = "no-housing-contract-in-the-area"
    NOT_TENANT_IN_THE_PROPERTY = "not-tenant-in-the-property"
    NOT_A_PARKING_SPACE = "not-a-parking-space"
    NOT_ALLOWED_TO_RENT_ADDITIONAL = "not-allowed-to-rent-additional"
    NOT_ELIGIBLE_TO_RENT = "not-eligible-to-rent"


class CreateNoteOfInterestErrorCode(str, Enum):
    PARKINGSPACE_NOT_FOUND = "ParkingspaceNotFound"
    PARKINGSPACE_NOT_INTERNAL = "ParkingspaceNotInternal"
    APPLICANT_NOT_FOUND = "ApplicantNotFound"
    APPLICANT_NOT_TENANT = "ApplicantNotTenant"
    NOT_ELIGIBLE_TO_RENT = "NotEligibleToRent"
    NO_HOUSING_CONTRACT_IN_THE_AREA = "no-housing-contract-in-the-area"
    NOT_TENANT_IN_THE_PROPERTY = "not-tenant-in-the-property"
    NOT_A_PARKING_SPACE = "not-a-parking-space"
    NOT_ALLOWED_TO_RENT_ADDITIONAL = "not-allowed-to-rent-additional"
    INTERNAL_CREDIT_CHECK_FAILED = "InternalCreditCheckFailed"
    INTERNAL_ERROR = "InternalError"

    @classmethod
    def from_violation(cls, violation: RentalRuleViolation) -> "CreateNoteOfInterestErrorCode":
        if violation == RentalRuleViolation.NOT_ELIGIBLE_TO_RENT:
            return cls.NOT_ELIGIBLE_TO_RENT
        return cls(violation.value)


class CreateOfferErrorCode(str, Enum):
    NO_LISTING = "NoListing"
    LISTING_NOT_EXPIRED = "ListingNotExpired"
    RENTAL_OBJECT_NOT_VACANT = "RentalObjectNotVacant"
    NO_APPLICANTS = "NoApplicants"
    CREATE_OFFER_FAILURE = "CreateOfferFailure"
    UPDATE_LISTING_STATUS_FAILURE = "UpdateListingStatusFailure"
    UPDATE_APPLICANT_STATUS_FAILURE = "UpdateApplicantStatusFailure"
    NO_CONTACT = "NoContact"
    SEND_EMAIL_FAILURE = "SendEmailFailure"
    UNKNOWN = "Unknown"


class ReplyToOfferErrorCode(str, Enum):
    NO_OFFER = "NoOffer"
    NO_ACTIVE_OFFER = "NoActiveOffer"
    NO_LISTING = "NoListing"
    APPLICANT_NOT_TENANT = "ApplicantNotTenant"
    NO_CONTRACT_IN_THE_AREA = "no-contract-in-the-area"
    CREATE_LEASE_FAILURE = "CreateLeaseFailure"
    CLOSE_OFFER_FAILURE = "CloseOfferFailure"
    UNKNOWN = "Unknown"


ProcessErrorCode = Union[CreateNoteOfInterestErrorCode, CreateOfferErrorCode, ReplyToOfferErrorCode]


class Advisory(BaseModel):
    """A secondary side effect that failed without failing the process."""
    operation: str = Field(..., description="Side effect name, e.g. 'reset_waiting_list'")
    detail: str = Field("", description="What went wrong")


class ProcessSuccess(BaseModel):
    """Primary outcome reached."""
    process_status: Literal["successful"] = "successful"
    http_status: int = 200
    message: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    advisories: list[Advisory] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return True


class ProcessFailure(BaseModel):
    """Primary outcome not reached."""
    process_status: Literal["failed"] = "failed"
    error: ProcessErrorCode
    http_status: int = 500
    message: str = ""
    notify_dev: bool = Field(True, exclude=True, description="Route the process log to the dev role")

    @property
    def ok(self) -> bool:
        return False


ProcessResult = Union[ProcessSuccess, ProcessFailure]
