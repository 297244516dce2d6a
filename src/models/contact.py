"""Contact and waiting list models."""

from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import Field

from src.models.base import ServiceModel


class WaitingListType(str, Enum):
    PARKING_SPACE = "ParkingSpace"
    HOUSING = "Housing"
    STORAGE = "Storage"


class WaitingList(ServiceModel):
    """Queue membership used to rank applicants."""
    type: WaitingListType = WaitingListType.PARKING_SPACE
    queue_points: int = Field(0, ge=0, description="Accumulated queue points")
    queue_time: Optional[datetime] = Field(None, description="Queue start time")


class Contact(ServiceModel):
    """Tenant identity as held by the contact directory."""
    contact_code: str = Field(..., description="Contact code, e.g. P123456")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    national_registration_number: Optional[str] = None
    email_address: Optional[str] = None
    parking_space_waiting_list: Optional[WaitingList] = None
