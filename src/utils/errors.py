"""Error handling utilities."""

from typing import Optional


class ParkingAllocationError(Exception):
    """Base exception for the parking allocation backend."""
    pass


class ConfigurationError(ParkingAllocationError):
    """Required configuration missing."""
    pass


class LeasingServiceError(ParkingAllocationError):
    """Leasing service call failed in a way callers must handle."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class WaitingListError(LeasingServiceError):
    """Adding a contact to a waiting list failed."""
    pass


class SupabaseError(ParkingAllocationError):
    """Supabase operation error."""
    pass
