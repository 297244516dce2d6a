"""Leasing service adapter: listings, applicants, offers, leases, waiting lists, contacts.

Calls return ``AdapterResult`` values and do not raise, except where noted:
``add_applicant_to_waiting_list``, ``set_applicant_status_active`` and
``update_applicant_status`` raise ``LeasingServiceError``; ``create_lease``
lets transport errors propagate.
"""

from datetime import date
from typing import Optional

import httpx

from src.models.applicant import (
    Applicant,
    ApplicantStatus,
    ApplicationType,
    DetailedApplicant,
    RentalRuleCheck,
)
from src.models.contact import Contact, WaitingListType
from src.models.lease import Lease, LeaseStatus
from src.models.listing import Listing, ListingStatus, RentalObject
from src.models.offer import CreateOfferParams, Offer
from src.models.results import AdapterResult, RentalRuleViolation
from src.services.http_client import content, leasing_service
from src.utils.errors import LeasingServiceError, WaitingListError
from src.utils.logging import get_structured_logger
from src.utils.process_log import current_process_log

logger = get_structured_logger(__name__)

NOT_FOUND = "not-found"
CONFLICT = "conflict"
BAD_REQUEST = "bad-request"
UNKNOWN = "unknown"


def _unexpected(operation: str, response: httpx.Response, **context) -> AdapterResult:
    logger.error(
        f"Unexpected response from leasing service in {operation}",
        operation=operation,
        status_code=response.status_code,
        **context
    )
    log = current_process_log()
    if log is not None:
        log.warn(f"Leasing service answered {response.status_code} in {operation}", operation=operation)
    return AdapterResult.failure(UNKNOWN, status_code=response.status_code)


# Listings

async def get_active_listing_by_rental_object_code(rental_object_code: str) -> AdapterResult[Listing]:
    try:
        async with leasing_service() as client:
            response = await client.get(f"/listings/active/by-code/{rental_object_code}")
        if response.status_code == 404:
            return AdapterResult.failure(NOT_FOUND, status_code=404)
        if response.status_code != 200:
            return _unexpected("get_active_listing_by_rental_object_code", response, rental_object_code=rental_object_code)
        body = content(response)
        if not body:
            return AdapterResult.failure(NOT_FOUND, status_code=response.status_code)
        return AdapterResult.success(Listing.model_validate(body))
    except Exception as e:
        logger.error("Failed to fetch active listing", exc_info=True, rental_object_code=rental_object_code, error=str(e))
        return AdapterResult.failure(UNKNOWN)


async def get_listing_by_listing_id(listing_id: int) -> Optional[Listing]:
    """Listing by id, or None on any failure."""
    try:
        async with leasing_service() as client:
            response = await client.get(f"/listings/by-id/{listing_id}")
        body = content(response)
        if response.status_code != 200 or not body:
            return None
        return Listing.model_validate(body)
    except Exception as e:
        logger.error("Failed to fetch listing", exc_info=True, listing_id=listing_id, error=str(e))
        return None


async def update_listing_status(listing_id: int, status: ListingStatus) -> AdapterResult[None]:
    try:
        async with leasing_service() as client:
            response = await client.put(f"/listings/{listing_id}/status", json={"status": status.value})
        if response.status_code == 200:
            return AdapterResult.success()
        if response.status_code == 404:
            return AdapterResult.failure(NOT_FOUND, status_code=404)
        if response.status_code == 400:
            return AdapterResult.failure(BAD_REQUEST, status_code=400)
        return _unexpected("update_listing_status", response, listing_id=listing_id)
    except Exception as e:
        logger.error("Failed to update listing status", exc_info=True, listing_id=listing_id, error=str(e))
        return AdapterResult.failure(UNKNOWN, status_code=500)


async def get_parking_space_by_code(rental_object_code: str) -> AdapterResult[RentalObject]:
    try:
        async with leasing_service() as client:
            response = await client.get(f"/parking-spaces/{rental_object_code}")
        if response.status_code == 404:
            return AdapterResult.failure(NOT_FOUND, status_code=404)
        body = content(response)
        if response.status_code != 200 or not body:
            return _unexpected("get_parking_space_by_code", response, rental_object_code=rental_object_code)
        return AdapterResult.success(RentalObject.model_validate(body))
    except Exception as e:
        logger.error("Failed to fetch parking space", exc_info=True, rental_object_code=rental_object_code, error=str(e))
        return AdapterResult.failure(UNKNOWN)


# Applicants

async def get_detailed_applicants_by_listing_id(listing_id: int) -> AdapterResult[list[DetailedApplicant]]:
    try:
        async with leasing_service() as client:
            response = await client.get(f"/listing/{listing_id}/applicants/details")
        if response.status_code == 404:
            return AdapterResult.failure(NOT_FOUND, status_code=404)
        if response.status_code != 200:
            return _unexpected("get_detailed_applicants_by_listing_id", response, listing_id=listing_id)
        applicants = [DetailedApplicant.model_validate(a) for a in content(response) or []]
        return AdapterResult.success(applicants)
    except Exception as e:
        logger.error("Failed to fetch detailed applicants", exc_info=True, listing_id=listing_id, error=str(e))
        return AdapterResult.failure(UNKNOWN)


async def get_applicant_by_contact_code_and_listing_id(contact_code: str, listing_id: int) -> AdapterResult[Applicant]:
    try:
        async with leasing_service() as client:
            response = await client.get(f"/applicants/{contact_code}/{listing_id}")
        if response.status_code == 404:
            return AdapterResult.failure(NOT_FOUND, status_code=404)
        if response.status_code != 200:
            return _unexpected("get_applicant_by_contact_code_and_listing_id", response, listing_id=listing_id)
        body = content(response)
        if not body:
            return AdapterResult.failure(NOT_FOUND, status_code=200)
        return AdapterResult.success(Applicant.model_validate(body))
    except Exception as e:
        logger.error("Failed to fetch applicant", exc_info=True, listing_id=listing_id, error=str(e))
        return AdapterResult.failure(UNKNOWN)


async def apply_for_listing(applicant: Applicant) -> AdapterResult[Applicant]:
    try:
        async with leasing_service() as client:
            response = await client.post("/listings/apply", json=applicant.to_payload())
        if response.status_code == 409:
            return AdapterResult.failure(CONFLICT, status_code=409)
        if response.status_code == 400:
            return AdapterResult.failure(BAD_REQUEST, status_code=400)
        if response.status_code not in (200, 201):
            return _unexpected("apply_for_listing", response, listing_id=applicant.listing_id)
        body = content(response)
        return AdapterResult.success(Applicant.model_validate(body) if body else applicant, status_code=response.status_code)
    except Exception as e:
        logger.error("Failed to apply for listing", exc_info=True, listing_id=applicant.listing_id, error=str(e))
        return AdapterResult.failure(UNKNOWN)


async def _patch_applicant_status(applicant_id: int, payload: dict) -> dict:
    try:
        async with leasing_service() as client:
            response = await client.patch(f"/applicants/{applicant_id}/status", json=payload)
    except httpx.HTTPError as e:
        raise LeasingServiceError(f"Failed to update status for applicant {applicant_id}: {e}")

    if response.status_code not in (200, 204):
        raise LeasingServiceError(
            f"Failed to update status for applicant {applicant_id}",
            status_code=response.status_code
        )
    if response.status_code == 204:
        return {}
    try:
        return response.json()
    except ValueError:
        return {}


async def set_applicant_status_active(
    applicant_id: int,
    contact_code: str,
    application_type: Optional[ApplicationType] = None,
) -> dict:
    """Reactivate a withdrawn applicant row. Raises LeasingServiceError."""
    payload = {"status": ApplicantStatus.ACTIVE.value, "contactCode": contact_code}
    if application_type is not None:
        payload["applicationType"] = application_type.value
    return await _patch_applicant_status(applicant_id, payload)


async def update_applicant_status(applicant_id: int, contact_code: str, status: ApplicantStatus) -> dict:
    """Raises LeasingServiceError."""
    return await _patch_applicant_status(
        applicant_id,
        {"applicantId": applicant_id, "contactCode": contact_code, "status": status.value},
    )


async def validate_residential_area_rental_rules(contact_code: str, residential_area_code: str) -> AdapterResult[RentalRuleCheck]:
    try:
        async with leasing_service() as client:
            response = await client.get(
                f"/applicants/validateResidentialAreaRentalRules/{contact_code}/{residential_area_code}"
            )
        if response.status_code == 403:
            return AdapterResult.failure(RentalRuleViolation.NO_HOUSING_CONTRACT_IN_THE_AREA.value, status_code=403)
        if response.status_code == 404:
            return AdapterResult.failure(NOT_FOUND, status_code=404)
        if response.status_code != 200:
            return _unexpected("validate_residential_area_rental_rules", response, residential_area_code=residential_area_code)
        return AdapterResult.success(RentalRuleCheck.model_validate(response.json()))
    except Exception as e:
        logger.error("Residential area rule validation failed", exc_info=True, residential_area_code=residential_area_code, error=str(e))
        return AdapterResult.failure(UNKNOWN)


async def validate_property_rental_rules(contact_code: str, rental_object_code: str) -> AdapterResult[RentalRuleCheck]:
    try:
        async with leasing_service() as client:
            response = await client.get(
                f"/applicants/validatePropertyRentalRules/{contact_code}/{rental_object_code}"
            )
        if response.status_code == 404:
            return AdapterResult.failure(NOT_FOUND, status_code=404)
        if response.status_code == 400:
            return AdapterResult.failure(RentalRuleViolation.NOT_A_PARKING_SPACE.value, status_code=400)
        if response.status_code == 403:
            return AdapterResult.failure(RentalRuleViolation.NOT_TENANT_IN_THE_PROPERTY.value, status_code=403)
        if response.status_code != 200:
            return _unexpected("validate_property_rental_rules", response, rental_object_code=rental_object_code)
        return AdapterResult.success(RentalRuleCheck.model_validate(response.json()))
    except Exception as e:
        logger.error("Property rule validation failed", exc_info=True, rental_object_code=rental_object_code, error=str(e))
        return AdapterResult.failure(UNKNOWN)


# Offers

async def create_offer(params: CreateOfferParams) -> AdapterResult[Offer]:
    try:
        async with leasing_service() as client:
            response = await client.post("/offer", json=params.to_payload())
        if response.status_code not in (200, 201):
            return _unexpected("create_offer", response, listing_id=params.listing_id)
        return AdapterResult.success(Offer.model_validate(content(response)), status_code=response.status_code)
    except Exception as e:
        logger.error("Failed to create offer", exc_info=True, listing_id=params.listing_id, error=str(e))
        return AdapterResult.failure(UNKNOWN)


async def get_offer_by_offer_id(offer_id: int) -> AdapterResult[Offer]:
    try:
        async with leasing_service() as client:
            response = await client.get(f"/offers/{offer_id}")
        if response.status_code == 404:
            return AdapterResult.failure(NOT_FOUND, status_code=404)
        body = content(response)
        if response.status_code != 200 or not body:
            return _unexpected("get_offer_by_offer_id", response, offer_id=offer_id)
        return AdapterResult.success(Offer.model_validate(body))
    except Exception as e:
        logger.error("Failed to fetch offer", exc_info=True, offer_id=offer_id, error=str(e))
        return AdapterResult.failure(UNKNOWN)


async def _close_offer(offer_id: int, action: str) -> AdapterResult[None]:
    try:
        async with leasing_service() as client:
            response = await client.put(f"/offers/{offer_id}/{action}")
        if response.status_code == 200:
            return AdapterResult.success()
        if response.status_code == 404:
            return AdapterResult.failure(NOT_FOUND, status_code=404)
        return _unexpected(action, response, offer_id=offer_id)
    except Exception as e:
        logger.error(f"Failed to {action} offer", exc_info=True, offer_id=offer_id, error=str(e))
        return AdapterResult.failure(UNKNOWN)


async def close_offer_by_accept(offer_id: int) -> AdapterResult[None]:
    return await _close_offer(offer_id, "close-by-accept")


async def close_offer_by_deny(offer_id: int) -> AdapterResult[None]:
    return await _close_offer(offer_id, "close-by-deny")


async def get_offers_for_contact(contact_code: str) -> AdapterResult[list[Offer]]:
    try:
        async with leasing_service() as client:
            response = await client.get(f"/contacts/{contact_code}/offers")
        if response.status_code == 404:
            return AdapterResult.failure(NOT_FOUND, status_code=404)
        if response.status_code != 200:
            return _unexpected("get_offers_for_contact", response)
        return AdapterResult.success([Offer.model_validate(o) for o in content(response) or []])
    except Exception as e:
        logger.error("Failed to fetch offers for contact", exc_info=True, error=str(e))
        return AdapterResult.failure(UNKNOWN)


# Leases

async def create_lease(
    rental_object_code: str,
    contact_code: str,
    from_date: date,
    company_code: str,
    include_vat: bool,
) -> AdapterResult[str]:
    """Create a lease and return its id. Transport errors propagate."""
    async with leasing_service() as client:
        response = await client.post(
            "/leases",
            json={
                "parkingSpaceId": rental_object_code,
                "contactCode": contact_code,
                "fromDate": from_date.isoformat(),
                "companyCode": company_code,
                "includeVAT": include_vat,
            },
        )

    if response.status_code in (200, 201):
        return AdapterResult.success(content(response), status_code=response.status_code)
    if response.status_code == 404:
        logger.error(
            "Lease could not be created for rental object",
            rental_object_code=rental_object_code,
            from_date=from_date.isoformat()
        )
        return AdapterResult.failure("create-lease-failed", status_code=404)
    return _unexpected("create_lease", response, rental_object_code=rental_object_code)


async def get_leases_by_contact_code(contact_code: str) -> AdapterResult[list[Lease]]:
    """Current and upcoming leases; a 404 means the contact has none."""
    statuses = ",".join([LeaseStatus.CURRENT.value, LeaseStatus.UPCOMING.value])
    try:
        async with leasing_service() as client:
            response = await client.get(
                f"/leases/by-contact-code/{contact_code}",
                params={"status": statuses, "includeContacts": "false"},
            )
        if response.status_code == 404:
            return AdapterResult.success([])
        if response.status_code != 200:
            return _unexpected("get_leases_by_contact_code", response)
        return AdapterResult.success([Lease.model_validate(lease) for lease in content(response) or []])
    except Exception as e:
        logger.error("Failed to fetch leases for contact", exc_info=True, error=str(e))
        return AdapterResult.failure(UNKNOWN)


# Waiting lists and contacts

async def reset_waiting_list(contact_code: str, waiting_list_type: WaitingListType) -> AdapterResult[None]:
    try:
        async with leasing_service() as client:
            response = await client.post(
                f"/contacts/{contact_code}/waitingLists/reset",
                json={"waitingListType": waiting_list_type.value},
            )
        if response.status_code == 200:
            return AdapterResult.success()
        if response.status_code == 404:
            return AdapterResult.failure("not-in-waiting-list", status_code=404)
        return _unexpected("reset_waiting_list", response)
    except Exception as e:
        logger.error("Failed to reset waiting list", exc_info=True, error=str(e))
        return AdapterResult.failure(UNKNOWN)


async def add_applicant_to_waiting_list(contact_code: str, waiting_list_type: WaitingListType) -> None:
    """Raises WaitingListError unless the service answers 201."""
    try:
        async with leasing_service() as client:
            response = await client.post(
                f"/contacts/{contact_code}/waitingLists",
                json={"waitingListType": waiting_list_type.value},
            )
    except httpx.HTTPError as e:
        raise WaitingListError(f"Failed to add contact to {waiting_list_type.value} waiting list: {e}")

    if response.status_code != 201:
        raise WaitingListError(
            f"Failed to add contact to {waiting_list_type.value} waiting list",
            status_code=response.status_code
        )


async def get_contact_by_contact_code(contact_code: str) -> AdapterResult[Contact]:
    try:
        async with leasing_service() as client:
            response = await client.get(f"/contacts/{contact_code}")
        body = content(response)
        if response.status_code == 404 or (response.status_code == 200 and not body):
            return AdapterResult.failure(NOT_FOUND, status_code=404)
        if response.status_code != 200:
            return _unexpected("get_contact_by_contact_code", response)
        return AdapterResult.success(Contact.model_validate(body))
    except Exception as e:
        logger.error("Failed to fetch contact", exc_info=True, error=str(e))
        return AdapterResult.failure(UNKNOWN)
