"""Offer replies: accept, deny and expire an offer on an internal parking space."""

import asyncio
from typing import Union

from src.models.applicant import ApplicationType
from src.models.contact import WaitingListType
from src.models.listing import Listing
from src.models.offer import Offer
from src.models.results import AdapterResult, ProcessFailure, ProcessResult, ReplyToOfferErrorCode
from src.services import communication_client, leasing_client, offer_generator, rental_rules
from src.services.communication_client import ParkingSpaceAcceptOfferEmail
from src.services.process_log_sinks import default_subscribers
from src.utils import dates
from src.utils.logging import get_structured_logger
from src.utils.process_log import ProcessLog, run_detached, run_process

logger = get_structured_logger(__name__)

ErrorCode = ReplyToOfferErrorCode

LEASE_COMPANY_CODE = "001"


async def _resolve_offer(log: ProcessLog, offer_id: int) -> Union[Offer, ProcessFailure]:
    result = await leasing_client.get_offer_by_offer_id(offer_id)
    if not result.ok or not result.data:
        return log.fail(
            ErrorCode.NO_OFFER,
            404,
            f"The offer {offer_id} does not exist or could not be retrieved.",
        )
    return result.data


async def _resolve_listing(log: ProcessLog, offer: Offer) -> Union[Listing, ProcessFailure]:
    """Listing of the offer with its rental object attached."""
    listing = await leasing_client.get_listing_by_listing_id(offer.listing_id)
    if not listing:
        return log.fail(ErrorCode.NO_LISTING, 404, f"The listing {offer.listing_id} cannot be found.")

    parking_space = await leasing_client.get_parking_space_by_code(listing.rental_object_code)
    if not parking_space.ok or not parking_space.data:
        return log.fail(
            ErrorCode.NO_LISTING,
            500,
            f"Rental object for listing with id {listing.id} not found",
        )
    listing.rental_object = parking_space.data

    if not listing.rental_object.residential_area_code:
        return log.fail(
            ErrorCode.NO_LISTING,
            404,
            f"The listing {offer.listing_id} does not exist or is no longer available.",
        )
    return listing


# Accept

async def accept_offer(offer_id: int) -> ProcessResult:
    """Create a lease for the offeree and close out their other offers."""
    log = ProcessLog("accept_offer", "Accept offer for internal parking space", subscribers=default_subscribers())
    log.record(f"Offer id {offer_id}")

    async def body(log: ProcessLog) -> ProcessResult:
        return await _accept(log, offer_id)

    return await run_process(log, body, ErrorCode.UNKNOWN, "Accept offer of parking space uncaught error")


async def _accept(log: ProcessLog, offer_id: int) -> ProcessResult:
    offer = await _resolve_offer(log, offer_id)
    if isinstance(offer, ProcessFailure):
        return offer

    if not offer.is_active:
        return log.fail(ErrorCode.NO_ACTIVE_OFFER, 404, f"The offer {offer_id} is not active.")

    applicant = offer.offered_applicant
    contact_code = applicant.contact_code
    log.record(f"Applicant {contact_code} accepts parking space {offer.rental_object_code}")

    listing = await _resolve_listing(log, offer)
    if isinstance(listing, ProcessFailure):
        return listing

    leases = await leasing_client.get_leases_by_contact_code(contact_code)
    if not leases.ok:
        return log.fail(ErrorCode.UNKNOWN, 500, f"Leases for {contact_code} could not be retrieved: {leases.err}")
    if not leases.data:
        return log.fail(ErrorCode.APPLICANT_NOT_TENANT, 403, f"Applicant {contact_code} is not a tenant")

    rules = await rental_rules.validate_rental_rules(
        contact_code,
        listing.rental_object.residential_area_code,
        listing.rental_object_code,
        applicant.application_type or ApplicationType.ADDITIONAL,
    )
    if not rules.ok:
        return log.fail(
            ErrorCode.NO_CONTRACT_IN_THE_AREA,
            400,
            f"Applicant {contact_code} is no longer eligible to rent {listing.rental_object_code}: {rules.violation.value}",
        )

    from_date = dates.lease_start_date(listing.rental_object.vacant_from)
    try:
        lease = await leasing_client.create_lease(
            listing.rental_object_code,
            contact_code,
            from_date,
            LEASE_COMPANY_CODE,
            include_vat=False,
        )
    except Exception as e:
        logger.error("Create lease raised", exc_info=True, offer_id=offer_id, error=str(e))
        return log.fail(ErrorCode.CREATE_LEASE_FAILURE, 500, f"Create Lease for {offer_id} failed: {e}")

    if not lease.ok:
        log.error(f"Failed to create lease for parking space {listing.rental_object_code}.", lease_error=lease.err)
        return log.fail(ErrorCode.CREATE_LEASE_FAILURE, 500, "Lease could not be created")

    lease_id = lease.data
    log.record(f"Lease created: {lease_id}")
    log.record("Check whether VAT applies to the lease. This must be done manually before it is sent for signing.")

    await run_detached(log, "close_offer_by_accept", lambda: leasing_client.close_offer_by_accept(offer.id))
    await run_detached(
        log,
        "reset_waiting_list",
        lambda: leasing_client.reset_waiting_list(contact_code, WaitingListType.PARKING_SPACE),
    )
    denied_offer_ids = await deny_other_active_offers(log, contact_code, offer.id)
    await _send_accept_email(log, listing, contact_code)
    await run_detached(
        log,
        "notify_leasing",
        lambda: communication_client.send_notification_to_role(
            "leasing",
            "Parking space assigned and lease created for internal parking space",
            log.render(),
        ),
    )

    return log.succeed(
        f"Offer {offer.id} accepted, lease {lease_id} created",
        data={"lease_id": lease_id, "denied_offer_ids": denied_offer_ids},
        http_status=202,
    )


async def get_other_active_offers(contact_code: str, exclude_offer_id: int) -> AdapterResult[list[Offer]]:
    result = await leasing_client.get_offers_for_contact(contact_code)
    if not result.ok:
        if result.err == leasing_client.NOT_FOUND:
            return AdapterResult.success([])
        return AdapterResult.failure("unknown")
    return AdapterResult.success(
        [o for o in result.data or [] if o.is_active and o.id != exclude_offer_id]
    )


async def deny_other_active_offers(log: ProcessLog, contact_code: str, accepted_offer_id: int) -> list[int]:
    """Deny every other Active offer the contact holds. Returns the ids denied."""
    others = await get_other_active_offers(contact_code, accepted_offer_id)
    if not others.ok:
        log.advise("deny_other_offers", f"Other offers for {contact_code} could not be retrieved")
        return []
    if not others.data:
        return []

    results = await asyncio.gather(
        *(deny_offer(o.id) for o in others.data),
        return_exceptions=True,
    )

    denied, failed = [], []
    for other, result in zip(others.data, results):
        if isinstance(result, BaseException) or not result.ok:
            failed.append(other.id)
        else:
            denied.append(other.id)

    if failed:
        log.advise(
            "deny_other_offers",
            "Could not deny the following other offers: " + ", ".join(str(i) for i in failed),
        )
    if denied:
        log.record("Denied other offers: " + ", ".join(str(i) for i in denied))
    return denied


async def _send_accept_email(log: ProcessLog, listing: Listing, contact_code: str) -> None:
    contact = await leasing_client.get_contact_by_contact_code(contact_code)
    if not contact.ok or not contact.data:
        log.advise("send_accept_email", "Contact retrieval failed - no confirmation email sent")
        return
    if not contact.data.email_address:
        log.advise("send_accept_email", "Contact has no email address - no confirmation email sent")
        return

    rental_object = listing.rental_object
    email = ParkingSpaceAcceptOfferEmail(
        to=contact.data.email_address,
        address=rental_object.address,
        first_name=contact.data.first_name or "",
        available_from=dates.lease_start_date(rental_object.vacant_from),
        rent=str(rental_object.monthly_rent),
        type=rental_object.object_type_caption or "",
        parking_space_id=listing.rental_object_code,
        object_id=str(listing.id),
    )
    await run_detached(
        log,
        "send_accept_email",
        lambda: communication_client.send_parking_space_accept_offer_email(email),
    )


# Deny

async def deny_offer(offer_id: int) -> ProcessResult:
    """Close the offer as denied and offer the listing to the next applicant."""
    log = ProcessLog("deny_offer", "Deny offer for internal parking space", subscribers=default_subscribers())
    log.record(f"Offer id {offer_id}")

    async def body(log: ProcessLog) -> ProcessResult:
        return await _deny(log, offer_id)

    return await run_process(log, body, ErrorCode.UNKNOWN, "Deny offer for internal parking space - unknown error")


async def _deny(log: ProcessLog, offer_id: int) -> ProcessResult:
    offer = await _resolve_offer(log, offer_id)
    if isinstance(offer, ProcessFailure):
        return offer

    listing = await _resolve_listing(log, offer)
    if isinstance(listing, ProcessFailure):
        return listing

    closed = await leasing_client.close_offer_by_deny(offer.id)
    if not closed.ok:
        return log.fail(
            ErrorCode.CLOSE_OFFER_FAILURE,
            500,
            f"Something went wrong when denying the offer {offer.id}",
        )

    log.record("Creating new offer for this listing...")
    next_offer = await offer_generator.create_offer_for_internal_parking_space(offer.listing_id)
    if not next_offer.ok:
        log.advise("create_next_offer", f"Could not create new offer for this listing: {next_offer.error.value}")

    return log.succeed(
        f"Offer {offer.id} denied",
        data={"listing_id": listing.id},
        http_status=202,
    )


# Expire

async def expire_offer(offer_id: int) -> ProcessResult:
    """Check that an expiring offer still points at a valid listing. Read-only."""
    log = ProcessLog(
        "expire_offer",
        "Response time expired for internal parking space offer",
        subscribers=default_subscribers(),
    )
    log.record(f"Offer id {offer_id}")

    async def body(log: ProcessLog) -> ProcessResult:
        offer = await _resolve_offer(log, offer_id)
        if isinstance(offer, ProcessFailure):
            return offer
        listing = await _resolve_listing(log, offer)
        if isinstance(listing, ProcessFailure):
            return listing
        return log.succeed(f"Offer {offer.id} expired", data={"listing_id": listing.id})

    return await run_process(log, body, ErrorCode.UNKNOWN, "Expire offer for internal parking space - unknown error")
