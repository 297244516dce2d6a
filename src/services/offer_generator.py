"""Offer generation: pick the first eligible applicant of an expired listing and offer them the space."""

from typing import Optional

from src.models.applicant import ApplicantStatus, ApplicationType, DetailedApplicant
from src.models.contact import Contact
from src.models.listing import Listing, ListingStatus
from src.models.offer import CreateOfferParams, Offer, OfferApplicant, OfferStatus
from src.models.results import CreateOfferErrorCode, ProcessResult
from src.services import communication_client, leasing_client, rental_rules
from src.services.communication_client import ParkingSpaceOfferEmail
from src.services.process_log_sinks import default_subscribers
from src.utils.config import ServiceConfig
from src.utils import dates
from src.utils.process_log import ProcessLog, run_detached, run_process

ErrorCode = CreateOfferErrorCode


def extract_first_name(name: Optional[str]) -> str:
    """Names are stored as "lastname firstname"."""
    if not name:
        return ""
    parts = name.split()
    return parts[1] if len(parts) > 1 else ""


def offer_url(offer_id: int) -> str:
    return f"{ServiceConfig.MINA_SIDOR_URL}/mina-sidor/erbjudanden/detalj?e={offer_id}&s=onecore"


def build_selected_applicants(
    eligible: DetailedApplicant,
    applicants: list[DetailedApplicant],
    disqualified_ids: set[int],
) -> list[OfferApplicant]:
    """The offeree (as Offered) followed by the remaining Active applicants in store order."""
    offered = eligible.model_copy(update={"status": ApplicantStatus.OFFERED})
    rest = [
        a for a in applicants
        if a.status == ApplicantStatus.ACTIVE and a.id != eligible.id and a.id not in disqualified_ids
    ]
    return [OfferApplicant.from_detailed_applicant(a) for a in [offered, *rest]]


async def create_offer_for_internal_parking_space(listing_id: int) -> ProcessResult:
    """Create an offer for the highest ranked eligible applicant of an expired listing."""
    log = ProcessLog(
        "create_offer",
        "Create offer for internal parking space",
        subscribers=default_subscribers(),
    )
    log.record(f"Offer to be created for listing {listing_id}")

    async def body(log: ProcessLog) -> ProcessResult:
        return await _create_offer(log, listing_id)

    return await run_process(log, body, ErrorCode.UNKNOWN, "Create offer failed - unknown error")


async def _create_offer(log: ProcessLog, listing_id: int) -> ProcessResult:
    listing = await leasing_client.get_listing_by_listing_id(listing_id)
    if not listing:
        return log.fail(ErrorCode.NO_LISTING, 500, f"Listing with id {listing_id} not found")

    parking_space = await leasing_client.get_parking_space_by_code(listing.rental_object_code)
    if not parking_space.ok or not parking_space.data:
        return log.fail(ErrorCode.NO_LISTING, 500, f"Rental object for listing with id {listing_id} not found")
    listing.rental_object = parking_space.data

    if listing.status != ListingStatus.EXPIRED:
        return log.fail(ErrorCode.LISTING_NOT_EXPIRED, 500, f"Listing with id {listing_id} not expired")

    if not listing.rental_object.vacant_from:
        return log.fail(ErrorCode.RENTAL_OBJECT_NOT_VACANT, 500, f"Listing with id {listing_id} has no vacantFrom date")

    if not listing.rental_object.residential_area_code:
        return log.fail(
            ErrorCode.NO_LISTING,
            500,
            f"Rental object for listing with id {listing_id} has no residential area",
        )

    applicants_result = await leasing_client.get_detailed_applicants_by_listing_id(listing_id)
    if not applicants_result.ok:
        return log.fail(
            ErrorCode.LISTING_NOT_EXPIRED,
            500,
            f"Could not get applicants for listing with id {listing_id} - {applicants_result.err}",
        )
    applicants: list[DetailedApplicant] = applicants_result.data or []

    disqualified_ids: set[int] = set()
    eligible = await find_first_eligible_applicant(log, listing, applicants, disqualified_ids)

    if eligible is None:
        closed = await leasing_client.update_listing_status(listing.id, ListingStatus.CLOSED)
        if not closed.ok:
            return log.fail(ErrorCode.UPDATE_LISTING_STATUS_FAILURE, 500, "Error updating listing status to Closed.")
        log.record(f"Listing {listing.id} closed")
        return log.fail(
            ErrorCode.NO_APPLICANTS,
            500,
            "No eligible applicant found, no offer created.",
            notify_dev=False,
        )

    contact_result = await leasing_client.get_contact_by_contact_code(eligible.contact_code)
    if not contact_result.ok or not contact_result.data:
        return log.fail(ErrorCode.NO_CONTACT, 500, f"Could not find contact {eligible.contact_code}")
    contact: Contact = contact_result.data

    now = dates.utc_now()
    params = CreateOfferParams(
        applicant_id=eligible.id,
        listing_id=listing.id,
        status=OfferStatus.ACTIVE,
        sent_at=now,
        expires_at=dates.offer_expires_at(now),
        selected_applicants=build_selected_applicants(eligible, applicants, disqualified_ids),
    )
    offer_result = await leasing_client.create_offer(params)
    if not offer_result.ok or not offer_result.data:
        return log.fail(ErrorCode.CREATE_OFFER_FAILURE, 500, "Create Offer failed")
    offer: Offer = offer_result.data
    log.record(f"Created offer {offer.id}")

    updated = await run_detached(
        log,
        "update_applicant_status",
        lambda: leasing_client.update_applicant_status(eligible.id, eligible.contact_code, ApplicantStatus.OFFERED),
    )
    if updated is not None:
        log.record(f"Updated status for applicant {eligible.id}")

    await _send_offer_email(log, listing, eligible, contact, offer)

    return log.succeed(
        f"Offer {offer.id} created for applicant {eligible.id}",
        data={
            "offer_id": offer.id,
            "applicant_id": eligible.id,
            "expires_at": offer.expires_at.isoformat(),
        },
    )


async def find_first_eligible_applicant(
    log: ProcessLog,
    listing: Listing,
    applicants: list[DetailedApplicant],
    disqualified_ids: set[int],
) -> Optional[DetailedApplicant]:
    """
    Walk applicants in store order and return the first Active, prioritized one passing both rules.

    Candidates failing the rules are disqualified on the way.
    """
    for applicant in applicants:
        if applicant.priority is None or applicant.status != ApplicantStatus.ACTIVE:
            continue
        rules = await rental_rules.validate_rental_rules(
            applicant.contact_code,
            listing.rental_object.residential_area_code,
            listing.rental_object_code,
            applicant.application_type or ApplicationType.ADDITIONAL,
        )
        if rules.ok:
            return applicant

        disqualified_ids.add(applicant.id)
        updated = await run_detached(
            log,
            "disqualify_applicant",
            lambda: leasing_client.update_applicant_status(
                applicant.id, applicant.contact_code, ApplicantStatus.DISQUALIFIED
            ),
        )
        if updated is not None:
            log.record(
                f"Updated status for disqualified applicant {applicant.id} due to failing rental rules validation"
            )
    return None


async def _send_offer_email(
    log: ProcessLog,
    listing: Listing,
    applicant: DetailedApplicant,
    contact: Contact,
    offer: Offer,
) -> None:
    if not contact.email_address:
        log.advise("send_offer_email", f"Contact {contact.contact_code} has no email address")
        return

    rental_object = listing.rental_object
    email = ParkingSpaceOfferEmail(
        to=contact.email_address,
        address=rental_object.address,
        first_name=extract_first_name(applicant.name),
        available_from=dates.lease_start_date(rental_object.vacant_from),
        deadline_date=offer.expires_at,
        rent=str(rental_object.monthly_rent),
        type=rental_object.object_type_caption or "",
        parking_space_id=listing.rental_object_code,
        object_id=str(listing.id),
        application_type=applicant.application_type or ApplicationType.ADDITIONAL,
        offer_url=offer_url(offer.id),
    )
    sent = await run_detached(
        log,
        "send_offer_email",
        lambda: communication_client.send_parking_space_offer_email(email),
    )
    if sent is not None and sent.ok:
        log.record(f"Offer email sent for offer {offer.id}")
