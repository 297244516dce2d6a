"""Application intake: register a tenant's note of interest in a scored parking space."""

from src.models.applicant import Applicant, ApplicantStatus, ApplicationType
from src.models.contact import Contact, WaitingListType
from src.models.listing import Listing
from src.models.results import CreateNoteOfInterestErrorCode, ProcessResult
from src.services import communication_client, credit_check, leasing_client, rental_rules
from src.services.process_log_sinks import default_subscribers
from src.utils import dates
from src.utils.process_log import ProcessLog, run_process

ErrorCode = CreateNoteOfInterestErrorCode


async def create_note_of_interest_for_internal_parking_space(
    rental_object_code: str,
    contact_code: str,
    application_type: ApplicationType,
) -> ProcessResult:
    """
    Apply ``contact_code`` to the active scored listing of ``rental_object_code``.

    Re-applying is idempotent; a withdrawn application is reactivated.
    """
    log = ProcessLog(
        "create_note_of_interest",
        "Create note of interest for internal parking space",
        subscribers=default_subscribers(),
    )
    log.record(f"Applicant {contact_code} applied for parking space {rental_object_code}")

    async def body(log: ProcessLog) -> ProcessResult:
        return await _apply(log, rental_object_code, contact_code, application_type)

    return await run_process(
        log,
        body,
        ErrorCode.INTERNAL_ERROR,
        "Create note of interest for internal parking space failed",
    )


async def _apply(
    log: ProcessLog,
    rental_object_code: str,
    contact_code: str,
    application_type: ApplicationType,
) -> ProcessResult:
    listing_result = await leasing_client.get_active_listing_by_rental_object_code(rental_object_code)
    if not listing_result.ok or not listing_result.data:
        return log.fail(
            ErrorCode.PARKINGSPACE_NOT_FOUND,
            404,
            f"The listing {rental_object_code} does not exist or is no longer available.",
        )
    listing: Listing = listing_result.data

    parking_space = await leasing_client.get_parking_space_by_code(rental_object_code)
    if not parking_space.ok or not parking_space.data:
        return log.fail(
            ErrorCode.PARKINGSPACE_NOT_FOUND,
            404,
            f"The rental object {rental_object_code} does not exist or is no longer available.",
        )
    listing.rental_object = parking_space.data

    if not listing.is_scored:
        return log.fail(
            ErrorCode.PARKINGSPACE_NOT_INTERNAL,
            400,
            f"Only internal parking spaces are handled. Listing {listing.id} is {listing.rental_rule.value}.",
        )

    contact_result = await leasing_client.get_contact_by_contact_code(contact_code)
    if not contact_result.ok or not contact_result.data:
        return log.fail(
            ErrorCode.APPLICANT_NOT_FOUND,
            404,
            f"Applicant {contact_code} could not be retrieved.",
        )
    contact: Contact = contact_result.data

    leases = await leasing_client.get_leases_by_contact_code(contact_code)
    if not leases.ok:
        return log.fail(
            ErrorCode.INTERNAL_ERROR,
            500,
            f"Leases for applicant {contact_code} could not be retrieved: {leases.err}",
        )
    if not leases.data:
        return log.fail(
            ErrorCode.APPLICANT_NOT_TENANT,
            403,
            f"Applicant {contact_code} is not a tenant",
        )

    rules = await rental_rules.validate_rental_rules(
        contact_code,
        listing.rental_object.residential_area_code or "",
        rental_object_code,
        application_type,
    )
    if not rules.residential_area.ok:
        return log.fail(
            ErrorCode.from_violation(rules.residential_area.violation),
            400,
            f"Applicant {contact_code} is not eligible for renting due to Residential Area Rental Rules",
        )
    if not rules.rental_object.ok:
        return log.fail(
            ErrorCode.from_violation(rules.rental_object.violation),
            400,
            f"Applicant {contact_code} is not eligible for renting due to Property Rental Rules",
        )

    credit = await credit_check.run_internal_credit_check(contact.contact_code)
    if not credit.ok:
        return log.fail(
            ErrorCode.INTERNAL_ERROR,
            500,
            f"Failed to get invoices for contact {contact.contact_code}: {credit.status_code} {credit.err}",
        )
    log.record(
        "Internal credit check done, result: "
        + ("no remarks" if credit.data else "rent invoices in debt collection")
    )
    if not credit.data:
        log.record("The application was rejected due to unmet credit requirements (see above).")
        await communication_client.send_notification_to_role(
            "leasing",
            "Create note of interest - Unmet credit requirements",
            log.render(),
        )
        return log.fail(
            ErrorCode.INTERNAL_CREDIT_CHECK_FAILED,
            400,
            "The parking space lease application has been rejected",
            notify_dev=False,
        )

    if not contact.parking_space_waiting_list:
        log.record("Applicant is not in the parking space waiting list.")
        await leasing_client.add_applicant_to_waiting_list(contact.contact_code, WaitingListType.PARKING_SPACE)
        log.record("Applicant added to the parking space waiting list.")

    log.record(f"Validation done. Applicant approved to apply for parking space {rental_object_code}")
    return await _register_application(log, listing, contact, application_type, rental_object_code)


async def _register_application(
    log: ProcessLog,
    listing: Listing,
    contact: Contact,
    application_type: ApplicationType,
    rental_object_code: str,
) -> ProcessResult:
    contact_code = contact.contact_code
    applied = f"Applicant {contact_code} successfully applied to parking space {rental_object_code}"
    already_applied = f"Applicant {contact_code} already has application for {rental_object_code}"

    existing = await leasing_client.get_applicant_by_contact_code_and_listing_id(contact_code, listing.id)

    if not existing.ok and existing.err == leasing_client.NOT_FOUND:
        log.record("Applicant does not exist, creating applicant.")
        applicant = Applicant(
            name=contact.full_name,
            national_registration_number=contact.national_registration_number,
            contact_code=contact_code,
            application_date=dates.utc_now(),
            application_type=application_type,
            status=ApplicantStatus.ACTIVE,
            listing_id=listing.id,
        )
        result = await leasing_client.apply_for_listing(applicant)
        if result.ok:
            return log.succeed(applied)
        if result.err == leasing_client.CONFLICT:
            log.record("Applicant already exists in the leasing store.")
            return log.succeed(already_applied)
        return log.fail(ErrorCode.INTERNAL_ERROR, 500, "Application could not be created")

    if not existing.ok:
        return log.fail(
            ErrorCode.INTERNAL_ERROR,
            500,
            f"Applicant {contact_code} could not be looked up: {existing.err}",
        )

    current: Applicant = existing.data
    if current.status in (ApplicantStatus.ACTIVE, ApplicantStatus.OFFERED):
        log.record(f"Applicant already has an {current.status.value.lower()} application for {rental_object_code}.")
        return log.succeed(already_applied)

    if current.status.is_withdrawn:
        log.record(f"Applicant previously withdrew from {rental_object_code}. Reactivating application.")
        await leasing_client.set_applicant_status_active(current.id, current.contact_code, application_type)
        return log.succeed(applied)

    return log.fail(
        ErrorCode.INTERNAL_ERROR,
        500,
        f"Applicant {contact_code} has status {current.status.value} and cannot apply again",
    )
