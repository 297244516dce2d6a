"""Tests for the leasing service adapter against a mock transport."""

import json
import pytest
import httpx
from datetime import date

from src.models.applicant import Applicant, ApplicantStatus, ApplicationType
from src.models.contact import WaitingListType
from src.models.listing import ListingStatus
from src.services import leasing_client
from src.utils.errors import LeasingServiceError, WaitingListError
from tests.utils.helpers import content_response

LISTING = {
    "id": 12,
    "rentalObjectCode": "705-808-00-0006",
    "status": "Active",
    "rentalRule": "SCORED",
}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_active_listing(service_transport):
    requests = service_transport(lambda request: content_response(LISTING))

    result = await leasing_client.get_active_listing_by_rental_object_code("705-808-00-0006")

    assert result.ok
    assert result.data.id == 12
    assert result.data.status == ListingStatus.ACTIVE
    assert requests[0].url.path == "/listings/active/by-code/705-808-00-0006"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_active_listing_not_found(service_transport):
    service_transport(lambda request: httpx.Response(404))

    result = await leasing_client.get_active_listing_by_rental_object_code("705-808-00-0006")

    assert not result.ok
    assert result.err == "not-found"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_listing_by_id_returns_none_on_failure(service_transport):
    service_transport(lambda request: httpx.Response(500))
    assert await leasing_client.get_listing_by_listing_id(12) is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_transport_error_is_unknown(service_transport):
    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    service_transport(refuse)

    result = await leasing_client.get_parking_space_by_code("705-808-00-0006")

    assert not result.ok
    assert result.err == "unknown"


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("status,err", [(409, "conflict"), (400, "bad-request"), (500, "unknown")])
async def test_apply_for_listing_errors(service_transport, status, err):
    service_transport(lambda request: httpx.Response(status))
    applicant = Applicant(contact_code="P123456", listing_id=12, application_type=ApplicationType.REPLACE)

    result = await leasing_client.apply_for_listing(applicant)

    assert result.err == err


@pytest.mark.unit
@pytest.mark.asyncio
async def test_apply_for_listing_sends_camel_case(service_transport):
    requests = service_transport(lambda request: content_response({"id": 5, "contactCode": "P123456", "listingId": 12}, 201))
    applicant = Applicant(contact_code="P123456", listing_id=12, application_type=ApplicationType.REPLACE)

    result = await leasing_client.apply_for_listing(applicant)

    assert result.ok
    assert result.data.id == 5
    body = json.loads(requests[0].content)
    assert body["contactCode"] == "P123456"
    assert body["applicationType"] == "Replace"
    assert body["status"] == "Active"


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("status,err", [
    (403, "no-housing-contract-in-the-area"),
    (404, "not-found"),
    (502, "unknown"),
])
async def test_validate_residential_area_rules_failures(service_transport, status, err):
    requests = service_transport(lambda request: httpx.Response(status))

    result = await leasing_client.validate_residential_area_rental_rules("P123456", "AREA1")

    assert result.err == err
    assert requests[0].url.path == "/applicants/validateResidentialAreaRentalRules/P123456/AREA1"


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("status,err", [
    (403, "not-tenant-in-the-property"),
    (400, "not-a-parking-space"),
    (404, "not-found"),
])
async def test_validate_property_rules_failures(service_transport, status, err):
    service_transport(lambda request: httpx.Response(status))

    result = await leasing_client.validate_property_rental_rules("P123456", "705-808-00-0006")

    assert result.err == err


@pytest.mark.unit
@pytest.mark.asyncio
async def test_validate_rules_pass_carries_application_type(service_transport):
    service_transport(lambda request: httpx.Response(200, json={"reason": "ok", "applicationType": "Replace"}))

    result = await leasing_client.validate_property_rental_rules("P123456", "705-808-00-0006")

    assert result.ok
    assert result.data.application_type == ApplicationType.REPLACE


@pytest.mark.unit
@pytest.mark.asyncio
async def test_add_to_waiting_list_requires_created(service_transport):
    service_transport(lambda request: httpx.Response(200))

    with pytest.raises(WaitingListError) as exc_info:
        await leasing_client.add_applicant_to_waiting_list("P123456", WaitingListType.PARKING_SPACE)
    assert exc_info.value.status_code == 200


@pytest.mark.unit
@pytest.mark.asyncio
async def test_add_to_waiting_list_created(service_transport):
    requests = service_transport(lambda request: httpx.Response(201))

    await leasing_client.add_applicant_to_waiting_list("P123456", WaitingListType.PARKING_SPACE)

    assert json.loads(requests[0].content) == {"waitingListType": "ParkingSpace"}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_applicant_status_raises_on_error(service_transport):
    service_transport(lambda request: httpx.Response(500))

    with pytest.raises(LeasingServiceError):
        await leasing_client.update_applicant_status(7, "P123456", ApplicantStatus.OFFERED)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_set_applicant_status_active_payload(service_transport):
    requests = service_transport(lambda request: httpx.Response(200, json={"content": None}))

    await leasing_client.set_applicant_status_active(7, "P123456", ApplicationType.ADDITIONAL)

    assert requests[0].method == "PATCH"
    assert requests[0].url.path == "/applicants/7/status"
    assert json.loads(requests[0].content) == {
        "status": "Active",
        "contactCode": "P123456",
        "applicationType": "Additional",
    }


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_listing_status(service_transport):
    requests = service_transport(lambda request: httpx.Response(200))

    result = await leasing_client.update_listing_status(12, ListingStatus.CLOSED)

    assert result.ok
    assert requests[0].method == "PUT"
    assert json.loads(requests[0].content) == {"status": "Closed"}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_reset_waiting_list_not_in_list(service_transport):
    service_transport(lambda request: httpx.Response(404))

    result = await leasing_client.reset_waiting_list("P123456", WaitingListType.PARKING_SPACE)

    assert result.err == "not-in-waiting-list"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_lease(service_transport):
    requests = service_transport(lambda request: content_response("705-808-00-0006/01"))

    result = await leasing_client.create_lease("705-808-00-0006", "P123456", date(2025, 9, 1), "001", include_vat=False)

    assert result.ok
    assert result.data == "705-808-00-0006/01"
    assert json.loads(requests[0].content) == {
        "parkingSpaceId": "705-808-00-0006",
        "contactCode": "P123456",
        "fromDate": "2025-09-01",
        "companyCode": "001",
        "includeVAT": False,
    }


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_lease_propagates_transport_errors(service_transport):
    def timeout(request):
        raise httpx.ReadTimeout("slow", request=request)

    service_transport(timeout)

    with pytest.raises(httpx.ReadTimeout):
        await leasing_client.create_lease("705-808-00-0006", "P123456", date(2025, 9, 1), "001", include_vat=False)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_leases_queries_current_and_upcoming(service_transport):
    requests = service_transport(lambda request: content_response([{"leaseId": "L1", "status": "current"}]))

    result = await leasing_client.get_leases_by_contact_code("P123456")

    assert [lease.lease_id for lease in result.data] == ["L1"]
    params = requests[0].url.params
    assert params["status"] == "current,upcoming"
    assert params["includeContacts"] == "false"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_contact_with_empty_content_is_not_found(service_transport):
    service_transport(lambda request: content_response(None))

    result = await leasing_client.get_contact_by_contact_code("P123456")

    assert result.err == "not-found"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_offers_for_contact_not_found(service_transport):
    service_transport(lambda request: httpx.Response(404))

    result = await leasing_client.get_offers_for_contact("P123456")

    assert result.err == "not-found"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unexpected_reply_recorded_in_current_process_log(service_transport):
    from src.utils.process_log import ProcessLog, process_log_context

    service_transport(lambda request: httpx.Response(502))
    log = ProcessLog("create_offer", "Create offer")

    with process_log_context(log):
        result = await leasing_client.get_detailed_applicants_by_listing_id(12)

    assert result.err == "unknown"
    assert "Leasing service answered 502 in get_detailed_applicants_by_listing_id" in log.render()
