"""End-to-end tests: offer replies through the real adapters against a fake leasing backend."""

import json
import pytest
import httpx

from src.models.listing import ListingStatus
from src.services.offer_reply import accept_offer, deny_offer
from tests.utils.assertions import assert_process_success
from tests.utils.factories import (
    create_contact,
    create_detailed_applicant,
    create_listing,
    create_offer,
    create_rental_object,
)

CODE = "705-808-00-0006"


class FakeBackend:
    """Answers leasing and communication requests from in-memory state and records every call."""

    def __init__(self):
        self.calls: list[tuple[str, str, str]] = []
        self.bodies: dict[tuple[str, str], dict] = {}
        self.offeree = create_detailed_applicant(applicant_id=1, listing_id=12, contact_code="P1")
        self.next_applicant = create_detailed_applicant(applicant_id=2, listing_id=12, contact_code="P2", priority=2)
        self.offers = {5: create_offer(offer_id=5, listing_id=12, applicant=self.offeree, rental_object_code=CODE)}
        self.listing = create_listing(listing_id=12, rental_object_code=CODE, status=ListingStatus.EXPIRED)
        self.contact_offers: dict[str, list] = {"P1": [self.offers[5]]}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        method, host, path = request.method, request.url.host, request.url.path
        self.calls.append((method, host, path))
        if request.content:
            self.bodies[(method, path)] = json.loads(request.content)

        if host == "communication.test":
            return httpx.Response(204)

        if method == "GET" and path.startswith("/offers/"):
            offer = self.offers.get(int(path.rsplit("/", 1)[1]))
            return self._content(offer.model_dump(by_alias=True, mode="json") if offer else None, 200 if offer else 404)
        if method == "PUT" and path.startswith("/offers/"):
            return httpx.Response(200)
        if path == "/listings/by-id/12":
            return self._content(self.listing.model_dump(by_alias=True, mode="json"))
        if path == f"/parking-spaces/{CODE}":
            return self._content(create_rental_object(CODE).model_dump(by_alias=True, mode="json"))
        if path.startswith("/leases/by-contact-code/"):
            return self._content([{"leaseId": "100-200-01/1", "status": "current"}])
        if path.startswith("/applicants/validate"):
            return httpx.Response(200, json={})
        if method == "POST" and path == "/leases":
            return self._content(f"{CODE}/01", 201)
        if path.endswith("/waitingLists/reset"):
            return httpx.Response(200)
        if method == "GET" and path.endswith("/offers") and path.startswith("/contacts/"):
            contact_code = path.split("/")[2]
            offers = self.contact_offers.get(contact_code, [])
            return self._content([o.model_dump(by_alias=True, mode="json") for o in offers])
        if method == "GET" and path.startswith("/contacts/"):
            return self._content(create_contact(code=path.split("/")[2]).model_dump(by_alias=True, mode="json"))
        if path == "/listing/12/applicants/details":
            return self._content([self.next_applicant.model_dump(by_alias=True, mode="json")])
        if method == "POST" and path == "/offer":
            created = create_offer(offer_id=6, listing_id=12, applicant=self.next_applicant)
            return self._content(created.model_dump(by_alias=True, mode="json"), 201)
        if method == "PATCH" and path.startswith("/applicants/"):
            return httpx.Response(204)
        return httpx.Response(500)

    @staticmethod
    def _content(body, status_code: int = 200) -> httpx.Response:
        return httpx.Response(status_code, json={"content": body})

    def called(self, method: str, path: str) -> bool:
        return any(m == method and p == path for m, _, p in self.calls)


@pytest.fixture
def backend(service_transport, fixed_now):
    fake = FakeBackend()
    service_transport(fake)
    return fake


@pytest.mark.integration
@pytest.mark.asyncio
async def test_deny_offers_listing_to_next_applicant(backend):
    result = await deny_offer(5)

    success = assert_process_success(result, http_status=202)
    assert success.advisories == []
    assert backend.called("PUT", "/offers/5/close-by-deny")
    assert backend.bodies[("POST", "/offer")]["applicantId"] == 2
    assert backend.bodies[("PATCH", "/applicants/2/status")]["status"] == "Offered"
    assert backend.called("POST", "/sendParkingSpaceOffer")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_accept_denies_other_offers_and_creates_next(backend):
    other = create_offer(offer_id=7, listing_id=12, applicant=backend.offeree, rental_object_code=CODE)
    backend.offers[7] = other
    backend.contact_offers["P1"] = [backend.offers[5], other]

    result = await accept_offer(5)

    success = assert_process_success(result, http_status=202)
    assert success.data == {"lease_id": f"{CODE}/01", "denied_offer_ids": [7]}
    assert backend.called("PUT", "/offers/5/close-by-accept")
    assert backend.called("PUT", "/offers/7/close-by-deny")
    assert not backend.called("PUT", "/offers/5/close-by-deny")
    assert backend.bodies[("POST", "/leases")]["fromDate"] == "2025-09-01"
    assert backend.called("POST", "/sendParkingSpaceAcceptOffer")
    assert backend.called("POST", "/sendMessage")
