"""Shared pytest fixtures and configuration."""

import os
import pytest
from types import SimpleNamespace
from unittest.mock import Mock, AsyncMock
from datetime import datetime, timezone
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LEASING_SERVICE_URL", "http://leasing.test")
os.environ.setdefault("ECONOMY_SERVICE_URL", "http://economy.test")
os.environ.setdefault("COMMUNICATION_SERVICE_URL", "http://communication.test")
os.environ.setdefault("MINA_SIDOR_URL", "https://mimer.test")
os.environ.setdefault("TENANT_DEFAULT_EMAIL", "tenant-default@mimer.test")
os.environ.setdefault("ROLE_EMAIL_DEV", "dev@mimer.test")
os.environ.setdefault("ROLE_EMAIL_LEASING", "leasing@mimer.test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("PROCESS_LOG_SINK_ENABLED", "false")

import httpx

from src.models.results import AdapterResult
from src.services.http_client import ServiceClient

LEASING_OPERATIONS = [
    "get_active_listing_by_rental_object_code",
    "get_listing_by_listing_id",
    "update_listing_status",
    "get_parking_space_by_code",
    "get_detailed_applicants_by_listing_id",
    "get_applicant_by_contact_code_and_listing_id",
    "apply_for_listing",
    "set_applicant_status_active",
    "update_applicant_status",
    "validate_residential_area_rental_rules",
    "validate_property_rental_rules",
    "create_offer",
    "get_offer_by_offer_id",
    "close_offer_by_accept",
    "close_offer_by_deny",
    "get_offers_for_contact",
    "create_lease",
    "get_leases_by_contact_code",
    "reset_waiting_list",
    "add_applicant_to_waiting_list",
    "get_contact_by_contact_code",
]


@pytest.fixture(autouse=True)
def block_network(monkeypatch):
    """Any unmocked service call gets a 503 instead of reaching the network."""
    monkeypatch.setattr(
        ServiceClient,
        "transport",
        httpx.MockTransport(lambda request: httpx.Response(503)),
    )


@pytest.fixture
def service_transport(monkeypatch):
    """Route service calls to a handler: ``service_transport(handler)``. Returns the recorded requests."""
    requests = []

    def install(handler):
        def record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        monkeypatch.setattr(ServiceClient, "transport", httpx.MockTransport(record))
        return requests

    return install


@pytest.fixture
def leasing(monkeypatch):
    """Every leasing_client operation replaced with an AsyncMock."""
    from src.services import leasing_client

    mocks = {}
    for name in LEASING_OPERATIONS:
        mock = AsyncMock(name=name)
        monkeypatch.setattr(leasing_client, name, mock)
        mocks[name] = mock

    mocks["update_listing_status"].return_value = AdapterResult.success()
    mocks["update_applicant_status"].return_value = {}
    mocks["close_offer_by_accept"].return_value = AdapterResult.success()
    mocks["close_offer_by_deny"].return_value = AdapterResult.success()
    mocks["reset_waiting_list"].return_value = AdapterResult.success()
    mocks["get_offers_for_contact"].return_value = AdapterResult.success([])
    mocks["add_applicant_to_waiting_list"].return_value = None
    return SimpleNamespace(**mocks)


@pytest.fixture
def economy(monkeypatch):
    from src.services import economy_client

    mock = AsyncMock(return_value=AdapterResult.success([]))
    monkeypatch.setattr(economy_client, "get_invoices_sent_to_debt_collection", mock)
    return mock


@pytest.fixture
def communication(monkeypatch):
    """Communication service calls replaced with AsyncMocks returning success."""
    from src.services import communication_client

    mocks = {}
    for name in (
        "send_parking_space_offer_email",
        "send_parking_space_accept_offer_email",
        "send_notification_to_role",
    ):
        mock = AsyncMock(name=name, return_value=AdapterResult.success(status_code=204))
        monkeypatch.setattr(communication_client, name, mock)
        mocks[name] = mock
    return SimpleNamespace(**mocks)


@pytest.fixture
def fixed_now(monkeypatch):
    """Pin ``src.utils.dates.utc_now``. Defaults to Monday 2025-08-11 06:00 UTC."""
    from src.utils import dates

    def pin(moment: datetime = datetime(2025, 8, 11, 6, 0, tzinfo=timezone.utc)) -> datetime:
        monkeypatch.setattr(dates, "utc_now", lambda: moment)
        return moment

    pin()
    return pin


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client for testing."""
    client = Mock()
    client.table = Mock(return_value=Mock())
    return client


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2025-08-11 06:00:00") as frozen_time:
        yield frozen_time
