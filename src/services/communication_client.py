"""Communication service adapter: tenant emails and role notifications."""

from datetime import date, datetime
from typing import Optional

from pydantic import Field

from src.models.applicant import ApplicationType
from src.models.base import ServiceModel
from src.models.results import AdapterResult
from src.services.http_client import communication_service
from src.utils.config import ServiceConfig
from src.utils.logging import get_structured_logger, mask_email

logger = get_structured_logger(__name__)


class ParkingSpaceAcceptOfferEmail(ServiceModel):
    """Payload for the accept confirmation email."""
    to: str
    subject: str = "Du har tackat ja till en bilplats"
    text: str = "Du har tackat ja till en bilplats."
    address: str = ""
    first_name: str = ""
    available_from: date
    rent: str = ""
    type: str = ""
    parking_space_id: str
    object_id: str


class ParkingSpaceOfferEmail(ParkingSpaceAcceptOfferEmail):
    """Payload for the offer email."""
    subject: str = "Erbjudande om bilplats"
    text: str = "Erbjudande om bilplats"
    deadline_date: datetime
    application_type: ApplicationType = ApplicationType.ADDITIONAL
    offer_url: str = Field("", alias="offerURL")


async def _send_tenant_email(path: str, email: ParkingSpaceAcceptOfferEmail) -> AdapterResult[None]:
    if not ServiceConfig.is_production():
        email = email.model_copy(update={"to": ServiceConfig.TENANT_DEFAULT_EMAIL})

    try:
        async with communication_service() as client:
            response = await client.post(path, json=email.to_payload())
        if response.status_code != 204:
            logger.error(
                "Unexpected response from communication service",
                path=path,
                status_code=response.status_code
            )
            return AdapterResult.failure("unknown", status_code=response.status_code)
        return AdapterResult.success(status_code=204)
    except Exception as e:
        logger.error(
            "Failed to send email",
            exc_info=True,
            path=path,
            to=mask_email(email.to),
            error=str(e)
        )
        return AdapterResult.failure("unknown", status_code=500)


async def send_parking_space_offer_email(email: ParkingSpaceOfferEmail) -> AdapterResult[None]:
    return await _send_tenant_email("/sendParkingSpaceOffer", email)


async def send_parking_space_accept_offer_email(email: ParkingSpaceAcceptOfferEmail) -> AdapterResult[None]:
    return await _send_tenant_email("/sendParkingSpaceAcceptOffer", email)


async def send_notification_to_role(role: str, subject: str, message: str) -> AdapterResult[None]:
    """
    Email a staff role (e.g. "dev", "leasing").

    Never raises; failures are logged and returned.
    """
    recipient: Optional[str] = ServiceConfig.role_email(role)
    if not recipient:
        logger.error(f"No email address specified for role {role}", role=role)
        return AdapterResult.failure("no-recipient")

    if not ServiceConfig.is_production():
        subject = f"{ServiceConfig.ENVIRONMENT.upper()} - {subject}"

    try:
        async with communication_service() as client:
            response = await client.post(
                "/sendMessage",
                json={"to": recipient, "subject": subject, "text": message},
            )
        if response.status_code >= 300:
            logger.error(
                f"Unexpected response sending notification to role {role}",
                role=role,
                status_code=response.status_code
            )
            return AdapterResult.failure("unknown", status_code=response.status_code)
        return AdapterResult.success(status_code=response.status_code)
    except Exception as e:
        logger.error(f"Error sending notification to role {role}", exc_info=True, role=role, error=str(e))
        return AdapterResult.failure("unknown")
