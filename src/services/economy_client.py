"""Economy service adapter."""

from datetime import date

from src.models.invoice import Invoice
from src.models.results import AdapterResult
from src.services.http_client import content, economy_service
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


async def get_invoices_sent_to_debt_collection(contact_code: str, since: date) -> AdapterResult[list[Invoice]]:
    """Invoices for a contact sent to debt collection on or after ``since``."""
    try:
        async with economy_service() as client:
            response = await client.get(
                f"/invoices/by-contact-code/{contact_code}/debt-collection",
                params={"from": since.isoformat()},
            )
        if response.status_code == 404:
            return AdapterResult.success([])
        if response.status_code != 200:
            logger.error(
                "Unexpected response from economy service",
                status_code=response.status_code
            )
            return AdapterResult.failure("unknown", status_code=response.status_code)
        return AdapterResult.success([Invoice.model_validate(i) for i in content(response) or []])
    except Exception as e:
        logger.error("Failed to fetch debt collection invoices", exc_info=True, error=str(e))
        return AdapterResult.failure("unknown")
