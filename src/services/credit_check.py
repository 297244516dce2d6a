"""Internal credit check against debt-collection invoices."""

from typing import Optional

from src.models.results import AdapterResult
from src.services import economy_client
from src.utils.config import ServiceConfig
from src.utils.dates import local_today, subtract_months
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


async def run_internal_credit_check(contact_code: str, months: Optional[int] = None) -> AdapterResult[bool]:
    """
    Check for unpaid invoices sent to debt collection.

    ``data`` is True when the contact passes. A failed result means the
    economy service could not answer.
    """
    if months is None:
        months = ServiceConfig.CREDIT_CHECK_MONTHS
    since = subtract_months(local_today(), months)

    invoices = await economy_client.get_invoices_sent_to_debt_collection(contact_code, since)
    if not invoices.ok:
        return AdapterResult.failure(invoices.err or "unknown", status_code=invoices.status_code)

    unpaid = [invoice for invoice in invoices.data or [] if invoice.unpaid_amount > 0]
    if unpaid:
        logger.info(
            "Credit check found unpaid debt collection invoices",
            unpaid_invoices=len(unpaid),
            since=since.isoformat()
        )
    return AdapterResult.success(not unpaid)
