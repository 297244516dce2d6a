"""Subscribers that receive finished process logs."""

from src.models.results import ProcessFailure
from src.services import communication_client
from src.services.supabase_client import insert_process_log
from src.utils.config import ServiceConfig
from src.utils.errors import SupabaseError
from src.utils.logging import get_structured_logger, mask_sensitive_data
from src.utils.process_log import ProcessLogRecord, Subscriber

logger = get_structured_logger(__name__)

DEV_ROLE = "dev"


async def notify_dev_on_failure(record: ProcessLogRecord) -> None:
    """Mail the rendered trail to the dev role when a process fails."""
    outcome = record.outcome
    if not isinstance(outcome, ProcessFailure) or not outcome.notify_dev:
        return

    await communication_client.send_notification_to_role(
        DEV_ROLE,
        f"{record.title} - {outcome.error.value}",
        "\n".join([record.rendered, "", f"Process id: {record.process_id}", f"Correlation id: {record.correlation_id}"]),
    )


async def persist_process_log(record: ProcessLogRecord) -> None:
    """Store the record in Supabase when the audit sink is enabled."""
    if not ServiceConfig.PROCESS_LOG_SINK_ENABLED:
        return

    outcome = record.outcome
    row = {
        "process_id": record.process_id,
        "process": record.process,
        "correlation_id": record.correlation_id,
        "status": outcome.process_status,
        "http_status": outcome.http_status,
        "error": outcome.error.value if isinstance(outcome, ProcessFailure) else None,
        "events": [
            {
                "timestamp": event.timestamp.isoformat(),
                "level": event.level,
                "message": mask_sensitive_data(event.message),
            }
            for event in record.events
        ],
    }
    try:
        await insert_process_log(row)
    except SupabaseError as e:
        logger.warning("Failed to persist process log", process_id=record.process_id, error=str(e))


def default_subscribers() -> list[Subscriber]:
    return [notify_dev_on_failure, persist_process_log]
