"""Per-invocation structured event log for allocation processes.

Each process run (intake, offer creation, accept, deny, expire) owns a
``ProcessLog``. Steps record events into it; when the run ends the log is
flushed: events go to the structured logger and a ``ProcessLogRecord`` is
published to every subscriber (dev alerts, the audit sink).
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Awaitable, Callable, Iterator, Optional

from pydantic import BaseModel, Field
from ulid import ULID

from src.models.results import Advisory, ProcessErrorCode, ProcessFailure, ProcessResult, ProcessSuccess
from src.utils.dates import utc_now
from src.utils.logging import get_correlation_id, get_structured_logger, log_context, log_timing
from src.utils.logging_config import LoggingConfig

logger = get_structured_logger(__name__)

_current_log: ContextVar[Optional["ProcessLog"]] = ContextVar("process_log", default=None)


class ProcessEvent(BaseModel):
    timestamp: datetime
    level: int = logging.INFO
    message: str
    fields: dict[str, Any] = Field(default_factory=dict)


class ProcessLogRecord(BaseModel):
    """What subscribers receive when a process finishes."""
    process_id: str
    process: str
    title: str
    correlation_id: Optional[str] = None
    outcome: ProcessResult
    events: list[ProcessEvent]
    rendered: str


Subscriber = Callable[[ProcessLogRecord], Awaitable[None]]


class ProcessLog:
    """Ordered event log for one process invocation."""

    def __init__(self, process: str, title: str, subscribers: Optional[list[Subscriber]] = None):
        self.process = process
        self.title = title
        self.process_id = str(ULID())
        self.correlation_id = get_correlation_id()
        self.events: list[ProcessEvent] = []
        self.advisories: list[Advisory] = []
        self.subscribers: list[Subscriber] = list(subscribers or [])
        self.record(title)
        self.record(f"Time: {utc_now().strftime('%Y-%m-%d %H:%M')} UTC")

    def record(self, message: str, level: int = logging.INFO, **fields: Any) -> None:
        self.events.append(
            ProcessEvent(timestamp=utc_now(), level=level, message=message, fields=fields)
        )

    def warn(self, message: str, **fields: Any) -> None:
        self.record(message, level=logging.WARNING, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self.record(message, level=logging.ERROR, **fields)

    def advise(self, operation: str, detail: str, **fields: Any) -> Advisory:
        """Record a failed secondary side effect."""
        advisory = Advisory(operation=operation, detail=detail)
        self.advisories.append(advisory)
        self.warn(f"{operation}: {detail}", operation=operation, **fields)
        return advisory

    def fail(
        self,
        error: ProcessErrorCode,
        http_status: int,
        message: str,
        notify_dev: bool = True,
    ) -> ProcessFailure:
        self.error(message, error=error.value, http_status=http_status)
        return ProcessFailure(error=error, http_status=http_status, message=message, notify_dev=notify_dev)

    def succeed(
        self,
        message: str,
        data: Optional[dict[str, Any]] = None,
        http_status: int = 200,
    ) -> ProcessSuccess:
        self.record(message)
        return ProcessSuccess(
            http_status=http_status,
            message=message,
            data=data,
            advisories=list(self.advisories),
        )

    def render(self) -> str:
        """Human-readable trail, one event per line."""
        return "\n".join(event.message for event in self.events)

    def to_record(self, outcome: ProcessResult) -> ProcessLogRecord:
        return ProcessLogRecord(
            process_id=self.process_id,
            process=self.process,
            title=self.title,
            correlation_id=self.correlation_id,
            outcome=outcome,
            events=list(self.events),
            rendered=self.render(),
        )

    async def flush(self, outcome: ProcessResult) -> ProcessResult:
        """Emit events and publish the record. Subscriber errors never propagate."""
        if LoggingConfig.LOG_PROCESS_EVENTS:
            for event in self.events:
                logger.log(
                    event.level,
                    event.message,
                    process_name=self.process,
                    process_id=self.process_id,
                    **event.fields
                )

        if isinstance(outcome, ProcessFailure):
            logger.error(
                f"{self.process} failed",
                process_name=self.process,
                process_id=self.process_id,
                error=outcome.error.value,
                http_status=outcome.http_status,
            )
        else:
            logger.info(
                f"{self.process} succeeded",
                process_name=self.process,
                process_id=self.process_id,
                advisories=len(outcome.advisories),
            )

        record = self.to_record(outcome)
        for subscriber in self.subscribers:
            try:
                await subscriber(record)
            except Exception as e:
                logger.warning(
                    "Process log subscriber failed",
                    process_name=self.process,
                    subscriber=getattr(subscriber, "__name__", repr(subscriber)),
                    error=str(e)
                )
        return outcome


def current_process_log() -> Optional[ProcessLog]:
    """The log of the process running in this context, if any."""
    return _current_log.get()


@contextmanager
def process_log_context(log: ProcessLog) -> Iterator[ProcessLog]:
    """Bind ``log`` as the current process log and tag structured log lines with it."""
    token = _current_log.set(log)
    try:
        with log_context(process_name=log.process, process_id=log.process_id):
            yield log
    finally:
        _current_log.reset(token)


async def run_detached(log: ProcessLog, operation: str, action: Callable[[], Awaitable[Any]]) -> Optional[Any]:
    """
    Run a best-effort side effect.

    Exceptions and failed ``AdapterResult``s become advisories on ``log``;
    nothing is raised. Returns the action's value, or None when it raised.
    """
    try:
        result = await action()
    except Exception as e:
        logger.error(f"{operation} failed", exc_info=True, operation=operation)
        log.advise(operation, str(e) or e.__class__.__name__)
        return None

    if getattr(result, "ok", True) is False:
        detail = getattr(result, "err", None) or getattr(result, "error", None) or "failed"
        log.advise(operation, str(getattr(detail, "value", detail)))
    return result


async def run_process(
    log: ProcessLog,
    body: Callable[[ProcessLog], Awaitable[ProcessResult]],
    unexpected_error: ProcessErrorCode,
    failure_message: str,
) -> ProcessResult:
    """
    Run a process body with ``log`` bound, then flush the log.

    Unexpected exceptions become ``unexpected_error`` failures with status 500.
    """
    with process_log_context(log):
        try:
            with log_timing(log.process, logger):
                outcome = await body(log)
        except Exception as e:
            logger.error(failure_message, exc_info=True, error=str(e))
            outcome = log.fail(unexpected_error, 500, f"{failure_message}: {e}")
        return await log.flush(outcome)
