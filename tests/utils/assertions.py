"""Custom assertion helpers."""

from typing import Optional

from src.models.results import ProcessFailure, ProcessResult, ProcessSuccess


def assert_process_failure(result: ProcessResult, error, http_status: int) -> ProcessFailure:
    """Assert that a process failed with the given code and status."""
    assert isinstance(result, ProcessFailure), f"expected failure, got {result!r}"
    assert result.error == error
    assert result.http_status == http_status
    return result


def assert_process_success(result: ProcessResult, http_status: int = 200, message: Optional[str] = None) -> ProcessSuccess:
    """Assert that a process succeeded, optionally checking its message."""
    assert isinstance(result, ProcessSuccess), f"expected success, got {result!r}"
    assert result.http_status == http_status
    if message is not None:
        assert message in (result.message or "")
    return result


def advisory_operations(result: ProcessSuccess) -> list[str]:
    return [a.operation for a in result.advisories]
