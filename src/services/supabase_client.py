"""Supabase access for the process log audit table."""

from typing import Optional
from supabase import create_client, Client
from supabase.client import ClientOptions

from src.utils.config import ServiceConfig
from src.utils.errors import SupabaseError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

# One service-role client per warm function instance
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Cached client. Raises SupabaseError when credentials are missing."""
    global _client

    if _client is None:
        if not ServiceConfig.SUPABASE_URL or not ServiceConfig.SUPABASE_SERVICE_ROLE_KEY:
            raise SupabaseError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set to persist process logs")

        _client = create_client(
            ServiceConfig.SUPABASE_URL,
            ServiceConfig.SUPABASE_SERVICE_ROLE_KEY,
            ClientOptions(auto_refresh_token=False, persist_session=False),
        )
        logger.info("Supabase client initialized", table=ServiceConfig.PROCESS_LOG_TABLE)

    return _client


def reset_supabase_client() -> None:
    global _client
    _client = None


class SupabaseClient:
    """Async context manager yielding the cached client."""

    def __init__(self, table: str):
        self.table = table

    async def __aenter__(self) -> Client:
        return get_supabase_client()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Supabase operation error",
                table=self.table,
                error=str(exc_val),
                type=exc_type.__name__
            )
        return False


async def insert_process_log(row: dict) -> None:
    """Append one finished process log. Raises SupabaseError."""
    table = ServiceConfig.PROCESS_LOG_TABLE
    async with SupabaseClient(table) as client:
        try:
            result = client.table(table).insert(row).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to insert process log {row.get('process_id')}: {e}")

    if not result.data:
        raise SupabaseError(f"Process log {row.get('process_id')} was not stored")
