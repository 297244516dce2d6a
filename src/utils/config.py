"""Service configuration read from environment variables."""

import os
from src.utils.errors import ConfigurationError


class ServiceConfig:
    """Centralized service configuration."""

    SERVICE_NAME = os.environ.get("SERVICE_NAME", "parking-allocation-backend")
    ENVIRONMENT = os.environ.get("ENVIRONMENT", "development").lower()

    LEASING_SERVICE_URL = os.environ.get("LEASING_SERVICE_URL", "")
    ECONOMY_SERVICE_URL = os.environ.get("ECONOMY_SERVICE_URL", "")
    COMMUNICATION_SERVICE_URL = os.environ.get("COMMUNICATION_SERVICE_URL", "")
    HTTP_TIMEOUT_SECONDS = float(os.environ.get("HTTP_TIMEOUT_SECONDS", "30"))

    LOCAL_TIMEZONE = os.environ.get("LOCAL_TIMEZONE", "Europe/Stockholm")
    OFFER_RESPONSE_BUSINESS_DAYS = int(os.environ.get("OFFER_RESPONSE_BUSINESS_DAYS", "3"))
    CREDIT_CHECK_MONTHS = int(os.environ.get("CREDIT_CHECK_MONTHS", "6"))

    MINA_SIDOR_URL = os.environ.get("MINA_SIDOR_URL", "")
    TENANT_DEFAULT_EMAIL = os.environ.get("TENANT_DEFAULT_EMAIL", "")

    SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
    SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")
    PROCESS_LOG_SINK_ENABLED = os.environ.get("PROCESS_LOG_SINK_ENABLED", "false").lower() == "true"
    PROCESS_LOG_TABLE = os.environ.get("PROCESS_LOG_TABLE", "process_logs")

    @classmethod
    def require(cls, name: str) -> str:
        """Return a required setting or raise ConfigurationError."""
        value = getattr(cls, name, None)
        if not value:
            raise ConfigurationError(f"{name} must be set")
        return value

    @classmethod
    def is_production(cls) -> bool:
        return cls.ENVIRONMENT == "production"

    @classmethod
    def role_email(cls, role: str) -> str:
        """Email address for a notification role, e.g. ROLE_EMAIL_DEV."""
        return os.environ.get(f"ROLE_EMAIL_{role.upper()}", "")
