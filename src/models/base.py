"""Shared pydantic configuration for leasing-service payloads."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ServiceModel(BaseModel):
    """Base model speaking camelCase on the wire and snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
        extra="ignore",
    )

    def to_payload(self) -> dict:
        """Serialize for a request body."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
