"""Rental rule validation for scored parking spaces."""

import asyncio
from typing import Optional

from pydantic import BaseModel

from src.models.applicant import ApplicationType, RentalRuleCheck
from src.models.results import AdapterResult, RentalRuleViolation
from src.services import leasing_client
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

_PASSTHROUGH = {
    RentalRuleViolation.NO_HOUSING_CONTRACT_IN_THE_AREA.value,
    RentalRuleViolation.NOT_TENANT_IN_THE_PROPERTY.value,
    RentalRuleViolation.NOT_A_PARKING_SPACE.value,
}


class RuleOutcome(BaseModel):
    ok: bool
    violation: Optional[RentalRuleViolation] = None
    reason: Optional[str] = None


class RentalRuleResult(BaseModel):
    residential_area: RuleOutcome
    rental_object: RuleOutcome

    @property
    def ok(self) -> bool:
        return self.residential_area.ok and self.rental_object.ok

    @property
    def violation(self) -> Optional[RentalRuleViolation]:
        """First failing reason, residential area before rental object."""
        for outcome in (self.residential_area, self.rental_object):
            if not outcome.ok:
                return outcome.violation
        return None


def to_rule_outcome(result: AdapterResult[RentalRuleCheck], application_type: ApplicationType) -> RuleOutcome:
    """Map a validation reply to a pass or a violation for the requested application type."""
    if not result.ok:
        if result.err in _PASSTHROUGH:
            return RuleOutcome(ok=False, violation=RentalRuleViolation(result.err))
        return RuleOutcome(ok=False, violation=RentalRuleViolation.NOT_ELIGIBLE_TO_RENT)

    check = result.data
    if (
        check is not None
        and check.application_type == ApplicationType.REPLACE
        and application_type == ApplicationType.ADDITIONAL
    ):
        return RuleOutcome(
            ok=False,
            violation=RentalRuleViolation.NOT_ALLOWED_TO_RENT_ADDITIONAL,
            reason=check.reason,
        )
    return RuleOutcome(ok=True, reason=check.reason if check else None)


async def validate_rental_rules(
    contact_code: str,
    residential_area_code: str,
    rental_object_code: str,
    application_type: ApplicationType,
) -> RentalRuleResult:
    """Run both rule checks concurrently and join them."""
    area_result, property_result = await asyncio.gather(
        leasing_client.validate_residential_area_rental_rules(contact_code, residential_area_code),
        leasing_client.validate_property_rental_rules(contact_code, rental_object_code),
    )

    result = RentalRuleResult(
        residential_area=to_rule_outcome(area_result, application_type),
        rental_object=to_rule_outcome(property_result, application_type),
    )
    if not result.ok:
        logger.info(
            "Rental rules not satisfied",
            rental_object_code=rental_object_code,
            violation=result.violation.value,
        )
    return result
