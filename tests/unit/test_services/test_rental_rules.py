"""Tests for rental rule validation."""

import pytest

from src.models.applicant import ApplicationType, RentalRuleCheck
from src.models.results import AdapterResult, RentalRuleViolation
from src.services.rental_rules import to_rule_outcome, validate_rental_rules


def passed(application_type=None):
    return AdapterResult.success(RentalRuleCheck(reason="ok", application_type=application_type))


@pytest.mark.unit
class TestToRuleOutcome:
    def test_pass(self):
        outcome = to_rule_outcome(passed(ApplicationType.ADDITIONAL), ApplicationType.ADDITIONAL)
        assert outcome.ok
        assert outcome.reason == "ok"

    @pytest.mark.parametrize("tag", [
        "no-housing-contract-in-the-area",
        "not-tenant-in-the-property",
        "not-a-parking-space",
    ])
    def test_known_violations_pass_through(self, tag):
        outcome = to_rule_outcome(AdapterResult.failure(tag), ApplicationType.ADDITIONAL)
        assert not outcome.ok
        assert outcome.violation.value == tag

    @pytest.mark.parametrize("tag", ["not-found", "unknown"])
    def test_other_failures_are_not_eligible(self, tag):
        outcome = to_rule_outcome(AdapterResult.failure(tag), ApplicationType.REPLACE)
        assert outcome.violation == RentalRuleViolation.NOT_ELIGIBLE_TO_RENT

    def test_replace_only_tenant_cannot_rent_additional(self):
        outcome = to_rule_outcome(passed(ApplicationType.REPLACE), ApplicationType.ADDITIONAL)
        assert not outcome.ok
        assert outcome.violation == RentalRuleViolation.NOT_ALLOWED_TO_RENT_ADDITIONAL

    def test_replace_only_tenant_may_replace(self):
        assert to_rule_outcome(passed(ApplicationType.REPLACE), ApplicationType.REPLACE).ok


@pytest.mark.unit
@pytest.mark.asyncio
class TestValidateRentalRules:
    async def test_both_pass(self, leasing):
        leasing.validate_residential_area_rental_rules.return_value = passed()
        leasing.validate_property_rental_rules.return_value = passed()

        result = await validate_rental_rules("P1", "AREA1", "705-808-00-0006", ApplicationType.ADDITIONAL)

        assert result.ok
        assert result.violation is None
        leasing.validate_residential_area_rental_rules.assert_awaited_once_with("P1", "AREA1")
        leasing.validate_property_rental_rules.assert_awaited_once_with("P1", "705-808-00-0006")

    async def test_residential_area_reported_first(self, leasing):
        leasing.validate_residential_area_rental_rules.return_value = AdapterResult.failure(
            "no-housing-contract-in-the-area"
        )
        leasing.validate_property_rental_rules.return_value = AdapterResult.failure("not-tenant-in-the-property")

        result = await validate_rental_rules("P1", "AREA1", "705-808-00-0006", ApplicationType.ADDITIONAL)

        assert not result.ok
        assert result.violation == RentalRuleViolation.NO_HOUSING_CONTRACT_IN_THE_AREA
        assert result.rental_object.violation == RentalRuleViolation.NOT_TENANT_IN_THE_PROPERTY

    async def test_property_violation(self, leasing):
        leasing.validate_residential_area_rental_rules.return_value = passed()
        leasing.validate_property_rental_rules.return_value = AdapterResult.failure("not-a-parking-space")

        result = await validate_rental_rules("P1", "AREA1", "705-808-00-0006", ApplicationType.ADDITIONAL)

        assert result.violation == RentalRuleViolation.NOT_A_PARKING_SPACE
