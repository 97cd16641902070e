import pytest
from protean.exceptions import ValidationError
from shared.errors import BusinessRuleViolationError
from shared.rules import BusinessRule, RequiredValueRule, check_rule


class AlwaysBroken(BusinessRule):
    code = "ALWAYS_BROKEN"

    def is_broken(self):
        return True

    @property
    def message(self):
        return "This rule never holds"


class TestCheckRule:
    def test_broken_rule_raises_with_code_and_message(self):
        with pytest.raises(BusinessRuleViolationError) as exc:
            check_rule(AlwaysBroken())
        assert exc.value.code == "ALWAYS_BROKEN"
        assert exc.value.message == "This rule never holds"
        assert exc.value.messages == {"ALWAYS_BROKEN": ["This rule never holds"]}

    def test_violation_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            check_rule(AlwaysBroken())

    def test_rule_that_holds_passes(self):
        check_rule(RequiredValueRule("value", "VALUE_REQUIRED", "Value"))


class TestRequiredValueRule:
    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_values_are_broken(self, value):
        rule = RequiredValueRule(value, "REASON_REQUIRED", "Reason")
        assert rule.is_broken()
        assert rule.message == "Reason is required"
        assert rule.code == "REASON_REQUIRED"

    def test_non_string_values_count_as_present(self):
        assert not RequiredValueRule(0, "QUANTITY_REQUIRED", "Quantity").is_broken()
