"""Imperative guard rules checked inside aggregate behavior methods."""

from shared.errors import BusinessRuleViolationError


class BusinessRule:
    """A named condition that must hold before a behavior may proceed.

    Subclasses set ``code`` and implement ``is_broken()`` and ``message``.
    """

    code: str = "BUSINESS_RULE_BROKEN"

    def is_broken(self) -> bool:
        raise NotImplementedError

    @property
    def message(self) -> str:
        raise NotImplementedError


class RequiredValueRule(BusinessRule):
    """Blank or missing values are rejected under a caller-chosen code."""

    def __init__(self, value, code: str, description: str):
        self._value = value
        self.code = code
        self._description = description

    def is_broken(self) -> bool:
        if self._value is None:
            return True
        return isinstance(self._value, str) and not self._value.strip()

    @property
    def message(self) -> str:
        return f"{self._description} is required"


def check_rule(rule: BusinessRule) -> None:
    if rule.is_broken():
        raise BusinessRuleViolationError(rule.code, rule.message)
