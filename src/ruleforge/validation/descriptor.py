"""Read-only introspection of a validator's declared rules."""

from typing import TYPE_CHECKING

from .validators.base import PropertyValidator
from .validators.child import ChildValidatorAdaptor

if TYPE_CHECKING:
    from .rules import PropertyRule


class ValidatorDescriptor:
    """Describes which validators are attached to which members.

    Members are keyed by the member name the rule reads (None for model-level
    rules), independent of any overridden property name.
    """

    def __init__(self, rules: "list[PropertyRule]"):
        self.rules = list(rules)

    def get_members_with_validators(self) -> dict[str | None, list[PropertyValidator]]:
        members: dict[str | None, list[PropertyValidator]] = {}
        for rule in self.rules:
            members.setdefault(rule.member.name, []).extend(rule.validators)
        return members

    def get_rules_for_member(self, name: str | None) -> "list[PropertyRule]":
        return [rule for rule in self.rules if rule.member.name == name]

    def get_validators_for_member(self, name: str | None) -> list[PropertyValidator]:
        return [validator for rule in self.get_rules_for_member(name) for validator in rule.validators]

    def get_dependent_rules_for_member(self, name: str | None) -> "list[PropertyRule]":
        return [dependent for rule in self.get_rules_for_member(name) for dependent in rule.dependent_rules]

    def get_name(self, name: str | None) -> str | None:
        """Display name used in messages for the member."""
        rules = self.get_rules_for_member(name)
        return rules[0].get_display_name() if rules else None

    def get_child_validator_types(self, name: str | None) -> list[type]:
        validators = self.get_validators_for_member(name)
        validators += [
            validator
            for rule in self.get_dependent_rules_for_member(name)
            for validator in rule.validators
        ]
        return [
            validator.validator_type
            for validator in validators
            if isinstance(validator, ChildValidatorAdaptor) and validator.validator_type is not None
        ]

    def get_rules_by_rule_set(self) -> "dict[str, list[PropertyRule]]":
        grouped: dict[str, list[PropertyRule]] = {}
        for rule in self.rules:
            for name in rule.rule_sets or ["default"]:
                grouped.setdefault(name, []).append(rule)
        return grouped
