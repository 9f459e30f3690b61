"""Fluent rule declaration.

RuleBuilder is thin sugar over PropertyRule: every method either appends a
validator component or configures the most recent one, and returns the
builder so calls chain.
"""

import inspect
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from ..config import CascadeMode
from ..exceptions import ConfigurationError
from .members import Member
from .results import Severity
from .rules import ApplyConditionTo, CollectionPropertyRule, PropertyRule
from .validators import (
    AsyncPredicateValidator,
    ChildValidatorAdaptor,
    EmptyValidator,
    EqualValidator,
    ExactLengthValidator,
    ExclusiveBetweenValidator,
    GreaterThanOrEqualValidator,
    GreaterThanValidator,
    InclusiveBetweenValidator,
    LengthValidator,
    LessThanOrEqualValidator,
    LessThanValidator,
    MaximumLengthValidator,
    MinimumLengthValidator,
    NotEmptyValidator,
    NotEqualValidator,
    NotNullValidator,
    NullValidator,
    PredicateValidator,
    PropertyValidator,
    RegularExpressionValidator,
)

if TYPE_CHECKING:
    from .framework import Validator


def positional_arity(fn: Callable) -> int:
    """Number of positional arguments fn accepts (3 for *args)."""
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return 1
    count = 0
    for parameter in signature.parameters.values():
        if parameter.kind == inspect.Parameter.VAR_POSITIONAL:
            return 3
        if parameter.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            if parameter.default is inspect.Parameter.empty:
                count += 1
    return count


class RuleBuilder:
    """Chained configuration for one PropertyRule."""

    def __init__(self, rule: PropertyRule, owner: "Validator"):
        self.rule = rule
        self._owner = owner

    # Validators

    def set_validator(self, validator: Any, *rule_sets: str, validator_type: type | None = None) -> "RuleBuilder":
        """Attach a property validator, a child validator, or a child validator provider.

        A provider is called with the parent instance, or with the parent
        instance and the property value when it takes two arguments. A Validator
        subclass passed as the provider doubles as the reported validator_type.
        """
        from .framework import Validator

        if isinstance(validator, PropertyValidator):
            if rule_sets:
                raise ConfigurationError("Rule sets can only be passed with a child validator")
            self.rule.add_validator(validator)
        elif isinstance(validator, Validator):
            self.rule.add_validator(ChildValidatorAdaptor(validator, rule_sets=list(rule_sets)))
        elif callable(validator):
            provider = validator
            if validator_type is None and isinstance(provider, type) and issubclass(provider, Validator):
                validator_type = provider
            if positional_arity(provider) >= 2:
                resolve = lambda context: provider(context.instance_to_validate, context.property_value)
            else:
                resolve = lambda context: provider(context.instance_to_validate)
            self.rule.add_validator(
                ChildValidatorAdaptor(provider=resolve, validator_type=validator_type, rule_sets=list(rule_sets))
            )
        else:
            raise ConfigurationError(f"Cannot use {type(validator).__name__} as a validator")
        return self

    def not_null(self) -> "RuleBuilder":
        return self.set_validator(NotNullValidator())

    def null(self) -> "RuleBuilder":
        return self.set_validator(NullValidator())

    def not_empty(self) -> "RuleBuilder":
        return self.set_validator(NotEmptyValidator())

    def empty(self) -> "RuleBuilder":
        return self.set_validator(EmptyValidator())

    def equal(self, value: Any) -> "RuleBuilder":
        return self._comparison(EqualValidator, value)

    def not_equal(self, value: Any) -> "RuleBuilder":
        return self._comparison(NotEqualValidator, value)

    def greater_than(self, value: Any) -> "RuleBuilder":
        return self._comparison(GreaterThanValidator, value)

    def greater_than_or_equal(self, value: Any) -> "RuleBuilder":
        return self._comparison(GreaterThanOrEqualValidator, value)

    def less_than(self, value: Any) -> "RuleBuilder":
        return self._comparison(LessThanValidator, value)

    def less_than_or_equal(self, value: Any) -> "RuleBuilder":
        return self._comparison(LessThanOrEqualValidator, value)

    def inclusive_between(self, from_value: Any, to_value: Any) -> "RuleBuilder":
        return self.set_validator(InclusiveBetweenValidator(from_value, to_value))

    def exclusive_between(self, from_value: Any, to_value: Any) -> "RuleBuilder":
        return self.set_validator(ExclusiveBetweenValidator(from_value, to_value))

    def length(self, min_length: int, max_length: int | None = None) -> "RuleBuilder":
        if max_length is None:
            return self.set_validator(ExactLengthValidator(min_length))
        return self.set_validator(LengthValidator(min_length, max_length))

    def min_length(self, min_length: int) -> "RuleBuilder":
        return self.set_validator(MinimumLengthValidator(min_length))

    def max_length(self, max_length: int) -> "RuleBuilder":
        return self.set_validator(MaximumLengthValidator(max_length))

    def matches(self, pattern: str, flags: int = 0) -> "RuleBuilder":
        return self.set_validator(RegularExpressionValidator(pattern, flags))

    def must(self, predicate: Callable[..., bool]) -> "RuleBuilder":
        """predicate(value), predicate(instance, value) or predicate(instance, value, context)."""
        arity = positional_arity(predicate)
        if arity >= 3:
            check = predicate
        elif arity == 2:
            check = lambda instance, value, context: predicate(instance, value)
        else:
            check = lambda instance, value, context: predicate(value)
        return self.set_validator(PredicateValidator(check))

    def must_async(self, predicate: Callable[..., Awaitable[bool]]) -> "RuleBuilder":
        """predicate(value, cancellation) or predicate(instance, value, cancellation)."""
        arity = positional_arity(predicate)
        if arity >= 3:
            check = lambda instance, value, context: predicate(instance, value, context.cancellation)
        elif arity == 2:
            check = lambda instance, value, context: predicate(value, context.cancellation)
        else:
            check = lambda instance, value, context: predicate(value)
        return self.set_validator(AsyncPredicateValidator(check))

    def _comparison(self, validator_type: type, value: Any) -> "RuleBuilder":
        if isinstance(value, Member):
            return self.set_validator(validator_type(member=value))
        return self.set_validator(validator_type(value))

    # Options for the current validator

    def with_message(self, message: str) -> "RuleBuilder":
        self.rule.current_component.validator.error_message = message
        return self

    def with_error_code(self, error_code: str) -> "RuleBuilder":
        self.rule.current_component.validator.error_code = error_code
        return self

    def with_severity(self, severity: Severity) -> "RuleBuilder":
        self.rule.current_component.validator.severity = Severity(severity)
        return self

    def with_state(self, provider: Callable[[Any], Any]) -> "RuleBuilder":
        self.rule.current_component.validator.custom_state_provider = provider
        return self

    # Options for the whole rule

    def with_name(self, display_name: str) -> "RuleBuilder":
        self.rule.display_name = display_name
        return self

    def override_property_name(self, property_name: str) -> "RuleBuilder":
        self.rule.property_name = property_name
        return self

    def cascade(self, cascade_mode: CascadeMode) -> "RuleBuilder":
        self.rule.cascade_mode = CascadeMode(cascade_mode)
        return self

    def when(self, condition: Callable[[Any], bool], apply_to: ApplyConditionTo = ApplyConditionTo.ALL_VALIDATORS) -> "RuleBuilder":
        self.rule.apply_condition(condition, apply_to)
        return self

    def unless(self, condition: Callable[[Any], bool], apply_to: ApplyConditionTo = ApplyConditionTo.ALL_VALIDATORS) -> "RuleBuilder":
        return self.when(lambda instance: not condition(instance), apply_to)

    def when_async(self, condition: Callable[..., Awaitable[bool]], apply_to: ApplyConditionTo = ApplyConditionTo.ALL_VALIDATORS) -> "RuleBuilder":
        self.rule.apply_async_condition(condition, apply_to)
        return self

    def unless_async(self, condition: Callable[..., Awaitable[bool]], apply_to: ApplyConditionTo = ApplyConditionTo.ALL_VALIDATORS) -> "RuleBuilder":
        async def negated(instance, cancellation):
            return not await condition(instance, cancellation)
        return self.when_async(negated, apply_to)

    def where(self, predicate: Callable[[Any], bool]) -> "RuleBuilder":
        """Only validate collection elements for which predicate is true."""
        if not isinstance(self.rule, CollectionPropertyRule):
            raise ConfigurationError("where() is only available on rule_for_each rules")
        self.rule.apply_filter(predicate)
        return self

    def dependent_rules(self, action: Callable[[], None]) -> "RuleBuilder":
        """Rules declared inside action run only if this rule produced no failures."""
        self.rule.dependent_rules.extend(self._owner._declare_nested(action))
        return self
