"""The Validator aggregate and per-call validation options.

A Validator owns an ordered list of rules, declared once (usually in a
subclass __init__) and never mutated while validating. All per-call state
lives in the ValidationContext built for that call, so a single Validator can
validate many instances concurrently.
"""

import logging
from collections.abc import Iterable
from typing import Any, Awaitable, Callable, Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import CascadeMode, RuleforgeConfig, create_default_config
from ..exceptions import (
    ConfigurationError,
    InvalidRuleSetError,
    ValidationCancelledError,
    ValidationFailedError,
)
from .builder import RuleBuilder
from .context import CancellationToken, ValidationContext
from .descriptor import ValidatorDescriptor
from .members import Member, as_member, member_name
from .results import ValidationFailure, ValidationResult
from .rules import CollectionPropertyRule, PropertyRule
from .selectors import (
    DEFAULT_RULE_SET,
    WILDCARD_RULE_SET,
    CompositeValidatorSelector,
    DefaultValidatorSelector,
    ExcludingValidatorSelector,
    MemberNameValidatorSelector,
    RuleSetValidatorSelector,
    ValidatorSelector,
)

logger = logging.getLogger(__name__)


def _split_names(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (str, Member)):
        value = [value]
    names: list[str] = []
    for item in value:
        name = member_name(item)
        if name is None:
            raise ValueError("model-level members cannot be included or excluded by name")
        names.extend(part.strip() for part in name.split(",") if part.strip())
    return names


class ValidationOptions(BaseModel):
    """Options for a single validate / validate_async call."""
    rule_sets: list[str] = Field(default_factory=list)
    include_properties: list[str] = Field(default_factory=list)
    exclude_properties: list[str] = Field(default_factory=list)
    cascade_mode: CascadeMode | None = None
    root_context_data: dict[str, Any] = Field(default_factory=dict)
    raise_on_failure: bool = False

    @field_validator("rule_sets", "include_properties", "exclude_properties", mode="before")
    @classmethod
    def normalize_names(cls, v):
        return _split_names(v)

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    def build_selector(self) -> ValidatorSelector:
        selectors: list[ValidatorSelector] = []
        if self.rule_sets:
            selectors.append(RuleSetValidatorSelector(self.rule_sets))
        if self.include_properties:
            selectors.append(MemberNameValidatorSelector(self.include_properties))

        if not selectors:
            selector: ValidatorSelector = DefaultValidatorSelector()
        elif len(selectors) == 1:
            selector = selectors[0]
        else:
            selector = CompositeValidatorSelector(selectors)

        if self.exclude_properties:
            selector = ExcludingValidatorSelector(selector, self.exclude_properties)
        return selector


class ConditionOtherwise:
    """Returned by Validator.when / unless to declare the opposite branch."""

    def __init__(self, owner: "Validator", apply: Callable[[list[PropertyRule]], None]):
        self._owner = owner
        self._apply = apply

    def otherwise(self, action: Callable[[], None]) -> None:
        self._apply(self._owner._declare_observed(action))


class Validator:
    """Base class for validators.

    Declare rules with rule_for / rule_for_each, either on an instance or in a
    subclass __init__ after calling super().__init__().
    """

    def __init__(self, config: RuleforgeConfig | None = None):
        self.config = config or create_default_config()
        self.rule_level_cascade_mode: CascadeMode = self.config.cascade.rule_level
        self.class_level_cascade_mode: CascadeMode = self.config.cascade.class_level
        self._rules: list[PropertyRule] = []
        self._sinks: list[list[PropertyRule]] = [self._rules]
        self._observers: list[list[PropertyRule]] = []

    # Declaration

    @property
    def rules(self) -> tuple[PropertyRule, ...]:
        return tuple(self._rules)

    def add_rule(self, rule: PropertyRule) -> None:
        self._sinks[-1].append(rule)
        for observed in self._observers:
            observed.append(rule)

    def rule_for(self, member: Member | str) -> RuleBuilder:
        rule = PropertyRule(as_member(member), config=self.config)
        self.add_rule(rule)
        return RuleBuilder(rule, self)

    def rule_for_each(self, member: Member | str) -> RuleBuilder:
        rule = CollectionPropertyRule(as_member(member), config=self.config)
        self.add_rule(rule)
        return RuleBuilder(rule, self)

    def rule_set(self, rule_set_names: str | Iterable[str], action: Callable[[], None]) -> None:
        """Tag every rule declared inside action with the given rule set(s)."""
        names = _split_names(rule_set_names)
        if not names:
            raise ConfigurationError("A rule set needs at least one name")
        for rule in self._declare_observed(action):
            for name in names:
                if name not in rule.rule_sets:
                    rule.rule_sets.append(name)

    def when(self, condition: Callable[[Any], bool], action: Callable[[], None]) -> ConditionOtherwise:
        """Gate every rule declared inside action on condition(instance)."""
        for rule in self._declare_observed(action):
            rule.apply_shared_condition(condition)

        def otherwise(rules: list[PropertyRule]) -> None:
            for rule in rules:
                rule.apply_shared_condition(lambda instance: not condition(instance))

        return ConditionOtherwise(self, otherwise)

    def unless(self, condition: Callable[[Any], bool], action: Callable[[], None]) -> ConditionOtherwise:
        return self.when(lambda instance: not condition(instance), action)

    def when_async(self, condition: Callable[..., Awaitable[bool]], action: Callable[[], None]) -> ConditionOtherwise:
        for rule in self._declare_observed(action):
            rule.apply_shared_async_condition(condition)

        async def negated(instance, cancellation):
            return not await condition(instance, cancellation)

        def otherwise(rules: list[PropertyRule]) -> None:
            for rule in rules:
                rule.apply_shared_async_condition(negated)

        return ConditionOtherwise(self, otherwise)

    def unless_async(self, condition: Callable[..., Awaitable[bool]], action: Callable[[], None]) -> ConditionOtherwise:
        async def negated(instance, cancellation):
            return not await condition(instance, cancellation)
        return self.when_async(negated, action)

    def _declare_observed(self, action: Callable[[], None]) -> list[PropertyRule]:
        observed: list[PropertyRule] = []
        self._observers.append(observed)
        try:
            action()
        finally:
            self._observers.pop()
        return observed

    def _declare_nested(self, action: Callable[[], None]) -> list[PropertyRule]:
        nested: list[PropertyRule] = []
        self._sinks.append(nested)
        try:
            action()
        finally:
            self._sinks.pop()
        return nested

    def declared_rule_sets(self) -> set[str]:
        return {name for rule in self._rules for name in rule.rule_sets}

    def create_descriptor(self) -> ValidatorDescriptor:
        return ValidatorDescriptor(self._rules)

    # Execution

    def validate(self, instance: Any, options: ValidationOptions | None = None, **kwargs: Any) -> ValidationResult:
        """Validate instance synchronously.

        Args:
            instance: Object to validate, or a ValidationContext when invoked
                      as a child validator
            options: Per-call options; keyword arguments build one instead

        Returns:
            ValidationResult with failures in declaration order

        Raises:
            ConfigurationError: If the rule graph cannot be evaluated as requested
            ValidationFailedError: If raise_on_failure is set and the instance is invalid
        """
        if isinstance(instance, ValidationContext):
            return ValidationResult(self._execute(instance))

        options = self._resolve_options(options, kwargs)
        context = self._create_context(instance, options, is_async=False)
        logger.debug(f"Validating {type(instance).__name__} with {type(self).__name__}")

        result = ValidationResult(self._execute(context))
        return self._finish(result, options)

    async def validate_async(
        self,
        instance: Any,
        options: ValidationOptions | None = None,
        cancellation: CancellationToken | None = None,
        **kwargs: Any,
    ) -> ValidationResult:
        """Validate instance, awaiting asynchronous rules.

        Raises:
            ValidationCancelledError: If cancellation was requested mid-pass
        """
        if isinstance(instance, ValidationContext):
            return ValidationResult(await self._execute_async(instance))

        options = self._resolve_options(options, kwargs)
        context = self._create_context(instance, options, is_async=True, cancellation=cancellation)
        logger.debug(f"Validating {type(instance).__name__} with {type(self).__name__} asynchronously")

        result = ValidationResult(await self._execute_async(context))
        return self._finish(result, options)

    def validate_and_raise(self, instance: Any, options: ValidationOptions | None = None, **kwargs: Any) -> ValidationResult:
        kwargs["raise_on_failure"] = True
        return self.validate(instance, options, **kwargs)

    def _execute(self, context: ValidationContext) -> list[ValidationFailure]:
        failures: list[ValidationFailure] = []
        for rule in self._select_rules(context):
            rule_failures = rule.validate(context, self.rule_level_cascade_mode)
            failures.extend(rule_failures)
            if rule_failures and self.class_level_cascade_mode == CascadeMode.STOP:
                break
        return failures

    async def _execute_async(self, context: ValidationContext) -> list[ValidationFailure]:
        failures: list[ValidationFailure] = []
        try:
            for rule in self._select_rules(context):
                context.raise_if_cancelled()
                if rule.should_validate_asynchronously(context):
                    rule_failures = await rule.validate_async(context, self.rule_level_cascade_mode)
                else:
                    rule_failures = rule.validate(context, self.rule_level_cascade_mode)
                failures.extend(rule_failures)
                if rule_failures and self.class_level_cascade_mode == CascadeMode.STOP:
                    break
        except ValidationCancelledError as e:
            raise ValidationCancelledError(failures + e.failures) from e
        return failures

    def _select_rules(self, context: ValidationContext) -> Iterator[PropertyRule]:
        for rule in self._rules:
            property_path = context.property_chain.build_property_name(rule.property_name)
            if context.selector.can_execute(rule, property_path, context):
                yield rule

    def _resolve_options(self, options: ValidationOptions | None, overrides: dict[str, Any]) -> ValidationOptions:
        if options is None:
            return ValidationOptions(**overrides)
        if overrides:
            return options.model_copy(update=ValidationOptions(**overrides).model_dump(exclude_unset=True))
        return options

    def _create_context(
        self,
        instance: Any,
        options: ValidationOptions,
        is_async: bool,
        cancellation: CancellationToken | None = None,
    ) -> ValidationContext:
        if instance is None:
            raise ConfigurationError(f"Cannot pass a null instance to {type(self).__name__}")

        unknown = [
            name for name in options.rule_sets
            if name not in (DEFAULT_RULE_SET, WILDCARD_RULE_SET) and name not in self.declared_rule_sets()
        ]
        if unknown:
            raise InvalidRuleSetError(unknown, type(self).__name__)

        return ValidationContext(
            instance,
            selector=options.build_selector(),
            root_context_data=dict(options.root_context_data),
            is_async=is_async,
            cancellation=cancellation,
            cascade_mode=options.cascade_mode,
        )

    def _finish(self, result: ValidationResult, options: ValidationOptions) -> ValidationResult:
        logger.debug(f"{type(self).__name__} produced {len(result.errors)} failure(s)")
        if options.raise_on_failure and not result.is_valid:
            raise ValidationFailedError(list(result.errors))
        return result
