"""Property rules: a member bound to an ordered list of validators.

A PropertyRule reads one member of the object under validation and runs its
components against the value in declaration order. Rule-level conditions gate
the whole rule (dependent rules included); component conditions gate a single
validator. CollectionPropertyRule applies the same components to every
element of a sequence, addressing each failure as ``name[i]``.

Each rule has a synchronous and an asynchronous evaluation path. The
synchronous path refuses to run anything that reports it needs the
asynchronous one; the asynchronous path picks per component.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from ..config import CascadeMode, RuleforgeConfig, create_default_config
from ..exceptions import AsyncValidatorInvokedSynchronouslyError, ConfigurationError, ValidationCancelledError
from .context import COLLECTION_INDEX_KEY, CancellationToken, PropertyValidatorContext, ValidationContext
from .formatting import COLLECTION_INDEX, split_display_name
from .members import Member
from .results import ValidationFailure
from .validators.base import PropertyValidator

logger = logging.getLogger(__name__)

Condition = Callable[[Any], bool]
AsyncCondition = Callable[[Any, CancellationToken | None], Awaitable[bool]]


class ApplyConditionTo(str, Enum):
    """Which components of a rule a condition is attached to."""
    ALL_VALIDATORS = "all_validators"
    CURRENT_VALIDATOR = "current_validator"


def _all_of(first: Condition | None, second: Condition) -> Condition:
    if first is None:
        return second
    return lambda instance: first(instance) and second(instance)


def _all_of_async(first: AsyncCondition | None, second: AsyncCondition) -> AsyncCondition:
    if first is None:
        return second

    async def combined(instance, cancellation):
        return await first(instance, cancellation) and await second(instance, cancellation)

    return combined


@dataclass
class RuleComponent:
    """One validator within a rule, with its own optional conditions."""
    validator: PropertyValidator
    condition: Condition | None = None
    async_condition: AsyncCondition | None = None

    def add_condition(self, condition: Condition) -> None:
        self.condition = _all_of(self.condition, condition)

    def add_async_condition(self, condition: AsyncCondition) -> None:
        self.async_condition = _all_of_async(self.async_condition, condition)

    def requires_async(self, context: ValidationContext) -> bool:
        return self.async_condition is not None or self.validator.should_validate_asynchronously(context)


class PropertyRule:
    """Binds a member to an ordered sequence of validators.

    Attributes:
        member: Accessor reading the validated value
        property_name: Path segment used in failure addresses
        display_name: Name rendered into messages, if overridden
        components: Validators in evaluation order
        condition / async_condition: Gate the whole rule
        cascade_mode: Stop after the first failing component, or continue
        dependent_rules: Rules evaluated only when this one produced no failures
        rule_sets: Names of the rule sets this rule belongs to
    """

    def __init__(
        self,
        member: Member,
        cascade_mode: CascadeMode | None = None,
        config: RuleforgeConfig | None = None,
    ):
        if member is None:
            raise ConfigurationError("A rule needs a member to read")
        self.member = member
        self.property_name: str | None = member.name
        self.display_name: str | None = None
        self.components: list[RuleComponent] = []
        self.condition: Condition | None = None
        self.async_condition: AsyncCondition | None = None
        self.cascade_mode = cascade_mode
        self.dependent_rules: list[PropertyRule] = []
        self.rule_sets: list[str] = []
        self.config = config or create_default_config()

    # Declaration

    def add_validator(self, validator: PropertyValidator) -> RuleComponent:
        if validator is None:
            raise ConfigurationError("Cannot add a null validator to a rule")
        component = RuleComponent(validator)
        self.components.append(component)
        return component

    @property
    def current_component(self) -> RuleComponent:
        if not self.components:
            raise ConfigurationError(
                f"Rule for '{self.property_name}' has no validator to configure yet"
            )
        return self.components[-1]

    @property
    def validators(self) -> list[PropertyValidator]:
        return [component.validator for component in self.components]

    def apply_condition(self, condition: Condition, apply_to: ApplyConditionTo = ApplyConditionTo.ALL_VALIDATORS) -> None:
        targets = self.components if apply_to == ApplyConditionTo.ALL_VALIDATORS else [self.current_component]
        for component in targets:
            component.add_condition(condition)

    def apply_async_condition(self, condition: AsyncCondition, apply_to: ApplyConditionTo = ApplyConditionTo.ALL_VALIDATORS) -> None:
        targets = self.components if apply_to == ApplyConditionTo.ALL_VALIDATORS else [self.current_component]
        for component in targets:
            component.add_async_condition(condition)

    def apply_shared_condition(self, condition: Condition) -> None:
        self.condition = _all_of(self.condition, condition)

    def apply_shared_async_condition(self, condition: AsyncCondition) -> None:
        self.async_condition = _all_of_async(self.async_condition, condition)

    def get_display_name(self) -> str | None:
        if self.display_name is not None:
            return self.display_name
        if self.config.messages.split_display_names:
            return split_display_name(self.property_name)
        return self.property_name

    def effective_cascade_mode(self, context: ValidationContext, default: CascadeMode) -> CascadeMode:
        return self.cascade_mode or context.cascade_mode or default

    def should_validate_asynchronously(self, context: ValidationContext) -> bool:
        if self.async_condition is not None:
            return True
        if any(component.requires_async(context) for component in self.components):
            return True
        return any(rule.should_validate_asynchronously(context) for rule in self.dependent_rules)

    # Synchronous evaluation

    def validate(
        self,
        context: ValidationContext,
        default_cascade_mode: CascadeMode = CascadeMode.CONTINUE,
    ) -> list[ValidationFailure]:
        if self.async_condition is not None and not context.is_async:
            raise AsyncValidatorInvokedSynchronouslyError(
                f"rule for '{self.property_name}'",
                f"The rule for '{self.property_name}' has an asynchronous condition - use validate_async instead.",
            )

        instance = context.instance_to_validate
        if self.condition is not None and not self.condition(instance):
            return []

        cascade = self.effective_cascade_mode(context, default_cascade_mode)
        value = self.member.get(instance)
        property_path = context.property_chain.build_property_name(self.property_name)
        logger.debug(f"Validating '{property_path or '<model>'}' with {len(self.components)} component(s)")

        failures = self.validate_value(context, property_path, value, cascade)

        if not failures:
            for rule in self.dependent_rules:
                failures.extend(rule.validate(context, default_cascade_mode))
        return failures

    def validate_value(
        self,
        context: ValidationContext,
        property_path: str,
        value: Any,
        cascade: CascadeMode,
    ) -> list[ValidationFailure]:
        return self.run_components(context, property_path, value, cascade)

    def run_components(
        self,
        context: ValidationContext,
        property_path: str,
        value: Any,
        cascade: CascadeMode,
        collection_index: int | None = None,
    ) -> list[ValidationFailure]:
        failures: list[ValidationFailure] = []
        instance = context.instance_to_validate

        for component in self.components:
            if component.requires_async(context) and not context.is_async:
                raise AsyncValidatorInvokedSynchronouslyError(component.validator.name)
            if component.condition is not None and not component.condition(instance):
                continue

            validator_context = self._create_validator_context(context, property_path, value, collection_index)
            failures.extend(component.validator.validate(validator_context))

            if failures and cascade == CascadeMode.STOP:
                break
        return failures

    # Asynchronous evaluation

    async def validate_async(
        self,
        context: ValidationContext,
        default_cascade_mode: CascadeMode = CascadeMode.CONTINUE,
    ) -> list[ValidationFailure]:
        instance = context.instance_to_validate
        if self.condition is not None and not self.condition(instance):
            return []
        if self.async_condition is not None and not await self.async_condition(instance, context.cancellation):
            return []

        cascade = self.effective_cascade_mode(context, default_cascade_mode)
        value = self.member.get(instance)
        property_path = context.property_chain.build_property_name(self.property_name)
        logger.debug(f"Validating '{property_path or '<model>'}' asynchronously")

        failures = await self.validate_value_async(context, property_path, value, cascade)

        if not failures:
            try:
                for rule in self.dependent_rules:
                    context.raise_if_cancelled()
                    if rule.should_validate_asynchronously(context):
                        failures.extend(await rule.validate_async(context, default_cascade_mode))
                    else:
                        failures.extend(rule.validate(context, default_cascade_mode))
            except ValidationCancelledError as e:
                raise ValidationCancelledError(failures + e.failures) from e
        return failures

    async def validate_value_async(
        self,
        context: ValidationContext,
        property_path: str,
        value: Any,
        cascade: CascadeMode,
    ) -> list[ValidationFailure]:
        return await self.run_components_async(context, property_path, value, cascade)

    async def run_components_async(
        self,
        context: ValidationContext,
        property_path: str,
        value: Any,
        cascade: CascadeMode,
        collection_index: int | None = None,
    ) -> list[ValidationFailure]:
        failures: list[ValidationFailure] = []
        instance = context.instance_to_validate

        try:
            for component in self.components:
                context.raise_if_cancelled()
                if component.condition is not None and not component.condition(instance):
                    continue
                if component.async_condition is not None and not await component.async_condition(instance, context.cancellation):
                    continue

                validator_context = self._create_validator_context(context, property_path, value, collection_index)
                if component.validator.should_validate_asynchronously(context):
                    failures.extend(await component.validator.validate_async(validator_context))
                else:
                    failures.extend(component.validator.validate(validator_context))

                if failures and cascade == CascadeMode.STOP:
                    break
        except ValidationCancelledError as e:
            raise ValidationCancelledError(failures + e.failures) from e
        return failures

    def _create_validator_context(
        self,
        context: ValidationContext,
        property_path: str,
        value: Any,
        collection_index: int | None,
    ) -> PropertyValidatorContext:
        validator_context = PropertyValidatorContext(context, self, property_path, value)
        if collection_index is not None:
            validator_context.message_formatter.append_argument(COLLECTION_INDEX, collection_index)
        return validator_context

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.property_name!r}, validators={self.validators!r})"


class CollectionPropertyRule(PropertyRule):
    """Runs the rule's components against every element of a sequence.

    None elements and elements rejected by the filter are skipped. Indices in
    failure addresses are positions in the original sequence. Cascade applies
    within one element only.
    """

    def __init__(
        self,
        member: Member,
        cascade_mode: CascadeMode | None = None,
        config: RuleforgeConfig | None = None,
    ):
        super().__init__(member, cascade_mode, config)
        self.filter: Callable[[Any], bool] | None = None

    def apply_filter(self, predicate: Callable[[Any], bool]) -> None:
        previous = self.filter
        self.filter = predicate if previous is None else (lambda element: previous(element) and predicate(element))

    def _elements(self, value: Any) -> Iterable[tuple[int, Any]]:
        if isinstance(value, Mapping) or not isinstance(value, Iterable):
            raise ConfigurationError(
                f"Collection rule for '{self.property_name}' expected a sequence, "
                f"got {type(value).__name__}"
            )
        for index, element in enumerate(value):
            if element is None:
                continue
            if self.filter is not None and not self.filter(element):
                continue
            yield index, element

    def _create_element_context(self, context: ValidationContext, index: int) -> ValidationContext:
        element_context = context.clone_for_child_collection_validator(
            context.instance_to_validate, preserve_parent_context=True
        )
        element_context.property_chain.add(self.property_name)
        element_context.property_chain.add_indexer(index)
        return element_context

    def validate_value(self, context, property_path, value, cascade):
        if value is None:
            return []
        failures: list[ValidationFailure] = []
        for index, element in self._elements(value):
            element_context = self._create_element_context(context, index)
            with context.scoped_root_data(COLLECTION_INDEX_KEY, index):
                failures.extend(
                    self.run_components(element_context, str(element_context.property_chain), element, cascade, index)
                )
        return failures

    async def validate_value_async(self, context, property_path, value, cascade):
        if value is None:
            return []
        failures: list[ValidationFailure] = []
        try:
            for index, element in self._elements(value):
                context.raise_if_cancelled()
                element_context = self._create_element_context(context, index)
                with context.scoped_root_data(COLLECTION_INDEX_KEY, index):
                    failures.extend(
                        await self.run_components_async(
                            element_context, str(element_context.property_chain), element, cascade, index
                        )
                    )
        except ValidationCancelledError as e:
            raise ValidationCancelledError(failures + e.failures) from e
        return failures
