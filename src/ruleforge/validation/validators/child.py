"""Delegation of a property value to another complete validator."""

import logging
from contextlib import nullcontext
from typing import TYPE_CHECKING, Any, Callable

from ...exceptions import ConfigurationError
from ..context import COLLECTION_INDEX_KEY, PropertyValidatorContext, ValidationContext
from ..formatting import COLLECTION_INDEX
from ..results import ValidationFailure
from ..selectors import RuleSetValidatorSelector
from .base import PropertyValidator

if TYPE_CHECKING:
    from ..framework import Validator

logger = logging.getLogger(__name__)

ValidatorProvider = Callable[[PropertyValidatorContext], "Validator | None"]


class ChildValidatorAdaptor(PropertyValidator):
    """Validates the property value with a whole validator of its own.

    The validator is either fixed or resolved per call by a provider, which
    allows picking a validator from the parent object or the value itself.
    A None value, or a provider returning None, contributes no failures.
    The child's failures come back already addressed relative to the root,
    because the child context carries the parent's property chain.
    """

    def __init__(
        self,
        validator: "Validator | None" = None,
        provider: ValidatorProvider | None = None,
        validator_type: type | None = None,
        rule_sets: list[str] | None = None,
        preserve_parent_context: bool = False,
    ):
        super().__init__()
        if validator is None and provider is None:
            raise ConfigurationError("A child validator or a validator provider is required")
        self._validator = validator
        self._provider = provider
        self.validator_type = validator_type or (type(validator) if validator is not None else None)
        self.rule_sets = list(rule_sets or [])
        self.preserve_parent_context = preserve_parent_context

    def get_validator(self, context: PropertyValidatorContext) -> "Validator | None":
        if context is None:
            raise ConfigurationError("Cannot pass a null context to get_validator")
        if self._provider is not None:
            return self._provider(context)
        return self._validator

    def should_validate_asynchronously(self, context: ValidationContext) -> bool:
        return context.is_async

    def is_valid(self, context: PropertyValidatorContext) -> bool:
        return not self.validate(context)

    def validate(self, context: PropertyValidatorContext) -> list[ValidationFailure]:
        if context.property_value is None:
            return []
        validator = self.get_validator(context)
        if validator is None:
            return []

        child_context = self.create_child_context(context)
        with self._collection_index_scope(context):
            result = validator.validate(child_context)
        return list(result.errors)

    async def validate_async(self, context: PropertyValidatorContext) -> list[ValidationFailure]:
        if context.property_value is None:
            return []
        validator = self.get_validator(context)
        if validator is None:
            return []

        child_context = self.create_child_context(context)
        with self._collection_index_scope(context):
            result = await validator.validate_async(child_context)
        return list(result.errors)

    def create_child_context(self, context: PropertyValidatorContext) -> ValidationContext:
        selector = RuleSetValidatorSelector(self.rule_sets) if self.rule_sets else None
        parent = context.parent_context
        child_context = parent.clone_for_child_validator(
            context.property_value, self.preserve_parent_context, selector
        )
        # A collection rule has already appended "name[i]" to the chain.
        if not parent.is_child_collection_context:
            child_context.property_chain.add(context.rule.property_name)
        logger.debug(f"Descending into '{child_context.property_chain}'")
        return child_context

    def _collection_index_scope(self, context: PropertyValidatorContext):
        index = context.message_formatter.placeholder_values.get(COLLECTION_INDEX)
        if index is None:
            return nullcontext()
        return context.parent_context.scoped_root_data(COLLECTION_INDEX_KEY, index)

    def __repr__(self) -> str:
        name = self.validator_type.__name__ if self.validator_type else "dynamic"
        return f"{self.name}({name})"
