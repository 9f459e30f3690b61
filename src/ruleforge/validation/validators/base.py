"""Base classes for property validators.

A property validator is the leaf of the rule graph: it checks one value and,
when the check fails, builds a ValidationFailure addressed at the property
path handed to it by the owning rule. Validators hold configuration only;
everything that varies per call arrives through the PropertyValidatorContext,
so one instance can serve many concurrent validation passes.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

from ...exceptions import AsyncValidatorInvokedSynchronouslyError
from ..context import COLLECTION_INDEX_KEY, PropertyValidatorContext, ValidationContext
from ..formatting import COLLECTION_INDEX, DEFAULT_MESSAGES
from ..results import Severity, ValidationFailure

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "'{PropertyName}' is not valid."
FALLBACK_DISPLAY_NAME = "Value"


class PropertyValidator(ABC):
    """Base class for all property validators.

    Subclasses implement is_valid (and is_valid_async when the check has to
    await something). prepare_message_formatter adds validator-specific
    placeholders before the message template is rendered.

    Attributes:
        error_message: Template overriding the default message
        error_code: Code overriding the default (the class name)
        severity: Severity stamped on failures
        custom_state_provider: Called with the validated instance to fill custom_state
    """

    def __init__(self) -> None:
        self.error_message: str | None = None
        self.error_code: str | None = None
        self.severity: Severity = Severity.ERROR
        self.custom_state_provider: Callable[[Any], Any] | None = None

    @property
    def name(self) -> str:
        return type(self).__name__

    def should_validate_asynchronously(self, context: ValidationContext) -> bool:
        """Whether this validator must run on the asynchronous path."""
        return False

    def validate(self, context: PropertyValidatorContext) -> list[ValidationFailure]:
        if self.is_valid(context):
            return []
        return [self.create_failure(context)]

    async def validate_async(self, context: PropertyValidatorContext) -> list[ValidationFailure]:
        if await self.is_valid_async(context):
            return []
        return [self.create_failure(context)]

    @abstractmethod
    def is_valid(self, context: PropertyValidatorContext) -> bool:
        """Check the property value held by the context."""

    async def is_valid_async(self, context: PropertyValidatorContext) -> bool:
        return self.is_valid(context)

    def prepare_message_formatter(self, context: PropertyValidatorContext) -> None:
        """Hook for validator-specific placeholders."""

    def get_default_message_template(self) -> str:
        return DEFAULT_MESSAGES.get(self.name, FALLBACK_MESSAGE)

    def get_message_template(self, context: PropertyValidatorContext) -> str:
        if self.error_message is not None:
            return self.error_message
        overrides = context.rule.config.messages.overrides
        return overrides.get(self.error_code or self.name) or self.get_default_message_template()

    def create_failure(self, context: PropertyValidatorContext) -> ValidationFailure:
        formatter = context.message_formatter
        formatter.append_property_name(context.display_name or FALLBACK_DISPLAY_NAME)
        formatter.append_property_value(context.property_value)

        # Validators running inside a child of a collection element still see its index.
        if COLLECTION_INDEX not in formatter.placeholder_values:
            index = context.root_context_data.get(COLLECTION_INDEX_KEY)
            if index is not None:
                formatter.append_argument(COLLECTION_INDEX, index)

        self.prepare_message_formatter(context)
        message = formatter.build_message(self.get_message_template(context))

        custom_state = None
        if self.custom_state_provider is not None:
            custom_state = self.custom_state_provider(context.instance_to_validate)

        logger.debug(f"{self.name} failed for '{context.property_name}'")

        return ValidationFailure(
            property_name=context.property_name,
            error_message=message,
            attempted_value=context.property_value,
            error_code=self.error_code or self.name,
            severity=self.severity,
            custom_state=custom_state,
            placeholders=dict(formatter.placeholder_values),
        )

    def __repr__(self) -> str:
        return f"{self.name}()"


class AsyncPropertyValidator(PropertyValidator):
    """A validator whose check can only run asynchronously."""

    def should_validate_asynchronously(self, context: ValidationContext) -> bool:
        return True

    def is_valid(self, context: PropertyValidatorContext) -> bool:
        raise AsyncValidatorInvokedSynchronouslyError(self.name)

    @abstractmethod
    async def is_valid_async(self, context: PropertyValidatorContext) -> bool:
        """Check the property value held by the context, awaiting as needed."""
