"""Rule composition and execution engine.

Rules bind members of an object to ordered validators; a Validator runs its
rules against an instance and returns every failure, addressed by its path
from the root (e.g. ``orders[2].product_name``).
"""

from .builder import RuleBuilder
from .context import CancellationToken, PropertyChain, PropertyValidatorContext, ValidationContext
from .descriptor import ValidatorDescriptor
from .formatting import MessageFormatter
from .framework import ValidationOptions, Validator
from .members import Member
from .results import Severity, ValidationFailure, ValidationResult
from .rules import ApplyConditionTo, CollectionPropertyRule, PropertyRule, RuleComponent
from .selectors import (
    CompositeValidatorSelector,
    DefaultValidatorSelector,
    ExcludingValidatorSelector,
    MemberNameValidatorSelector,
    RuleSetValidatorSelector,
    ValidatorSelector,
)

__all__ = [
    "ApplyConditionTo",
    "CancellationToken",
    "CollectionPropertyRule",
    "CompositeValidatorSelector",
    "DefaultValidatorSelector",
    "ExcludingValidatorSelector",
    "Member",
    "MemberNameValidatorSelector",
    "MessageFormatter",
    "PropertyChain",
    "PropertyRule",
    "PropertyValidatorContext",
    "RuleBuilder",
    "RuleComponent",
    "RuleSetValidatorSelector",
    "Severity",
    "ValidationContext",
    "ValidationFailure",
    "ValidationOptions",
    "ValidationResult",
    "Validator",
    "ValidatorDescriptor",
    "ValidatorSelector",
]
