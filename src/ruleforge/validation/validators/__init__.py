"""Property validators: the leaves of the rule graph."""

from .base import AsyncPropertyValidator, PropertyValidator
from .builtin import (
    AsyncPredicateValidator,
    ComparisonValidator,
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
    RegularExpressionValidator,
)
from .child import ChildValidatorAdaptor

__all__ = [
    "PropertyValidator",
    "AsyncPropertyValidator",
    "ChildValidatorAdaptor",
    "AsyncPredicateValidator",
    "ComparisonValidator",
    "EmptyValidator",
    "EqualValidator",
    "ExactLengthValidator",
    "ExclusiveBetweenValidator",
    "GreaterThanOrEqualValidator",
    "GreaterThanValidator",
    "InclusiveBetweenValidator",
    "LengthValidator",
    "LessThanOrEqualValidator",
    "LessThanValidator",
    "MaximumLengthValidator",
    "MinimumLengthValidator",
    "NotEmptyValidator",
    "NotEqualValidator",
    "NotNullValidator",
    "NullValidator",
    "PredicateValidator",
    "RegularExpressionValidator",
]
