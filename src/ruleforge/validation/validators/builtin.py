"""Built-in property validators."""

import operator
import re
from collections.abc import Sized
from typing import Any, Awaitable, Callable

from ..context import PropertyValidatorContext
from ..formatting import split_display_name
from ..members import Member
from .base import AsyncPropertyValidator, PropertyValidator


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, Sized):
        return len(value) == 0
    return False


class NotNullValidator(PropertyValidator):
    def is_valid(self, context):
        return context.property_value is not None


class NullValidator(PropertyValidator):
    def is_valid(self, context):
        return context.property_value is None


class NotEmptyValidator(PropertyValidator):
    """Fails on None, blank strings and empty collections."""

    def is_valid(self, context):
        return not _is_empty(context.property_value)


class EmptyValidator(PropertyValidator):
    def is_valid(self, context):
        return _is_empty(context.property_value)


class ComparisonValidator(PropertyValidator):
    """Compares the property value against a constant or another member.

    When comparing against a member, the member is read from the object that
    owns the validated property, and its display name is exposed as the
    ComparisonProperty placeholder.
    """

    comparison: Callable[[Any, Any], bool] = staticmethod(operator.eq)

    def __init__(self, value_to_compare: Any = None, member: Member | None = None):
        super().__init__()
        self.value_to_compare = value_to_compare
        self.member = member

    def get_comparison_value(self, context: PropertyValidatorContext) -> Any:
        if self.member is not None:
            return self.member.get(context.instance_to_validate)
        return self.value_to_compare

    def is_valid(self, context):
        return self.compare(context.property_value, self.get_comparison_value(context))

    def compare(self, value: Any, value_to_compare: Any) -> bool:
        return self.comparison(value, value_to_compare)

    def prepare_message_formatter(self, context):
        formatter = context.message_formatter
        formatter.append_argument("ComparisonValue", self.get_comparison_value(context))
        if self.member is not None:
            formatter.append_argument("ComparisonProperty", split_display_name(self.member.name) or "")
        else:
            formatter.append_argument("ComparisonProperty", "")


class EqualValidator(ComparisonValidator):
    comparison = staticmethod(operator.eq)


class NotEqualValidator(ComparisonValidator):
    comparison = staticmethod(operator.ne)


class OrderedComparisonValidator(ComparisonValidator):
    """Ordering comparisons pass on a None value and fail on a None comparison value."""

    def compare(self, value, value_to_compare):
        if value is None:
            return True
        if value_to_compare is None:
            return False
        return self.comparison(value, value_to_compare)


class GreaterThanValidator(OrderedComparisonValidator):
    comparison = staticmethod(operator.gt)


class GreaterThanOrEqualValidator(OrderedComparisonValidator):
    comparison = staticmethod(operator.ge)


class LessThanValidator(OrderedComparisonValidator):
    comparison = staticmethod(operator.lt)


class LessThanOrEqualValidator(OrderedComparisonValidator):
    comparison = staticmethod(operator.le)


class InclusiveBetweenValidator(PropertyValidator):
    def __init__(self, from_value: Any, to_value: Any):
        super().__init__()
        if to_value < from_value:
            raise ValueError(f"'to' ({to_value}) must not be less than 'from' ({from_value})")
        self.from_value = from_value
        self.to_value = to_value

    def is_valid(self, context):
        value = context.property_value
        if value is None:
            return True
        return self.from_value <= value <= self.to_value

    def prepare_message_formatter(self, context):
        context.message_formatter.append_argument("From", self.from_value)
        context.message_formatter.append_argument("To", self.to_value)


class ExclusiveBetweenValidator(InclusiveBetweenValidator):
    def is_valid(self, context):
        value = context.property_value
        if value is None:
            return True
        return self.from_value < value < self.to_value


class LengthValidator(PropertyValidator):
    """Checks len(value) against optional bounds. None is left to not_null."""

    def __init__(self, min_length: int = 0, max_length: int | None = None):
        super().__init__()
        if max_length is not None and max_length < min_length:
            raise ValueError("max_length should be larger than min_length")
        self.min_length = min_length
        self.max_length = max_length

    def is_valid(self, context):
        value = context.property_value
        if value is None:
            return True
        length = len(value)
        if length < self.min_length:
            return False
        return self.max_length is None or length <= self.max_length

    def prepare_message_formatter(self, context):
        formatter = context.message_formatter
        formatter.append_argument("MinLength", self.min_length)
        formatter.append_argument("MaxLength", self.max_length)
        formatter.append_argument("TotalLength", len(context.property_value))


class MinimumLengthValidator(LengthValidator):
    def __init__(self, min_length: int):
        super().__init__(min_length, None)


class MaximumLengthValidator(LengthValidator):
    def __init__(self, max_length: int):
        super().__init__(0, max_length)


class ExactLengthValidator(LengthValidator):
    def __init__(self, length: int):
        super().__init__(length, length)


class RegularExpressionValidator(PropertyValidator):
    def __init__(self, pattern: "str | re.Pattern", flags: int = 0):
        super().__init__()
        self.regex = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern, flags)

    def is_valid(self, context):
        value = context.property_value
        if value is None:
            return True
        return self.regex.search(str(value)) is not None

    def prepare_message_formatter(self, context):
        context.message_formatter.append_argument("RegularExpression", self.regex.pattern)


class PredicateValidator(PropertyValidator):
    """Runs predicate(instance, value, context)."""

    def __init__(self, predicate: Callable[[Any, Any, PropertyValidatorContext], bool]):
        super().__init__()
        self.predicate = predicate

    def is_valid(self, context):
        return bool(self.predicate(context.instance_to_validate, context.property_value, context))


class AsyncPredicateValidator(AsyncPropertyValidator):
    """Awaits predicate(instance, value, context)."""

    def __init__(self, predicate: Callable[[Any, Any, PropertyValidatorContext], Awaitable[bool]]):
        super().__init__()
        self.predicate = predicate

    async def is_valid_async(self, context):
        return bool(await self.predicate(context.instance_to_validate, context.property_value, context))
