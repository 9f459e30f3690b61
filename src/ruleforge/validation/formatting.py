"""Message templates and placeholder rendering."""

import re
from typing import Any

PROPERTY_NAME = "PropertyName"
PROPERTY_VALUE = "PropertyValue"
COLLECTION_INDEX = "CollectionIndex"

DEFAULT_MESSAGES: dict[str, str] = {
    "NotNullValidator": "'{PropertyName}' must not be empty.",
    "NullValidator": "'{PropertyName}' must be empty.",
    "NotEmptyValidator": "'{PropertyName}' must not be empty.",
    "EmptyValidator": "'{PropertyName}' must be empty.",
    "EqualValidator": "'{PropertyName}' must be equal to '{ComparisonValue}'.",
    "NotEqualValidator": "'{PropertyName}' must not be equal to '{ComparisonValue}'.",
    "GreaterThanValidator": "'{PropertyName}' must be greater than '{ComparisonValue}'.",
    "GreaterThanOrEqualValidator": "'{PropertyName}' must be greater than or equal to '{ComparisonValue}'.",
    "LessThanValidator": "'{PropertyName}' must be less than '{ComparisonValue}'.",
    "LessThanOrEqualValidator": "'{PropertyName}' must be less than or equal to '{ComparisonValue}'.",
    "InclusiveBetweenValidator": "'{PropertyName}' must be between {From} and {To}. You entered {PropertyValue}.",
    "ExclusiveBetweenValidator": "'{PropertyName}' must be between {From} and {To} (exclusive). You entered {PropertyValue}.",
    "LengthValidator": "'{PropertyName}' must be between {MinLength} and {MaxLength} characters. You entered {TotalLength} characters.",
    "MinimumLengthValidator": "The length of '{PropertyName}' must be at least {MinLength} characters. You entered {TotalLength} characters.",
    "MaximumLengthValidator": "The length of '{PropertyName}' must be {MaxLength} characters or fewer. You entered {TotalLength} characters.",
    "ExactLengthValidator": "'{PropertyName}' must be {MaxLength} characters in length. You entered {TotalLength} characters.",
    "RegularExpressionValidator": "'{PropertyName}' is not in the correct format.",
    "PredicateValidator": "The specified condition was not met for '{PropertyName}'.",
    "AsyncPredicateValidator": "The specified condition was not met for '{PropertyName}'.",
}

_PLACEHOLDER = re.compile(r"\{([^{}:]+)(?::([^{}]+))?\}")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class MessageFormatter:
    """Collects placeholder values and renders a template with them.

    Unknown placeholders are left in the message untouched. A placeholder may
    carry a format spec, e.g. ``{ComparisonValue:.2f}``.
    """

    def __init__(self) -> None:
        self.placeholder_values: dict[str, Any] = {}

    def append_argument(self, name: str, value: Any) -> "MessageFormatter":
        self.placeholder_values[name] = value
        return self

    def append_property_name(self, name: str | None) -> "MessageFormatter":
        return self.append_argument(PROPERTY_NAME, name)

    def append_property_value(self, value: Any) -> "MessageFormatter":
        return self.append_argument(PROPERTY_VALUE, value)

    def build_message(self, template: str) -> str:
        def replace(match: re.Match) -> str:
            key, spec = match.group(1), match.group(2)
            if key not in self.placeholder_values:
                return match.group(0)
            value = self.placeholder_values[key]
            if spec:
                try:
                    return format(value, spec)
                except (TypeError, ValueError):
                    return str(value)
            return "" if value is None else str(value)

        return _PLACEHOLDER.sub(replace, template)


def split_display_name(name: str | None) -> str | None:
    """Turn ``product_name`` or ``ProductName`` into ``Product Name``."""
    if not name:
        return name
    words = _CAMEL_BOUNDARY.sub(" ", name.replace("_", " ")).split()
    return " ".join(word[:1].upper() + word[1:] for word in words)
