"""Validation failures and results."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class Severity(str, Enum):
    """Severity attached to a validation failure."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class ValidationFailure:
    """A single failed constraint, addressed by its path from the root."""
    property_name: str
    error_message: str
    attempted_value: Any = None
    error_code: str | None = None
    severity: Severity = Severity.ERROR
    custom_state: Any = None
    placeholders: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "placeholders", MappingProxyType(dict(self.placeholders)))

    def __hash__(self) -> int:
        # attempted_value, custom_state and placeholders may be unhashable
        return hash((self.property_name, self.error_message, self.error_code))

    def __str__(self) -> str:
        if self.property_name:
            return f"{self.property_name}: {self.error_message}"
        return self.error_message


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one validate / validate_async call."""
    errors: tuple[ValidationFailure, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", tuple(self.errors))

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def exit_code(self) -> int:
        """Exit code for CI: 0 = valid, 1 = invalid."""
        return 0 if self.is_valid else 1

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "is_valid": self.is_valid,
            "errors": [
                {
                    "property_name": failure.property_name,
                    "error_message": failure.error_message,
                    "error_code": failure.error_code,
                    "severity": failure.severity.value,
                    "attempted_value": _jsonable(failure.attempted_value),
                    "custom_state": _jsonable(failure.custom_state),
                    "placeholders": {
                        key: _jsonable(value) for key, value in failure.placeholders.items()
                    },
                }
                for failure in self.errors
            ],
        }

    def __str__(self) -> str:
        return "\n".join(failure.error_message for failure in self.errors)


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    return repr(value)
