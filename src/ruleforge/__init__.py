"""ruleforge - declarative object validation.

ruleforge evaluates composable rules against the properties of an object
graph, including nested objects and collections, and reports every failure
with its path from the root.
"""

__version__ = "0.1.0"
__author__ = "ruleforge contributors"
__description__ = "Declarative object validation with nested and collection rules"

from ruleforge.config import CascadeMode, RuleforgeConfig
from ruleforge.exceptions import (
    AsyncValidatorInvokedSynchronouslyError,
    ConfigurationError,
    InvalidRuleSetError,
    RuleforgeError,
    ValidationCancelledError,
    ValidationFailedError,
)
from ruleforge.validation import (
    CancellationToken,
    Member,
    Severity,
    ValidationFailure,
    ValidationOptions,
    ValidationResult,
    Validator,
)

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "AsyncValidatorInvokedSynchronouslyError",
    "CancellationToken",
    "CascadeMode",
    "ConfigurationError",
    "InvalidRuleSetError",
    "Member",
    "RuleforgeConfig",
    "RuleforgeError",
    "Severity",
    "ValidationCancelledError",
    "ValidationFailedError",
    "ValidationFailure",
    "ValidationOptions",
    "ValidationResult",
    "Validator",
]
