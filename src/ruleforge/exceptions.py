"""Faults raised by the validation engine.

Validation failures are data and live in a ValidationResult. The classes here
cover the cases where the rule graph itself cannot be evaluated, where the
caller asked for an exception, or where an asynchronous pass was cancelled.
"""

from typing import Any


class RuleforgeError(Exception):
    """Base class for all ruleforge faults."""


class ConfigurationError(RuleforgeError):
    """Raised when a validator or its arguments are unusable."""


class InvalidRuleSetError(ConfigurationError):
    """Raised when a caller requests rule sets the validator never declares."""

    def __init__(self, rule_sets: list[str], validator_type: str):
        self.rule_sets = list(rule_sets)
        self.validator_type = validator_type
        names = ", ".join(self.rule_sets)
        super().__init__(f"{validator_type} does not declare rule set(s): {names}")


class AsyncValidatorInvokedSynchronouslyError(ConfigurationError):
    """Raised when the synchronous entry point reaches an async-only node."""

    def __init__(self, validator_type: str, message: str | None = None):
        self.validator_type = validator_type
        super().__init__(
            message
            or f"{validator_type} requires asynchronous execution - use validate_async instead."
        )


class ValidationCancelledError(RuleforgeError):
    """Raised when an asynchronous validation pass observes cancellation."""

    def __init__(self, failures: list[Any] | None = None):
        self.failures = list(failures or [])
        super().__init__(
            f"Validation was cancelled after collecting {len(self.failures)} failure(s)"
        )


class ValidationFailedError(RuleforgeError):
    """Raised by validate_and_raise when the instance is invalid."""

    def __init__(self, errors: list[Any]):
        self.errors = list(errors)
        details = "\n".join(f" -- {error}" for error in self.errors)
        super().__init__(f"Validation failed:\n{details}")
