"""Selectors decide which declared rules take part in a validation pass."""

import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from .context import ValidationContext
    from .rules import PropertyRule

DEFAULT_RULE_SET = "default"
WILDCARD_RULE_SET = "*"

_INDEXER = re.compile(r"\[[^\]]*\]")


def normalize_path(path: str) -> str:
    """``orders[2].product_name`` -> ``orders[].product_name``"""
    return _INDEXER.sub("[]", path)


class ValidatorSelector(ABC):
    """Base class for rule selectors."""

    @abstractmethod
    def can_execute(self, rule: "PropertyRule", property_path: str, context: "ValidationContext") -> bool:
        """Whether rule, addressed at property_path, runs in this pass."""


class DefaultValidatorSelector(ValidatorSelector):
    """Runs rules outside any rule set, plus rules in the "default" set."""

    def can_execute(self, rule, property_path, context):
        return not rule.rule_sets or DEFAULT_RULE_SET in rule.rule_sets


class RuleSetValidatorSelector(ValidatorSelector):
    """Runs rules belonging to the requested rule sets."""

    def __init__(self, rule_sets: Iterable[str]):
        self.rule_sets = [name for name in rule_sets if name]

    def can_execute(self, rule, property_path, context):
        if WILDCARD_RULE_SET in self.rule_sets:
            return True
        if not rule.rule_sets:
            return not self.rule_sets or DEFAULT_RULE_SET in self.rule_sets
        return any(name in self.rule_sets for name in rule.rule_sets)


class MemberNameValidatorSelector(ValidatorSelector):
    """Runs rules for explicitly included members.

    Names may address nested members (``address.postcode``) and collection
    elements (``orders[].product_name``); any index matches ``[]``. Ancestors
    of an included nested member run so evaluation can reach it.
    """

    def __init__(self, member_names: Iterable[str]):
        self.member_names = [normalize_path(name) for name in member_names]
        self._has_nested = any("." in name or "[" in name for name in self.member_names)

    def can_execute(self, rule, property_path, context):
        # Everything below an included member runs unless nested paths were named.
        if context.is_child_context and not self._has_nested:
            return True
        return any(_path_matches(normalize_path(property_path), name) for name in self.member_names)


class ExcludingValidatorSelector(ValidatorSelector):
    """Wraps another selector and drops rules at excluded member paths."""

    def __init__(self, inner: ValidatorSelector, member_names: Iterable[str]):
        self.inner = inner
        self.member_names = [normalize_path(name) for name in member_names]

    def can_execute(self, rule, property_path, context):
        path = normalize_path(property_path)
        for name in self.member_names:
            if path == name or path.startswith(name + ".") or path.startswith(name + "["):
                return False
        return self.inner.can_execute(rule, property_path, context)


class CompositeValidatorSelector(ValidatorSelector):
    """Runs a rule when any of its selectors accepts it."""

    def __init__(self, selectors: Iterable[ValidatorSelector]):
        self.selectors = list(selectors)

    def can_execute(self, rule, property_path, context):
        return any(selector.can_execute(rule, property_path, context) for selector in self.selectors)


def _path_matches(path: str, name: str) -> bool:
    if not path:
        return False
    if path == name:
        return True
    if path.startswith(name + ".") or path.startswith(name + "["):
        return True
    return name.startswith(path + ".") or name.startswith(path + "[")
