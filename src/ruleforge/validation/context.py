"""Per-call validation state.

A ValidationContext is created for every validate / validate_async call and
cloned whenever evaluation descends into a child validator or a collection
element. Clones share the root instance reference, the selector and the
root_context_data mapping, but each gets its own property chain.
"""

import threading
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from ..config import CascadeMode
from ..exceptions import ValidationCancelledError
from .formatting import MessageFormatter

if TYPE_CHECKING:
    from .rules import PropertyRule
    from .selectors import ValidatorSelector

COLLECTION_INDEX_KEY = "__ruleforge_collection_index"

_MISSING = object()


class PropertyChain:
    """Path from the root object to the location being validated."""

    def __init__(self, segments: list[str] | None = None):
        self._segments: list[str] = list(segments or [])

    def add(self, name: str | None) -> None:
        if name:
            self._segments.append(name)

    def add_indexer(self, index: Any) -> None:
        """Attach ``[index]`` to the last segment (or start a bare one)."""
        if self._segments:
            self._segments[-1] = f"{self._segments[-1]}[{index}]"
        else:
            self._segments.append(f"[{index}]")

    def copy(self) -> "PropertyChain":
        return PropertyChain(self._segments)

    def build_property_name(self, name: str | None) -> str:
        chain = str(self)
        if not name:
            return chain
        if not chain:
            return name
        return f"{chain}.{name}"

    def __str__(self) -> str:
        return ".".join(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[str]:
        return iter(self._segments)

    def __repr__(self) -> str:
        return f"PropertyChain({self._segments!r})"


class CancellationToken:
    """Cancellation signal threaded through an asynchronous validation pass."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ValidationCancelledError()


class ValidationContext:
    """State for validating one object within a validation pass."""

    def __init__(
        self,
        instance_to_validate: Any,
        property_chain: PropertyChain | None = None,
        selector: "ValidatorSelector | None" = None,
        root_context_data: MutableMapping[str, Any] | None = None,
        *,
        is_child_context: bool = False,
        is_child_collection_context: bool = False,
        is_async: bool = False,
        cancellation: CancellationToken | None = None,
        cascade_mode: CascadeMode | None = None,
        parent_context: "ValidationContext | None" = None,
    ):
        if selector is None:
            from .selectors import DefaultValidatorSelector
            selector = DefaultValidatorSelector()

        self.instance_to_validate = instance_to_validate
        self.property_chain = property_chain if property_chain is not None else PropertyChain()
        self.selector = selector
        self.root_context_data = root_context_data if root_context_data is not None else {}
        self.is_child_context = is_child_context
        self.is_child_collection_context = is_child_collection_context
        self.is_async = is_async
        self.cancellation = cancellation
        self.cascade_mode = cascade_mode
        self.parent_context = parent_context

    def clone_for_child_validator(
        self,
        instance_to_validate: Any,
        preserve_parent_context: bool = False,
        selector: "ValidatorSelector | None" = None,
    ) -> "ValidationContext":
        """Context for handing a property value to another validator."""
        return ValidationContext(
            instance_to_validate,
            self.property_chain.copy(),
            selector or self.selector,
            self.root_context_data,
            is_child_context=True,
            is_async=self.is_async,
            cancellation=self.cancellation,
            cascade_mode=self.cascade_mode,
            parent_context=self if preserve_parent_context else None,
        )

    def clone_for_child_collection_validator(
        self,
        instance_to_validate: Any,
        preserve_parent_context: bool = False,
    ) -> "ValidationContext":
        """Context for one element of a collection rule."""
        return ValidationContext(
            instance_to_validate,
            self.property_chain.copy(),
            self.selector,
            self.root_context_data,
            is_child_context=True,
            is_child_collection_context=True,
            is_async=self.is_async,
            cancellation=self.cancellation,
            cascade_mode=self.cascade_mode,
            parent_context=self if preserve_parent_context else None,
        )

    @contextmanager
    def scoped_root_data(self, key: str, value: Any) -> Iterator[None]:
        """Publish value under key for the duration of the block, then restore."""
        previous = self.root_context_data.get(key, _MISSING)
        self.root_context_data[key] = value
        try:
            yield
        finally:
            if previous is _MISSING:
                self.root_context_data.pop(key, None)
            else:
                self.root_context_data[key] = previous

    def raise_if_cancelled(self) -> None:
        if self.cancellation is not None:
            self.cancellation.raise_if_cancelled()


class PropertyValidatorContext:
    """What a single PropertyValidator sees when it runs."""

    def __init__(
        self,
        parent_context: ValidationContext,
        rule: "PropertyRule",
        property_name: str,
        property_value: Any,
    ):
        self.parent_context = parent_context
        self.rule = rule
        self.property_name = property_name
        self.property_value = property_value
        self.message_formatter = MessageFormatter()

    @property
    def instance_to_validate(self) -> Any:
        return self.parent_context.instance_to_validate

    @property
    def display_name(self) -> str | None:
        return self.rule.get_display_name()

    @property
    def root_context_data(self) -> MutableMapping[str, Any]:
        return self.parent_context.root_context_data

    @property
    def cancellation(self) -> CancellationToken | None:
        return self.parent_context.cancellation
