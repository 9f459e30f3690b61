"""Member accessors: the only bridge between rules and the objects they read.

A Member is a getter paired with a stable name. Rules close over members when
they are declared, so nothing is looked up by reflection while validating.
"""

from collections.abc import Mapping
from operator import attrgetter, itemgetter
from typing import Any, Callable


class Member:
    """Reads one named value from an object."""

    __slots__ = ("name", "_getter")

    def __init__(self, getter: Callable[[Any], Any], name: str | None):
        if not callable(getter):
            raise TypeError("Member getter must be callable")
        self._getter = getter
        self.name = name

    def get(self, instance: Any) -> Any:
        """Read the member from instance. Accessor errors propagate."""
        return self._getter(instance)

    @property
    def is_model_level(self) -> bool:
        return self.name is None

    @classmethod
    def attr(cls, name: str) -> "Member":
        """Attribute access; a missing attribute raises AttributeError."""
        return cls(attrgetter(name), name)

    @classmethod
    def key(cls, name: str) -> "Member":
        """Item access; a missing key raises KeyError."""
        return cls(itemgetter(name), name)

    @classmethod
    def named(cls, name: str) -> "Member":
        """Key lookup for mappings (missing key reads as None), attribute otherwise."""
        def getter(instance: Any) -> Any:
            if isinstance(instance, Mapping):
                return instance.get(name)
            return getattr(instance, name)
        return cls(getter, name)

    @classmethod
    def of(cls, getter: Callable[[Any], Any], name: str | None) -> "Member":
        return cls(getter, name)

    @classmethod
    def this(cls, name: str | None = None) -> "Member":
        """The instance itself, for model-level rules."""
        return cls(lambda instance: instance, name)

    def __repr__(self) -> str:
        return f"Member({self.name!r})"


def as_member(member: "Member | str") -> Member:
    """Coerce the shorthand accepted by rule_for and friends into a Member."""
    if isinstance(member, Member):
        return member
    if isinstance(member, str):
        return Member.named(member)
    raise TypeError(f"Expected a Member or a member name, got {type(member).__name__}")


def member_name(member: "Member | str") -> str | None:
    return member.name if isinstance(member, Member) else member
