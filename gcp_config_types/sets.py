# -*- coding: utf-8 -*-

from typing import Generic, Iterable, List, TypeVar

E = TypeVar("E")


class Set(set, Generic[E]):
    """A set of unique elements in any order.

    Adding an element that already exists keeps a single copy.
    """

    def __init__(self, *vals: E):
        super(Set, self).__init__(vals)

    def __reduce__(self):
        # set.__reduce__ passes the members as one list argument
        return self.__class__, tuple(self), getattr(self, "__dict__", None)

    @classmethod
    def from_iterable(cls, vals: Iterable[E]) -> "Set[E]":
        return cls(*vals)

    def add(self, *vals: E) -> None:
        for v in vals:
            super(Set, self).add(v)

    def contains(self, val: E) -> bool:
        return val in self

    def intersection(self, other: Iterable[E]) -> "Set[E]":
        other = other if isinstance(other, (set, frozenset)) else set(other)
        return Set(*(v for v in self if v in other))

    def union(self, other: Iterable[E]) -> "Set[E]":
        result = Set(*self)
        result.add(*other)
        return result

    def members(self) -> List[E]:
        return list(self)

    def __str__(self):
        return "[" + " ".join(str(v) for v in self) + "]"
