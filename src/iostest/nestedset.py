"""Persistent stable-order artifact sets.

An :class:`OrderedArtifactSet` stores its direct artifacts and child sets in
insertion order. Iteration yields every reachable artifact exactly once, in
first-seen order. Child sets are shared rather than copied, and their
flattened form is computed once and reused by every parent that includes them.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from iostest.models import Artifact

Entry = Union["Artifact", "OrderedArtifactSet"]


class OrderedArtifactSet:
    __slots__ = ("_entries", "_flat")

    _entries: tuple[Entry, ...]
    _flat: tuple[Artifact, ...]

    def __init__(self, entries: Iterable[Entry] = ()) -> None:
        self._entries = tuple(entries)
        self._flat = _flatten(self._entries)

    @classmethod
    def of(cls, *artifacts: Artifact) -> OrderedArtifactSet:
        return cls(artifacts)

    @property
    def entries(self) -> tuple[Entry, ...]:
        return self._entries

    def to_tuple(self) -> tuple[Artifact, ...]:
        return self._flat

    def is_empty(self) -> bool:
        return not self._flat

    def __iter__(self) -> Iterator[Artifact]:
        return iter(self._flat)

    def __len__(self) -> int:
        return len(self._flat)

    def __contains__(self, item: object) -> bool:
        return item in self._flat

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderedArtifactSet):
            return NotImplemented
        return self._flat == other._flat

    def __hash__(self) -> int:
        return hash(self._flat)

    def __setattr__(self, name: str, value: object) -> None:
        if hasattr(self, "_flat"):
            raise AttributeError(f"{type(self).__name__} is immutable")
        object.__setattr__(self, name, value)

    def __repr__(self) -> str:
        paths = ", ".join(artifact.exec_path for artifact in self._flat)
        return f"OrderedArtifactSet([{paths}])"


class OrderedArtifactSetBuilder:
    """Mutable accumulator; :meth:`build` freezes the current entries."""

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: list[Entry] = []

    def add(self, artifact: Artifact) -> OrderedArtifactSetBuilder:
        self._entries.append(artifact)
        return self

    def add_all(self, artifacts: Iterable[Artifact]) -> OrderedArtifactSetBuilder:
        self._entries.extend(artifacts)
        return self

    def add_transitive(self, child: OrderedArtifactSet) -> OrderedArtifactSetBuilder:
        if not child.is_empty():
            self._entries.append(child)
        return self

    def build(self) -> OrderedArtifactSet:
        if not self._entries:
            return EMPTY
        return OrderedArtifactSet(self._entries)


def _flatten(entries: tuple[Entry, ...]) -> tuple[Artifact, ...]:
    seen: set[Artifact] = set()
    ordered: list[Artifact] = []
    visited_children: set[int] = set()
    for entry in entries:
        if isinstance(entry, OrderedArtifactSet):
            # Same child included twice contributes nothing new.
            if id(entry) in visited_children:
                continue
            visited_children.add(id(entry))
            candidates: Iterable[Artifact] = entry._flat
        else:
            candidates = (entry,)
        for artifact in candidates:
            if artifact in seen:
                continue
            seen.add(artifact)
            ordered.append(artifact)
    return tuple(ordered)


EMPTY = OrderedArtifactSet()


__all__ = ["EMPTY", "OrderedArtifactSet", "OrderedArtifactSetBuilder"]
