"""Resources and their metadata.

A Resource pairs a payload (the data of a build artifact) with Metadata, a
string to string mapping. Metadata forms a monoid under left-biased union:
when both sides define a key, the left one wins.

Example:
    >>> page = Resource(Metadata({"title": "Home"}), "<p>hi</p>")
    >>> get_metadata("title", page)
    'Home'
    >>> get_data(page.map(str.upper))
    '<P>HI</P>'
"""

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Generic, TypeVar

A = TypeVar("A")
B = TypeVar("B")


@dataclass(frozen=True)
class Metadata(Mapping[str, str]):
    """Immutable metadata fields of a resource.

    Attributes:
        fields: The metadata key-value pairs
    """

    fields: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @classmethod
    def empty(cls) -> "Metadata":
        """Return metadata without fields (the monoid identity)."""
        return cls()

    @classmethod
    def concat(cls, items: "list[Metadata]") -> "Metadata":
        """Merge metadata left to right; earlier items win on collisions."""
        merged: dict[str, str] = {}
        for item in reversed(items):
            merged.update(item.fields)
        return cls(merged)

    def __add__(self, other: "Metadata") -> "Metadata":
        if not isinstance(other, Metadata):
            return NotImplemented
        return Metadata({**other.fields, **self.fields})

    def __getitem__(self, key: str) -> str:
        return self.fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Metadata):
            return dict(self.fields) == dict(other.fields)
        if isinstance(other, Mapping):
            return dict(self.fields) == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self.fields.items()))

    def __repr__(self) -> str:
        return f"Metadata({dict(self.fields)!r})"


@dataclass(frozen=True)
class Resource(Generic[A]):
    """A data source for a build artifact with its metadata fields.

    Attributes:
        metadata: Metadata attached to the resource
        data: The payload
    """

    metadata: Metadata
    data: A

    @classmethod
    def pure(cls, data: A) -> "Resource[A]":
        """Wrap a payload in a resource without metadata."""
        return cls(Metadata.empty(), data)

    def map(self, func: Callable[[A], B]) -> "Resource[B]":
        """Transform the payload, keeping the metadata."""
        return Resource(self.metadata, func(self.data))

    def bind(self, func: "Callable[[A], Resource[B]]") -> "Resource[B]":
        """Chain a computation producing a new resource from the payload.

        Metadata of the resource returned by func is merged on the left of the
        current metadata, so its fields take precedence on collisions.
        """
        result = func(self.data)
        return Resource(result.metadata + self.metadata, result.data)

    def apply(self, other: "Resource[Any]") -> "Resource[Any]":
        """Apply a resource holding a function to a resource holding a value.

        The metadata of other is merged on the left of this resource's.
        """
        return Resource(other.metadata + self.metadata, self.data(other.data))

    def combine(self, other: "Resource[A]") -> "Resource[A]":
        """Combine two resources with monoidal payloads (supporting +)."""
        return Resource(self.metadata + other.metadata, self.data + other.data)

    def __add__(self, other: "Resource[A]") -> "Resource[A]":
        if not isinstance(other, Resource):
            return NotImplemented
        return self.combine(other)


def get_data(resource: Resource[A]) -> A:
    """Get the payload from a resource."""
    return resource.data


def get_metadata(key: str, resource: Resource[Any]) -> str | None:
    """Get a metadata field from a resource.

    Args:
        key: Name of the metadata field
        resource: Resource to read from

    Returns:
        The field value, or None if the resource has no such field
    """
    return resource.metadata.get(key)
