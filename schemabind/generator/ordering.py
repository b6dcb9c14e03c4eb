"""Deterministic ordering, deduplication and partitioning of schema entities."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, TypeVar

from .registry import TypeRegistry
from .types import SchemaType


class Named(Protocol):
    @property
    def name(self) -> str: ...


TNamed = TypeVar("TNamed", bound=Named)


def ordered(entities: Iterable[TNamed]) -> list[TNamed]:
    """Sort entities by name and keep the first entity seen for each name.

    Names compare by code point, so the order does not depend on locale.
    """
    result: list[TNamed] = []
    for entity in sorted(entities, key=lambda e: e.name):
        if result and result[-1].name == entity.name:
            continue
        result.append(entity)
    return result


@dataclass(frozen=True)
class Partition:
    """Ordered types split by how they are emitted."""

    enums: list[SchemaType]
    composites: list[SchemaType]
    abstract: list[SchemaType]  # Emitted as interfaces only


def partition(types: Iterable[SchemaType], registry: TypeRegistry) -> Partition:
    """Order types and split them into enums, concrete composites and abstract bases."""
    enums: list[SchemaType] = []
    composites: list[SchemaType] = []
    abstract: list[SchemaType] = []

    for t in ordered(types):
        if t.is_enum:
            enums.append(t)
        elif registry.is_abstract(t.name):
            abstract.append(t)
        else:
            composites.append(t)

    return Partition(enums=enums, composites=composites, abstract=abstract)
