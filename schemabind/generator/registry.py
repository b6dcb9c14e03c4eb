"""Type registry: classification of schema types and interface derivation."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .errors import UnknownTypeError, ValidationError
from .types import SchemaType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Interface:
    """An abstraction synthesized for one polymorphic base type.

    `name` is the base type name; `implementers` are the concrete types that
    satisfy it, sorted by name.
    """

    name: str
    implementers: tuple[str, ...]


class TypeRegistry:
    """Write-once index over every type discovered for a target.

    The registry is fully populated by the constructor and never changes
    afterwards. The first declaration of a name is the one recorded.
    """

    def __init__(self, types: Iterable[SchemaType]):
        self._types: dict[str, SchemaType] = {}
        for t in types:
            self._register(t)

        self._ancestors = {name: self._walk_ancestors(name) for name in self._types}
        self._bases = frozenset(a for chain in self._ancestors.values() for a in chain)
        self._abstract: dict[str, bool] = {}
        self._interfaces = {name: self._derive_interface(name) for name in sorted(self._bases)}

    def _register(self, t: SchemaType) -> None:
        current = self._types.get(t.name)
        if current is None:
            self._types[t.name] = t
            return

        if current.same_declaration(t):
            logger.debug("%s redeclares %s identically", t.source, t.name)
        else:
            logger.warning(
                "%s redeclares %s differently; keeping the declaration from %s",
                t.source,
                t.name,
                current.source,
            )

    def _walk_ancestors(self, name: str) -> tuple[str, ...]:
        chain: list[str] = []
        base = self._types[name].base
        while base is not None and base in self._types:
            if base == name or base in chain:
                raise ValidationError(f"Inheritance cycle through {name}")
            chain.append(base)
            base = self._types[base].base
        return tuple(chain)

    def _derive_interface(self, name: str) -> Interface:
        implementers = [
            n
            for n, chain in self._ancestors.items()
            if (n == name or name in chain) and not self.is_abstract(n)
        ]
        return Interface(name=name, implementers=tuple(sorted(implementers)))

    @property
    def types(self) -> list[SchemaType]:
        """All registered types in registration order."""
        return list(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def lookup(self, name: str) -> SchemaType:
        try:
            return self._types[name]
        except KeyError:
            raise UnknownTypeError(f"Type {name} is not registered") from None

    def enums(self) -> list[SchemaType]:
        return [t for t in self._types.values() if t.is_enum]

    def composites(self) -> list[SchemaType]:
        return [t for t in self._types.values() if not t.is_enum]

    def ancestors(self, name: str) -> tuple[str, ...]:
        """Registered supertypes of a type, nearest first."""
        self.lookup(name)
        return self._ancestors[name]

    def is_enum(self, name: str) -> bool:
        return self.lookup(name).is_enum

    def is_polymorphic_base(self, name: str) -> bool:
        """Check if another type declares this type as a direct or transitive supertype."""
        self.lookup(name)
        return name in self._bases

    def is_abstract(self, name: str) -> bool:
        """Check if a type is a base that only exists as an interface.

        That is a polymorphic base with no fields of its own whose supertype,
        if it has one, is abstract as well.
        """
        if name in self._abstract:
            return self._abstract[name]

        t = self.lookup(name)
        if t.is_enum or t.fields or not self.is_polymorphic_base(name):
            result = False
        elif t.base is None:
            result = True
        else:
            result = t.base in self._types and self.is_abstract(t.base)

        self._abstract[name] = result
        return result

    def interface_names(self) -> list[str]:
        return list(self._interfaces)

    def interface(self, name: str) -> Interface:
        self.lookup(name)
        try:
            return self._interfaces[name]
        except KeyError:
            raise UnknownTypeError(f"Type {name} is not a polymorphic base") from None

    def implements(self, name: str) -> list[str]:
        """Interface names satisfied by a type, sorted."""
        if self.is_abstract(name):
            return []
        names = list(self.ancestors(name))
        if self.is_polymorphic_base(name):
            names.append(name)
        return sorted(names)

    def summary(self) -> dict[str, int]:
        return {
            "types": len(self._types),
            "enums": len(self.enums()),
            "interfaces": len(self._interfaces),
        }
