"""Type definitions for schema loading and code generation."""

from dataclasses import dataclass, field
from enum import StrEnum, auto

from dataclasses_json import DataClassJsonMixin


class TypeKind(StrEnum):
    """Classification of a declared schema type."""

    ENUM = auto()
    COMPOSITE = auto()


@dataclass(frozen=True)
class SchemaField(DataClassJsonMixin):
    """Represents a field of a composite type.

    - optional=True: the field may be omitted on the wire
    - repeated=True: the field holds a list of values
    """

    name: str
    type: str
    optional: bool = False
    repeated: bool = False


@dataclass(frozen=True)
class SchemaType(DataClassJsonMixin):
    """Represents one discovered schema type (enum or composite).

    `base` is the declared direct supertype. Whether a type is itself a
    polymorphic base is derived by the registry, never declared here.
    """

    name: str
    kind: TypeKind
    base: str | None = None
    fields: tuple[SchemaField, ...] = ()
    values: tuple[str, ...] = ()
    source: str = "<unknown>"

    @property
    def is_enum(self) -> bool:
        return self.kind == TypeKind.ENUM

    def same_declaration(self, other: "SchemaType") -> bool:
        """Check if two declarations describe the same type, ignoring origin."""
        return (
            self.name == other.name
            and self.kind == other.kind
            and self.base == other.base
            and self.fields == other.fields
            and self.values == other.values
        )


@dataclass(frozen=True)
class SchemaOperation(DataClassJsonMixin):
    """Represents one RPC operation."""

    name: str
    input: str
    output: str
    source: str = "<unknown>"


@dataclass
class Schema(DataClassJsonMixin):
    """Represents a complete parsed schema for one target."""

    namespace: str | None = None
    types: list[SchemaType] = field(default_factory=list)
    operations: list[SchemaOperation] = field(default_factory=list)


PRIMITIVE_TYPES = frozenset(
    [
        "string",
        "bool",
        "byte",
        "short",
        "int",
        "long",
        "float",
        "double",
        "dateTime",
        "binary",
        "anyType",
        "anyURI",
    ]
)


def is_primitive(name: str) -> bool:
    """Check if a type reference names a primitive type."""
    return name in PRIMITIVE_TYPES
