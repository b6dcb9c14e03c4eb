"""Go code generator for schema bindings."""

import json
import logging
import re
from pathlib import Path

from jinja2 import Environment, PackageLoader

from .errors import EmitError, ValidationError
from .loader import TargetConfig
from .ordering import ordered, partition
from .registry import TypeRegistry
from .types import Schema, SchemaField, SchemaOperation, SchemaType, is_primitive

logger = logging.getLogger(__name__)

env = Environment(
    loader=PackageLoader("schemabind.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)
env.filters["go_quote"] = json.dumps

ENUM_ARTIFACT = "types/enum.go"
TYPES_ARTIFACT = "types/types.go"
INTERFACE_ARTIFACT = "types/if.go"
METHODS_ARTIFACT = "methods/methods.go"

SOAP_ENVELOPE_NS = "http://schemas.xmlsoap.org/soap/envelope/"

# Map schema primitives to Go types
PRIMITIVE_TYPE_MAP = {
    "string": "string",
    "bool": "bool",
    "byte": "int8",
    "short": "int16",
    "int": "int32",
    "long": "int64",
    "float": "float32",
    "double": "float64",
    "dateTime": "time.Time",
    "binary": "[]byte",
    "anyType": "AnyType",
    "anyURI": "string",
}

# Primitives that become pointers when optional, so that zero values survive
POINTER_PRIMITIVES = frozenset(
    ["bool", "byte", "short", "int", "long", "float", "double", "dateTime"]
)

_WORD = re.compile(r"[A-Za-z0-9]+")


def go_name(name: str) -> str:
    """Exported Go identifier for a schema name."""
    return name[:1].upper() + name[1:]


def interface_name(base: str) -> str:
    """Go interface name for a polymorphic base."""
    return f"Base{base}"


def kind_accessor(base: str) -> str:
    """Discriminator method shared by every implementer of a base's interface."""
    return f"Get{base}Kind"


def enum_const(enum_name: str, value: str) -> str:
    """Go constant name for one enum value."""
    return enum_name + "".join(go_name(word) for word in _WORD.findall(value))


def enum_consts(enums: list[SchemaType]) -> dict[str, list[tuple[str, str]]]:
    """Constant names and values per enum.

    Raises ValidationError when two declarations in the enum artifact would
    share an identifier, including a constant that spells its own type name.
    """
    declared = {e.name: f"{e.source}: enum {e.name}" for e in enums}
    consts: dict[str, list[tuple[str, str]]] = {}
    for e in enums:
        rows = []
        for value in e.values:
            const = enum_const(e.name, value)
            if const in declared:
                raise ValidationError(
                    f"{e.source}: enum {e.name} value {value!r} maps to {const}, "
                    f"already declared by {declared[const]}"
                )
            declared[const] = f"{e.source}: enum {e.name} value {value!r}"
            rows.append((const, value))
        consts[e.name] = rows
    return consts


def align(rows: list[tuple[str, ...]], indent: str = "\t") -> list[str]:
    """Left-align columns the way gofmt lays out struct fields."""
    if not rows:
        return []
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]) - 1)]
    lines = []
    for row in rows:
        cells = [cell.ljust(width) for cell, width in zip(row, widths)] + [row[-1]]
        lines.append(indent + " ".join(cells).rstrip())
    return lines


class GoTypeMapper:
    """Map schema type references to Go types for one target."""

    def __init__(self, registry: TypeRegistry, target: TargetConfig):
        self.registry = registry
        self.target = target

    def _qualify(self, name: str) -> str:
        if name in self.registry or self.target.is_root:
            return name
        # Defined by the root target
        return f"types.{name}"

    def element_type(self, name: str) -> str:
        if is_primitive(name):
            return PRIMITIVE_TYPE_MAP[name]
        if name in self.registry and self.registry.is_polymorphic_base(name):
            return interface_name(name)
        return self._qualify(name)

    def field_type(self, f: SchemaField) -> str:
        element = self.element_type(f.type)
        if f.repeated:
            return f"[]{element}"
        if f.optional and self._is_pointer(f.type):
            return f"*{element}"
        return element

    def _is_pointer(self, name: str) -> bool:
        if is_primitive(name):
            return name in POINTER_PRIMITIVES
        if name in self.registry:
            return not (self.registry.is_enum(name) or self.registry.is_polymorphic_base(name))
        return True

    def field_tag(self, f: SchemaField) -> str:
        xml = f"{f.name},omitempty" if f.optional or f.repeated else f.name
        tag = f'xml:"{xml}"'
        if f.type in self.registry and self.registry.is_polymorphic_base(f.type):
            tag += f' typeattr:"{f.type}"'
        return f"`{tag}`"

    def embedded_base(self, t: SchemaType) -> str | None:
        """The struct a composite embeds for its supertype, if any."""
        if t.base is None:
            return None
        if t.base in self.registry:
            return None if self.registry.is_abstract(t.base) else t.base
        return self._qualify(t.base)

    def struct_fields(self, t: SchemaType) -> list[str]:
        lines = []
        embedded = self.embedded_base(t)
        if embedded is not None:
            lines.append(f"\t{embedded}")
            if t.fields:
                lines.append("")
        rows = [(go_name(f.name), self.field_type(f), self.field_tag(f)) for f in t.fields]
        return lines + align(rows)

    def uses_time(self, types: list[SchemaType]) -> bool:
        return any(f.type == "dateTime" for t in types for f in t.fields)


def _method_type(name: str) -> str:
    if is_primitive(name):
        return f"*{PRIMITIVE_TYPE_MAP[name]}"
    return f"*types.{name}"


def _body_fields(op: SchemaOperation, namespace: str) -> list[str]:
    return align(
        [
            ("Req", _method_type(op.input), f'`xml:"{namespace} {op.name},omitempty"`'),
            ("Res", _method_type(op.output), f'`xml:"{op.name}Response,omitempty"`'),
            ("Fault_", "*soap.Fault", f'`xml:"{SOAP_ENVELOPE_NS} Fault,omitempty"`'),
        ]
    )


def render_enums(enums: list[SchemaType]) -> str:
    """Render the enum artifact."""
    consts = enum_consts(enums)
    template = env.get_template("enum.go.j2")
    return template.render(
        package="types",
        enums=enums,
        consts=lambda e: consts[e.name],
    )


def render_types(composites: list[SchemaType], registry: TypeRegistry, target: TargetConfig) -> str:
    """Render the composite artifact."""
    mapper = GoTypeMapper(registry, target)
    template = env.get_template("types.go.j2")
    return template.render(
        package="types",
        types=composites,
        target=target,
        uses_time=mapper.uses_time(composites),
        struct_fields=mapper.struct_fields,
    )


def dump_interface(registry: TypeRegistry, name: str) -> str:
    """Render one interface definition with its implementer accessors."""
    template = env.get_template("interface.go.j2")
    return template.render(
        iface=registry.interface(name),
        interface_name=interface_name,
        kind_accessor=kind_accessor,
    )


def render_interfaces(registry: TypeRegistry) -> str:
    """Render the interface artifact."""
    template = env.get_template("if.go.j2")
    return template.render(
        package="types",
        interfaces=[
            dump_interface(registry, name).rstrip("\n") for name in registry.interface_names()
        ],
    )


def render_methods(operations: list[SchemaOperation], namespace: str, target: TargetConfig) -> str:
    """Render the method stub artifact."""
    template = env.get_template("methods.go.j2")
    return template.render(
        package="methods",
        operations=operations,
        target=target,
        method_type=_method_type,
        body_fields=lambda op: _body_fields(op, namespace),
    )


def render(schema: Schema, registry: TypeRegistry, target: TargetConfig) -> dict[str, str]:
    """Render all four artifacts, keyed by path relative to the output directory."""
    parts = partition(schema.types, registry)
    namespace = schema.namespace or f"urn:{target.package}"

    return {
        ENUM_ARTIFACT: render_enums(parts.enums),
        TYPES_ARTIFACT: render_types(parts.composites, registry, target),
        INTERFACE_ARTIFACT: render_interfaces(registry),
        METHODS_ARTIFACT: render_methods(ordered(schema.operations), namespace, target),
    }


def write(artifacts: dict[str, str], out_dir: Path) -> None:
    """Write rendered artifacts below an existing output directory."""
    for relative, content in artifacts.items():
        path = Path(out_dir) / relative
        try:
            path.parent.mkdir(exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as exc:
            raise EmitError(f"Unable to write {path}: {exc}") from exc
        logger.debug("Wrote %s", path)
