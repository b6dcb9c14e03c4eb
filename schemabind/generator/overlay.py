"""Overlay schema loading and merging.

An overlay is an OpenAPI-style YAML document whose `components.schemas`
section supplies extra metadata for types of the primary schema, keyed by
type name. Overlay data only ever adds to a primary declaration.
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError, OverlayConflictError
from .types import Schema, SchemaField, SchemaType

logger = logging.getLogger(__name__)

REF_PREFIX = "#/components/schemas/"

# (type, format) -> schema primitive. A None format is the fallback for the type.
OPENAPI_TYPE_MAP: dict[tuple[str, str | None], str] = {
    ("string", None): "string",
    ("string", "date-time"): "dateTime",
    ("string", "byte"): "binary",
    ("string", "binary"): "binary",
    ("string", "uri"): "anyURI",
    ("boolean", None): "bool",
    ("integer", None): "int",
    ("integer", "int8"): "byte",
    ("integer", "int16"): "short",
    ("integer", "int32"): "int",
    ("integer", "int64"): "long",
    ("number", None): "double",
    ("number", "float"): "float",
    ("number", "double"): "double",
    ("object", None): "anyType",
}


@dataclass(frozen=True)
class OverlayEntry:
    """Supplementary metadata for one type."""

    name: str
    base: str | None
    fields: tuple[SchemaField, ...]
    values: tuple[str, ...]


def _mapping(value: Any, where: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"{where}: expected a mapping, got {value!r}")
    return value


def _text(value: Any, where: str) -> str:
    # YAML reads unquoted on/off/yes/no as booleans and bare digits as numbers
    if not isinstance(value, str):
        raise ConfigurationError(f"{where}: {value!r} is not a string, quote it")
    return value


def _type_ref(prop: dict[str, Any], where: str) -> str:
    if "$ref" in prop:
        ref = str(prop["$ref"])
        if not ref.startswith(REF_PREFIX):
            raise ConfigurationError(f"{where}: unsupported reference {ref}")
        return ref[len(REF_PREFIX) :]

    type_name = prop.get("type", "object")
    fmt = prop.get("format")
    mapped = OPENAPI_TYPE_MAP.get((type_name, fmt)) or OPENAPI_TYPE_MAP.get((type_name, None))
    if mapped is None:
        raise ConfigurationError(f"{where}: unsupported type {type_name!r}")
    return mapped


def _fields(schema: dict[str, Any], where: str) -> list[SchemaField]:
    required = {_text(r, f"{where}.required") for r in schema.get("required") or []}
    fields: list[SchemaField] = []
    for name, prop in _mapping(schema.get("properties"), f"{where}.properties").items():
        name = _text(name, f"{where}.properties")
        prop = _mapping(prop, f"{where}.{name}")
        repeated = prop.get("type") == "array"
        item = _mapping(prop.get("items"), f"{where}.{name}.items") if repeated else prop
        fields.append(
            SchemaField(
                name=name,
                type=_type_ref(item, f"{where}.{name}"),
                optional=name not in required,
                repeated=repeated,
            )
        )
    return fields


def _entry(name: str, schema: dict[str, Any]) -> OverlayEntry:
    where = f"{REF_PREFIX}{name}"
    base: str | None = None
    fields: list[SchemaField] = []

    for part in schema.get("allOf") or []:
        part = _mapping(part, f"{where}.allOf")
        if "$ref" in part and base is None:
            base = _type_ref(part, where)
        else:
            fields.extend(_fields(part, where))
    fields.extend(_fields(schema, where))

    return OverlayEntry(
        name=name,
        base=base,
        fields=tuple(fields),
        values=tuple(_text(v, f"{where}.enum") for v in schema.get("enum") or []),
    )


def parse_overlay(text: str, source: str = "<string>") -> dict[str, OverlayEntry]:
    """Parse overlay YAML text into entries keyed by type name."""
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"{source}: {exc}") from exc

    try:
        schemas = document["components"]["schemas"]
    except (KeyError, TypeError) as exc:
        raise ConfigurationError(f"{source}: missing components.schemas") from exc
    if not isinstance(schemas, dict):
        raise ConfigurationError(f"{source}: components.schemas is not a mapping")

    entries: dict[str, OverlayEntry] = {}
    for name, body in schemas.items():
        name = _text(name, f"{source}: components.schemas")
        entries[name] = _entry(name, _mapping(body, f"{REF_PREFIX}{name}"))
    return entries


def load_overlay(path: Path) -> dict[str, OverlayEntry]:
    """Load an overlay file. A missing file means no supplementary metadata."""
    if not path.is_file():
        logger.debug("No overlay at %s", path)
        return {}

    with open(path, encoding="utf-8") as f:
        entries = parse_overlay(f.read(), source=path.name)
    logger.debug("Loaded %d overlay entries from %s", len(entries), path)
    return entries


def merge_type(t: SchemaType, entry: OverlayEntry) -> SchemaType:
    """Merge one overlay entry into a primary declaration of the same name."""
    if t.is_enum:
        if entry.fields or entry.base:
            raise OverlayConflictError(f"{t.source}: overlay declares fields for enum {t.name}")
        values = t.values + tuple(v for v in entry.values if v not in t.values)
        return replace(t, values=values)

    if entry.values:
        raise OverlayConflictError(f"{t.source}: overlay declares values for type {t.name}")

    if t.base is not None and entry.base is not None and t.base != entry.base:
        raise OverlayConflictError(
            f"{t.source}: overlay base {entry.base} conflicts with {t.base} for {t.name}"
        )

    fields = list(t.fields)
    existing = {f.name: f for f in t.fields}
    for f in entry.fields:
        current = existing.get(f.name)
        if current is None:
            fields.append(f)
            existing[f.name] = f
        elif (current.type, current.repeated) != (f.type, f.repeated):
            raise OverlayConflictError(
                f"{t.source}: overlay field {t.name}.{f.name} conflicts with primary declaration"
            )

    return replace(t, base=t.base or entry.base, fields=tuple(fields))


def merge(schema: Schema, overlay: dict[str, OverlayEntry]) -> Schema:
    """Return a new schema with overlay entries merged in by type name."""
    declared = {t.name for t in schema.types}
    for name in sorted(set(overlay) - declared):
        logger.debug("Ignoring overlay entry %s with no primary declaration", name)

    types = [merge_type(t, overlay[t.name]) if t.name in overlay else t for t in schema.types]
    return replace(schema, types=types)
