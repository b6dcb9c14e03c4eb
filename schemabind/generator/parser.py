"""Schema definition parser using Lark."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from lark import Lark, Token
from lark.exceptions import LarkError
from lark.visitors import Transformer, v_args

from .errors import ValidationError
from .types import Schema, SchemaField, SchemaOperation, SchemaType, TypeKind, is_primitive

_g_parser: Lark | None = None


@dataclass
class _Namespace:
    value: str


@dataclass
class _Base:
    value: str


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _find_one(args: list[Any], class_type: type[object]) -> Any:
    filtered = _filter(args, class_type)
    if len(filtered) == 0:
        return None
    if len(filtered) > 1:
        raise RuntimeError(f"Found more than one {class_type}")

    if hasattr(filtered[0], "value"):
        return filtered[0].value
    return filtered[0]


def _tokens(args: list[Any], token_type: str) -> list[str]:
    return [str(v) for v in args if isinstance(v, Token) and v.type == token_type]


def _unquote(token: Token) -> str:
    return str(token)[1:-1]


class TreeTransformer(Transformer):
    """Transform parse tree into schema descriptors."""

    def __init__(self, source: str):
        super().__init__()
        self.source = source

    def _where(self, meta: Any) -> str:
        return f"{self.source}:{meta.line}"

    def start(self, args: list[Any]) -> list[Any]:
        return args

    def namespace(self, args: list[Any]) -> _Namespace:
        return _Namespace(value=_unquote(args[0]))

    def enum_value(self, args: list[Any]) -> str:
        token = args[0]
        if token.type == "ESCAPED_STRING":
            return _unquote(token)
        return str(token)

    @v_args(meta=True)
    def enum_decl(self, meta: Any, args: list[Any]) -> SchemaType:
        return SchemaType(
            name=str(args[0]),
            kind=TypeKind.ENUM,
            values=tuple(args[1:]),
            source=self._where(meta),
        )

    def base(self, args: list[Any]) -> _Base:
        return _Base(value=str(args[0]))

    def field(self, args: list[Any]) -> SchemaField:
        name, type_name = _tokens(args, "NAME")
        return SchemaField(
            name=name,
            type=type_name,
            optional=bool(_tokens(args, "OPTIONAL")),
            repeated=bool(_tokens(args, "REPEATED")),
        )

    @v_args(meta=True)
    def type_decl(self, meta: Any, args: list[Any]) -> SchemaType:
        return SchemaType(
            name=str(args[0]),
            kind=TypeKind.COMPOSITE,
            base=_find_one(args, _Base),
            fields=tuple(_filter(args, SchemaField)),
            source=self._where(meta),
        )

    @v_args(meta=True)
    def operation_decl(self, meta: Any, args: list[Any]) -> SchemaOperation:
        name, input_type, output_type = (str(a) for a in args)
        return SchemaOperation(
            name=name, input=input_type, output=output_type, source=self._where(meta)
        )


def _get_parser() -> Lark:
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/schema.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar, parser="lalr", propagate_positions=True)
    return _g_parser


def parse(text: str, source: str = "<string>") -> Schema:
    """Parse schema text into descriptors.

    Declarations are returned in file order; repeated names are kept.
    """
    try:
        tree = _get_parser().parse(text)
    except LarkError as exc:
        raise ValidationError(f"{source}: {exc}") from exc

    items = TreeTransformer(source).transform(tree)

    namespaces = _filter(items, _Namespace)
    if len(namespaces) > 1:
        raise ValidationError(f"{source}: namespace declared more than once")

    return Schema(
        namespace=namespaces[0].value if namespaces else None,
        types=_filter(items, SchemaType),
        operations=_filter(items, SchemaOperation),
    )


def read(path: str | Path) -> Schema:
    """Read and parse a schema file."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        text = f.read()
    return parse(text, source=path.name)


def _check_inheritance(types: dict[str, SchemaType]) -> None:
    for t in types.values():
        seen = [t.name]
        base = t.base
        while base is not None and base in types:
            if base in seen:
                chain = " -> ".join([*seen, base])
                raise ValidationError(f"{t.source}: inheritance cycle {chain}")
            seen.append(base)
            base = types[base].base


def validate_assumptions(schema: Schema, *, resolve_references: bool = False) -> None:
    """Validate a parsed schema before it is used for generation.

    With resolve_references, every type reference must name a primitive or a
    declared type. Targets that build on another target's types leave it off.
    """
    declared: dict[str, SchemaType] = {}
    for t in schema.types:
        declared.setdefault(t.name, t)

    def check_ref(name: str, where: str) -> None:
        if resolve_references and not is_primitive(name) and name not in declared:
            raise ValidationError(f"{where}: reference to undeclared type {name}")

    for t in schema.types:
        if t.is_enum:
            if not t.values:
                raise ValidationError(f"{t.source}: enum {t.name} has no values")
            if len(set(t.values)) != len(t.values):
                raise ValidationError(f"{t.source}: enum {t.name} repeats a value")
            continue

        names = [f.name for f in t.fields]
        if len(set(names)) != len(names):
            raise ValidationError(f"{t.source}: type {t.name} repeats a field name")

        if t.base is not None:
            if t.base == t.name:
                raise ValidationError(f"{t.source}: type {t.name} inherits from itself")
            if t.base in declared and declared[t.base].is_enum:
                raise ValidationError(f"{t.source}: type {t.name} cannot extend enum {t.base}")
            check_ref(t.base, t.source)

        for f in t.fields:
            check_ref(f.type, t.source)

    _check_inheritance(declared)

    for op in schema.operations:
        check_ref(op.input, op.source)
        check_ref(op.output, op.source)
