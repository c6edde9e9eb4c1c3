"""Message schema parser using Lark."""

import keyword
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from lark import Lark, Token
from lark.visitors import Transformer

from .types import KnownFlag, Message, Param, Schema
from .util import to_camel_case

_g_parser: Lark | None = None

# Names taken by the overflow map, the accessor methods of content types and
# the builtins used in their field annotations
RESERVED_NAMES = frozenset(
    [
        "flags",
        "plan",
        "positional",
        "pos_len",
        "pos_at",
        "named",
        "named_get",
        "self",
        "field",
        "Flag",
        "Maybe",
        "dict",
        "list",
        "str",
        "int",
        "float",
        "bool",
    ]
)
RESERVED_SUFFIXES = ("_str", "_strs")


class ValidationError(RuntimeError):
    """Raised when schema validation fails."""


@dataclass
class _Array:
    value: int | None


@dataclass
class _Doc:
    value: str


@dataclass
class _Type:
    value: str


@dataclass
class _Positional:
    param: Param


@dataclass
class _Named:
    param: Param


TFilter = TypeVar("TFilter")


def _find_many(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _find_doc(args: list[Any]) -> str | None:
    docs = _find_many(args, _Doc)
    return docs[0].value if docs else None


def _find_type(args: list[Any]) -> str:
    return _find_many(args, _Type)[0].value


class TreeTransformer(Transformer):
    """Transform parse tree into schema types."""

    def start(self, args: list[Any]) -> Schema:
        return Schema(messages=_find_many(args, Message))

    def message(self, args: list[Any]) -> Message:
        return Message(
            command=str(args[0]),
            positional_params=[p.param for p in _find_many(args, _Positional)],
            named_params=[p.param for p in _find_many(args, _Named)],
            flags=_find_many(args, KnownFlag),
            comment=_find_doc(args),
        )

    def positional_param(self, args: list[Any]) -> _Positional:
        return _Positional(
            Param(name=str(args[0]), type=_find_type(args), comment=_find_doc(args))
        )

    def named_param(self, args: list[Any]) -> _Named:
        return _Named(
            Param(
                name=str(args[1]),
                type=_find_type(args),
                token=str(args[0]),
                comment=_find_doc(args),
            )
        )

    def known_flag(self, args: list[Any]) -> KnownFlag:
        return KnownFlag(token=str(args[0]), comment=_find_doc(args))

    def type(self, args: list[Any]) -> _Type:
        text = "".join(str(a) for a in args if isinstance(a, Token))
        arrays = _find_many(args, _Array)
        if arrays:
            count = arrays[0].value
            text += "[]" if count is None else f"[{count}]"
        return _Type(text)

    def array(self, args: list[Any]) -> _Array:
        return _Array(value=int(args[0]) if args else None)

    def doc(self, args: list[Any]) -> _Doc:
        return _Doc(value=str(args[0])[1:-1].replace('\\"', '"'))


def _validate_name(message: Message, param: Param) -> None:
    if param.name in RESERVED_NAMES:
        raise ValidationError(f"{message.command}.{param.name} uses a reserved name")
    if param.name.endswith(RESERVED_SUFFIXES):
        raise ValidationError(
            f"{message.command}.{param.name} ends with a suffix reserved for string fields"
        )
    if not param.name.isidentifier() or keyword.iskeyword(param.name):
        raise ValidationError(f"{message.command}.{param.name} is not a valid identifier")


def validate_message(message: Message) -> None:
    """Validate the params of a single message."""
    seen: set[str] = set()
    for param in message.positional_params + message.named_params:
        _validate_name(message, param)
        if param.name in seen:
            raise ValidationError(f"{message.command}.{param.name} declared more than once")
        seen.add(param.name)

    flag_names: set[str] = set()
    for param in message.named_params:
        if param.token is None or len(param.token) != 2:
            raise ValidationError(
                f"{message.command}.{param.name} needs a 2 character flag token"
            )
        flag_name = to_camel_case(param.name)
        if not flag_name.isidentifier() or keyword.iskeyword(flag_name):
            raise ValidationError(f"{message.command}.{param.name} has no usable flag name")
        if flag_name in flag_names:
            raise ValidationError(f"{message.command} declares flag name {flag_name} twice")
        flag_names.add(flag_name)

    for flag in message.flags:
        if len(flag.token) != 2:
            raise ValidationError(f"{message.command} flag {flag.token} is not 2 characters")


def validate(schema: Schema) -> None:
    """Validate a parsed or loaded schema."""
    commands: set[str] = set()
    for message in schema.messages:
        if not message.command.isidentifier():
            raise ValidationError(f"{message.command} is not a valid message name")
        if message.command in commands:
            raise ValidationError(f"Message {message.command} declared more than once")
        commands.add(message.command)
        validate_message(message)


def parse(text: str) -> Schema:
    """Parse a schema definition."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/schema.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar, parser="lalr")

    tree = _g_parser.parse(text)
    schema = TreeTransformer().transform(tree)

    validate(schema)

    return schema


def load_schema(path: str | Path) -> Schema:
    """Load a schema from a .json file or a schema definition file."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")

    if path.suffix == ".json":
        schema = Schema.from_json(text)
        validate(schema)
        return schema

    return parse(text)
