"""Schema definitions for message parameter declarations."""

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin


@dataclass
class Param(DataClassJsonMixin):
    """Represents a declared message parameter.

    The type string carries the shape of the parameter:
    - "T": a single value
    - "?T": an optional value (named params only)
    - "T[N]": exactly N values
    - "T[]": any number of values
    """

    name: str
    type: str
    token: str | None = None  # 2-character flag token, named params only
    comment: str | None = None


@dataclass
class KnownFlag(DataClassJsonMixin):
    """Represents an additional flag that is documented but not declared."""

    token: str
    comment: str | None = None


@dataclass
class Message(DataClassJsonMixin):
    """Represents a message type and its parameters."""

    command: str
    positional_params: list[Param] = field(default_factory=list)
    named_params: list[Param] = field(default_factory=list)
    flags: list[KnownFlag] = field(default_factory=list)
    comment: str | None = None


@dataclass
class Schema(DataClassJsonMixin):
    """Represents a complete schema file."""

    messages: list[Message] = field(default_factory=list)


@dataclass(frozen=True)
class TypeShape:
    """A param type string split into base type name and shape."""

    base: str
    is_maybe: bool = False
    is_array: bool = False
    count: int | None = None  # fixed array count, None for a runtime count


def split_type(type_str: str) -> TypeShape:
    """Split a param type string such as "?uint" or "string[2]"."""
    text = type_str.strip()
    is_maybe = text.startswith("?")
    if is_maybe:
        text = text[1:].strip()

    if not text.endswith("]"):
        return TypeShape(base=text, is_maybe=is_maybe)

    open_at = text.find("[")
    if open_at < 0:
        raise ValueError(f"Malformed type {type_str!r}")

    size_text = text[open_at + 1 : -1].strip()
    base = text[:open_at].strip()
    if not size_text:
        return TypeShape(base=base, is_maybe=is_maybe, is_array=True)
    if not size_text.isdigit():
        raise ValueError(f"Malformed array size in type {type_str!r}")
    return TypeShape(base=base, is_maybe=is_maybe, is_array=True, count=int(size_text))
