"""Semantic types that message parameters can be declared with."""

from dataclasses import dataclass
from typing import Any

from .types import TypeShape, split_type


class TypeResolutionError(RuntimeError):
    """Raised when a type name has no registered semantic type."""


@dataclass(frozen=True)
class TypeSpec:
    """A semantic parameter type.

    py_type is the annotation of a single value in generated code, default is
    the value a fresh field holds.
    """

    name: str
    py_type: str
    default: Any
    sequence_ok: bool = True


# Keyed by the name used in schema files
TYPE_SPECS: dict[str, TypeSpec] = {
    spec.name: spec
    for spec in (
        TypeSpec("string", "str", ""),
        TypeSpec("int", "int", 0),
        TypeSpec("uint", "int", 0),
        TypeSpec("float", "float", 0.0),
        TypeSpec("bool", "bool", False, sequence_ok=False),
        TypeSpec("sid", "str", ""),  # 4 character session ID
        TypeSpec("cid", "str", ""),  # base32 client ID
        TypeSpec("base32", "str", ""),
        TypeSpec("ip4", "str", ""),
        TypeSpec("ip6", "str", ""),
        TypeSpec("feature", "str", ""),
    )
}


def type_names() -> list[str]:
    """Return the registered type names."""
    return list(TYPE_SPECS)


def type_spec_from_name(type_str: str) -> tuple[TypeSpec, TypeShape]:
    """Resolve a param type string to its semantic type and shape."""
    try:
        shape = split_type(type_str)
    except ValueError as err:
        raise TypeResolutionError(str(err)) from err

    spec = TYPE_SPECS.get(shape.base)
    if spec is None:
        raise TypeResolutionError(
            f"Unknown type {shape.base!r}, expected one of: {', '.join(type_names())}"
        )
    return spec, shape
