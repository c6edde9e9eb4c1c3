"""Wire-format mappers that lay out the fields backing a parameter."""

from collections.abc import Callable
from dataclasses import Field, dataclass, field
from typing import Any, ClassVar

from adcl.proto.types import Maybe

from .types import Param, TypeShape
from .typespecs import TypeSpec
from .util import to_camel_case


class MapperResolutionError(RuntimeError):
    """Raised when no wire-format mapper exists for a resolved type."""


@dataclass(frozen=True)
class Static:
    """A token count known when the schema is resolved."""

    count: int


@dataclass(frozen=True)
class Dynamic:
    """A token count known only at access time: the length of a sequence field."""

    length_field: str

    def render(self, var: str = "self") -> str:
        if not var:
            return f"len({self.length_field})"
        return f"len({var}.{self.length_field})"

    def evaluate(self, content: Any) -> int:
        return len(getattr(content, self.length_field))


Multiplicity = Static | Dynamic


@dataclass(frozen=True)
class FieldDefault:
    """Default of a backing field, as source text and as a factory."""

    source: str
    factory: Callable[[], Any]
    mutable: bool = False

    def as_field(self) -> Field:
        if self.mutable:
            return field(default_factory=self.factory)
        return field(default=self.factory())


@dataclass(frozen=True)
class FieldInfo:
    """Layout of the two fields backing a parameter.

    The value field holds the typed value, the string field its serialized
    form. A non-singular string field is a list whose length is given by
    the multiplicity.
    """

    field_name: str
    field_type: str
    field_default: FieldDefault
    str_field_name: str
    str_is_singular: bool
    multiplicity: Multiplicity
    is_maybe: bool = False

    @property
    def is_static(self) -> bool:
        return isinstance(self.multiplicity, Static)

    @property
    def static_count(self) -> int:
        if not isinstance(self.multiplicity, Static):
            raise TypeError(f"{self.field_name} has a dynamic multiplicity")
        return self.multiplicity.count

    @property
    def str_field_type(self) -> str:
        return "str" if self.str_is_singular else "list[str]"

    @property
    def str_field_default(self) -> FieldDefault:
        if self.str_is_singular:
            return FieldDefault('""', str)
        if isinstance(self.multiplicity, Static):
            count = self.multiplicity.count
            return FieldDefault(
                f'field(default_factory=lambda: [""] * {count})',
                lambda: [""] * count,
                mutable=True,
            )
        return FieldDefault("field(default_factory=list)", list, mutable=True)


@dataclass(frozen=True)
class Context:
    """Everything a mapper needs to know about a param."""

    param: Param
    type: TypeSpec
    shape: TypeShape
    named: bool = False


def _scalar_default(spec: TypeSpec) -> FieldDefault:
    value = spec.default
    return FieldDefault(repr(value), lambda: value)


class Mapper:
    """Maps a param onto its backing fields."""

    kind: ClassVar[str] = ""

    def compose_field_info(self, ctx: Context) -> FieldInfo:
        raise NotImplementedError

    def param_name(self, ctx: Context) -> str:
        """Canonical flag name of a named param."""
        return to_camel_case(ctx.param.name)


class ScalarMapper(Mapper):
    kind = "scalar"

    def compose_field_info(self, ctx: Context) -> FieldInfo:
        name = ctx.param.name
        return FieldInfo(
            field_name=name,
            field_type=ctx.type.py_type,
            field_default=_scalar_default(ctx.type),
            str_field_name=f"{name}_str",
            str_is_singular=True,
            multiplicity=Static(1),
        )


class MaybeMapper(Mapper):
    kind = "maybe"

    def compose_field_info(self, ctx: Context) -> FieldInfo:
        name = ctx.param.name
        return FieldInfo(
            field_name=name,
            field_type=f"Maybe[{ctx.type.py_type}]",
            field_default=FieldDefault("field(default_factory=Maybe)", Maybe, mutable=True),
            str_field_name=f"{name}_str",
            str_is_singular=True,
            multiplicity=Static(1),
            is_maybe=True,
        )


class FixedArrayMapper(Mapper):
    kind = "fixed"

    def compose_field_info(self, ctx: Context) -> FieldInfo:
        name = ctx.param.name
        count = ctx.shape.count or 0
        value = ctx.type.default
        return FieldInfo(
            field_name=name,
            field_type=f"list[{ctx.type.py_type}]",
            field_default=FieldDefault(
                f"field(default_factory=lambda: [{value!r}] * {count})",
                lambda: [value] * count,
                mutable=True,
            ),
            str_field_name=f"{name}_strs",
            str_is_singular=False,
            multiplicity=Static(count),
        )


class ListMapper(Mapper):
    kind = "list"

    def compose_field_info(self, ctx: Context) -> FieldInfo:
        name = ctx.param.name
        return FieldInfo(
            field_name=name,
            field_type=f"list[{ctx.type.py_type}]",
            field_default=FieldDefault("field(default_factory=list)", list, mutable=True),
            str_field_name=f"{name}_strs",
            str_is_singular=False,
            multiplicity=Dynamic(f"{name}_strs"),
        )


MAPPERS: dict[str, Mapper] = {
    mapper.kind: mapper for mapper in (ScalarMapper(), MaybeMapper(), FixedArrayMapper(), ListMapper())
}


def resolve_mapper(ctx: Context) -> Mapper:
    """Find the mapper for a param's resolved type and shape."""
    shape = ctx.shape

    if shape.is_maybe and shape.is_array:
        raise MapperResolutionError(f"No mapper for optional sequence of {ctx.type.name}")
    if shape.is_maybe and not ctx.named:
        raise MapperResolutionError(f"No positional mapper for optional {ctx.type.name}")
    if shape.is_array and not ctx.type.sequence_ok:
        raise MapperResolutionError(f"No sequence mapper for {ctx.type.name}")
    if shape.is_array and shape.count == 0:
        raise MapperResolutionError(f"No mapper for empty fixed array of {ctx.type.name}")

    if shape.is_maybe:
        return MAPPERS["maybe"]
    if not shape.is_array:
        return MAPPERS["scalar"]
    if shape.count is None:
        return MAPPERS["list"]
    return MAPPERS["fixed"]
