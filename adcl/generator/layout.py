"""Field layout resolution for message schemas."""

import logging
from dataclasses import dataclass
from typing import Any

from adcl.proto.content import ContentError

from .mappers import Context, FieldInfo, Mapper, MapperResolutionError, resolve_mapper
from .types import Message, Param, TypeShape
from .typespecs import TypeResolutionError, TypeSpec, type_spec_from_name

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParamInfo:
    """A param with its resolved type, mapper and field layout."""

    param: Param
    type: TypeSpec
    shape: TypeShape
    mapper: Mapper
    field_info: FieldInfo
    flag_name: str | None = None  # canonical flag name, named params only


@dataclass(frozen=True)
class MessageLayout:
    """Fully resolved layout of a message type."""

    message: Message
    type_name: str
    flag_type_name: str
    positional: tuple[ParamInfo, ...]
    named: tuple[ParamInfo, ...]

    @property
    def flag_names(self) -> tuple[str, ...]:
        """The flag identifier set, in declaration order."""
        return tuple(p.flag_name for p in self.named if p.flag_name is not None)

    @property
    def positional_fields(self) -> tuple[FieldInfo, ...]:
        return tuple(p.field_info for p in self.positional)


class FieldLayoutResolver:
    """Resolve the params of a message into field layouts.

    Resolution is all-or-nothing: any failing param aborts the message.
    """

    def __init__(self, message: Message):
        self.message = message

    def resolve(self, param: Param, *, named: bool = False) -> ParamInfo:
        command = self.message.command
        try:
            type_spec, shape = type_spec_from_name(param.type)
        except TypeResolutionError as err:
            raise TypeResolutionError(
                f"type resolution failed for type name {param.type} specified by "
                f"param {param.name} of message {command}"
            ) from err

        ctx = Context(param=param, type=type_spec, shape=shape, named=named)
        try:
            mapper = resolve_mapper(ctx)
        except MapperResolutionError as err:
            raise MapperResolutionError(
                f"mapper resolution failed for param {param.name} of message {command} "
                f"with type {param.type}"
            ) from err

        info = ParamInfo(
            param=param,
            type=type_spec,
            shape=shape,
            mapper=mapper,
            field_info=mapper.compose_field_info(ctx),
            flag_name=mapper.param_name(ctx) if named else None,
        )
        _LOG.debug("%s.%s resolved with %s mapper", command, param.name, mapper.kind)
        return info

    def resolve_message(self) -> MessageLayout:
        message = self.message
        positional = tuple(self.resolve(p) for p in message.positional_params)
        named = tuple(self.resolve(p, named=True) for p in message.named_params)

        return MessageLayout(
            message=message,
            type_name=f"{message.command}Content",
            flag_type_name=f"{message.command}Flag",
            positional=positional,
            named=named,
        )


def resolve_layout(message: Message) -> MessageLayout:
    """Resolve a message into its layout."""
    return FieldLayoutResolver(message).resolve_message()


def check_content(layout: MessageLayout, content: Any) -> None:
    """Check static sequence fields hold exactly their declared count."""
    for info in layout.positional + layout.named:
        fi = info.field_info
        if fi.str_is_singular or not fi.is_static:
            continue
        actual = len(getattr(content, fi.str_field_name))
        if actual != fi.static_count:
            raise ContentError(
                f"{fi.str_field_name} must have {fi.static_count} elements, has {actual}"
            )
