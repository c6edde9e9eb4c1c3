"""Content types whose accessors evaluate plans directly.

This is the alternative to code generation: the accessor plan of a message is
computed when its content type is built and evaluated on every call.

Example:
    INFContent = build_content_type(resolve_layout(message))
    content = INFContent(sid_str="AAAB", nick_str="NIbob")
    content.pos_at(0)  # "AAAB"
"""

import logging
from dataclasses import field, make_dataclass
from enum import StrEnum
from typing import Any

from .accessor import AccessorPlan, plan_accessor
from .layout import MessageLayout, check_content, resolve_layout
from .types import Schema

_LOG = logging.getLogger(__name__)


def build_flag_enum(layout: MessageLayout) -> type[StrEnum]:
    """Build the flag identifier set of a message as a frozen enumeration."""
    return StrEnum(layout.flag_type_name, [(name, name) for name in layout.flag_names])


def build_content_type(layout: MessageLayout) -> type:
    """Build a dataclass for a message whose methods implement ParamAccessor."""
    plan: AccessorPlan = plan_accessor(layout)

    fields: list[tuple[str, Any, Any]] = []
    for info in layout.positional + layout.named:
        fi = info.field_info
        fields.append((fi.field_name, fi.field_type, fi.field_default.as_field()))
        fields.append((fi.str_field_name, fi.str_field_type, fi.str_field_default.as_field()))
    fields.append(("flags", "dict[str, str]", field(default_factory=dict)))

    def __post_init__(self: Any) -> None:
        check_content(layout, self)

    def positional(self: Any) -> list[str]:
        return plan.positional.positional(self)

    def pos_len(self: Any) -> int:
        return plan.positional.pos_len(self)

    def pos_at(self: Any, i: int) -> str:
        return plan.positional.pos_at(self, i)

    def named(self: Any) -> dict[str, str]:
        return plan.named.named(self)

    def named_get(self: Any, key: str) -> tuple[str, bool]:
        return plan.named.named_get(self, key)

    namespace = {
        "Flag": build_flag_enum(layout),
        "plan": plan,
        "__post_init__": __post_init__,
        "positional": positional,
        "pos_len": pos_len,
        "pos_at": pos_at,
        "named": named,
        "named_get": named_get,
    }

    _LOG.debug("built %s with %s positional access", layout.type_name, plan.positional.regime)
    return make_dataclass(layout.type_name, fields, namespace=namespace)


def build_content_types(schema: Schema) -> dict[str, type]:
    """Build content types for every message of a schema, keyed by command."""
    return {
        message.command: build_content_type(resolve_layout(message)) for message in schema.messages
    }
