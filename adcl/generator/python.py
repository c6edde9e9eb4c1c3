"""Python code generator for message parameter accessors."""

import logging
from dataclasses import dataclass

from jinja2 import Environment, PackageLoader

from .accessor import (
    TOKEN_WIDTH,
    AccessorPlan,
    BranchKind,
    NamedEntry,
    NamedPlan,
    Offset,
    PositionalPlan,
    Regime,
    plan_accessor,
)
from .layout import MessageLayout, ParamInfo, resolve_layout
from .mappers import FieldInfo
from .types import KnownFlag, Schema

_LOG = logging.getLogger(__name__)

env = Environment(
    loader=PackageLoader("adcl.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("python.py.j2")

OUT_OF_RANGE = 'raise IndexOutOfRange("index out of range")'


@dataclass(frozen=True)
class _FieldDecl:
    """A param's backing fields as declared in the content class."""

    info: FieldInfo
    comment: str | None


def render_offset(offset: Offset, op: str = "+", var: str = "self") -> str:
    """Render an offset as an expression, joining its terms with op.

    A literal zero is left out when there are dynamic terms.
    """
    parts: list[str] = []
    if offset.literal > 0 or not offset.terms:
        parts.append(str(offset.literal))
    parts.extend(term.render(var) for term in offset.terms)
    return f" {op} ".join(parts)


def _index_expr(offset: Offset) -> str:
    if offset.is_zero:
        return "i"
    return f"i - {render_offset(offset, '-')}"


def _str_ref(fi: FieldInfo) -> str:
    return f"self.{fi.str_field_name}"


def _gen_positional(plan: PositionalPlan) -> str:
    if plan.regime == Regime.ALL_STATIC:
        items: list[str] = []
        for slot in plan.slots:
            ref = _str_ref(slot.field)
            items.append(ref if slot.element is None else f"{ref}[{slot.element}]")
        return f"return [{', '.join(items)}]"

    if plan.regime == Regime.SINGLE_DYNAMIC:
        return f"return list({_str_ref(plan.branches[0].field)})"

    lines = ["positionals: list[str] = []"]
    for branch in plan.branches:
        ref = _str_ref(branch.field)
        if branch.kind == BranchKind.SINGULAR:
            lines.append(f"positionals.append({ref})")
        elif branch.kind == BranchKind.STATIC:
            elements = ", ".join(f"{ref}[{k}]" for k in range(branch.count))
            lines.append(f"positionals.extend([{elements}])")
        else:
            lines.append(f"positionals.extend({ref})")
    lines.append("return positionals")
    return "\n".join(lines)


def _gen_pos_len(plan: PositionalPlan) -> str:
    return f"return {render_offset(plan.length)}"


def _gen_pos_at(plan: PositionalPlan) -> str:
    lines: list[str] = []

    if plan.regime == Regime.ALL_STATIC:
        for slot in plan.slots:
            ref = _str_ref(slot.field)
            if slot.element is not None:
                ref = f"{ref}[{slot.element}]"
            lines.append(f"if i == {slot.index}:")
            lines.append(f"    return {ref}")
        lines.append(OUT_OF_RANGE)
        return "\n".join(lines)

    if plan.regime == Regime.SINGLE_DYNAMIC:
        ref = _str_ref(plan.branches[0].field)
        lines.append(f"if not 0 <= i < len({ref}):")
        lines.append(f"    {OUT_OF_RANGE}")
        lines.append(f"return {ref}[i]")
        return "\n".join(lines)

    lines.append("if i < 0:")
    lines.append(f"    {OUT_OF_RANGE}")
    for branch in plan.branches:
        ref = _str_ref(branch.field)
        start = render_offset(branch.offset)

        if branch.kind == BranchKind.SINGULAR:
            lines.append(f"if i == {start}:")
            lines.append(f"    return {ref}")
        elif branch.kind == BranchKind.STATIC:
            end = render_offset(branch.offset.advance(branch.count))
            lines.append(f"if {start} <= i < {end}:")
            lines.append(f"    return {ref}[{_index_expr(branch.offset)}]")
        else:
            end = render_offset(branch.offset.extend(branch.dynamic))
            lines.append(f"if i < {end}:")
            lines.append(f"    return {ref}[{_index_expr(branch.offset)}]")
    lines.append(OUT_OF_RANGE)
    return "\n".join(lines)


def _presence(entry: NamedEntry) -> str:
    conds: list[str] = []
    if entry.field.is_maybe:
        conds.append(f"self.{entry.field.field_name}.is_set")
    if not entry.field.str_is_singular:
        conds.append(f"len({_str_ref(entry.field)}) > 0")
    return " and ".join(conds)


def _representative(entry: NamedEntry) -> str:
    ref = _str_ref(entry.field)
    if entry.field.str_is_singular:
        return ref
    return f"{ref}[0]"


def _gen_named(plan: NamedPlan) -> str:
    if not plan.entries:
        return "return dict(self.flags)"

    lines = ["params = dict(self.flags)", ""]
    for entry in plan.entries:
        text = _representative(entry)
        assign = f"params[{text}[:{TOKEN_WIDTH}]] = {text}[{TOKEN_WIDTH}:]"
        if entry.always_present:
            lines.append(assign)
        else:
            lines.append(f"if {_presence(entry)}:")
            lines.append(f"    {assign}")
    lines.extend(["", "return params"])
    return "\n".join(lines)


def _gen_named_get(plan: NamedPlan, flag_type_name: str) -> str:
    lines: list[str] = []
    for entry in plan.entries:
        value = f"{_representative(entry)}[{TOKEN_WIDTH}:]"
        lines.append(f"if key == {flag_type_name}.{entry.flag_name}:")
        if entry.always_present:
            lines.append(f"    return {value}, True")
        else:
            lines.append(f"    if {_presence(entry)}:")
            lines.append(f"        return {value}, True")
            lines.append('    return "", False')
    if lines:
        lines.append("")
    lines.extend(["if key in self.flags:", "    return self.flags[key], True", 'return "", False'])
    return "\n".join(lines)


def _gen_post_init(layout: MessageLayout) -> str:
    lines: list[str] = []
    for info in layout.positional + layout.named:
        fi = info.field_info
        if fi.str_is_singular or not fi.is_static:
            continue
        count = fi.static_count
        lines.append(f"if len({_str_ref(fi)}) != {count}:")
        lines.append(f'    raise ContentError("{fi.str_field_name} must have {count} elements")')
    return "\n".join(lines)


def _field_comment(info: ParamInfo) -> str | None:
    param = info.param
    if param.token is None:
        return param.comment
    if param.comment:
        return f"{param.token}: {param.comment}"
    return param.token


def _flag_comment(flag: KnownFlag) -> str:
    if flag.comment:
        return f"{flag.token}: {flag.comment}"
    return flag.token


def _docstring(text: str) -> str:
    """Quote doc text as a docstring literal."""
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"""{escaped}"""'


def _comment_lines(text: str, prefix: str = "# ") -> list[str]:
    """Split doc text into comment lines."""
    return [f"{prefix}{line}".rstrip() for line in text.splitlines() or [""]]


def _field_decls(layout: MessageLayout) -> list[_FieldDecl]:
    return [_FieldDecl(i.field_info, _field_comment(i)) for i in layout.positional + layout.named]


def render(
    schema: Schema,
    runtime_import: str = "adcl.proto",
) -> str:
    """Render a schema to Python source code."""
    plans: list[AccessorPlan] = []
    for message in schema.messages:
        layout = resolve_layout(message)
        plans.append(plan_accessor(layout))
        _LOG.debug("rendering %s", layout.type_name)

    return template.render(
        plans=plans,
        runtime_import=runtime_import,
        field_decls=_field_decls,
        docstring=_docstring,
        comment_lines=_comment_lines,
        flag_comment=_flag_comment,
        gen_post_init=_gen_post_init,
        gen_positional=_gen_positional,
        gen_pos_len=_gen_pos_len,
        gen_pos_at=_gen_pos_at,
        gen_named=_gen_named,
        gen_named_get=_gen_named_get,
    )
