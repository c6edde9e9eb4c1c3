"""Synthesis of positional and named parameter accessors.

A plan describes how an accessor reads the fields of one message type. Plans
are computed once per message type and do not depend on how the accessor is
realized: the direct mode evaluates them against content instances, the code
generators render them to source.

Positional access picks one of three regimes from the multiplicities of the
positional fields:

- ALL_STATIC: every count is known, so every index maps to a fixed slot.
- SINGLE_DYNAMIC: one field with a runtime count, indexed directly.
- MIXED: anything else. Each field starts at a running offset made of a
  literal (the static counts so far) plus the lengths of the dynamic fields
  so far.

Named access merges the overflow flags with the declared named params, whose
serialized strings are a 2-character token followed by the value.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum, auto
from typing import Any

from adcl.proto.content import IndexOutOfRange

from .layout import MessageLayout
from .mappers import Dynamic, FieldInfo, Static

_LOG = logging.getLogger(__name__)

# Serialized named values start with a token of this many characters
TOKEN_WIDTH = 2


class Regime(StrEnum):
    """Positional access strategy, in order of preference."""

    ALL_STATIC = auto()
    SINGLE_DYNAMIC = auto()
    MIXED = auto()


class BranchKind(StrEnum):
    """How a positional field contributes tokens."""

    SINGULAR = auto()  # one string
    STATIC = auto()  # a sequence with a fixed count
    DYNAMIC = auto()  # a sequence with a runtime count


def select_regime(fields: Sequence[FieldInfo]) -> Regime:
    """Choose the positional regime for an ordered list of fields."""
    num_static = sum(1 for f in fields if f.is_static)

    if num_static == len(fields):
        return Regime.ALL_STATIC
    if num_static == 0 and len(fields) == 1:
        return Regime.SINGLE_DYNAMIC
    return Regime.MIXED


def _branch_kind(fi: FieldInfo) -> BranchKind:
    if fi.str_is_singular:
        return BranchKind.SINGULAR
    if fi.is_static:
        return BranchKind.STATIC
    return BranchKind.DYNAMIC


@dataclass(frozen=True)
class Offset:
    """A running positional offset: a literal plus dynamic length terms."""

    literal: int = 0
    terms: tuple[Dynamic, ...] = ()

    @property
    def is_zero(self) -> bool:
        return self.literal == 0 and not self.terms

    def advance(self, count: int) -> "Offset":
        return Offset(self.literal + count, self.terms)

    def extend(self, term: Dynamic) -> "Offset":
        return Offset(self.literal, self.terms + (term,))

    def evaluate(self, content: Any) -> int:
        return self.literal + sum(term.evaluate(content) for term in self.terms)


@dataclass(frozen=True)
class Slot:
    """One entry of the all-static dispatch table."""

    index: int
    field: FieldInfo
    element: int | None = None  # None for a singular field

    def read(self, content: Any) -> str:
        value = getattr(content, self.field.str_field_name)
        if self.element is None:
            return value
        return value[self.element]


@dataclass(frozen=True)
class Branch:
    """One positional field, with the offset at which its tokens start."""

    kind: BranchKind
    field: FieldInfo
    offset: Offset

    @property
    def count(self) -> int:
        if self.kind == BranchKind.SINGULAR:
            return 1
        return self.field.static_count

    @property
    def dynamic(self) -> Dynamic:
        multiplicity = self.field.multiplicity
        if not isinstance(multiplicity, Dynamic):
            raise TypeError(f"{self.field.field_name} has a static multiplicity")
        return multiplicity


@dataclass(frozen=True)
class PositionalPlan:
    regime: Regime
    branches: tuple[Branch, ...]
    slots: tuple[Slot, ...]  # ALL_STATIC only
    length: Offset  # total token count

    def positional(self, content: Any) -> list[str]:
        if self.regime == Regime.ALL_STATIC:
            return [slot.read(content) for slot in self.slots]

        if self.regime == Regime.SINGLE_DYNAMIC:
            return list(getattr(content, self.branches[0].field.str_field_name))

        positionals: list[str] = []
        for branch in self.branches:
            value = getattr(content, branch.field.str_field_name)
            if branch.kind == BranchKind.SINGULAR:
                positionals.append(value)
            elif branch.kind == BranchKind.STATIC:
                positionals.extend(value[k] for k in range(branch.count))
            else:
                positionals.extend(value)
        return positionals

    def pos_len(self, content: Any) -> int:
        return self.length.evaluate(content)

    def pos_at(self, content: Any, i: int) -> str:
        if i < 0:
            raise IndexOutOfRange("index out of range")

        if self.regime == Regime.ALL_STATIC:
            if i >= len(self.slots):
                raise IndexOutOfRange("index out of range")
            return self.slots[i].read(content)

        if self.regime == Regime.SINGLE_DYNAMIC:
            value = getattr(content, self.branches[0].field.str_field_name)
            if i >= len(value):
                raise IndexOutOfRange("index out of range")
            return value[i]

        # Dynamic lengths are summed as they are passed so each is read once
        dynamic_sum = 0
        for branch in self.branches:
            start = branch.offset.literal + dynamic_sum
            value = getattr(content, branch.field.str_field_name)

            if branch.kind == BranchKind.SINGULAR:
                if i == start:
                    return value
            elif branch.kind == BranchKind.STATIC:
                if start <= i < start + branch.count:
                    return value[i - start]
            else:
                length = branch.dynamic.evaluate(content)
                if i < start + length:
                    return value[i - start]
                dynamic_sum += length

        raise IndexOutOfRange("index out of range")


def plan_positional(fields: Sequence[FieldInfo]) -> PositionalPlan:
    """Derive the positional accessor plan for an ordered list of fields."""
    regime = select_regime(fields)

    branches: list[Branch] = []
    offset = Offset()
    for fi in fields:
        kind = _branch_kind(fi)
        branches.append(Branch(kind, fi, offset))

        if isinstance(fi.multiplicity, Static):
            offset = offset.advance(1 if kind == BranchKind.SINGULAR else fi.static_count)
        else:
            offset = offset.extend(fi.multiplicity)

    slots: list[Slot] = []
    if regime == Regime.ALL_STATIC:
        for branch in branches:
            if branch.kind == BranchKind.SINGULAR:
                slots.append(Slot(len(slots), branch.field))
            else:
                for k in range(branch.count):
                    slots.append(Slot(len(slots), branch.field, k))

    _LOG.debug("positional regime %s for %d fields", regime, len(branches))
    return PositionalPlan(regime, tuple(branches), tuple(slots), offset)


@dataclass(frozen=True)
class NamedEntry:
    """A declared named param addressed by its canonical flag name."""

    flag_name: str
    field: FieldInfo

    @property
    def always_present(self) -> bool:
        return not self.field.is_maybe and self.field.str_is_singular

    def is_present(self, content: Any) -> bool:
        fi = self.field
        if fi.is_maybe and not getattr(content, fi.field_name).is_set:
            return False
        if not fi.str_is_singular and len(getattr(content, fi.str_field_name)) == 0:
            return False
        return True

    def representative(self, content: Any) -> str:
        value = getattr(content, self.field.str_field_name)
        if self.field.str_is_singular:
            return value
        return value[0]


@dataclass(frozen=True)
class NamedPlan:
    entries: tuple[NamedEntry, ...]

    def named(self, content: Any) -> dict[str, str]:
        params = dict(content.flags)

        for entry in self.entries:
            if entry.is_present(content):
                text = entry.representative(content)
                params[text[:TOKEN_WIDTH]] = text[TOKEN_WIDTH:]

        return params

    def named_get(self, content: Any, key: str) -> tuple[str, bool]:
        for entry in self.entries:
            if entry.flag_name != key:
                continue
            # A declared param never falls through to the overflow flags
            if entry.is_present(content):
                return entry.representative(content)[TOKEN_WIDTH:], True
            return "", False

        flags = content.flags
        if key in flags:
            return flags[key], True
        return "", False


def plan_named(params: Sequence[tuple[str, FieldInfo]]) -> NamedPlan:
    """Derive the named accessor plan from (flag name, field) pairs."""
    return NamedPlan(tuple(NamedEntry(name, fi) for name, fi in params))


@dataclass(frozen=True)
class AccessorPlan:
    """Positional and named plans of one message type."""

    layout: MessageLayout
    positional: PositionalPlan
    named: NamedPlan


def plan_accessor(layout: MessageLayout) -> AccessorPlan:
    """Derive both accessor plans for a resolved message."""
    _LOG.debug("planning accessor for %s", layout.type_name)
    return AccessorPlan(
        layout=layout,
        positional=plan_positional(layout.positional_fields),
        named=plan_named([(p.flag_name or "", p.field_info) for p in layout.named]),
    )
