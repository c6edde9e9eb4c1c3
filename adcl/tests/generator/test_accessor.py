"""Tests for positional and named accessors.

Content types are built both directly and from generated code, so every
behavior here holds for both.
"""

import pytest

from adcl.generator import Regime, resolve_layout
from adcl.generator.accessor import Offset, plan_positional
from adcl.generator.mappers import Dynamic
from adcl.proto import ContentError, IndexOutOfRange, Maybe, ParamAccessor


def _check_indexing(expect, content):
    positionals = content.positional()
    expect(len(positionals)) == content.pos_len()
    for i, token in enumerate(positionals):
        expect(content.pos_at(i)) == token
    for i in (-1, -len(positionals) - 1, len(positionals), len(positionals) + 1):
        with pytest.raises(IndexOutOfRange):
            content.pos_at(i)


def describe_regime_selection():
    def _regime(make_message, *positional):
        layout = resolve_layout(make_message("MSG", positional=positional))
        return plan_positional(layout.positional_fields).regime

    def picks_all_static(expect, make_message):
        expect(_regime(make_message, ("a", "string"), ("b", "int[3]"))) == Regime.ALL_STATIC

    def picks_all_static_for_no_fields(expect, make_message):
        expect(_regime(make_message)) == Regime.ALL_STATIC

    def picks_single_dynamic(expect, make_message):
        expect(_regime(make_message, ("a", "string[]"))) == Regime.SINGLE_DYNAMIC

    def picks_mixed_for_static_and_dynamic(expect, make_message):
        expect(_regime(make_message, ("a", "string"), ("b", "string[]"))) == Regime.MIXED

    def picks_mixed_for_many_dynamic(expect, make_message):
        expect(_regime(make_message, ("a", "string[]"), ("b", "string[]"))) == Regime.MIXED


def describe_running_offset():
    def accumulates_literals_and_terms(expect, make_message):
        layout = resolve_layout(
            make_message(
                "CTM",
                positional=[
                    ("words", "string[]"),
                    ("proto", "string"),
                    ("ports", "int[2]"),
                    ("extra", "string[]"),
                    ("token", "string"),
                ],
            )
        )
        plan = plan_positional(layout.positional_fields)
        words, extra = Dynamic("words_strs"), Dynamic("extra_strs")
        expect([b.offset for b in plan.branches]) == [
            Offset(),
            Offset(0, (words,)),
            Offset(1, (words,)),
            Offset(3, (words,)),
            Offset(3, (words, extra)),
        ]
        expect(plan.length) == Offset(4, (words, extra))

    def builds_dispatch_table_for_all_static(expect, make_message):
        layout = resolve_layout(make_message("STA", positional=[("a", "string"), ("b", "int[2]")]))
        plan = plan_positional(layout.positional_fields)
        expect([(s.index, s.field.field_name, s.element) for s in plan.slots]) == [
            (0, "a", None),
            (1, "b", 0),
            (2, "b", 1),
        ]
        expect(plan.length) == Offset(3)


def describe_all_static():
    def counts_and_indexes(expect, build, make_message):
        STA = build(make_message("STA", positional=[("code", "int[2]"), ("text", "string[3]")]))
        content = STA(code_strs=["1", "2"], text_strs=["a", "b", "c"])

        expect(content.pos_len()) == 5
        expect(content.positional()) == ["1", "2", "a", "b", "c"]
        expect(content.pos_at(0)) == "1"
        expect(content.pos_at(1)) == "2"
        expect([content.pos_at(i) for i in range(2, 5)]) == ["a", "b", "c"]
        with pytest.raises(IndexOutOfRange):
            content.pos_at(5)
        _check_indexing(expect, content)

    def mixes_singular_fields(expect, build, make_message):
        MSG = build(make_message("MSG", positional=[("a", "sid"), ("b", "int[2]"), ("c", "string")]))
        content = MSG(a_str="AAAB", b_strs=["1", "2"], c_str="x")
        expect(content.positional()) == ["AAAB", "1", "2", "x"]
        _check_indexing(expect, content)

    def handles_no_positional_params(expect, build, make_message):
        PIN = build(make_message("PIN"))
        content = PIN()
        expect(content.pos_len()) == 0
        expect(content.positional()) == []
        with pytest.raises(IndexOutOfRange):
            content.pos_at(0)

    def rejects_wrong_sequence_length(expect, build, make_message):
        STA = build(make_message("STA", positional=[("code", "int[2]")]))
        with pytest.raises(ContentError):
            STA(code_strs=["1"])


def describe_single_dynamic():
    def returns_the_sequence(expect, build, make_message):
        SCH = build(make_message("SCH", positional=[("terms", "string[]")]))
        content = SCH(terms_strs=["a", "b", "c"])
        expect(content.positional()) == ["a", "b", "c"]
        expect(content.pos_len()) == 3
        _check_indexing(expect, content)

    def handles_empty_sequence(expect, build, make_message):
        SCH = build(make_message("SCH", positional=[("terms", "string[]")]))
        content = SCH()
        expect(content.pos_len()) == 0
        expect(content.positional()) == []
        with pytest.raises(IndexOutOfRange):
            content.pos_at(0)

    def does_not_share_backing_list(expect, build, make_message):
        SCH = build(make_message("SCH", positional=[("terms", "string[]")]))
        content = SCH(terms_strs=["a"])
        content.positional().append("b")
        expect(content.terms_strs) == ["a"]


def describe_mixed():
    def indexes_static_then_dynamic(expect, build, make_message):
        MSG = build(make_message("MSG", positional=[("from_sid", "sid"), ("words", "string[]")]))
        content = MSG(from_sid_str="AAAB", words_strs=["w0", "w1", "w2"])

        expect(content.pos_len()) == 4
        expect(content.pos_at(0)) == "AAAB"
        expect([content.pos_at(i) for i in range(1, 4)]) == ["w0", "w1", "w2"]
        with pytest.raises(IndexOutOfRange):
            content.pos_at(4)
        _check_indexing(expect, content)

    def indexes_interleaved_fields(expect, build, make_message):
        CTM = build(
            make_message(
                "CTM",
                positional=[
                    ("words", "string[]"),
                    ("proto", "string"),
                    ("ports", "int[2]"),
                    ("extra", "string[]"),
                    ("token", "string"),
                ],
            )
        )
        content = CTM(
            words_strs=["w0", "w1"],
            proto_str="tcp",
            ports_strs=["1", "2"],
            extra_strs=["e0"],
            token_str="T",
        )
        expect(content.positional()) == ["w0", "w1", "tcp", "1", "2", "e0", "T"]
        expect(content.pos_len()) == 7
        _check_indexing(expect, content)

    def tracks_dynamic_lengths_at_call_time(expect, build, make_message):
        CTM = build(
            make_message("CTM", positional=[("a", "string[]"), ("b", "string[]"), ("c", "string")])
        )
        content = CTM(a_strs=[], b_strs=["b0"], c_str="c")
        expect(content.positional()) == ["b0", "c"]
        _check_indexing(expect, content)

        content.a_strs.extend(["a0", "a1"])
        expect(content.positional()) == ["a0", "a1", "b0", "c"]
        expect(content.pos_at(3)) == "c"
        _check_indexing(expect, content)

    def handles_all_dynamic_empty(expect, build, make_message):
        CTM = build(make_message("CTM", positional=[("a", "string[]"), ("b", "string[]")]))
        content = CTM()
        expect(content.pos_len()) == 0
        with pytest.raises(IndexOutOfRange):
            content.pos_at(0)


def describe_named():
    def _inf(build, make_message):
        return build(
            make_message(
                "INF",
                named=[
                    ("NI", "nick", "string"),
                    ("SS", "share", "?uint"),
                    ("SU", "features", "feature[]"),
                ],
            )
        )

    def maps_present_fields_by_token(expect, build, make_message):
        INF = _inf(build, make_message)
        content = INF(
            nick_str="NIbob",
            share=Maybe.of(1024),
            share_str="SS1024",
            features_strs=["SUTCP4", "SUUDP4"],
        )
        expect(content.named()) == {"NI": "bob", "SS": "1024", "SU": "TCP4"}

    def gets_by_canonical_name(expect, build, make_message):
        INF = _inf(build, make_message)
        content = INF(nick_str="-xVALUE", share=Maybe.of(1), share_str="SS1")
        expect(content.named()["-x"]) == "VALUE"
        expect(content.named_get("Nick")) == ("VALUE", True)
        expect(content.named_get(INF.Flag.Share)) == ("1", True)

    def skips_unset_optional_field(expect, build, make_message):
        INF = _inf(build, make_message)
        content = INF(nick_str="NIbob", share_str="SS1024")
        expect("SS" in content.named()) == False
        expect(content.named_get("Share")) == ("", False)

    def skips_empty_sequence_field(expect, build, make_message):
        INF = _inf(build, make_message)
        content = INF(nick_str="NIbob")
        expect("SU" in content.named()) == False
        expect(content.named_get("Features")) == ("", False)

    def does_not_fall_through_for_absent_declared_field(expect, build, make_message):
        INF = _inf(build, make_message)
        content = INF(nick_str="NIbob", flags={"Share": "overflow"})
        expect(content.named_get("Share")) == ("", False)

    def merges_overflow_flags(expect, build, make_message):
        INF = _inf(build, make_message)
        content = INF(nick_str="NIbob", flags={"DE": "hello", "NI": "old"})
        expect(content.named()) == {"DE": "hello", "NI": "bob"}
        expect(content.flags) == {"DE": "hello", "NI": "old"}

    def falls_back_to_overflow_by_raw_key(expect, build, make_message):
        INF = _inf(build, make_message)
        content = INF(nick_str="NIbob", flags={"DE": "hello"})
        expect(content.named_get("DE")) == ("hello", True)
        expect(content.named_get("XX")) == ("", False)
        # Declared params are only found by canonical name, not by token
        expect(content.named_get("NI")) == ("", False)

    def lets_later_fields_overwrite_earlier(expect, build, make_message):
        INF = build(
            make_message("INF", named=[("NI", "nick", "string"), ("NI", "alias", "string")])
        )
        content = INF(nick_str="NIfirst", alias_str="NIsecond")
        expect(content.named()) == {"NI": "second"}
        expect(content.named_get("Nick")) == ("first", True)

    def uses_first_element_of_fixed_sequence(expect, build, make_message):
        INF = build(make_message("INF", named=[("I4", "addr", "ip4[2]")]))
        content = INF(addr_strs=["I41.2.3.4", "I45.6.7.8"])
        expect(content.named()) == {"I4": "1.2.3.4"}
        expect(content.named_get("Addr")) == ("1.2.3.4", True)

    def returns_overflow_copy_without_declared_fields(expect, build, make_message):
        PIN = build(make_message("PIN"))
        flags = {"DE": "hello", "XY": "z"}
        content = PIN(flags=flags)
        named = content.named()
        expect(named) == flags
        expect(named is flags) == False
        expect(content.named_get("DE")) == ("hello", True)
        expect(content.named_get("ZZ")) == ("", False)


def describe_accessor_contract():
    def satisfies_param_accessor(expect, build, make_message):
        MSG = build(make_message("MSG", positional=[("a", "string")], named=[("NI", "nick", "string")]))
        expect(isinstance(MSG(), ParamAccessor)) == True

    def exposes_flag_identifier_set(expect, build, make_message):
        INF = build(make_message("INF", named=[("NI", "nick", "string"), ("SS", "share", "?uint")]))
        expect([f.value for f in INF.Flag]) == ["Nick", "Share"]

    def is_idempotent(expect, build, make_message):
        CTM = build(
            make_message(
                "CTM",
                positional=[("a", "string"), ("b", "string[]")],
                named=[("NI", "nick", "string")],
            )
        )
        content = CTM(a_str="a", b_strs=["b0", "b1"], nick_str="NIbob", flags={"DE": "x"})
        expect(content.positional()) == content.positional()
        expect(content.named()) == content.named()
        expect(content.pos_len()) == content.pos_len()
