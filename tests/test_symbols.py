"""Tests for symbol listing parsing and symbol table construction."""

from __future__ import annotations

import logging

import pytest

from ar_deps.analysis.symbols import (
    ObjectId,
    SymbolKind,
    build_symbol_table,
    classify,
    merge_symbol_tables,
    parse_symbol_line,
)
from ar_deps.errors import DuplicateObjectError, DuplicateSymbolError, SymbolParseError

ARCHIVE = "/build/lib/libdemo.a"


def _defined(member: str, name: str, code: str = "T", archive: str = ARCHIVE) -> str:
    return f"{archive}:{member}:0000000000000000 {code} {name}"


def _undefined(member: str, name: str, archive: str = ARCHIVE) -> str:
    return f"{archive}:{member}:                 U {name}"


def _obj(member: str, archive: str = "libdemo.a") -> ObjectId:
    return ObjectId(archive, member)


def test_parse_defined_line() -> None:
    record = parse_symbol_line(_defined("foo.o", "foo_init"), 3)

    assert record.archive == ARCHIVE
    assert record.member == "foo.o"
    assert record.value == "0000000000000000"
    assert record.type_code == "T"
    assert record.name == "foo_init"
    assert record.lineno == 3
    assert record.kind is SymbolKind.DEFINED


def test_parse_undefined_line_has_empty_value() -> None:
    record = parse_symbol_line(_undefined("bar.o", "_ZN3foo3barEv"))

    assert record.value == ""
    assert record.type_code == "U"
    assert record.name == "_ZN3foo3barEv"
    assert record.kind is SymbolKind.UNDEFINED


@pytest.mark.parametrize(
    "line",
    [
        "this is not nm output",
        f"{ARCHIVE}:foo.o:",
        f"{ARCHIVE}:foo.o:0000000000000000 TT foo",
        f"{ARCHIVE}:foo.o:0000000000000000 7 foo",
    ],
)
def test_parse_rejects_malformed_lines(line: str) -> None:
    with pytest.raises(SymbolParseError) as excinfo:
        parse_symbol_line(line, 12)

    assert excinfo.value.lineno == 12
    assert excinfo.value.line == line
    assert "line 12" in str(excinfo.value)


@pytest.mark.parametrize(
    ("code", "kind"),
    [
        ("U", SymbolKind.UNDEFINED),
        ("u", SymbolKind.UNDEFINED),
        ("W", SymbolKind.WEAK),
        ("w", SymbolKind.WEAK),
        ("V", SymbolKind.WEAK),
        ("v", SymbolKind.WEAK),
        ("T", SymbolKind.DEFINED),
        ("D", SymbolKind.DEFINED),
        ("B", SymbolKind.DEFINED),
        ("?", SymbolKind.DEFINED),
    ],
)
def test_classify(code: str, kind: SymbolKind) -> None:
    assert classify(code) is kind


def test_object_id_label() -> None:
    assert _obj("foo.o").label == "libdemo.a(foo.o)"
    assert str(_obj("foo.o")) == "libdemo.a(foo.o)"


def test_build_needs_and_provides() -> None:
    lines = [
        _defined("a.o", "foo"),
        _defined("a.o", "counter", "D"),
        _undefined("b.o", "foo"),
        _undefined("b.o", "printf"),
    ]
    table = build_symbol_table(lines, archive=ARCHIVE)

    assert table.archives == [ARCHIVE]
    assert table.archive_names == ["libdemo.a"]
    assert table.objects[_obj("a.o")].provides == {"foo", "counter"}
    assert table.objects[_obj("a.o")].needs == set()
    assert table.objects[_obj("b.o")].needs == {"foo", "printf"}
    assert table.index == {"foo": _obj("a.o"), "counter": _obj("a.o")}
    assert table.provider_of("printf") is None
    assert table.unresolved_symbols() == {"printf"}


def test_weak_symbols_are_ignored(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="ar_deps.analysis.symbols")
    lines = [_defined("a.o", "inline_helper", "W"), _undefined("b.o", "inline_helper")]

    table = build_symbol_table(lines, archive=ARCHIVE)

    assert table.objects[_obj("a.o")].provides == set()
    assert "inline_helper" not in table.index
    assert table.weak_symbols == [(_obj("a.o"), "inline_helper")]
    [warning] = [entry for entry in caplog.records if "weak symbol" in entry.getMessage()]
    assert warning.levelno == logging.WARNING
    assert warning.getMessage() == "Ignoring weak symbol inline_helper in libdemo.a(a.o)"


def test_duplicate_symbol_keeps_first_provider(caplog: pytest.LogCaptureFixture) -> None:
    lines = [_defined("a.o", "baz"), _defined("b.o", "baz", "D")]

    table = build_symbol_table(lines, archive=ARCHIVE, demangle=lambda name: f"pretty<{name}>")

    assert table.index["baz"] == _obj("a.o")
    assert table.objects[_obj("b.o")].provides == {"baz"}
    assert len(table.duplicates) == 1
    duplicate = table.duplicates[0]
    assert (duplicate.symbol, duplicate.first, duplicate.second, duplicate.type_code) == (
        "baz",
        _obj("a.o"),
        _obj("b.o"),
        "D",
    )
    assert "Duplicate symbol pretty<baz>" in caplog.text
    assert "libdemo.a(a.o), libdemo.a(b.o) (type D)" in caplog.text


def test_members_without_symbols_are_registered() -> None:
    table = build_symbol_table([_defined("a.o", "foo")], archive=ARCHIVE, members=["a.o", "empty.o"])

    assert set(table.objects) == {_obj("a.o"), _obj("empty.o")}
    assert table.objects[_obj("empty.o")].needs == set()
    assert table.objects[_obj("empty.o")].provides == set()


def test_blank_lines_are_skipped_and_errors_report_position() -> None:
    lines = [_defined("a.o", "foo"), "", "garbage"]

    with pytest.raises(SymbolParseError) as excinfo:
        build_symbol_table(lines, archive=ARCHIVE)

    assert excinfo.value.lineno == 3
    assert excinfo.value.source == ARCHIVE


def test_repeated_member_name_is_reported(caplog: pytest.LogCaptureFixture) -> None:
    lines = [_defined("util.o", "one"), _defined("other.o", "two"), _defined("util.o", "three")]

    table = build_symbol_table(lines, archive=ARCHIVE)

    assert table.objects[_obj("util.o")].provides == {"one", "three"}
    assert "more than one member named util.o" in caplog.text


def test_merge_disjoint_tables() -> None:
    first = build_symbol_table([_defined("a.o", "foo")], archive="/lib/liba.a")
    second = build_symbol_table([_undefined("b.o", "foo", archive="/lib/libb.a")], archive="/lib/libb.a")

    merged = merge_symbol_tables([first, second])

    assert merged.archives == ["/lib/liba.a", "/lib/libb.a"]
    assert merged.index == {"foo": ObjectId("liba.a", "a.o")}
    assert set(merged.objects) == {ObjectId("liba.a", "a.o"), ObjectId("libb.a", "b.o")}
    # merged records are copies
    merged.objects[ObjectId("liba.a", "a.o")].provides.add("extra")
    assert first.objects[ObjectId("liba.a", "a.o")].provides == {"foo"}


def test_merge_rejects_duplicate_objects() -> None:
    first = build_symbol_table([_defined("a.o", "foo")], archive="/one/libdemo.a")
    second = build_symbol_table([_defined("a.o", "bar")], archive="/two/libdemo.a")

    with pytest.raises(DuplicateObjectError) as excinfo:
        merge_symbol_tables([first, second])

    assert excinfo.value.object_id == "libdemo.a(a.o)"
    assert excinfo.value.archives == ("/one/libdemo.a", "/two/libdemo.a")


def test_merge_rejects_symbols_defined_in_two_archives() -> None:
    first = build_symbol_table([_defined("a.o", "foo")], archive="/lib/liba.a")
    second = build_symbol_table([_defined("b.o", "foo")], archive="/lib/libb.a")

    with pytest.raises(DuplicateSymbolError) as excinfo:
        merge_symbol_tables([first, second])

    assert excinfo.value.symbol == "foo"
    assert excinfo.value.first == "liba.a(a.o)"
    assert excinfo.value.second == "libb.a(b.o)"
