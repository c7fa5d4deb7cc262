"""Per-object symbol tables built from ``nm -og`` listings."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from ar_deps.errors import DuplicateObjectError, DuplicateSymbolError, SymbolParseError

LOGGER = logging.getLogger(__name__)

# <archive-path>:<member>:<value> <type> <name>; undefined symbols have an empty value.
SYMBOL_LINE = re.compile(r"^(?P<archive>[^:]*):(?P<member>[^:]*):(?P<value>\S*)\s+(?P<type>\S+)\s+(?P<name>\S.*)$")
TYPE_CODE = re.compile(r"^[a-zA-Z?-]$")

Demangler = Callable[[str], str]


class SymbolKind(str, Enum):
    DEFINED = "defined"
    UNDEFINED = "undefined"
    WEAK = "weak"


def classify(type_code: str) -> SymbolKind:
    code = type_code.lower()
    if code == "u":
        return SymbolKind.UNDEFINED
    if code in ("v", "w"):
        return SymbolKind.WEAK
    return SymbolKind.DEFINED


@dataclass(frozen=True, order=True, slots=True)
class ObjectId:
    """An archive member, unique across every input archive."""

    archive: str
    member: str

    @property
    def label(self) -> str:
        return f"{self.archive}({self.member})"

    def __str__(self) -> str:
        return self.label


@dataclass(slots=True)
class SymbolRecord:
    archive: str
    member: str
    value: str
    type_code: str
    name: str
    lineno: int = 0

    @property
    def kind(self) -> SymbolKind:
        return classify(self.type_code)


@dataclass(slots=True)
class ObjectRecord:
    object_id: ObjectId
    needs: set[str] = field(default_factory=set)
    provides: set[str] = field(default_factory=set)


@dataclass(frozen=True, slots=True)
class DuplicateSymbol:
    symbol: str
    first: ObjectId
    second: ObjectId
    type_code: str


@dataclass(slots=True)
class SymbolTable:
    """Needs/provides per object plus the symbol -> provider index."""

    archives: list[str] = field(default_factory=list)
    objects: dict[ObjectId, ObjectRecord] = field(default_factory=dict)
    index: dict[str, ObjectId] = field(default_factory=dict)
    duplicates: list[DuplicateSymbol] = field(default_factory=list)
    weak_symbols: list[tuple[ObjectId, str]] = field(default_factory=list)

    @property
    def archive_names(self) -> list[str]:
        return [Path(archive).name for archive in self.archives]

    def record_for(self, object_id: ObjectId) -> ObjectRecord:
        record = self.objects.get(object_id)
        if record is None:
            record = ObjectRecord(object_id)
            self.objects[object_id] = record
        return record

    def provider_of(self, symbol: str) -> Optional[ObjectId]:
        return self.index.get(symbol)

    def unresolved_symbols(self) -> set[str]:
        """Needed symbols that no object in the table provides."""

        unresolved: set[str] = set()
        for record in self.objects.values():
            unresolved.update(symbol for symbol in record.needs if symbol not in self.index)
        return unresolved


def parse_symbol_line(line: str, lineno: int = 0, *, source: str | None = None) -> SymbolRecord:
    """Split one ``nm -o`` line into its fields, raising on anything unexpected."""

    match = SYMBOL_LINE.match(line.rstrip("\r\n"))
    if match is None or not TYPE_CODE.match(match.group("type")):
        raise SymbolParseError(line.rstrip("\r\n"), lineno, source)
    return SymbolRecord(
        archive=match.group("archive"),
        member=match.group("member"),
        value=match.group("value"),
        type_code=match.group("type"),
        name=match.group("name").rstrip(),
        lineno=lineno,
    )


class SymbolTableBuilder:
    """Accumulate the symbol records of one archive into a :class:`SymbolTable`."""

    def __init__(self, archive: str | Path, *, demangle: Demangler | None = None) -> None:
        self.archive_path = str(archive)
        self.archive_name = Path(archive).name
        self.demangle = demangle or (lambda symbol: symbol)
        self.table = SymbolTable(archives=[self.archive_path])
        self._last_member: str | None = None
        self._seen_members: set[str] = set()
        self._reported_members: set[str] = set()

    def object_id(self, member: str) -> ObjectId:
        return ObjectId(self.archive_name, member)

    def register_member(self, member: str) -> ObjectId:
        object_id = self.object_id(member)
        self.table.record_for(object_id)
        return object_id

    def _track_member(self, member: str) -> None:
        if member == self._last_member:
            return
        if member in self._seen_members and member not in self._reported_members:
            self._reported_members.add(member)
            LOGGER.warning(
                "%s contains more than one member named %s; their symbols are attributed to one object",
                self.archive_name,
                member,
            )
        self._seen_members.add(member)
        self._last_member = member

    def add_record(self, record: SymbolRecord) -> None:
        self._track_member(record.member)
        object_id = self.register_member(record.member)
        obj = self.table.objects[object_id]
        kind = record.kind

        if kind is SymbolKind.UNDEFINED:
            obj.needs.add(record.name)
        elif kind is SymbolKind.WEAK:
            self.table.weak_symbols.append((object_id, record.name))
            LOGGER.warning("Ignoring weak symbol %s in %s", self.demangle(record.name), object_id)
        else:
            obj.provides.add(record.name)
            first = self.table.index.get(record.name)
            if first is None:
                self.table.index[record.name] = object_id
                return
            self.table.duplicates.append(
                DuplicateSymbol(symbol=record.name, first=first, second=object_id, type_code=record.type_code)
            )
            LOGGER.warning(
                "Duplicate symbol %s:\n%s, %s (type %s)",
                self.demangle(record.name),
                first,
                object_id,
                record.type_code,
            )

    def ingest(self, lines: Iterable[str]) -> "SymbolTableBuilder":
        for lineno, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            self.add_record(parse_symbol_line(line, lineno, source=self.archive_path))
        return self

    def build(self) -> SymbolTable:
        return self.table


def build_symbol_table(
    lines: Iterable[str],
    *,
    archive: str | Path,
    members: Sequence[str] = (),
    demangle: Demangler | None = None,
) -> SymbolTable:
    """
    Build the symbol table of one archive from its ``nm -og`` listing.

    ``members`` registers archive members as objects even when the listing never mentions them.
    The first object to define a symbol keeps it; later definitions are reported as duplicates.
    """

    builder = SymbolTableBuilder(archive, demangle=demangle)
    for member in members:
        builder.register_member(member)
    return builder.ingest(lines).build()


def merge_symbol_tables(tables: Iterable[SymbolTable]) -> SymbolTable:
    """Combine per-archive tables, refusing overlapping objects or symbol definitions."""

    merged = SymbolTable()
    origin: dict[ObjectId, str] = {}

    for table in tables:
        source = ", ".join(table.archives)
        for object_id in table.objects:
            if object_id in merged.objects:
                raise DuplicateObjectError(object_id.label, [origin[object_id], source])
        for symbol, provider in table.index.items():
            if symbol in merged.index:
                raise DuplicateSymbolError(symbol, merged.index[symbol].label, provider.label)

        merged.archives.extend(table.archives)
        for object_id, record in table.objects.items():
            merged.objects[object_id] = ObjectRecord(object_id, set(record.needs), set(record.provides))
            origin[object_id] = source
        merged.index.update(table.index)
        merged.duplicates.extend(table.duplicates)
        merged.weak_symbols.extend(table.weak_symbols)

    return merged


__all__ = [
    "DuplicateSymbol",
    "ObjectId",
    "ObjectRecord",
    "SymbolKind",
    "SymbolRecord",
    "SymbolTable",
    "SymbolTableBuilder",
    "build_symbol_table",
    "classify",
    "merge_symbol_tables",
    "parse_symbol_line",
]
