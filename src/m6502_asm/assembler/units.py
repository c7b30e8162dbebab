"""
Source Unit Registry
====================

Every piece of source text the assembler reads (the main file, each
included file, or a string passed in directly) is registered here as a
numbered unit. Tokens, statements and errors refer to source text only by
SourceTag (unit id + character offset); this registry turns a tag back
into a file name, a row/column pair or the text of the line.
"""

from dataclasses import dataclass, field

from m6502_asm.errors import SourceTag


@dataclass(frozen=True)
class SourceUnit:
    """A named source text."""
    id: int
    name: str
    source: str


@dataclass
class SourceUnits:
    """Ordered collection of source units, indexed by unit id."""
    _units: list[SourceUnit] = field(default_factory=list)

    def push_unit(self, name: str, source: str) -> int:
        """Register a new unit and return its id."""
        unit_id = len(self._units)
        self._units.append(SourceUnit(unit_id, name, source))
        return unit_id

    def unit(self, unit_id: int) -> SourceUnit:
        return self._units[unit_id]

    def name(self, unit_id: int) -> str:
        return self._units[unit_id].name

    def source(self, unit_id: int) -> str:
        return self._units[unit_id].source

    def line_comment(self, tag: SourceTag) -> str:
        """Return "name:row:col: <line text>" for the given tag."""
        source = self.source(tag.unit)
        row, col = tag.row_col(source)
        return f"{self.name(tag.unit)}:{row}:{col}: {tag.line(source)}"

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self):
        return iter(self._units)
