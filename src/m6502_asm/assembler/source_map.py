"""
Source Map
==========

Maps output addresses back to the source text that produced them, for
debuggers and emulators. build_map() walks a resolved IR and records one
entry per instruction; data from .byte/.word/.vector has no entry.

The SourceMap class serializes the entries to JSON together with the
names of the source units they refer to:

```json
{
  "src_units": [{"id": 0, "name": "main.s"}],
  "entries": [
    {"unit": 0, "offset": 27, "line": 3, "address": 32768}
  ]
}
```

`line` is 1-based; `offset` is the character offset in the unit's text.
"""

from dataclasses import asdict, dataclass
from pathlib import Path
import json
import logging

from m6502_asm.assembler.ir import IR
from m6502_asm.assembler.units import SourceUnits
from m6502_asm.errors import SourceTag

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceMapEntry:
    """An instruction's address and where it was written."""
    address: int
    tag: SourceTag


def build_map(ir: IR) -> list[SourceMapEntry]:
    """
    Build the address index of a resolved IR.

    Returns:
        One entry per instruction, in IR order
    """
    return [SourceMapEntry(op.position, op.tag) for op in ir.op_chunks()]


@dataclass(frozen=True)
class SerializedEntry:
    unit: int
    offset: int
    line: int
    address: int


class SourceMap:
    """
    Serializable source map.

    Usage:
        source_map = SourceMap(units, build_map(ir))
        source_map.write(Path("out.rom.map"))
    """

    def __init__(self, units: SourceUnits, entries: list[SourceMapEntry]):
        self.units = units
        self.entries = [self._serialize_entry(entry) for entry in entries]

    def _serialize_entry(self, entry: SourceMapEntry) -> SerializedEntry:
        row, _ = entry.tag.row_col(self.units.source(entry.tag.unit))
        return SerializedEntry(
            unit=entry.tag.unit,
            offset=entry.tag.offset,
            line=row,
            address=entry.address,
        )

    def to_dict(self) -> dict:
        return {
            "src_units": [{"id": unit.id, "name": unit.name} for unit in self.units],
            "entries": [asdict(entry) for entry in self.entries],
        }

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def write(self, path: Path) -> None:
        """Write the map as JSON."""
        Path(path).write_text(self.to_json(), encoding="utf-8")
        logger.debug(f"Wrote source map with {len(self.entries)} entries to {path}")
