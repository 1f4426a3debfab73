"""
MLB Label Table
===============

Reads Mesen-style ``.mlb`` label files and hands each bank the labels that
belong to it.

RECORD FORMAT (one per line):
-----------------------------
    type:addr[-addr2]:name:comment

    R:0010:player_x:          CPU RAM label at $0010, size 1
    P:8000-8010:table:        PRG ROM offset $8000, size $10
    P:1C03:reset:entry point  PRG ROM offset $1C03, size 1

  type     'R' = CPU address (RAM), emitted in every bank unchanged
           'P' = PRG ROM offset, emitted only in the bank that holds it,
                 rebased to that bank's CPU start address
           anything else is kept but never emitted
  addr     hexadecimal; with ``-addr2`` the size is ``addr2 - addr``
  name     empty name -> line skipped
  comment  free text, may contain ':'

PARSING RULES:
--------------
- A UTF-8 byte order mark is stripped from the first line only.
- A line shorter than 4 characters ends the file.
- A missing or non-hex address, a name containing '"', or a line that is
  not valid UTF-8 raises FormatError for that line;
  ``LabelTable.parse`` logs and skips such lines unless ``strict`` is set.

Labels keep file order so that repeated runs emit identical projects.
"""

from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from .errors import FormatError

__all__ = ['LabelKind', 'Label', 'parse_label_line', 'LabelTable']

log = logging.getLogger(__name__)

BOM = "\ufeff"
MIN_RECORD_LENGTH = 4
HEX_FIELD = re.compile(r"[0-9A-Fa-f]+")


class LabelKind(Enum):
    RAM = "R"
    PRG = "P"


@dataclass(frozen=True)
class Label:
    """
    One label record.

    ``addr`` is a CPU address for RAM labels and a PRG ROM offset for PRG
    labels. ``type_code`` keeps the raw type field so unknown types survive.
    """
    type_code: str
    addr: int
    size: int
    name: str
    comment: str = ""

    @property
    def kind(self) -> Optional[LabelKind]:
        for kind in LabelKind:
            if kind.value == self.type_code:
                return kind
        return None

    def rebased(self, addr: int) -> 'Label':
        return Label(self.type_code, addr, self.size, self.name, self.comment)


def _parse_hex(text: str, line_num: int, what: str) -> int:
    text = text.strip()
    if not text:
        raise FormatError(f"missing {what}", line_num=line_num)
    if not HEX_FIELD.fullmatch(text):
        raise FormatError(f"bad {what} {text!r}", line_num=line_num)
    return int(text, 16)


def _decode_line(raw: Union[str, bytes], line_num: int) -> str:
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FormatError(f"not valid UTF-8 at column {e.start + 1}", line_num=line_num) from None
    return raw.rstrip("\r\n")


def parse_label_line(line: str, line_num: int = 0) -> Optional[Label]:
    """
    Parse one MLB record.

    Args:
        line: Record text without the line terminator
        line_num: 1-based line number for error messages

    Returns:
        Label, or None when the record has an empty name

    Raises:
        FormatError: if the address field is missing or not hexadecimal,
            an address range ends before it starts, or the name contains
            a double quote (da65 info file strings have no escapes)
    """
    fields = line.split(":", 3)
    type_code = fields[0]
    if len(fields) < 2:
        raise FormatError("missing address field", line_num=line_num)

    addr_spec = fields[1]
    if "-" in addr_spec:
        start_text, end_text = addr_spec.split("-", 1)
        addr = _parse_hex(start_text, line_num, "start address")
        end = _parse_hex(end_text, line_num, "end address")
        size = end - addr
        if size < 1:
            raise FormatError(f"empty address range {addr_spec!r}", line_num=line_num)
    else:
        addr = _parse_hex(addr_spec, line_num, "address")
        size = 1

    name = fields[2] if len(fields) > 2 else ""
    if not name:
        return None
    if '"' in name:
        raise FormatError(f"label name {name!r} contains a double quote", line_num=line_num)
    comment = fields[3] if len(fields) > 3 else ""
    return Label(type_code, addr, size, name, comment)


class LabelTable:
    """
    Ordered collection of labels, read-only once parsed.

    Usage:
        table = LabelTable.load("game.mlb")
        for label in table.labels_for_window(0x4000, 0x8000, 0xC000):
            ...
    """

    def __init__(self, labels: Iterable[Label] = ()):
        self._labels: Tuple[Label, ...] = tuple(labels)

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self):
        return iter(self._labels)

    @property
    def labels(self) -> Tuple[Label, ...]:
        return self._labels

    @classmethod
    def parse(cls, lines: Iterable[Union[str, bytes]], strict: bool = False, source: str = "") -> 'LabelTable':
        """
        Build a table from MLB text lines.

        Args:
            lines: Iterable of lines (terminators allowed); bytes lines are
                decoded as UTF-8 one at a time
            strict: Raise on a malformed line instead of skipping it
            source: File name used in diagnostics
        """
        labels: List[Label] = []
        skipped = 0
        for line_num, raw in enumerate(lines, 1):
            try:
                line = _decode_line(raw, line_num)
                if line_num == 1 and line.startswith(BOM):
                    line = line[len(BOM):]
                if len(line) < MIN_RECORD_LENGTH:
                    break
                label = parse_label_line(line, line_num)
            except FormatError as e:
                if strict:
                    raise FormatError(str(e), path=source) from None
                log.warning("%s: skipping label line: %s", source or "<mlb>", e)
                skipped += 1
                continue
            if label is not None:
                labels.append(label)

        log.debug("parsed %d labels from %s (%d skipped)", len(labels), source or "<mlb>", skipped)
        return cls(labels)

    @classmethod
    def load(cls, path: Union[str, Path], strict: bool = False) -> 'LabelTable':
        """Read and parse an MLB file. OSError propagates to the caller."""
        with open(path, "rb") as f:
            return cls.parse(f, strict=strict, source=str(path))

    def labels_for_window(self, start: int, end: int, bank_start_addr: int) -> List[Label]:
        """
        Labels to emit for the bank holding PRG offsets ``[start, end)``.

        PRG labels inside the window come back rebased to
        ``bank_start_addr + (addr - start)``; RAM labels come back unchanged
        whatever the window. File order is preserved.
        """
        result: List[Label] = []
        for label in self._labels:
            kind = label.kind
            if kind is LabelKind.RAM:
                result.append(label)
            elif kind is LabelKind.PRG and start <= label.addr < end:
                result.append(label.rebased(bank_start_addr + (label.addr - start)))
        return result
