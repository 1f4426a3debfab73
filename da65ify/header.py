"""
iNES Header Validation
======================

Parses the 16-byte iNES header at the start of an NES ROM image and derives
the facts the rest of the engine needs: how many 16KB PRG banks there are
and where the CHR (graphics) data lives in the file.

iNES HEADER LAYOUT:
-------------------
  Offset  Size  Meaning
  ──────  ────  ───────────────────────────────────────────
  0       4     Magic "NES\\x1A"
  4       1     PRG ROM size in 16KB units
  5       1     CHR ROM size in 8KB units
  6       1     Flags 6 (mirroring, battery, trainer, mapper low nibble)
  7       1     Flags 7 (VS/PlayChoice, mapper high nibble)
  8-15    8     Unused here

FILE LAYOUT ASSUMED BY THE ENGINE:
----------------------------------
  0x0000                       header (16 bytes)
  0x0010                       PRG ROM (prg_banks_16k * 0x4000 bytes)
  0x0010 + prg_banks_16k*0x4000  CHR data, to end of file

The 512-byte trainer is reported but never skipped; the generated project
uses the same offsets the released tool always used.

The CDL trace log has one byte per ROM byte *after* the header, so a
well-formed trace is exactly ``file_size - 16`` bytes long.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .errors import FormatError

__all__ = [
    'INES_MAGIC', 'HEADER_SIZE', 'PRG_BANK_SIZE',
    'RomHeader', 'ChrWindow', 'parse_header', 'check_trace_size', 'bank_count',
]

INES_MAGIC = b"NES\x1a"
HEADER_SIZE = 0x10
PRG_BANK_SIZE = 0x4000      # 16KB iNES PRG unit
BANK_UNIT = 0x1000          # banksize is counted in 4KB units


@dataclass(frozen=True)
class ChrWindow:
    """File region holding CHR data (may be empty)."""
    offset: int
    size: int


@dataclass(frozen=True)
class RomHeader:
    """
    Parsed iNES header.

    Attributes:
        magic: The 4 magic bytes (always INES_MAGIC after validation)
        prg_banks_16k: PRG ROM size in 16KB units, > 0
        chr_banks_8k: CHR ROM size in 8KB units as declared
        flags6: Raw flags byte 6
        flags7: Raw flags byte 7
        file_size: Total size of the ROM file in bytes
    """
    magic: bytes
    prg_banks_16k: int
    chr_banks_8k: int
    flags6: int
    flags7: int
    file_size: int

    @property
    def has_trainer(self) -> bool:
        return bool(self.flags6 & 0x04)

    @property
    def mapper(self) -> int:
        return (self.flags6 >> 4) | (self.flags7 & 0xF0)

    @property
    def prg_size(self) -> int:
        return self.prg_banks_16k * PRG_BANK_SIZE

    @property
    def chr_window(self) -> ChrWindow:
        offset = HEADER_SIZE + self.prg_size
        return ChrWindow(offset=offset, size=self.file_size - offset)


def parse_header(data: bytes, file_size: int, path: str = "") -> RomHeader:
    """
    Validate the iNES header and derive the CHR window.

    Args:
        data: At least the first 16 bytes of the ROM file
        file_size: Total ROM file size in bytes
        path: File name used in error messages

    Returns:
        RomHeader

    Raises:
        FormatError: short header, wrong magic, zero PRG banks, or a PRG
            size that runs past the end of the file
    """
    if len(data) < HEADER_SIZE:
        raise FormatError(
            f"NES file header could not be read ({len(data)} of {HEADER_SIZE} bytes)", path)
    header = bytes(data[:HEADER_SIZE])
    if header[:4] != INES_MAGIC:
        raise FormatError(f"NES file header invalid (magic {header[:4].hex()})", path)

    prg_banks = header[4]
    if prg_banks == 0:
        raise FormatError("NES file header declares no PRG ROM", path)

    rom = RomHeader(
        magic=header[:4],
        prg_banks_16k=prg_banks,
        chr_banks_8k=header[5],
        flags6=header[6],
        flags7=header[7],
        file_size=file_size,
    )
    if rom.chr_window.size < 0:
        raise FormatError(
            f"PRG ROM ({prg_banks} x 16KB) runs past end of file "
            f"(file is ${file_size:x} bytes)", path)
    return rom


def check_trace_size(trace_size: int, file_size: int, path: str = "") -> Optional[str]:
    """
    Cross-check the trace log length against the ROM file length.

    Returns:
        None when the sizes match exactly, otherwise a warning message.
        The caller decides how to surface it.

    Raises:
        FormatError: when the trace is shorter than the ROM body
    """
    expected = file_size - HEADER_SIZE
    if trace_size < expected:
        raise FormatError(
            f"CDL file is smaller than ROM (trace too short: ${trace_size:x} < ${expected:x})", path)
    if trace_size != expected:
        return (f"CDL file does not match ROM size (${trace_size:x} != ${expected:x}), "
                f"it may have been recorded against a different build")
    return None


def bank_count(prg_banks_16k: int, banksize: int) -> int:
    """
    Number of banks the PRG ROM is split into.

    Matches the released tool's integer arithmetic exactly, including the
    truncation of odd 16KB counts: ``((prg / 2) * 8) / banksize``. A single
    16KB PRG therefore yields zero banks.
    """
    return ((prg_banks_16k // 2) * 8) // banksize
