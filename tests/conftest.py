"""
Shared fixtures for the da65ify tests: synthetic iNES ROMs and CDL traces.

Nothing here needs a real game; every ROM is zero-filled PRG/CHR behind a
valid header, and traces are built byte by byte.
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from da65ify.header import HEADER_SIZE, INES_MAGIC, PRG_BANK_SIZE


def make_header(prg_banks: int, chr_banks: int = 0, flags6: int = 0, flags7: int = 0) -> bytes:
    return INES_MAGIC + bytes([prg_banks, chr_banks, flags6, flags7]) + bytes(8)


def make_rom(prg_banks: int, chr_size: int = 0, flags6: int = 0) -> bytes:
    """Header + zeroed PRG + zeroed CHR."""
    return (make_header(prg_banks, chr_size // 0x2000, flags6)
            + bytes(prg_banks * PRG_BANK_SIZE) + bytes(chr_size))


def make_trace(rom: bytes, marks=None, extra: int = 0) -> bytes:
    """
    CDL matching ``rom``; ``marks`` maps PRG offset ranges to a CDL byte.

    marks: iterable of (start, end_exclusive, value)
    """
    trace = bytearray(len(rom) - HEADER_SIZE + extra)
    for start, end, value in marks or ():
        trace[start:end] = bytes([value]) * (end - start)
    return bytes(trace)


@pytest.fixture
def rom_files(tmp_path):
    """Write a ROM/CDL (and optional MLB) pair and return their paths."""
    def _write(rom: bytes, trace: bytes, mlb: str = None, name: str = "game"):
        rom_path = tmp_path / f"{name}.nes"
        cdl_path = tmp_path / f"{name}.cdl"
        rom_path.write_bytes(rom)
        cdl_path.write_bytes(trace)
        mlb_path = None
        if mlb is not None:
            mlb_path = tmp_path / f"{name}.mlb"
            mlb_path.write_text(mlb, encoding="utf-8")
        return rom_path, cdl_path, mlb_path
    return _write
