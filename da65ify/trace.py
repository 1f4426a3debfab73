"""
CDL Trace Classification
========================

Turns one bank's worth of CDL trace bytes into the RANGE records da65 uses
to decide what to disassemble as code and what to dump as data.

CDL BYTE LAYOUT (FCEUX):
  bit 0     executed as code
  bit 1     read as data
  bits 2-3  PRG bank-select value last seen (only valid once bit 0/1 set)
  bits 4-7  ignored here

Classification only looks at the low two bits. A byte is CODE if bit 0 is
set (even when bit 1 is too), BYTETABLE otherwise; unreached bytes (00) are
BYTETABLE. Runs of bytes of the same kind collapse into one range, so a
run of 10 followed by 00 stays a single BYTETABLE range and no two
neighbouring ranges ever share a kind.

Example (bank at $8000, 6 bytes):
    01 01 02 02 00 03
    -> CODE $8000-$8001, BYTETABLE $8002-$8004, CODE $8005
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import List

__all__ = [
    'CDL_CODE', 'CDL_DATA', 'CDL_CLASS_MASK', 'CDL_BANK_SHIFT', 'CDL_BANK_MASK',
    'RangeKind', 'Range', 'kind_of', 'classify_bank',
]

CDL_CODE = 0x01
CDL_DATA = 0x02
CDL_CLASS_MASK = CDL_CODE | CDL_DATA
CDL_BANK_SHIFT = 2
CDL_BANK_MASK = 0x03


class RangeKind(Enum):
    """da65 RANGE types emitted by the engine."""
    CODE = "CODE"
    BYTETABLE = "BYTETABLE"


@dataclass(frozen=True)
class Range:
    """An inclusive CPU address range of one kind."""
    start: int
    end: int
    kind: RangeKind

    @property
    def size(self) -> int:
        return self.end - self.start + 1


def kind_of(cdl: int) -> RangeKind:
    """Code wins over data when both bits are set."""
    return RangeKind.CODE if cdl & CDL_CODE else RangeKind.BYTETABLE


def classify_bank(trace: bytes, start_addr: int) -> List[Range]:
    """
    Split one bank's trace bytes into contiguous ranges.

    Args:
        trace: CDL bytes for the bank, in ROM order (must not be empty)
        start_addr: Resolved CPU address of the bank's first byte

    Returns:
        Ordered ranges covering ``[start_addr, start_addr + len(trace))``
        exactly, with a new range wherever the kind changes.
    """
    if not trace:
        raise ValueError("cannot classify an empty bank")

    ranges: List[Range] = []
    run_start = 0
    kind = kind_of(trace[0])
    for i in range(1, len(trace)):
        current = kind_of(trace[i])
        if current != kind:
            ranges.append(Range(start_addr + run_start, start_addr + i - 1, kind))
            run_start = i
            kind = current
    ranges.append(Range(start_addr + run_start, start_addr + len(trace) - 1, kind))
    return ranges
