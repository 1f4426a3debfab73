"""
Bank Start Address Inference
============================

A PRG bank can be switched into different CPU windows at run time, so the
ROM image alone does not say where a bank lives. The CDL trace does: every
byte the emulator touched carries the bank-select value (bits 2-3) that was
active, and each select value names an 8KB slot of the $8000-$FFFF window:

    select 0 -> $8000    select 1 -> $A000
    select 2 -> $C000    select 3 -> $E000

The first touched byte of a bank decides. Two policies turn the select
value into a start address:

    ROUNDED  round the slot address down to a multiple of the bank size
             (what the released tool does; a 16KB bank seen in slot $A000
             lands at $8000)
    EXACT    use the slot address as-is and log the mapping of every bank

Banks nobody touched fall back to a linear layout across the 32KB window,
wrapping every ``8 / banksize`` banks:

    banksize 2 (8KB):  $8000, $A000, $C000, $E000, $8000, ...
    banksize 4 (16KB): $8000, $C000, $8000, ...
    banksize 8 (32KB): $8000, $8000, ...

A candidate whose last byte would sit above $FFFF is rejected in favour of
the fallback address.
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import Optional

from .header import BANK_UNIT
from .trace import CDL_BANK_MASK, CDL_BANK_SHIFT, CDL_CLASS_MASK

__all__ = [
    'PRG_WINDOW_START', 'SLOT_SIZE', 'ADDRESS_LIMIT',
    'AddressPolicy', 'find_bank_select', 'default_start_address', 'resolve_start_address',
]

log = logging.getLogger(__name__)

PRG_WINDOW_START = 0x8000
SLOT_SIZE = 0x2000
ADDRESS_LIMIT = 0xFFFF


class AddressPolicy(Enum):
    """How a traced bank-select value becomes a start address."""
    ROUNDED = "rounded"
    EXACT = "exact"


def find_bank_select(trace: bytes) -> Optional[int]:
    """Bank-select bits of the first classified byte, or None if none was touched."""
    for cdl in trace:
        if cdl & CDL_CLASS_MASK:
            return (cdl >> CDL_BANK_SHIFT) & CDL_BANK_MASK
    return None


def default_start_address(banksize: int, bank: int) -> int:
    """Linear layout used when the trace says nothing useful."""
    bank_bytes = banksize * BANK_UNIT
    return PRG_WINDOW_START + bank_bytes * (bank % (8 // banksize))


def resolve_start_address(trace: bytes, banksize: int, bank: int,
                          policy: AddressPolicy = AddressPolicy.ROUNDED) -> int:
    """
    Work out where a bank was mapped in CPU space.

    Args:
        trace: CDL bytes for the bank
        banksize: Bank size in 4KB units (2, 4 or 8)
        bank: Bank index, used for the fallback layout and diagnostics
        policy: ROUNDED or EXACT candidate calculation

    Returns:
        int: CPU start address; always satisfies
        ``start + banksize * 0x1000 - 1 <= 0xFFFF``
    """
    bank_bytes = banksize * BANK_UNIT
    fallback = default_start_address(banksize, bank)

    select = find_bank_select(trace)
    if select is None:
        if policy is AddressPolicy.EXACT:
            log.info("bank #%d: no traced bytes, using default $%04x", bank, fallback)
        return fallback

    slot = PRG_WINDOW_START + select * SLOT_SIZE
    if policy is AddressPolicy.EXACT:
        candidate = slot
    else:
        candidate = slot // bank_bytes * bank_bytes

    if candidate + bank_bytes - 1 > ADDRESS_LIMIT:
        log.warning(
            "bank #%d in cdl is banked into %04x, but with banksize %d it would "
            "overflow (to %04x), using %04x instead.",
            bank, candidate, banksize, candidate + bank_bytes, fallback)
        return fallback

    if policy is AddressPolicy.EXACT:
        log.info("bank #%d: bank select %d maps to $%04x", bank, select, candidate)
    return candidate
