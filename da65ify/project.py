"""
Project Model and Analysis Run
==============================

Ties the engine together. One call to ``analyze()`` is one run:

    ┌────────────┐   ┌─────────────┐   ┌──────────────────────────────┐
    │ iNES header│──>│ label table │──>│ per bank, in index order:    │
    │ + CDL size │   │ (optional)  │   │   read trace slice           │
    └────────────┘   └─────────────┘   │   resolve start address      │
                                       │   classify ranges            │
                                       │   attribute labels           │
                                       └──────────────┬───────────────┘
                                                      v
                                               ProjectModel  ──> emitter

Every bank gets its own freshly read trace slice; nothing computed for one
bank is visible to the next. The label table is shared read-only.
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple, Union

from .bank_address import resolve_start_address
from .config import AnalysisConfig
from .errors import FormatError
from .header import HEADER_SIZE, ChrWindow, RomHeader, bank_count, check_trace_size, parse_header
from .labels import Label, LabelTable
from .trace import Range, classify_bank

__all__ = ['Bank', 'ProjectModel', 'process_bank', 'analyze']

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bank:
    """
    One analysed PRG bank.

    Attributes:
        index: Bank number, 0-based
        size: Bank size in bytes
        rom_offset: File offset of the bank's first byte (header included)
        start_addr: Resolved CPU address of the first byte
        ranges: Classified ranges covering the whole bank
        labels: Labels attributed to this bank, already rebased
    """
    index: int
    size: int
    rom_offset: int
    start_addr: int
    ranges: Tuple[Range, ...]
    labels: Tuple[Label, ...] = ()

    @property
    def prg_offset(self) -> int:
        """Offset of the bank inside PRG ROM (header excluded)."""
        return self.rom_offset - HEADER_SIZE

    @property
    def end_addr(self) -> int:
        return self.start_addr + self.size - 1

    @property
    def name(self) -> str:
        return f"bank{self.index}"


@dataclass(frozen=True)
class ProjectModel:
    """Everything the emitter needs, frozen once the run is complete."""
    rom_path: str
    header: RomHeader
    banksize: int
    banks: Tuple[Bank, ...]
    chr: ChrWindow
    labels: Optional[LabelTable] = None
    warnings: Tuple[str, ...] = field(default=(), compare=False)

    @property
    def bank_bytes(self) -> int:
        return self.banksize * 0x1000


def process_bank(index: int, trace: bytes, config: AnalysisConfig,
                 labels: Optional[LabelTable] = None) -> Bank:
    """
    Resolve, classify and label a single bank.

    Args:
        index: Bank number
        trace: Exactly ``config.bank_bytes`` CDL bytes for this bank
        config: Run configuration
        labels: Label table to draw PRG/RAM labels from

    Returns:
        Bank
    """
    size = config.bank_bytes
    if len(trace) != size:
        raise FormatError(
            f"trace for bank {index} has ${len(trace):x} bytes, expected ${size:x}")

    start_addr = resolve_start_address(trace, config.banksize, index, config.policy)
    ranges = classify_bank(trace, start_addr)

    prg_offset = index * size
    bank_labels: List[Label] = []
    if labels is not None:
        bank_labels = labels.labels_for_window(prg_offset, prg_offset + size, start_addr)

    log.debug("bank #%d: $%04x-$%04x, %d ranges, %d labels",
              index, start_addr, start_addr + size - 1, len(ranges), len(bank_labels))
    return Bank(
        index=index,
        size=size,
        rom_offset=HEADER_SIZE + prg_offset,
        start_addr=start_addr,
        ranges=tuple(ranges),
        labels=tuple(bank_labels),
    )


def _read_banks(cdl: BinaryIO, total: int, config: AnalysisConfig,
                labels: Optional[LabelTable], cdl_path: str) -> List[Bank]:
    banks: List[Bank] = []
    for index in range(total):
        trace = cdl.read(config.bank_bytes)
        if len(trace) != config.bank_bytes:
            raise FormatError(f"trace ends inside bank {index}", cdl_path)
        banks.append(process_bank(index, trace, config, labels))
    return banks


def analyze(rom_path: Union[str, Path], cdl_path: Union[str, Path],
            mlb_path: Optional[Union[str, Path]] = None,
            config: Optional[AnalysisConfig] = None) -> ProjectModel:
    """
    Run the whole analysis on a ROM + CDL (+ optional MLB) triple.

    Raises:
        FormatError: on header, trace size or (strict) label problems
        OSError: when an input cannot be opened or read
    """
    config = config or AnalysisConfig()
    rom_path = str(rom_path)
    cdl_path = str(cdl_path)

    rom_size = os.stat(rom_path).st_size
    cdl_size = os.stat(cdl_path).st_size

    with open(rom_path, "rb") as f:
        header = parse_header(f.read(HEADER_SIZE), rom_size, rom_path)
    if header.has_trainer:
        log.warning("%s has a 512-byte trainer; offsets do not account for it", rom_path)

    warnings: List[str] = []
    mismatch = check_trace_size(cdl_size, rom_size, cdl_path)
    if mismatch:
        log.warning("%s", mismatch)
        warnings.append(mismatch)

    labels = None
    if mlb_path is not None:
        labels = LabelTable.load(mlb_path, strict=config.strict_labels)
        log.info("loaded %d labels from %s", len(labels), mlb_path)

    total = bank_count(header.prg_banks_16k, config.banksize)
    log.info("%s: %d x 16KB PRG, mapper %d, %d banks of %dKB",
             rom_path, header.prg_banks_16k, header.mapper, total, config.bank_bytes // 1024)

    with open(cdl_path, "rb") as cdl:
        banks = _read_banks(cdl, total, config, labels, cdl_path)

    return ProjectModel(
        rom_path=rom_path,
        header=header,
        banksize=config.banksize,
        banks=tuple(banks),
        chr=header.chr_window,
        labels=labels,
        warnings=tuple(warnings),
    )
