"""
da65ify - NES ROM + CDL trace to da65 disassembly project
=========================================================
Reverse-engineers who traced a running game with an emulator's Code/Data
Logger get a symbolic disassembly skeleton: which bytes are code, which
are data, where each bank sat in CPU memory, and named labels.

Pipeline:
    ┌───────────┐    ┌────────────┐    ┌─────────────────┐    ┌───────────┐
    │ iNES ROM  │───>│   header   │───>│  per-bank:      │───>│  emitter  │
    │ CDL trace │    │ + labels   │    │  address, ranges│    │ (da65/ld65│
    │ MLB labels│    │            │    │  labels         │    │  project) │
    └───────────┘    └────────────┘    └─────────────────┘    └───────────┘

    - header.py:       iNES header validation, CHR window, bank count
    - trace.py:        CDL bytes -> CODE / BYTETABLE ranges
    - bank_address.py: which CPU window a bank was switched into
    - labels.py:       MLB label file parsing and per-bank lookup
    - project.py:      ProjectModel and the analysis run
    - emitter.py:      info files, entry.asm, layout, Makefile
"""

__version__ = "1.0.0"

from typing import Optional

from .errors import Da65ifyError, FormatError, UsageError
from .header import RomHeader, ChrWindow, parse_header, check_trace_size, bank_count
from .trace import Range, RangeKind, classify_bank
from .bank_address import AddressPolicy, default_start_address, resolve_start_address
from .labels import Label, LabelKind, LabelTable, parse_label_line
from .config import AnalysisConfig
from .project import Bank, ProjectModel, analyze, process_bank
from .emitter import write_project


def convert(rom_path, cdl_path, mlb_path=None, config: Optional[AnalysisConfig] = None) -> ProjectModel:
    """Analyse a ROM + CDL (+ MLB) and write the da65 project.

    Full pipeline: header -> labels -> banks -> emitter.

    Args:
        rom_path: iNES ROM file
        cdl_path: FCEUX CDL file for the same ROM
        mlb_path: Optional Mesen label file
        config: Run configuration (defaults: 16KB banks, rounded policy)

    Returns:
        The ProjectModel that was written.
    """
    config = config or AnalysisConfig()
    model = analyze(rom_path, cdl_path, mlb_path, config)
    write_project(model, config.output_dir)
    return model
