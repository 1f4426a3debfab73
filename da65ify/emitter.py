"""
da65 / ld65 Project Emitter
===========================

Renders a ProjectModel into the files the cc65 toolchain consumes:

  ines.infofile      da65 info file for the 16-byte iNES header
  bankN.infofile     da65 info file per PRG bank (GLOBAL, RANGE, LABEL)
  entry.asm          ca65 entry point including every disassembled bank
  layout             ld65 memory/segment configuration
  Makefile           'make disassembly' runs da65, 'make' rebuilds the ROM

The text is reproduced byte for byte from the released tool, including the
trailing space before each newline inside records and the missing final
newline in the bank info files. Downstream tooling and existing projects
diff against it, so do not tidy it up.

Addresses in GLOBAL and RANGE records are lowercase hex, in LABEL records
uppercase.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import List, Union

from .labels import Label
from .project import Bank, ProjectModel
from .trace import Range

__all__ = [
    'render_ines_info', 'render_bank_info', 'render_entry', 'render_layout',
    'render_makefile', 'write_project',
]

log = logging.getLogger(__name__)


def _range_record(rng: Range) -> str:
    return (f"\nRANGE {{ "
            f"\n  START ${rng.start:04x}; "
            f"\n  END ${rng.end:04x}; "
            f"\n  TYPE {rng.kind.value}; "
            f"\n}};")


def _label_record(label: Label) -> str:
    return (f"\nLABEL {{ "
            f"\n  ADDR ${label.addr:04X}; "
            f"\n  NAME \"{label.name}\"; "
            f"\n  SIZE ${label.size:04X}; "
            f"\n}};")


def render_ines_info(rom_path: str) -> str:
    return (f"GLOBAL {{ "
            f"\n  INPUTNAME \"{rom_path}\"; "
            f"\n  OUTPUTNAME \"ines.asm\"; "
            f"\n  INPUTOFFS $0; "
            f"\n  INPUTSIZE $10; "
            f"\n  STARTADDR $0; "
            f"\n}}; "
            f"\nRANGE {{ "
            f"\n  START $0; "
            f"\n  END $10; "
            f"\n  TYPE BYTETABLE; "
            f"\n}}; "
            f"\n")


def render_bank_info(rom_path: str, bank: Bank) -> str:
    """GLOBAL block, then one RANGE per range, then the bank's labels."""
    parts = [
        f"GLOBAL {{ "
        f"\n  INPUTNAME \"{rom_path}\"; "
        f"\n  OUTPUTNAME \"{bank.name}.asm\"; "
        f"\n  INPUTOFFS ${bank.rom_offset:04x}; "
        f"\n  INPUTSIZE ${bank.size:04x}; "
        f"\n  COMMENTS $4; "
        f"\n  STARTADDR ${bank.start_addr:04x}; "
        f"\n  LABELBREAK $1; "
        f"\n}};"
    ]
    parts.extend(_range_record(rng) for rng in bank.ranges)
    parts.extend(_label_record(label) for label in bank.labels)
    return "".join(parts)


def render_entry(model: ProjectModel) -> str:
    parts = [".segment \"INES\"", "\n.include \"ines.asm\""]
    for bank in model.banks:
        parts.append(f"\n.scope {bank.name} "
                     f"\n.segment \"PRG{bank.index}\" "
                     f"\n.include \"{bank.name}.asm\" "
                     f"\n.endscope "
                     f"\n")
    if model.chr.size != 0:
        parts.append(f"\n.segment \"CHR\" "
                     f"\n.incbin \"{model.rom_path}\", ${model.chr.offset:04x}, ${model.chr.size:x} "
                     f"\n")
    return "".join(parts)


def render_layout(model: ProjectModel) -> str:
    lines = ["MEMORY {", "\nINES: start = 0, size = $10;"]
    for bank in model.banks:
        lines.append(f"\nPRG{bank.index}: start = ${bank.start_addr:04x}, size = ${bank.size:04x};")
    if model.chr.size > 0:
        lines.append(f"\nCHR: start = 0, size = ${model.chr.size:04x};")
    lines.append("\n}\nSEGMENTS {")
    lines.append("\nINES: load = INES, type = ro;")
    for bank in model.banks:
        lines.append(f"\nPRG{bank.index}: load = PRG{bank.index}, type = ro;")
    if model.chr.size > 0:
        lines.append("\nCHR: load = CHR, type = ro;")
    lines.append("\n}\n")
    return "".join(lines)


def render_makefile(model: ProjectModel) -> str:
    lines = [
        "\n.PHONY: clean",
        "\n",
        "\nbuild: main.nes",
        "\n",
        "\nintegritycheck: main.nes",
        f"\n\tradiff2 -x main.nes \"{model.rom_path}\" | head -n 100",
        "\n",
        "\ndisassembly:",
        "\n\tda65 -i ines.infofile",
    ]
    lines.extend(f"\n\tda65 -i {bank.name}.infofile" for bank in model.banks)
    lines.extend([
        "\n",
        "\n%.o: %.asm",
        "\n\tca65 --create-dep \"$@.dep\" -g --debug-info $< -o $@",
        "\n",
        "\nmain.nes: layout entry.o",
        "\n\tld65  --dbgfile $@.dbg -C $^ -o $@",
        "\n",
        "\nclean:",
        "\n\trm -f ./main.nes ./*.nes.dbg ./*.o ./*.dep",
        "\n",
        "\ninclude $(wildcard ./*.dep ./*/*.dep)",
    ])
    return "".join(lines)


def _write(path: Path, content: str) -> Path:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
    log.debug("wrote %s (%d bytes)", path, len(content))
    return path


def write_project(model: ProjectModel, output_dir: Union[str, Path] = ".") -> List[Path]:
    """
    Write all project files into ``output_dir``.

    Returns:
        Paths written, in write order. OSError propagates.
    """
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    written = [_write(out / "ines.infofile", render_ines_info(model.rom_path))]
    for bank in model.banks:
        written.append(_write(out / f"{bank.name}.infofile", render_bank_info(model.rom_path, bank)))
    written.append(_write(out / "entry.asm", render_entry(model)))
    written.append(_write(out / "layout", render_layout(model)))
    written.append(_write(out / "Makefile", render_makefile(model)))

    log.info("wrote %d project files to %s", len(written), out)
    return written
