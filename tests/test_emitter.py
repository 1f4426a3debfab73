"""
da65 / ld65 project emitter tests.

The expected strings are the exact bytes the released tool writes; any
whitespace change here breaks existing projects.
"""

import pytest

from da65ify.emitter import (
    render_bank_info, render_entry, render_ines_info, render_layout, render_makefile,
    write_project,
)
from da65ify.header import ChrWindow, RomHeader
from da65ify.labels import Label
from da65ify.project import Bank, ProjectModel
from da65ify.trace import Range, RangeKind


def _bank(index=0, start=0x8000, labels=()):
    return Bank(
        index=index,
        size=0x4000,
        rom_offset=0x10 + index * 0x4000,
        start_addr=start,
        ranges=(Range(start, start + 0xFF, RangeKind.CODE),
                Range(start + 0x100, start + 0x3FFF, RangeKind.BYTETABLE)),
        labels=tuple(labels),
    )


def _model(banks, chr_size=0x2000):
    header = RomHeader(b"NES\x1a", 2, chr_size // 0x2000, 0, 0, 0x8010 + chr_size)
    return ProjectModel(
        rom_path="game.nes",
        header=header,
        banksize=4,
        banks=tuple(banks),
        chr=ChrWindow(0x8010, chr_size),
    )


class TestBankInfo:
    def test_exact_text(self):
        bank = _bank(labels=[Label("P", 0x8000, 0x10, "foo"), Label("R", 0xab, 1, "zp")])
        expected = (
            'GLOBAL { \n'
            '  INPUTNAME "game.nes"; \n'
            '  OUTPUTNAME "bank0.asm"; \n'
            '  INPUTOFFS $0010; \n'
            '  INPUTSIZE $4000; \n'
            '  COMMENTS $4; \n'
            '  STARTADDR $8000; \n'
            '  LABELBREAK $1; \n'
            '};\n'
            'RANGE { \n'
            '  START $8000; \n'
            '  END $80ff; \n'
            '  TYPE CODE; \n'
            '};\n'
            'RANGE { \n'
            '  START $8100; \n'
            '  END $bfff; \n'
            '  TYPE BYTETABLE; \n'
            '};\n'
            'LABEL { \n'
            '  ADDR $8000; \n'
            '  NAME "foo"; \n'
            '  SIZE $0010; \n'
            '};\n'
            'LABEL { \n'
            '  ADDR $00AB; \n'
            '  NAME "zp"; \n'
            '  SIZE $0001; \n'
            '};'
        )
        assert render_bank_info("game.nes", bank) == expected

    def test_hex_case(self):
        bank = _bank(index=1, start=0xC000, labels=[Label("P", 0xCAFE, 0xAB, "x")])
        text = render_bank_info("game.nes", bank)
        assert "INPUTOFFS $4010;" in text
        assert "STARTADDR $c000;" in text
        assert "END $c0ff;" in text
        assert "ADDR $CAFE;" in text
        assert "SIZE $00AB;" in text


class TestOtherFiles:
    def test_ines_info(self):
        assert render_ines_info("game.nes") == (
            'GLOBAL { \n'
            '  INPUTNAME "game.nes"; \n'
            '  OUTPUTNAME "ines.asm"; \n'
            '  INPUTOFFS $0; \n'
            '  INPUTSIZE $10; \n'
            '  STARTADDR $0; \n'
            '}; \n'
            'RANGE { \n'
            '  START $0; \n'
            '  END $10; \n'
            '  TYPE BYTETABLE; \n'
            '}; \n'
        )

    def test_entry_with_chr(self):
        assert render_entry(_model([_bank()])) == (
            '.segment "INES"\n'
            '.include "ines.asm"\n'
            '.scope bank0 \n'
            '.segment "PRG0" \n'
            '.include "bank0.asm" \n'
            '.endscope \n'
            '\n'
            '.segment "CHR" \n'
            '.incbin "game.nes", $8010, $2000 \n'
        )

    def test_entry_without_chr(self):
        text = render_entry(_model([_bank(), _bank(1, 0xC000)], chr_size=0))
        assert "CHR" not in text
        assert text.endswith('.include "bank1.asm" \n.endscope \n')

    def test_layout(self):
        assert render_layout(_model([_bank(), _bank(1, 0xC000)])) == (
            'MEMORY {\n'
            'INES: start = 0, size = $10;\n'
            'PRG0: start = $8000, size = $4000;\n'
            'PRG1: start = $c000, size = $4000;\n'
            'CHR: start = 0, size = $2000;\n'
            '}\n'
            'SEGMENTS {\n'
            'INES: load = INES, type = ro;\n'
            'PRG0: load = PRG0, type = ro;\n'
            'PRG1: load = PRG1, type = ro;\n'
            'CHR: load = CHR, type = ro;\n'
            '}\n'
        )

    def test_layout_without_chr(self):
        assert "CHR" not in render_layout(_model([_bank()], chr_size=0))

    def test_makefile(self):
        text = render_makefile(_model([_bank(), _bank(1, 0xC000)]))
        assert text.startswith("\n.PHONY: clean\n")
        assert '\n\tradiff2 -x main.nes "game.nes" | head -n 100' in text
        assert "\ndisassembly:\n\tda65 -i ines.infofile\n\tda65 -i bank0.infofile\n\tda65 -i bank1.infofile\n" in text
        assert "\n%.o: %.asm\n" in text
        assert "\n\tld65  --dbgfile $@.dbg -C $^ -o $@" in text
        assert text.endswith("\ninclude $(wildcard ./*.dep ./*/*.dep)")


class TestWriteProject:
    def test_files_written(self, tmp_path):
        model = _model([_bank(), _bank(1, 0xC000)])
        out = tmp_path / "proj"
        written = write_project(model, out)
        assert [p.name for p in written] == [
            "ines.infofile", "bank0.infofile", "bank1.infofile", "entry.asm", "layout", "Makefile",
        ]
        assert (out / "bank1.infofile").read_text(encoding="utf-8") == \
            render_bank_info("game.nes", model.banks[1])

    def test_no_newline_translation(self, tmp_path):
        write_project(_model([_bank()]), tmp_path)
        assert b"\r\n" not in (tmp_path / "layout").read_bytes()
