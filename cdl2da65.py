#!/usr/bin/env python3
"""
cdl2da65 - NES ROM + FCEUX CDL to da65 project

Usage:
    python cdl2da65.py <file.nes> <file.cdl> [--banksize 2|4|8] [--mlb file.mlb]
                       [--policy rounded|exact] [-o outdir] [-v]

Examples:
    python cdl2da65.py game.nes game.cdl
    python cdl2da65.py game.nes game.cdl --banksize 2 --mlb game.mlb -o disasm/
    python cdl2da65.py --rom game.nes --cdl game.cdl --policy exact -v
"""

import os
import sys

# Allow running from project root without installing
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from da65ify.cli import main


if __name__ == "__main__":
    sys.exit(main())
