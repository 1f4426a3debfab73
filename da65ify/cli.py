"""
da65ify command line

Usage:
    python cdl2da65.py myrom.nes myrom.cdl [--banksize 2|4|8] [--mlb labels.mlb]
                       [--policy rounded|exact] [--output-dir DIR] [-v|-q]

Converts an NES ROM + FCEUX CDL file into a da65 disassembly project.

Exit codes:
    0  success
    1  input/output or file format error
    2  usage error
    3  internal error
"""

from __future__ import annotations
import argparse
import logging
import sys
from typing import List, Optional, Tuple

from . import __version__
from .bank_address import AddressPolicy
from .config import BANKSIZE_HELP, DEFAULT_BANKSIZE, AnalysisConfig
from .emitter import write_project
from .errors import FormatError, UsageError
from .log_setup import LOGGER_NAME, setup_logging
from .project import analyze

__all__ = ['EXIT_OK', 'EXIT_FAILURE', 'EXIT_USAGE', 'EXIT_INTERNAL', 'build_parser', 'main']

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERNAL = 3

EPILOG = """\
When the program finishes it will create a "Makefile" and several ".infofile"s
'make disassembly' will run the disassembly with da65
'make' will build the NES rom
'make clean' will remove temporary build files
"""

FINISHED = """\
Finished creating project files.

If all went well, you should be able to run "make disassembly" to create the assembly files
and then "make" to build the rom file."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="da65ify",
        description="DA65ify converts an NES rom + FCEUX CDL file into a DA65 project.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("rom", nargs="?", help="Filename of the ROM file to load (<file.nes>)")
    parser.add_argument("cdl", nargs="?", help="Filename of the CDL file to load (<file.cdl>)")
    parser.add_argument("--rom", dest="rom_opt", metavar="PATH",
                        help="ROM file (alternative to the positional argument)")
    parser.add_argument("--cdl", dest="cdl_opt", metavar="PATH",
                        help="CDL file (alternative to the positional argument)")
    parser.add_argument("--banksize", type=int, default=DEFAULT_BANKSIZE,
                        help=f"Size of PRG banks: {BANKSIZE_HELP}")
    parser.add_argument("--mlb", metavar="PATH",
                        help="Mesen label file to attach labels from")
    parser.add_argument("--policy", choices=[p.value for p in AddressPolicy],
                        default=AddressPolicy.ROUNDED.value,
                        help="Bank start address inference (default: rounded)")
    parser.add_argument("--strict-labels", action="store_true",
                        help="Abort on malformed label lines instead of skipping them")
    parser.add_argument("--output-dir", "-o", default=".",
                        help="Directory for the generated project (default: current)")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="More console output (-v info, -vv debug)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Only report errors")
    parser.add_argument("--log-file", help="Also write a debug log to this file")
    parser.add_argument("--version", action="version", version=f"da65ify {__version__}")
    return parser


def _console_level(args: argparse.Namespace) -> int:
    if args.quiet:
        return logging.ERROR
    if args.verbose >= 2:
        return logging.DEBUG
    if args.verbose == 1:
        return logging.INFO
    return logging.WARNING


def _input_paths(args: argparse.Namespace) -> Tuple[str, str]:
    # positionals fill whichever of ROM, CDL has no flag, in that order
    positional = [p for p in (args.rom, args.cdl) if p]
    rom = args.rom_opt or (positional.pop(0) if positional else None)
    cdl = args.cdl_opt or (positional.pop(0) if positional else None)
    if positional:
        raise UsageError(f"unexpected extra input file {positional[0]!r}")
    if not rom or not cdl:
        raise UsageError("both a ROM file and a CDL file are required")
    return rom, cdl


def _config_from_args(args: argparse.Namespace) -> AnalysisConfig:
    return AnalysisConfig(
        banksize=args.banksize,
        policy=AddressPolicy(args.policy),
        strict_labels=args.strict_labels,
        output_dir=args.output_dir,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(console_level=_console_level(args), log_file=args.log_file)
    log = logging.getLogger(LOGGER_NAME)

    try:
        rom_path, cdl_path = _input_paths(args)
        config = _config_from_args(args)
    except UsageError as e:
        print(f"{e}\n", file=sys.stderr)
        parser.print_help(sys.stderr)
        return EXIT_USAGE

    try:
        model = analyze(rom_path, cdl_path, args.mlb, config)
        write_project(model, config.output_dir)
    except FormatError as e:
        log.error("%s", e)
        return EXIT_FAILURE
    except OSError as e:
        log.error("%s: %s", e.filename or "I/O error", e.strerror or e)
        return EXIT_FAILURE
    except Exception as e:
        log.error("internal error: %s", e, exc_info=args.verbose > 1)
        return EXIT_INTERNAL

    if not args.quiet:
        print(FINISHED)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
