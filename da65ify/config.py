"""
Run configuration for a da65ify analysis.

Defaults match the released command-line tool: 16KB banks, rounded bank
address inference, malformed label lines skipped with a warning, project
files written to the current directory.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .bank_address import AddressPolicy
from .errors import UsageError

__all__ = ['DEFAULT_BANKSIZE', 'VALID_BANKSIZES', 'BANKSIZE_HELP', 'AnalysisConfig']

DEFAULT_BANKSIZE = 4

# banksize is in 4KB units
VALID_BANKSIZES = {
    2: "8KB banks",
    4: "16KB banks (default)",
    8: "32KB banks",
}

BANKSIZE_HELP = ", ".join(f"{k}={v}" for k, v in VALID_BANKSIZES.items())


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Attributes:
        banksize: PRG bank size in 4KB units (2, 4 or 8)
        policy: Bank start address inference policy
        strict_labels: Abort on malformed label lines instead of skipping
        output_dir: Directory for the generated project files
    """
    banksize: int = DEFAULT_BANKSIZE
    policy: AddressPolicy = AddressPolicy.ROUNDED
    strict_labels: bool = False
    output_dir: Union[str, Path] = "."

    def __post_init__(self):
        if self.banksize not in VALID_BANKSIZES:
            raise UsageError(
                f"invalid banksize {self.banksize!r} (expected one of: {BANKSIZE_HELP})")
        if not isinstance(self.policy, AddressPolicy):
            raise UsageError(f"invalid address policy {self.policy!r}")

    @property
    def bank_bytes(self) -> int:
        return self.banksize * 0x1000
