"""
Instruction builders for the vault program and the protocols it drives.

All builders are pure: resolved accounts in, solders Instruction out.
"""

from fuze.instructions.programs import (
    LAMPORTS_PER_SOL,
    ProgramIds,
    account_discriminator,
    instruction_discriminator,
)

__all__ = [
    "LAMPORTS_PER_SOL",
    "ProgramIds",
    "account_discriminator",
    "instruction_discriminator",
]
