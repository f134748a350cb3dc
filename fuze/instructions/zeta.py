"""
Zeta Program Instruction Builders
=================================
Direct (non-CPI) Zeta instructions the client prepends to vault
instructions.
"""

from __future__ import annotations

import struct

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from fuze.instructions.programs import (
    greeks_address,
    instruction_discriminator,
    zeta_state_address,
)
from fuze.vault.types import ZetaGroup

UPDATE_PRICING = instruction_discriminator("update_pricing")


def create_update_pricing_ix(
    expiry_index: int, group: ZetaGroup, zeta_program: Pubkey
) -> Instruction:
    """
    Recompute Zeta's mark prices and greeks for one expiry series.

    Permissionless; the fee payer of the enclosing transaction pays for it.
    """
    accounts = [
        AccountMeta(zeta_state_address(zeta_program), is_signer=False, is_writable=False),
        AccountMeta(group.address, is_signer=False, is_writable=True),
        AccountMeta(greeks_address(group.address, zeta_program), is_signer=False, is_writable=True),
        AccountMeta(group.oracle, is_signer=False, is_writable=False),
    ]
    return Instruction(
        program_id=zeta_program,
        data=UPDATE_PRICING + struct.pack("<B", expiry_index),
        accounts=accounts,
    )
