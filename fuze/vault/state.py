"""
Vault State Reader
==================
Decodes the vault program's `Vault` account.

Vault state changes on every deposit, withdraw and harvest, so it is
fetched fresh for each operation and never stored in the registry.

Layout:
    0     discriminator [8]
    8     authority Pubkey
    40    reserve Pubkey
    72    zeta_group Pubkey
    104   collateral_vault Pubkey
    136   underlying_vault Pubkey
    168   usdc_vault Pubkey
    200   deposit_limit u64
    208   total_deposit u64
    216   management_fee_bps u64
    224   bump u8
    225   executor_bump u8
    226   mint_bump u8
    227   is_live bool
"""

from __future__ import annotations

import struct
from typing import Optional

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solders.pubkey import Pubkey

from fuze.instructions.programs import account_discriminator
from fuze.loaders.base import read_pubkey
from fuze.vault.types import VaultState, VaultStateError

VAULT_DISCRIMINATOR = account_discriminator("Vault")
VAULT_LEN = 228


def decode_vault(address: Pubkey, data: bytes) -> VaultState:
    """Decode raw account data, raising VaultStateError when malformed."""
    if len(data) < VAULT_LEN:
        raise VaultStateError(str(address), f"expected {VAULT_LEN} bytes, got {len(data)}")
    if data[:8] != VAULT_DISCRIMINATOR:
        raise VaultStateError(str(address), "account discriminator is not Vault")

    deposit_limit, total_deposit, fee_bps = struct.unpack_from("<QQQ", data, 200)
    return VaultState(
        address=address,
        authority=read_pubkey(data, 8),
        reserve=read_pubkey(data, 40),
        zeta_group=read_pubkey(data, 72),
        collateral_vault=read_pubkey(data, 104),
        underlying_vault=read_pubkey(data, 136),
        usdc_vault=read_pubkey(data, 168),
        deposit_limit=deposit_limit,
        total_deposit=total_deposit,
        management_fee_bps=fee_bps,
        bump=data[224],
        executor_bump=data[225],
        mint_bump=data[226],
        is_live=bool(data[227]),
    )


async def fetch_vault_state(
    client: AsyncClient,
    vault: Pubkey,
    program_id: Optional[Pubkey] = None,
    commitment: Commitment = Confirmed,
) -> VaultState:
    """Read and decode the vault account. Raises VaultStateError if absent or foreign."""
    resp = await client.get_account_info(vault, commitment=commitment)
    account = resp.value
    if account is None:
        raise VaultStateError(str(vault), "account does not exist")
    if program_id is not None and account.owner != program_id:
        raise VaultStateError(str(vault), f"owned by {account.owner}, not {program_id}")
    return decode_vault(vault, bytes(account.data))
