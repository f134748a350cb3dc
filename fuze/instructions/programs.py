"""
Program IDs, Discriminators & PDAs
==================================
Addresses and seeds shared by the instruction builders.

Anchor programs prefix instruction data with sha256("global:<name>")[:8]
and account data with sha256("account:<Name>")[:8].
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from solders.pubkey import Pubkey

from config.settings import Settings


# =============================================================================
# CONSTANTS
# =============================================================================

LAMPORTS_PER_SOL = 1_000_000_000

SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
SYSVAR_RENT_PUBKEY = Pubkey.from_string("SysvarRent111111111111111111111111111111111")
SYSVAR_CLOCK_PUBKEY = Pubkey.from_string("SysvarC1ock11111111111111111111111111111111")

# Zeta keeps two expiry series live, each with 23 products (11 calls, 11 puts, 1 future)
NUM_PRODUCTS_PER_SERIES = 23
ACTIVE_EXPIRIES = 2
ACTIVE_MARKETS = NUM_PRODUCTS_PER_SERIES * ACTIVE_EXPIRIES


def instruction_discriminator(name: str) -> bytes:
    """Anchor instruction discriminator for `name` (snake_case)."""
    return hashlib.sha256(f"global:{name}".encode()).digest()[:8]


def account_discriminator(name: str) -> bytes:
    """Anchor account discriminator for `name` (CamelCase)."""
    return hashlib.sha256(f"account:{name}".encode()).digest()[:8]


# =============================================================================
# PROGRAM SET
# =============================================================================


@dataclass(frozen=True)
class ProgramIds:
    """Program addresses the vault talks to."""

    vault: Pubkey
    zeta: Pubkey
    zeta_dex: Pubkey
    solend: Pubkey
    usdc_mint: Pubkey

    @classmethod
    def from_settings(cls) -> "ProgramIds":
        return cls(
            vault=Pubkey.from_string(Settings.VAULT_PROGRAM_ID),
            zeta=Pubkey.from_string(Settings.ZETA_PROGRAM_ID),
            zeta_dex=Pubkey.from_string(Settings.ZETA_DEX_PROGRAM_ID),
            solend=Pubkey.from_string(Settings.SOLEND_PROGRAM_ID),
            usdc_mint=Pubkey.from_string(Settings.USDC_MINT),
        )


# =============================================================================
# VAULT PROGRAM PDAS
# =============================================================================


def vault_address(reserve: Pubkey, authority: Pubkey, program_id: Pubkey) -> Pubkey:
    pda, _ = Pubkey.find_program_address(
        [b"vault", bytes(reserve), bytes(authority)], program_id
    )
    return pda


def executor_address(vault: Pubkey, program_id: Pubkey) -> Pubkey:
    pda, _ = Pubkey.find_program_address([b"executor", bytes(vault)], program_id)
    return pda


def shares_mint_address(vault: Pubkey, program_id: Pubkey) -> Pubkey:
    pda, _ = Pubkey.find_program_address([b"shares", bytes(vault)], program_id)
    return pda


def token_vault_address(seed: bytes, vault: Pubkey, program_id: Pubkey) -> Pubkey:
    """Vault-owned token accounts: b"collateral", b"underlying", b"usdc"."""
    pda, _ = Pubkey.find_program_address([seed, bytes(vault)], program_id)
    return pda


# =============================================================================
# ZETA PDAS
# =============================================================================


def zeta_state_address(zeta_program: Pubkey) -> Pubkey:
    pda, _ = Pubkey.find_program_address([b"state"], zeta_program)
    return pda


def zeta_vault_address(group: Pubkey, zeta_program: Pubkey) -> Pubkey:
    pda, _ = Pubkey.find_program_address([b"vault", bytes(group)], zeta_program)
    return pda


def greeks_address(group: Pubkey, zeta_program: Pubkey) -> Pubkey:
    pda, _ = Pubkey.find_program_address([b"greeks", bytes(group)], zeta_program)
    return pda


def socialized_loss_address(group: Pubkey, zeta_program: Pubkey) -> Pubkey:
    pda, _ = Pubkey.find_program_address([b"socialized-loss", bytes(group)], zeta_program)
    return pda


def margin_account_address(group: Pubkey, owner: Pubkey, zeta_program: Pubkey) -> Pubkey:
    pda, _ = Pubkey.find_program_address(
        [b"margin", bytes(group), bytes(owner)], zeta_program
    )
    return pda


def serum_authority_address(zeta_program: Pubkey) -> Pubkey:
    pda, _ = Pubkey.find_program_address([b"serum"], zeta_program)
    return pda


def open_orders_address(
    dex_program: Pubkey, market: Pubkey, owner: Pubkey, zeta_program: Pubkey
) -> Pubkey:
    pda, _ = Pubkey.find_program_address(
        [b"open-orders", bytes(dex_program), bytes(market), bytes(owner)],
        zeta_program,
    )
    return pda


def open_orders_map_address(open_orders: Pubkey, zeta_program: Pubkey) -> Pubkey:
    pda, _ = Pubkey.find_program_address([bytes(open_orders)], zeta_program)
    return pda
