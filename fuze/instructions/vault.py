"""
Vault Program Instruction Builders
==================================
Pure, deterministic builders for every vault program instruction.

No RPC, no signing: each builder takes caller arguments plus already
resolved accounts (decoded protocol accounts, fresh VaultState) and
returns a solders Instruction.
"""

from __future__ import annotations

import struct
from typing import List

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from fuze.instructions.programs import (
    ProgramIds,
    SYSTEM_PROGRAM_ID,
    SYSVAR_CLOCK_PUBKEY,
    SYSVAR_RENT_PUBKEY,
    TOKEN_PROGRAM_ID,
    executor_address,
    greeks_address,
    instruction_discriminator,
    margin_account_address,
    open_orders_address,
    open_orders_map_address,
    serum_authority_address,
    shares_mint_address,
    socialized_loss_address,
    token_vault_address,
    vault_address,
    zeta_state_address,
    zeta_vault_address,
)
from fuze.vault.types import Reserve, SerumMarket, VaultState, ZetaGroup


# =============================================================================
# DISCRIMINATORS
# =============================================================================

INITIALIZE = instruction_discriminator("initialize")
DEPOSIT = instruction_discriminator("deposit")
WITHDRAW = instruction_discriminator("withdraw")
INIT_OPEN_ORDERS = instruction_discriminator("init_open_orders")
HARVEST_YIELD = instruction_discriminator("harvest_yield")
REINVEST_SOLEND = instruction_discriminator("reinvest_solend")
REINVEST_ZETA = instruction_discriminator("reinvest_zeta")
REDEEM_ZETA = instruction_discriminator("redeem_zeta")
SWAP_TO_UNDERLYING = instruction_discriminator("swap_to_underlying")
SWAP_TO_USDC = instruction_discriminator("swap_to_usdc")
BID_ORDER = instruction_discriminator("bid_order")


def _meta(pubkey: Pubkey, signer: bool = False, writable: bool = False) -> AccountMeta:
    return AccountMeta(pubkey, is_signer=signer, is_writable=writable)


# =============================================================================
# LIFECYCLE
# =============================================================================


def create_initialize_ix(
    deposit_limit: int,
    management_fee_bps: int,
    authority: Pubkey,
    group: ZetaGroup,
    reserve: Reserve,
    programs: ProgramIds,
) -> Instruction:
    """Create a vault for (reserve, authority) and its Zeta margin account."""
    vault = vault_address(reserve.address, authority, programs.vault)
    executor = executor_address(vault, programs.vault)

    accounts = [
        _meta(authority, signer=True, writable=True),
        _meta(vault, writable=True),
        _meta(executor),
        _meta(shares_mint_address(vault, programs.vault), writable=True),
        _meta(token_vault_address(b"collateral", vault, programs.vault), writable=True),
        _meta(token_vault_address(b"underlying", vault, programs.vault), writable=True),
        _meta(token_vault_address(b"usdc", vault, programs.vault), writable=True),
        _meta(reserve.address),
        _meta(reserve.collateral.mint_pubkey),
        _meta(reserve.liquidity.mint_pubkey),
        _meta(programs.usdc_mint),
        _meta(group.address),
        _meta(margin_account_address(group.address, executor, programs.zeta), writable=True),
        _meta(zeta_state_address(programs.zeta)),
        _meta(programs.zeta),
        _meta(programs.solend),
        _meta(SYSTEM_PROGRAM_ID),
        _meta(TOKEN_PROGRAM_ID),
        _meta(SYSVAR_RENT_PUBKEY),
    ]
    data = INITIALIZE + struct.pack("<QQ", deposit_limit, management_fee_bps)
    return Instruction(programs.vault, data, accounts)


# =============================================================================
# USER FLOWS (Solend side)
# =============================================================================


def _user_liquidity_accounts(
    user: Pubkey,
    user_token_account: Pubkey,
    user_shares_account: Pubkey,
    state: VaultState,
    reserve: Reserve,
    programs: ProgramIds,
) -> List[AccountMeta]:
    """Account layout shared by deposit and withdraw."""
    return [
        _meta(user_shares_account, writable=True),
        _meta(user_token_account, writable=True),
        _meta(user, signer=True),
        _meta(state.address, writable=True),
        _meta(state.collateral_vault, writable=True),
        _meta(executor_address(state.address, programs.vault)),
        _meta(shares_mint_address(state.address, programs.vault), writable=True),
        _meta(reserve.liquidity.supply_pubkey, writable=True),
        _meta(reserve.collateral.mint_pubkey, writable=True),
        _meta(reserve.lending_market),
        _meta(reserve.lending_market_authority(programs.solend)),
        _meta(reserve.address, writable=True),
        _meta(SYSVAR_CLOCK_PUBKEY),
        _meta(TOKEN_PROGRAM_ID),
        _meta(programs.solend),
    ]


def create_deposit_ix(
    amount: int,
    user: Pubkey,
    user_token_account: Pubkey,
    user_shares_account: Pubkey,
    state: VaultState,
    reserve: Reserve,
    programs: ProgramIds,
) -> Instruction:
    accounts = _user_liquidity_accounts(
        user, user_token_account, user_shares_account, state, reserve, programs
    )
    return Instruction(programs.vault, DEPOSIT + struct.pack("<Q", amount), accounts)


def create_withdraw_ix(
    amount: int,
    user: Pubkey,
    user_token_account: Pubkey,
    user_shares_account: Pubkey,
    state: VaultState,
    reserve: Reserve,
    programs: ProgramIds,
) -> Instruction:
    accounts = _user_liquidity_accounts(
        user, user_token_account, user_shares_account, state, reserve, programs
    )
    return Instruction(programs.vault, WITHDRAW + struct.pack("<Q", amount), accounts)


# =============================================================================
# AUTHORITY FLOWS (Solend side)
# =============================================================================


def _reserve_accounts(
    authority: Pubkey, state: VaultState, reserve: Reserve, programs: ProgramIds
) -> List[AccountMeta]:
    return [
        _meta(authority, signer=True),
        _meta(state.address, writable=True),
        _meta(executor_address(state.address, programs.vault)),
        _meta(state.collateral_vault, writable=True),
        _meta(state.underlying_vault, writable=True),
        _meta(reserve.address, writable=True),
        _meta(reserve.liquidity.supply_pubkey, writable=True),
        _meta(reserve.collateral.mint_pubkey, writable=True),
        _meta(reserve.lending_market),
        _meta(reserve.lending_market_authority(programs.solend)),
        _meta(SYSVAR_CLOCK_PUBKEY),
        _meta(TOKEN_PROGRAM_ID),
        _meta(programs.solend),
    ]


def create_harvest_yield_ix(
    authority: Pubkey, state: VaultState, reserve: Reserve, programs: ProgramIds
) -> Instruction:
    """Redeem accrued lending yield into the underlying vault."""
    return Instruction(
        programs.vault, HARVEST_YIELD, _reserve_accounts(authority, state, reserve, programs)
    )


def create_reinvest_solend_ix(
    amount: int,
    authority: Pubkey,
    state: VaultState,
    reserve: Reserve,
    programs: ProgramIds,
) -> Instruction:
    """Deposit `amount` of the underlying vault back into the reserve."""
    return Instruction(
        programs.vault,
        REINVEST_SOLEND + struct.pack("<Q", amount),
        _reserve_accounts(authority, state, reserve, programs),
    )


# =============================================================================
# AUTHORITY FLOWS (Zeta side)
# =============================================================================


def _zeta_margin_accounts(
    authority: Pubkey, state: VaultState, group: ZetaGroup, programs: ProgramIds
) -> List[AccountMeta]:
    executor = executor_address(state.address, programs.vault)
    return [
        _meta(authority, signer=True),
        _meta(state.address),
        _meta(executor),
        _meta(state.usdc_vault, writable=True),
        _meta(zeta_state_address(programs.zeta)),
        _meta(group.address),
        _meta(margin_account_address(group.address, executor, programs.zeta), writable=True),
        _meta(zeta_vault_address(group.address, programs.zeta), writable=True),
        _meta(socialized_loss_address(group.address, programs.zeta), writable=True),
        _meta(greeks_address(group.address, programs.zeta)),
        _meta(group.oracle),
        _meta(TOKEN_PROGRAM_ID),
        _meta(programs.zeta),
    ]


def create_reinvest_zeta_ix(
    authority: Pubkey, state: VaultState, group: ZetaGroup, programs: ProgramIds
) -> Instruction:
    """Move the USDC vault balance into the Zeta margin account."""
    return Instruction(
        programs.vault, REINVEST_ZETA, _zeta_margin_accounts(authority, state, group, programs)
    )


def create_redeem_zeta_ix(
    amount: int,
    authority: Pubkey,
    state: VaultState,
    group: ZetaGroup,
    programs: ProgramIds,
) -> Instruction:
    """Withdraw `amount` from the Zeta margin account into the USDC vault."""
    return Instruction(
        programs.vault,
        REDEEM_ZETA + struct.pack("<Q", amount),
        _zeta_margin_accounts(authority, state, group, programs),
    )


def create_init_open_orders_ix(
    authority: Pubkey,
    state: VaultState,
    market: SerumMarket,
    group: ZetaGroup,
    programs: ProgramIds,
) -> Instruction:
    executor = executor_address(state.address, programs.vault)
    open_orders = open_orders_address(programs.zeta_dex, market.address, executor, programs.zeta)
    accounts = [
        _meta(authority, signer=True, writable=True),
        _meta(state.address),
        _meta(executor),
        _meta(zeta_state_address(programs.zeta)),
        _meta(group.address),
        _meta(margin_account_address(group.address, executor, programs.zeta), writable=True),
        _meta(open_orders, writable=True),
        _meta(open_orders_map_address(open_orders, programs.zeta), writable=True),
        _meta(market.address),
        _meta(serum_authority_address(programs.zeta)),
        _meta(programs.zeta_dex),
        _meta(programs.zeta),
        _meta(SYSTEM_PROGRAM_ID),
        _meta(SYSVAR_RENT_PUBKEY),
    ]
    return Instruction(programs.vault, INIT_OPEN_ORDERS, accounts)


def create_bid_order_ix(
    product_index: int,
    authority: Pubkey,
    state: VaultState,
    market: SerumMarket,
    group: ZetaGroup,
    programs: ProgramIds,
) -> Instruction:
    """Place a bid on group.products[product_index] from the vault's margin account."""
    executor = executor_address(state.address, programs.vault)
    accounts = [
        _meta(authority, signer=True),
        _meta(state.address),
        _meta(executor),
        _meta(state.usdc_vault, writable=True),
        _meta(zeta_state_address(programs.zeta)),
        _meta(group.address),
        _meta(margin_account_address(group.address, executor, programs.zeta), writable=True),
        _meta(greeks_address(group.address, programs.zeta)),
        _meta(group.oracle),
        _meta(serum_authority_address(programs.zeta)),
        _meta(
            open_orders_address(programs.zeta_dex, market.address, executor, programs.zeta),
            writable=True,
        ),
        _meta(market.address, writable=True),
        _meta(market.request_queue, writable=True),
        _meta(market.event_queue, writable=True),
        _meta(market.bids, writable=True),
        _meta(market.asks, writable=True),
        _meta(market.base_vault, writable=True),
        _meta(market.quote_vault, writable=True),
        _meta(programs.zeta_dex),
        _meta(programs.zeta),
        _meta(TOKEN_PROGRAM_ID),
        _meta(SYSVAR_RENT_PUBKEY),
    ]
    return Instruction(programs.vault, BID_ORDER + struct.pack("<B", product_index), accounts)


# =============================================================================
# SWAPS
# =============================================================================


def create_swap_to_underlying_ix(
    authority: Pubkey, state: VaultState, programs: ProgramIds
) -> Instruction:
    accounts = [
        _meta(authority, signer=True),
        _meta(state.address, writable=True),
        _meta(executor_address(state.address, programs.vault)),
        _meta(state.usdc_vault, writable=True),
        _meta(state.underlying_vault, writable=True),
        _meta(TOKEN_PROGRAM_ID),
    ]
    return Instruction(programs.vault, SWAP_TO_UNDERLYING, accounts)


def create_swap_to_usdc_ix(
    authority: Pubkey, state: VaultState, reserve: Reserve, programs: ProgramIds
) -> Instruction:
    accounts = [
        _meta(authority, signer=True),
        _meta(state.address, writable=True),
        _meta(executor_address(state.address, programs.vault)),
        _meta(state.underlying_vault, writable=True),
        _meta(state.usdc_vault, writable=True),
        _meta(reserve.liquidity.mint_pubkey),
        _meta(programs.usdc_mint),
        _meta(TOKEN_PROGRAM_ID),
    ]
    return Instruction(programs.vault, SWAP_TO_USDC, accounts)
