"""
Instruction Composer
====================
Turns a vault operation into the ordered instruction list of one atomic
transaction.

Every routine:
1. reads the vault account fresh (fetch_vault_state, never the registry)
2. resolves the protocol accounts it needs through the registry's typed
   accessors, failing fast on anything missing
3. returns List[Instruction] in execution order

Nothing here signs or sends.
"""

from __future__ import annotations

from typing import List, Tuple, Union

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solders.instruction import Instruction
from solders.pubkey import Pubkey

from fuze.instructions import vault as vault_ix
from fuze.instructions.programs import ACTIVE_EXPIRIES, ProgramIds
from fuze.instructions.zeta import create_update_pricing_ix
from fuze.shared.system.logging import Logger
from fuze.vault.math import split_market_index
from fuze.vault.registry import AccountRegistry, Identity
from fuze.vault.state import fetch_vault_state
from fuze.vault.types import (
    InvalidAmountError,
    Kind,
    Product,
    ProductNotFoundError,
    VaultState,
    ZetaGroup,
)

MAX_FEE_BPS = 10_000
U64_MAX = 2**64 - 1


def as_pubkey(identity: Identity) -> Pubkey:
    """Pubkey from either a Pubkey or its base58 string."""
    if isinstance(identity, Pubkey):
        return identity
    return Pubkey.from_string(identity)


def check_amount(name: str, amount: int) -> int:
    # bool is an int subclass; True is not a quantity
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(f"{name} must be an integer, got {type(amount).__name__}")
    if amount <= 0:
        raise InvalidAmountError(f"{name} must be positive, got {amount}")
    if amount > U64_MAX:
        raise InvalidAmountError(f"{name} does not fit in u64: {amount}")
    return amount


def select_call_product(
    group: ZetaGroup, strike: int, kind: Union[Kind, str, int]
) -> Tuple[int, Product]:
    """
    First product of `group` whose strike is set, equals `strike` and is a call.

    Only calls are tradeable through bid_order: a request for any other kind
    never matches. Raises ProductNotFoundError when nothing matches.
    """
    requested = Kind.parse(kind)
    if requested is Kind.CALL:
        for index, product in enumerate(group.products):
            if (
                product.strike.is_set
                and product.strike.value == strike
                and product.kind is Kind.CALL
            ):
                return index, product
    raise ProductNotFoundError(str(group.address), strike, requested)


class InstructionComposer:
    """
    One async routine per vault operation.

    Usage:
        composer = InstructionComposer(client, registry, ProgramIds.from_settings())
        ixs = await composer.deposit(1_000_000, user, user_token, user_shares, vault)
    """

    def __init__(
        self,
        client: AsyncClient,
        registry: AccountRegistry,
        programs: ProgramIds,
        commitment: Commitment = Confirmed,
    ):
        self.client = client
        self.registry = registry
        self.programs = programs
        self.commitment = commitment

    async def _vault(self, vault: Identity) -> VaultState:
        return await fetch_vault_state(
            self.client, as_pubkey(vault), self.programs.vault, self.commitment
        )

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def create_vault(
        self,
        deposit_limit: int,
        management_fee_bps: int,
        authority: Pubkey,
        reserve: Identity,
        group: Identity,
    ) -> List[Instruction]:
        if isinstance(deposit_limit, bool) or not isinstance(deposit_limit, int):
            raise InvalidAmountError("deposit_limit must be an integer")
        if not 0 <= deposit_limit <= U64_MAX:
            raise InvalidAmountError(f"deposit_limit out of range: {deposit_limit}")
        if isinstance(management_fee_bps, bool) or not isinstance(management_fee_bps, int):
            raise InvalidAmountError("management_fee_bps must be an integer")
        if not 0 <= management_fee_bps <= MAX_FEE_BPS:
            raise InvalidAmountError(
                f"management_fee_bps must be within [0, {MAX_FEE_BPS}], got {management_fee_bps}"
            )

        reserve_account = self.registry.reserve(reserve)
        group_account = self.registry.zeta_group(group)
        Logger.info(
            f"[COMPOSER] create_vault reserve={str(reserve_account.address)[:8]}... "
            f"limit={deposit_limit} fee={management_fee_bps}bps"
        )
        return [
            vault_ix.create_initialize_ix(
                deposit_limit,
                management_fee_bps,
                authority,
                group_account,
                reserve_account,
                self.programs,
            )
        ]

    # =========================================================================
    # USER FLOWS
    # =========================================================================

    async def deposit(
        self,
        amount: int,
        user: Pubkey,
        user_token_account: Pubkey,
        user_shares_account: Pubkey,
        vault: Identity,
    ) -> List[Instruction]:
        check_amount("amount", amount)
        state = await self._vault(vault)
        reserve = self.registry.reserve(state.reserve)
        return [
            vault_ix.create_deposit_ix(
                amount, user, user_token_account, user_shares_account, state, reserve, self.programs
            )
        ]

    async def withdraw(
        self,
        amount: int,
        user: Pubkey,
        user_token_account: Pubkey,
        user_shares_account: Pubkey,
        vault: Identity,
    ) -> List[Instruction]:
        check_amount("amount", amount)
        state = await self._vault(vault)
        reserve = self.registry.reserve(state.reserve)
        return [
            vault_ix.create_withdraw_ix(
                amount, user, user_token_account, user_shares_account, state, reserve, self.programs
            )
        ]

    # =========================================================================
    # AUTHORITY FLOWS
    # =========================================================================

    async def init_open_orders(
        self, authority: Pubkey, vault: Identity, market: Identity
    ) -> List[Instruction]:
        state = await self._vault(vault)
        group = self.registry.zeta_group(state.zeta_group)
        serum_market = self.registry.serum_market(market)
        return [
            vault_ix.create_init_open_orders_ix(
                authority, state, serum_market, group, self.programs
            )
        ]

    async def harvest_yield(self, authority: Pubkey, vault: Identity) -> List[Instruction]:
        state = await self._vault(vault)
        reserve = self.registry.reserve(state.reserve)
        return [vault_ix.create_harvest_yield_ix(authority, state, reserve, self.programs)]

    async def reinvest_solend(
        self, amount: int, authority: Pubkey, vault: Identity
    ) -> List[Instruction]:
        check_amount("amount", amount)
        state = await self._vault(vault)
        reserve = self.registry.reserve(state.reserve)
        return [
            vault_ix.create_reinvest_solend_ix(amount, authority, state, reserve, self.programs)
        ]

    async def reinvest_zeta(self, authority: Pubkey, vault: Identity) -> List[Instruction]:
        state = await self._vault(vault)
        group = self.registry.zeta_group(state.zeta_group)
        return [vault_ix.create_reinvest_zeta_ix(authority, state, group, self.programs)]

    async def redeem_zeta(
        self, amount: int, authority: Pubkey, vault: Identity
    ) -> List[Instruction]:
        check_amount("amount", amount)
        state = await self._vault(vault)
        group = self.registry.zeta_group(state.zeta_group)
        return [vault_ix.create_redeem_zeta_ix(amount, authority, state, group, self.programs)]

    async def swap_to_underlying(self, authority: Pubkey, vault: Identity) -> List[Instruction]:
        state = await self._vault(vault)
        return [vault_ix.create_swap_to_underlying_ix(authority, state, self.programs)]

    async def swap_to_usdc(self, authority: Pubkey, vault: Identity) -> List[Instruction]:
        state = await self._vault(vault)
        reserve = self.registry.reserve(state.reserve)
        return [vault_ix.create_swap_to_usdc_ix(authority, state, reserve, self.programs)]

    async def bid_order(
        self,
        strike: int,
        kind: Union[Kind, str, int],
        authority: Pubkey,
        vault: Identity,
    ) -> List[Instruction]:
        """
        Refresh Zeta pricing for both live expiries, then bid on the call
        product at `strike`.

        Product selection happens before any instruction is built, so a
        missing strike yields ProductNotFoundError and no instructions.
        """
        state = await self._vault(vault)
        group = self.registry.zeta_group(state.zeta_group)
        index, product = select_call_product(group, strike, kind)
        market = self.registry.serum_market(product.market)

        expiry, slot = split_market_index(index)
        Logger.info(
            f"[COMPOSER] bid_order strike={strike} -> product {index} "
            f"(expiry {expiry}, slot {slot}) market={str(market.address)[:8]}..."
        )

        instructions = [
            create_update_pricing_ix(expiry_index, group, self.programs.zeta)
            for expiry_index in range(ACTIVE_EXPIRIES)
        ]
        instructions.append(
            vault_ix.create_bid_order_ix(index, authority, state, market, group, self.programs)
        )
        return instructions
