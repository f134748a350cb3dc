"""
Vault Manager
=============
Facade over the registry, composer and executor. One async method per
vault operation, each ending in the single execution primitive exec().

Usage:
    async with Manager.from_settings() as manager:
        await manager.preload()
        result = await manager.deposit(1_000_000, user, token_acc, shares_acc, vault,
                                       simulate=True)
        print(result.simulation.logs)
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from config.settings import Settings
from fuze.instructions.programs import LAMPORTS_PER_SOL, ProgramIds, shares_mint_address
from fuze.loaders import SerumLoader, SolendLoader, ZetaMarketsLoader
from fuze.shared.system.logging import Logger
from fuze.vault.composer import (
    InstructionComposer,
    as_pubkey,
    check_amount,
    select_call_product,
)
from fuze.vault.executor import TransactionExecutor
from fuze.vault.math import (
    initial_margin_per_lot,
    maintenance_margin_per_lot,
    otm_amount,
    shares_for_deposit,
)
from fuze.vault.registry import AccountRegistry, Identity
from fuze.vault.state import fetch_vault_state
from fuze.vault.types import (
    DecodedAccount,
    DepositPreview,
    ExecutionResult,
    Kind,
    MarginPreview,
    Side,
)


class Manager:
    """
    Orchestrates Serum, Solend and Zeta accounts for the vault program.

    The registry is owned by this instance; call preload() once before any
    operation that resolves protocol accounts.
    """

    def __init__(
        self,
        client: AsyncClient,
        programs: Optional[ProgramIds] = None,
        loaders: Optional[Sequence] = None,
        commitment: Commitment = Confirmed,
    ):
        self.client = client
        self.programs = programs or ProgramIds.from_settings()
        self.commitment = commitment

        if loaders is None:
            loaders = [
                SerumLoader(client, self.programs.zeta_dex, commitment),
                SolendLoader(client, self.programs.solend, commitment),
                ZetaMarketsLoader(client, self.programs.zeta, commitment),
            ]
        self.registry = AccountRegistry(loaders)
        self.composer = InstructionComposer(client, self.registry, self.programs, commitment)
        self.executor = TransactionExecutor(client, commitment)

    @classmethod
    def from_settings(cls) -> "Manager":
        """Manager on Settings.RPC_URL with the configured program set."""
        client = AsyncClient(
            Settings.RPC_URL,
            commitment=Commitment(Settings.COMMITMENT),
            timeout=Settings.RPC_TIMEOUT_S,
        )
        Logger.info(f"[MANAGER] RPC {Settings.RPC_URL} ({Settings.COMMITMENT})")
        return cls(client, ProgramIds.from_settings(), commitment=Commitment(Settings.COMMITMENT))

    async def __aenter__(self) -> "Manager":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.client.close()

    # =========================================================================
    # REGISTRY
    # =========================================================================

    async def preload(self):
        return await self.registry.preload()

    def validate(self, identity: Identity) -> DecodedAccount:
        return self.registry.validate(identity)

    # =========================================================================
    # EXECUTION
    # =========================================================================

    async def exec(
        self,
        instructions: List[Instruction],
        signers: Sequence[Keypair],
        simulate: bool = False,
    ) -> ExecutionResult:
        return await self.executor.execute(instructions, signers, simulate)

    async def devnet_airdrop(self, sol: Union[int, float], address: Pubkey):
        """Request `sol` SOL for `address`. Devnet/localnet only."""
        lamports = int(sol * LAMPORTS_PER_SOL)
        Logger.info(f"[MANAGER] Airdrop {sol} SOL -> {str(address)[:8]}...")
        return await self.client.request_airdrop(address, lamports, self.commitment)

    async def preview_deposit(self, amount: int, vault: Identity) -> DepositPreview:
        """
        Estimate the shares a deposit would mint.

        total_assets is the collateral vault's cToken balance valued at the
        reserve's current exchange rate. Informational only, the vault program
        computes the real figure. When shares are outstanding but the
        collateral is worth nothing the rate is undefined and shares is None.
        """
        check_amount("amount", amount)
        vault_key = as_pubkey(vault)
        state = await fetch_vault_state(
            self.client, vault_key, self.programs.vault, self.commitment
        )
        reserve = self.registry.reserve(state.reserve)

        mint = shares_mint_address(vault_key, self.programs.vault)
        supply_resp = await self.client.get_token_supply(mint, self.commitment)
        balance_resp = await self.client.get_token_account_balance(
            state.collateral_vault, self.commitment
        )
        share_supply = int(supply_resp.value.amount)
        total_assets = reserve.collateral_to_liquidity(int(balance_resp.value.amount))

        try:
            shares: Optional[int] = shares_for_deposit(amount, share_supply, total_assets)
        except ValueError as e:
            Logger.warning(f"[MANAGER] Deposit preview unpriced: {e}")
            shares = None

        return DepositPreview(
            amount=amount,
            shares=shares,
            total_assets=total_assets,
            share_supply=share_supply,
            exceeds_limit=state.total_deposit + amount > state.deposit_limit,
        )

    async def preview_bid_margin(
        self,
        strike: int,
        vault: Identity,
        spot: int,
        mark: int,
        kind: Union[Kind, str] = Kind.CALL,
    ) -> MarginPreview:
        """
        Margin one lot of bid_order(strike, kind) would need on Zeta.

        Resolves the product exactly as bid_order does and prices it with the
        group's margin parameters. spot and mark are supplied by the caller in
        the same native units as the product strikes.
        """
        check_amount("spot", spot)
        check_amount("mark", mark)
        state = await fetch_vault_state(
            self.client, as_pubkey(vault), self.programs.vault, self.commitment
        )
        group = self.registry.zeta_group(state.zeta_group)
        index, product = select_call_product(group, strike, kind)
        params = group.margin_parameters

        return MarginPreview(
            strike=strike,
            market_index=index,
            spot=spot,
            mark=mark,
            otm_amount=otm_amount(spot, strike, product.kind),
            initial_margin=initial_margin_per_lot(
                spot, strike, mark, product.kind, Side.BID, params
            ),
            maintenance_margin=maintenance_margin_per_lot(
                spot, strike, mark, product.kind, True, params
            ),
        )

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    async def create_vault(
        self,
        deposit_limit: int,
        management_fee_bps: int,
        authority: Keypair,
        reserve: Identity,
        group: Identity,
        simulate: bool = False,
    ) -> ExecutionResult:
        ixs = await self.composer.create_vault(
            deposit_limit, management_fee_bps, authority.pubkey(), reserve, group
        )
        return await self.exec(ixs, [authority], simulate)

    async def deposit(
        self,
        amount: int,
        user: Keypair,
        user_token_account: Pubkey,
        user_shares_account: Pubkey,
        vault: Identity,
        simulate: bool = False,
    ) -> ExecutionResult:
        ixs = await self.composer.deposit(
            amount, user.pubkey(), user_token_account, user_shares_account, vault
        )
        return await self.exec(ixs, [user], simulate)

    async def withdraw(
        self,
        amount: int,
        user: Keypair,
        user_token_account: Pubkey,
        user_shares_account: Pubkey,
        vault: Identity,
        simulate: bool = False,
    ) -> ExecutionResult:
        ixs = await self.composer.withdraw(
            amount, user.pubkey(), user_token_account, user_shares_account, vault
        )
        return await self.exec(ixs, [user], simulate)

    async def init_open_orders(
        self, authority: Keypair, vault: Identity, market: Identity, simulate: bool = False
    ) -> ExecutionResult:
        ixs = await self.composer.init_open_orders(authority.pubkey(), vault, market)
        return await self.exec(ixs, [authority], simulate)

    async def harvest_yield(
        self, authority: Keypair, vault: Identity, simulate: bool = False
    ) -> ExecutionResult:
        ixs = await self.composer.harvest_yield(authority.pubkey(), vault)
        return await self.exec(ixs, [authority], simulate)

    async def reinvest_zeta(
        self, authority: Keypair, vault: Identity, simulate: bool = False
    ) -> ExecutionResult:
        ixs = await self.composer.reinvest_zeta(authority.pubkey(), vault)
        return await self.exec(ixs, [authority], simulate)

    async def reinvest_solend(
        self, amount: int, authority: Keypair, vault: Identity, simulate: bool = False
    ) -> ExecutionResult:
        ixs = await self.composer.reinvest_solend(amount, authority.pubkey(), vault)
        return await self.exec(ixs, [authority], simulate)

    async def bid_order(
        self,
        strike: int,
        kind: Union[Kind, str],
        authority: Keypair,
        vault: Identity,
        simulate: bool = False,
    ) -> ExecutionResult:
        ixs = await self.composer.bid_order(strike, kind, authority.pubkey(), vault)
        return await self.exec(ixs, [authority], simulate)

    async def redeem_zeta(
        self, amount: int, authority: Keypair, vault: Identity, simulate: bool = False
    ) -> ExecutionResult:
        ixs = await self.composer.redeem_zeta(amount, authority.pubkey(), vault)
        return await self.exec(ixs, [authority], simulate)

    async def swap_to_underlying(
        self, authority: Keypair, vault: Identity, simulate: bool = False
    ) -> ExecutionResult:
        ixs = await self.composer.swap_to_underlying(authority.pubkey(), vault)
        return await self.exec(ixs, [authority], simulate)

    async def swap_to_usdc(
        self, authority: Keypair, vault: Identity, simulate: bool = False
    ) -> ExecutionResult:
        ixs = await self.composer.swap_to_usdc(authority.pubkey(), vault)
        return await self.exec(ixs, [authority], simulate)
