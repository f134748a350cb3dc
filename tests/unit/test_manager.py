"""
Vault Manager Unit Tests
========================
End-to-end through the facade: preload, compose, simulate, commit.

Run with: python -m pytest tests/unit/test_manager.py -v
"""

from unittest.mock import AsyncMock, patch

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from fuze.instructions.programs import LAMPORTS_PER_SOL, shares_mint_address
from fuze.vault.manager import Manager
from fuze.vault.types import (
    AccountNotFoundError,
    ExecutionMode,
    InvalidAmountError,
    ProductNotFoundError,
    Reserve,
    SubmissionError,
)


@pytest.fixture
def manager(world):
    return Manager(world.client, world.programs)


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_preload_then_validate(self, manager, world):
        mapping = await manager.preload()

        assert len(mapping) == 4
        assert isinstance(manager.validate(world.reserve), Reserve)
        with pytest.raises(AccountNotFoundError):
            manager.validate(Pubkey.new_unique())

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self, world):
        async with Manager(world.client, world.programs) as manager:
            assert manager.client is world.client

        assert world.client.closed

    @pytest.mark.asyncio
    async def test_devnet_airdrop(self, manager):
        target = Pubkey.new_unique()

        await manager.devnet_airdrop(2, target)

        assert manager.client.airdrops == [(target, 2 * LAMPORTS_PER_SOL)]


class TestOperations:

    @pytest.mark.asyncio
    async def test_bid_order_simulated(self, manager, world):
        await manager.preload()

        result = await manager.bid_order(150, "call", world.authority, world.vault, simulate=True)

        assert result.mode is ExecutionMode.SIMULATED
        assert result.fee_payer == str(world.authority.pubkey())
        assert world.client.sent == []

    @pytest.mark.asyncio
    async def test_bid_order_put_never_reaches_rpc(self, manager, world):
        await manager.preload()

        with pytest.raises(ProductNotFoundError):
            await manager.bid_order(150, "put", world.authority, world.vault)

        assert "get_latest_blockhash" not in world.client.calls

    @pytest.mark.asyncio
    async def test_deposit_committed(self, manager, world):
        await manager.preload()
        user = Keypair()

        result = await manager.deposit(
            1_000, user, Pubkey.new_unique(), Pubkey.new_unique(), world.vault
        )

        assert result.committed
        assert result.signature is not None
        assert result.fee_payer == str(user.pubkey())

    @pytest.mark.asyncio
    async def test_every_operation_routes_through_exec(self, manager, world):
        await manager.preload()
        auth, vault = world.authority, world.vault

        with patch.object(manager, "exec", AsyncMock(return_value="result")) as mock_exec:
            await manager.create_vault(0, 0, auth, world.reserve, world.group, simulate=True)
            await manager.withdraw(1, auth, Pubkey.new_unique(), Pubkey.new_unique(), vault, simulate=True)
            await manager.init_open_orders(auth, vault, world.call_market, simulate=True)
            await manager.harvest_yield(auth, vault, simulate=True)
            await manager.reinvest_zeta(auth, vault, simulate=True)
            await manager.reinvest_solend(1, auth, vault, simulate=True)
            await manager.redeem_zeta(1, auth, vault, simulate=True)
            await manager.swap_to_underlying(auth, vault, simulate=True)
            await manager.swap_to_usdc(auth, vault, simulate=True)

        assert mock_exec.await_count == 9
        for call in mock_exec.await_args_list:
            instructions, signers, simulate = call.args
            assert signers == [auth]
            assert simulate is True
            assert instructions

    @pytest.mark.asyncio
    async def test_submission_failure_propagates(self, manager, world):
        await manager.preload()
        world.client.send_exception = RuntimeError("connection reset")

        with pytest.raises(SubmissionError):
            await manager.harvest_yield(world.authority, world.vault)


class TestPreviewDeposit:

    @pytest.mark.asyncio
    async def test_first_depositor_gets_one_to_one(self, manager, world):
        await manager.preload()

        preview = await manager.preview_deposit(500, world.vault)

        assert preview.shares == 500
        assert preview.share_supply == 0
        assert not preview.exceeds_limit

    @pytest.mark.asyncio
    async def test_shares_follow_exchange_rate(self, manager, world):
        await manager.preload()
        world.client.set_token_supply(shares_mint_address(world.vault, world.programs.vault), 1_000)
        # reserve fixture: 1e9 liquidity over 1e9 cTokens, so 2_000 cTokens value 2_000
        world.client.set_token_balance(world.collateral_vault, 2_000)

        preview = await manager.preview_deposit(500, world.vault)

        assert preview.total_assets == 2_000
        assert preview.shares == 250

    @pytest.mark.asyncio
    async def test_flags_deposit_limit(self, manager, world):
        await manager.preload()

        preview = await manager.preview_deposit(10_000_000_001, world.vault)

        assert preview.exceeds_limit

    @pytest.mark.asyncio
    async def test_outstanding_shares_without_assets_are_unpriced(self, manager, world):
        await manager.preload()
        world.client.set_token_supply(shares_mint_address(world.vault, world.programs.vault), 1_000)

        preview = await manager.preview_deposit(500, world.vault)

        assert preview.total_assets == 0
        assert preview.shares is None
        assert not preview.priced

    @pytest.mark.asyncio
    async def test_accepts_base58_vault(self, manager, world):
        await manager.preload()

        preview = await manager.preview_deposit(500, str(world.vault))

        assert preview.shares == 500


class TestPreviewBidMargin:

    @pytest.mark.asyncio
    async def test_prices_the_product_bid_order_would_hit(self, manager, world):
        await manager.preload()

        preview = await manager.preview_bid_margin(150, world.vault, spot=10_000, mark=400)

        assert preview.market_index == 1
        assert preview.otm_amount == 0
        # long call: min(1.5% of spot, 50% of mark) = min(150, 200)
        assert preview.initial_margin == 150
        # maintenance: min(0.75% of spot, 50% of mark) = min(75, 200)
        assert preview.maintenance_margin == 75

    @pytest.mark.asyncio
    async def test_out_of_the_money_call(self, manager, world):
        await manager.preload()

        preview = await manager.preview_bid_margin(150, world.vault, spot=100, mark=8)

        assert preview.otm_amount == 50
        # min(1.5% of 100, 50% of 8) rounds down to 1
        assert preview.initial_margin == 1

    @pytest.mark.asyncio
    async def test_put_strike_not_tradeable(self, manager, world):
        await manager.preload()

        with pytest.raises(ProductNotFoundError):
            await manager.preview_bid_margin(100, world.vault, spot=10_000, mark=400, kind="put")

    @pytest.mark.asyncio
    async def test_rejects_zero_spot_before_rpc(self, manager, world):
        with pytest.raises(InvalidAmountError):
            await manager.preview_bid_margin(150, world.vault, spot=0, mark=400)
        assert world.client.calls == []
