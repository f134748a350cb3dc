"""
Unit Test Configuration
=======================
Fixtures for pure logic tests - NO I/O ALLOWED.

All unit tests should be completely isolated from:
- Network (RPC, HTTP)
- File system (except tmp_path and the session log)

Protocol accounts are served by MockRpcClient from byte images built in
tests/mocks/accounts.py, so decoders run on realistic data.
"""

from types import SimpleNamespace

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from fuze.instructions.programs import ProgramIds, vault_address
from fuze.vault.types import Kind
from tests.mocks import (
    MockRpcClient,
    market_bytes,
    reserve_bytes,
    vault_bytes,
    zeta_group_bytes,
)


# ============================================================================
# AUTOUSE: ENFORCE I/O ISOLATION
# ============================================================================


@pytest.fixture(autouse=True)
def isolate_unit_tests(monkeypatch):
    """
    Disable the HTTP transport under solana-py's AsyncClient.
    Any test that accidentally tries to reach an RPC node will fail.
    """
    def block_network(*args, **kwargs):
        raise RuntimeError(
            "Network I/O detected in unit test! "
            "Unit tests must run against MockRpcClient."
        )

    monkeypatch.setattr("httpx.AsyncClient.get", block_network)
    monkeypatch.setattr("httpx.AsyncClient.post", block_network)


# ============================================================================
# PROGRAMS & ACCOUNTS
# ============================================================================


@pytest.fixture
def programs():
    """Throwaway program ids so no test depends on a real deployment."""
    return ProgramIds(
        vault=Pubkey.new_unique(),
        zeta=Pubkey.new_unique(),
        zeta_dex=Pubkey.new_unique(),
        solend=Pubkey.new_unique(),
        usdc_mint=Pubkey.new_unique(),
    )


@pytest.fixture
def world(programs):
    """
    A complete on-chain setup behind a MockRpcClient:

    - one Solend reserve
    - one Zeta group with products [put@100, call@150]
    - the two Serum markets those products trade on
    - a live vault over (reserve, group) owned by `authority`
    """
    client = MockRpcClient()
    authority = Keypair()

    reserve_key = Pubkey.new_unique()
    group_key = Pubkey.new_unique()
    put_market = Pubkey.new_unique()
    call_market = Pubkey.new_unique()
    collateral_vault = Pubkey.new_unique()
    vault_key = vault_address(reserve_key, authority.pubkey(), programs.vault)

    client.set_program_accounts(programs.solend, [(reserve_key, reserve_bytes())])
    client.set_program_accounts(
        programs.zeta_dex,
        [
            (put_market, market_bytes(own_address=put_market)),
            (call_market, market_bytes(own_address=call_market)),
        ],
    )
    client.set_program_accounts(
        programs.zeta,
        [
            (
                group_key,
                zeta_group_bytes(
                    products=[(put_market, 100, Kind.PUT), (call_market, 150, Kind.CALL)]
                ),
            )
        ],
    )
    client.set_account_info(
        vault_key,
        vault_bytes(
            authority.pubkey(),
            reserve_key,
            group_key,
            collateral_vault=collateral_vault,
        ),
        owner=programs.vault,
    )

    return SimpleNamespace(
        client=client,
        programs=programs,
        authority=authority,
        reserve=reserve_key,
        group=group_key,
        put_market=put_market,
        call_market=call_market,
        collateral_vault=collateral_vault,
        vault=vault_key,
    )
