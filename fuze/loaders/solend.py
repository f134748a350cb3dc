"""
Solend Reserve Loader
=====================
Decodes Solend v1 Reserve accounts (619 bytes).

Layout (offsets used here):
    0     version u8
    1     last_update.slot u64
    9     last_update.stale u8
    10    lending_market Pubkey
    42    liquidity.mint_pubkey Pubkey
    74    liquidity.mint_decimals u8
    75    liquidity.supply_pubkey Pubkey
    107   liquidity.pyth_oracle Pubkey
    139   liquidity.switchboard_oracle Pubkey
    171   liquidity.available_amount u64
    179   liquidity.borrowed_amount_wads u128
    195   liquidity.cumulative_borrow_rate_wads u128
    211   liquidity.market_price u128
    227   collateral.mint_pubkey Pubkey
    259   collateral.mint_total_supply u64
    267   collateral.supply_pubkey Pubkey
"""

from __future__ import annotations

import struct
from typing import Any, List

from solders.pubkey import Pubkey

from fuze.loaders.base import AccountLoader, read_pubkey, read_u128
from fuze.vault.types import Reserve, ReserveCollateral, ReserveLiquidity

RESERVE_LEN = 619
RESERVE_VERSION = 1


def decode_reserve(address: Pubkey, data: bytes) -> Reserve:
    if len(data) != RESERVE_LEN:
        raise ValueError(f"reserve must be {RESERVE_LEN} bytes, got {len(data)}")
    version = data[0]
    if version != RESERVE_VERSION:
        raise ValueError(f"unsupported reserve version {version}")

    liquidity = ReserveLiquidity(
        mint_pubkey=read_pubkey(data, 42),
        mint_decimals=data[74],
        supply_pubkey=read_pubkey(data, 75),
        pyth_oracle=read_pubkey(data, 107),
        switchboard_oracle=read_pubkey(data, 139),
        available_amount=struct.unpack_from("<Q", data, 171)[0],
        borrowed_amount_wads=read_u128(data, 179),
        cumulative_borrow_rate_wads=read_u128(data, 195),
        market_price=read_u128(data, 211),
    )
    collateral = ReserveCollateral(
        mint_pubkey=read_pubkey(data, 227),
        mint_total_supply=struct.unpack_from("<Q", data, 259)[0],
        supply_pubkey=read_pubkey(data, 267),
    )
    return Reserve(
        address=address,
        version=version,
        last_update_slot=struct.unpack_from("<Q", data, 1)[0],
        stale=bool(data[9]),
        lending_market=read_pubkey(data, 10),
        liquidity=liquidity,
        collateral=collateral,
    )


class SolendLoader(AccountLoader):
    """Loads every reserve of the Solend program."""

    NAME = "SOLEND"

    def filters(self) -> List[Any]:
        return [RESERVE_LEN]

    def decode(self, address: Pubkey, data: bytes) -> Reserve:
        return decode_reserve(address, data)
