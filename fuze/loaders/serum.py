"""
Serum Market Loader
===================
Decodes Serum v3 MarketState accounts (388 bytes) owned by the DEX
program Zeta lists its option markets on.

Layout:
    0     b"serum" head padding
    5     account_flags u64
    13    own_address Pubkey
    45    vault_signer_nonce u64
    53    base_mint Pubkey
    85    quote_mint Pubkey
    117   base_vault Pubkey
    149   base_deposits_total u64
    157   base_fees_accrued u64
    165   quote_vault Pubkey
    197   quote_deposits_total u64
    205   quote_fees_accrued u64
    213   quote_dust_threshold u64
    221   request_queue Pubkey
    253   event_queue Pubkey
    285   bids Pubkey
    317   asks Pubkey
    349   base_lot_size u64
    357   quote_lot_size u64
    365   fee_rate_bps u64
    373   referrer_rebates_accrued u64
    381   b"padding" tail padding
"""

from __future__ import annotations

import struct
from typing import Any, List

from solders.pubkey import Pubkey

from fuze.loaders.base import AccountLoader, read_pubkey
from fuze.vault.types import SerumMarket

MARKET_STATE_LEN = 388
HEAD_PADDING = b"serum"
TAIL_PADDING = b"padding"

FLAG_INITIALIZED = 1 << 0
FLAG_MARKET = 1 << 1


def decode_market(address: Pubkey, data: bytes) -> SerumMarket:
    if len(data) != MARKET_STATE_LEN:
        raise ValueError(f"market must be {MARKET_STATE_LEN} bytes, got {len(data)}")
    if data[:5] != HEAD_PADDING or data[-7:] != TAIL_PADDING:
        raise ValueError("missing serum padding")

    flags = struct.unpack_from("<Q", data, 5)[0]
    if flags & (FLAG_INITIALIZED | FLAG_MARKET) != (FLAG_INITIALIZED | FLAG_MARKET):
        raise ValueError(f"not an initialized market (flags={flags:#x})")

    return SerumMarket(
        address=address,
        account_flags=flags,
        own_address=read_pubkey(data, 13),
        vault_signer_nonce=struct.unpack_from("<Q", data, 45)[0],
        base_mint=read_pubkey(data, 53),
        quote_mint=read_pubkey(data, 85),
        base_vault=read_pubkey(data, 117),
        quote_vault=read_pubkey(data, 165),
        request_queue=read_pubkey(data, 221),
        event_queue=read_pubkey(data, 253),
        bids=read_pubkey(data, 285),
        asks=read_pubkey(data, 317),
        base_lot_size=struct.unpack_from("<Q", data, 349)[0],
        quote_lot_size=struct.unpack_from("<Q", data, 357)[0],
        fee_rate_bps=struct.unpack_from("<Q", data, 365)[0],
    )


class SerumLoader(AccountLoader):
    """Loads every market of the configured DEX program."""

    NAME = "SERUM"

    def filters(self) -> List[Any]:
        return [MARKET_STATE_LEN]

    def decode(self, address: Pubkey, data: bytes) -> SerumMarket:
        return decode_market(address, data)
