"""
Zeta Markets Group Loader
=========================
Decodes ZetaGroup accounts (Anchor zero-copy, 8-byte discriminator).

Layout (offsets used here):
    0     discriminator [8]
    8     nonce u8
    9     vault_nonce u8
    10    insurance_vault_nonce u8
    11    front_expiry_index u8
    12    underlying_mint Pubkey
    44    oracle Pubkey
    76    greeks Pubkey
    108   margin_parameters 11 x u64
    196   products [Product; 46], 43 bytes each:
              market Pubkey | strike.is_set u8 | strike.value u64 | dirty u8 | kind u8
"""

from __future__ import annotations

import struct
from typing import Any, List

import base58
from solana.rpc.types import MemcmpOpts
from solders.pubkey import Pubkey

from fuze.instructions.programs import ACTIVE_MARKETS, account_discriminator
from fuze.loaders.base import AccountLoader, read_pubkey
from fuze.vault.types import Kind, MarginParameters, Product, Strike, ZetaGroup

ZETA_GROUP_DISCRIMINATOR = account_discriminator("ZetaGroup")

MARGIN_PARAMETERS_OFFSET = 108
MARGIN_PARAMETERS_COUNT = 11
PRODUCTS_OFFSET = MARGIN_PARAMETERS_OFFSET + 8 * MARGIN_PARAMETERS_COUNT
PRODUCT_LEN = 43
ZETA_GROUP_MIN_LEN = PRODUCTS_OFFSET + PRODUCT_LEN * ACTIVE_MARKETS


def decode_product(data: bytes, offset: int) -> Product:
    return Product(
        market=read_pubkey(data, offset),
        strike=Strike(
            is_set=bool(data[offset + 32]),
            value=struct.unpack_from("<Q", data, offset + 33)[0],
        ),
        dirty=bool(data[offset + 41]),
        kind=Kind(data[offset + 42]),
    )


def decode_zeta_group(address: Pubkey, data: bytes) -> ZetaGroup:
    if data[:8] != ZETA_GROUP_DISCRIMINATOR:
        raise ValueError("not a ZetaGroup account")
    if len(data) < ZETA_GROUP_MIN_LEN:
        raise ValueError(f"zeta group must be at least {ZETA_GROUP_MIN_LEN} bytes, got {len(data)}")

    margin_parameters = MarginParameters(
        *struct.unpack_from(f"<{MARGIN_PARAMETERS_COUNT}Q", data, MARGIN_PARAMETERS_OFFSET)
    )
    products = [
        decode_product(data, PRODUCTS_OFFSET + i * PRODUCT_LEN)
        for i in range(ACTIVE_MARKETS)
    ]
    return ZetaGroup(
        address=address,
        nonce=data[8],
        vault_nonce=data[9],
        insurance_vault_nonce=data[10],
        front_expiry_index=data[11],
        underlying_mint=read_pubkey(data, 12),
        oracle=read_pubkey(data, 44),
        greeks=read_pubkey(data, 76),
        margin_parameters=margin_parameters,
        products=products,
    )


class ZetaMarketsLoader(AccountLoader):
    """Loads every ZetaGroup of the Zeta program."""

    NAME = "ZETA"

    def filters(self) -> List[Any]:
        return [MemcmpOpts(offset=0, bytes=base58.b58encode(ZETA_GROUP_DISCRIMINATOR).decode())]

    def decode(self, address: Pubkey, data: bytes) -> ZetaGroup:
        return decode_zeta_group(address, data)
