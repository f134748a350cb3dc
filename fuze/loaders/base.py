"""
Protocol Loader Base
====================
Fetches every account of one program with getProgramAccounts and
decodes the ones it understands.

Subclasses supply `filters()` (server-side narrowing) and `decode()`
(raw bytes -> typed account). Accounts that fail to decode are skipped
and counted, one bad account never aborts a preload.
"""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solders.pubkey import Pubkey

from fuze.shared.system.logging import Logger
from fuze.vault.types import DecodedAccount


def read_pubkey(data: bytes, offset: int) -> Pubkey:
    return Pubkey.from_bytes(data[offset:offset + 32])


def read_u128(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset:offset + 16], "little")


class AccountLoader(ABC):
    """
    Base class for the three protocol loaders.

    Usage:
        loader = SolendLoader(client, solend_program_id)
        reserves = await loader.preload()   # {address: Reserve}
    """

    NAME = "LOADER"

    def __init__(
        self,
        client: AsyncClient,
        program_id: Pubkey,
        commitment: Commitment = Confirmed,
    ):
        self.client = client
        self.program_id = program_id
        self.commitment = commitment
        self.skipped = 0

    def filters(self) -> List[Any]:
        """getProgramAccounts filters (data sizes or MemcmpOpts)."""
        return []

    @abstractmethod
    def decode(self, address: Pubkey, data: bytes) -> DecodedAccount:
        """Decode one account or raise ValueError / struct.error."""

    async def preload(self) -> Dict[str, DecodedAccount]:
        """Fetch and decode every matching account of the program."""
        resp = await self.client.get_program_accounts(
            self.program_id,
            commitment=self.commitment,
            encoding="base64",
            filters=self.filters(),
        )

        accounts: Dict[str, DecodedAccount] = {}
        skipped = 0
        for keyed in resp.value:
            try:
                decoded = self.decode(keyed.pubkey, bytes(keyed.account.data))
            except (ValueError, struct.error) as e:
                skipped += 1
                Logger.warning(f"[{self.NAME}] Skipping {keyed.pubkey}: {e}")
                continue
            accounts[str(keyed.pubkey)] = decoded

        self.skipped = skipped
        Logger.info(f"[{self.NAME}] Loaded {len(accounts)} accounts ({skipped} skipped)")
        return accounts
