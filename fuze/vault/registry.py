"""
Account Registry
================
Merged, read-only view of every protocol account the vault depends on.

Lifecycle:
    registry = AccountRegistry([serum_loader, solend_loader, zeta_loader])
    await registry.preload()               # run every loader, merge, swap in
    reserve = registry.reserve(address)    # kind-checked lookup

A lookup against an identity no loader contributed is a hard failure,
never a default. Re-running preload() builds a fresh mapping and swaps
it in whole; there are no partial updates.
"""

from __future__ import annotations

from typing import Dict, List, Sequence, Union

from solders.pubkey import Pubkey

from fuze.shared.system.logging import Logger
from fuze.vault.types import (
    AccountKind,
    AccountKindError,
    AccountNotFoundError,
    DecodedAccount,
    Reserve,
    SerumMarket,
    ZetaGroup,
)

Identity = Union[Pubkey, str]


class AccountRegistry:
    """
    Identity -> decoded account mapping fed by the protocol loaders.

    No locking: preload() must finish before lookups start, after which
    the mapping is only read.
    """

    def __init__(self, loaders: Sequence = ()):
        self.loaders = list(loaders)
        self._accounts: Dict[str, DecodedAccount] = {}
        self._loaded = False
        self.collisions: List[str] = []

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def preload(self) -> Dict[str, DecodedAccount]:
        """Run every loader in order and replace the current mapping."""
        merged: Dict[str, DecodedAccount] = {}
        collisions: List[str] = []

        for loader in self.loaders:
            mapping = await loader.preload()
            for identity, account in mapping.items():
                if identity in merged:
                    collisions.append(identity)
                    Logger.warning(
                        f"[REGISTRY] {identity} contributed twice "
                        f"({merged[identity].kind.value} -> {account.kind.value}), keeping the later one"
                    )
                merged[identity] = account

        self._accounts = merged
        self.collisions = collisions
        self._loaded = True
        Logger.info(f"[REGISTRY] Preloaded {len(merged)} accounts from {len(self.loaders)} loaders")
        return merged

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def validate(self, identity: Identity) -> DecodedAccount:
        """Return the stored account for `identity` or raise AccountNotFoundError."""
        key = str(identity)
        account = self._accounts.get(key)
        if account is None:
            if not self._loaded:
                raise AccountNotFoundError(
                    key, f"account {key} not found (registry was never preloaded)"
                )
            raise AccountNotFoundError(key)
        return account

    def _typed(self, identity: Identity, expected: AccountKind) -> DecodedAccount:
        account = self.validate(identity)
        if account.kind is not expected:
            raise AccountKindError(str(identity), expected, account.kind)
        return account

    def reserve(self, identity: Identity) -> Reserve:
        return self._typed(identity, AccountKind.RESERVE)

    def zeta_group(self, identity: Identity) -> ZetaGroup:
        return self._typed(identity, AccountKind.ZETA_GROUP)

    def serum_market(self, identity: Identity) -> SerumMarket:
        return self._typed(identity, AccountKind.SERUM_MARKET)

    def __contains__(self, identity: object) -> bool:
        return str(identity) in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)
