"""
Fuze Test Mocks
===============
Fake RPC client and raw account builders for isolated testing.
"""

from tests.mocks.accounts import (
    market_bytes,
    reserve_bytes,
    vault_bytes,
    zeta_group_bytes,
)
from tests.mocks.mock_rpc import MockRpcClient

__all__ = [
    "MockRpcClient",
    "market_bytes",
    "reserve_bytes",
    "vault_bytes",
    "zeta_group_bytes",
]
