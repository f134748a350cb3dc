"""
Mock RPC Client
===============
Fake solana-py AsyncClient for testing without network calls.

Responses are SimpleNamespace objects shaped like solana-py's typed
responses (`resp.value...`), so production code reads them unchanged.
"""

from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Tuple

from solders.hash import Hash
from solders.pubkey import Pubkey


class MockRpcClient:
    """
    Mock Solana AsyncClient.

    Usage:
        client = MockRpcClient()
        client.set_account_info(vault, vault_bytes(...), owner=program_id)
        client.set_program_accounts(solend_id, [(reserve_key, reserve_bytes(...))])
        resp = await client.get_account_info(vault)
    """

    def __init__(self):
        self._accounts: Dict[str, Tuple[bytes, Pubkey]] = {}
        self._program_accounts: Dict[str, List[Tuple[Pubkey, bytes]]] = {}
        self._token_supply: Dict[str, int] = {}
        self._token_balances: Dict[str, int] = {}
        self.blockhash = Hash.new_unique()

        # Configurable behavior
        self.simulation_err: Optional[Any] = None
        self.simulation_logs: List[str] = ["Program log: Mock simulation success"]
        self.simulation_units = 50_000
        self.simulate_exception: Optional[Exception] = None
        self.send_exception: Optional[Exception] = None

        # State tracking for testing
        self.calls: List[str] = []
        self.program_account_requests: List[Dict[str, Any]] = []
        self.simulated: List[Any] = []
        self.sent: List[Any] = []
        self.airdrops: List[Tuple[Pubkey, int]] = []
        self.closed = False

    # =========================================================================
    # SETUP
    # =========================================================================

    def set_account_info(self, pubkey: Pubkey, data: bytes, owner: Pubkey) -> None:
        self._accounts[str(pubkey)] = (data, owner)

    def set_program_accounts(self, program_id: Pubkey, accounts: List[Tuple[Pubkey, bytes]]) -> None:
        self._program_accounts[str(program_id)] = list(accounts)

    def set_token_supply(self, mint: Pubkey, amount: int) -> None:
        self._token_supply[str(mint)] = amount

    def set_token_balance(self, token_account: Pubkey, amount: int) -> None:
        self._token_balances[str(token_account)] = amount

    # =========================================================================
    # RPC SURFACE
    # =========================================================================

    async def get_latest_blockhash(self, commitment=None):
        self.calls.append("get_latest_blockhash")
        return SimpleNamespace(
            value=SimpleNamespace(blockhash=self.blockhash, last_valid_block_height=100_150)
        )

    async def get_account_info(self, pubkey, commitment=None, encoding="base64"):
        self.calls.append("get_account_info")
        entry = self._accounts.get(str(pubkey))
        if entry is None:
            return SimpleNamespace(value=None)
        data, owner = entry
        return SimpleNamespace(
            value=SimpleNamespace(data=data, owner=owner, lamports=1_000_000, executable=False)
        )

    async def get_program_accounts(self, pubkey, commitment=None, encoding=None, filters=None, **kwargs):
        self.calls.append("get_program_accounts")
        self.program_account_requests.append(
            {"program_id": pubkey, "encoding": encoding, "filters": filters}
        )
        return SimpleNamespace(
            value=[
                SimpleNamespace(pubkey=key, account=SimpleNamespace(data=data, owner=pubkey))
                for key, data in self._program_accounts.get(str(pubkey), [])
            ]
        )

    async def simulate_transaction(self, tx, *args, **kwargs):
        self.calls.append("simulate_transaction")
        self.simulated.append(tx)
        if self.simulate_exception is not None:
            raise self.simulate_exception
        return SimpleNamespace(
            value=SimpleNamespace(
                err=self.simulation_err,
                logs=list(self.simulation_logs),
                units_consumed=self.simulation_units,
            )
        )

    async def send_transaction(self, tx, opts=None):
        self.calls.append("send_transaction")
        if self.send_exception is not None:
            raise self.send_exception
        self.sent.append((tx, opts))
        return SimpleNamespace(value=tx.signatures[0])

    async def request_airdrop(self, pubkey, lamports, commitment=None):
        self.calls.append("request_airdrop")
        self.airdrops.append((pubkey, lamports))
        return SimpleNamespace(value="MOCK_AIRDROP_SIG")

    async def get_token_supply(self, pubkey, commitment=None):
        self.calls.append("get_token_supply")
        amount = self._token_supply.get(str(pubkey), 0)
        return SimpleNamespace(value=SimpleNamespace(amount=str(amount), decimals=6))

    async def get_token_account_balance(self, pubkey, commitment=None):
        self.calls.append("get_token_account_balance")
        amount = self._token_balances.get(str(pubkey), 0)
        return SimpleNamespace(value=SimpleNamespace(amount=str(amount), decimals=6))

    async def close(self) -> None:
        self.closed = True
