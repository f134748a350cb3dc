"""
Transaction Executor
====================
Builds, signs, simulates and optionally commits one atomic transaction.

    executor = TransactionExecutor(client)
    result = await executor.execute(ixs, [authority], simulate=True)
    if result.simulation.success: ...

The dry-run always happens first. A rejected dry-run is reported in
result.simulation, it is not raised. A failed commit is never retried
here: the transport error (SolanaRpcException, RPCException, ...) is
wrapped in SubmissionError, with the original on `.cause` and
`__cause__`. Callers catch SubmissionError, not the raw RPC error.
"""

from __future__ import annotations

from typing import Sequence

from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.core import RPCException
from solana.rpc.types import TxOpts
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.transaction import VersionedTransaction

from fuze.shared.system.logging import Logger
from fuze.vault.types import (
    CompositionError,
    ExecutionMode,
    ExecutionResult,
    SimulationResult,
    SubmissionError,
)


def rpc_error_text(exc: BaseException) -> str:
    """
    Readable text of an RPC failure.

    SolanaRpcException leaves str(exc) empty and keeps its text in
    error_msg; the transport error it wraps is its __cause__.
    """
    text = getattr(exc, "error_msg", None) or str(exc) or type(exc).__name__
    cause = exc.__cause__
    if cause is not None and str(cause) and str(cause) not in text:
        text = f"{text}: {cause}"
    return text


class TransactionExecutor:
    """Single execution primitive shared by every Manager operation."""

    def __init__(self, client: AsyncClient, commitment: Commitment = Confirmed):
        self.client = client
        self.commitment = commitment

    async def build(
        self, instructions: Sequence[Instruction], signers: Sequence[Keypair]
    ) -> VersionedTransaction:
        """Compile and sign. The first signer pays fees."""
        if not signers:
            raise CompositionError("at least one signer is required (the first pays fees)")
        if not instructions:
            raise CompositionError("refusing to build a transaction with no instructions")

        bh_resp = await self.client.get_latest_blockhash(self.commitment)
        msg = MessageV0.try_compile(
            payer=signers[0].pubkey(),
            instructions=list(instructions),
            address_lookup_table_accounts=[],
            recent_blockhash=bh_resp.value.blockhash,
        )
        return VersionedTransaction(msg, list(signers))

    async def simulate(self, tx: VersionedTransaction) -> SimulationResult:
        try:
            resp = await self.client.simulate_transaction(tx)
        except (SolanaRpcException, RPCException) as e:
            reason = rpc_error_text(e)
            Logger.warning(f"[EXECUTOR] Simulation request failed: {reason}")
            return SimulationResult(err=reason)

        value = resp.value
        return SimulationResult(
            err=None if value.err is None else str(value.err),
            logs=list(value.logs or []),
            units_consumed=value.units_consumed,
        )

    async def execute(
        self,
        instructions: Sequence[Instruction],
        signers: Sequence[Keypair],
        simulate: bool = False,
    ) -> ExecutionResult:
        tx = await self.build(instructions, signers)
        blockhash = str(tx.message.recent_blockhash)
        fee_payer = str(signers[0].pubkey())

        simulation = await self.simulate(tx)
        if simulation.success:
            Logger.info(
                f"[EXECUTOR] Simulation OK ({len(instructions)} ix, "
                f"{simulation.units_consumed} CU)"
            )
        else:
            Logger.warning(f"[EXECUTOR] Simulation rejected: {simulation.err}")
            for line in simulation.logs:
                Logger.debug(f"[EXECUTOR]   {line}")

        if simulate:
            return ExecutionResult(
                mode=ExecutionMode.SIMULATED,
                simulation=simulation,
                blockhash=blockhash,
                fee_payer=fee_payer,
            )

        Logger.info(f"[EXECUTOR] Sending transaction (payer {fee_payer[:8]}...)")
        try:
            resp = await self.client.send_transaction(
                tx,
                opts=TxOpts(skip_confirmation=False, preflight_commitment=self.commitment),
            )
        except Exception as e:
            reason = rpc_error_text(e)
            Logger.error(f"[EXECUTOR] Transaction failed: {reason}")
            raise SubmissionError(f"transaction failed: {reason}", cause=e) from e

        signature = str(resp.value)
        Logger.success(f"[EXECUTOR] Confirmed {signature[:16]}...")
        return ExecutionResult(
            mode=ExecutionMode.COMMITTED,
            simulation=simulation,
            signature=signature,
            blockhash=blockhash,
            fee_payer=fee_payer,
        )
