"""
Transaction Executor Unit Tests
===============================
Simulate-first flow, tagged results and submission failures.
"""

import httpx
import pytest
from solana.exceptions import SolanaRpcException, handle_async_exceptions
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from fuze.vault.executor import TransactionExecutor, rpc_error_text
from fuze.vault.types import CompositionError, ExecutionMode, SubmissionError
from tests.mocks import MockRpcClient


async def _transport_failure(message):
    """SolanaRpcException exactly as solana-py's HTTP provider raises it."""

    @handle_async_exceptions(SolanaRpcException, httpx.HTTPError)
    async def make_request(provider, body):
        raise httpx.ConnectError(message)

    try:
        await make_request(None, object())
    except SolanaRpcException as exc:
        return exc
    raise AssertionError("transport failure was not raised")


def _ix(*signers):
    """Instruction that requires each of `signers` to sign."""
    return Instruction(
        Pubkey.new_unique(),
        b"\x01\x02",
        [AccountMeta(s.pubkey(), is_signer=True, is_writable=True) for s in signers],
    )


class TestExecute:

    @pytest.mark.asyncio
    async def test_simulate_only_never_sends(self):
        client = MockRpcClient()
        payer = Keypair()

        result = await TransactionExecutor(client).execute([_ix(payer)], [payer], simulate=True)

        assert result.mode is ExecutionMode.SIMULATED
        assert not result.committed
        assert result.signature is None
        assert result.simulation.success
        assert result.simulation.units_consumed == 50_000
        assert client.sent == []
        assert "send_transaction" not in client.calls

    @pytest.mark.asyncio
    async def test_repeated_simulation_is_independent(self):
        client = MockRpcClient()
        payer = Keypair()
        executor = TransactionExecutor(client)

        first = await executor.execute([_ix(payer)], [payer], simulate=True)
        second = await executor.execute([_ix(payer)], [payer], simulate=True)

        assert first.simulation == second.simulation
        assert len(client.simulated) == 2
        assert client.sent == []

    @pytest.mark.asyncio
    async def test_commit_simulates_then_sends(self):
        client = MockRpcClient()
        payer = Keypair()

        result = await TransactionExecutor(client).execute([_ix(payer)], [payer])

        assert result.mode is ExecutionMode.COMMITTED
        assert result.committed
        assert client.calls == ["get_latest_blockhash", "simulate_transaction", "send_transaction"]
        tx, opts = client.sent[0]
        assert result.signature == str(tx.signatures[0])
        assert opts.skip_confirmation is False

    @pytest.mark.asyncio
    async def test_fee_payer_is_first_signer(self):
        client = MockRpcClient()
        first, second = Keypair(), Keypair()

        result = await TransactionExecutor(client).execute(
            [_ix(first, second)], [first, second], simulate=True
        )

        tx = client.simulated[0]
        assert tx.message.account_keys[0] == first.pubkey()
        assert result.fee_payer == str(first.pubkey())
        assert result.blockhash == str(client.blockhash)

    @pytest.mark.asyncio
    async def test_fee_payer_follows_signer_order(self):
        client = MockRpcClient()
        first, second = Keypair(), Keypair()

        await TransactionExecutor(client).execute(
            [_ix(first, second)], [second, first], simulate=True
        )

        assert client.simulated[0].message.account_keys[0] == second.pubkey()


class TestSimulationFailures:

    @pytest.mark.asyncio
    async def test_rejected_simulation_is_data(self):
        client = MockRpcClient()
        client.simulation_err = "InstructionError(0, Custom(6001))"
        client.simulation_logs = ["Program log: VaultIsFull"]
        payer = Keypair()

        result = await TransactionExecutor(client).execute([_ix(payer)], [payer], simulate=True)

        assert not result.simulation.success
        assert "6001" in result.simulation.err
        assert result.simulation.logs == ["Program log: VaultIsFull"]

    @pytest.mark.asyncio
    async def test_rpc_error_during_simulation_is_captured(self):
        client = MockRpcClient()
        client.simulate_exception = await _transport_failure("node unreachable")
        payer = Keypair()

        result = await TransactionExecutor(client).execute([_ix(payer)], [payer], simulate=True)

        assert not result.simulation.success
        assert "ConnectError" in result.simulation.err
        assert "node unreachable" in result.simulation.err
        assert result.mode is ExecutionMode.SIMULATED


class TestSubmissionFailures:

    @pytest.mark.asyncio
    async def test_send_failure_raises_submission_error(self):
        client = MockRpcClient()
        cause = await _transport_failure("connection reset by peer")
        client.send_exception = cause
        payer = Keypair()

        with pytest.raises(SubmissionError) as exc_info:
            await TransactionExecutor(client).execute([_ix(payer)], [payer])

        assert exc_info.value.cause is cause
        assert exc_info.value.__cause__ is cause
        assert client.calls.count("send_transaction") == 1
        assert "connection reset by peer" in str(exc_info.value)


class TestRpcErrorText:

    @pytest.mark.asyncio
    async def test_wrapped_transport_error(self):
        exc = await _transport_failure("node unreachable")
        assert str(exc) == ""
        text = rpc_error_text(exc)
        assert "ConnectError" in text
        assert text.endswith(": node unreachable")

    def test_plain_exception_uses_str(self):
        assert rpc_error_text(RuntimeError("boom")) == "boom"

    def test_empty_exception_falls_back_to_type_name(self):
        assert rpc_error_text(TimeoutError()) == "TimeoutError"


class TestPreconditions:

    @pytest.mark.asyncio
    async def test_no_signers(self):
        client = MockRpcClient()
        with pytest.raises(CompositionError):
            await TransactionExecutor(client).execute([_ix(Keypair())], [])
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_no_instructions(self):
        client = MockRpcClient()
        with pytest.raises(CompositionError):
            await TransactionExecutor(client).execute([], [Keypair()])
        assert client.calls == []
