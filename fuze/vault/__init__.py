"""
Fuze Vault
==========
Registry, composer, executor and the Manager facade for the vault program.

Only the type definitions are imported eagerly; the loaders depend on
them, so the heavier modules are resolved on first attribute access.
"""

from fuze.vault.types import (
    AccountKind,
    AccountKindError,
    AccountNotFoundError,
    CompositionError,
    DepositPreview,
    ExecutionMode,
    ExecutionResult,
    FuzeError,
    InvalidAmountError,
    Kind,
    MarginPreview,
    ProductNotFoundError,
    Side,
    SimulationResult,
    SubmissionError,
    VaultState,
    VaultStateError,
)

_LAZY = {
    "AccountRegistry": "fuze.vault.registry",
    "InstructionComposer": "fuze.vault.composer",
    "TransactionExecutor": "fuze.vault.executor",
    "Manager": "fuze.vault.manager",
}


def __getattr__(name):
    if name in _LAZY:
        import importlib

        return getattr(importlib.import_module(_LAZY[name]), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "AccountKind",
    "AccountKindError",
    "AccountNotFoundError",
    "AccountRegistry",
    "CompositionError",
    "DepositPreview",
    "ExecutionMode",
    "ExecutionResult",
    "FuzeError",
    "InstructionComposer",
    "InvalidAmountError",
    "Kind",
    "Manager",
    "MarginPreview",
    "ProductNotFoundError",
    "Side",
    "SimulationResult",
    "SubmissionError",
    "TransactionExecutor",
    "VaultState",
    "VaultStateError",
]
