"""
Fuze Vault Type Definitions
===========================
Dataclasses, enums and exceptions shared by the registry, loaders,
composer and executor.

Decoded accounts form a closed tagged union:
- Reserve:      Solend lending reserve
- ZetaGroup:    Zeta Markets options group (expiries + products)
- SerumMarket:  Serum v3 order-book market (Zeta's DEX fork)

Every variant carries an AccountKind discriminant so the registry can
hand out kind-checked accessors instead of blind casts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional, Union

from solders.pubkey import Pubkey


# =============================================================================
# ENUMS
# =============================================================================


class AccountKind(Enum):
    """Discriminant of a decoded protocol account."""

    RESERVE = "reserve"
    ZETA_GROUP = "zeta_group"
    SERUM_MARKET = "serum_market"


class Kind(IntEnum):
    """Zeta product kind (on-chain u8)."""

    UNINITIALIZED = 0
    CALL = 1
    PUT = 2
    FUTURE = 3

    @classmethod
    def parse(cls, value: Union["Kind", str, int]) -> "Kind":
        """Accept a Kind, its on-chain value or a name like "call"."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"unknown product kind {value!r}") from None
        return cls(value)


class Side(IntEnum):
    """Order-book side."""

    UNINITIALIZED = 0
    BID = 1
    ASK = 2


class ExecutionMode(Enum):
    """How far a transaction got."""

    SIMULATED = "simulated"  # Dry-run only, ledger untouched
    COMMITTED = "committed"  # Sent and confirmed after the dry-run


# =============================================================================
# SOLEND
# =============================================================================


WAD = 10**18


@dataclass(frozen=True)
class ReserveLiquidity:
    mint_pubkey: Pubkey
    mint_decimals: int
    supply_pubkey: Pubkey
    pyth_oracle: Pubkey
    switchboard_oracle: Pubkey
    available_amount: int
    borrowed_amount_wads: int
    cumulative_borrow_rate_wads: int
    market_price: int


@dataclass(frozen=True)
class ReserveCollateral:
    mint_pubkey: Pubkey
    mint_total_supply: int
    supply_pubkey: Pubkey


@dataclass(frozen=True)
class Reserve:
    """Solend reserve account."""

    address: Pubkey
    version: int
    last_update_slot: int
    stale: bool
    lending_market: Pubkey
    liquidity: ReserveLiquidity
    collateral: ReserveCollateral
    kind: AccountKind = field(default=AccountKind.RESERVE, init=False)

    def lending_market_authority(self, program_id: Pubkey) -> Pubkey:
        """PDA that signs for the lending market."""
        authority, _ = Pubkey.find_program_address([bytes(self.lending_market)], program_id)
        return authority

    @property
    def total_liquidity(self) -> int:
        """Available plus borrowed liquidity, in native units."""
        return self.liquidity.available_amount + self.liquidity.borrowed_amount_wads // WAD

    def collateral_to_liquidity(self, amount: int) -> int:
        """Convert cTokens to underlying liquidity at the current exchange rate."""
        supply = self.collateral.mint_total_supply
        if supply == 0:
            return amount
        return amount * self.total_liquidity // supply

    def __repr__(self) -> str:
        return f"<Reserve {str(self.address)[:8]}... mint={str(self.liquidity.mint_pubkey)[:8]}...>"


# =============================================================================
# ZETA
# =============================================================================


@dataclass(frozen=True)
class Strike:
    is_set: bool
    value: int


@dataclass(frozen=True)
class Product:
    """One product slot of a Zeta group."""

    market: Pubkey
    strike: Strike
    dirty: bool
    kind: Kind


@dataclass(frozen=True)
class MarginParameters:
    """Zeta margin parameters (percentages scaled by 1e8)."""

    future_margin_initial: int
    future_margin_maintenance: int
    option_mark_percentage_long_initial: int
    option_spot_percentage_long_initial: int
    option_spot_percentage_short_initial: int
    option_dynamic_percentage_short_initial: int
    option_mark_percentage_long_maintenance: int
    option_spot_percentage_long_maintenance: int
    option_spot_percentage_short_maintenance: int
    option_dynamic_percentage_short_maintenance: int
    option_short_put_cap_percentage: int


@dataclass(frozen=True)
class ZetaGroup:
    """Zeta Markets group account."""

    address: Pubkey
    nonce: int
    vault_nonce: int
    insurance_vault_nonce: int
    front_expiry_index: int
    underlying_mint: Pubkey
    oracle: Pubkey
    greeks: Pubkey
    margin_parameters: MarginParameters
    products: List[Product]
    kind: AccountKind = field(default=AccountKind.ZETA_GROUP, init=False)

    def __repr__(self) -> str:
        live = sum(1 for p in self.products if p.strike.is_set)
        return f"<ZetaGroup {str(self.address)[:8]}... products={live}/{len(self.products)}>"


# =============================================================================
# SERUM
# =============================================================================


@dataclass(frozen=True)
class SerumMarket:
    """Serum v3 MarketState."""

    address: Pubkey
    account_flags: int
    own_address: Pubkey
    vault_signer_nonce: int
    base_mint: Pubkey
    quote_mint: Pubkey
    base_vault: Pubkey
    quote_vault: Pubkey
    request_queue: Pubkey
    event_queue: Pubkey
    bids: Pubkey
    asks: Pubkey
    base_lot_size: int
    quote_lot_size: int
    fee_rate_bps: int
    kind: AccountKind = field(default=AccountKind.SERUM_MARKET, init=False)

    def vault_signer(self, dex_program_id: Pubkey) -> Pubkey:
        """Authority over the market's base/quote vaults."""
        return Pubkey.create_program_address(
            [bytes(self.address), self.vault_signer_nonce.to_bytes(8, "little")],
            dex_program_id,
        )

    def __repr__(self) -> str:
        return f"<SerumMarket {str(self.address)[:8]}... base={str(self.base_mint)[:8]}...>"


DecodedAccount = Union[Reserve, ZetaGroup, SerumMarket]


# =============================================================================
# VAULT
# =============================================================================


@dataclass(frozen=True)
class VaultState:
    """Vault program account. Always read fresh, never cached."""

    address: Pubkey
    authority: Pubkey
    reserve: Pubkey
    zeta_group: Pubkey
    collateral_vault: Pubkey
    underlying_vault: Pubkey
    usdc_vault: Pubkey
    deposit_limit: int
    total_deposit: int
    management_fee_bps: int
    bump: int
    executor_bump: int
    mint_bump: int
    is_live: bool


@dataclass(frozen=True)
class DepositPreview:
    """
    Client-side estimate of a deposit. Nothing here is enforced.

    shares is None when outstanding shares are backed by zero assets, which
    leaves the exchange rate undefined.
    """

    amount: int
    shares: Optional[int]
    total_assets: int
    share_supply: int
    exceeds_limit: bool

    @property
    def priced(self) -> bool:
        return self.shares is not None


@dataclass(frozen=True)
class MarginPreview:
    """Zeta margin one bid lot of a call product would lock up."""

    strike: int
    market_index: int
    spot: int
    mark: int
    otm_amount: int
    initial_margin: int
    maintenance_margin: int


# =============================================================================
# EXECUTION RESULTS
# =============================================================================


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of a dry-run. A rejected simulation is data, not an exception."""

    err: Optional[str] = None
    logs: List[str] = field(default_factory=list)
    units_consumed: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.err is None


@dataclass(frozen=True)
class ExecutionResult:
    """
    Tagged result of TransactionExecutor.execute().

    SIMULATED: only the dry-run happened, `signature` is None.
    COMMITTED: the transaction was sent and confirmed; `simulation` is the
    dry-run that preceded it.
    """

    mode: ExecutionMode
    simulation: SimulationResult
    signature: Optional[str] = None
    blockhash: str = ""
    fee_payer: str = ""

    @property
    def committed(self) -> bool:
        return self.mode is ExecutionMode.COMMITTED

    def __repr__(self) -> str:
        status = "✅" if self.simulation.success else "❌"
        sig = self.signature[:16] + "..." if self.signature else "-"
        return f"{status} {self.mode.value} tx={sig} payer={self.fee_payer[:8]}"


# =============================================================================
# EXCEPTIONS
# =============================================================================


class FuzeError(Exception):
    """Base class for client errors."""


class AccountNotFoundError(FuzeError):
    """Requested account is not in the registry."""

    def __init__(self, identity: str, message: Optional[str] = None):
        self.identity = identity
        super().__init__(message or f"account {identity} not found")


class ProductNotFoundError(AccountNotFoundError):
    """No product of a Zeta group matches the requested strike and kind."""

    def __init__(self, group: str, strike: int, kind: Kind):
        self.strike = strike
        self.kind = kind
        super().__init__(
            group,
            f"market with strike \"{strike}\" and kind {kind.name.lower()} doesn't exist in group {group}",
        )


class AccountKindError(FuzeError):
    """A registry entry is not of the kind the caller asked for."""

    def __init__(self, identity: str, expected: AccountKind, actual: AccountKind):
        self.identity = identity
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"account {identity} is a {actual.value}, expected {expected.value}"
        )


class CompositionError(FuzeError):
    """An operation cannot be composed into instructions."""


class VaultStateError(CompositionError):
    """Vault account is missing or malformed."""

    def __init__(self, vault: str, reason: str):
        self.vault = vault
        super().__init__(f"vault {vault}: {reason}")


class InvalidAmountError(CompositionError):
    """A caller-supplied quantity is out of range."""


class SubmissionError(FuzeError):
    """Committing a transaction failed at the transport or ledger."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)
