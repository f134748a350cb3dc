"""
Vault Math
==========
Integer math mirrored from the vault program and the Zeta margin engine,
used for client-side previews. Nothing computed here is enforced by the
client; the programs re-check everything on-chain.

All percentages are scaled by NATIVE_PRECISION_DENOMINATOR (1e8) and all
prices/strikes are native 6-decimal integers.
"""

from __future__ import annotations

from typing import Tuple

from fuze.instructions.programs import NUM_PRODUCTS_PER_SERIES
from fuze.vault.types import Kind, MarginParameters, Side

NATIVE_PRECISION_DENOMINATOR = 100_000_000


# =============================================================================
# SHARES
# =============================================================================


def shares_for_deposit(amount: int, share_supply: int, total_assets: int) -> int:
    """
    Shares minted for `amount` of underlying. First depositor gets 1:1.

    Outstanding shares backed by zero assets have no price; that raises
    ValueError rather than guessing a rate.
    """
    if share_supply == 0:
        return amount
    if total_assets == 0:
        raise ValueError(f"{share_supply} shares outstanding against zero assets")
    return amount * share_supply // total_assets


# =============================================================================
# PRODUCT INDEXING
# =============================================================================


def products_slice_market_index(expiry_index: int, product_index: int) -> int:
    """Index into a group's products for (expiry series, product within series)."""
    if not 0 <= product_index < NUM_PRODUCTS_PER_SERIES:
        raise ValueError(f"product index {product_index} outside series")
    return expiry_index * NUM_PRODUCTS_PER_SERIES + product_index


def split_market_index(market_index: int) -> Tuple[int, int]:
    """Inverse of products_slice_market_index: (expiry_index, product_index)."""
    return divmod(market_index, NUM_PRODUCTS_PER_SERIES)


# =============================================================================
# MARGIN
# =============================================================================


def otm_amount(spot: int, strike: int, kind: Kind) -> int:
    """How far out of the money an option is, in native price units."""
    if kind is Kind.CALL:
        return max(strike - spot, 0)
    if kind is Kind.PUT:
        return max(spot - strike, 0)
    raise ValueError(f"unsupported kind {kind.name}")


def _pct(value: int, pct: int) -> int:
    return value * pct // NATIVE_PRECISION_DENOMINATOR


def _short_option_margin(
    spot: int, strike: int, kind: Kind, dynamic_pct: int, floor_pct: int
) -> int:
    otm_pct = otm_amount(spot, strike, kind) * NATIVE_PRECISION_DENOMINATOR // spot
    dynamic = max(dynamic_pct - otm_pct, 0)
    return _pct(spot, max(dynamic, floor_pct))


def initial_margin_per_lot(
    spot: int,
    strike: int,
    mark: int,
    kind: Kind,
    side: Side,
    params: MarginParameters,
) -> int:
    """Initial margin required to open one lot."""
    if kind is Kind.FUTURE:
        margin = _pct(spot, params.future_margin_initial)
    elif kind in (Kind.CALL, Kind.PUT):
        if side is Side.BID:
            margin = min(
                _pct(spot, params.option_spot_percentage_long_initial),
                _pct(mark, params.option_mark_percentage_long_initial),
            )
        elif side is Side.ASK:
            margin = _short_option_margin(
                spot,
                strike,
                kind,
                params.option_dynamic_percentage_short_initial,
                params.option_spot_percentage_short_initial,
            )
        else:
            raise ValueError("side must be BID or ASK")
    else:
        raise ValueError(f"unsupported kind {kind.name}")

    if kind is Kind.PUT and side is Side.ASK:
        return min(margin, _pct(strike, params.option_short_put_cap_percentage))
    return margin


def maintenance_margin_per_lot(
    spot: int,
    strike: int,
    mark: int,
    kind: Kind,
    long: bool,
    params: MarginParameters,
) -> int:
    """Maintenance margin for one lot already held."""
    if kind is Kind.FUTURE:
        margin = _pct(spot, params.future_margin_maintenance)
    elif kind in (Kind.CALL, Kind.PUT):
        if long:
            margin = min(
                _pct(spot, params.option_spot_percentage_long_maintenance),
                _pct(mark, params.option_mark_percentage_long_maintenance),
            )
        else:
            margin = _short_option_margin(
                spot,
                strike,
                kind,
                params.option_dynamic_percentage_short_maintenance,
                params.option_spot_percentage_short_maintenance,
            )
    else:
        raise ValueError(f"unsupported kind {kind.name}")

    if kind is Kind.PUT and not long:
        return min(margin, _pct(strike, params.option_short_put_cap_percentage))
    return margin
