"""
Fuze
====
Client for the Fuze yield vault: resolves Serum, Solend and Zeta Markets
accounts and composes vault operations into atomic Solana transactions.
"""

__version__ = "0.1.0"
