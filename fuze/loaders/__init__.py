"""
Protocol Loaders
================
One loader per external protocol. Each returns {address: decoded account}.
"""

from fuze.loaders.base import AccountLoader
from fuze.loaders.serum import SerumLoader
from fuze.loaders.solend import SolendLoader
from fuze.loaders.zeta import ZetaMarketsLoader

__all__ = [
    "AccountLoader",
    "SerumLoader",
    "SolendLoader",
    "ZetaMarketsLoader",
]
