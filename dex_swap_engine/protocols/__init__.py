"""
Liquidity provider clients

Each provider implements the ProviderClient interface so quotes can be
compared and executed uniformly.
"""

from .base import ProviderClient
from .jupiter import JupiterAPI
from .raydium import RaydiumTradeAPI
from .registry import ProviderRegistry, create_providers, register_provider

__all__ = [
    "ProviderClient",
    "JupiterAPI",
    "RaydiumTradeAPI",
    "ProviderRegistry",
    "create_providers",
    "register_provider",
]
