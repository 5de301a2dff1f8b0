"""
Raydium auto-routed provider
"""

from .api import RaydiumTradeAPI

__all__ = ["RaydiumTradeAPI"]
