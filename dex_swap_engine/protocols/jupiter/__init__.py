"""
Jupiter aggregator provider
"""

from .api import JupiterAPI

__all__ = ["JupiterAPI"]
