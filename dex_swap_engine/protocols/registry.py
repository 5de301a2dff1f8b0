"""
Provider registry

Provides centralized registration and lookup for provider clients.
"""

from typing import Dict, List, Optional, Type
import logging

import httpx

from .base import ProviderClient
from ..config import ProviderConfig, config as global_config
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Registry for provider client classes

    Usage:
        # Register provider class
        ProviderRegistry.register("jupiter", JupiterAPI)

        # Get a fresh provider instance
        provider = ProviderRegistry.create("jupiter")

        # List available providers
        names = ProviderRegistry.list()
    """

    # Registered provider classes, in registration order
    _providers: Dict[str, Type[ProviderClient]] = {}

    @classmethod
    def register(cls, name: str, provider_class: Type[ProviderClient]):
        """
        Register a provider class

        Args:
            name: Provider name (e.g., "jupiter", "raydium")
            provider_class: ProviderClient subclass (not instance)
        """
        cls._providers[name.lower()] = provider_class
        logger.debug(f"Registered provider: {name}")

    @classmethod
    def create(
        cls,
        name: str,
        config: Optional[ProviderConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> ProviderClient:
        """
        Create provider instance

        Instances own an HTTP client, so every call returns a new one.

        Raises:
            ConfigurationError: If provider not registered
        """
        name_lower = name.lower()
        cls._ensure_loaded()

        if name_lower not in cls._providers:
            available = ", ".join(cls._providers.keys()) or "none"
            raise ConfigurationError.invalid(
                "provider", f"Unknown provider: {name}. Available providers: {available}"
            )

        return cls._providers[name_lower](config, transport=transport)

    @classmethod
    def list(cls) -> List[str]:
        """List registered provider names"""
        cls._ensure_loaded()
        return list(cls._providers.keys())

    @classmethod
    def is_registered(cls, name: str) -> bool:
        """Check if provider is registered"""
        cls._ensure_loaded()
        return name.lower() in cls._providers

    @classmethod
    def _ensure_loaded(cls):
        """Register the built-in providers on first use"""
        if "jupiter" not in cls._providers:
            from .jupiter import JupiterAPI
            cls.register("jupiter", JupiterAPI)
        if "raydium" not in cls._providers:
            from .raydium import RaydiumTradeAPI
            cls.register("raydium", RaydiumTradeAPI)


def create_providers(
    names: Optional[List[str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[ProviderClient]:
    """
    Create provider instances in the given order

    Args:
        names: Provider names; defaults to config.swap.providers.
            The order is the tie-break order used by the aggregator.
        transport: Optional httpx transport shared by all providers

    Returns:
        Provider instances, one per distinct name
    """
    names = names if names is not None else global_config.swap.providers
    providers = []
    seen = set()
    for name in names:
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        providers.append(ProviderRegistry.create(key, transport=transport))
    return providers


def register_provider(name: str, provider_class: Type[ProviderClient]):
    """Convenience function to register a provider class"""
    ProviderRegistry.register(name, provider_class)
