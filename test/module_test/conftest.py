"""
Shared configuration and fixtures for live integration tests.

Quote tests only read from the provider APIs. Swap tests execute real
transactions and spend real tokens!

Environment Variables:
    RUN_LIVE_TESTS: Set to 1 to enable any test in this directory
    RUN_LIVE_SWAPS: Set to 1 to enable tests that send transactions
    SOLANA_RPC_URL: RPC endpoint URL (required)
    SOLANA_PRIVATE_KEY: Base58 encoded private key (swap tests)
    SOLANA_KEYPAIR_PATH: Path to keypair JSON file (alternative to private key)
"""

import os
import sys
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def _flag(key: str) -> bool:
    return os.getenv(key, "").lower() in ("1", "true", "yes", "on")


def get_env_or_fail(key: str) -> str:
    """Get required environment variable or raise error"""
    value = os.getenv(key)
    if not value:
        raise EnvironmentError(
            f"Missing required environment variable: {key}\n"
            f"Please set {key} in your .env file or environment."
        )
    return value


def get_rpc_url() -> str:
    """Get Solana RPC URL from environment"""
    return get_env_or_fail("SOLANA_RPC_URL")


def get_signer():
    """
    Get a signer from environment.

    Tries in order:
    1. SOLANA_PRIVATE_KEY - base58 encoded private key
    2. SOLANA_KEYPAIR_PATH - path to keypair JSON file
    """
    from dex_swap_engine.infra import create_signer

    private_key = os.getenv("SOLANA_PRIVATE_KEY")
    keypair_path = os.getenv("SOLANA_KEYPAIR_PATH")
    if not private_key and not keypair_path:
        raise EnvironmentError(
            "No wallet configured. Set either:\n"
            "  SOLANA_PRIVATE_KEY - base58 encoded private key\n"
            "  SOLANA_KEYPAIR_PATH - path to keypair JSON file"
        )
    return create_signer(secret_key=private_key, keypair_path=keypair_path)


def skip_if_not_live():
    """Return a skip message unless live quote tests are enabled"""
    if not _flag("RUN_LIVE_TESTS"):
        return "Live tests disabled (set RUN_LIVE_TESTS=1)"
    try:
        get_rpc_url()
    except EnvironmentError as e:
        return str(e)
    return None


def skip_if_no_swap_config():
    """Return a skip message unless live swaps are enabled and a wallet is configured"""
    skip_msg = skip_if_not_live()
    if skip_msg:
        return skip_msg
    if not _flag("RUN_LIVE_SWAPS"):
        return "Live swaps disabled (set RUN_LIVE_SWAPS=1)"
    try:
        get_signer()
    except (EnvironmentError, FileNotFoundError) as e:
        return str(e)
    return None


@pytest.fixture(scope="module")
def rpc_url():
    skip_msg = skip_if_not_live()
    if skip_msg:
        pytest.skip(skip_msg)
    return get_rpc_url()


@pytest.fixture(scope="module")
def signer():
    skip_msg = skip_if_no_swap_config()
    if skip_msg:
        pytest.skip(skip_msg)
    return get_signer()
