"""
DEX Swap Engine - Multi-provider swap execution for Solana

Quotes Jupiter and Raydium concurrently, executes the best quote and
tracks its transactions to confirmation:
- Jupiter aggregator (single transaction, SOL wrap/unwrap included)
- Raydium auto-routed trade API (one or more transactions)
"""

__version__ = "0.1.0"

from .client import SwapClient
from .types import (
    TokenProgramKind,
    SwapRequest,
    Quote,
    UnsignedTransactionSet,
    SwapResult,
    WRAPPED_SOL_MINT,
    resolve_token_mint,
)
from .errors import (
    ErrorCode,
    SwapEngineError,
    RpcError,
    ProviderError,
    QuoteUnavailable,
    AuthRequired,
    BuildFailed,
    NoQuotesAvailable,
    TransactionError,
    SigningFailed,
    SubmissionFailed,
    ConfirmationTimeout,
    TransactionFailed,
    AccountCreationFailed,
    ConfigurationError,
)
from .infra import RpcClient, LocalSigner, TokenAccountResolver, create_signer
from .protocols import ProviderClient, JupiterAPI, RaydiumTradeAPI
from .modules import QuoteAggregator, TransactionExecutor, ExecutorConfig, SwapOrchestrator, swap

__all__ = [
    "__version__",
    # Client
    "SwapClient",
    # Types
    "TokenProgramKind",
    "SwapRequest",
    "Quote",
    "UnsignedTransactionSet",
    "SwapResult",
    "WRAPPED_SOL_MINT",
    "resolve_token_mint",
    # Errors
    "ErrorCode",
    "SwapEngineError",
    "RpcError",
    "ProviderError",
    "QuoteUnavailable",
    "AuthRequired",
    "BuildFailed",
    "NoQuotesAvailable",
    "TransactionError",
    "SigningFailed",
    "SubmissionFailed",
    "ConfirmationTimeout",
    "TransactionFailed",
    "AccountCreationFailed",
    "ConfigurationError",
    # Infrastructure
    "RpcClient",
    "LocalSigner",
    "TokenAccountResolver",
    "create_signer",
    # Providers
    "ProviderClient",
    "JupiterAPI",
    "RaydiumTradeAPI",
    # Engine
    "QuoteAggregator",
    "TransactionExecutor",
    "ExecutorConfig",
    "SwapOrchestrator",
    "swap",
]
