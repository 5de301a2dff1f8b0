"""
Error definitions for the swap engine
"""

from .exceptions import (
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

__all__ = [
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
]
