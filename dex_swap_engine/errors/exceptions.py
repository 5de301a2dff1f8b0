"""
Exception definitions for the swap engine
"""

from enum import Enum
from typing import Dict, Optional


class ErrorCode(Enum):
    """
    Unified error codes for swap operations

    1xxx - RPC errors
    2xxx - Provider errors (quote / build)
    3xxx - Transaction errors (sign / submit / confirm)
    4xxx - Account errors
    9xxx - Configuration errors
    """
    # RPC errors (recoverable)
    RPC_CONNECTION_FAILED = "1001"
    RPC_TIMEOUT = "1002"
    RPC_RATE_LIMITED = "1003"
    RPC_INVALID_RESPONSE = "1004"

    # Provider errors
    QUOTE_UNAVAILABLE = "2001"
    AUTH_REQUIRED = "2002"
    NO_QUOTES_AVAILABLE = "2003"
    BUILD_FAILED = "2004"

    # Transaction errors
    SIGNING_FAILED = "3001"
    SUBMISSION_FAILED = "3002"
    CONFIRMATION_TIMEOUT = "3003"
    TRANSACTION_FAILED = "3004"

    # Account errors
    ACCOUNT_CREATION_FAILED = "4001"

    # Configuration errors
    CONFIG_INVALID = "9001"
    CONFIG_MISSING = "9002"


class SwapEngineError(Exception):
    """
    Base exception for all swap engine errors

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        recoverable: Whether a fresh attempt (next cycle) might succeed
        original_error: The underlying exception if any
        details: Additional error context (provider, step, signature...)
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable
        self.original_error = original_error
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"

    @property
    def provider(self) -> Optional[str]:
        return self.details.get("provider")

    @property
    def step(self) -> Optional[str]:
        return self.details.get("step")


class RpcError(SwapEngineError):
    """
    RPC-related errors - typically recoverable

    Raised when:
    - Connection to RPC endpoint fails
    - Request times out
    - Rate limit is hit
    - The node returns a JSON-RPC error object
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RPC_CONNECTION_FAILED,
        original_error: Optional[Exception] = None,
        endpoint: Optional[str] = None,
        recoverable: bool = True,
    ):
        super().__init__(
            message,
            code,
            recoverable=recoverable,
            original_error=original_error,
            details={"endpoint": endpoint} if endpoint else None,
        )
        self.endpoint = endpoint

    @classmethod
    def connection_failed(cls, endpoint: str, error: Exception = None) -> "RpcError":
        return cls(
            f"Failed to connect to RPC endpoint: {endpoint}",
            ErrorCode.RPC_CONNECTION_FAILED,
            original_error=error,
            endpoint=endpoint,
        )

    @classmethod
    def timeout(cls, endpoint: str, timeout_seconds: float) -> "RpcError":
        return cls(
            f"RPC request timed out after {timeout_seconds}s",
            ErrorCode.RPC_TIMEOUT,
            endpoint=endpoint,
        )

    @classmethod
    def rate_limited(cls, endpoint: str) -> "RpcError":
        return cls(
            "RPC rate limit exceeded",
            ErrorCode.RPC_RATE_LIMITED,
            endpoint=endpoint,
        )


class ProviderError(SwapEngineError):
    """
    Errors raised by a liquidity provider client

    Always tagged with the provider name and the step ("quote" or "build").
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        provider: str,
        step: str,
        status_code: Optional[int] = None,
        recoverable: bool = True,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=recoverable,
            original_error=original_error,
            details={"provider": provider, "step": step, "status_code": status_code},
        )
        self.status_code = status_code


class QuoteUnavailable(ProviderError):
    """
    One provider could not produce a quote

    Non-fatal: the aggregator records it and carries on with the others.
    """

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            ErrorCode.QUOTE_UNAVAILABLE,
            provider=provider,
            step="quote",
            status_code=status_code,
            original_error=original_error,
        )


class AuthRequired(ProviderError):
    """
    Provider endpoint rejected the request as unauthenticated (HTTP 401)

    The public endpoint changed its contract. Callers should stop using
    this provider for the current cycle instead of retrying it.
    """

    def __init__(self, provider: str, step: str, body: Optional[str] = None):
        message = f"{provider} API requires authentication ({step} returned 401)"
        if body:
            message += f": {body[:200]}"
        super().__init__(
            message,
            ErrorCode.AUTH_REQUIRED,
            provider=provider,
            step=step,
            status_code=401,
            recoverable=False,
        )


class BuildFailed(ProviderError):
    """
    Provider accepted the quote but could not produce a transaction
    """

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            ErrorCode.BUILD_FAILED,
            provider=provider,
            step="build",
            status_code=status_code,
            recoverable=False,
            original_error=original_error,
        )

    @classmethod
    def foreign_quote(cls, provider: str, quote_provider: str) -> "BuildFailed":
        return cls(
            f"Quote issued by '{quote_provider}' cannot be built by '{provider}'",
            provider=provider,
        )


class NoQuotesAvailable(SwapEngineError):
    """
    Every registered provider failed to quote - fatal for this swap attempt

    Attributes:
        failures: Provider name -> error raised by that provider
    """

    def __init__(self, failures: Optional[Dict[str, SwapEngineError]] = None):
        self.failures = dict(failures or {})
        if self.failures:
            reasons = "; ".join(f"{name}: {err.message}" for name, err in self.failures.items())
            message = f"No quotes available from any provider ({reasons})"
        else:
            message = "No quotes available: no providers registered"
        super().__init__(
            message,
            ErrorCode.NO_QUOTES_AVAILABLE,
            recoverable=True,
            details={"step": "quote", "providers": list(self.failures)},
        )

    @property
    def auth_failures(self) -> list:
        """Names of providers that failed with AuthRequired"""
        return [name for name, err in self.failures.items() if isinstance(err, AuthRequired)]


class TransactionError(SwapEngineError):
    """
    Base for sign / submit / confirm failures

    Attributes:
        signature: Transaction signature when one is known
        index: Position of the transaction within its set
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        signature: Optional[str] = None,
        index: Optional[int] = None,
        provider: Optional[str] = None,
        step: Optional[str] = None,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=recoverable,
            original_error=original_error,
            details={
                "signature": signature,
                "index": index,
                "provider": provider,
                "step": step,
            },
        )
        self.signature = signature
        self.index = index


class SigningFailed(TransactionError):
    """Signer could not produce a valid signature - never retried"""

    def __init__(self, reason: str, index: Optional[int] = None, provider: Optional[str] = None,
                 original_error: Optional[Exception] = None):
        super().__init__(
            f"Signing failed: {reason}",
            ErrorCode.SIGNING_FAILED,
            index=index,
            provider=provider,
            step="sign",
            original_error=original_error,
        )


class SubmissionFailed(TransactionError):
    """Transaction could not be sent after exhausting send retries"""

    def __init__(self, reason: str, attempts: int, signature: Optional[str] = None,
                 index: Optional[int] = None, provider: Optional[str] = None,
                 original_error: Optional[Exception] = None):
        super().__init__(
            f"Failed to send transaction after {attempts} attempt(s): {reason}",
            ErrorCode.SUBMISSION_FAILED,
            signature=signature,
            index=index,
            provider=provider,
            step="submit",
            recoverable=True,
            original_error=original_error,
        )
        self.attempts = attempts


class ConfirmationTimeout(TransactionError):
    """
    No status observed within the polling budget

    The transaction may or may not have landed. Funds may have moved, so the
    caller must check the signature before any retry; nothing is resubmitted.
    """

    def __init__(self, signature: str, attempts: int, index: Optional[int] = None,
                 provider: Optional[str] = None):
        super().__init__(
            f"Transaction {signature} not observed after {attempts} status checks; outcome unknown",
            ErrorCode.CONFIRMATION_TIMEOUT,
            signature=signature,
            index=index,
            provider=provider,
            step="confirm",
        )
        self.attempts = attempts


class TransactionFailed(TransactionError):
    """Transaction landed but the chain reported an execution error"""

    def __init__(self, signature: str, error: object, index: Optional[int] = None,
                 provider: Optional[str] = None):
        super().__init__(
            f"Transaction {signature} failed on-chain: {error}",
            ErrorCode.TRANSACTION_FAILED,
            signature=signature,
            index=index,
            provider=provider,
            step="confirm",
        )
        self.chain_error = error


class AccountCreationFailed(SwapEngineError):
    """Associated token account could not be created or confirmed"""

    def __init__(self, address: str, mint: str, reason: str,
                 signature: Optional[str] = None, original_error: Optional[Exception] = None):
        super().__init__(
            f"Could not create associated account {address} for mint {mint}: {reason}",
            ErrorCode.ACCOUNT_CREATION_FAILED,
            original_error=original_error,
            details={"address": address, "mint": mint, "signature": signature, "step": "create_account"},
        )
        self.address = address
        self.mint = mint
        self.signature = signature


class ConfigurationError(SwapEngineError):
    """
    Configuration-related errors

    Raised when:
    - Required configuration is missing
    - Configuration or request values are invalid
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
    ):
        super().__init__(message, code, recoverable=False)

    @classmethod
    def missing(cls, param: str) -> "ConfigurationError":
        return cls(f"Missing required configuration: {param}", ErrorCode.CONFIG_MISSING)

    @classmethod
    def invalid(cls, param: str, reason: str) -> "ConfigurationError":
        return cls(f"Invalid configuration '{param}': {reason}", ErrorCode.CONFIG_INVALID)
