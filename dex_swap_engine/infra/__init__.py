"""
Infrastructure layer for the swap engine

Provides:
- RpcClient: Async JSON-RPC wrapper with retry logic (the chain connection)
- Signer: Transaction signing abstraction (local keypair)
- TokenAccountResolver: Token program detection and associated accounts
- CorrelationContext: Per-swap correlation IDs for log tracing
"""

from .rpc import RpcClient, RpcClientConfig
from .solana_signer import (
    Signer,
    LocalSigner,
    create_signer,
)
from .token_accounts import (
    TokenAccountResolver,
    get_associated_token_address,
    build_create_ata_idempotent_instruction,
    build_unsigned_transaction,
    token_program_id,
)
from .retry import (
    CorrelationContext,
    get_correlation_id,
    classify_error,
    log_with_correlation,
)

__all__ = [
    "RpcClient",
    "RpcClientConfig",
    "Signer",
    "LocalSigner",
    "create_signer",
    "TokenAccountResolver",
    "get_associated_token_address",
    "build_create_ata_idempotent_instruction",
    "build_unsigned_transaction",
    "token_program_id",
    "CorrelationContext",
    "get_correlation_id",
    "classify_error",
    "log_with_correlation",
]
