"""
Type definitions for the swap engine
"""

from .swap import (
    TokenProgramKind,
    SwapRequest,
    Quote,
    UnsignedTransactionSet,
    SwapResult,
)
from .solana_tokens import (
    WRAPPED_SOL_MINT,
    SOL_DECIMALS,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    ASSOCIATED_TOKEN_PROGRAM_ID,
    SOLANA_TOKEN_MINTS,
    resolve_token_mint,
    is_native_mint,
)

__all__ = [
    "TokenProgramKind",
    "SwapRequest",
    "Quote",
    "UnsignedTransactionSet",
    "SwapResult",
    "WRAPPED_SOL_MINT",
    "SOL_DECIMALS",
    "SYSTEM_PROGRAM_ID",
    "TOKEN_PROGRAM_ID",
    "TOKEN_2022_PROGRAM_ID",
    "ASSOCIATED_TOKEN_PROGRAM_ID",
    "SOLANA_TOKEN_MINTS",
    "resolve_token_mint",
    "is_native_mint",
]
