"""
Solana mint and program constants

Single source of truth for the addresses the engine needs to know about.
"""

from typing import Dict


# Native SOL is swapped through its wrapped mint
WRAPPED_SOL_MINT = "So11111111111111111111111111111111111111112"
SOL_DECIMALS = 9

# Programs
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"
ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"

# Solana token mints (keys are uppercase for case-insensitive lookup)
SOLANA_TOKEN_MINTS: Dict[str, str] = {
    "SOL": WRAPPED_SOL_MINT,
    "WSOL": WRAPPED_SOL_MINT,
    "USDC": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    "USDT": "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB",
    "BONK": "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
    "JUP": "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN",
    "RAY": "4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R",
    "WIF": "EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm",
}


def resolve_token_mint(token: str) -> str:
    """
    Resolve a symbol or mint address to a mint address

    Base58 mint addresses are 32-44 characters; anything shorter is
    looked up as a symbol. Unknown symbols are returned unchanged.
    """
    if len(token) > 30:
        return token
    return SOLANA_TOKEN_MINTS.get(token.upper(), token)


def is_native_mint(mint: str) -> bool:
    """Check if a mint is the wrapped representation of native SOL"""
    return mint == WRAPPED_SOL_MINT
