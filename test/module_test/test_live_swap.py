"""
Live swap test

WARNING: This test executes a REAL swap and spends REAL tokens!

Swaps 0.001 SOL into USDC through whichever provider quotes best.

Environment Variables Required:
    RUN_LIVE_TESTS=1
    RUN_LIVE_SWAPS=1
    SOLANA_RPC_URL
    SOLANA_PRIVATE_KEY (or SOLANA_KEYPAIR_PATH)
"""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

SWAP_AMOUNT = 1_000_000  # 0.001 SOL


def test_live_sol_to_usdc(rpc_url, signer):
    """Swap SOL -> USDC and print the result"""
    from dex_swap_engine import SwapClient

    print("Testing live SOL -> USDC swap...")

    async def run():
        async with SwapClient(rpc_url=rpc_url, signer=signer) as client:
            board = await client.quotes("USDC", SWAP_AMOUNT)
            for quote in board.quotes:
                print(f"  {quote}")
            return await client.swap("USDC", SWAP_AMOUNT)

    result = asyncio.run(run())

    print(f"  Provider: {result.provider}")
    print(f"  Signatures: {', '.join(result.signatures)}")
    assert result.signature == result.signatures[-1]
    assert result.out_amount > 0

    print("  live swap: PASSED")
