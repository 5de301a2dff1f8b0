"""
SwapClient - Unified entry point for swaps

Wires a chain connection, a signer and the configured providers into a
swap orchestrator.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

import httpx
from solders.keypair import Keypair

from .config import config as global_config
from .infra import RpcClient, RpcClientConfig, Signer, create_signer
from .modules import ExecutorConfig, QuoteBoard, SwapOrchestrator, TransactionExecutor
from .protocols import ProviderClient, ProviderRegistry, create_providers
from .types import SwapResult, Quote, WRAPPED_SOL_MINT, resolve_token_mint


class SwapClient:
    """
    Swap engine client

    Usage:
        async with SwapClient(
            rpc_url="https://api.mainnet-beta.solana.com",
            keypair_path="/path/to/keypair.json",
        ) as client:
            quote = await client.quote("USDC", 10_000_000)
            result = await client.swap("USDC", 10_000_000)

    Token arguments accept a known symbol ("SOL", "USDC"...) or a mint address.
    """

    def __init__(
        self,
        rpc_url: Union[str, List[str], None] = None,
        keypair: Optional[Keypair] = None,
        secret_key: Optional[str] = None,
        keypair_path: Optional[str] = None,
        signer: Optional[Signer] = None,
        providers: Optional[Sequence[Union[str, ProviderClient]]] = None,
        rpc_config: Optional[RpcClientConfig] = None,
        executor_config: Optional[ExecutorConfig] = None,
        ensure_output_account: Optional[bool] = None,
        rpc: Optional[RpcClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize SwapClient

        Args:
            rpc_url: RPC endpoint URL or list of URLs (default config.rpc.url)
            keypair / secret_key / keypair_path / signer: Wallet key material
            providers: Provider names or instances; defaults to config.swap.providers
            rpc_config: Optional RPC configuration
            executor_config: Optional executor configuration
            ensure_output_account: Pre-create standard-program output accounts
            rpc: Existing chain connection to use instead of rpc_url
            transport: Optional httpx transport for created providers
        """
        self._rpc = rpc or RpcClient(rpc_url or global_config.rpc.url, config=rpc_config)
        self._signer = signer or create_signer(
            keypair=keypair,
            secret_key=secret_key,
            keypair_path=keypair_path,
        )

        if providers is None:
            self._providers = create_providers(transport=transport)
        else:
            self._providers = [
                ProviderRegistry.create(p, transport=transport) if isinstance(p, str) else p
                for p in providers
            ]

        self._orchestrator = SwapOrchestrator(
            self._providers,
            executor=TransactionExecutor(executor_config),
            ensure_output_account=ensure_output_account,
        )

    @property
    def rpc(self) -> RpcClient:
        """Access to RPC client"""
        return self._rpc

    @property
    def signer(self) -> Signer:
        """Access to signer"""
        return self._signer

    @property
    def pubkey(self) -> str:
        """Owner's public key"""
        return self._signer.pubkey

    @property
    def providers(self) -> List[ProviderClient]:
        return list(self._providers)

    @property
    def orchestrator(self) -> SwapOrchestrator:
        return self._orchestrator

    async def quotes(
        self,
        output_token: str,
        amount_in: int,
        input_token: str = WRAPPED_SOL_MINT,
        slippage_bps: Optional[int] = None,
    ) -> QuoteBoard:
        """All providers' quotes (no execution)"""
        return await self._orchestrator.aggregator.collect_quotes(
            self._rpc,
            resolve_token_mint(input_token),
            resolve_token_mint(output_token),
            amount_in,
            slippage_bps,
        )

    async def quote(
        self,
        output_token: str,
        amount_in: int,
        input_token: str = WRAPPED_SOL_MINT,
        slippage_bps: Optional[int] = None,
    ) -> Quote:
        """Best quote across providers (no execution)"""
        return await self._orchestrator.aggregator.get_best_quote(
            self._rpc,
            resolve_token_mint(input_token),
            resolve_token_mint(output_token),
            amount_in,
            slippage_bps,
        )

    async def swap(
        self,
        output_token: str,
        amount_in: int,
        input_token: str = WRAPPED_SOL_MINT,
        slippage_bps: Optional[int] = None,
        exclude: Optional[Sequence[str]] = None,
    ) -> SwapResult:
        """
        Swap amount_in of input_token (native SOL by default) into output_token

        Args:
            output_token: Symbol or mint to buy
            amount_in: Input amount in smallest units (lamports for SOL)
            input_token: Symbol or mint to sell
            slippage_bps: Slippage override
            exclude: Provider names to skip this cycle
        """
        return await self._orchestrator.swap(
            self._rpc,
            self._signer,
            resolve_token_mint(input_token),
            resolve_token_mint(output_token),
            amount_in,
            slippage_bps,
            exclude,
        )

    async def close(self):
        """Close client connections and release resources"""
        for provider in self._providers:
            await provider.close()
        await self._rpc.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        names = ", ".join(p.name for p in self._providers)
        return f"SwapClient(pubkey={self.pubkey}, providers=[{names}])"
