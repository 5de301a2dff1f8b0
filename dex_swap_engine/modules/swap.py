"""
Swap Orchestrator

Single entry point of the engine: best quote, build with the winning
provider, execute, report.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .aggregator import QuoteAggregator
from .executor import ExecutorConfig, TransactionExecutor
from ..config import config as global_config
from ..infra import CorrelationContext, RpcClient, Signer, TokenAccountResolver, log_with_correlation
from ..protocols import ProviderClient, create_providers
from ..types import SwapRequest, SwapResult, TokenProgramKind, is_native_mint

logger = logging.getLogger(__name__)


class SwapOrchestrator:
    """
    Multi-provider swap

    Errors from any stage propagate unchanged. There is no fallback to
    another provider once one has been chosen, and no whole-swap retry:
    the caller's next cycle is the retry.

    Usage:
        orchestrator = SwapOrchestrator([JupiterAPI(), RaydiumTradeAPI()])
        result = await orchestrator.swap(rpc, signer, SOL_MINT, USDC_MINT, 10_000_000)
    """

    def __init__(
        self,
        providers: Sequence[ProviderClient],
        executor: Optional[TransactionExecutor] = None,
        ensure_output_account: Optional[bool] = None,
    ):
        """
        Args:
            providers: Provider clients in tie-break order
            executor: Transaction executor (default config when omitted)
            ensure_output_account: Pre-create the destination associated
                account for standard-program outputs before building
        """
        self._aggregator = QuoteAggregator(providers)
        self._executor = executor or TransactionExecutor(ExecutorConfig())
        self._ensure_output_account = (
            ensure_output_account if ensure_output_account is not None
            else global_config.swap.ensure_output_account
        )

    @property
    def aggregator(self) -> QuoteAggregator:
        return self._aggregator

    @property
    def executor(self) -> TransactionExecutor:
        return self._executor

    async def swap(
        self,
        connection: RpcClient,
        signer: Signer,
        input_mint: str,
        output_mint: str,
        amount_in: int,
        slippage_bps: Optional[int] = None,
        exclude: Optional[Sequence[str]] = None,
    ) -> SwapResult:
        """
        Swap amount_in of input_mint into output_mint

        Args:
            connection: Chain connection
            signer: Wallet that pays, signs and receives
            input_mint: Mint being sold (wrapped SOL mint for native SOL)
            output_mint: Mint being bought
            amount_in: Input amount in smallest units
            slippage_bps: Override of every provider's default slippage
            exclude: Provider names to skip this cycle

        Returns:
            SwapResult of the executed quote

        Raises:
            NoQuotesAvailable, BuildFailed, AuthRequired, SigningFailed,
            SubmissionFailed, ConfirmationTimeout, TransactionFailed,
            AccountCreationFailed
        """
        request = SwapRequest(
            input_mint=input_mint,
            output_mint=output_mint,
            amount_in=amount_in,
            signer_pubkey=signer.pubkey,
            slippage_bps=slippage_bps,
        )

        with CorrelationContext("swap"):
            return await self._run(connection, signer, request, exclude)

    async def _run(
        self,
        connection: RpcClient,
        signer: Signer,
        request: SwapRequest,
        exclude: Optional[Sequence[str]],
    ) -> SwapResult:
        log_with_correlation(
            logger, logging.INFO,
            f"Swapping {request.amount_in} {request.input_mint} -> {request.output_mint}",
            "swap",
        )

        # Token program kinds are cached for this call only
        accounts = TokenAccountResolver(connection)

        board = await self._aggregator.collect_quotes(
            connection,
            request.input_mint,
            request.output_mint,
            request.amount_in,
            request.slippage_bps,
            exclude,
        )
        quote = self._aggregator.select_best(board)

        if self._ensure_output_account and not is_native_mint(request.output_mint):
            kind = await accounts.resolve_token_program(request.output_mint)
            if kind is TokenProgramKind.STANDARD:
                await accounts.ensure_associated_account(signer, request.output_mint)

        provider = self._aggregator.get_provider(quote.provider)
        transaction_set = await provider.build_transactions(
            connection, request.signer_pubkey, quote, accounts=accounts
        )

        signatures = await self._executor.execute(connection, signer, transaction_set)

        result = SwapResult(
            out_amount=quote.out_amount,
            input_mint=request.input_mint,
            output_mint=request.output_mint,
            signature=signatures[-1],
            provider=quote.provider,
            in_amount=request.amount_in,
            signatures=tuple(signatures),
            provider_failures=dict(board.failures),
        )
        log_with_correlation(logger, logging.INFO, f"Swap completed: {result}", "swap")
        return result


async def swap(
    connection: RpcClient,
    signer: Signer,
    input_mint: str,
    output_mint: str,
    amount_in: int,
    slippage_bps: Optional[int] = None,
    providers: Optional[Sequence[ProviderClient]] = None,
) -> SwapResult:
    """
    One-shot swap with the configured providers

    Providers created here are closed before returning.
    """
    owned = providers is None
    providers = list(providers) if providers is not None else create_providers()
    try:
        return await SwapOrchestrator(providers).swap(
            connection, signer, input_mint, output_mint, amount_in, slippage_bps
        )
    finally:
        if owned:
            for provider in providers:
                await provider.close()
