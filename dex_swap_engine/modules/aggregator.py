"""
Quote Aggregator

Asks every registered provider for a quote at once and picks the one
paying out the most.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from ..errors import NoQuotesAvailable, ProviderError, QuoteUnavailable, SwapEngineError
from ..infra import RpcClient, log_with_correlation
from ..protocols import ProviderClient
from ..types import Quote

logger = logging.getLogger(__name__)


@dataclass
class QuoteBoard:
    """
    Every provider's answer for one quote round

    Attributes:
        quotes: Successful quotes in provider registration order
        failures: Provider name -> error raised while quoting
    """
    quotes: List[Quote] = field(default_factory=list)
    failures: Dict[str, SwapEngineError] = field(default_factory=dict)

    @property
    def best(self) -> Optional[Quote]:
        """
        Quote with the largest out_amount

        max() keeps the first maximal element, so ties go to the provider
        registered first.
        """
        if not self.quotes:
            return None
        return max(self.quotes, key=lambda q: q.out_amount)

    @property
    def runner_up(self) -> Optional[Quote]:
        best = self.best
        others = [q for q in self.quotes if q is not best]
        if not others:
            return None
        return max(others, key=lambda q: q.out_amount)

    @property
    def improvement_percent(self) -> Optional[float]:
        """How much more the best quote pays than the runner-up, in percent"""
        best, second = self.best, self.runner_up
        if best is None or second is None or second.out_amount == 0:
            return None
        return (best.out_amount - second.out_amount) / second.out_amount * 100


class QuoteAggregator:
    """
    Concurrent multi-provider quoting

    A failing provider never cancels or fails the others; its error is
    recorded on the board instead.

    Usage:
        aggregator = QuoteAggregator([JupiterAPI(), RaydiumTradeAPI()])
        quote = await aggregator.get_best_quote(rpc, SOL_MINT, USDC_MINT, 10_000_000)
    """

    def __init__(self, providers: Sequence[ProviderClient]):
        """
        Args:
            providers: Provider clients; their order is the tie-break order
        """
        self._providers = list(providers)

    @property
    def providers(self) -> List[ProviderClient]:
        return list(self._providers)

    def get_provider(self, name: str) -> Optional[ProviderClient]:
        """Look up a registered provider by name"""
        for provider in self._providers:
            if provider.name == name:
                return provider
        return None

    async def collect_quotes(
        self,
        connection: RpcClient,
        input_mint: str,
        output_mint: str,
        amount_in: int,
        slippage_bps: Optional[int] = None,
        exclude: Optional[Iterable[str]] = None,
    ) -> QuoteBoard:
        """
        Query every provider concurrently

        Args:
            exclude: Provider names to skip this round (e.g. after AuthRequired)

        Returns:
            QuoteBoard with quotes and per-provider failures
        """
        excluded = set(exclude or ())
        active = [p for p in self._providers if p.name not in excluded]

        results = await asyncio.gather(
            *(p.get_quote(connection, input_mint, output_mint, amount_in, slippage_bps) for p in active),
            return_exceptions=True,
        )

        board = QuoteBoard()
        for provider, result in zip(active, results):
            if isinstance(result, Quote):
                board.quotes.append(result)
                log_with_correlation(
                    logger, logging.INFO,
                    f"{provider.name} quote: out={result.out_amount} "
                    f"impact={'n/a' if result.price_impact is None else f'{result.price_impact_percent:.2f}%'} "
                    f"route={result.route or '-'}",
                    "quote",
                )
            elif isinstance(result, ProviderError):
                board.failures[provider.name] = result
                log_with_correlation(logger, logging.WARNING, f"{provider.name} quote failed: {result}", "quote")
            elif isinstance(result, Exception):
                board.failures[provider.name] = QuoteUnavailable(
                    f"{provider.name} quote failed: {result}", provider.name, original_error=result
                )
                log_with_correlation(
                    logger, logging.WARNING, f"{provider.name} quote raised unexpectedly: {result!r}", "quote"
                )
            else:
                # CancelledError and other BaseExceptions are not ours to absorb
                raise result

        return board

    async def get_best_quote(
        self,
        connection: RpcClient,
        input_mint: str,
        output_mint: str,
        amount_in: int,
        slippage_bps: Optional[int] = None,
        exclude: Optional[Iterable[str]] = None,
    ) -> Quote:
        """
        Best quote across all providers

        Raises:
            NoQuotesAvailable: Every provider failed (carries each failure)
        """
        board = await self.collect_quotes(
            connection, input_mint, output_mint, amount_in, slippage_bps, exclude
        )
        return self.select_best(board)

    def select_best(self, board: QuoteBoard) -> Quote:
        """
        Winning quote of a collected board

        Raises:
            NoQuotesAvailable: The board holds no quote (carries each failure)
        """
        best = board.best
        if best is None:
            raise NoQuotesAvailable(board.failures)

        improvement = board.improvement_percent
        if improvement is not None:
            log_with_correlation(
                logger, logging.INFO,
                f"Best quote: {best.provider} out={best.out_amount} "
                f"({improvement:.2f}% better than {board.runner_up.provider})",
                "quote",
            )
        else:
            log_with_correlation(
                logger, logging.INFO, f"Best quote: {best.provider} out={best.out_amount} (only quote)", "quote"
            )

        return best
