"""
Unit tests for concurrent quoting and best-quote selection
"""

import asyncio
import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from fakes import FakeConnection

from dex_swap_engine.config import ProviderConfig
from dex_swap_engine.errors import AuthRequired, NoQuotesAvailable, QuoteUnavailable
from dex_swap_engine.modules import QuoteAggregator, QuoteBoard
from dex_swap_engine.protocols import ProviderClient
from dex_swap_engine.types import Quote, UnsignedTransactionSet, WRAPPED_SOL_MINT

USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


class StubProvider(ProviderClient):
    """Provider answering every quote request with a fixed amount or error"""

    def __init__(self, name, out_amount=None, error=None, delay=0.0):
        super().__init__(ProviderConfig(base_url=f"https://{name}.test"))
        self.name = name
        self.out_amount = out_amount
        self.error = error
        self.delay = delay
        self.calls = []

    async def get_quote(self, connection, input_mint, output_mint, amount_in, slippage_bps=None):
        self.calls.append((input_mint, output_mint, amount_in, slippage_bps))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return Quote(self.name, input_mint, output_mint, amount_in, self.out_amount,
                     slippage_bps=self._slippage(slippage_bps))

    async def build_transactions(self, connection, owner, quote, accounts=None):
        self._check_quote_owner(quote)
        return UnsignedTransactionSet(self.name, (b"tx",))


async def _best(providers, **kwargs):
    return await QuoteAggregator(providers).get_best_quote(
        FakeConnection(), WRAPPED_SOL_MINT, USDC, 1_000_000_000, **kwargs
    )


class TestQuoteAggregator(unittest.IsolatedAsyncioTestCase):

    async def test_largest_output_wins(self):
        quote = await _best([StubProvider("a", 900_000), StubProvider("b", 950_000)])

        self.assertEqual(quote.provider, "b")
        self.assertEqual(quote.out_amount, 950_000)

    async def test_tie_goes_to_first_registered(self):
        quote = await _best([StubProvider("a", 950_000), StubProvider("b", 950_000)])
        self.assertEqual(quote.provider, "a")

        quote = await _best([StubProvider("b", 950_000), StubProvider("a", 950_000)])
        self.assertEqual(quote.provider, "b")

    async def test_quotes_run_concurrently(self):
        slow = [StubProvider("a", 1, delay=0.2), StubProvider("b", 2, delay=0.2)]
        loop = asyncio.get_running_loop()

        started = loop.time()
        await _best(slow)

        self.assertLess(loop.time() - started, 0.35)

    async def test_failure_does_not_hide_other_quotes(self):
        failing = StubProvider("a", error=QuoteUnavailable("no route", "a"))
        board = await QuoteAggregator([failing, StubProvider("b", 10)]).collect_quotes(
            FakeConnection(), WRAPPED_SOL_MINT, USDC, 5
        )

        self.assertEqual([q.provider for q in board.quotes], ["b"])
        self.assertIsInstance(board.failures["a"], QuoteUnavailable)
        self.assertEqual(board.best.provider, "b")

    async def test_auth_failure_is_reported(self):
        board = await QuoteAggregator([
            StubProvider("a", error=AuthRequired("a", "quote")),
            StubProvider("b", 10),
        ]).collect_quotes(FakeConnection(), WRAPPED_SOL_MINT, USDC, 5)

        self.assertIsInstance(board.failures["a"], AuthRequired)
        self.assertEqual(board.best.provider, "b")

    async def test_all_failed_raises_with_each_failure(self):
        providers = [
            StubProvider("a", error=AuthRequired("a", "quote")),
            StubProvider("b", error=QuoteUnavailable("timeout", "b")),
        ]

        with self.assertRaises(NoQuotesAvailable) as ctx:
            await _best(providers)

        self.assertEqual(set(ctx.exception.failures), {"a", "b"})
        self.assertEqual(ctx.exception.auth_failures, ["a"])

    async def test_no_providers_raises(self):
        with self.assertRaises(NoQuotesAvailable) as ctx:
            await _best([])

        self.assertEqual(ctx.exception.failures, {})

    async def test_unexpected_exception_is_wrapped(self):
        board = await QuoteAggregator([
            StubProvider("a", error=KeyError("outAmount")),
            StubProvider("b", 10),
        ]).collect_quotes(FakeConnection(), WRAPPED_SOL_MINT, USDC, 5)

        failure = board.failures["a"]
        self.assertIsInstance(failure, QuoteUnavailable)
        self.assertIsInstance(failure.original_error, KeyError)
        self.assertEqual(failure.provider, "a")

    async def test_exclude_skips_provider(self):
        skipped = StubProvider("a", 10_000)
        quote = await _best([skipped, StubProvider("b", 10)], exclude=["a"])

        self.assertEqual(quote.provider, "b")
        self.assertEqual(skipped.calls, [])

    async def test_slippage_forwarded(self):
        provider = StubProvider("a", 10)
        quote = await _best([provider], slippage_bps=75)

        self.assertEqual(provider.calls[0][3], 75)
        self.assertEqual(quote.slippage_bps, 75)

    def test_select_best_on_collected_board(self):
        aggregator = QuoteAggregator([])
        failure = QuoteUnavailable("down", "a")
        board = QuoteBoard(
            quotes=[Quote("a", WRAPPED_SOL_MINT, USDC, 1, 900_000), Quote("b", WRAPPED_SOL_MINT, USDC, 1, 950_000)],
        )

        self.assertEqual(aggregator.select_best(board).provider, "b")
        with self.assertRaises(NoQuotesAvailable) as ctx:
            aggregator.select_best(QuoteBoard(failures={"a": failure}))
        self.assertIs(ctx.exception.failures["a"], failure)

    def test_get_provider(self):
        a, b = StubProvider("a", 1), StubProvider("b", 2)
        aggregator = QuoteAggregator([a, b])

        self.assertIs(aggregator.get_provider("b"), b)
        self.assertIsNone(aggregator.get_provider("c"))


def test_quote_board_improvement():
    """Test QuoteBoard runner-up and improvement"""
    print("Testing QuoteBoard...")

    board = QuoteBoard(quotes=[
        Quote("a", WRAPPED_SOL_MINT, USDC, 1, 900_000),
        Quote("b", WRAPPED_SOL_MINT, USDC, 1, 990_000),
    ])
    assert board.best.provider == "b"
    assert board.runner_up.provider == "a"
    assert abs(board.improvement_percent - 10.0) < 1e-9

    single = QuoteBoard(quotes=[Quote("a", WRAPPED_SOL_MINT, USDC, 1, 5)])
    assert single.runner_up is None
    assert single.improvement_percent is None
    assert QuoteBoard().best is None

    print("  QuoteBoard: PASSED")


if __name__ == "__main__":
    unittest.main()
