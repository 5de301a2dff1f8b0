"""
Engine modules

- QuoteAggregator: concurrent quoting and best-quote selection
- TransactionExecutor: sign / submit / confirm
- SwapOrchestrator: the swap entry point
"""

from .aggregator import QuoteAggregator, QuoteBoard
from .executor import ExecutorConfig, TransactionExecutor
from .swap import SwapOrchestrator, swap

__all__ = [
    "QuoteAggregator",
    "QuoteBoard",
    "ExecutorConfig",
    "TransactionExecutor",
    "SwapOrchestrator",
    "swap",
]
