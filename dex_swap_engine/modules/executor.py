"""
Transaction Executor

Signs, submits and confirms the transactions of one swap, strictly in
order. Confirmation is a bounded poll: a transaction that never shows up
is reported, never resubmitted.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..config import config as global_config
from ..errors import (
    ConfirmationTimeout,
    RpcError,
    SigningFailed,
    SubmissionFailed,
    TransactionFailed,
)
from ..infra import RpcClient, Signer, classify_error, log_with_correlation
from ..types import UnsignedTransactionSet

logger = logging.getLogger(__name__)


@dataclass
class ExecutorConfig:
    """
    Executor runtime configuration

    Unset fields are filled from the global config (dex_swap_engine.config.TxConfig).

    Usage:
        executor = TransactionExecutor(ExecutorConfig(confirm_interval=2, confirm_max_attempts=10))
    """
    confirm_interval: float = None
    confirm_max_attempts: int = None
    settle_delay: float = None
    send_max_retries: int = None
    send_retry_delay: float = None
    skip_preflight: bool = None

    def __post_init__(self):
        """Apply defaults from global config for any unset values"""
        if self.confirm_interval is None:
            self.confirm_interval = global_config.tx.confirm_interval
        if self.confirm_max_attempts is None:
            self.confirm_max_attempts = global_config.tx.confirm_max_attempts
        if self.settle_delay is None:
            self.settle_delay = global_config.tx.settle_delay
        if self.send_max_retries is None:
            self.send_max_retries = global_config.tx.send_max_retries
        if self.send_retry_delay is None:
            self.send_retry_delay = global_config.rpc.retry_delay_seconds
        if self.skip_preflight is None:
            self.skip_preflight = global_config.tx.skip_preflight


class TransactionExecutor:
    """
    Sequential sign / submit / confirm of a transaction set

    For each transaction:
    1. Sign (failures are never retried)
    2. Send raw bytes, resending on transient RPC errors
    3. Sleep, then read the signature status, until a status appears or
       the attempt budget runs out
    4. Wait settle_delay before the next transaction of the set

    A failure at any step aborts the remaining transactions.
    """

    def __init__(self, config: Optional[ExecutorConfig] = None):
        self._config = config or ExecutorConfig()

    @property
    def config(self) -> ExecutorConfig:
        return self._config

    async def execute(
        self,
        connection: RpcClient,
        signer: Signer,
        transaction_set: UnsignedTransactionSet,
    ) -> List[str]:
        """
        Execute every transaction of the set in order

        Returns:
            Signatures in submission order; the last one is the final swap
            transaction

        Raises:
            SigningFailed, SubmissionFailed, ConfirmationTimeout, TransactionFailed
        """
        provider = transaction_set.provider
        total = len(transaction_set)
        signatures: List[str] = []

        for index, unsigned_tx in enumerate(transaction_set):
            label = f"tx {index + 1}/{total}"

            try:
                signed_tx, signature = signer.sign_transaction(unsigned_tx)
            except Exception as e:
                raise SigningFailed(str(e), index=index, provider=provider, original_error=e)

            signature = await self._submit(connection, signed_tx, signature, index, provider, label)
            log_with_correlation(logger, logging.INFO, f"{label} sent: {signature}", "submit")

            await self._confirm(connection, signature, index, provider, label)
            signatures.append(signature)

            if index < total - 1:
                await asyncio.sleep(self._config.settle_delay)

        return signatures

    async def _submit(
        self,
        connection: RpcClient,
        signed_tx: bytes,
        signature: str,
        index: int,
        provider: str,
        label: str,
    ) -> str:
        """Send signed bytes, resending on transient errors"""
        max_attempts = 1 + self._config.send_max_retries
        last_error: Optional[Exception] = None

        for attempt in range(1, max_attempts + 1):
            try:
                return await connection.send_raw_transaction(
                    signed_tx,
                    skip_preflight=self._config.skip_preflight,
                    max_retries=self._config.send_max_retries,
                )
            except Exception as e:
                last_error = e
                recoverable, _ = classify_error(e)
                log_with_correlation(
                    logger, logging.WARNING, f"{label} send failed: {e}",
                    "submit", attempt, max_attempts,
                )
                if not recoverable:
                    raise SubmissionFailed(
                        str(e), attempt, signature=signature, index=index,
                        provider=provider, original_error=e,
                    )
                if attempt < max_attempts:
                    await asyncio.sleep(self._config.send_retry_delay * attempt)

        raise SubmissionFailed(
            str(last_error), max_attempts, signature=signature, index=index,
            provider=provider, original_error=last_error,
        )

    async def _confirm(
        self,
        connection: RpcClient,
        signature: str,
        index: int,
        provider: str,
        label: str,
    ) -> Dict[str, Any]:
        """
        Poll the signature status

        The first non-null status ends the poll: it carries either an
        on-chain error or a commitment level.
        """
        max_attempts = self._config.confirm_max_attempts
        status = None

        for attempt in range(1, max_attempts + 1):
            await asyncio.sleep(self._config.confirm_interval)
            try:
                status = await connection.get_signature_status(
                    signature, search_transaction_history=True, max_retries=1, rotate=False,
                )
            except RpcError as e:
                log_with_correlation(
                    logger, logging.WARNING, f"{label} status check failed: {e}",
                    "confirm", attempt, max_attempts,
                )
                continue

            if status is not None:
                break
            log_with_correlation(
                logger, logging.DEBUG, f"{label} not seen yet", "confirm", attempt, max_attempts,
            )

        if status is None:
            raise ConfirmationTimeout(signature, max_attempts, index=index, provider=provider)

        if status.get("err"):
            raise TransactionFailed(signature, status["err"], index=index, provider=provider)

        log_with_correlation(
            logger, logging.INFO,
            f"{label} {status.get('confirmationStatus') or 'landed'}: {signature}",
            "confirm",
        )
        return status
