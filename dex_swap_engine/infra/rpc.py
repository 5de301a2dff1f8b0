"""
Async RPC Client for Solana

Provides the chain connection used by the swap engine:
- Multiple endpoint fallback
- Retry logic
- Rate limit handling
- Request timeout management
"""

from __future__ import annotations

import asyncio
import base64
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import httpx

from ..errors import ErrorCode, RpcError, ConfigurationError
from ..config import config as global_config
from .retry import RECOVERABLE_KEYWORDS

logger = logging.getLogger(__name__)


@dataclass
class RpcClientConfig:
    """
    RPC client runtime configuration

    Allows per-client overrides while pulling defaults from the
    global config (dex_swap_engine.config.RpcConfig).

    Usage:
        config = RpcClientConfig(timeout_seconds=60, max_retries=5)
        client = RpcClient(endpoint, config=config)
    """
    timeout_seconds: float = None
    max_retries: int = None
    retry_delay_seconds: float = None
    commitment: str = None

    def __post_init__(self):
        """Apply defaults from global config for any unset values"""
        if self.timeout_seconds is None:
            self.timeout_seconds = global_config.rpc.timeout_seconds
        if self.max_retries is None:
            self.max_retries = global_config.rpc.max_retries
        if self.retry_delay_seconds is None:
            self.retry_delay_seconds = global_config.rpc.retry_delay_seconds
        if self.commitment is None:
            self.commitment = global_config.rpc.commitment


class RpcClient:
    """
    Async Solana JSON-RPC client

    Treated as a stateless service client: it can be shared by concurrent
    swap calls. The only mutable state is the active endpoint index.

    Usage:
        async with RpcClient("https://api.mainnet-beta.solana.com") as rpc:
            info = await rpc.get_account_info("AccountAddress...")
            status = await rpc.get_signature_status(signature)
    """

    def __init__(
        self,
        endpoint: Union[str, List[str]],
        config: Optional[RpcClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize RPC client

        Args:
            endpoint: RPC endpoint URL or list of URLs (for fallback)
            config: RPC configuration options
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._endpoints = [endpoint] if isinstance(endpoint, str) else list(endpoint)
        if not self._endpoints or not all(self._endpoints):
            raise ConfigurationError.missing("RPC endpoint")

        self._config = config or RpcClientConfig()
        self._current_endpoint_idx = 0
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._request_id = 0

    @property
    def endpoint(self) -> str:
        """Current active endpoint"""
        return self._endpoints[self._current_endpoint_idx]

    @property
    def commitment(self) -> str:
        """Default commitment level"""
        return self._config.commitment

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._config.timeout_seconds,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    def _rotate_endpoint(self):
        """Rotate to next endpoint on failure"""
        if len(self._endpoints) > 1:
            self._current_endpoint_idx = (self._current_endpoint_idx + 1) % len(self._endpoints)
            logger.info(f"Rotating to RPC endpoint: {self.endpoint}")

    async def call(
        self,
        method: str,
        params: List[Any],
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        rotate: bool = True,
    ) -> Any:
        """
        Make JSON-RPC call

        Args:
            method: RPC method name
            params: RPC parameters
            timeout: Optional timeout override
            max_retries: Optional per-endpoint attempt override
            rotate: Fall through to the other endpoints within this call.
                When False only the active endpoint is tried; a failure
                still moves the active endpoint on for the next call.

        Returns:
            RPC result

        Raises:
            RpcError: On RPC failure
        """
        client = self._get_client()
        self._request_id += 1
        body = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }
        attempts = max_retries if max_retries is not None else self._config.max_retries
        attempts = max(1, attempts)
        timeout_val = timeout or self._config.timeout_seconds

        last_error: Optional[RpcError] = None

        endpoint_count = len(self._endpoints) if rotate else 1
        for _ in range(endpoint_count):
            for attempt in range(attempts):
                try:
                    response = await client.post(self.endpoint, json=body, timeout=timeout_val)

                    if response.status_code == 429:
                        logger.warning(f"Rate limited by {self.endpoint}")
                        last_error = RpcError.rate_limited(self.endpoint)
                    else:
                        response.raise_for_status()
                        result = response.json()

                        if "error" in result:
                            error = result["error"]
                            message = f"RPC error: {error.get('message', error)}"
                            # Node rejections are final unless the node reports a transient condition
                            rpc_error = RpcError(
                                message,
                                ErrorCode.RPC_INVALID_RESPONSE,
                                endpoint=self.endpoint,
                                recoverable=any(k in message.lower() for k in RECOVERABLE_KEYWORDS),
                            )
                            rpc_error.details["rpc_error_code"] = error.get("code")
                            rpc_error.details["rpc_error_data"] = error.get("data")
                            raise rpc_error

                        return result.get("result")

                except httpx.TimeoutException:
                    last_error = RpcError.timeout(self.endpoint, timeout_val)
                    logger.warning(f"RPC timeout (attempt {attempt + 1}): {self.endpoint}")

                except httpx.HTTPStatusError as e:
                    last_error = RpcError(
                        f"HTTP error {e.response.status_code}",
                        endpoint=self.endpoint,
                        original_error=e,
                    )
                    logger.warning(f"RPC HTTP error (attempt {attempt + 1}): {e}")

                except httpx.RequestError as e:
                    last_error = RpcError.connection_failed(self.endpoint, e)
                    logger.warning(f"RPC connection error (attempt {attempt + 1}): {e}")

                except ValueError as e:
                    last_error = RpcError(
                        f"Invalid JSON from RPC: {e}",
                        ErrorCode.RPC_INVALID_RESPONSE,
                        endpoint=self.endpoint,
                        original_error=e,
                    )

                if attempt < attempts - 1:
                    await asyncio.sleep(self._config.retry_delay_seconds * (attempt + 1))

            self._rotate_endpoint()

        raise last_error or RpcError("All RPC endpoints failed")

    async def get_account_info(
        self,
        address: str,
        encoding: str = "base64",
        commitment: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Get account information

        Returns:
            Account info (owner, lamports, data...) or None if not found
        """
        params = [
            address,
            {
                "encoding": encoding,
                "commitment": commitment or self.commitment,
            },
        ]
        result = await self.call("getAccountInfo", params)
        return result.get("value") if result else None

    async def get_balance(self, address: str, commitment: Optional[str] = None) -> int:
        """Get SOL balance in lamports"""
        params = [address, {"commitment": commitment or self.commitment}]
        result = await self.call("getBalance", params)
        return result.get("value", 0) if result else 0

    async def get_latest_blockhash(self, commitment: Optional[str] = None) -> Dict[str, Any]:
        """
        Get latest blockhash

        Returns:
            Dict with blockhash and lastValidBlockHeight
        """
        params = [{"commitment": commitment or self.commitment}]
        result = await self.call("getLatestBlockhash", params)
        return result.get("value", {}) if result else {}

    async def get_block_height(self, commitment: Optional[str] = None) -> int:
        """Get current block height"""
        params = [{"commitment": commitment or self.commitment}]
        return await self.call("getBlockHeight", params)

    async def send_raw_transaction(
        self,
        transaction: bytes,
        skip_preflight: bool = True,
        preflight_commitment: Optional[str] = None,
        max_retries: Optional[int] = None,
    ) -> str:
        """
        Send signed transaction bytes

        Sent exactly once per call, to the active endpoint; resending is the
        caller's decision and goes to the next endpoint. max_retries is
        forwarded to the node's own rebroadcast.

        Returns:
            Transaction signature (base58)
        """
        tx_data = base64.b64encode(transaction).decode("ascii")

        options: Dict[str, Any] = {
            "skipPreflight": skip_preflight,
            "preflightCommitment": preflight_commitment or self.commitment,
            "encoding": "base64",
        }
        if max_retries is not None:
            options["maxRetries"] = max_retries

        return await self.call("sendTransaction", [tx_data, options], max_retries=1, rotate=False)

    async def get_signature_status(
        self,
        signature: str,
        search_transaction_history: bool = True,
        max_retries: Optional[int] = None,
        rotate: bool = True,
    ) -> Optional[Dict[str, Any]]:
        """
        Get status of a single signature

        Pollers pass max_retries=1, rotate=False so one poll is one request.

        Returns:
            Status dict (slot, confirmations, err, confirmationStatus)
            or None if the cluster has not seen the transaction
        """
        params = [[signature], {"searchTransactionHistory": search_transaction_history}]
        result = await self.call("getSignatureStatuses", params, max_retries=max_retries, rotate=rotate)
        if not result or not result.get("value"):
            return None
        return result["value"][0]

    async def confirm_transaction(
        self,
        signature: str,
        last_valid_block_height: Optional[int] = None,
        commitment: Optional[str] = None,
        timeout_seconds: float = 60.0,
        poll_interval: float = 1.0,
    ) -> Optional[bool]:
        """
        Wait for transaction confirmation

        Stops early once the blockhash has expired (block height beyond
        last_valid_block_height).

        Returns:
            True if confirmed at the requested commitment
            False if transaction failed on-chain (has error)
            None if timeout or blockhash expiry (status unknown)
        """
        target = commitment or self.commitment
        accepted = {
            "processed": ("processed", "confirmed", "finalized"),
            "confirmed": ("confirmed", "finalized"),
            "finalized": ("finalized",),
        }.get(target, ("confirmed", "finalized"))

        deadline = time.monotonic() + timeout_seconds
        last_status = None

        while time.monotonic() < deadline:
            try:
                status = await self.get_signature_status(signature, search_transaction_history=False)
                if status:
                    last_status = status
                    if status.get("err"):
                        logger.warning(f"Transaction {signature} failed on-chain: {status.get('err')}")
                        return False
                    if status.get("confirmationStatus") in accepted:
                        return True

                if last_valid_block_height is not None:
                    height = await self.get_block_height(commitment="confirmed")
                    if height is not None and height > last_valid_block_height:
                        logger.warning(f"Blockhash expired before {signature} reached {target}")
                        return None
            except RpcError as e:
                logger.debug(f"Error checking transaction status: {e}")

            await asyncio.sleep(poll_interval)

        if last_status is None:
            logger.warning(f"Transaction {signature} was never seen on chain (dropped/expired)")
        else:
            logger.warning(
                f"Transaction {signature} timeout. Last status: {last_status.get('confirmationStatus', 'unknown')}"
            )
        return None

    async def close(self):
        """Close HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
