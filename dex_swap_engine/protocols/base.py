"""
Base provider client interface

Every liquidity provider implements this interface so the aggregator and
the orchestrator can quote and build through any of them interchangeably.
"""

from abc import ABC, abstractmethod
import logging
from typing import Any, Dict, Optional, TYPE_CHECKING

import httpx

from ..config import ProviderConfig
from ..errors import AuthRequired, BuildFailed, ProviderError, QuoteUnavailable
from ..infra import RpcClient
from ..types import Quote, UnsignedTransactionSet

if TYPE_CHECKING:
    from ..infra import TokenAccountResolver

logger = logging.getLogger(__name__)


class ProviderClient(ABC):
    """
    Abstract base class for liquidity provider clients

    Each client provides:
    - Quotes (read-only, never touch chain state)
    - Transaction building for a quote it issued itself

    Transport, timeouts and endpoints come from the ProviderConfig the
    client is constructed with.
    """

    # Provider identifier (e.g., "jupiter", "raydium")
    name: str = "base"

    def __init__(
        self,
        config: ProviderConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            config: Endpoint, slippage, user agent and timeout for this provider
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def config(self) -> ProviderConfig:
        return self._config

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": self._config.user_agent,
        }
        if self._config.api_key:
            headers["x-api-key"] = self._config.api_key
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=self._config.timeout,
                headers=self._headers(),
                transport=self._transport,
            )
        return self._client

    def _error(self, step: str, message: str, status_code: Optional[int] = None,
               original_error: Optional[Exception] = None) -> ProviderError:
        """Step-appropriate error for this provider"""
        if step == "build":
            return BuildFailed(message, self.name, status_code=status_code, original_error=original_error)
        return QuoteUnavailable(message, self.name, status_code=status_code, original_error=original_error)

    async def _request(self, step: str, method: str, path: str, **kwargs) -> Any:
        """
        Send one HTTP request and decode its JSON body

        Raises:
            AuthRequired: On HTTP 401
            QuoteUnavailable / BuildFailed: On any other failure, by step
        """
        client = self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise self._error(step, f"{self.name} {step} timed out after {self._config.timeout}s", original_error=e)
        except httpx.RequestError as e:
            raise self._error(step, f"{self.name} {step} request failed: {e}", original_error=e)

        if response.status_code == 401:
            logger.error(f"{self.name} {step} returned 401; the endpoint may now require an API key")
            raise AuthRequired(self.name, step, body=response.text)

        if response.status_code >= 400:
            logger.warning(f"{self.name} {step} HTTP {response.status_code}: {response.text[:200]}")
            raise self._error(
                step,
                f"{self.name} API error: {response.status_code} - {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise self._error(step, f"{self.name} returned invalid JSON", response.status_code, e)

    def _check_quote_owner(self, quote: Quote):
        """A quote's payload is only meaningful to the provider that issued it"""
        if quote.provider != self.name:
            raise BuildFailed.foreign_quote(self.name, quote.provider)

    def _slippage(self, slippage_bps: Optional[int]) -> int:
        return self._config.slippage_bps if slippage_bps is None else slippage_bps

    @abstractmethod
    async def get_quote(
        self,
        connection: RpcClient,
        input_mint: str,
        output_mint: str,
        amount_in: int,
        slippage_bps: Optional[int] = None,
    ) -> Quote:
        """
        Get a price quote

        Args:
            connection: Chain connection (read-only use)
            input_mint: Mint being sold
            output_mint: Mint being bought
            amount_in: Input amount in smallest units
            slippage_bps: Override of the provider's default slippage

        Returns:
            Quote issued by this provider

        Raises:
            QuoteUnavailable: Provider could not quote
            AuthRequired: Provider demands authentication
        """
        ...

    @abstractmethod
    async def build_transactions(
        self,
        connection: RpcClient,
        owner: str,
        quote: Quote,
        accounts: Optional["TokenAccountResolver"] = None,
    ) -> UnsignedTransactionSet:
        """
        Build the unsigned transactions executing a quote

        Args:
            connection: Chain connection (read-only lookups only)
            owner: Wallet that signs and receives the output
            quote: Quote previously issued by this provider
            accounts: Token account resolver of the current swap call

        Returns:
            Ordered, non-empty transaction set

        Raises:
            BuildFailed: Quote foreign to this provider or build rejected
            AuthRequired: Provider demands authentication
        """
        ...

    async def close(self):
        """Close HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self._config.base_url!r})"
