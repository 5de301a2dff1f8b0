"""
Jupiter API Client

REST API client for the Jupiter swap aggregator.

Jupiter routes across many Solana DEXes and returns a single serialized
transaction that already wraps and unwraps native SOL as needed.
"""

import base64
import binascii
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import httpx

from ..base import ProviderClient
from ...config import JupiterConfig, config as global_config
from ...errors import BuildFailed, QuoteUnavailable
from ...infra import RpcClient, TokenAccountResolver
from ...types import Quote, UnsignedTransactionSet

logger = logging.getLogger(__name__)


def _parse_price_impact(value: Any) -> Optional[Decimal]:
    """priceImpactPct arrives as a string fraction; missing or garbage means unknown"""
    if value is None or value == "":
        return None
    try:
        return abs(Decimal(str(value)))
    except InvalidOperation:
        return None


def _route_label(data: Dict[str, Any]) -> str:
    labels = []
    for step in data.get("routePlan") or []:
        label = (step.get("swapInfo") or {}).get("label")
        if label:
            labels.append(label)
    return " -> ".join(labels)


class JupiterAPI(ProviderClient):
    """
    Jupiter REST API client

    Provides:
    - Swap quotes (GET /quote)
    - Swap transaction building (POST /swap)

    Usage:
        async with JupiterAPI() as api:
            quote = await api.get_quote(rpc, SOL_MINT, USDC_MINT, 1_000_000_000)
            tx_set = await api.build_transactions(rpc, wallet, quote)
    """

    name = "jupiter"

    def __init__(
        self,
        config: Optional[JupiterConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(config or global_config.jupiter, transport=transport)

    async def get_quote(
        self,
        connection: RpcClient,
        input_mint: str,
        output_mint: str,
        amount_in: int,
        slippage_bps: Optional[int] = None,
    ) -> Quote:
        """
        Get swap quote from Jupiter

        Returns:
            Quote whose raw_response is the full quote body, which the
            swap endpoint expects back verbatim
        """
        slippage = self._slippage(slippage_bps)
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount_in),
            "slippageBps": slippage,
        }

        data = await self._request("quote", "GET", "/quote", params=params)

        if not isinstance(data, dict) or not data.get("outAmount"):
            raise QuoteUnavailable("Invalid Jupiter quote response", self.name)

        try:
            out_amount = int(data["outAmount"])
            in_amount = int(data.get("inAmount", amount_in))
        except (TypeError, ValueError) as e:
            raise QuoteUnavailable(f"Unparseable Jupiter amounts: {e}", self.name, original_error=e)

        quote = Quote(
            provider=self.name,
            input_mint=input_mint,
            output_mint=output_mint,
            in_amount=in_amount,
            out_amount=out_amount,
            price_impact=_parse_price_impact(data.get("priceImpactPct")),
            route=_route_label(data),
            slippage_bps=slippage,
            raw_response=data,
        )
        logger.debug(f"Jupiter quote: {quote}")
        return quote

    async def build_transactions(
        self,
        connection: RpcClient,
        owner: str,
        quote: Quote,
        accounts: Optional[TokenAccountResolver] = None,
    ) -> UnsignedTransactionSet:
        """
        Get swap transaction from Jupiter

        Wrap/unwrap of native SOL, compute unit limit and slippage are
        delegated to Jupiter's builder.
        """
        self._check_quote_owner(quote)

        swap_request = {
            "quoteResponse": quote.raw_response,
            "userPublicKey": owner,
            "dynamicComputeUnitLimit": True,
            "dynamicSlippage": True,
            "wrapAndUnwrapSol": True,
        }

        data = await self._request("build", "POST", "/swap", json=swap_request)

        swap_transaction = data.get("swapTransaction") if isinstance(data, dict) else None
        if not swap_transaction:
            raise BuildFailed("No swap transaction in response from Jupiter API", self.name)

        try:
            tx_bytes = base64.b64decode(swap_transaction, validate=True)
        except (binascii.Error, ValueError) as e:
            raise BuildFailed(f"Jupiter swap transaction is not base64: {e}", self.name, original_error=e)

        return UnsignedTransactionSet(provider=self.name, transactions=(tx_bytes,))
