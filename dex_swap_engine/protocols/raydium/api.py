"""
Raydium Trade API Client

REST client for Raydium's transaction API. The compute endpoint routes
automatically through the best Raydium pool(s); the build endpoint may
return several transactions (setup + swap) that must be sent in order.
"""

import base64
import binascii
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import httpx

from ..base import ProviderClient
from ...config import RaydiumConfig, config as global_config
from ...errors import BuildFailed, QuoteUnavailable
from ...infra import RpcClient, TokenAccountResolver, get_associated_token_address
from ...types import Quote, TokenProgramKind, UnsignedTransactionSet, is_native_mint

logger = logging.getLogger(__name__)


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return abs(Decimal(str(value)))
    except InvalidOperation:
        return None


def _parse_price_impact(swap_data: Dict[str, Any]) -> Optional[Decimal]:
    """
    Price impact as a fraction

    priceImpact is already a fraction; priceImpactPct is a percentage.
    """
    impact = _to_decimal(swap_data.get("priceImpact"))
    if impact is not None:
        return impact
    pct = _to_decimal(swap_data.get("priceImpactPct"))
    return None if pct is None else pct / Decimal(100)


def _route_label(swap_data: Dict[str, Any]) -> str:
    swap_type = swap_data.get("swapType") or "auto-routed"
    pools = [step.get("poolId") for step in swap_data.get("routePlan") or [] if step.get("poolId")]
    if pools:
        return f"{swap_type}: {' -> '.join(pools)}"
    return swap_type


class RaydiumTradeAPI(ProviderClient):
    """
    Raydium trade API client

    Provides:
    - Auto-routed quotes (GET /compute/swap-base-in)
    - Transaction building (POST /transaction/swap-base-in)

    The destination token account is never pre-created here: Raydium's
    builder adds the create instruction itself, Token-2022 mints included.
    """

    name = "raydium"

    def __init__(
        self,
        config: Optional[RaydiumConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(config or global_config.raydium, transport=transport)

    async def get_quote(
        self,
        connection: RpcClient,
        input_mint: str,
        output_mint: str,
        amount_in: int,
        slippage_bps: Optional[int] = None,
    ) -> Quote:
        """
        Get swap computation from Raydium

        Returns:
            Quote whose raw_response is the full compute body, which the
            build endpoint expects back as swapResponse
        """
        slippage = self._slippage(slippage_bps)
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount_in),
            "slippageBps": slippage,
            "txVersion": self._config.tx_version,
        }

        resp = await self._request("quote", "GET", "/compute/swap-base-in", params=params)

        if not isinstance(resp, dict):
            raise QuoteUnavailable("Invalid swap data response from Raydium", self.name)
        if resp.get("success") is False:
            raise QuoteUnavailable(f"Raydium compute rejected: {resp.get('msg', 'unknown reason')}", self.name)

        swap_data = resp.get("data") or resp
        if swap_data.get("outputAmount") in (None, ""):
            raise QuoteUnavailable("Invalid swap data response from Raydium", self.name)

        try:
            out_amount = int(swap_data["outputAmount"])
            in_amount = int(swap_data.get("inputAmount", amount_in))
        except (TypeError, ValueError) as e:
            raise QuoteUnavailable(f"Unparseable Raydium amounts: {e}", self.name, original_error=e)

        quote = Quote(
            provider=self.name,
            input_mint=input_mint,
            output_mint=output_mint,
            in_amount=in_amount,
            out_amount=out_amount,
            price_impact=_parse_price_impact(swap_data),
            route=_route_label(swap_data),
            slippage_bps=slippage,
            raw_response=resp,
        )
        logger.debug(f"Raydium quote: {quote}")
        return quote

    async def _input_account(
        self,
        accounts: TokenAccountResolver,
        owner: str,
        input_mint: str,
    ) -> str:
        """Source token account: the wrapped SOL account for native input, else the input ATA"""
        if is_native_mint(input_mint):
            return get_associated_token_address(owner, input_mint, TokenProgramKind.STANDARD)
        return await accounts.get_associated_address(owner, input_mint)

    async def build_transactions(
        self,
        connection: RpcClient,
        owner: str,
        quote: Quote,
        accounts: Optional[TokenAccountResolver] = None,
    ) -> UnsignedTransactionSet:
        """
        Serialize swap transaction(s) for a Raydium quote

        Wraps SOL when it is the input and unwraps it when it is the output.
        """
        self._check_quote_owner(quote)
        accounts = accounts or TokenAccountResolver(connection)

        output_kind = await accounts.resolve_token_program(quote.output_mint)
        if output_kind is TokenProgramKind.EXTENDED:
            logger.info("Output token uses Token-2022; Raydium builder creates its account")

        payload = {
            "computeUnitPriceMicroLamports": str(self._config.compute_unit_price),
            "swapResponse": quote.raw_response,
            "txVersion": self._config.tx_version,
            "wallet": owner,
            "wrapSol": is_native_mint(quote.input_mint),
            "unwrapSol": is_native_mint(quote.output_mint),
            "inputAccount": await self._input_account(accounts, owner, quote.input_mint),
        }

        resp = await self._request("build", "POST", "/transaction/swap-base-in", json=payload)

        if not isinstance(resp, dict) or resp.get("success") is False:
            reason = resp.get("msg", "unknown reason") if isinstance(resp, dict) else "invalid response"
            raise BuildFailed(f"Raydium transaction serialization failed: {reason}", self.name)

        entries = resp.get("data") or []
        if not entries:
            raise BuildFailed("Failed to serialize swap transaction", self.name)

        transactions = []
        for entry in entries:
            encoded = entry.get("transaction") if isinstance(entry, dict) else None
            if not encoded:
                raise BuildFailed("Raydium response entry without transaction", self.name)
            try:
                transactions.append(base64.b64decode(encoded, validate=True))
            except (binascii.Error, ValueError) as e:
                raise BuildFailed(f"Raydium transaction is not base64: {e}", self.name, original_error=e)

        if len(transactions) > 1:
            logger.info(f"Raydium built {len(transactions)} transactions for this swap")

        return UnsignedTransactionSet(provider=self.name, transactions=tuple(transactions))
