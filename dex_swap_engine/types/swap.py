"""
Swap type definitions: requests, quotes, transaction sets and results
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple

from .solana_tokens import SOL_DECIMALS
from ..errors import ConfigurationError


class TokenProgramKind(Enum):
    """Token program that owns a mint"""
    STANDARD = "standard"  # SPL Token
    EXTENDED = "extended"  # Token-2022


def _require_int_amount(name: str, value: Any, allow_zero: bool = True) -> None:
    # bool is an int subclass and never a valid amount
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int in smallest units, got {type(value).__name__}")
    if value < 0 or (value == 0 and not allow_zero):
        raise ValueError(f"{name} must be {'non-negative' if allow_zero else 'positive'}, got {value}")


@dataclass(frozen=True)
class SwapRequest:
    """
    One swap attempt

    Attributes:
        input_mint: Mint being sold
        output_mint: Mint being bought
        amount_in: Input amount in smallest units
        signer_pubkey: Wallet that signs and receives the output
        slippage_bps: Slippage override; None uses each provider's default
    """
    input_mint: str
    output_mint: str
    amount_in: int
    signer_pubkey: str
    slippage_bps: Optional[int] = None

    def __post_init__(self):
        """
        Raises:
            ConfigurationError: Invalid amount, identical mints or slippage out of range
        """
        try:
            _require_int_amount("amount_in", self.amount_in, allow_zero=False)
        except (TypeError, ValueError) as e:
            raise ConfigurationError.invalid("amount_in", str(e)) from e
        if self.input_mint == self.output_mint:
            raise ConfigurationError.invalid("output_mint", "input_mint and output_mint must differ")
        if self.slippage_bps is not None and not 0 <= self.slippage_bps <= 10_000:
            raise ConfigurationError.invalid("slippage_bps", f"out of range: {self.slippage_bps}")


@dataclass(frozen=True)
class Quote:
    """
    Price quote issued by one provider

    Attributes:
        provider: Name of the issuing provider
        input_mint: Input token mint
        output_mint: Output token mint
        in_amount: Input amount (raw)
        out_amount: Output amount (raw, integer)
        price_impact: Price impact as a fraction (0.01 = 1%), None when unknown
        route: Human-readable routing descriptor
        slippage_bps: Slippage the quote was requested with
        raw_response: Provider payload needed to build the transaction later
    """
    provider: str
    input_mint: str
    output_mint: str
    in_amount: int
    out_amount: int
    price_impact: Optional[Decimal] = None
    route: str = ""
    slippage_bps: int = 50
    raw_response: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self):
        _require_int_amount("out_amount", self.out_amount)
        _require_int_amount("in_amount", self.in_amount)

    @property
    def price_impact_percent(self) -> Optional[float]:
        """Price impact as percentage"""
        if self.price_impact is None:
            return None
        return float(self.price_impact * 100)

    def __str__(self) -> str:
        impact = "n/a" if self.price_impact is None else f"{self.price_impact_percent:.2f}%"
        return f"Quote({self.provider}: {self.in_amount} -> {self.out_amount}, impact={impact}, route={self.route or '-'})"


@dataclass(frozen=True)
class UnsignedTransactionSet:
    """
    Ordered transactions produced for one quote

    Must be submitted in order; later transactions may depend on earlier ones.
    """
    provider: str
    transactions: Tuple[bytes, ...]

    def __post_init__(self):
        if not self.transactions:
            raise ValueError("transaction set must contain at least one transaction")
        object.__setattr__(self, "transactions", tuple(self.transactions))

    def __len__(self) -> int:
        return len(self.transactions)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.transactions)


@dataclass(frozen=True)
class SwapResult:
    """
    Outcome of a completed swap

    Attributes:
        out_amount: Quoted output amount of the executed quote (raw)
        input_mint: Input token mint
        output_mint: Output token mint
        signature: Signature of the final transaction in the set
        provider: Provider that executed the swap
        in_amount: Input amount (raw)
        signatures: Every confirmed signature, in submission order
        provider_failures: Quote errors from the other providers, by name
    """
    out_amount: int
    input_mint: str
    output_mint: str
    signature: str
    provider: str
    in_amount: int = 0
    signatures: Tuple[str, ...] = ()
    provider_failures: Dict[str, Exception] = field(default_factory=dict, compare=False)

    @property
    def in_amount_sol(self) -> Decimal:
        """Input amount in SOL units, for native-input swaps"""
        return Decimal(self.in_amount) / Decimal(10 ** SOL_DECIMALS)

    def __str__(self) -> str:
        return f"SwapResult({self.provider}, out={self.out_amount}, sig={self.signature[:16]}...)"
