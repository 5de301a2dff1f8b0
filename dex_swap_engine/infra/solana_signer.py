"""
Transaction signing abstractions

Provides unified signing interface for local signing with keypair.
"""

from __future__ import annotations

import json
import logging
from typing import Optional, Protocol, Tuple, runtime_checkable

import base58
from solders.keypair import Keypair
from solders.message import to_bytes_versioned
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


@runtime_checkable
class Signer(Protocol):
    """
    Protocol for transaction signers

    Implementations must provide:
    - pubkey: The signer's public key (base58)
    - sign_transaction(): Sign a serialized transaction
    """

    @property
    def pubkey(self) -> str:
        """Signer's public key (base58)"""
        ...

    def sign_transaction(self, unsigned_tx: bytes) -> Tuple[bytes, str]:
        """
        Sign a transaction

        Args:
            unsigned_tx: Unsigned transaction bytes

        Returns:
            (signed_tx_bytes, signature_base58)
        """
        ...


class LocalSigner:
    """
    Local signer using Solana keypair

    Usage:
        from solders.keypair import Keypair

        keypair = Keypair()  # or load from file
        signer = LocalSigner(keypair)

        signed_tx, sig = signer.sign_transaction(unsigned_tx_bytes)
    """

    def __init__(self, keypair: Keypair):
        self._keypair = keypair

    @property
    def pubkey(self) -> str:
        """Public key as base58 string"""
        return str(self._keypair.pubkey())

    def sign_transaction(self, unsigned_tx: bytes) -> Tuple[bytes, str]:
        """
        Sign versioned transaction

        Signatures of other required signers already present in the
        transaction are kept; only the wallet's slot is replaced.

        Args:
            unsigned_tx: Serialized VersionedTransaction

        Returns:
            (signed_tx_bytes, signature_base58)

        Raises:
            ValueError: If the bytes are not a transaction or the wallet
                is not one of its required signers
        """
        tx = VersionedTransaction.from_bytes(unsigned_tx)
        message = tx.message

        # Versioned messages are signed with their version prefix
        signature = self._keypair.sign_message(to_bytes_versioned(message))

        num_required_signatures = message.header.num_required_signatures
        account_keys = message.account_keys
        our_pubkey = self._keypair.pubkey()

        signer_index = None
        for i in range(min(num_required_signatures, len(account_keys))):
            if account_keys[i] == our_pubkey:
                signer_index = i
                break

        if signer_index is None:
            expected = [str(account_keys[i]) for i in range(min(num_required_signatures, len(account_keys)))]
            raise ValueError(
                f"Wallet {our_pubkey} is not in the required signers list. Expected signers: {expected}"
            )

        signatures = list(tx.signatures)
        if len(signatures) != num_required_signatures:
            signatures = [Signature.default()] * num_required_signatures
        signatures[signer_index] = signature

        signed_tx = VersionedTransaction.populate(message, signatures)
        return bytes(signed_tx), str(signature)

    @classmethod
    def from_bytes(cls, secret_key: bytes) -> "LocalSigner":
        """Create signer from secret key bytes (64 bytes)"""
        if len(secret_key) != 64:
            raise ConfigurationError.invalid("secret_key", f"expected 64 bytes, got {len(secret_key)}")
        return cls(Keypair.from_bytes(secret_key))

    @classmethod
    def from_base58(cls, secret_key: str) -> "LocalSigner":
        """Create signer from base58 secret key"""
        try:
            secret_bytes = base58.b58decode(secret_key.strip())
        except ValueError as e:
            raise ConfigurationError.invalid("secret_key", f"not valid base58: {e}")
        return cls.from_bytes(secret_bytes)

    @classmethod
    def from_file(cls, path: str) -> "LocalSigner":
        """
        Create signer from keypair file

        Supports:
        - JSON array format (Solana CLI): [1,2,3,...]
        - Raw bytes file (64 bytes)
        """
        with open(path, "rb") as f:
            content = f.read()

        try:
            data = json.loads(content.decode("utf-8"))
            if isinstance(data, list):
                return cls.from_bytes(bytes(data))
        except (json.JSONDecodeError, UnicodeDecodeError):
            pass

        if len(content) == 64:
            return cls.from_bytes(content)

        raise ConfigurationError.invalid("keypair_file", f"Cannot parse keypair file: {path}")


def create_signer(
    keypair: Optional[Keypair] = None,
    secret_key: Optional[str] = None,
    keypair_path: Optional[str] = None,
) -> Signer:
    """
    Create signer from whichever key material the caller holds

    Priority:
    1. keypair: Use LocalSigner with provided keypair
    2. secret_key: Base58 encoded 64-byte secret key
    3. keypair_path: Load keypair from file

    Raises:
        ConfigurationError: If no key material is given
    """
    if keypair is not None:
        return LocalSigner(keypair)

    if secret_key:
        return LocalSigner.from_base58(secret_key)

    if keypair_path:
        return LocalSigner.from_file(keypair_path)

    raise ConfigurationError.missing("signer key (keypair, secret_key or keypair_path)")
