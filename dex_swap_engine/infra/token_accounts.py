"""
Token account resolution

Detects which token program owns a mint, derives associated token account
addresses and creates missing associated accounts on chain.

A resolver caches per-mint results and is meant to live for one swap call.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Set

from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from .rpc import RpcClient
from .solana_signer import Signer
from .retry import log_with_correlation
from ..config import config as global_config
from ..errors import AccountCreationFailed, RpcError
from ..types import (
    TokenProgramKind,
    WRAPPED_SOL_MINT,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    ASSOCIATED_TOKEN_PROGRAM_ID,
)

logger = logging.getLogger(__name__)


_PROGRAM_IDS = {
    TokenProgramKind.STANDARD: TOKEN_PROGRAM_ID,
    TokenProgramKind.EXTENDED: TOKEN_2022_PROGRAM_ID,
}


def token_program_id(kind: TokenProgramKind) -> str:
    """Program address for a token program kind"""
    return _PROGRAM_IDS[kind]


def get_associated_token_address(
    owner: str,
    mint: str,
    kind: TokenProgramKind = TokenProgramKind.STANDARD,
) -> str:
    """
    Get associated token account address.

    Pure derivation: the same (owner, mint, kind) always yields the same
    address, and different kinds yield different addresses.

    Args:
        owner: Wallet owner (base58)
        mint: Token mint (base58)
        kind: Token program that owns the mint

    Returns:
        ATA address (base58)
    """
    seeds = [
        bytes(Pubkey.from_string(owner)),
        bytes(Pubkey.from_string(token_program_id(kind))),
        bytes(Pubkey.from_string(mint)),
    ]
    address, _ = Pubkey.find_program_address(seeds, Pubkey.from_string(ASSOCIATED_TOKEN_PROGRAM_ID))
    return str(address)


def build_create_ata_idempotent_instruction(
    payer: str,
    owner: str,
    mint: str,
    kind: TokenProgramKind = TokenProgramKind.STANDARD,
) -> Instruction:
    """
    Build create_associated_token_account_idempotent instruction.

    This creates the ATA if it doesn't exist, or does nothing if it does.
    """
    token_program = Pubkey.from_string(token_program_id(kind))
    ata_address = Pubkey.from_string(get_associated_token_address(owner, mint, kind))

    accounts = [
        AccountMeta(Pubkey.from_string(payer), is_signer=True, is_writable=True),
        AccountMeta(ata_address, is_signer=False, is_writable=True),
        AccountMeta(Pubkey.from_string(owner), is_signer=False, is_writable=False),
        AccountMeta(Pubkey.from_string(mint), is_signer=False, is_writable=False),
        AccountMeta(Pubkey.from_string(SYSTEM_PROGRAM_ID), is_signer=False, is_writable=False),
        AccountMeta(token_program, is_signer=False, is_writable=False),
    ]

    # Instruction data: single byte 1 for idempotent create
    return Instruction(Pubkey.from_string(ASSOCIATED_TOKEN_PROGRAM_ID), bytes([1]), accounts)


def build_unsigned_transaction(payer: str, instructions, recent_blockhash: str) -> bytes:
    """Compile instructions into an unsigned v0 transaction with placeholder signatures"""
    message = MessageV0.try_compile(
        Pubkey.from_string(payer),
        list(instructions),
        [],  # Address lookup tables
        Hash.from_string(recent_blockhash),
    )
    null_signatures = [Signature.default()] * message.header.num_required_signatures
    return bytes(VersionedTransaction.populate(message, null_signatures))


class TokenAccountResolver:
    """
    Token program detection and associated account management

    Usage:
        resolver = TokenAccountResolver(rpc)
        kind = await resolver.resolve_token_program(mint)
        ata = await resolver.ensure_associated_account(signer, mint)
    """

    def __init__(
        self,
        connection: RpcClient,
        commitment: Optional[str] = None,
        confirm_timeout: Optional[float] = None,
    ):
        self._connection = connection
        self._commitment = commitment or global_config.tx.account_commitment
        self._confirm_timeout = (
            confirm_timeout if confirm_timeout is not None
            else global_config.tx.account_confirm_timeout
        )
        self._program_cache: Dict[str, TokenProgramKind] = {}
        self._ensured: Set[str] = set()

    async def resolve_token_program(self, mint: str) -> TokenProgramKind:
        """
        Detect the token program for a given mint by checking its owner.

        Never raises: a missing mint account or a failed read falls back to
        the standard program.
        """
        if mint in self._program_cache:
            return self._program_cache[mint]

        kind = TokenProgramKind.STANDARD
        # WSOL always uses Tokenkeg
        if mint != WRAPPED_SOL_MINT:
            try:
                account_info = await self._connection.get_account_info(mint, encoding="base64")
                if account_info and account_info.get("owner") == TOKEN_2022_PROGRAM_ID:
                    kind = TokenProgramKind.EXTENDED
            except Exception as e:
                logger.warning(f"Token program lookup failed for {mint}, assuming standard: {e}")

        self._program_cache[mint] = kind
        return kind

    async def get_associated_address(self, owner: str, mint: str) -> str:
        """Associated account address of owner for mint under the mint's program"""
        kind = await self.resolve_token_program(mint)
        return get_associated_token_address(owner, mint, kind)

    async def account_exists(self, address: str) -> bool:
        """Check whether an account is present on chain"""
        info = await self._connection.get_account_info(address, encoding="base64")
        return info is not None

    async def ensure_associated_account(self, signer: Signer, mint: str) -> str:
        """
        Make sure the signer's associated account for mint exists

        Returns:
            The associated account address

        Raises:
            AccountCreationFailed: Creation could not be confirmed and the
                account is still absent
        """
        owner = signer.pubkey
        kind = await self.resolve_token_program(mint)
        address = get_associated_token_address(owner, mint, kind)

        if address in self._ensured:
            return address

        try:
            if await self.account_exists(address):
                self._ensured.add(address)
                return address
        except RpcError as e:
            logger.warning(f"Could not read {address}, attempting idempotent create: {e}")

        log_with_correlation(
            logger, logging.INFO,
            f"Creating associated account {address} for mint {mint} ({kind.value})",
            "create_account",
        )

        try:
            blockhash_info = await self._connection.get_latest_blockhash(commitment=self._commitment)
            blockhash = blockhash_info.get("blockhash")
            if not blockhash:
                raise AccountCreationFailed(address, mint, "no recent blockhash")
            instruction = build_create_ata_idempotent_instruction(owner, owner, mint, kind)
            unsigned = build_unsigned_transaction(owner, [instruction], blockhash)
            signed, _ = signer.sign_transaction(unsigned)
        except AccountCreationFailed:
            raise
        except Exception as e:
            raise AccountCreationFailed(address, mint, f"could not build transaction: {e}", original_error=e)

        signature = None
        failure: Optional[Exception] = None
        try:
            signature = await self._connection.send_raw_transaction(signed, skip_preflight=False)
            confirmed = await self._connection.confirm_transaction(
                signature,
                last_valid_block_height=blockhash_info.get("lastValidBlockHeight"),
                commitment=self._commitment,
                timeout_seconds=self._confirm_timeout,
            )
            if confirmed:
                logger.info(f"Associated account {address} created: {signature}")
                self._ensured.add(address)
                return address
            failure = RuntimeError(
                "transaction failed on-chain" if confirmed is False
                else f"not {self._commitment} in time"
            )
        except RpcError as e:
            failure = e

        # Another transaction may have created it meanwhile
        try:
            if await self.account_exists(address):
                logger.info(f"Associated account {address} present after failed create ({failure})")
                self._ensured.add(address)
                return address
        except RpcError as e:
            logger.warning(f"Re-read of {address} failed: {e}")

        raise AccountCreationFailed(
            address, mint, str(failure), signature=signature,
            original_error=failure if isinstance(failure, RpcError) else None,
        )
