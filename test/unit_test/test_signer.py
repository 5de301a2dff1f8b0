"""
Test Signer Module

Tests for local signer functionality.
"""

import json
import sys
from pathlib import Path

import base58
import pytest
from solders.keypair import Keypair
from solders.message import to_bytes_versioned
from solders.transaction import VersionedTransaction

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
BLOCKHASH = "11111111111111111111111111111111"


def _unsigned_create_ata_tx(payer: str) -> bytes:
    from dex_swap_engine.infra import build_create_ata_idempotent_instruction, build_unsigned_transaction

    instruction = build_create_ata_idempotent_instruction(payer, payer, USDC)
    return build_unsigned_transaction(payer, [instruction], BLOCKHASH)


def test_local_signer_from_base58():
    """Test LocalSigner creation from base58 private key"""
    from dex_swap_engine.infra.solana_signer import LocalSigner

    print("Testing LocalSigner from base58...")

    keypair = Keypair()
    signer = LocalSigner.from_base58(base58.b58encode(bytes(keypair)).decode())

    assert signer.pubkey == str(keypair.pubkey())

    print("  LocalSigner from base58: PASSED")


def test_local_signer_rejects_bad_keys():
    """Invalid key material raises ConfigurationError"""
    from dex_swap_engine.infra.solana_signer import LocalSigner
    from dex_swap_engine.errors import ConfigurationError

    print("Testing LocalSigner bad keys...")

    with pytest.raises(ConfigurationError):
        LocalSigner.from_bytes(b"\x01" * 32)
    with pytest.raises(ConfigurationError):
        LocalSigner.from_base58("0OIl-not-base58")

    print("  LocalSigner bad keys: PASSED")


def test_local_signer_from_file(tmp_path):
    """Solana CLI JSON keypair files are supported"""
    from dex_swap_engine.infra.solana_signer import LocalSigner

    print("Testing LocalSigner from file...")

    keypair = Keypair()
    path = tmp_path / "id.json"
    path.write_text(json.dumps(list(bytes(keypair))))

    signer = LocalSigner.from_file(str(path))
    assert signer.pubkey == str(keypair.pubkey())

    print("  LocalSigner from file: PASSED")


def test_local_signer_sign_transaction():
    """Signature lands in the wallet's slot and verifies against the versioned message"""
    from dex_swap_engine.infra.solana_signer import LocalSigner

    print("Testing LocalSigner sign_transaction...")

    keypair = Keypair()
    signer = LocalSigner(keypair)
    unsigned = _unsigned_create_ata_tx(signer.pubkey)

    signed_bytes, signature = signer.sign_transaction(unsigned)

    signed = VersionedTransaction.from_bytes(signed_bytes)
    assert str(signed.signatures[0]) == signature
    assert signed.signatures[0].verify(keypair.pubkey(), to_bytes_versioned(signed.message))

    print("  LocalSigner sign_transaction: PASSED")


def test_local_signer_wrong_wallet():
    """Signing a transaction for another fee payer fails"""
    from dex_swap_engine.infra.solana_signer import LocalSigner

    print("Testing LocalSigner wrong wallet...")

    other = str(Keypair().pubkey())
    unsigned = _unsigned_create_ata_tx(other)

    with pytest.raises(ValueError):
        LocalSigner(Keypair()).sign_transaction(unsigned)

    print("  LocalSigner wrong wallet: PASSED")


def test_create_signer():
    """Test create_signer factory"""
    from dex_swap_engine.infra import create_signer, LocalSigner, Signer
    from dex_swap_engine.errors import ConfigurationError

    print("Testing create_signer...")

    keypair = Keypair()
    signer = create_signer(keypair=keypair)
    assert isinstance(signer, LocalSigner)
    assert isinstance(signer, Signer)

    from_secret = create_signer(secret_key=base58.b58encode(bytes(keypair)).decode())
    assert from_secret.pubkey == signer.pubkey

    with pytest.raises(ConfigurationError):
        create_signer()

    print("  create_signer: PASSED")
