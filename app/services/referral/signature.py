"""
Subscription code signatures.

A subscription code is an EIP-191 personal signature over
keccak256(uint256 nonce) issued off-chain by a trusted signer.
Key management stays with the issuer; the ledger only verifies.
"""

from typing import Protocol

from eth_account import Account
from eth_account.messages import SignableMessage, encode_defunct
from eth_utils import keccak
from loguru import logger

from app.utils.validation import normalize_address

UINT256_MAX = 2**256 - 1


def code_message(nonce: int) -> SignableMessage:
    """
    Signable message for a nonce.

    Raises:
        ValueError: If nonce is outside uint256
    """
    if not 0 <= nonce <= UINT256_MAX:
        raise ValueError(f"Nonce out of range: {nonce}")
    return encode_defunct(primitive=keccak(nonce.to_bytes(32, "big")))


def sign_subscription_code(private_key: str | bytes, nonce: int) -> bytes:
    """Issue a subscription code signature (issuer side)."""
    signed = Account.sign_message(code_message(nonce), private_key=private_key)
    return bytes(signed.signature)


class SignatureVerifier(Protocol):
    """Capability that checks a subscription code."""

    def verify(self, nonce: int, signature: bytes | str) -> bool:
        ...


class EthSignatureVerifier:
    """Verifies codes against a fixed trusted signer address."""

    def __init__(self, trusted_signer: str) -> None:
        self.trusted_signer = normalize_address(trusted_signer)

    def verify(self, nonce: int, signature: bytes | str) -> bool:
        try:
            recovered = Account.recover_message(
                code_message(nonce), signature=signature
            )
        except Exception as e:
            # Malformed signatures are reported as not verifying
            logger.debug(f"Signature recovery failed for nonce {nonce}: {e}")
            return False
        return recovered.lower() == self.trusted_signer
