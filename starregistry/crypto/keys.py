# starregistry/crypto/keys.py
"""
Ed25519 wallet keys. A wallet address is the unpadded base64url encoding of the
raw 32-byte public key, so the verifying key is recoverable from the address alone.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from cryptography.exceptions import InvalidSignature as _CryptoInvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from starregistry.core.encoding import b64url_decode, b64url_encode


@dataclass
class WalletKeyPair:
    public_key: Ed25519PublicKey
    private_key: Optional[Ed25519PrivateKey] = None

    @classmethod
    def generate(cls) -> "WalletKeyPair":
        private_key = Ed25519PrivateKey.generate()
        return cls(public_key=private_key.public_key(), private_key=private_key)

    @classmethod
    def from_private_b64url(cls, value: str) -> "WalletKeyPair":
        private_key = Ed25519PrivateKey.from_private_bytes(b64url_decode(value))
        return cls(public_key=private_key.public_key(), private_key=private_key)

    @classmethod
    def from_address(cls, address: str) -> "WalletKeyPair":
        """Verification-only key pair. Raises ValueError if the address is not a 32-byte key."""
        return cls(public_key=Ed25519PublicKey.from_public_bytes(b64url_decode(address)))

    @property
    def address(self) -> str:
        raw = self.public_key.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        return b64url_encode(raw)

    def private_key_b64url(self) -> str:
        if self.private_key is None:
            raise ValueError("Verification-only key pair has no private key")
        raw = self.private_key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        return b64url_encode(raw)

    def sign(self, message: str) -> str:
        """Sign a challenge message; returns the base64url signature."""
        if self.private_key is None:
            raise ValueError("Cannot sign with a verification-only key pair")
        return b64url_encode(self.private_key.sign(message.encode("utf-8")))

    def verify_bytes(self, signature: bytes, data: bytes) -> bool:
        try:
            self.public_key.verify(signature, data)
            return True
        except _CryptoInvalidSignature:
            return False


class MessageVerifier(ABC):
    """Signature verification primitive used by the ownership proof."""

    @abstractmethod
    def verify(self, message: str, address: str, signature: str) -> bool:
        """True if `signature` signs `message` under the key behind `address`.

        May raise on input the primitive cannot parse at all.
        """


class Ed25519MessageVerifier(MessageVerifier):
    def verify(self, message: str, address: str, signature: str) -> bool:
        wallet = WalletKeyPair.from_address(address)
        return wallet.verify_bytes(b64url_decode(signature), message.encode("utf-8"))
