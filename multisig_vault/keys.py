"""
Owner identities and request signing
"""

import hashlib
from typing import Optional, Tuple

from ecdsa import BadSignatureError, SECP256k1, SigningKey, VerifyingKey
from ecdsa.errors import MalformedPointError


class OwnerKey:
    """SECP256k1 key pair whose compressed public key is an owner identity"""

    def __init__(self, private_key: Optional[bytes] = None):
        if private_key:
            self.private_key = SigningKey.from_string(private_key, curve=SECP256k1)
        else:
            self.private_key = SigningKey.generate(curve=SECP256k1)

        self.public_key = self.private_key.get_verifying_key()

    @classmethod
    def from_hex(cls, private_hex: str) -> 'OwnerKey':
        return cls(bytes.fromhex(private_hex))

    @property
    def identity(self) -> str:
        """Compressed public key in hex (33 bytes, 02/03 prefix)"""
        return self.public_key.to_string("compressed").hex()

    def sign_message(self, message: bytes) -> str:
        """Sign message and return signature in hex"""
        signature = self.private_key.sign(message, hashfunc=hashlib.sha256)
        return signature.hex()

    @staticmethod
    def verify_signature(message: bytes, signature_hex: str, pubkey_hex: str) -> bool:
        """Verify signature against message and public key.

        Accepts compressed or uncompressed public keys. Malformed keys or
        signatures verify as False.
        """
        try:
            vk = VerifyingKey.from_string(bytes.fromhex(pubkey_hex), curve=SECP256k1)
            signature = bytes.fromhex(signature_hex)
            return vk.verify(signature, message, hashfunc=hashlib.sha256)
        except (BadSignatureError, MalformedPointError, ValueError, TypeError):
            return False

    @staticmethod
    def generate_key_pair() -> Tuple[str, str]:
        """Generate new key pair and return (private_key_hex, public_key_hex)"""
        key = OwnerKey()
        private_hex = key.private_key.to_string().hex()
        return private_hex, key.identity
