import struct
from typing import Dict, Type

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import constant_time, hashes, hmac

from cbchmac.crypto.errors import InvalidKey

# Integrity key size in bytes -> HMAC hash. The tag is truncated to the key size.
HASH_BY_KEY_SIZE: Dict[int, Type[hashes.HashAlgorithm]] = {
    16: hashes.SHA256,
    24: hashes.SHA384,
    32: hashes.SHA512,
}


def hash_for_key_size(size: int) -> Type[hashes.HashAlgorithm]:
    try:
        return HASH_BY_KEY_SIZE[size]
    except KeyError:
        raise InvalidKey(
            f"integrity key must be one of {sorted(HASH_BY_KEY_SIZE)} bytes, got {size}"
        ) from None


def aad_bit_length(aad: bytes) -> bytes:
    """Big-endian 64-bit count of bits in the associated data (the AL field)."""
    return struct.pack(">Q", len(aad) * 8)


class TagComputer:
    """Truncated HMAC over aad || nonce || ciphertext || AL."""

    def __init__(self, integrity_key: bytes):
        self._algorithm = hash_for_key_size(len(integrity_key))
        self._key = bytes(integrity_key)
        self.tag_size = len(self._key)

    @property
    def hash_name(self) -> str:
        return self._algorithm.name

    def compute(self, aad: bytes, nonce: bytes, ciphertext: bytes) -> bytes:
        mac = hmac.HMAC(self._key, self._algorithm(), backend=default_backend())
        mac.update(aad)
        mac.update(nonce)
        mac.update(ciphertext)
        mac.update(aad_bit_length(aad))
        return mac.finalize()[: self.tag_size]

    def verify(self, aad: bytes, nonce: bytes, ciphertext: bytes, tag: bytes) -> bool:
        """Recompute the tag and compare in constant time."""
        expected = self.compute(aad, nonce, ciphertext)
        return constant_time.bytes_eq(expected, bytes(tag))
