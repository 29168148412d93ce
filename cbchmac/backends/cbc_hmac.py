import os
import struct
from time import perf_counter
from typing import Optional

from cryptography.hazmat.primitives import hashes

from cbchmac.crypto.cbc_hmac import CBCHMAC
from cbchmac.crypto.concat_kdf import ConcatKDF, length_prefixed
from cbchmac.crypto.errors import CiphertextTooShort

# Integrity-key half size -> JOSE "enc" name
ENC_NAMES = {16: "A128CBC-HS256", 24: "A192CBC-HS384", 32: "A256CBC-HS512"}

SHARED_SECRET_SIZE = 32
PARTY_U = b"Alice"
PARTY_V = b"Bob"


def derive_content_key(shared_secret: bytes, enc: str, key_len: int) -> bytes:
    """Expand a shared secret into key_len bytes of content key, JWA ECDH-ES style."""
    kdf = ConcatKDF(
        hashes.SHA256(),
        shared_secret,
        length_prefixed(enc.encode("ascii")),
        length_prefixed(PARTY_U),
        length_prefixed(PARTY_V),
        struct.pack(">I", key_len * 8),
    )
    return kdf.read(key_len)


class CBCHMACBackend:
    """
    CBC-HMAC backend exposing setup_keys(), encrypt(), decrypt().
    Messages are framed as nonce || ciphertext || tag.
    """

    def __init__(self, key_size: int = 16, associated_data: bytes = b""):
        if key_size not in ENC_NAMES:
            raise ValueError(f"key_size must be one of {sorted(ENC_NAMES)}, got {key_size}")
        self.key_size = key_size
        self.enc = ENC_NAMES[key_size]
        self.associated_data = associated_data
        self.key: Optional[bytes] = None
        self.aead: Optional[CBCHMAC] = None

    def setup_keys(self):
        """Derive a fresh combined key through Concat KDF. Returns timing breakdown dict."""
        t0 = perf_counter()
        shared_secret = os.urandom(SHARED_SECRET_SIZE)
        t1 = perf_counter()
        self.key = derive_content_key(shared_secret, self.enc, 2 * self.key_size)
        t2 = perf_counter()
        self.aead = CBCHMAC(self.key)
        t3 = perf_counter()
        return {
            "shared_secret_ms": (t1 - t0) * 1000.0,
            "kdf_ms": (t2 - t1) * 1000.0,
            "context_setup_ms": (t3 - t2) * 1000.0,
        }

    def encrypt(self, message: bytes) -> bytes:
        if not self.aead:
            raise RuntimeError("Keys not initialized. Call setup_keys() first.")
        nonce = os.urandom(self.aead.nonce_size)
        return bytes(self.aead.seal(nonce, message, self.associated_data, dst=bytearray(nonce)))

    def decrypt(self, blob: bytes) -> bytes:
        if not self.aead:
            raise RuntimeError("Keys not initialized. Call setup_keys() first.")
        size = self.aead.nonce_size
        if len(blob) < size:
            raise CiphertextTooShort("blob shorter than the nonce")
        nonce, ct = blob[:size], blob[size:]
        return self.aead.open(nonce, ct, self.associated_data)

    # Granular symmetric API for benchmarking parity with the GCM backend
    def encrypt_symmetric(self, message: bytes) -> bytes:
        return self.encrypt(message)

    def decrypt_symmetric(self, payload: bytes) -> bytes:
        return self.decrypt(payload)
