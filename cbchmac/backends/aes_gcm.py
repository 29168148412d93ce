import os
from time import perf_counter
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from cbchmac.backends.cbc_hmac import SHARED_SECRET_SIZE, derive_content_key

NONCE_SIZE = 12  # AES-GCM standard (96-bit)
ENC_NAMES = {16: "A128GCM", 24: "A192GCM", 32: "A256GCM"}


class GCMBackend:
    """
    AES-GCM baseline exposing setup_keys(), encrypt(), decrypt().
    Keyed through the same Concat KDF path as the CBC-HMAC backend.
    """

    def __init__(self, key_size: int = 16, associated_data: bytes = b""):
        if key_size not in ENC_NAMES:
            raise ValueError(f"key_size must be one of {sorted(ENC_NAMES)}, got {key_size}")
        self.key_size = key_size
        self.enc = ENC_NAMES[key_size]
        self.associated_data = associated_data
        self.key: Optional[bytes] = None
        self.aesgcm: Optional[AESGCM] = None

    def setup_keys(self):
        """Derive a fresh AES-GCM key. Returns timing breakdown dict."""
        t0 = perf_counter()
        shared_secret = os.urandom(SHARED_SECRET_SIZE)
        t1 = perf_counter()
        self.key = derive_content_key(shared_secret, self.enc, self.key_size)
        t2 = perf_counter()
        self.aesgcm = AESGCM(self.key)
        t3 = perf_counter()
        return {
            "shared_secret_ms": (t1 - t0) * 1000.0,
            "kdf_ms": (t2 - t1) * 1000.0,
            "context_setup_ms": (t3 - t2) * 1000.0,
        }

    def encrypt(self, message: bytes) -> bytes:
        if not self.aesgcm:
            raise RuntimeError("Keys not initialized. Call setup_keys() first.")
        nonce = os.urandom(NONCE_SIZE)
        return nonce + self.aesgcm.encrypt(nonce, message, self.associated_data)

    def decrypt(self, blob: bytes) -> bytes:
        if not self.aesgcm:
            raise RuntimeError("Keys not initialized. Call setup_keys() first.")
        if len(blob) < NONCE_SIZE:
            raise InvalidTag()
        nonce, ct = blob[:NONCE_SIZE], blob[NONCE_SIZE:]
        return self.aesgcm.decrypt(nonce, ct, self.associated_data)

    def encrypt_symmetric(self, message: bytes) -> bytes:
        return self.encrypt(message)

    def decrypt_symmetric(self, payload: bytes) -> bytes:
        return self.decrypt(payload)
