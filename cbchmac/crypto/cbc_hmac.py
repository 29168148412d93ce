"""
CBC-HMAC authenticated encryption (AEAD_AES_CBC_HMAC_SHA2).

The combined key K is split in two halves of k bytes: K[:k] keys the HMAC
and K[k:] keys the block cipher. k selects the hash:

    k = 16  ->  AES-128-CBC + HMAC-SHA-256, 16-byte tag  (A128CBC-HS256)
    k = 24  ->  AES-192-CBC + HMAC-SHA-384, 24-byte tag  (A192CBC-HS384)
    k = 32  ->  AES-256-CBC + HMAC-SHA-512, 32-byte tag  (A256CBC-HS512)

Sealed output is ciphertext || tag, where the tag authenticates
aad || nonce || ciphertext || be64(bit length of aad).

Nonces are NOT tracked here. Sealing two messages with the same key and
nonce breaks confidentiality of both; the caller must keep nonces unique.
"""

import logging
from typing import Callable, Optional, Tuple, Union

from cbchmac.crypto.block_cipher import AES_BLOCK_SIZE, CBCBlockCipher, new_aes
from cbchmac.crypto.errors import (
    AuthenticationFailed,
    CiphertextTooShort,
    InvalidKey,
    InvalidPadding,
)
from cbchmac.crypto.padding import pad, unpad
from cbchmac.crypto.tag import HASH_BY_KEY_SIZE, TagComputer

log = logging.getLogger(__name__)

NONCE_SIZE = AES_BLOCK_SIZE  # CBC IV size with the default AES factory
SUPPORTED_KEY_SIZES = tuple(2 * size for size in sorted(HASH_BY_KEY_SIZE))  # combined key lengths

Buffer = Union[bytes, bytearray, memoryview]
BlockCipherFactory = Callable[[bytes], CBCBlockCipher]


def resize(buf: Optional[Buffer], n: int) -> Tuple[bytearray, memoryview]:
    """
    Make room for n bytes while keeping buf as the prefix.

    A bytearray is grown in place and reused; anything else is copied into a
    new bytearray. Returns (head, tail) where tail is a writable view of
    head[len(buf):]. Release tail before resizing head again.
    """
    if buf is None:
        buf = b""
    if n < len(buf):
        raise ValueError(f"cannot resize a {len(buf)}-byte buffer down to {n} bytes")
    if isinstance(buf, bytearray):
        head = buf
        head.extend(bytes(n - len(head)))
    else:
        head = bytearray(n)
        head[: len(buf)] = buf
    tail = memoryview(head)[len(buf):]
    return head, tail


def _emit(dst: Optional[Buffer], payload: bytes) -> Union[bytes, bytearray]:
    offset = 0 if dst is None else len(dst)
    head, tail = resize(dst, offset + len(payload))
    try:
        tail[:] = payload
    finally:
        tail.release()
    if isinstance(dst, bytearray):
        return head
    return bytes(head)


class CBCHMAC:
    """AEAD built from a CBC block cipher and a truncated HMAC."""

    def __init__(self, key: bytes, new_block_cipher: BlockCipherFactory = new_aes):
        key = bytes(key)
        if len(key) not in SUPPORTED_KEY_SIZES:
            raise InvalidKey(f"combined key must be one of {SUPPORTED_KEY_SIZES} bytes, got {len(key)}")

        key_size = len(key) // 2
        integrity_key, encryption_key = key[:key_size], key[key_size:]

        self._tag = TagComputer(integrity_key)
        try:
            self._cipher = new_block_cipher(encryption_key)
        except InvalidKey:
            raise
        except ValueError as exc:
            raise InvalidKey(f"block cipher rejected {key_size}-byte encryption key") from exc

        self.tag_size = self._tag.tag_size
        log.debug(
            "CBC-HMAC context ready: %s-CBC, HMAC-%s, %d-byte tag",
            self._cipher.name, self._tag.hash_name, self.tag_size,
        )

    @property
    def nonce_size(self) -> int:
        return self._cipher.block_size

    @property
    def overhead(self) -> int:
        # At most one full padding block plus the tag
        return self._cipher.block_size + self.tag_size

    def _check_nonce(self, nonce: Buffer) -> bytes:
        if len(nonce) != self.nonce_size:
            raise ValueError(f"nonce must be {self.nonce_size} bytes, got {len(nonce)}")
        return bytes(nonce)

    def seal(self, nonce: Buffer, plaintext: Buffer, associated_data: Optional[Buffer] = b"",
             dst: Optional[Buffer] = None) -> Union[bytes, bytearray]:
        """
        Encrypt and authenticate plaintext, returning dst || ciphertext || tag.

        nonce must be unique per key. plaintext is never modified. If dst is a
        bytearray the output is appended to it in place and dst is returned.
        """
        nonce = self._check_nonce(nonce)
        aad = b"" if associated_data is None else bytes(associated_data)
        block_size = self._cipher.block_size

        padded = pad(bytes(plaintext), block_size)
        if len(padded) % block_size or len(padded) <= len(plaintext):
            raise AssertionError("PKCS#7 padding produced a misaligned buffer")

        ciphertext = self._cipher.encrypt(nonce, padded)
        tag = self._tag.compute(aad, nonce, ciphertext)
        return _emit(dst, ciphertext + tag)

    def open(self, nonce: Buffer, data: Buffer, associated_data: Optional[Buffer] = b"",
             dst: Optional[Buffer] = None) -> Union[bytes, bytearray]:
        """
        Verify and decrypt ciphertext || tag, returning dst || plaintext.

        Raises CiphertextTooShort, AuthenticationFailed or InvalidPadding, all
        subclasses of DecryptionError. The tag is checked before any
        decryption takes place.
        """
        nonce = self._check_nonce(nonce)
        aad = b"" if associated_data is None else bytes(associated_data)
        data = bytes(data)

        if len(data) < self.tag_size:
            log.debug("open rejected: %d bytes is shorter than the tag", len(data))
            raise CiphertextTooShort("invalid ciphertext (too short)")

        offset = len(data) - self.tag_size
        ciphertext, tag = data[:offset], data[offset:]
        if not self._tag.verify(aad, nonce, ciphertext, tag):
            log.debug("open rejected: authentication failed")
            raise AuthenticationFailed("invalid ciphertext (auth tag mismatch)")

        block_size = self._cipher.block_size
        if not ciphertext or len(ciphertext) % block_size:
            raise InvalidPadding("invalid ciphertext (not a whole number of blocks)")

        try:
            plaintext = unpad(self._cipher.decrypt(nonce, ciphertext), block_size)
        except InvalidPadding:
            log.debug("open rejected: bad padding after a valid tag")
            raise
        return _emit(dst, plaintext)

    # Same argument order as cryptography's AESGCM / ChaCha20Poly1305.
    def encrypt(self, nonce: Buffer, data: Buffer, associated_data: Optional[Buffer]) -> bytes:
        return bytes(self.seal(nonce, data, associated_data))

    def decrypt(self, nonce: Buffer, data: Buffer, associated_data: Optional[Buffer]) -> bytes:
        return bytes(self.open(nonce, data, associated_data))
