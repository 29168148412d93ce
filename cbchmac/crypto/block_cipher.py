from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from cbchmac.crypto.errors import InvalidKey

AES_BLOCK_SIZE = algorithms.AES.block_size // 8


class CBCBlockCipher:
    """
    A keyed block cipher driven in CBC mode over whole blocks.

    The IV is supplied per call and a fresh cipher context is built every
    time, so one instance can serve concurrent callers.
    """

    def __init__(self, algorithm: algorithms.BlockCipherAlgorithm):
        self._algorithm = algorithm
        self.block_size = algorithm.block_size // 8

    @property
    def name(self) -> str:
        return self._algorithm.name

    def encrypt(self, iv: bytes, data: bytes) -> bytes:
        """CBC-encrypt data, which must already be a whole number of blocks."""
        encryptor = Cipher(self._algorithm, modes.CBC(iv), backend=default_backend()).encryptor()
        return encryptor.update(data) + encryptor.finalize()

    def decrypt(self, iv: bytes, data: bytes) -> bytes:
        decryptor = Cipher(self._algorithm, modes.CBC(iv), backend=default_backend()).decryptor()
        return decryptor.update(data) + decryptor.finalize()


def new_aes(key: bytes) -> CBCBlockCipher:
    """Build an AES block cipher, rejecting keys that are not 16, 24 or 32 bytes."""
    try:
        algorithm = algorithms.AES(bytes(key))
    except ValueError as exc:
        raise InvalidKey(f"AES requires a 16, 24 or 32-byte key, got {len(key)}") from exc
    return CBCBlockCipher(algorithm)
