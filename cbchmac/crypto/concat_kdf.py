"""
Concat KDF (NIST SP 800-56A single-step KDF) as a resumable byte stream.

Round i, counted from 1, produces

    H(be32(i) || Z || AlgorithmID || PartyUInfo || PartyVInfo || SuppPubInfo || SuppPrivInfo)

and the output is the rounds concatenated. JWA ECDH-ES expects every info
field except SuppPubInfo/SuppPrivInfo to be length prefixed already; use
length_prefixed() to build them.
"""

import struct

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes

MAX_ROUNDS = 0xFFFFFFFF


def length_prefixed(data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + bytes(data)


class ConcatKDF:
    """
    Deterministic key stream. Reading n bytes in any chunk pattern yields the
    same bytes as a single read of n. Not safe to share between threads.
    """

    def __init__(self, algorithm: hashes.HashAlgorithm, z: bytes, alg_id: bytes,
                 party_u_info: bytes, party_v_info: bytes,
                 supp_pub_info: bytes = b"", supp_priv_info: bytes = b""):
        self._algorithm = algorithm
        self._z = bytes(z)
        self._info = b"".join(
            bytes(field) for field in (alg_id, party_u_info, party_v_info, supp_pub_info, supp_priv_info)
        )
        self._cache = b""
        self._round = 1

    def _next_block(self) -> bytes:
        if self._round > MAX_ROUNDS:
            raise ValueError("concat kdf output exhausted")
        digest = hashes.Hash(self._algorithm, backend=default_backend())
        digest.update(struct.pack(">I", self._round))
        digest.update(self._z)
        digest.update(self._info)
        self._round += 1
        return digest.finalize()

    def readinto(self, buffer) -> int:
        """Fill buffer completely and return the number of bytes written."""
        with memoryview(buffer) as view:
            out = view.cast("B")
            copied = min(len(self._cache), len(out))
            out[:copied] = self._cache[:copied]
            self._cache = self._cache[copied:]

            while copied < len(out):
                block = self._next_block()
                take = min(len(block), len(out) - copied)
                out[copied:copied + take] = block[:take]
                # Keep the rest of the block for the next read
                self._cache = block[take:]
                copied += take
            out.release()
        return copied

    def read(self, size: int) -> bytes:
        if size < 0:
            raise ValueError("size must be non-negative")
        out = bytearray(size)
        self.readinto(out)
        return bytes(out)
