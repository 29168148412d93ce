"""AEAD_AES_CBC_HMAC_SHA2 authenticated encryption on top of `cryptography`."""

from cbchmac.crypto import CBCHMAC, ConcatKDF, DecryptionError

__version__ = "0.1.0"
