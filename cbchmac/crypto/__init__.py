from cbchmac.crypto.block_cipher import CBCBlockCipher, new_aes
from cbchmac.crypto.cbc_hmac import CBCHMAC, NONCE_SIZE, SUPPORTED_KEY_SIZES, resize
from cbchmac.crypto.concat_kdf import ConcatKDF, length_prefixed
from cbchmac.crypto.errors import (
    AuthenticationFailed,
    CBCHMACError,
    CiphertextTooShort,
    DecryptionError,
    InvalidKey,
    InvalidPadding,
)
from cbchmac.crypto.tag import TagComputer

__all__ = [
    "AuthenticationFailed",
    "CBCBlockCipher",
    "CBCHMAC",
    "CBCHMACError",
    "CiphertextTooShort",
    "ConcatKDF",
    "DecryptionError",
    "InvalidKey",
    "InvalidPadding",
    "NONCE_SIZE",
    "SUPPORTED_KEY_SIZES",
    "TagComputer",
    "length_prefixed",
    "new_aes",
    "resize",
]
