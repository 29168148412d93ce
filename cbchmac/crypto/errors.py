from cryptography.exceptions import InvalidTag


class CBCHMACError(Exception):
    """Base class for every error raised by the CBC-HMAC construction."""


class InvalidKey(CBCHMACError, ValueError):
    """Combined key has an unsupported length or was rejected by the block cipher."""


class DecryptionError(CBCHMACError):
    """Any failure while opening a sealed message.

    Catch this class to treat every open failure the same way.
    """


class CiphertextTooShort(DecryptionError):
    """Input is shorter than the authentication tag."""


class AuthenticationFailed(DecryptionError, InvalidTag):
    """Authentication tag did not match."""


class InvalidPadding(DecryptionError):
    """Decrypted plaintext carries malformed PKCS#7 padding."""
