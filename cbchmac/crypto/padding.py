from cryptography.hazmat.primitives import padding

from cbchmac.crypto.errors import InvalidPadding


def _pkcs7(block_size: int) -> padding.PKCS7:
    if not 1 <= block_size <= 255:
        raise ValueError(f"PKCS#7 block size must be 1..255 bytes, got {block_size}")
    return padding.PKCS7(block_size * 8)


def pad(buffer: bytes, block_size: int) -> bytes:
    """
    Append p bytes of value p so the result is a whole number of blocks.
    p is always between 1 and block_size, a full block when already aligned.
    """
    padder = _pkcs7(block_size).padder()
    return padder.update(bytes(buffer)) + padder.finalize()


def unpad(buffer: bytes, block_size: int) -> bytes:
    """Strip PKCS#7 padding, raising InvalidPadding when it is malformed."""
    unpadder = _pkcs7(block_size).unpadder()
    try:
        return unpadder.update(bytes(buffer)) + unpadder.finalize()
    except ValueError as exc:
        raise InvalidPadding("invalid ciphertext (bad padding)") from exc
