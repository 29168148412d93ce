import pytest
from cryptography.exceptions import InvalidTag

from cbchmac.backends import BACKENDS
from cbchmac.backends.aes_gcm import GCMBackend
from cbchmac.backends.cbc_hmac import CBCHMACBackend, derive_content_key
from cbchmac.crypto.errors import CiphertextTooShort


@pytest.mark.parametrize("name", sorted(BACKENDS))
def test_round_trip(name):
    backend = BACKENDS[name]()
    timings = backend.setup_keys()
    assert set(timings) == {"shared_secret_ms", "kdf_ms", "context_setup_ms"}

    blob = backend.encrypt(b"x" * 100)
    assert isinstance(blob, bytes)
    assert backend.decrypt(blob) == b"x" * 100
    assert backend.decrypt_symmetric(backend.encrypt_symmetric(b"")) == b""


@pytest.mark.parametrize("name", sorted(BACKENDS))
def test_tamper_raises_invalid_tag(name):
    backend = BACKENDS[name]()
    backend.setup_keys()
    blob = bytearray(backend.encrypt(b"payload"))
    blob[-1] ^= 0x80
    with pytest.raises(InvalidTag):
        backend.decrypt(bytes(blob))


@pytest.mark.parametrize("key_size", [16, 24, 32])
def test_cbc_hmac_framing(key_size):
    backend = CBCHMACBackend(key_size)
    backend.setup_keys()
    assert len(backend.key) == 2 * key_size
    blob = backend.encrypt(b"0123456789")
    # nonce + one padded block + tag
    assert len(blob) == 16 + 16 + key_size


def test_associated_data_is_bound():
    sender = CBCHMACBackend(16, associated_data=b"header")
    sender.setup_keys()
    receiver = CBCHMACBackend(16, associated_data=b"other")
    receiver.key, receiver.aead = sender.key, sender.aead
    with pytest.raises(InvalidTag):
        receiver.decrypt(sender.encrypt(b"payload"))


def test_derive_content_key_is_deterministic():
    secret = bytes(32)
    a = derive_content_key(secret, "A128CBC-HS256", 32)
    assert a == derive_content_key(secret, "A128CBC-HS256", 32)
    assert a != derive_content_key(secret, "A256CBC-HS512", 32)
    assert len(derive_content_key(secret, "A256CBC-HS512", 64)) == 64


@pytest.mark.parametrize("backend_cls", [CBCHMACBackend, GCMBackend])
def test_requires_setup(backend_cls):
    backend = backend_cls()
    with pytest.raises(RuntimeError):
        backend.encrypt(b"payload")
    with pytest.raises(RuntimeError):
        backend.decrypt(b"payload")


def test_short_blob_cbc_hmac():
    backend = CBCHMACBackend()
    backend.setup_keys()
    with pytest.raises(CiphertextTooShort):
        backend.decrypt(b"short")


def test_short_blob_gcm_matches_aesgcm():
    backend = GCMBackend()
    backend.setup_keys()
    with pytest.raises(InvalidTag):
        backend.decrypt(b"short")
    with pytest.raises(InvalidTag):
        backend.aesgcm.decrypt(bytes(12), b"short", b"")


def test_unknown_key_size():
    with pytest.raises(ValueError):
        CBCHMACBackend(20)
    with pytest.raises(ValueError):
        GCMBackend(20)
