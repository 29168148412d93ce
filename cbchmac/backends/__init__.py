from functools import partial

from cbchmac.backends.aes_gcm import GCMBackend
from cbchmac.backends.cbc_hmac import CBCHMACBackend

# Benchmark name -> backend factory
BACKENDS = {
    "A128CBC-HS256": partial(CBCHMACBackend, 16),
    "A192CBC-HS384": partial(CBCHMACBackend, 24),
    "A256CBC-HS512": partial(CBCHMACBackend, 32),
    "A128GCM": partial(GCMBackend, 16),
    "A256GCM": partial(GCMBackend, 32),
}
