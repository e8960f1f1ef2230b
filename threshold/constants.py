"""
constants.py

Field parameters and tunables for the threshold package.

The field parameters are fixed: shares produced with one set of values
cannot be reconstructed with another. Only the entries in DEFAULTS are
meant to be adjusted at runtime.
"""

import os
from typing import Any, Dict

# Mersenne prime 2**31 - 1. Every field element fits in 31 bits, so a
# product of two elements fits comfortably in 64 bits.
MODULUS = (1 << 31) - 1

# Secret bits carried per field element. The largest block value
# (2**30 - 1) stays below MODULUS.
BITS_PER_BLOCK = 30

# Bytes per serialized field element (big-endian uint32).
FIELD_ELEMENT_SIZE = 4

# Backup layer: AES-256-GCM parameters
KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16

DEFAULTS: Dict[str, Any] = {
    # Rejection sampling draws 31 bits and keeps values below MODULUS, so
    # a single attempt fails with probability 2**-31.
    "MAX_COEFFICIENT_ATTEMPTS": 1024,

    # Level used by logger.configure_logging() when none is given
    "LOG_LEVEL": os.environ.get("THRESHOLD_LOG_LEVEL", "WARNING"),
}


def update_from_dict(d):
    DEFAULTS.update(d)
