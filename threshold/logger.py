"""
logger.py

Logging helpers with sanitization so secret material never reaches a log
record, plus best-effort zeroing of sensitive buffers.

The package never configures logging on import; applications call
configure_logging() if they want the default format.
"""

import logging
from typing import Any

from . import constants

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
logger = logging.getLogger("threshold")

_SENSITIVE_KEYS = {
    "secret", "key", "coefficients", "coefficient", "y", "plaintext",
    "content", "password", "seed",
}


def configure_logging(level=None):
    """Install a root handler using LOG_FORMAT. Safe to call more than once."""
    if level is None:
        level = constants.DEFAULTS["LOG_LEVEL"]
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger.setLevel(level)


def _sanitize(obj: Any) -> Any:
    """
    Recursively sanitize common containers to avoid logging secrets.
    Raw byte strings are replaced by their length.
    """
    if isinstance(obj, dict):
        out = {}
        for k, v in obj.items():
            if str(k).lower() in _SENSITIVE_KEYS:
                out[k] = "<REDACTED>"
            else:
                out[k] = _sanitize(v)
        return out
    if isinstance(obj, (list, tuple)):
        return type(obj)(_sanitize(x) for x in obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return f"<{len(obj)} bytes>"
    return obj


def secure_log(level: str, msg: str, **fields):
    """
    Log while sanitizing fields.
    Example: secure_log('debug', 'split', total_parts=5, secret=b'...')
    """
    lg = getattr(logger, level.lower(), logger.info)
    if not fields:
        lg(msg)
        return
    sanitized = {k: "<REDACTED>" if k.lower() in _SENSITIVE_KEYS else _sanitize(v)
                 for k, v in fields.items()}
    lg("%s | %s", msg, sanitized)


def secure_zero(buffer) -> bool:
    """
    Best-effort overwrite for mutable buffers (bytearray, memoryview, or a
    list of ints such as a coefficient buffer).
    Returns True on success, False if the buffer cannot be written.
    """
    if isinstance(buffer, bytearray):
        for i in range(len(buffer)):
            buffer[i] = 0
        return True
    if isinstance(buffer, memoryview):
        if buffer.readonly:
            return False
        buffer.cast("B")[:] = bytes(buffer.nbytes)
        return True
    if isinstance(buffer, list):
        for i in range(len(buffer)):
            buffer[i] = 0
        return True
    return False
