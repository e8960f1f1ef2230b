"""
Threshold — Shamir Secret Sharing for Encryption Keys
Split a key into N shares such that any K reconstruct it exactly.

Two layers:
1. Core — Shamir's Secret Sharing over GF(2**31 - 1), with a padding bit
   codec that turns secrets of any length into 30-bit field blocks
2. Backup — AES-256-GCM encryption of a set of items, with only the key
   split into shares

Usage:
    from threshold import generate_shares, reconstruct
    shares = generate_shares(key, total_parts=5, required_parts=3)
    key = reconstruct(shares[:3])
"""

from threshold.shamir import (
    Share,
    SecretSharingAlgorithm,
    generate_shares,
    reconstruct,
    verify_shares,
)
from threshold.mathutils import multiplicative_inverse
from threshold.bits import PaddingBitReader, UnpaddingBitWriter
from threshold.backup import (
    BackupContentType,
    BackupItem,
    ThresholdBackup,
    create_backup,
    restore_backup,
)
from threshold.errors import (
    ThresholdError,
    InvalidArgument,
    NotInvertible,
    DuplicateShare,
    InconsistentShares,
    InvalidShareLength,
    InvalidPadding,
    BufferOverflow,
    AlreadyFinalized,
    FractionalByteMessage,
    RandomSourceExhausted,
    BackupError,
)
from threshold.logger import configure_logging

__version__ = "0.1.0"
__all__ = [
    "Share",
    "SecretSharingAlgorithm",
    "generate_shares",
    "reconstruct",
    "verify_shares",
    "multiplicative_inverse",
    "PaddingBitReader",
    "UnpaddingBitWriter",
    "BackupContentType",
    "BackupItem",
    "ThresholdBackup",
    "create_backup",
    "restore_backup",
    "ThresholdError",
    "InvalidArgument",
    "NotInvertible",
    "DuplicateShare",
    "InconsistentShares",
    "InvalidShareLength",
    "InvalidPadding",
    "BufferOverflow",
    "AlreadyFinalized",
    "FractionalByteMessage",
    "RandomSourceExhausted",
    "BackupError",
    "configure_logging",
]
