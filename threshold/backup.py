"""
Threshold Backup — Encrypt Once, Split the Key
AES-256-GCM encryption of a set of backup items, with the key split into
Shamir shares.

Flow for creating a backup:
1. Pack the items into a single binary payload
2. Generate a fresh 256-bit key
3. Encrypt the payload with AES-256-GCM
4. Split the key into N shares, any K of which recover it
5. Wipe the key

The ciphertext can be stored or printed anywhere; it is useless without K
shares. Each key encrypts exactly one payload, so a fixed all-zero nonce is
safe.
"""

import enum
import os
import struct
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from threshold.constants import KEY_SIZE, NONCE_SIZE, TAG_SIZE
from threshold.errors import BackupError
from threshold.logger import secure_log, secure_zero
from threshold.shamir import SecretSharingAlgorithm, Share

_NONCE = bytes(NONCE_SIZE)
_LENGTH = struct.Struct(">I")


class BackupContentType(enum.IntEnum):
    """What kind of content a backup item holds."""
    TEXT = 0
    TEXT_FILE = 1
    BINARY_FILE = 2
    KEY_PAIR = 3
    PRIVATE_KEY = 4


@dataclass(frozen=True)
class BackupItem:
    """One entry of a backup."""
    description: str
    content_type: BackupContentType
    content: bytes
    file_name: str | None = None


@dataclass(frozen=True)
class ThresholdBackup:
    """Result of create_backup(): the ciphertext (with GCM tag) and the key shares."""
    ciphertext: bytes
    shares: list[Share]


def _write_field(out: bytearray, data: bytes):
    out += _LENGTH.pack(len(data))
    out += data


def pack_items(items: list[BackupItem]) -> bytes:
    """
    Serialize backup items into one payload.

    Each item is a content-type byte followed by the description, file name
    and content, each prefixed with a 4-byte big-endian length. A missing
    file name is stored as an empty string.
    """
    out = bytearray()
    for item in items:
        out.append(int(item.content_type))
        _write_field(out, item.description.encode("utf-8"))
        _write_field(out, (item.file_name or "").encode("utf-8"))
        _write_field(out, bytes(item.content))
    return bytes(out)


def unpack_items(payload: bytes) -> list[BackupItem]:
    """Inverse of pack_items(). Raises BackupError on malformed input."""
    view = memoryview(payload)
    pos = 0
    items = []

    def read_field():
        nonlocal pos
        if pos + _LENGTH.size > len(view):
            raise BackupError("Truncated backup payload")
        (length,) = _LENGTH.unpack_from(view, pos)
        pos += _LENGTH.size
        if pos + length > len(view):
            raise BackupError("Truncated backup payload")
        field = bytes(view[pos:pos + length])
        pos += length
        return field

    while pos < len(view):
        try:
            content_type = BackupContentType(view[pos])
        except ValueError as e:
            raise BackupError(f"Unknown content type {view[pos]}") from e
        pos += 1
        try:
            description = read_field().decode("utf-8")
            file_name = read_field().decode("utf-8")
        except UnicodeDecodeError as e:
            raise BackupError("Backup item text is not valid UTF-8") from e
        content = read_field()
        items.append(BackupItem(
            description=description,
            content_type=content_type,
            content=content,
            file_name=file_name or None,
        ))

    return items


def create_backup(items: list[BackupItem], total_parts: int, required_parts: int, random_bytes=os.urandom) -> ThresholdBackup:
    """
    Encrypt items under a fresh key and split the key into shares.

    Args:
        items: The items to back up.
        total_parts: Total shares to generate (N).
        required_parts: Shares needed to restore (K).
        random_bytes: Random source for the key and the share polynomials.

    Returns:
        ThresholdBackup with the ciphertext and N key shares.
    """
    algorithm = SecretSharingAlgorithm(random_bytes)
    plaintext = pack_items(items)

    key = bytearray(random_bytes(KEY_SIZE))
    try:
        if len(key) != KEY_SIZE:
            raise BackupError(f"Random source returned {len(key)} key bytes, expected {KEY_SIZE}")
        # Split first so invalid counts fail before anything is encrypted
        shares = algorithm.generate_shares(key, total_parts, required_parts)
        ciphertext = AESGCM(bytes(key)).encrypt(_NONCE, plaintext, None)
    finally:
        secure_zero(key)

    secure_log(
        "info", "Created threshold backup",
        items=len(items), total_parts=total_parts, required_parts=required_parts,
        ciphertext_bytes=len(ciphertext),
    )
    return ThresholdBackup(ciphertext=ciphertext, shares=shares)


def restore_backup(ciphertext: bytes, shares: list[Share]) -> list[BackupItem]:
    """
    Recover backup items from the ciphertext and K or more shares.

    Raises:
        BackupError: If the key does not decrypt the ciphertext (wrong or
            too few shares, or tampered ciphertext).
        ThresholdError: If the shares themselves are invalid.
    """
    if len(ciphertext) < TAG_SIZE:
        raise BackupError("Ciphertext is shorter than the authentication tag")

    key = bytearray(SecretSharingAlgorithm().reconstruct(shares))
    try:
        if len(key) != KEY_SIZE:
            raise BackupError(f"Reconstructed key is {len(key)} bytes, expected {KEY_SIZE}")
        plaintext = AESGCM(bytes(key)).decrypt(_NONCE, ciphertext, None)
    except InvalidTag as e:
        raise BackupError("Backup could not be decrypted with the given shares") from e
    finally:
        secure_zero(key)

    items = unpack_items(plaintext)
    secure_log("info", "Restored threshold backup", items=len(items), shares=len(shares))
    return items
