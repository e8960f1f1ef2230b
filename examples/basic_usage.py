"""
Threshold — Basic Usage Example

Demonstrates backing up a message so that any 3 of 5 key holders can
restore it, and splitting a raw key directly.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from threshold import (
    BackupContentType,
    BackupItem,
    Share,
    ThresholdError,
    configure_logging,
    create_backup,
    generate_shares,
    reconstruct,
    restore_backup,
)


def main():
    configure_logging("INFO")

    print("=" * 50)
    print("  Threshold — 3-of-5 Encrypted Backup")
    print("=" * 50)

    items = [
        BackupItem(
            description="Instructions - read first",
            content_type=BackupContentType.TEXT,
            content="Recovery codes are in the second item.".encode("utf-8"),
        ),
        BackupItem(
            description="Recovery codes",
            content_type=BackupContentType.TEXT_FILE,
            file_name="codes.txt",
            content=b"1111-2222\n3333-4444\n",
        ),
    ]

    backup = create_backup(items, total_parts=5, required_parts=3)
    print(f"\nCiphertext: {len(backup.ciphertext)} bytes")

    # Shares are handed out as text, one per key holder
    printed = [share.to_hex() for share in backup.shares]
    for line in printed:
        print(f"  {line}")

    # Any three holders come back together
    returned = [Share.from_hex(printed[i]) for i in (0, 2, 4)]
    restored = restore_backup(backup.ciphertext, returned)
    for item in restored:
        print(f"  [{item.content_type.name}] {item.description}: {len(item.content)} bytes")

    # Two are not enough
    print("\nAttempting restore with two shares...")
    try:
        restore_backup(backup.ciphertext, returned[:2])
        print("  ERROR: Should have failed!")
    except ThresholdError:
        print("  Correctly rejected — too few shares = wrong key = can't decrypt")

    # The core can also split any key directly
    key = bytes(range(32))
    shares = generate_shares(key, total_parts=4, required_parts=2)
    assert reconstruct(shares[1:3]) == key
    print("\nRaw key split 2-of-4 and reconstructed.")


if __name__ == "__main__":
    main()
