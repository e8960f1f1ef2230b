"""
Tests for Shamir's Secret Sharing over GF(2**31 - 1).
"""

import itertools
import os
import random
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import threshold.shamir as shamir_module
from threshold.constants import MODULUS
from threshold.errors import (
    DuplicateShare,
    FractionalByteMessage,
    InvalidArgument,
    InvalidPadding,
    InvalidShareLength,
    RandomSourceExhausted,
    ThresholdError,
)
from threshold.shamir import (
    SecretSharingAlgorithm,
    Share,
    generate_shares,
    reconstruct,
    verify_shares,
)


class ScriptedRandom:
    """Random source that replays fixed 4-byte values, then repeats the last."""

    def __init__(self, *values):
        self.values = list(values)
        self.calls = 0

    def __call__(self, n):
        assert n == 4
        value = self.values[min(self.calls, len(self.values) - 1)]
        self.calls += 1
        return value.to_bytes(4, "big")


def _single_share(value: int) -> Share:
    return Share(x=1, y=value.to_bytes(4, "big"))


def _raises(exc_type, fn, *args):
    try:
        fn(*args)
    except exc_type:
        return True
    return False


def test_split_and_combine_basic():
    """Test basic split and reconstruct."""
    print("Testing split/reconstruct (basic)...", end=" ")
    secret = os.urandom(32)
    shares = generate_shares(secret, total_parts=5, required_parts=3)

    assert len(shares) == 5
    assert [s.x for s in shares] == [1, 2, 3, 4, 5]
    # 256 bits -> 8 full 30-bit blocks + 1 padded block
    for s in shares:
        assert len(s.y) == 9 * 4
        assert s.block_count == 9

    assert reconstruct(shares[:3]) == secret
    assert reconstruct(shares) == secret
    print("PASS")


def test_combine_any_k_shares():
    """Test that ANY K shares can reconstruct."""
    print("Testing any K shares reconstruct...", end=" ")
    secret = os.urandom(32)
    shares = generate_shares(secret, total_parts=7, required_parts=4)

    combinations_tested = 0
    for combo in itertools.combinations(shares, 4):
        reconstructed = reconstruct(list(combo))
        assert reconstructed == secret, f"Failed with shares {[s.x for s in combo]}"
        combinations_tested += 1

    # 7 choose 4 = 35 combinations
    assert combinations_tested == 35
    print(f"PASS ({combinations_tested} combinations)")


def test_random_round_trips():
    """Test random secrets, counts and share subsets."""
    print("Testing randomized round trips...", end=" ")
    rng = random.Random(1337)
    algorithm = SecretSharingAlgorithm(rng.randbytes)

    for _ in range(300):
        secret = rng.randbytes(rng.randint(0, 99))
        total_parts = rng.randint(1, 100)
        required_parts = rng.randint(1, total_parts)

        shares = algorithm.generate_shares(secret, total_parts, required_parts)
        subset = rng.sample(shares, required_parts)

        assert algorithm.reconstruct(subset) == secret, (
            f"{len(secret)} bytes, {required_parts}-of-{total_parts}"
        )
    print("PASS")


def test_boundary_secrets():
    """Test empty, single-byte and block-aligned secrets."""
    print("Testing boundary secrets...", end=" ")
    cases = [
        (b"", 1),
        (b"\x7f", 1),
        # 120 bits: four full blocks, then a block of pure padding
        (bytes(range(15)), 5),
        (b"\xff" * 15, 5),
        # 30 bytes = 240 bits = eight full blocks
        (os.urandom(30), 9),
    ]
    for secret, blocks in cases:
        shares = generate_shares(secret, total_parts=3, required_parts=2)
        assert all(s.block_count == blocks for s in shares)
        for pair in itertools.combinations(shares, 2):
            assert reconstruct(list(pair)) == secret
    print("PASS")


def test_zero_byte_two_of_four():
    """Test the [0x00] 2-of-4 scenario with every pair of survivors."""
    print("Testing [0x00] 2-of-4...", end=" ")
    shares = generate_shares(b"\x00", total_parts=4, required_parts=2)
    assert len(shares) == 4
    for pair in itertools.combinations(shares, 2):
        assert reconstruct(list(pair)) == b"\x00"
    print("PASS")


def test_threshold_of_one():
    """Test that a 1-of-N split gives every holder the padded secret."""
    print("Testing 1-of-N split...", end=" ")
    secret = b"single holder"
    shares = generate_shares(secret, total_parts=4, required_parts=1)
    assert len({s.y for s in shares}) == 1
    for s in shares:
        assert reconstruct([s]) == secret
    print("PASS")


def test_insufficient_shares_fail():
    """Test that fewer than K shares don't reconstruct the secret."""
    print("Testing insufficient shares fail...", end=" ")
    secret = os.urandom(32)
    shares = generate_shares(secret, total_parts=7, required_parts=4)

    for combo in itertools.combinations(shares, 3):
        try:
            result = reconstruct(list(combo))
            # Should not equal the real secret (with overwhelming probability)
            assert result != secret
        except ThresholdError:
            pass  # Also acceptable: garbage rarely decodes as padded bytes
    print("PASS")


def test_wrong_shares_wrong_secret():
    """Test that mixing shares from two splits does not yield either secret."""
    print("Testing wrong shares = wrong secret...", end=" ")
    secret1 = os.urandom(32)
    secret2 = os.urandom(32)

    shares1 = generate_shares(secret1, total_parts=5, required_parts=3)
    shares2 = generate_shares(secret2, total_parts=5, required_parts=3)

    mixed = [shares1[0], shares2[1], shares1[2]]
    try:
        reconstructed = reconstruct(mixed)
        assert reconstructed != secret1
        assert reconstructed != secret2
    except ThresholdError:
        pass
    print("PASS")


def test_horner_evaluation():
    """Test share values against direct polynomial evaluation."""
    print("Testing polynomial evaluation...", end=" ")
    source = ScriptedRandom(7, 11)
    shares = SecretSharingAlgorithm(source).generate_shares(b"", total_parts=5, required_parts=3)

    # The empty secret is a single block: a 1 bit followed by 29 zeros
    constant = 1 << 29
    for s in shares:
        expected = (constant + 7 * s.x + 11 * s.x * s.x) % MODULUS
        assert int.from_bytes(s.y, "big") == expected
    assert source.calls == 2
    print("PASS")


def test_rejection_sampling():
    """Test that draws at or above the modulus are discarded."""
    print("Testing coefficient rejection sampling...", end=" ")
    # 0xFFFFFFFF masks to 0x7FFFFFFF == MODULUS, which must be rejected
    source = ScriptedRandom(0xFFFFFFFF, 0xFFFFFFFF, 0x80000005)
    shares = SecretSharingAlgorithm(source).generate_shares(b"", total_parts=2, required_parts=2)

    assert source.calls == 3
    # Top bit is masked off, leaving 5
    assert int.from_bytes(shares[0].y, "big") == (1 << 29) + 5
    print("PASS")


def test_random_source_exhausted():
    """Test the retry cap and short reads from the random source."""
    print("Testing misbehaving random source...", end=" ")
    stuck = SecretSharingAlgorithm(ScriptedRandom(0xFFFFFFFF))
    assert _raises(RandomSourceExhausted, stuck.generate_shares, b"abc", 3, 2)

    short = SecretSharingAlgorithm(lambda n: b"\x00")
    assert _raises(RandomSourceExhausted, short.generate_shares, b"abc", 3, 2)

    # No coefficients are drawn when one share suffices
    assert short.generate_shares(b"abc", 3, 1)
    print("PASS")


def test_coefficients_are_wiped():
    """Test that the coefficient buffer is zeroed after each block."""
    print("Testing coefficient wiping...", end=" ")
    snapshots = []
    original = shamir_module.secure_zero

    def recording_zero(buffer):
        result = original(buffer)
        if isinstance(buffer, list):
            snapshots.append(list(buffer))
        return result

    shamir_module.secure_zero = recording_zero
    try:
        generate_shares(os.urandom(20), total_parts=4, required_parts=3)
    finally:
        shamir_module.secure_zero = original

    # 160 bits -> 6 blocks, one wipe each plus the final one
    assert len(snapshots) == 7
    assert all(s == [0, 0, 0] for s in snapshots)
    print("PASS")


def test_invalid_split_arguments():
    """Test parameter validation for share generation."""
    print("Testing split argument validation...", end=" ")
    assert _raises(InvalidArgument, generate_shares, b"x", 5, 0)
    assert _raises(InvalidArgument, generate_shares, b"x", 2, 3)
    assert _raises(InvalidArgument, generate_shares, b"x", MODULUS, 1)
    assert _raises(InvalidArgument, SecretSharingAlgorithm, None)
    print("PASS")


def test_duplicate_shares():
    print("Testing duplicate shares...", end=" ")
    shares = generate_shares(b"secret", total_parts=3, required_parts=2)
    assert _raises(DuplicateShare, reconstruct, [shares[0], shares[0]])
    assert _raises(DuplicateShare, reconstruct, [shares[1], Share(x=2, y=shares[0].y)])
    print("PASS")


def test_invalid_share_lengths():
    print("Testing malformed share lengths...", end=" ")
    assert _raises(InvalidShareLength, reconstruct, [Share(1, bytes(8)), Share(2, bytes(4))])
    assert _raises(InvalidShareLength, reconstruct, [Share(1, bytes(5))])
    assert _raises(InvalidShareLength, reconstruct, [Share(1, b"")])
    print("PASS")


def test_invalid_reconstruct_arguments():
    print("Testing reconstruct argument validation...", end=" ")
    assert _raises(InvalidArgument, reconstruct, [])
    assert _raises(InvalidArgument, reconstruct, [Share(0, bytes(4))])
    assert _raises(InvalidArgument, reconstruct, [Share(MODULUS, bytes(4))])
    print("PASS")


def test_single_share_decoding():
    """Test decoding of hand-built blocks (one share, so Y is the block)."""
    print("Testing hand-built blocks...", end=" ")
    # 'A' followed by a 1 bit and 21 zeros
    assert reconstruct([_single_share((0x41 << 22) | (1 << 21))]) == b"A"
    # Pure padding: the empty secret
    assert reconstruct([_single_share(1 << 29)]) == b""
    # Seven real bits cannot form a byte
    assert _raises(FractionalByteMessage, reconstruct, [_single_share(1 << 22)])
    # No marker bit at all
    assert _raises(InvalidPadding, reconstruct, [_single_share(0)])
    print("PASS")


def test_share_text_form():
    """Test the X:hex(Y) display form round trip."""
    print("Testing share text form...", end=" ")
    secret = os.urandom(32)
    shares = generate_shares(secret, total_parts=5, required_parts=3)

    for share in shares:
        text = share.to_hex()
        assert text.startswith(f"{share.x}:")
        assert Share.from_hex(text) == share

    restored = [Share.from_hex(s.to_hex()) for s in shares[2:]]
    assert reconstruct(restored) == secret

    assert _raises(InvalidArgument, Share.from_hex, "no separator")
    assert _raises(InvalidArgument, Share.from_hex, "1:zz")
    assert _raises(InvalidArgument, Share.from_hex, "one:00000000")
    print("PASS")


def test_verify_shares():
    """Test share verification helper."""
    print("Testing verify_shares...", end=" ")
    secret = os.urandom(32)
    shares = generate_shares(secret, total_parts=5, required_parts=3)

    assert verify_shares(shares[:3], secret)
    assert verify_shares(shares, secret)
    assert not verify_shares(shares[:3], os.urandom(32))
    assert not verify_shares([], secret)
    print("PASS")


def main():
    print("=" * 50)
    print("  Shamir Secret Sharing Tests")
    print("  (GF(2^31 - 1), 30-bit blocks)")
    print("=" * 50)
    print()

    tests = [
        test_split_and_combine_basic,
        test_combine_any_k_shares,
        test_random_round_trips,
        test_boundary_secrets,
        test_zero_byte_two_of_four,
        test_threshold_of_one,
        test_insufficient_shares_fail,
        test_wrong_shares_wrong_secret,
        test_horner_evaluation,
        test_rejection_sampling,
        test_random_source_exhausted,
        test_coefficients_are_wiped,
        test_invalid_split_arguments,
        test_duplicate_shares,
        test_invalid_share_lengths,
        test_invalid_reconstruct_arguments,
        test_single_share_decoding,
        test_share_text_form,
        test_verify_shares,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except Exception as e:
            print(f"FAIL: {e}")
            import traceback
            traceback.print_exc()
            failed += 1

    print()
    print(f"Results: {passed} passed, {failed} failed")
    return failed == 0


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
