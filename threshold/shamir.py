"""
Shamir's Secret Sharing
Split a secret into N shares where any K can reconstruct it.

Works over the prime field GF(2**31 - 1). A secret of any length is cut
into 30-bit blocks by the padding bit reader; each block becomes the
constant term of its own random polynomial of degree K - 1. A share is the
x-coordinate plus, for every block, the polynomial's value at x as a
big-endian uint32.

Reconstruction evaluates the Lagrange interpolation at x = 0 for every
block and feeds the results back through the unpadding bit writer.

Fewer than K shares reveal nothing about the secret. Shares carry no
authentication: a corrupted or foreign share silently yields a wrong secret
unless the padding check happens to catch it.
"""

import os
from dataclasses import dataclass

from threshold.bits import PaddingBitReader, UnpaddingBitWriter
from threshold.constants import BITS_PER_BLOCK, DEFAULTS, FIELD_ELEMENT_SIZE, MODULUS
from threshold.errors import (
    DuplicateShare,
    FractionalByteMessage,
    InvalidArgument,
    InvalidShareLength,
    RandomSourceExhausted,
    ThresholdError,
)
from threshold.logger import secure_log, secure_zero
from threshold.mathutils import multiplicative_inverse

# Random values are drawn as 32 bits and masked down to 31.
_COEFFICIENT_MASK = 0x7FFFFFFF


@dataclass(frozen=True)
class Share:
    """A single share of a split secret."""
    x: int      # The x-coordinate (1-indexed, never 0)
    y: bytes    # One big-endian field element per secret block

    @property
    def block_count(self) -> int:
        return len(self.y) // FIELD_ELEMENT_SIZE

    def to_hex(self) -> str:
        """Display form: decimal X, colon, hex Y."""
        return f"{self.x}:{self.y.hex()}"

    @classmethod
    def from_hex(cls, hex_str: str) -> "Share":
        """Parse the display form produced by to_hex()."""
        x_part, sep, y_part = hex_str.strip().partition(":")
        if not sep:
            raise InvalidArgument("Share text must look like '<x>:<hex y>'")
        try:
            x = int(x_part, 10)
            y = bytes.fromhex(y_part)
        except ValueError as e:
            raise InvalidArgument(f"Malformed share text: {e}") from e
        return cls(x=x, y=y)


class SecretSharingAlgorithm:
    """
    Share generation and reconstruction bound to a random source.

    Args:
        random_bytes: Callable returning ``n`` random bytes. Must be a
            cryptographically secure source in production use.
    """

    def __init__(self, random_bytes=os.urandom):
        if random_bytes is None:
            raise InvalidArgument("A random source is required")
        self.random_bytes = random_bytes

    def generate_shares(self, secret: bytes, total_parts: int, required_parts: int) -> list[Share]:
        """
        Split a secret into shares.

        Args:
            secret: The secret bytes to split. Any length, including empty.
            total_parts: Total shares to generate (N).
            required_parts: Minimum shares needed to reconstruct (K).

        Returns:
            List of N Share objects with x = 1..N. Any K can reconstruct.

        Raises:
            InvalidArgument: If the counts are out of range.
            RandomSourceExhausted: If the random source misbehaves.
        """
        if required_parts < 1:
            raise InvalidArgument("At least one part is required")
        if total_parts < required_parts:
            raise InvalidArgument("The total number of parts must not be less than the number of required parts")
        if total_parts >= MODULUS:
            raise InvalidArgument("The total number of parts must be less than the modulus")

        # One element per full block plus the block holding the padding
        block_count = (len(secret) * 8) // BITS_PER_BLOCK + 1
        parts = [bytearray(block_count * FIELD_ELEMENT_SIZE) for _ in range(total_parts)]

        secure_log(
            "debug", "Generating shares",
            total_parts=total_parts, required_parts=required_parts, blocks=block_count,
        )

        coefficients = [0] * required_parts
        offset = 0
        try:
            for block in PaddingBitReader(secret).blocks(BITS_PER_BLOCK):
                coefficients[0] = block
                for exponent in range(1, required_parts):
                    coefficients[exponent] = self._generate_coefficient()

                for i, part in enumerate(parts):
                    x = i + 1
                    y = 0
                    for exponent in range(required_parts - 1, -1, -1):
                        y = (y * x + coefficients[exponent]) % MODULUS
                    part[offset:offset + FIELD_ELEMENT_SIZE] = y.to_bytes(FIELD_ELEMENT_SIZE, "big")

                offset += FIELD_ELEMENT_SIZE
                secure_zero(coefficients)
        finally:
            secure_zero(coefficients)

        return [Share(x=i + 1, y=bytes(part)) for i, part in enumerate(parts)]

    def _generate_coefficient(self) -> int:
        """Draw a uniform field element by rejection sampling."""
        for _ in range(DEFAULTS["MAX_COEFFICIENT_ATTEMPTS"]):
            raw = self.random_bytes(4)
            if len(raw) != 4:
                raise RandomSourceExhausted(f"Random source returned {len(raw)} bytes, expected 4")

            # Drop the top bit; values >= MODULUS would skew the distribution.
            bits = int.from_bytes(raw, "big") & _COEFFICIENT_MASK
            if bits < MODULUS:
                return bits

        raise RandomSourceExhausted(
            f"No coefficient below the modulus after {DEFAULTS['MAX_COEFFICIENT_ATTEMPTS']} attempts"
        )

    def reconstruct(self, shares: list[Share]) -> bytes:
        """
        Reconstruct a secret from K or more shares using Lagrange interpolation.

        Passing fewer than K shares does not fail; it yields garbage or a
        padding error.

        Args:
            shares: Shares from a single split.

        Returns:
            The reconstructed secret bytes.

        Raises:
            InvalidArgument: If no shares are given or an X is out of range.
            DuplicateShare: If two shares have the same X.
            InvalidShareLength: If Y values are empty, misaligned or differ in length.
            InvalidPadding / FractionalByteMessage: If the shares do not
                decode to a padded byte string.
        """
        shares = list(shares)
        if not shares:
            raise InvalidArgument("At least one share is required")

        message_length = len(shares[0].y)
        if message_length == 0 or message_length % FIELD_ELEMENT_SIZE != 0:
            raise InvalidShareLength("Y values must be a non-zero multiple of four bytes")

        seen = set()
        for share in shares:
            if not 1 <= share.x < MODULUS:
                raise InvalidArgument(f"Share X must be in [1, {MODULUS}), got {share.x}")
            if share.x in seen:
                raise DuplicateShare(f"All shares must have unique X values (duplicate {share.x})")
            seen.add(share.x)
            if len(share.y) != message_length:
                raise InvalidShareLength("All shares must have Y values of the same size")

        lagrange = _lagrange_constants([share.x for share in shares])

        block_count = message_length // FIELD_ELEMENT_SIZE
        # At most block_count * 30 - 1 real bits; round up so a misaligned
        # final block reaches the fractional-byte check
        secret_buffer = bytearray((block_count * BITS_PER_BLOCK + 6) // 8)
        writer = UnpaddingBitWriter(secret_buffer)

        secure_log("debug", "Reconstructing secret", shares=len(shares), blocks=block_count)

        for block in range(block_count):
            start = block * FIELD_ELEMENT_SIZE
            y0 = 0
            for share, constant in zip(shares, lagrange):
                shared_y = int.from_bytes(share.y[start:start + FIELD_ELEMENT_SIZE], "big")
                y0 = (y0 + shared_y * constant) % MODULUS

            if block < block_count - 1:
                writer.write_block(BITS_PER_BLOCK, y0)
            else:
                total_bits = writer.write_final_block(BITS_PER_BLOCK, y0)

        if total_bits % 8 != 0:
            secure_zero(secret_buffer)
            raise FractionalByteMessage("Fractional-byte messages are not supported")

        secret = bytes(secret_buffer[:total_bits // 8])
        secure_zero(secret_buffer)
        return secret


def _lagrange_constants(xs: list[int]) -> list[int]:
    """Lagrange basis coefficients for interpolating at x = 0."""
    constants = []
    for i, x in enumerate(xs):
        numerator = 1
        denominator = 1
        for j, other_x in enumerate(xs):
            if i == j:
                continue
            numerator = (numerator * other_x) % MODULUS
            denominator = (denominator * (other_x - x)) % MODULUS

        constants.append((numerator * multiplicative_inverse(denominator, MODULUS)) % MODULUS)
    return constants


def generate_shares(secret: bytes, total_parts: int, required_parts: int, rng=os.urandom) -> list[Share]:
    """Split ``secret`` into ``total_parts`` shares, any ``required_parts`` of which recover it."""
    return SecretSharingAlgorithm(rng).generate_shares(secret, total_parts, required_parts)


def reconstruct(shares: list[Share]) -> bytes:
    """Recover a secret from a sufficient set of shares."""
    return SecretSharingAlgorithm().reconstruct(shares)


def verify_shares(shares: list[Share], secret: bytes) -> bool:
    """Verify that a set of shares correctly reconstructs the secret."""
    try:
        return reconstruct(shares) == secret
    except ThresholdError:
        return False
