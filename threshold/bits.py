"""
Padding Bit Codec
Bridges byte-oriented secrets and fixed-width field-element blocks.

PaddingBitReader hands out a byte string as big-endian groups of N bits.
Once the data runs out it appends a single 1 bit and as many 0 bits as
needed to fill the group. Padding is always added: a message that ends
exactly on a group boundary gets one extra group of pure padding.

UnpaddingBitWriter is the mirror image. It packs groups of bits back into a
byte buffer and strips the trailing 1-then-zeros padding from the final
group.
"""

from threshold.errors import (
    AlreadyFinalized,
    BufferOverflow,
    InvalidArgument,
    InvalidPadding,
)

MAX_BITS = 32


def _check_bit_count(bit_count: int):
    if not 1 <= bit_count <= MAX_BITS:
        raise InvalidArgument(f"Bit count must be in [1, {MAX_BITS}], got {bit_count}")


class PaddingBitReader:
    """
    Reads a byte string as big-endian integers of a requested bit width,
    padding the bit sequence with a 1 bit and zero or more 0 bits to fill
    the final group.

    Args:
        data: The bytes to read. Not copied; the caller must not mutate it
            while reading.
    """

    def __init__(self, data):
        self._data = memoryview(data).cast("B")
        self._bits_read = 0
        self._exhausted = False

    def next_bits(self, bit_count: int) -> int | None:
        """
        Return the next ``bit_count`` bits as an unsigned integer, most
        significant bit first, or None once the padding has been delivered.
        """
        _check_bit_count(bit_count)

        if self._exhausted:
            return None

        available = len(self._data) * 8 - self._bits_read
        to_read = min(bit_count, available)
        padding_bits = bit_count - to_read

        bits = 0
        while to_read:
            offset = self._bits_read & 0x7
            take = min(8 - offset, to_read)
            byte = self._data[self._bits_read >> 3]
            bits = (bits << take) | ((byte >> (8 - offset - take)) & ((1 << take) - 1))
            self._bits_read += take
            to_read -= take

        if padding_bits:
            # Terminating 1 bit, then zero fill
            bits = ((bits << 1) | 1) << (padding_bits - 1)
            self._exhausted = True

        return bits

    def blocks(self, bit_count: int):
        """Yield successive ``bit_count``-bit groups until the padding is delivered."""
        _check_bit_count(bit_count)
        while True:
            bits = self.next_bits(bit_count)
            if bits is None:
                return
            yield bits


class UnpaddingBitWriter:
    """
    Packs big-endian groups of bits into a caller-owned buffer and removes
    the padding written by PaddingBitReader from the final group.

    Args:
        buffer: A writable buffer (normally a zeroed bytearray) sized to
            hold every real bit that will be written.
    """

    def __init__(self, buffer):
        self._buffer = memoryview(buffer).cast("B")
        if self._buffer.readonly:
            raise InvalidArgument("Output buffer must be writable")
        self._bits_written = 0
        self._finalized = False

    @property
    def bits_written(self) -> int:
        return self._bits_written

    @property
    def finalized(self) -> bool:
        return self._finalized

    def write_block(self, bit_count: int, bits: int):
        """Write the low ``bit_count`` bits of ``bits``, most significant first."""
        _check_bit_count(bit_count)

        if self._finalized:
            raise AlreadyFinalized("The final block has already been written")

        if self._bits_written + bit_count > len(self._buffer) * 8:
            raise BufferOverflow("Attempted to write past the end of the buffer")

        bits &= (1 << bit_count) - 1
        remaining = bit_count

        while remaining:
            offset = self._bits_written & 0x7
            take = min(8 - offset, remaining)
            chunk = (bits >> (remaining - take)) & ((1 << take) - 1)
            index = self._bits_written >> 3
            if offset == 0:
                self._buffer[index] = chunk << (8 - take)
            else:
                self._buffer[index] |= chunk << (8 - offset - take)
            self._bits_written += take
            remaining -= take

    def write_final_block(self, bit_count: int, bits: int) -> int:
        """
        Write the last group, dropping its trailing 1-then-zeros padding.

        Returns:
            Total number of real bits written across all blocks.

        Raises:
            InvalidPadding: If the group contains no 1 bit.
            AlreadyFinalized: If the final block was already written.
        """
        _check_bit_count(bit_count)

        if self._finalized:
            raise AlreadyFinalized("The final block has already been written")

        bits &= (1 << bit_count) - 1
        if bits == 0:
            raise InvalidPadding("Invalid padding for a final block")

        trailing_zeros = (bits & -bits).bit_length() - 1
        padding_length = trailing_zeros + 1

        to_write = bit_count - padding_length
        if to_write:
            self.write_block(to_write, bits >> padding_length)

        self._finalized = True
        return self._bits_written
