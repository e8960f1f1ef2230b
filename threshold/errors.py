"""
Errors raised by the threshold package.

Every error derives from ThresholdError, and also from the builtin
exception a caller would reach for first (ValueError for bad input,
RuntimeError for misuse), so existing ``except ValueError`` handlers keep
working.
"""


class ThresholdError(Exception):
    """Base class for all threshold errors."""


class InvalidArgument(ThresholdError, ValueError):
    """A count, bit width or share coordinate is out of range."""


class NotInvertible(ThresholdError, ArithmeticError):
    """The value shares a factor with the modulus."""


class DuplicateShare(ThresholdError, ValueError):
    """Two shares were given with the same X coordinate."""


class InconsistentShares(ThresholdError, ValueError):
    """Shares do not belong to the same split."""


class InvalidShareLength(InconsistentShares):
    """A share's Y value is empty, not a multiple of 4 bytes, or differs in length."""


class InvalidPadding(ThresholdError, ValueError):
    """A final block carries no padding marker bit."""


class BufferOverflow(ThresholdError, OverflowError):
    """A write would run past the end of the output buffer."""


class AlreadyFinalized(ThresholdError, RuntimeError):
    """The final block has already been written."""


class FractionalByteMessage(ThresholdError, ValueError):
    """The reconstructed bit count is not a whole number of bytes."""


class RandomSourceExhausted(ThresholdError, RuntimeError):
    """The random source failed to produce a usable coefficient."""


class BackupError(ThresholdError):
    """An encrypted backup could not be decrypted or unpacked."""
