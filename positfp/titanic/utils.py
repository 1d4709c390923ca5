"""General utilities, such as exception classes and bit twiddling."""

import typing

# positfp-specific exceptions

class PositError(Exception):
    """Base positfp error."""

class BitIndexError(PositError, IndexError):
    """Attempt to read a bit outside of a pattern. This is a bug in the codec,
    never the fault of the input: every bit pattern is a legal posit.
    """

class RoundingError(PositError):
    """Rounding error, such as attempting to round NaN to an exact value."""


# some common data structures

class ImmutableDict(dict):
    def __delitem__(self, key):
        raise ValueError('ImmutableDict cannot be modified: attempt to delete {}'
                         .format(repr(key)))

    def __setitem__(self, key, value):
        raise ValueError('ImmutableDict cannot be modified: attempt to assign [{}] = {}'
                         .format(repr(key), repr(value)))

    def clear(self):
        raise ValueError('ImmutableDict cannot be modified: attempt to clear')

    def pop(self, key, *args):
        raise ValueError('ImmutableDict cannot be modified: attempt to pop {}'
                         .format(repr(key)))

    def update(self, *args, **kwargs):
        raise ValueError('ImmutableDict cannot be modified: attempt to update')


# Useful things

def bitmask(n: int) -> int:
    """Produces a bitmask of n 1s if n is positive, or n 0s if n is negative."""
    if n >= 0:
        return (1 << n) - 1
    else:
        return -1 << -n

def maskbits(x: int, n:int) -> int:
    """Mask x & bitmask(n)"""
    if n >= 0:
        return x & ((1 << n) - 1)
    else:
        return x & (-1 << -n)

def getbit(x: int, idx: int, nbits: int) -> int:
    """Bit idx of the nbits-wide pattern x, as 0 or 1."""
    if idx < 0 or idx >= nbits:
        raise BitIndexError('bit index {:d} out of range for {:d}-bit pattern'
                            .format(idx, nbits))
    return (x >> idx) & 1

def negate(x: int, nbits: int) -> int:
    """Two's complement negation, masked to nbits."""
    return (~x + 1) & bitmask(nbits)

def to_signed(x: int, nbits: int) -> int:
    """Reinterpret an nbits-wide unsigned pattern as a two's complement integer."""
    if x & (1 << (nbits - 1)):
        return x - (1 << nbits)
    else:
        return x

def asr(x: int, shift: int, nbits: int) -> typing.Tuple[int, bool]:
    """Arithmetic right shift of the nbits-wide word x.
    The top bit is replicated into the vacated positions. Returns the shifted
    word (unsigned, nbits wide) and whether any 1 bits were shifted out.
    """
    sticky = maskbits(x, shift) != 0
    return (to_signed(x, nbits) >> shift) & bitmask(nbits), sticky
