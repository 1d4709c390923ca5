"""Posit bit patterns, and their conversion to and from binary64 floats.

A posit with nbits bits and es exponent bits is laid out as

    sign | regime | exponent | fraction
     1   |  run   |   <= es  |   rest

The regime is a run of identical bits, terminated by the opposite bit or by
the end of the pattern. A run of m zeros has regime value -m, a run of m ones
has regime value m - 1. Exponent bits cut off by the end of the pattern are
read as 0. Negative values are stored as the two's complement of their
magnitude, so the all-zero pattern is 0 and 100...0 is the single
non-real value NaR.
"""

import math
import operator

import numpy as np

from ..titanic import conversion
from ..titanic.utils import bitmask, maskbits, getbit, negate, asr
from ..titanic.ops import RM
from .evalctx import PositCtx, posit_ctx, SCRATCH_BITS


P8 = posit_ctx(2, 8)

# special patterns of the 8 bit, es=2 format
ZERO = 0b0000_0000
ONE = 0b0100_0000
MINUS_ONE = 0b1100_0000
NAR = 0b1000_0000
EPSILON = 0b0000_0001
MAX_VALUE = 0b0111_1111


def is_nar(bits, ctx=P8):
    """Is this pattern the Not-a-Real value?"""
    return bits & ctx.mask == ctx.nar


# decoding

def _bit_or_zero(bits, idx, nbits):
    # positions past the end of the pattern read as 0
    if idx >= 0:
        return getbit(bits, idx, nbits)
    else:
        return 0

def decode_fields(bits, ctx=P8):
    """Split a pattern into (s, r, e, frac), read straight from the bits:
    s is the sign bit, r the regime value, e the exponent field and frac the
    fraction field as an integer over 2**ctx.fbits. Negative patterns are not
    negated first. Zero and NaR have no fields.
    """
    nbits = ctx.nbits
    bits &= ctx.mask

    if bits == 0 or bits == ctx.nar:
        raise ValueError('pattern {:#x} has no posit fields'.format(bits))

    s = getbit(bits, nbits - 1, nbits)

    # regime: a run of bits equal to the first bit after the sign
    idx = nbits - 2
    regime_bit = getbit(bits, idx, nbits)
    run = 0
    while idx >= 0 and getbit(bits, idx, nbits) == regime_bit:
        run += 1
        idx -= 1

    if regime_bit == 0:
        r = -run
    else:
        r = run - 1

    # skip the terminating bit
    idx -= 1

    e = 0
    for _ in range(ctx.es):
        e = 2 * e + _bit_or_zero(bits, idx, nbits)
        idx -= 1

    frac = 0
    for _ in range(ctx.fbits):
        frac = 2 * frac + _bit_or_zero(bits, idx, nbits)
        idx -= 1

    return s, r, e, frac


def decode(bits, ctx=P8):
    """Value of a posit pattern as a python float. NaR decodes to NaN.
    Bits above the width of the format are ignored.
    """
    bits &= ctx.mask
    if bits == 0:
        return 0.0
    if bits == ctx.nar:
        return math.nan

    s, r, e, frac = decode_fields(bits, ctx)

    # p = (1 - 3s + f) * 2**((1 - 2s) * (u*r + e + s)), with f = frac / 2**fbits.
    # For s = 1 this is the value of the two's complement negation, without
    # doing the negation.
    significand = ((1 - 3 * s) << ctx.fbits) + frac
    exponent = (1 - 2 * s) * (ctx.u * r + e + s)
    return math.ldexp(significand, exponent - ctx.fbits)


def decode_twos(bits, ctx=P8):
    """Value of a posit pattern, negating negative patterns to their magnitude
    before reading the fields. Always agrees with decode().
    """
    bits &= ctx.mask
    if bits == 0:
        return 0.0
    if bits == ctx.nar:
        return math.nan

    negative = bits >> (ctx.nbits - 1) == 1
    if negative:
        bits = negate(bits, ctx.nbits)

    s, r, e, frac = decode_fields(bits, ctx)
    magnitude = math.ldexp((1 << ctx.fbits) + frac, ctx.u * r + e - ctx.fbits)

    if negative:
        return -magnitude
    else:
        return magnitude


# encoding, one step at a time

def decompose(x):
    """Split a nonzero finite float into (negative, e, frac) where
    |x| = (1 + frac / 2**52) * 2**e.
    """
    S, e, frac = conversion.float_to_fields(x)
    return S == 1, e, frac


def position(e, frac, ctx=P8):
    """Lay out regime, exponent and fraction in a SCRATCH_BITS wide word,
    with the sign at the top bit (always 0) and the first kept bits below it.
    Returns the word and the regime value k.

    The word starts as a two bit seed (10 for e >= 0, 01 for e < 0), the es
    low bits of e and the 52 bits of frac. Shifting it right arithmetically
    grows the seed into a regime run of the right length. Bits that fall off
    the bottom are folded into a sticky bit at position 0.
    """
    k = e >> ctx.es

    top = SCRATCH_BITS - 2
    if e < 0:
        seed = 0b01
        shift = abs(k + 1) + 1
    else:
        seed = 0b10
        shift = abs(k + 1)

    word = ((seed << top)
            | (maskbits(e, ctx.es) << (top - ctx.es))
            | (frac << (top - ctx.es - conversion.pbits)))

    word, sticky = asr(word, shift, SCRATCH_BITS)
    # the sign leaks into the top bit when shifting in the ones of a regime
    word &= bitmask(SCRATCH_BITS - 1)
    if sticky:
        word |= 1

    return word, k


def round_pattern(word, ctx=P8):
    """Round a scratch word to the top ctx.nbits bits, to nearest.

    Exact halves are broken by ctx.rm: RM.RNE picks the pattern with a zero
    last bit, RM.RNA always rounds up.
    """
    offset = SCRATCH_BITS - ctx.nbits
    bits = word >> offset
    lost = maskbits(word, offset)
    half = 1 << (offset - 1)

    if lost > half:
        bits += 1
    elif lost == half:
        if ctx.rm == RM.RNA or bits & 1:
            bits += 1

    return bits


def correct_boundary(bits, k, ctx=P8):
    """Undo a rounding step past the end of the format, when the regime run
    would be at least as long as the whole pattern.
    """
    if ctx.nbits <= abs(k) < ctx.kmax:
        if k > 0:
            bits -= 1
        elif k < 0:
            bits += 1
    return bits


def apply_sign(bits, negative, ctx=P8):
    if negative:
        return negate(bits, ctx.nbits)
    else:
        return bits


def encode(x, ctx=P8):
    """Nearest posit pattern to x.

    Zero encodes to 0 and every non-real value to NaR. Values too large or
    too small for the format saturate to maxpos or minpos with the sign of
    x; a finite x never becomes NaR or 0.
    """
    x = float(x)

    if x == 0:
        return 0
    if not math.isfinite(x):
        return ctx.nar

    negative = x < 0
    magnitude = abs(x)

    if magnitude >= ctx.maxval:
        bits = ctx.maxpos
    elif magnitude < ctx.epsilon:
        bits = ctx.minpos
    else:
        _, e, frac = decompose(x)
        word, k = position(e, frac, ctx)
        bits = round_pattern(word, ctx)
        bits = correct_boundary(bits, k, ctx)

    return apply_sign(bits, negative, ctx)


class Posit(object):
    """An immutable posit: a bit pattern together with its format.

    Posit(x) encodes the real x, Posit(bits=i) takes the pattern i as is
    (masked to the width of the format). The format defaults to p8.
    """

    _ctx : PositCtx = P8
    _bits : int = 0

    @property
    def ctx(self):
        """The format of this posit."""
        return self._ctx

    @property
    def bits(self):
        """The raw bit pattern, as an unsigned integer."""
        return self._bits

    def __init__(self, x=None, ctx=None, bits=None):
        if ctx is None:
            ctx = type(self)._ctx

        if bits is not None:
            if x is not None:
                raise ValueError('cannot specify both a value {} and bits {}'.format(repr(x), repr(bits)))
            self._bits = operator.index(bits) & ctx.mask
        elif x is not None:
            self._bits = encode(x, ctx)
        else:
            self._bits = 0

        self._ctx = posit_ctx(ctx.es, ctx.nbits, rm=ctx.rm)

    @classmethod
    def zero(cls, ctx=P8):
        return cls(bits=0, ctx=ctx)

    @classmethod
    def one(cls, ctx=P8):
        return cls(bits=1 << (ctx.nbits - 2), ctx=ctx)

    @classmethod
    def minus_one(cls, ctx=P8):
        return cls(bits=negate(1 << (ctx.nbits - 2), ctx.nbits), ctx=ctx)

    @classmethod
    def nar(cls, ctx=P8):
        return cls(bits=ctx.nar, ctx=ctx)

    @classmethod
    def epsilon(cls, ctx=P8):
        """Smallest positive posit."""
        return cls(bits=ctx.minpos, ctx=ctx)

    @classmethod
    def max_value(cls, ctx=P8):
        """Largest finite posit."""
        return cls(bits=ctx.maxpos, ctx=ctx)

    def is_nar(self):
        return is_nar(self._bits, self._ctx)

    def is_zero(self):
        return self._bits == 0

    def __float__(self):
        return decode(self._bits, self._ctx)

    def to_single(self):
        """The value as a numpy single precision float."""
        return np.float32(decode(self._bits, self._ctx))

    def _key(self):
        return self._bits, self._ctx.es, self._ctx.nbits

    def __eq__(self, other):
        if isinstance(other, Posit):
            return self._key() == other._key()
        else:
            return NotImplemented

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        width = (self._ctx.nbits + 3) // 4
        return ('{}(bits=0x{:0' + str(width) + 'x}, ctx={})').format(
            type(self).__name__, self._bits, repr(self._ctx))
