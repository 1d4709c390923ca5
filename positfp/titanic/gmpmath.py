"""Exact posit values with GMP rationals.

Nothing here shares code with the float codec in arithmetic/posit.py: the
bitfields are parsed separately, values are exact mpq rationals, and
rounding is done by bisection over the patterns themselves. That makes it a
reference to check the codec against.
"""


import math

import gmpy2 as gmp

from .utils import bitmask, RoundingError
from .ops import RM


def _scale(c, exp):
    if exp >= 0:
        return gmp.mpq(c << exp, 1)
    else:
        return gmp.mpq(c, 1 << -exp)


def _pattern_to_mpq(i, es, nbits):
    if i & (1 << (nbits - 1)) == 0:
        X = i
        negative = False
    else:
        X = -i & bitmask(nbits - 1)
        negative = True

    if X == 0:
        if negative:
            raise RoundingError('NaR has no exact value')
        else:
            return gmp.mpq(0)

    # detect the regime

    idx = nbits - 2
    r = (X >> idx) & 1

    while idx > 0 and (X >> (idx - 1) & 1) == r:
        idx -= 1

    # the regime extends one index past idx (or to idx if idx is 0)

    ebits = max(idx - 1, 0)
    rbits = nbits - 1 - ebits

    if ebits > es:
        sbits = ebits - es
        ebits = es
    else:
        sbits = 0

    # pull out bitfields
    regime = X >> (ebits + sbits)
    exponent = (X >> sbits) & bitmask(ebits)
    significand = (X & bitmask(sbits)) | (1 << sbits)

    # convert regime
    if r == 0:
        regime = 1 - rbits
    elif regime & 1:
        # unterminated run of ones
        regime = rbits - 1
    else:
        regime = rbits - 2

    # fix up exponent
    if ebits < es:
        exponent <<= (es - ebits)

    value = _scale(significand, ((1 << es) * regime) + exponent - sbits)
    if negative:
        return -value
    else:
        return value


def bits_to_mpq(i, ctx):
    """Exact value of the posit pattern i as a gmpy2 mpq.
    NaR is not a real number, and raises RoundingError.
    """
    return _pattern_to_mpq(i & bitmask(ctx.nbits), ctx.es, ctx.nbits)


def _to_mpq(x):
    """Exact rational value of x, or None if x is not a real number."""
    if isinstance(x, type(gmp.mpfr(0))):
        if not gmp.is_finite(x):
            return None
    elif not isinstance(x, (int, type(gmp.mpq(0)))):
        # python floats, numpy floats; all exactly representable as binary64
        x = float(x)
        if not math.isfinite(x):
            return None
    return gmp.mpq(x)


def round_to_posit(x, ctx):
    """Nearest posit pattern to x, computed exactly.

    Rounding happens in pattern space, as the posit standard does it: the
    tie point between adjacent patterns p and p + 1 is the value of the
    pattern p followed by a single 1 bit, i.e. pattern 2p + 1 in the format
    one bit wider. Ties are broken by ctx.rm. Out of range values saturate
    to maxpos or minpos, and non-real values become NaR.
    """
    q = _to_mpq(x)
    if q is None:
        return ctx.nar
    if q == 0:
        return 0

    negative = q < 0
    q = abs(q)

    lo = ctx.minpos
    hi = ctx.maxpos

    if q >= _pattern_to_mpq(hi, ctx.es, ctx.nbits):
        bits = hi
    elif q <= _pattern_to_mpq(lo, ctx.es, ctx.nbits):
        bits = lo
    else:
        # invariant: value(lo) < q < value(hi)
        while hi - lo > 1:
            mid = (lo + hi) // 2
            v = _pattern_to_mpq(mid, ctx.es, ctx.nbits)
            if v <= q:
                lo = mid
            else:
                hi = mid

        if _pattern_to_mpq(lo, ctx.es, ctx.nbits) == q:
            bits = lo
        else:
            tie = _pattern_to_mpq((lo << 1) | 1, ctx.es, ctx.nbits + 1)
            if q > tie:
                bits = hi
            elif q < tie:
                bits = lo
            elif ctx.rm == RM.RNA or lo & 1:
                bits = hi
            else:
                bits = lo

    if negative:
        return -bits & bitmask(ctx.nbits)
    else:
        return bits
