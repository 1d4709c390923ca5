"""Conversions between python / numpy floats and their binary64 bitfields.
"""


import sys

from .utils import bitmask

import numpy as np


# binary64 layout
# [Sign (1)] [Exponent (11)] [Fraction (52)]
w = 11
pbits = 52
emax = (1 << (w - 1)) - 1


def np_byteorder(ftype):
    """Converts from numpy byteorder conventions for a floating point datatype
    to sys.byteorder 'big' or 'little'.
    """
    bo = np.dtype(ftype).byteorder
    if bo == '=':
        return sys.byteorder
    elif bo == '<':
        return 'little'
    elif bo == '>':
        return 'big'
    else:
        raise ValueError('unknown numpy byteorder {} for dtype {}'.format(repr(bo), repr(ftype)))


def float_to_bits(f):
    """Raw binary64 bit pattern of a python or numpy float, as an int."""
    f = np.float64(f)
    return int.from_bytes(f.tobytes(), np_byteorder(type(f)))


def float_to_fields(f):
    """Decomposes a python or numpy float into its binary64 fields:
    sign bit S, unbiased exponent e, and the 52 bit fraction C, so that
    f = (-1)**S * (1 + C / 2**52) * 2**e.

    Subnormals are normalized, so e may be smaller than the binary64 emin
    and C always describes a significand in [1, 2). Zero and non-real values
    have no such representation and raise ValueError.
    """
    bits = float_to_bits(f)

    S = bits >> (w + pbits) & bitmask(1)
    E = bits >> (pbits) & bitmask(w)
    C = bits & bitmask(pbits)

    if E == 0:
        if C == 0:
            raise ValueError('zero has no binary64 exponent: {}'.format(repr(f)))
        # subnormal: shift the leading 1 up into the implicit position
        lz = pbits + 1 - C.bit_length()
        e = 1 - emax - lz
        C = (C << lz) & bitmask(pbits)
    elif E == bitmask(w):
        raise ValueError('nonfinite value {}'.format(repr(f)))
    else:
        e = E - emax

    return S, e, C
