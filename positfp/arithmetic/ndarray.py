"""Posit conversion over numpy arrays.

Small formats are decoded through a table of every pattern's value, built
once per format. Encoding has no such shortcut and goes value by value.
"""

import functools

import numpy as np

from . import posit


# largest format that gets a decode table (65536 entries)
MAX_TABLE_BITS = 16


def bits_dtype(ctx):
    """Smallest unsigned numpy integer type that holds a pattern of ctx."""
    for dtype in (np.uint8, np.uint16, np.uint32, np.uint64):
        if ctx.nbits <= np.iinfo(dtype).bits:
            return dtype
    raise ValueError('no numpy integer type for nbits={}'.format(ctx.nbits))


@functools.lru_cache(maxsize=None)
def decode_table(ctx):
    """Read-only array of the value of every pattern of ctx, indexed by pattern."""
    if ctx.nbits > MAX_TABLE_BITS:
        raise ValueError('format with nbits={}, es={} is too large for a decode table'
                         .format(ctx.nbits, ctx.es))
    table = np.array([posit.decode(i, ctx) for i in range(1 << ctx.nbits)], dtype=np.float64)
    table.setflags(write=False)
    return table


def decode_array(bits, ctx=posit.P8):
    """Decode an array (or anything numpy can make one of) of patterns to float64."""
    a = np.asarray(bits)
    if not np.issubdtype(a.dtype, np.integer):
        raise TypeError('expected integer bit patterns, got dtype {}'.format(a.dtype))
    a = a.astype(np.int64) & ctx.mask

    if ctx.nbits <= MAX_TABLE_BITS:
        return decode_table(ctx)[a]
    else:
        return np.vectorize(lambda i: posit.decode(int(i), ctx), otypes=[np.float64])(a)


def encode_array(values, ctx=posit.P8):
    """Encode an array of reals to patterns, as the smallest fitting unsigned dtype."""
    a = np.asarray(values, dtype=np.float64)
    return np.vectorize(lambda x: posit.encode(float(x), ctx), otypes=[bits_dtype(ctx)])(a)
