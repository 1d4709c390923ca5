"""Differential testing of the float posit codec against the exact reference.

Run as `python -m positfp.test [nbits es ...]`; defaults to p8.
"""

import sys
import math
import random

import numpy

from .titanic import gmpmath
from .titanic.ops import RM
from .arithmetic import posit
from .arithmetic.evalctx import posit_ctx


def rounding_cases(ctx, maxcases=None):
    nbits = ctx.nbits
    nar = ctx.nar
    if maxcases is None:
        patterns = range(1 << nbits)
    else:
        imax = (1 << nbits) - 1
        patterns = set()
        for case in range(maxcases):
            i = random.randint(0, imax)
            if i > 0:
                patterns.add(i - 1)
            patterns.add(i)
            if i < imax:
                patterns.add(i + 1)

    values = sorted(posit.decode(i, ctx) for i in patterns if i != nar)

    nearby_values = set()
    for a in values:
        nearby_values.add(float(numpy.nextafter(a, -numpy.inf)))
        nearby_values.add(float(numpy.nextafter(a, numpy.inf)))

    arithmetic_means = set()
    geometric_means = set()
    for a, b in zip(values, values[1:]):
        mean = (a + b) / 2
        arithmetic_means.add(float(mean))
        nearby_values.add(float(numpy.nextafter(mean, -numpy.inf)))
        nearby_values.add(float(numpy.nextafter(mean, numpy.inf)))

        if a > 0 and b > 0:
            geomean = math.sqrt(a * b)
            geometric_means.add(float(geomean))
            nearby_values.add(float(numpy.nextafter(geomean, -numpy.inf)))
            nearby_values.add(float(numpy.nextafter(geomean, numpy.inf)))

    cases = set().union(values, arithmetic_means, geometric_means, nearby_values)
    more_cases = set()

    for case in cases:
        more_cases.add(case)
        more_cases.add(-case)
        if case == 0.0:
            more_cases.add(float('inf'))
            more_cases.add(float('-inf'))
        else:
            more_cases.add(1/case)
            more_cases.add(-1/case)

    return sorted(more_cases)


def test_posit_decoding(ctx, maxcases=None):
    """Compare decode() with the exact value of each pattern. Returns the number of failures."""
    if maxcases is None:
        patterns = range(1 << ctx.nbits)
    else:
        patterns = [random.randint(0, ctx.mask) for _ in range(maxcases)]

    failures = 0
    print('Testing posit decoding on {:d} patterns...'.format(len(patterns)), flush=True)
    for i in patterns:
        if i == ctx.nar:
            ok = math.isnan(posit.decode(i, ctx))
            expected = 'NaR'
        else:
            expected = gmpmath.bits_to_mpq(i, ctx)
            ok = posit.decode(i, ctx) == float(expected) == posit.decode_twos(i, ctx)
        if not ok:
            failures += 1
            print('  pattern {:#x}: {} != {} (twos {})'.format(
                i, str(expected), repr(posit.decode(i, ctx)), repr(posit.decode_twos(i, ctx))),
                  file=sys.stderr, flush=True)
    print('... Done.', flush=True)
    return failures


def test_posit_rounding(ctx, maxcases=None):
    """Compare encode() with the exact reference encoder. Returns the number of failures."""
    failures = 0
    cases = rounding_cases(ctx, maxcases=maxcases)
    print('Testing posit rounding on {:d} cases...'.format(len(cases)), flush=True)
    for f in cases:
        reference_answer = gmpmath.round_to_posit(f, ctx)
        posit_answer = posit.encode(f, ctx)
        if reference_answer != posit_answer:
            failures += 1
            print('  case {}: {:#x} != {:#x}'.format(repr(f), reference_answer, posit_answer),
                  file=sys.stderr, flush=True)
    print('... Done.', flush=True)
    return failures


def main(argv):
    formats = [(int(nbits), int(es)) for nbits, es in zip(argv[::2], argv[1::2])]
    if not formats:
        formats = [(8, 2)]

    failures = 0
    for nbits, es in formats:
        for rm in (RM.RNE, RM.RNA):
            ctx = posit_ctx(es, nbits, rm=rm)
            print(repr(ctx))
            if nbits <= 12:
                failures += test_posit_decoding(ctx)
                failures += test_posit_rounding(ctx)
            else:
                failures += test_posit_decoding(ctx, maxcases=10000)
                failures += test_posit_rounding(ctx, maxcases=1000)

    print('{:d} failures.'.format(failures))
    return 1 if failures else 0


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
