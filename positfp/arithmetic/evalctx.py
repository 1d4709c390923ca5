"""Format context information for posit codecs."""

from ..titanic import utils
from ..titanic.ops import RM


p8_synonyms = {'p8', 'posit8', 'posit8_t'}
p16_synonyms = {'p16', 'posit16', 'posit16_t'}
p32_synonyms = {'p32', 'posit32', 'posit32_t'}

RNE_synonyms = {'rne', 'nearesteven', 'roundnearesteven', 'nearesttiestoeven', 'roundnearesttiestoeven'}
RNA_synonyms = {'rna', 'nearestaway', 'roundnearestaway', 'nearesttiestoaway', 'roundnearesttiestoaway'}

posit_esnbits = {}
posit_esnbits.update((k, (2, 8)) for k in p8_synonyms)
posit_esnbits.update((k, (2, 16)) for k in p16_synonyms)
posit_esnbits.update((k, (2, 32)) for k in p32_synonyms)

posit_rm = {}
posit_rm.update((k, RM.RNE) for k in RNE_synonyms)
posit_rm.update((k, RM.RNA) for k in RNA_synonyms)

# Width of the scratch word used when encoding from binary64.
SCRATCH_BITS = 64
# Fraction bits of a binary64 number.
BINARY64_PBITS = 52
# Seed, exponent and binary64 fraction must all fit in the scratch word.
SCRATCH_OVERHEAD = 2 + BINARY64_PBITS
# Largest binary exponent of a normal binary64 number.
BINARY64_EMAX = 1023


class EvalCtx(object):
    """Generic context for holding properties."""

    # this placeholder should never have anything put in it
    props = utils.ImmutableDict()

    def __init__(self, props=None):
        self.props = {}
        if props:
            self._update_props(props)

    def _update_props(self, props):
        self.props.update(props)

    def _import_fields(self, ctx):
        pass

    def __repr__(self):
        args = []
        if len(self.props) > 0:
            args.append('props=' + repr(self.props))
        return '{}({})'.format(type(self).__name__, ', '.join(args))

    def let(self, props=None):
        """Create a new context, updated with any provided properties."""
        cls = type(self)
        newctx = cls.__new__(cls)
        newctx._import_fields(self)

        if props:
            newctx.props = self.props.copy()
            newctx._update_props(props)
        else:
            # share the dictionary
            newctx.props = self.props

        return newctx


def _lookup_precision(prec):
    precstr = str(prec).lower()
    if precstr in posit_esnbits:
        return posit_esnbits[precstr]
    # try to decipher custom type, as (posit es nbits)
    try:
        tag, es, nbits = prec
        assert str(tag).lower() == 'posit'
        return int(es), int(nbits)
    except Exception:
        raise ValueError('unsupported posit precision {}'.format(repr(prec)))

def _lookup_rm(rounding):
    if isinstance(rounding, RM):
        return rounding
    try:
        return posit_rm[str(rounding).lower()]
    except KeyError:
        raise ValueError('unsupported posit rounding mode {}'.format(repr(rounding)))


# John Gustafson's Posits
class PositCtx(EvalCtx):
    """Context for posit formats with nbits total bits and es exponent bits.

    Everything the codecs need to know about a format is derived here once:
    u = 2**es is the scale of one regime step (useed = 2**u), emax is the
    binary exponent of the largest posit, and fbits is the width of the
    fraction field read by the decoder.
    """

    es = 2
    nbits = 8
    rm = RM.RNE

    u = 1 << es
    useed = 1 << u
    emax = u * (nbits - 2)
    emin = -emax
    fbits = max(0, nbits - 3 - es)
    kmax = (BINARY64_EMAX >> es) + 1

    def __init__(self, props=None, es=None, nbits=None, rm=None):
        init_es = self.es
        init_nbits = self.nbits
        init_rm = self.rm

        self.props = {}
        if props:
            if 'precision' in props:
                init_es, init_nbits = _lookup_precision(props['precision'])
            if 'round' in props:
                init_rm = _lookup_rm(props['round'])
            self.props.update(props)

        # arguments are allowed to override properties
        if es is not None:
            init_es = es
        if nbits is not None:
            init_nbits = nbits
        if rm is not None:
            init_rm = _lookup_rm(rm)

        self._set_format(init_es, init_nbits, init_rm)

    def _set_format(self, es, nbits, rm):
        if nbits < 2 or es < 0:
            raise ValueError('format with nbits={}, es={} cannot be represented with posit bit pattern'
                             .format(nbits, es))
        # the encoder rounds from a 64 bit scratch word, and needs a guard
        # and a sticky position below the last kept bit
        if nbits > SCRATCH_BITS - 2 or es + SCRATCH_OVERHEAD > SCRATCH_BITS:
            raise ValueError('format with nbits={}, es={} does not fit the {:d} bit encoder'
                             .format(nbits, es, SCRATCH_BITS))
        u = 1 << es
        emax = u * (nbits - 2)
        if emax > BINARY64_EMAX - 1:
            raise ValueError('format with nbits={}, es={} has a range beyond binary64'
                             .format(nbits, es))
        fbits = max(0, nbits - 3 - es)
        # every posit value must be a binary64 number
        if fbits > BINARY64_PBITS:
            raise ValueError('format with nbits={}, es={} has more fraction bits than binary64'
                             .format(nbits, es))

        self.es = es
        self.nbits = nbits
        self.rm = rm
        self.u = u
        self.useed = 1 << u
        self.emax = emax
        self.emin = -emax
        self.fbits = fbits
        self.kmax = (BINARY64_EMAX >> es) + 1

    def _update_props(self, props):
        init_es = self.es
        init_nbits = self.nbits
        init_rm = self.rm

        if 'precision' in props:
            init_es, init_nbits = _lookup_precision(props['precision'])
        if 'round' in props:
            init_rm = _lookup_rm(props['round'])

        self.props.update(props)
        self._set_format(init_es, init_nbits, init_rm)

    def _import_fields(self, ctx):
        self._set_format(ctx.es, ctx.nbits, ctx.rm)

    # special bit patterns

    @property
    def mask(self):
        """All nbits bits set."""
        return utils.bitmask(self.nbits)

    @property
    def nar(self):
        """The Not-a-Real pattern, 100...0."""
        return 1 << (self.nbits - 1)

    @property
    def maxpos(self):
        """The largest positive posit, 011...1."""
        return self.nar - 1

    @property
    def minpos(self):
        """The smallest positive posit, 000...1."""
        return 1

    # saturation limits, as floats

    @property
    def epsilon(self):
        """Value of minpos, 2**-emax."""
        return 2.0 ** self.emin

    @property
    def maxval(self):
        """Value of maxpos, 2**emax."""
        return 2.0 ** self.emax

    def __eq__(self, other):
        if isinstance(other, PositCtx):
            return (self.es, self.nbits, self.rm) == (other.es, other.nbits, other.rm)
        else:
            return NotImplemented

    def __hash__(self):
        return hash((type(self).__name__, self.es, self.nbits, self.rm))

    def __repr__(self):
        args = []
        if len(self.props) > 0:
            args.append('props=' + repr(self.props))
        args += ['es=' + repr(self.es), 'nbits=' + repr(self.nbits)]
        if self.rm != RM.RNE:
            args.append('rm=RM.' + self.rm.name)
        return '{}({})'.format(type(self).__name__, ', '.join(args))


used_ctxs = {}
def posit_ctx(es, nbits, rm=RM.RNE):
    rm = _lookup_rm(rm)
    try:
        return used_ctxs[(es, nbits, rm)]
    except KeyError:
        ctx = PositCtx(es=es, nbits=nbits, rm=rm)
        used_ctxs[(es, nbits, rm)] = ctx
        return ctx
