import unittest

from positfp.titanic.ops import RM
from positfp.arithmetic.evalctx import PositCtx, posit_ctx


class PositCtxTest(unittest.TestCase):
    def test_p8(self):
        ctx = posit_ctx(2, 8)
        self.assertEqual((ctx.es, ctx.nbits, ctx.rm), (2, 8, RM.RNE))
        self.assertEqual(ctx.u, 4)
        self.assertEqual(ctx.useed, 16)
        self.assertEqual((ctx.emin, ctx.emax), (-24, 24))
        self.assertEqual(ctx.fbits, 3)
        self.assertEqual(ctx.kmax, 256)
        self.assertEqual(ctx.mask, 0xff)
        self.assertEqual(ctx.nar, 0x80)
        self.assertEqual(ctx.maxpos, 0x7f)
        self.assertEqual(ctx.minpos, 0x01)
        self.assertEqual(ctx.epsilon, 2.0 ** -24)
        self.assertEqual(ctx.maxval, 2.0 ** 24)
        self.assertEqual(PositCtx(), ctx)


    def test_cache(self):
        self.assertIs(posit_ctx(1, 16), posit_ctx(1, 16))
        self.assertIs(posit_ctx(1, 16, rm='rna'), posit_ctx(1, 16, rm=RM.RNA))
        self.assertIsNot(posit_ctx(1, 16), posit_ctx(1, 16, rm=RM.RNA))
        self.assertNotEqual(posit_ctx(1, 16), posit_ctx(1, 16, rm=RM.RNA))
        self.assertEqual(hash(PositCtx(es=1, nbits=16)), hash(posit_ctx(1, 16)))


    def test_props(self):
        ctx = PositCtx(props={'precision': 'posit16'})
        self.assertEqual((ctx.es, ctx.nbits), (2, 16))
        ctx = PositCtx(props={'precision': ('posit', 1, 12), 'round': 'RoundNearestTiesToAway'})
        self.assertEqual((ctx.es, ctx.nbits, ctx.rm), (1, 12, RM.RNA))
        # arguments win over properties
        ctx = PositCtx(props={'precision': 'p32'}, nbits=24)
        self.assertEqual((ctx.es, ctx.nbits), (2, 24))

        with self.assertRaises(ValueError):
            PositCtx(props={'precision': 'binary64'})
        with self.assertRaises(ValueError):
            PositCtx(props={'round': 'towardzero'})


    def test_let(self):
        ctx = posit_ctx(2, 8)
        wide = ctx.let(props={'precision': 'p16'})
        self.assertEqual((wide.es, wide.nbits, wide.fbits), (2, 16, 11))
        self.assertEqual((ctx.es, ctx.nbits), (2, 8))
        self.assertEqual(ctx.let(), ctx)


    def test_invalid_formats(self):
        for es, nbits in [(0, 1), (-1, 8), (2, 63), (11, 8), (5, 40), (0, 56), (2, 58), (4, 60), (9, 63)]:
            with self.subTest(es=es, nbits=nbits):
                with self.assertRaises(ValueError):
                    PositCtx(es=es, nbits=nbits)
        # the largest formats that are still accepted
        self.assertEqual(PositCtx(es=0, nbits=55).fbits, 52)
        self.assertEqual(PositCtx(es=2, nbits=57).emax, 220)
        self.assertEqual(PositCtx(es=4, nbits=59).emax, 912)


    def test_repr(self):
        self.assertEqual(repr(posit_ctx(2, 8)), 'PositCtx(es=2, nbits=8)')
        self.assertIn('rm=', repr(posit_ctx(2, 8, rm=RM.RNA)))


if __name__ == "__main__":
    unittest.main()
