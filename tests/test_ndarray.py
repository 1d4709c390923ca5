import math
import unittest

import numpy as np

from positfp.arithmetic import ndarray, posit
from positfp.arithmetic.evalctx import posit_ctx


P8 = posit.P8


class DecodeTableTest(unittest.TestCase):
    def test_p8_table(self):
        table = ndarray.decode_table(P8)
        self.assertEqual(table.shape, (256,))
        self.assertEqual(table.dtype, np.float64)
        self.assertFalse(table.flags.writeable)
        self.assertTrue(math.isnan(table[0x80]))
        self.assertEqual(table[0x40], 1.0)
        self.assertEqual(table[0x7f], 2.0 ** 24)
        self.assertIs(ndarray.decode_table(P8), table)


    def test_too_large(self):
        with self.assertRaises(ValueError):
            ndarray.decode_table(posit_ctx(2, 32))


    def test_bits_dtype(self):
        self.assertEqual(ndarray.bits_dtype(P8), np.uint8)
        self.assertEqual(ndarray.bits_dtype(posit_ctx(0, 3)), np.uint8)
        self.assertEqual(ndarray.bits_dtype(posit_ctx(1, 12)), np.uint16)
        self.assertEqual(ndarray.bits_dtype(posit_ctx(2, 32)), np.uint32)
        self.assertEqual(ndarray.bits_dtype(posit_ctx(2, 40)), np.uint64)


class ArrayCodecTest(unittest.TestCase):
    def test_decode_array(self):
        np.testing.assert_array_equal(ndarray.decode_array([0x40, 0xc0, 0x4c]), [1.0, -1.0, 3.0])
        a = np.array([[0x00, 0x40], [0x60, 0x20]], dtype=np.uint8)
        decoded = ndarray.decode_array(a)
        self.assertEqual(decoded.shape, (2, 2))
        np.testing.assert_array_equal(decoded, [[0.0, 1.0], [16.0, 1.0 / 16]])
        self.assertTrue(math.isnan(ndarray.decode_array([0x80])[0]))
        # high bits outside the format are ignored
        np.testing.assert_array_equal(ndarray.decode_array([0x140]), [1.0])


    def test_decode_array_wide(self):
        ctx = posit_ctx(2, 32)
        np.testing.assert_array_equal(ndarray.decode_array([0x40000000, 0xc0000000], ctx), [1.0, -1.0])


    def test_decode_array_type(self):
        with self.assertRaises(TypeError):
            ndarray.decode_array([1.0, 2.0])


    def test_encode_array(self):
        encoded = ndarray.encode_array([1.0, -1.0, 3.0, math.nan])
        self.assertEqual(encoded.dtype, np.uint8)
        np.testing.assert_array_equal(encoded, [0x40, 0xc0, 0x4c, 0x80])
        ctx = posit_ctx(1, 12)
        self.assertEqual(ndarray.encode_array([1.0], ctx).dtype, np.uint16)


    def test_table_round_trip(self):
        for ctx in (P8, posit_ctx(0, 8), posit_ctx(1, 10)):
            with self.subTest(ctx=ctx):
                encoded = ndarray.encode_array(ndarray.decode_table(ctx), ctx)
                np.testing.assert_array_equal(encoded, np.arange(1 << ctx.nbits))


if __name__ == "__main__":
    unittest.main()
