import math
import unittest

import numpy as np

from positfp.titanic import conversion


class FieldsTest(unittest.TestCase):
    def test_normal(self):
        self.assertEqual(conversion.float_to_bits(1.0), 0x3ff0000000000000)
        self.assertEqual(conversion.float_to_fields(1.0), (0, 0, 0))
        self.assertEqual(conversion.float_to_fields(-3.0), (1, 1, 1 << 51))
        self.assertEqual(conversion.float_to_fields(np.float32(0.5)), (0, -1, 0))

        S, e, C = conversion.float_to_fields(0.1)
        self.assertEqual((S, e), (0, -4))
        self.assertEqual(math.ldexp((1 << 52) + C, e - 52), 0.1)


    def test_subnormal(self):
        self.assertEqual(conversion.float_to_fields(5e-324), (0, -1074, 0))
        self.assertEqual(conversion.float_to_fields(math.ldexp(3, -1074)), (0, -1073, 1 << 51))
        self.assertEqual(conversion.float_to_fields(-math.ldexp(1, -1023)), (1, -1023, 0))


    def test_no_fields(self):
        for f in (0.0, -0.0, math.inf, -math.inf, math.nan):
            with self.subTest(f=f):
                with self.assertRaises(ValueError):
                    conversion.float_to_fields(f)


if __name__ == "__main__":
    unittest.main()
