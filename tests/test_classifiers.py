import unittest

from rpc_health.core.classifiers import calculate_average, classify_block_time, classify_latency
from rpc_health.core.models import BlockTimeTier, LatencyTier


class TestLatencyClassifier(unittest.TestCase):
    def test_zero_is_invalid(self):
        self.assertEqual(classify_latency(0), LatencyTier.INVALID)
        self.assertEqual(classify_latency(0.0), LatencyTier.INVALID)
        self.assertEqual(classify_latency(float("nan")), LatencyTier.INVALID)
        self.assertEqual(classify_latency(float("inf")), LatencyTier.INVALID)

    def test_excellent_boundary_is_exclusive(self):
        self.assertEqual(classify_latency(0.0249), LatencyTier.EXCELLENT)
        self.assertEqual(classify_latency(0.025), LatencyTier.GOOD)

    def test_bands(self):
        self.assertEqual(classify_latency(0.001), LatencyTier.EXCELLENT)
        self.assertEqual(classify_latency(0.049), LatencyTier.GOOD)
        self.assertEqual(classify_latency(0.05), LatencyTier.ACCEPTABLE)
        self.assertEqual(classify_latency(0.199), LatencyTier.ACCEPTABLE)
        self.assertEqual(classify_latency(0.2), LatencyTier.SLOW)
        self.assertEqual(classify_latency(0.499), LatencyTier.SLOW)
        self.assertEqual(classify_latency(0.5), LatencyTier.VERY_SLOW)
        self.assertEqual(classify_latency(12.0), LatencyTier.VERY_SLOW)


class TestBlockTimeClassifier(unittest.TestCase):
    def test_zero_is_invalid(self):
        self.assertEqual(classify_block_time(0), BlockTimeTier.INVALID)
        self.assertEqual(classify_block_time(float("nan")), BlockTimeTier.INVALID)

    def test_default_expected_block_time(self):
        self.assertEqual(classify_block_time(12.0), BlockTimeTier.GOOD)
        self.assertEqual(classify_block_time(9.5), BlockTimeTier.EXCELLENT)
        self.assertEqual(classify_block_time(9.6), BlockTimeTier.GOOD)
        self.assertEqual(classify_block_time(14.4), BlockTimeTier.GOOD)
        self.assertEqual(classify_block_time(14.5), BlockTimeTier.SLOW)
        self.assertEqual(classify_block_time(18.0), BlockTimeTier.SLOW)
        self.assertEqual(classify_block_time(18.1), BlockTimeTier.VERY_SLOW)

    def test_custom_expected_block_time(self):
        self.assertEqual(classify_block_time(3.9, expected=5.0), BlockTimeTier.EXCELLENT)
        self.assertEqual(classify_block_time(4.0, expected=5.0), BlockTimeTier.GOOD)
        self.assertEqual(classify_block_time(6.0, expected=5.0), BlockTimeTier.GOOD)
        self.assertEqual(classify_block_time(7.5, expected=5.0), BlockTimeTier.SLOW)
        self.assertEqual(classify_block_time(8.0, expected=5.0), BlockTimeTier.VERY_SLOW)
        # 12s blocks are very slow for a 5s chain
        self.assertEqual(classify_block_time(12.0, expected=5.0), BlockTimeTier.VERY_SLOW)


class TestCalculateAverage(unittest.TestCase):
    def test_empty_is_zero(self):
        self.assertEqual(calculate_average([]), 0.0)

    def test_average(self):
        self.assertAlmostEqual(calculate_average([1, 2, 3]), 2.0)
        self.assertAlmostEqual(calculate_average(iter([0.01, 0.03])), 0.02)


if __name__ == '__main__':
    unittest.main()
