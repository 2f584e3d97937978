import unittest
import math
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../')))

from sequence_popgen.core.containers import PolymorphismSequenceContainer
from sequence_popgen.exceptions import UndefinedStatisticError
from sequence_popgen.population_genetics.diversity import (
    NeutralityCoefficients,
    site_heterozygosity,
    tajima83,
    watterson75,
)

# Site 0: A/A/A/G, site 1: A/A/C/C, site 2: monomorphic, site 3: A/T/T/T
SAMPLE = ["AAAA", "AAAT", "ACAT", "GCAT"]


class TestNeutralityCoefficients(unittest.TestCase):

    def test_values_for_four_sequences(self):
        c = NeutralityCoefficients.for_sample_size(4)
        self.assertAlmostEqual(c.a1, 11.0 / 6.0)
        self.assertAlmostEqual(c.a2, 49.0 / 36.0)
        self.assertAlmostEqual(c.a1n, 25.0 / 12.0)
        # c1 = 5/9 - 6/11 = 1/99 ; e1 = c1 / a1
        self.assertAlmostEqual(c.c1, 1.0 / 99.0)
        self.assertAlmostEqual(c.e1, 6.0 / 1089.0)
        # c2 = 23/54 - 9/11 + 49/121 = 83/6534 ; e2 = c2 / (a1^2 + a2)
        self.assertAlmostEqual(c.c2, 83.0 / 6534.0)
        self.assertAlmostEqual(c.e2, (83.0 / 6534.0) / (170.0 / 36.0))
        self.assertAlmostEqual(c.cn, 4.0 / 9.0)
        self.assertAlmostEqual(c.dn, 10.0 / 9.0)

    def test_two_sequences(self):
        c = NeutralityCoefficients.for_sample_size(2)
        self.assertAlmostEqual(c.a1, 1.0)
        self.assertTrue(math.isnan(c.cn))
        self.assertTrue(math.isnan(c.dn))

    def test_too_few_sequences(self):
        with self.assertRaises(UndefinedStatisticError):
            NeutralityCoefficients.for_sample_size(1)

    def test_as_dict(self):
        values = NeutralityCoefficients.for_sample_size(5).as_dict()
        self.assertEqual(set(values), {"a1", "a2", "a1n", "b1", "b2", "c1", "c2", "cn", "dn", "e1", "e2"})


class TestEstimators(unittest.TestCase):

    def setUp(self):
        self.psc = PolymorphismSequenceContainer(SAMPLE)

    def test_watterson(self):
        # S = 3, a1 = 11/6
        self.assertAlmostEqual(watterson75(self.psc), 18.0 / 11.0)

    def test_watterson_with_precomputed_coefficients(self):
        coefficients = NeutralityCoefficients.for_sample_size(4)
        self.assertAlmostEqual(watterson75(self.psc, coefficients=coefficients), 18.0 / 11.0)
        with self.assertRaises(ValueError):
            watterson75(self.psc, coefficients=NeutralityCoefficients.for_sample_size(5))

    def test_tajima83(self):
        # 0.5 + 2/3 + 0.5, the mean number of pairwise differences (10 / 6)
        self.assertAlmostEqual(tajima83(self.psc), 5.0 / 3.0)

    def test_tajima83_monomorphic(self):
        value = tajima83(["ACGT", "ACGT"])
        self.assertIsInstance(value, float)
        self.assertEqual(value, 0.0)

    def test_estimators_non_negative(self):
        for alignment in (SAMPLE, ["AC-T", "AGNT", "TG-A"], ["AA", "AA"]):
            self.assertGreaterEqual(watterson75(alignment), 0.0)
            self.assertGreaterEqual(tajima83(alignment), 0.0)

    def test_site_heterozygosity(self):
        self.assertAlmostEqual(site_heterozygosity("AACC"), 2.0 / 3.0)
        # Gaps dropped: A, C left -> 1 - 0 = 1
        self.assertAlmostEqual(site_heterozygosity("AC--"), 1.0)
        self.assertEqual(site_heterozygosity("A---"), 0.0)

    def test_watterson_needs_two_sequences(self):
        with self.assertRaises(UndefinedStatisticError):
            watterson75(["ACGT"])


if __name__ == '__main__':
    unittest.main()
