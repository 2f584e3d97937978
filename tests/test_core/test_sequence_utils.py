import unittest
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../')))

from sequence_popgen.core.sequence_utils import (
    is_gap,
    is_resolved,
    is_transition,
    is_transversion,
    normalize_sequence,
)


class TestSequenceUtils(unittest.TestCase):

    # Tests for normalize_sequence
    def test_normalize_case_and_rna(self):
        self.assertEqual(normalize_sequence("acgu"), "ACGT")
        self.assertEqual(normalize_sequence("AcG.T"), "ACG-T")
        self.assertEqual(normalize_sequence(""), "")

    def test_normalize_keeps_ambiguity_codes(self):
        self.assertEqual(normalize_sequence("ANRY?"), "ANRY?")

    def test_normalize_invalid_chars(self):
        with self.assertRaises(ValueError):
            normalize_sequence("ACGZ")
        with self.assertRaises(ValueError):
            normalize_sequence("AC GT")

    # Tests for symbol classes
    def test_resolved_and_gap(self):
        self.assertTrue(is_resolved("A"))
        self.assertFalse(is_resolved("N"))
        self.assertFalse(is_resolved("-"))
        self.assertTrue(is_gap("-"))
        self.assertFalse(is_gap("N"))
        self.assertFalse(is_gap("?"))

    def test_transitions(self):
        self.assertTrue(is_transition("A", "G"))
        self.assertTrue(is_transition("C", "T"))
        self.assertFalse(is_transition("A", "C"))
        self.assertFalse(is_transition("A", "A"))

    def test_transversions(self):
        self.assertTrue(is_transversion("A", "T"))
        self.assertTrue(is_transversion("G", "C"))
        self.assertFalse(is_transversion("A", "G"))
        self.assertFalse(is_transversion("A", "N"))


if __name__ == '__main__':
    unittest.main()
