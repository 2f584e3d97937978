# tests/test_core/test_containers.py

import unittest
import os
import sys

import numpy as np
from Bio.Align import MultipleSeqAlignment
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../')))

from sequence_popgen.core.containers import PolymorphismSequenceContainer, as_container
from sequence_popgen.exceptions import InconsistentContainerError, PopulationGeneticsError


class TestPolymorphismSequenceContainer(unittest.TestCase):

    def setUp(self):
        self.psc = PolymorphismSequenceContainer(["acgt", "ACGA", "AC-N"], names=["s1", "s2", "s3"])

    def test_shape_and_names(self):
        self.assertEqual(self.psc.n_sequences, 3)
        self.assertEqual(self.psc.n_sites, 4)
        self.assertEqual(len(self.psc), 4)
        self.assertEqual(self.psc.names, ("s1", "s2", "s3"))

    def test_sequences_are_upper_cased(self):
        self.assertEqual(self.psc.sequence("s1"), "ACGT")

    def test_default_names(self):
        psc = PolymorphismSequenceContainer(["AC", "AG"])
        self.assertEqual(psc.names, ("seq1", "seq2"))

    def test_rna_and_dot_symbols_normalized(self):
        psc = PolymorphismSequenceContainer(["ACGU", "AC.T"])
        self.assertEqual(psc.to_mapping(), {"seq1": "ACGT", "seq2": "AC-T"})

    def test_unequal_lengths_rejected(self):
        with self.assertRaises(InconsistentContainerError):
            PolymorphismSequenceContainer(["ACGT", "ACG"])
        # Also catchable as the package base class and as ValueError
        with self.assertRaises(PopulationGeneticsError):
            PolymorphismSequenceContainer(["ACGT", "ACG"])
        with self.assertRaises(ValueError):
            PolymorphismSequenceContainer(["ACGT", "ACG"])

    def test_name_count_mismatch_rejected(self):
        with self.assertRaises(InconsistentContainerError):
            PolymorphismSequenceContainer(["ACGT", "ACGT"], names=["only_one"])

    def test_invalid_symbols_rejected(self):
        with self.assertRaises(ValueError):
            PolymorphismSequenceContainer(["ACGT", "AC*T"])

    def test_matrix_is_read_only(self):
        with self.assertRaises(ValueError):
            self.psc.matrix[0, 0] = "T"

    def test_site_column(self):
        np.testing.assert_array_equal(self.psc.site(3), np.array(["T", "A", "N"]))

    def test_masks(self):
        resolved = self.psc.resolved_mask()
        self.assertTrue(resolved[0].all())
        np.testing.assert_array_equal(resolved[2], [True, True, False, False])
        np.testing.assert_array_equal(self.psc.gap_mask()[2], [False, False, True, False])

    def test_iter_sites_complete_only(self):
        positions = [pos for pos, _ in self.psc.iter_sites(complete_only=True)]
        self.assertEqual(positions, [0, 1])
        self.assertEqual(len(list(self.psc.iter_sites())), 4)

    def test_iter_codon_sites(self):
        psc = PolymorphismSequenceContainer(["ATGAAA", "ATGAAG"])
        sites = list(psc.iter_codon_sites())
        self.assertEqual(sites, [(0, ["ATG", "ATG"]), (1, ["AAA", "AAG"])])

    def test_iter_codon_sites_requires_multiple_of_three(self):
        with self.assertRaises(InconsistentContainerError):
            list(self.psc.iter_codon_sites())

    def test_select_and_split(self):
        ingroup, outgroup = self.psc.split(["s2"])
        self.assertEqual(ingroup.names, ("s1", "s3"))
        self.assertEqual(outgroup.to_mapping(), {"s2": "ACGA"})
        with self.assertRaises(KeyError):
            self.psc.select(["missing"])

    def test_empty_container(self):
        psc = PolymorphismSequenceContainer([])
        self.assertEqual(psc.n_sequences, 0)
        self.assertEqual(psc.n_sites, 0)


class TestAsContainer(unittest.TestCase):

    def test_container_returned_unchanged(self):
        psc = PolymorphismSequenceContainer(["AC", "AG"])
        self.assertIs(as_container(psc), psc)

    def test_from_mapping(self):
        psc = as_container({"a": "ACGT", "b": "ACGA"})
        self.assertEqual(psc.names, ("a", "b"))

    def test_from_list_of_strings(self):
        psc = as_container(["ACGT", "ACGA"])
        self.assertEqual(psc.n_sequences, 2)

    def test_from_seq_records_and_alignment(self):
        records = [SeqRecord(Seq("ACGT"), id="r1"), SeqRecord(Seq("ACGA"), id="r2")]
        self.assertEqual(as_container(records).names, ("r1", "r2"))
        alignment = MultipleSeqAlignment(records)
        self.assertEqual(as_container(alignment).to_mapping(), {"r1": "ACGT", "r2": "ACGA"})

    def test_single_string_rejected(self):
        with self.assertRaises(TypeError):
            as_container("ACGT")

    def test_unsupported_type_rejected(self):
        with self.assertRaises(TypeError):
            as_container(42)


if __name__ == '__main__':
    unittest.main()
