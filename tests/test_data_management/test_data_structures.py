# tests/test_data_management/test_data_structures.py

import unittest
import os
import sys

import pandas as pd

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../')))

from sequence_popgen.data_management.data_structures import (
    AlleleInfo,
    AnalyzedLoci,
    DataSet,
    Individual,
    LocusInfo,
    MonolocusGenotype,
    MultilocusGenotype,
)
from sequence_popgen.exceptions import RegistryLookupError


class TestLocusRegistry(unittest.TestCase):

    def test_allele_keys_are_registry_positions(self):
        locus = LocusInfo(name="D1S80")
        self.assertEqual(locus.add_allele_info(AlleleInfo("152")), 0)
        self.assertEqual(locus.add_allele_info(AlleleInfo("156")), 1)
        # First-seen label keeps its key
        self.assertEqual(locus.add_allele_info(AlleleInfo("152")), 0)
        self.assertEqual(locus.number_of_alleles, 2)
        self.assertEqual(locus.get_allele_info_key("156"), 1)
        self.assertEqual(locus.get_allele_info_by_key(1), AlleleInfo("156"))

    def test_unknown_allele(self):
        locus = LocusInfo(name="D1S80")
        with self.assertRaises(RegistryLookupError):
            locus.get_allele_info_key("999")
        with self.assertRaises(LookupError):
            locus.get_allele_info_by_key(0)

    def test_analyzed_loci(self):
        loci = AnalyzedLoci.with_size(2)
        loci.set_locus_info(0, LocusInfo(name="M1"))
        loci.set_locus_info(1, LocusInfo(name="M2"))
        self.assertEqual(loci.locus_names, ["M1", "M2"])
        self.assertEqual(loci.get_locus_info_position("M2"), 1)
        self.assertEqual(loci.add_allele_info_by_locus_name("M2", AlleleInfo("A")), 0)
        with self.assertRaises(RegistryLookupError):
            loci.get_locus_info_by_name("M3")
        with self.assertRaises(IndexError):
            loci.set_locus_info(2, LocusInfo(name="M3"))


class TestGenotypes(unittest.TestCase):

    def test_monolocus_genotype_is_sorted_and_unique(self):
        genotype = MonolocusGenotype.from_keys([3, 1, 3])
        self.assertEqual(genotype.allele_keys, (1, 3))
        self.assertFalse(genotype.is_homozygous)
        self.assertTrue(MonolocusGenotype.from_keys([2, 2]).is_homozygous)

    def test_multilocus_slots(self):
        genotype = MultilocusGenotype.empty(3)
        self.assertTrue(genotype.is_missing(1))
        genotype.set_monolocus_genotype(1, MonolocusGenotype.from_keys([0]))
        self.assertFalse(genotype.is_missing(1))
        self.assertEqual(genotype.number_of_non_missing, 1)


class TestDataSet(unittest.TestCase):

    def setUp(self):
        self.dataset = DataSet()
        loci = AnalyzedLoci.with_size(2)
        loci.set_locus_info(0, LocusInfo(name="M1", alleles=[AlleleInfo("100"), AlleleInfo("104")]))
        loci.set_locus_info(1, LocusInfo(name="M2", alleles=[AlleleInfo("200")]))
        self.dataset.set_analyzed_loci(loci)
        self.dataset.add_empty_group(0)
        self.dataset.add_individual_to_group(0, Individual(id="ind1"))
        self.dataset.add_individual_to_group(0, Individual(id="ind2"))

    def test_groups(self):
        self.assertEqual(self.dataset.number_of_groups, 1)
        self.assertEqual(self.dataset.get_group_position(0), 0)
        with self.assertRaises(ValueError):
            self.dataset.add_empty_group(0)
        with self.assertRaises(RegistryLookupError):
            self.dataset.get_group_position(7)

    def test_individual_lookup(self):
        self.assertEqual(self.dataset.get_individual_position_in_group(0, "ind2"), 1)
        self.assertEqual(self.dataset.get_individual_by_id_from_group(0, "ind1").id, "ind1")
        with self.assertRaises(RegistryLookupError):
            self.dataset.get_individual_position_in_group(0, "ghost")
        with self.assertRaises(ValueError):
            self.dataset.add_individual_to_group(0, Individual(id="ind1"))

    def test_genotype_initialised_once(self):
        self.dataset.init_individual_genotype_in_group(0, 0)
        individual = self.dataset.get_individual_by_id_from_group(0, "ind1")
        self.assertTrue(individual.has_genotype)
        self.assertEqual(individual.genotype.slots, [None, None])
        with self.assertRaises(ValueError):
            self.dataset.init_individual_genotype_in_group(0, 0)

    def test_set_genotype_requires_storage(self):
        with self.assertRaises(ValueError):
            self.dataset.set_individual_monolocus_genotype_in_group(0, 1, 0, MonolocusGenotype.from_keys([0]))

    def test_loci_set_once(self):
        with self.assertRaises(ValueError):
            self.dataset.set_analyzed_loci(AnalyzedLoci.with_size(1))
        self.assertEqual(self.dataset.get_locus_info_by_name("M2").name, "M2")
        with self.assertRaises(RegistryLookupError):
            DataSet().get_locus_info_by_name("M1")

    def test_genotypes_frame(self):
        self.dataset.init_individual_genotype_in_group(0, 0)
        self.dataset.set_individual_monolocus_genotype_in_group(0, 0, 0, MonolocusGenotype.from_keys([1, 0]))
        frame = self.dataset.genotypes_frame()
        expected = pd.DataFrame({
            "Group": [0, 0],
            "Individual": ["ind1", "ind2"],
            "M1": ["100/104", None],
            "M2": [None, None],
        })
        pd.testing.assert_frame_equal(frame, expected)


if __name__ == '__main__':
    unittest.main()
