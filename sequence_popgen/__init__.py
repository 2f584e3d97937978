"""
Population-genetics statistics on aligned DNA sequences, and import of
GeneMapper genotype tables into a multi-locus genotype dataset.
"""

__version__ = "0.1.0"
