from .site_counts import (
    count_singleton,
    gc_content,
    gc_polymorphism,
    haplotype_diversity,
    number_of_haplotypes,
    number_of_transitions,
    number_of_transversions,
    parsimony_informative_site_number,
    polymorphic_site_number,
    total_number_mutations,
    transitions_transversions_ratio,
    triplet_number,
)
from .diversity import NeutralityCoefficients, tajima83, watterson75
from .neutrality import (
    external_mutation_number,
    fu_li_d,
    fu_li_d_star,
    fu_li_f,
    fu_li_f_star,
    tajima_d_ss,
    tajima_d_tnm,
)
from .codon_statistics import (
    mean_non_synonymous_sites_number,
    mean_synonymous_sites_number,
    mono_site_polymorphic_codon_number,
    non_synonymous_polymorphic_codon_number,
    pi_non_synonymous,
    pi_synonymous,
    stop_codon_site_number,
    synonymous_polymorphic_codon_number,
)
from .ld import (
    LDContainer,
    generate_ld_container,
    inverse_regression_r2,
    linear_regression_d,
    linear_regression_d_prime,
    linear_regression_r2,
    mean_d,
    mean_d_prime,
    mean_distance1,
    mean_distance2,
    mean_r2,
    origin_regression_d,
    origin_regression_d_prime,
    origin_regression_r2,
    pairwise_d,
    pairwise_d_prime,
    pairwise_distances1,
    pairwise_distances2,
    pairwise_r2,
)
