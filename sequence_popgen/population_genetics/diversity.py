"""
Nucleotide diversity estimators.

The constants used by Watterson's estimator and by the neutrality tests only
depend on the sample size n. They are gathered in NeutralityCoefficients,
computed once per call and passed explicitly to the functions that need them:

    a1  = sum_{i=1}^{n-1} 1/i            a2 = sum_{i=1}^{n-1} 1/i^2
    a1n = sum_{i=1}^{n} 1/i
    b1  = (n + 1) / (3(n - 1))           b2 = 2(n^2 + n + 3) / (9n(n - 1))
    c1  = b1 - 1/a1                      c2 = b2 - (n + 2)/(a1 n) + a2/a1^2
    cn  = 2(n a1 - 2(n - 1)) / ((n - 1)(n - 2))
    dn  = cn + (n - 2)/(n - 1)^2 + 2/(n - 1) (3/2 - (2 a1n - 3)/(n - 2) - 1/n)
    e1  = c1 / a1                        e2 = c2 / (a1^2 + a2)
"""

import math
from dataclasses import dataclass

from sequence_popgen.core.containers import as_container
from sequence_popgen.exceptions import UndefinedStatisticError
from sequence_popgen.population_genetics.site_counts import polymorphic_site_number, site_states


@dataclass(frozen=True)
class NeutralityCoefficients:
    """Sample-size dependent constants of Tajima (1989) and Fu & Li (1993)."""
    n: int
    a1: float
    a2: float
    a1n: float
    b1: float
    b2: float
    c1: float
    c2: float
    cn: float
    dn: float
    e1: float
    e2: float

    @classmethod
    def for_sample_size(cls, n: int) -> "NeutralityCoefficients":
        """
        Computes the coefficients for n sequences.

        `cn` and `dn` are only defined for n >= 3 and are NaN for n = 2.

        Raises:
            UndefinedStatisticError: If n < 2.
        """
        if n < 2:
            raise UndefinedStatisticError(f"Diversity estimators need at least 2 sequences, got {n}.")
        a1 = sum(1.0 / i for i in range(1, n))
        a2 = sum(1.0 / (i * i) for i in range(1, n))
        a1n = a1 + 1.0 / n
        b1 = (n + 1) / (3.0 * (n - 1))
        b2 = 2.0 * (n * n + n + 3) / (9.0 * n * (n - 1))
        c1 = b1 - 1.0 / a1
        c2 = b2 - (n + 2) / (a1 * n) + a2 / (a1 * a1)
        if n > 2:
            cn = 2.0 * (n * a1 - 2.0 * (n - 1)) / ((n - 1) * (n - 2))
            dn = (cn + (n - 2) / ((n - 1) ** 2)
                  + 2.0 / (n - 1) * (1.5 - (2.0 * a1n - 3.0) / (n - 2) - 1.0 / n))
        else:
            cn = dn = math.nan
        e1 = c1 / a1
        e2 = c2 / (a1 * a1 + a2)
        return cls(n=n, a1=a1, a2=a2, a1n=a1n, b1=b1, b2=b2, c1=c1, c2=c2, cn=cn, dn=dn, e1=e1, e2=e2)

    def as_dict(self) -> dict[str, float]:
        """The coefficients keyed by name (a1, a2, a1n, b1, b2, c1, c2, cn, dn, e1, e2)."""
        return {key: getattr(self, key) for key in ("a1", "a2", "a1n", "b1", "b2", "c1", "c2", "cn", "dn", "e1", "e2")}


def resolve_coefficients(n: int, coefficients: NeutralityCoefficients | None) -> NeutralityCoefficients:
    """Returns `coefficients` after checking it was computed for n, or computes them."""
    if coefficients is None:
        return NeutralityCoefficients.for_sample_size(n)
    if coefficients.n != n:
        raise ValueError(f"Coefficients were computed for n={coefficients.n}, but the sample has n={n}.")
    return coefficients


def watterson75(psc, include_gaps: bool = False, coefficients: NeutralityCoefficients | None = None) -> float:
    """
    Computes Watterson's (1975) estimator of theta.

        theta_S = S / a1

    where S is the number of polymorphic sites and n the number of sequences.

    Args:
        psc: A PolymorphismSequenceContainer or anything `as_container` accepts.
        include_gaps: Whether gaps count as a state.
        coefficients: Precomputed NeutralityCoefficients for this sample size.

    Returns:
        theta_S for the whole alignment (not per site).

    Raises:
        UndefinedStatisticError: If the alignment holds fewer than 2 sequences.
    """
    psc = as_container(psc)
    values = resolve_coefficients(psc.n_sequences, coefficients)
    return polymorphic_site_number(psc, include_gaps) / values.a1


def site_heterozygosity(site, include_gaps: bool = False) -> float:
    """
    Unbiased heterozygosity of one site: 1 - sum_j k_j (k_j - 1) / (n_i (n_i - 1)).

    Returns 0 when fewer than two symbols are counted at the site.
    """
    states = site_states(site, include_gaps)
    n_i = sum(states.values())
    if n_i < 2:
        return 0.0
    return 1.0 - sum(k * (k - 1) for k in states.values()) / (n_i * (n_i - 1))


def tajima83(psc, include_gaps: bool = False) -> float:
    """
    Computes Tajima's (1983) estimator of theta, the mean number of pairwise differences.

        theta_pi = sum over polymorphic sites i of [1 - sum_j k_ji (k_ji - 1) / (n_i (n_i - 1))]

    where k_ji is the count of state j at site i and n_i the number of sequences
    counted at that site (resolved symbols only unless include_gaps).
    """
    psc = as_container(psc)
    # monomorphic sites contribute exactly 0
    return sum((site_heterozygosity(site, include_gaps) for _, site in psc.iter_sites()), 0.0)
