"""
Neutrality tests: Tajima's D (1989) and Fu & Li's D, D*, F, F* (1993).

Every test is a ratio whose denominator is the square root of a variance
term. A test that cannot be computed (too few polymorphic sites, too few
sequences, non-positive variance) raises UndefinedStatisticError instead of
returning NaN.
"""

import logging
import math

from sequence_popgen.core.containers import as_container
from sequence_popgen.exceptions import InconsistentContainerError, UndefinedStatisticError
from sequence_popgen.population_genetics.diversity import NeutralityCoefficients, resolve_coefficients, tajima83
from sequence_popgen.population_genetics.site_counts import (
    count_singleton,
    polymorphic_site_number,
    site_states,
    total_number_mutations,
)

logger = logging.getLogger(__name__)


def _standardize(numerator: float, variance: float, statistic: str) -> float:
    if variance <= 0 or math.isnan(variance):
        raise UndefinedStatisticError(f"{statistic} is undefined: variance term is {variance!r}.")
    return numerator / math.sqrt(variance)


def _tajima_d(pi: float, mutations: int, values: NeutralityCoefficients, statistic: str) -> float:
    if mutations <= 1:
        raise UndefinedStatisticError(f"{statistic} needs at least 2 mutations, got {mutations}.")
    variance = values.e1 * mutations + values.e2 * mutations * (mutations - 1)
    return _standardize(pi - mutations / values.a1, variance, statistic)


def tajima_d_ss(psc, include_gaps: bool = False, coefficients: NeutralityCoefficients | None = None) -> float:
    """
    Tajima's D computed from the number of segregating sites S.

        D = (theta_pi - S / a1) / sqrt(e1 S + e2 S (S - 1))

    Args:
        psc: A PolymorphismSequenceContainer or anything `as_container` accepts.
        include_gaps: Whether gaps count as a state.
        coefficients: Precomputed NeutralityCoefficients for this sample size.

    Raises:
        UndefinedStatisticError: If S <= 1, n < 2 or the variance term is not positive.
    """
    psc = as_container(psc)
    values = resolve_coefficients(psc.n_sequences, coefficients)
    segregating = polymorphic_site_number(psc, include_gaps)
    return _tajima_d(tajima83(psc, include_gaps), segregating, values, "Tajima's D")


def tajima_d_tnm(psc, include_gaps: bool = False, coefficients: NeutralityCoefficients | None = None) -> float:
    """
    Tajima's D computed from the total number of mutations eta.

        D = (theta_pi - eta / a1) / sqrt(e1 eta + e2 eta (eta - 1))
    """
    psc = as_container(psc)
    values = resolve_coefficients(psc.n_sequences, coefficients)
    eta = total_number_mutations(psc, include_gaps)
    return _tajima_d(tajima83(psc, include_gaps), eta, values, "Tajima's D (total mutations)")


def external_mutation_number(ingroup, outgroup) -> int:
    """
    Number of mutations on external branches of the ingroup genealogy (eta_e).

    At each polymorphic ingroup site the ancestral state is the most frequent
    resolved state of the outgroup (first encountered on ties); every ingroup
    state carried by a single sequence and different from it is a derived
    singleton. Sites where the outgroup has no resolved symbol are skipped.

    Raises:
        InconsistentContainerError: If the two alignments differ in length.
    """
    ingroup, outgroup = as_container(ingroup), as_container(outgroup)
    if ingroup.n_sites != outgroup.n_sites:
        raise InconsistentContainerError(
            f"Ingroup ({ingroup.n_sites} sites) and outgroup ({outgroup.n_sites} sites) are not aligned."
        )
    external = 0
    for position, site in ingroup.iter_sites():
        states = site_states(site)
        if len(states) < 2:
            continue
        outgroup_states = site_states(outgroup.site(position))
        if not outgroup_states:
            logger.debug("No resolved outgroup state at site %d; skipped.", position + 1)
            continue
        ancestral = outgroup_states.most_common(1)[0][0]
        external += sum(1 for state, count in states.items() if count == 1 and state != ancestral)
    return external


def _fu_li_values(psc, coefficients: NeutralityCoefficients | None) -> tuple[NeutralityCoefficients, int]:
    n = psc.n_sequences
    if n < 3:
        raise UndefinedStatisticError(f"Fu and Li's tests need at least 3 sequences, got {n}.")
    eta = total_number_mutations(psc)
    if eta < 1:
        raise UndefinedStatisticError("Fu and Li's tests are undefined without mutations.")
    return resolve_coefficients(n, coefficients), eta


def fu_li_d(ingroup, outgroup, coefficients: NeutralityCoefficients | None = None) -> float:
    """
    Fu and Li's D test, with an outgroup.

        D = (eta - a1 eta_e) / sqrt(uD eta + vD eta^2)
        vD = 1 + a1^2 / (a2 + a1^2) (cn - (n + 1) / (n - 1))
        uD = a1 - 1 - vD

    Args:
        ingroup: The sample under test.
        outgroup: Sequences of a related species, aligned with the ingroup.
        coefficients: Precomputed NeutralityCoefficients for the ingroup size.
    """
    ingroup = as_container(ingroup)
    values, eta = _fu_li_values(ingroup, coefficients)
    n = values.n
    eta_e = external_mutation_number(ingroup, outgroup)
    v_d = 1.0 + (values.a1 ** 2 / (values.a2 + values.a1 ** 2)) * (values.cn - (n + 1.0) / (n - 1.0))
    u_d = values.a1 - 1.0 - v_d
    return _standardize(eta - values.a1 * eta_e, u_d * eta + v_d * eta * eta, "Fu and Li's D")


def fu_li_f(ingroup, outgroup, coefficients: NeutralityCoefficients | None = None) -> float:
    """
    Fu and Li's F test, with an outgroup.

        F = (pi - eta_e) / sqrt(uF eta + vF eta^2)
        vF = (cn + 2(n^2 + n + 3) / (9n(n - 1)) - 2 / (n - 1)) / (a1^2 + a2)
        uF = (1 + (n + 1) / (3(n - 1)) - 4(n + 1) / (n - 1)^2 (a1n - 2n / (n + 1))) / a1 - vF
    """
    ingroup = as_container(ingroup)
    values, eta = _fu_li_values(ingroup, coefficients)
    n = values.n
    eta_e = external_mutation_number(ingroup, outgroup)
    pi = tajima83(ingroup)
    v_f = (values.cn + 2.0 * (n * n + n + 3) / (9.0 * n * (n - 1)) - 2.0 / (n - 1)) / (values.a1 ** 2 + values.a2)
    u_f = (1.0 + (n + 1) / (3.0 * (n - 1))
           - 4.0 * (n + 1) / ((n - 1) ** 2) * (values.a1n - 2.0 * n / (n + 1))) / values.a1 - v_f
    return _standardize(pi - eta_e, u_f * eta + v_f * eta * eta, "Fu and Li's F")


def fu_li_d_star(group, coefficients: NeutralityCoefficients | None = None) -> float:
    """
    Fu and Li's D* test, without an outgroup.

        D* = (n / (n - 1) eta - a1 eta_s) / sqrt(uD* eta + vD* eta^2)
        vD* = ((n / (n - 1))^2 a2 + a1^2 dn - 2 n a1 (a1 + 1) / (n - 1)^2) / (a1^2 + a2)
        uD* = n / (n - 1) (a1 - n / (n - 1)) - vD*

    where eta_s is the number of singletons.
    """
    group = as_container(group)
    values, eta = _fu_li_values(group, coefficients)
    n = values.n
    eta_s = count_singleton(group)
    ratio = n / (n - 1.0)
    v = (ratio ** 2 * values.a2 + values.a1 ** 2 * values.dn
         - 2.0 * n * values.a1 * (values.a1 + 1.0) / ((n - 1.0) ** 2)) / (values.a1 ** 2 + values.a2)
    u = ratio * (values.a1 - ratio) - v
    return _standardize(ratio * eta - values.a1 * eta_s, u * eta + v * eta * eta, "Fu and Li's D*")


def fu_li_f_star(group, coefficients: NeutralityCoefficients | None = None) -> float:
    """
    Fu and Li's F* test, without an outgroup.

        F* = (pi - (n - 1) / n eta_s) / sqrt(uF* eta + vF* eta^2)
        vF* = ((2n^3 + 110n^2 - 255n + 153) / (9n^2 (n - 1)) + 2(n - 1) a1 / n^2 - 8 a2 / n) / (a1^2 + a2)
        uF* = ((4n^2 + 19n + 3 - 12(n + 1) a1n) / (3n(n - 1))) / a1 - vF*
    """
    group = as_container(group)
    values, eta = _fu_li_values(group, coefficients)
    n = values.n
    eta_s = count_singleton(group)
    pi = tajima83(group)
    v = ((2.0 * n ** 3 + 110.0 * n ** 2 - 255.0 * n + 153.0) / (9.0 * n ** 2 * (n - 1.0))
         + 2.0 * (n - 1.0) * values.a1 / n ** 2 - 8.0 * values.a2 / n) / (values.a1 ** 2 + values.a2)
    u = ((4.0 * n ** 2 + 19.0 * n + 3.0 - 12.0 * (n + 1.0) * values.a1n) / (3.0 * n * (n - 1.0))) / values.a1 - v
    return _standardize(pi - (n - 1.0) / n * eta_s, u * eta + v * eta * eta, "Fu and Li's F*")
