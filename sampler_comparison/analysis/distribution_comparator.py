"""
Compares what two samplers saw: the distribution of stack fingerprints of one store against another one.

The metric is directional, compare(a, b) measures how much of a's distribution is not covered by b and is in
general different from compare(b, a). Callers wanting a symmetric score have to combine both directions.
"""
import logging
from collections import namedtuple

logger = logging.getLogger(__name__)

# summed_diff: probability mass of the first store exceeding the mass of the same fingerprint in the other store
# perc_that_isnt_in_other: share of the first store's samples whose fingerprint never occurs in the other store
PercResult = namedtuple("PercResult", ["summed_diff", "perc_that_isnt_in_other"])


class ConfigMismatchException(Exception):
    pass


def compare(store, other):
    """
    :raises ConfigMismatchException: if the stores were fingerprinted with different max depths, their
        fingerprints can't be compared
    """
    if store.max_depth != other.max_depth:
        raise ConfigMismatchException(
            "Max depth does not match: {} has {} but {} has {}".format(
                store.name, store.max_depth, other.name, other.max_depth))
    distribution = store.fingerprint_frequency()
    other_distribution = other.fingerprint_frequency()

    summed_diff = 0.0
    perc_that_isnt_in_other = 0.0
    for fingerprint, frequency in distribution.items():
        other_frequency = other_distribution.get(fingerprint, 0.0)
        summed_diff += max(0.0, frequency - other_frequency)
        if other_frequency == 0:
            perc_that_isnt_in_other += frequency
    return PercResult(summed_diff, perc_that_isnt_in_other)


def compare_all(stores):
    """
    Compares every ordered pair of stores, including each store with itself.

    Results are keyed by position because stores written by separate agent runs share the same name.

    :return: dict (index, other index) -> PercResult
    """
    results = {}
    for index, store in enumerate(stores):
        for other_index, other in enumerate(stores):
            results[(index, other_index)] = compare(store, other)
    logger.debug("Compared {} pairs of stores".format(len(results)))
    return results
