"""
Statistics about the time between consecutive samples of the same thread, i.e. how close a sampler gets to the
sampling interval it was configured with.
"""
import logging
from collections import namedtuple

import numpy as np

DEFAULT_MIN_SAMPLES_PER_THREAD = 10
TEN_PERCENT = 0.1
NINETY_PERCENT = 0.9

# Value of every statistic that can't be computed because there is no gap to compute it from.
UNDEFINED = float("nan")

logger = logging.getLogger(__name__)

ComputedInterval = namedtuple("ComputedInterval", [
    "samples",              # total number of samples in the store
    "count",                # number of gaps the statistics are computed from
    "avg_ns",
    "std_dev_ns",
    "avg_trimmed_ns",       # average without the lowest and the highest 10% of the gaps
    "std_dev_trimmed_ns",
    "min_ns",
    "ten_perc_ns",
    "ninety_perc_ns",
    "max_ns"
])


def compute_time_diffs(store, min_samples_per_thread=DEFAULT_MIN_SAMPLES_PER_THREAD):
    """
    Gaps between chronologically consecutive samples of every thread having at least min_samples_per_thread
    samples; threads with fewer samples are too sparse to say anything about the interval.

    :return: the gaps of all those threads in nanoseconds, sorted ascending, as numpy uint64 array
    """
    diffs = []
    for thread_name, samples in store.items():
        if len(samples) < min_samples_per_thread:
            logger.debug("Skipping thread '{}' of {}, it only has {} samples".format(
                thread_name, store.name, len(samples)))
            continue
        timestamps = np.sort(np.fromiter((sample.timestamp_nanos for sample in samples),
                                         dtype=np.uint64, count=len(samples)))
        diffs.append(np.diff(timestamps))
    if not diffs:
        return np.empty(0, dtype=np.uint64)
    return np.sort(np.concatenate(diffs))


def _mean_and_std(values):
    if values.size == 0:
        return UNDEFINED, UNDEFINED
    return float(np.mean(values)), float(np.std(values))


def compute_interval(store, min_samples_per_thread=DEFAULT_MIN_SAMPLES_PER_THREAD):
    """
    Computes the interval statistics of a store. The store is not modified.
    When there is no gap at all every statistic is UNDEFINED (NaN) and count is 0; when there are too few gaps
    for the trimmed range to contain any value, only the trimmed statistics are UNDEFINED.

    :param store: the store to analyze
    :param min_samples_per_thread: threads with fewer samples are ignored
    :return: ComputedInterval, durations in nanoseconds
    """
    diffs = compute_time_diffs(store, min_samples_per_thread)
    count = int(diffs.size)
    if count == 0:
        logger.debug("No interval found for {}".format(store.name))
        return ComputedInterval(samples=store.total_sample_count(), count=0,
                                avg_ns=UNDEFINED, std_dev_ns=UNDEFINED,
                                avg_trimmed_ns=UNDEFINED, std_dev_trimmed_ns=UNDEFINED,
                                min_ns=UNDEFINED, ten_perc_ns=UNDEFINED, ninety_perc_ns=UNDEFINED, max_ns=UNDEFINED)

    ten_perc_index = int(count * TEN_PERCENT)
    ninety_perc_index = int(count * NINETY_PERCENT)
    avg, std_dev = _mean_and_std(diffs)
    avg_trimmed, std_dev_trimmed = _mean_and_std(diffs[ten_perc_index:ninety_perc_index])
    return ComputedInterval(
        samples=store.total_sample_count(),
        count=count,
        avg_ns=avg,
        std_dev_ns=std_dev,
        avg_trimmed_ns=avg_trimmed,
        std_dev_trimmed_ns=std_dev_trimmed,
        min_ns=int(diffs[0]),
        ten_perc_ns=int(diffs[ten_perc_index]),
        ninety_perc_ns=int(diffs[ninety_perc_index]),
        max_ns=int(diffs[-1]))
