import logging
import sys

from sampler_comparison.analysis.distribution_comparator import compare_all
from sampler_comparison.analysis.interval_analyzer import compute_interval
from sampler_comparison.configuration import SamplerConfiguration
from sampler_comparison.reporter.reporter import Reporter
from sampler_comparison.utils.time import nanos_to_millis

NAME_WIDTH = 20
VALUE_WIDTH = 11
CELL_WIDTH = 20
INTERVAL_COLUMNS = ["Samples", "Avg", "StdDev", "AvgTrimmed", "StdTrimmed", "Min", "10thPerc", "90thPerc", "Max"]

# stores holding samples of failed stack walks only make sense for the interval table
ERROR_STORE_MARKER = "error"

logger = logging.getLogger(__name__)


def _format_row(name, values):
    return "{:<{name_width}}".format(name, name_width=NAME_WIDTH) + "".join(
        "{:>{width}}".format(value, width=VALUE_WIDTH) for value in values)


def _millis(nanos):
    return "{:.3f}".format(nanos_to_millis(nanos))


def intervals_to_table(stores, min_samples_per_thread=None):
    """
    One row per store, sorted by name; durations are printed in milliseconds.
    """
    if min_samples_per_thread is None:
        min_samples_per_thread = SamplerConfiguration.get().min_samples_per_thread
    header = _format_row("Name", INTERVAL_COLUMNS)
    rows = [header, "-" * len(header)]
    for store in sorted(stores, key=lambda s: s.name):
        interval = compute_interval(store, min_samples_per_thread)
        rows.append(_format_row(store.name, [str(interval.samples)] + [
            _millis(value) for value in (interval.avg_ns, interval.std_dev_ns, interval.avg_trimmed_ns,
                                         interval.std_dev_trimmed_ns, interval.min_ns, interval.ten_perc_ns,
                                         interval.ninety_perc_ns, interval.max_ns)]))
    return "\n".join(rows)


def comparable_stores(stores):
    return [store for store in stores if ERROR_STORE_MARKER not in store.name]


def divergence_table(stores):
    """
    Matrix of compare(row, column) for every pair of stores, each cell is "summed_diff / perc_that_isnt_in_other".
    """
    results = compare_all(stores)
    cell = "{:>" + str(CELL_WIDTH) + "}"
    rows = [cell.format("") + "".join(cell.format(store.name) for store in stores),
            "-" * (CELL_WIDTH * (len(stores) + 1))]
    for index, store in enumerate(stores):
        rows.append(cell.format(store.name) + "".join(
            cell.format("{:.3f} / {:.3f}".format(*results[(index, other_index)]))
            for other_index in range(len(stores))))
    return "\n".join(rows)


class TableReporter(Reporter):
    """
    Prints the interval table of all stores and the divergence matrix of the stores that are not error stores.
    """

    def __init__(self, environment=dict()):
        """
        :param environment: dependency container dictionary
        :param output_stream: (inside environment) text stream to print to; default is sys.stdout
        :param min_samples_per_thread: (inside environment) threads with fewer samples are left out of the
            interval statistics; default comes from the SamplerConfiguration
        """
        self._output_stream = environment.get("output_stream") or sys.stdout
        self._min_samples_per_thread = environment.get("min_samples_per_thread")

    def report(self, stores, include_divergence=True):
        output = intervals_to_table(stores, self._min_samples_per_thread)
        to_compare = comparable_stores(stores)
        if include_divergence and to_compare:
            output += "\n\n" + divergence_table(to_compare)
        logger.debug("Reporting {} stores".format(len(stores)))
        print(output, file=self._output_stream)
        return output
