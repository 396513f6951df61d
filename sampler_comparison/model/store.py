import logging
import threading

from collections import Counter

from sampler_comparison.fingerprinter import fingerprint as fingerprint_stack
from sampler_comparison.model.sample import TimedFingerprint
from sampler_comparison.utils.synchronization import synchronized

# Name of the thread running the in-process sampling agent, it never samples itself.
SAMPLING_THREAD_NAME = "SamplingAgent"

# Per-process service threads of the JVM and of its flight recorder, they say nothing about the sampled program.
IGNORED_THREADS = frozenset({
    SAMPLING_THREAD_NAME,
    "Reference Handler",
    "Finalizer",
    "Signal Dispatcher",
    "Common-Cleaner",
    "JFR Periodic Tasks",
    "JFR Recorder Thread",
    "Notification Thread"
})

# timestamps are unsigned 64 bit integers so every store can be written to a file
MAX_TIMESTAMP = 2 ** 64 - 1

logger = logging.getLogger(__name__)


class Store:
    """
    Aggregates the fingerprints of sampled stacks per thread, together with the time each sample was taken.

    A store only keeps fingerprints, not the stacks themselves, which is enough to compare the distribution of the
    sampled stacks between two stores and to measure the interval between consecutive samples of a thread.
    The name identifies the store in reports; one capture can be split into several stores with different names.
    Per thread, samples are kept in the order they were added, which does not have to be chronological.
    """

    def __init__(self, name, max_depth, data_per_thread=None, digest_factory=None):
        """
        :param name: name of the capture source, e.g. "async-profiler"
        :param max_depth: maximum number of frames of a stack taken into account by its fingerprint, fixed for the
            lifetime of the store
        :param data_per_thread: (optional) dict thread name -> list of TimedFingerprint to start from
        :param digest_factory: (optional) factory for the hashing context used for fingerprints; default is sha256
        """
        if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth <= 0:
            raise ValueError("max_depth must be a positive integer, got {!r}".format(max_depth))
        if data_per_thread is not None:
            for samples in data_per_thread.values():
                for sample in samples:
                    self.check_timestamp(sample.timestamp_nanos)
        self.name = name
        self.max_depth = max_depth
        self._data_per_thread = data_per_thread if data_per_thread is not None else {}
        self._fingerprint_arguments = {"digest_factory": digest_factory} if digest_factory else {}
        self._lock = threading.Lock()

    @staticmethod
    def is_ignored_thread(thread_name):
        return thread_name in IGNORED_THREADS

    @staticmethod
    def check_timestamp(timestamp_nanos):
        if not 0 <= timestamp_nanos <= MAX_TIMESTAMP:
            raise ValueError("Timestamps must be unsigned 64 bit integers, got {}".format(timestamp_nanos))

    def ingest(self, thread_name, frames, timestamp_nanos):
        """
        Fingerprints the stack and records it for the thread.
        Samples of ignored threads and stacks with fewer than two frames are dropped; that is expected and not an
        error.

        :param thread_name: name of the sampled thread
        :param frames: sequence of Frame or (class_name, method_name), innermost frame first
        :param timestamp_nanos: time of the sample in nanoseconds
        :return: True if the sample was recorded, False if it was dropped
        """
        if self.is_ignored_thread(thread_name):
            return False
        # hashing only uses per-call state so it does not need to hold the lock
        stack_fingerprint = fingerprint_stack(frames, self.max_depth, **self._fingerprint_arguments)
        if stack_fingerprint is None:
            logger.debug("Dropped sample of thread '{}' at {}, the stack is too short".format(
                thread_name, timestamp_nanos))
            return False
        self.add(thread_name, timestamp_nanos, stack_fingerprint)
        return True

    @synchronized
    def add(self, thread_name, timestamp_nanos, fingerprint):
        """
        Records an already computed fingerprint, no filtering is applied.

        :raises ValueError: if the timestamp is not an unsigned 64 bit integer
        """
        self.check_timestamp(timestamp_nanos)
        samples = self._data_per_thread.get(thread_name)
        if samples is None:
            samples = self._data_per_thread[thread_name] = []
        samples.append(TimedFingerprint(timestamp_nanos, fingerprint))

    def thread_names(self):
        return set(self._data_per_thread.keys())

    def samples_for(self, thread_name):
        return tuple(self._data_per_thread.get(thread_name, ()))

    def items(self):
        """
        Iterates over (thread name, samples) in the order the threads were first seen.
        """
        for thread_name, samples in self._data_per_thread.items():
            yield thread_name, tuple(samples)

    def total_sample_count(self):
        return sum(len(samples) for samples in self._data_per_thread.values())

    def is_empty(self):
        return self.total_sample_count() == 0

    def absolute_fingerprint_distribution(self):
        distribution = Counter()
        for samples in self._data_per_thread.values():
            distribution.update(sample.fingerprint for sample in samples)
        return distribution

    def fingerprint_frequency(self):
        """
        Relative frequency of every distinct fingerprint over all threads.

        :return: dict fingerprint -> share of all samples; empty if the store has no samples
        """
        total = self.total_sample_count()
        if total == 0:
            return {}
        return {fingerprint: count / total
                for fingerprint, count in self.absolute_fingerprint_distribution().items()}

    def __eq__(self, other):
        if not isinstance(other, Store):
            return NotImplemented
        if self.name != other.name or self.max_depth != other.max_depth:
            return False
        if self.thread_names() != other.thread_names():
            return False
        return all(Counter(self._data_per_thread[thread_name]) == Counter(other._data_per_thread[thread_name])
                   for thread_name in self._data_per_thread)

    __hash__ = None

    def __repr__(self):
        return "Store(name={!r}, max_depth={}, threads={}, samples={})".format(
            self.name, self.max_depth, len(self._data_per_thread), self.total_sample_count())
