from collections import namedtuple

# What a Store keeps per thread: the sample timestamp and the fingerprint of its stack.
TimedFingerprint = namedtuple("TimedFingerprint", ["timestamp_nanos", "fingerprint"])


class Sample:
    __slots__ = ["thread_name", "timestamp_nanos", "fingerprint"]

    def __init__(self, thread_name, timestamp_nanos, fingerprint):
        """
        :param thread_name: name of the sampled thread
        :param timestamp_nanos: time of the sample in nanoseconds; samples to be compared must share a clock domain
        :param fingerprint: digest of the sampled stack, see sampler_comparison.fingerprinter
        """
        self.thread_name = thread_name
        self.timestamp_nanos = timestamp_nanos
        self.fingerprint = fingerprint

    def timed_fingerprint(self):
        return TimedFingerprint(self.timestamp_nanos, self.fingerprint)

    def __eq__(self, other):
        return isinstance(other, Sample) and self.thread_name == other.thread_name \
            and self.timestamp_nanos == other.timestamp_nanos and self.fingerprint == other.fingerprint

    def __hash__(self):
        return hash((self.thread_name, self.timestamp_nanos, self.fingerprint))

    def __repr__(self):
        return "Sample(thread_name={!r}, timestamp_nanos={}, fingerprint={})".format(
            self.thread_name, self.timestamp_nanos, self.fingerprint.hex())


# All stacks taken at one point in time: stacks is a list of (thread name, frames innermost first).
ThreadDump = namedtuple("ThreadDump", ["timestamp_nanos", "stacks"])
