import logging
import sys
import time

import sampler_comparison.sampling_utils
from sampler_comparison.metrics.with_timer import with_timer
from sampler_comparison.model.sample import ThreadDump
from sampler_comparison.utils.time import current_nano_time

logger = logging.getLogger(__name__)


class Sampler:
    """
    Returns a ThreadDump containing the stack frames of the currently running threads.

    The thread doing the sample is included unless it is in the `excluded_threads` set; the sampling agent adds its
    own thread there so that it does not show up in the samples.
    """

    def __init__(self, environment=dict()):
        """
        :param environment: dependency container dictionary
        :param excluded_threads: (inside environment) set of thread names to be excluded from sampling
        :param get_stacks: (inside environment) function extracting the stacks; default sampling_utils.get_stacks
        :param thread_lister: (inside environment) provides _current_frames(); default sys
        :param clock: (inside environment) returns the time of the sample in nanoseconds; default time.monotonic_ns
        :param timer: (inside environment) Timer recording the duration of the sampling
        """
        self._excluded_threads = environment.get("excluded_threads") or set()
        self._get_stacks = \
            environment.get("get_stacks") or sampler_comparison.sampling_utils.get_stacks
        self._thread_lister = environment.get("thread_lister") or sys
        self._clock = environment.get("clock") or time.monotonic_ns
        self.timer = environment.get("timer")

    @with_timer("sampleAllThreads", measurement="wall-clock-time")
    def sample(self):
        """
        Samples the stacks of all threads running in the current Python instance, except the excluded ones.
        All stacks share the timestamp taken right after the frames were listed.
        Any exception encountered during sampling is propagated.
        """
        all_threads = self._thread_lister._current_frames().items()
        timestamp_nanos = current_nano_time(clock=self._clock)

        stacks = self._get_stacks(
            threads_to_sample=all_threads,
            excluded_threads=self._excluded_threads)

        return ThreadDump(timestamp_nanos=timestamp_nanos, stacks=stacks)
