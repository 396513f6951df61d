import datetime
import logging

from sampler_comparison.configuration import SamplerConfiguration
from sampler_comparison.metrics.with_timer import with_timer
from sampler_comparison.model.store import SAMPLING_THREAD_NAME
from sampler_comparison.sampler import Sampler
from sampler_comparison.utils.scheduler import Scheduler

logger = logging.getLogger(__name__)


class AgentRunner:
    """
    AgentRunner orchestrates the components of a running sampling agent: on every tick of its scheduler it takes a
    thread dump and ingests every stack into the store; when stopped it hands the store over to the reporter.
    This class should only be accessed by SamplingAgent.

    NOTE: If a tick fails unexpectedly sampling stops; the samples taken so far are still reported on stop().
    """

    def __init__(self, environment=dict()):
        """
        :param environment: dependency container dictionary
        :param store: (required inside environment) store the samples are ingested into
        :param reporter: (required inside environment) reporter the store is handed to on stop, may be None
        :param sampler: (inside environment) default is a Sampler built from the same environment
        :param initial_sampling_delay: (inside environment) delay before the first sample as timedelta; default 0
        :param timer: (inside environment) Timer for the overhead metrics
        """
        self.timer = environment.get("timer")
        self.sampler = environment.get("sampler") or Sampler(environment=environment)
        self.store = environment["store"]
        self.reporter = environment["reporter"]
        self.scheduler = Scheduler(
            command=self._sampling_command,
            interval_provider=lambda: SamplerConfiguration.get().sampling_interval,
            initial_delay=environment.get("initial_sampling_delay") or datetime.timedelta(),
            thread_name=SAMPLING_THREAD_NAME)

    def start(self):
        self.scheduler.start()
        return True

    def _sampling_command(self):
        try:
            self._sample_and_ingest()
            return True
        except Exception:
            logger.info("An unexpected issue caused the sampling command to terminate.", exc_info=True)
            return False

    @with_timer("sampleAndIngest", measurement="wall-clock-time")
    def _sample_and_ingest(self):
        thread_dump = self.sampler.sample()
        for thread_name, frames in thread_dump.stacks:
            self.store.ingest(thread_name, frames, thread_dump.timestamp_nanos)

    def is_running(self):
        return self.scheduler.is_running()

    def is_paused(self):
        return self.scheduler.is_paused()

    def stop(self):
        """
        Terminates sampling and reports the store.

        :return: what the reporter returned, None without reporter
        """
        self.scheduler.stop()
        if self.reporter is None:
            return None
        return self.reporter.report([self.store])

    def resume(self, block=False):
        self.scheduler.resume(block)

    def pause(self, block=False):
        self.scheduler.pause(block)
