import logging
import threading

from types import MappingProxyType as UnmodifiableDict

from sampler_comparison.agent_runner import AgentRunner
from sampler_comparison.configuration import SamplerConfiguration, SamplerConfigurationMerger
from sampler_comparison.file_reporter.file_reporter import FileReporter
from sampler_comparison.metrics.timer import Timer
from sampler_comparison.model.store import Store, SAMPLING_THREAD_NAME
from sampler_comparison.reporter.table_reporter import TableReporter

DEFAULT_FILE_PATH = "sample.txt"
DEFAULT_STORE_NAME = "sys._current_frames"

logger = logging.getLogger(__name__)

# this lock is used for checking the singleton when we start and stop the agent
start_agent_lock = threading.Lock()


class SamplingAgent:
    """
    Samples the stacks of all Python threads of the current process at a fixed interval and writes them into a store
    file when stopped, so that they can be compared with what other samplers observed during the same run.
    When stopped, it also prints the interval statistics of the samples it took.
    """

    # only one agent can sample at a time, they would otherwise sample each other's thread
    _active_agent = None

    def __init__(self, file_path=DEFAULT_FILE_PATH, environment_override=dict()):
        """
        :param file_path: path of the store file written on stop; gzip compressed if it ends with .gz
        :param environment_override: custom dependency container dictionary. Possible keys:
            - sampling_interval: delay between two samples as datetime.timedelta (default: 10ms)
            - max_stack_depth: number of frames taken into account for the fingerprints (default: 100)
            - min_samples_per_thread: threads with fewer samples are ignored in the printed summary (default: 10)
            - store_name: name of the store (default: "sys._current_frames")
            - print_summary: whether to print the interval table on stop (default: True)
            - output_stream: text stream the summary is printed to (default: sys.stdout)
            - excluded_threads: set of thread names that are not sampled (default: set())
            - reporter: reporter the store is handed to on stop (default: FileReporter writing to file_path)
            - agent_runner_factory: (for testing) creates the runner from the final environment (default: AgentRunner)
        """
        self._runner_instance = None
        self.environment = {}
        try:
            environment_override = dict(environment_override)
            user_overrides = SamplerConfiguration(
                sampling_interval=environment_override.pop("sampling_interval", None),
                max_stack_depth=environment_override.pop("max_stack_depth", None),
                min_samples_per_thread=environment_override.pop("min_samples_per_thread", None))
            SamplerConfigurationMerger(user_overrides=user_overrides)

            environment = self._set_default_environment(file_path)
            environment.update(environment_override)
            self.environment = self._setup_final_environment(environment)
            agent_runner_factory = self.environment.get("agent_runner_factory") or AgentRunner
            self._runner_instance = agent_runner_factory(environment=self.environment)
        except Exception:
            logger.info("Caught exception while creating the sampling agent", exc_info=True)
            if environment_override.get("allow_top_level_exceptions") is True:
                raise

    @staticmethod
    def _set_default_environment(file_path):
        return {
            "timer": Timer(),
            "file_path": file_path,
            "store_name": DEFAULT_STORE_NAME,
            "excluded_threads": set(),
            "print_summary": True,
            "output_stream": None
        }

    @staticmethod
    def _setup_final_environment(environment):
        environment["excluded_threads"] = frozenset({SAMPLING_THREAD_NAME}.union(environment["excluded_threads"]))
        environment["store"] = environment.get("store") or \
            Store(environment["store_name"], SamplerConfiguration.get().max_stack_depth)
        if "reporter" not in environment:
            environment["reporter"] = FileReporter(environment=environment)
        return UnmodifiableDict(environment)

    @property
    def store(self):
        return self.environment.get("store")

    def start(self):
        """
        Starts sampling, or resumes it if the agent was paused.
        :return: True if the agent was started successfully; False otherwise.
        """
        try:
            if self.is_running():
                logger.debug("Resuming sampling")
                self._runner.resume()
                return True
            with start_agent_lock:
                if SamplingAgent._active_agent is not None and SamplingAgent._active_agent is not self:
                    logger.info("Starting multiple sampling agents is not allowed, stop the active one first.")
                    return False
                logger.info("Starting sampling agent, " + str(self))
                self._runner.start()
                SamplingAgent._active_agent = self
                return True
        except Exception:
            logger.info("Caught exception while trying to start the sampling agent", exc_info=True)
            return False

    def is_running(self):
        try:
            return self._runner.is_running()
        except Exception:
            logger.info("Unable to detect if the sampling agent is running.", exc_info=True)
            return False

    def stop(self):
        """
        Stops sampling, writes the store and prints its interval statistics.
        If this agent was never started nothing is written.

        :return: True if the agent was stopped successfully or was already stopped; False otherwise.
        """
        try:
            with start_agent_lock:
                if SamplingAgent._active_agent is not self:
                    return True
                SamplingAgent._active_agent = None
                self._runner.stop()
            logger.debug("Sampling overhead: " + str(self.environment["timer"].summary()))
            if self.environment["print_summary"]:
                TableReporter(environment={"output_stream": self.environment["output_stream"]}) \
                    .report([self.store], include_divergence=False)
            return True
        except Exception:
            logger.info("Caught exception while trying to stop the sampling agent", exc_info=True)
            return False

    def pause(self, block=False):
        """
        Pauses sampling until start() is called again.

        :param block: if True, we will not return from this function before the pause is applied, default is False.
        """
        try:
            self._runner.pause(block)
            return True
        except Exception:
            logger.info("Unable to pause the sampling agent.", exc_info=True)
            return False

    @property
    def _runner(self):
        if self._runner_instance:
            return self._runner_instance
        raise RuntimeError("Sampling agent was not correctly initialized; see previous error messages for cause")

    def __str__(self):
        return "SamplingAgent(file_path={}, store={}, sampling_interval={})".format(
            self.environment.get("file_path"), self.store, SamplerConfiguration.get().sampling_interval)
