from datetime import timedelta
from test.pytestutils import before
from test.help_utils import wait_for, SLEEPING_STACK, WORKING_STACK
from mock import MagicMock

from sampler_comparison.agent_runner import AgentRunner
from sampler_comparison.configuration import SamplerConfiguration, SamplerConfigurationMerger
from sampler_comparison.metrics.timer import Timer
from sampler_comparison.model.sample import ThreadDump
from sampler_comparison.model.store import Store, SAMPLING_THREAD_NAME
from sampler_comparison.reporter.reporter import Reporter
from sampler_comparison.sampler import Sampler


class TestAgentRunner:
    @before
    def before(self):
        self.mock_sampler = MagicMock(name="sampler", spec=Sampler)
        self.mock_sampler.sample.return_value = ThreadDump(
            timestamp_nanos=42, stacks=[("main", SLEEPING_STACK), ("worker", WORKING_STACK)])
        self.mock_reporter = MagicMock(name="reporter", spec=Reporter)
        self.mock_reporter.report.return_value = "sample.txt"
        self.store = Store("test store", 10)
        self.timer = Timer()

        self.environment = {
            "sampler": self.mock_sampler,
            "store": self.store,
            "reporter": self.mock_reporter,
            "timer": self.timer,
            "initial_sampling_delay": timedelta()
        }
        SamplerConfigurationMerger(user_overrides=SamplerConfiguration(sampling_interval=timedelta(seconds=2)))
        self.agent_runner = AgentRunner(self.environment)

        yield
        self.agent_runner.stop()
        SamplerConfigurationMerger()

    def test_every_stack_of_the_thread_dump_is_ingested_with_its_timestamp(self):
        assert self.agent_runner._sampling_command()

        assert self.store.thread_names() == {"main", "worker"}
        assert self.store.samples_for("main")[0].timestamp_nanos == 42
        assert self.store.samples_for("worker")[0].timestamp_nanos == 42

    def test_it_records_the_overhead(self):
        self.agent_runner._sampling_command()

        assert self.timer.get_metric("sampleAndIngest").counter == 1

    def test_when_sampling_fails_the_command_stops_the_schedule(self):
        self.mock_sampler.sample.side_effect = RuntimeError("sampling failed")

        assert not self.agent_runner._sampling_command()

    def test_the_scheduler_thread_has_the_name_the_store_ignores(self):
        assert self.agent_runner.scheduler._thread.name == SAMPLING_THREAD_NAME

    def test_the_interval_comes_from_the_configuration(self):
        self.agent_runner.start()
        wait_for(lambda: self.store.total_sample_count() == 2)

        assert self.agent_runner.scheduler._get_next_delay_seconds() <= 2
        assert self.agent_runner.scheduler._get_next_delay_seconds() > 1

    def test_stop_reports_the_store(self):
        self.agent_runner.start()

        assert self.agent_runner.stop() == "sample.txt"
        self.mock_reporter.report.assert_called_once_with([self.store])
        assert not self.agent_runner.is_running()

    def test_stop_without_reporter_returns_none(self):
        environment = dict(self.environment)
        environment["reporter"] = None

        assert AgentRunner(environment).stop() is None

    def test_pause_and_resume(self):
        self.agent_runner.start()

        self.agent_runner.pause(block=True)
        assert self.agent_runner.is_paused()

        self.agent_runner.resume(block=True)
        assert not self.agent_runner.is_paused()
        assert self.agent_runner.is_running()
