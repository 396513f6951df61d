import pytest

from test.pytestutils import before
from mock import create_autospec, MagicMock, ANY

from sampler_comparison.metrics.timer import Timer
from sampler_comparison.model.sample import ThreadDump
from sampler_comparison.sampler import Sampler
from sampler_comparison.sampling_utils import get_stacks


class TestSampler:
    def before(self):
        self.mock_get_stacks = create_autospec(get_stacks)
        self.mock_get_stacks.return_value = [("main", ["dummy_frames"])]
        self.mock_thread_lister = MagicMock(name="thread_lister")
        self._current_frames_reply = {
            "fake_thread_1": "fake_thread_frames_1",
            "fake_thread_2": "fake_thread_frames_2"
        }
        self.mock_thread_lister._current_frames = \
            MagicMock(name="current_frames_list", return_value=self._current_frames_reply)
        self.environment = {
            "get_stacks": self.mock_get_stacks,
            "thread_lister": self.mock_thread_lister,
            "clock": lambda: 42
        }


class TestSample(TestSampler):
    @before
    def before(self):
        super().before()

    def test_it_returns_the_stacks_with_the_time_of_the_sample(self):
        sampler = Sampler(environment=self.environment)

        result = sampler.sample()

        assert (result == ThreadDump(timestamp_nanos=42, stacks=[("main", ["dummy_frames"])]))

    def test_it_calls_the_get_stacks_method_with_the_current_threads_and_the_default_excluded_threads(
            self):
        default_excluded_threads = set()

        sampler = Sampler(environment=self.environment)

        sampler.sample()

        self.mock_get_stacks.assert_called_once_with(
            threads_to_sample=self._current_frames_reply.items(),
            excluded_threads=default_excluded_threads,
        )

    def test_it_records_the_sampling_time_when_there_is_a_timer(self):
        self.environment["timer"] = Timer()
        sampler = Sampler(environment=self.environment)

        sampler.sample()

        assert (self.environment["timer"].get_metric("sampleAllThreads").counter == 1)

    def test_it_uses_the_monotonic_clock_by_default(self):
        del self.environment["clock"]
        sampler = Sampler(environment=self.environment)

        first = sampler.sample().timestamp_nanos
        second = sampler.sample().timestamp_nanos

        assert (isinstance(first, int))
        assert (first <= second)


class TestWhenExcludedThreadsAreSpecified(TestSampler):
    @before
    def before(self):
        super().before()

    def test_it_calls_the_get_stacks_method_with_the_custom_excluded_threads_list(
            self):
        self.environment["excluded_threads"] = {"exclude_me"}
        sampler = Sampler(environment=self.environment)

        sampler.sample()

        self.mock_get_stacks.assert_called_once_with(
            threads_to_sample=ANY,
            excluded_threads={"exclude_me"})


class TestWhenGetStacksFails(TestSampler):
    @before
    def before(self):
        super().before()

    def test_the_exception_is_propagated(self):
        self.mock_get_stacks.side_effect = RuntimeError("cannot walk")
        sampler = Sampler(environment=self.environment)

        with pytest.raises(RuntimeError, match="cannot walk"):
            sampler.sample()
