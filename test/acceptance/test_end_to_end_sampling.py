import io
import shutil
import tempfile

from datetime import timedelta
from pathlib import Path

from sampler_comparison.analysis.distribution_comparator import compare
from sampler_comparison.analysis.interval_analyzer import compute_interval
from sampler_comparison.codec.store_codec import load
from sampler_comparison.configuration import SamplerConfigurationMerger
from sampler_comparison.model.store import SAMPLING_THREAD_NAME
from sampler_comparison.sampling_agent import SamplingAgent
from test.help_utils import HelperThreadRunner, FILE_NAME, wait_for
from test.pytestutils import before

SAMPLES_TO_WAIT_FOR = 5


class TestEndToEndSampling:
    @before
    def before(self):
        self.temporary_directory = tempfile.mkdtemp()

        helper = HelperThreadRunner()
        helper.new_helper_thread_blocked_inside_dummy_method()

        yield

        helper.stop_helper_thread()
        SamplerConfigurationMerger()

        shutil.rmtree(self.temporary_directory)

    def test_it_samples_and_saves_the_store_to_a_file(self):
        file_path = str(Path(self.temporary_directory, FILE_NAME + ".gz"))
        output_stream = io.StringIO()

        agent = SamplingAgent(
            file_path=file_path,
            environment_override={
                "sampling_interval": timedelta(milliseconds=1),
                "min_samples_per_thread": 2,
                "output_stream": output_stream,
                "allow_top_level_exceptions": True
            })

        try:
            assert agent.start()
            wait_for(lambda: len(agent.store.samples_for("test-thread")) >= SAMPLES_TO_WAIT_FOR,
                     timeout_seconds=5)
        finally:
            assert agent.stop()

        store = load(file_path)
        assert store == agent.store
        assert SAMPLING_THREAD_NAME not in store.thread_names()

        # the helper thread does not move, all its samples have the same stack
        helper_samples = store.samples_for("test-thread")
        assert len({sample.fingerprint for sample in helper_samples}) == 1

        timestamps = [sample.timestamp_nanos for sample in helper_samples]
        assert timestamps == sorted(timestamps)

        interval = compute_interval(store, min_samples_per_thread=2)
        assert interval.count > 0
        assert interval.min_ns > 0

        assert compare(store, store) == (0.0, 0.0)
        assert "sys._current_frames" in output_stream.getvalue()
