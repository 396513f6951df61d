import datetime
from mock import MagicMock

from sampler_comparison.agent_builder import build_agent, ENABLED_ENV, FILE_ENV, SAMPLING_INTERVAL_ENV, \
    MAX_DEPTH_ENV
from sampler_comparison.sampling_agent import SamplingAgent, DEFAULT_FILE_PATH


def throw_exception(*args, **kwargs):
    raise Exception("Exception from TestAgentBuilder")


class TestAgentBuilder:
    class TestWhenNothingIsProvided:
        def test_it_creates_an_agent_writing_to_the_default_file(self):
            agent_factory = MagicMock(spec=SamplingAgent)

            subject = build_agent(env={}, agent_factory=agent_factory)

            assert subject is not None
            agent_factory.assert_called_once_with(file_path=DEFAULT_FILE_PATH, environment_override={})

    class TestWhenFilePathIsProvided:
        def test_the_parameter_wins_over_the_environment(self):
            agent_factory = MagicMock(spec=SamplingAgent)

            build_agent(file_path="from_parameter.txt", env={FILE_ENV: "from_env.txt"}, agent_factory=agent_factory)

            agent_factory.assert_called_once_with(file_path="from_parameter.txt", environment_override={})

        def test_it_is_read_from_the_environment(self):
            agent_factory = MagicMock(spec=SamplingAgent)

            build_agent(env={FILE_ENV: "from_env.txt"}, agent_factory=agent_factory)

            agent_factory.assert_called_once_with(file_path="from_env.txt", environment_override={})

    class TestWhenSamplingParametersAreInEnvironment:
        def test_they_are_passed_as_overrides(self):
            agent_factory = MagicMock(spec=SamplingAgent)

            build_agent(env={SAMPLING_INTERVAL_ENV: "20", MAX_DEPTH_ENV: "64"}, agent_factory=agent_factory)

            agent_factory.assert_called_once_with(file_path=DEFAULT_FILE_PATH, environment_override={
                "sampling_interval": datetime.timedelta(milliseconds=20),
                "max_stack_depth": 64
            })

        def test_invalid_values_are_ignored(self):
            agent_factory = MagicMock(spec=SamplingAgent)

            subject = build_agent(env={SAMPLING_INTERVAL_ENV: "often", MAX_DEPTH_ENV: "deep"},
                                  agent_factory=agent_factory)

            assert subject is not None
            agent_factory.assert_called_once_with(file_path=DEFAULT_FILE_PATH, environment_override={})

    class TestWhenOverridesAreProvided:
        def test_they_win_over_the_environment(self):
            agent_factory = MagicMock(spec=SamplingAgent)

            build_agent(env={SAMPLING_INTERVAL_ENV: "20", MAX_DEPTH_ENV: "64"}, agent_factory=agent_factory,
                        override={"max_stack_depth": 8, "sampling_interval": None})

            agent_factory.assert_called_once_with(file_path=DEFAULT_FILE_PATH, environment_override={
                "sampling_interval": datetime.timedelta(milliseconds=20),
                "max_stack_depth": 8
            })

    class TestWhenDisabled:
        def test_it_returns_none(self):
            agent_factory = MagicMock(spec=SamplingAgent)

            assert build_agent(env={ENABLED_ENV: "false"}, agent_factory=agent_factory) is None
            agent_factory.assert_not_called()

        def test_enabled_is_case_insensitive(self):
            agent_factory = MagicMock(spec=SamplingAgent)

            assert build_agent(env={ENABLED_ENV: "TRUE"}, agent_factory=agent_factory) is not None

    class TestWhenCreationFails:
        def test_it_returns_none(self):
            assert build_agent(env={}, agent_factory=throw_exception) is None
