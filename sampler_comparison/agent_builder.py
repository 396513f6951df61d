import os
import logging
import datetime

from sampler_comparison.sampling_agent import SamplingAgent, DEFAULT_FILE_PATH

logger = logging.getLogger(__name__)

ENABLED_ENV = "SAMPLER_COMPARISON_ENABLED"
FILE_ENV = "SAMPLER_COMPARISON_FILE"
SAMPLING_INTERVAL_ENV = "SAMPLER_COMPARISON_INTERVAL_MS"
MAX_DEPTH_ENV = "SAMPLER_COMPARISON_MAX_DEPTH"


def _read_millis(override, env_name, override_key, env=os.environ):
    value = env.get(env_name)
    if value:
        try:
            override[override_key] = datetime.timedelta(milliseconds=int(value))
        except ValueError:
            logger.info("Unable to convert value to a time range for environment variable " + env_name)


def _read_int(override, env_name, override_key, env=os.environ):
    value = env.get(env_name)
    if value:
        try:
            override[override_key] = int(value)
        except ValueError:
            logger.info("Unable to convert value to an integer for environment variable " + env_name)


def _read_override(env=os.environ):
    override = dict()
    _read_millis(override, SAMPLING_INTERVAL_ENV, "sampling_interval", env)
    _read_int(override, MAX_DEPTH_ENV, "max_stack_depth", env)
    return override


def _is_enabled(env=os.environ):
    """
    By default sampling is enabled, any value in the environment variable other than "true" (case-insensitive)
    disables it
    """
    enable_env_value = env.get(ENABLED_ENV, "true").lower()
    result = enable_env_value == "true"
    if not result:
        logger.info(ENABLED_ENV + " is set to " + enable_env_value + ", sampling is disabled")
    return result


def build_agent(file_path=None, env=os.environ, agent_factory=None, override=None):
    """
    Creates a SamplingAgent from the given parameters, environment variables fill in what is not given.
    Explicit overrides win over environment variables.

    :param file_path: store file written on stop; default from SAMPLER_COMPARISON_FILE, then "sample.txt"
    :param env: environment variables, default is os.environ
    :param agent_factory: (for testing) function creating the agent, default is SamplingAgent
    :param override: dictionary with extra parameters for the agent's environment_override
    :return: a SamplingAgent or None, this function does not throw exceptions
    """
    if agent_factory is None:
        agent_factory = SamplingAgent
    try:
        if not _is_enabled(env):
            logger.info("Sampling agent is not started as it has been explicitly disabled. Set environment "
                        + "variable " + ENABLED_ENV + " to true if you wish to enable it.")
            return None

        override_values = _read_override(env)
        if override:
            override_values.update({key: value for key, value in override.items() if value is not None})
        return agent_factory(file_path=file_path or env.get(FILE_ENV) or DEFAULT_FILE_PATH,
                             environment_override=override_values)
    except Exception:
        logger.info("Unable to create sampling agent", exc_info=True)
    return None
