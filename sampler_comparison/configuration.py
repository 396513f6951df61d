import logging

from datetime import timedelta

DEFAULT_SAMPLING_INTERVAL = timedelta(milliseconds=10)
DEFAULT_MAX_STACK_DEPTH = 100
DEFAULT_MIN_SAMPLES_PER_THREAD = 10

_singleton = None

logger = logging.getLogger(__name__)


class SamplerConfiguration:
    """
    Singleton class that holds the configuration shared by the sampling agent and the reports.
    """

    def __init__(self, sampling_interval=None, max_stack_depth=None, min_samples_per_thread=None):
        self.sampling_interval = sampling_interval
        self.max_stack_depth = max_stack_depth
        self.min_samples_per_thread = min_samples_per_thread
        if self.sampling_interval is not None and self.sampling_interval <= timedelta():
            raise ValueError(
                "Configuration issue: sampling_interval must be positive (got {})".format(self.sampling_interval))
        if self.max_stack_depth is not None and self.max_stack_depth <= 0:
            raise ValueError(
                "Configuration issue: max_stack_depth must be positive (got {})".format(self.max_stack_depth))
        if self.min_samples_per_thread is not None and self.min_samples_per_thread < 0:
            raise ValueError(
                "Configuration issue: min_samples_per_thread can't be negative (got {})".format(
                    self.min_samples_per_thread))

    def as_dict(self):
        return {key: value for key, value in self.__dict__.items() if value is not None}

    @classmethod
    def get(cls):
        """
        Returns the singleton instance, the defaults are used if nothing was set before.
        :return: the one instance of the sampler configuration
        """
        if _singleton is None:
            SamplerConfigurationMerger()
        return _singleton

    @classmethod
    def set(cls, current):
        """
        Sets the singleton instance with the one set as parameter.
        """
        if current is None:
            raise ValueError("You can not set a None instance for the singleton instance.")
        global _singleton
        _singleton = current
        logger.debug("New sampler configuration: " + str(_singleton.as_dict()))


class SamplerConfigurationMerger:

    def __init__(self, default=None, user_overrides=None):
        """
        Merges the user overrides on top of the defaults and sets the result as the singleton instance.
        Values that are None are never taken over.
        """
        default = default or SamplerConfiguration(
            sampling_interval=DEFAULT_SAMPLING_INTERVAL,
            max_stack_depth=DEFAULT_MAX_STACK_DEPTH,
            min_samples_per_thread=DEFAULT_MIN_SAMPLES_PER_THREAD)
        self.default = default.as_dict()
        self.user_overrides = (user_overrides or SamplerConfiguration()).as_dict()
        self._merge_and_set()

    def _merge_and_set(self):
        merged = dict(self.default)
        merged.update(self.user_overrides)
        SamplerConfiguration.set(SamplerConfiguration(**merged))
