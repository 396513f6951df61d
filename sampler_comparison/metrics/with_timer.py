import functools

from time import perf_counter
from time import process_time


def with_timer(metric_name, measurement="cpu-time"):
    """
    Records the duration (in seconds) of every call of the decorated method in ``self.timer``.
    Only works on methods of classes which have a ``timer`` attribute, calls are not measured when it is None.
    """

    def wrapper(fn):
        if measurement == "cpu-time":
            get_time_seconds = process_time
        elif measurement == "wall-clock-time":
            get_time_seconds = perf_counter
        else:
            raise ValueError(
                "Unexpected measurement mode for timer '{}'".format(
                    str(measurement)))

        @functools.wraps(fn)
        def timed(self, *args, **kwargs):
            if self.timer is None:
                return fn(self, *args, **kwargs)
            time_start_seconds = get_time_seconds()
            try:
                return fn(self, *args, **kwargs)
            finally:
                self.timer.record(metric_name, get_time_seconds() - time_start_seconds)

        return timed

    return wrapper
