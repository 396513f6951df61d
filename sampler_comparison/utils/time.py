import time

NANOS_PER_MILLI = 1000 * 1000


def current_milli_time(clock=time.time):
    return int(clock() * 1000)


def current_nano_time(clock=time.monotonic_ns):
    """
    Timestamps of samples that are going to be compared must come from the same clock domain, the monotonic clock
    is the default for everything sampled in-process.
    """
    return int(clock())


def nanos_to_millis(nanos):
    return nanos / NANOS_PER_MILLI
