"""
Reads flight recorder execution samples from a JSON lines export: one event object per line, e.g.

    {"type": "jdk.ExecutionSample", "thread": "main", "time": 1700000000123456789,
     "frames": [["java.lang.Thread", "sleep"], ["Main", "main"]]}

time is the start time of the event in nanoseconds since epoch, frames are (class, method) pairs innermost first
and may be null for samples where the stack walk failed.
"""
import json
import logging

from collections import namedtuple

from sampler_comparison.codec.store_codec import StoreFormatException
from sampler_comparison.model.store import Store

EXECUTION_SAMPLE = "jdk.ExecutionSample"
NATIVE_METHOD_SAMPLE = "jdk.NativeMethodSample"
CPU_TIME_EXECUTION_SAMPLE = "jdk.CPUTimeExecutionSample"

OLD_SAMPLER_NAME = "Old sampler"
NEW_SAMPLER_NAME = "New sampler"
NEW_SAMPLER_WITH_ERRORS_NAME = "New with errors"

# fingerprint recorded for CPU time samples without stack trace
ERROR_FINGERPRINT = b"\x00"

RecordedEvent = namedtuple("RecordedEvent", ["type", "thread", "time", "frames"])

logger = logging.getLogger(__name__)


def _parse_frame(frame):
    if not isinstance(frame, list) or len(frame) != 2 or not all(isinstance(part, str) for part in frame):
        raise ValueError("frames must be [class, method] pairs, got {!r}".format(frame))
    return tuple(frame)


def _parse_event(line, line_number):
    try:
        raw = json.loads(line)
        frames = raw.get("frames")
        time = int(raw["time"])
        Store.check_timestamp(time)
        return RecordedEvent(
            type=raw["type"],
            thread=raw.get("thread"),
            time=time,
            frames=None if frames is None else [_parse_frame(frame) for frame in frames])
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise StoreFormatException("Line {}: invalid recording event: {}".format(line_number, e)) from e


def parse_events(input_stream):
    """
    :param input_stream: text stream of a JSON lines export
    :return: generator of RecordedEvent
    """
    for line_number, line in enumerate(input_stream, start=1):
        if line.strip():
            yield _parse_event(line, line_number)


def split_recording(events, max_depth, name=None):
    """
    Sorts the samples of a recording into stores.

    With a name, the execution and native method samples go into one store of that name; this is how recordings of
    other profilers are read. Without a name the recording is expected to contain both samplers of the JVM: the
    execution and native method samples go into "Old sampler", CPU time samples into "New sampler" and, together
    with the samples the new sampler failed to walk the stack for, into "New with errors".

    :return: the non empty stores
    """
    old_store = Store(name if name is not None else OLD_SAMPLER_NAME, max_depth)
    new_store = Store(NEW_SAMPLER_NAME, max_depth) if name is None else None
    new_store_with_errors = Store(NEW_SAMPLER_WITH_ERRORS_NAME, max_depth) if name is None else None

    for event in events:
        if event.type in (EXECUTION_SAMPLE, NATIVE_METHOD_SAMPLE):
            if event.thread is None or event.frames is None:
                continue
            old_store.ingest(event.thread, event.frames, event.time)
        elif new_store is not None and event.type == CPU_TIME_EXECUTION_SAMPLE:
            if event.thread is None:
                continue
            if event.frames is None:
                new_store_with_errors.add(event.thread, event.time, ERROR_FINGERPRINT)
                continue
            new_store.ingest(event.thread, event.frames, event.time)
            new_store_with_errors.ingest(event.thread, event.frames, event.time)

    return [store for store in (old_store, new_store, new_store_with_errors)
            if store is not None and not store.is_empty()]


def read_recording(path, max_depth, name=None):
    logger.info("Reading recording '{}' with max depth {}".format(path, max_depth))
    with open(path, "r", encoding="utf-8") as input_stream:
        try:
            return split_recording(parse_events(input_stream), max_depth, name)
        except StoreFormatException as e:
            raise StoreFormatException("Could not read recording '{}': {}".format(path, e)) from e
