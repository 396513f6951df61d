"""
This module handles all interactions with python sys, threading and traceback libraries for sampling.
"""
import threading
import traceback

from sampler_comparison.model.frame import Frame


def get_stacks(threads_to_sample, excluded_threads):
    """
    Attempts to extract the call stacks for the threads listed in threads_to_sample.
    Stacks are returned complete, bounding them to a maximum depth is up to the store.

    :param threads_to_sample: expected in the same format as sys._current_frames().items()
    :param excluded_threads: set of thread names to be excluded from sampling
    :returns: a list of (thread name, list of Frame) with the frames in innermost (leaf) to outermost (root) order
    """
    stacks = []
    for thread_id, end_frame in threads_to_sample:
        thread = threading._active.get(thread_id)
        if _is_zombie(thread) or thread.name in excluded_threads:
            continue

        stacks.append((thread.name, _extract_frames(end_frame)))

    return stacks


def _is_zombie(thread):
    return thread is None


def _extract_class(frame_locals):
    """
    See https://stackoverflow.com/questions/2203424/python-how-to-retrieve-class-information-from-a-frame-object/2544639#2544639
    for the details behind the implementation: methods get the instance they run on as "self", class methods get
    their class as "cls".
    """
    try:
        if "self" in frame_locals:
            return frame_locals["self"].__class__.__name__
        if isinstance(frame_locals.get("cls"), type):
            return frame_locals["cls"].__name__
    except Exception:
        # Failing to get the class name should not block the whole sample
        pass
    return None


def _extract_class_name(raw_frame):
    """
    Python has no declaring class for plain functions, the module stands in for it: "package.module" for functions
    and "package.module.ClassName" for methods.
    """
    module_name = raw_frame.f_globals.get("__name__") or "<unknown>"
    class_name = _extract_class(raw_frame.f_locals)
    return module_name if class_name is None else module_name + "." + class_name


def _extract_frames(end_frame):
    # walk_stack starts from the given frame and follows f_back, i.e. the innermost frame comes first
    return [Frame(name=raw_frame.f_code.co_name, class_name=_extract_class_name(raw_frame))
            for raw_frame, _line_no in traceback.walk_stack(end_frame)]
