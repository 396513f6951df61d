"""
Content-addressed fingerprints of call stacks.

Frames are expected innermost (leaf) frame first, the order in which Thread.getStackTrace(), flight recorder stack
traces and traceback.walk_stack produce them. Stacks deeper than max_depth are bounded by keeping the LAST max_depth
frames of that list, i.e. the root-most ones. Every producer feeding stores that are compared with each other has to
follow this ordering, otherwise identical stacks never get the same fingerprint.
"""
import hashlib
import re

from sampler_comparison.model.frame import Frame

MIN_STACK_DEPTH = 2
LAMBDA_MARKER = "$$Lambda"

# anything after the first character that can't be part of a class name, e.g. "/0x0000007c01001000"
_CLASS_NAME_SUFFIX = re.compile(r"[^a-zA-Z0-9_$.].*", re.DOTALL)
_LAMBDA_SUFFIX = re.compile(r"\$\$Lambda.*", re.DOTALL)


def normalize_class_name(class_name):
    """
    Throws away addresses of runtime generated classes and makes generated lambda classes call site independent.
    E.g. "java.lang.invoke.LambdaForm$DMH/0x0000007c01001000" becomes "java.lang.invoke.LambdaForm$DMH" and
    "Main$$Lambda$14" becomes "Main$$Lambda".
    """
    if class_name is None:
        return ""
    class_name = _CLASS_NAME_SUFFIX.sub("", class_name)
    return _LAMBDA_SUFFIX.sub(LAMBDA_MARKER, class_name)


def fingerprint(frames, max_depth, digest_factory=hashlib.sha256):
    """
    :param frames: sequence of Frame or (class_name, method_name), leaf first
    :param max_depth: maximum number of frames taken into account
    :param digest_factory: creates a fresh hashing context for every call
    :return: the digest bytes, or None if the stack has fewer than two frames and the sample has to be skipped
    """
    if len(frames) < MIN_STACK_DEPTH:
        return None
    digest = digest_factory()
    for raw_frame in frames[max(0, len(frames) - max_depth):]:
        frame = Frame.of(raw_frame)
        digest.update((normalize_class_name(frame.class_name) + "." + frame.name).encode("utf-8"))
    return digest.digest()
