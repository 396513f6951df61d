"""
Line oriented text format of a Store:

    <store name>
    <max depth as decimal integer>
    <base64(thread name)>
    <timestamp as base 36 unsigned integer> <base64(fingerprint)>
    ...
    <base64(next thread name)>
    ...

A line with a single token is a thread header, a line with two tokens is a sample of the last seen thread. Base64
never contains spaces so the two can't be confused. The format has no version, readers and writers have to agree
out of band.
"""
import base64
import binascii
import gzip
import logging
import re
import string

from pathlib import Path

from sampler_comparison.model.sample import TimedFingerprint
from sampler_comparison.model.store import Store, MAX_TIMESTAMP

GZIP_BALANCED_COMPRESSION_LEVEL = 6
GZIP_SUFFIX = ".gz"
TIMESTAMP_RADIX = 36
RECORDING_SUFFIXES = (".jfr", ".jsonl")

_DIGITS = string.digits + string.ascii_lowercase
_BASE36_TOKEN = re.compile(r"[0-9a-zA-Z]+")

logger = logging.getLogger(__name__)


class StoreFormatException(Exception):
    pass


def _to_base36(value):
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, TIMESTAMP_RADIX)
        digits.append(_DIGITS[remainder])
    return "".join(reversed(digits))


def _encode_timestamp(timestamp_nanos):
    if not 0 <= timestamp_nanos <= MAX_TIMESTAMP:
        raise ValueError("Timestamps must be unsigned 64 bit integers, got {}".format(timestamp_nanos))
    return _to_base36(timestamp_nanos)


def _b64(raw):
    return base64.b64encode(raw).decode("ascii")


class StoreEncoder:
    """
    Writes a Store into a binary stream, one line at a time, so the output never has to be held in memory.
    Threads are written in the iteration order of the store.
    """

    def __init__(self, gzip=False):
        self._gzip = gzip

    def encode(self, store, output_stream):
        if "\n" in store.name or "\r" in store.name:
            raise ValueError("Store names must fit on one line, got {!r}".format(store.name))
        if not self._gzip:
            self._write_store(store, output_stream)
            return
        gzip_stream = self._gzip_stream_from(output_stream)
        try:
            self._write_store(store, gzip_stream)
        finally:
            gzip_stream.close()

    def _write_store(self, store, output_stream):
        self._write_line(output_stream, store.name)
        self._write_line(output_stream, str(store.max_depth))
        for thread_name, samples in store.items():
            self._write_line(output_stream, _b64(thread_name.encode("utf-8")))
            for sample in samples:
                self._write_line(output_stream, _encode_timestamp(sample.timestamp_nanos) + " " +
                                 _b64(sample.fingerprint))

    @staticmethod
    def _write_line(output_stream, line):
        output_stream.write(line.encode("utf-8"))
        output_stream.write(b"\n")

    @staticmethod
    def _gzip_stream_from(stream):
        return gzip.GzipFile(
            fileobj=stream,
            mode="wb",
            compresslevel=GZIP_BALANCED_COMPRESSION_LEVEL)


class StoreDecoder:
    """
    Reads a Store from a binary stream. Any malformed line fails the whole decoding with a StoreFormatException,
    no partially read store is ever returned.
    """

    def __init__(self, gzip=False):
        self._gzip = gzip

    def decode(self, input_stream):
        if self._gzip:
            input_stream = gzip.GzipFile(fileobj=input_stream, mode="rb")
        lines = self._lines(input_stream)

        name = self._next_header_line(lines, "store name")
        max_depth = self._parse_max_depth(self._next_header_line(lines, "max depth"))

        data_per_thread = {}
        current_samples = None
        for line_number, line in lines:
            tokens = line.split()
            if len(tokens) <= 1:
                # an empty line is the header of a thread with an empty name
                thread_name = self._decode_thread_name(tokens[0] if tokens else "", line_number)
                # a thread may appear in several blocks when the file was appended to
                current_samples = data_per_thread.setdefault(thread_name, [])
            elif len(tokens) == 2:
                if current_samples is None:
                    raise StoreFormatException(
                        "Line {}: sample found before any thread header".format(line_number))
                current_samples.append(TimedFingerprint(
                    self._parse_timestamp(tokens[0], line_number), self._decode_b64(tokens[1], line_number)))
            else:
                raise StoreFormatException(
                    "Line {}: expected a thread header or a sample, got {} tokens".format(line_number, len(tokens)))

        return Store(name=name, max_depth=max_depth, data_per_thread=data_per_thread)

    @staticmethod
    def _lines(input_stream):
        line_number = 0
        try:
            for line_number, raw_line in enumerate(input_stream, start=1):
                yield line_number, raw_line.decode("utf-8").rstrip("\r\n")
        except UnicodeDecodeError as e:
            raise StoreFormatException("Line {}: not valid UTF-8".format(line_number)) from e
        except (OSError, EOFError) as e:
            # corrupt or truncated gzip content
            raise StoreFormatException("Could not read line {}: {}".format(line_number + 1, e)) from e

    @staticmethod
    def _next_header_line(lines, what):
        try:
            _line_number, line = next(lines)
        except StopIteration:
            raise StoreFormatException("Missing {} header line".format(what)) from None
        return line

    @staticmethod
    def _parse_max_depth(line):
        try:
            max_depth = int(line.strip())
        except ValueError as e:
            raise StoreFormatException("Line 2: max depth is not an integer: {!r}".format(line)) from e
        if max_depth <= 0:
            raise StoreFormatException("Line 2: max depth must be positive, got {}".format(max_depth))
        return max_depth

    @staticmethod
    def _parse_timestamp(token, line_number):
        if _BASE36_TOKEN.fullmatch(token) is None:
            raise StoreFormatException(
                "Line {}: timestamp is not a base 36 integer: {!r}".format(line_number, token))
        timestamp = int(token, TIMESTAMP_RADIX)
        if timestamp > MAX_TIMESTAMP:
            raise StoreFormatException(
                "Line {}: timestamp is not an unsigned 64 bit integer: {!r}".format(line_number, token))
        return timestamp

    @staticmethod
    def _decode_b64(token, line_number):
        try:
            return base64.b64decode(token, validate=True)
        except (binascii.Error, ValueError) as e:
            raise StoreFormatException("Line {}: invalid base64 {!r}".format(line_number, token)) from e

    @classmethod
    def _decode_thread_name(cls, token, line_number):
        try:
            return cls._decode_b64(token, line_number).decode("utf-8")
        except UnicodeDecodeError as e:
            raise StoreFormatException("Line {}: thread name is not valid UTF-8".format(line_number)) from e


def _is_gzip_path(path):
    return str(path).endswith(GZIP_SUFFIX)


def save(store, path):
    """
    Writes the store to a file, gzip compressed if the file name ends with .gz
    """
    logger.info("Writing {} to '{}'".format(store, path))
    write_store_file(store, path, StoreEncoder(gzip=_is_gzip_path(path)))
    return path


def write_store_file(store, path, store_encoder):
    """
    Encodes the store into the file at path. If encoding fails the file is removed, a store file on disk is
    always complete.
    """
    try:
        with open(path, "wb") as output_stream:
            store_encoder.encode(store=store, output_stream=output_stream)
    except Exception:
        if Path(path).is_file():
            Path(path).unlink()
        raise


def load(path):
    """
    Reads a store written by save(); flight recorder recordings have to be read with
    sampler_comparison.recording.recording_reader instead.
    """
    if Path(path).suffix in RECORDING_SUFFIXES:
        raise ValueError("'{}' is a recording, use read_recording() for it".format(path))
    with open(path, "rb") as input_stream:
        try:
            store = StoreDecoder(gzip=_is_gzip_path(path)).decode(input_stream)
        except StoreFormatException as e:
            raise StoreFormatException("Could not read store from '{}': {}".format(path, e)) from e
    logger.debug("Read {} from '{}'".format(store, path))
    return store
