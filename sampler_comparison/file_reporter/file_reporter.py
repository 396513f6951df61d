import logging

from sampler_comparison.codec.store_codec import StoreEncoder, GZIP_SUFFIX, write_store_file
from sampler_comparison.reporter.reporter import Reporter

logger = logging.getLogger(__name__)


class FileReporter(Reporter):
    """
    Writes stores to a file in the store format so they can be compared later on.
    """

    def __init__(self, environment=dict()):
        """
        :param environment: dependency container dictionary
        :param file_path: (required inside environment) path of the file the store is written to
        :param store_encoder: (inside environment) encoder to use; default gzip compresses when the file name ends
            with .gz
        """
        self._file_path = environment["file_path"]
        self._store_encoder = \
            environment.get("store_encoder") or StoreEncoder(gzip=str(self._file_path).endswith(GZIP_SUFFIX))

    def report(self, stores):
        """
        Only one store can be kept per file.
        :return: the path the store was written to
        """
        if len(stores) != 1:
            raise ValueError("FileReporter writes exactly one store per file, got {}".format(len(stores)))
        store = stores[0]
        logger.info("Writing {} to '{}'".format(store, self._file_path))

        write_store_file(store, self._file_path, self._store_encoder)
        return self._file_path
