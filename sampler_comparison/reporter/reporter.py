from abc import ABCMeta, abstractmethod


class Reporter(metaclass=ABCMeta):  # pragma: no cover
    """
    Publishes what was learned about a set of stores.
    """

    @abstractmethod
    def report(self, stores):
        """
        Report stores.

        :param stores: list of Store
        :return: what was reported, depends on the reporter
        """
        pass
