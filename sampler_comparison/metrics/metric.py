class Metric:
    """
    Running count, total and extremes of the values recorded under one name.
    """

    __slots__ = ("counter", "total", "min", "max")

    def __init__(self):
        self.counter = 0
        self.total = 0
        self.min = None
        self.max = 0

    def add(self, value):
        self.counter += 1
        self.total += value
        if self.min is None or value < self.min:
            self.min = value
        if self.max < value:
            self.max = value

    def average(self):
        return 0 if self.counter == 0 else self.total / self.counter

    def __repr__(self):
        return "{}(counter={}, total={:.5f}, min={:.5f}, max={:.5f}, average={:.5f})".format(
            self.__class__.__name__, self.counter, self.total,
            self.min or 0, self.max, self.average())
