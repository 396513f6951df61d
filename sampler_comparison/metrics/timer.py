from sampler_comparison.metrics.metric import Metric


class Timer:
    """
    Keeps the overhead metrics collected while the sampling agent runs, e.g. how long walking all thread stacks
    and ingesting them into the store took. They are logged when the agent stops.
    """

    def __init__(self):
        self.metrics = {}

    def record(self, name, value):
        metric = self.metrics.get(name)
        if metric is None:
            metric = self.metrics[name] = Metric()
        metric.add(value)

    def reset(self):
        self.metrics = {}

    def get_metric(self, name):
        return self.metrics.get(name)

    def summary(self):
        return {name: repr(metric) for name, metric in sorted(self.metrics.items())}
