"""
Modules
-------

.. automodule:: sampler_comparison.model.store
   :members:

.. automodule:: sampler_comparison.analysis.interval_analyzer
   :members:

.. automodule:: sampler_comparison.analysis.distribution_comparator
   :members:

"""

__version__ = "0.1.0"

from .model.store import Store
from .fingerprinter import fingerprint
from .codec.store_codec import save, load, StoreFormatException
from .analysis.interval_analyzer import compute_interval, ComputedInterval
from .analysis.distribution_comparator import compare, PercResult, ConfigMismatchException
from .sampling_agent import SamplingAgent
