"""Release status conditions, failure counters, digests, history and CUE release synthesis."""

__version__ = "0.1.0"